"""Immutable game session snapshot."""

from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Any

from core.cards import Card
from core.fairness.seeds import ProvablyFairRecord
from core.game.state import GameState
from core.hand import Outcome


@dataclass(frozen=True)
class GameSession:
    """
    One player's table at a point in time.

    Every action turns one snapshot into the next; nothing mutates in place.
    """

    id: str
    provably_fair: ProvablyFairRecord
    balance: Decimal
    deck: tuple[Card, ...] = ()
    dealer_cards: tuple[Card, ...] = ()
    player_cards: tuple[Card, ...] = ()
    game_state: GameState = GameState.BETTING
    bet: Decimal = Decimal("0")
    game_result: Outcome | None = None
    last_bet: Decimal = Decimal("0")

    def evolve(self, **changes: Any) -> "GameSession":
        """Return a copy with ``changes`` applied."""
        return replace(self, **changes)

    @property
    def has_live_hands(self) -> bool:
        """Both hands dealt and not yet settled."""
        return bool(self.player_cards) and bool(self.dealer_cards) and self.game_result is None

    def to_dict(self) -> dict[str, Any]:
        """Serialize for session storage."""
        return {
            "id": self.id,
            "deck": [c.to_dict() for c in self.deck],
            "dealer_cards": [c.to_dict() for c in self.dealer_cards],
            "player_cards": [c.to_dict() for c in self.player_cards],
            "game_state": self.game_state.value,
            "balance": str(self.balance),
            "bet": str(self.bet),
            "game_result": self.game_result.value if self.game_result else None,
            "provably_fair": self.provably_fair.to_dict(),
            "last_bet": str(self.last_bet),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "GameSession":
        """Restore a snapshot from session storage."""
        result = data.get("game_result")
        return cls(
            id=data["id"],
            deck=tuple(Card.from_dict(c) for c in data["deck"]),
            dealer_cards=tuple(Card.from_dict(c) for c in data["dealer_cards"]),
            player_cards=tuple(Card.from_dict(c) for c in data["player_cards"]),
            game_state=GameState(data["game_state"]),
            balance=Decimal(data["balance"]),
            bet=Decimal(data["bet"]),
            game_result=Outcome(result) if result else None,
            provably_fair=ProvablyFairRecord.from_dict(data["provably_fair"]),
            last_bet=Decimal(data.get("last_bet", "0")),
        )


@dataclass(frozen=True)
class DealerStep:
    """A snapshot produced while the dealer plays, with the card it added."""

    session: GameSession
    revealed: bool = False
    drawn: Card | None = None
    final: bool = False
