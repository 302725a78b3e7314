"""Client view projection - what the player is allowed to see."""

from dataclasses import asdict, dataclass, field
from decimal import Decimal
from typing import Any, Callable, Sequence
from uuid import uuid4

from core.cards import Card
from core.game.session import GameSession
from core.game.state import GameState
from core.hand import score


def _new_card_id() -> str:
    return str(uuid4())


@dataclass(frozen=True)
class ClientCard:
    """A card as sent to the client; rank and suit are None when hidden."""

    id: str
    suit: str | None = None
    rank: str | None = None
    hidden: bool = False
    is_new: bool = False
    is_initial_deal: bool = False


@dataclass(frozen=True)
class ClientView:
    """Read-only snapshot of a session for rendering."""

    session_id: str
    game_state: str
    balance: Decimal
    bet: Decimal
    dealer_cards: list[ClientCard] = field(default_factory=list)
    player_cards: list[ClientCard] = field(default_factory=list)
    dealer_score: int = 0
    player_score: int = 0
    game_result: str | None = None
    message: str = ""
    provably_fair: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        """JSON-safe representation."""
        data = asdict(self)
        data["balance"] = float(self.balance)
        data["bet"] = float(self.bet)
        return data


def project_cards(
    cards: Sequence[Card],
    mark_newest: bool = False,
    initial_deal: bool = False,
    hide_after_first: bool = False,
    new_id: Callable[[], str] = _new_card_id,
) -> list[ClientCard]:
    """
    Convert server cards to client cards.

    Hidden cards, and with ``hide_after_first`` every card after the first,
    become placeholders carrying no rank or suit.
    """
    last = len(cards) - 1
    projected = []
    for index, card in enumerate(cards):
        is_new = mark_newest and index == last
        if card.hidden or (hide_after_first and index > 0):
            projected.append(
                ClientCard(id=new_id(), hidden=True, is_new=is_new, is_initial_deal=initial_deal)
            )
            continue
        projected.append(
            ClientCard(
                id=new_id(),
                suit=card.suit.value,
                rank=card.rank.value,
                is_new=is_new,
                is_initial_deal=initial_deal,
            )
        )
    return projected


def project(
    session: GameSession,
    mark_newest: bool = False,
    initial_deal: bool = False,
    hide_dealer_except_first: bool = False,
    message: str = "",
    new_id: Callable[[], str] = _new_card_id,
) -> ClientView:
    """
    Build the client view of a session.

    Args:
        session: Snapshot to project
        mark_newest: Flag the trailing card of each hand as new (deal/draw animation)
        initial_deal: Flag every card as part of the opening deal
        hide_dealer_except_first: Conceal all dealer cards after the first
        message: Text shown to the player
        new_id: Card id factory

    Returns:
        The view; the dealer score is 0 while any dealer card is concealed
        and the server seed appears only once the round is completed
    """
    concealed = hide_dealer_except_first or any(c.hidden for c in session.dealer_cards)

    return ClientView(
        session_id=session.id,
        game_state=session.game_state.value,
        balance=session.balance,
        bet=session.bet,
        dealer_cards=project_cards(
            session.dealer_cards, mark_newest, initial_deal, hide_dealer_except_first, new_id
        ),
        player_cards=project_cards(session.player_cards, mark_newest, initial_deal, False, new_id),
        dealer_score=0 if concealed else score(session.dealer_cards),
        player_score=score(session.player_cards),
        game_result=session.game_result.value if session.game_result else None,
        message=message,
        provably_fair=session.provably_fair.to_public_dict(),
    )


def expired_view(balance: Decimal, message: str) -> ClientView:
    """Neutral view for a missing session, prompting a fresh game."""
    return ClientView(
        session_id="",
        game_state=GameState.BETTING.value,
        balance=balance,
        bet=Decimal("0"),
        message=message,
    )
