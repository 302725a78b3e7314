"""Card and deck model - immutable card representations."""

from dataclasses import dataclass, replace
from enum import Enum
from random import Random
from secrets import SystemRandom
from typing import Any, Sequence


class Suit(Enum):
    """Card suits, in canonical deck order."""

    HEARTS = "hearts"
    DIAMONDS = "diamonds"
    CLUBS = "clubs"
    SPADES = "spades"

    def __str__(self) -> str:
        symbols = {
            Suit.CLUBS: "♣",
            Suit.DIAMONDS: "♦",
            Suit.HEARTS: "♥",
            Suit.SPADES: "♠",
        }
        return symbols[self]


class Rank(Enum):
    """Card ranks, in canonical deck order."""

    ACE = "A"
    TWO = "2"
    THREE = "3"
    FOUR = "4"
    FIVE = "5"
    SIX = "6"
    SEVEN = "7"
    EIGHT = "8"
    NINE = "9"
    TEN = "10"
    JACK = "J"
    QUEEN = "Q"
    KING = "K"

    def __str__(self) -> str:
        return self.value

    @property
    def blackjack_value(self) -> int:
        """Return the blackjack point value (Ace = 11, face cards = 10)."""
        if self == Rank.ACE:
            return 11
        if self in (Rank.JACK, Rank.QUEEN, Rank.KING):
            return 10
        return int(self.value)

    @property
    def is_ace(self) -> bool:
        """Check if this rank is an Ace."""
        return self == Rank.ACE


@dataclass(frozen=True, slots=True)
class Card:
    """
    Immutable playing card.

    ``hidden`` marks a card dealt face down; it only ever lives server-side
    and never reaches a client view with its rank or suit.
    """

    rank: Rank
    suit: Suit
    hidden: bool = False

    def __str__(self) -> str:
        return f"{self.rank}{self.suit}"

    def __repr__(self) -> str:
        flag = ", hidden" if self.hidden else ""
        return f"Card({self.rank.name}, {self.suit.name}{flag})"

    @property
    def value(self) -> int:
        """Return the blackjack point value."""
        return self.rank.blackjack_value

    @property
    def is_ace(self) -> bool:
        """Check if this card is an Ace."""
        return self.rank.is_ace

    @property
    def code(self) -> str:
        """ASCII code like 'AS' or '10H', accepted by ``from_string``."""
        return f"{self.rank.value}{self.suit.name[0]}"

    def face_down(self) -> "Card":
        return replace(self, hidden=True)

    def face_up(self) -> "Card":
        return replace(self, hidden=False)

    def same_card(self, other: "Card") -> bool:
        """Compare rank and suit, ignoring the hidden flag."""
        return self.rank == other.rank and self.suit == other.suit

    def to_dict(self) -> dict[str, Any]:
        """Serialize a card for session storage."""
        return {"rank": self.rank.value, "suit": self.suit.value, "hidden": self.hidden}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Card":
        """Deserialize a card from session storage."""
        return cls(Rank(data["rank"]), Suit(data["suit"]), bool(data.get("hidden", False)))

    @classmethod
    def from_string(cls, s: str) -> "Card":
        """Create a card from a string like '2♣', 'AS', 'Kh'."""
        s = s.strip().upper()
        if len(s) < 2:
            raise ValueError(f"Invalid card string: {s}")

        rank_str = s[:-1]
        suit_str = s[-1]

        rank_map = {rank.value: rank for rank in Rank}
        rank_map["T"] = Rank.TEN

        suit_map = {
            "C": Suit.CLUBS,
            "♣": Suit.CLUBS,
            "D": Suit.DIAMONDS,
            "♦": Suit.DIAMONDS,
            "H": Suit.HEARTS,
            "♥": Suit.HEARTS,
            "S": Suit.SPADES,
            "♠": Suit.SPADES,
        }

        if rank_str not in rank_map:
            raise ValueError(f"Invalid rank: {rank_str}")
        if suit_str not in suit_map:
            raise ValueError(f"Invalid suit: {suit_str}")

        return cls(rank_map[rank_str], suit_map[suit_str])


DECK_SIZE = 52


def new_ordered_deck() -> list[Card]:
    """Return the 52 cards in canonical order: suits outer, ranks inner."""
    return [Card(rank, suit) for suit in Suit for rank in Rank]


def shuffled_deck(rng: Random | None = None) -> list[Card]:
    """
    Fisher-Yates shuffle of a fresh ordered deck.

    Not verifiable; the session uses the provably-fair deck instead.

    Args:
        rng: Random number generator (defaults to the OS entropy source)
    """
    rng = rng or SystemRandom()
    cards = new_ordered_deck()
    for i in range(len(cards) - 1, 0, -1):
        j = rng.randint(0, i)
        cards[i], cards[j] = cards[j], cards[i]
    return cards


def draw(deck: Sequence[Card]) -> tuple[Card, tuple[Card, ...]]:
    """
    Draw the last card of a deck.

    Returns:
        The drawn card and the remaining deck

    Raises:
        IndexError: if the deck is empty; a round can never exhaust 52 cards
    """
    if not deck:
        raise IndexError("Cannot draw from empty deck")
    return deck[-1], tuple(deck[:-1])
