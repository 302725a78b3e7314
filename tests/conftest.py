"""Pytest fixtures for blackjack engine tests."""

import itertools
from decimal import Decimal

import pytest
from hypothesis import strategies as st

from config import GameConfig
from core.cards import Card, Rank, Suit
from core.fairness import SeedSource, new_record
from core.game import BlackjackEngine, GameSession, GameState
from core.game.repository import InMemorySessionRepository


class CountingSeedSource(SeedSource):
    """Predictable, never-repeating seeds; hashing stays SHA-256."""

    def __init__(self) -> None:
        self._counter = itertools.count(1)

    def generate_seed(self, byte_length: int) -> str:
        return f"{next(self._counter):0{byte_length * 2}x}"


def cards(*codes: str) -> tuple[Card, ...]:
    """Build cards from codes like 'AS', '10H'."""
    return tuple(Card.from_string(code) for code in codes)


@pytest.fixture
def new_id():
    """Sequential identifiers."""
    counter = itertools.count(1)
    return lambda: f"id-{next(counter)}"


@pytest.fixture
def seeds():
    """Deterministic seed source."""
    return CountingSeedSource()


@pytest.fixture
def settings():
    """Game settings independent of the environment."""
    return GameConfig(initial_balance=Decimal("1000"), dealer_step_delay_ms=0)


@pytest.fixture
def repository():
    """Empty in-memory session repository."""
    return InMemorySessionRepository()


@pytest.fixture
def engine(repository, seeds, new_id, settings):
    """Engine over the in-memory repository."""
    return BlackjackEngine(repository, seeds=seeds, new_id=new_id, settings=settings)


@pytest.fixture
def record(seeds, new_id):
    """A fresh provably-fair record."""
    return new_record(seeds, new_id)


@pytest.fixture
def make_session(record):
    """
    Build a session mid-round.

    The deck is drawn from its end, so the last card listed comes out first.
    """

    def _make(
        player=("10S", "7H"),
        dealer=("9C", "8D"),
        deck=("2C", "3C", "4C", "5C"),
        state=GameState.PLAYING,
        balance=Decimal("950"),
        bet=Decimal("50"),
        hole_hidden=True,
    ) -> GameSession:
        dealer_cards = cards(*dealer)
        if hole_hidden and len(dealer_cards) > 1:
            dealer_cards = (dealer_cards[0], dealer_cards[1].face_down()) + dealer_cards[2:]
        return GameSession(
            id="table-1",
            provably_fair=record,
            balance=balance,
            deck=cards(*deck),
            dealer_cards=dealer_cards,
            player_cards=cards(*player),
            game_state=state,
            bet=bet,
        )

    return _make


@pytest.fixture
def blackjack_cards():
    """A natural blackjack."""
    return (Card(Rank.ACE, Suit.SPADES), Card(Rank.KING, Suit.HEARTS))


# Hypothesis strategies for property-based testing
@st.composite
def card_strategy(draw):
    """Generate a random card."""
    rank = draw(st.sampled_from(list(Rank)))
    suit = draw(st.sampled_from(list(Suit)))
    return Card(rank, suit)


@st.composite
def hand_strategy(draw, min_cards=2, max_cards=6):
    """Generate a random hand."""
    return draw(st.lists(card_strategy(), min_size=min_cards, max_size=max_cards))
