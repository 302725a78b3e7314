"""Core blackjack engine - 100% UI-agnostic."""

from core.cards import Card, Rank, Suit, draw, new_ordered_deck, shuffled_deck
from core.hand import Outcome, payout, resolve, score

__all__ = [
    "Card",
    "Rank",
    "Suit",
    "draw",
    "new_ordered_deck",
    "shuffled_deck",
    "Outcome",
    "payout",
    "resolve",
    "score",
]
