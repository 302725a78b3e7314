"""Hand scoring, resolution and payouts."""

from decimal import Decimal
from enum import Enum
from typing import Iterable, Sequence

from core.cards import Card

BLACKJACK = 21


class Outcome(Enum):
    """Settled result of a round."""

    BUST = "bust"
    DEALER_BUST = "dealerBust"
    BLACKJACK = "blackjack"
    PUSH = "push"
    PLAYER_WIN = "playerWin"
    DEALER_WIN = "dealerWin"

    def __str__(self) -> str:
        return self.value


# Amount returned to the balance per unit staked; the stake is already debited.
PAYOUT_MULTIPLIERS: dict[Outcome, Decimal] = {
    Outcome.PLAYER_WIN: Decimal("2"),
    Outcome.DEALER_BUST: Decimal("2"),
    Outcome.PUSH: Decimal("1"),
    Outcome.BLACKJACK: Decimal("2.5"),
    Outcome.BUST: Decimal("0"),
    Outcome.DEALER_WIN: Decimal("0"),
}


def score(cards: Iterable[Card]) -> int:
    """
    Calculate the best hand value.

    Returns the highest value that doesn't bust, or the lowest bust value.
    The hidden flag is ignored; callers decide what may be shown.
    """
    total = 0
    aces = 0

    for card in cards:
        if card.is_ace:
            aces += 1
        total += card.value

    # Reduce aces from 11 to 1 as needed
    while total > BLACKJACK and aces > 0:
        total -= 10
        aces -= 1

    return total


def is_soft(cards: Sequence[Card]) -> bool:
    """Check if an ace is still counted as 11."""
    if not any(card.is_ace for card in cards):
        return False
    total_hard = sum(1 if card.is_ace else card.value for card in cards)
    return total_hard + 10 <= BLACKJACK


def is_blackjack(cards: Sequence[Card]) -> bool:
    """Check for a natural blackjack (21 with 2 cards)."""
    return len(cards) == 2 and score(cards) == BLACKJACK


def is_busted(cards: Sequence[Card]) -> bool:
    return score(cards) > BLACKJACK


def resolve(player_cards: Sequence[Card], dealer_cards: Sequence[Card]) -> Outcome:
    """
    Compare finished player and dealer hands.

    Order matters: a player bust loses even if the dealer also busts, and a
    natural beats any ordinary total.
    """
    player_value = score(player_cards)
    dealer_value = score(dealer_cards)

    if player_value > BLACKJACK:
        return Outcome.BUST

    if dealer_value > BLACKJACK:
        return Outcome.DEALER_BUST

    if is_blackjack(player_cards):
        if is_blackjack(dealer_cards):
            return Outcome.PUSH
        return Outcome.BLACKJACK

    if player_value > dealer_value:
        return Outcome.PLAYER_WIN
    if dealer_value > player_value:
        return Outcome.DEALER_WIN
    return Outcome.PUSH


def payout(bet: Decimal | int, outcome: Outcome) -> Decimal:
    """Amount credited back to the balance for a settled bet."""
    return Decimal(str(bet)) * PAYOUT_MULTIPLIERS[outcome]
