"""Post-round verification of a provably-fair deal."""

import hashlib
from dataclasses import dataclass, field
from typing import Sequence

from core.cards import Card
from core.fairness.shuffle import provably_fair_deck


@dataclass(frozen=True)
class VerificationResult:
    """Outcome of recomputing a round from its revealed seeds."""

    hash_matches: bool
    deck: list[Card] = field(default_factory=list)
    deal_matches: bool | None = None

    @property
    def verified(self) -> bool:
        """True when the commitment holds and, if checked, the deal matches."""
        return self.hash_matches and self.deal_matches is not False


def dealt_order(player_cards: Sequence[Card], dealer_cards: Sequence[Card]) -> list[Card]:
    """
    Cards of a finished round in the order they left the deck.

    Dealer up card, hole card, two player cards, player hits, dealer draws.
    """
    return [
        *dealer_cards[:2],
        *player_cards[:2],
        *player_cards[2:],
        *dealer_cards[2:],
    ]


def verify_round(
    server_seed: str,
    hashed_server_seed: str,
    client_seed: str,
    nonce: int = 0,
    dealt: Sequence[Card] | None = None,
) -> VerificationResult:
    """
    Recompute a round from its revealed seeds.

    Args:
        server_seed: The seed revealed after settlement
        hashed_server_seed: The commitment published before the bet
        client_seed: The client seed of the round
        nonce: Shuffle nonce
        dealt: Cards in draw order (see ``dealt_order``); skipped if None

    Returns:
        Whether the hash commitment holds, the recomputed deck in draw
        order, and whether the dealt cards match it
    """
    hash_matches = hashlib.sha256(server_seed.encode("utf-8")).hexdigest() == hashed_server_seed.lower()

    # Cards are drawn from the end of the deck
    draw_order = list(reversed(provably_fair_deck(server_seed, client_seed, nonce)))

    deal_matches = None
    if dealt is not None:
        deal_matches = len(dealt) <= len(draw_order) and all(
            card.same_card(expected) for card, expected in zip(dealt, draw_order)
        )

    return VerificationResult(
        hash_matches=hash_matches,
        deck=draw_order,
        deal_matches=deal_matches,
    )
