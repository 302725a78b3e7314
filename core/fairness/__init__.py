"""Provably-fair seeds, shuffle and verification."""

from core.fairness.seeds import ProvablyFairRecord, SeedSource, new_record
from core.fairness.shuffle import byte_stream, provably_fair_deck, shuffle_indices
from core.fairness.verify import VerificationResult, verify_round

__all__ = [
    "ProvablyFairRecord",
    "SeedSource",
    "new_record",
    "byte_stream",
    "provably_fair_deck",
    "shuffle_indices",
    "VerificationResult",
    "verify_round",
]
