"""
Deterministic deck shuffle driven by HMAC-SHA256.

The byte stream is the concatenation of
``HMAC-SHA256(key=server_seed, msg=f"{client_seed}:{nonce}:{round}")`` for
``round = 0, 1, 2, ...``. Fisher-Yates then walks ``i = 51 .. 1`` drawing
``j`` in ``[0, i]`` from 4-byte big-endian words, rejecting words past the
largest multiple of ``i + 1`` so every ``j`` is equally likely.
"""

import hashlib
import hmac
from typing import Iterator

from core.cards import DECK_SIZE, Card, new_ordered_deck

WORD_BYTES = 4
WORD_RANGE = 1 << (8 * WORD_BYTES)


def byte_stream(server_seed: str, client_seed: str, nonce: int = 0) -> Iterator[int]:
    """Yield an endless keyed byte stream for the seed pair."""
    key = server_seed.encode("utf-8")
    current_round = 0
    while True:
        message = f"{client_seed}:{nonce}:{current_round}".encode("utf-8")
        yield from hmac.new(key, message, hashlib.sha256).digest()
        current_round += 1


def _next_word(stream: Iterator[int]) -> int:
    return int.from_bytes(bytes(next(stream) for _ in range(WORD_BYTES)), "big")


def random_below(stream: Iterator[int], upper: int) -> int:
    """
    Uniform integer in ``[0, upper)`` taken from the stream.

    Words at or above ``WORD_RANGE - WORD_RANGE % upper`` are discarded.
    """
    if upper < 1:
        raise ValueError("upper must be positive")
    limit = WORD_RANGE - (WORD_RANGE % upper)
    while True:
        word = _next_word(stream)
        if word < limit:
            return word % upper


def shuffle_indices(
    server_seed: str,
    client_seed: str,
    nonce: int = 0,
    size: int = DECK_SIZE,
) -> list[int]:
    """Permutation of ``range(size)`` for the seed pair."""
    stream = byte_stream(server_seed, client_seed, nonce)
    indices = list(range(size))
    for i in range(size - 1, 0, -1):
        j = random_below(stream, i + 1)
        indices[i], indices[j] = indices[j], indices[i]
    return indices


def provably_fair_deck(server_seed: str, client_seed: str, nonce: int = 0) -> list[Card]:
    """
    Shuffled deck for the seed pair.

    Identical seeds always give the identical order, which is what lets a
    player recompute the deck once the server seed is revealed.
    """
    ordered = new_ordered_deck()
    return [ordered[index] for index in shuffle_indices(server_seed, client_seed, nonce)]
