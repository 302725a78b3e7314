"""Seed generation and the per-round provably-fair record."""

import hashlib
import secrets
from dataclasses import dataclass, replace
from typing import Any, Callable


class SeedSource:
    """
    Source of server/client seeds and the commitment hash.

    Swap in a subclass to pin seeds in tests; the engine only calls
    ``generate_seed`` and ``hash_seed``.
    """

    def generate_seed(self, byte_length: int) -> str:
        """Return ``byte_length`` bytes of CSPRNG entropy, hex encoded."""
        return secrets.token_hex(byte_length)

    def hash_seed(self, seed: str) -> str:
        """SHA-256 of the seed, published before the round starts."""
        return hashlib.sha256(seed.encode("utf-8")).hexdigest()


@dataclass(frozen=True)
class ProvablyFairRecord:
    """
    Seed commitment for one round.

    ``server_seed`` stays server-side until ``completed`` is set; the
    ``hashed_server_seed`` is what the player sees beforehand.
    """

    game_id: str
    server_seed: str
    hashed_server_seed: str
    client_seed: str
    nonce: int = 0
    completed: bool = False

    def complete(self) -> "ProvablyFairRecord":
        return replace(self, completed=True)

    def to_public_dict(self) -> dict[str, Any]:
        """Data safe to show the player; the server seed only once completed."""
        return {
            "game_id": self.game_id,
            "hashed_server_seed": self.hashed_server_seed,
            "client_seed": self.client_seed,
            "server_seed": self.server_seed if self.completed else None,
            "nonce": self.nonce,
            "completed": self.completed,
        }

    def to_dict(self) -> dict[str, Any]:
        """Serialize for session storage (includes the secret seed)."""
        return {
            "game_id": self.game_id,
            "server_seed": self.server_seed,
            "hashed_server_seed": self.hashed_server_seed,
            "client_seed": self.client_seed,
            "nonce": self.nonce,
            "completed": self.completed,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ProvablyFairRecord":
        return cls(
            game_id=data["game_id"],
            server_seed=data["server_seed"],
            hashed_server_seed=data["hashed_server_seed"],
            client_seed=data["client_seed"],
            nonce=data.get("nonce", 0),
            completed=data.get("completed", False),
        )


def new_record(
    seeds: SeedSource,
    new_id: Callable[[], str],
    server_seed_bytes: int = 32,
    client_seed_bytes: int = 16,
) -> ProvablyFairRecord:
    """
    Issue fresh seeds for a round.

    The hash is computed here, before the record can be shown to anyone.
    """
    server_seed = seeds.generate_seed(server_seed_bytes)
    return ProvablyFairRecord(
        game_id=new_id(),
        server_seed=server_seed,
        hashed_server_seed=seeds.hash_seed(server_seed),
        client_seed=seeds.generate_seed(client_seed_bytes),
        nonce=0,
        completed=False,
    )
