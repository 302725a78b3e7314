"""Pydantic schemas for API requests and responses."""

from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from core.game.view import ClientView


# Game schemas
class NewGameRequest(BaseModel):
    """Request to start a new session."""

    initial_balance: Decimal | None = Field(default=None, ge=0, description="Starting balance")


class BetRequest(BaseModel):
    """Request to place a bet; range checks happen in the engine."""

    amount: Decimal = Field(..., description="Bet amount")


class CardResponse(BaseModel):
    """Card as shown to the player; rank and suit are omitted when hidden."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    suit: str | None = None
    rank: str | None = None
    hidden: bool = False
    is_new: bool = False
    is_initial_deal: bool = False


class ProvablyFairResponse(BaseModel):
    """Seed commitment; the server seed is null until the round completes."""

    game_id: str
    hashed_server_seed: str
    client_seed: str
    server_seed: str | None = None
    nonce: int
    completed: bool


class GameStateResponse(BaseModel):
    """Current game state."""

    session_id: str
    game_state: str
    balance: float
    bet: float
    dealer_cards: list[CardResponse]
    player_cards: list[CardResponse]
    dealer_score: int
    player_score: int
    game_result: str | None = None
    message: str = ""
    provably_fair: ProvablyFairResponse | None = None

    @classmethod
    def from_view(cls, view: ClientView, session_token: str | None = None) -> "GameStateResponse":
        """Build a response, swapping the raw session id for the client's token."""
        data: dict[str, Any] = view.to_dict()
        if view.session_id:
            data["session_id"] = session_token or view.session_id
        return cls.model_validate(data)


class NewGameResponse(BaseModel):
    """A freshly created session."""

    session_id: str
    state: GameStateResponse


class StandResponse(BaseModel):
    """Final state plus each dealer step, in order, for animation."""

    state: GameStateResponse
    steps: list[GameStateResponse]


# Fairness schemas
class VerifyRequest(BaseModel):
    """Revealed seeds of a round, and optionally the cards it dealt."""

    server_seed: str = Field(..., min_length=1)
    hashed_server_seed: str = Field(..., min_length=1)
    client_seed: str = Field(..., min_length=1)
    nonce: int = Field(default=0, ge=0)
    dealt: list[str] | None = Field(
        default=None,
        description="Dealt cards in draw order, e.g. ['AS', '10H']",
    )


class VerifyResponse(BaseModel):
    """Verification result with the recomputed deck in draw order."""

    verified: bool
    hash_matches: bool
    deal_matches: bool | None = None
    deck: list[str]
