"""Game API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Header, HTTPException

from api.engine import get_engine, resolve_session_id
from api.schemas import (
    BetRequest,
    GameStateResponse,
    NewGameRequest,
    NewGameResponse,
    StandResponse,
    VerifyResponse,
)
from api.session import sign_session_id

router = APIRouter()

SessionToken = Annotated[str | None, Header(alias="X-Session-ID")]


@router.post("/new")
async def new_game(request: NewGameRequest | None = None) -> NewGameResponse:
    """Create a new game session."""
    engine = await get_engine()
    initial_balance = request.initial_balance if request else None
    result = await engine.initialize(initial_balance)

    token = sign_session_id(result.view.session_id)
    return NewGameResponse(
        session_id=token,
        state=GameStateResponse.from_view(result.view, token),
    )


@router.get("/state")
async def get_state(session_id: SessionToken = None) -> GameStateResponse:
    """Get current game state."""
    engine = await get_engine()
    result = await engine.get_state(resolve_session_id(session_id))
    return GameStateResponse.from_view(result.view, session_id)


@router.post("/bet")
async def place_bet(request: BetRequest, session_id: SessionToken = None) -> GameStateResponse:
    """Place a bet and deal cards."""
    engine = await get_engine()
    result = await engine.place_bet(resolve_session_id(session_id), request.amount)
    return GameStateResponse.from_view(result.view, session_id)


@router.post("/hit")
async def hit(session_id: SessionToken = None) -> GameStateResponse:
    """Take another card."""
    engine = await get_engine()
    result = await engine.hit(resolve_session_id(session_id))
    return GameStateResponse.from_view(result.view, session_id)


@router.post("/stand")
async def stand(session_id: SessionToken = None) -> StandResponse:
    """Stand and let the dealer play out."""
    engine = await get_engine()
    result = await engine.stand(resolve_session_id(session_id))
    return StandResponse(
        state=GameStateResponse.from_view(result.view, session_id),
        steps=[GameStateResponse.from_view(step, session_id) for step in result.steps],
    )


@router.post("/new-round")
async def new_round(session_id: SessionToken = None) -> GameStateResponse:
    """Clear the table for the next bet."""
    engine = await get_engine()
    result = await engine.new_round(resolve_session_id(session_id))
    return GameStateResponse.from_view(result.view, session_id)


@router.get("/verify")
async def verify_current_round(session_id: SessionToken = None) -> VerifyResponse:
    """Recompute the finished round from its revealed seeds."""
    engine = await get_engine()
    verification = await engine.verification(resolve_session_id(session_id))
    if verification is None:
        raise HTTPException(status_code=409, detail="Round not completed")

    return VerifyResponse(
        verified=verification.verified,
        hash_matches=verification.hash_matches,
        deal_matches=verification.deal_matches,
        deck=[card.code for card in verification.deck],
    )
