"""Provably-fair verification endpoint."""

from fastapi import APIRouter, HTTPException

from api.schemas import VerifyRequest, VerifyResponse
from core.cards import Card
from core.fairness import verify_round

router = APIRouter()


@router.post("/verify")
async def verify(request: VerifyRequest) -> VerifyResponse:
    """Recompute a deck from revealed seeds and check it against the dealt cards."""
    dealt = None
    if request.dealt is not None:
        try:
            dealt = [Card.from_string(code) for code in request.dealt]
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc

    result = verify_round(
        request.server_seed,
        request.hashed_server_seed,
        request.client_seed,
        request.nonce,
        dealt=dealt,
    )
    return VerifyResponse(
        verified=result.verified,
        hash_matches=result.hash_matches,
        deal_matches=result.deal_matches,
        deck=[card.code for card in result.deck],
    )
