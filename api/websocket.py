"""WebSocket endpoint streaming round progress, one dealer step at a time."""

import asyncio
import json
import logging
from typing import Any

from fastapi import APIRouter, WebSocket, WebSocketDisconnect, status
from pydantic import ValidationError

from api.engine import get_engine, resolve_session_id
from api.schemas import BetRequest, GameStateResponse
from config import config
from core.game import ActionResult, BlackjackEngine
from core.game.view import ClientView

logger = logging.getLogger(__name__)

router = APIRouter()


class ConnectionManager:
    """One open socket per session token; a second one is refused."""

    def __init__(self) -> None:
        self._connections: dict[str, WebSocket] = {}

    async def connect(self, websocket: WebSocket, token: str) -> bool:
        """Accept and register ``websocket``, or close it if ``token`` is already connected."""
        if token in self._connections:
            logger.warning("Refusing second WebSocket for an already connected session")
            await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
            return False
        await websocket.accept()
        self._connections[token] = websocket
        return True

    def disconnect(self, token: str, websocket: WebSocket) -> None:
        """Forget ``websocket`` if it is the one registered for ``token``."""
        if self._connections.get(token) is websocket:
            del self._connections[token]


# Global connection manager
manager = ConnectionManager()


def _state_message(view: ClientView, token: str) -> dict[str, Any]:
    return {
        "type": "state_update",
        "state": GameStateResponse.from_view(view, token).model_dump(),
    }


async def _send_result(
    websocket: WebSocket,
    result: ActionResult,
    token: str,
    step_delay: float,
) -> None:
    """Send each dealer step, paced for animation, then the final state."""
    for index, step in enumerate(result.steps):
        await websocket.send_json(
            {
                "type": "step",
                "index": index,
                "state": GameStateResponse.from_view(step, token).model_dump(),
            }
        )
        if step_delay > 0:
            await asyncio.sleep(step_delay)

    message = _state_message(result.view, token)
    if result.error:
        message["error"] = result.error
    await websocket.send_json(message)


async def _dispatch(engine: BlackjackEngine, session_id: str, message: dict[str, Any]) -> ActionResult | None:
    msg_type = message.get("type")
    if msg_type == "get_state":
        return await engine.get_state(session_id)
    if msg_type == "bet":
        request = BetRequest.model_validate(message)
        return await engine.place_bet(session_id, request.amount)
    if msg_type == "hit":
        return await engine.hit(session_id)
    if msg_type == "stand":
        return await engine.stand(session_id)
    if msg_type == "new_round":
        return await engine.new_round(session_id)
    return None


@router.websocket("/game/{token}")
async def game_websocket(websocket: WebSocket, token: str, step_delay_ms: int | None = None) -> None:
    """
    WebSocket endpoint for real-time game updates.

    Messages from client:
    - {"type": "bet", "amount": 100}
    - {"type": "hit"} / {"type": "stand"} / {"type": "new_round"}
    - {"type": "get_state"}

    Messages to client:
    - {"type": "step", "index": n, "state": {...}} for each dealer step of a stand
    - {"type": "state_update", "state": {...}}
    - {"type": "error", "message": "..."}

    A second socket for a token that is already connected is closed with 1008.
    """
    engine = await get_engine()
    session_id = resolve_session_id(token)
    delay_ms = config.game.dealer_step_delay_ms if step_delay_ms is None else step_delay_ms
    step_delay = max(delay_ms, 0) / 1000

    if not await manager.connect(websocket, token):
        return
    try:
        result = await engine.get_state(session_id)
        await websocket.send_json(_state_message(result.view, token))

        while True:
            data = await websocket.receive_text()
            try:
                message = json.loads(data)
            except json.JSONDecodeError:
                message = None
            if not isinstance(message, dict):
                await websocket.send_json({"type": "error", "message": "Malformed message"})
                continue

            try:
                result = await _dispatch(engine, session_id, message)
            except ValidationError as exc:
                await websocket.send_json({"type": "error", "message": str(exc)})
                continue
            if result is None:
                await websocket.send_json(
                    {"type": "error", "message": f"Unknown message type: {message.get('type')}"}
                )
                continue
            await _send_result(websocket, result, token, step_delay)

    except WebSocketDisconnect:
        logger.debug("WebSocket closed for session %s", session_id or "<expired>")
    finally:
        manager.disconnect(token, websocket)
