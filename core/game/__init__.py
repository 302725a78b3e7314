"""Game engine and state management."""

from core.game.errors import GameError, IllegalTransition, InvalidBet, SessionExpired
from core.game.events import EventEmitter, EventType, GameEvent
from core.game.state import GameState
from core.game.session import GameSession
from core.game.view import ClientCard, ClientView, project
from core.game.engine import ActionResult, BlackjackEngine

__all__ = [
    "GameError",
    "IllegalTransition",
    "InvalidBet",
    "SessionExpired",
    "EventEmitter",
    "EventType",
    "GameEvent",
    "GameState",
    "GameSession",
    "ClientCard",
    "ClientView",
    "project",
    "ActionResult",
    "BlackjackEngine",
]
