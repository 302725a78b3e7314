"""Shared engine instance for the HTTP and WebSocket routes."""

from api.session import StoreSessionRepository, extract_session_id, get_session_store
from config import config
from core.game import BlackjackEngine

_engine: BlackjackEngine | None = None


async def get_engine() -> BlackjackEngine:
    """Get or create the engine over the configured session store."""
    global _engine
    if _engine is None:
        store = await get_session_store()
        _engine = BlackjackEngine(StoreSessionRepository(store, ttl=config.session_ttl))
    return _engine


def reset_engine() -> None:
    """Forget the cached engine (tests)."""
    global _engine
    _engine = None


def resolve_session_id(token: str | None) -> str:
    """
    Raw session id for a client token.

    Invalid or expired tokens map to an id no session can have, so the
    engine answers with its session-expired view.
    """
    if not token:
        return ""
    return extract_session_id(token) or ""
