"""Session repository contract and an in-process implementation."""

from typing import Protocol

from core.game.session import GameSession


class SessionRepository(Protocol):
    """Persistence the engine needs: read one snapshot, write one snapshot."""

    async def load(self, session_id: str) -> GameSession | None:
        ...

    async def save(self, session: GameSession) -> None:
        ...


class InMemorySessionRepository:
    """Dict-backed repository for tests and embedding."""

    def __init__(self) -> None:
        self._sessions: dict[str, GameSession] = {}

    async def load(self, session_id: str) -> GameSession | None:
        return self._sessions.get(session_id)

    async def save(self, session: GameSession) -> None:
        self._sessions[session.id] = session

    def __len__(self) -> int:
        return len(self._sessions)
