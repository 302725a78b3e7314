"""Signed session tokens and snapshot storage (Redis, or in-process)."""

import asyncio
import json
import logging
import time
from abc import ABC, abstractmethod
from typing import Any, Callable

import redis.asyncio as redis
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer
from redis.exceptions import RedisError

from config import config
from core.game.session import GameSession

logger = logging.getLogger(__name__)

KEY_PREFIX = "blackjack:session:"


class SessionSigner:
    """
    Turns raw session ids into tamper-proof client tokens.

    Tokens carry their signing time, so they also age out after the session ttl.
    """

    def __init__(self, secret_key: str | None = None) -> None:
        self._serializer = URLSafeTimedSerializer(
            secret_key or config.security.secret_key,
            salt="blackjack-session",
        )

    def sign(self, session_id: str) -> str:
        return self._serializer.dumps(session_id)

    def unsign(self, token: str, max_age: int | None = None) -> str | None:
        """Session id inside ``token``, or None if forged or older than ``max_age`` seconds."""
        try:
            return self._serializer.loads(token, max_age=max_age or config.session_ttl)
        except (BadSignature, SignatureExpired):
            return None


_session_signer: SessionSigner | None = None


def get_session_signer() -> SessionSigner:
    """Process-wide signer using the configured secret."""
    global _session_signer
    if _session_signer is None:
        _session_signer = SessionSigner()
    return _session_signer


def sign_session_id(session_id: str) -> str:
    """Signed token handed to the client for a session id."""
    return get_session_signer().sign(session_id)


def extract_session_id(token: str) -> str | None:
    """Raw session id for a client token, None when invalid or expired."""
    return get_session_signer().unsign(token)


class SessionStore(ABC):
    """Key-value storage of JSON-safe session dicts with expiry."""

    @abstractmethod
    async def get(self, session_id: str) -> dict[str, Any] | None:
        ...

    @abstractmethod
    async def set(self, session_id: str, data: dict[str, Any], ttl: int | None = None) -> None:
        ...

    @abstractmethod
    async def cleanup_expired(self) -> int:
        """Drop expired entries the backend does not expire itself; return how many went."""


class InMemorySessionStore(SessionStore):
    """Single-process store; entries expire lazily on read or on ``cleanup_expired``."""

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._entries: dict[str, tuple[dict[str, Any], float]] = {}

    async def get(self, session_id: str) -> dict[str, Any] | None:
        entry = self._entries.get(session_id)
        if entry is None:
            return None
        data, expires_at = entry
        if expires_at <= self._clock():
            del self._entries[session_id]
            return None
        return data

    async def set(self, session_id: str, data: dict[str, Any], ttl: int | None = None) -> None:
        self._entries[session_id] = (data, self._clock() + (ttl or config.session_ttl))

    async def cleanup_expired(self) -> int:
        now = self._clock()
        expired = [sid for sid, (_, expires_at) in self._entries.items() if expires_at <= now]
        for sid in expired:
            del self._entries[sid]
        return len(expired)


class RedisSessionStore(SessionStore):
    """Sessions as JSON strings under ``KEY_PREFIX``, expiring via SETEX."""

    def __init__(self, redis_client: redis.Redis) -> None:
        self._redis = redis_client

    async def get(self, session_id: str) -> dict[str, Any] | None:
        raw = await self._redis.get(KEY_PREFIX + session_id)
        return None if raw is None else json.loads(raw)

    async def set(self, session_id: str, data: dict[str, Any], ttl: int | None = None) -> None:
        await self._redis.setex(KEY_PREFIX + session_id, ttl or config.session_ttl, json.dumps(data))

    async def cleanup_expired(self) -> int:
        # SETEX keys expire server-side
        return 0


class StoreSessionRepository:
    """Engine repository persisting ``GameSession`` snapshots in a ``SessionStore``."""

    def __init__(self, store: SessionStore, ttl: int | None = None) -> None:
        self._store = store
        self._ttl = ttl

    async def load(self, session_id: str) -> GameSession | None:
        data = await self._store.get(session_id)
        return None if data is None else GameSession.from_dict(data)

    async def save(self, session: GameSession) -> None:
        await self._store.set(session.id, session.to_dict(), ttl=self._ttl)


_session_store: SessionStore | None = None


async def get_session_store() -> SessionStore:
    """
    Configured store, created on first use.

    With ``SESSION_BACKEND=redis`` the server is pinged once; if it cannot be
    reached the process runs on in-memory sessions instead.
    """
    global _session_store
    if _session_store is not None:
        return _session_store

    if config.session.backend == "redis":
        client = redis.from_url(config.redis.url)
        try:
            await client.ping()
        except (RedisError, OSError) as exc:
            logger.warning("Redis unavailable at %s (%s); using in-memory sessions", config.redis.url, exc)
        else:
            logger.info("Using Redis sessions at %s", config.redis.url)
            _session_store = RedisSessionStore(client)
            return _session_store

    _session_store = InMemorySessionStore()
    return _session_store


def reset_session_store() -> None:
    """Forget the cached store (tests)."""
    global _session_store
    _session_store = None


async def sweep_expired_sessions(interval: float | None = None) -> None:
    """Run ``cleanup_expired`` on the configured store every ``interval`` seconds until cancelled."""
    interval = interval or config.session.cleanup_interval
    while True:
        await asyncio.sleep(interval)
        store = await get_session_store()
        removed = await store.cleanup_expired()
        if removed:
            logger.debug("Swept %d expired sessions", removed)
