"""Configuration management with environment variable support."""

import os
import secrets
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Literal


def _parse_cors_origins() -> list[str]:
    """Parse CORS_ORIGINS environment variable."""
    origins = os.getenv("CORS_ORIGINS", "http://localhost:8000")
    return [o.strip() for o in origins.split(",") if o.strip()]


@dataclass(frozen=True)
class CORSConfig:
    """CORS configuration."""

    allowed_origins: list[str] = field(default_factory=_parse_cors_origins)
    allow_credentials: bool = True
    allow_methods: list[str] = field(default_factory=lambda: ["*"])
    allow_headers: list[str] = field(default_factory=lambda: ["*"])


@dataclass(frozen=True)
class RateLimitConfig:
    """Rate limiting configuration."""

    enabled: bool = field(
        default_factory=lambda: os.getenv("RATE_LIMIT_ENABLED", "true").lower() == "true"
    )
    requests_per_minute: int = field(
        default_factory=lambda: int(os.getenv("RATE_LIMIT_RPM", "60"))
    )


@dataclass(frozen=True)
class SecurityConfig:
    """Security configuration."""

    secret_key: str = field(
        default_factory=lambda: os.getenv("SECRET_KEY", secrets.token_urlsafe(32))
    )


@dataclass(frozen=True)
class RedisConfig:
    """Redis connection configuration."""

    host: str = field(default_factory=lambda: os.getenv("REDIS_HOST", "localhost"))
    port: int = field(default_factory=lambda: int(os.getenv("REDIS_PORT", "6379")))
    db: int = field(default_factory=lambda: int(os.getenv("REDIS_DB", "0")))
    password: str | None = field(default_factory=lambda: os.getenv("REDIS_PASSWORD"))

    @property
    def url(self) -> str:
        """Build Redis connection URL."""
        auth = f":{self.password}@" if self.password else ""
        return f"redis://{auth}{self.host}:{self.port}/{self.db}"


@dataclass(frozen=True)
class SessionConfig:
    """Session storage configuration."""

    backend: Literal["memory", "redis"] = field(
        default_factory=lambda: os.getenv("SESSION_BACKEND", "memory").lower()  # type: ignore[return-value]
    )
    ttl: int = field(default_factory=lambda: int(os.getenv("SESSION_TTL", "3600")))
    cleanup_interval: int = field(default_factory=lambda: int(os.getenv("SESSION_CLEANUP_INTERVAL", "300")))


@dataclass(frozen=True)
class GameConfig:
    """Default game configuration."""

    initial_balance: Decimal = field(
        default_factory=lambda: Decimal(os.getenv("INITIAL_BALANCE", "1000"))
    )
    server_seed_bytes: int = 32
    client_seed_bytes: int = 16
    dealer_stands_on: int = 17
    dealer_step_delay_ms: int = field(
        default_factory=lambda: int(os.getenv("DEALER_STEP_DELAY_MS", "600"))
    )

    def __post_init__(self) -> None:
        """Validate game settings."""
        if self.initial_balance <= 0:
            raise ValueError("initial_balance must be positive")
        if self.server_seed_bytes < 16 or self.client_seed_bytes < 1:
            raise ValueError("seed lengths are too short")


@dataclass(frozen=True)
class LoggingConfig:
    """Logging configuration."""

    level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO").upper())


@dataclass(frozen=True)
class AppConfig:
    """Application configuration."""

    debug: bool = field(default_factory=lambda: os.getenv("DEBUG", "false").lower() == "true")
    host: str = field(default_factory=lambda: os.getenv("HOST", "0.0.0.0"))
    port: int = field(default_factory=lambda: int(os.getenv("PORT", "8000")))

    redis: RedisConfig = field(default_factory=RedisConfig)
    session: SessionConfig = field(default_factory=SessionConfig)
    game: GameConfig = field(default_factory=GameConfig)
    cors: CORSConfig = field(default_factory=CORSConfig)
    rate_limit: RateLimitConfig = field(default_factory=RateLimitConfig)
    security: SecurityConfig = field(default_factory=SecurityConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @property
    def session_ttl(self) -> int:
        """Session timeout in seconds."""
        return self.session.ttl


# Global configuration instance
config = AppConfig()
