"""Configuration read from environment variables."""

import os
import secrets
from dataclasses import dataclass, field


def _env_flag(name: str, default: bool) -> bool:
    """Read a boolean variable; only 'true' (any case) switches it on."""
    return os.getenv(name, str(default)).lower() == "true"


def _env_int(name: str, default: int) -> int:
    return int(os.getenv(name, str(default)))


def _parse_cors_origins() -> list[str]:
    """Parse the comma-separated CORS_ORIGINS variable."""
    origins = os.getenv("CORS_ORIGINS", "http://localhost:8000")
    return [o.strip() for o in origins.split(",") if o.strip()]


@dataclass(frozen=True)
class TrackerConfig:
    """Shoe defaults for new counting sessions."""

    default_decks: int = field(default_factory=lambda: _env_int("DEFAULT_DECKS", 1))
    min_decks: int = 1
    max_decks: int = 8
    # Hand totals shown in the "bust with the next card" table
    bust_scores: tuple[int, ...] = (13, 14, 15, 16, 17)

    def __post_init__(self) -> None:
        if not self.min_decks <= self.default_decks <= self.max_decks:
            raise ValueError(
                f"DEFAULT_DECKS must be between {self.min_decks} and {self.max_decks}, "
                f"got {self.default_decks}"
            )


@dataclass(frozen=True)
class SessionConfig:
    """Signing and lifetime of counting-session tokens."""

    secret_key: str = field(
        default_factory=lambda: os.getenv("SECRET_KEY") or secrets.token_urlsafe(32)
    )
    ttl: int = field(default_factory=lambda: _env_int("SESSION_TTL", 3600))
    salt: str = "shoe-counter-session"


@dataclass(frozen=True)
class RedisConfig:
    """Where counting sessions are stored when Redis is used."""

    enabled: bool = field(default_factory=lambda: _env_flag("REDIS_ENABLED", True))
    host: str = field(default_factory=lambda: os.getenv("REDIS_HOST", "localhost"))
    port: int = field(default_factory=lambda: _env_int("REDIS_PORT", 6379))
    db: int = field(default_factory=lambda: _env_int("REDIS_DB", 0))
    password: str | None = field(default_factory=lambda: os.getenv("REDIS_PASSWORD"))
    key_prefix: str = "shoe_counter:session:"

    @property
    def url(self) -> str:
        auth = f":{self.password}@" if self.password else ""
        return f"redis://{auth}{self.host}:{self.port}/{self.db}"


@dataclass(frozen=True)
class CORSConfig:
    """Origins allowed to call the API from a browser."""

    allowed_origins: list[str] = field(default_factory=_parse_cors_origins)
    allow_credentials: bool = True


@dataclass(frozen=True)
class RateLimitConfig:
    """Per-client request limit."""

    enabled: bool = field(default_factory=lambda: _env_flag("RATE_LIMIT_ENABLED", True))
    requests_per_minute: int = field(default_factory=lambda: _env_int("RATE_LIMIT_RPM", 60))

    @property
    def limit(self) -> str:
        """Limit string in slowapi notation."""
        return f"{self.requests_per_minute}/minute"


@dataclass(frozen=True)
class AppConfig:
    """Application configuration."""

    debug: bool = field(default_factory=lambda: _env_flag("DEBUG", False))
    host: str = field(default_factory=lambda: os.getenv("HOST", "0.0.0.0"))
    port: int = field(default_factory=lambda: _env_int("PORT", 8000))
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO").upper())

    tracker: TrackerConfig = field(default_factory=TrackerConfig)
    session: SessionConfig = field(default_factory=SessionConfig)
    redis: RedisConfig = field(default_factory=RedisConfig)
    cors: CORSConfig = field(default_factory=CORSConfig)
    rate_limit: RateLimitConfig = field(default_factory=RateLimitConfig)


config = AppConfig()
