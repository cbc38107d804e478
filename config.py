"""Configuration management with environment variable support."""

import os
import secrets
from dataclasses import dataclass, field


def _env_bool(name: str, default: bool) -> bool:
    """Only "true" (any case) switches a flag on."""
    return os.getenv(name, str(default)).strip().lower() == "true"


def _env_int(name: str, default: int) -> int:
    return int(os.getenv(name, str(default)))


def _parse_cors_origins() -> list[str]:
    """Comma-separated CORS_ORIGINS, blanks dropped."""
    origins = os.getenv("CORS_ORIGINS", "http://localhost:8000")
    return [o.strip() for o in origins.split(",") if o.strip()]


def _parse_seed() -> int | None:
    """HOLDEM_SEED; unset or non-numeric means unseeded."""
    raw = os.getenv("HOLDEM_SEED", "").strip()
    try:
        return int(raw) if raw else None
    except ValueError:
        return None


@dataclass(frozen=True)
class CORSConfig:
    """Origins allowed to call the table API."""

    allowed_origins: list[str] = field(default_factory=_parse_cors_origins)
    allow_credentials: bool = True
    allow_methods: list[str] = field(default_factory=lambda: ["*"])
    allow_headers: list[str] = field(default_factory=lambda: ["*"])


@dataclass(frozen=True)
class RateLimitConfig:
    """Per-client request limits."""

    enabled: bool = field(default_factory=lambda: _env_bool("RATE_LIMIT_ENABLED", True))
    requests_per_minute: int = field(default_factory=lambda: _env_int("RATE_LIMIT_RPM", 60))


@dataclass(frozen=True)
class SecurityConfig:
    """Key used to sign table session tokens."""

    secret_key: str = field(
        default_factory=lambda: os.getenv("SECRET_KEY") or secrets.token_urlsafe(32)
    )


@dataclass(frozen=True)
class GameConfig:
    """Table defaults for new sessions."""

    small_blind: int = 1
    big_blind: int = 2
    starting_stack: int = 100
    min_buy_in_multiplier: int = 10
    log_limit: int = 24
    seed: int | None = field(default_factory=_parse_seed)
    # Upper bound on bot turns played back to back by one request
    bot_turn_limit: int = field(default_factory=lambda: _env_int("BOT_TURN_LIMIT", 100))


@dataclass(frozen=True)
class AppConfig:
    """Application configuration."""

    debug: bool = field(default_factory=lambda: _env_bool("DEBUG", False))
    host: str = field(default_factory=lambda: os.getenv("HOST", "0.0.0.0"))
    port: int = field(default_factory=lambda: _env_int("PORT", 8000))
    session_ttl: int = field(default_factory=lambda: _env_int("SESSION_TTL", 3600))

    game: GameConfig = field(default_factory=GameConfig)
    cors: CORSConfig = field(default_factory=CORSConfig)
    rate_limit: RateLimitConfig = field(default_factory=RateLimitConfig)
    security: SecurityConfig = field(default_factory=SecurityConfig)


config = AppConfig()
