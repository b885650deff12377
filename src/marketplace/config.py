"""Application settings read from the environment.

Protean's own configuration (databases, event store, processing mode) lives in
``domain.toml`` next to the domain module. These are the knobs the HTTP layer
and the placement service need on top of that.
"""

import os
from dataclasses import dataclass
from functools import lru_cache

_TRUTHY = {"1", "true", "yes", "on"}


def _flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in _TRUTHY


def current_env() -> str:
    return (os.getenv("PROTEAN_ENV") or os.getenv("ENVIRONMENT") or "development").lower()


@dataclass(frozen=True)
class Settings:
    jwt_secret: str
    token_ttl_days: int
    cookie_name: str
    cookie_secure: bool
    order_placement_attempts: int
    cors_origins: tuple[str, ...]


@lru_cache
def get_settings() -> Settings:
    env = current_env()
    return Settings(
        jwt_secret=os.getenv("JWT_SECRET", "farm-market-dev-secret"),
        token_ttl_days=int(os.getenv("TOKEN_TTL_DAYS", "7")),
        cookie_name="token",
        cookie_secure=_flag("COOKIE_SECURE", env == "production"),
        order_placement_attempts=max(1, int(os.getenv("ORDER_PLACEMENT_ATTEMPTS", "3"))),
        cors_origins=tuple(o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()),
    )
