from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv


@dataclass(frozen=True, slots=True)
class Settings:
    redis_url: str = "redis://localhost:6379/0"
    # Mixed into every password hash; keep it out of the store.
    pepper: str = ""
    token_ttl_seconds: int = 7 * 24 * 60 * 60
    log_level: str = "INFO"
    lock_ttl_ms: int = 5_000
    frontend_url: str = "http://localhost:3000"


def load_settings() -> Settings:
    """Build settings from the environment (and a local `.env`, if present)."""

    load_dotenv(override=False)
    defaults = Settings()
    return Settings(
        redis_url=os.environ.get("REDIS_URL", defaults.redis_url),
        pepper=os.environ.get("CHECKOUTPETS_PEPPER", defaults.pepper),
        token_ttl_seconds=int(os.environ.get("CHECKOUTPETS_TOKEN_TTL_SECONDS", defaults.token_ttl_seconds)),
        log_level=os.environ.get("CHECKOUTPETS_LOG_LEVEL", defaults.log_level).upper(),
        lock_ttl_ms=int(os.environ.get("CHECKOUTPETS_LOCK_TTL_MS", defaults.lock_ttl_ms)),
        frontend_url=os.environ.get("FRONTEND_URL", defaults.frontend_url),
    )
