from __future__ import annotations

import redis

from checkoutpets.settings import load_settings


def get_redis_url() -> str:
    return load_settings().redis_url


def create_redis(url: str | None = None) -> redis.Redis:
    # decode_responses=True => strings in/out instead of bytes
    return redis.Redis.from_url(url or get_redis_url(), decode_responses=True)
