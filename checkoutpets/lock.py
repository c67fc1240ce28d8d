from __future__ import annotations

import logging
import secrets
import time
from contextlib import contextmanager

import redis

from checkoutpets.errors import BusyError
from checkoutpets.store import KEY_PREFIX


logger = logging.getLogger(__name__)

# Delete the key only while it still holds our token.
_RELEASE_SCRIPT = """
if redis.call("GET", KEYS[1]) == ARGV[1] then
    return redis.call("DEL", KEYS[1])
end
return 0
"""


@contextmanager
def pet_lock(*, r: redis.Redis, user_id: str, ttl_ms: int = 5_000, wait_ms: int = 200, retry_ms: int = 10):
    """Serialize read-modify-write on one user's pet.

    Keyed by the owning user id since each user has exactly one pet. Waits up
    to `wait_ms` for a competing request, then gives up with BusyError.
    The expiry bounds how long a crashed holder can block the pet.
    """

    key = f"{KEY_PREFIX}lock:pet:{user_id}"
    token = secrets.token_hex(8)
    deadline = time.monotonic() + wait_ms / 1000

    while not r.set(key, token, nx=True, px=ttl_ms):
        if time.monotonic() >= deadline:
            logger.warning("Pet lock busy for user %s", user_id)
            raise BusyError("Pet is busy, try again")
        time.sleep(retry_ms / 1000)

    try:
        yield
    finally:
        r.register_script(_RELEASE_SCRIPT)(keys=[key], args=[token])
