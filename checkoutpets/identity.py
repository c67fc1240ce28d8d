"""Password hashing and bearer-token issuance.

Passwords are stored as sha256(password + salt + pepper). Tokens are opaque
random strings kept in redis with a TTL; expiry is redis' job.
"""

from __future__ import annotations

import hashlib
import logging
import secrets

import redis

from checkoutpets.store import KEY_PREFIX


logger = logging.getLogger(__name__)


def _token_key(token: str) -> str:
    return f"{KEY_PREFIX}token:{token}"


def hash_password(password: str, *, pepper: str, salt: str | None = None) -> tuple[str, str]:
    salt = salt if salt is not None else secrets.token_hex(16)
    hashed = hashlib.sha256((password + salt + pepper).encode()).hexdigest()
    return hashed, salt


def verify_password(password: str, *, password_hash: str, salt: str, pepper: str) -> bool:
    candidate, _ = hash_password(password, pepper=pepper, salt=salt)
    return secrets.compare_digest(candidate, password_hash)


class IdentityService:
    def __init__(self, r: redis.Redis, *, pepper: str, token_ttl_seconds: int) -> None:
        self.r = r
        self.pepper = pepper
        self.token_ttl_seconds = token_ttl_seconds

    def hash_password(self, password: str) -> tuple[str, str]:
        return hash_password(password, pepper=self.pepper)

    def verify_password(self, password: str, *, password_hash: str, salt: str) -> bool:
        return verify_password(password, password_hash=password_hash, salt=salt, pepper=self.pepper)

    def issue_token(self, user_id: str) -> str:
        token = secrets.token_urlsafe(32)
        self.r.set(_token_key(token), user_id, ex=self.token_ttl_seconds)
        return token

    def resolve_token(self, token: str) -> str | None:
        """Return the user id behind `token`, or None if unknown or expired."""

        user_id = self.r.get(_token_key(token))
        return user_id or None

    def revoke_token(self, token: str) -> None:
        self.r.delete(_token_key(token))
