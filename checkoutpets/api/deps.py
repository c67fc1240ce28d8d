from __future__ import annotations

import redis
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from checkoutpets.api.models import UserRecord
from checkoutpets.errors import AuthError, ForbiddenError
from checkoutpets.identity import IdentityService
from checkoutpets.settings import Settings
from checkoutpets.store import get_user


bearer = HTTPBearer(auto_error=False)


def get_redis(request: Request) -> redis.Redis:
    # Opened once in the app lifespan; see checkoutpets.main.
    return request.app.state.redis


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_identity(r: redis.Redis = Depends(get_redis), settings: Settings = Depends(get_settings)) -> IdentityService:
    return IdentityService(r, pepper=settings.pepper, token_ttl_seconds=settings.token_ttl_seconds)


def get_bearer_token(credentials: HTTPAuthorizationCredentials | None = Depends(bearer)) -> str:
    if credentials is None or not credentials.credentials:
        raise AuthError("Access token required")
    return credentials.credentials


def get_current_user_id(
    token: str = Depends(get_bearer_token),
    identity: IdentityService = Depends(get_identity),
) -> str:
    """Resolve the bearer token without loading the user row.

    Mutating routes use this and leave the user read to dispatch_action.
    """

    user_id = identity.resolve_token(token)
    if user_id is None:
        raise ForbiddenError("Invalid or expired token")
    return user_id


def get_current_user(
    user_id: str = Depends(get_current_user_id),
    r: redis.Redis = Depends(get_redis),
) -> UserRecord:
    user = get_user(r=r, user_id=user_id)
    if user is None:
        raise AuthError("Invalid token")
    return user
