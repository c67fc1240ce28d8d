from __future__ import annotations

import logging
from typing import Any

import redis
from fastapi import APIRouter, Depends, HTTPException, status

from checkoutpets import __version__
from checkoutpets.actions import ActionName, ActionResult, dispatch_action
from checkoutpets.api.deps import (
    get_bearer_token,
    get_current_user,
    get_current_user_id,
    get_identity,
    get_redis,
    get_settings,
)
from checkoutpets.api.models import (
    AppearanceRequest,
    AuthResponse,
    CredentialsRequest,
    FoodPackage,
    FoodPackagesResponse,
    MessageResponse,
    PetActionResponse,
    PetMessageResponse,
    PetResponse,
    PurchaseFoodRequest,
    RenameRequest,
    UserMessageResponse,
    UserRecord,
    UserResponse,
)
from checkoutpets.errors import AuthError, NotFoundError, PetAppError
from checkoutpets.identity import IdentityService
from checkoutpets.settings import Settings
from checkoutpets.store import create_user_with_pet, get_pet_for_user, get_user_by_username


logger = logging.getLogger(__name__)

router = APIRouter()
auth_router = APIRouter(prefix="/auth", tags=["auth"])
pet_router = APIRouter(prefix="/pet", tags=["pet"])

FOOD_PACKAGES: tuple[FoodPackage, ...] = (
    FoodPackage(amount=1, price=1),
    FoodPackage(amount=5, price=2),
    FoodPackage(amount=10, price=3),
)


def _run_action(
    *,
    r: redis.Redis,
    settings: Settings,
    user_id: str,
    action: ActionName,
    payload: dict[str, Any] | None = None,
) -> ActionResult:
    try:
        return dispatch_action(r=r, user_id=user_id, action=action, payload=payload, lock_ttl_ms=settings.lock_ttl_ms)
    except PetAppError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message) from e


@router.get("/health")
async def healthcheck() -> dict[str, str]:
    return {"status": "OK", "message": "CheckoutPets API is running"}


@router.get("/info")
async def info() -> dict[str, str]:
    return {"name": "checkoutpets", "version": __version__}


# --- auth ---


@auth_router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register_route(
    payload: CredentialsRequest,
    r: redis.Redis = Depends(get_redis),
    identity: IdentityService = Depends(get_identity),
) -> AuthResponse:
    if not payload.username or not payload.password:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Username and password are required")

    password_hash, salt = identity.hash_password(payload.password)
    try:
        user, _ = create_user_with_pet(r=r, username=payload.username, password_hash=password_hash, salt=salt)
    except PetAppError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message) from e

    return AuthResponse(message="User created successfully", token=identity.issue_token(user.id), user=user.public())


@auth_router.post("/login", response_model=AuthResponse)
async def login_route(
    payload: CredentialsRequest,
    r: redis.Redis = Depends(get_redis),
    identity: IdentityService = Depends(get_identity),
) -> AuthResponse:
    if not payload.username or not payload.password:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Username and password are required")

    user = get_user_by_username(r=r, username=payload.username)
    if user is None or not identity.verify_password(payload.password, password_hash=user.password_hash, salt=user.salt):
        logger.warning("Failed login for %s", payload.username)
        raise AuthError("Invalid credentials")

    return AuthResponse(message="Login successful", token=identity.issue_token(user.id), user=user.public())


@auth_router.post("/logout", response_model=MessageResponse)
async def logout_route(
    token: str = Depends(get_bearer_token),
    _user: UserRecord = Depends(get_current_user),
    identity: IdentityService = Depends(get_identity),
) -> MessageResponse:
    identity.revoke_token(token)
    return MessageResponse(message="Logged out")


@auth_router.get("/me", response_model=UserResponse)
async def me_route(user: UserRecord = Depends(get_current_user)) -> UserResponse:
    return UserResponse(user=user.public())


@auth_router.post("/upgrade", response_model=UserMessageResponse)
async def upgrade_route(
    user_id: str = Depends(get_current_user_id),
    r: redis.Redis = Depends(get_redis),
    settings: Settings = Depends(get_settings),
) -> UserMessageResponse:
    result = _run_action(r=r, settings=settings, user_id=user_id, action="upgrade")
    return UserMessageResponse(message=result.message, user=result.user.public())


@auth_router.post("/downgrade", response_model=UserMessageResponse)
async def downgrade_route(
    user_id: str = Depends(get_current_user_id),
    r: redis.Redis = Depends(get_redis),
    settings: Settings = Depends(get_settings),
) -> UserMessageResponse:
    result = _run_action(r=r, settings=settings, user_id=user_id, action="downgrade")
    return UserMessageResponse(message=result.message, user=result.user.public())


@auth_router.get("/food-packages", response_model=FoodPackagesResponse)
async def food_packages_route() -> FoodPackagesResponse:
    return FoodPackagesResponse(packages=list(FOOD_PACKAGES))


@auth_router.post("/purchase-food", response_model=UserMessageResponse)
async def purchase_food_route(
    payload: PurchaseFoodRequest,
    user_id: str = Depends(get_current_user_id),
    r: redis.Redis = Depends(get_redis),
    settings: Settings = Depends(get_settings),
) -> UserMessageResponse:
    result = _run_action(
        r=r,
        settings=settings,
        user_id=user_id,
        action="purchase_food",
        payload={"amount": payload.amount, "price": payload.price},
    )
    return UserMessageResponse(message=result.message, user=result.user.public())


# --- pet ---


@pet_router.get("", response_model=PetResponse)
async def get_pet_route(user: UserRecord = Depends(get_current_user), r: redis.Redis = Depends(get_redis)) -> PetResponse:
    pet = get_pet_for_user(r=r, user_id=user.id)
    if pet is None:
        raise NotFoundError("Pet not found")
    return PetResponse(pet=pet)


@pet_router.post("/eat", response_model=PetActionResponse, response_model_exclude_none=True)
async def eat_route(
    user_id: str = Depends(get_current_user_id),
    r: redis.Redis = Depends(get_redis),
    settings: Settings = Depends(get_settings),
) -> PetActionResponse:
    result = _run_action(r=r, settings=settings, user_id=user_id, action="eat")
    return PetActionResponse(message=result.message, pet=result.pet, user=result.user.public(), changes=result.changes)


@pet_router.post("/play", response_model=PetActionResponse, response_model_exclude_none=True)
async def play_route(
    user_id: str = Depends(get_current_user_id),
    r: redis.Redis = Depends(get_redis),
    settings: Settings = Depends(get_settings),
) -> PetActionResponse:
    result = _run_action(r=r, settings=settings, user_id=user_id, action="play")
    return PetActionResponse(message=result.message, pet=result.pet, changes=result.changes)


@pet_router.post("/study", response_model=PetActionResponse, response_model_exclude_none=True)
async def study_route(
    user_id: str = Depends(get_current_user_id),
    r: redis.Redis = Depends(get_redis),
    settings: Settings = Depends(get_settings),
) -> PetActionResponse:
    result = _run_action(r=r, settings=settings, user_id=user_id, action="study")
    return PetActionResponse(message=result.message, pet=result.pet, changes=result.changes)


@pet_router.put("/name", response_model=PetMessageResponse)
async def rename_route(
    payload: RenameRequest,
    user_id: str = Depends(get_current_user_id),
    r: redis.Redis = Depends(get_redis),
    settings: Settings = Depends(get_settings),
) -> PetMessageResponse:
    result = _run_action(r=r, settings=settings, user_id=user_id, action="rename", payload={"name": payload.name})
    return PetMessageResponse(message=result.message, pet=result.pet)


@pet_router.put("/appearance", response_model=PetMessageResponse)
async def appearance_route(
    payload: AppearanceRequest,
    user_id: str = Depends(get_current_user_id),
    r: redis.Redis = Depends(get_redis),
    settings: Settings = Depends(get_settings),
) -> PetMessageResponse:
    result = _run_action(
        r=r,
        settings=settings,
        user_id=user_id,
        action="appearance",
        payload={"pet_type": payload.pet_type, "color": payload.color},
    )
    return PetMessageResponse(message=result.message, pet=result.pet)


@pet_router.post("/reset", response_model=PetActionResponse, response_model_exclude_none=True)
async def reset_route(
    user_id: str = Depends(get_current_user_id),
    r: redis.Redis = Depends(get_redis),
    settings: Settings = Depends(get_settings),
) -> PetActionResponse:
    result = _run_action(r=r, settings=settings, user_id=user_id, action="reset")
    return PetActionResponse(message=result.message, pet=result.pet, user=result.user.public())
