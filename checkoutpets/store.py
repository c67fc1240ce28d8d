from __future__ import annotations

import logging
from datetime import UTC, datetime
from uuid import uuid4

import redis

from checkoutpets.api.models import Pet, UserRecord
from checkoutpets.errors import UnexpectedError, ValidationError


logger = logging.getLogger(__name__)

KEY_PREFIX = "checkoutpets:"
USERS_SET_KEY = f"{KEY_PREFIX}users"


def _now() -> datetime:
    return datetime.now(tz=UTC)


def user_key(user_id: str) -> str:
    return f"{KEY_PREFIX}user:{user_id}"


def username_key(username: str) -> str:
    return f"{KEY_PREFIX}username:{username}"


def pet_key(pet_id: str) -> str:
    return f"{KEY_PREFIX}pet:{pet_id}"


def user_pet_key(user_id: str) -> str:
    return f"{KEY_PREFIX}user_pet:{user_id}"


def get_user(*, r: redis.Redis, user_id: str) -> UserRecord | None:
    raw = r.get(user_key(user_id))
    if not raw:
        return None
    return UserRecord.model_validate_json(raw)


def get_user_by_username(*, r: redis.Redis, username: str) -> UserRecord | None:
    user_id = r.get(username_key(username))
    if not user_id:
        return None
    return get_user(r=r, user_id=user_id)


def get_pet_for_user(*, r: redis.Redis, user_id: str) -> Pet | None:
    pet_id = r.get(user_pet_key(user_id))
    if not pet_id:
        return None
    raw = r.get(pet_key(pet_id))
    if not raw:
        return None
    return Pet.model_validate_json(raw)


def save_pet(*, r: redis.Redis, pet: Pet) -> None:
    r.set(pet_key(pet.id), pet.model_dump_json())


def save_user_and_pet(*, r: redis.Redis, user: UserRecord, pet: Pet) -> None:
    """Write both rows in one MULTI/EXEC so a reader never sees half an action."""

    pipe = r.pipeline(transaction=True)
    pipe.set(user_key(user.id), user.model_dump_json())
    pipe.set(pet_key(pet.id), pet.model_dump_json())
    pipe.execute()


def create_user_with_pet(*, r: redis.Redis, username: str, password_hash: str, salt: str) -> tuple[UserRecord, Pet]:
    """Register a user and their starter pet.

    The username is claimed first with SET NX; user, pet and indexes are then
    written in one transaction. If that write fails the claim is released,
    so there is never a user without a pet.
    """

    user = UserRecord(
        id=str(uuid4()),
        username=username,
        password_hash=password_hash,
        salt=salt,
        created_at=_now(),
    )
    pet = Pet(id=str(uuid4()), user_id=user.id)

    claimed = r.set(username_key(username), user.id, nx=True)
    if not claimed:
        raise ValidationError("User already exists")

    try:
        pipe = r.pipeline(transaction=True)
        pipe.set(user_key(user.id), user.model_dump_json())
        pipe.set(pet_key(pet.id), pet.model_dump_json())
        pipe.set(user_pet_key(user.id), pet.id)
        pipe.sadd(USERS_SET_KEY, user.id)
        pipe.execute()
    except redis.RedisError as e:
        r.delete(username_key(username))
        logger.exception("Registration write failed for %s", username)
        raise UnexpectedError("Internal server error") from e

    logger.info("Registered user %s with pet %s", user.id, pet.id)
    return user, pet


def list_user_ids(*, r: redis.Redis) -> list[str]:
    return sorted(r.smembers(USERS_SET_KEY))
