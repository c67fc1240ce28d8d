"""Versioned data migrations, applied once at startup before serving traffic.

Redis has no schema, so a "column" here is a JSON field on the stored rows.
Each migration checks a row before altering it, so re-running one (say after
a crash between the row updates and the version bump) is harmless.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from dataclasses import dataclass

import redis

from checkoutpets.api.models import DEFAULT_FOOD_COUNT, DEFAULT_STAT
from checkoutpets.store import KEY_PREFIX, list_user_ids, pet_key, user_key, user_pet_key


logger = logging.getLogger(__name__)

SCHEMA_VERSION_KEY = f"{KEY_PREFIX}schema_version"


@dataclass(frozen=True, slots=True)
class Migration:
    version: int
    name: str
    apply: Callable[[redis.Redis], int]


def _rewrite_json(r: redis.Redis, key: str, fix: Callable[[dict], bool]) -> bool:
    raw = r.get(key)
    if not raw:
        return False
    data = json.loads(raw)
    if not fix(data):
        return False
    r.set(key, json.dumps(data))
    return True


def _add_food_count(data: dict) -> bool:
    if "food_count" in data:
        return False
    data["food_count"] = DEFAULT_FOOD_COUNT
    return True


def _hunger_to_intelligence(data: dict) -> bool:
    changed = False
    if "intelligence" not in data:
        data["intelligence"] = DEFAULT_STAT
        changed = True
    if "hunger" in data:
        del data["hunger"]
        changed = True
    return changed


def users_add_food_count(r: redis.Redis) -> int:
    touched = 0
    for user_id in list_user_ids(r=r):
        if _rewrite_json(r, user_key(user_id), _add_food_count):
            touched += 1
    return touched


def pets_hunger_to_intelligence(r: redis.Redis) -> int:
    touched = 0
    for user_id in list_user_ids(r=r):
        pet_id = r.get(user_pet_key(user_id))
        if pet_id and _rewrite_json(r, pet_key(pet_id), _hunger_to_intelligence):
            touched += 1
    return touched


MIGRATIONS: tuple[Migration, ...] = (
    Migration(version=1, name="users_add_food_count", apply=users_add_food_count),
    Migration(version=2, name="pets_hunger_to_intelligence", apply=pets_hunger_to_intelligence),
)


def current_version(r: redis.Redis) -> int:
    raw = r.get(SCHEMA_VERSION_KEY)
    return int(raw) if raw else 0


def run_migrations(r: redis.Redis) -> list[str]:
    """Apply every migration newer than the stored schema version.

    Returns the names applied on this call (empty when already current).
    """

    applied: list[str] = []
    version = current_version(r)
    for m in MIGRATIONS:
        if m.version <= version:
            continue
        touched = m.apply(r)
        r.set(SCHEMA_VERSION_KEY, m.version)
        applied.append(m.name)
        logger.info("Applied migration %s (v%d), %d rows updated", m.name, m.version, touched)
    return applied
