from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Literal

import redis
from fastapi import status

from checkoutpets.api.models import Pet, StatChanges, UserRecord
from checkoutpets.errors import AuthError, StateError
from checkoutpets.lock import pet_lock
from checkoutpets.rules import engine
from checkoutpets.rules.outcomes import Outcome, Rejected, Rejection
from checkoutpets.store import get_pet_for_user, get_user, save_user_and_pet


logger = logging.getLogger(__name__)

ActionName = Literal[
    "eat",
    "play",
    "study",
    "reset",
    "purchase_food",
    "rename",
    "appearance",
    "upgrade",
    "downgrade",
]

REJECTION_STATUS: dict[Rejection, int] = {
    Rejection.insufficient_food: status.HTTP_400_BAD_REQUEST,
    Rejection.insufficient_intelligence: status.HTTP_400_BAD_REQUEST,
    Rejection.insufficient_energy: status.HTTP_400_BAD_REQUEST,
    Rejection.premium_required: status.HTTP_403_FORBIDDEN,
    Rejection.invalid_pet_type: status.HTTP_400_BAD_REQUEST,
    Rejection.invalid_color: status.HTTP_400_BAD_REQUEST,
    Rejection.invalid_appearance: status.HTTP_400_BAD_REQUEST,
    Rejection.invalid_name: status.HTTP_400_BAD_REQUEST,
    Rejection.invalid_purchase: status.HTTP_400_BAD_REQUEST,
    Rejection.not_found: status.HTTP_404_NOT_FOUND,
}


class ActionRejected(StateError):
    def __init__(self, rejected: Rejected) -> None:
        super().__init__(rejected.message)
        self.reason = rejected.reason
        self.status_code = REJECTION_STATUS[rejected.reason]


@dataclass(frozen=True, slots=True)
class ActionResult:
    user: UserRecord
    pet: Pet
    changes: StatChanges
    message: str


def _evaluate(action: ActionName, *, user: UserRecord, pet: Pet, payload: dict[str, Any]) -> Outcome | Rejected:
    if action in ("eat", "play", "study"):
        return engine.apply_stat_action(action, user=user, pet=pet)
    if action == "reset":
        return engine.reset(user=user, pet=pet)
    if action == "purchase_food":
        return engine.purchase_food(user=user, pet=pet, amount=payload["amount"], price=payload["price"])
    if action == "rename":
        return engine.rename(user=user, pet=pet, name=payload.get("name"))
    if action == "appearance":
        return engine.update_appearance(
            user=user,
            pet=pet,
            pet_type=payload.get("pet_type"),
            color=payload.get("color"),
        )
    if action == "upgrade":
        return engine.upgrade(user=user, pet=pet)
    if action == "downgrade":
        return engine.downgrade(user=user, pet=pet)
    raise ValueError(f"Unknown action: {action}")


def dispatch_action(
    *,
    r: redis.Redis,
    user_id: str,
    action: ActionName,
    payload: dict[str, Any] | None = None,
    lock_ttl_ms: int = 5_000,
) -> ActionResult:
    """Entry point for every pet/user mutation.

    Applies an action by:
    - acquiring the per-pet lock
    - loading user + pet (entitlement is whatever is stored right now)
    - evaluating the rules
    - persisting both rows in one write, only if the rules accepted

    The user row is read here and nowhere else on the request. A rejection
    raises ActionRejected before anything is written.
    """

    payload = payload or {}

    with pet_lock(r=r, user_id=user_id, ttl_ms=lock_ttl_ms):
        user = get_user(r=r, user_id=user_id)
        if user is None:
            # The id came from a token whose user has since gone away.
            raise AuthError("Invalid token")
        pet = get_pet_for_user(r=r, user_id=user_id)
        if pet is None:
            raise ActionRejected(Rejected(Rejection.not_found, "Pet not found"))

        result = _evaluate(action, user=user, pet=pet, payload=payload)
        if isinstance(result, Rejected):
            logger.warning("Rejected %s for user %s: %s", action, user_id, result.reason.value)
            raise ActionRejected(result)

        save_user_and_pet(r=r, user=result.user, pet=result.pet)

    changes = engine.stat_changes(pet, result.pet)
    logger.info(
        "Applied %s for user %s (happiness %+d, energy %+d, intelligence %+d)",
        action,
        user_id,
        changes.happiness,
        changes.energy,
        changes.intelligence,
    )
    return ActionResult(user=result.user, pet=result.pet, changes=changes, message=result.message)
