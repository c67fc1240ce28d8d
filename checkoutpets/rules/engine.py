from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Literal

from checkoutpets.api.models import (
    DEFAULT_COLOR,
    DEFAULT_FOOD_COUNT,
    DEFAULT_PET_TYPE,
    DEFAULT_STAT,
    PREMIUM_PET_TYPES,
    STAT_MAX,
    STAT_MIN,
    Pet,
    PetColor,
    PetType,
    StatChanges,
    UserRecord,
)
from checkoutpets.rules.outcomes import Outcome, Rejected, Rejection
from checkoutpets.rules.preconditions import (
    FoodPrecondition,
    PreconditionPipeline,
    PremiumPrecondition,
    RuleContext,
    StatPrecondition,
)


StatActionName = Literal["eat", "play", "study"]


@dataclass(frozen=True, slots=True)
class StatDelta:
    happiness: int = 0
    energy: int = 0
    intelligence: int = 0


@dataclass(frozen=True, slots=True)
class StatActionRule:
    preconditions: PreconditionPipeline
    delta: StatDelta
    food_cost: int = 0


STAT_ACTION_RULES: dict[str, StatActionRule] = {
    "eat": StatActionRule(
        preconditions=PreconditionPipeline(
            preconditions=(
                FoodPrecondition(minimum=1),
                StatPrecondition(
                    stat="intelligence",
                    minimum=4,
                    reason=Rejection.insufficient_intelligence,
                    message="Not smart enough! Eating requires 4 intelligence.",
                ),
            )
        ),
        delta=StatDelta(happiness=3, energy=12, intelligence=-4),
        food_cost=1,
    ),
    "play": StatActionRule(
        preconditions=PreconditionPipeline(
            preconditions=(
                PremiumPrecondition(),
                StatPrecondition(
                    stat="energy",
                    minimum=5,
                    reason=Rejection.insufficient_energy,
                    message="Not enough energy! Play costs 5 energy.",
                ),
            )
        ),
        delta=StatDelta(happiness=15, energy=-5, intelligence=10),
    ),
    "study": StatActionRule(
        preconditions=PreconditionPipeline(
            preconditions=(
                PremiumPrecondition(),
                StatPrecondition(
                    stat="energy",
                    minimum=6,
                    reason=Rejection.insufficient_energy,
                    message="Not enough energy! Study costs 6 energy.",
                ),
            )
        ),
        delta=StatDelta(happiness=8, energy=-6, intelligence=18),
    ),
}


def clamp_stat(value: int) -> int:
    return max(STAT_MIN, min(STAT_MAX, value))


def apply_delta(pet: Pet, delta: StatDelta) -> Pet:
    # Clamp after adding, per stat, so no call can carry overflow into the next.
    return pet.model_copy(
        update={
            "happiness": clamp_stat(pet.happiness + delta.happiness),
            "energy": clamp_stat(pet.energy + delta.energy),
            "intelligence": clamp_stat(pet.intelligence + delta.intelligence),
        }
    )


def stat_changes(before: Pet, after: Pet) -> StatChanges:
    return StatChanges(
        happiness=after.happiness - before.happiness,
        energy=after.energy - before.energy,
        intelligence=after.intelligence - before.intelligence,
    )


def rule_for_action(action: str) -> StatActionRule:
    rule = STAT_ACTION_RULES.get(action)
    if rule is None:
        raise ValueError(f"Unknown action: {action}")
    return rule


def _stat_action_message(action: str, *, user: UserRecord) -> str:
    if action == "eat":
        return "Pet ate premium food!" if user.is_premium else "Pet ate successfully!"
    if action == "play":
        return "Played with pet!"
    return "Studied with pet!"


def apply_stat_action(action: StatActionName, *, user: UserRecord, pet: Pet) -> Outcome | Rejected:
    """Check preconditions for eat/play/study and apply the stat delta."""

    rule = rule_for_action(action)
    rejected = rule.preconditions.first_rejection(ctx=RuleContext(user=user, pet=pet, action=action))
    if rejected is not None:
        return rejected

    new_user = user
    if rule.food_cost:
        new_user = user.model_copy(update={"food_count": max(0, user.food_count - rule.food_cost)})

    return Outcome(
        user=new_user,
        pet=apply_delta(pet, rule.delta),
        message=_stat_action_message(action, user=user),
    )


def eat(*, user: UserRecord, pet: Pet) -> Outcome | Rejected:
    return apply_stat_action("eat", user=user, pet=pet)


def play(*, user: UserRecord, pet: Pet) -> Outcome | Rejected:
    return apply_stat_action("play", user=user, pet=pet)


def study(*, user: UserRecord, pet: Pet) -> Outcome | Rejected:
    return apply_stat_action("study", user=user, pet=pet)


def reset(*, user: UserRecord, pet: Pet) -> Outcome:
    return Outcome(
        user=user.model_copy(update={"food_count": DEFAULT_FOOD_COUNT}),
        pet=pet.model_copy(update={"happiness": DEFAULT_STAT, "energy": DEFAULT_STAT, "intelligence": DEFAULT_STAT}),
        message="Pet stats and food count reset successfully!",
    )


def purchase_food(*, user: UserRecord, pet: Pet, amount: int, price: float) -> Outcome | Rejected:
    """Credit food immediately.

    `price` is validated but not charged: there is no payment ledger yet, so
    this must sit behind a real payment authorization before going live.
    """

    if not (amount > 0 and price > 0 and math.isfinite(price)):
        return Rejected(Rejection.invalid_purchase, "Amount and price must be positive numbers")
    return Outcome(
        user=user.model_copy(update={"food_count": user.food_count + amount}),
        pet=pet,
        message=f"Successfully purchased {amount} food!",
    )


def rename(*, user: UserRecord, pet: Pet, name: str | None) -> Outcome | Rejected:
    trimmed = (name or "").strip()
    if not trimmed:
        return Rejected(Rejection.invalid_name, "Pet name is required")
    return Outcome(user=user, pet=pet.model_copy(update={"name": trimmed}), message="Pet name updated!")


def update_appearance(
    *,
    user: UserRecord,
    pet: Pet,
    pet_type: str | None,
    color: str | None,
) -> Outcome | Rejected:
    """Change pet type and/or color.

    Values are validated before entitlement: an unknown type or color is a
    400 even for a free user. rabbit/dragon and every non-default color
    need premium.
    """

    if not pet_type and not color:
        return Rejected(Rejection.invalid_appearance, "Pet type or color is required")

    new_type: PetType | None = None
    new_color: PetColor | None = None

    if pet_type:
        try:
            new_type = PetType(pet_type)
        except ValueError:
            return Rejected(Rejection.invalid_pet_type, "Invalid pet type")
    if color:
        try:
            new_color = PetColor(color)
        except ValueError:
            return Rejected(Rejection.invalid_color, "Invalid color")

    update: dict[str, object] = {}

    if new_type is not None:
        if new_type in PREMIUM_PET_TYPES and not user.is_premium:
            return Rejected(Rejection.premium_required, "Premium subscription required for rabbit and dragon pets")
        update["pet_type"] = new_type

    if new_color is not None:
        if new_color != DEFAULT_COLOR and not user.is_premium:
            return Rejected(Rejection.premium_required, "Premium subscription required for color customization")
        update["color"] = new_color

    if pet_type and color:
        message = "Pet appearance updated!"
    elif pet_type:
        message = "Pet emoji updated!"
    else:
        message = "Pet color updated!"

    return Outcome(user=user, pet=pet.model_copy(update=update), message=message)


def upgrade(*, user: UserRecord, pet: Pet) -> Outcome:
    return Outcome(
        user=user.model_copy(update={"is_premium": True}),
        pet=pet,
        message="Successfully upgraded to premium!",
    )


def downgrade(*, user: UserRecord, pet: Pet) -> Outcome:
    """Drop premium; a premium-only pet type falls back to the default type."""

    new_pet = pet
    if pet.pet_type in PREMIUM_PET_TYPES:
        new_pet = pet.model_copy(update={"pet_type": DEFAULT_PET_TYPE})
    return Outcome(
        user=user.model_copy(update={"is_premium": False}),
        pet=new_pet,
        message="Successfully downgraded to free!",
    )
