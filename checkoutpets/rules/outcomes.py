from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from checkoutpets.api.models import Pet, UserRecord


class Rejection(StrEnum):
    insufficient_food = "InsufficientFood"
    insufficient_intelligence = "InsufficientIntelligence"
    insufficient_energy = "InsufficientEnergy"
    premium_required = "PremiumRequired"
    invalid_pet_type = "InvalidPetType"
    invalid_color = "InvalidColor"
    invalid_appearance = "InvalidAppearance"
    invalid_name = "InvalidName"
    invalid_purchase = "InvalidPurchase"
    not_found = "NotFound"


@dataclass(frozen=True, slots=True)
class Rejected:
    """Why an action was refused. Returned, never raised, by the rules."""

    reason: Rejection
    message: str


@dataclass(frozen=True, slots=True)
class Outcome:
    """New user/pet state after an action was accepted."""

    user: UserRecord
    pet: Pet
    message: str
