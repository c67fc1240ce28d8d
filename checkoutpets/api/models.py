from __future__ import annotations

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


STAT_MIN = 0
STAT_MAX = 100
DEFAULT_STAT = 50
DEFAULT_FOOD_COUNT = 10
DEFAULT_PET_NAME = "Buddy"


class CamelModel(BaseModel):
    """Snake_case in Python, camelCase on the wire (`isPremium`, `foodCount`, ...)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PetType(StrEnum):
    cat = "cat"
    dog = "dog"
    bird = "bird"
    rabbit = "rabbit"
    dragon = "dragon"


FREE_PET_TYPES = frozenset({PetType.cat, PetType.dog, PetType.bird})
PREMIUM_PET_TYPES = frozenset({PetType.rabbit, PetType.dragon})


class PetColor(StrEnum):
    orange = "orange"
    black = "black"
    white = "white"
    brown = "brown"
    gray = "gray"
    gold = "gold"


DEFAULT_PET_TYPE = PetType.cat
DEFAULT_COLOR = PetColor.orange


class UserPublic(CamelModel):
    id: str
    username: str
    is_premium: bool = False
    food_count: int = Field(default=DEFAULT_FOOD_COUNT, ge=0)


class UserRecord(CamelModel):
    """A user row as persisted; only `public()` ever leaves the server."""

    id: str
    username: str
    password_hash: str
    salt: str
    is_premium: bool = False
    food_count: int = Field(default=DEFAULT_FOOD_COUNT, ge=0)
    created_at: datetime

    def public(self) -> UserPublic:
        return UserPublic(
            id=self.id,
            username=self.username,
            is_premium=self.is_premium,
            food_count=self.food_count,
        )


class Pet(CamelModel):
    id: str
    name: str = DEFAULT_PET_NAME
    happiness: int = Field(default=DEFAULT_STAT, ge=STAT_MIN, le=STAT_MAX)
    energy: int = Field(default=DEFAULT_STAT, ge=STAT_MIN, le=STAT_MAX)
    intelligence: int = Field(default=DEFAULT_STAT, ge=STAT_MIN, le=STAT_MAX)
    pet_type: PetType = DEFAULT_PET_TYPE
    color: PetColor = DEFAULT_COLOR
    user_id: str


class StatChanges(CamelModel):
    happiness: int
    energy: int
    intelligence: int


# Requests. Fields the handlers validate themselves are optional here so a
# missing value produces the domain error message rather than a schema dump.


class CredentialsRequest(CamelModel):
    username: str | None = None
    password: str | None = None


class PurchaseFoodRequest(CamelModel):
    amount: int
    price: float = Field(allow_inf_nan=False)


class RenameRequest(CamelModel):
    name: str | None = None


class AppearanceRequest(CamelModel):
    pet_type: str | None = None
    color: str | None = None


# Responses.


class AuthResponse(CamelModel):
    message: str
    token: str
    user: UserPublic


class UserResponse(CamelModel):
    user: UserPublic


class UserMessageResponse(CamelModel):
    message: str
    user: UserPublic


class MessageResponse(CamelModel):
    message: str


class PetResponse(CamelModel):
    pet: Pet


class PetMessageResponse(CamelModel):
    message: str
    pet: Pet


class PetActionResponse(CamelModel):
    message: str
    pet: Pet
    user: UserPublic | None = None
    changes: StatChanges | None = None


class FoodPackage(CamelModel):
    amount: int
    price: float


class FoodPackagesResponse(CamelModel):
    packages: list[FoodPackage]


class ErrorResponse(CamelModel):
    error: str
