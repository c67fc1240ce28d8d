from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Literal

from checkoutpets.api.models import Pet, UserRecord
from checkoutpets.rules.outcomes import Rejected, Rejection


StatName = Literal["happiness", "energy", "intelligence"]


@dataclass(frozen=True, slots=True)
class RuleContext:
    """Inputs available to preconditions.

    Entitlement is read from `user` as loaded for this request; nothing is
    cached between requests.
    """

    user: UserRecord
    pet: Pet
    action: str


class Precondition(ABC):
    """A small, composable check that either passes (None) or rejects."""

    @abstractmethod
    def check(self, *, ctx: RuleContext) -> Rejected | None:
        raise NotImplementedError


@dataclass(frozen=True, slots=True)
class PremiumPrecondition(Precondition):
    message: str = "Premium subscription required"

    def check(self, *, ctx: RuleContext) -> Rejected | None:
        if ctx.user.is_premium:
            return None
        return Rejected(Rejection.premium_required, self.message)


@dataclass(frozen=True, slots=True)
class FoodPrecondition(Precondition):
    minimum: int = 1

    def check(self, *, ctx: RuleContext) -> Rejected | None:
        if ctx.user.food_count >= self.minimum:
            return None
        return Rejected(Rejection.insufficient_food, "No food available! You need to get more food.")


@dataclass(frozen=True, slots=True)
class StatPrecondition(Precondition):
    """Require `pet.<stat> >= minimum` before an action spends that stat."""

    stat: StatName
    minimum: int
    reason: Rejection
    message: str

    def check(self, *, ctx: RuleContext) -> Rejected | None:
        if getattr(ctx.pet, self.stat) >= self.minimum:
            return None
        return Rejected(self.reason, self.message)


@dataclass(frozen=True, slots=True)
class PreconditionPipeline:
    preconditions: tuple[Precondition, ...]

    def first_rejection(self, *, ctx: RuleContext) -> Rejected | None:
        for p in self.preconditions:
            rejected = p.check(ctx=ctx)
            if rejected is not None:
                return rejected
        return None
