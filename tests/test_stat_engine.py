from __future__ import annotations

import itertools

import pytest

from checkoutpets.api.models import PetColor, PetType
from checkoutpets.rules import engine
from checkoutpets.rules.outcomes import Outcome, Rejected, Rejection


def test_eat_without_food_is_rejected_and_changes_nothing(make_user, make_pet) -> None:
    user = make_user(food_count=0)
    pet = make_pet()

    result = engine.eat(user=user, pet=pet)

    assert isinstance(result, Rejected)
    assert result.reason == Rejection.insufficient_food
    assert user.food_count == 0
    assert (pet.happiness, pet.energy, pet.intelligence) == (50, 50, 50)


def test_eat_with_low_intelligence_is_rejected(make_user, make_pet) -> None:
    result = engine.eat(user=make_user(food_count=7), pet=make_pet(intelligence=3))

    assert isinstance(result, Rejected)
    assert result.reason == Rejection.insufficient_intelligence


def test_eat_spends_one_food_and_applies_deltas(make_user, make_pet) -> None:
    result = engine.eat(user=make_user(food_count=10), pet=make_pet())

    assert isinstance(result, Outcome)
    assert result.user.food_count == 9
    assert result.pet.energy == 62
    assert result.pet.happiness == 53
    assert result.pet.intelligence == 46
    assert result.message == "Pet ate successfully!"


def test_eat_clamps_each_stat(make_user, make_pet) -> None:
    result = engine.eat(user=make_user(food_count=1), pet=make_pet(happiness=99, energy=95, intelligence=4))

    assert isinstance(result, Outcome)
    assert result.pet.happiness == 100
    assert result.pet.energy == 100
    assert result.pet.intelligence == 0
    assert result.user.food_count == 0


def test_eat_is_same_for_premium_but_message_differs(make_user, make_pet) -> None:
    free = engine.eat(user=make_user(), pet=make_pet())
    premium = engine.eat(user=make_user(is_premium=True), pet=make_pet())

    assert isinstance(free, Outcome) and isinstance(premium, Outcome)
    assert free.pet == premium.pet
    assert premium.message == "Pet ate premium food!"


@pytest.mark.parametrize("action", ["play", "study"])
def test_premium_actions_reject_free_users_even_with_energy(make_user, make_pet, action: str) -> None:
    result = engine.apply_stat_action(action, user=make_user(), pet=make_pet(energy=100))  # type: ignore[arg-type]

    assert isinstance(result, Rejected)
    assert result.reason == Rejection.premium_required


def test_play_energy_threshold(make_user, make_pet) -> None:
    user = make_user(is_premium=True)

    low = engine.play(user=user, pet=make_pet(energy=4))
    assert isinstance(low, Rejected)
    assert low.reason == Rejection.insufficient_energy

    ok = engine.play(user=user, pet=make_pet(energy=5, happiness=20, intelligence=30))
    assert isinstance(ok, Outcome)
    assert ok.pet.energy == 0
    assert ok.pet.happiness == 35
    assert ok.pet.intelligence == 40


def test_study_at_exact_energy_cost(make_user, make_pet) -> None:
    result = engine.study(user=make_user(is_premium=True), pet=make_pet(energy=6, happiness=10, intelligence=10))

    assert isinstance(result, Outcome)
    assert result.pet.energy == 0
    assert result.pet.intelligence == 28
    assert result.pet.happiness == 18


def test_study_below_energy_cost_is_rejected(make_user, make_pet) -> None:
    result = engine.study(user=make_user(is_premium=True), pet=make_pet(energy=5))

    assert isinstance(result, Rejected)
    assert result.message == "Not enough energy! Study costs 6 energy."


def test_reset_ignores_prior_state(make_user, make_pet) -> None:
    result = engine.reset(
        user=make_user(food_count=0),
        pet=make_pet(happiness=0, energy=100, intelligence=3),
    )

    assert (result.pet.happiness, result.pet.energy, result.pet.intelligence) == (50, 50, 50)
    assert result.user.food_count == 10


@pytest.mark.parametrize(
    ("amount", "price"),
    [(0, 1), (-3, 1), (5, 0), (5, -2.5), (5, float("nan")), (5, float("inf"))],
)
def test_purchase_food_requires_positive_amount_and_price(make_user, make_pet, amount: int, price: float) -> None:
    result = engine.purchase_food(user=make_user(), pet=make_pet(), amount=amount, price=price)

    assert isinstance(result, Rejected)
    assert result.reason == Rejection.invalid_purchase


def test_purchase_food_credits_amount(make_user, make_pet) -> None:
    result = engine.purchase_food(user=make_user(food_count=2), pet=make_pet(), amount=5, price=2)

    assert isinstance(result, Outcome)
    assert result.user.food_count == 7
    assert result.message == "Successfully purchased 5 food!"


def test_rename_trims_and_rejects_blank(make_user, make_pet) -> None:
    blank = engine.rename(user=make_user(), pet=make_pet(), name="   ")
    assert isinstance(blank, Rejected)
    assert blank.reason == Rejection.invalid_name

    missing = engine.rename(user=make_user(), pet=make_pet(), name=None)
    assert isinstance(missing, Rejected)

    ok = engine.rename(user=make_user(), pet=make_pet(), name="  Rex  ")
    assert isinstance(ok, Outcome)
    assert ok.pet.name == "Rex"


def test_appearance_free_types_for_everyone(make_user, make_pet) -> None:
    result = engine.update_appearance(user=make_user(), pet=make_pet(), pet_type="dog", color=None)

    assert isinstance(result, Outcome)
    assert result.pet.pet_type == PetType.dog
    assert result.pet.color == PetColor.orange
    assert result.message == "Pet emoji updated!"


@pytest.mark.parametrize("pet_type", ["rabbit", "dragon"])
def test_appearance_premium_types_are_gated(make_user, make_pet, pet_type: str) -> None:
    free = engine.update_appearance(user=make_user(), pet=make_pet(), pet_type=pet_type, color=None)
    assert isinstance(free, Rejected)
    assert free.reason == Rejection.premium_required

    premium = engine.update_appearance(user=make_user(is_premium=True), pet=make_pet(), pet_type=pet_type, color=None)
    assert isinstance(premium, Outcome)
    assert premium.pet.pet_type == PetType(pet_type)


def test_appearance_color_requires_premium_except_default(make_user, make_pet) -> None:
    gated = engine.update_appearance(user=make_user(), pet=make_pet(), pet_type=None, color="black")
    assert isinstance(gated, Rejected)
    assert gated.reason == Rejection.premium_required

    default = engine.update_appearance(user=make_user(), pet=make_pet(color="orange"), pet_type=None, color="orange")
    assert isinstance(default, Outcome)

    premium = engine.update_appearance(user=make_user(is_premium=True), pet=make_pet(), pet_type=None, color="gold")
    assert isinstance(premium, Outcome)
    assert premium.pet.color == PetColor.gold
    assert premium.message == "Pet color updated!"


def test_appearance_rejects_unknown_values_before_gating(make_user, make_pet) -> None:
    bad_type = engine.update_appearance(user=make_user(), pet=make_pet(), pet_type="unicorn", color=None)
    assert isinstance(bad_type, Rejected)
    assert bad_type.reason == Rejection.invalid_pet_type

    bad_color = engine.update_appearance(user=make_user(), pet=make_pet(), pet_type="dragon", color="neon")
    assert isinstance(bad_color, Rejected)
    assert bad_color.reason == Rejection.invalid_color

    nothing = engine.update_appearance(user=make_user(), pet=make_pet(), pet_type=None, color="")
    assert isinstance(nothing, Rejected)
    assert nothing.reason == Rejection.invalid_appearance


def test_appearance_type_and_color_together(make_user, make_pet) -> None:
    result = engine.update_appearance(
        user=make_user(is_premium=True), pet=make_pet(), pet_type="dragon", color="white"
    )

    assert isinstance(result, Outcome)
    assert result.pet.pet_type == PetType.dragon
    assert result.pet.color == PetColor.white
    assert result.message == "Pet appearance updated!"


def test_downgrade_resets_premium_type_but_keeps_color(make_user, make_pet) -> None:
    result = engine.downgrade(user=make_user(is_premium=True), pet=make_pet(pet_type="dragon", color="gold"))

    assert result.user.is_premium is False
    assert result.pet.pet_type == PetType.cat
    assert result.pet.color == PetColor.gold


def test_downgrade_keeps_free_type(make_user, make_pet) -> None:
    result = engine.downgrade(user=make_user(is_premium=True), pet=make_pet(pet_type="bird"))

    assert result.pet.pet_type == PetType.bird


def test_upgrade_is_idempotent(make_user, make_pet) -> None:
    once = engine.upgrade(user=make_user(), pet=make_pet())
    twice = engine.upgrade(user=once.user, pet=once.pet)

    assert once.user.is_premium is True
    assert twice.user == once.user


def test_stats_stay_in_bounds_for_every_action(make_user, make_pet) -> None:
    values = [0, 3, 4, 5, 6, 50, 95, 100]
    for premium, happiness, energy, intelligence in itertools.product([False, True], values, values, values):
        user = make_user(is_premium=premium, food_count=1)
        pet = make_pet(happiness=happiness, energy=energy, intelligence=intelligence)
        for action in ("eat", "play", "study"):
            result = engine.apply_stat_action(action, user=user, pet=pet)  # type: ignore[arg-type]
            if isinstance(result, Outcome):
                for stat in (result.pet.happiness, result.pet.energy, result.pet.intelligence):
                    assert 0 <= stat <= 100
                assert result.user.food_count >= 0


def test_stat_changes_reports_clamped_delta(make_pet) -> None:
    before = make_pet(happiness=98, energy=3, intelligence=50)
    after = engine.apply_delta(before, engine.StatDelta(happiness=15, energy=-5, intelligence=10))

    changes = engine.stat_changes(before, after)

    assert (changes.happiness, changes.energy, changes.intelligence) == (2, -3, 10)


def test_unknown_stat_action_raises() -> None:
    with pytest.raises(ValueError) as e:
        engine.rule_for_action("nap")
    assert "Unknown action" in str(e.value)
