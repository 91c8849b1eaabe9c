"""Tests for iterative serving adjustment."""

import pytest

from nutrition_planner.domain.meals import Meal
from nutrition_planner.services.meal_adjust import adjust_servings_for_target
from nutrition_planner.services.servings import MIN_SERVINGS, foods_totals
from tests.conftest import make_food


def test_empty_meal_stays_empty() -> None:
    assert adjust_servings_for_target([], 500, 40) == []


def test_meal_inside_band_is_untouched() -> None:
    foods = [make_food("chicken", 165, 31), make_food("rice", 130, 2.7, 28)]

    adjusted = adjust_servings_for_target(foods, 300, 34)

    assert [food.servings for food in adjusted] == [1.0, 1.0]


def test_protein_deficit_is_closed_in_steps() -> None:
    adjusted = adjust_servings_for_target([make_food("chicken", 165, 31)], 330, 62)

    assert adjusted[0].servings == pytest.approx(2.0)
    meal = Meal(id="meal-1", name="Lunch", foods=adjusted)
    assert meal.within_tolerance(330, 62, 0.05)


def test_calorie_gap_is_filled_by_carb_foods_first() -> None:
    foods = [make_food("chicken", 165, 31), make_food("sugar", 387, 0, 100)]

    adjusted = adjust_servings_for_target(foods, 700, 31)

    assert adjusted[0].servings == 1.0
    assert adjusted[1].servings == pytest.approx(1 + 148 / 387)
    assert foods_totals(adjusted).calories == pytest.approx(700)


def test_oversized_meal_is_reduced_but_not_below_floor() -> None:
    foods = [make_food("chicken", 165, 31, servings=3)]

    adjusted = adjust_servings_for_target(foods, 10, 2)

    assert adjusted[0].servings == MIN_SERVINGS


def test_unreachable_targets_terminate() -> None:
    foods = [make_food("olive-oil", 884, 0, 0, 100), make_food("water", 0, 0)]

    adjusted = adjust_servings_for_target(foods, 50_000, 500)

    assert len(adjusted) == 2
    assert all(food.servings >= MIN_SERVINGS for food in adjusted)


def test_input_list_is_not_mutated() -> None:
    foods = [make_food("chicken", 165, 31)]

    adjust_servings_for_target(foods, 330, 62)

    assert foods[0].servings == 1.0


def test_reducing_protein_trims_lowest_protein_food_first() -> None:
    foods = [
        make_food("chicken", 165, 31, servings=2),
        make_food("rice", 130, 2.7, 28, servings=2),
    ]

    adjusted = adjust_servings_for_target(foods, 460, 62)

    assert adjusted[0].servings == 2.0
    assert adjusted[1].servings == pytest.approx(1.0)


def test_small_protein_gap_is_spread_over_two_sources() -> None:
    # Each source would need under 0.1 servings, so both get half a serving
    # and the overshoot is trimmed back afterwards.
    foods = [
        make_food("whey", 400, 100, servings=0.5),
        make_food("steak", 500, 100, servings=0.5),
    ]

    adjusted = adjust_servings_for_target(foods, 460, 108)

    assert adjusted[0].servings == pytest.approx(0.83)
    assert adjusted[1].servings == MIN_SERVINGS
    assert foods_totals(adjusted).protein == pytest.approx(108)


def test_meal_over_both_targets_is_scaled_by_smaller_ratio() -> None:
    foods = [make_food("steak", 1000, 100), make_food("oil", 100, 0, 0, 11)]

    adjusted = adjust_servings_for_target(foods, 1000, 92)

    assert adjusted[0].servings == pytest.approx(1050 / 1100)
    assert adjusted[1].servings == pytest.approx(1050 / 1100)


def test_protein_guard_restores_protein_after_scale_down() -> None:
    foods = [make_food("steak", 1000, 100), make_food("butter", 1000, 0, 0, 111)]

    adjusted = adjust_servings_for_target(foods, 1000, 92)

    assert adjusted[0].servings == pytest.approx(0.92)
    assert adjusted[1].servings == pytest.approx(0.525)
    assert foods_totals(adjusted).protein == pytest.approx(92)


def test_correction_scales_only_protein_sources_when_protein_is_short() -> None:
    foods = [make_food("chicken", 165, 31), make_food("sugar", 387, 0, 100)]

    adjusted = adjust_servings_for_target(foods, 10_000, 1000)

    # 10 steps of 0.75, then +1.0 boost, +1.0 scaling cap and +1.25 guard.
    assert adjusted[0].servings == pytest.approx(11.75)
    assert adjusted[1].servings == 1.0


def test_correction_scales_all_foods_when_protein_is_met() -> None:
    foods = [make_food("chicken", 165, 31), make_food("sugar", 387, 0, 100)]

    adjusted = adjust_servings_for_target(foods, 10_000, 31)

    # 10 steps of 0.5 on sugar, then every food gains at most half a serving.
    assert adjusted[0].servings == pytest.approx(1.5)
    assert adjusted[1].servings == pytest.approx(6.5)
