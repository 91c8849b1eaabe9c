"""Iterative serving adjustment toward meal calorie and protein targets.

``adjust_servings_for_target`` nudges one food per iteration, in priority
order:

1. protein below the band,
2. calories below the band,
3. protein above the band,
4. calories above the band.

After at most ``MAX_ITERATIONS`` passes a single correction pass scales the
meal proportionally, then a last guard tops up protein. Protein adherence
wins over calorie precision throughout. The result is best effort and may
still sit outside the band for awkward food pools.
"""

import logging
from dataclasses import dataclass

from nutrition_planner.domain.meals import FoodItem, MealTotals
from nutrition_planner.services.servings import (
    MIN_SERVINGS,
    foods_totals,
    recalculate_servings,
)

MAX_ITERATIONS = 10
MIN_STEP = 0.1
PROTEIN_STEP = 0.75
CALORIE_STEP = 0.5
DECREASE_STEP = 0.25
SIGNIFICANT_PROTEIN_G = 5.0
MAX_SPREAD_SOURCES = 2
CORRECTION_PROTEIN_BOOST = 1.0
CORRECTION_CALORIE_BOOST = 0.5
FINAL_PROTEIN_BOOST = 1.25

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Band:
    target_calories: float
    target_protein: float
    tolerance: float

    @property
    def calories_min(self) -> float:
        return self.target_calories * (1 - self.tolerance)

    @property
    def calories_max(self) -> float:
        return self.target_calories * (1 + self.tolerance)

    @property
    def protein_min(self) -> float:
        return self.target_protein * (1 - self.tolerance)

    @property
    def protein_max(self) -> float:
        return self.target_protein * (1 + self.tolerance)

    def contains(self, totals: MealTotals) -> bool:
        return (
            self.calories_min <= totals.calories <= self.calories_max
            and self.protein_min <= totals.protein <= self.protein_max
        )


def adjust_servings_for_target(
    meal_foods: list[FoodItem],
    target_calories: float,
    target_protein: float,
    tolerance: float = 0.05,
) -> list[FoodItem]:
    """Return the foods with servings moved toward both targets."""
    if not meal_foods:
        return []

    foods = list(meal_foods)
    band = _Band(target_calories, target_protein, tolerance)
    if band.contains(foods_totals(foods)):
        return foods

    # Highest protein share of calories first.
    order = sorted(range(len(foods)), key=lambda i: foods[i].protein_ratio, reverse=True)

    iterations = 0
    while iterations < MAX_ITERATIONS:
        iterations += 1
        totals = foods_totals(foods)
        if band.contains(totals):
            break
        if totals.protein < band.protein_min:
            changed = _raise_protein(foods, order, target_protein - totals.protein)
        elif totals.calories < band.calories_min:
            changed = _raise_calories(foods, order, target_calories - totals.calories)
        elif totals.protein > band.protein_max:
            changed = _lower_protein(foods, order, totals.protein - target_protein)
        elif totals.calories > band.calories_max:
            changed = _lower_calories(foods, order, totals.calories - target_calories)
        else:
            changed = False
        if not changed:
            break

    _correct(foods, order, band)
    _guard_protein(foods, order, band)

    final = foods_totals(foods)
    _logger.debug(
        "Servings adjusted in %s iterations: calories=%.1f/%.1f protein=%.1f/%.1f",
        iterations,
        final.calories,
        target_calories,
        final.protein,
        target_protein,
    )
    return foods


def _increase(foods: list[FoodItem], index: int, amount: float) -> None:
    food = foods[index]
    foods[index] = recalculate_servings(food, food.servings + amount)


def _decrease(foods: list[FoodItem], index: int, amount: float) -> None:
    food = foods[index]
    foods[index] = recalculate_servings(food, food.servings - amount)


def _is_carb_or_fat_leaning(food: FoodItem) -> bool:
    base = food.per_serving
    return base.protein * 4 < base.carbs * 4 + base.fats * 9


def _raise_protein(foods: list[FoodItem], order: list[int], needed: float) -> bool:
    for index in order:
        per_serving = foods[index].per_serving.protein
        if per_serving <= 0:
            continue
        additional = needed / per_serving
        if additional > MIN_STEP:
            _increase(foods, index, min(additional, PROTEIN_STEP))
            return True

    changed = False
    sources = [i for i in order if foods[i].per_serving.protein > SIGNIFICANT_PROTEIN_G]
    for index in sources[:MAX_SPREAD_SOURCES]:
        per_serving = foods[index].per_serving.protein
        _increase(foods, index, max(0.5, min(PROTEIN_STEP, needed / per_serving)))
        changed = True
    return changed


def _raise_calories(foods: list[FoodItem], order: list[int], needed: float) -> bool:
    reverse = list(reversed(order))
    candidates = [i for i in reverse if _is_carb_or_fat_leaning(foods[i])]
    fallback = [
        i for i in order if i not in candidates and foods[i].per_serving.protein > 0
    ]
    for group in (candidates, fallback):
        for index in group:
            per_serving = foods[index].per_serving.calories
            if per_serving <= 0:
                continue
            additional = needed / per_serving
            if additional > MIN_STEP:
                _increase(foods, index, min(additional, CALORIE_STEP))
                return True
    return False


def _lower_protein(foods: list[FoodItem], order: list[int], excess: float) -> bool:
    for index in reversed(order):
        food = foods[index]
        per_serving = food.per_serving.protein
        if per_serving <= 0 or food.servings <= MIN_SERVINGS:
            continue
        reduction = excess / per_serving
        if reduction > MIN_STEP:
            _decrease(foods, index, min(reduction, DECREASE_STEP))
            return True
    return False


def _lower_calories(foods: list[FoodItem], order: list[int], excess: float) -> bool:
    for index in reversed(order):
        food = foods[index]
        per_serving = food.per_serving.calories
        if per_serving <= 0 or food.servings <= MIN_SERVINGS:
            continue
        reduction = excess / per_serving
        if reduction > MIN_STEP:
            _decrease(foods, index, min(reduction, DECREASE_STEP))
            return True
    return False


def _boost_best_protein(
    foods: list[FoodItem], order: list[int], needed: float, cap: float
) -> None:
    for index in order:
        per_serving = foods[index].per_serving.protein
        if per_serving > 0:
            _increase(foods, index, min(cap, needed / per_serving))
            return


def _correct(foods: list[FoodItem], order: list[int], band: _Band) -> None:
    totals = foods_totals(foods)
    if totals.protein < band.protein_min:
        _boost_best_protein(
            foods, order, band.target_protein - totals.protein, CORRECTION_PROTEIN_BOOST
        )
        totals = foods_totals(foods)

    if totals.calories < band.calories_min:
        if totals.calories <= 0:
            return
        ratio = band.calories_min / totals.calories
        protein_sources = [
            i for i in order if foods[i].per_serving.protein > SIGNIFICANT_PROTEIN_G
        ]
        if totals.protein < band.protein_min and protein_sources:
            targets, cap = protein_sources, CORRECTION_PROTEIN_BOOST
        else:
            targets, cap = list(range(len(foods))), CORRECTION_CALORIE_BOOST
        for index in targets:
            servings = foods[index].servings
            foods[index] = recalculate_servings(
                foods[index], min(servings * ratio, servings + cap)
            )
    elif totals.calories > band.calories_max and totals.protein > band.protein_max:
        factor = min(
            band.calories_max / totals.calories, band.protein_max / totals.protein
        )
        for index, food in enumerate(foods):
            foods[index] = recalculate_servings(food, food.servings * factor)


def _guard_protein(foods: list[FoodItem], order: list[int], band: _Band) -> None:
    totals = foods_totals(foods)
    if totals.protein < band.protein_min:
        _boost_best_protein(
            foods, order, band.target_protein - totals.protein, FINAL_PROTEIN_BOOST
        )
