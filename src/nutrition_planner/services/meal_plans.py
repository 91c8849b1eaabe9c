"""Meal plan generation from a food pool and daily targets."""

import logging
import math
import random
from dataclasses import dataclass, field, replace
from uuid import uuid4

from nutrition_planner.domain.meals import (
    FREE_MEAL_ID,
    FREE_MEAL_NAME,
    FoodItem,
    Meal,
    MealPlan,
    MealTotals,
    NutrientProfile,
)
from nutrition_planner.domain.profile import DailyTargets
from nutrition_planner.services.meal_adjust import adjust_servings_for_target
from nutrition_planner.services.metabolism import round_half_up
from nutrition_planner.services.servings import calculate_servings

MEAL_NAMES = ("Breakfast", "Lunch", "Dinner", "Snack")
FREE_MEAL_SHARE = 0.2
FILL_SHARE = 0.8
FOODS_PER_MEAL_ESTIMATE = 3
LARGE_DAY_CALORIES = 1800

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MealBudget:
    """Calories and macro grams available to a meal or to the whole day."""

    calories: float
    protein: float
    carbs: float = 0.0
    fats: float = 0.0

    def remaining_after(self, used: MealTotals) -> "MealBudget":
        return MealBudget(
            calories=max(0.0, self.calories - used.calories),
            protein=max(0.0, self.protein - used.protein),
            carbs=max(0.0, self.carbs - used.carbs),
            fats=max(0.0, self.fats - used.fats),
        )

    def split(self, meal_count: int) -> "MealBudget":
        return MealBudget(
            calories=math.floor(self.calories / meal_count),
            protein=math.floor(self.protein / meal_count),
            carbs=math.floor(self.carbs / meal_count),
            fats=math.floor(self.fats / meal_count),
        )


def meal_name(index: int) -> str:
    if index < len(MEAL_NAMES):
        return MEAL_NAMES[index]
    return f"Meal {index + 1}"


def default_meal_count(available_calories: float) -> int:
    return 4 if available_calories > LARGE_DAY_CALORIES else 3


def daily_budget(targets: DailyTargets) -> MealBudget:
    """Budget for a day; falls back to TDEE when no goal targets exist."""
    calories = targets.daily_calories or targets.tdee
    if targets.macros is None:
        return MealBudget(calories=calories, protein=0)
    return MealBudget(
        calories=calories,
        protein=targets.macros.protein,
        carbs=targets.macros.carbs,
        fats=targets.macros.fats,
    )


def free_meal_totals(
    daily_calories: float, free_meal_calories: float | None = None
) -> MealTotals:
    """Reserve at most a fifth of the day with a 20/50/30 macro split."""
    cap = daily_calories * FREE_MEAL_SHARE
    calories = cap if free_meal_calories is None else min(free_meal_calories, cap)
    return MealTotals(
        calories=calories,
        protein=round_half_up(calories * 0.2 / 4),
        carbs=round_half_up(calories * 0.5 / 4),
        fats=round_half_up(calories * 0.3 / 9),
    )


def build_free_meal(totals: MealTotals) -> Meal:
    food = FoodItem(
        id="free-choice",
        name="Your choice",
        per_serving=NutrientProfile(
            calories=totals.calories,
            protein=totals.protein,
            carbs=totals.carbs,
            fats=totals.fats,
        ),
        servings=1.0,
        serving_size="Your choice",
    )
    return Meal(id=FREE_MEAL_ID, name=FREE_MEAL_NAME, foods=[food], is_free_meal=True)


def partition_foods(foods: list[FoodItem], meal_count: int) -> list[list[FoodItem]]:
    """Split foods into ``meal_count`` contiguous slices of near-equal size."""
    size = len(foods)
    return [
        foods[index * size // meal_count : (index + 1) * size // meal_count]
        for index in range(meal_count)
    ]


def fill_meal(foods: list[FoodItem], budget: MealBudget) -> list[FoodItem]:
    """Greedily size foods until 80% of the meal's calories are covered."""
    selected: list[FoodItem] = []
    accumulated = 0.0
    for food in foods:
        if accumulated >= budget.calories * FILL_SHARE:
            break
        servings = calculate_servings(
            food,
            budget.protein / FOODS_PER_MEAL_ESTIMATE,
            budget.calories / FOODS_PER_MEAL_ESTIMATE,
        )
        portion = food.with_servings(servings)
        selected.append(portion)
        accumulated += portion.calories
    return selected


def assemble_meal(
    foods: list[FoodItem], budget: MealBudget, name: str, tolerance: float
) -> Meal:
    filled = fill_meal(foods, budget)
    adjusted = adjust_servings_for_target(
        filled, budget.calories, budget.protein, tolerance
    )
    return Meal(id=f"meal-{uuid4().hex[:12]}", name=name, foods=adjusted)


def generate_plan(  # noqa: PLR0913
    foods: list[FoodItem],
    targets: DailyTargets,
    meal_count: int | None = None,
    include_free_meal: bool = False,
    rng: random.Random | None = None,
    free_meal_calories: float | None = None,
    tolerance: float = 0.05,
) -> MealPlan:
    """Build a fresh meal plan from a food pool.

    The pool is shuffled and split so each meal draws from its own slice;
    the serving adjustment then pulls every meal toward its share of the day.
    """
    rng = rng or random.Random()
    day = daily_budget(targets)
    available = day
    free_meal = None
    if include_free_meal:
        free_meal = free_meal_totals(day.calories, free_meal_calories)
        available = day.remaining_after(free_meal)

    count = meal_count if meal_count and meal_count > 0 else None
    count = count or default_meal_count(available.calories)
    per_meal = available.split(count)

    pool = list(foods)
    rng.shuffle(pool)
    meals = [
        assemble_meal(chunk, per_meal, meal_name(index), tolerance)
        for index, chunk in enumerate(partition_foods(pool, count))
    ]
    if free_meal is not None:
        meals.append(build_free_meal(free_meal))

    _logger.info(
        "Generated meal plan: meals=%s foods=%s free_meal=%s",
        count,
        len(pool),
        include_free_meal,
    )
    return MealPlan(
        meals=meals,
        target_calories=int(day.calories),
        target_protein=int(day.protein),
        target_carbs=int(day.carbs),
        target_fats=int(day.fats),
        tolerance=tolerance,
        free_meal_calories=free_meal.calories if free_meal else None,
    )


def regenerate_meal(
    plan: MealPlan,
    meal_id: str,
    foods: list[FoodItem],
    rng: random.Random | None = None,
) -> MealPlan:
    """Rebuild one meal against what the rest of the plan leaves over.

    The free meal and unknown ids leave the plan unchanged.
    """
    index = plan.find_meal(meal_id)
    if index is None or plan.meals[index].is_free_meal:
        return plan

    used = MealTotals()
    for position, meal in enumerate(plan.meals):
        if position != index:
            used = used + meal.totals
    day = MealBudget(
        calories=plan.target_calories,
        protein=plan.target_protein,
        carbs=plan.target_carbs,
        fats=plan.target_fats,
    )
    budget = day.remaining_after(used)

    rng = rng or random.Random()
    pool = list(foods)
    rng.shuffle(pool)
    meals = list(plan.meals)
    meals[index] = assemble_meal(pool, budget, meals[index].name, plan.tolerance)
    _logger.info("Regenerated meal %s as %s", meal_id, meals[index].id)
    return replace(plan, meals=meals)


@dataclass
class MealPlanService:
    """Meal plan operations with a pool size requirement and a shared RNG."""

    min_foods: int = 10
    tolerance: float = 0.05
    rng: random.Random = field(default_factory=random.Random)

    def has_enough_foods(self, foods: list[FoodItem]) -> bool:
        return len({food.id for food in foods}) >= self.min_foods

    def generate(
        self,
        foods: list[FoodItem],
        targets: DailyTargets,
        meal_count: int | None = None,
        include_free_meal: bool = False,
        free_meal_calories: float | None = None,
        rng: random.Random | None = None,
    ) -> MealPlan:
        return generate_plan(
            foods,
            targets,
            meal_count=meal_count,
            include_free_meal=include_free_meal,
            rng=rng or self.rng,
            free_meal_calories=free_meal_calories,
            tolerance=self.tolerance,
        )

    def regenerate(
        self,
        plan: MealPlan,
        meal_id: str,
        foods: list[FoodItem],
        rng: random.Random | None = None,
    ) -> MealPlan:
        return regenerate_meal(plan, meal_id, foods, rng=rng or self.rng)
