"""Serving size helpers shared by meal generation and adjustment."""

from nutrition_planner.domain.meals import FoodItem, MealTotals

MIN_SERVINGS = 0.25


def calculate_servings(
    food: FoodItem, target_protein: float, target_calories: float
) -> float:
    """Estimate an initial serving multiplier for one food in a meal.

    Protein-bearing foods are sized toward ``target_protein`` grams, others
    toward ``target_calories`` kcal.
    """
    if food.per_serving.protein > 0:
        return max(0.5, min(3.0, target_protein / food.per_serving.protein))
    if food.per_serving.calories > 0:
        return max(0.5, min(2.0, target_calories / food.per_serving.calories))
    return 1.0


def recalculate_servings(food: FoodItem, servings: float) -> FoodItem:
    """Return the food at ``servings``, never below the serving floor."""
    return food.with_servings(max(MIN_SERVINGS, servings))


def foods_totals(foods: list[FoodItem]) -> MealTotals:
    total = MealTotals()
    for food in foods:
        total = total + MealTotals.of_food(food)
    return total
