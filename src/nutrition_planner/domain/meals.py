"""Domain models for foods, meals and meal plans."""

from dataclasses import dataclass, field, fields, replace

FREE_MEAL_ID = "free-meal"
FREE_MEAL_NAME = "Free Meal"


@dataclass(frozen=True)
class NutrientProfile:
    """Nutrient amounts for one serving (or a scaled portion) of a food."""

    calories: float = 0.0
    protein: float = 0.0
    carbs: float = 0.0
    fats: float = 0.0
    fiber: float | None = None
    sugars: float | None = None
    saturated_fat: float | None = None
    trans_fat: float | None = None
    cholesterol: float | None = None
    sodium: float | None = None
    calcium: float | None = None
    iron: float | None = None
    potassium: float | None = None
    zinc: float | None = None
    vitamin_a: float | None = None
    vitamin_c: float | None = None
    vitamin_d: float | None = None

    @property
    def net_carbs(self) -> float:
        return max(0.0, self.carbs - (self.fiber or 0.0))

    def scaled(self, servings: float) -> "NutrientProfile":
        """Return every known nutrient multiplied by ``servings``."""
        values = {}
        for item in fields(self):
            value = getattr(self, item.name)
            if value is not None:
                values[item.name] = value * servings
        return replace(self, **values)


@dataclass(frozen=True)
class FoodItem:
    """A food with its per-serving nutrients and the servings in use."""

    id: str
    name: str
    per_serving: NutrientProfile
    servings: float = 1.0
    serving_size_g: float | None = None
    serving_size: str | None = None

    @property
    def nutrients(self) -> NutrientProfile:
        """Nutrients for the current servings, always derived from the base."""
        return self.per_serving.scaled(self.servings)

    @property
    def calories_per_serving(self) -> float:
        return self.per_serving.calories

    @property
    def protein_per_serving(self) -> float:
        return self.per_serving.protein

    @property
    def calories(self) -> float:
        return self.per_serving.calories * self.servings

    @property
    def protein(self) -> float:
        return self.per_serving.protein * self.servings

    @property
    def carbs(self) -> float:
        return self.per_serving.carbs * self.servings

    @property
    def fats(self) -> float:
        return self.per_serving.fats * self.servings

    @property
    def protein_ratio(self) -> float:
        """Protein grams per calorie, zero for calorie-free foods."""
        if self.per_serving.calories <= 0:
            return 0.0
        return self.per_serving.protein / self.per_serving.calories

    def with_servings(self, servings: float) -> "FoodItem":
        """Return a copy of the food at a new serving multiplier."""
        return replace(self, servings=servings)


@dataclass(frozen=True)
class MealTotals:
    """Summed nutrients for a meal or a plan."""

    calories: float = 0.0
    protein: float = 0.0
    carbs: float = 0.0
    fats: float = 0.0
    fiber: float = 0.0
    net_carbs: float = 0.0

    @classmethod
    def of_food(cls, food: FoodItem) -> "MealTotals":
        nutrients = food.nutrients
        return cls(
            calories=nutrients.calories,
            protein=nutrients.protein,
            carbs=nutrients.carbs,
            fats=nutrients.fats,
            fiber=nutrients.fiber or 0.0,
            net_carbs=nutrients.net_carbs,
        )

    def __add__(self, other: "MealTotals") -> "MealTotals":
        return MealTotals(
            calories=self.calories + other.calories,
            protein=self.protein + other.protein,
            carbs=self.carbs + other.carbs,
            fats=self.fats + other.fats,
            fiber=self.fiber + other.fiber,
            net_carbs=self.net_carbs + other.net_carbs,
        )


@dataclass(frozen=True)
class Meal:
    """A named group of foods; totals are derived from the foods."""

    id: str
    name: str
    foods: list[FoodItem] = field(default_factory=list)
    is_free_meal: bool = False

    @property
    def totals(self) -> MealTotals:
        total = MealTotals()
        for food in self.foods:
            total = total + MealTotals.of_food(food)
        return total

    @property
    def total_calories(self) -> float:
        return self.totals.calories

    @property
    def total_protein(self) -> float:
        return self.totals.protein

    @property
    def total_carbs(self) -> float:
        return self.totals.carbs

    @property
    def total_fats(self) -> float:
        return self.totals.fats

    def within_tolerance(
        self, target_calories: float, target_protein: float, tolerance: float
    ) -> bool:
        """Return True when calories and protein sit inside the tolerance band."""
        totals = self.totals
        return (
            target_calories * (1 - tolerance)
            <= totals.calories
            <= target_calories * (1 + tolerance)
            and target_protein * (1 - tolerance)
            <= totals.protein
            <= target_protein * (1 + tolerance)
        )


@dataclass(frozen=True)
class MealPlan:
    """Meals generated for a set of daily targets."""

    meals: list[Meal]
    target_calories: int
    target_protein: int
    target_carbs: int = 0
    target_fats: int = 0
    tolerance: float = 0.05
    free_meal_calories: float | None = None

    @property
    def totals(self) -> MealTotals:
        total = MealTotals()
        for meal in self.meals:
            total = total + meal.totals
        return total

    @property
    def free_meal(self) -> Meal | None:
        for meal in self.meals:
            if meal.is_free_meal:
                return meal
        return None

    def find_meal(self, meal_id: str) -> int | None:
        """Return the index of a meal by id."""
        for index, meal in enumerate(self.meals):
            if meal.id == meal_id:
                return index
        return None
