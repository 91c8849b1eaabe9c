"""Pydantic request and response models for the HTTP API."""

from datetime import date
from typing import Literal

from pydantic import BaseModel, Field, model_validator

from nutrition_planner.domain.meals import (
    FoodItem,
    Meal,
    MealPlan,
    MealTotals,
    NutrientProfile,
)
from nutrition_planner.domain.profile import (
    DailyTargets,
    Goal,
    Height,
    Macros,
    UserProfile,
)
from nutrition_planner.services.targets import MAX_BODY_FAT_PERCENT


class ProfilePayload(BaseModel):
    """Body metrics; height_cm when metric, feet and inches otherwise."""

    age: int | None = Field(default=None, gt=0)
    weight: float | None = Field(default=None, gt=0)
    height_cm: float | None = Field(default=None, gt=0)
    height_feet: float | None = Field(default=None, ge=0)
    height_inches: float | None = Field(default=None, ge=0)
    body_fat_percentage: float | None = Field(default=None, ge=0, lt=100)
    gender: Literal["male", "female"] = "male"
    activity_level: str | None = None
    use_metric: bool = True

    def to_domain(self) -> UserProfile:
        height: float | Height | None = self.height_cm
        if not self.use_metric and (self.height_feet or self.height_inches):
            height = Height(feet=self.height_feet, inches=self.height_inches)
        return UserProfile(
            age=self.age,
            weight=self.weight,
            height=height,
            activity_level=self.activity_level,
            gender=self.gender,
            body_fat_percentage=self.body_fat_percentage,
            use_metric=self.use_metric,
        )


class GoalPayload(BaseModel):
    goal_type: Literal["weight", "bodyFat"] | None = None
    goal_value: float | None = Field(default=None, gt=0)
    goal_date: date | None = None
    goal_pace: str = "moderate"

    @model_validator(mode="after")
    def check_body_fat_goal(self) -> "GoalPayload":
        if (
            self.goal_type == "bodyFat"
            and self.goal_value is not None
            and self.goal_value >= MAX_BODY_FAT_PERCENT
        ):
            raise ValueError("Body fat goal must be below 100%")
        return self

    def to_domain(self) -> Goal:
        return Goal(
            goal_type=self.goal_type,
            goal_value=self.goal_value,
            goal_date=self.goal_date,
            goal_pace=self.goal_pace,
        )


class MacrosPayload(BaseModel):
    protein: int
    carbs: int
    fats: int


class DailyTargetsPayload(BaseModel):
    tdee: int
    daily_calories: int | None = None
    is_weight_gain: bool = False
    high_surplus_warning: bool = False
    macros: MacrosPayload | None = None
    adjustment_percent: float | None = None
    deficit_percent: float | None = None

    @classmethod
    def from_domain(cls, targets: DailyTargets) -> "DailyTargetsPayload":
        macros = None
        if targets.macros is not None:
            macros = MacrosPayload(
                protein=targets.macros.protein,
                carbs=targets.macros.carbs,
                fats=targets.macros.fats,
            )
        return cls(
            tdee=targets.tdee,
            daily_calories=targets.daily_calories,
            is_weight_gain=targets.is_weight_gain,
            high_surplus_warning=targets.high_surplus_warning,
            macros=macros,
            adjustment_percent=targets.adjustment_percent,
            deficit_percent=targets.deficit_percent,
        )

    def to_domain(self) -> DailyTargets:
        macros = None
        if self.macros is not None:
            macros = Macros(
                protein=self.macros.protein,
                carbs=self.macros.carbs,
                fats=self.macros.fats,
            )
        return DailyTargets(
            tdee=self.tdee,
            daily_calories=self.daily_calories,
            is_weight_gain=self.is_weight_gain,
            high_surplus_warning=self.high_surplus_warning,
            macros=macros,
            adjustment_percent=self.adjustment_percent,
            deficit_percent=self.deficit_percent,
        )


class TargetsRequest(BaseModel):
    profile: ProfilePayload
    goal: GoalPayload | None = None
    today: date | None = None


class TargetsResponse(BaseModel):
    targets: DailyTargetsPayload | None


class RecalculationResponse(BaseModel):
    targets: DailyTargetsPayload | None
    changed: bool
    warnings: list[str]


class NutrientsPayload(BaseModel):
    calories: float = Field(default=0.0, ge=0)
    protein: float = Field(default=0.0, ge=0)
    carbs: float = Field(default=0.0, ge=0)
    fats: float = Field(default=0.0, ge=0)
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
    net_carbs: float | None = None

    @classmethod
    def from_domain(cls, nutrients: NutrientProfile) -> "NutrientsPayload":
        return cls(
            calories=nutrients.calories,
            protein=nutrients.protein,
            carbs=nutrients.carbs,
            fats=nutrients.fats,
            fiber=nutrients.fiber,
            sugars=nutrients.sugars,
            saturated_fat=nutrients.saturated_fat,
            trans_fat=nutrients.trans_fat,
            cholesterol=nutrients.cholesterol,
            sodium=nutrients.sodium,
            calcium=nutrients.calcium,
            iron=nutrients.iron,
            potassium=nutrients.potassium,
            zinc=nutrients.zinc,
            vitamin_a=nutrients.vitamin_a,
            vitamin_c=nutrients.vitamin_c,
            vitamin_d=nutrients.vitamin_d,
            net_carbs=nutrients.net_carbs,
        )

    def to_domain(self) -> NutrientProfile:
        return NutrientProfile(**self.model_dump(exclude={"net_carbs"}))


class FoodPayload(BaseModel):
    """A food with per-serving nutrients; ``nutrients`` is filled on output."""

    id: str
    name: str
    per_serving: NutrientsPayload
    servings: float = Field(default=1.0, gt=0)
    serving_size_g: float | None = None
    serving_size: str | None = None
    nutrients: NutrientsPayload | None = None

    @classmethod
    def from_domain(cls, food: FoodItem) -> "FoodPayload":
        return cls(
            id=food.id,
            name=food.name,
            per_serving=NutrientsPayload.from_domain(food.per_serving),
            servings=round(food.servings, 2),
            serving_size_g=food.serving_size_g,
            serving_size=food.serving_size,
            nutrients=NutrientsPayload.from_domain(food.nutrients),
        )

    def to_domain(self) -> FoodItem:
        return FoodItem(
            id=self.id,
            name=self.name,
            per_serving=self.per_serving.to_domain(),
            servings=self.servings,
            serving_size_g=self.serving_size_g,
            serving_size=self.serving_size,
        )


class TotalsPayload(BaseModel):
    calories: float
    protein: float
    carbs: float
    fats: float
    fiber: float
    net_carbs: float

    @classmethod
    def from_domain(cls, totals: MealTotals) -> "TotalsPayload":
        return cls(
            calories=round(totals.calories),
            protein=round(totals.protein, 1),
            carbs=round(totals.carbs, 1),
            fats=round(totals.fats, 1),
            fiber=round(totals.fiber, 1),
            net_carbs=round(totals.net_carbs, 1),
        )


class MealPayload(BaseModel):
    id: str
    name: str
    foods: list[FoodPayload]
    is_free_meal: bool = False
    totals: TotalsPayload | None = None

    @classmethod
    def from_domain(cls, meal: Meal) -> "MealPayload":
        return cls(
            id=meal.id,
            name=meal.name,
            foods=[FoodPayload.from_domain(food) for food in meal.foods],
            is_free_meal=meal.is_free_meal,
            totals=TotalsPayload.from_domain(meal.totals),
        )

    def to_domain(self) -> Meal:
        return Meal(
            id=self.id,
            name=self.name,
            foods=[food.to_domain() for food in self.foods],
            is_free_meal=self.is_free_meal,
        )


class MealPlanPayload(BaseModel):
    meals: list[MealPayload]
    target_calories: int
    target_protein: int
    target_carbs: int = 0
    target_fats: int = 0
    tolerance: float = Field(default=0.05, gt=0, lt=1)
    free_meal_calories: float | None = None
    totals: TotalsPayload | None = None

    @classmethod
    def from_domain(cls, plan: MealPlan) -> "MealPlanPayload":
        return cls(
            meals=[MealPayload.from_domain(meal) for meal in plan.meals],
            target_calories=plan.target_calories,
            target_protein=plan.target_protein,
            target_carbs=plan.target_carbs,
            target_fats=plan.target_fats,
            tolerance=plan.tolerance,
            free_meal_calories=plan.free_meal_calories,
            totals=TotalsPayload.from_domain(plan.totals),
        )

    def to_domain(self) -> MealPlan:
        return MealPlan(
            meals=[meal.to_domain() for meal in self.meals],
            target_calories=self.target_calories,
            target_protein=self.target_protein,
            target_carbs=self.target_carbs,
            target_fats=self.target_fats,
            tolerance=self.tolerance,
            free_meal_calories=self.free_meal_calories,
        )


class MealPlanRequest(BaseModel):
    foods: list[FoodPayload] = Field(default_factory=list)
    fdc_ids: list[int] = Field(default_factory=list)
    targets: DailyTargetsPayload
    meal_count: int | None = Field(default=None, ge=1, le=8)
    include_free_meal: bool = False
    free_meal_calories: float | None = Field(default=None, ge=0)
    seed: int | None = None


class RegenerateMealRequest(BaseModel):
    plan: MealPlanPayload
    meal_id: str
    foods: list[FoodPayload]
    seed: int | None = None


class FoodListResponse(BaseModel):
    foods: list[FoodPayload]
