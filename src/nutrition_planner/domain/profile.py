"""Domain models for user profiles, goals and daily targets."""

from dataclasses import dataclass
from datetime import date
from typing import Literal

Gender = Literal["male", "female"]
ActivityLevel = Literal["sedentary", "light", "moderate", "active", "extreme"]
GoalType = Literal["weight", "bodyFat"]
GoalPace = Literal["conservative", "moderate", "aggressive"]


@dataclass(frozen=True)
class Height:
    """Imperial height split into feet and inches."""

    feet: float | None = None
    inches: float | None = None


@dataclass(frozen=True)
class UserProfile:
    """Body metrics entered during onboarding.

    Weight is in kg when ``use_metric`` is set, otherwise in lb. Height is a
    number of centimetres when metric, otherwise a ``Height``.
    """

    age: int | None
    weight: float | None
    height: float | Height | None
    activity_level: str | None
    gender: str = "male"
    body_fat_percentage: float | None = None
    use_metric: bool = True


@dataclass(frozen=True)
class Goal:
    """Target weight or body fat with a deadline and pace."""

    goal_type: str | None
    goal_value: float | None
    goal_date: date | None
    goal_pace: str = "moderate"

    @property
    def is_complete(self) -> bool:
        """Return True when type, value and date are all present."""
        return bool(self.goal_type and self.goal_value and self.goal_date)


@dataclass(frozen=True)
class Macros:
    """Daily macronutrient targets in grams."""

    protein: int
    carbs: int
    fats: int

    @property
    def calories(self) -> int:
        """Calories implied by the macro grams."""
        return self.protein * 4 + self.carbs * 4 + self.fats * 9


@dataclass(frozen=True)
class DailyTargets:
    """Output of the targets calculator.

    Only ``tdee`` is set when the user has not configured a complete goal.
    """

    tdee: int
    daily_calories: int | None = None
    is_weight_gain: bool = False
    high_surplus_warning: bool = False
    macros: Macros | None = None
    adjustment_percent: float | None = None
    deficit_percent: float | None = None

    @property
    def has_goal_targets(self) -> bool:
        """Return True when calories and macros were computed."""
        return self.daily_calories is not None and self.macros is not None
