"""Unit conversion, BMR and TDEE helpers."""

import math

from nutrition_planner.domain.profile import Height

ACTIVITY_MULTIPLIERS = {
    "sedentary": 1.2,
    "light": 1.375,
    "moderate": 1.55,
    "active": 1.725,
    "extreme": 1.9,
}
DEFAULT_ACTIVITY_MULTIPLIER = ACTIVITY_MULTIPLIERS["sedentary"]

CM_PER_FOOT = 30.48
CM_PER_INCH = 2.54
LB_PER_KG = 2.20462


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves going up."""
    return math.floor(value + 0.5)


def height_in_cm(height: float | Height) -> float:
    """Return height in centimetres; imperial heights arrive as ``Height``."""
    if isinstance(height, Height):
        return (height.feet or 0) * CM_PER_FOOT + (height.inches or 0) * CM_PER_INCH
    return float(height)


def weight_in_kg(weight: float, use_metric: bool) -> float:
    """Return weight in kilograms regardless of the profile units."""
    if use_metric:
        return weight
    return weight / LB_PER_KG


def calculate_bmr(
    weight_kg: float,
    height_cm: float,
    age: int,
    gender: str,
    body_fat_percentage: float | None = None,
) -> float:
    """Estimate basal metabolic rate.

    Katch-McArdle is used when body fat is known since it works from lean
    mass; otherwise Mifflin-St Jeor with the gender constant.
    """
    if body_fat_percentage:
        lean_mass = weight_kg * (1 - body_fat_percentage / 100)
        return 370 + 21.6 * lean_mass

    base = 10 * weight_kg + 6.25 * height_cm - 5 * age
    if gender == "female":
        return base - 161
    return base + 5


def activity_multiplier(activity_level: str | None) -> float:
    return ACTIVITY_MULTIPLIERS.get(activity_level or "", DEFAULT_ACTIVITY_MULTIPLIER)


def calculate_tdee(bmr: float, activity_level: str | None) -> int:
    """Return total daily energy expenditure rounded to whole kcal."""
    return round_half_up(bmr * activity_multiplier(activity_level))
