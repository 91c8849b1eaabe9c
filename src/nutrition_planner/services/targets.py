"""Daily calorie and macro target calculation."""

import logging
import math
from dataclasses import dataclass, field, replace
from datetime import date
from typing import Protocol
from uuid import UUID

from nutrition_planner.domain.profile import DailyTargets, Goal, Macros, UserProfile
from nutrition_planner.services.body_fat import lean_mass, weight_for_target_body_fat
from nutrition_planner.services.metabolism import (
    calculate_bmr,
    calculate_tdee,
    height_in_cm,
    round_half_up,
    weight_in_kg,
)

LOSS_CALORIE_FLOOR = 1200
HIGH_SURPLUS_PERCENT = 21
SURPLUS_ADVISORY_PERCENT = 35
CALORIES_PER_KG = 7700
CALORIES_PER_LB = 3500
SMALL_WEIGHT_DIFFERENCE = 0.5
SMALL_DIFFERENCE_SURPLUS_SHARE = 0.05
MAX_BODY_FAT_PERCENT = 100

MIN_SURPLUS_CALORIES = {"aggressive": 500, "moderate": 300, "conservative": 150}
DEFAULT_MIN_SURPLUS_CALORIES = 200
GAIN_MAX_SHARE = {"aggressive": 0.35, "moderate": 0.25, "conservative": 0.15}
LOSS_PACE_SHIFT = {"aggressive": 0.05, "conservative": -0.05}

# (is_weight_gain, is_female) -> (body fat tiers, g protein per kg lean mass below them)
_PROTEIN_TIERS: dict[tuple[bool, bool], tuple[tuple[tuple[float, float], ...], float]] = {
    (False, False): (((25, 1.8), (15, 2.2)), 2.4),
    (False, True): (((32, 1.8), (23, 2.2)), 2.4),
    (True, False): (((20, 1.8), (12, 2.0)), 2.2),
    (True, True): (((28, 1.8), (20, 2.0)), 2.2),
}

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AdjustmentBounds:
    """Allowed surplus or deficit as a share of TDEE."""

    minimum: float
    maximum: float

    def clamp(self, share: float) -> float:
        return max(self.minimum, min(self.maximum, share))


def default_body_fat(gender: str | None) -> float:
    """Body fat assumed for macro and gain-bound purposes when unknown."""
    return 25.0 if gender == "female" else 15.0


def loss_bounds(
    body_fat_percentage: float | None, gender: str | None, pace: str | None
) -> AdjustmentBounds:
    """Deficit range, widened for high body fat and narrowed for lean users."""
    body_fat = body_fat_percentage or 20
    female = gender == "female"
    minimum, maximum = 0.10, 0.25
    if body_fat > (32 if female else 25):
        maximum = 0.30
    elif body_fat < (18 if female else 12):
        maximum = 0.20
    shift = LOSS_PACE_SHIFT.get(pace or "", 0.0)
    return AdjustmentBounds(minimum=minimum + shift, maximum=maximum + shift)


def gain_bounds(
    body_fat_percentage: float | None, gender: str | None, pace: str | None
) -> AdjustmentBounds:
    """Surplus range by pace, narrowed when body fat is already high."""
    body_fat = body_fat_percentage or default_body_fat(gender)
    female = gender == "female"
    maximum = GAIN_MAX_SHARE.get(pace or "", GAIN_MAX_SHARE["moderate"])
    if body_fat > (28 if female else 20):
        maximum = min(maximum, 0.20)
    elif body_fat < (18 if female else 10):
        maximum = min(maximum + 0.05, 0.35)
    return AdjustmentBounds(minimum=0.05, maximum=maximum)


def min_surplus_calories(pace: str | None) -> int:
    return MIN_SURPLUS_CALORIES.get(pace or "", DEFAULT_MIN_SURPLUS_CALORIES)


def gain_surplus_share(
    tdee: int,
    daily_adjustment: float,
    weight_difference: float,
    pace: str | None,
    bounds: AdjustmentBounds,
) -> float:
    """Resolve the surplus share for a gain goal.

    The timeline-derived surplus is raised to the pace minimum, and goals that
    are practically reached get a small fixed surplus instead.
    """
    minimum_surplus = min_surplus_calories(pace)
    share = daily_adjustment / tdee
    if tdee * share < minimum_surplus:
        share = minimum_surplus / tdee
    if weight_difference < SMALL_WEIGHT_DIFFERENCE:
        share = min(minimum_surplus, tdee * SMALL_DIFFERENCE_SURPLUS_SHARE) / tdee
    return bounds.clamp(share)


def protein_per_kg_lean_mass(
    body_fat_percentage: float, gender: str | None, is_weight_gain: bool
) -> float:
    tiers, fallback = _PROTEIN_TIERS[(is_weight_gain, gender == "female")]
    for threshold, grams in tiers:
        if body_fat_percentage > threshold:
            return grams
    return fallback


def calculate_macros(
    daily_calories: int,
    weight_kg: float,
    body_fat_percentage: float | None,
    gender: str | None,
    is_weight_gain: bool,
) -> Macros:
    """Split daily calories into protein, fat and carbohydrate grams.

    Protein is set from lean mass, fat from a fixed share of calories and
    carbs take the remainder. Fat grams move by at most 2 g so the remainder
    divides evenly into carb grams.
    """
    body_fat = body_fat_percentage or default_body_fat(gender)
    lean = lean_mass(weight_kg, body_fat)
    protein = round_half_up(
        lean * protein_per_kg_lean_mass(body_fat, gender, is_weight_gain)
    )

    fat_share = 0.30 if is_weight_gain else 0.25
    fats = round_half_up(daily_calories * fat_share / 9)
    alignment = (daily_calories - protein * 4 - fats * 9) % 4
    if alignment == 3 and fats > 0:
        alignment = -1
    fats += alignment

    carbs = (daily_calories - protein * 4 - fats * 9) // 4
    return Macros(protein=protein, carbs=max(carbs, 0), fats=fats)


def resolve_target_weight(
    profile: UserProfile, weight: float, goal_type: str | None, goal_value: float
) -> float:
    """Return the goal weight in the profile's weight unit."""
    if goal_type == "weight":
        return float(goal_value)
    current_body_fat = profile.body_fat_percentage or default_body_fat(profile.gender)
    return weight_for_target_body_fat(weight, current_body_fat, float(goal_value))


def is_reachable_goal(goal_type: str | None, goal_value: float) -> bool:
    """Return False for body fat goals of 100% or more."""
    return goal_type != "bodyFat" or goal_value < MAX_BODY_FAT_PERCENT


def surplus_percent(daily_calories: int, tdee: int) -> int:
    return math.floor((daily_calories - tdee) / tdee * 100)


def compute_targets(
    profile: UserProfile, goal: Goal | None, today: date | None = None
) -> DailyTargets | None:
    """Compute TDEE, daily calories and macros for a profile and goal.

    Returns None when age, weight, height or activity level is missing and a
    TDEE-only result when the goal is incomplete or a body fat goal is not
    below 100%.
    """
    age, weight, height = profile.age, profile.weight, profile.height
    activity_level = profile.activity_level
    if not (age and weight and height and activity_level):
        _logger.debug("Targets skipped: incomplete profile")
        return None

    weight_kg = weight_in_kg(weight, profile.use_metric)
    bmr = calculate_bmr(
        weight_kg=weight_kg,
        height_cm=height_in_cm(height),
        age=age,
        gender=profile.gender,
        body_fat_percentage=profile.body_fat_percentage,
    )
    tdee = calculate_tdee(bmr, activity_level)
    _logger.debug("Targets: bmr=%.2f tdee=%s", bmr, tdee)

    if goal is None or tdee <= 0:
        return DailyTargets(tdee=tdee)
    goal_value, goal_date = goal.goal_value, goal.goal_date
    if not (goal.goal_type and goal_value and goal_date):
        return DailyTargets(tdee=tdee)
    if not is_reachable_goal(goal.goal_type, goal_value):
        _logger.debug("Targets: body fat goal %s is out of range", goal_value)
        return DailyTargets(tdee=tdee)

    today = today or date.today()
    days_until_goal = max((goal_date - today).days, 1)
    target_weight = resolve_target_weight(profile, weight, goal.goal_type, goal_value)
    is_weight_gain = target_weight > weight
    weight_difference = abs(target_weight - weight)
    calories_per_unit = CALORIES_PER_KG if profile.use_metric else CALORIES_PER_LB
    daily_adjustment = weight_difference * calories_per_unit / days_until_goal
    pace = goal.goal_pace or "moderate"

    high_surplus_warning = False
    deficit_percent = None
    if is_weight_gain:
        bounds = gain_bounds(profile.body_fat_percentage, profile.gender, pace)
        share = gain_surplus_share(
            tdee, daily_adjustment, weight_difference, pace, bounds
        )
        daily_calories = round_half_up(tdee * (1 + share))
        high_surplus_warning = (
            surplus_percent(daily_calories, tdee) >= HIGH_SURPLUS_PERCENT
        )
    else:
        bounds = loss_bounds(profile.body_fat_percentage, profile.gender, pace)
        share = bounds.clamp(daily_adjustment / tdee)
        daily_calories = max(round_half_up(tdee * (1 - share)), LOSS_CALORIE_FLOOR)
        deficit_percent = round((tdee - daily_calories) / tdee * 100, 1)

    macros = calculate_macros(
        daily_calories,
        weight_kg,
        profile.body_fat_percentage,
        profile.gender,
        is_weight_gain,
    )
    _logger.debug(
        "Targets: gain=%s days=%s daily=%s macros=%s",
        is_weight_gain,
        days_until_goal,
        daily_calories,
        macros,
    )
    return DailyTargets(
        tdee=tdee,
        daily_calories=daily_calories,
        is_weight_gain=is_weight_gain,
        high_surplus_warning=high_surplus_warning,
        macros=macros,
        adjustment_percent=round((daily_calories - tdee) / tdee * 100, 1),
        deficit_percent=deficit_percent,
    )


class TargetsRepository(Protocol):
    """Persistence interface for computed daily targets."""

    def get_targets(self, user_id: UUID) -> DailyTargets | None:
        """Return the stored targets for a user."""

    def save_targets(self, user_id: UUID, targets: DailyTargets) -> None:
        """Store targets for a user, replacing any previous value."""


class ProfileRepository(Protocol):
    """Persistence interface for onboarding data."""

    def get_profile(self, user_id: UUID) -> UserProfile | None:
        """Return the user's body metrics."""

    def get_goal(self, user_id: UUID) -> Goal | None:
        """Return the user's goal, if configured."""


@dataclass(frozen=True)
class Recalculation:
    """Result of a recalculate command."""

    targets: DailyTargets | None
    changed: bool
    warnings: list[str] = field(default_factory=list)


@dataclass
class TargetsService:
    """Recalculates and stores targets only when they change."""

    repository: TargetsRepository
    profile_repository: ProfileRepository

    def recalculate(
        self,
        user_id: UUID,
        profile: UserProfile,
        goal: Goal | None,
        today: date | None = None,
    ) -> Recalculation:
        """Recompute targets and persist them when any field differs."""
        previous = self.repository.get_targets(user_id)
        computed = compute_targets(profile, goal, today=today)
        if computed is None:
            return Recalculation(targets=previous, changed=False)

        if not computed.has_goal_targets and previous is not None:
            computed = replace(previous, tdee=computed.tdee)

        warnings = _surplus_advisories(computed)
        for warning in warnings:
            _logger.warning("Targets advisory for user %s: %s", user_id, warning)

        if computed == previous:
            _logger.debug("Targets unchanged for user %s", user_id)
            return Recalculation(targets=previous, changed=False, warnings=warnings)

        self.repository.save_targets(user_id, computed)
        return Recalculation(targets=computed, changed=True, warnings=warnings)

    def recalculate_user(
        self, user_id: UUID, today: date | None = None
    ) -> Recalculation | None:
        """Load the stored profile and goal and recalculate targets."""
        profile = self.profile_repository.get_profile(user_id)
        if profile is None:
            return None
        goal = self.profile_repository.get_goal(user_id)
        return self.recalculate(user_id, profile, goal, today=today)


def _surplus_advisories(targets: DailyTargets) -> list[str]:
    if not targets.is_weight_gain or targets.daily_calories is None:
        return []
    percent = surplus_percent(targets.daily_calories, targets.tdee)
    if percent <= SURPLUS_ADVISORY_PERCENT:
        return []
    return [
        f"Your plan implies a {percent}% calorie surplus. "
        "Consider a later goal date to limit fat gain."
    ]
