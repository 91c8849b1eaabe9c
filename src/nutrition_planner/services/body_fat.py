"""Body composition helpers."""

# Share of a weight change that is lean mass, by pace.
_GAIN_LEAN_SHARE = {"conservative": 0.6, "moderate": 0.45, "aggressive": 0.25}
_LOSS_LEAN_SHARE = {"conservative": 0.05, "moderate": 0.12, "aggressive": 0.25}


def lean_mass(weight: float, body_fat_percentage: float) -> float:
    """Return fat-free mass in the same unit as ``weight``."""
    return weight * (1 - body_fat_percentage / 100)


def weight_for_target_body_fat(
    current_weight: float, current_body_fat: float, target_body_fat: float
) -> float:
    """Return the weight at which lean mass yields the target body fat."""
    return lean_mass(current_weight, current_body_fat) / (1 - target_body_fat / 100)


def projected_body_fat(
    current_weight: float,
    current_body_fat: float,
    new_weight: float,
    pace: str | None = None,
) -> float:
    """Estimate body fat percentage after moving to ``new_weight``.

    Slower paces keep more of a gain as lean mass and lose less lean mass
    during a cut. Unknown paces behave like ``moderate``.
    """
    fat_free = lean_mass(current_weight, current_body_fat)
    change = abs(new_weight - current_weight)
    effective_pace = pace or "moderate"

    if new_weight > current_weight:
        share = _GAIN_LEAN_SHARE.get(effective_pace, _GAIN_LEAN_SHARE["moderate"])
        adjusted = min(fat_free + change * share, new_weight)
        return max((new_weight - adjusted) / new_weight * 100, 0.0)

    share = _LOSS_LEAN_SHARE.get(effective_pace, _LOSS_LEAN_SHARE["moderate"])
    adjusted = fat_free - change * share
    return max(100 * (1 - adjusted / new_weight), 0.0)
