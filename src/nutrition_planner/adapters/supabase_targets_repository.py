"""Supabase-backed repository for computed daily targets."""

from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID

from supabase import Client

from nutrition_planner.domain.profile import DailyTargets, Macros
from nutrition_planner.services.targets import TargetsRepository


@dataclass
class SupabaseTargetsRepository(TargetsRepository):
    """Stores one ``user_targets`` row per user."""

    client: Client

    def get_targets(self, user_id: UUID) -> DailyTargets | None:
        response = (
            self.client.table("user_targets")
            .select(
                "tdee, daily_calories, is_weight_gain, high_surplus_warning, "
                "protein_g, carbs_g, fats_g, adjustment_percent, deficit_percent"
            )
            .eq("user_id", str(user_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _targets_from_row(response.data[0])

    def save_targets(self, user_id: UUID, targets: DailyTargets) -> None:
        payload = {
            "user_id": str(user_id),
            "tdee": targets.tdee,
            "daily_calories": targets.daily_calories,
            "is_weight_gain": targets.is_weight_gain,
            "high_surplus_warning": targets.high_surplus_warning,
            "protein_g": targets.macros.protein if targets.macros else None,
            "carbs_g": targets.macros.carbs if targets.macros else None,
            "fats_g": targets.macros.fats if targets.macros else None,
            "adjustment_percent": targets.adjustment_percent,
            "deficit_percent": targets.deficit_percent,
            "updated_at": datetime.now(tz=UTC).isoformat(),
        }
        response = (
            self.client.table("user_targets")
            .upsert(payload, on_conflict="user_id")
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to store targets in Supabase")


def _targets_from_row(row: dict) -> DailyTargets:
    macros = None
    if row.get("protein_g") is not None:
        macros = Macros(
            protein=int(row["protein_g"]),
            carbs=int(row.get("carbs_g") or 0),
            fats=int(row.get("fats_g") or 0),
        )
    daily_calories = row.get("daily_calories")
    return DailyTargets(
        tdee=int(row["tdee"]),
        daily_calories=int(daily_calories) if daily_calories is not None else None,
        is_weight_gain=bool(row.get("is_weight_gain")),
        high_surplus_warning=bool(row.get("high_surplus_warning")),
        macros=macros,
        adjustment_percent=row.get("adjustment_percent"),
        deficit_percent=row.get("deficit_percent"),
    )
