"""Supabase-backed repository for onboarding profiles and goals."""

from dataclasses import dataclass
from datetime import date
from uuid import UUID

from supabase import Client

from nutrition_planner.domain.profile import Goal, Height, UserProfile
from nutrition_planner.services.targets import ProfileRepository

_PROFILE_COLUMNS = (
    "age, weight, height_cm, height_feet, height_inches, body_fat_percentage, "
    "gender, activity_level, use_metric"
)
_GOAL_COLUMNS = "goal_type, goal_value, goal_date, goal_pace"


@dataclass
class SupabaseProfileRepository(ProfileRepository):
    """Supabase implementation reading the ``profiles`` table."""

    client: Client

    def get_profile(self, user_id: UUID) -> UserProfile | None:
        row = self._fetch(user_id, _PROFILE_COLUMNS)
        if row is None:
            return None
        use_metric = bool(row.get("use_metric", True))
        height: float | Height | None
        if use_metric:
            height = row.get("height_cm")
        else:
            height = Height(feet=row.get("height_feet"), inches=row.get("height_inches"))
        return UserProfile(
            age=row.get("age"),
            weight=row.get("weight"),
            height=height,
            activity_level=row.get("activity_level"),
            gender=row.get("gender") or "male",
            body_fat_percentage=row.get("body_fat_percentage"),
            use_metric=use_metric,
        )

    def get_goal(self, user_id: UUID) -> Goal | None:
        row = self._fetch(user_id, _GOAL_COLUMNS)
        if row is None or not row.get("goal_type"):
            return None
        raw_date = row.get("goal_date")
        return Goal(
            goal_type=row.get("goal_type"),
            goal_value=row.get("goal_value"),
            goal_date=date.fromisoformat(raw_date[:10]) if raw_date else None,
            goal_pace=row.get("goal_pace") or "moderate",
        )

    def _fetch(self, user_id: UUID, columns: str) -> dict | None:
        response = (
            self.client.table("profiles")
            .select(columns)
            .eq("user_id", str(user_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return response.data[0]
