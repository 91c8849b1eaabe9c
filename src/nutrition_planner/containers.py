"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from nutrition_planner.adapters.fdc_client import HttpxFdcClient
from nutrition_planner.adapters.supabase_profile_repository import (
    SupabaseProfileRepository,
)
from nutrition_planner.adapters.supabase_targets_repository import (
    SupabaseTargetsRepository,
)
from nutrition_planner.config import Settings
from nutrition_planner.services.cache import InMemoryCache
from nutrition_planner.services.meal_plans import MealPlanService
from nutrition_planner.services.nutrition import NutritionService
from nutrition_planner.services.targets import TargetsService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    targets_service: TargetsService
    meal_plan_service: MealPlanService
    nutrition_service: NutritionService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    targets_service = TargetsService(
        repository=SupabaseTargetsRepository(supabase_client),
        profile_repository=SupabaseProfileRepository(supabase_client),
    )
    meal_plan_service = MealPlanService(
        min_foods=resolved_settings.min_plan_foods,
        tolerance=resolved_settings.meal_tolerance,
    )
    fdc_client = HttpxFdcClient.create(
        api_key=resolved_settings.fdc_api_key,
        base_url=resolved_settings.fdc_base_url,
    )
    nutrition_service = NutritionService(
        fdc_client=fdc_client,
        cache=InMemoryCache(max_entries=resolved_settings.food_cache_entries),
    )

    async def close_resources() -> None:
        await fdc_client.close()

    return AppContainer(
        settings=resolved_settings,
        targets_service=targets_service,
        meal_plan_service=meal_plan_service,
        nutrition_service=nutrition_service,
        close_resources=close_resources,
    )
