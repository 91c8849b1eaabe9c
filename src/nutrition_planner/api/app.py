"""FastAPI application factory."""

import logging
import random
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from typing import TypeVar
from uuid import UUID

import httpx
from fastapi import FastAPI, HTTPException, Request, status

from nutrition_planner.api.models import (
    DailyTargetsPayload,
    FoodListResponse,
    FoodPayload,
    MealPlanPayload,
    MealPlanRequest,
    RecalculationResponse,
    RegenerateMealRequest,
    TargetsRequest,
    TargetsResponse,
)
from nutrition_planner.app_logging import configure_logging
from nutrition_planner.containers import AppContainer
from nutrition_planner.domain.meals import FoodItem
from nutrition_planner.services.targets import compute_targets

T = TypeVar("T")


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post("/targets")
    async def calculate_targets(body: TargetsRequest) -> TargetsResponse:
        """Compute targets for a profile without storing them."""
        goal = body.goal.to_domain() if body.goal else None
        targets = compute_targets(body.profile.to_domain(), goal, today=body.today)
        if targets is None:
            return TargetsResponse(targets=None)
        return TargetsResponse(targets=DailyTargetsPayload.from_domain(targets))

    @app.post("/users/{user_id}/targets/recalculate")
    async def recalculate_targets(
        user_id: UUID, request: Request
    ) -> RecalculationResponse:
        """Recalculate and store targets from the user's saved profile."""
        state_container: AppContainer = request.app.state.container
        result = state_container.targets_service.recalculate_user(user_id)
        if result is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND, detail="Profile not found"
            )
        return RecalculationResponse(
            targets=(
                DailyTargetsPayload.from_domain(result.targets)
                if result.targets
                else None
            ),
            changed=result.changed,
            warnings=result.warnings,
        )

    @app.post("/meal-plans")
    async def create_meal_plan(
        body: MealPlanRequest, request: Request
    ) -> MealPlanPayload:
        """Generate a meal plan from the posted foods and FDC selections."""
        state_container: AppContainer = request.app.state.container
        foods = [food.to_domain() for food in body.foods]
        if body.fdc_ids:
            foods.extend(
                await _call_fdc(
                    lambda: state_container.nutrition_service.get_food_pool(
                        body.fdc_ids
                    ),
                    logger,
                )
            )
        service = state_container.meal_plan_service
        if not service.has_enough_foods(foods):
            raise HTTPException(
                status_code=422,
                detail=f"At least {service.min_foods} foods are required",
            )
        plan = service.generate(
            foods,
            body.targets.to_domain(),
            meal_count=body.meal_count,
            include_free_meal=body.include_free_meal,
            free_meal_calories=body.free_meal_calories,
            rng=_seeded_rng(body.seed),
        )
        return MealPlanPayload.from_domain(plan)

    @app.post("/meal-plans/regenerate-meal")
    async def regenerate_meal(
        body: RegenerateMealRequest, request: Request
    ) -> MealPlanPayload:
        """Rebuild one meal of an existing plan."""
        state_container: AppContainer = request.app.state.container
        plan = body.plan.to_domain()
        if plan.find_meal(body.meal_id) is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND, detail="Meal not found"
            )
        regenerated = state_container.meal_plan_service.regenerate(
            plan,
            body.meal_id,
            [food.to_domain() for food in body.foods],
            rng=_seeded_rng(body.seed),
        )
        return MealPlanPayload.from_domain(regenerated)

    @app.get("/foods/search")
    async def search_foods(
        query: str, request: Request, limit: int = 10
    ) -> FoodListResponse:
        """Search FDC foods."""
        state_container: AppContainer = request.app.state.container
        foods: list[FoodItem] = await _call_fdc(
            lambda: state_container.nutrition_service.search(query, limit=limit),
            logger,
        )
        return FoodListResponse(foods=[FoodPayload.from_domain(f) for f in foods])

    @app.get("/foods/{fdc_id}")
    async def food_detail(fdc_id: int, request: Request) -> FoodPayload:
        """Return one FDC food per 100 g."""
        state_container: AppContainer = request.app.state.container
        food: FoodItem = await _call_fdc(
            lambda: state_container.nutrition_service.get_food(fdc_id), logger
        )
        return FoodPayload.from_domain(food)

    return app


def _seeded_rng(seed: int | None) -> random.Random | None:
    """Return a dedicated RNG for reproducible plans, else use the service's."""
    if seed is None:
        return None
    return random.Random(seed)


async def _call_fdc(func: Callable[[], Awaitable[T]], logger: logging.Logger) -> T:
    """Map FDC failures to HTTP errors."""
    try:
        return await func()
    except httpx.HTTPStatusError as exc:
        if exc.response.status_code == status.HTTP_404_NOT_FOUND:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND, detail="Food not found"
            ) from exc
        logger.exception("FDC request failed")
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY, detail="Food database error"
        ) from exc
    except httpx.HTTPError as exc:
        logger.exception("FDC request failed")
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY, detail="Food database error"
        ) from exc
