"""Tests for the HTTP API."""

from datetime import date, timedelta
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from nutrition_planner.api.app import create_app
from nutrition_planner.api.models import FoodPayload
from nutrition_planner.containers import AppContainer
from nutrition_planner.domain.meals import FREE_MEAL_ID
from nutrition_planner.domain.profile import Goal, UserProfile
from tests.conftest import (
    FakeFdcClient,
    InMemoryProfileRepository,
    InMemoryTargetsRepository,
    sample_foods,
)

PROFILE = {
    "age": 30,
    "weight": 70,
    "height_cm": 175,
    "gender": "male",
    "activity_level": "moderate",
}
TARGETS = {
    "tdee": 2300,
    "daily_calories": 2500,
    "is_weight_gain": True,
    "macros": {"protein": 160, "carbs": 290, "fats": 78},
}


def _foods_json(count: int = 12) -> list[dict]:
    return [
        FoodPayload.from_domain(food).model_dump(exclude={"nutrients"})
        for food in sample_foods()[:count]
    ]


def test_health(container: AppContainer) -> None:
    client = TestClient(create_app(container))

    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_calculate_targets(container: AppContainer) -> None:
    client = TestClient(create_app(container))

    response = client.post(
        "/targets",
        json={
            "profile": PROFILE,
            "goal": {
                "goal_type": "weight",
                "goal_value": 80,
                "goal_date": "2025-06-30",
            },
            "today": "2025-01-01",
        },
    )

    assert response.status_code == 200
    targets = response.json()["targets"]
    assert targets["tdee"] == 2556
    assert targets["daily_calories"] == 2984
    assert targets["macros"] == {"protein": 119, "carbs": 402, "fats": 100}
    assert targets["high_surplus_warning"] is False


def test_calculate_targets_imperial_without_goal(container: AppContainer) -> None:
    client = TestClient(create_app(container))

    response = client.post(
        "/targets",
        json={
            "profile": {
                "age": 30,
                "weight": 154.3234,
                "height_feet": 5,
                "height_inches": 9,
                "activity_level": "moderate",
                "use_metric": False,
            }
        },
    )

    assert response.status_code == 200
    assert response.json()["targets"]["tdee"] == 2558
    assert response.json()["targets"]["macros"] is None


def test_calculate_targets_incomplete_profile(container: AppContainer) -> None:
    client = TestClient(create_app(container))

    response = client.post("/targets", json={"profile": {"age": 30}})

    assert response.status_code == 200
    assert response.json() == {"targets": None}


def test_calculate_targets_rejects_invalid_goal(container: AppContainer) -> None:
    client = TestClient(create_app(container))

    response = client.post(
        "/targets",
        json={"profile": PROFILE, "goal": {"goal_type": "waist", "goal_value": 80}},
    )

    assert response.status_code == 422


@pytest.mark.parametrize("value", [100, 120])
def test_calculate_targets_rejects_body_fat_goal_of_100_or_more(
    container: AppContainer, value: float
) -> None:
    client = TestClient(create_app(container))

    response = client.post(
        "/targets",
        json={
            "profile": PROFILE,
            "goal": {
                "goal_type": "bodyFat",
                "goal_value": value,
                "goal_date": "2025-04-01",
            },
            "today": "2025-01-01",
        },
    )

    assert response.status_code == 422


def test_calculate_targets_accepts_weight_goal_above_100(
    container: AppContainer,
) -> None:
    client = TestClient(create_app(container))

    response = client.post(
        "/targets",
        json={
            "profile": PROFILE,
            "goal": {"goal_type": "weight", "goal_value": 110, "goal_date": "2026-01-01"},
            "today": "2025-01-01",
        },
    )

    assert response.status_code == 200
    assert response.json()["targets"]["is_weight_gain"] is True


def test_recalculate_targets(
    container: AppContainer,
    profile_repository: InMemoryProfileRepository,
    targets_repository: InMemoryTargetsRepository,
) -> None:
    user_id = uuid4()
    profile_repository.profiles[user_id] = UserProfile(
        age=30, weight=70, height=175, activity_level="moderate"
    )
    profile_repository.goals[user_id] = Goal(
        goal_type="weight",
        goal_value=80,
        goal_date=date.today() + timedelta(days=180),
    )
    client = TestClient(create_app(container))

    first = client.post(f"/users/{user_id}/targets/recalculate")
    second = client.post(f"/users/{user_id}/targets/recalculate")

    assert first.status_code == 200
    assert first.json()["changed"] is True
    assert first.json()["targets"]["daily_calories"] == 2984
    assert second.json()["changed"] is False
    assert second.json()["warnings"] == []
    assert targets_repository.saves == [user_id]


def test_recalculate_targets_unknown_user(container: AppContainer) -> None:
    client = TestClient(create_app(container))

    response = client.post(f"/users/{uuid4()}/targets/recalculate")

    assert response.status_code == 404


def test_create_meal_plan(container: AppContainer) -> None:
    client = TestClient(create_app(container))

    response = client.post(
        "/meal-plans",
        json={
            "foods": _foods_json(),
            "targets": TARGETS,
            "include_free_meal": True,
            "seed": 42,
        },
    )
    repeat = client.post(
        "/meal-plans",
        json={
            "foods": _foods_json(),
            "targets": TARGETS,
            "include_free_meal": True,
            "seed": 42,
        },
    )

    assert response.status_code == 200
    plan = response.json()
    assert len(plan["meals"]) == 5
    assert plan["meals"][-1]["id"] == FREE_MEAL_ID
    assert plan["meals"][-1]["is_free_meal"] is True
    assert plan["target_calories"] == 2500
    assert plan["totals"]["calories"] > 0
    first_food = plan["meals"][0]["foods"][0]
    assert first_food["nutrients"]["calories"] == pytest.approx(
        first_food["per_serving"]["calories"] * first_food["servings"], rel=0.01
    )
    assert [
        [food["id"] for food in meal["foods"]] for meal in plan["meals"]
    ] == [[food["id"] for food in meal["foods"]] for meal in repeat.json()["meals"]]


def test_create_meal_plan_requires_enough_foods(container: AppContainer) -> None:
    client = TestClient(create_app(container))

    response = client.post(
        "/meal-plans", json={"foods": _foods_json(5), "targets": TARGETS}
    )

    assert response.status_code == 422
    assert "10 foods" in response.json()["detail"]


def test_create_meal_plan_resolves_fdc_ids(
    container: AppContainer, fdc_client: FakeFdcClient
) -> None:
    client = TestClient(create_app(container))

    response = client.post(
        "/meal-plans",
        json={
            "foods": _foods_json(9),
            "fdc_ids": [171077],
            "targets": TARGETS,
            "meal_count": 3,
            "seed": 1,
        },
    )

    assert response.status_code == 200
    assert len(response.json()["meals"]) == 3
    assert fdc_client.batch_calls == [[171077]]


def test_regenerate_meal(container: AppContainer) -> None:
    client = TestClient(create_app(container))
    plan = client.post(
        "/meal-plans",
        json={"foods": _foods_json(), "targets": TARGETS, "seed": 3},
    ).json()
    meal_id = plan["meals"][0]["id"]

    response = client.post(
        "/meal-plans/regenerate-meal",
        json={"plan": plan, "meal_id": meal_id, "foods": _foods_json(), "seed": 4},
    )

    assert response.status_code == 200
    meals = response.json()["meals"]
    assert meals[0]["id"] != meal_id
    assert meals[0]["name"] == "Breakfast"
    assert meals[1]["id"] == plan["meals"][1]["id"]


def test_regenerate_unknown_meal(container: AppContainer) -> None:
    client = TestClient(create_app(container))
    plan = client.post(
        "/meal-plans",
        json={"foods": _foods_json(), "targets": TARGETS, "seed": 3},
    ).json()

    response = client.post(
        "/meal-plans/regenerate-meal",
        json={"plan": plan, "meal_id": "meal-missing", "foods": _foods_json()},
    )

    assert response.status_code == 404


def test_search_foods(container: AppContainer) -> None:
    client = TestClient(create_app(container))

    response = client.get("/foods/search", params={"query": "chicken", "limit": 5})

    assert response.status_code == 200
    foods = response.json()["foods"]
    assert foods[0]["id"] == "fdc-171077"
    assert foods[0]["per_serving"]["protein"] == 22.5


def test_food_detail(container: AppContainer) -> None:
    client = TestClient(create_app(container))

    response = client.get("/foods/42")

    assert response.status_code == 200
    assert response.json()["per_serving"]["sodium"] == 74


def test_food_detail_not_found(
    container: AppContainer, fdc_client: FakeFdcClient
) -> None:
    fdc_client.missing_ids.add(404)
    client = TestClient(create_app(container))

    response = client.get("/foods/404")

    assert response.status_code == 404
