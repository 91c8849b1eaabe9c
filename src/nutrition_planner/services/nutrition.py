"""Food lookups against USDA FDC, converted into meal-planning foods."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TypeVar

from nutrition_planner.adapters.fdc_client import FdcClient
from nutrition_planner.domain.meals import FoodItem, NutrientProfile
from nutrition_planner.services.cache import Cache

# FDC reports the same nutrient under several ids depending on the data type;
# the first id present wins.
_NUTRIENT_IDS: dict[str, tuple[int, ...]] = {
    "calories": (1008, 2047, 2048),
    "protein": (1003,),
    "fats": (1004,),
    "carbs": (1005, 1050),
    "fiber": (1079, 1082, 2033),
    "sugars": (2000, 1063),
    "saturated_fat": (1258,),
    "trans_fat": (1257,),
    "cholesterol": (1253,),
    "sodium": (1093,),
    "calcium": (1087,),
    "iron": (1089,),
    "potassium": (1092,),
    "zinc": (1095,),
    "vitamin_a": (1106,),
    "vitamin_c": (1162,),
    "vitamin_d": (1114,),
}
_CORE_NUTRIENTS = {"calories", "protein", "fats", "carbs"}
FDC_SERVING_G = 100.0

_logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class NutritionService:
    """FDC lookups with caching, returning ``FoodItem`` values per 100 g."""

    fdc_client: FdcClient
    cache: Cache
    search_ttl_seconds: int = 3600
    food_ttl_seconds: int = 86400
    retry_attempts: int = 1
    retry_delay_seconds: float = 0.3

    async def search(self, query: str, limit: int = 10) -> list[FoodItem]:
        """Search FDC foods; results keep FDC's ordering."""
        cache_key = f"fdc:search:{query.lower()}:{limit}"
        cached = self.cache.get(cache_key)
        if isinstance(cached, list):
            return cached

        payload = await self._call_with_retry(
            lambda: self.fdc_client.search_foods(query, page_size=limit),
            action="search",
        )
        foods = [food_from_fdc(food) for food in payload.get("foods", [])]
        self.cache.set(cache_key, foods, ttl_seconds=self.search_ttl_seconds)
        _logger.info("FDC search: query=%s results=%s", query, len(foods))
        return foods

    async def get_food(self, fdc_id: int) -> FoodItem:
        cache_key = f"fdc:food:{fdc_id}"
        cached = self.cache.get(cache_key)
        if isinstance(cached, FoodItem):
            return cached

        payload = await self._call_with_retry(
            lambda: self.fdc_client.get_food(fdc_id),
            action=f"get_food:{fdc_id}",
        )
        food = food_from_fdc(payload)
        self.cache.set(cache_key, food, ttl_seconds=self.food_ttl_seconds)
        return food

    async def get_food_pool(self, fdc_ids: list[int]) -> list[FoodItem]:
        """Resolve a selection of FDC ids into a food pool, using the cache."""
        pool: dict[int, FoodItem] = {}
        missing: list[int] = []
        for fdc_id in fdc_ids:
            cached = self.cache.get(f"fdc:food:{fdc_id}")
            if isinstance(cached, FoodItem):
                pool[fdc_id] = cached
            else:
                missing.append(fdc_id)

        if missing:
            payloads = await self._call_with_retry(
                lambda: self.fdc_client.get_foods(missing),
                action="get_foods",
            )
            for payload in payloads:
                food = food_from_fdc(payload)
                fdc_id = int(payload["fdcId"])
                pool[fdc_id] = food
                self.cache.set(
                    f"fdc:food:{fdc_id}", food, ttl_seconds=self.food_ttl_seconds
                )
        return [pool[fdc_id] for fdc_id in fdc_ids if fdc_id in pool]

    async def _call_with_retry(
        self, func: Callable[[], Awaitable[T]], *, action: str
    ) -> T:
        """Call an async function with a short retry."""
        attempt = 0
        while True:
            try:
                return await func()
            except Exception as exc:
                attempt += 1
                _logger.warning(
                    "FDC %s failed (attempt %s/%s, status=%s): %s",
                    action,
                    attempt,
                    self.retry_attempts + 1,
                    _status_code_from_exception(exc),
                    exc,
                )
                if attempt > self.retry_attempts:
                    raise
                await asyncio.sleep(self.retry_delay_seconds)


def _status_code_from_exception(exc: Exception) -> str:
    response = getattr(exc, "response", None)
    status_code = getattr(response, "status_code", None)
    if isinstance(status_code, int):
        return str(status_code)
    return "n/a"


def _nutrient_amounts(food_nutrients: list[dict]) -> dict[int, float]:
    """Map nutrient id to amount for both search and detail payload shapes."""
    amounts: dict[int, float] = {}
    for nutrient in food_nutrients:
        info = nutrient.get("nutrient") or {}
        nutrient_id = info.get("id") or nutrient.get("nutrientId")
        amount = nutrient.get("amount", nutrient.get("value"))
        if nutrient_id is None or amount is None:
            continue
        amounts.setdefault(int(nutrient_id), float(amount))
    return amounts


def extract_nutrients(food_nutrients: list[dict]) -> NutrientProfile:
    """Build a per-100 g nutrient profile from FDC nutrient rows."""
    amounts = _nutrient_amounts(food_nutrients)
    values: dict = {}
    for name, ids in _NUTRIENT_IDS.items():
        found = next((amounts[i] for i in ids if i in amounts), None)
        if found is None and name in _CORE_NUTRIENTS:
            found = 0.0
        values[name] = found
    return NutrientProfile(**values)


def food_from_fdc(payload: dict) -> FoodItem:
    """Convert an FDC food payload into a one-serving ``FoodItem``."""
    description = str(payload.get("description", ""))
    brand = payload.get("brandName") or payload.get("brandOwner")
    return FoodItem(
        id=f"fdc-{payload['fdcId']}",
        name=f"{description} ({brand})" if brand else description,
        per_serving=extract_nutrients(payload.get("foodNutrients", [])),
        servings=1.0,
        serving_size_g=FDC_SERVING_G,
        serving_size="100g",
    )
