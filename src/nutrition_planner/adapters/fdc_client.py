"""USDA FoodData Central API client."""

from dataclasses import dataclass
from typing import Protocol

import httpx

DEFAULT_DATA_TYPES = ("Foundation", "SR Legacy")


class FdcClient(Protocol):
    """Interface for FoodData Central API interactions."""

    async def search_foods(
        self, query: str, page_size: int = 10
    ) -> dict:
        """Search foods by query and return the raw search payload."""

    async def get_food(self, fdc_id: int) -> dict:
        """Fetch one food by FDC id."""

    async def get_foods(self, fdc_ids: list[int]) -> list[dict]:
        """Fetch several foods in one request."""


@dataclass
class HttpxFdcClient(FdcClient):
    """HTTPX-backed FDC client."""

    api_key: str
    base_url: str
    http_client: httpx.AsyncClient
    data_types: tuple[str, ...] = DEFAULT_DATA_TYPES
    timeout_seconds: float = 15

    @classmethod
    def create(cls, api_key: str, base_url: str) -> "HttpxFdcClient":
        """Create an FDC client with its own httpx session."""
        return cls(api_key=api_key, base_url=base_url, http_client=httpx.AsyncClient())

    async def search_foods(
        self, query: str, page_size: int = 10
    ) -> dict:
        response = await self.http_client.post(
            f"{self.base_url}/foods/search",
            params={"api_key": self.api_key},
            json={
                "query": query,
                "pageSize": page_size,
                "dataType": list(self.data_types),
            },
            timeout=self.timeout_seconds,
        )
        response.raise_for_status()
        return response.json()

    async def get_food(self, fdc_id: int) -> dict:
        response = await self.http_client.get(
            f"{self.base_url}/food/{fdc_id}",
            params={"api_key": self.api_key},
            timeout=self.timeout_seconds,
        )
        response.raise_for_status()
        return response.json()

    async def get_foods(self, fdc_ids: list[int]) -> list[dict]:
        if not fdc_ids:
            return []
        response = await self.http_client.post(
            f"{self.base_url}/foods",
            params={"api_key": self.api_key},
            json={"fdcIds": fdc_ids},
            timeout=self.timeout_seconds,
        )
        response.raise_for_status()
        return response.json()

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
