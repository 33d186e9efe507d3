"""OpenFoodFacts API client."""

from dataclasses import dataclass
from typing import Protocol

import httpx

_SEARCH_FIELDS = "code,product_name,brands,nutriments"


class OpenFoodFactsClient(Protocol):
    """Interface for OpenFoodFacts API interactions."""

    async def get_product(self, barcode: str) -> dict[str, object]:
        """Fetch a product by barcode and return raw API data."""

    async def search_products(
        self, params: dict[str, str | int]
    ) -> dict[str, object]:
        """Run a product search and return raw API data."""


@dataclass
class HttpxOpenFoodFactsClient(OpenFoodFactsClient):
    """HTTPX-backed OpenFoodFacts client."""

    base_url: str
    http_client: httpx.AsyncClient
    timeout_seconds: float = 10

    @classmethod
    def create(cls, base_url: str, user_agent: str) -> "HttpxOpenFoodFactsClient":
        """Create a client with a managed httpx session."""
        return cls(
            base_url=base_url.rstrip("/"),
            http_client=httpx.AsyncClient(headers={"User-Agent": user_agent}),
        )

    async def get_product(self, barcode: str) -> dict[str, object]:
        """Fetch a product by barcode."""
        url = f"{self.base_url}/api/v0/product/{barcode}.json"
        response = await self.http_client.get(url, timeout=self.timeout_seconds)
        response.raise_for_status()
        return response.json()

    async def search_products(
        self, params: dict[str, str | int]
    ) -> dict[str, object]:
        """Search products with the legacy search endpoint."""
        url = f"{self.base_url}/cgi/search.pl"
        query: dict[str, str | int] = {
            "action": "process",
            "json": 1,
            "search_simple": 1,
            "fields": _SEARCH_FIELDS,
        }
        query.update(params)
        response = await self.http_client.get(
            url, params=query, timeout=self.timeout_seconds
        )
        response.raise_for_status()
        return response.json()

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
