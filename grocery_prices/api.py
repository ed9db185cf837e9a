"""Spoonacular API client for ingredient prices and grocery product lookups."""

import logging
from typing import Any

import httpx

from .config import API_BASE_URL, API_TIMEOUT

logger = logging.getLogger(__name__)


class SpoonacularAPIError(Exception):
    """Exception raised for Spoonacular API errors."""

    pass


class SpoonacularAPI:
    """Async client for the parts of the Spoonacular food API we use."""

    def __init__(
        self,
        api_key: str | None,
        base_url: str = API_BASE_URL,
        timeout: float = API_TIMEOUT,
        client: httpx.AsyncClient | None = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.client = client or httpx.AsyncClient(
            timeout=timeout,
            headers={"Accept": "application/json"},
        )

    @property
    def has_api_key(self) -> bool:
        return bool(self.api_key)

    async def __aenter__(self) -> "SpoonacularAPI":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self.client.aclose()

    async def _get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        """
        Perform an authenticated GET request and decode the JSON body.

        Raises:
            SpoonacularAPIError: If there is no API key, the request fails,
                or the response is not JSON
        """
        if not self.api_key:
            raise SpoonacularAPIError("No Spoonacular API key configured")

        url = f"{self.base_url}{path}"
        query = {"apiKey": self.api_key, **(params or {})}

        try:
            response = await self.client.get(url, params=query)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            raise SpoonacularAPIError(
                f"Request to {path} failed with status {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            raise SpoonacularAPIError(f"Request to {path} failed: {e}") from e
        except ValueError as e:
            raise SpoonacularAPIError(f"Invalid JSON from {path}") from e

    async def search_products(self, query: str, number: int = 1) -> list[dict[str, Any]]:
        """
        Search grocery products.

        Args:
            query: Search term
            number: Maximum number of results

        Returns:
            List of product summaries (id, title, ...)
        """
        data = await self._get("/food/products/search", {"query": query, "number": number})
        products = data.get("products") if isinstance(data, dict) else None
        return products if isinstance(products, list) else []

    async def get_product(self, product_id: int | str) -> dict[str, Any] | None:
        """Get detailed information for a grocery product."""
        data = await self._get(f"/food/products/{product_id}")
        return data if isinstance(data, dict) and data else None

    async def find_product(self, query: str) -> dict[str, Any] | None:
        """
        Find the best matching grocery product and fetch its details.

        Returns:
            Product details, or None if nothing matched
        """
        products = await self.search_products(query, number=1)
        if not products:
            return None

        product_id = products[0].get("id")
        if product_id is None:
            return None

        return await self.get_product(product_id)

    async def search_ingredients(self, query: str, number: int = 1) -> list[dict[str, Any]]:
        """Search the ingredient database."""
        data = await self._get("/food/ingredients/search", {"query": query, "number": number})
        results = data.get("results") if isinstance(data, dict) else None
        return results if isinstance(results, list) else []

    async def get_ingredient_information(
        self, ingredient_id: int | str, amount: float = 1, unit: str = "piece"
    ) -> dict[str, Any]:
        """Get ingredient information, including its estimated cost in cents."""
        data = await self._get(
            f"/food/ingredients/{ingredient_id}/information",
            {"amount": amount, "unit": unit},
        )
        return data if isinstance(data, dict) else {}

    async def get_recipe_price_breakdown(self, recipe_id: int | str) -> dict[str, Any]:
        """Get the price breakdown widget data for a recipe."""
        data = await self._get(f"/recipes/{recipe_id}/priceBreakdownWidget.json")
        return data if isinstance(data, dict) else {}
