"""Ingredient price lookups and exact-quantity cost calculations."""

import asyncio
import logging
import re
from dataclasses import asdict, dataclass, field
from typing import Any

from .api import SpoonacularAPI, SpoonacularAPIError
from .cache import DurableCache

logger = logging.getLogger(__name__)

SOURCE = "spoonacular"
SOURCE_NO_KEY = "spoonacular (no API key)"

# Stricter than units.parse_quantity: single-word units only
COST_QUANTITY_PATTERN = re.compile(r"^([\d.]+)\s*(\w+)$")


@dataclass
class IngredientPrice:
    """Unit price for an ingredient. price=None means no data is available."""

    price: float | None
    unit: str | None
    source: str = SOURCE

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_cache_value(cls, data: Any) -> "IngredientPrice | None":
        """Rebuild a price from a cached dict; None if malformed or without a price."""
        if not isinstance(data, dict):
            return None
        price = data.get("price")
        unit = data.get("unit")
        source = data.get("source", SOURCE)
        if isinstance(price, bool) or not isinstance(price, (int, float)) or price <= 0:
            return None
        if not isinstance(unit, str) or not isinstance(source, str):
            return None
        return cls(price=float(price), unit=unit, source=source)


@dataclass
class IngredientCost:
    """Cost of an exact ingredient quantity."""

    name: str
    quantity: str
    price: float | None
    price_unit: str | None
    total: float | None
    source: str = SOURCE

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "quantity": self.quantity,
            "price": self.price,
            "priceUnit": self.price_unit,
            "total": self.total,
            "source": self.source,
        }


@dataclass
class RecipeCost:
    """Exact-quantity costs for all ingredients of a recipe."""

    ingredients: list[IngredientCost] = field(default_factory=list)
    total_cost: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "ingredients": [ing.to_dict() for ing in self.ingredients],
            "totalCost": self.total_cost,
        }


def quantity_factor(recipe_unit: str, price_unit: str | None) -> float:
    """Factor to bring a recipe unit in line with the unit a price is quoted in."""
    recipe_unit = recipe_unit.lower()
    price_unit = (price_unit or "").lower()

    if "g" in recipe_unit and "kg" in price_unit:
        return 0.001
    if "ml" in recipe_unit and "l" in price_unit:
        return 0.001
    return 1.0


class IngredientPriceService:
    """Look up ingredient unit prices, caching positive results."""

    def __init__(self, api: SpoonacularAPI | None, cache: DurableCache) -> None:
        self.api = api
        self.cache = cache

    def get_cached_price(self, name: str) -> IngredientPrice | None:
        """Get a previously fetched price without touching the API."""
        return IngredientPrice.from_cache_value(self.cache.get(name))

    async def get_ingredient_price(self, name: str) -> IngredientPrice:
        """
        Get the unit price of an ingredient.

        Never raises: a missing API key, an unknown ingredient or an API
        failure all return an IngredientPrice with price=None.
        """
        cached = self.get_cached_price(name)
        if cached:
            logger.debug("Cache hit for: %s", name)
            return cached

        if self.api is None or not self.api.has_api_key:
            logger.info("No API key - can't fetch price data for: %s", name)
            return IngredientPrice(price=None, unit=None, source=SOURCE_NO_KEY)

        try:
            logger.info("Fetching price data for: %s", name)
            results = await self.api.search_ingredients(name, number=1)
            match = results[0] if results else None
            if not isinstance(match, dict) or match.get("id") is None:
                logger.info("No ingredient data found for: %s", name)
                return IngredientPrice(price=None, unit=None)

            info = await self.api.get_ingredient_information(match["id"])
            estimated_cost = info.get("estimatedCost")
            cents = estimated_cost.get("value") if isinstance(estimated_cost, dict) else None
            if isinstance(cents, bool) or not isinstance(cents, (int, float, str)):
                cents = 0
            price = float(cents) / 100
            if not price > 0:
                logger.info("No price data found for: %s", name)
                return IngredientPrice(price=None, unit=None)

            unit = info.get("unit")
            result = IngredientPrice(price=price, unit=unit if isinstance(unit, str) and unit else "piece")
        except (SpoonacularAPIError, TypeError, ValueError) as e:
            logger.error("Error fetching price for %s: %s", name, e)
            return IngredientPrice(price=None, unit=None)

        self.cache.set(name, result.to_dict())
        return result

    async def calculate_ingredient_cost(self, ingredient: dict[str, Any]) -> IngredientCost:
        """
        Calculate the cost of an ingredient at its exact recipe quantity.

        Args:
            ingredient: Dict with 'name' and 'quantity' keys

        Returns:
            IngredientCost; total is None when no price is known
        """
        name = ingredient["name"]
        quantity = ingredient["quantity"]
        price_data = await self.get_ingredient_price(name)

        if not price_data.price:
            return IngredientCost(
                name=name,
                quantity=quantity,
                price=None,
                price_unit=None,
                total=None,
                source=price_data.source or SOURCE,
            )

        match = COST_QUANTITY_PATTERN.match(quantity)
        if not match:
            # Default to the full unit price if we can't parse the quantity
            return IngredientCost(
                name=name,
                quantity=quantity,
                price=price_data.price,
                price_unit=price_data.unit,
                total=price_data.price,
            )

        try:
            amount = float(match.group(1))
        except ValueError:
            amount = 1.0
        factor = quantity_factor(match.group(2), price_data.unit)

        return IngredientCost(
            name=name,
            quantity=quantity,
            price=price_data.price,
            price_unit=price_data.unit,
            total=amount * factor * price_data.price,
        )

    async def calculate_recipe_cost(self, ingredients: list[dict[str, Any]]) -> RecipeCost:
        """Calculate exact-quantity costs for all ingredients concurrently."""
        costs = await asyncio.gather(*(self.calculate_ingredient_cost(ing) for ing in ingredients))
        total = sum(cost.total or 0 for cost in costs)
        return RecipeCost(ingredients=list(costs), total_cost=total)

    async def get_recipe_price_breakdown(self, recipe_id: int | str) -> dict[str, Any] | None:
        """Get the price breakdown for a Spoonacular recipe, or None if unavailable."""
        if self.api is None or not self.api.has_api_key:
            logger.info("No API key - can't fetch price breakdown for recipe: %s", recipe_id)
            return None

        try:
            breakdown = await self.api.get_recipe_price_breakdown(recipe_id)
        except SpoonacularAPIError as e:
            logger.error("Error fetching recipe price breakdown: %s", e)
            return None

        return breakdown or None
