"""Shopping cost calculation based on retail packaging rather than exact amounts."""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any

from .packages import PackageResolver
from .prices import IngredientPriceService
from .usage import compute_usage

logger = logging.getLogger(__name__)

API_FALLBACK_SOURCE = "api fallback"


class InvalidIngredientsError(Exception):
    """Exception raised for a malformed ingredient list."""

    pass


@dataclass
class IngredientLine:
    """Package-based cost of one recipe ingredient."""

    name: str
    quantity: str
    api_cost: float | None
    package_size: str
    package_price: float
    percent_used: float
    cost_in_recipe: float
    source: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "quantity": self.quantity,
            "apiCost": self.api_cost,
            "packageSize": self.package_size,
            "packagePrice": self.package_price,
            "percentUsed": self.percent_used,
            "costInRecipe": self.cost_in_recipe,
            "source": self.source,
        }


@dataclass
class ShoppingSummary:
    """Shopping totals for a recipe."""

    ingredients: list[IngredientLine] = field(default_factory=list)
    total_package_price: float = 0.0
    total_recipe_cost: float = 0.0

    @property
    def leftover_value(self) -> float:
        """Value of the package contents the recipe doesn't use."""
        return self.total_package_price - self.total_recipe_cost

    def to_dict(self) -> dict[str, Any]:
        return {
            "ingredients": [line.to_dict() for line in self.ingredients],
            "totalPackagePrice": self.total_package_price,
            "totalRecipeCost": self.total_recipe_cost,
            "leftoverValue": self.leftover_value,
        }


def validate_ingredients(data: Any) -> list[dict[str, str]]:
    """
    Check an ingredient list and normalize it to name/quantity dicts.

    Accepts a list of ingredients or a dict with an 'ingredients' key.

    Raises:
        InvalidIngredientsError: If the list is missing, empty, or has entries
            without a name or quantity
    """
    if isinstance(data, dict):
        data = data.get("ingredients")

    if not isinstance(data, list) or not data:
        raise InvalidIngredientsError("Missing or invalid ingredients array")

    ingredients = []
    for i, item in enumerate(data, 1):
        if not isinstance(item, dict) or not item.get("name") or not item.get("quantity"):
            raise InvalidIngredientsError(
                f"Ingredient {i}: missing required fields: name, quantity"
            )
        ingredients.append({"name": str(item["name"]), "quantity": str(item["quantity"])})

    return ingredients


class ShoppingCalculator:
    """Combine package resolution and usage calculation across a recipe."""

    def __init__(self, resolver: PackageResolver, price_service: IngredientPriceService) -> None:
        self.resolver = resolver
        self.price_service = price_service

    async def calculate_line(self, ingredient: dict[str, str]) -> IngredientLine:
        """Price one ingredient by the package it has to be bought in."""
        name = ingredient["name"]
        quantity = ingredient["quantity"]

        api_result, package = await asyncio.gather(
            self.price_service.calculate_ingredient_cost(ingredient),
            self.resolver.resolve(name),
        )
        api_cost = api_result.total

        if package is None or package.price is None:
            logger.warning("No package information for %s", name)
            return IngredientLine(
                name=name,
                quantity=quantity,
                api_cost=api_cost,
                package_size="unknown",
                package_price=api_cost or 0.0,
                percent_used=1.0,
                cost_in_recipe=api_cost or 0.0,
                source=API_FALLBACK_SOURCE,
            )

        usage = compute_usage(quantity, package, name)
        return IngredientLine(
            name=name,
            quantity=quantity,
            api_cost=api_cost,
            package_size=package.size,
            package_price=package.price,
            percent_used=usage.percent_used,
            cost_in_recipe=usage.used_cost,
            source=str(package.source),
        )

    async def calculate_shopping_cost(self, ingredients: list[dict[str, str]]) -> ShoppingSummary:
        """
        Calculate the shopping cost of a recipe.

        Ingredients are processed concurrently; the result keeps input order.

        Args:
            ingredients: List of dicts with 'name' and 'quantity'

        Returns:
            ShoppingSummary with package totals and leftover value
        """
        lines = await asyncio.gather(*(self.calculate_line(ing) for ing in ingredients))

        return ShoppingSummary(
            ingredients=list(lines),
            total_package_price=sum(line.package_price for line in lines),
            total_recipe_cost=sum(line.cost_in_recipe for line in lines),
        )
