"""Wiring of caches, API client, resolver and calculators."""

import logging
from pathlib import Path
from typing import Any

from .api import SpoonacularAPI
from .cache import DurableCache
from .config import (
    API_BASE_URL,
    PACKAGE_CACHE_FILE,
    PACKAGE_CACHE_TTL,
    PRICE_CACHE_FILE,
    PRICE_CACHE_TTL,
    ensure_config_dir,
    get_api_key,
    mask_api_key,
)
from .packages import PackageDescriptor, PackageResolver
from .prices import IngredientCost, IngredientPrice, IngredientPriceService, RecipeCost
from .shopping import ShoppingCalculator, ShoppingSummary

logger = logging.getLogger(__name__)


class GroceryPrices:
    """Entry point owning the caches and services for one process or test."""

    def __init__(
        self,
        package_cache: DurableCache,
        price_cache: DurableCache,
        api: SpoonacularAPI | None = None,
    ) -> None:
        self.api = api
        self.package_cache = package_cache
        self.price_cache = price_cache
        self.prices = IngredientPriceService(api, price_cache)
        self.resolver = PackageResolver(package_cache, api=api, price_service=self.prices)
        self.calculator = ShoppingCalculator(self.resolver, self.prices)

    @classmethod
    def from_config(
        cls,
        api_key: str | None = None,
        package_cache_file: Path | None = None,
        price_cache_file: Path | None = None,
    ) -> "GroceryPrices":
        """Build from environment configuration, with file-backed caches."""
        api_key = api_key or get_api_key()
        if api_key:
            logger.info("Using Spoonacular API key: %s", mask_api_key(api_key))
        else:
            logger.warning("No Spoonacular API key found; package sizes will be estimated")

        if package_cache_file is None or price_cache_file is None:
            ensure_config_dir()

        return cls(
            package_cache=DurableCache(package_cache_file or PACKAGE_CACHE_FILE, ttl=PACKAGE_CACHE_TTL),
            price_cache=DurableCache(price_cache_file or PRICE_CACHE_FILE, ttl=PRICE_CACHE_TTL),
            api=SpoonacularAPI(api_key, base_url=API_BASE_URL),
        )

    @classmethod
    def in_memory(cls, api: SpoonacularAPI | None = None) -> "GroceryPrices":
        """Build with caches that are never written to disk."""
        return cls(
            package_cache=DurableCache(None, ttl=PACKAGE_CACHE_TTL),
            price_cache=DurableCache(None, ttl=PRICE_CACHE_TTL),
            api=api,
        )

    async def aclose(self) -> None:
        if self.api is not None:
            await self.api.aclose()

    async def __aenter__(self) -> "GroceryPrices":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def resolve_package(self, name: str) -> PackageDescriptor:
        return await self.resolver.resolve(name)

    async def compute_shopping_cost(self, ingredients: list[dict[str, str]]) -> ShoppingSummary:
        return await self.calculator.calculate_shopping_cost(ingredients)

    def list_known_packages(self) -> dict[str, PackageDescriptor]:
        return self.resolver.list_known_packages()

    async def get_ingredient_price(self, name: str) -> IngredientPrice:
        return await self.prices.get_ingredient_price(name)

    async def calculate_ingredient_cost(self, ingredient: dict[str, str]) -> IngredientCost:
        return await self.prices.calculate_ingredient_cost(ingredient)

    async def calculate_recipe_cost(self, ingredients: list[dict[str, str]]) -> RecipeCost:
        return await self.prices.calculate_recipe_cost(ingredients)

    async def get_recipe_price_breakdown(self, recipe_id: int | str) -> dict[str, Any] | None:
        return await self.prices.get_recipe_price_breakdown(recipe_id)

    def clear_caches(self) -> None:
        """Drop all cached package sizes and prices."""
        self.package_cache.clear()
        self.price_cache.clear()
