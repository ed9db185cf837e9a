"""Retail package resolution: static table, cache, remote lookup and estimation."""

import logging
import re
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any

from .api import SpoonacularAPI, SpoonacularAPIError
from .cache import DurableCache
from .prices import IngredientPriceService

logger = logging.getLogger(__name__)


class Provenance(str, Enum):
    """Which resolution tier produced a package descriptor."""

    HARDCODED = "hardcoded"
    CACHE = "cache"
    REMOTE = "remote"
    ESTIMATED = "estimated"
    ESTIMATED_AFTER_ERROR = "estimated (after error)"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class PackageDescriptor:
    """The smallest retail unit purchasable for an ingredient."""

    size: str
    price: float
    source: Provenance

    def to_dict(self) -> dict[str, Any]:
        return {"size": self.size, "price": self.price, "source": self.source.value}

    def to_cache_value(self) -> dict[str, Any]:
        return {"size": self.size, "price": self.price}

    @classmethod
    def from_cache_value(cls, data: Any, source: Provenance) -> "PackageDescriptor | None":
        """Rebuild a descriptor from a cached {size, price} dict; None if malformed."""
        if not isinstance(data, dict):
            return None
        size = data.get("size")
        price = data.get("price")
        if not isinstance(size, str) or isinstance(price, bool) or not isinstance(price, (int, float)):
            return None
        return cls(size=size, price=float(price), source=source)


def _package(size: str, price: float) -> PackageDescriptor:
    return PackageDescriptor(size=size, price=price, source=Provenance.HARDCODED)


# Standard package sizes for common ingredients
PACKAGE_SIZES: MappingProxyType[str, PackageDescriptor] = MappingProxyType(
    {
        # Proteins
        "chicken breast": _package("500g", 5.99),
        "ground beef": _package("500g", 4.99),
        "salmon fillet": _package("250g", 6.99),
        "tofu": _package("400g", 2.49),
        # Grains
        "rice": _package("1kg", 2.99),
        "pasta": _package("500g", 1.99),
        "quinoa": _package("500g", 4.99),
        "flour": _package("1kg", 2.49),
        "cornflour": _package("500g", 1.99),
        # Oils & sauces
        "olive oil": _package("500ml", 6.99),
        "vegetable oil": _package("1L", 3.49),
        "soy sauce": _package("150ml", 2.79),
        "honey": _package("340g", 4.99),
        "sesame oil": _package("250ml", 4.99),
        "rice vinegar": _package("150ml", 2.49),
        # Spices & herbs
        "salt": _package("750g", 1.29),
        "black pepper": _package("100g", 2.99),
        "garlic powder": _package("50g", 2.49),
        "ginger": _package("100g", 1.99),
        "garlic": _package("3 bulbs", 2.29),
        "sesame seeds": _package("100g", 2.79),
        # Produce
        "bell pepper": _package("3 pack", 2.99),
        "spring onion": _package("bunch", 1.29),
        "onion": _package("3 pack", 1.99),
        "tomato": _package("6 pack", 2.49),
        "lemon": _package("3 pack", 2.49),
    }
)

# Estimation heuristics, checked in order: (category, keywords, size, price)
ESTIMATE_CATEGORIES: tuple[tuple[str, tuple[str, ...], str, float], ...] = (
    ("protein", ("chicken", "beef", "fish", "pork", "tofu", "meat"), "500g", 5.99),
    ("grain", ("rice", "pasta", "flour", "grain", "quinoa", "bean"), "1kg", 2.99),
    ("oil-liquid", ("oil", "sauce", "vinegar", "juice", "milk", "cream"), "500ml", 3.99),
    ("spice", ("spice", "herb", "powder", "salt", "pepper", "seasoning"), "50g", 2.49),
    (
        "produce",
        ("vegetable", "fruit", "onion", "pepper", "carrot", "tomato", "lettuce", "potato"),
        "500g",
        2.49,
    ),
)
DEFAULT_ESTIMATE = ("250g", 3.49)

# Package price when a product has none and no unit price is known
DEFAULT_REMOTE_PRICE = 3.99


def normalize_name(name: str) -> str:
    """Normalize an ingredient name for package lookups."""
    return name.lower().strip()


def estimate_package_info(name: str) -> tuple[str, float]:
    """
    Guess a package size and price from the ingredient's category.

    Returns:
        Tuple of (size, price)
    """
    name = name.lower()
    for _category, keywords, size, price in ESTIMATE_CATEGORIES:
        if any(keyword in name for keyword in keywords):
            return size, price
    return DEFAULT_ESTIMATE


def _split_amount(text: Any) -> tuple[float, str]:
    """Pull the first number and the first word of letters out of a product field."""
    if not isinstance(text, str):
        text = str(text) if isinstance(text, (int, float)) else ""
    number = re.search(r"[\d.]+", text)
    letters = re.search(r"[a-zA-Z]+", text)
    try:
        value = float(number.group(0)) if number else 0.0
    except ValueError:
        value = 0.0
    return value, letters.group(0) if letters else "g"


def _format_size(value: float, unit: str) -> str:
    if value == int(value):
        return f"{int(value)}{unit}"
    return f"{value}{unit}"


def extract_package_size(product: dict[str, Any] | None) -> dict[str, Any] | None:
    """
    Extract package size information from a product.

    Uses the package weight when present, otherwise servings times serving size.

    Returns:
        Dict with 'size' and 'price' (price may be None), or None if not found
    """
    if not product:
        return None

    price = product.get("price") or None

    if product.get("packageWeight"):
        weight, unit = _split_amount(product["packageWeight"])
        if weight > 0:
            return {"size": _format_size(weight, unit), "price": price}

    if product.get("servings") and product.get("serving_size"):
        try:
            servings = float(product["servings"])
        except (TypeError, ValueError):
            servings = 0.0
        serving_size, unit = _split_amount(product["serving_size"])
        if servings > 0 and serving_size > 0:
            return {"size": _format_size(servings * serving_size, unit), "price": price}

    return None


class PackageResolver:
    """
    Resolve ingredient names to retail package descriptors.

    Lookup order, first hit wins:
        1. Static PACKAGE_SIZES table
        2. Package size cache
        3. Remote product lookup (only with an API key)
        4. Category estimate

    Remote and estimated results are written to the cache so repeated lookups
    return the same descriptor tagged as cached.
    """

    def __init__(
        self,
        cache: DurableCache,
        api: SpoonacularAPI | None = None,
        price_service: IngredientPriceService | None = None,
        static_table: MappingProxyType[str, PackageDescriptor] = PACKAGE_SIZES,
    ) -> None:
        self.cache = cache
        self.api = api
        self.price_service = price_service
        self.static_table = static_table

    async def resolve(self, ingredient_name: str) -> PackageDescriptor:
        """Resolve the package descriptor for an ingredient. Never raises for lookup failures."""
        name = normalize_name(ingredient_name)

        static = self.static_table.get(name)
        if static is not None:
            return static

        cached = PackageDescriptor.from_cache_value(self.cache.get(name), Provenance.CACHE)
        if cached is not None:
            return cached

        try:
            remote = await self._lookup_remote(name)
        except Exception:
            logger.exception("Error fetching package info for %s", name)
            size, price = estimate_package_info(name)
            return PackageDescriptor(size=size, price=price, source=Provenance.ESTIMATED_AFTER_ERROR)

        if remote is not None:
            self.cache.set(name, remote.to_cache_value())
            return remote

        size, price = estimate_package_info(name)
        estimated = PackageDescriptor(size=size, price=price, source=Provenance.ESTIMATED)
        self.cache.set(name, estimated.to_cache_value())
        return estimated

    async def _lookup_remote(self, name: str) -> PackageDescriptor | None:
        """Look the ingredient up as a grocery product; None when there's no match."""
        if self.api is None or not self.api.has_api_key:
            return None

        product = await self.api.find_product(name)
        if product is None:
            return None
        if not isinstance(product, dict):
            raise SpoonacularAPIError(f"Malformed product data for {name}")

        package = extract_package_size(product)
        if package is None:
            return None

        price = package["price"]
        if price is None:
            unit_price = self.price_service.get_cached_price(name) if self.price_service else None
            if unit_price is not None and unit_price.price:
                price = unit_price.price * 10
            else:
                price = DEFAULT_REMOTE_PRICE

        return PackageDescriptor(size=package["size"], price=float(price), source=Provenance.REMOTE)

    def list_known_packages(self) -> dict[str, PackageDescriptor]:
        """All static packages plus cached ones; static entries win on collision."""
        packages = dict(self.static_table)
        for name, value in self.cache.items():
            if name in packages:
                continue
            descriptor = PackageDescriptor.from_cache_value(value, Provenance.CACHE)
            if descriptor is not None:
                packages[name] = descriptor
        return packages
