"""Percentage-of-package usage calculations."""

import logging
from dataclasses import dataclass
from typing import Any

from .packages import PackageDescriptor
from .units import classify_unit, convert_unit, parse_quantity

logger = logging.getLogger(__name__)

# Used when recipe and package units can't be compared
UNCONVERTIBLE_PERCENT_USED = 0.5

# Comparison units, in the order categories are tried
CANONICAL_UNITS = {"weight": "g", "volume": "ml"}


@dataclass
class UsageResult:
    """How much of one package a recipe quantity consumes."""

    percent_used: float
    package_price: float
    used_cost: float
    package_size: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "percentUsed": self.percent_used,
            "packagePrice": self.package_price,
            "usedCost": self.used_cost,
            "packageSize": self.package_size,
        }


def clamp_percent(value: float) -> float:
    """Clamp a usage fraction to [0, 1]. Recipes needing several packages cap at one."""
    return min(1.0, max(0.0, value))


def _ratio(recipe_amount: float, package_amount: float) -> float | None:
    if package_amount <= 0:
        return None
    return recipe_amount / package_amount


def compute_usage(quantity: str, package: PackageDescriptor, ingredient_name: str = "") -> UsageResult:
    """
    Calculate what fraction of a package a recipe quantity uses.

    Args:
        quantity: Recipe quantity string (e.g., "150g", "2 tbsp")
        package: Resolved package descriptor
        ingredient_name: Ingredient name, used for piece-to-weight conversions

    Returns:
        UsageResult with percent_used in [0, 1]. When the units can't be
        compared, percent_used is 0.5.
    """
    recipe_qty = parse_quantity(quantity)
    package_qty = parse_quantity(package.size)

    recipe_types = classify_unit(recipe_qty.unit)
    package_types = classify_unit(package_qty.unit)
    shared = recipe_types & package_types

    percent_used: float | None = None

    # Weight is tried before volume, then count
    canonical = next((unit_type for unit_type in CANONICAL_UNITS if unit_type in shared), None)

    if canonical is not None:
        target = CANONICAL_UNITS[canonical]
        percent_used = _ratio(
            convert_unit(recipe_qty.value, recipe_qty.unit, target, ingredient_name),
            convert_unit(package_qty.value, package_qty.unit, target, ingredient_name),
        )
    elif "count" in shared:
        percent_used = _ratio(recipe_qty.value, package_qty.value)
    elif "count" in recipe_types and "weight" in package_types:
        percent_used = _ratio(
            convert_unit(recipe_qty.value, recipe_qty.unit, "g", ingredient_name),
            convert_unit(package_qty.value, package_qty.unit, "g", ingredient_name),
        )

    if percent_used is None:
        logger.warning(
            "Cannot convert between %s and %s for %s",
            recipe_qty.unit,
            package_qty.unit,
            ingredient_name,
        )
        percent_used = UNCONVERTIBLE_PERCENT_USED

    percent_used = clamp_percent(percent_used)

    return UsageResult(
        percent_used=percent_used,
        package_price=package.price,
        used_cost=package.price * percent_used,
        package_size=package.size,
    )
