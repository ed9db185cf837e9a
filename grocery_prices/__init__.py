"""Grocery Prices - Recipe shopping cost estimates based on retail package sizes."""

__version__ = "1.0.0"

from .api import SpoonacularAPI, SpoonacularAPIError
from .cache import DurableCache
from .packages import PACKAGE_SIZES, PackageDescriptor, PackageResolver, Provenance
from .prices import IngredientPriceService
from .service import GroceryPrices
from .shopping import InvalidIngredientsError, ShoppingCalculator, ShoppingSummary
from .units import Quantity, convert_unit, parse_quantity
from .usage import UsageResult, compute_usage

__all__ = [
    "SpoonacularAPI",
    "SpoonacularAPIError",
    "DurableCache",
    "PACKAGE_SIZES",
    "PackageDescriptor",
    "PackageResolver",
    "Provenance",
    "IngredientPriceService",
    "GroceryPrices",
    "InvalidIngredientsError",
    "ShoppingCalculator",
    "ShoppingSummary",
    "Quantity",
    "parse_quantity",
    "convert_unit",
    "UsageResult",
    "compute_usage",
]
