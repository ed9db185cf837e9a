"""Quantity parsing and unit conversion utilities for package usage calculations."""

import logging
import re
from dataclasses import dataclass
from typing import Literal

logger = logging.getLogger(__name__)

UnitType = Literal["weight", "volume", "count"]


@dataclass
class Quantity:
    """A numeric amount with its (unnormalized) unit token."""

    value: float
    unit: str

    def __str__(self) -> str:
        value = self.value
        if value == int(value):
            return f"{int(value)} {self.unit}"
        return f"{value:g} {self.unit}"


QUANTITY_PATTERN = re.compile(r"^([\d.]+)\s*(.+)$")

# Substring patterns. "lb" inside a longer token still counts.
UNIT_PATTERNS: tuple[tuple[UnitType, re.Pattern[str]], ...] = (
    ("weight", re.compile(r"g|kg|oz|lb", re.IGNORECASE)),
    ("volume", re.compile(r"ml|l|tbsp|tsp|cup", re.IGNORECASE)),
    ("count", re.compile(r"piece|unit|pack|bunch", re.IGNORECASE)),
)

# Fixed-factor conversions: (from, to) -> multiplier
CONVERSION_FACTORS: dict[tuple[str, str], float] = {
    # Weight
    ("g", "kg"): 0.001,
    ("kg", "g"): 1000.0,
    # Volume
    ("ml", "l"): 0.001,
    ("l", "ml"): 1000.0,
    ("tbsp", "ml"): 15.0,
    ("tsp", "ml"): 5.0,
    ("cup", "ml"): 250.0,
}

# Ingredient-specific weights in grams
GRAMS_PER_PIECE: dict[str, float] = {
    "chicken breast": 200.0,
    "bell pepper": 150.0,
    "garlic": 5.0,
    "lemon": 100.0,
    "spring onion": 30.0,
}
DEFAULT_GRAMS_PER_PIECE = 100.0

GRAMS_PER_BULB: dict[str, float] = {
    "garlic": 45.0,
}
DEFAULT_GRAMS_PER_BULB = 45.0

# Count units that can be turned into a weight, with their lookup tables
COUNT_WEIGHTS: dict[str, tuple[dict[str, float], float]] = {
    "piece": (GRAMS_PER_PIECE, DEFAULT_GRAMS_PER_PIECE),
    "bulb": (GRAMS_PER_BULB, DEFAULT_GRAMS_PER_BULB),
}


def parse_quantity(text: str) -> Quantity:
    """
    Split a quantity string into a numeric value and a unit.

    Examples:
        "150g" -> Quantity(150, "g")
        "2 tbsp" -> Quantity(2, "tbsp")
        "3 pieces" -> Quantity(3, "pieces")
        "a pinch" -> Quantity(1, "a pinch")

    When no numeric prefix is found the whole string becomes the unit, which
    callers should treat as a parse failure (see is_parse_failure).
    """
    match = QUANTITY_PATTERN.match(text)
    if not match:
        return Quantity(value=1.0, unit=text)

    try:
        value = float(match.group(1))
    except ValueError:
        # e.g. "1.2.3 g" or a lone "."
        return Quantity(value=1.0, unit=text)

    return Quantity(value=value, unit=match.group(2).strip())


def is_parse_failure(text: str, quantity: Quantity) -> bool:
    """Check whether parse_quantity failed to find a number in text."""
    return quantity.unit == text


def classify_unit(unit: str | None) -> frozenset[UnitType]:
    """
    Classify a unit token by substring membership.

    A token can belong to several categories ("lb" contains "l", so "bulbs"
    is both weight and volume). An empty set means the unit is unknown.
    """
    if not unit:
        return frozenset()

    return frozenset(unit_type for unit_type, pattern in UNIT_PATTERNS if pattern.search(unit))


def convert_unit(value: float, from_unit: str, to_unit: str, ingredient: str = "") -> float:
    """
    Convert a value between two units.

    Args:
        value: Quantity value
        from_unit: Source unit
        to_unit: Target unit
        ingredient: Ingredient name, used for piece/bulb to weight conversions

    Returns:
        The converted value. When no conversion rule exists the value is
        returned unchanged and a warning is logged.
    """
    source = from_unit.lower().strip()
    target = to_unit.lower().strip()

    if source == target:
        return value

    factor = CONVERSION_FACTORS.get((source, target))
    if factor is not None:
        return value * factor

    if source in COUNT_WEIGHTS and target in ("g", "kg"):
        table, default = COUNT_WEIGHTS[source]
        grams = table.get(ingredient.lower().strip(), default)
        return value * grams * (0.001 if target == "kg" else 1.0)

    logger.warning("No conversion found from %s to %s for %s", from_unit, to_unit, ingredient)
    return value
