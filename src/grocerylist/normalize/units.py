"""Unit table, quantity parsing and display formatting."""

import math
import re
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping

from grocerylist.logging_config import get_logger
from grocerylist.models import BaseUnit, DisplayQuantity

logger = get_logger(__name__)


# =============================================================================
# Unit Table
# =============================================================================

TBSP_PER_CUP = 16
TSP_PER_TBSP = 3


@dataclass(frozen=True)
class UnitConversion:
    """Where a raw unit token lands in the reduced measurement space."""

    base_unit: BaseUnit
    factor: float


# Volume tokens that collapse to tablespoons
TABLESPOON_UNITS: dict[str, float] = {
    "tbsp": 1.0,
    "tbsps": 1.0,
    "tbs": 1.0,
    "tbl": 1.0,
    "tablespoon": 1.0,
    "tablespoons": 1.0,
    "cup": float(TBSP_PER_CUP),
    "cups": float(TBSP_PER_CUP),
    "c": float(TBSP_PER_CUP),
    "pint": 32.0,
    "pints": 32.0,
    "pt": 32.0,
    "quart": 64.0,
    "quarts": 64.0,
    "qt": 64.0,
    "gallon": 256.0,
    "gallons": 256.0,
    "gal": 256.0,
}

# Teaspoons stay teaspoons; promoting them here would lose precision
TEASPOON_UNITS: dict[str, float] = {
    "tsp": 1.0,
    "tsps": 1.0,
    "teaspoon": 1.0,
    "teaspoons": 1.0,
}

# Count-like tokens: never numerically convertible to each other
COUNT_UNITS: tuple[str, ...] = (
    "clove",
    "cloves",
    "can",
    "cans",
    "head",
    "heads",
    "bunch",
    "bunches",
    "fillet",
    "fillets",
    "filet",
    "filets",
    "breast",
    "breasts",
    "thigh",
    "thighs",
    "lb",
    "lbs",
    "pound",
    "pounds",
    "oz",
    "ounce",
    "ounces",
    "g",
    "gram",
    "grams",
    "kg",
    "kilogram",
    "kilograms",
    "ml",
    "milliliter",
    "milliliters",
    "l",
    "liter",
    "liters",
    "litre",
    "litres",
    "piece",
    "pieces",
    "slice",
    "slices",
    "sprig",
    "sprigs",
    "stalk",
    "stalks",
    "stick",
    "sticks",
    "jar",
    "jars",
    "package",
    "packages",
    "pkg",
    "bag",
    "bags",
    "box",
    "boxes",
    "bottle",
    "bottles",
    "container",
    "containers",
    "pinch",
    "pinches",
    "dash",
    "dashes",
    "handful",
    "handfuls",
    "sheet",
    "sheets",
    "strip",
    "strips",
    "ear",
    "ears",
    "block",
    "blocks",
    "leaf",
    "leaves",
)


def _build_unit_table() -> Mapping[str, UnitConversion]:
    table: dict[str, UnitConversion] = {}
    for token, factor in TABLESPOON_UNITS.items():
        table[token] = UnitConversion("tbsp", factor)
    for token, factor in TEASPOON_UNITS.items():
        table[token] = UnitConversion("tsp", factor)
    for token in COUNT_UNITS:
        table[token] = UnitConversion("unit", 1.0)
    return MappingProxyType(table)


UNIT_TABLE: Mapping[str, UnitConversion] = _build_unit_table()

# Unrecognized tokens degrade to a plain count
UNKNOWN_UNIT = UnitConversion("unit", 1.0)


def clean_unit_token(unit: str) -> str:
    """Lowercase a unit token and drop surrounding punctuation ("Tbsp." -> "tbsp")."""
    return unit.strip().lower().strip(".,;:")


def lookup_unit(unit: str | None) -> UnitConversion | None:
    """Look up a raw unit token; returns None when the token is not in the table."""
    if not unit:
        return None
    return UNIT_TABLE.get(clean_unit_token(unit))


def is_unit_token(token: str | None) -> bool:
    """Check whether a token is a recognized unit."""
    return lookup_unit(token) is not None


def normalize_unit(
    unit: str | None,
    quantity: float | None,
) -> tuple[BaseUnit, float | None]:
    """
    Reduce a raw unit and quantity into the base measurement space.

    Returns:
        Tuple of (base_unit, quantity_in_base_units).
    """
    if quantity is None:
        return "none", None

    # A bare count such as "2 eggs"
    if not unit or not unit.strip():
        return "unit", quantity

    conversion = lookup_unit(unit)
    if conversion is None:
        logger.debug(f"Unknown unit token {unit!r}, treating as count")
        conversion = UNKNOWN_UNIT

    return conversion.base_unit, quantity * conversion.factor


# =============================================================================
# Quantity Parsing
# =============================================================================

UNICODE_FRACTIONS: dict[str, float] = {
    "½": 1 / 2,
    "⅓": 1 / 3,
    "⅔": 2 / 3,
    "¼": 1 / 4,
    "¾": 3 / 4,
    "⅕": 1 / 5,
    "⅙": 1 / 6,
    "⅛": 1 / 8,
    "⅜": 3 / 8,
    "⅝": 5 / 8,
    "⅞": 7 / 8,
}

_UNICODE_CLASS = "[" + "".join(UNICODE_FRACTIONS) + "]"

# One amount: mixed number, unicode fraction, simple fraction or decimal
SINGLE_QUANTITY_PATTERN = (
    rf"(?:\d+\s+\d+\s*/\s*\d+|\d+\s*{_UNICODE_CLASS}|{_UNICODE_CLASS}"
    rf"|\d+\s*/\s*\d+|\d*\.\d+|\d+)"
)

# An amount or a range of amounts ("2-3", "2 to 3")
QUANTITY_PATTERN = (
    rf"{SINGLE_QUANTITY_PATTERN}(?:(?:\s*[-–]\s*|\s+to\s+){SINGLE_QUANTITY_PATTERN})?"
)

_RANGE_SPLIT = re.compile(rf"^({SINGLE_QUANTITY_PATTERN})(?:\s*[-–]\s*|\s+to\s+)(.+)$")


def sanitize_quantity(value: float | None) -> float | None:
    """Treat zero, negative, NaN and infinite quantities as absent."""
    if value is None:
        return None
    try:
        value = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(value) or math.isinf(value) or value <= 0:
        return None
    return value


def _parse_single(text: str) -> float | None:
    text = text.strip()

    mixed_match = re.fullmatch(r"(\d+)\s+(\d+)\s*/\s*(\d+)", text)
    if mixed_match:
        whole, num, denom = (int(g) for g in mixed_match.groups())
        return whole + num / denom if denom else None

    unicode_match = re.fullmatch(rf"(\d*)\s*({_UNICODE_CLASS})", text)
    if unicode_match:
        whole = int(unicode_match.group(1)) if unicode_match.group(1) else 0
        return whole + UNICODE_FRACTIONS[unicode_match.group(2)]

    frac_match = re.fullmatch(r"(\d+)\s*/\s*(\d+)", text)
    if frac_match:
        num, denom = int(frac_match.group(1)), int(frac_match.group(2))
        return num / denom if denom else None

    if re.fullmatch(r"\d*\.\d+|\d+", text):
        return float(text)

    return None


def parse_quantity_string(quantity_str: str | None) -> float | None:
    """
    Parse a quantity string into a float.

    Handles formats like:
    - "2"
    - "1.5"
    - "1/2"
    - "1 1/2" and "1½" (one and a half)
    - "2-3" and "2 to 3" (range, returns midpoint)

    Returns None when the text is not a usable positive amount.
    """
    if not quantity_str:
        return None

    text = quantity_str.strip().lower()

    range_match = _RANGE_SPLIT.match(text)
    if range_match:
        low = _parse_single(range_match.group(1))
        high = _parse_single(range_match.group(2))
        if low is not None and high is not None:
            return sanitize_quantity((low + high) / 2)
        return None

    return sanitize_quantity(_parse_single(text))


# =============================================================================
# Display Formatting
# =============================================================================


def _cup_label(count: float) -> str:
    return "cup" if count == 1 else "cups"


def format_quantity(
    total_quantity: float | None,
    base_unit: BaseUnit | None,
    name: str = "",
) -> DisplayQuantity:
    """
    Convert an aggregated quantity into a human-friendly amount and unit.

    Pure function of (total_quantity, base_unit). Tablespoons of a cup or more
    render as whole cups with the remainder dropped; teaspoons render as
    tablespoons only when evenly divisible. Count-like units get an empty unit
    label, the caller supplies the original token.
    """
    if total_quantity is None or base_unit in (None, "none"):
        return DisplayQuantity()

    if base_unit == "tbsp":
        if total_quantity >= TBSP_PER_CUP:
            cups = total_quantity // TBSP_PER_CUP
            if total_quantity % TBSP_PER_CUP:
                logger.debug(
                    f"Dropping {total_quantity % TBSP_PER_CUP:g} tbsp remainder for {name or 'item'}"
                )
            return DisplayQuantity(quantity=cups, unit=_cup_label(cups))
        return DisplayQuantity(quantity=total_quantity, unit="tbsp")

    if base_unit == "tsp":
        if total_quantity >= TSP_PER_TBSP and total_quantity % TSP_PER_TBSP == 0:
            return DisplayQuantity(quantity=total_quantity // TSP_PER_TBSP, unit="tbsp")
        return DisplayQuantity(quantity=total_quantity, unit="tsp")

    if base_unit == "cup":
        return DisplayQuantity(quantity=total_quantity, unit=_cup_label(total_quantity))

    if base_unit == "unit":
        return DisplayQuantity(quantity=total_quantity, unit="")

    return DisplayQuantity()
