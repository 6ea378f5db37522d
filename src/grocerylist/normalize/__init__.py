"""Unit table and ingredient name normalization."""

from grocerylist.normalize.names import (
    SYNONYMS,
    NormalizedName,
    canonicalize,
    extract_base_name_and_prep,
    is_salt_and_pepper,
    normalize_name,
)
from grocerylist.normalize.units import (
    UNIT_TABLE,
    UnitConversion,
    format_quantity,
    lookup_unit,
    normalize_unit,
    parse_quantity_string,
)

__all__ = [
    "SYNONYMS",
    "UNIT_TABLE",
    "NormalizedName",
    "UnitConversion",
    "canonicalize",
    "extract_base_name_and_prep",
    "format_quantity",
    "is_salt_and_pepper",
    "lookup_unit",
    "normalize_name",
    "normalize_unit",
    "parse_quantity_string",
]
