"""Ingredient line parsing."""

from grocerylist.parse.interpreter import InterpretationResult, LineInterpreter
from grocerylist.parse.parser import (
    IngredientParser,
    fallback_record,
    parse_ingredients,
    parse_line_with_patterns,
)

__all__ = [
    "IngredientParser",
    "InterpretationResult",
    "LineInterpreter",
    "fallback_record",
    "parse_ingredients",
    "parse_line_with_patterns",
]
