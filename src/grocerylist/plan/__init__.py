"""Aggregation, categorization and grocery list generation."""

from grocerylist.plan.aggregate import aggregate_ingredients, format_display_name
from grocerylist.plan.categorize import (
    IngredientCategorizer,
    SectionClassifier,
    apply_section_overrides,
)
from grocerylist.plan.grocery_list import (
    EmptyIngredientListError,
    GroceryList,
    GroceryListError,
    GroceryListGenerator,
    generate_grocery_list,
)

__all__ = [
    "EmptyIngredientListError",
    "GroceryList",
    "GroceryListError",
    "GroceryListGenerator",
    "IngredientCategorizer",
    "SectionClassifier",
    "aggregate_ingredients",
    "apply_section_overrides",
    "format_display_name",
    "generate_grocery_list",
]
