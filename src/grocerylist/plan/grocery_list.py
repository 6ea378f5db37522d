"""Grocery list generation from raw recipe ingredient lines."""

import uuid
from dataclasses import dataclass, field
from typing import Any

from grocerylist.config import get_settings
from grocerylist.llm.base import CompletionClient
from grocerylist.llm.openai import OpenAIChatClient
from grocerylist.logging_config import LoggingContext, get_logger
from grocerylist.models import DEFAULT_SECTION, SECTION_ORDER, AggregatedIngredient
from grocerylist.parse.interpreter import LineInterpreter
from grocerylist.parse.parser import IngredientParser
from grocerylist.plan.aggregate import aggregate_ingredients
from grocerylist.plan.categorize import IngredientCategorizer, SectionClassifier

logger = get_logger(__name__)


class GroceryListError(Exception):
    """Base error for grocery list generation."""


class EmptyIngredientListError(GroceryListError):
    """Raised when there are no usable ingredient lines at all."""


@dataclass
class GroceryList:
    """Sectioned, deduplicated grocery list."""

    list_id: str
    items: list[AggregatedIngredient] = field(default_factory=list)
    line_count: int = 0

    @property
    def items_by_section(self) -> dict[str, list[AggregatedIngredient]]:
        """Entries grouped by section in display order; empty sections omitted."""
        grouped: dict[str, list[AggregatedIngredient]] = {section: [] for section in SECTION_ORDER}
        for item in self.items:
            grouped.setdefault(item.section or DEFAULT_SECTION, []).append(item)
        return {section: entries for section, entries in grouped.items() if entries}

    def to_dict(self) -> dict[str, Any]:
        """Plain-data view for serialization."""
        sections: dict[str, list[dict[str, Any]]] = {}
        for section, entries in self.items_by_section.items():
            sections[section] = []
            for item in entries:
                display = item.display_quantity()
                sections[section].append(
                    {
                        "name": item.display_name,
                        "canonical_name": item.canonical_name,
                        "quantity": display.quantity,
                        "unit": display.unit,
                        "base_unit": item.base_unit,
                        "total_quantity": item.total_quantity,
                        "prep_notes": item.prep_notes,
                        "lines": [line.raw_text for line in item.lines],
                    }
                )
        return {
            "list_id": self.list_id,
            "line_count": self.line_count,
            "item_count": len(self.items),
            "sections": sections,
        }


class GroceryListGenerator:
    """
    Turns raw ingredient lines into a GroceryList:
    - Pattern parsing with one batched interpretation call for the rest
    - Aggregation by canonical name and base unit
    - Section assignment with one batched classification call
    """

    def __init__(
        self,
        client: CompletionClient | None = None,
        use_ai: bool | None = None,
    ):
        settings = get_settings()
        self.use_ai = settings.use_ai if use_ai is None else use_ai

        self.client: CompletionClient | None = None
        self._owns_client = False
        if self.use_ai:
            if client is None:
                if not settings.has_api_key:
                    logger.warning("OPENAI_API_KEY is not set; external calls will fall back")
                client = OpenAIChatClient()
                self._owns_client = True
            self.client = client

        interpreter = LineInterpreter(self.client) if self.client is not None else None
        classifier = SectionClassifier(self.client) if self.client is not None else None
        self.parser = IngredientParser(interpreter)
        self.categorizer = IngredientCategorizer(classifier)

    async def generate(self, lines: list[str], list_id: str | None = None) -> GroceryList:
        """
        Generate a grocery list from ingredient lines.

        Args:
            lines: Raw ingredient lines, across any number of recipes.
            list_id: Optional identifier, generated when omitted.

        Returns:
            GroceryList with one entry per canonical name and base unit.

        Raises:
            EmptyIngredientListError: If no non-blank line was given.
        """
        usable = [line for line in lines if line and line.strip()]
        if not usable:
            raise EmptyIngredientListError("No ingredient lines to build a grocery list from")

        list_id = list_id or str(uuid.uuid4())

        with LoggingContext(list_id=list_id):
            logger.info(f"Generating grocery list from {len(usable)} line(s)")

            parsed = await self.parser.parse_many(usable)
            aggregated = aggregate_ingredients(parsed)
            await self.categorizer.assign_sections(aggregated)

            grocery_list = GroceryList(list_id=list_id, items=aggregated, line_count=len(usable))

            logger.info(
                f"Generated grocery list: {len(aggregated)} items in "
                f"{len(grocery_list.items_by_section)} section(s)"
            )

        return grocery_list

    async def generate_for_recipes(
        self,
        recipes: list[list[str] | str],
        list_id: str | None = None,
    ) -> GroceryList:
        """Generate one list from several recipes' ingredients, concatenated in order."""
        lines: list[str] = []
        for recipe in recipes:
            if isinstance(recipe, str):
                lines.extend(recipe.splitlines())
            else:
                lines.extend(recipe)
        return await self.generate(lines, list_id=list_id)

    async def close(self) -> None:
        """Close the completion client if this generator created it."""
        if self._owns_client and self.client is not None:
            await self.client.close()


async def generate_grocery_list(
    lines: list[str],
    client: CompletionClient | None = None,
    use_ai: bool | None = None,
) -> GroceryList:
    """Convenience wrapper: build a generator, run it once, release its client."""
    generator = GroceryListGenerator(client=client, use_ai=use_ai)
    try:
        return await generator.generate(lines)
    finally:
        await generator.close()
