"""Unit tests for ingredient line parsing."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from grocerylist.llm.base import LLMError
from grocerylist.parse.interpreter import InterpretationResult, LineInterpreter
from grocerylist.parse.parser import (
    IngredientParser,
    fallback_record,
    parse_ingredients,
    parse_line_with_patterns,
)
from grocerylist.schemas import InterpretedLine

# =============================================================================
# Pattern Tier Tests
# =============================================================================


class TestNoQuantityTier:
    """Lines with 'to taste' / 'as needed' / 'optional' / 'for garnish'."""

    def test_to_taste(self):
        """No quantity, base unit none."""
        record = parse_line_with_patterns("Salt and pepper to taste")
        assert record.quantity is None
        assert record.base_unit == "none"
        assert record.quantity_in_base_units is None
        assert record.canonical_name == "salt and pepper"
        assert record.prep_note == "to taste"

    def test_leading_amount_dropped_from_name(self):
        """An amount on a garnish line does not leak into the name."""
        record = parse_line_with_patterns("2 tbsp cilantro, for garnish")
        assert record.base_name == "cilantro"
        assert record.canonical_name == "cilantro"
        assert record.prep_note == "for garnish"
        assert record.base_unit == "none"

    def test_optional_count(self):
        """'1 lemon, optional' keeps the name, drops the count."""
        record = parse_line_with_patterns("1 lemon, optional")
        assert record.canonical_name == "lemon"
        assert record.quantity is None


class TestQuantityUnitTier:
    """Lines shaped '<number> <unit> <name>'."""

    def test_cloves(self):
        """Count units keep the raw token and a unit base."""
        record = parse_line_with_patterns("2 cloves garlic, minced")
        assert record.quantity == 2
        assert record.unit == "cloves"
        assert record.base_unit == "unit"
        assert record.quantity_in_base_units == 2
        assert record.full_name == "garlic, minced"
        assert record.base_name == "garlic"
        assert record.canonical_name == "garlic"
        assert record.prep_note == "minced"
        assert record.raw_text == "2 cloves garlic, minced"

    def test_raw_text_is_untouched(self):
        """Surrounding whitespace stays in the raw text but not in the name."""
        record = parse_line_with_patterns("  2 cloves garlic, minced \t")
        assert record.raw_text == "  2 cloves garlic, minced \t"
        assert record.full_name == "garlic, minced"
        assert record.quantity == 2

    @pytest.mark.parametrize(
        "line,base_unit,expected",
        [
            ("2 cups broccoli florets", "tbsp", 32),
            ("1/4 cup olive oil", "tbsp", 4),
            ("1 1/2 tbsp. honey", "tbsp", 1.5),
            ("1½ teaspoons cumin", "tsp", 1.5),
            ("3 tablespoons soy sauce", "tbsp", 3),
            ("1 lb ground beef", "unit", 1),
        ],
    )
    def test_base_unit_conversion(self, line, base_unit, expected):
        """Quantity in base units is quantity times the table factor."""
        record = parse_line_with_patterns(line)
        assert record.base_unit == base_unit
        assert record.quantity_in_base_units == pytest.approx(expected)

    def test_parenthetical_between_quantity_and_unit(self):
        """'1 (14 oz) can coconut milk' keeps the aside as prep."""
        record = parse_line_with_patterns("1 (14 oz) can coconut milk")
        assert record.unit == "can"
        assert record.base_unit == "unit"
        assert record.canonical_name == "coconut milk"
        assert record.prep_note == "14 oz"

    def test_range_quantity(self):
        """Ranges collapse to the midpoint."""
        record = parse_line_with_patterns("2-3 cups spinach")
        assert record.quantity == 2.5
        assert record.quantity_in_base_units == 40


class TestQuantityNameTier:
    """Lines shaped '<number> <name>'."""

    def test_count_without_unit(self):
        """No unit token: counted as units."""
        record = parse_line_with_patterns("3 large tomatoes")
        assert record.unit is None
        assert record.base_unit == "unit"
        assert record.quantity_in_base_units == 3
        assert record.base_name == "tomatoes"
        assert record.canonical_name == "tomato"

    def test_unit_followed_by_punctuation_is_delegated(self):
        """'1/2 cup, plus 2 tablespoons olive oil' is not a count of 'cup'."""
        assert parse_line_with_patterns("1/2 cup, plus 2 tablespoons olive oil") is None

    def test_no_number_is_delegated(self):
        """Free text without a leading amount needs interpretation."""
        assert parse_line_with_patterns("a pinch of saffron") is None
        assert parse_line_with_patterns("   ") is None


class TestFallbackRecord:
    """Tests for the minimal fallback record."""

    def test_fallback(self):
        """Trimmed line as the name, no quantity, base unit none."""
        record = fallback_record("  a pinch of saffron ")
        assert record.base_name == "a pinch of saffron"
        assert record.quantity is None
        assert record.unit is None
        assert record.base_unit == "none"

    def test_fallback_still_enriched(self):
        """Prep extraction still applies to fallback records."""
        record = fallback_record("fresh parsley, chopped")
        assert record.base_name == "parsley"
        assert record.prep_note == "chopped"


# =============================================================================
# Batch Parsing Tests
# =============================================================================


class TestIngredientParser:
    """Tests for IngredientParser batch behavior."""

    @pytest.mark.asyncio
    async def test_only_unresolved_lines_are_interpreted(self):
        """Pattern-resolved lines never reach the interpreter."""
        interpreter = MagicMock()
        interpreter.interpret = AsyncMock(
            return_value=[
                InterpretationResult(
                    line="a pinch of saffron",
                    record=InterpretedLine(name="saffron", quantity=1, unit="pinch"),
                )
            ]
        )
        parser = IngredientParser(interpreter)

        records = await parser.parse_many(["2 eggs", "a pinch of saffron", "1 cup milk"])

        interpreter.interpret.assert_awaited_once_with(["a pinch of saffron"])
        assert [r.canonical_name for r in records] == ["egg", "saffron", "milk"]
        assert records[1].raw_text == "a pinch of saffron"
        assert records[1].unit == "pinch"
        assert records[1].base_unit == "unit"

    @pytest.mark.asyncio
    async def test_interpreted_records_are_enriched(self, mock_client, interpretation_response):
        """Interpreted names go through the same normalization."""
        mock_client.complete.return_value = interpretation_response
        parser = IngredientParser(LineInterpreter(mock_client))

        records = await parser.parse_many(
            ["a pinch of saffron", "1/2 cup, plus 2 tablespoons olive oil"]
        )

        assert mock_client.complete.call_count == 1
        assert records[1].canonical_name == "olive oil"
        assert records[1].base_unit == "tbsp"
        assert records[1].quantity_in_base_units == 8

    @pytest.mark.asyncio
    async def test_no_interpreter_uses_fallback(self):
        """Without an interpreter, unresolved lines get fallback records."""
        records = await parse_ingredients(["a pinch of saffron", "2 eggs"])

        assert len(records) == 2
        assert records[0].base_unit == "none"
        assert records[0].quantity is None
        assert records[1].canonical_name == "egg"

    @pytest.mark.asyncio
    async def test_service_failure_never_drops_lines(self, mock_client):
        """A failed batch degrades each unresolved line independently."""
        mock_client.complete.side_effect = LLMError("down")
        lines = ["a pinch of saffron", "some crusty bread", "zest of one orange"]

        records = await IngredientParser(LineInterpreter(mock_client)).parse_many(lines)

        assert len(records) == len(lines)
        assert [r.raw_text for r in records] == lines
        assert all(r.base_unit == "none" for r in records)

    @pytest.mark.asyncio
    async def test_misaligned_interpreter_results(self):
        """A result list of the wrong length falls back for every line."""
        interpreter = MagicMock()
        interpreter.interpret = AsyncMock(return_value=[])

        records = await IngredientParser(interpreter).parse_many(["a pinch of saffron"])

        assert len(records) == 1
        assert records[0].base_name == "a pinch of saffron"

    @pytest.mark.asyncio
    async def test_parse_single(self):
        """parse() handles one line."""
        record = await IngredientParser().parse("2 cloves garlic")
        assert record.canonical_name == "garlic"
        assert record.quantity_in_base_units == 2
