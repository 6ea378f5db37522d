"""Ingredient line parsing: pattern tiers with batched interpretation fallback."""

import re

from grocerylist.logging_config import get_logger
from grocerylist.models import ParsedIngredient
from grocerylist.normalize.names import normalize_name
from grocerylist.normalize.units import (
    QUANTITY_PATTERN,
    clean_unit_token,
    is_unit_token,
    normalize_unit,
    parse_quantity_string,
    sanitize_quantity,
)
from grocerylist.parse.interpreter import InterpretationResult, LineInterpreter

logger = get_logger(__name__)


# =============================================================================
# Line Patterns
# =============================================================================

NO_QUANTITY_PATTERN = re.compile(r"to taste|as needed|optional|for garnish", re.IGNORECASE)

# "2 cups milk", "1 (14 oz) can coconut milk", "1 1/2 tbsp. honey"
QUANTITY_UNIT_NAME_PATTERN = re.compile(
    rf"^({QUANTITY_PATTERN})\s*(\([^)]*\)\s*)?([a-z]+\.?)\s+(.+)$",
    re.IGNORECASE,
)

# "2 eggs", "3 large tomatoes"
QUANTITY_NAME_PATTERN = re.compile(rf"^({QUANTITY_PATTERN})\s+(.+)$", re.IGNORECASE)

# Leading amount on a no-quantity line ("2 tbsp cilantro, for garnish")
LEADING_AMOUNT_PATTERN = re.compile(
    rf"^(?:{QUANTITY_PATTERN})\s*(?:([a-z]+\.?)\s+)?",
    re.IGNORECASE,
)


def enrich(
    raw_text: str,
    name: str,
    quantity: float | None = None,
    unit: str | None = None,
) -> ParsedIngredient:
    """
    Build a ParsedIngredient from a name, quantity and unit.

    Every tier ends here: base name and prep note extraction, canonical name
    derivation and unit normalization.
    """
    full_name = name.strip()
    normalized = normalize_name(full_name)
    quantity = sanitize_quantity(quantity)
    unit = unit.strip() if unit and unit.strip() else None
    base_unit, quantity_in_base_units = normalize_unit(unit, quantity)

    return ParsedIngredient(
        raw_text=raw_text,
        full_name=full_name,
        base_name=normalized.base_name,
        canonical_name=normalized.canonical_name,
        prep_note=normalized.prep_note,
        quantity=quantity,
        unit=unit,
        base_unit=base_unit,
        quantity_in_base_units=quantity_in_base_units,
    )


def fallback_record(line: str) -> ParsedIngredient:
    """Minimal record for a line nothing could interpret: no quantity, no unit."""
    return enrich(line, line.strip())


def _strip_leading_amount(text: str) -> str:
    match = LEADING_AMOUNT_PATTERN.match(text)
    if not match:
        return text
    if match.group(1) and not is_unit_token(match.group(1)):
        # The word after the number is part of the name
        return text[match.start(1) :]
    return text[match.end() :] or text


def parse_line_with_patterns(line: str) -> ParsedIngredient | None:
    """
    Try the deterministic tiers on one line.

    Returns None when the line needs external interpretation.
    """
    trimmed = line.strip()
    if not trimmed:
        return None

    # Tier 1: "to taste" / "as needed" / "optional" / "for garnish"
    if NO_QUANTITY_PATTERN.search(trimmed):
        return enrich(line, _strip_leading_amount(trimmed))

    # Tier 2: quantity + unit + name
    match = QUANTITY_UNIT_NAME_PATTERN.match(trimmed)
    if match:
        quantity_str, aside, unit, name = match.groups()
        if is_unit_token(unit):
            if aside:
                name = f"{name.strip()} {aside.strip()}"
            return enrich(line, name, parse_quantity_string(quantity_str), clean_unit_token(unit))

    # Tier 3: quantity + name, counted as units
    match = QUANTITY_NAME_PATTERN.match(trimmed)
    if match:
        quantity_str, name = match.groups()
        first_word = name.split(maxsplit=1)[0]
        # "1/2 cup, plus 2 tablespoons oil" is not a count of "cup, plus..."
        if is_unit_token(first_word):
            return None
        return enrich(line, name, parse_quantity_string(quantity_str))

    return None


# =============================================================================
# Batch Parsing
# =============================================================================


class IngredientParser:
    """Parses raw ingredient lines into ParsedIngredient records."""

    def __init__(self, interpreter: LineInterpreter | None = None):
        self.interpreter = interpreter

    async def parse(self, line: str) -> ParsedIngredient:
        """Parse a single line."""
        records = await self.parse_many([line])
        return records[0]

    async def parse_many(self, lines: list[str]) -> list[ParsedIngredient]:
        """
        Parse a batch of lines, preserving input order.

        Lines the patterns resolve are kept aside; the rest go to the
        interpreter in a single call, then both lists are merged back by index.
        Every input line yields exactly one record.
        """
        resolved: dict[int, ParsedIngredient] = {}
        unresolved: list[tuple[int, str]] = []

        for index, line in enumerate(lines):
            record = parse_line_with_patterns(line)
            if record is None:
                unresolved.append((index, line))
            else:
                resolved[index] = record

        logger.info(
            f"Parsed {len(lines)} line(s): {len(resolved)} by pattern, "
            f"{len(unresolved)} need interpretation"
        )

        if unresolved:
            results = await self._interpret([line for _, line in unresolved])
            for (index, line), result in zip(unresolved, results):
                resolved[index] = self._record_from_interpretation(line, result)

        return [resolved[index] for index in range(len(lines))]

    async def _interpret(self, lines: list[str]) -> list[InterpretationResult]:
        if self.interpreter is None:
            return [InterpretationResult(line=line, error="interpretation disabled") for line in lines]

        results = await self.interpreter.interpret(lines)
        if len(results) != len(lines):
            logger.error(
                f"Interpreter returned {len(results)} result(s) for {len(lines)} line(s), "
                "falling back for all"
            )
            return [InterpretationResult(line=line, error="misaligned results") for line in lines]
        return results

    def _record_from_interpretation(
        self,
        line: str,
        result: InterpretationResult,
    ) -> ParsedIngredient:
        if result.needs_fallback:
            logger.warning(f"Using fallback record for {line.strip()!r}: {result.error}")
            return fallback_record(line)

        record = result.record
        return enrich(line, record.name, record.quantity, record.unit)


async def parse_ingredients(
    lines: list[str],
    interpreter: LineInterpreter | None = None,
) -> list[ParsedIngredient]:
    """Parse lines with an optional interpreter for the unresolved ones."""
    return await IngredientParser(interpreter).parse_many(lines)
