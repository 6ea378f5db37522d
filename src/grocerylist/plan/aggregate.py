"""Cross-recipe aggregation of parsed ingredient lines."""

from grocerylist.logging_config import get_logger
from grocerylist.models import (
    SALT_AND_PEPPER,
    SALT_AND_PEPPER_DISPLAY,
    AggregatedIngredient,
    ParsedIngredient,
)

logger = get_logger(__name__)


def format_display_name(canonical_name: str, base_name: str) -> str:
    """
    Human-presentable name for a grocery entry.

    The first letter of the base name is capitalized and the rest kept as
    written ("olive oil" -> "Olive oil"); salt and pepper has a fixed name.
    """
    if canonical_name == SALT_AND_PEPPER:
        return SALT_AND_PEPPER_DISPLAY

    name = " ".join(base_name.split()) or canonical_name
    return name[:1].upper() + name[1:]


def _reduce_group(lines: list[ParsedIngredient]) -> AggregatedIngredient:
    """Collapse one group of same-key lines into a single entry."""
    first = lines[0]
    display_name = format_display_name(first.canonical_name, first.base_name)

    if first.canonical_name == SALT_AND_PEPPER:
        # Quantities are never summed or shown for seasoning
        return AggregatedIngredient(
            canonical_name=SALT_AND_PEPPER,
            base_name=first.base_name,
            display_name=display_name,
            base_unit="none",
            lines=list(lines),
            section="Spices",
        )

    quantified = [line for line in lines if line.quantity_in_base_units is not None]
    total_quantity = sum(line.quantity_in_base_units for line in quantified) if quantified else None

    if quantified and len(quantified) < len(lines):
        logger.debug(
            f"Mixed group {first.group_key}: {len(lines) - len(quantified)} line(s) "
            "without quantity excluded from total"
        )

    base_unit = first.base_unit if total_quantity is not None else "none"
    unit_label = first.unit if base_unit == "unit" else None

    return AggregatedIngredient(
        canonical_name=first.canonical_name,
        base_name=first.base_name,
        display_name=display_name,
        base_unit=base_unit,
        total_quantity=total_quantity,
        unit_label=unit_label,
        lines=list(lines),
    )


def aggregate_ingredients(parsed: list[ParsedIngredient]) -> list[AggregatedIngredient]:
    """
    Aggregate parsed lines by canonical name and base unit.

    Args:
        parsed: Parsed records, in input order.

    Returns:
        One AggregatedIngredient per distinct group key, in order of first
        appearance. Each group's lines keep their relative input order.
    """
    groups: dict[str, list[ParsedIngredient]] = {}

    for ingredient in parsed:
        groups.setdefault(ingredient.group_key, []).append(ingredient)

    aggregated = [_reduce_group(lines) for lines in groups.values()]

    logger.info(f"Aggregated {len(parsed)} line(s) into {len(aggregated)} entries")
    return aggregated
