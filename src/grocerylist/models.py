"""Core data types for the ingredient normalization pipeline."""

from dataclasses import dataclass, field
from typing import Literal

BaseUnit = Literal["tsp", "tbsp", "cup", "unit", "none"]
BASE_UNITS: tuple[str, ...] = ("tsp", "tbsp", "cup", "unit", "none")

Section = Literal["Produce", "Meat/Fish", "Dry Goods", "Dairy", "Spices", "Pantry", "Other"]
SECTIONS: tuple[str, ...] = (
    "Produce",
    "Meat/Fish",
    "Dry Goods",
    "Dairy",
    "Spices",
    "Pantry",
    "Other",
)

# Order in which sections are presented to the renderer
SECTION_ORDER: tuple[str, ...] = (
    "Produce",
    "Meat/Fish",
    "Dairy",
    "Dry Goods",
    "Pantry",
    "Spices",
    "Other",
)

DEFAULT_SECTION = "Other"

# The single forced-collapse canonical key
SALT_AND_PEPPER = "salt and pepper"
SALT_AND_PEPPER_DISPLAY = "Salt and black pepper"


@dataclass(frozen=True)
class ParsedIngredient:
    """One structured record per input line."""

    raw_text: str
    full_name: str
    base_name: str
    canonical_name: str
    prep_note: str | None = None
    quantity: float | None = None
    unit: str | None = None  # raw unit token as written
    base_unit: BaseUnit = "none"
    quantity_in_base_units: float | None = None

    @property
    def group_key(self) -> str:
        """Key used by the aggregator: canonical name + base unit."""
        if self.canonical_name == SALT_AND_PEPPER:
            return f"{SALT_AND_PEPPER}::none"
        return f"{self.canonical_name}::{self.base_unit or 'none'}"


@dataclass(frozen=True)
class DisplayQuantity:
    """Human-friendly rendering of an aggregated quantity."""

    quantity: float | None = None
    unit: str | None = None

    def __str__(self) -> str:
        if self.quantity is None:
            return ""
        value = self.quantity
        text = str(int(value)) if value == int(value) else f"{value:.2f}".rstrip("0").rstrip(".")
        if self.unit:
            return f"{text} {self.unit}"
        return text


@dataclass
class AggregatedIngredient:
    """One grocery-list entry per distinct grouping key."""

    canonical_name: str
    base_name: str
    display_name: str
    base_unit: BaseUnit
    total_quantity: float | None = None
    unit_label: str | None = None  # original unit token kept for count-like groups
    lines: list[ParsedIngredient] = field(default_factory=list)
    section: str = DEFAULT_SECTION

    @property
    def group_key(self) -> str:
        return f"{self.canonical_name}::{self.base_unit}"

    @property
    def prep_notes(self) -> list[str]:
        """Distinct preparation notes of the contributing lines, in order."""
        notes: list[str] = []
        for line in self.lines:
            if line.prep_note and line.prep_note not in notes:
                notes.append(line.prep_note)
        return notes

    def display_quantity(self) -> DisplayQuantity:
        """Get the humanized quantity for this entry without mutating it."""
        from grocerylist.normalize.units import format_quantity

        formatted = format_quantity(self.total_quantity, self.base_unit, self.display_name)
        if self.base_unit == "unit" and formatted.quantity is not None:
            return DisplayQuantity(quantity=formatted.quantity, unit=self.unit_label or "")
        return formatted

    @property
    def display_unit(self) -> str | None:
        return self.display_quantity().unit
