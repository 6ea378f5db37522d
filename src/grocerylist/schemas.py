"""Pydantic schemas for validating external service responses."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from grocerylist.models import DEFAULT_SECTION, SECTIONS
from grocerylist.normalize.units import parse_quantity_string, sanitize_quantity


class InterpretedLine(BaseModel):
    """One ingredient line as returned by the text interpretation service."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: str
    quantity: float | None = None
    unit: str | None = None
    original_text: str | None = Field(default=None, alias="originalText")

    @field_validator("name", mode="before")
    @classmethod
    def require_name(cls, v: Any) -> str:
        """Reject records without a usable name."""
        if v is None or not str(v).strip():
            raise ValueError("name is required")
        return str(v).strip()

    @field_validator("quantity", mode="before")
    @classmethod
    def coerce_quantity(cls, v: Any) -> float | None:
        """Accept numbers or quantity strings; invalid amounts become None."""
        if v is None or isinstance(v, bool):
            return None
        if isinstance(v, (int, float)):
            return sanitize_quantity(v)
        if isinstance(v, str):
            return parse_quantity_string(v)
        return None

    @field_validator("unit", mode="before")
    @classmethod
    def coerce_unit(cls, v: Any) -> str | None:
        """Lowercase units and treat empty or placeholder values as absent."""
        if v is None:
            return None
        unit = str(v).strip().lower()
        if unit in ("", "none", "null", "undefined", "n/a"):
            return None
        return unit

    @field_validator("original_text", mode="before")
    @classmethod
    def coerce_original_text(cls, v: Any) -> str | None:
        if v is None:
            return None
        return str(v).strip() or None


def coerce_section(value: Any) -> str:
    """Map a classifier section value onto the fixed vocabulary."""
    if not isinstance(value, str):
        return DEFAULT_SECTION
    cleaned = value.strip().lower().replace(" / ", "/")
    for section in SECTIONS:
        if section.lower() == cleaned:
            return section
    return DEFAULT_SECTION
