"""Pytest configuration and shared fixtures."""

import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from grocerylist.models import ParsedIngredient

# =============================================================================
# Pytest Configuration
# =============================================================================


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests (require external services)"
    )
    config.addinivalue_line("markers", "slow: marks tests as slow running")


# =============================================================================
# Completion Client Fixtures
# =============================================================================


@pytest.fixture
def mock_client():
    """Mock completion client; set complete.return_value or side_effect per test."""
    client = MagicMock()
    client.name = "mock"
    client.complete = AsyncMock()
    client.close = AsyncMock()
    return client


@pytest.fixture
def interpretation_response():
    """Well-formed interpretation response for two hard-to-pattern lines."""
    return json.dumps(
        [
            {
                "name": "saffron",
                "quantity": 1,
                "unit": "pinch",
                "originalText": "a pinch of saffron",
            },
            {
                "name": "olive oil",
                "quantity": 0.5,
                "unit": "cup",
                "originalText": "1/2 cup, plus 2 tablespoons olive oil",
            },
        ]
    )


# =============================================================================
# Ingredient Fixtures
# =============================================================================


@pytest.fixture
def make_parsed():
    """Factory for ParsedIngredient records with sensible defaults."""

    def _make(
        canonical_name: str,
        quantity: float | None = None,
        unit: str | None = None,
        base_unit: str = "none",
        quantity_in_base_units: float | None = None,
        base_name: str | None = None,
        prep_note: str | None = None,
    ) -> ParsedIngredient:
        base = base_name or canonical_name
        raw = " ".join(str(part) for part in (quantity, unit, base) if part)
        return ParsedIngredient(
            raw_text=raw,
            full_name=base,
            base_name=base,
            canonical_name=canonical_name,
            prep_note=prep_note,
            quantity=quantity,
            unit=unit,
            base_unit=base_unit,
            quantity_in_base_units=quantity_in_base_units,
        )

    return _make


@pytest.fixture
def scenario_lines():
    """Lines from two recipes sharing garlic and seasoning."""
    return [
        "2 cloves garlic, minced",
        "1 clove garlic, minced",
        "Salt and pepper to taste",
    ]
