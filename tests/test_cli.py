"""Tests for the command-line entry point."""

import json
from unittest.mock import patch

import pytest

from grocerylist.cli import main, read_lines, run
from grocerylist.logging_config import request_id_ctx
from grocerylist.plan.grocery_list import GroceryList, GroceryListGenerator


@pytest.fixture
def ingredients_file(tmp_path):
    path = tmp_path / "ingredients.txt"
    path.write_text(
        "2 cloves garlic, minced\n\n1 clove garlic, minced\nSalt and pepper to taste\n1 tsp ground cumin\n",
        encoding="utf-8",
    )
    return path


class TestReadLines:
    """Tests for read_lines."""

    def test_skips_blank_lines(self, ingredients_file):
        assert read_lines(str(ingredients_file)) == [
            "2 cloves garlic, minced",
            "1 clove garlic, minced",
            "Salt and pepper to taste",
            "1 tsp ground cumin",
        ]


class TestMain:
    """Tests for main()."""

    @pytest.fixture(autouse=True)
    def no_logging_setup(self):
        with patch("grocerylist.cli.configure_logging"):
            yield

    def test_json_output(self, ingredients_file, capsys):
        """--json prints the sectioned list."""
        exit_code = main([str(ingredients_file), "--no-ai", "--json"])

        assert exit_code == 0
        data = json.loads(capsys.readouterr().out)
        assert list(data["sections"]) == ["Produce", "Spices"]
        garlic = data["sections"]["Produce"][0]
        assert garlic["name"] == "Garlic"
        assert garlic["quantity"] == 3
        assert garlic["unit"] == "cloves"
        assert [i["name"] for i in data["sections"]["Spices"]] == [
            "Salt and black pepper",
            "Ground cumin",
        ]

    def test_text_output(self, ingredients_file, capsys):
        """Default output groups entries under section headings."""
        exit_code = main([str(ingredients_file), "--no-ai"])

        out = capsys.readouterr().out
        assert exit_code == 0
        assert "Produce:" in out
        assert "  - Garlic (3 cloves)" in out
        assert "  - Salt and black pepper" in out

    def test_empty_file(self, tmp_path):
        """A file with no ingredient lines is an error."""
        path = tmp_path / "empty.txt"
        path.write_text("\n  \n", encoding="utf-8")

        assert main([str(path), "--no-ai"]) == 1

    def test_missing_file(self, tmp_path):
        """An unreadable file is an error."""
        assert main([str(tmp_path / "missing.txt"), "--no-ai"]) == 1


class TestRun:
    """Tests for run()."""

    @pytest.mark.asyncio
    async def test_sets_request_id_for_the_run(self):
        """Each run logs under its own request id, cleared afterwards."""
        seen: list[str | None] = []

        async def fake_generate(self, lines, list_id=None):
            seen.append(request_id_ctx.get())
            return GroceryList(list_id="x", line_count=len(lines))

        with patch.object(GroceryListGenerator, "generate", fake_generate):
            await run(["2 eggs"], use_ai=False)
            await run(["2 eggs"], use_ai=False)

        assert all(seen)
        assert seen[0] != seen[1]
        assert request_id_ctx.get() is None
