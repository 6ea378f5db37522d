"""
Command-line entry point.

Reads ingredient lines from a file (or stdin with "-"), one per line, and
prints the sectioned grocery list.

Run with: grocerylist ingredients.txt [--no-ai] [--json]
"""

import argparse
import asyncio
import json
import sys
import uuid

from grocerylist.config import get_settings
from grocerylist.logging_config import LoggingContext, configure_logging, get_logger
from grocerylist.plan.grocery_list import (
    EmptyIngredientListError,
    GroceryList,
    GroceryListGenerator,
)

logger = get_logger(__name__)


def read_lines(path: str) -> list[str]:
    """Read ingredient lines, skipping blank ones."""
    if path == "-":
        content = sys.stdin.read()
    else:
        with open(path, encoding="utf-8") as f:
            content = f.read()
    return [line.strip() for line in content.splitlines() if line.strip()]


def format_text(grocery_list: GroceryList) -> str:
    """Plain summary grouped by section."""
    out: list[str] = []
    for section, items in grocery_list.items_by_section.items():
        out.append(f"{section}:")
        for item in items:
            amount = str(item.display_quantity())
            out.append(f"  - {item.display_name} ({amount})" if amount else f"  - {item.display_name}")
        out.append("")
    return "\n".join(out).rstrip()


async def run(lines: list[str], use_ai: bool) -> GroceryList:
    generator = GroceryListGenerator(use_ai=use_ai)
    try:
        with LoggingContext(request_id=str(uuid.uuid4())):
            return await generator.generate(lines)
    finally:
        await generator.close()


def main(argv: list[str] | None = None) -> int:
    settings = get_settings()

    parser = argparse.ArgumentParser(description="Build a grocery list from recipe ingredient lines")
    parser.add_argument("file", help="File with one ingredient line per line, or - for stdin")
    parser.add_argument(
        "--no-ai",
        action="store_true",
        help="Skip the external interpretation and classification calls",
    )
    parser.add_argument("--json", action="store_true", help="Print the list as JSON")
    parser.add_argument("--log-level", default=settings.log_level, help="Logging level")

    args = parser.parse_args(argv)

    configure_logging(args.log_level, json_format=None if settings.is_development else True)

    try:
        lines = read_lines(args.file)
    except OSError as e:
        logger.error(f"Could not read {args.file}: {e}")
        return 1

    use_ai = settings.use_ai and not args.no_ai

    try:
        grocery_list = asyncio.run(run(lines, use_ai))
    except EmptyIngredientListError as e:
        logger.error(str(e))
        return 1

    if args.json:
        print(json.dumps(grocery_list.to_dict(), indent=2))
    else:
        print(format_text(grocery_list))
    return 0


if __name__ == "__main__":
    sys.exit(main())
