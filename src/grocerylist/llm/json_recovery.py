"""Staged JSON extraction for loosely formatted completion responses."""

import json
import re
from typing import Any, Literal

from grocerylist.logging_config import get_logger

logger = get_logger(__name__)

JsonShape = Literal["array", "object"]

_BRACKETS: dict[str, tuple[str, str]] = {
    "array": ("[", "]"),
    "object": ("{", "}"),
}

CODE_FENCE_PATTERN = re.compile(r"```(?:json|JSON)?\s*(.*?)\s*(?:```|$)", re.DOTALL)


class MalformedResponseError(ValueError):
    """Raised when no JSON value can be recovered from a response."""

    def __init__(self, message: str, response: str | None = None):
        super().__init__(message)
        self.response = response


def _try_loads(text: str) -> tuple[bool, Any]:
    try:
        return True, json.loads(text)
    except (json.JSONDecodeError, TypeError):
        return False, None


def strip_code_fences(text: str) -> str:
    """Remove markdown code fences, tolerating a missing closing fence."""
    match = CODE_FENCE_PATTERN.search(text)
    if match:
        return match.group(1).strip()
    return text.strip()


def _extract_container(text: str, opener: str, closer: str) -> Any | None:
    """Parse the span from the first opener to the last closer."""
    start = text.find(opener)
    end = text.rfind(closer)
    if start == -1 or end <= start:
        return None
    ok, value = _try_loads(text[start : end + 1])
    return value if ok else None


def _top_level_separators(text: str, start: int) -> list[int]:
    """Positions of commas directly inside the container opened at start."""
    separators: list[int] = []
    depth = 0
    in_string = False
    escaped = False
    for index in range(start, len(text)):
        char = text[index]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
        elif char in "[{":
            depth += 1
        elif char in "]}":
            depth -= 1
            if depth == 0:
                break
        elif char == "," and depth == 1:
            separators.append(index)
    return separators


def _recover_truncated(text: str, opener: str, closer: str) -> Any | None:
    """Close a cut-off container, dropping a trailing incomplete element."""
    start = text.find(opener)
    if start == -1:
        return None
    # Cut off right after a complete element: only the closer is missing
    ok, value = _try_loads(text[start:].rstrip().rstrip(",") + closer)
    if ok:
        return value
    for separator in reversed(_top_level_separators(text, start)):
        ok, value = _try_loads(text[start:separator] + closer)
        if ok:
            return value
    return None


def parse_json_response(text: str | None, prefer: JsonShape = "array") -> Any:
    """
    Parse a completion response into JSON, recovering where possible.

    Stages: direct parse, code-fence stripping, container extraction, and
    reconstruction from the last complete element of a truncated container.

    Raises:
        MalformedResponseError: If every stage fails.
    """
    if not text or not text.strip():
        raise MalformedResponseError("Empty response", response=text)

    ok, value = _try_loads(text.strip())
    if ok:
        return value

    cleaned = strip_code_fences(text)
    ok, value = _try_loads(cleaned)
    if ok:
        logger.debug("Recovered JSON after stripping code fences")
        return value

    other: JsonShape = "object" if prefer == "array" else "array"
    shapes = (prefer, other)

    for shape in shapes:
        opener, closer = _BRACKETS[shape]
        value = _extract_container(cleaned, opener, closer)
        if value is not None:
            logger.debug(f"Recovered JSON {shape} from surrounding text")
            return value

        value = _recover_truncated(cleaned, opener, closer)
        if value is not None:
            logger.warning(f"Recovered truncated JSON {shape} ({len(value)} complete elements)")
            return value

    logger.error(
        f"JSON recovery failed. Response length: {len(cleaned)}, preview: {cleaned[:200]!r}"
    )
    raise MalformedResponseError("Could not recover JSON from response", response=text)
