"""Batched interpretation of ingredient lines the patterns could not resolve."""

from dataclasses import dataclass
from typing import Any

from pydantic import ValidationError

from grocerylist.config import get_settings
from grocerylist.llm.base import CompletionClient, LLMError
from grocerylist.llm.json_recovery import MalformedResponseError, parse_json_response
from grocerylist.llm.prompts import interpretation_messages
from grocerylist.logging_config import get_logger
from grocerylist.schemas import InterpretedLine

logger = get_logger(__name__)

# Keys under which a service sometimes nests the array it was asked for
WRAPPER_KEYS = ("ingredients", "items", "results", "lines", "data")


@dataclass(frozen=True)
class InterpretationResult:
    """Outcome for one line: a validated record, or a reason to fall back."""

    line: str
    record: InterpretedLine | None = None
    error: str | None = None

    @property
    def needs_fallback(self) -> bool:
        return self.record is None


def _match_key(text: str | None) -> str:
    return " ".join((text or "").lower().split())


def _coerce_items(payload: Any) -> list[Any]:
    """Unwrap the response payload into a list of candidate records."""
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        for key in WRAPPER_KEYS:
            if isinstance(payload.get(key), list):
                return payload[key]
        if "name" in payload:
            return [payload]
    raise MalformedResponseError(f"Unexpected response shape: {type(payload).__name__}")


def _validate(item: Any) -> InterpretedLine | None:
    if not isinstance(item, dict):
        return None
    try:
        return InterpretedLine.model_validate(item)
    except ValidationError as e:
        logger.debug(f"Discarding invalid interpreted record {item!r}: {e.error_count()} errors")
        return None


class LineInterpreter:
    """
    Sends unresolved lines to the text interpretation service in one call.

    Never raises: outages and unusable responses come back as results that
    need the deterministic fallback.
    """

    def __init__(
        self,
        client: CompletionClient,
        tokens_per_line: int | None = None,
        temperature: float | None = None,
    ):
        settings = get_settings()
        self.client = client
        self.tokens_per_line = tokens_per_line or settings.interpretation_tokens_per_line
        self.temperature = temperature if temperature is not None else settings.llm_temperature

    async def interpret(self, lines: list[str]) -> list[InterpretationResult]:
        """Interpret a batch of lines; the result list is aligned with the input."""
        if not lines:
            return []

        logger.info(f"Interpreting {len(lines)} line(s) with {self.client.name}")

        try:
            response = await self.client.complete(
                interpretation_messages(lines),
                temperature=self.temperature,
                max_tokens=len(lines) * self.tokens_per_line,
            )
            items = _coerce_items(parse_json_response(response, prefer="array"))
        except (LLMError, MalformedResponseError) as e:
            logger.warning(f"Batch interpretation failed, falling back for {len(lines)} line(s): {e}")
            return [InterpretationResult(line=line, error=str(e)) for line in lines]
        except Exception as e:
            logger.error(f"Unexpected interpretation error: {e}", exc_info=True)
            return [InterpretationResult(line=line, error=str(e)) for line in lines]

        return self._align(lines, items)

    def _align(self, lines: list[str], items: list[Any]) -> list[InterpretationResult]:
        """Pair response items with the requested lines."""
        records = [_validate(item) for item in items]

        # Same count: trust positional order
        if len(records) == len(lines):
            return [
                InterpretationResult(line=line, record=record)
                if record is not None
                else InterpretationResult(line=line, error="invalid record")
                for line, record in zip(lines, records)
            ]

        logger.warning(
            f"Interpretation returned {len(records)} record(s) for {len(lines)} line(s), "
            "matching by original text"
        )
        by_text: dict[str, list[InterpretedLine]] = {}
        for record in records:
            if record is not None and record.original_text:
                by_text.setdefault(_match_key(record.original_text), []).append(record)

        results: list[InterpretationResult] = []
        for line in lines:
            candidates = by_text.get(_match_key(line))
            if candidates:
                results.append(InterpretationResult(line=line, record=candidates.pop(0)))
            else:
                results.append(InterpretationResult(line=line, error="missing from response"))
        return results
