"""OpenAI-compatible chat completions client."""

import time
from typing import Any

import httpx

from grocerylist.config import get_settings
from grocerylist.llm.base import ChatMessage, CompletionClient, LLMError
from grocerylist.logging_config import get_logger

logger = get_logger(__name__)


class OpenAIChatClient(CompletionClient):
    """Client for the /chat/completions endpoint. Failures are raised, never retried."""

    DEFAULT_MAX_TOKENS = 2000

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        model: str | None = None,
        timeout: float | None = None,
        temperature: float | None = None,
    ):
        settings = get_settings()
        self.api_key = api_key if api_key is not None else settings.openai_api_key
        self.base_url = (base_url or settings.openai_base_url).rstrip("/")
        self.model = model or settings.llm_model
        self.timeout = timeout or settings.llm_timeout
        self.temperature = temperature if temperature is not None else settings.llm_temperature
        self._client: httpx.AsyncClient | None = None

    @property
    def name(self) -> str:
        """Return client name."""
        return "openai"

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout),
                headers={
                    "Accept": "application/json",
                    "Content-Type": "application/json",
                    "User-Agent": "Grocerylist/1.0",
                },
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def _post(self, payload: dict[str, Any]) -> httpx.Response:
        """Send one chat completions request."""
        client = await self._get_client()
        return await client.post(
            f"{self.base_url}/chat/completions",
            json=payload,
            headers={"Authorization": f"Bearer {self.api_key}"},
        )

    async def complete(
        self,
        messages: list[ChatMessage],
        *,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> str:
        if not self.api_key or not self.api_key.strip():
            raise LLMError("OPENAI_API_KEY is not set")

        payload = {
            "model": self.model,
            "messages": [m.to_dict() for m in messages],
            "temperature": temperature if temperature is not None else self.temperature,
            "max_tokens": max_tokens or self.DEFAULT_MAX_TOKENS,
        }

        started = time.monotonic()
        try:
            response = await self._post(payload)
        except httpx.HTTPError as e:
            logger.error(f"Completion request failed: {e}")
            raise LLMError(f"Completion request failed: {e}") from e

        duration = time.monotonic() - started

        if response.status_code >= 400:
            error_detail = response.text[:500] if response.text else "No details"
            logger.error(f"Completion API error {response.status_code}: {error_detail}")
            raise LLMError(
                f"Completion request failed with status {response.status_code}",
                status_code=response.status_code,
                response=error_detail,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise LLMError("Completion response was not JSON", response=response.text[:500]) from e

        usage = data.get("usage") or {}
        logger.info(
            f"Completion call ({self.model}): {duration:.2f}s, "
            f"{usage.get('total_tokens', 0)} tokens "
            f"({usage.get('prompt_tokens', 0)} prompt + "
            f"{usage.get('completion_tokens', 0)} completion)"
        )

        choices = data.get("choices") or []
        content = None
        if choices and isinstance(choices[0], dict):
            content = (choices[0].get("message") or {}).get("content")
        if not content:
            raise LLMError("Completion API returned empty response", response=data)

        return content
