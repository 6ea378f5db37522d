"""Unit tests for the chat completions client."""

from unittest.mock import AsyncMock, patch

import httpx
import pytest

from grocerylist.llm.base import ChatMessage, LLMError
from grocerylist.llm.openai import OpenAIChatClient


def _completion(content, usage=None):
    body = {"choices": [{"message": {"role": "assistant", "content": content}}]}
    if usage is not None:
        body["usage"] = usage
    return httpx.Response(200, json=body)


class TestOpenAIChatClient:
    """Tests for OpenAIChatClient."""

    @pytest.fixture
    def client(self):
        return OpenAIChatClient(api_key="test-key", base_url="https://llm.test/v1/", model="test-model")

    @pytest.fixture
    def messages(self):
        return [ChatMessage(role="user", content="hello")]

    def test_name_and_base_url(self, client):
        """Trailing slash is trimmed from the base URL."""
        assert client.name == "openai"
        assert client.base_url == "https://llm.test/v1"

    @pytest.mark.asyncio
    async def test_complete_returns_content(self, client, messages):
        """The first choice's content is returned."""
        with patch.object(client, "_post", new_callable=AsyncMock) as mock_post:
            mock_post.return_value = _completion(
                "[]", usage={"total_tokens": 12, "prompt_tokens": 10, "completion_tokens": 2}
            )

            result = await client.complete(messages, temperature=0.1, max_tokens=200)

        assert result == "[]"
        payload = mock_post.call_args[0][0]
        assert payload["model"] == "test-model"
        assert payload["max_tokens"] == 200
        assert payload["temperature"] == 0.1
        assert payload["messages"] == [{"role": "user", "content": "hello"}]

    @pytest.mark.asyncio
    async def test_missing_api_key(self, messages):
        """No key means an LLMError at call time, not at construction."""
        client = OpenAIChatClient(api_key="")
        with pytest.raises(LLMError):
            await client.complete(messages)

    @pytest.mark.asyncio
    async def test_error_status(self, client, messages):
        """Error statuses raise with the status code attached."""
        with patch.object(client, "_post", new_callable=AsyncMock) as mock_post:
            mock_post.return_value = httpx.Response(429, text="rate limited")

            with pytest.raises(LLMError) as exc_info:
                await client.complete(messages)

        assert exc_info.value.status_code == 429
        assert exc_info.value.response == "rate limited"

    @pytest.mark.asyncio
    async def test_transport_error(self, client, messages):
        """Transport failures are wrapped, not retried."""
        with patch.object(client, "_post", new_callable=AsyncMock) as mock_post:
            mock_post.side_effect = httpx.ConnectError("connection refused")

            with pytest.raises(LLMError):
                await client.complete(messages)

        assert mock_post.call_count == 1

    @pytest.mark.asyncio
    async def test_empty_content(self, client, messages):
        """An empty completion is an error."""
        with patch.object(client, "_post", new_callable=AsyncMock) as mock_post:
            mock_post.return_value = _completion("")

            with pytest.raises(LLMError):
                await client.complete(messages)

    @pytest.mark.asyncio
    async def test_non_json_body(self, client, messages):
        """A non-JSON body is an error."""
        with patch.object(client, "_post", new_callable=AsyncMock) as mock_post:
            mock_post.return_value = httpx.Response(200, text="<html>oops</html>")

            with pytest.raises(LLMError):
                await client.complete(messages)

    @pytest.mark.asyncio
    async def test_close_without_client(self, client):
        """Closing before any request is a no-op."""
        await client.close()
        assert client._client is None
