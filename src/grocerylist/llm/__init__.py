"""Clients and helpers for the external text completion service."""

from grocerylist.llm.base import ChatMessage, CompletionClient, LLMError
from grocerylist.llm.json_recovery import MalformedResponseError, parse_json_response
from grocerylist.llm.openai import OpenAIChatClient

__all__ = [
    "ChatMessage",
    "CompletionClient",
    "LLMError",
    "MalformedResponseError",
    "OpenAIChatClient",
    "parse_json_response",
]
