"""Base interface for text completion services."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any


@dataclass
class ChatMessage:
    """A single chat message sent to a completion service."""

    role: str  # "system", "user", "assistant"
    content: str

    def to_dict(self) -> dict[str, str]:
        return {"role": self.role, "content": self.content}


class LLMError(Exception):
    """Raised when a completion service call fails."""

    def __init__(self, message: str, status_code: int | None = None, response: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.response = response


class CompletionClient(ABC):
    """Abstract base class for chat completion clients."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Return client name for logging and identification."""
        pass

    @abstractmethod
    async def complete(
        self,
        messages: list[ChatMessage],
        *,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> str:
        """
        Send messages and return the text of the first completion.

        Args:
            messages: Conversation to send.
            temperature: Sampling temperature, client default when None.
            max_tokens: Completion token budget, client default when None.

        Returns:
            The completion text.

        Raises:
            LLMError: On transport errors, error statuses or empty completions.
        """
        pass

    async def close(self) -> None:
        """Release any held connections."""
        return None
