"""Base interface for chat-completion providers."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, AsyncIterator, Union


# Finish reasons that mean the model is waiting on tool results
TOOL_CALL_FINISH_REASONS = frozenset({"tool_calls", "function_call"})


@dataclass(frozen=True)
class TextDelta:
    """Incremental assistant text."""

    text: str


@dataclass(frozen=True)
class ToolCallFragment:
    """
    Partial tool call tagged by its position within the response.

    Any field may be missing from a given fragment; ``arguments`` is a
    continuation of the JSON argument string.
    """

    index: int
    id: str | None = None
    name: str | None = None
    arguments: str = ""


@dataclass(frozen=True)
class StreamFinished:
    """Terminal marker carrying the finish reason."""

    reason: str | None


StreamEvent = Union[TextDelta, ToolCallFragment, StreamFinished]


class BaseCompletionProvider(ABC):
    """
    Abstract base class for streaming chat-completion providers.

    Providers normalize their wire format into ``StreamEvent`` objects so the
    agent loop never sees SDK-specific chunk types.
    """

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the provider name (e.g., 'azure_openai')."""
        ...

    @abstractmethod
    def stream(
        self,
        messages: list[dict[str, Any]],
        tools: list[dict[str, Any]],
        model: str,
    ) -> AsyncIterator[StreamEvent]:
        """
        Stream a chat completion.

        Args:
            messages: Full conversation in chat-completion message format
            tools: Function tools to offer; empty means tool calling is not offered
            model: Model or deployment name

        Yields:
            Normalized stream events, ending with ``StreamFinished``

        Raises:
            CompletionError: On upstream failure or timeout
        """
        ...
