"""Completion stream adapter over a chat-completion provider."""

from typing import Any, AsyncGenerator, AsyncIterator

from azure_mcp_agent.utils.logging import get_logger
from azure_mcp_agent.utils.providers.base import (
    TOOL_CALL_FINISH_REASONS,
    BaseCompletionProvider,
    StreamEvent,
    StreamFinished,
    TextDelta,
    ToolCallFragment,
)
from azure_mcp_agent.utils.tool_calls import ToolCallAccumulator, ToolCallRequest


logger = get_logger(__name__)

__all__ = ["CompletionClient", "CompletionStream"]


class CompletionStream:
    """
    One streamed completion: a lazy, finite, non-restartable event sequence.

    Iterating yields ``TextDelta`` and ``ToolCallFragment`` events in
    arrival order. Once exhausted, ``finish_reason``, ``text`` and
    ``tool_calls`` describe the whole response.
    """

    def __init__(self, events: AsyncIterator[StreamEvent]):
        self._events = events
        self._accumulator = ToolCallAccumulator()
        self._text: list[str] = []
        self._started = False
        self._iterator: AsyncGenerator[TextDelta | ToolCallFragment, None] | None = None
        self.finish_reason: str | None = None

    def __aiter__(self) -> AsyncIterator[TextDelta | ToolCallFragment]:
        if self._started:
            raise RuntimeError("CompletionStream cannot be restarted")
        self._started = True
        self._iterator = self._iterate()
        return self._iterator

    async def _iterate(self) -> AsyncGenerator[TextDelta | ToolCallFragment, None]:
        async for event in self._events:
            if isinstance(event, TextDelta):
                self._text.append(event.text)
                yield event
            elif isinstance(event, ToolCallFragment):
                self._accumulator.add(event)
                yield event
            elif isinstance(event, StreamFinished):
                self.finish_reason = event.reason

    @property
    def text(self) -> str:
        return "".join(self._text)

    @property
    def tool_calls(self) -> list[ToolCallRequest]:
        return self._accumulator.requests()

    @property
    def requests_tools(self) -> bool:
        """True when the response ended asking for tool results."""
        return self.finish_reason in TOOL_CALL_FINISH_REASONS and len(self._accumulator) > 0

    async def aclose(self) -> None:
        """Release the iterator and the underlying provider stream."""
        if self._iterator is not None:
            await self._iterator.aclose()
        aclose = getattr(self._events, "aclose", None)
        if aclose is not None:
            await aclose()


class CompletionClient:
    """
    Binds a provider to a model and opens completion streams.

    Example:
        client = CompletionClient(provider, model="gpt-4o")
        stream = client.stream(messages, tools)
        async for event in stream:
            ...
        if stream.requests_tools:
            calls = stream.tool_calls
    """

    def __init__(self, provider: BaseCompletionProvider, model: str):
        self._provider = provider
        self._model = model

        logger.info(
            "Completion client initialized",
            provider=provider.provider_name,
            model=model,
        )

    @property
    def model(self) -> str:
        return self._model

    @property
    def provider_name(self) -> str:
        return self._provider.provider_name

    def stream(
        self,
        messages: list[dict[str, Any]],
        tools: list[dict[str, Any]] | None = None,
    ) -> CompletionStream:
        """
        Request a streamed completion.

        Args:
            messages: Conversation in chat-completion message format
            tools: Function tools; ``None`` or empty offers no tool calling

        Returns:
            Completion stream to iterate once
        """
        return CompletionStream(
            self._provider.stream(messages=messages, tools=tools or [], model=self._model)
        )
