"""Scripted completion provider for tests and offline runs."""

import copy
import json
from typing import Any, AsyncIterator, Iterable

from azure_mcp_agent.utils.providers.base import (
    BaseCompletionProvider,
    StreamEvent,
    StreamFinished,
    TextDelta,
    ToolCallFragment,
)


# A script item is either a stream event or an exception raised at that point
ScriptItem = StreamEvent | BaseException


def text_response(text: str, chunk_size: int = 8) -> list[ScriptItem]:
    """Script a plain answer streamed in fixed-size pieces."""
    pieces: list[ScriptItem] = [
        TextDelta(text[i : i + chunk_size]) for i in range(0, len(text), chunk_size)
    ]
    pieces.append(StreamFinished("stop"))
    return pieces


def tool_call_response(
    calls: Iterable[tuple[str, str, dict[str, Any] | str]],
    text: str = "",
) -> list[ScriptItem]:
    """
    Script a response requesting tool calls.

    Each call is ``(call_id, tool_name, arguments)``; the argument string is
    split across two fragments the way the API streams it.
    """
    items: list[ScriptItem] = [TextDelta(text)] if text else []
    for index, (call_id, name, arguments) in enumerate(calls):
        raw = arguments if isinstance(arguments, str) else json.dumps(arguments)
        middle = len(raw) // 2
        items.append(ToolCallFragment(index=index, id=call_id, name=name, arguments=raw[:middle]))
        items.append(ToolCallFragment(index=index, arguments=raw[middle:]))
    items.append(StreamFinished("tool_calls"))
    return items


class MockCompletionProvider(BaseCompletionProvider):
    """
    Replays one script per completion request and records each request.

    Raises ``AssertionError`` if more requests arrive than scripts exist.
    """

    def __init__(self, scripts: Iterable[list[ScriptItem]]):
        self._scripts = list(scripts)
        self.requests: list[dict[str, Any]] = []

    @property
    def provider_name(self) -> str:
        return "mock"

    @property
    def request_count(self) -> int:
        return len(self.requests)

    async def stream(
        self,
        messages: list[dict[str, Any]],
        tools: list[dict[str, Any]],
        model: str,
    ) -> AsyncIterator[StreamEvent]:
        self.requests.append(
            {
                "model": model,
                "messages": copy.deepcopy(messages),
                "tools": copy.deepcopy(tools),
            }
        )
        if len(self.requests) > len(self._scripts):
            raise AssertionError(f"No scripted response for request #{len(self.requests)}")

        for item in self._scripts[len(self.requests) - 1]:
            if isinstance(item, BaseException):
                raise item
            yield item
