"""Assembly of streamed tool-call fragments into complete requests."""

import json
from dataclasses import dataclass, field
from typing import Any

from azure_mcp_agent.utils.providers.base import ToolCallFragment


@dataclass(frozen=True)
class ToolCallRequest:
    """A complete tool call issued by the model."""

    id: str
    name: str
    arguments: str = ""

    def parse_arguments(self) -> dict[str, Any]:
        """
        Decode the argument string.

        An empty string means no arguments.

        Raises:
            ValueError: If the arguments are not a JSON object
        """
        if not self.arguments.strip():
            return {}
        value = json.loads(self.arguments)
        if not isinstance(value, dict):
            raise ValueError(
                f"Tool arguments must be a JSON object, got {type(value).__name__}"
            )
        return value

    def to_message_dict(self) -> dict[str, Any]:
        """Format for the ``tool_calls`` field of an assistant message."""
        return {
            "id": self.id,
            "type": "function",
            "function": {"name": self.name, "arguments": self.arguments},
        }


@dataclass
class _PartialCall:
    id: str | None = None
    name: str | None = None
    arguments: list[str] = field(default_factory=list)


class ToolCallAccumulator:
    """
    Concatenates fragments by position index.

    The id and name come from the first fragment that supplies them; later
    fragments usually carry only argument continuations. Fragments for
    different positions may interleave in any order.
    """

    def __init__(self) -> None:
        self._partials: dict[int, _PartialCall] = {}

    def add(self, fragment: ToolCallFragment) -> None:
        partial = self._partials.setdefault(fragment.index, _PartialCall())
        if fragment.id and partial.id is None:
            partial.id = fragment.id
        if fragment.name and partial.name is None:
            partial.name = fragment.name
        if fragment.arguments:
            partial.arguments.append(fragment.arguments)

    def requests(self) -> list[ToolCallRequest]:
        """Assembled requests in position order."""
        return [
            ToolCallRequest(
                id=partial.id or "",
                name=partial.name or "",
                arguments="".join(partial.arguments),
            )
            for _, partial in sorted(self._partials.items())
        ]

    def __len__(self) -> int:
        return len(self._partials)
