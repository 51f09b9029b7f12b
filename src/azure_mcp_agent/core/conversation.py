"""Conversation state for a single turn."""

import json
from typing import Any

from azure_mcp_agent.utils.tool_calls import ToolCallRequest


def serialize_payload(value: Any) -> str:
    """Compact JSON used for tool-result message content."""
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False, default=str)


class Conversation:
    """
    Ordered, append-only message list owned by one turn.

    Messages use the chat-completion dict format. Tool messages always follow
    the assistant message whose ``tool_calls`` they answer.
    """

    def __init__(
        self,
        system_prompt: str,
        user_message: str,
        history: list[dict[str, Any]] | None = None,
    ):
        self._messages: list[dict[str, Any]] = [{"role": "system", "content": system_prompt}]
        self._messages.extend(dict(message) for message in history or [])
        self._messages.append({"role": "user", "content": user_message})

    @property
    def messages(self) -> list[dict[str, Any]]:
        return self._messages

    def add_tool_calls(self, content: str, tool_calls: list[ToolCallRequest]) -> None:
        """Record the assistant response that requested ``tool_calls``."""
        self._messages.append(
            {
                "role": "assistant",
                "content": content or None,
                "tool_calls": [call.to_message_dict() for call in tool_calls],
            }
        )

    def add_tool_result(self, tool_call_id: str, content: str) -> None:
        self._messages.append(
            {"role": "tool", "tool_call_id": tool_call_id, "content": content}
        )

    def __len__(self) -> int:
        return len(self._messages)
