"""Event data models."""

import json
from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

from pydantic import BaseModel, Field

from .types import EventType, TurnOutcome


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Event(BaseModel):
    """Base event model."""

    id: str = Field(default_factory=lambda: str(uuid4()))
    event_type: EventType
    timestamp: datetime = Field(default_factory=_utcnow)
    request_id: str | None = None
    data: dict[str, Any] = Field(default_factory=dict)

    @property
    def text(self) -> str:
        """User-visible text carried by this event, if any."""
        return self.data.get("content", "")

    def to_json(self) -> str:
        """Serialize event to JSON string."""
        return json.dumps({
            "id": self.id,
            "type": self.event_type.value,
            "timestamp": self.timestamp.isoformat(),
            "request_id": self.request_id,
            "data": self.data,
        })

    def to_sse(self) -> str:
        """Format event for SSE stream."""
        return f"event: {self.event_type.value}\ndata: {self.to_json()}\n\n"


class ResponseChunkEvent(Event):
    """A piece of assistant text, in model order."""

    event_type: EventType = EventType.RESPONSE_CHUNK

    @classmethod
    def create(cls, content: str, request_id: str | None = None) -> "ResponseChunkEvent":
        return cls(request_id=request_id, data={"content": content})


class ToolRoundStartEvent(Event):
    """The model asked for tools; execution is about to start."""

    event_type: EventType = EventType.TOOL_ROUND_START

    @classmethod
    def create(
        cls,
        round_number: int,
        tools: list[str],
        marker: str,
        request_id: str | None = None,
    ) -> "ToolRoundStartEvent":
        return cls(
            request_id=request_id,
            data={"round": round_number, "tools": tools, "content": marker},
        )


class ToolCompleteEvent(Event):
    """A tool call returned a result."""

    event_type: EventType = EventType.TOOL_COMPLETE

    @classmethod
    def create(
        cls, tool: str, call_id: str, duration_ms: float, request_id: str | None = None
    ) -> "ToolCompleteEvent":
        return cls(
            request_id=request_id,
            data={"tool": tool, "call_id": call_id, "duration_ms": duration_ms},
        )


class ToolErrorEvent(Event):
    """A tool call failed; the error was handed back to the model."""

    event_type: EventType = EventType.TOOL_ERROR

    @classmethod
    def create(
        cls, tool: str, call_id: str, error: str, request_id: str | None = None
    ) -> "ToolErrorEvent":
        return cls(
            request_id=request_id,
            data={"tool": tool, "call_id": call_id, "error": error},
        )


class ResponseDoneEvent(Event):
    """Terminal event of a turn."""

    event_type: EventType = EventType.RESPONSE_DONE

    @classmethod
    def create(
        cls,
        outcome: TurnOutcome,
        rounds: int,
        content: str = "",
        request_id: str | None = None,
    ) -> "ResponseDoneEvent":
        return cls(
            request_id=request_id,
            data={"outcome": outcome.value, "rounds": rounds, "content": content},
        )

    @property
    def outcome(self) -> TurnOutcome:
        return TurnOutcome(self.data["outcome"])


class ErrorEvent(Event):
    """Event for error reporting."""

    event_type: EventType = EventType.ERROR

    @classmethod
    def create(
        cls, error: str, error_type: str = "internal", request_id: str | None = None
    ) -> "ErrorEvent":
        return cls(
            request_id=request_id,
            data={"error": error, "error_type": error_type},
        )
