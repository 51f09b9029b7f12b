"""Event type enumerations."""

from enum import Enum


class EventType(str, Enum):
    """All event types produced by an agent turn."""

    # Response events
    RESPONSE_CHUNK = "response.chunk"
    RESPONSE_DONE = "response.done"

    # Tool events
    TOOL_ROUND_START = "tool.round.start"
    TOOL_COMPLETE = "tool.complete"
    TOOL_ERROR = "tool.error"

    ERROR = "error"


class TurnOutcome(str, Enum):
    """How a turn ended."""

    COMPLETED = "completed"
    TOOL_LOOP_EXCEEDED = "tool_loop_exceeded"
    CANCELLED = "cancelled"
