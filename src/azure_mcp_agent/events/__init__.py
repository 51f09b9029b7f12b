"""Structured events produced by an agent turn."""

from azure_mcp_agent.events.types import EventType, TurnOutcome
from azure_mcp_agent.events.models import (
    Event,
    ResponseChunkEvent,
    ToolRoundStartEvent,
    ToolCompleteEvent,
    ToolErrorEvent,
    ResponseDoneEvent,
    ErrorEvent,
)

__all__ = [
    "EventType",
    "TurnOutcome",
    "Event",
    "ResponseChunkEvent",
    "ToolRoundStartEvent",
    "ToolCompleteEvent",
    "ToolErrorEvent",
    "ResponseDoneEvent",
    "ErrorEvent",
]
