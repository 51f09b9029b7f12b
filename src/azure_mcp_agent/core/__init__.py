"""Core domain modules."""

from azure_mcp_agent.core.exceptions import (
    AgentError,
    ConfigurationError,
    MCPConnectionError,
    CompletionError,
    ToolInvocationError,
    ChatRequestError,
)
from azure_mcp_agent.core.cancellation import CancellationToken, TurnCancelled

__all__ = [
    # Exceptions
    "AgentError",
    "ConfigurationError",
    "MCPConnectionError",
    "CompletionError",
    "ToolInvocationError",
    "ChatRequestError",
    # Cancellation
    "CancellationToken",
    "TurnCancelled",
]
