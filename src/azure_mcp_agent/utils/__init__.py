"""Utility modules."""

from azure_mcp_agent.utils.logging import get_logger, configure_logging
from azure_mcp_agent.utils.llm import CompletionClient, CompletionStream
from azure_mcp_agent.utils.tool_calls import ToolCallAccumulator, ToolCallRequest

__all__ = [
    "get_logger",
    "configure_logging",
    "CompletionClient",
    "CompletionStream",
    "ToolCallAccumulator",
    "ToolCallRequest",
]
