"""MCP (Model Context Protocol) integration."""

from azure_mcp_agent.mcp.models import MCPServerConfig, ToolDescriptor
from azure_mcp_agent.mcp.client import MCPToolClient, open_stdio_session

__all__ = [
    "MCPServerConfig",
    "ToolDescriptor",
    "MCPToolClient",
    "open_stdio_session",
]
