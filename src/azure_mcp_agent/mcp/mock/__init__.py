"""Mock MCP session for testing."""

from azure_mcp_agent.mcp.mock.session import (
    MockMCPSession,
    MockTool,
    create_default_mock_tools,
    mock_session_factory,
)

__all__ = [
    "MockMCPSession",
    "MockTool",
    "create_default_mock_tools",
    "mock_session_factory",
]
