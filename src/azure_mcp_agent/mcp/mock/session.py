"""Mock MCP session for local testing without the Azure MCP server."""

import inspect
import json
from contextlib import AsyncExitStack
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable

from mcp.types import CallToolResult, ListToolsResult, TextContent, Tool

from azure_mcp_agent.mcp.models import MCPServerConfig
from azure_mcp_agent.utils.logging import get_logger


logger = get_logger(__name__)

ToolHandler = Callable[[dict[str, Any]], Any]


@dataclass
class MockTool:
    """A scripted tool served by the mock session."""

    name: str
    description: str
    handler: ToolHandler
    input_schema: dict[str, Any] = field(
        default_factory=lambda: {"type": "object", "properties": {}}
    )


def create_default_mock_tools() -> list[MockTool]:
    """Create a small Azure-flavoured tool set."""
    return [
        MockTool(
            name="storage_account_list",
            description="List storage accounts in the subscription",
            handler=lambda args: ["acct1", "acct2"],
        ),
        MockTool(
            name="group_list",
            description="List resource groups in the subscription",
            handler=lambda args: [{"name": "rg-web", "location": "westeurope"}],
        ),
        MockTool(
            name="resourcegraph_query",
            description="Run an Azure Resource Graph query",
            handler=lambda args: {"query": args.get("query", ""), "count": 0, "data": []},
            input_schema={
                "type": "object",
                "properties": {"query": {"type": "string"}},
                "required": ["query"],
            },
        ),
    ]


class MockMCPSession:
    """
    In-process stand-in for ``mcp.ClientSession``.

    Implements ``initialize``, ``list_tools`` and ``call_tool`` and records
    every call. Handler exceptions are reported the way a server reports a
    failed tool: a result with ``isError`` set.
    """

    def __init__(self, tools: list[MockTool] | None = None):
        self._tools = {tool.name: tool for tool in (tools or create_default_mock_tools())}
        self.calls: list[tuple[str, dict[str, Any]]] = []
        self.initialized = False
        self.closed = False

    async def initialize(self) -> None:
        self.initialized = True

    async def list_tools(self) -> ListToolsResult:
        return ListToolsResult(
            tools=[
                Tool(
                    name=tool.name,
                    description=tool.description,
                    inputSchema=tool.input_schema,
                )
                for tool in self._tools.values()
            ]
        )

    async def call_tool(
        self, name: str, arguments: dict[str, Any] | None = None
    ) -> CallToolResult:
        self.calls.append((name, dict(arguments or {})))
        tool = self._tools.get(name)
        if tool is None:
            return CallToolResult(
                content=[TextContent(type="text", text=f"Tool '{name}' not found")],
                isError=True,
            )

        try:
            value = tool.handler(dict(arguments or {}))
            if inspect.isawaitable(value):
                value = await value
        except Exception as e:
            logger.debug("Mock tool failed", tool_name=name, error=str(e))
            return CallToolResult(
                content=[TextContent(type="text", text=str(e))],
                isError=True,
            )

        text = value if isinstance(value, str) else json.dumps(value)
        return CallToolResult(content=[TextContent(type="text", text=text)])


def mock_session_factory(
    session: MockMCPSession,
) -> Callable[[AsyncExitStack, MCPServerConfig], Awaitable[MockMCPSession]]:
    """Session factory for ``MCPToolClient`` that serves ``session``."""

    async def factory(stack: AsyncExitStack, config: MCPServerConfig) -> MockMCPSession:
        def close() -> None:
            session.closed = True

        stack.callback(close)
        session.closed = False
        await session.initialize()
        return session

    return factory
