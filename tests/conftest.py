"""Pytest fixtures for testing."""

from typing import Any, Callable

import pytest
import pytest_asyncio

from azure_mcp_agent.config.settings import Settings
from azure_mcp_agent.core.agent import AzureMCPAgent
from azure_mcp_agent.core.exceptions import ToolInvocationError
from azure_mcp_agent.mcp.client import MCPToolClient
from azure_mcp_agent.mcp.mock import MockMCPSession, mock_session_factory
from azure_mcp_agent.mcp.models import MCPServerConfig, ToolDescriptor
from azure_mcp_agent.utils.llm import CompletionClient
from azure_mcp_agent.utils.providers.mock import MockCompletionProvider, ScriptItem


TEST_ENV = {
    "azure_openai_endpoint": "https://example.openai.azure.com",
    "azure_openai_api_key": "test-key",
    "azure_openai_deployment": "gpt-4o",
    "azure_client_id": "client-id",
    "azure_client_secret": "client-secret",
    "azure_tenant_id": "tenant-id",
    "azure_subscription_id": "subscription-id",
}


class FakeToolProvider:
    """
    In-memory tool provider.

    ``handlers`` maps tool name to a callable taking the argument dict; a
    handler that raises ``ToolInvocationError`` simulates a failed call.
    """

    def __init__(self, handlers: dict[str, Callable[[dict[str, Any]], Any]] | None = None):
        self.handlers = dict(handlers or {})
        self.calls: list[tuple[str, dict[str, Any]]] = []
        self.connect_count = 0
        self.disconnect_count = 0
        self._connected = False

    @property
    def is_connected(self) -> bool:
        return self._connected

    async def connect(self) -> None:
        self.connect_count += 1
        self._connected = True

    def list_tools(self) -> list[ToolDescriptor]:
        if not self._connected:
            return []
        return [ToolDescriptor(name=name, description=f"{name} tool") for name in self.handlers]

    def openai_tools(self) -> list[dict[str, Any]]:
        return [tool.to_openai_tool() for tool in self.list_tools()]

    async def call_tool(self, name: str, arguments: dict[str, Any]) -> Any:
        self.calls.append((name, arguments))
        handler = self.handlers.get(name)
        if handler is None:
            raise ToolInvocationError(f"Unknown tool: {name}", tool_name=name)
        result = handler(arguments)
        if hasattr(result, "__await__"):
            result = await result
        return result

    async def disconnect(self) -> None:
        self.disconnect_count += 1
        self._connected = False


@pytest.fixture
def settings() -> Settings:
    """Create test settings."""
    return Settings(
        _env_file=None,
        log_level="DEBUG",
        mcp_connect_on_startup=False,
        **TEST_ENV,
    )


@pytest.fixture
def mcp_config() -> MCPServerConfig:
    """Create MCP server launch configuration."""
    return MCPServerConfig(
        client_id="client-id",
        client_secret="client-secret",
        tenant_id="tenant-id",
        subscription_id="subscription-id",
    )


@pytest.fixture
def mock_session() -> MockMCPSession:
    """Create mock MCP session with the default Azure tools."""
    return MockMCPSession()


@pytest_asyncio.fixture
async def tool_client(mcp_config: MCPServerConfig, mock_session: MockMCPSession):
    """Create MCP tool client backed by the mock session."""
    client = MCPToolClient(
        mcp_config,
        connect_timeout=5.0,
        call_timeout=5.0,
        session_factory=mock_session_factory(mock_session),
    )
    yield client
    await client.disconnect()


@pytest.fixture
def fake_tools() -> FakeToolProvider:
    """Create in-memory tool provider with a storage listing tool."""
    return FakeToolProvider({"list_storage_accounts": lambda args: ["acct1", "acct2"]})


@pytest.fixture
def make_agent() -> Callable[..., tuple[AzureMCPAgent, MockCompletionProvider]]:
    """Factory building an agent over scripted completions."""

    def factory(
        scripts: list[list[ScriptItem]],
        tool_client: Any,
        max_tool_rounds: int = 10,
    ) -> tuple[AzureMCPAgent, MockCompletionProvider]:
        provider = MockCompletionProvider(scripts)
        agent = AzureMCPAgent(
            tool_client=tool_client,
            completions=CompletionClient(provider, model="gpt-4o"),
            system_prompt="You are a test assistant.",
            max_tool_rounds=max_tool_rounds,
        )
        return agent, provider

    return factory


@pytest.fixture
def make_tools() -> type[FakeToolProvider]:
    """Factory for in-memory tool providers with custom handlers."""
    return FakeToolProvider
