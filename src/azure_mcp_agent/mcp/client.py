"""MCP client for the Azure MCP server.

The server runs as a stdio subprocess. Its session is owned by one
background connection task, so the transport is always opened and closed
from the same task no matter which request triggered the connect. Tool
calls from concurrent turns share that session and are serialized.
"""

import asyncio
from contextlib import AsyncExitStack
from typing import Any, Awaitable, Callable

from mcp import ClientSession, StdioServerParameters
from mcp.client.stdio import stdio_client
from mcp.types import Implementation

from azure_mcp_agent import __version__
from azure_mcp_agent.core.exceptions import MCPConnectionError, ToolInvocationError
from azure_mcp_agent.mcp.models import MCPServerConfig, ToolDescriptor
from azure_mcp_agent.utils.logging import get_logger


logger = get_logger(__name__)

SessionFactory = Callable[[AsyncExitStack, MCPServerConfig], Awaitable[Any]]


async def open_stdio_session(
    stack: AsyncExitStack, config: MCPServerConfig
) -> ClientSession:
    """
    Launch the MCP server over stdio and complete the handshake.

    Args:
        stack: Exit stack that owns the transport and session
        config: Server launch configuration

    Returns:
        Initialized client session
    """
    params = StdioServerParameters(
        command=config.command,
        args=config.build_args(),
        env=config.build_env(),
    )
    read_stream, write_stream = await stack.enter_async_context(stdio_client(params))
    session = await stack.enter_async_context(
        ClientSession(
            read_stream,
            write_stream,
            client_info=Implementation(name="azure-mcp-agent", version=__version__),
        )
    )
    await session.initialize()
    return session


def _content_text(result: Any) -> str:
    parts = []
    for item in getattr(result, "content", None) or []:
        text = getattr(item, "text", None)
        parts.append(text if text is not None else str(item))
    return "\n".join(parts)


class MCPToolClient:
    """
    Connection to the Azure MCP server exposing its tools.

    States are disconnected and connected. ``connect`` and ``disconnect``
    are idempotent; a failed connect leaves the client disconnected.
    """

    def __init__(
        self,
        config: MCPServerConfig,
        connect_timeout: float = 60.0,
        call_timeout: float = 60.0,
        session_factory: SessionFactory | None = None,
    ):
        """
        Initialize MCP tool client.

        Args:
            config: Server launch configuration (namespaces, read-only, credentials)
            connect_timeout: Seconds allowed for launch, handshake and tool listing
            call_timeout: Seconds allowed for a single tool call
            session_factory: Opens an initialized session on the given exit stack
        """
        self._config = config
        self._connect_timeout = connect_timeout
        self._call_timeout = call_timeout
        self._session_factory = session_factory or open_stdio_session

        self._session: Any | None = None
        self._tools: list[ToolDescriptor] = []
        self._tools_by_name: dict[str, ToolDescriptor] = {}
        self._connection_task: asyncio.Task | None = None
        self._closing: asyncio.Event | None = None

        self._lifecycle_lock = asyncio.Lock()
        self._call_lock = asyncio.Lock()

    @property
    def is_connected(self) -> bool:
        return self._session is not None

    async def connect(self) -> None:
        """
        Launch the server, complete the handshake and fetch the tool catalog.

        Raises:
            MCPConnectionError: If the handshake does not complete
        """
        async with self._lifecycle_lock:
            if self.is_connected:
                return

            logger.info(
                "Connecting to MCP server",
                command=self._config.command,
                package=self._config.package,
                namespaces=self._config.namespaces,
                read_only=self._config.read_only,
            )

            ready: asyncio.Future = asyncio.get_running_loop().create_future()
            closing = asyncio.Event()
            task = asyncio.create_task(
                self._hold_connection(ready, closing), name="mcp-connection"
            )

            try:
                session, tools = await asyncio.wait_for(
                    asyncio.shield(ready), timeout=self._connect_timeout
                )
            except asyncio.TimeoutError as e:
                await self._abandon(task)
                raise MCPConnectionError(
                    f"MCP handshake timed out after {self._connect_timeout}s"
                ) from e
            except asyncio.CancelledError:
                await self._abandon(task)
                raise
            except Exception as e:
                await self._abandon(task)
                raise MCPConnectionError(f"Failed to connect to MCP server: {e}") from e

            self._session = session
            self._tools = [ToolDescriptor.from_mcp(tool) for tool in tools]
            self._tools_by_name = {tool.name: tool for tool in self._tools}
            self._connection_task = task
            self._closing = closing
            task.add_done_callback(self._on_connection_ended)

            logger.info("Connected to MCP server", tool_count=len(self._tools))

    async def _hold_connection(
        self, ready: asyncio.Future, closing: asyncio.Event
    ) -> None:
        """Own the transport for the lifetime of the connection."""
        try:
            async with AsyncExitStack() as stack:
                try:
                    session = await self._session_factory(stack, self._config)
                    listed = await session.list_tools()
                except Exception as e:
                    if not ready.done():
                        ready.set_exception(e)
                    return

                if ready.done():
                    return
                ready.set_result((session, list(listed.tools)))
                await closing.wait()
        except Exception as e:
            logger.warning("MCP transport closed with error", error=str(e))

    async def _abandon(self, task: asyncio.Task) -> None:
        task.cancel()
        await asyncio.gather(task, return_exceptions=True)

    def _on_connection_ended(self, task: asyncio.Task) -> None:
        if self._connection_task is not task:
            return
        logger.warning("MCP connection ended unexpectedly")
        self._reset()

    def _reset(self) -> None:
        self._session = None
        self._tools = []
        self._tools_by_name = {}
        self._connection_task = None
        self._closing = None

    def list_tools(self) -> list[ToolDescriptor]:
        """Cached tool catalog; empty while disconnected."""
        return list(self._tools)

    def openai_tools(self) -> list[dict[str, Any]]:
        """Tool catalog in chat-completion function-tool format."""
        return [tool.to_openai_tool() for tool in self._tools]

    async def call_tool(self, name: str, arguments: dict[str, Any]) -> Any:
        """
        Invoke a tool by name.

        Args:
            name: Tool name from the catalog
            arguments: Structured tool arguments

        Returns:
            JSON-compatible result payload

        Raises:
            ToolInvocationError: Not connected, unknown tool, provider failure or timeout
        """
        session = self._session
        if session is None:
            raise ToolInvocationError("MCP client not connected", tool_name=name)
        if name not in self._tools_by_name:
            raise ToolInvocationError(f"Unknown tool: {name}", tool_name=name)

        logger.debug("Calling tool", tool_name=name)

        try:
            async with self._call_lock:
                result = await asyncio.wait_for(
                    session.call_tool(name, arguments),
                    timeout=self._call_timeout,
                )
        except asyncio.TimeoutError as e:
            raise ToolInvocationError(
                f"Tool call timed out after {self._call_timeout}s", tool_name=name
            ) from e
        except Exception as e:
            raise ToolInvocationError(str(e) or type(e).__name__, tool_name=name) from e

        if result.isError:
            raise ToolInvocationError(
                _content_text(result) or "Tool reported an error", tool_name=name
            )

        return result.model_dump(mode="json", exclude_none=True)

    async def disconnect(self) -> None:
        """Close the session and subprocess and clear the catalog."""
        async with self._lifecycle_lock:
            task, closing = self._connection_task, self._closing
            self._reset()
            if task is None:
                return

            if closing is not None:
                closing.set()
            try:
                await asyncio.wait_for(task, timeout=self._connect_timeout)
            except asyncio.TimeoutError:
                logger.warning("MCP transport did not close in time, cancelling")
                await self._abandon(task)

            logger.info("Disconnected from MCP server")
