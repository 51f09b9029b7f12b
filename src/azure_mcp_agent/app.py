"""Application class with startup/shutdown lifecycle."""

import asyncio

from azure_mcp_agent.config.settings import Settings
from azure_mcp_agent.core.agent import AzureMCPAgent
from azure_mcp_agent.core.exceptions import MCPConnectionError
from azure_mcp_agent.core.resilience import connect_with_retry
from azure_mcp_agent.utils.logging import get_logger


logger = get_logger(__name__)


class Application:
    """
    Owns the agent for the lifetime of the server.

    Handles:
    - Optional warm-up connection to the MCP server
    - Tracking in-flight chat requests
    - Draining requests and disconnecting the MCP server on shutdown
    """

    def __init__(self, settings: Settings, agent: AzureMCPAgent | None = None):
        """
        Initialize application.

        Args:
            settings: Validated application settings
            agent: Prebuilt agent; built from settings when omitted
        """
        self.settings = settings
        self.agent: AzureMCPAgent = agent or AzureMCPAgent.from_settings(settings)
        self._active_requests: set[str] = set()
        self._is_shutting_down = False

    async def startup(self) -> None:
        """Warm up the MCP connection. Failure is not fatal; turns connect lazily."""
        logger.info("Starting application...")

        if self.settings.mcp_connect_on_startup:
            try:
                await connect_with_retry(
                    self.agent.initialize, attempts=self.settings.mcp_connect_attempts
                )
                logger.info("MCP connection warmed up", tool_count=len(self.agent.tools))
            except MCPConnectionError as e:
                logger.warning(f"MCP warm-up failed, will retry on first request: {e}")

        logger.info("Application started")

    async def shutdown(self, timeout: float = 30.0) -> None:
        """
        Graceful shutdown with timeout.

        1. Stop accepting new requests
        2. Wait for in-flight requests (with timeout)
        3. Disconnect the MCP server

        Args:
            timeout: Maximum time to wait for requests to complete
        """
        logger.info("Shutdown initiated...")
        self._is_shutting_down = True

        if self._active_requests:
            logger.info(f"Waiting for {len(self._active_requests)} requests...")
            try:
                await asyncio.wait_for(self._wait_for_requests(), timeout=timeout)
            except asyncio.TimeoutError:
                logger.warning("Timeout waiting for requests, forcing shutdown")

        await self.agent.disconnect()
        logger.info("Shutdown complete")

    async def _wait_for_requests(self) -> None:
        """Wait until all requests complete."""
        while self._active_requests:
            await asyncio.sleep(0.1)

    def track_request(self, request_id: str) -> None:
        """Track active request."""
        self._active_requests.add(request_id)

    def untrack_request(self, request_id: str) -> None:
        """Remove request from tracking."""
        self._active_requests.discard(request_id)

    @property
    def is_shutting_down(self) -> bool:
        """Check if application is shutting down."""
        return self._is_shutting_down

    @property
    def active_requests(self) -> set[str]:
        """Get set of active request IDs."""
        return self._active_requests
