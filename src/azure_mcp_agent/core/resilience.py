"""Opt-in resilience helpers using hyx.

The agent loop itself never retries. These helpers are for callers that
want a retry policy at a boundary, such as the startup warm-up connection
to the MCP server.
"""

from typing import Awaitable, Callable

from hyx.retry.api import retry
from hyx.retry.backoffs import expo
from hyx.retry.exceptions import MaxAttemptsExceeded

from azure_mcp_agent.core.exceptions import MCPConnectionError


class ResilienceConfig:
    """Backoff bounds for retried operations."""

    MCP_CONNECT_BACKOFF_BASE: float = 1.0  # seconds
    MCP_CONNECT_BACKOFF_MAX: float = 30.0  # seconds


async def connect_with_retry(
    connect: Callable[[], Awaitable[None]],
    attempts: int = 1,
) -> None:
    """
    Run ``connect`` up to ``attempts`` times with exponential backoff.

    Args:
        connect: Idempotent connect coroutine function
        attempts: Total attempts, including the first

    Raises:
        MCPConnectionError: If every attempt failed
    """
    if attempts <= 1:
        await connect()
        return

    policy = retry(
        on=(MCPConnectionError,),
        attempts=attempts - 1,
        backoff=expo(
            min_delay_secs=ResilienceConfig.MCP_CONNECT_BACKOFF_BASE,
            max_delay_secs=ResilienceConfig.MCP_CONNECT_BACKOFF_MAX,
        ),
    )

    try:
        await policy(connect)()
    except MaxAttemptsExceeded as e:
        raise MCPConnectionError(
            f"MCP server unreachable after {attempts} attempts"
        ) from e
