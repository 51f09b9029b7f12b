"""Tests for the startup connect retry."""

import pytest

from azure_mcp_agent.core.exceptions import MCPConnectionError
from azure_mcp_agent.core.resilience import ResilienceConfig, connect_with_retry


@pytest.fixture(autouse=True)
def fast_backoff(monkeypatch):
    """Shrink backoff so retries do not sleep."""
    monkeypatch.setattr(ResilienceConfig, "MCP_CONNECT_BACKOFF_BASE", 0.001)
    monkeypatch.setattr(ResilienceConfig, "MCP_CONNECT_BACKOFF_MAX", 0.001)


class TestConnectWithRetry:
    """Tests for connect_with_retry."""

    @pytest.mark.asyncio
    async def test_single_attempt(self):
        """One attempt means no retry."""
        calls = []

        async def connect():
            calls.append(1)
            raise MCPConnectionError("down")

        with pytest.raises(MCPConnectionError):
            await connect_with_retry(connect, attempts=1)
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_recovers(self):
        """A later attempt may succeed."""
        calls = []

        async def connect():
            calls.append(1)
            if len(calls) < 2:
                raise MCPConnectionError("down")

        await connect_with_retry(connect, attempts=3)
        assert len(calls) == 2

    @pytest.mark.asyncio
    async def test_gives_up(self):
        """Persistent failure surfaces as MCPConnectionError."""
        calls = []

        async def connect():
            calls.append(1)
            raise MCPConnectionError("down")

        with pytest.raises(MCPConnectionError):
            await connect_with_retry(connect, attempts=3)
        assert len(calls) == 3

    @pytest.mark.asyncio
    async def test_other_errors_not_retried(self):
        """Only connection errors are retried."""
        calls = []

        async def connect():
            calls.append(1)
            raise ValueError("bug")

        with pytest.raises(ValueError):
            await connect_with_retry(connect, attempts=3)
        assert len(calls) == 1
