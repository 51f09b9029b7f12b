"""Tool-calling orchestration loop.

One turn runs as a single cooperative task:

    awaiting-completion -> streaming-text -> tool-round -> awaiting-completion ...
                                          -> done

Text deltas are emitted as they arrive. When the model finishes with a
tool-call request, every requested call is executed sequentially in the
order the model issued them and each produces exactly one tool message,
then the next completion is requested.
"""

import time
from typing import Any, AsyncIterator, Awaitable, Protocol, TypeVar

from azure_mcp_agent.config.prompts import (
    DEFAULT_SYSTEM_PROMPT,
    TOOL_LOOP_EXCEEDED_NOTICE,
    TOOL_ROUND_MARKER,
)
from azure_mcp_agent.config.settings import Settings
from azure_mcp_agent.core.cancellation import CancellationToken, TurnCancelled
from azure_mcp_agent.core.conversation import Conversation, serialize_payload
from azure_mcp_agent.core.exceptions import ToolInvocationError
from azure_mcp_agent.events.models import (
    Event,
    ResponseChunkEvent,
    ResponseDoneEvent,
    ToolCompleteEvent,
    ToolErrorEvent,
    ToolRoundStartEvent,
)
from azure_mcp_agent.events.types import TurnOutcome
from azure_mcp_agent.mcp.models import ToolDescriptor
from azure_mcp_agent.utils.llm import CompletionClient
from azure_mcp_agent.utils.logging import get_logger
from azure_mcp_agent.utils.providers.base import TextDelta
from azure_mcp_agent.utils.tool_calls import ToolCallRequest


logger = get_logger(__name__)

T = TypeVar("T")

_EXHAUSTED = object()


class ToolProvider(Protocol):
    """What the loop needs from the tool provider client."""

    @property
    def is_connected(self) -> bool: ...

    async def connect(self) -> None: ...

    def list_tools(self) -> list[ToolDescriptor]: ...

    def openai_tools(self) -> list[dict[str, Any]]: ...

    async def call_tool(self, name: str, arguments: dict[str, Any]) -> Any: ...

    async def disconnect(self) -> None: ...


class AzureMCPAgent:
    """
    Answers questions about Azure resources using MCP tools.

    The tool connection is opened lazily on the first turn and shared by
    later turns. Concurrent turns interleave tool calls on that one
    connection; the MCP client serializes them.
    """

    def __init__(
        self,
        tool_client: ToolProvider,
        completions: CompletionClient,
        system_prompt: str | None = None,
        max_tool_rounds: int = 10,
    ):
        """
        Initialize the agent.

        Args:
            tool_client: Connection to the tool provider
            completions: Streaming completion client bound to a model
            system_prompt: Override for the built-in system prompt
            max_tool_rounds: Tool rounds allowed per turn before it is stopped
        """
        self._tool_client = tool_client
        self._completions = completions
        self._system_prompt = system_prompt or DEFAULT_SYSTEM_PROMPT
        self._max_tool_rounds = max_tool_rounds

    @classmethod
    def from_settings(cls, settings: Settings) -> "AzureMCPAgent":
        """Build the agent with the Azure OpenAI provider and the stdio MCP client."""
        from azure_mcp_agent.mcp.client import MCPToolClient
        from azure_mcp_agent.mcp.models import MCPServerConfig
        from azure_mcp_agent.utils.providers import create_provider

        tool_client = MCPToolClient(
            MCPServerConfig(
                client_id=settings.azure_client_id,
                client_secret=settings.azure_client_secret,
                tenant_id=settings.azure_tenant_id,
                subscription_id=settings.azure_subscription_id,
                namespaces=settings.azure_mcp_namespaces,
                read_only=settings.azure_mcp_read_only,
                command=settings.azure_mcp_command,
                package=settings.azure_mcp_package,
            ),
            connect_timeout=settings.mcp_connect_timeout_seconds,
            call_timeout=settings.tool_call_timeout_seconds,
        )
        completions = CompletionClient(
            create_provider(settings), model=settings.azure_openai_deployment
        )
        return cls(
            tool_client=tool_client,
            completions=completions,
            system_prompt=settings.system_prompt,
            max_tool_rounds=settings.max_tool_rounds,
        )

    @property
    def is_connected(self) -> bool:
        return self._tool_client.is_connected

    @property
    def tools(self) -> list[ToolDescriptor]:
        return self._tool_client.list_tools()

    @property
    def tool_client(self) -> ToolProvider:
        return self._tool_client

    async def initialize(self) -> None:
        """Connect to the tool provider if not already connected."""
        if self._tool_client.is_connected:
            return
        await self._tool_client.connect()
        logger.info("Agent initialized with MCP tools", tool_count=len(self.tools))

    async def run_events(
        self,
        message: str,
        history: list[dict[str, Any]] | None = None,
        cancel_token: CancellationToken | None = None,
        request_id: str | None = None,
    ) -> AsyncIterator[Event]:
        """
        Drive one turn and yield structured events.

        The last event is always ``ResponseDoneEvent`` unless an error
        propagates.

        Args:
            message: New user message
            history: Prior messages in chat-completion format
            cancel_token: Fires to stop the turn promptly
            request_id: Correlation id stamped on events and logs

        Raises:
            MCPConnectionError: If the tool provider cannot be reached
            CompletionError: If a completion request fails
        """
        log = logger.bind(request_id=request_id) if request_id else logger
        rounds = 0

        try:
            await self._guard(self.initialize(), cancel_token)

            conversation = Conversation(self._system_prompt, message, history)
            tools = self._tool_client.openai_tools()

            while True:
                stream = self._completions.stream(conversation.messages, tools)
                events = stream.__aiter__()
                try:
                    while True:
                        event = await self._guard(anext(events, _EXHAUSTED), cancel_token)
                        if event is _EXHAUSTED:
                            break
                        if isinstance(event, TextDelta) and event.text:
                            yield ResponseChunkEvent.create(event.text, request_id)
                finally:
                    await stream.aclose()

                if not tools or not stream.requests_tools:
                    log.debug(
                        "Turn complete",
                        rounds=rounds,
                        finish_reason=stream.finish_reason,
                    )
                    yield ResponseDoneEvent.create(
                        TurnOutcome.COMPLETED, rounds, request_id=request_id
                    )
                    return

                if rounds >= self._max_tool_rounds:
                    log.warning("Tool round limit reached", max_rounds=self._max_tool_rounds)
                    yield ResponseDoneEvent.create(
                        TurnOutcome.TOOL_LOOP_EXCEEDED,
                        rounds,
                        content=TOOL_LOOP_EXCEEDED_NOTICE.format(
                            max_rounds=self._max_tool_rounds
                        ),
                        request_id=request_id,
                    )
                    return

                rounds += 1
                calls = stream.tool_calls
                yield ToolRoundStartEvent.create(
                    rounds, [call.name for call in calls], TOOL_ROUND_MARKER, request_id
                )
                conversation.add_tool_calls(stream.text, calls)

                for call in calls:
                    if cancel_token is not None:
                        cancel_token.raise_if_cancelled()
                    yield await self._execute(call, conversation, cancel_token, request_id)

        except TurnCancelled:
            log.info("Turn cancelled", rounds=rounds)
            yield ResponseDoneEvent.create(
                TurnOutcome.CANCELLED, rounds, request_id=request_id
            )

    async def _execute(
        self,
        call: ToolCallRequest,
        conversation: Conversation,
        cancel_token: CancellationToken | None,
        request_id: str | None,
    ) -> Event:
        """Run one tool call and append exactly one tool message for it."""
        start = time.monotonic()
        try:
            arguments = call.parse_arguments()
        except ValueError as e:
            error = f"Invalid tool arguments: {e}"
        else:
            logger.info("Tool call", tool_name=call.name, argument_keys=sorted(arguments))
            try:
                result = await self._guard(
                    self._tool_client.call_tool(call.name, arguments), cancel_token
                )
            except TurnCancelled:
                raise
            except ToolInvocationError as e:
                error = str(e)
            except Exception as e:
                logger.error("Unexpected tool failure", tool_name=call.name, exc_info=True)
                error = str(e) or type(e).__name__
            else:
                duration_ms = (time.monotonic() - start) * 1000
                conversation.add_tool_result(call.id, serialize_payload(result))
                return ToolCompleteEvent.create(call.name, call.id, duration_ms, request_id)

        logger.warning("Tool error", tool_name=call.name, error=error)
        conversation.add_tool_result(call.id, serialize_payload({"error": error}))
        return ToolErrorEvent.create(call.name, call.id, error, request_id)

    @staticmethod
    async def _guard(awaitable: Awaitable[T], cancel_token: CancellationToken | None) -> T:
        if cancel_token is None:
            return await awaitable
        return await cancel_token.run(awaitable)

    async def run_stream(
        self,
        message: str,
        history: list[dict[str, Any]] | None = None,
        cancel_token: CancellationToken | None = None,
        request_id: str | None = None,
    ) -> AsyncIterator[str]:
        """
        Drive one turn and yield its text chunks in order.

        Chunks are model text, the tool-round marker, and a notice when the
        round limit stops the turn.
        """
        events = self.run_events(message, history, cancel_token, request_id)
        try:
            async for event in events:
                if event.text:
                    yield event.text
        finally:
            await events.aclose()

    async def run(
        self,
        message: str,
        history: list[dict[str, Any]] | None = None,
        request_id: str | None = None,
    ) -> str:
        """Run a turn to completion and return all text as one string."""
        chunks = []
        async for chunk in self.run_stream(message, history, request_id=request_id):
            chunks.append(chunk)
        return "".join(chunks)

    async def disconnect(self) -> None:
        """Tear down the tool connection; the next turn reconnects."""
        await self._tool_client.disconnect()
