"""Azure OpenAI chat-completion provider.

No automatic retries: the SDK's own retry loop is disabled so transient
upstream failures surface to the caller as CompletionError.
"""

import asyncio
from typing import Any, AsyncIterator

import openai
from openai import AsyncAzureOpenAI

from azure_mcp_agent.core.exceptions import CompletionError
from azure_mcp_agent.utils.logging import get_logger
from azure_mcp_agent.utils.providers.base import (
    BaseCompletionProvider,
    StreamEvent,
    StreamFinished,
    TextDelta,
    ToolCallFragment,
)


logger = get_logger(__name__)


def normalize_chunk(chunk: Any) -> list[StreamEvent]:
    """Convert one ``ChatCompletionChunk`` into stream events."""
    if not chunk.choices:
        # Azure sends prompt-filter results in a chunk without choices
        return []

    choice = chunk.choices[0]
    events: list[StreamEvent] = []
    delta = choice.delta

    if delta is not None:
        if delta.content:
            events.append(TextDelta(delta.content))
        for tool_call in delta.tool_calls or []:
            function = tool_call.function
            events.append(
                ToolCallFragment(
                    index=tool_call.index,
                    id=tool_call.id,
                    name=function.name if function else None,
                    arguments=(function.arguments or "") if function else "",
                )
            )

    if choice.finish_reason:
        events.append(StreamFinished(choice.finish_reason))

    return events


class AzureOpenAIProvider(BaseCompletionProvider):
    """
    Streaming chat completions via Azure OpenAI.

    The timeout bounds opening the stream and the wait for each chunk.
    """

    def __init__(
        self,
        endpoint: str,
        api_key: str,
        api_version: str = "2024-08-01-preview",
        timeout: float = 120.0,
        client: AsyncAzureOpenAI | None = None,
    ):
        """
        Initialize Azure OpenAI provider.

        Args:
            endpoint: Azure OpenAI resource endpoint
            api_key: Azure OpenAI API key
            api_version: REST API version
            timeout: Seconds allowed to open the stream and between chunks
            client: Preconfigured SDK client
        """
        self._timeout = timeout
        self._client = client or AsyncAzureOpenAI(
            azure_endpoint=endpoint,
            api_key=api_key,
            api_version=api_version,
            max_retries=0,
        )

    @property
    def provider_name(self) -> str:
        return "azure_openai"

    async def stream(
        self,
        messages: list[dict[str, Any]],
        tools: list[dict[str, Any]],
        model: str,
    ) -> AsyncIterator[StreamEvent]:
        params: dict[str, Any] = {
            "model": model,
            "messages": messages,
            "stream": True,
        }
        if tools:
            params["tools"] = tools

        logger.debug(
            "Starting completion stream",
            model=model,
            message_count=len(messages),
            tool_count=len(tools),
        )

        try:
            response = await asyncio.wait_for(
                self._client.chat.completions.create(**params),
                timeout=self._timeout,
            )
        except asyncio.TimeoutError as e:
            raise CompletionError(
                f"Completion request timed out after {self._timeout}s", model=model
            ) from e
        except openai.APIError as e:
            raise CompletionError(f"Completion request failed: {e}", model=model) from e

        chunks = response.__aiter__()
        try:
            while True:
                try:
                    chunk = await asyncio.wait_for(chunks.__anext__(), timeout=self._timeout)
                except StopAsyncIteration:
                    break
                except asyncio.TimeoutError as e:
                    raise CompletionError(
                        f"Completion stream stalled for {self._timeout}s", model=model
                    ) from e
                except openai.APIError as e:
                    raise CompletionError(f"Completion stream failed: {e}", model=model) from e

                for event in normalize_chunk(chunk):
                    yield event
        finally:
            await response.close()
