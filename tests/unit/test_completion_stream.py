"""Tests for completion streams and the Azure OpenAI provider."""

import asyncio
from types import SimpleNamespace

import pytest

from azure_mcp_agent.core.exceptions import CompletionError
from azure_mcp_agent.utils.llm import CompletionClient, CompletionStream
from azure_mcp_agent.utils.providers.azure_openai import AzureOpenAIProvider, normalize_chunk
from azure_mcp_agent.utils.providers.base import StreamFinished, TextDelta, ToolCallFragment
from azure_mcp_agent.utils.providers.mock import (
    MockCompletionProvider,
    text_response,
    tool_call_response,
)


async def _events(*items):
    for item in items:
        yield item


def _chunk(content=None, tool_calls=None, finish_reason=None):
    delta = SimpleNamespace(content=content, tool_calls=tool_calls)
    return SimpleNamespace(choices=[SimpleNamespace(delta=delta, finish_reason=finish_reason)])


def _tool_delta(index, id=None, name=None, arguments=None):
    return SimpleNamespace(
        index=index,
        id=id,
        function=SimpleNamespace(name=name, arguments=arguments),
    )


class TestCompletionStream:
    """Tests for the completion stream adapter."""

    @pytest.mark.asyncio
    async def test_text_only(self):
        """Text deltas are yielded and joined."""
        stream = CompletionStream(
            _events(TextDelta("Hello "), TextDelta("world"), StreamFinished("stop"))
        )
        received = [event.text async for event in stream]

        assert received == ["Hello ", "world"]
        assert stream.text == "Hello world"
        assert stream.finish_reason == "stop"
        assert not stream.requests_tools

    @pytest.mark.asyncio
    async def test_tool_calls(self):
        """Fragments assemble into requests once the stream ends."""
        stream = CompletionStream(
            _events(
                ToolCallFragment(index=0, id="call_1", name="group_list", arguments="{"),
                ToolCallFragment(index=0, arguments="}"),
                StreamFinished("tool_calls"),
            )
        )
        async for _ in stream:
            pass

        assert stream.requests_tools
        assert [(c.id, c.name, c.arguments) for c in stream.tool_calls] == [
            ("call_1", "group_list", "{}")
        ]

    @pytest.mark.asyncio
    async def test_tool_finish_without_calls(self):
        """A tool finish reason with no fragments does not request tools."""
        stream = CompletionStream(_events(StreamFinished("tool_calls")))
        async for _ in stream:
            pass

        assert not stream.requests_tools

    @pytest.mark.asyncio
    async def test_cannot_restart(self):
        """A stream is iterated at most once."""
        stream = CompletionStream(_events(TextDelta("a"), StreamFinished("stop")))
        async for _ in stream:
            pass

        with pytest.raises(RuntimeError):
            stream.__aiter__()

    @pytest.mark.asyncio
    async def test_aclose_before_iteration(self):
        """Closing an unstarted stream is safe."""
        stream = CompletionStream(_events(TextDelta("a")))
        await stream.aclose()


class TestCompletionClient:
    """Tests for the completion client."""

    @pytest.mark.asyncio
    async def test_passes_model_and_tools(self):
        """The bound model and tools reach the provider."""
        provider = MockCompletionProvider([text_response("ok")])
        client = CompletionClient(provider, model="gpt-4o")
        tools = [{"type": "function", "function": {"name": "t", "parameters": {}}}]

        stream = client.stream([{"role": "user", "content": "hi"}], tools)
        async for _ in stream:
            pass

        assert client.model == "gpt-4o"
        assert client.provider_name == "mock"
        assert provider.requests[0]["model"] == "gpt-4o"
        assert provider.requests[0]["tools"] == tools
        assert stream.text == "ok"

    @pytest.mark.asyncio
    async def test_none_tools_sent_as_empty(self):
        """No tools means an empty tool list."""
        provider = MockCompletionProvider([text_response("ok")])
        stream = CompletionClient(provider, model="m").stream([])
        async for _ in stream:
            pass

        assert provider.requests[0]["tools"] == []

    @pytest.mark.asyncio
    async def test_scripted_tool_call_response(self):
        """Scripted tool calls assemble into one request per call."""
        provider = MockCompletionProvider(
            [tool_call_response([("call_1", "group_list", {"top": 5})])]
        )
        stream = CompletionClient(provider, model="m").stream([])
        async for _ in stream:
            pass

        (call,) = stream.tool_calls
        assert call.parse_arguments() == {"top": 5}


class TestNormalizeChunk:
    """Tests for SDK chunk conversion."""

    def test_empty_choices_skipped(self):
        """Chunks without choices produce no events."""
        assert normalize_chunk(SimpleNamespace(choices=[])) == []

    def test_text_and_finish(self):
        """Content and finish reason become separate events."""
        events = normalize_chunk(_chunk(content="Hi", finish_reason="stop"))
        assert events == [TextDelta("Hi"), StreamFinished("stop")]

    def test_tool_call_delta(self):
        """Tool call deltas become fragments."""
        events = normalize_chunk(
            _chunk(tool_calls=[_tool_delta(0, id="call_1", name="t", arguments='{"a"')])
        )
        assert events == [ToolCallFragment(index=0, id="call_1", name="t", arguments='{"a"')]

    def test_tool_call_continuation(self):
        """Continuation deltas carry only arguments."""
        events = normalize_chunk(_chunk(tool_calls=[_tool_delta(1, arguments=": 1}")]))
        assert events == [ToolCallFragment(index=1, arguments=": 1}")]


class _FakeResponse:
    def __init__(self, chunks, delay: float = 0.0):
        self._chunks = list(chunks)
        self._delay = delay
        self.closed = False

    def __aiter__(self):
        return self

    async def __anext__(self):
        if self._delay:
            await asyncio.sleep(self._delay)
        if not self._chunks:
            raise StopAsyncIteration
        return self._chunks.pop(0)

    async def close(self):
        self.closed = True


class _FakeCompletions:
    def __init__(self, response=None, open_delay: float = 0.0):
        self.response = response
        self.open_delay = open_delay
        self.params = None

    async def create(self, **params):
        self.params = params
        if self.open_delay:
            await asyncio.sleep(self.open_delay)
        return self.response


def _fake_client(completions):
    return SimpleNamespace(chat=SimpleNamespace(completions=completions))


class TestAzureOpenAIProvider:
    """Tests for the Azure OpenAI provider with a fake SDK client."""

    @pytest.mark.asyncio
    async def test_streams_events(self):
        """Chunks are normalized and the response is closed."""
        response = _FakeResponse(
            [
                SimpleNamespace(choices=[]),
                _chunk(content="Hello"),
                _chunk(finish_reason="stop"),
            ]
        )
        completions = _FakeCompletions(response)
        provider = AzureOpenAIProvider(
            "https://example", "key", client=_fake_client(completions)
        )

        events = [e async for e in provider.stream([{"role": "user", "content": "hi"}], [], "gpt-4o")]

        assert events == [TextDelta("Hello"), StreamFinished("stop")]
        assert completions.params["stream"] is True
        assert "tools" not in completions.params
        assert response.closed

    @pytest.mark.asyncio
    async def test_tools_forwarded(self):
        """A non-empty tool list is sent with the request."""
        completions = _FakeCompletions(_FakeResponse([]))
        provider = AzureOpenAIProvider("https://example", "key", client=_fake_client(completions))
        tools = [{"type": "function", "function": {"name": "t"}}]

        async for _ in provider.stream([], tools, "gpt-4o"):
            pass

        assert completions.params["tools"] == tools

    @pytest.mark.asyncio
    async def test_open_timeout(self):
        """A slow request surfaces as CompletionError."""
        completions = _FakeCompletions(_FakeResponse([]), open_delay=1.0)
        provider = AzureOpenAIProvider(
            "https://example", "key", timeout=0.05, client=_fake_client(completions)
        )

        with pytest.raises(CompletionError, match="timed out"):
            async for _ in provider.stream([], [], "gpt-4o"):
                pass

    @pytest.mark.asyncio
    async def test_stalled_stream(self):
        """A stalled chunk wait surfaces as CompletionError."""
        response = _FakeResponse([_chunk(content="a")], delay=1.0)
        provider = AzureOpenAIProvider(
            "https://example", "key", timeout=0.05, client=_fake_client(_FakeCompletions(response))
        )

        with pytest.raises(CompletionError, match="stalled"):
            async for _ in provider.stream([], [], "gpt-4o"):
                pass
        assert response.closed
