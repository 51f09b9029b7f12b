"""FastAPI routes for the chat API."""

import asyncio
from datetime import datetime, timezone
from typing import AsyncIterator
from uuid import uuid4

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import JSONResponse, StreamingResponse
from pydantic import ValidationError

from azure_mcp_agent import __version__
from azure_mcp_agent.api.dependencies import AgentDep, ApplicationDep
from azure_mcp_agent.api.models import (
    ChatRequest,
    ChatResponse,
    ErrorResponse,
    HealthResponse,
    ToolInfo,
    ToolsResponse,
)
from azure_mcp_agent.api.sse import event_generator_with_task
from azure_mcp_agent.core.cancellation import CancellationToken
from azure_mcp_agent.core.exceptions import ChatRequestError
from azure_mcp_agent.events.models import ErrorEvent, Event
from azure_mcp_agent.utils.logging import get_logger


logger = get_logger(__name__)
router = APIRouter()

GENERIC_ERROR = "An error occurred while processing your request"
STREAM_ERROR_MARKER = "\n\n[Error: Something went wrong]"


async def _parse_chat_request(request: Request) -> ChatRequest:
    """Validate the body before any upstream call is made."""
    try:
        payload = await request.json()
    except ValueError as e:
        raise ChatRequestError() from e
    try:
        return ChatRequest.model_validate(payload)
    except ValidationError as e:
        raise ChatRequestError() from e


def _error_response(error: Exception) -> JSONResponse:
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(error=GENERIC_ERROR, details=str(error)).model_dump(),
    )


def _ensure_accepting(application: ApplicationDep) -> None:
    if application.is_shutting_down:
        raise HTTPException(status_code=503, detail="Service is shutting down")


@router.get("/health", response_model=HealthResponse)
async def health_check(agent: AgentDep) -> HealthResponse:
    """Health check endpoint."""
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(timezone.utc).isoformat(),
        version=__version__,
        tools_connected=agent.is_connected,
        tool_count=len(agent.tools),
    )


@router.get("/tools", response_model=ToolsResponse)
async def list_tools(agent: AgentDep) -> ToolsResponse:
    """List the tool catalog of the current MCP connection."""
    tools = [ToolInfo(name=tool.name, description=tool.description) for tool in agent.tools]
    return ToolsResponse(tools=tools, count=len(tools), connected=agent.is_connected)


@router.post("/chat")
async def chat(
    request: Request,
    application: ApplicationDep,
    agent: AgentDep,
):
    """
    Streaming chat endpoint.

    Returns the agent's text as a chunked ``text/plain`` body. Errors before
    the first chunk produce a 500 JSON body; errors after output has begun
    end the body with a visible error marker. A client disconnect cancels
    the turn.
    """
    _ensure_accepting(application)
    chat_request = await _parse_chat_request(request)

    request_id = str(uuid4())
    cancel_token = CancellationToken()
    chunks = agent.run_stream(
        chat_request.message,
        chat_request.history_messages(),
        cancel_token=cancel_token,
        request_id=request_id,
    )

    application.track_request(request_id)
    try:
        first = await anext(chunks, None)
    except Exception as e:
        logger.error("Chat error", request_id=request_id, error=str(e), exc_info=True)
        application.untrack_request(request_id)
        return _error_response(e)

    async def body() -> AsyncIterator[str]:
        try:
            if first is not None:
                yield first
            async for chunk in chunks:
                yield chunk
        except Exception as e:
            logger.error("Chat stream error", request_id=request_id, error=str(e), exc_info=True)
            yield STREAM_ERROR_MARKER
        finally:
            cancel_token.cancel("client disconnected")
            await chunks.aclose()
            application.untrack_request(request_id)

    return StreamingResponse(
        body(),
        media_type="text/plain; charset=utf-8",
        headers={
            "Cache-Control": "no-cache",
            "X-Request-ID": request_id,
        },
    )


@router.post("/chat/sync")
async def chat_sync(
    request: Request,
    application: ApplicationDep,
    agent: AgentDep,
):
    """Non-streaming chat endpoint returning ``{"response": ...}``."""
    _ensure_accepting(application)
    chat_request = await _parse_chat_request(request)

    request_id = str(uuid4())
    application.track_request(request_id)
    try:
        response = await agent.run(
            chat_request.message,
            chat_request.history_messages(),
            request_id=request_id,
        )
    except Exception as e:
        logger.error("Chat sync error", request_id=request_id, error=str(e), exc_info=True)
        return _error_response(e)
    finally:
        application.untrack_request(request_id)

    return ChatResponse(response=response)


@router.post("/chat/events")
async def chat_events(
    request: Request,
    application: ApplicationDep,
    agent: AgentDep,
) -> StreamingResponse:
    """
    Chat endpoint streaming structured events over SSE.

    Events:
    - response.chunk: assistant text
    - tool.round.start / tool.complete / tool.error: tool execution
    - response.done: terminal event with the turn outcome
    - error: the turn failed
    """
    _ensure_accepting(application)
    chat_request = await _parse_chat_request(request)

    request_id = str(uuid4())
    cancel_token = CancellationToken()
    event_queue: asyncio.Queue[Event] = asyncio.Queue()

    async def run_turn() -> None:
        """Run the turn in background, publishing events to the queue."""
        try:
            async for event in agent.run_events(
                chat_request.message,
                chat_request.history_messages(),
                cancel_token=cancel_token,
                request_id=request_id,
            ):
                await event_queue.put(event)
        except Exception as e:
            logger.error(f"Turn execution error: {e}", request_id=request_id, exc_info=True)
            await event_queue.put(
                ErrorEvent.create(
                    error=str(e),
                    error_type=type(e).__name__,
                    request_id=request_id,
                )
            )
        finally:
            application.untrack_request(request_id)

    application.track_request(request_id)
    task = asyncio.create_task(run_turn())

    return StreamingResponse(
        event_generator_with_task(event_queue, task, cancel_token),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Request-ID": request_id,
        },
    )
