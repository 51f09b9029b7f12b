"""SSE stream helpers."""

import asyncio
from typing import AsyncIterator

from azure_mcp_agent.core.cancellation import CancellationToken
from azure_mcp_agent.events.models import Event
from azure_mcp_agent.events.types import EventType
from azure_mcp_agent.utils.logging import get_logger


logger = get_logger(__name__)

# Timeout for graceful task cancellation
TASK_CANCEL_TIMEOUT = 5.0

TERMINAL_EVENTS = (EventType.RESPONSE_DONE, EventType.ERROR)


async def event_generator_with_task(
    event_queue: asyncio.Queue[Event],
    task: asyncio.Task,
    cancel_token: CancellationToken,
    timeout: float = 15.0,
) -> AsyncIterator[str]:
    """
    Generate SSE events while a background task runs the turn.

    Args:
        event_queue: Queue the task publishes events to
        task: Background task running the turn
        cancel_token: Fired when the client goes away
        timeout: Seconds between keepalive comments

    Yields:
        SSE formatted event strings
    """
    try:
        while True:
            try:
                event = await asyncio.wait_for(event_queue.get(), timeout=timeout)
            except asyncio.TimeoutError:
                if task.done() and event_queue.empty():
                    break
                yield ": keepalive\n\n"
                continue

            yield event.to_sse()
            if event.event_type in TERMINAL_EVENTS:
                break

    finally:
        cancel_token.cancel("client disconnected")
        if not task.done():
            try:
                await asyncio.wait_for(task, timeout=TASK_CANCEL_TIMEOUT)
            except asyncio.TimeoutError:
                logger.warning(
                    "Task did not stop within timeout, cancelling", timeout=TASK_CANCEL_TIMEOUT
                )
                task.cancel()
                await asyncio.gather(task, return_exceptions=True)

        _drain_queue(event_queue)


def _drain_queue(event_queue: asyncio.Queue[Event]) -> int:
    """Drain all remaining events from queue to free memory."""
    drained = 0
    try:
        while not event_queue.empty():
            event_queue.get_nowait()
            drained += 1
    except asyncio.QueueEmpty:
        pass
    if drained > 0:
        logger.debug(f"Drained {drained} events from queue during cleanup")
    return drained
