"""Cooperative cancellation for agent turns."""

import asyncio
from typing import Awaitable, TypeVar


T = TypeVar("T")


class TurnCancelled(Exception):
    """Raised inside the loop when the turn's token fires."""


class CancellationToken:
    """
    Signal from the consuming side that a turn should stop.

    Awaits routed through ``run`` are abandoned as soon as the token fires,
    so an in-flight completion chunk or tool call does not hold the turn.
    """

    __slots__ = ("_event", "reason")

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self.reason: str | None = None

    def cancel(self, reason: str = "cancelled") -> None:
        """Request cancellation. Idempotent."""
        if not self._event.is_set():
            self.reason = reason
            self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    async def wait(self) -> None:
        await self._event.wait()

    def raise_if_cancelled(self) -> None:
        if self.cancelled:
            raise TurnCancelled(self.reason)

    async def run(self, awaitable: Awaitable[T]) -> T:
        """
        Await ``awaitable`` unless the token fires first.

        Raises:
            TurnCancelled: If the token fired before the awaitable finished
        """
        if self.cancelled:
            if asyncio.iscoroutine(awaitable):
                awaitable.close()
            raise TurnCancelled(self.reason)

        task = asyncio.ensure_future(awaitable)
        waiter = asyncio.create_task(self._event.wait())
        try:
            await asyncio.wait({task, waiter}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            waiter.cancel()
            if not task.done():
                task.cancel()
                await asyncio.gather(task, return_exceptions=True)

        if task.cancelled():
            raise TurnCancelled(self.reason)
        return task.result()
