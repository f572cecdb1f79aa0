"""Request scope — the task group and cancellation boundary of one request.

A :class:`RequestScope` is created when a request arrives, handed to every
operation that spawns concurrent work, and closed when the request ends,
whichever way it ends.  Nothing it owns outlives the request.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Coroutine, Iterable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RequestScope:
    """Owns every task spawned while serving one inbound request."""

    def __init__(self) -> None:
        self._tasks: set[asyncio.Task[Any]] = set()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def active_tasks(self) -> int:
        return sum(1 for task in self._tasks if not task.done())

    def spawn(self, coro: Coroutine[Any, Any, T]) -> asyncio.Task[T]:
        """Start *coro* as a task owned by this scope."""
        if self._closed:
            coro.close()
            raise RuntimeError("Request scope is already closed.")
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def gather(self, coros: Iterable[Coroutine[Any, Any, T]]) -> list[T]:
        """Run *coros* concurrently and return their results in submission order.

        Every coroutine is started before any is awaited.  As soon as one of
        them fails, the rest of the batch is cancelled and that failure is
        re-raised.  Which failure wins when several fail together is not
        specified.
        """
        tasks = [self.spawn(coro) for coro in coros]
        if not tasks:
            return []

        try:
            done, _ = await asyncio.wait(tasks, return_when=asyncio.FIRST_EXCEPTION)
        finally:
            for task in tasks:
                if not task.done():
                    task.cancel()

        failures = [
            task.exception()
            for task in done
            if not task.cancelled() and task.exception() is not None
        ]
        if failures:
            raise failures[0]  # type: ignore[misc]

        return [task.result() for task in tasks]

    async def aclose(self) -> None:
        """Cancel whatever is still running and wait for it to finish."""
        self._closed = True
        pending = [task for task in self._tasks if not task.done()]
        if not pending:
            return

        logger.debug("Cancelling %d task(s) left at request teardown", len(pending))
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)

    async def __aenter__(self) -> RequestScope:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()
