"""
Concurrency Infrastructure.

Single-flight guards for the client's asyncio event loop.

The client runs on one event loop with cooperative suspension at each
network call, so no locks are needed. What is needed is a way to stop the
same logical operation from running twice in overlapping windows:

    - the credential refresh exchange (callers join the in-flight refresh)
    - a notes sync (a second trigger is dropped while one is outstanding)

Usage:
    from notu.core.concurrency import SingleFlight

    flight = SingleFlight("session")

    # Join: every caller awaits the one shared run and gets its result
    tokens = await flight.do("refresh", lambda: exchange(refresh_token))

    # Skip: check before starting
    if flight.in_flight("sync"):
        return False
    await flight.do("sync", run_sync)
"""

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from notu.core.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


class SingleFlight:
    """
    Collapse concurrent runs of the same keyed operation into one.

    The first caller for a key starts the operation as a task; callers that
    arrive while it is outstanding await the same task. Exceptions reach
    every waiter. The key is released as soon as the task finishes.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self._tasks: dict[str, asyncio.Task[Any]] = {}

    def in_flight(self, key: str) -> bool:
        """Whether an operation for `key` is outstanding."""
        task = self._tasks.get(key)
        return task is not None and not task.done()

    async def do(self, key: str, fn: Callable[[], Awaitable[T]]) -> T:
        """
        Run `fn` once for `key`, or join the run already in progress.

        Args:
            key: Logical operation name
            fn: Zero-argument coroutine factory, only called by the first caller

        Returns:
            The shared result
        """
        task = self._tasks.get(key)
        if task is None or task.done():
            task = asyncio.ensure_future(fn())
            self._tasks[key] = task
            task.add_done_callback(lambda done, k=key: self._release(k, done))
        else:
            logger.debug(
                "Joined in-flight operation",
                extra={"group": self.name, "key": key},
            )
        # shield: a cancelled waiter must not cancel the shared run
        return await asyncio.shield(task)

    def _release(self, key: str, task: asyncio.Task[Any]) -> None:
        if self._tasks.get(key) is task:
            del self._tasks[key]
