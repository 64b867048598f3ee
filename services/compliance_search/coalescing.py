"""
Request Coalescing
==================

Ensures at most one pipeline runs per cache key. Concurrent callers for a
key share the first caller's task and observe its result or exception.

Version: 0.1.0
"""

import asyncio
from collections.abc import Awaitable, Callable
from typing import Generic, TypeVar

from shared.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


class InFlightRegistry(Generic[T]):
    """
    Registry of running pipelines keyed by cache key.

    The shared task is awaited through ``asyncio.shield`` so cancelling one
    waiter never cancels the pipeline for the others. Registration is
    removed by the task itself when it finishes, whether it succeeds, fails
    or is cancelled.
    """

    def __init__(self) -> None:
        self._tasks: dict[str, asyncio.Task[T]] = {}

    def is_in_flight(self, key: str) -> bool:
        return key in self._tasks

    def __len__(self) -> int:
        return len(self._tasks)

    def join(self, key: str, factory: Callable[[], Awaitable[T]]) -> asyncio.Task[T]:
        """
        Return the task in flight for ``key``, starting ``factory()`` if none is.

        Synchronous, so a caller that checked the cache can join without
        yielding to the loop in between.

        Args:
            key: Coalescing key
            factory: Zero-argument callable producing the pipeline coroutine

        Returns:
            The shared task; await it through ``asyncio.shield``
        """
        task = self._tasks.get(key)

        if task is None:
            task = asyncio.ensure_future(factory())
            self._tasks[key] = task
            task.add_done_callback(lambda done: self._release(key, done))
        else:
            logger.debug("request_coalesced", cache_key=key)

        return task

    async def run(self, key: str, factory: Callable[[], Awaitable[T]]) -> T:
        """Run ``factory()`` for ``key``, or join the run already in flight."""
        return await asyncio.shield(self.join(key, factory))

    def _release(self, key: str, task: asyncio.Task[T]) -> None:
        if self._tasks.get(key) is task:
            del self._tasks[key]
