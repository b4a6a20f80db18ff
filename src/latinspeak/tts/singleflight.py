"""Per-key deduplication of concurrent async operations."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any

logger = logging.getLogger(__name__)


class SingleFlight:
    """Runs at most one operation per key at a time.

    Callers that arrive while an operation for their key is running await that
    operation instead of starting another, and all of them observe the same
    result or exception. The entry is dropped as soon as the operation
    settles, whatever the outcome, so the next call starts fresh.

    An operation is never cancelled on behalf of a caller: a cancelled caller
    stops waiting, but the shared task runs to completion for the others.
    """

    def __init__(self) -> None:
        self._calls: dict[str, asyncio.Task[Any]] = {}

    def __len__(self) -> int:
        return len(self._calls)

    def __contains__(self, key: str) -> bool:
        task = self._calls.get(key)
        return task is not None and not task.done()

    async def do(self, key: str, fn: Callable[[], Awaitable[Any]]) -> Any:
        """Run fn under key, or join the run already in progress.

        Args:
            key: Deduplication key
            fn: Zero-argument coroutine function performing the work

        Returns:
            Whatever fn returns

        Raises:
            Whatever fn raises
        """
        task = self._calls.get(key)
        if task is None or task.done():
            task = asyncio.ensure_future(fn())
            self._calls[key] = task
            task.add_done_callback(lambda t: self._forget(key, t))
        else:
            logger.debug(f"Joining in-flight operation {key[:12]}")

        return await asyncio.shield(task)

    def _forget(self, key: str, task: asyncio.Task[Any]) -> None:
        if self._calls.get(key) is task:
            del self._calls[key]
        # Retrieve the outcome so an unobserved failure is not reported as
        # "exception was never retrieved"
        if not task.cancelled():
            task.exception()
