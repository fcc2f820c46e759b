"""Explicit cancellation for requests issued on behalf of a view."""

import asyncio
import logging
from typing import Awaitable, TypeVar

from booklib.errors import RequestCancelled

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CancelToken:
    """Cancels every request awaited through it once `cancel()` is called.

    A token may be shared across requests served by different event loops, so it
    holds no loop-bound primitives; in-flight tasks are cancelled thread-safely
    on whichever loop they belong to.
    """

    def __init__(self) -> None:
        self._cancelled = False
        self._tasks: set[asyncio.Task] = set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        if self._cancelled:
            return
        self._cancelled = True
        if self._tasks:
            logger.debug(f"Cancelling {len(self._tasks)} in-flight request(s)")
        for task in list(self._tasks):
            task.get_loop().call_soon_threadsafe(task.cancel)

    def raise_if_cancelled(self) -> None:
        if self._cancelled:
            raise RequestCancelled("Request cancelled")

    async def guard(self, aw: Awaitable[T]) -> T:
        """Await `aw`, raising RequestCancelled if the token fires first."""
        if self._cancelled:
            if asyncio.iscoroutine(aw):
                aw.close()
            raise RequestCancelled("Request cancelled")
        task = asyncio.ensure_future(aw)
        self._tasks.add(task)
        try:
            result = await task
        except asyncio.CancelledError:
            if self._cancelled:
                raise RequestCancelled("Request cancelled") from None
            raise
        finally:
            self._tasks.discard(task)
        # The token may fire after the response arrived but before we resumed.
        self.raise_if_cancelled()
        return result


async def guarded(aw: Awaitable[T], cancel: CancelToken | None) -> T:
    """Await `aw` through `cancel` when one is given."""
    if cancel is None:
        return await aw
    return await cancel.guard(aw)
