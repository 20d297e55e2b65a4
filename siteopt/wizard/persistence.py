"""
Background persistence for wizard state changes.

Writes are queued and executed one at a time, in submission order, by a
single worker task. Delivery is at-most-once: a failed write is logged
and dropped, and the next successful write for the same step supersedes
it. Switching to retries is a change to _run() only.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional

from ..core.errors import AppError, PersistenceError

logger = logging.getLogger(__name__)

WriteFn = Callable[[], Awaitable[Any]]


class StepWriter:
    """Fire-and-forget write queue. submit() never blocks and never raises on write failure."""

    def __init__(self, maxsize: int = 100):
        self._queue: asyncio.Queue[tuple[str, WriteFn]] = asyncio.Queue(maxsize=maxsize)
        self._task: Optional[asyncio.Task] = None
        self.completed = 0
        self.failed = 0
        self.last_error: Optional[PersistenceError] = None

    def _ensure_worker(self) -> None:
        if self._task is None or self._task.done():
            self._task = asyncio.get_running_loop().create_task(self._run())

    def submit(self, label: str, write: WriteFn) -> bool:
        """Queue a write. Returns False (and drops it) if the queue is full."""
        self._ensure_worker()
        try:
            self._queue.put_nowait((label, write))
        except asyncio.QueueFull:
            self.failed += 1
            logger.warning("Persistence queue full, dropping write: %s", label)
            return False
        return True

    async def _run(self) -> None:
        while True:
            label, write = await self._queue.get()
            try:
                await write()
                self.completed += 1
            except asyncio.CancelledError:
                raise
            except Exception as e:
                self.failed += 1
                code = e.code if isinstance(e, AppError) else "PERSISTENCE_FAILED"
                self.last_error = PersistenceError(f"{label}: {e}", code)
                logger.warning("Background write failed (%s) [%s]: %s", label, code, e)
            finally:
                self._queue.task_done()

    async def drain(self) -> None:
        """Wait until every queued write has been attempted."""
        await self._queue.join()

    async def close(self) -> None:
        """Attempt the remaining writes, then stop the worker."""
        if self._task is None:
            return
        await self.drain()
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
