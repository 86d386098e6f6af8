"""
Main Thread Dispatcher - serializes scene mutations onto one context.

Editor objects may only be touched from the editor's main thread. Tool
calls arrive on the server's event loop, so each mutation is handed off
here as a plain synchronous callable. A single worker runs the callables
one at a time, in the order they were enqueued, and resolves the caller's
future with the result.

A callable runs start to finish without yielding, so nothing else can
observe a half-patched object. If the caller was cancelled before its
turn came, the callable is skipped and never runs.
"""

import asyncio
import logging
from typing import Callable, Optional, TypeVar

logger = logging.getLogger("scenepatch.main_thread")

T = TypeVar("T")


class MainThreadDispatcher:
    """
    FIFO hand-off queue drained by a single worker task.

    Callables may be enqueued before start(); they run once the worker is up.
    """

    def __init__(self, max_size: int = 256):
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=max_size)
        self._running = False
        self._stopped = False
        self._task: Optional[asyncio.Task] = None

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    def start(self) -> None:
        """Start the worker on the running event loop."""
        if self._running:
            return

        self._running = True
        self._stopped = False
        self._task = asyncio.create_task(self._process_loop())
        logger.info("Main thread dispatcher started")

    async def stop(self) -> None:
        """Stop the worker and cancel every hand-off still waiting its turn."""
        self._running = False
        self._stopped = True
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

        dropped = 0
        while True:
            try:
                _, future = self._queue.get_nowait()
            except asyncio.QueueEmpty:
                break
            if not future.done():
                future.cancel()
                dropped += 1

        logger.info(f"Main thread dispatcher stopped ({dropped} pending hand-offs cancelled)")

    async def run(self, fn: Callable[[], T]) -> T:
        """
        Run fn on the main context and return its result.

        Args:
            fn: Synchronous callable; it must not await

        Returns:
            Whatever fn returns

        Raises:
            Whatever fn raises, re-raised in the caller
            RuntimeError: If the dispatcher has been stopped
            asyncio.CancelledError: If the caller is cancelled or the dispatcher stops first
        """
        if self._stopped:
            raise RuntimeError("Main thread dispatcher is stopped")

        future = asyncio.get_running_loop().create_future()
        await self._queue.put((fn, future))
        if self._stopped:
            # stop() drained the queue while this call waited for room
            future.cancel()
        return await future

    async def _process_loop(self) -> None:
        """Drain hand-offs in arrival order."""
        while self._running:
            try:
                fn, future = await self._queue.get()
            except asyncio.CancelledError:
                break

            if future.done():
                # Caller went away while queued
                logger.debug("Skipping hand-off whose caller was cancelled")
                continue

            try:
                result = fn()
            except Exception as e:
                future.set_exception(e)
            else:
                future.set_result(result)
