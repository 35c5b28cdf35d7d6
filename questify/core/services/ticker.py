"""Single repeating asyncio timer that fans out to registered callbacks."""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Ticker(Generic[T]):
    """Calls every subscriber with ``produce()`` once per interval while running."""

    def __init__(self, interval_seconds: float, produce: Callable[[], T]) -> None:
        if interval_seconds <= 0:
            raise ValueError("Tick interval must be positive.")
        self._interval = interval_seconds
        self._produce = produce
        self._callbacks: list[Callable[[T], None]] = []
        self._task: asyncio.Task[None] | None = None

    def subscribe(self, callback: Callable[[T], None]) -> Callable[[], None]:
        """Register a callback and return a function that unregisters it."""
        self._callbacks.append(callback)

        def unsubscribe() -> None:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

        return unsubscribe

    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> bool:
        """Start ticking on the running event loop; returns False when there is none."""
        self.stop()
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running event loop; ticks disabled")
            return False
        self._task = loop.create_task(self._run())
        return True

    def stop(self) -> None:
        if self._task is not None:
            self._task.cancel()
            self._task = None

    def emit(self) -> None:
        value = self._produce()
        for callback in list(self._callbacks):
            try:
                callback(value)
            except Exception:
                logger.exception("Tick callback %r failed", callback)

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            self.emit()
