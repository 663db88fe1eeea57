"""
Periodic driver for the staff session guard.

Runs guard.tick() on the application's event loop so the session
expires even when no requests arrive.
"""

import asyncio
from typing import Optional

from auragold.config import settings
from auragold.services.session_guard import SessionGuard, session_guard
from auragold.utils.logger import get_logger

logger = get_logger("session_timer")


class SessionTicker:
    """
    Ticks a SessionGuard at a fixed interval.

    The ticker stops on its own once the session ends, whether by
    expiry or logout.
    """

    def __init__(
        self,
        guard: SessionGuard,
        interval_seconds: Optional[float] = None
    ):
        self._guard = guard
        self._interval = interval_seconds or settings.session_tick_interval_seconds
        self._task: Optional[asyncio.Task] = None
        guard.add_end_listener(self._on_session_end)

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start ticking. Must be called from a running event loop."""
        if self.running:
            return
        loop = asyncio.get_running_loop()
        self._task = loop.create_task(self._run(), name="session-ticker")
        logger.debug("Session ticker started", interval=self._interval)

    async def stop(self) -> None:
        """Cancel the tick task and wait for it to finish."""
        task, self._task = self._task, None
        if task is None or task.done():
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.debug("Session ticker stopped")

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            status = self._guard.tick()
            if not status.is_authenticated:
                break

    def _on_session_end(self, reason: str) -> None:
        task = self._task
        if task is None or task.done():
            return
        try:
            current = asyncio.current_task()
        except RuntimeError:
            current = None
        # Expiry detected inside _run exits the loop normally
        if task is current:
            return
        task.cancel()
        logger.debug("Session ticker cancelled", reason=reason)


# Singleton instance
session_ticker = SessionTicker(session_guard)
