"""Status refresher - re-derives task statuses on a timer and on app resume."""

import os
import asyncio
from datetime import datetime
from typing import Callable, Optional

from tasktrack.services.task_store import TaskStore
from tasktrack.utils.logging import correlation_context, get_structured_logger, log_timing

logger = get_structured_logger(__name__)

# Default refresh period (seconds)
DEFAULT_REFRESH_INTERVAL = int(os.environ.get("STATUS_REFRESH_INTERVAL_SECONDS", "300"))  # 5 minutes


class StatusRefresher:
    """
    Periodically calls TaskStore.refresh_statuses().

    The timer is an asyncio task owned by this object. Call stop() (or use
    ``async with``) when the owning scope goes away so no timer is left
    running.
    """

    def __init__(
        self,
        store: TaskStore,
        interval_seconds: float = DEFAULT_REFRESH_INTERVAL,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self.store = store
        self.interval_seconds = interval_seconds
        self._clock = clock
        self._timer: Optional[asyncio.Task] = None
        logger.info(
            "StatusRefresher initialized",
            refresh_interval_seconds=interval_seconds
        )

    @property
    def running(self) -> bool:
        return self._timer is not None and not self._timer.done()

    def start(self) -> None:
        """Start the recurring timer. Calling it again while running is a no-op."""
        if self.running:
            return
        self._timer = asyncio.create_task(self._run())
        logger.debug("Status refresh timer started", refresh_interval_seconds=self.interval_seconds)

    async def stop(self) -> None:
        """Cancel the timer and wait until it has finished."""
        timer, self._timer = self._timer, None
        if timer is None:
            return
        timer.cancel()
        try:
            await timer
        except asyncio.CancelledError:
            # Only swallow the cancellation we requested, not one aimed at the caller
            current = asyncio.current_task()
            if current is not None and current.cancelling():
                raise
        logger.debug("Status refresh timer stopped")

    def on_foreground(self) -> bool:
        """Application resumed: refresh right away."""
        logger.debug("Application entered foreground")
        return self.refresh_now(trigger="foreground")

    def refresh_now(self, trigger: str = "manual") -> bool:
        """Run one refresh sweep; failures are logged, never raised."""
        now = self._clock() if self._clock else None
        with correlation_context(prefix="refresh"):
            try:
                with log_timing("refresh_statuses", logger=logger, trigger=trigger):
                    changed = self.store.refresh_statuses(now)
            except Exception as e:
                logger.error(
                    "Status refresh failed",
                    trigger=trigger,
                    error=str(e),
                    exc_info=True
                )
                return False

            if changed:
                logger.info("Status refresh changed tasks", trigger=trigger)
            return changed

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval_seconds)
            self.refresh_now(trigger="timer")

    async def __aenter__(self) -> "StatusRefresher":
        self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.stop()
        return False
