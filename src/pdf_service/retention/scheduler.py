import asyncio
import logging

from .sweeper import RetentionSweeper, SweepReport

logger = logging.getLogger(__name__)


class RetentionScheduler:
    """Runs the sweeper on a fixed interval as a background asyncio task.

    Each sweep runs in a worker thread via asyncio.to_thread.
    """

    def __init__(self, sweeper: RetentionSweeper, *, retention_minutes: float, interval_seconds: float = 600) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self._sweeper = sweeper
        self._retention_minutes = retention_minutes
        self._interval = interval_seconds
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def run_once(self) -> SweepReport:
        logger.info("Running scheduled cleanup...")
        return await asyncio.to_thread(self._sweeper.sweep, self._retention_minutes)

    async def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._loop(), name="retention-sweep")
        logger.info(
            "Auto-cleanup: every %s seconds (files older than %s minutes)",
            self._interval,
            self._retention_minutes,
        )

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None

    async def _loop(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            try:
                await self.run_once()
            except Exception:
                logger.exception("Scheduled cleanup failed")
