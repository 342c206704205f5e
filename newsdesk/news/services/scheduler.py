"""
Fixed-interval scheduler for the ingestion job, driven by the application lifespan
"""

import asyncio
from typing import Any, Dict, Optional

import structlog

from .ingestion_service import IngestionService

logger = structlog.get_logger(__name__)


class IngestionScheduler:
    """
    Runs IngestionService.run every interval in a worker thread.
    A run that is still in progress makes the next trigger a no-op.
    """

    def __init__(self, service: IngestionService, interval_minutes: int = 30, run_on_startup: bool = True):
        self.service = service
        self.interval_seconds = max(1, interval_minutes) * 60
        self.run_on_startup = run_on_startup
        self._lock = asyncio.Lock()
        self._task: Optional[asyncio.Task] = None
        self.last_stats: Optional[Dict[str, Any]] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def busy(self) -> bool:
        return self._lock.locked()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._loop(), name="news-ingestion")
        logger.info("Ingestion scheduler started", interval_seconds=self.interval_seconds)

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Ingestion scheduler stopped")

    async def trigger(self) -> Optional[Dict[str, Any]]:
        """Run one pass now. Returns None when a run is already in progress."""
        if self._lock.locked():
            logger.info("Ingestion run already in progress, skipping")
            return None

        async with self._lock:
            stats = await asyncio.to_thread(self.service.run)
            self.last_stats = stats
            return stats

    async def _loop(self) -> None:
        if not self.run_on_startup:
            await asyncio.sleep(self.interval_seconds)

        while True:
            try:
                await self.trigger()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.error("Scheduled ingestion failed", error=str(e), exc_info=e)
            await asyncio.sleep(self.interval_seconds)
