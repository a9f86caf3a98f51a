"""Background tasks for the reporting service."""

import asyncio
import logging

from eventdesk.config import get_settings
from eventdesk.database import get_db_context
from eventdesk.redis_client import get_redis
from eventdesk.services.utilization_service import UtilizationService

logger = logging.getLogger(__name__)

settings = get_settings()


async def refresh_utilization_once(days: int = 2) -> int:
    """Recompute the cached utilization of today and the previous day."""
    async with get_db_context() as db:
        redis_client = await get_redis()
        service = UtilizationService(db, redis_client)
        return await service.refresh_recent_days(days)


async def refresh_utilization_cache() -> None:
    """
    Background task keeping recent utilization rows current.

    Rows are otherwise only written lazily by report requests, so a day
    whose schedules change after its row exists would keep stale numbers.
    """
    logger.info("Starting utilization refresh task")

    while True:
        try:
            written = await refresh_utilization_once()
            if written > 0:
                logger.info(f"Refreshed utilization for {written} days")

        except Exception as e:
            logger.error(f"Error in utilization refresh task: {e}")

        await asyncio.sleep(settings.UTILIZATION_REFRESH_INTERVAL_SECONDS)


class BackgroundTaskManager:
    """Manager for background tasks."""

    def __init__(self):
        self.tasks: list[asyncio.Task] = []

    async def start(self) -> None:
        """Start all background tasks."""
        if not settings.UTILIZATION_REFRESH_ENABLED:
            logger.info("Utilization refresh disabled")
            return

        self.tasks.append(
            asyncio.create_task(refresh_utilization_cache())
        )
        logger.info("Background tasks started")

    async def stop(self) -> None:
        """Stop all background tasks."""
        for task in self.tasks:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        self.tasks.clear()
        logger.info("Background tasks stopped")


# Global instance
background_tasks = BackgroundTaskManager()
