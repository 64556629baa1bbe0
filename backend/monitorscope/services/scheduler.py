"""Scheduler service - periodic trigger for health checks.

The orchestrator has no timers of its own; this service calls it on an
interval and prunes old history. Each run builds a fresh orchestrator from
the factory it was given.
"""
import logging
from datetime import timedelta
from typing import Callable, Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from ..stores import HistoryStore
from ..utils.clock import utcnow
from .orchestrator import CheckOrchestrator

logger = logging.getLogger(__name__)


class SchedulerService:
    """Runs all checks every ``check_interval_minutes``."""

    def __init__(
        self,
        orchestrator_factory: Callable[[], CheckOrchestrator],
        history: HistoryStore,
        check_interval_minutes: int = 5,
        retention_days: int = 365,
    ):
        self.orchestrator_factory = orchestrator_factory
        self.history = history
        self.check_interval_minutes = max(check_interval_minutes, 1)
        self.retention_days = retention_days
        self.scheduler: Optional[AsyncIOScheduler] = None
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    def start(self):
        """Start the scheduler."""
        if self._running:
            return

        self.scheduler = AsyncIOScheduler()

        self.scheduler.add_job(
            self.run_checks,
            trigger=IntervalTrigger(minutes=self.check_interval_minutes),
            id="run_checks",
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )

        self.scheduler.add_job(
            self.cleanup_old_records,
            trigger=IntervalTrigger(hours=1),
            id="cleanup_old_records",
            replace_existing=True,
            max_instances=1,
        )

        self.scheduler.start()
        self._running = True
        logger.info(f"Scheduler started (interval={self.check_interval_minutes}min)")

    def stop(self):
        """Stop the scheduler."""
        if self.scheduler and self._running:
            self.scheduler.shutdown(wait=False)
            self._running = False
            logger.info("Scheduler stopped")

    async def run_checks(self):
        """Run one check cycle over all active targets."""
        try:
            await self.orchestrator_factory().run_all_checks()
        except Exception as e:
            logger.error(f"Health check cycle failed: {type(e).__name__}: {e}")

    async def cleanup_old_records(self) -> int:
        """Delete observations older than the retention window."""
        try:
            cutoff = utcnow() - timedelta(days=self.retention_days)
            deleted = await self.history.delete_older_than(cutoff)
            logger.info(f"Cleaned up {deleted} old health check records")
            return deleted
        except Exception as e:
            logger.error(f"Error cleaning up records: {type(e).__name__}: {e}")
            return 0
