"""
Background scheduler service for periodic jobs.

Drives the two KPI batch entry points on fixed intervals:
- automatic KPI updates (hourly by default)
- threshold checks and notification (every 15 minutes by default)

Uses APScheduler for in-process scheduling without external dependencies.
"""

from __future__ import annotations

from typing import Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from workpulse.core.config import get_settings
from workpulse.core.logger import logger
from workpulse.models.kpi import KpiBatchResult
from workpulse.services.kpi_service import KpiService
from workpulse.services.threshold_notifier import ThresholdNotifier


class BackgroundScheduler:
    """
    Background scheduler for periodic KPI jobs.

    Both jobs can also be triggered on demand; a job never raises into the
    scheduler, failures are logged.
    """

    KPI_UPDATE_JOB_ID = "kpi_automatic_update"
    THRESHOLD_CHECK_JOB_ID = "kpi_threshold_check"

    def __init__(self, kpi_service: KpiService, threshold_notifier: ThresholdNotifier):
        self._kpi_service = kpi_service
        self._threshold_notifier = threshold_notifier
        self._scheduler: Optional[AsyncIOScheduler] = None

    @property
    def running(self) -> bool:
        return self._scheduler is not None and self._scheduler.running

    async def start(self):
        """Start the scheduler."""
        settings = get_settings()

        # Only run scheduler in non-test environments
        if settings.is_test:
            logger.info("Background scheduler disabled in test environment")
            return
        if not settings.SCHEDULER_ENABLED:
            logger.info("Background scheduler disabled by configuration")
            return

        self._scheduler = AsyncIOScheduler()

        self._scheduler.add_job(
            self._run_kpi_update,
            IntervalTrigger(minutes=settings.KPI_UPDATE_INTERVAL_MINUTES),
            id=self.KPI_UPDATE_JOB_ID,
            name="Automatic KPI Update",
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )

        self._scheduler.add_job(
            self._run_threshold_check,
            IntervalTrigger(minutes=settings.THRESHOLD_CHECK_INTERVAL_MINUTES),
            id=self.THRESHOLD_CHECK_JOB_ID,
            name="KPI Threshold Check",
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )

        self._scheduler.start()
        logger.info(
            "Background scheduler started:\n"
            f"  - Automatic KPI update: every {settings.KPI_UPDATE_INTERVAL_MINUTES} minutes\n"
            f"  - KPI threshold check: every {settings.THRESHOLD_CHECK_INTERVAL_MINUTES} minutes"
        )

    async def stop(self):
        """Stop the scheduler."""
        if self._scheduler:
            self._scheduler.shutdown(wait=False)
            self._scheduler = None
            logger.info("Background scheduler stopped")

    async def _run_kpi_update(self) -> Optional[KpiBatchResult]:
        try:
            return await self._kpi_service.update_kpis_automatically()
        except Exception as e:
            logger.error(f"Automatic KPI update failed: {e}")
            return None

    async def _run_threshold_check(self) -> Optional[dict[str, int]]:
        try:
            return await self._threshold_notifier.check_thresholds_and_notify()
        except Exception as e:
            logger.error(f"KPI threshold check failed: {e}")
            return None

    async def trigger_kpi_update(self) -> Optional[KpiBatchResult]:
        """Run the automatic KPI update now, outside the schedule."""
        logger.info("Manual trigger: automatic KPI update")
        return await self._run_kpi_update()

    async def trigger_threshold_check(self) -> Optional[dict[str, int]]:
        """Run the threshold check now, outside the schedule."""
        logger.info("Manual trigger: KPI threshold check")
        return await self._run_threshold_check()


# Global scheduler instance
_scheduler: Optional[BackgroundScheduler] = None


async def get_background_scheduler() -> BackgroundScheduler:
    """Get or create the global background scheduler."""
    global _scheduler
    if _scheduler is None:
        from workpulse.core.providers import get_kpi_service, get_threshold_notifier

        _scheduler = BackgroundScheduler(
            kpi_service=get_kpi_service(),
            threshold_notifier=get_threshold_notifier(),
        )
    return _scheduler


async def start_background_scheduler():
    """Start the global background scheduler."""
    scheduler = await get_background_scheduler()
    await scheduler.start()


async def stop_background_scheduler():
    """Stop the global background scheduler."""
    global _scheduler
    if _scheduler:
        await _scheduler.stop()
        _scheduler = None
