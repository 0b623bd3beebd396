"""
Unit tests for BackgroundScheduler.
"""

from datetime import timedelta
from unittest.mock import AsyncMock, patch

import pytest

from workpulse.core.config import Settings
from workpulse.models.kpi import KpiBatchResult
from workpulse.services.background_scheduler import BackgroundScheduler


@pytest.fixture
def kpi_service():
    service = AsyncMock()
    service.update_kpis_automatically = AsyncMock(return_value=KpiBatchResult(recorded=2))
    return service


@pytest.fixture
def notifier():
    notifier = AsyncMock()
    notifier.check_thresholds_and_notify = AsyncMock(return_value={"checked": 1, "notified": 1, "failed": 0})
    return notifier


@pytest.fixture
def scheduler(kpi_service, notifier):
    return BackgroundScheduler(kpi_service=kpi_service, threshold_notifier=notifier)


class TestStart:
    @pytest.mark.asyncio
    async def test_disabled_in_test_environment(self, scheduler):
        await scheduler.start()
        assert scheduler.running is False

    @pytest.mark.asyncio
    async def test_disabled_by_configuration(self, scheduler):
        settings = Settings(ENVIRONMENT="local", SCHEDULER_ENABLED=False)
        with patch("workpulse.services.background_scheduler.get_settings", return_value=settings):
            await scheduler.start()
        assert scheduler.running is False

    @pytest.mark.asyncio
    async def test_registers_interval_jobs(self, scheduler):
        settings = Settings(ENVIRONMENT="local", KPI_UPDATE_INTERVAL_MINUTES=60, THRESHOLD_CHECK_INTERVAL_MINUTES=15)
        with patch("workpulse.services.background_scheduler.get_settings", return_value=settings):
            await scheduler.start()
        try:
            assert scheduler.running is True
            jobs = {job.id: job for job in scheduler._scheduler.get_jobs()}
            assert jobs[BackgroundScheduler.KPI_UPDATE_JOB_ID].trigger.interval == timedelta(minutes=60)
            assert jobs[BackgroundScheduler.THRESHOLD_CHECK_JOB_ID].trigger.interval == timedelta(minutes=15)
        finally:
            await scheduler.stop()
        assert scheduler.running is False


class TestTriggers:
    @pytest.mark.asyncio
    async def test_trigger_kpi_update(self, scheduler, kpi_service):
        result = await scheduler.trigger_kpi_update()

        kpi_service.update_kpis_automatically.assert_awaited_once()
        assert result.recorded == 2

    @pytest.mark.asyncio
    async def test_trigger_threshold_check(self, scheduler, notifier):
        result = await scheduler.trigger_threshold_check()

        notifier.check_thresholds_and_notify.assert_awaited_once()
        assert result["notified"] == 1

    @pytest.mark.asyncio
    async def test_job_failure_is_logged_not_raised(self, scheduler, kpi_service, notifier, caplog):
        kpi_service.update_kpis_automatically.side_effect = RuntimeError("database locked")
        notifier.check_thresholds_and_notify.side_effect = RuntimeError("sink down")

        assert await scheduler.trigger_kpi_update() is None
        assert await scheduler.trigger_threshold_check() is None
        assert "Automatic KPI update failed: database locked" in caplog.text
        assert "KPI threshold check failed: sink down" in caplog.text

    @pytest.mark.asyncio
    async def test_stop_without_start_is_noop(self, scheduler):
        await scheduler.stop()
        assert scheduler.running is False
