"""
Unit tests for the threshold notifier.
"""

import asyncio
from datetime import datetime
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio

from workpulse.models.enums import BreachSeverity
from workpulse.models.kpi import KpiMetricCreate, KpiValueCreate
from workpulse.models.project import ProjectCreate
from workpulse.services.threshold_notifier import ThresholdNotifier


@pytest.fixture
def sink():
    sink = AsyncMock()
    sink.send = AsyncMock(return_value=None)
    return sink


@pytest.fixture
def notifier(repos, sink):
    return ThresholdNotifier(
        value_repo=repos.values,
        metric_repo=repos.metrics,
        project_repo=repos.projects,
        sink=sink,
    )


async def _record(repos, project, metric, value, warning=False, critical=False, day=1):
    return await repos.values.create(
        KpiValueCreate(
            metric_id=metric.id,
            project_id=project.id,
            value=value,
            measurement_date=datetime(2026, 3, day, 10, 0, 0),
            warning_threshold_breached=warning,
            critical_threshold_breached=critical,
        )
    )


@pytest_asyncio.fixture
async def setup(repos):
    project = await repos.projects.create(ProjectCreate(name="Apollo"))
    metric = await repos.metrics.create(
        KpiMetricCreate(code="COMPLETION_RATE", name="Completion Rate", unit="%", threshold_warning=50, threshold_critical=20)
    )
    return project, metric


class TestCheckThresholdsAndNotify:
    @pytest.mark.asyncio
    async def test_notifies_every_breached_value_once(self, repos, notifier, sink, setup):
        project, metric = setup
        warning = await _record(repos, project, metric, 40, warning=True)
        critical = await _record(repos, project, metric, 10, warning=True, critical=True)
        healthy = await _record(repos, project, metric, 90)

        results = await notifier.check_thresholds_and_notify()

        assert results == {"checked": 2, "notified": 2, "failed": 0}
        assert sink.send.await_count == 2
        assert (await repos.values.get(warning.id)).notification_sent is True
        assert (await repos.values.get(critical.id)).notification_sent is True
        assert (await repos.values.get(healthy.id)).notification_sent is False

    @pytest.mark.asyncio
    async def test_second_run_notifies_nothing(self, repos, notifier, sink, setup):
        project, metric = setup
        await _record(repos, project, metric, 40, warning=True)

        await notifier.check_thresholds_and_notify()
        results = await notifier.check_thresholds_and_notify()

        assert results == {"checked": 0, "notified": 0, "failed": 0}
        assert sink.send.await_count == 1

    @pytest.mark.asyncio
    async def test_notification_content_and_critical_precedence(self, repos, notifier, sink, setup):
        project, metric = setup
        value = await _record(repos, project, metric, 10, warning=True, critical=True)

        await notifier.check_thresholds_and_notify()

        notification = sink.send.call_args[0][0]
        assert notification.kpi_value_id == value.id
        assert notification.severity == BreachSeverity.CRITICAL
        assert notification.project_name == "Apollo"
        assert notification.metric_name == "Completion Rate"
        assert notification.metric_code == "COMPLETION_RATE"
        assert notification.value == 10.0
        assert notification.unit == "%"

    @pytest.mark.asyncio
    async def test_warning_only_severity(self, repos, notifier, sink, setup):
        project, metric = setup
        await _record(repos, project, metric, 40, warning=True)

        await notifier.check_thresholds_and_notify()

        assert sink.send.call_args[0][0].severity == BreachSeverity.WARNING

    @pytest.mark.asyncio
    async def test_sink_failure_leaves_value_pending_and_continues(self, repos, notifier, sink, setup):
        project, metric = setup
        first = await _record(repos, project, metric, 40, warning=True, day=1)
        second = await _record(repos, project, metric, 30, warning=True, day=2)
        sink.send.side_effect = [ConnectionError("mail server down"), None]

        results = await notifier.check_thresholds_and_notify()

        assert results == {"checked": 2, "notified": 1, "failed": 1}
        assert (await repos.values.get(first.id)).notification_sent is False
        assert (await repos.values.get(second.id)).notification_sent is True

        sink.send.side_effect = None
        retry = await notifier.check_thresholds_and_notify()
        assert retry["notified"] == 1
        assert (await repos.values.get(first.id)).notification_sent is True

    @pytest.mark.asyncio
    async def test_concurrent_runs_do_not_double_notify(self, repos, notifier, sink, setup):
        project, metric = setup
        for value in (40, 30, 45):
            await _record(repos, project, metric, value, warning=True)

        first, second = await asyncio.gather(
            notifier.check_thresholds_and_notify(),
            notifier.check_thresholds_and_notify(),
        )

        assert first["notified"] + second["notified"] == 3
        assert sink.send.await_count == 3


class TestMarkNotificationSent:
    @pytest.mark.asyncio
    async def test_flag_flips_only_once(self, repos, setup):
        project, metric = setup
        value = await _record(repos, project, metric, 40, warning=True)

        assert await repos.values.mark_notification_sent(value.id) is True
        assert await repos.values.mark_notification_sent(value.id) is False
        assert await repos.values.list_breached_unnotified() == []
