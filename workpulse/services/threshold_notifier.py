"""
Threshold notifier.

Emits one notification per breached KPI value and flips its
``notification_sent`` flag. Already-notified values are excluded by the
query, so repeated runs are idempotent.
"""

from __future__ import annotations

import asyncio
from uuid import UUID

from workpulse.core.exceptions import NotFoundError
from workpulse.core.logger import logger
from workpulse.interfaces.kpi_repository import IKpiMetricRepository, IKpiValueRepository
from workpulse.interfaces.notification_sink import INotificationSink
from workpulse.interfaces.project_repository import IProjectRepository
from workpulse.models.kpi import KpiMetric, KpiValue, ThresholdBreachNotification
from workpulse.models.project import Project


class ThresholdNotifier:
    """Dispatches breach notifications exactly once per KPI value."""

    def __init__(
        self,
        value_repo: IKpiValueRepository,
        metric_repo: IKpiMetricRepository,
        project_repo: IProjectRepository,
        sink: INotificationSink,
    ):
        self._value_repo = value_repo
        self._metric_repo = metric_repo
        self._project_repo = project_repo
        self._sink = sink
        # Overlapping runs would otherwise both see a row as unnotified
        self._lock = asyncio.Lock()

    @staticmethod
    def build_notification(kpi_value: KpiValue, metric: KpiMetric, project: Project) -> ThresholdBreachNotification:
        return ThresholdBreachNotification(
            kpi_value_id=kpi_value.id,
            severity=kpi_value.severity,
            project_id=project.id,
            project_name=project.name,
            metric_id=metric.id,
            metric_code=metric.code,
            metric_name=metric.name,
            value=kpi_value.value,
            unit=metric.unit,
            measurement_date=kpi_value.measurement_date,
        )

    async def _notify(
        self,
        kpi_value: KpiValue,
        metrics: dict[UUID, KpiMetric],
        projects: dict[UUID, Project],
    ) -> bool:
        if kpi_value.metric_id not in metrics:
            metric = await self._metric_repo.get(kpi_value.metric_id)
            if not metric:
                raise NotFoundError(f"KPI metric {kpi_value.metric_id} not found")
            metrics[kpi_value.metric_id] = metric
        if kpi_value.project_id not in projects:
            project = await self._project_repo.get(kpi_value.project_id)
            if not project:
                raise NotFoundError(f"Project {kpi_value.project_id} not found")
            projects[kpi_value.project_id] = project

        notification = self.build_notification(
            kpi_value, metrics[kpi_value.metric_id], projects[kpi_value.project_id]
        )
        await self._sink.send(notification)
        return await self._value_repo.mark_notification_sent(kpi_value.id)

    async def check_thresholds_and_notify(self) -> dict[str, int]:
        """
        Notify every breached, not yet notified KPI value.

        A failure on one value is logged and leaves that value unnotified for
        the next run; the remaining values are still processed.

        Returns:
            Counts of values checked, notified and failed
        """
        async with self._lock:
            logger.info("Checking KPI thresholds")
            pending = await self._value_repo.list_breached_unnotified()

            results = {"checked": len(pending), "notified": 0, "failed": 0}
            metrics: dict[UUID, KpiMetric] = {}
            projects: dict[UUID, Project] = {}

            for kpi_value in pending:
                try:
                    marked = await self._notify(kpi_value, metrics, projects)
                except Exception as e:
                    results["failed"] += 1
                    logger.error(f"Failed to send threshold notification for KPI value {kpi_value.id}: {e}")
                    continue

                if marked:
                    results["notified"] += 1
                else:
                    logger.warning(f"KPI value {kpi_value.id} was already marked as notified")

            logger.info(
                f"Threshold check completed: {results['notified']} notified, "
                f"{results['failed']} failed ({results['checked']} pending)"
            )
            return results
