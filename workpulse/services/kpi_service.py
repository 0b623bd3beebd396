"""
KPI engine.

Computes metric values per project, records them with breach flags fixed at
insert time, and exposes the batch entry points the scheduler calls.
"""

from __future__ import annotations

import asyncio
from datetime import datetime
from typing import Optional
from uuid import UUID

from workpulse.core.config import get_settings
from workpulse.core.exceptions import CalculationError, NotFoundError
from workpulse.core.logger import logger
from workpulse.interfaces.action_repository import IActionRepository
from workpulse.interfaces.budget_repository import IProjectBudgetRepository
from workpulse.interfaces.dependency_repository import IActionDependencyRepository
from workpulse.interfaces.kpi_repository import IKpiMetricRepository, IKpiValueRepository
from workpulse.interfaces.project_repository import IProjectRepository
from workpulse.models.kpi import (
    KpiBatchResult,
    KpiMetric,
    KpiMetricCreate,
    KpiMetricUpdate,
    KpiValue,
    KpiValueCreate,
)
from workpulse.models.project import Project
from workpulse.services.kpi_calculator import (
    KpiCalculationContext,
    build_calculation_context,
    calculate,
)
from workpulse.utils.datetime_utils import normalize_dt, utc_now_naive

BATCH_COMMENT = "Auto-updated via batch process"


def evaluate_breaches(metric: KpiMetric, value: float) -> tuple[bool, bool]:
    """
    Compare a value against the metric's thresholds.

    With ``higher_is_better`` a value below a threshold breaches it; otherwise
    a value above it does. Unset thresholds never breach.

    Returns:
        (warning_breached, critical_breached)
    """

    def breached(threshold: Optional[float]) -> bool:
        if threshold is None:
            return False
        return value < threshold if metric.higher_is_better else value > threshold

    return breached(metric.threshold_warning), breached(metric.threshold_critical)


class KpiService:
    """KPI measurement, recording and metric lifecycle."""

    def __init__(
        self,
        metric_repo: IKpiMetricRepository,
        value_repo: IKpiValueRepository,
        project_repo: IProjectRepository,
        action_repo: IActionRepository,
        dependency_repo: IActionDependencyRepository,
        budget_repo: IProjectBudgetRepository,
        item_timeout_seconds: Optional[float] = None,
    ):
        self._metric_repo = metric_repo
        self._value_repo = value_repo
        self._project_repo = project_repo
        self._action_repo = action_repo
        self._dependency_repo = dependency_repo
        self._budget_repo = budget_repo
        self._item_timeout = item_timeout_seconds or get_settings().KPI_ITEM_TIMEOUT_SECONDS

    # ===========================================
    # Lookups
    # ===========================================

    async def _require_metric(self, metric_id: UUID) -> KpiMetric:
        metric = await self._metric_repo.get(metric_id)
        if not metric:
            raise NotFoundError(f"KPI metric {metric_id} not found")
        return metric

    async def _require_project(self, project_id: UUID) -> Project:
        project = await self._project_repo.get(project_id)
        if not project:
            raise NotFoundError(f"Project {project_id} not found")
        return project

    async def _build_context(self, project_id: UUID) -> KpiCalculationContext:
        return await build_calculation_context(
            project_id,
            project_repo=self._project_repo,
            action_repo=self._action_repo,
            dependency_repo=self._dependency_repo,
            budget_repo=self._budget_repo,
        )

    # ===========================================
    # Calculation and recording
    # ===========================================

    async def calculate_kpi_value(self, metric_id: UUID, project_id: UUID) -> Optional[float]:
        """
        Compute the current value of a metric for a project without recording it.

        Returns None for manual-only metrics (no calculation formula).

        Raises:
            NotFoundError: If the metric or project does not exist
            CalculationError: If the value cannot be computed
        """
        metric = await self._require_metric(metric_id)
        context = await self._build_context(project_id)
        return await asyncio.to_thread(calculate, metric, context)

    async def _record(
        self,
        metric: KpiMetric,
        project_id: UUID,
        value: float,
        comment: Optional[str],
        measured_at: Optional[datetime],
    ) -> KpiValue:
        warning, critical = evaluate_breaches(metric, value)
        kpi_value = await self._value_repo.create(
            KpiValueCreate(
                metric_id=metric.id,
                project_id=project_id,
                value=value,
                measurement_date=normalize_dt(measured_at) if measured_at else utc_now_naive(),
                comment=comment,
                warning_threshold_breached=warning,
                critical_threshold_breached=critical,
                phase_id=metric.phase_id,
            )
        )
        if kpi_value.is_breached:
            logger.info(
                f"KPI {metric.code} breached {kpi_value.severity.value} threshold "
                f"for project {project_id}: {value}"
            )
        return kpi_value

    async def record_kpi_value(
        self,
        metric_id: UUID,
        project_id: UUID,
        value: float,
        comment: Optional[str] = None,
        measured_at: Optional[datetime] = None,
    ) -> KpiValue:
        """
        Record a measurement, stamped now unless ``measured_at`` is given.

        Breach flags are computed against the metric's thresholds at this
        instant and never revisited.

        Raises:
            NotFoundError: If the metric or project does not exist
        """
        metric = await self._require_metric(metric_id)
        await self._require_project(project_id)
        return await self._record(metric, project_id, value, comment, measured_at)

    async def _run_item(
        self,
        result: KpiBatchResult,
        contexts: dict[UUID, KpiCalculationContext],
        metric: KpiMetric,
        project_id: UUID,
        comment: str,
        measured_at: Optional[datetime],
    ) -> None:
        """Run one (metric, project) unit, folding its outcome into the batch result."""
        try:
            value = await asyncio.wait_for(
                self._calculate(contexts, metric, project_id), timeout=self._item_timeout
            )
        except CalculationError as e:
            result.failed += 1
            logger.warning(f"Could not calculate KPI {metric.code} for project {project_id}: {e.message}")
            return
        except asyncio.TimeoutError:
            result.failed += 1
            logger.error(
                f"KPI {metric.code} for project {project_id} timed out after {self._item_timeout}s"
            )
            return
        except Exception as e:
            result.failed += 1
            logger.error(f"Failed to calculate KPI {metric.code} for project {project_id}: {e}")
            return

        if value is None:
            result.skipped += 1
            return

        # Recorded outside the time bound so a committed value is always counted
        try:
            kpi_value = await self._record(metric, project_id, value, comment, measured_at)
        except Exception as e:
            result.failed += 1
            logger.error(f"Failed to record KPI {metric.code} for project {project_id}: {e}")
            return

        result.recorded += 1
        result.values.append(kpi_value)

    async def _context_for(self, cache: dict[UUID, KpiCalculationContext], project_id: UUID) -> KpiCalculationContext:
        if project_id not in cache:
            cache[project_id] = await self._build_context(project_id)
        return cache[project_id]

    async def _calculate(
        self,
        cache: dict[UUID, KpiCalculationContext],
        metric: KpiMetric,
        project_id: UUID,
    ) -> Optional[float]:
        context = await self._context_for(cache, project_id)
        # Formula evaluation is CPU-bound; keep it off the event loop
        return await asyncio.to_thread(calculate, metric, context)

    async def update_kpis_automatically(self) -> KpiBatchResult:
        """
        Recompute every auto-updated metric for every project.

        Best effort: a failing (metric, project) pair is logged and counted,
        and the run moves on to the next pair.
        """
        logger.info("Starting automatic KPI updates")
        result = KpiBatchResult()

        metrics = await self._metric_repo.list_requiring_updates()
        projects = await self._project_repo.list()
        logger.info(f"Processing {len(metrics)} metrics across {len(projects)} projects")

        now = utc_now_naive()
        comment = f"Automatically calculated on {now.isoformat()}"
        contexts: dict[UUID, KpiCalculationContext] = {}

        for metric in metrics:
            for project in projects:
                await self._run_item(result, contexts, metric, project.id, comment, now)

        logger.info(
            f"Automatic KPI updates completed: {result.recorded} recorded, "
            f"{result.skipped} skipped, {result.failed} failed"
        )
        return result

    async def batch_update_kpi_values(
        self,
        project_id: UUID,
        metric_ids: list[UUID],
        as_of: Optional[datetime] = None,
    ) -> KpiBatchResult:
        """
        Recompute and record a subset of metrics for one project.

        Lookups are validated before anything is computed; calculation
        failures are then isolated per metric.

        Raises:
            NotFoundError: If the project or any metric does not exist
        """
        await self._require_project(project_id)
        metrics = [await self._require_metric(metric_id) for metric_id in metric_ids]

        measured_at = normalize_dt(as_of) if as_of else utc_now_naive()
        result = KpiBatchResult()
        contexts: dict[UUID, KpiCalculationContext] = {}

        for metric in metrics:
            await self._run_item(result, contexts, metric, project_id, BATCH_COMMENT, measured_at)

        logger.info(
            f"Batch KPI update for project {project_id}: {result.recorded} recorded, "
            f"{result.skipped} skipped, {result.failed} failed"
        )
        return result

    # ===========================================
    # Queries
    # ===========================================

    async def find_latest_kpi_values_for_project(self, project_id: UUID) -> list[KpiValue]:
        """Most recent value of each metric for a project."""
        await self._require_project(project_id)
        latest = []
        for metric in await self._metric_repo.list():
            value = await self._value_repo.get_latest(project_id, metric.id)
            if value:
                latest.append(value)
        return latest

    async def find_kpi_values_for_project_in_date_range(
        self,
        project_id: UUID,
        start: datetime,
        end: datetime,
    ) -> list[KpiValue]:
        return await self._value_repo.list_for_project_in_range(project_id, start, end)

    async def find_metrics_requiring_updates(self) -> list[KpiMetric]:
        return await self._metric_repo.list_requiring_updates()

    async def find_metrics_with_notifications_enabled(self) -> list[KpiMetric]:
        return await self._metric_repo.list_with_notifications_enabled()

    async def find_metrics_by_phase(self, phase_id: UUID, active_only: bool = False) -> list[KpiMetric]:
        metrics = await self._metric_repo.list_by_phase(phase_id)
        if active_only:
            metrics = [metric for metric in metrics if metric.active]
        return metrics

    # ===========================================
    # Metric lifecycle
    # ===========================================

    async def create_metric(self, metric: KpiMetricCreate) -> KpiMetric:
        """Create a metric. Raises DuplicateError if the code is taken."""
        created = await self._metric_repo.create(metric)
        logger.info(f"Created KPI metric {created.code}")
        return created

    async def update_metric(self, metric_id: UUID, update: KpiMetricUpdate) -> KpiMetric:
        """Update a metric. Values already recorded keep their breach flags."""
        await self._require_metric(metric_id)
        return await self._metric_repo.update(metric_id, update)

    async def deactivate_metric(self, metric_id: UUID) -> KpiMetric:
        await self._require_metric(metric_id)
        metric = await self._metric_repo.set_active(metric_id, False)
        logger.info(f"Deactivated KPI metric {metric.code}")
        return metric

    async def reactivate_metric(self, metric_id: UUID) -> KpiMetric:
        await self._require_metric(metric_id)
        metric = await self._metric_repo.set_active(metric_id, True)
        logger.info(f"Reactivated KPI metric {metric.code}")
        return metric
