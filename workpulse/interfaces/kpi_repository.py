"""
KPI repository interfaces.

Metric definitions are mutable; values are append-only except for the
one-time notification flag.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional
from uuid import UUID

from workpulse.models.kpi import KpiMetric, KpiMetricCreate, KpiMetricUpdate, KpiValue, KpiValueCreate


class IKpiMetricRepository(ABC):
    """Interface for KPI metric operations."""

    @abstractmethod
    async def create(self, metric: KpiMetricCreate) -> KpiMetric:
        """Create a metric. Raises DuplicateError if the code is taken."""
        pass

    @abstractmethod
    async def get(self, metric_id: UUID) -> Optional[KpiMetric]:
        """Get a metric by ID."""
        pass

    @abstractmethod
    async def get_by_code(self, code: str) -> Optional[KpiMetric]:
        """Get a metric by its unique code."""
        pass

    @abstractmethod
    async def list(self, active_only: bool = False) -> list[KpiMetric]:
        """List metrics."""
        pass

    @abstractmethod
    async def list_requiring_updates(self) -> list[KpiMetric]:
        """Active metrics with a positive update frequency."""
        pass

    @abstractmethod
    async def list_with_notifications_enabled(self) -> list[KpiMetric]:
        """Metrics whose notification flag is set."""
        pass

    @abstractmethod
    async def list_by_phase(self, phase_id: UUID) -> list[KpiMetric]:
        """Metrics attached to a phase."""
        pass

    @abstractmethod
    async def update(self, metric_id: UUID, update: KpiMetricUpdate) -> KpiMetric:
        """Update a metric. Raises NotFoundError if absent."""
        pass

    @abstractmethod
    async def set_active(self, metric_id: UUID, active: bool) -> KpiMetric:
        """Activate or deactivate a metric. Raises NotFoundError if absent."""
        pass


class IKpiValueRepository(ABC):
    """Interface for KPI value operations."""

    @abstractmethod
    async def create(self, value: KpiValueCreate) -> KpiValue:
        """Insert a value together with its breach flags."""
        pass

    @abstractmethod
    async def get(self, value_id: UUID) -> Optional[KpiValue]:
        """Get a value by ID."""
        pass

    @abstractmethod
    async def get_latest(self, project_id: UUID, metric_id: UUID) -> Optional[KpiValue]:
        """Most recent value of a metric for a project."""
        pass

    @abstractmethod
    async def list_for_project_in_range(
        self,
        project_id: UUID,
        start: datetime,
        end: datetime,
    ) -> list[KpiValue]:
        """Values of a project measured within [start, end]."""
        pass

    @abstractmethod
    async def list_breached_unnotified(self) -> list[KpiValue]:
        """Values with a breach flag set and no notification sent yet."""
        pass

    @abstractmethod
    async def mark_notification_sent(self, value_id: UUID) -> bool:
        """
        Flip notification_sent from False to True.

        Returns False when the row was already marked (or does not exist).
        """
        pass
