"""
KPI model definitions.

A KpiMetric defines what is measured and its thresholds; each KpiValue is one
immutable, timestamped measurement of a metric for a project.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from workpulse.models.enums import BreachSeverity


class KpiMetricBase(BaseModel):
    """Base KPI metric fields."""

    code: str = Field(..., min_length=1, max_length=50, description="Unique metric code")
    name: str = Field(..., min_length=1, max_length=100, description="Display name")
    description: Optional[str] = Field(None, max_length=500, description="Metric description")
    unit: Optional[str] = Field(None, max_length=50, description="Unit label")
    threshold_warning: Optional[float] = Field(None, description="Warning threshold")
    threshold_critical: Optional[float] = Field(None, description="Critical threshold")
    higher_is_better: bool = Field(True, description="True if higher values are better")
    calculation_formula: Optional[str] = Field(
        None,
        max_length=1000,
        description="Formula for computed KPIs; empty means manual recording only",
    )
    update_frequency_minutes: Optional[int] = Field(
        None,
        description="Automatic update period in minutes; None means manual only",
    )
    enable_notifications: bool = Field(False, description="Notify when thresholds are crossed")
    phase_id: Optional[UUID] = Field(None, description="Associated phase")


class KpiMetricCreate(KpiMetricBase):
    """Schema for creating a new KPI metric."""

    pass


class KpiMetricUpdate(BaseModel):
    """Schema for updating an existing KPI metric."""

    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    unit: Optional[str] = Field(None, max_length=50)
    threshold_warning: Optional[float] = None
    threshold_critical: Optional[float] = None
    higher_is_better: Optional[bool] = None
    calculation_formula: Optional[str] = Field(None, max_length=1000)
    update_frequency_minutes: Optional[int] = None
    enable_notifications: Optional[bool] = None
    phase_id: Optional[UUID] = None


class KpiMetric(KpiMetricBase):
    """Complete KPI metric model."""

    id: UUID
    active: bool = True
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

    @property
    def is_auto_updated(self) -> bool:
        return self.update_frequency_minutes is not None and self.update_frequency_minutes > 0


class KpiValueCreate(BaseModel):
    """Schema for recording a KPI value. Breach flags are fixed at creation."""

    metric_id: UUID
    project_id: UUID
    value: float
    measurement_date: datetime
    comment: Optional[str] = Field(None, max_length=500)
    warning_threshold_breached: bool = False
    critical_threshold_breached: bool = False
    phase_id: Optional[UUID] = None


class KpiValue(BaseModel):
    """Complete KPI value model."""

    id: UUID
    metric_id: UUID
    project_id: UUID
    value: float
    measurement_date: datetime
    comment: Optional[str] = None
    warning_threshold_breached: bool = False
    critical_threshold_breached: bool = False
    notification_sent: bool = False
    phase_id: Optional[UUID] = None
    active: bool = True
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

    @property
    def is_breached(self) -> bool:
        return self.warning_threshold_breached or self.critical_threshold_breached

    @property
    def severity(self) -> Optional[BreachSeverity]:
        if self.critical_threshold_breached:
            return BreachSeverity.CRITICAL
        if self.warning_threshold_breached:
            return BreachSeverity.WARNING
        return None


class ThresholdBreachNotification(BaseModel):
    """Event emitted once per breached KPI value."""

    kpi_value_id: UUID
    severity: BreachSeverity
    project_id: UUID
    project_name: str
    metric_id: UUID
    metric_code: str
    metric_name: str
    value: float
    unit: Optional[str] = None
    measurement_date: datetime


class KpiBatchResult(BaseModel):
    """Outcome counters of a best-effort batch run."""

    recorded: int = 0
    skipped: int = 0
    failed: int = 0
    values: list[KpiValue] = Field(default_factory=list)
