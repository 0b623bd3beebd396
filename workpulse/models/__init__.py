"""Pydantic models (schemas) for the application."""

from workpulse.models.action import (
    Action,
    ActionCreate,
    ActionDependency,
    ActionUpdate,
    ActionWithSubActions,
    SubAction,
    SubActionCreate,
)
from workpulse.models.budget import ProjectBudget, ProjectBudgetCreate
from workpulse.models.enums import BreachSeverity, BuiltinKpiCode
from workpulse.models.kpi import (
    KpiBatchResult,
    KpiMetric,
    KpiMetricCreate,
    KpiMetricUpdate,
    KpiValue,
    KpiValueCreate,
    ThresholdBreachNotification,
)
from workpulse.models.phase import Phase, PhaseCreate
from workpulse.models.planning import Planning, PlanningCreate, PlanningWithActions
from workpulse.models.project import Project, ProjectCreate, ProjectHierarchy, ProjectUpdate

__all__ = [
    # Enums
    "BreachSeverity",
    "BuiltinKpiCode",
    # Work breakdown
    "Project",
    "ProjectCreate",
    "ProjectUpdate",
    "ProjectHierarchy",
    "Phase",
    "PhaseCreate",
    "Planning",
    "PlanningCreate",
    "PlanningWithActions",
    "Action",
    "ActionCreate",
    "ActionUpdate",
    "ActionWithSubActions",
    "ActionDependency",
    "SubAction",
    "SubActionCreate",
    "ProjectBudget",
    "ProjectBudgetCreate",
    # KPI
    "KpiMetric",
    "KpiMetricCreate",
    "KpiMetricUpdate",
    "KpiValue",
    "KpiValueCreate",
    "KpiBatchResult",
    "ThresholdBreachNotification",
]
