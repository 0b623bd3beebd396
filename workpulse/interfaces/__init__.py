"""Abstract interfaces for infrastructure abstraction."""

from workpulse.interfaces.action_repository import IActionRepository
from workpulse.interfaces.budget_repository import IProjectBudgetRepository
from workpulse.interfaces.dependency_repository import IActionDependencyRepository
from workpulse.interfaces.kpi_repository import IKpiMetricRepository, IKpiValueRepository
from workpulse.interfaces.notification_sink import INotificationSink
from workpulse.interfaces.phase_repository import IPhaseRepository
from workpulse.interfaces.planning_repository import IPlanningRepository
from workpulse.interfaces.project_repository import IProjectRepository

__all__ = [
    "IActionRepository",
    "IActionDependencyRepository",
    "IKpiMetricRepository",
    "IKpiValueRepository",
    "INotificationSink",
    "IPhaseRepository",
    "IPlanningRepository",
    "IProjectBudgetRepository",
    "IProjectRepository",
]
