"""
Dependency providers.

Builds the infrastructure implementations and services used by the
scheduler and by callers embedding the library. Each provider is cached so
the whole process shares one instance.
"""

from functools import lru_cache

from workpulse.interfaces.action_repository import IActionRepository
from workpulse.interfaces.budget_repository import IProjectBudgetRepository
from workpulse.interfaces.dependency_repository import IActionDependencyRepository
from workpulse.interfaces.kpi_repository import IKpiMetricRepository, IKpiValueRepository
from workpulse.interfaces.notification_sink import INotificationSink
from workpulse.interfaces.phase_repository import IPhaseRepository
from workpulse.interfaces.planning_repository import IPlanningRepository
from workpulse.interfaces.project_repository import IProjectRepository


# ===========================================
# Repository Providers
# ===========================================


@lru_cache()
def get_project_repository() -> IProjectRepository:
    """Get project repository instance."""
    from workpulse.infrastructure.local.project_repository import SqliteProjectRepository
    return SqliteProjectRepository()


@lru_cache()
def get_phase_repository() -> IPhaseRepository:
    """Get phase repository instance."""
    from workpulse.infrastructure.local.phase_repository import SqlitePhaseRepository
    return SqlitePhaseRepository()


@lru_cache()
def get_planning_repository() -> IPlanningRepository:
    """Get planning repository instance."""
    from workpulse.infrastructure.local.planning_repository import SqlitePlanningRepository
    return SqlitePlanningRepository()


@lru_cache()
def get_action_repository() -> IActionRepository:
    """Get action repository instance."""
    from workpulse.infrastructure.local.action_repository import SqliteActionRepository
    return SqliteActionRepository()


@lru_cache()
def get_dependency_repository() -> IActionDependencyRepository:
    """Get action dependency repository instance."""
    from workpulse.infrastructure.local.dependency_repository import SqliteActionDependencyRepository
    return SqliteActionDependencyRepository()


@lru_cache()
def get_budget_repository() -> IProjectBudgetRepository:
    """Get project budget repository instance."""
    from workpulse.infrastructure.local.budget_repository import SqliteProjectBudgetRepository
    return SqliteProjectBudgetRepository()


@lru_cache()
def get_kpi_metric_repository() -> IKpiMetricRepository:
    """Get KPI metric repository instance."""
    from workpulse.infrastructure.local.kpi_repository import SqliteKpiMetricRepository
    return SqliteKpiMetricRepository()


@lru_cache()
def get_kpi_value_repository() -> IKpiValueRepository:
    """Get KPI value repository instance."""
    from workpulse.infrastructure.local.kpi_repository import SqliteKpiValueRepository
    return SqliteKpiValueRepository()


@lru_cache()
def get_notification_sink() -> INotificationSink:
    """Get notification sink instance."""
    from workpulse.infrastructure.local.log_notification_sink import LoggingNotificationSink
    return LoggingNotificationSink()


# ===========================================
# Service Providers
# ===========================================


@lru_cache()
def get_progress_service():
    from workpulse.services.progress_service import ProgressService
    return ProgressService(
        project_repo=get_project_repository(),
        planning_repo=get_planning_repository(),
        action_repo=get_action_repository(),
    )


@lru_cache()
def get_planning_service():
    from workpulse.services.planning_service import PlanningService
    return PlanningService(
        planning_repo=get_planning_repository(),
        action_repo=get_action_repository(),
    )


@lru_cache()
def get_dependency_graph():
    # Cached so every caller shares the manager's mutation lock
    from workpulse.services.dependency_graph import DependencyGraphManager
    return DependencyGraphManager(
        action_repo=get_action_repository(),
        dependency_repo=get_dependency_repository(),
    )


@lru_cache()
def get_kpi_service():
    from workpulse.services.kpi_service import KpiService
    return KpiService(
        metric_repo=get_kpi_metric_repository(),
        value_repo=get_kpi_value_repository(),
        project_repo=get_project_repository(),
        action_repo=get_action_repository(),
        dependency_repo=get_dependency_repository(),
        budget_repo=get_budget_repository(),
    )


@lru_cache()
def get_threshold_notifier():
    from workpulse.services.threshold_notifier import ThresholdNotifier
    return ThresholdNotifier(
        value_repo=get_kpi_value_repository(),
        metric_repo=get_kpi_metric_repository(),
        project_repo=get_project_repository(),
        sink=get_notification_sink(),
    )
