"""
KPI calculation strategies.

Each built-in metric code maps to a calculator taking a project-scoped
calculation context. Codes without a registered calculator fall back to
evaluating the metric's own formula against the context variables.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Callable, Optional
from uuid import UUID

from workpulse.core.exceptions import CalculationError, NotFoundError
from workpulse.interfaces.action_repository import IActionRepository
from workpulse.interfaces.budget_repository import IProjectBudgetRepository
from workpulse.interfaces.dependency_repository import IActionDependencyRepository
from workpulse.interfaces.project_repository import IProjectRepository
from workpulse.models.action import ActionWithSubActions
from workpulse.models.budget import ProjectBudget
from workpulse.models.enums import BuiltinKpiCode
from workpulse.models.kpi import KpiMetric
from workpulse.models.project import ProjectHierarchy
from workpulse.services.progress_aggregator import COMPLETE, action_progress, project_progress
from workpulse.utils.datetime_utils import is_overdue, today_utc
from workpulse.utils.formula_evaluator import formula_evaluator

KpiCalculatorFn = Callable[["KpiCalculationContext"], float]


@dataclass
class KpiCalculationContext:
    """Snapshot of everything a calculator may read for one project."""

    project: ProjectHierarchy
    budgets: list[ProjectBudget] = field(default_factory=list)
    blocked_action_ids: set[UUID] = field(default_factory=set)
    today: date = field(default_factory=today_utc)

    @property
    def actions(self) -> list[ActionWithSubActions]:
        return [action for planning in self.project.plannings for action in planning.actions]

    @property
    def active_budget(self) -> Optional[ProjectBudget]:
        """First active budget record, in creation order."""
        return next((budget for budget in self.budgets if budget.active), None)

    def variables(self) -> dict[str, Optional[float]]:
        """
        Variables available to custom formulas.

        Budget variables are None when the project has no active budget, so a
        formula referencing them fails instead of reading a made-up zero.
        """
        actions = self.actions
        sub_actions = [sub_action for action in actions for sub_action in action.sub_actions]
        budget = self.active_budget

        return {
            "progress": project_progress(self.project),
            "planning_count": float(len(self.project.plannings)),
            "action_count": float(len(actions)),
            "completed_action_count": float(
                sum(1 for action in actions if action_progress(action) >= COMPLETE)
            ),
            "sub_action_count": float(len(sub_actions)),
            "completed_sub_action_count": float(
                sum(1 for sub_action in sub_actions if sub_action.actual_end_date is not None)
            ),
            "overdue_action_count": float(
                sum(
                    1
                    for action in actions
                    if is_overdue(action.planned_end_date, action.actual_end_date, self.today)
                )
            ),
            "blocked_action_count": float(len(self.blocked_action_ids)),
            "budget_initial": _decimal_or_none(budget.initial_budget) if budget else None,
            "budget_consumed": _decimal_or_none(budget.consumed_budget) if budget else None,
            "budget_remaining": float(budget.remaining_budget) if budget else None,
            "budget_utilization": budget.consumption_percentage if budget else None,
        }


def _decimal_or_none(value) -> Optional[float]:
    return float(value) if value is not None else None


# ===========================================
# Calculator registry
# ===========================================

_CALCULATORS: dict[str, KpiCalculatorFn] = {}


def register_calculator(code: str) -> Callable[[KpiCalculatorFn], KpiCalculatorFn]:
    """Register a built-in calculator for a metric code."""

    def decorator(fn: KpiCalculatorFn) -> KpiCalculatorFn:
        _CALCULATORS[code] = fn
        return fn

    return decorator


def get_calculator(code: str) -> Optional[KpiCalculatorFn]:
    return _CALCULATORS.get(code)


@register_calculator(BuiltinKpiCode.COMPLETION_RATE.value)
def completion_rate(context: KpiCalculationContext) -> float:
    return project_progress(context.project)


@register_calculator(BuiltinKpiCode.BUDGET_UTILIZATION.value)
def budget_utilization(context: KpiCalculationContext) -> float:
    """Consumption percentage of the first active budget; 0 if none is active."""
    # No budget records at all is missing data; records that are all inactive read as 0
    if not context.budgets:
        raise CalculationError(
            f"No budget data for project {context.project.id}",
            details={"project_id": str(context.project.id)},
        )
    budget = context.active_budget
    if budget is None:
        return 0.0
    return budget.consumption_percentage


def calculate(metric: KpiMetric, context: KpiCalculationContext) -> Optional[float]:
    """
    Compute a metric's current value for the context's project.

    Returns None for metrics without a calculation formula (manual
    recording only).

    Raises:
        CalculationError: If the value cannot be computed
    """
    if not metric.calculation_formula or not metric.calculation_formula.strip():
        return None

    calculator = get_calculator(metric.code)
    if calculator is not None:
        return calculator(context)
    return formula_evaluator.evaluate(metric.calculation_formula, context.variables())


async def build_calculation_context(
    project_id: UUID,
    project_repo: IProjectRepository,
    action_repo: IActionRepository,
    dependency_repo: IActionDependencyRepository,
    budget_repo: IProjectBudgetRepository,
    today: Optional[date] = None,
) -> KpiCalculationContext:
    """
    Load the project snapshot a calculation runs against.

    Raises:
        NotFoundError: If the project does not exist
    """
    project = await project_repo.get_hierarchy(project_id)
    if not project:
        raise NotFoundError(f"Project {project_id} not found")

    actions = [action for planning in project.plannings for action in planning.actions]
    completion = {action.id: action.actual_end_date is not None for action in actions}

    blocked: set[UUID] = set()
    for action in actions:
        if completion[action.id]:
            continue
        for edge in await dependency_repo.list_by_action(action.id):
            done = completion.get(edge.depends_on_id)
            if done is None:
                # Prerequisite lives in another project
                prerequisite = await action_repo.get(edge.depends_on_id)
                done = prerequisite is not None and prerequisite.actual_end_date is not None
                completion[edge.depends_on_id] = done
            if not done:
                blocked.add(action.id)
                break

    budgets = await budget_repo.list_by_project(project_id)
    return KpiCalculationContext(
        project=project,
        budgets=budgets,
        blocked_action_ids=blocked,
        today=today or today_utc(),
    )
