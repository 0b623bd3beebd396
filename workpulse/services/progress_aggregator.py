"""
Progress roll-up over the work hierarchy.

Pure functions of the children's state: sub-action -> action -> planning ->
project. Stored progress on parent levels is never read, so a stale
denormalized value cannot leak into the result.
"""

from __future__ import annotations

from typing import Iterable

from workpulse.models.action import ActionWithSubActions, SubAction
from workpulse.models.planning import PlanningWithActions
from workpulse.models.project import ProjectHierarchy

COMPLETE = 100.0
NOT_STARTED = 0.0


def _clamp(value: float) -> float:
    return max(NOT_STARTED, min(float(value), COMPLETE))


def sub_action_progress(sub_action: SubAction) -> float:
    """Binary completion: 100 once an actual end date is set, else 0."""
    return COMPLETE if sub_action.actual_end_date is not None else NOT_STARTED


def action_progress(action: ActionWithSubActions) -> float:
    """
    Progress of a single action.

    The action must come with its sub-actions loaded (as returned by the
    hierarchy queries); a bare Action is rejected rather than read as a leaf.

    Without sub-actions the explicit ``progress`` field is used (0 if unset).
    Once any sub-action exists the field is ignored and the share of completed
    sub-actions is returned instead.
    """
    if not isinstance(action, ActionWithSubActions):
        raise TypeError("action_progress needs an action loaded with its sub-actions")
    sub_actions = action.sub_actions
    if not sub_actions:
        return _clamp(action.progress) if action.progress is not None else NOT_STARTED

    completed = sum(1 for sub_action in sub_actions if sub_action.actual_end_date is not None)
    return COMPLETE * completed / len(sub_actions)


def _mean(values: Iterable[float]) -> float:
    values = list(values)
    if not values:
        return NOT_STARTED
    return sum(values) / len(values)


def planning_progress(planning: PlanningWithActions) -> float:
    """Mean action progress of the planning; 0 when it has no actions."""
    return _mean(action_progress(action) for action in planning.actions)


def project_progress(project: ProjectHierarchy) -> float:
    """
    Project-wide mean over every action of every planning.

    Weighted by action count: a planning with three actions counts three
    times as much as a planning with one.
    """
    return _mean(
        action_progress(action)
        for planning in project.plannings
        for action in planning.actions
    )
