"""
Unit tests for the progress roll-up functions.
"""

from datetime import date, datetime
from uuid import uuid4

import pytest

from workpulse.models.action import Action, ActionWithSubActions, SubAction
from workpulse.models.planning import PlanningWithActions
from workpulse.models.project import ProjectHierarchy
from workpulse.services.progress_aggregator import (
    action_progress,
    planning_progress,
    project_progress,
    sub_action_progress,
)

NOW = datetime(2026, 3, 2, 9, 0, 0)


def _sub_action(done: bool = False) -> SubAction:
    return SubAction(
        id=uuid4(),
        action_id=uuid4(),
        name="Sub",
        actual_end_date=date(2026, 3, 1) if done else None,
        created_at=NOW,
        updated_at=NOW,
    )


def _action(progress=None, sub_actions=None) -> ActionWithSubActions:
    return ActionWithSubActions(
        id=uuid4(),
        planning_id=uuid4(),
        name="Action",
        progress=progress,
        sub_actions=sub_actions or [],
        created_at=NOW,
        updated_at=NOW,
    )


def _planning(*actions) -> PlanningWithActions:
    return PlanningWithActions(
        id=uuid4(),
        project_id=uuid4(),
        phase_id=uuid4(),
        actions=list(actions),
        created_at=NOW,
        updated_at=NOW,
    )


def _project(*plannings) -> ProjectHierarchy:
    return ProjectHierarchy(
        id=uuid4(),
        name="Project",
        plannings=list(plannings),
        created_at=NOW,
        updated_at=NOW,
    )


class TestSubActionProgress:
    def test_completed_sub_action_is_100(self):
        assert sub_action_progress(_sub_action(done=True)) == 100.0

    def test_open_sub_action_is_0(self):
        assert sub_action_progress(_sub_action(done=False)) == 0.0


class TestActionProgress:
    def test_leaf_action_uses_explicit_progress(self):
        assert action_progress(_action(progress=80)) == 80.0

    def test_leaf_action_without_progress_is_0(self):
        assert action_progress(_action()) == 0.0

    def test_leaf_progress_is_clamped(self):
        over = _action().model_copy(update={"progress": 150.0})
        under = _action().model_copy(update={"progress": -5.0})
        assert action_progress(over) == 100.0
        assert action_progress(under) == 0.0

    def test_sub_actions_override_explicit_progress(self):
        action = _action(progress=10, sub_actions=[_sub_action(True), _sub_action(False)])
        assert action_progress(action) == 50.0

    def test_k_of_n_sub_actions(self):
        subs = [_sub_action(True), _sub_action(True), _sub_action(False), _sub_action(False), _sub_action(True)]
        assert action_progress(_action(sub_actions=subs)) == 60.0

    def test_all_sub_actions_done(self):
        assert action_progress(_action(progress=0, sub_actions=[_sub_action(True)])) == 100.0

    def test_bare_action_is_rejected(self):
        bare = Action(id=uuid4(), planning_id=uuid4(), name="Action", progress=80, created_at=NOW, updated_at=NOW)
        with pytest.raises(TypeError, match="sub-actions"):
            action_progress(bare)


class TestPlanningProgress:
    def test_empty_planning_is_0(self):
        assert planning_progress(_planning()) == 0.0

    def test_mean_of_actions(self):
        planning = _planning(_action(progress=100), _action(progress=50), _action(progress=0))
        assert planning_progress(planning) == 50.0


class TestProjectProgress:
    def test_project_without_plannings_is_0(self):
        assert project_progress(_project()) == 0.0

    def test_project_with_empty_plannings_is_0(self):
        assert project_progress(_project(_planning(), _planning())) == 0.0

    def test_weighted_by_action_count_not_planning_mean(self):
        """One action at 100% and three at 0% is 25%, not the 50% planning mean."""
        planning_a = _planning(_action(progress=100))
        planning_b = _planning(_action(progress=0), _action(progress=0), _action(progress=0))

        assert planning_progress(planning_a) == 100.0
        assert planning_progress(planning_b) == 0.0
        assert project_progress(_project(planning_a, planning_b)) == 25.0

    def test_mixed_sub_actions_and_leaf_progress(self):
        action1 = _action(sub_actions=[_sub_action(True), _sub_action(False)])
        action2 = _action(progress=80)
        assert project_progress(_project(_planning(action1, action2))) == 65.0
