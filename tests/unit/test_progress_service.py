"""
Unit tests for ProgressService and PlanningService.
"""

from datetime import date
from uuid import uuid4

import pytest

from workpulse.core.exceptions import InvalidArgumentError, NotFoundError
from workpulse.models.action import ActionCreate, SubActionCreate
from workpulse.models.phase import PhaseCreate
from workpulse.models.planning import PlanningCreate
from workpulse.models.project import ProjectCreate
from workpulse.services.dependency_graph import DependencyGraphManager
from workpulse.services.planning_service import PlanningService
from workpulse.services.progress_service import ProgressService


@pytest.fixture
def progress(repos):
    return ProgressService(
        project_repo=repos.projects,
        planning_repo=repos.plannings,
        action_repo=repos.actions,
    )


@pytest.fixture
def plannings(repos):
    return PlanningService(planning_repo=repos.plannings, action_repo=repos.actions)


async def _planning(repos, project=None, phase=None):
    project = project or await repos.projects.create(ProjectCreate(name="Project"))
    phase = phase or await repos.phases.create(PhaseCreate(name="Phase"))
    return await repos.plannings.create(PlanningCreate(project_id=project.id, phase_id=phase.id))


class TestProgressService:
    @pytest.mark.asyncio
    async def test_end_to_end_project_progress(self, repos, progress):
        planning = await _planning(repos)
        action1 = await repos.actions.create(ActionCreate(planning_id=planning.id, name="A1"))
        await repos.actions.create_sub_action(
            SubActionCreate(action_id=action1.id, name="S1", actual_end_date=date(2026, 3, 1))
        )
        await repos.actions.create_sub_action(SubActionCreate(action_id=action1.id, name="S2"))
        await repos.actions.create(ActionCreate(planning_id=planning.id, name="A2", progress=80))

        assert await progress.update_project_progress(planning.project_id) == 65.0
        assert await progress.update_planning_progress(planning.id) == 65.0

    @pytest.mark.asyncio
    async def test_derived_progress_written_back_to_action(self, repos, progress):
        planning = await _planning(repos)
        action = await repos.actions.create(ActionCreate(planning_id=planning.id, name="A", progress=10))
        await repos.actions.create_sub_action(
            SubActionCreate(action_id=action.id, name="S1", actual_end_date=date(2026, 3, 1))
        )
        await repos.actions.create_sub_action(SubActionCreate(action_id=action.id, name="S2"))

        assert await progress.update_action_progress(action.id) == 50.0
        assert (await repos.actions.get(action.id)).progress == 50.0

    @pytest.mark.asyncio
    async def test_leaf_progress_left_untouched(self, repos, progress):
        planning = await _planning(repos)
        action = await repos.actions.create(ActionCreate(planning_id=planning.id, name="A"))

        assert await progress.update_action_progress(action.id) == 0.0
        assert (await repos.actions.get(action.id)).progress is None

    @pytest.mark.asyncio
    async def test_set_action_progress(self, repos, progress):
        planning = await _planning(repos)
        action = await repos.actions.create(ActionCreate(planning_id=planning.id, name="A"))

        updated = await progress.set_action_progress(action.id, 42.5)

        assert updated.progress == 42.5
        assert await progress.update_planning_progress(planning.id) == 42.5

    @pytest.mark.asyncio
    @pytest.mark.parametrize("value", [-1, 100.5])
    async def test_set_action_progress_out_of_range(self, repos, progress, value):
        planning = await _planning(repos)
        action = await repos.actions.create(ActionCreate(planning_id=planning.id, name="A"))
        with pytest.raises(InvalidArgumentError):
            await progress.set_action_progress(action.id, value)

    @pytest.mark.asyncio
    async def test_complete_and_reopen_sub_action(self, repos, progress):
        planning = await _planning(repos)
        action = await repos.actions.create(ActionCreate(planning_id=planning.id, name="A"))
        sub1 = await repos.actions.create_sub_action(SubActionCreate(action_id=action.id, name="S1"))
        await repos.actions.create_sub_action(SubActionCreate(action_id=action.id, name="S2"))

        completed = await progress.complete_sub_action(sub1.id, date(2026, 3, 5))
        assert completed.actual_end_date == date(2026, 3, 5)
        assert (await repos.actions.get(action.id)).progress == 50.0

        reopened = await progress.reopen_sub_action(sub1.id)
        assert reopened.actual_end_date is None
        assert (await repos.actions.get(action.id)).progress == 0.0

    @pytest.mark.asyncio
    async def test_complete_defaults_to_today(self, repos, progress):
        planning = await _planning(repos)
        action = await repos.actions.create(ActionCreate(planning_id=planning.id, name="A"))
        sub = await repos.actions.create_sub_action(SubActionCreate(action_id=action.id, name="S"))

        completed = await progress.complete_sub_action(sub.id)

        assert completed.actual_end_date is not None
        assert (await repos.actions.get(action.id)).progress == 100.0

    @pytest.mark.asyncio
    async def test_empty_project_is_zero(self, repos, progress):
        project = await repos.projects.create(ProjectCreate(name="Empty"))
        assert await progress.update_project_progress(project.id) == 0.0

    @pytest.mark.asyncio
    async def test_unknown_ids_raise_not_found(self, progress):
        with pytest.raises(NotFoundError):
            await progress.update_action_progress(uuid4())
        with pytest.raises(NotFoundError):
            await progress.update_planning_progress(uuid4())
        with pytest.raises(NotFoundError):
            await progress.update_project_progress(uuid4())
        with pytest.raises(NotFoundError):
            await progress.set_action_progress(uuid4(), 10)
        with pytest.raises(NotFoundError):
            await progress.complete_sub_action(uuid4())


class TestPlanningService:
    @pytest.mark.asyncio
    async def test_add_action_moves_it(self, repos, plannings):
        source = await _planning(repos)
        target = await _planning(repos)
        action = await repos.actions.create(ActionCreate(planning_id=source.id, name="A"))

        moved = await plannings.add_action(target.id, action.id)

        assert moved.planning_id == target.id
        assert await repos.actions.list_by_planning(source.id) == []

    @pytest.mark.asyncio
    async def test_add_action_already_in_planning(self, repos, plannings):
        planning = await _planning(repos)
        action = await repos.actions.create(ActionCreate(planning_id=planning.id, name="A"))
        with pytest.raises(InvalidArgumentError, match="already in this planning"):
            await plannings.add_action(planning.id, action.id)

    @pytest.mark.asyncio
    async def test_remove_action_deletes_it_with_children_and_edges(self, repos, plannings):
        planning = await _planning(repos)
        action = await repos.actions.create(ActionCreate(planning_id=planning.id, name="A"))
        other = await repos.actions.create(ActionCreate(planning_id=planning.id, name="B"))
        sub = await repos.actions.create_sub_action(SubActionCreate(action_id=action.id, name="S"))
        graph = DependencyGraphManager(repos.actions, repos.dependencies)
        await graph.add_dependency(other.id, action.id)

        await plannings.remove_action(planning.id, action.id)

        assert await repos.actions.get(action.id) is None
        assert await repos.actions.get_sub_action(sub.id) is None
        assert await graph.list_dependencies(other.id) == []

    @pytest.mark.asyncio
    async def test_remove_action_from_wrong_planning(self, repos, plannings):
        planning = await _planning(repos)
        other = await _planning(repos)
        action = await repos.actions.create(ActionCreate(planning_id=planning.id, name="A"))

        with pytest.raises(InvalidArgumentError, match="not in this planning"):
            await plannings.remove_action(other.id, action.id)

        assert await repos.actions.get(action.id) is not None

    @pytest.mark.asyncio
    async def test_unknown_planning_or_action(self, repos, plannings):
        planning = await _planning(repos)
        with pytest.raises(NotFoundError):
            await plannings.add_action(uuid4(), uuid4())
        with pytest.raises(NotFoundError):
            await plannings.remove_action(planning.id, uuid4())

    @pytest.mark.asyncio
    async def test_find_by_project_and_phase(self, repos, plannings):
        project = await repos.projects.create(ProjectCreate(name="P"))
        design = await repos.phases.create(PhaseCreate(name="Design", order=1))
        build = await repos.phases.create(PhaseCreate(name="Build", order=2))
        first = await _planning(repos, project, design)
        second = await _planning(repos, project, build)

        assert [p.id for p in await plannings.find_by_project(project.id)] == [first.id, second.id]
        assert (await plannings.find_by_project_and_phase(project.id, build.id)).id == second.id
        assert await plannings.find_by_project_and_phase(uuid4(), build.id) is None
