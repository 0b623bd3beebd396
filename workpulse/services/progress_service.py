"""
Progress update operations for request handlers.

Reads a hierarchy snapshot from the store, derives progress through the
aggregator, and keeps the action-level denormalized ``progress`` field in
step with its sub-actions.
"""

from __future__ import annotations

from datetime import date
from typing import Iterable, Optional
from uuid import UUID

from workpulse.core.exceptions import InvalidArgumentError, NotFoundError
from workpulse.core.logger import logger
from workpulse.interfaces.action_repository import IActionRepository
from workpulse.interfaces.planning_repository import IPlanningRepository
from workpulse.interfaces.project_repository import IProjectRepository
from workpulse.models.action import Action, ActionUpdate, ActionWithSubActions, SubAction
from workpulse.services.progress_aggregator import (
    COMPLETE,
    NOT_STARTED,
    action_progress,
    planning_progress,
    project_progress,
)
from workpulse.utils.datetime_utils import today_utc


class ProgressService:
    """Recomputes and persists progress after hierarchy mutations."""

    def __init__(
        self,
        project_repo: IProjectRepository,
        planning_repo: IPlanningRepository,
        action_repo: IActionRepository,
    ):
        self._project_repo = project_repo
        self._planning_repo = planning_repo
        self._action_repo = action_repo

    async def _sync_action(self, action: ActionWithSubActions) -> float:
        progress = action_progress(action)
        # Leaf actions own their progress field; only derived values are written back
        if action.sub_actions and action.progress != progress:
            await self._action_repo.update(action.id, ActionUpdate(progress=progress))
        return progress

    async def _sync_actions(self, actions: Iterable[ActionWithSubActions]) -> None:
        for action in actions:
            await self._sync_action(action)

    async def update_action_progress(self, action_id: UUID) -> float:
        """Recompute an action's progress and persist it when derived from sub-actions."""
        action = await self._action_repo.get_with_sub_actions(action_id)
        if not action:
            raise NotFoundError(f"Action {action_id} not found")
        return await self._sync_action(action)

    async def set_action_progress(self, action_id: UUID, progress: float) -> Action:
        """
        Set the explicit progress of an action.

        The value is stored even when the action has sub-actions, but it only
        takes effect once all of them are removed.

        Raises:
            InvalidArgumentError: If progress is outside [0, 100]
            NotFoundError: If the action does not exist
        """
        if progress is None or not NOT_STARTED <= progress <= COMPLETE:
            raise InvalidArgumentError(
                f"Progress must be between 0 and 100, got {progress}",
                details={"action_id": str(action_id)},
            )
        action = await self._action_repo.get(action_id)
        if not action:
            raise NotFoundError(f"Action {action_id} not found")
        return await self._action_repo.update(action_id, ActionUpdate(progress=progress))

    async def update_planning_progress(self, planning_id: UUID) -> float:
        planning = await self._planning_repo.get_with_actions(planning_id)
        if not planning:
            raise NotFoundError(f"Planning {planning_id} not found")
        await self._sync_actions(planning.actions)
        return planning_progress(planning)

    async def update_project_progress(self, project_id: UUID) -> float:
        project = await self._project_repo.get_hierarchy(project_id)
        if not project:
            raise NotFoundError(f"Project {project_id} not found")
        for planning in project.plannings:
            await self._sync_actions(planning.actions)
        progress = project_progress(project)
        logger.debug(f"Project {project_id} progress recomputed: {progress:.2f}%")
        return progress

    async def complete_sub_action(
        self,
        sub_action_id: UUID,
        actual_end_date: Optional[date] = None,
    ) -> SubAction:
        """Mark a sub-action done (today by default) and refresh its action."""
        sub_action = await self._action_repo.get_sub_action(sub_action_id)
        if not sub_action:
            raise NotFoundError(f"Sub-action {sub_action_id} not found")
        updated = await self._action_repo.set_sub_action_end_date(
            sub_action_id, actual_end_date or today_utc()
        )
        await self.update_action_progress(sub_action.action_id)
        return updated

    async def reopen_sub_action(self, sub_action_id: UUID) -> SubAction:
        sub_action = await self._action_repo.get_sub_action(sub_action_id)
        if not sub_action:
            raise NotFoundError(f"Sub-action {sub_action_id} not found")
        updated = await self._action_repo.set_sub_action_end_date(sub_action_id, None)
        await self.update_action_progress(sub_action.action_id)
        return updated
