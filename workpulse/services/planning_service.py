"""
Planning membership operations.
"""

from __future__ import annotations

from typing import Optional
from uuid import UUID

from workpulse.core.exceptions import InvalidArgumentError, NotFoundError
from workpulse.core.logger import logger
from workpulse.interfaces.action_repository import IActionRepository
from workpulse.interfaces.planning_repository import IPlanningRepository
from workpulse.models.action import Action, ActionUpdate
from workpulse.models.planning import Planning


class PlanningService:
    """Moves actions between plannings and answers planning lookups."""

    def __init__(self, planning_repo: IPlanningRepository, action_repo: IActionRepository):
        self._planning_repo = planning_repo
        self._action_repo = action_repo

    async def _require(self, planning_id: UUID, action_id: UUID) -> tuple[Planning, Action]:
        planning = await self._planning_repo.get(planning_id)
        if not planning:
            raise NotFoundError(f"Planning {planning_id} not found")
        action = await self._action_repo.get(action_id)
        if not action:
            raise NotFoundError(f"Action {action_id} not found")
        return planning, action

    async def add_action(self, planning_id: UUID, action_id: UUID) -> Action:
        """
        Attach an existing action to a planning, detaching it from its current one.

        Raises:
            NotFoundError: If the planning or action does not exist
            InvalidArgumentError: If the action already belongs to the planning
        """
        planning, action = await self._require(planning_id, action_id)
        if action.planning_id == planning.id:
            raise InvalidArgumentError(
                "Action is already in this planning",
                details={"planning_id": str(planning_id), "action_id": str(action_id)},
            )
        moved = await self._action_repo.update(action_id, ActionUpdate(planning_id=planning.id))
        logger.info(f"Moved action {action_id} from planning {action.planning_id} to {planning.id}")
        return moved

    async def remove_action(self, planning_id: UUID, action_id: UUID) -> None:
        """
        Remove an action from its planning.

        Actions cannot exist outside a planning, so removal deletes the action
        together with its sub-actions and dependency edges.

        Raises:
            NotFoundError: If the planning or action does not exist
            InvalidArgumentError: If the action belongs to another planning
        """
        planning, action = await self._require(planning_id, action_id)
        if action.planning_id != planning.id:
            raise InvalidArgumentError(
                "Action is not in this planning",
                details={"planning_id": str(planning_id), "action_id": str(action_id)},
            )
        await self._action_repo.delete(action_id)
        logger.info(f"Removed action {action_id} from planning {planning_id}")

    async def find_by_project(self, project_id: UUID) -> list[Planning]:
        return await self._planning_repo.list_by_project(project_id)

    async def find_by_project_and_phase(self, project_id: UUID, phase_id: UUID) -> Optional[Planning]:
        return await self._planning_repo.get_by_project_and_phase(project_id, phase_id)
