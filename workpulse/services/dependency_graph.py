"""
Action dependency graph manager.

Edges are "blocked-by" relations: ``action_id`` depends on ``depends_on_id``.
The edge table is the only source of truth; forward and back views are
queries over it, so the two sides cannot drift apart.
"""

from __future__ import annotations

import asyncio
from typing import Optional
from uuid import UUID

from workpulse.core.config import get_settings
from workpulse.core.exceptions import DuplicateError, InvalidArgumentError, NotFoundError
from workpulse.core.logger import logger
from workpulse.interfaces.action_repository import IActionRepository
from workpulse.interfaces.dependency_repository import IActionDependencyRepository
from workpulse.models.action import Action, ActionDependency


class DependencyGraphManager:
    """Validates and applies dependency edge mutations; answers fulfillment queries."""

    def __init__(
        self,
        action_repo: IActionRepository,
        dependency_repo: IActionDependencyRepository,
        detect_cycles: Optional[bool] = None,
    ):
        """
        Initialize the manager.

        Args:
            action_repo: Action repository used for endpoint lookups
            dependency_repo: Edge repository
            detect_cycles: Reject edges closing a cycle of any length. Defaults
                to the DETECT_DEPENDENCY_CYCLES setting; when False only direct
                self-dependencies are rejected.
        """
        self._action_repo = action_repo
        self._dependency_repo = dependency_repo
        if detect_cycles is None:
            detect_cycles = get_settings().DETECT_DEPENDENCY_CYCLES
        self._detect_cycles = detect_cycles
        self._lock = asyncio.Lock()

    async def _require_action(self, action_id: UUID) -> Action:
        action = await self._action_repo.get(action_id)
        if not action:
            raise NotFoundError(f"Action {action_id} not found")
        return action

    async def _check_circular_dependency(self, action_id: UUID, depends_on_id: UUID) -> None:
        """
        Check that ``depends_on_id`` cannot already reach ``action_id`` (DFS).

        Raises:
            InvalidArgumentError: If the new edge would close a cycle
        """
        stack = [depends_on_id]
        visited: set[UUID] = set()
        while stack:
            current = stack.pop()
            if current == action_id:
                raise InvalidArgumentError(
                    f"Circular dependency detected: action {depends_on_id} already depends on action {action_id}",
                    details={"action_id": str(action_id), "depends_on_id": str(depends_on_id)},
                )
            if current in visited:
                continue
            visited.add(current)
            for edge in await self._dependency_repo.list_by_action(current):
                if edge.depends_on_id not in visited:
                    stack.append(edge.depends_on_id)

    async def add_dependency(self, action_id: UUID, depends_on_id: UUID) -> ActionDependency:
        """
        Make ``action_id`` depend on ``depends_on_id``.

        Raises:
            InvalidArgumentError: Self-dependency, or a cycle when cycle detection is on
            DuplicateError: If the ordered pair already exists
            NotFoundError: If either action does not exist
        """
        if action_id == depends_on_id:
            raise InvalidArgumentError(
                "An action cannot depend on itself",
                details={"action_id": str(action_id)},
            )

        async with self._lock:
            await self._require_action(action_id)
            await self._require_action(depends_on_id)

            if await self._dependency_repo.get(action_id, depends_on_id):
                raise DuplicateError(
                    f"Action {action_id} already depends on action {depends_on_id}",
                    details={"action_id": str(action_id), "depends_on_id": str(depends_on_id)},
                )

            if self._detect_cycles:
                await self._check_circular_dependency(action_id, depends_on_id)

            edge = await self._dependency_repo.add(action_id, depends_on_id)

        logger.info(f"Added dependency: action {action_id} depends on {depends_on_id}")
        return edge

    async def remove_dependency(self, action_id: UUID, depends_on_id: UUID) -> None:
        """
        Remove the edge for an ordered pair.

        Raises:
            NotFoundError: If no such edge exists
        """
        async with self._lock:
            removed = await self._dependency_repo.remove(action_id, depends_on_id)
        if not removed:
            raise NotFoundError(
                f"Action {action_id} does not depend on action {depends_on_id}",
                details={"action_id": str(action_id), "depends_on_id": str(depends_on_id)},
            )
        logger.info(f"Removed dependency: action {action_id} no longer depends on {depends_on_id}")

    async def is_fulfilled(self, edge: ActionDependency) -> bool:
        """True once the prerequisite action has an actual end date."""
        prerequisite = await self._require_action(edge.depends_on_id)
        return prerequisite.actual_end_date is not None

    async def list_dependencies(self, action_id: UUID) -> list[ActionDependency]:
        """Edges on which the action is blocked."""
        await self._require_action(action_id)
        return await self._dependency_repo.list_by_action(action_id)

    async def list_dependents(self, action_id: UUID) -> list[ActionDependency]:
        """Edges of the actions waiting on this one."""
        await self._require_action(action_id)
        return await self._dependency_repo.list_by_depends_on(action_id)

    async def unfulfilled_dependencies(self, action_id: UUID) -> list[ActionDependency]:
        edges = await self.list_dependencies(action_id)
        return [edge for edge in edges if not await self.is_fulfilled(edge)]

    async def is_blocked(self, action_id: UUID) -> bool:
        return bool(await self.unfulfilled_dependencies(action_id))
