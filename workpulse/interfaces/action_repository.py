"""
Action repository interface.

Covers actions and their sub-actions.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date
from typing import Optional
from uuid import UUID

from workpulse.models.action import (
    Action,
    ActionCreate,
    ActionUpdate,
    ActionWithSubActions,
    SubAction,
    SubActionCreate,
)


class IActionRepository(ABC):
    """Interface for action repository operations."""

    @abstractmethod
    async def create(self, action: ActionCreate) -> Action:
        """Create a new action."""
        pass

    @abstractmethod
    async def get(self, action_id: UUID) -> Optional[Action]:
        """Get an action by ID."""
        pass

    @abstractmethod
    async def get_with_sub_actions(self, action_id: UUID) -> Optional[ActionWithSubActions]:
        """Get an action with its sub-actions."""
        pass

    @abstractmethod
    async def list_by_planning(self, planning_id: UUID) -> list[ActionWithSubActions]:
        """List actions of a planning with their sub-actions."""
        pass

    @abstractmethod
    async def update(self, action_id: UUID, update: ActionUpdate) -> Action:
        """Update an action. Raises NotFoundError if absent."""
        pass

    @abstractmethod
    async def delete(self, action_id: UUID) -> bool:
        """
        Delete an action with its sub-actions and every dependency edge
        touching it. Returns False if not found.
        """
        pass

    @abstractmethod
    async def create_sub_action(self, sub_action: SubActionCreate) -> SubAction:
        """Create a sub-action."""
        pass

    @abstractmethod
    async def get_sub_action(self, sub_action_id: UUID) -> Optional[SubAction]:
        """Get a sub-action by ID."""
        pass

    @abstractmethod
    async def set_sub_action_end_date(self, sub_action_id: UUID, actual_end_date: Optional[date]) -> SubAction:
        """Set or clear a sub-action's actual end date. Raises NotFoundError if absent."""
        pass
