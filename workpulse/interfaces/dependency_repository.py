"""
Action dependency repository interface.

The edge table is the single source of truth for the dependency graph;
the forward ("depends on") and back ("depended on by") views are both
queries over it.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from workpulse.models.action import ActionDependency


class IActionDependencyRepository(ABC):
    """Interface for dependency edge persistence."""

    @abstractmethod
    async def add(self, action_id: UUID, depends_on_id: UUID) -> ActionDependency:
        """Insert an edge. Raises DuplicateError if the ordered pair exists."""
        pass

    @abstractmethod
    async def get(self, action_id: UUID, depends_on_id: UUID) -> Optional[ActionDependency]:
        """Get the edge for an ordered pair."""
        pass

    @abstractmethod
    async def remove(self, action_id: UUID, depends_on_id: UUID) -> bool:
        """Delete the edge for an ordered pair. Returns False if not found."""
        pass

    @abstractmethod
    async def list_by_action(self, action_id: UUID) -> list[ActionDependency]:
        """Edges where the action is the dependent side."""
        pass

    @abstractmethod
    async def list_by_depends_on(self, depends_on_id: UUID) -> list[ActionDependency]:
        """Edges where the action is the prerequisite side."""
        pass
