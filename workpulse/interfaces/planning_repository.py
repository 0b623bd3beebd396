"""
Planning repository interface.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from workpulse.models.planning import Planning, PlanningCreate, PlanningWithActions


class IPlanningRepository(ABC):
    """Interface for planning repository operations."""

    @abstractmethod
    async def create(self, planning: PlanningCreate) -> Planning:
        """Create a new planning."""
        pass

    @abstractmethod
    async def get(self, planning_id: UUID) -> Optional[Planning]:
        """Get a planning by ID."""
        pass

    @abstractmethod
    async def get_with_actions(self, planning_id: UUID) -> Optional[PlanningWithActions]:
        """Get a planning with its actions and their sub-actions."""
        pass

    @abstractmethod
    async def list_by_project(self, project_id: UUID, active_only: bool = False) -> list[Planning]:
        """List plannings of a project."""
        pass

    @abstractmethod
    async def list_by_phase(self, phase_id: UUID) -> list[Planning]:
        """List plannings attached to a phase."""
        pass

    @abstractmethod
    async def get_by_project_and_phase(self, project_id: UUID, phase_id: UUID) -> Optional[Planning]:
        """Get the planning of a project for a phase, if any."""
        pass

    @abstractmethod
    async def delete(self, planning_id: UUID) -> bool:
        """Delete a planning with its actions. Returns False if not found."""
        pass
