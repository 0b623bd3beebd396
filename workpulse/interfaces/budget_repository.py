"""
Project budget repository interface.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from uuid import UUID

from workpulse.models.budget import ProjectBudget, ProjectBudgetCreate


class IProjectBudgetRepository(ABC):
    """Interface for project budget operations."""

    @abstractmethod
    async def create(self, budget: ProjectBudgetCreate) -> ProjectBudget:
        """Create a budget record."""
        pass

    @abstractmethod
    async def list_by_project(self, project_id: UUID) -> list[ProjectBudget]:
        """List budget records of a project in creation order."""
        pass
