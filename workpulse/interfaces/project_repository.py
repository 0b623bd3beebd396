"""
Project repository interface.

Defines the contract for project data operations.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from workpulse.models.project import Project, ProjectCreate, ProjectHierarchy, ProjectUpdate


class IProjectRepository(ABC):
    """Interface for project repository operations."""

    @abstractmethod
    async def create(self, project: ProjectCreate) -> Project:
        """Create a new project."""
        pass

    @abstractmethod
    async def get(self, project_id: UUID) -> Optional[Project]:
        """Get a project by ID."""
        pass

    @abstractmethod
    async def list(self, active_only: bool = False) -> list[Project]:
        """List projects."""
        pass

    @abstractmethod
    async def update(self, project_id: UUID, update: ProjectUpdate) -> Project:
        """Update a project. Raises NotFoundError if absent."""
        pass

    @abstractmethod
    async def get_hierarchy(self, project_id: UUID) -> Optional[ProjectHierarchy]:
        """Load a project with its plannings, actions and sub-actions."""
        pass
