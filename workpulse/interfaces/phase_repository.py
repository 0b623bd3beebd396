"""
Phase repository interface.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from workpulse.models.phase import Phase, PhaseCreate


class IPhaseRepository(ABC):
    """Interface for phase repository operations."""

    @abstractmethod
    async def create(self, phase: PhaseCreate) -> Phase:
        """Create a new phase."""
        pass

    @abstractmethod
    async def get(self, phase_id: UUID) -> Optional[Phase]:
        """Get a phase by ID."""
        pass

    @abstractmethod
    async def list(self) -> list[Phase]:
        """List all phases ordered by their order field."""
        pass
