"""
Phase model definitions.

Phases are named weighting buckets. Plannings are grouped by
(project, phase) and KPI metrics may be attached to a phase.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field


class PhaseBase(BaseModel):
    """Base phase fields."""

    name: str = Field(..., min_length=1, max_length=100, description="Phase name")
    description: Optional[str] = Field(None, max_length=500, description="Phase description")
    weight: Optional[float] = Field(None, ge=0, description="Relative weight of the phase")
    order: int = Field(default=1, ge=1, description="Display order")


class PhaseCreate(PhaseBase):
    """Schema for creating a new phase."""

    pass


class Phase(PhaseBase):
    """Complete phase model."""

    id: UUID
    active: bool = True
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
