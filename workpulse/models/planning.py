"""
Planning model definitions.

A planning groups the actions of one project for one phase.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from workpulse.models.action import ActionWithSubActions


class PlanningBase(BaseModel):
    """Base planning fields."""

    project_id: UUID = Field(..., description="Owning project ID")
    phase_id: UUID = Field(..., description="Phase ID")
    name: Optional[str] = Field(None, max_length=200, description="Optional label")


class PlanningCreate(PlanningBase):
    """Schema for creating a new planning."""

    pass


class Planning(PlanningBase):
    """Complete planning model."""

    id: UUID
    active: bool = True
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class PlanningWithActions(Planning):
    """Planning together with its actions and their sub-actions."""

    actions: list[ActionWithSubActions] = Field(default_factory=list)
