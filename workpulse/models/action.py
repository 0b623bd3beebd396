"""
Action model definitions.

Actions are units of work inside a planning. An action may be broken down
into sub-actions; once it has any, its own progress field is ignored and
completion is derived from the sub-actions' actual end dates.
"""

from datetime import date, datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field


class SubActionBase(BaseModel):
    """Base sub-action fields."""

    name: str = Field(..., min_length=1, max_length=200, description="Sub-action name")
    description: Optional[str] = Field(None, description="Sub-action description")
    start_date: Optional[date] = Field(None, description="Start date")
    planned_end_date: Optional[date] = Field(None, description="Planned end date")
    actual_end_date: Optional[date] = Field(None, description="Set when the sub-action is completed")


class SubActionCreate(SubActionBase):
    """Schema for creating a new sub-action."""

    action_id: UUID = Field(..., description="Parent action ID")


class SubAction(SubActionBase):
    """Complete sub-action model."""

    id: UUID
    action_id: UUID
    active: bool = True
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

    @property
    def is_completed(self) -> bool:
        return self.actual_end_date is not None


class ActionBase(BaseModel):
    """Base action fields."""

    name: str = Field(..., min_length=1, max_length=200, description="Action name")
    description: Optional[str] = Field(None, description="Action description")
    start_date: Optional[date] = Field(None, description="Start date")
    planned_end_date: Optional[date] = Field(None, description="Planned end date")
    actual_end_date: Optional[date] = Field(None, description="Set when the action is completed")
    progress: Optional[float] = Field(
        None,
        ge=0,
        le=100,
        description="Explicit progress, used only while the action has no sub-actions",
    )


class ActionCreate(ActionBase):
    """Schema for creating a new action."""

    planning_id: UUID = Field(..., description="Owning planning ID")


class ActionUpdate(BaseModel):
    """Schema for updating an existing action."""

    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    start_date: Optional[date] = None
    planned_end_date: Optional[date] = None
    actual_end_date: Optional[date] = None
    progress: Optional[float] = Field(None, ge=0, le=100)
    planning_id: Optional[UUID] = None


class Action(ActionBase):
    """Complete action model."""

    id: UUID
    planning_id: UUID
    active: bool = True
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ActionWithSubActions(Action):
    """Action together with its sub-actions."""

    sub_actions: list[SubAction] = Field(default_factory=list)


class ActionDependency(BaseModel):
    """
    Directed "blocked-by" edge: ``action_id`` depends on ``depends_on_id``.
    """

    id: UUID
    action_id: UUID = Field(..., description="Dependent action")
    depends_on_id: UUID = Field(..., description="Prerequisite action")
    active: bool = True
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
