"""
Project budget model definitions.
"""

from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field


class ProjectBudgetBase(BaseModel):
    """Base budget fields."""

    project_id: UUID = Field(..., description="Owning project ID")
    initial_budget: Optional[Decimal] = Field(None, ge=0, description="Initial budget")
    consumed_budget: Optional[Decimal] = Field(None, ge=0, description="Consumed budget")


class ProjectBudgetCreate(ProjectBudgetBase):
    """Schema for creating a budget record."""

    active: bool = True


class ProjectBudget(ProjectBudgetBase):
    """Complete budget model."""

    id: UUID
    active: bool = True
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

    @property
    def remaining_budget(self) -> Decimal:
        if self.initial_budget is None:
            return Decimal("0")
        if self.consumed_budget is None:
            return self.initial_budget
        return self.initial_budget - self.consumed_budget

    @property
    def consumption_percentage(self) -> float:
        """Consumed share of the initial budget, in percent."""
        if self.initial_budget is None or self.initial_budget == 0:
            return 0.0
        if self.consumed_budget is None:
            return 0.0
        ratio = (self.consumed_budget / self.initial_budget).quantize(Decimal("0.0001"), rounding=ROUND_HALF_UP)
        return float(ratio * 100)
