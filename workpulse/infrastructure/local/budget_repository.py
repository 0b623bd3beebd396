"""
SQLite implementation of project budget repository.
"""

from __future__ import annotations

from uuid import UUID, uuid4

from sqlalchemy import select

from workpulse.infrastructure.local.database import ProjectBudgetORM, get_session_factory, persistence_errors
from workpulse.interfaces.budget_repository import IProjectBudgetRepository
from workpulse.models.budget import ProjectBudget, ProjectBudgetCreate
from workpulse.utils.datetime_utils import utc_now_naive


class SqliteProjectBudgetRepository(IProjectBudgetRepository):
    """SQLite implementation of project budget repository."""

    def __init__(self, session_factory=None):
        self._session_factory = session_factory or get_session_factory()

    async def create(self, budget: ProjectBudgetCreate) -> ProjectBudget:
        async with persistence_errors("budget create"), self._session_factory() as session:
            now = utc_now_naive()
            orm = ProjectBudgetORM(
                id=str(uuid4()),
                project_id=str(budget.project_id),
                initial_budget=budget.initial_budget,
                consumed_budget=budget.consumed_budget,
                active=budget.active,
                created_at=now,
                updated_at=now,
            )
            session.add(orm)
            await session.commit()
            await session.refresh(orm)
            return ProjectBudget.model_validate(orm, from_attributes=True)

    async def list_by_project(self, project_id: UUID) -> list[ProjectBudget]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(ProjectBudgetORM)
                .where(ProjectBudgetORM.project_id == str(project_id))
                .order_by(ProjectBudgetORM.created_at)
            )
            return [ProjectBudget.model_validate(orm, from_attributes=True) for orm in result.scalars().all()]
