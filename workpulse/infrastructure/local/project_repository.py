"""
SQLite implementation of Project repository.
"""

from __future__ import annotations

from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import select

from workpulse.core.exceptions import NotFoundError
from workpulse.infrastructure.local.database import (
    ActionORM,
    PlanningORM,
    ProjectORM,
    SubActionORM,
    get_session_factory,
    persistence_errors,
)
from workpulse.interfaces.project_repository import IProjectRepository
from workpulse.models.action import ActionWithSubActions, SubAction
from workpulse.models.planning import PlanningWithActions
from workpulse.models.project import Project, ProjectCreate, ProjectHierarchy, ProjectUpdate
from workpulse.utils.datetime_utils import utc_now_naive


class SqliteProjectRepository(IProjectRepository):
    """SQLite implementation of project repository."""

    def __init__(self, session_factory=None):
        """
        Initialize repository.

        Args:
            session_factory: Optional session factory (for testing)
        """
        self._session_factory = session_factory or get_session_factory()

    def _orm_to_model(self, orm: ProjectORM) -> Project:
        """Convert ORM object to Pydantic model."""
        return Project.model_validate(orm, from_attributes=True)

    async def create(self, project: ProjectCreate) -> Project:
        """Create a new project."""
        async with persistence_errors("project create"), self._session_factory() as session:
            now = utc_now_naive()
            orm = ProjectORM(
                id=str(uuid4()),
                name=project.name,
                description=project.description,
                start_date=project.start_date,
                planned_end_date=project.planned_end_date,
                actual_end_date=project.actual_end_date,
                active=True,
                created_at=now,
                updated_at=now,
            )
            session.add(orm)
            await session.commit()
            await session.refresh(orm)
            return self._orm_to_model(orm)

    async def get(self, project_id: UUID) -> Optional[Project]:
        """Get a project by ID."""
        async with self._session_factory() as session:
            result = await session.execute(select(ProjectORM).where(ProjectORM.id == str(project_id)))
            orm = result.scalar_one_or_none()
            return self._orm_to_model(orm) if orm else None

    async def list(self, active_only: bool = False) -> list[Project]:
        """List projects ordered by creation."""
        async with self._session_factory() as session:
            query = select(ProjectORM)
            if active_only:
                query = query.where(ProjectORM.active.is_(True))
            result = await session.execute(query.order_by(ProjectORM.created_at))
            return [self._orm_to_model(orm) for orm in result.scalars().all()]

    async def update(self, project_id: UUID, update: ProjectUpdate) -> Project:
        """Update a project."""
        async with persistence_errors("project update"), self._session_factory() as session:
            result = await session.execute(select(ProjectORM).where(ProjectORM.id == str(project_id)))
            orm = result.scalar_one_or_none()
            if not orm:
                raise NotFoundError(f"Project {project_id} not found")

            for field, value in update.model_dump(exclude_unset=True).items():
                setattr(orm, field, value)
            orm.updated_at = utc_now_naive()

            await session.commit()
            await session.refresh(orm)
            return self._orm_to_model(orm)

    async def get_hierarchy(self, project_id: UUID) -> Optional[ProjectHierarchy]:
        """Load a project with plannings, actions and sub-actions in three queries."""
        async with self._session_factory() as session:
            result = await session.execute(select(ProjectORM).where(ProjectORM.id == str(project_id)))
            project_orm = result.scalar_one_or_none()
            if not project_orm:
                return None

            planning_result = await session.execute(
                select(PlanningORM)
                .where(PlanningORM.project_id == project_orm.id)
                .order_by(PlanningORM.created_at)
            )
            plannings = planning_result.scalars().all()
            planning_ids = [planning.id for planning in plannings]

            actions = []
            if planning_ids:
                action_result = await session.execute(
                    select(ActionORM)
                    .where(ActionORM.planning_id.in_(planning_ids))
                    .order_by(ActionORM.created_at)
                )
                actions = action_result.scalars().all()
            action_ids = [action.id for action in actions]

            sub_actions_by_action: dict[str, list[SubAction]] = {}
            if action_ids:
                sub_result = await session.execute(
                    select(SubActionORM)
                    .where(SubActionORM.action_id.in_(action_ids))
                    .order_by(SubActionORM.created_at)
                )
                for sub_orm in sub_result.scalars().all():
                    sub_actions_by_action.setdefault(sub_orm.action_id, []).append(
                        SubAction.model_validate(sub_orm, from_attributes=True)
                    )

            actions_by_planning: dict[str, list[ActionWithSubActions]] = {}
            for action_orm in actions:
                action = ActionWithSubActions.model_validate(action_orm, from_attributes=True)
                action.sub_actions = sub_actions_by_action.get(action_orm.id, [])
                actions_by_planning.setdefault(action_orm.planning_id, []).append(action)

            planning_models = []
            for planning_orm in plannings:
                planning = PlanningWithActions.model_validate(planning_orm, from_attributes=True)
                planning.actions = actions_by_planning.get(planning_orm.id, [])
                planning_models.append(planning)

            hierarchy = ProjectHierarchy.model_validate(project_orm, from_attributes=True)
            hierarchy.plannings = planning_models
            return hierarchy
