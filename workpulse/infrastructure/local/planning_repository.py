"""
SQLite implementation of Planning repository.
"""

from __future__ import annotations

from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import and_, delete, or_, select

from workpulse.infrastructure.local.database import (
    ActionDependencyORM,
    ActionORM,
    PlanningORM,
    SubActionORM,
    get_session_factory,
    persistence_errors,
)
from workpulse.interfaces.planning_repository import IPlanningRepository
from workpulse.models.action import ActionWithSubActions, SubAction
from workpulse.models.planning import Planning, PlanningCreate, PlanningWithActions
from workpulse.utils.datetime_utils import utc_now_naive


class SqlitePlanningRepository(IPlanningRepository):
    """SQLite implementation of planning repository."""

    def __init__(self, session_factory=None):
        self._session_factory = session_factory or get_session_factory()

    def _orm_to_model(self, orm: PlanningORM) -> Planning:
        return Planning.model_validate(orm, from_attributes=True)

    async def create(self, planning: PlanningCreate) -> Planning:
        async with persistence_errors("planning create"), self._session_factory() as session:
            now = utc_now_naive()
            orm = PlanningORM(
                id=str(uuid4()),
                project_id=str(planning.project_id),
                phase_id=str(planning.phase_id),
                name=planning.name,
                active=True,
                created_at=now,
                updated_at=now,
            )
            session.add(orm)
            await session.commit()
            await session.refresh(orm)
            return self._orm_to_model(orm)

    async def get(self, planning_id: UUID) -> Optional[Planning]:
        async with self._session_factory() as session:
            result = await session.execute(select(PlanningORM).where(PlanningORM.id == str(planning_id)))
            orm = result.scalar_one_or_none()
            return self._orm_to_model(orm) if orm else None

    async def get_with_actions(self, planning_id: UUID) -> Optional[PlanningWithActions]:
        async with self._session_factory() as session:
            result = await session.execute(select(PlanningORM).where(PlanningORM.id == str(planning_id)))
            orm = result.scalar_one_or_none()
            if not orm:
                return None

            action_result = await session.execute(
                select(ActionORM).where(ActionORM.planning_id == orm.id).order_by(ActionORM.created_at)
            )
            action_orms = action_result.scalars().all()

            sub_actions_by_action: dict[str, list[SubAction]] = {}
            if action_orms:
                sub_result = await session.execute(
                    select(SubActionORM)
                    .where(SubActionORM.action_id.in_([a.id for a in action_orms]))
                    .order_by(SubActionORM.created_at)
                )
                for sub_orm in sub_result.scalars().all():
                    sub_actions_by_action.setdefault(sub_orm.action_id, []).append(
                        SubAction.model_validate(sub_orm, from_attributes=True)
                    )

            actions = []
            for action_orm in action_orms:
                action = ActionWithSubActions.model_validate(action_orm, from_attributes=True)
                action.sub_actions = sub_actions_by_action.get(action_orm.id, [])
                actions.append(action)

            planning = PlanningWithActions.model_validate(orm, from_attributes=True)
            planning.actions = actions
            return planning

    async def list_by_project(self, project_id: UUID, active_only: bool = False) -> list[Planning]:
        async with self._session_factory() as session:
            query = select(PlanningORM).where(PlanningORM.project_id == str(project_id))
            if active_only:
                query = query.where(PlanningORM.active.is_(True))
            result = await session.execute(query.order_by(PlanningORM.created_at))
            return [self._orm_to_model(orm) for orm in result.scalars().all()]

    async def list_by_phase(self, phase_id: UUID) -> list[Planning]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(PlanningORM)
                .where(PlanningORM.phase_id == str(phase_id))
                .order_by(PlanningORM.created_at)
            )
            return [self._orm_to_model(orm) for orm in result.scalars().all()]

    async def get_by_project_and_phase(self, project_id: UUID, phase_id: UUID) -> Optional[Planning]:
        # (project, phase) uniqueness is not enforced; the oldest planning wins
        async with self._session_factory() as session:
            result = await session.execute(
                select(PlanningORM)
                .where(
                    and_(
                        PlanningORM.project_id == str(project_id),
                        PlanningORM.phase_id == str(phase_id),
                    )
                )
                .order_by(PlanningORM.created_at)
                .limit(1)
            )
            orm = result.scalar_one_or_none()
            return self._orm_to_model(orm) if orm else None

    async def delete(self, planning_id: UUID) -> bool:
        """Delete a planning, cascading to actions, sub-actions and dependency edges."""
        async with persistence_errors("planning delete"), self._session_factory() as session:
            result = await session.execute(select(PlanningORM).where(PlanningORM.id == str(planning_id)))
            orm = result.scalar_one_or_none()
            if not orm:
                return False

            action_ids = select(ActionORM.id).where(ActionORM.planning_id == orm.id)
            await session.execute(
                delete(ActionDependencyORM).where(
                    or_(
                        ActionDependencyORM.action_id.in_(action_ids),
                        ActionDependencyORM.depends_on_id.in_(action_ids),
                    )
                )
            )
            await session.execute(delete(SubActionORM).where(SubActionORM.action_id.in_(action_ids)))
            await session.execute(delete(ActionORM).where(ActionORM.planning_id == orm.id))
            await session.delete(orm)
            await session.commit()
            return True
