"""
SQLite implementation of Action repository.
"""

from __future__ import annotations

from datetime import date
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import delete, or_, select

from workpulse.core.exceptions import NotFoundError
from workpulse.infrastructure.local.database import (
    ActionDependencyORM,
    ActionORM,
    SubActionORM,
    get_session_factory,
    persistence_errors,
)
from workpulse.interfaces.action_repository import IActionRepository
from workpulse.models.action import (
    Action,
    ActionCreate,
    ActionUpdate,
    ActionWithSubActions,
    SubAction,
    SubActionCreate,
)
from workpulse.utils.datetime_utils import utc_now_naive


class SqliteActionRepository(IActionRepository):
    """SQLite implementation of action repository."""

    def __init__(self, session_factory=None):
        """
        Initialize repository.

        Args:
            session_factory: Optional session factory (for testing)
        """
        self._session_factory = session_factory or get_session_factory()

    def _orm_to_model(self, orm: ActionORM) -> Action:
        """Convert ORM object to Pydantic model."""
        return Action.model_validate(orm, from_attributes=True)

    def _sub_orm_to_model(self, orm: SubActionORM) -> SubAction:
        return SubAction.model_validate(orm, from_attributes=True)

    async def _load_sub_actions(self, session, action_ids: list[str]) -> dict[str, list[SubAction]]:
        grouped: dict[str, list[SubAction]] = {}
        if not action_ids:
            return grouped
        result = await session.execute(
            select(SubActionORM)
            .where(SubActionORM.action_id.in_(action_ids))
            .order_by(SubActionORM.created_at)
        )
        for orm in result.scalars().all():
            grouped.setdefault(orm.action_id, []).append(self._sub_orm_to_model(orm))
        return grouped

    async def create(self, action: ActionCreate) -> Action:
        """Create a new action."""
        async with persistence_errors("action create"), self._session_factory() as session:
            now = utc_now_naive()
            orm = ActionORM(
                id=str(uuid4()),
                planning_id=str(action.planning_id),
                name=action.name,
                description=action.description,
                start_date=action.start_date,
                planned_end_date=action.planned_end_date,
                actual_end_date=action.actual_end_date,
                progress=action.progress,
                active=True,
                created_at=now,
                updated_at=now,
            )
            session.add(orm)
            await session.commit()
            await session.refresh(orm)
            return self._orm_to_model(orm)

    async def get(self, action_id: UUID) -> Optional[Action]:
        """Get an action by ID."""
        async with self._session_factory() as session:
            result = await session.execute(select(ActionORM).where(ActionORM.id == str(action_id)))
            orm = result.scalar_one_or_none()
            return self._orm_to_model(orm) if orm else None

    async def get_with_sub_actions(self, action_id: UUID) -> Optional[ActionWithSubActions]:
        """Get an action with its sub-actions."""
        async with self._session_factory() as session:
            result = await session.execute(select(ActionORM).where(ActionORM.id == str(action_id)))
            orm = result.scalar_one_or_none()
            if not orm:
                return None
            sub_actions = await self._load_sub_actions(session, [orm.id])
            action = ActionWithSubActions.model_validate(orm, from_attributes=True)
            action.sub_actions = sub_actions.get(orm.id, [])
            return action

    async def list_by_planning(self, planning_id: UUID) -> list[ActionWithSubActions]:
        """List actions of a planning with their sub-actions."""
        async with self._session_factory() as session:
            result = await session.execute(
                select(ActionORM)
                .where(ActionORM.planning_id == str(planning_id))
                .order_by(ActionORM.created_at)
            )
            orms = result.scalars().all()
            sub_actions = await self._load_sub_actions(session, [orm.id for orm in orms])

            actions = []
            for orm in orms:
                action = ActionWithSubActions.model_validate(orm, from_attributes=True)
                action.sub_actions = sub_actions.get(orm.id, [])
                actions.append(action)
            return actions

    async def update(self, action_id: UUID, update: ActionUpdate) -> Action:
        """Update an action. Only fields explicitly set on the update are written."""
        async with persistence_errors("action update"), self._session_factory() as session:
            result = await session.execute(select(ActionORM).where(ActionORM.id == str(action_id)))
            orm = result.scalar_one_or_none()
            if not orm:
                raise NotFoundError(f"Action {action_id} not found")

            for field, value in update.model_dump(exclude_unset=True).items():
                if isinstance(value, UUID):
                    value = str(value)
                setattr(orm, field, value)
            orm.updated_at = utc_now_naive()

            await session.commit()
            await session.refresh(orm)
            return self._orm_to_model(orm)

    async def delete(self, action_id: UUID) -> bool:
        """Delete an action with its sub-actions and incident dependency edges."""
        async with persistence_errors("action delete"), self._session_factory() as session:
            result = await session.execute(select(ActionORM).where(ActionORM.id == str(action_id)))
            orm = result.scalar_one_or_none()
            if not orm:
                return False

            await session.execute(
                delete(ActionDependencyORM).where(
                    or_(
                        ActionDependencyORM.action_id == orm.id,
                        ActionDependencyORM.depends_on_id == orm.id,
                    )
                )
            )
            await session.execute(delete(SubActionORM).where(SubActionORM.action_id == orm.id))
            await session.delete(orm)
            await session.commit()
            return True

    async def create_sub_action(self, sub_action: SubActionCreate) -> SubAction:
        """Create a sub-action."""
        async with persistence_errors("sub-action create"), self._session_factory() as session:
            now = utc_now_naive()
            orm = SubActionORM(
                id=str(uuid4()),
                action_id=str(sub_action.action_id),
                name=sub_action.name,
                description=sub_action.description,
                start_date=sub_action.start_date,
                planned_end_date=sub_action.planned_end_date,
                actual_end_date=sub_action.actual_end_date,
                active=True,
                created_at=now,
                updated_at=now,
            )
            session.add(orm)
            await session.commit()
            await session.refresh(orm)
            return self._sub_orm_to_model(orm)

    async def get_sub_action(self, sub_action_id: UUID) -> Optional[SubAction]:
        """Get a sub-action by ID."""
        async with self._session_factory() as session:
            result = await session.execute(select(SubActionORM).where(SubActionORM.id == str(sub_action_id)))
            orm = result.scalar_one_or_none()
            return self._sub_orm_to_model(orm) if orm else None

    async def set_sub_action_end_date(self, sub_action_id: UUID, actual_end_date: Optional[date]) -> SubAction:
        """Set or clear a sub-action's actual end date."""
        async with persistence_errors("sub-action update"), self._session_factory() as session:
            result = await session.execute(select(SubActionORM).where(SubActionORM.id == str(sub_action_id)))
            orm = result.scalar_one_or_none()
            if not orm:
                raise NotFoundError(f"Sub-action {sub_action_id} not found")

            orm.actual_end_date = actual_end_date
            orm.updated_at = utc_now_naive()
            await session.commit()
            await session.refresh(orm)
            return self._sub_orm_to_model(orm)
