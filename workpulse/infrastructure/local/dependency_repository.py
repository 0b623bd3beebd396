"""
SQLite implementation of the action dependency repository.
"""

from __future__ import annotations

from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import and_, select
from sqlalchemy.exc import IntegrityError

from workpulse.core.exceptions import DuplicateError, InvalidArgumentError
from workpulse.infrastructure.local.database import (
    ActionDependencyORM,
    get_session_factory,
    persistence_errors,
)
from workpulse.interfaces.dependency_repository import IActionDependencyRepository
from workpulse.models.action import ActionDependency
from workpulse.utils.datetime_utils import utc_now_naive


class SqliteActionDependencyRepository(IActionDependencyRepository):
    """SQLite implementation of dependency edge persistence."""

    def __init__(self, session_factory=None):
        self._session_factory = session_factory or get_session_factory()

    def _orm_to_model(self, orm: ActionDependencyORM) -> ActionDependency:
        return ActionDependency.model_validate(orm, from_attributes=True)

    def _pair_clause(self, action_id: UUID, depends_on_id: UUID):
        return and_(
            ActionDependencyORM.action_id == str(action_id),
            ActionDependencyORM.depends_on_id == str(depends_on_id),
        )

    async def add(self, action_id: UUID, depends_on_id: UUID) -> ActionDependency:
        """Insert an edge; the unique constraint rejects a second insert of the same pair."""
        if action_id == depends_on_id:
            raise InvalidArgumentError("An action cannot depend on itself")

        async with persistence_errors("dependency add"), self._session_factory() as session:
            now = utc_now_naive()
            orm = ActionDependencyORM(
                id=str(uuid4()),
                action_id=str(action_id),
                depends_on_id=str(depends_on_id),
                active=True,
                created_at=now,
                updated_at=now,
            )
            session.add(orm)
            try:
                await session.commit()
            except IntegrityError as exc:
                await session.rollback()
                raise DuplicateError(
                    f"Action {action_id} already depends on action {depends_on_id}",
                    details={"action_id": str(action_id), "depends_on_id": str(depends_on_id)},
                ) from exc
            await session.refresh(orm)
            return self._orm_to_model(orm)

    async def get(self, action_id: UUID, depends_on_id: UUID) -> Optional[ActionDependency]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(ActionDependencyORM).where(self._pair_clause(action_id, depends_on_id))
            )
            orm = result.scalar_one_or_none()
            return self._orm_to_model(orm) if orm else None

    async def remove(self, action_id: UUID, depends_on_id: UUID) -> bool:
        async with persistence_errors("dependency remove"), self._session_factory() as session:
            result = await session.execute(
                select(ActionDependencyORM).where(self._pair_clause(action_id, depends_on_id))
            )
            orm = result.scalar_one_or_none()
            if not orm:
                return False
            await session.delete(orm)
            await session.commit()
            return True

    async def list_by_action(self, action_id: UUID) -> list[ActionDependency]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(ActionDependencyORM)
                .where(ActionDependencyORM.action_id == str(action_id))
                .order_by(ActionDependencyORM.created_at)
            )
            return [self._orm_to_model(orm) for orm in result.scalars().all()]

    async def list_by_depends_on(self, depends_on_id: UUID) -> list[ActionDependency]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(ActionDependencyORM)
                .where(ActionDependencyORM.depends_on_id == str(depends_on_id))
                .order_by(ActionDependencyORM.created_at)
            )
            return [self._orm_to_model(orm) for orm in result.scalars().all()]
