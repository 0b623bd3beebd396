"""
SQLite implementation of Phase repository.
"""

from __future__ import annotations

from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import select

from workpulse.infrastructure.local.database import PhaseORM, get_session_factory, persistence_errors
from workpulse.interfaces.phase_repository import IPhaseRepository
from workpulse.models.phase import Phase, PhaseCreate
from workpulse.utils.datetime_utils import utc_now_naive


class SqlitePhaseRepository(IPhaseRepository):
    """SQLite implementation of phase repository."""

    def __init__(self, session_factory=None):
        self._session_factory = session_factory or get_session_factory()

    def _orm_to_model(self, orm: PhaseORM) -> Phase:
        return Phase.model_validate(orm, from_attributes=True)

    async def create(self, phase: PhaseCreate) -> Phase:
        async with persistence_errors("phase create"), self._session_factory() as session:
            now = utc_now_naive()
            orm = PhaseORM(
                id=str(uuid4()),
                name=phase.name,
                description=phase.description,
                weight=phase.weight,
                order=phase.order,
                active=True,
                created_at=now,
                updated_at=now,
            )
            session.add(orm)
            await session.commit()
            await session.refresh(orm)
            return self._orm_to_model(orm)

    async def get(self, phase_id: UUID) -> Optional[Phase]:
        async with self._session_factory() as session:
            result = await session.execute(select(PhaseORM).where(PhaseORM.id == str(phase_id)))
            orm = result.scalar_one_or_none()
            return self._orm_to_model(orm) if orm else None

    async def list(self) -> list[Phase]:
        async with self._session_factory() as session:
            result = await session.execute(select(PhaseORM).order_by(PhaseORM.order, PhaseORM.created_at))
            return [self._orm_to_model(orm) for orm in result.scalars().all()]
