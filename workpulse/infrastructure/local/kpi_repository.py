"""
SQLite implementation of KPI metric and KPI value repositories.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import and_, desc, or_, select, update
from sqlalchemy.exc import IntegrityError

from workpulse.core.exceptions import DuplicateError, NotFoundError
from workpulse.infrastructure.local.database import (
    KpiMetricORM,
    KpiValueORM,
    get_session_factory,
    persistence_errors,
)
from workpulse.interfaces.kpi_repository import IKpiMetricRepository, IKpiValueRepository
from workpulse.models.kpi import KpiMetric, KpiMetricCreate, KpiMetricUpdate, KpiValue, KpiValueCreate
from workpulse.utils.datetime_utils import normalize_dt, utc_now_naive


def _str_or_none(value: Optional[UUID]) -> Optional[str]:
    return str(value) if value else None


class SqliteKpiMetricRepository(IKpiMetricRepository):
    """SQLite implementation of KPI metric repository."""

    def __init__(self, session_factory=None):
        self._session_factory = session_factory or get_session_factory()

    def _orm_to_model(self, orm: KpiMetricORM) -> KpiMetric:
        return KpiMetric.model_validate(orm, from_attributes=True)

    async def create(self, metric: KpiMetricCreate) -> KpiMetric:
        async with persistence_errors("metric create"), self._session_factory() as session:
            now = utc_now_naive()
            orm = KpiMetricORM(
                id=str(uuid4()),
                code=metric.code,
                name=metric.name,
                description=metric.description,
                unit=metric.unit,
                threshold_warning=metric.threshold_warning,
                threshold_critical=metric.threshold_critical,
                higher_is_better=metric.higher_is_better,
                calculation_formula=metric.calculation_formula,
                update_frequency_minutes=metric.update_frequency_minutes,
                enable_notifications=metric.enable_notifications,
                phase_id=_str_or_none(metric.phase_id),
                active=True,
                created_at=now,
                updated_at=now,
            )
            session.add(orm)
            try:
                await session.commit()
            except IntegrityError as exc:
                await session.rollback()
                raise DuplicateError(f"KPI metric code already exists: {metric.code}") from exc
            await session.refresh(orm)
            return self._orm_to_model(orm)

    async def get(self, metric_id: UUID) -> Optional[KpiMetric]:
        async with self._session_factory() as session:
            result = await session.execute(select(KpiMetricORM).where(KpiMetricORM.id == str(metric_id)))
            orm = result.scalar_one_or_none()
            return self._orm_to_model(orm) if orm else None

    async def get_by_code(self, code: str) -> Optional[KpiMetric]:
        async with self._session_factory() as session:
            result = await session.execute(select(KpiMetricORM).where(KpiMetricORM.code == code))
            orm = result.scalar_one_or_none()
            return self._orm_to_model(orm) if orm else None

    async def list(self, active_only: bool = False) -> list[KpiMetric]:
        async with self._session_factory() as session:
            query = select(KpiMetricORM)
            if active_only:
                query = query.where(KpiMetricORM.active.is_(True))
            result = await session.execute(query.order_by(KpiMetricORM.code))
            return [self._orm_to_model(orm) for orm in result.scalars().all()]

    async def list_requiring_updates(self) -> list[KpiMetric]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(KpiMetricORM)
                .where(
                    and_(
                        KpiMetricORM.active.is_(True),
                        KpiMetricORM.update_frequency_minutes.is_not(None),
                        KpiMetricORM.update_frequency_minutes > 0,
                    )
                )
                .order_by(KpiMetricORM.code)
            )
            return [self._orm_to_model(orm) for orm in result.scalars().all()]

    async def list_with_notifications_enabled(self) -> list[KpiMetric]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(KpiMetricORM)
                .where(KpiMetricORM.enable_notifications.is_(True))
                .order_by(KpiMetricORM.code)
            )
            return [self._orm_to_model(orm) for orm in result.scalars().all()]

    async def list_by_phase(self, phase_id: UUID) -> list[KpiMetric]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(KpiMetricORM)
                .where(KpiMetricORM.phase_id == str(phase_id))
                .order_by(KpiMetricORM.code)
            )
            return [self._orm_to_model(orm) for orm in result.scalars().all()]

    async def update(self, metric_id: UUID, update: KpiMetricUpdate) -> KpiMetric:
        async with persistence_errors("metric update"), self._session_factory() as session:
            result = await session.execute(select(KpiMetricORM).where(KpiMetricORM.id == str(metric_id)))
            orm = result.scalar_one_or_none()
            if not orm:
                raise NotFoundError(f"KPI metric {metric_id} not found")

            for field, value in update.model_dump(exclude_unset=True).items():
                if isinstance(value, UUID):
                    value = str(value)
                setattr(orm, field, value)
            orm.updated_at = utc_now_naive()

            await session.commit()
            await session.refresh(orm)
            return self._orm_to_model(orm)

    async def set_active(self, metric_id: UUID, active: bool) -> KpiMetric:
        async with persistence_errors("metric activation"), self._session_factory() as session:
            result = await session.execute(select(KpiMetricORM).where(KpiMetricORM.id == str(metric_id)))
            orm = result.scalar_one_or_none()
            if not orm:
                raise NotFoundError(f"KPI metric {metric_id} not found")

            orm.active = active
            orm.updated_at = utc_now_naive()
            await session.commit()
            await session.refresh(orm)
            return self._orm_to_model(orm)


class SqliteKpiValueRepository(IKpiValueRepository):
    """SQLite implementation of KPI value repository."""

    def __init__(self, session_factory=None):
        self._session_factory = session_factory or get_session_factory()

    def _orm_to_model(self, orm: KpiValueORM) -> KpiValue:
        return KpiValue.model_validate(orm, from_attributes=True)

    async def create(self, value: KpiValueCreate) -> KpiValue:
        """Insert the value and its breach flags in a single row write."""
        async with persistence_errors("KPI value create"), self._session_factory() as session:
            now = utc_now_naive()
            orm = KpiValueORM(
                id=str(uuid4()),
                metric_id=str(value.metric_id),
                project_id=str(value.project_id),
                value=value.value,
                measurement_date=normalize_dt(value.measurement_date),
                comment=value.comment,
                warning_threshold_breached=value.warning_threshold_breached,
                critical_threshold_breached=value.critical_threshold_breached,
                notification_sent=False,
                phase_id=_str_or_none(value.phase_id),
                active=True,
                created_at=now,
                updated_at=now,
            )
            session.add(orm)
            await session.commit()
            await session.refresh(orm)
            return self._orm_to_model(orm)

    async def get(self, value_id: UUID) -> Optional[KpiValue]:
        async with self._session_factory() as session:
            result = await session.execute(select(KpiValueORM).where(KpiValueORM.id == str(value_id)))
            orm = result.scalar_one_or_none()
            return self._orm_to_model(orm) if orm else None

    async def get_latest(self, project_id: UUID, metric_id: UUID) -> Optional[KpiValue]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(KpiValueORM)
                .where(
                    and_(
                        KpiValueORM.project_id == str(project_id),
                        KpiValueORM.metric_id == str(metric_id),
                    )
                )
                .order_by(desc(KpiValueORM.measurement_date), desc(KpiValueORM.created_at))
                .limit(1)
            )
            orm = result.scalar_one_or_none()
            return self._orm_to_model(orm) if orm else None

    async def list_for_project_in_range(
        self,
        project_id: UUID,
        start: datetime,
        end: datetime,
    ) -> list[KpiValue]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(KpiValueORM)
                .where(
                    and_(
                        KpiValueORM.project_id == str(project_id),
                        KpiValueORM.measurement_date >= normalize_dt(start),
                        KpiValueORM.measurement_date <= normalize_dt(end),
                    )
                )
                .order_by(KpiValueORM.measurement_date)
            )
            return [self._orm_to_model(orm) for orm in result.scalars().all()]

    async def list_breached_unnotified(self) -> list[KpiValue]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(KpiValueORM)
                .where(
                    and_(
                        or_(
                            KpiValueORM.warning_threshold_breached.is_(True),
                            KpiValueORM.critical_threshold_breached.is_(True),
                        ),
                        KpiValueORM.notification_sent.is_(False),
                    )
                )
                .order_by(KpiValueORM.measurement_date)
            )
            return [self._orm_to_model(orm) for orm in result.scalars().all()]

    async def mark_notification_sent(self, value_id: UUID) -> bool:
        """Conditional update so only one caller can win the False -> True flip."""
        async with persistence_errors("KPI value notification flag"), self._session_factory() as session:
            result = await session.execute(
                update(KpiValueORM)
                .where(
                    and_(
                        KpiValueORM.id == str(value_id),
                        KpiValueORM.notification_sent.is_(False),
                    )
                )
                .values(notification_sent=True, updated_at=utc_now_naive())
            )
            await session.commit()
            return result.rowcount == 1
