"""
SQLite database configuration and ORM models.

This module defines the SQLAlchemy ORM models and database initialization.
"""

from contextlib import asynccontextmanager
from datetime import datetime
from functools import lru_cache
from uuid import uuid4

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker

from workpulse.core.config import get_settings
from workpulse.core.exceptions import InfrastructureError


class Base(DeclarativeBase):
    """SQLAlchemy declarative base."""

    pass


# ===========================================
# ORM Models
# ===========================================


class ProjectORM(Base):
    """Project ORM model."""

    __tablename__ = "projects"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    start_date = Column(Date, nullable=True)
    planned_end_date = Column(Date, nullable=True)
    actual_end_date = Column(Date, nullable=True)
    active = Column(Boolean, default=True, index=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class PhaseORM(Base):
    """Portfolio phase ORM model."""

    __tablename__ = "phases"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    name = Column(String(100), nullable=False)
    description = Column(String(500), nullable=True)
    weight = Column(Float, nullable=True)
    order = Column("sort_order", Integer, default=1)
    active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class PlanningORM(Base):
    """Planning ORM model (one project, one phase)."""

    __tablename__ = "plannings"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    project_id = Column(String(36), ForeignKey("projects.id"), nullable=False, index=True)
    phase_id = Column(String(36), ForeignKey("phases.id"), nullable=False, index=True)
    name = Column(String(200), nullable=True)
    active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class ActionORM(Base):
    """Action ORM model."""

    __tablename__ = "actions"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    planning_id = Column(String(36), ForeignKey("plannings.id"), nullable=False, index=True)
    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    start_date = Column(Date, nullable=True)
    planned_end_date = Column(Date, nullable=True)
    actual_end_date = Column(Date, nullable=True)
    progress = Column(Float, nullable=True)  # leaf-level progress, ignored once sub-actions exist
    active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class SubActionORM(Base):
    """Sub-action ORM model."""

    __tablename__ = "sub_actions"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    action_id = Column(String(36), ForeignKey("actions.id"), nullable=False, index=True)
    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    start_date = Column(Date, nullable=True)
    planned_end_date = Column(Date, nullable=True)
    actual_end_date = Column(Date, nullable=True)
    active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class ActionDependencyORM(Base):
    """Directed dependency edge: action_id is blocked by depends_on_id."""

    __tablename__ = "action_dependencies"
    __table_args__ = (
        UniqueConstraint("action_id", "depends_on_id", name="uq_action_dependency_pair"),
        CheckConstraint("action_id <> depends_on_id", name="ck_action_dependency_not_self"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    action_id = Column(String(36), ForeignKey("actions.id"), nullable=False, index=True)
    depends_on_id = Column(String(36), ForeignKey("actions.id"), nullable=False, index=True)
    active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class ProjectBudgetORM(Base):
    """Project budget ORM model."""

    __tablename__ = "project_budgets"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    project_id = Column(String(36), ForeignKey("projects.id"), nullable=False, index=True)
    initial_budget = Column(Numeric(18, 2, asdecimal=True), nullable=True)
    consumed_budget = Column(Numeric(18, 2, asdecimal=True), nullable=True)
    active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class KpiMetricORM(Base):
    """KPI metric ORM model."""

    __tablename__ = "kpi_metrics"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    code = Column(String(50), nullable=False, unique=True)
    name = Column(String(100), nullable=False)
    description = Column(String(500), nullable=True)
    unit = Column(String(50), nullable=True)
    threshold_warning = Column(Float, nullable=True)
    threshold_critical = Column(Float, nullable=True)
    higher_is_better = Column(Boolean, default=True)
    calculation_formula = Column(String(1000), nullable=True)
    update_frequency_minutes = Column(Integer, nullable=True)  # None = manual only
    enable_notifications = Column(Boolean, default=False)
    phase_id = Column(String(36), ForeignKey("phases.id"), nullable=True, index=True)
    active = Column(Boolean, default=True, index=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class KpiValueORM(Base):
    """KPI measurement ORM model. Breach flags are written once on insert."""

    __tablename__ = "kpi_values"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    metric_id = Column(String(36), ForeignKey("kpi_metrics.id"), nullable=False, index=True)
    project_id = Column(String(36), ForeignKey("projects.id"), nullable=False, index=True)
    value = Column(Float, nullable=False)
    measurement_date = Column(DateTime, nullable=False, index=True)
    comment = Column(String(500), nullable=True)
    warning_threshold_breached = Column(Boolean, default=False)
    critical_threshold_breached = Column(Boolean, default=False)
    notification_sent = Column(Boolean, default=False, index=True)
    phase_id = Column(String(36), ForeignKey("phases.id"), nullable=True)
    active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


# ===========================================
# Database Session Management
# ===========================================


@lru_cache()
def get_engine():
    """Get async engine instance."""
    settings = get_settings()
    return create_async_engine(settings.DATABASE_URL, echo=settings.DEBUG)


def get_session_factory():
    """Get async session factory."""
    engine = get_engine()
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def init_db(engine=None):
    """Initialize database tables."""
    engine = engine or get_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


@asynccontextmanager
async def persistence_errors(operation: str):
    """Re-raise SQLAlchemy failures as InfrastructureError."""
    try:
        yield
    except SQLAlchemyError as exc:
        raise InfrastructureError(f"Database error during {operation}: {exc}") from exc
