"""
Shared test fixtures.

Every test gets a fresh in-memory SQLite database.
"""

import os

os.environ["ENVIRONMENT"] = "test"

from types import SimpleNamespace

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from workpulse.infrastructure.local.action_repository import SqliteActionRepository
from workpulse.infrastructure.local.budget_repository import SqliteProjectBudgetRepository
from workpulse.infrastructure.local.database import init_db
from workpulse.infrastructure.local.dependency_repository import SqliteActionDependencyRepository
from workpulse.infrastructure.local.kpi_repository import SqliteKpiMetricRepository, SqliteKpiValueRepository
from workpulse.infrastructure.local.phase_repository import SqlitePhaseRepository
from workpulse.infrastructure.local.planning_repository import SqlitePlanningRepository
from workpulse.infrastructure.local.project_repository import SqliteProjectRepository


@pytest_asyncio.fixture
async def engine():
    """In-memory engine shared by all sessions of one test."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
def repos(session_factory):
    """All SQLite repositories bound to the test database."""
    return SimpleNamespace(
        projects=SqliteProjectRepository(session_factory=session_factory),
        phases=SqlitePhaseRepository(session_factory=session_factory),
        plannings=SqlitePlanningRepository(session_factory=session_factory),
        actions=SqliteActionRepository(session_factory=session_factory),
        dependencies=SqliteActionDependencyRepository(session_factory=session_factory),
        budgets=SqliteProjectBudgetRepository(session_factory=session_factory),
        metrics=SqliteKpiMetricRepository(session_factory=session_factory),
        values=SqliteKpiValueRepository(session_factory=session_factory),
    )
