import os
from collections.abc import AsyncIterator, Iterator

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from shift_scheduler.db import models  # noqa: F401  # ensure model metadata is loaded
from shift_scheduler.db import session as db_session
from shift_scheduler.db.base import Base
from shift_scheduler.repositories.schedule import ScheduleRepository
from shift_scheduler.services.notifications import InMemoryEventBus
from shift_scheduler.services.rules import RuleSet, load_default_rules
from shift_scheduler.services.scheduler import ScheduleService


@pytest.fixture()
def database_url() -> str:
    return os.getenv("TEST_DATABASE_URL", "sqlite+aiosqlite:///:memory:")


@pytest_asyncio.fixture()
async def async_engine(database_url: str) -> AsyncIterator[AsyncEngine]:
    """Provide a per-test async engine, resetting schema before each run."""
    engine = create_async_engine(database_url, future=True)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture()
def session_factory(async_engine: AsyncEngine) -> Iterator[async_sessionmaker[AsyncSession]]:
    factory = async_sessionmaker(async_engine, expire_on_commit=False, class_=AsyncSession)
    yield factory


@pytest.fixture()
def swap_db_engine(async_engine: AsyncEngine) -> Iterator[None]:
    original_engine = db_session.engine
    original_factory = db_session.async_session_factory
    test_factory = async_sessionmaker(async_engine, expire_on_commit=False, class_=AsyncSession)
    try:
        db_session.engine = async_engine
        db_session.async_session_factory = test_factory
        yield
    finally:
        db_session.engine = original_engine
        db_session.async_session_factory = original_factory


@pytest.fixture()
def rule_set() -> RuleSet:
    return load_default_rules()


@pytest.fixture()
def repository() -> ScheduleRepository:
    return ScheduleRepository()


@pytest.fixture()
def event_bus() -> InMemoryEventBus:
    return InMemoryEventBus()


@pytest.fixture()
def service(repository: ScheduleRepository, rule_set: RuleSet, event_bus: InMemoryEventBus) -> ScheduleService:
    return ScheduleService(repository, rules=rule_set, dispatcher=event_bus)
