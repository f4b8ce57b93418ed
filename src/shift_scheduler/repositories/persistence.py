"""Durable storage for schedule records, used to hydrate and flush the in-memory repository."""

from typing import Any, Iterable, Protocol

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from shift_scheduler.db import session as db_session
from shift_scheduler.db.models.schedule import ScheduleEntry
from shift_scheduler.schemas.schedule import ScheduleRecord


class Hydratable(Protocol):
    def hydrate(self, records: Iterable[ScheduleRecord]) -> int: ...


class Flushable(Protocol):
    def all(self) -> list[ScheduleRecord]: ...


def _entry_values(record: ScheduleRecord) -> dict[str, Any]:
    values = record.model_dump()
    values["violation_warnings"] = [violation.model_dump(mode="json") for violation in record.violation_warnings]
    return values


async def list_entries(session: AsyncSession) -> list[ScheduleEntry]:
    result = await session.execute(select(ScheduleEntry).order_by(ScheduleEntry.id.asc()))
    return list(result.scalars().all())


async def count_entries(session: AsyncSession) -> int:
    result = await session.execute(select(func.count(ScheduleEntry.id)))
    return result.scalar_one()


async def get_entry(session: AsyncSession, entry_id: int) -> ScheduleEntry | None:
    return await session.get(ScheduleEntry, entry_id)


async def load_schedules(session: AsyncSession) -> list[ScheduleRecord]:
    return [ScheduleRecord.model_validate(entry) for entry in await list_entries(session)]


async def store_schedules(session: AsyncSession, records: Iterable[ScheduleRecord]) -> int:
    """Insert or update one row per record. Records are keyed by id."""

    count = 0
    for record in records:
        await session.merge(ScheduleEntry(**_entry_values(record)))
        count += 1
    await session.flush()
    return count


async def hydrate_repository(
    target: Hydratable,
    session_factory: async_sessionmaker[AsyncSession] | None = None,
) -> int:
    factory = session_factory or db_session.async_session_factory
    async with factory() as session:
        records = await load_schedules(session)
    return target.hydrate(records)


async def flush_repository(
    source: Flushable,
    session_factory: async_sessionmaker[AsyncSession] | None = None,
) -> int:
    factory = session_factory or db_session.async_session_factory
    async with factory() as session:
        count = await store_schedules(session, source.all())
        await session.commit()
    return count
