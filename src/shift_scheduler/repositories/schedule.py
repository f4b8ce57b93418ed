"""Indexed in-memory storage for created schedule records."""

from __future__ import annotations

import bisect
import logging
import threading
from collections import defaultdict
from datetime import date
from typing import Iterable, Protocol

from shift_scheduler.core.errors import ConflictError
from shift_scheduler.schemas.schedule import ScheduleRecord
from shift_scheduler.services.calculus import TimeInterval, interval, overlaps

logger = logging.getLogger(__name__)


class ScheduleReader(Protocol):
    """Read contract shared by the live repository and its snapshots."""

    def by_employee_and_date(self, employee_id: int, day: date) -> list[ScheduleRecord]: ...

    def by_employee_in_range(self, employee_id: int, start: date, end: date) -> list[ScheduleRecord]: ...

    def by_date(self, day: date) -> list[ScheduleRecord]: ...

    def by_date_and_overlap(self, day: date, window: TimeInterval) -> list[ScheduleRecord]: ...


class _ScheduleIndex:
    def __init__(self) -> None:
        self.records: dict[int, ScheduleRecord] = {}
        self.by_employee_day: dict[tuple[int, date], list[ScheduleRecord]] = defaultdict(list)
        self.by_day: dict[date, list[ScheduleRecord]] = defaultdict(list)
        # Sorted, distinct working dates per employee for range lookups.
        self.employee_dates: dict[int, list[date]] = defaultdict(list)

    def add(self, record: ScheduleRecord) -> None:
        self.records[record.id] = record
        self.by_employee_day[(record.employee_id, record.date)].append(record)
        self.by_day[record.date].append(record)
        dates = self.employee_dates[record.employee_id]
        position = bisect.bisect_left(dates, record.date)
        if position == len(dates) or dates[position] != record.date:
            dates.insert(position, record.date)

    def copy(self) -> "_ScheduleIndex":
        clone = _ScheduleIndex()
        clone.records = dict(self.records)
        clone.by_employee_day = defaultdict(
            list, {key: list(value) for key, value in self.by_employee_day.items()}
        )
        clone.by_day = defaultdict(list, {key: list(value) for key, value in self.by_day.items()})
        clone.employee_dates = defaultdict(
            list, {key: list(value) for key, value in self.employee_dates.items()}
        )
        return clone

    def by_employee_and_date(self, employee_id: int, day: date) -> list[ScheduleRecord]:
        return list(self.by_employee_day.get((employee_id, day), ()))

    def by_employee_in_range(self, employee_id: int, start: date, end: date) -> list[ScheduleRecord]:
        dates = self.employee_dates.get(employee_id, [])
        lower = bisect.bisect_left(dates, start)
        upper = bisect.bisect_right(dates, end)
        records: list[ScheduleRecord] = []
        for day in dates[lower:upper]:
            records.extend(self.by_employee_day.get((employee_id, day), ()))
        return records

    def by_date(self, day: date) -> list[ScheduleRecord]:
        return list(self.by_day.get(day, ()))

    def by_date_and_overlap(self, day: date, window: TimeInterval) -> list[ScheduleRecord]:
        return [
            record
            for record in self.by_day.get(day, ())
            if overlaps(interval(record.shift_start, record.shift_end), window)
        ]


class ScheduleSnapshot:
    """Immutable point-in-time view of a repository."""

    def __init__(self, index: _ScheduleIndex) -> None:
        self._index = index

    def __len__(self) -> int:
        return len(self._index.records)

    def all(self) -> list[ScheduleRecord]:
        return sorted(self._index.records.values(), key=lambda record: record.id)

    def by_employee_and_date(self, employee_id: int, day: date) -> list[ScheduleRecord]:
        return self._index.by_employee_and_date(employee_id, day)

    def by_employee_in_range(self, employee_id: int, start: date, end: date) -> list[ScheduleRecord]:
        return self._index.by_employee_in_range(employee_id, start, end)

    def by_date(self, day: date) -> list[ScheduleRecord]:
        return self._index.by_date(day)

    def by_date_and_overlap(self, day: date, window: TimeInterval) -> list[ScheduleRecord]:
        return self._index.by_date_and_overlap(day, window)


class ScheduleRepository:
    """Thread-safe schedule store indexed by employee/date and by date.

    Every read observes every prior insert. ``insert`` is an atomic
    check-and-insert on ``(employee_id, date)``.
    """

    def __init__(self, records: Iterable[ScheduleRecord] = ()) -> None:
        self._lock = threading.RLock()
        self._index = _ScheduleIndex()
        self._next_id = 1
        self.hydrate(records)

    def __len__(self) -> int:
        with self._lock:
            return len(self._index.records)

    def next_id(self) -> int:
        with self._lock:
            return self._next_id

    @staticmethod
    def _check_free(index: _ScheduleIndex, record: ScheduleRecord) -> None:
        if index.by_employee_day.get((record.employee_id, record.date)) or record.id in index.records:
            raise ConflictError(record.employee_id, record.date)

    def insert(self, record: ScheduleRecord) -> int:
        with self._lock:
            self._check_free(self._index, record)
            self._index.add(record)
            self._next_id = max(self._next_id, record.id + 1)
            return record.id

    def hydrate(self, records: Iterable[ScheduleRecord]) -> int:
        """Bulk-load previously persisted records; returns how many were added.

        The batch is all-or-nothing: a conflict inside the batch or with
        existing records raises ``ConflictError`` and leaves the repository
        unchanged.
        """

        count = 0
        with self._lock:
            staged = self._index.copy()
            next_id = self._next_id
            for record in records:
                self._check_free(staged, record)
                staged.add(record)
                next_id = max(next_id, record.id + 1)
                count += 1
            self._index = staged
            self._next_id = next_id
        if count:
            logger.info("Hydrated %d schedule records", count)
        return count

    def snapshot(self) -> ScheduleSnapshot:
        with self._lock:
            return ScheduleSnapshot(self._index.copy())

    def get(self, record_id: int) -> ScheduleRecord | None:
        with self._lock:
            return self._index.records.get(record_id)

    def all(self) -> list[ScheduleRecord]:
        with self._lock:
            return sorted(self._index.records.values(), key=lambda record: record.id)

    def by_employee_and_date(self, employee_id: int, day: date) -> list[ScheduleRecord]:
        with self._lock:
            return self._index.by_employee_and_date(employee_id, day)

    def by_employee_in_range(self, employee_id: int, start: date, end: date) -> list[ScheduleRecord]:
        with self._lock:
            return self._index.by_employee_in_range(employee_id, start, end)

    def by_date(self, day: date) -> list[ScheduleRecord]:
        with self._lock:
            return self._index.by_date(day)

    def by_date_and_overlap(self, day: date, window: TimeInterval) -> list[ScheduleRecord]:
        with self._lock:
            return self._index.by_date_and_overlap(day, window)


__all__ = ["ScheduleReader", "ScheduleRepository", "ScheduleSnapshot"]
