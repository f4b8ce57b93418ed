"""Per-employee weekly aggregates derived from the schedule repository."""

from __future__ import annotations

import threading
from datetime import date, datetime, timedelta, timezone
from typing import Iterable

from shift_scheduler.repositories.schedule import ScheduleReader
from shift_scheduler.schemas.schedule import ScheduleRecord, WeeklyStatistics
from shift_scheduler.services.calculus import week_end, week_start


class WeeklyStatisticsAggregator:
    """Computes weekly hours and working streaks from a schedule reader.

    ``weekly_hours`` and ``consecutive_days_ending_before`` always read the
    repository directly. The per-week ``WeeklyStatistics`` entries are a cache
    refreshed by ``update`` and recomputed on every ``get``.
    """

    def __init__(self, reader: ScheduleReader) -> None:
        self._reader = reader
        self._lock = threading.Lock()
        self._cache: dict[tuple[int, date], WeeklyStatistics] = {}

    def records_in_week(self, employee_id: int, any_day: date) -> list[ScheduleRecord]:
        return self._reader.by_employee_in_range(employee_id, week_start(any_day), week_end(any_day))

    def weekly_hours(self, employee_id: int, any_day: date) -> float:
        return sum(record.hours for record in self.records_in_week(employee_id, any_day))

    def weekly_shift_count(self, employee_id: int, any_day: date) -> int:
        return len(self.records_in_week(employee_id, any_day))

    def consecutive_days_ending_before(self, employee_id: int, day: date) -> int:
        streak = 0
        current = day - timedelta(days=1)
        while self._reader.by_employee_and_date(employee_id, current):
            streak += 1
            current -= timedelta(days=1)
        return streak

    def update(self, employee_id: int, any_day: date) -> WeeklyStatistics:
        return self._store(employee_id, any_day, self.records_in_week(employee_id, any_day))

    def _store(self, employee_id: int, any_day: date, records: list[ScheduleRecord]) -> WeeklyStatistics:
        stats = WeeklyStatistics(
            employee_id=employee_id,
            week_start=week_start(any_day),
            total_hours=sum(record.hours for record in records),
            total_shifts=len(records),
            updated_at=datetime.now(timezone.utc),
        )
        with self._lock:
            self._cache[(employee_id, stats.week_start)] = stats
        return stats

    def get(self, employee_id: int, any_day: date) -> WeeklyStatistics | None:
        """Return the week's entry, recomputed from the reader.

        Records loaded into the reader behind the aggregator's back are
        picked up here; a week with no records yields ``None``.
        """

        records = self.records_in_week(employee_id, any_day)
        if not records:
            with self._lock:
                self._cache.pop((employee_id, week_start(any_day)), None)
            return None
        return self._store(employee_id, any_day, records)

    def rebuild(self, records: Iterable[ScheduleRecord]) -> int:
        """Recompute every cached week touched by *records*."""

        keys = {(record.employee_id, week_start(record.date)) for record in records}
        with self._lock:
            self._cache.clear()
        for employee_id, monday in keys:
            self.update(employee_id, monday)
        return len(keys)

    def all(self) -> list[WeeklyStatistics]:
        with self._lock:
            return sorted(self._cache.values(), key=lambda stats: (stats.week_start, stats.employee_id))


__all__ = ["WeeklyStatisticsAggregator"]
