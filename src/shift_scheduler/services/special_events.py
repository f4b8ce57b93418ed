"""Holiday calendar and training events consulted by the special-requirements rule."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from datetime import date
from typing import Iterable, Protocol, Sequence

from shift_scheduler.services.calculus import TimeInterval, interval


@dataclass(frozen=True)
class Holiday:
    """Simple representation of a public holiday."""

    code: str
    date: date
    name: str


@dataclass(frozen=True)
class TrainingEvent:
    """A training session or other special event blocking part of a day."""

    employee_id: int
    date: date
    start: str
    end: str
    name: str

    @property
    def interval(self) -> TimeInterval:
        return interval(self.start, self.end)


@dataclass(frozen=True)
class AnnualHoliday:
    """A holiday observed on the same month/day every year."""

    code: str
    month: int
    day: int
    name: str


class SpecialEventsProvider(Protocol):
    def holiday_on(self, day: date) -> Holiday | None: ...

    def training_events(self, employee_id: int, day: date) -> list[TrainingEvent]: ...


class NullSpecialEvents:
    """Provider used when the caller supplies no calendar: nothing is special."""

    def holiday_on(self, day: date) -> Holiday | None:
        return None

    def training_events(self, employee_id: int, day: date) -> list[TrainingEvent]:
        return []


class InMemorySpecialEvents:
    def __init__(
        self,
        holidays: Iterable[Holiday] = (),
        training_events: Iterable[TrainingEvent] = (),
    ) -> None:
        self._holidays: dict[date, Holiday] = {holiday.date: holiday for holiday in holidays}
        self._training: dict[tuple[int, date], list[TrainingEvent]] = defaultdict(list)
        for event in training_events:
            self.add_training_event(event)

    def add_holiday(self, holiday: Holiday) -> None:
        self._holidays[holiday.date] = holiday

    def add_training_event(self, event: TrainingEvent) -> None:
        # Malformed times fail here rather than during validation.
        interval(event.start, event.end)
        self._training[(event.employee_id, event.date)].append(event)

    def holiday_on(self, day: date) -> Holiday | None:
        return self._holidays.get(day)

    def training_events(self, employee_id: int, day: date) -> list[TrainingEvent]:
        return list(self._training.get((employee_id, day), ()))


def get_annual_holidays(year: int, definitions: Sequence[AnnualHoliday]) -> list[Holiday]:
    """Return the holidays described by *definitions* for *year*."""

    return [
        Holiday(definition.code, date(year, definition.month, definition.day), definition.name)
        for definition in definitions
    ]


def iter_annual_holidays(
    start_year: int, end_year: int, definitions: Sequence[AnnualHoliday]
) -> Iterable[Holiday]:
    """Yield holidays between *start_year* and *end_year* (inclusive)."""

    for year in range(start_year, end_year + 1):
        yield from get_annual_holidays(year, definitions)


__all__ = [
    "AnnualHoliday",
    "Holiday",
    "InMemorySpecialEvents",
    "NullSpecialEvents",
    "SpecialEventsProvider",
    "TrainingEvent",
    "get_annual_holidays",
    "iter_annual_holidays",
]
