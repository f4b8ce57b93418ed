"""Pure time and calendar helpers used by validation and suggestion code."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, timedelta
from typing import TYPE_CHECKING, Iterable

from shift_scheduler.core.errors import FormatError

if TYPE_CHECKING:
    from shift_scheduler.services.rules import ShiftTemplate

CUSTOM_SHIFT = "CUSTOM"
MINUTES_PER_DAY = 24 * 60

_TIME_PATTERN = re.compile(r"([0-9]{2}):([0-9]{2})")


@dataclass(frozen=True)
class TimeInterval:
    """Half-open ``[start, end)`` interval expressed in minutes after midnight."""

    start: int
    end: int

    @property
    def minutes(self) -> int:
        return self.end - self.start


def time_to_minutes(value: str) -> int:
    """Convert ``HH:MM`` to minutes after midnight. ``24:00`` is accepted."""

    if not isinstance(value, str):
        raise FormatError(f"Expected a HH:MM string, got {value!r}")
    match = _TIME_PATTERN.fullmatch(value)
    if not match:
        raise FormatError(f"Malformed time {value!r}; expected HH:MM")
    hours, minutes = int(match.group(1)), int(match.group(2))
    if minutes > 59 or hours > 24 or (hours == 24 and minutes != 0):
        raise FormatError(f"Time {value!r} is outside 00:00-24:00")
    return hours * 60 + minutes


def minutes_to_time(minutes: int) -> str:
    if not 0 <= minutes <= MINUTES_PER_DAY:
        raise FormatError(f"{minutes} minutes is outside 00:00-24:00")
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def interval(start: str, end: str) -> TimeInterval:
    return TimeInterval(time_to_minutes(start), time_to_minutes(end))


def shift_hours(start: str, end: str) -> float:
    """Return the length of ``start``-``end`` in hours (negative if reversed)."""

    return interval(start, end).minutes / 60


def classify_shift(start: str, end: str, templates: Iterable["ShiftTemplate"]) -> str:
    """Return the key of the template with identical bounds, else ``CUSTOM``."""

    bounds = interval(start, end)
    for template in templates:
        if template.is_rest:
            continue
        if template.interval == bounds:
            return template.key
    return CUSTOM_SHIFT


def overlaps(a: TimeInterval, b: TimeInterval) -> bool:
    return a.start < b.end and b.start < a.end


def parse_date(value: date | str) -> date:
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(value)
    except (TypeError, ValueError) as exc:
        raise FormatError(f"Malformed date {value!r}; expected YYYY-MM-DD") from exc


def week_start(day: date) -> date:
    """Roll back to the Monday of the ISO week containing *day*."""

    return day - timedelta(days=day.weekday())


def week_end(day: date) -> date:
    return week_start(day) + timedelta(days=6)


def week_dates(day: date) -> list[date]:
    start = week_start(day)
    return [start + timedelta(days=offset) for offset in range(7)]


def is_weekend(day: date) -> bool:
    # Saturday is weekday 5, Sunday 6
    return day.weekday() >= 5


__all__ = [
    "CUSTOM_SHIFT",
    "TimeInterval",
    "classify_shift",
    "interval",
    "is_weekend",
    "minutes_to_time",
    "overlaps",
    "parse_date",
    "shift_hours",
    "time_to_minutes",
    "week_dates",
    "week_end",
    "week_start",
]
