from datetime import date

import pytest

from shift_scheduler.core.errors import FormatError
from shift_scheduler.services.calculus import (
    CUSTOM_SHIFT,
    TimeInterval,
    classify_shift,
    is_weekend,
    minutes_to_time,
    overlaps,
    parse_date,
    shift_hours,
    time_to_minutes,
    week_dates,
    week_start,
)
from shift_scheduler.services.rules import load_default_rules


def test_time_to_minutes_accepts_day_bounds() -> None:
    assert time_to_minutes("00:00") == 0
    assert time_to_minutes("09:30") == 570
    assert time_to_minutes("24:00") == 1440
    assert minutes_to_time(570) == "09:30"


@pytest.mark.parametrize(
    "value",
    ["9:00", "09:60", "24:30", "25:00", "nine", "", " 09:00", "09:00\n", "\u0660\u0669:\u0660\u0660"],
)
def test_time_to_minutes_rejects_malformed_values(value: str) -> None:
    with pytest.raises(FormatError):
        time_to_minutes(value)


def test_shift_hours_uses_fractional_hours() -> None:
    assert shift_hours("09:00", "17:00") == 8
    assert shift_hours("09:00", "13:30") == 4.5


def test_classify_shift_matches_templates_exactly() -> None:
    templates = load_default_rules().templates

    assert classify_shift("09:00", "13:00", templates) == "MORNING"
    assert classify_shift("13:00", "17:00", templates) == "AFTERNOON"
    assert classify_shift("17:00", "21:00", templates) == "EVENING"
    assert classify_shift("09:00", "21:00", templates) == "FULL_DAY"
    assert classify_shift("09:00", "17:00", templates) == CUSTOM_SHIFT
    assert classify_shift("09:00", "13:30", templates) == CUSTOM_SHIFT


def test_overlaps_treats_intervals_as_half_open() -> None:
    morning = TimeInterval(540, 780)

    assert overlaps(morning, TimeInterval(720, 900))
    assert not overlaps(morning, TimeInterval(780, 1020)), "touching shifts do not overlap"


def test_parse_date_rejects_bad_input() -> None:
    assert parse_date("2025-08-12") == date(2025, 8, 12)
    with pytest.raises(FormatError):
        parse_date("2025-13-01")


def test_week_helpers_use_monday_weeks() -> None:
    tuesday = date(2025, 8, 12)

    assert week_start(tuesday) == date(2025, 8, 11)
    assert week_dates(tuesday)[-1] == date(2025, 8, 17)
    assert is_weekend(date(2025, 8, 16))
    assert not is_weekend(tuesday)
