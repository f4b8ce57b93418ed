from datetime import date

from shift_scheduler.repositories.schedule import ScheduleRepository
from shift_scheduler.services.statistics import WeeklyStatisticsAggregator

from .factories import build_record


def test_weekly_hours_only_counts_the_iso_week(repository: ScheduleRepository) -> None:
    repository.insert(build_record(id=1, date=date(2025, 8, 10), shift_start="09:00", shift_end="21:00"))
    repository.insert(build_record(id=2, date=date(2025, 8, 11)))
    repository.insert(build_record(id=3, date=date(2025, 8, 17), shift_start="13:00", shift_end="21:00"))
    aggregator = WeeklyStatisticsAggregator(repository)

    assert aggregator.weekly_hours(1, date(2025, 8, 14)) == 12
    assert aggregator.weekly_shift_count(1, date(2025, 8, 14)) == 2
    assert aggregator.weekly_hours(2, date(2025, 8, 14)) == 0


def test_consecutive_days_stop_at_first_gap(repository: ScheduleRepository) -> None:
    for index, day in enumerate([4, 6, 7, 8], start=1):
        repository.insert(build_record(id=index, date=date(2025, 8, day)))
    aggregator = WeeklyStatisticsAggregator(repository)

    assert aggregator.consecutive_days_ending_before(1, date(2025, 8, 9)) == 3
    assert aggregator.consecutive_days_ending_before(1, date(2025, 8, 6)) == 0
    assert aggregator.consecutive_days_ending_before(2, date(2025, 8, 9)) == 0


def test_update_and_rebuild_refresh_cached_weeks(repository: ScheduleRepository) -> None:
    aggregator = WeeklyStatisticsAggregator(repository)
    assert aggregator.get(1, date(2025, 8, 12)) is None

    repository.insert(build_record(id=1, date=date(2025, 8, 12)))
    stats = aggregator.update(1, date(2025, 8, 12))

    assert stats.week_start == date(2025, 8, 11)
    assert stats.total_hours == 4
    assert stats.total_shifts == 1
    assert aggregator.get(1, date(2025, 8, 16)).total_hours == stats.total_hours

    repository.insert(build_record(id=2, employee_id=2, date=date(2025, 8, 19)))
    assert aggregator.rebuild(repository.all()) == 2
    assert [(item.employee_id, item.week_start) for item in aggregator.all()] == [
        (1, date(2025, 8, 11)),
        (2, date(2025, 8, 18)),
    ]
