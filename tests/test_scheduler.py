import gc
import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import date, timedelta

import pytest

from shift_scheduler.core.errors import ConflictError, FormatError, NotFoundError, ValidationFailure
from shift_scheduler.repositories.schedule import ScheduleRepository
from shift_scheduler.schemas.schedule import OverallStatus, Severity
from shift_scheduler.services.directory import InMemoryEmployeeDirectory
from shift_scheduler.services.notifications import DomainEvent, EventType, InMemoryEventBus
from shift_scheduler.services.rules import RuleSet
from shift_scheduler.services.scheduler import ScheduleContext, ScheduleService
from shift_scheduler.services.special_events import Holiday, InMemorySpecialEvents

from .factories import build_record, build_roster, build_schedule_create


def test_create_schedule_stores_custom_shift_with_staffing_warning(service: ScheduleService) -> None:
    result = service.create_schedule(
        {"employee_id": 1, "store_id": 1, "date": "2025-08-12", "shift_start": "09:00", "shift_end": "17:00"}
    )

    assert result.success
    assert result.record.hours == 8
    assert result.record.shift_type == "CUSTOM"
    assert result.record.status == "SCHEDULED"
    assert result.validation_result.overall_status is OverallStatus.WARNING
    assert [violation.rule for violation in result.record.violation_warnings] == ["minimumStaffing"]
    assert service.repository.by_employee_and_date(1, date(2025, 8, 12)) == [result.record]


def test_double_booking_is_rejected_without_mutation(service: ScheduleService) -> None:
    service.create_schedule(build_schedule_create(shift_start="09:00", shift_end="13:00")).raise_for_status()

    result = service.create_schedule(build_schedule_create(shift_start="17:00", shift_end="21:00"))

    assert not result.success
    assert result.record is None
    assert result.error == "Schedule validation failed"
    assert [(violation.rule, violation.severity) for violation in result.validation_result.errors] == [
        ("employeeAvailability", Severity.ERROR)
    ]
    assert len(service.repository) == 1


def test_seventh_consecutive_day_is_rejected(service: ScheduleService) -> None:
    monday = date(2025, 8, 18)
    for offset in range(6):
        result = service.create_schedule(
            build_schedule_create(employee_id=4, date=monday + timedelta(days=offset), shift_start="09:00", shift_end="13:00")
        )
        assert result.success, result.validation_result.errors

    result = service.create_schedule(
        build_schedule_create(employee_id=4, date=monday + timedelta(days=6), shift_start="09:00", shift_end="13:00")
    )

    assert not result.success
    assert result.validation_result.errors[0].rule == "consecutiveWorkLimits"
    assert result.validation_result.errors[0].details["consecutive_days"] == 6


def test_weekly_hours_overflow_is_stored_with_warning(service: ScheduleService) -> None:
    for day in (11, 12, 13):
        service.create_schedule(
            build_schedule_create(employee_id=2, date=date(2025, 8, day), shift_start="09:00", shift_end="21:00")
        ).raise_for_status()

    result = service.create_schedule(
        build_schedule_create(employee_id=2, date=date(2025, 8, 14), shift_start="09:00", shift_end="17:00")
    )

    assert result.success
    weekly = [
        violation for violation in result.record.violation_warnings if violation.rule == "consecutiveWorkLimits"
    ]
    assert weekly[0].severity is Severity.WARNING
    assert weekly[0].details["total_hours"] == 44
    assert service.weekly_statistics(2, "2025-08-17").total_hours == 44
    assert service.weekly_statistics(2, "2025-08-17").total_shifts == 4


def test_validate_is_a_dry_run(service: ScheduleService) -> None:
    result = service.validate(build_schedule_create(shift_start="08:00", shift_end="17:00"))

    assert result.overall_status is OverallStatus.FAILED
    assert result.errors[0].rule == "basicTimeSlots"
    assert len(service.repository) == 0
    assert service.weekly_statistics(1, date(2025, 8, 12)) is None


@pytest.mark.parametrize(
    "overrides",
    [
        {"shift_start": "9am"},
        {"shift_start": " 09:00"},
        {"shift_end": "25:00"},
        {"date": "2025-13-01"},
        {"shift_start": "17:00", "shift_end": "09:00"},
    ],
)
def test_malformed_input_raises_format_error(service: ScheduleService, overrides: dict) -> None:
    candidate = {"employee_id": 1, "store_id": 1, "date": "2025-08-12", "shift_start": "09:00", "shift_end": "17:00"}
    candidate.update(overrides)

    with pytest.raises(FormatError):
        service.create_schedule(candidate)

    assert len(service.repository) == 0


def test_unknown_references_raise_not_found(rule_set: RuleSet) -> None:
    directory = InMemoryEmployeeDirectory(build_roster(2))
    service = ScheduleService(rules=rule_set, directory=directory)
    assert [employee.id for employee in directory.employees()] == [1, 2]

    with pytest.raises(NotFoundError):
        service.create_schedule(build_schedule_create(employee_id=99))
    with pytest.raises(NotFoundError):
        service.validate(build_schedule_create(employee_id=1, store_id=42))

    assert service.create_schedule(build_schedule_create(employee_id=2)).success


def test_raise_for_status_exposes_validation_result(service: ScheduleService) -> None:
    result = service.create_schedule(build_schedule_create(shift_start="08:00", shift_end="12:00"))

    with pytest.raises(ValidationFailure) as excinfo:
        result.raise_for_status()

    assert excinfo.value.result is result.validation_result


def test_context_supplies_roster_and_calendar(service: ScheduleService) -> None:
    context = ScheduleContext(
        roster=build_roster(3),
        special_events=InMemorySpecialEvents(holidays=[Holiday("ASSUMPTION", date(2025, 8, 15), "Assumption Day")]),
    )

    result = service.create_schedule(
        build_schedule_create(date=date(2025, 8, 15), shift_start="09:00", shift_end="21:00"), context
    )

    assert result.success
    assert [violation.rule for violation in result.validation_result.info] == [
        "fairnessDistribution",
        "specialRequirements",
    ]


class _RacingCalendar:
    """Writes a competing schedule for the same employee while validation runs."""

    def __init__(self, repository: ScheduleRepository) -> None:
        self._repository = repository

    def holiday_on(self, day: date) -> None:
        return None

    def training_events(self, employee_id: int, day: date) -> list:
        self._repository.insert(build_record(id=99, employee_id=employee_id, date=day))
        return []


def test_lost_race_raises_conflict(service: ScheduleService) -> None:
    context = ScheduleContext(special_events=_RacingCalendar(service.repository))

    with pytest.raises(ConflictError):
        service.create_schedule(build_schedule_create(), context)

    assert [record.id for record in service.repository.all()] == [99]


def test_concurrent_creates_for_one_employee_day_store_one_record(service: ScheduleService) -> None:
    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(lambda _: service.create_schedule(build_schedule_create()), range(8)))

    assert sum(result.success for result in results) == 1
    assert len(service.repository.by_employee_and_date(1, date(2025, 8, 12))) == 1


def test_concurrent_creates_for_different_employees_all_succeed(service: ScheduleService) -> None:
    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(
            pool.map(lambda employee_id: service.create_schedule(build_schedule_create(employee_id=employee_id)), range(1, 9))
        )

    assert all(result.success for result in results)
    assert sorted(record.id for record in service.repository.all()) == list(range(1, 9))


def test_events_are_published_for_created_and_rejected(service: ScheduleService, event_bus: InMemoryEventBus) -> None:
    service.create_schedule(build_schedule_create(shift_start="09:00", shift_end="13:00"))
    service.create_schedule(build_schedule_create(shift_start="17:00", shift_end="21:00"))

    created = event_bus.of_type(EventType.SCHEDULE_CREATED)
    rejected = event_bus.of_type(EventType.SCHEDULE_REJECTED)
    assert len(created) == 1
    assert created[0].payload["for_employee"] == "Your shift is scheduled: 2025-08-12 09:00-13:00 (Morning)"
    assert created[0].payload["for_manager"] == "Shift scheduled: employee 1 - 2025-08-12 09:00-13:00"
    assert len(rejected) == 1
    assert rejected[0].payload["violations"][0]["rule"] == "employeeAvailability"


def test_dispatcher_failures_do_not_fail_creation(rule_set: RuleSet, caplog: pytest.LogCaptureFixture) -> None:
    class BrokenDispatcher:
        def publish(self, event: DomainEvent) -> None:
            raise RuntimeError("mail server down")

    service = ScheduleService(rules=rule_set, dispatcher=BrokenDispatcher())

    with caplog.at_level(logging.ERROR, logger="shift_scheduler"):
        result = service.create_schedule(build_schedule_create())

    assert result.success
    assert "Failed to dispatch SCHEDULE_CREATED event" in caplog.text


def test_hydrate_rebuilds_statistics(rule_set: RuleSet) -> None:
    service = ScheduleService(rules=rule_set)

    count = service.hydrate([build_record(id=5), build_record(id=6, date=date(2025, 8, 13))])

    assert count == 2
    assert service.weekly_statistics(1, date(2025, 8, 12)).total_hours == 8
    created = service.create_schedule(build_schedule_create(date=date(2025, 8, 14), shift_start="09:00", shift_end="13:00"))
    assert created.record.id == 7


def test_weekly_statistics_follow_direct_repository_hydration(service: ScheduleService) -> None:
    service.repository.hydrate([build_record(id=1)])

    stats = service.weekly_statistics(1, date(2025, 8, 12))

    assert stats.total_hours == 4
    assert stats.total_shifts == 1


def test_employee_locks_are_released_after_creation(service: ScheduleService) -> None:
    for employee_id in (1, 2, 3):
        service.create_schedule(build_schedule_create(employee_id=employee_id)).raise_for_status()

    gc.collect()

    assert len(service._employee_locks) == 0
