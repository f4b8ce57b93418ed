"""Six independent rule checks run against a candidate schedule."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Callable, Literal, Sequence

from shift_scheduler.repositories.schedule import ScheduleReader
from shift_scheduler.schemas.employee import Employee
from shift_scheduler.schemas.schedule import ScheduleCreate, Severity, ValidationResult, Violation
from shift_scheduler.services.calculus import (
    MINUTES_PER_DAY,
    TimeInterval,
    classify_shift,
    interval,
    is_weekend,
    overlaps,
    time_to_minutes,
)
from shift_scheduler.services.rules import RuleSet
from shift_scheduler.services.special_events import NullSpecialEvents, SpecialEventsProvider
from shift_scheduler.services.statistics import WeeklyStatisticsAggregator

FairnessScope = Literal["roster", "store"]

BASIC_TIME_SLOTS = "basicTimeSlots"
EMPLOYEE_AVAILABILITY = "employeeAvailability"
MINIMUM_STAFFING = "minimumStaffing"
CONSECUTIVE_WORK_LIMITS = "consecutiveWorkLimits"
FAIRNESS_DISTRIBUTION = "fairnessDistribution"
SPECIAL_REQUIREMENTS = "specialRequirements"


@dataclass(frozen=True)
class ScheduleDraft:
    """A candidate with its derived interval, hours and shift classification."""

    employee_id: int
    store_id: int
    date: date
    shift_start: str
    shift_end: str
    interval: TimeInterval
    hours: float
    shift_type: str

    @classmethod
    def from_candidate(cls, candidate: ScheduleCreate, rules: RuleSet) -> "ScheduleDraft":
        bounds = interval(candidate.shift_start, candidate.shift_end)
        return cls(
            employee_id=candidate.employee_id,
            store_id=candidate.store_id,
            date=candidate.date,
            shift_start=candidate.shift_start,
            shift_end=candidate.shift_end,
            interval=bounds,
            hours=bounds.minutes / 60,
            shift_type=classify_shift(candidate.shift_start, candidate.shift_end, rules.templates),
        )

    @property
    def time_range(self) -> str:
        return f"{self.shift_start}-{self.shift_end}"


@dataclass
class ValidationContext:
    reader: ScheduleReader
    statistics: WeeklyStatisticsAggregator
    rules: RuleSet
    roster: Sequence[Employee] | None = None
    special_events: SpecialEventsProvider = field(default_factory=NullSpecialEvents)
    fairness_scope: FairnessScope = "roster"


def check_basic_time_slots(candidate: ScheduleDraft, context: ValidationContext) -> list[Violation]:
    rules = context.rules.rules.basic_time_slots
    business = rules.business_hours
    violations: list[Violation] = []

    if candidate.interval.start < business.interval.start or candidate.interval.end > business.interval.end:
        violations.append(
            Violation(
                rule=BASIC_TIME_SLOTS,
                severity=Severity.ERROR,
                message=(
                    f"Shift {candidate.time_range} falls outside business hours "
                    f"{business.start}-{business.end}."
                ),
                details={
                    "shift_time": candidate.time_range,
                    "business_hours": f"{business.start}-{business.end}",
                },
            )
        )

    if not rules.min_shift_hours <= candidate.hours <= rules.max_shift_hours:
        violations.append(
            Violation(
                rule=BASIC_TIME_SLOTS,
                severity=Severity.WARNING,
                message=(
                    f"Shift length {candidate.hours:g}h is outside the allowed "
                    f"{rules.min_shift_hours:g}-{rules.max_shift_hours:g}h range."
                ),
                details={
                    "duration": candidate.hours,
                    "min_hours": rules.min_shift_hours,
                    "max_hours": rules.max_shift_hours,
                },
            )
        )
    return violations


def check_employee_availability(candidate: ScheduleDraft, context: ValidationContext) -> list[Violation]:
    violations: list[Violation] = []

    same_day = context.reader.by_employee_and_date(candidate.employee_id, candidate.date)
    if same_day:
        violations.append(
            Violation(
                rule=EMPLOYEE_AVAILABILITY,
                severity=Severity.ERROR,
                message=f"Employee {candidate.employee_id} already has a schedule on {candidate.date}.",
                details={
                    "existing_shifts": [f"{record.shift_start}-{record.shift_end}" for record in same_day],
                },
            )
        )

    previous_day = context.reader.by_employee_and_date(candidate.employee_id, candidate.date - timedelta(days=1))
    if previous_day:
        previous_end = max(time_to_minutes(record.shift_end) for record in previous_day)
        rest_hours = (MINUTES_PER_DAY - previous_end + candidate.interval.start) / 60
        required = context.rules.rules.employee_availability.buffer_time_between_shifts
        if rest_hours < required:
            violations.append(
                Violation(
                    rule=EMPLOYEE_AVAILABILITY,
                    severity=Severity.WARNING,
                    message=f"Only {rest_hours:.1f}h of rest since the previous shift; {required:g}h required.",
                    details={"rest_hours": round(rest_hours, 1), "required": required},
                )
            )
    return violations


def check_minimum_staffing(candidate: ScheduleDraft, context: ValidationContext) -> list[Violation]:
    overlapping = context.reader.by_date_and_overlap(candidate.date, candidate.interval)
    current_staff = len(overlapping) + 1
    required = context.rules.rules.minimum_staffing.for_shift(
        candidate.shift_type, weekend=is_weekend(candidate.date)
    )
    if current_staff >= required:
        return []
    return [
        Violation(
            rule=MINIMUM_STAFFING,
            severity=Severity.WARNING,
            message=f"Only {current_staff} of {required} required staff cover {candidate.time_range} on {candidate.date}.",
            details={
                "current_staff": current_staff,
                "required_staff": required,
                "shift_type": candidate.shift_type,
                "shortage": required - current_staff,
            },
        )
    ]


def check_consecutive_work_limits(candidate: ScheduleDraft, context: ValidationContext) -> list[Violation]:
    limits = context.rules.rules.consecutive_work_limits
    violations: list[Violation] = []

    consecutive_days = context.statistics.consecutive_days_ending_before(candidate.employee_id, candidate.date)
    if consecutive_days >= limits.max_consecutive_days:
        violations.append(
            Violation(
                rule=CONSECUTIVE_WORK_LIMITS,
                severity=Severity.ERROR,
                message=(
                    f"Employee {candidate.employee_id} has already worked {consecutive_days} consecutive days; "
                    f"limit is {limits.max_consecutive_days}."
                ),
                details={"consecutive_days": consecutive_days, "max_allowed": limits.max_consecutive_days},
            )
        )

    weekly_hours = context.statistics.weekly_hours(candidate.employee_id, candidate.date)
    total_hours = weekly_hours + candidate.hours
    if total_hours > limits.weekly_max_hours:
        violations.append(
            Violation(
                rule=CONSECUTIVE_WORK_LIMITS,
                severity=Severity.WARNING,
                message=f"Weekly hours would reach {total_hours:g}h, above the {limits.weekly_max_hours:g}h limit.",
                details={
                    "current_weekly_hours": weekly_hours,
                    "additional_hours": candidate.hours,
                    "total_hours": total_hours,
                    "max_allowed": limits.weekly_max_hours,
                },
            )
        )
    return violations


def check_fairness_distribution(candidate: ScheduleDraft, context: ValidationContext) -> list[Violation]:
    if not context.roster:
        return []

    roster = list(context.roster)
    if context.fairness_scope == "store":
        roster = [employee for employee in roster if employee.store_id == candidate.store_id]

    hours_by_employee = {
        employee.id: context.statistics.weekly_hours(employee.id, candidate.date) for employee in roster
    }
    if candidate.employee_id not in hours_by_employee:
        hours_by_employee[candidate.employee_id] = context.statistics.weekly_hours(
            candidate.employee_id, candidate.date
        )
    hours_by_employee[candidate.employee_id] += candidate.hours

    spread = max(hours_by_employee.values()) - min(hours_by_employee.values())
    limit = context.rules.rules.fairness_distribution.max_weekly_hours_difference
    if spread <= limit:
        return []
    return [
        Violation(
            rule=FAIRNESS_DISTRIBUTION,
            severity=Severity.INFO,
            message=f"Weekly hours spread of {spread:g}h across the roster exceeds {limit:g}h.",
            details={
                "hours_difference": spread,
                "max_allowed_difference": limit,
                "employee_hours": {str(employee_id): hours for employee_id, hours in hours_by_employee.items()},
                "scope": context.fairness_scope,
            },
        )
    ]


def check_special_requirements(candidate: ScheduleDraft, context: ValidationContext) -> list[Violation]:
    rules = context.rules.rules.special_requirements
    violations: list[Violation] = []

    if rules.respect_public_holidays:
        holiday = context.special_events.holiday_on(candidate.date)
        if holiday is not None:
            violations.append(
                Violation(
                    rule=SPECIAL_REQUIREMENTS,
                    severity=Severity.INFO,
                    message=f"{candidate.date} is a public holiday ({holiday.name}).",
                    details={"holiday_code": holiday.code, "holiday_name": holiday.name},
                )
            )

    if rules.accommodate_training_schedules:
        for event in context.special_events.training_events(candidate.employee_id, candidate.date):
            if overlaps(event.interval, candidate.interval):
                violations.append(
                    Violation(
                        rule=SPECIAL_REQUIREMENTS,
                        severity=Severity.WARNING,
                        message=f"Shift overlaps training event '{event.name}' ({event.start}-{event.end}).",
                        details={"training_event": event.name, "training_time": f"{event.start}-{event.end}"},
                    )
                )
    return violations


RuleCheck = Callable[[ScheduleDraft, ValidationContext], list[Violation]]

RULE_CHECKS: tuple[tuple[str, RuleCheck], ...] = (
    (BASIC_TIME_SLOTS, check_basic_time_slots),
    (EMPLOYEE_AVAILABILITY, check_employee_availability),
    (MINIMUM_STAFFING, check_minimum_staffing),
    (CONSECUTIVE_WORK_LIMITS, check_consecutive_work_limits),
    (FAIRNESS_DISTRIBUTION, check_fairness_distribution),
    (SPECIAL_REQUIREMENTS, check_special_requirements),
)


def validate_schedule(candidate: ScheduleDraft, context: ValidationContext) -> ValidationResult:
    """Run every rule check and collect the complete, ordered violation list."""

    violations: list[Violation] = []
    for _rule, check in RULE_CHECKS:
        violations.extend(check(candidate, context))
    return ValidationResult(violations=violations)


__all__ = [
    "RULE_CHECKS",
    "ScheduleDraft",
    "ValidationContext",
    "check_basic_time_slots",
    "check_consecutive_work_limits",
    "check_employee_availability",
    "check_fairness_distribution",
    "check_minimum_staffing",
    "check_special_requirements",
    "validate_schedule",
]
