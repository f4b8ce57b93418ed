"""Schedule creation workflow and the public entry points of the core."""

from __future__ import annotations

import logging
import threading
import weakref
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any, Iterable, Mapping, Sequence

from pydantic import ValidationError

from shift_scheduler.core.errors import FormatError, NotFoundError
from shift_scheduler.repositories.schedule import ScheduleRepository
from shift_scheduler.schemas.employee import Employee
from shift_scheduler.schemas.schedule import (
    CreationResult,
    ScheduleCreate,
    ScheduleRecord,
    ValidationResult,
    WeeklyStatistics,
)
from shift_scheduler.schemas.suggestion import SuggestionRequirements, SuggestionSet
from shift_scheduler.services.calculus import parse_date
from shift_scheduler.services.directory import EmployeeDirectory, PreferenceProvider
from shift_scheduler.services.notifications import (
    DomainEvent,
    EventDispatcher,
    EventType,
    NullDispatcher,
    emit,
)
from shift_scheduler.services.rules import RuleSet, load_default_rules
from shift_scheduler.services.special_events import NullSpecialEvents, SpecialEventsProvider
from shift_scheduler.services.statistics import WeeklyStatisticsAggregator
from shift_scheduler.services.suggestions import SuggestionGenerator
from shift_scheduler.services.validation import (
    FairnessScope,
    ScheduleDraft,
    ValidationContext,
    validate_schedule,
)

logger = logging.getLogger(__name__)


@dataclass
class ScheduleContext:
    """Per-call inputs: the roster for fairness and the special-events calendar."""

    roster: Sequence[Employee] | None = None
    special_events: SpecialEventsProvider | None = None
    fairness_scope: FairnessScope = "roster"


def coerce_candidate(candidate: ScheduleCreate | Mapping[str, Any]) -> ScheduleCreate:
    if isinstance(candidate, ScheduleCreate):
        return candidate
    try:
        return ScheduleCreate.model_validate(candidate)
    except ValidationError as exc:
        raise FormatError(f"Invalid schedule input: {exc}") from exc


class ScheduleService:
    def __init__(
        self,
        repository: ScheduleRepository | None = None,
        *,
        rules: RuleSet | None = None,
        directory: EmployeeDirectory | None = None,
        special_events: SpecialEventsProvider | None = None,
        dispatcher: EventDispatcher | None = None,
        preferences: PreferenceProvider | None = None,
    ) -> None:
        self.repository = repository if repository is not None else ScheduleRepository()
        self.rules = rules or load_default_rules()
        self.statistics = WeeklyStatisticsAggregator(self.repository)
        self.directory = directory
        self.special_events = special_events or NullSpecialEvents()
        self.dispatcher = dispatcher or NullDispatcher()
        self.preferences = preferences
        self._locks_guard = threading.Lock()
        # Entries vanish once no caller holds the lock.
        self._employee_locks: weakref.WeakValueDictionary[int, threading.Lock] = weakref.WeakValueDictionary()
        self._id_lock = threading.Lock()
        self.statistics.rebuild(self.repository.all())

    def _employee_lock(self, employee_id: int) -> threading.Lock:
        with self._locks_guard:
            lock = self._employee_locks.get(employee_id)
            if lock is None:
                lock = threading.Lock()
                self._employee_locks[employee_id] = lock
            return lock

    def _check_references(self, candidate: ScheduleCreate) -> None:
        if self.directory is None:
            return
        if self.directory.get_employee(candidate.employee_id) is None:
            raise NotFoundError(f"Employee {candidate.employee_id} not found")
        if not self.directory.has_store(candidate.store_id):
            raise NotFoundError(f"Store {candidate.store_id} not found")

    def _validation_context(self, context: ScheduleContext | None) -> ValidationContext:
        context = context or ScheduleContext()
        return ValidationContext(
            reader=self.repository,
            statistics=self.statistics,
            rules=self.rules,
            roster=context.roster,
            special_events=context.special_events or self.special_events,
            fairness_scope=context.fairness_scope,
        )

    def validate(
        self,
        candidate: ScheduleCreate | Mapping[str, Any],
        context: ScheduleContext | None = None,
    ) -> ValidationResult:
        """Dry-run every rule check without writing anything."""

        candidate = coerce_candidate(candidate)
        self._check_references(candidate)
        draft = ScheduleDraft.from_candidate(candidate, self.rules)
        return validate_schedule(draft, self._validation_context(context))

    def create_schedule(
        self,
        candidate: ScheduleCreate | Mapping[str, Any],
        context: ScheduleContext | None = None,
    ) -> CreationResult:
        candidate = coerce_candidate(candidate)
        self._check_references(candidate)
        draft = ScheduleDraft.from_candidate(candidate, self.rules)
        logger.debug("Creating schedule for employee %s on %s", draft.employee_id, draft.date)

        with self._employee_lock(candidate.employee_id):
            result = validate_schedule(draft, self._validation_context(context))
            if result.has_errors:
                logger.info(
                    "Rejected schedule for employee %s on %s: %s",
                    draft.employee_id,
                    draft.date,
                    ", ".join(violation.rule for violation in result.errors),
                )
                emit(
                    self.dispatcher,
                    DomainEvent(
                        EventType.SCHEDULE_REJECTED,
                        {
                            "employee_id": draft.employee_id,
                            "store_id": draft.store_id,
                            "date": draft.date.isoformat(),
                            "shift_time": draft.time_range,
                            "violations": [violation.model_dump(mode="json") for violation in result.violations],
                        },
                    ),
                )
                return CreationResult(
                    success=False,
                    validation_result=result,
                    error="Schedule validation failed",
                )

            with self._id_lock:
                record = ScheduleRecord(
                    id=self.repository.next_id(),
                    employee_id=draft.employee_id,
                    store_id=draft.store_id,
                    date=draft.date,
                    shift_start=draft.shift_start,
                    shift_end=draft.shift_end,
                    shift_type=draft.shift_type,
                    hours=draft.hours,
                    violation_warnings=result.non_blocking,
                    created_at=datetime.now(timezone.utc),
                    created_by=candidate.created_by,
                    notes=candidate.notes,
                    dedup_key=candidate.dedup_key,
                )
                self.repository.insert(record)
            self.statistics.update(record.employee_id, record.date)

        logger.info(
            "Created schedule %s for employee %s on %s (%s %s)",
            record.id,
            record.employee_id,
            record.date,
            record.shift_type,
            draft.time_range,
        )
        emit(self.dispatcher, DomainEvent(EventType.SCHEDULE_CREATED, self._created_payload(record)))
        return CreationResult(success=True, record=record, validation_result=result)

    def _created_payload(self, record: ScheduleRecord) -> dict[str, Any]:
        template = self.rules.template(record.shift_type)
        label = template.name if template else record.shift_type
        time_range = f"{record.shift_start}-{record.shift_end}"
        return {
            "schedule_id": record.id,
            "employee_id": record.employee_id,
            "store_id": record.store_id,
            "date": record.date.isoformat(),
            "shift_type": record.shift_type,
            "hours": record.hours,
            "warnings": [violation.model_dump(mode="json") for violation in record.violation_warnings],
            "for_employee": f"Your shift is scheduled: {record.date} {time_range} ({label})",
            "for_manager": f"Shift scheduled: employee {record.employee_id} - {record.date} {time_range}",
        }

    def generate_suggestions(
        self,
        week_start: date | str,
        roster: Sequence[Employee],
        requirements: SuggestionRequirements | None = None,
    ) -> SuggestionSet:
        snapshot = self.repository.snapshot()
        generator = SuggestionGenerator(snapshot, self.rules)
        suggestion_set = generator.generate(
            parse_date(week_start), roster, requirements, preferences=self.preferences
        )
        for suggestion in suggestion_set.shortages:
            emit(
                self.dispatcher,
                DomainEvent(
                    EventType.SHORTAGE_DETECTED,
                    {
                        "date": suggestion.date.isoformat(),
                        "shift": suggestion.shift.key,
                        "required_staff": suggestion.required_staff,
                        "available_staff": len(suggestion.recommended_employees),
                        "issues": list(suggestion.issues),
                    },
                ),
            )
        return suggestion_set

    def hydrate(self, records: Iterable[ScheduleRecord]) -> int:
        count = self.repository.hydrate(records)
        self.statistics.rebuild(self.repository.all())
        return count

    def weekly_statistics(self, employee_id: int, any_day: date | str) -> WeeklyStatistics | None:
        return self.statistics.get(employee_id, parse_date(any_day))


__all__ = ["ScheduleContext", "ScheduleService", "coerce_candidate"]
