from shift_scheduler.core.errors import (
    ConflictError,
    FormatError,
    NotFoundError,
    SchedulingError,
    ValidationFailure,
)
from shift_scheduler.repositories.schedule import ScheduleRepository
from shift_scheduler.schemas.employee import Employee
from shift_scheduler.schemas.schedule import (
    CreationResult,
    OverallStatus,
    ScheduleCreate,
    ScheduleRecord,
    Severity,
    ValidationResult,
    Violation,
)
from shift_scheduler.schemas.suggestion import Suggestion, SuggestionRequirements, SuggestionSet
from shift_scheduler.services.scheduler import ScheduleContext, ScheduleService

__all__ = [
    "ConflictError",
    "CreationResult",
    "Employee",
    "FormatError",
    "NotFoundError",
    "OverallStatus",
    "ScheduleContext",
    "ScheduleCreate",
    "ScheduleRecord",
    "ScheduleRepository",
    "ScheduleService",
    "SchedulingError",
    "Severity",
    "Suggestion",
    "SuggestionRequirements",
    "SuggestionSet",
    "ValidationFailure",
    "ValidationResult",
    "Violation",
]
