"""Exception taxonomy shared by the scheduling services."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from shift_scheduler.schemas.schedule import ValidationResult


class SchedulingError(Exception):
    """Base class for every error raised by the scheduling core."""


class FormatError(SchedulingError, ValueError):
    """Malformed time or date input. The operation is never partially applied."""


class NotFoundError(SchedulingError, LookupError):
    """A referenced employee or store is unknown to the directory."""


class ConflictError(SchedulingError):
    """Another write for the same employee and date won the race.

    Callers should retry the whole validate-then-write sequence.
    """

    def __init__(self, employee_id: int, day: object) -> None:
        super().__init__(f"Employee {employee_id} already has a schedule on {day}.")
        self.employee_id = employee_id
        self.day = day


class ValidationFailure(SchedulingError):
    """One or more ERROR-severity violations refused a schedule."""

    def __init__(self, result: "ValidationResult") -> None:
        messages = "; ".join(violation.message for violation in result.errors)
        super().__init__(f"Schedule validation failed: {messages}")
        self.result = result


__all__ = [
    "ConflictError",
    "FormatError",
    "NotFoundError",
    "SchedulingError",
    "ValidationFailure",
]
