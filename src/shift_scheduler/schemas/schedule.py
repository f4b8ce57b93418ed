from datetime import date, datetime
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from shift_scheduler.core.errors import ValidationFailure
from shift_scheduler.services.calculus import time_to_minutes


class Severity(str, Enum):
    ERROR = "ERROR"
    WARNING = "WARNING"
    INFO = "INFO"


class OverallStatus(str, Enum):
    FAILED = "FAILED"
    WARNING = "WARNING"
    PASSED = "PASSED"


class ScheduleBase(BaseModel):
    employee_id: int
    store_id: int
    date: date
    shift_start: str
    shift_end: str

    @field_validator("shift_start", "shift_end")
    @classmethod
    def validate_time(cls, value: str) -> str:
        time_to_minutes(value)
        return value

    @model_validator(mode="after")
    def validate_order(self) -> "ScheduleBase":
        if time_to_minutes(self.shift_end) <= time_to_minutes(self.shift_start):
            raise ValueError("shift_end must be later than shift_start")
        return self


class ScheduleCreate(ScheduleBase):
    created_by: str = "system"
    notes: str = ""
    # Client-assigned key for safe retries; stored, never deduplicated here.
    dedup_key: str | None = None


class Violation(BaseModel):
    rule: str
    severity: Severity
    message: str
    details: dict[str, Any] = Field(default_factory=dict)


class ScheduleRecord(ScheduleBase):
    id: int
    shift_type: str
    hours: float
    status: Literal["SCHEDULED"] = "SCHEDULED"
    violation_warnings: list[Violation] = Field(default_factory=list)
    created_at: datetime
    created_by: str = "system"
    notes: str = ""
    dedup_key: str | None = None

    model_config = ConfigDict(from_attributes=True, frozen=True)


_STATUS_BY_SEVERITY: dict[Severity, OverallStatus] = {
    Severity.ERROR: OverallStatus.FAILED,
    Severity.WARNING: OverallStatus.WARNING,
    Severity.INFO: OverallStatus.PASSED,
}
_STATUS_RANK = {OverallStatus.PASSED: 0, OverallStatus.WARNING: 1, OverallStatus.FAILED: 2}


def _overall_status(violations: list[Violation]) -> OverallStatus:
    status = OverallStatus.PASSED
    for violation in violations:
        candidate = _STATUS_BY_SEVERITY[violation.severity]
        if _STATUS_RANK[candidate] > _STATUS_RANK[status]:
            status = candidate
    return status


class ValidationResult(BaseModel):
    violations: list[Violation] = Field(default_factory=list)
    overall_status: OverallStatus = OverallStatus.PASSED

    @model_validator(mode="after")
    def derive_status(self) -> "ValidationResult":
        self.overall_status = _overall_status(self.violations)
        return self

    def _with_severity(self, severity: Severity) -> list[Violation]:
        return [violation for violation in self.violations if violation.severity == severity]

    @property
    def errors(self) -> list[Violation]:
        return self._with_severity(Severity.ERROR)

    @property
    def warnings(self) -> list[Violation]:
        return self._with_severity(Severity.WARNING)

    @property
    def info(self) -> list[Violation]:
        return self._with_severity(Severity.INFO)

    @property
    def has_errors(self) -> bool:
        return self.overall_status is OverallStatus.FAILED

    @property
    def non_blocking(self) -> list[Violation]:
        return [violation for violation in self.violations if violation.severity != Severity.ERROR]


class CreationResult(BaseModel):
    success: bool
    record: ScheduleRecord | None = None
    validation_result: ValidationResult
    error: str | None = None

    def raise_for_status(self) -> "CreationResult":
        if not self.success:
            raise ValidationFailure(self.validation_result)
        return self


class WeeklyStatistics(BaseModel):
    employee_id: int
    week_start: date
    total_hours: float = 0.0
    total_shifts: int = 0
    updated_at: datetime
