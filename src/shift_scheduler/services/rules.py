"""Domain representations for scheduling rules and loaders."""

from __future__ import annotations

import json
from dataclasses import dataclass
from functools import lru_cache
from importlib import resources
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from shift_scheduler.core.config import Settings
from shift_scheduler.services.calculus import TimeInterval, interval, time_to_minutes


class BusinessHours(BaseModel):
    start: str
    end: str

    @field_validator("start", "end")
    @classmethod
    def validate_time(cls, value: str) -> str:
        time_to_minutes(value)
        return value

    @model_validator(mode="after")
    def validate_order(self) -> "BusinessHours":
        if time_to_minutes(self.start) >= time_to_minutes(self.end):
            raise ValueError("business hours must start before they end")
        return self

    @property
    def interval(self) -> TimeInterval:
        return interval(self.start, self.end)


class BasicTimeSlotRules(BaseModel):
    business_hours: BusinessHours
    min_shift_hours: float = 4
    max_shift_hours: float = 12

    @model_validator(mode="after")
    def validate_bounds(self) -> "BasicTimeSlotRules":
        if self.min_shift_hours > self.max_shift_hours:
            raise ValueError("min_shift_hours cannot exceed max_shift_hours")
        return self


class ShiftTemplate(BaseModel):
    key: str
    name: str
    code: str
    start: str | None = None
    end: str | None = None

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def validate_times(self) -> "ShiftTemplate":
        if (self.start is None) != (self.end is None):
            raise ValueError(f"shift template {self.key} needs both start and end, or neither")
        if self.start is not None and self.end is not None:
            if time_to_minutes(self.start) >= time_to_minutes(self.end):
                raise ValueError(f"shift template {self.key} must start before it ends")
        return self

    @property
    def is_rest(self) -> bool:
        return self.start is None

    @property
    def interval(self) -> TimeInterval | None:
        if self.start is None or self.end is None:
            return None
        return interval(self.start, self.end)

    @property
    def hours(self) -> float:
        bounds = self.interval
        return bounds.minutes / 60 if bounds else 0.0


class EmployeeAvailabilityRules(BaseModel):
    buffer_time_between_shifts: float = 8


class MinimumStaffingRules(BaseModel):
    by_shift: dict[str, int] = Field(default_factory=dict)
    other: int = 2
    weekend: int = 4

    def for_shift(self, shift_type: str, *, weekend: bool) -> int:
        if weekend:
            return self.weekend
        return self.by_shift.get(shift_type, self.other)


class ConsecutiveWorkRules(BaseModel):
    max_consecutive_days: int = 6
    weekly_max_hours: float = 40


class FairnessRules(BaseModel):
    max_weekly_hours_difference: float = 8


class SpecialRequirementRules(BaseModel):
    respect_public_holidays: bool = True
    accommodate_training_schedules: bool = True


class SuggestionRules(BaseModel):
    usability_floor: float = 0.5
    shortage_confidence: float = 0.3
    overworked_factor: float = 0.7
    underworked_factor: float = 1.3
    underworked_ratio: float = 0.8
    consecutive_days_threshold: int = 5
    consecutive_days_factor: float = 0.6
    preference_weight: float = 0.2


class SchedulingRules(BaseModel):
    basic_time_slots: BasicTimeSlotRules
    shift_templates: list[ShiftTemplate]
    employee_availability: EmployeeAvailabilityRules = Field(default_factory=EmployeeAvailabilityRules)
    minimum_staffing: MinimumStaffingRules = Field(default_factory=MinimumStaffingRules)
    consecutive_work_limits: ConsecutiveWorkRules = Field(default_factory=ConsecutiveWorkRules)
    fairness_distribution: FairnessRules = Field(default_factory=FairnessRules)
    special_requirements: SpecialRequirementRules = Field(default_factory=SpecialRequirementRules)
    suggestions: SuggestionRules = Field(default_factory=SuggestionRules)

    @model_validator(mode="after")
    def validate_templates(self) -> "SchedulingRules":
        keys = [template.key for template in self.shift_templates]
        if len(keys) != len(set(keys)):
            raise ValueError("shift template keys must be unique")
        return self


@dataclass(frozen=True)
class RuleSet:
    """Wrapper used by the scheduler to access typed rules."""

    rules: SchedulingRules
    name: str = "Default Store Rule Set"
    version: str = "v1"

    @property
    def templates(self) -> list[ShiftTemplate]:
        return self.rules.shift_templates

    @property
    def working_templates(self) -> list[ShiftTemplate]:
        return [template for template in self.rules.shift_templates if not template.is_rest]

    def template(self, key: str) -> ShiftTemplate | None:
        for template in self.rules.shift_templates:
            if template.key == key:
                return template
        return None


def _rule_set_from_payload(payload: dict) -> RuleSet:
    return RuleSet(
        rules=SchedulingRules.model_validate(payload["rules"]),
        name=payload.get("name", "Default Store Rule Set"),
        version=payload.get("version", "v1"),
    )


def _load_rules_from_json() -> RuleSet:
    with resources.files("shift_scheduler.services.data").joinpath("default_rules.json").open(
        "r", encoding="utf-8"
    ) as handle:
        payload = json.load(handle)
    return _rule_set_from_payload(payload)


@lru_cache(maxsize=1)
def load_default_rules() -> RuleSet:
    """Return the default rule set bundled with the application."""

    return _load_rules_from_json()


def load_rules_file(path: Path) -> RuleSet:
    with path.open("r", encoding="utf-8") as handle:
        payload = json.load(handle)
    return _rule_set_from_payload(payload)


def load_rules(settings: Settings) -> RuleSet:
    """Return the configured rule set, falling back to the bundled defaults."""

    if settings.rules_path is not None:
        return load_rules_file(settings.rules_path)
    return load_default_rules()
