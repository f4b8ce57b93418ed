from datetime import date

from pydantic import BaseModel, Field

from shift_scheduler.services.rules import ShiftTemplate


class SuggestionRequirements(BaseModel):
    """Optional overrides planners can pass when asking for suggestions."""

    staffing: dict[str, int] = Field(default_factory=dict)
    weekend_staffing: int | None = None
    average_weekly_hours: float | None = None


class RecommendedEmployee(BaseModel):
    employee_id: int
    name: str = ""
    score: float


class Suggestion(BaseModel):
    date: date
    shift: ShiftTemplate
    required_staff: int
    recommended_employees: list[RecommendedEmployee] = Field(default_factory=list)
    confidence: float
    reasoning: str
    issues: list[str] = Field(default_factory=list)

    @property
    def is_shortage(self) -> bool:
        return bool(self.issues)


class SuggestionSummary(BaseModel):
    total: int = 0
    fully_staffed: int = 0
    shortages: int = 0
    average_confidence: float = 0.0


class SuggestionSet(BaseModel):
    week_start: date
    suggestions: list[Suggestion] = Field(default_factory=list)
    summary: SuggestionSummary = Field(default_factory=SuggestionSummary)

    @property
    def shortages(self) -> list[Suggestion]:
        return [suggestion for suggestion in self.suggestions if suggestion.is_shortage]
