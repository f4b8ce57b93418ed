"""Ranks roster employees for each shift of a week and proposes staffing."""

from __future__ import annotations

import logging
from datetime import date
from statistics import fmean
from typing import Sequence

from shift_scheduler.repositories.schedule import ScheduleReader
from shift_scheduler.schemas.employee import Employee
from shift_scheduler.schemas.suggestion import (
    RecommendedEmployee,
    Suggestion,
    SuggestionRequirements,
    SuggestionSet,
    SuggestionSummary,
)
from shift_scheduler.services.calculus import is_weekend, week_dates, week_start
from shift_scheduler.services.directory import PreferenceProvider, RosterPreferences
from shift_scheduler.services.rules import RuleSet, ShiftTemplate
from shift_scheduler.services.statistics import WeeklyStatisticsAggregator

logger = logging.getLogger(__name__)


class SuitabilityScorer:
    """Scores how well an employee fits a shift, from 0 (excluded) to 1."""

    def __init__(
        self,
        reader: ScheduleReader,
        rules: RuleSet,
        *,
        average_weekly_hours: float,
        preferences: PreferenceProvider | None = None,
    ) -> None:
        self._reader = reader
        self._statistics = WeeklyStatisticsAggregator(reader)
        self._rules = rules.rules.suggestions
        self._preferences = preferences or RosterPreferences()
        self.average_weekly_hours = average_weekly_hours

    def score(self, employee: Employee, day: date, template: ShiftTemplate) -> float:
        if self._reader.by_employee_and_date(employee.id, day):
            return 0.0

        rules = self._rules
        score = 1.0

        weekly_hours = self._statistics.weekly_hours(employee.id, day)
        if weekly_hours > self.average_weekly_hours:
            score *= rules.overworked_factor
        elif weekly_hours < self.average_weekly_hours * rules.underworked_ratio:
            score *= rules.underworked_factor

        if self._statistics.consecutive_days_ending_before(employee.id, day) >= rules.consecutive_days_threshold:
            score *= rules.consecutive_days_factor

        preference = self._preferences.preference(employee.id, template.code)
        score *= 1 + preference * rules.preference_weight

        return max(0.0, min(score, 1.0))


def roster_average_weekly_hours(reader: ScheduleReader, roster: Sequence[Employee], day: date) -> float:
    if not roster:
        return 0.0
    statistics = WeeklyStatisticsAggregator(reader)
    return fmean(statistics.weekly_hours(employee.id, day) for employee in roster)


class SuggestionGenerator:
    """Advisory week planner. Reads the given snapshot and never writes."""

    def __init__(self, reader: ScheduleReader, rules: RuleSet) -> None:
        self._reader = reader
        self._rules = rules

    def required_staff(
        self, day: date, template: ShiftTemplate, requirements: SuggestionRequirements
    ) -> int:
        staffing = self._rules.rules.minimum_staffing
        if is_weekend(day):
            if requirements.weekend_staffing is not None:
                return requirements.weekend_staffing
            return staffing.weekend
        if template.key in requirements.staffing:
            return requirements.staffing[template.key]
        return staffing.for_shift(template.key, weekend=False)

    def generate(
        self,
        week_start_date: date,
        roster: Sequence[Employee],
        requirements: SuggestionRequirements | None = None,
        *,
        preferences: PreferenceProvider | None = None,
    ) -> SuggestionSet:
        requirements = requirements or SuggestionRequirements()
        monday = week_start(week_start_date)
        average = requirements.average_weekly_hours
        if average is None:
            average = roster_average_weekly_hours(self._reader, roster, monday)
        scorer = SuitabilityScorer(
            self._reader,
            self._rules,
            average_weekly_hours=average,
            preferences=preferences or RosterPreferences(roster),
        )

        suggestions = [
            self._suggest(day, template, roster, requirements, scorer)
            for day in week_dates(monday)
            for template in self._rules.working_templates
        ]
        summary = SuggestionSummary(
            total=len(suggestions),
            fully_staffed=sum(1 for suggestion in suggestions if not suggestion.is_shortage),
            shortages=sum(1 for suggestion in suggestions if suggestion.is_shortage),
            average_confidence=round(fmean(s.confidence for s in suggestions), 3) if suggestions else 0.0,
        )
        logger.info(
            "Generated %d suggestions for week of %s (%d shortages)",
            summary.total,
            monday,
            summary.shortages,
        )
        return SuggestionSet(week_start=monday, suggestions=suggestions, summary=summary)

    def _suggest(
        self,
        day: date,
        template: ShiftTemplate,
        roster: Sequence[Employee],
        requirements: SuggestionRequirements,
        scorer: SuitabilityScorer,
    ) -> Suggestion:
        rules = self._rules.rules.suggestions
        required = self.required_staff(day, template, requirements)

        ranked = sorted(
            ((scorer.score(employee, day, template), employee) for employee in roster),
            key=lambda item: (-item[0], item[1].id),
        )
        usable = [
            RecommendedEmployee(employee_id=employee.id, name=employee.name, score=round(score, 4))
            for score, employee in ranked
            if score > rules.usability_floor
        ]

        if len(usable) < required:
            return Suggestion(
                date=day,
                shift=template,
                required_staff=required,
                recommended_employees=usable,
                confidence=rules.shortage_confidence,
                reasoning="Additional staff or a shift adjustment is needed.",
                issues=[
                    f"Staff shortage: {template.name} on {day} needs {required}, "
                    f"only {len(usable)} available (short by {required - len(usable)})."
                ],
            )

        selected = usable[:required]
        confidence = round(fmean(item.score for item in selected), 3) if selected else 1.0
        return Suggestion(
            date=day,
            shift=template,
            required_staff=required,
            recommended_employees=selected,
            confidence=confidence,
            reasoning=(
                f"Selected {len(selected)} of {len(usable)} available employees "
                "by workload balance, rest pattern and shift preference."
            ),
        )


__all__ = ["SuggestionGenerator", "SuitabilityScorer", "roster_average_weekly_hours"]
