"""Read-only employee directory collaborator and preference lookups."""

from __future__ import annotations

from typing import Iterable, Protocol

from shift_scheduler.schemas.employee import Employee


class EmployeeDirectory(Protocol):
    def get_employee(self, employee_id: int) -> Employee | None: ...

    def has_store(self, store_id: int) -> bool: ...


class PreferenceProvider(Protocol):
    def preference(self, employee_id: int, shift_code: str) -> float: ...


class InMemoryEmployeeDirectory:
    def __init__(self, employees: Iterable[Employee] = (), store_ids: Iterable[int] | None = None) -> None:
        self._employees = {employee.id: employee for employee in employees}
        if store_ids is None:
            store_ids = {employee.store_id for employee in self._employees.values() if employee.store_id is not None}
        self._store_ids = set(store_ids)

    def get_employee(self, employee_id: int) -> Employee | None:
        return self._employees.get(employee_id)

    def has_store(self, store_id: int) -> bool:
        return store_id in self._store_ids

    def employees(self) -> list[Employee]:
        return sorted(self._employees.values(), key=lambda employee: employee.id)


class RosterPreferences:
    """Preferences read from ``Employee.preferences``; absent entries are neutral."""

    def __init__(self, roster: Iterable[Employee] = ()) -> None:
        self._preferences = {employee.id: dict(employee.preferences) for employee in roster}

    def preference(self, employee_id: int, shift_code: str) -> float:
        value = self._preferences.get(employee_id, {}).get(shift_code, 0.0)
        return max(-1.0, min(1.0, value))


__all__ = [
    "EmployeeDirectory",
    "InMemoryEmployeeDirectory",
    "PreferenceProvider",
    "RosterPreferences",
]
