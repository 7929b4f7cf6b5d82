# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Repository: Schedule days and their assignments.
Encapsulates all read/write operations on the schedule in-memory store.
Overlapping assignments are accepted as-is. NO business rules here — pure CRUD.
"""

from datetime import date
from typing import Optional

from scheduling.models.domain import Assignment, ScheduleDay
from scheduling.repositories.errors import DuplicateKeyError, StoreError


class ScheduleRepository:
    """In-memory schedule day storage, assignments nested per day."""

    def __init__(self) -> None:
        self._store: dict[str, ScheduleDay] = {}
        self._by_person_date: dict[tuple[str, date], str] = {}

    # ── Read ──

    def get_all(
        self,
        organization_id: Optional[str] = None,
        user_id: Optional[str] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> list[ScheduleDay]:
        days = list(self._store.values())
        if organization_id:
            days = [d for d in days if d.organization_id == organization_id]
        if user_id:
            days = [d for d in days if d.user_id == user_id]
        if start:
            days = [d for d in days if d.date >= start]
        if end:
            days = [d for d in days if d.date <= end]
        return sorted(days, key=lambda d: (d.date, d.user_id))

    def get(self, schedule_id: str) -> Optional[ScheduleDay]:
        return self._store.get(schedule_id)

    def get_by_person_date(self, user_id: str, day: date) -> Optional[ScheduleDay]:
        schedule_id = self._by_person_date.get((user_id, day))
        return self._store.get(schedule_id) if schedule_id else None

    def count(self) -> int:
        return len(self._store)

    def assignment_count(self) -> int:
        return sum(len(d.assignments) for d in self._store.values())

    # ── Write ──

    def save(self, day: ScheduleDay) -> ScheduleDay:
        key = (day.user_id, day.date)
        existing = self._by_person_date.get(key)
        if existing is not None and existing != day.id:
            raise DuplicateKeyError(
                f"Schedule day already exists for user '{day.user_id}' on {day.date}"
            )
        self._store[day.id] = day
        self._by_person_date[key] = day.id
        return day

    def add_assignment(self, assignment: Assignment) -> Assignment:
        day = self._store.get(assignment.schedule_id)
        if day is None:
            raise StoreError(f"Schedule day '{assignment.schedule_id}' does not exist")
        day.assignments.append(assignment)
        return assignment

    # ── Bulk / internal ──

    def clear(self) -> None:
        self._store.clear()
        self._by_person_date.clear()
