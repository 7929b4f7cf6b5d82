# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Schedule days, their assignments and per-day conflict lookups.
Shared by the drag & drop planner and the recurring job generator.
"""

from datetime import date
from typing import Optional

from scheduling.core.logging import get_logger
from scheduling.metrics.prometheus import ASSIGNMENTS_COMMITTED
from scheduling.models.domain import Assignment, Conflict, Interval, ScheduleDay
from scheduling.repositories.errors import DuplicateKeyError
from scheduling.repositories.history_repository import HistoryRepository
from scheduling.repositories.job_repository import JobRepository
from scheduling.repositories.schedule_repository import ScheduleRepository
from scheduling.services.conflicts import find_conflicts

logger = get_logger(__name__)


class ScheduleService:
    """Business logic for schedule days and their assignments."""

    def __init__(
        self,
        schedule_repo: ScheduleRepository,
        job_repo: JobRepository,
        history_repo: HistoryRepository,
    ) -> None:
        self._schedules = schedule_repo
        self._jobs = job_repo
        self._history = history_repo

    # ── Commands ──

    def ensure_schedule_day(
        self, organization_id: str, user_id: str, day: date
    ) -> tuple[ScheduleDay, bool]:
        """Return the (user, day) schedule, creating an available one if missing."""
        existing = self._schedules.get_by_person_date(user_id, day)
        if existing is not None:
            return existing, False
        try:
            schedule = self._schedules.save(
                ScheduleDay(
                    organization_id=organization_id,
                    user_id=user_id,
                    date=day,
                    is_available=True,
                )
            )
        except DuplicateKeyError:
            # Another request created the day between our read and write.
            existing = self._schedules.get_by_person_date(user_id, day)
            if existing is None:
                raise
            return existing, False
        logger.info("Schedule day created: user=%s, date=%s", user_id, day)
        return schedule, True

    def add_assignment(
        self,
        schedule: ScheduleDay,
        project_id: str,
        interval: Interval,
        notes: Optional[str] = None,
        created_by: Optional[str] = None,
        source: str = "planner",
    ) -> Assignment:
        assignment = self._schedules.add_assignment(
            Assignment(
                schedule_id=schedule.id,
                project_id=project_id,
                start_time=interval.start,
                end_time=interval.end,
                notes=notes,
                created_by=created_by,
            )
        )
        ASSIGNMENTS_COMMITTED.labels(source=source).inc()
        self._history.record_event(
            "assignment_committed",
            schedule.user_id,
            {
                "assignment_id": assignment.id,
                "project_id": project_id,
                "date": schedule.date.isoformat(),
                "time": interval.label,
                "source": source,
            },
        )
        logger.info(
            "Assignment committed: user=%s, date=%s, project=%s, time=%s",
            schedule.user_id,
            schedule.date,
            project_id,
            interval.label,
        )
        return assignment

    # ── Queries ──

    def assignments_for(self, user_id: str, day: date) -> list[Assignment]:
        schedule = self._schedules.get_by_person_date(user_id, day)
        return list(schedule.assignments) if schedule else []

    def conflicts_for(self, user_id: str, day: date, candidate: Interval) -> list[Conflict]:
        """Overlaps between ``candidate`` and the user's assignments on ``day``."""
        return find_conflicts(
            candidate, self.assignments_for(user_id, day), self._jobs.names()
        )

    def list_days(
        self,
        organization_id: Optional[str] = None,
        user_id: Optional[str] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> list[ScheduleDay]:
        return self._schedules.get_all(
            organization_id=organization_id, user_id=user_id, start=start, end=end
        )
