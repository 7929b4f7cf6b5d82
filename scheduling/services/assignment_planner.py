# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Drag & drop assignment planning.

A drop is resolved in two steps:

1. ``propose``: a drop on a bare date places the job on that day and is
   done. A drop on a person returns the conflicts a default window would
   cause, without writing anything.
2. ``confirm``: the operator picks the final window. Conflicts are
   reported again but never block the commit ("Assign Anyway").

There is no locking: two operators can both pass the conflict check on a
stale read and both commit. The overlap shows up on the next read.
"""

from datetime import date, time
from typing import Optional

from scheduling.core.config import settings
from scheduling.core.logging import get_logger
from scheduling.metrics.prometheus import CONFLICTS_DETECTED
from scheduling.models.domain import (
    AssignmentProposal,
    CommittedAssignment,
    Interval,
    Placement,
)
from scheduling.services.roster_service import RosterService
from scheduling.services.schedule_service import ScheduleService

logger = get_logger(__name__)


def default_interval() -> Interval:
    return Interval(
        start=time.fromisoformat(settings.DEFAULT_START_TIME),
        end=time.fromisoformat(settings.DEFAULT_END_TIME),
    )


class AssignmentPlanner:
    """Turns a "job dropped on a date/person" gesture into a schedule mutation."""

    def __init__(self, roster: RosterService, schedule: ScheduleService) -> None:
        self._roster = roster
        self._schedule = schedule

    def propose(
        self,
        job_id: str,
        day: date,
        person_id: Optional[str] = None,
    ) -> Placement | AssignmentProposal:
        """Resolve a drop target. Raises KeyError / ValueError."""
        if person_id is None:
            self._roster.place_job(job_id, day)
            return Placement(job_id=job_id, date=day)

        job = self._roster.get_job(job_id)
        member = self._roster.get_assignable_member(person_id)
        window = default_interval()
        conflicts = self._schedule.conflicts_for(person_id, day, window)
        if conflicts:
            CONFLICTS_DETECTED.labels(source="planner").inc(len(conflicts))
            logger.info(
                "Drop conflicts: job=%s, user=%s, date=%s, conflicts=%d",
                job_id,
                person_id,
                day,
                len(conflicts),
            )
        return AssignmentProposal(
            job_id=job.id,
            job_name=job.name,
            person_id=member.id,
            member_name=member.display_name,
            date=day,
            start_time=window.start,
            end_time=window.end,
            conflicts=conflicts,
        )

    def confirm(
        self,
        job_id: str,
        day: date,
        person_id: str,
        start_time: time,
        end_time: time,
        notes: Optional[str] = None,
        acting_user_id: Optional[str] = None,
    ) -> CommittedAssignment:
        """
        Commit the operator's chosen window. The window is validated before
        anything is read or written. Raises ValueError / KeyError, and
        StoreError if a write fails.
        """
        if start_time >= end_time:
            raise ValueError("End time must be after start time")
        interval = Interval(start=start_time, end=end_time)

        job = self._roster.get_job(job_id)
        member = self._roster.get_assignable_member(person_id)
        conflicts = self._schedule.conflicts_for(member.id, day, interval)

        schedule, created = self._schedule.ensure_schedule_day(
            job.organization_id, member.id, day
        )
        assignment = self._schedule.add_assignment(
            schedule,
            project_id=job.id,
            interval=interval,
            notes=notes,
            created_by=acting_user_id,
            source="planner",
        )
        if conflicts:
            logger.warning(
                "Assignment committed over %d conflict(s): user=%s, date=%s",
                len(conflicts),
                member.id,
                day,
            )
        return CommittedAssignment(
            assignment=assignment,
            schedule_day_id=schedule.id,
            schedule_day_created=created,
            conflicts=conflicts,
        )
