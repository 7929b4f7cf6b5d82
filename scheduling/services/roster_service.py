# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Team roster and jobs.
Members and jobs are owned by other parts of the platform; the scheduler
keeps the fields it needs and enforces who may receive new work.
"""

from datetime import date
from typing import Any, Optional

from scheduling.core.logging import get_logger
from scheduling.metrics.prometheus import JOBS_PLACED
from scheduling.models.domain import Job, JobType, Priority, TeamMember
from scheduling.repositories.history_repository import HistoryRepository
from scheduling.repositories.job_repository import JobRepository
from scheduling.repositories.member_repository import MemberRepository

logger = get_logger(__name__)


class RosterService:
    """Business logic for team members and jobs."""

    def __init__(
        self,
        member_repo: MemberRepository,
        job_repo: JobRepository,
        history_repo: HistoryRepository,
    ) -> None:
        self._members = member_repo
        self._jobs = job_repo
        self._history = history_repo

    # ── Members ──

    def add_member(
        self,
        organization_id: str,
        full_name: str,
        email: str,
        role: str = "field_crew",
        member_id: Optional[str] = None,
    ) -> TeamMember:
        fields: dict[str, Any] = {
            "organization_id": organization_id,
            "full_name": full_name,
            "email": email,
            "role": role,
        }
        if member_id:
            fields["id"] = member_id
        member = self._members.save(TeamMember(**fields))
        logger.info("Member added: id=%s, org=%s", member.id, organization_id)
        return member

    def set_active(self, member_id: str, is_active: bool) -> TeamMember:
        """Deactivation stops future assignments; existing schedule rows are kept."""
        member = self.get_member(member_id)
        member.is_active = is_active
        self._members.save(member)
        self._history.record_event(
            "member_activated" if is_active else "member_deactivated",
            member_id,
            {},
        )
        logger.info("Member %s: id=%s", "activated" if is_active else "deactivated", member_id)
        return member

    def get_member(self, member_id: str) -> TeamMember:
        member = self._members.get(member_id)
        if member is None:
            raise KeyError(f"No team member found with id '{member_id}'")
        return member

    def get_assignable_member(self, member_id: str) -> TeamMember:
        """Return the member if they may receive new assignments. Raises KeyError / ValueError."""
        member = self.get_member(member_id)
        if not member.is_active:
            raise ValueError(f"Team member '{member.display_name}' is inactive")
        return member

    def list_members(
        self, organization_id: Optional[str] = None, active_only: bool = True
    ) -> list[TeamMember]:
        return self._members.get_all(organization_id=organization_id, active_only=active_only)

    # ── Jobs ──

    def create_job(
        self,
        organization_id: str,
        name: str,
        job_type: JobType = JobType.MITIGATION,
        priority: Priority = Priority.MEDIUM,
        address: Optional[str] = None,
        description: Optional[str] = None,
        assigned_to: Optional[str] = None,
        scheduled_date: Optional[date] = None,
        created_by: Optional[str] = None,
    ) -> Job:
        job = self._jobs.save(
            Job(
                organization_id=organization_id,
                name=name,
                job_type=job_type,
                priority=priority,
                address=address,
                description=description,
                assigned_to=assigned_to,
                scheduled_date=scheduled_date,
                created_by=created_by,
            )
        )
        logger.info("Job created: id=%s, type=%s", job.id, job.job_type.value)
        return job

    def get_job(self, job_id: str) -> Job:
        job = self._jobs.get(job_id)
        if job is None:
            raise KeyError(f"No job found with id '{job_id}'")
        return job

    def list_jobs(self, organization_id: Optional[str] = None) -> list[Job]:
        return self._jobs.get_all(organization_id)

    def place_job(self, job_id: str, day: date) -> Job:
        """Put a job on a day without a person or a time."""
        job = self.get_job(job_id)
        job.scheduled_date = day
        self._jobs.save(job)
        JOBS_PLACED.inc()
        self._history.record_event("job_placed", job_id, {"date": day.isoformat()})
        logger.info("Job placed: id=%s, date=%s", job_id, day)
        return job
