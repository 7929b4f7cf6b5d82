# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Schedule analytics (utilization, overtime, conflict rate).

The aggregation functions are pure: they read schedule days (with their
assignments) and the roster and return plain dicts. AnalyticsService only
loads the rows for a reporting window.

Hours are whole hours per interval, truncated. A day's total counts its
shift window AND every assignment inside it, so a day with both is
counted twice; this matches how the figures have always been reported.
"""

import math
from collections.abc import Iterable, Mapping
from datetime import date, time, timedelta
from typing import Any, Optional

from scheduling.core.config import settings
from scheduling.models.domain import Job, JobType, ScheduleDay, TeamMember, minutes_between
from scheduling.repositories.job_repository import JobRepository
from scheduling.repositories.member_repository import MemberRepository
from scheduling.repositories.schedule_repository import ScheduleRepository
from scheduling.services.conflicts import has_overlap

ALL_TIME_START = date(2020, 1, 1)


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def whole_hours(start: time, end: time) -> int:
    return int(minutes_between(start, end) / 60)


def day_hours(
    day: ScheduleDay, overtime_threshold: int = settings.OVERTIME_THRESHOLD_HOURS
) -> tuple[int, int]:
    """(total, overtime) hours for one schedule day. Overtime comes from the shift window."""
    total = 0
    overtime = 0
    if day.start_time and day.end_time:
        shift = whole_hours(day.start_time, day.end_time)
        total += shift
        if shift > overtime_threshold:
            overtime += shift - overtime_threshold
    for assignment in day.assignments:
        total += whole_hours(assignment.start_time, assignment.end_time)
    return total, overtime


def total_hours(days: Iterable[ScheduleDay]) -> int:
    return sum(day_hours(d)[0] for d in days)


def overtime_hours(days: Iterable[ScheduleDay]) -> int:
    return sum(day_hours(d)[1] for d in days)


def utilization_rate(
    total_assignments: int,
    scheduled_days: int,
    capacity: int = settings.DAILY_CAPACITY,
) -> float:
    """Assignments as a percentage of ``capacity`` jobs per scheduled day."""
    if scheduled_days <= 0:
        return 0.0
    return total_assignments / (scheduled_days * capacity) * 100


def conflict_rate(days: list[ScheduleDay]) -> float:
    """Percentage of schedule days holding at least one pair of overlapping assignments."""
    if not days:
        return 0.0
    conflicted = sum(1 for d in days if has_overlap(d.assignments))
    return conflicted / len(days) * 100


def scheduling_efficiency(rate: float) -> float:
    return max(0.0, 100 - rate)


# ── Report sections ──

def member_stats(
    days: list[ScheduleDay], members: Iterable[TeamMember]
) -> list[dict[str, Any]]:
    stats: list[dict[str, Any]] = []
    for member in members:
        member_days = [d for d in days if d.user_id == member.id]
        assignments = sum(len(d.assignments) for d in member_days)
        hours = [day_hours(d) for d in member_days]
        stats.append(
            {
                "id": member.id,
                "name": member.display_name,
                "email": member.email,
                "role": member.role,
                "scheduled_days": len(member_days),
                "total_assignments": assignments,
                "total_hours": sum(h[0] for h in hours),
                "overtime_hours": sum(h[1] for h in hours),
                "utilization_rate": round_half_up(
                    utilization_rate(assignments, len(member_days))
                ),
            }
        )
    return sorted(stats, key=lambda s: s["total_hours"], reverse=True)


def overall_stats(days: list[ScheduleDay]) -> dict[str, Any]:
    assignments = sum(len(d.assignments) for d in days)
    return {
        "total_schedules": len(days),
        "total_assignments": assignments,
        "total_hours": total_hours(days),
        "overtime_hours": overtime_hours(days),
        "avg_utilization": round_half_up(utilization_rate(assignments, len(days))),
    }


def job_type_distribution(
    days: Iterable[ScheduleDay], jobs: Mapping[str, Job]
) -> dict[str, int]:
    distribution = {job_type.value: 0 for job_type in JobType}
    for day in days:
        for assignment in day.assignments:
            job = jobs.get(assignment.project_id)
            if job is not None:
                distribution[job.job_type.value] += 1
    return distribution


def efficiency_metrics(
    days: list[ScheduleDay], members: list[TeamMember]
) -> dict[str, Any]:
    active = len(members)
    scheduled = len({d.user_id for d in days})
    rate = round_half_up(conflict_rate(days))
    return {
        "schedule_compliance_rate": round_half_up(scheduled / active * 100) if active else 0,
        "conflict_rate": rate,
        "scheduling_efficiency": round_half_up(scheduling_efficiency(rate)),
    }


def report_window(
    time_range: str = "week", today: Optional[date] = None
) -> tuple[date, date]:
    """Sunday-to-Saturday week, calendar month, or everything since 2020."""
    today = today or date.today()
    if time_range == "month":
        start = today.replace(day=1)
        next_month = (start + timedelta(days=32)).replace(day=1)
        return start, next_month - timedelta(days=1)
    if time_range == "all":
        return ALL_TIME_START, today
    start = today - timedelta(days=(today.weekday() + 1) % 7)
    return start, start + timedelta(days=6)


class AnalyticsService:
    """Loads a reporting window and aggregates it."""

    def __init__(
        self,
        schedule_repo: ScheduleRepository,
        member_repo: MemberRepository,
        job_repo: JobRepository,
    ) -> None:
        self._schedules = schedule_repo
        self._members = member_repo
        self._jobs = job_repo

    def report(
        self,
        organization_id: Optional[str] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
        time_range: str = "week",
    ) -> dict[str, Any]:
        if start is None or end is None:
            default_start, default_end = report_window(time_range)
            start = start or default_start
            end = end or default_end
        if end < start:
            raise ValueError("end must be on or after start")

        days = self._schedules.get_all(organization_id=organization_id, start=start, end=end)
        members = self._members.get_all(organization_id=organization_id, active_only=True)
        jobs = {job.id: job for job in self._jobs.get_all(organization_id)}
        return {
            "start": start.isoformat(),
            "end": end.isoformat(),
            "member_stats": member_stats(days, members),
            "overall_stats": overall_stats(days),
            "job_type_distribution": job_type_distribution(days, jobs),
            "efficiency_metrics": efficiency_metrics(days, members),
        }
