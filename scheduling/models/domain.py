# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Domain models — pure data structures, NO FastAPI dependency.

Records mirror the rows exchanged with the hosted store (team members,
jobs, schedule days with their assignments, recurring templates and
their per-date instances). Enumerated string columns are closed enums.
"""

import uuid
from datetime import date, datetime, time, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field, model_validator


def _new_id() -> str:
    return str(uuid.uuid4())


def minutes_between(start: time, end: time) -> int:
    """Signed minutes from ``start`` to ``end`` on the same day."""
    return (end.hour * 60 + end.minute) - (start.hour * 60 + start.minute)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class JobType(str, Enum):
    MITIGATION = "mitigation"
    CONTENTS = "contents"
    RECONSTRUCTION = "reconstruction"


class Priority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class RecurrencePattern(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    MONTHLY = "monthly"


# ── Interval ──

class Interval(BaseModel):
    """Half-open time range [start, end) on a single calendar day."""

    model_config = ConfigDict(frozen=True)

    start: time
    end: time

    @model_validator(mode="after")
    def _start_before_end(self) -> "Interval":
        if self.start >= self.end:
            raise ValueError("End time must be after start time")
        return self

    def overlaps(self, other: "Interval") -> bool:
        return self.start < other.end and other.start < self.end

    @property
    def minutes(self) -> int:
        return minutes_between(self.start, self.end)

    @property
    def label(self) -> str:
        return f"{self.start:%H:%M} - {self.end:%H:%M}"


# ── Roster & jobs ──

class TeamMember(BaseModel):
    """A member of the organization who can receive assignments."""
    id: str = Field(default_factory=_new_id)
    organization_id: str
    full_name: str = Field(..., min_length=1, max_length=255)
    email: str = Field(..., min_length=1, max_length=255)
    role: str = "field_crew"
    is_active: bool = True

    @property
    def display_name(self) -> str:
        return self.full_name or self.email


class Job(BaseModel):
    """A restoration job (project) that can be placed on the schedule."""
    id: str = Field(default_factory=_new_id)
    organization_id: str
    name: str = Field(..., min_length=1, max_length=500)
    job_type: JobType = JobType.MITIGATION
    priority: Priority = Priority.MEDIUM
    address: Optional[str] = None
    description: Optional[str] = None
    assigned_to: Optional[str] = None
    scheduled_date: Optional[date] = None
    created_by: Optional[str] = None
    created_at: str = Field(default_factory=_now)


# ── Schedule ──

class Assignment(BaseModel):
    """A job bound to a time window within a schedule day."""
    id: str = Field(default_factory=_new_id)
    schedule_id: str
    project_id: str
    start_time: time
    end_time: time
    notes: Optional[str] = None
    created_by: Optional[str] = None
    created_at: str = Field(default_factory=_now)

    @model_validator(mode="after")
    def _start_before_end(self) -> "Assignment":
        if self.start_time >= self.end_time:
            raise ValueError("End time must be after start time")
        return self

    @property
    def interval(self) -> Interval:
        return Interval(start=self.start_time, end=self.end_time)


class ScheduleDay(BaseModel):
    """(person, date) record holding availability, shift window and assignments."""
    id: str = Field(default_factory=_new_id)
    organization_id: str
    user_id: str
    date: date
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    is_available: bool = True
    assignments: list[Assignment] = Field(default_factory=list)
    created_at: str = Field(default_factory=_now)


class Conflict(BaseModel):
    """Computed overlap with an existing assignment. Advisory only, never persisted."""
    job: str
    time: str
    assignment_id: Optional[str] = None


# ── Recurring jobs ──

class RecurringJobTemplate(BaseModel):
    """Recurrence rule plus the default payload of the jobs it produces."""
    id: str = Field(default_factory=_new_id)
    organization_id: str
    name: str = Field(..., min_length=1, max_length=500)
    description: Optional[str] = None
    address: Optional[str] = None
    job_type: JobType = JobType.MITIGATION
    priority: Priority = Priority.MEDIUM
    recurrence_pattern: RecurrencePattern = RecurrencePattern.WEEKLY
    recurrence_day: Optional[int] = None
    start_date: date
    end_date: Optional[date] = None
    start_time: time = time(9, 0)
    end_time: time = time(17, 0)
    assigned_to: Optional[str] = None
    auto_skip_conflicts: bool = True
    is_active: bool = True
    created_by: Optional[str] = None
    created_at: str = Field(default_factory=_now)

    @model_validator(mode="after")
    def _check_rule(self) -> "RecurringJobTemplate":
        if self.end_date is not None and self.end_date < self.start_date:
            raise ValueError("end_date must be on or after start_date")
        if self.start_time >= self.end_time:
            raise ValueError("End time must be after start time")
        pattern = self.recurrence_pattern
        if pattern in (RecurrencePattern.WEEKLY, RecurrencePattern.BIWEEKLY):
            if self.recurrence_day is None or not 0 <= self.recurrence_day <= 6:
                raise ValueError(
                    f"{pattern.value} recurrence needs a weekday between 0 (Sunday) and 6 (Saturday)"
                )
        elif pattern is RecurrencePattern.MONTHLY:
            if self.recurrence_day is None or not 1 <= self.recurrence_day <= 31:
                raise ValueError("monthly recurrence needs a day of month between 1 and 31")
        return self

    @property
    def interval(self) -> Interval:
        return Interval(start=self.start_time, end=self.end_time)


class RecurringJobInstance(BaseModel):
    """Per-date record of whether a template produced a job or was skipped."""
    id: str = Field(default_factory=_new_id)
    template_id: str
    project_id: Optional[str] = None
    scheduled_date: date
    was_skipped: bool = False
    skip_reason: Optional[str] = None
    created_at: str = Field(default_factory=_now)


class GenerationOutcome(BaseModel):
    generated_date: date
    was_skipped: bool
    skip_reason: Optional[str] = None


class GenerationFailure(BaseModel):
    date: date
    error: str


class GenerationResult(BaseModel):
    """Outcome of one generation run: persisted dates plus dates that failed."""
    template_id: str
    results: list[GenerationOutcome] = Field(default_factory=list)
    failures: list[GenerationFailure] = Field(default_factory=list)

    @computed_field
    @property
    def generated(self) -> int:
        return sum(1 for r in self.results if not r.was_skipped)

    @computed_field
    @property
    def skipped(self) -> int:
        return sum(1 for r in self.results if r.was_skipped)


# ── Drag & drop planning ──

class Placement(BaseModel):
    """A job assigned to a day but not yet to a person."""
    job_id: str
    date: date


class AssignmentProposal(BaseModel):
    """First half of a drop on a person: conflicts to show before confirming."""
    job_id: str
    job_name: str
    person_id: str
    member_name: str
    date: date
    start_time: time
    end_time: time
    conflicts: list[Conflict] = Field(default_factory=list)

    @computed_field
    @property
    def has_conflicts(self) -> bool:
        return bool(self.conflicts)


class CommittedAssignment(BaseModel):
    """Second half of a drop on a person: what was written."""
    assignment: Assignment
    schedule_day_id: str
    schedule_day_created: bool
    conflicts: list[Conflict] = Field(default_factory=list)
