# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Request / Response schemas — API contract definitions.
These are Pydantic models used ONLY at the controller (HTTP) boundary.
"""

from datetime import date, time
from typing import Optional

from pydantic import BaseModel, Field

from scheduling.core.config import settings
from scheduling.models.domain import (
    GenerationOutcome,
    JobType,
    Priority,
    RecurrencePattern,
)


# ── Roster Schemas ──

class MemberCreateRequest(BaseModel):
    id: Optional[str] = Field(default=None, min_length=1, max_length=255)
    organization_id: str = Field(default=settings.DEFAULT_ORGANIZATION_ID, min_length=1)
    full_name: str = Field(..., min_length=1, max_length=255)
    email: str = Field(..., min_length=1, max_length=255)
    role: str = Field(default="field_crew", min_length=1, max_length=64)


class MemberUpdateRequest(BaseModel):
    is_active: bool


class JobCreateRequest(BaseModel):
    organization_id: str = Field(default=settings.DEFAULT_ORGANIZATION_ID, min_length=1)
    name: str = Field(..., min_length=1, max_length=500)
    job_type: JobType = JobType.MITIGATION
    priority: Priority = Priority.MEDIUM
    address: Optional[str] = Field(default=None, max_length=1000)
    description: Optional[str] = Field(default=None, max_length=5000)
    acting_user_id: Optional[str] = None


# ── Schedule Schemas ──

class DropRequest(BaseModel):
    """A job dropped on a calendar cell: a bare date, or a date in a person's row."""
    job_id: str = Field(..., min_length=1)
    date: date
    person_id: Optional[str] = Field(default=None, min_length=1)


class AssignmentConfirmRequest(BaseModel):
    job_id: str = Field(..., min_length=1)
    date: date
    person_id: str = Field(..., min_length=1)
    start_time: time
    end_time: time
    notes: Optional[str] = Field(default=None, max_length=5000)
    acting_user_id: Optional[str] = None


class ConflictCheckRequest(BaseModel):
    person_id: str = Field(..., min_length=1)
    date: date
    start_time: time
    end_time: time


# ── Recurring Template Schemas ──

class TemplateCreateRequest(BaseModel):
    organization_id: str = Field(default=settings.DEFAULT_ORGANIZATION_ID, min_length=1)
    name: str = Field(..., min_length=1, max_length=500)
    description: Optional[str] = Field(default=None, max_length=5000)
    address: Optional[str] = Field(default=None, max_length=1000)
    job_type: JobType = JobType.MITIGATION
    priority: Priority = Priority.MEDIUM
    recurrence_pattern: RecurrencePattern = RecurrencePattern.WEEKLY
    recurrence_day: Optional[int] = Field(default=None, ge=0, le=31)
    start_date: date
    end_date: Optional[date] = None
    start_time: time = time(9, 0)
    end_time: time = time(17, 0)
    assigned_to: Optional[str] = None
    auto_skip_conflicts: bool = True
    acting_user_id: Optional[str] = None


class GenerateRequest(BaseModel):
    """Window for "Generate Now". Missing bounds fall back to today / template end."""
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    acting_user_id: Optional[str] = None


class GenerateAllRequest(GenerateRequest):
    organization_id: Optional[str] = None


class GenerateResponse(BaseModel):
    template_id: str
    generated: int
    skipped: int
    results: list[GenerationOutcome]
    failures: list[dict]
    message: str
