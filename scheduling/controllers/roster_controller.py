# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Controller: Team members and jobs.
Thin HTTP layer — delegates ALL logic to RosterService.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from scheduling.core.dependencies import get_roster_service
from scheduling.models.domain import Job, TeamMember
from scheduling.schemas.scheduling import (
    JobCreateRequest,
    MemberCreateRequest,
    MemberUpdateRequest,
)
from scheduling.services.roster_service import RosterService

router = APIRouter(prefix="/api/v1", tags=["Roster"])


# ── Members ──

@router.post("/members", status_code=201, response_model=TeamMember)
def add_member(
    payload: MemberCreateRequest,
    service: RosterService = Depends(get_roster_service),
):
    """Register a team member who can receive assignments."""
    return service.add_member(
        organization_id=payload.organization_id,
        full_name=payload.full_name,
        email=payload.email,
        role=payload.role,
        member_id=payload.id,
    )


@router.get("/members", response_model=list[TeamMember])
def list_members(
    organization_id: Optional[str] = None,
    include_inactive: bool = Query(default=False),
    service: RosterService = Depends(get_roster_service),
):
    """List team members, active only unless asked otherwise."""
    return service.list_members(organization_id, active_only=not include_inactive)


@router.patch("/members/{member_id}", response_model=TeamMember)
def update_member(
    member_id: str,
    payload: MemberUpdateRequest,
    service: RosterService = Depends(get_roster_service),
):
    """Activate or deactivate a member."""
    try:
        return service.set_active(member_id, payload.is_active)
    except KeyError as e:
        raise HTTPException(status_code=404, detail=str(e))


# ── Jobs ──

@router.post("/jobs", status_code=201, response_model=Job)
def create_job(
    payload: JobCreateRequest,
    service: RosterService = Depends(get_roster_service),
):
    """Create a job that can be dragged onto the schedule."""
    return service.create_job(
        organization_id=payload.organization_id,
        name=payload.name,
        job_type=payload.job_type,
        priority=payload.priority,
        address=payload.address,
        description=payload.description,
        created_by=payload.acting_user_id,
    )


@router.get("/jobs", response_model=list[Job])
def list_jobs(
    organization_id: Optional[str] = None,
    service: RosterService = Depends(get_roster_service),
):
    """List jobs, newest first."""
    return service.list_jobs(organization_id)


@router.get("/jobs/{job_id}", response_model=Job)
def get_job(
    job_id: str,
    service: RosterService = Depends(get_roster_service),
):
    try:
        return service.get_job(job_id)
    except KeyError as e:
        raise HTTPException(status_code=404, detail=str(e))
