# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Controller: Drag & drop assignment, schedule queries, conflict checks, export.
Thin HTTP layer — delegates ALL logic to AssignmentPlanner / ScheduleService.
"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from starlette.responses import Response

from scheduling.core.dependencies import (
    get_job_repo,
    get_member_repo,
    get_planner,
    get_schedule_service,
)
from scheduling.models.domain import (
    CommittedAssignment,
    Conflict,
    Interval,
    Placement,
    ScheduleDay,
)
from scheduling.repositories.job_repository import JobRepository
from scheduling.repositories.member_repository import MemberRepository
from scheduling.schemas.scheduling import (
    AssignmentConfirmRequest,
    ConflictCheckRequest,
    DropRequest,
)
from scheduling.services.assignment_planner import AssignmentPlanner
from scheduling.services.calendar_export import export_filename, export_icalendar
from scheduling.services.schedule_service import ScheduleService

router = APIRouter(prefix="/api/v1/schedule", tags=["Schedule"])


@router.post("/drop")
def drop_job(
    payload: DropRequest,
    planner: AssignmentPlanner = Depends(get_planner),
):
    """Resolve a job dropped on a date, or on a person's row for a date."""
    try:
        outcome = planner.propose(payload.job_id, payload.date, payload.person_id)
    except KeyError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    if isinstance(outcome, Placement):
        return {"status": "placed", **outcome.model_dump(mode="json")}
    return {"status": "needs_confirmation", **outcome.model_dump(mode="json")}


@router.post("/assignments", status_code=201, response_model=CommittedAssignment)
def confirm_assignment(
    payload: AssignmentConfirmRequest,
    planner: AssignmentPlanner = Depends(get_planner),
):
    """Commit a person/date assignment with the operator's chosen window."""
    try:
        return planner.confirm(
            job_id=payload.job_id,
            day=payload.date,
            person_id=payload.person_id,
            start_time=payload.start_time,
            end_time=payload.end_time,
            notes=payload.notes,
            acting_user_id=payload.acting_user_id,
        )
    except KeyError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/conflicts", response_model=list[Conflict])
def check_conflicts(
    payload: ConflictCheckRequest,
    service: ScheduleService = Depends(get_schedule_service),
):
    """List a person's assignments on a date that overlap the given window."""
    if payload.start_time >= payload.end_time:
        raise HTTPException(status_code=400, detail="End time must be after start time")
    candidate = Interval(start=payload.start_time, end=payload.end_time)
    return service.conflicts_for(payload.person_id, payload.date, candidate)


@router.get("/days", response_model=list[ScheduleDay])
def list_schedule_days(
    organization_id: Optional[str] = None,
    person_id: Optional[str] = None,
    start: Optional[date] = Query(default=None, description="YYYY-MM-DD"),
    end: Optional[date] = Query(default=None, description="YYYY-MM-DD"),
    service: ScheduleService = Depends(get_schedule_service),
):
    """Schedule days with their assignments, ordered by date."""
    return service.list_days(organization_id, person_id, start, end)


@router.get("/export.ics")
def export_schedule(
    start: date = Query(..., description="YYYY-MM-DD"),
    end: date = Query(..., description="YYYY-MM-DD"),
    organization_id: Optional[str] = None,
    calendar_name: str = Query(default="Crew"),
    service: ScheduleService = Depends(get_schedule_service),
    member_repo: MemberRepository = Depends(get_member_repo),
    job_repo: JobRepository = Depends(get_job_repo),
):
    """Download committed assignments in a window as an iCalendar file."""
    if end < start:
        raise HTTPException(status_code=400, detail="end must be on or after start")
    days = service.list_days(organization_id, start=start, end=end)
    members = {m.id: m for m in member_repo.get_all(organization_id)}
    jobs = {j.id: j for j in job_repo.get_all(organization_id)}
    body = export_icalendar(days, members, jobs, calendar_name)
    return Response(
        content=body,
        media_type="text/calendar; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{export_filename()}"'},
    )
