# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Controller: Analytics report and audit history.
Thin HTTP layer — delegates ALL logic to AnalyticsService / HistoryRepository.
"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from scheduling.core.dependencies import get_analytics_service, get_history_repo
from scheduling.repositories.history_repository import HistoryRepository
from scheduling.services.analytics import AnalyticsService

router = APIRouter(prefix="/api/v1", tags=["Analytics"])


@router.get("/analytics")
def get_analytics(
    organization_id: Optional[str] = None,
    time_range: str = Query(default="week", pattern="^(week|month|all)$"),
    start: Optional[date] = Query(default=None, description="YYYY-MM-DD"),
    end: Optional[date] = Query(default=None, description="YYYY-MM-DD"),
    service: AnalyticsService = Depends(get_analytics_service),
):
    """Utilization, overtime, job mix and conflict rate for a window."""
    try:
        return service.report(organization_id, start, end, time_range)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/history")
def get_history(
    subject: Optional[str] = None,
    event_type: Optional[str] = None,
    limit: Optional[int] = Query(default=None, ge=1, description="Max results"),
    history_repo: HistoryRepository = Depends(get_history_repo),
):
    """Audit log for all scheduling events."""
    return history_repo.get_all(subject=subject, event_type=event_type, limit=limit)
