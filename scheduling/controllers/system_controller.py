# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Controller: System endpoints — health, readiness, metrics.
Pure HTTP layer — no business logic.
"""

from datetime import datetime, timezone

from fastapi import APIRouter
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from scheduling.core.config import settings
from scheduling.core.dependencies import (
    get_history_repo,
    get_member_repo,
    get_schedule_repo,
    get_template_repo,
)

router = APIRouter(tags=["System"])


@router.get("/health")
def health_check():
    """Liveness check for Docker and orchestration."""
    schedule_repo = get_schedule_repo()
    template_repo = get_template_repo()
    return {
        "status": "ok",
        "service": settings.SERVICE_NAME,
        "version": settings.SERVICE_VERSION,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "schedule_days": schedule_repo.count(),
        "assignments": schedule_repo.assignment_count(),
        "active_templates": template_repo.count_active(),
        "events_by_type": get_history_repo().count_by_type(),
    }


@router.get("/health/ready")
def readiness_check():
    """Readiness check: verifies the service can serve traffic."""
    member_repo = get_member_repo()
    return {
        "status": "ready",
        "service": settings.SERVICE_NAME,
        "roster_loaded": member_repo.count() > 0,
    }


@router.get("/metrics")
def prometheus_metrics():
    """Expose Prometheus metrics in OpenMetrics format."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
