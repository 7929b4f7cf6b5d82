# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Scheduling Service
==================
Assigns time-boxed restoration jobs to crew members on calendar days,
flags (never blocks) overlapping assignments, and expands recurring job
templates into dated jobs, skipping dates that collide with existing work.

Port: 8005
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from scheduling.controllers.analytics_controller import router as analytics_router
from scheduling.controllers.recurring_controller import router as recurring_router
from scheduling.controllers.roster_controller import router as roster_router
from scheduling.controllers.schedule_controller import router as schedule_router
from scheduling.controllers.system_controller import router as system_router
from scheduling.core.config import settings
from scheduling.core.dependencies import get_member_repo, get_roster_service
from scheduling.core.logging import get_logger
from scheduling.middleware import MetricsMiddleware, RequestIDMiddleware
from scheduling.models.domain import JobType, Priority
from scheduling.repositories.errors import StoreError

logger = get_logger(__name__)


def seed_defaults() -> None:
    """Create a small crew and a few jobs so the service is usable immediately."""
    if get_member_repo().count() > 0:
        return
    roster = get_roster_service()
    org = settings.DEFAULT_ORGANIZATION_ID
    crew = [
        ("alice", "Alice Martin", "alice@company.com", "mitigation_tech"),
        ("bob", "Bob Dupont", "bob@company.com", "recon_tech"),
        ("carol", "Carol Chen", "carol@company.com", "contents_specialist"),
    ]
    for member_id, name, email, role in crew:
        roster.add_member(org, name, email, role, member_id=member_id)
    roster.create_job(org, "Smith basement water extraction", JobType.MITIGATION, Priority.URGENT)
    roster.create_job(org, "Lee kitchen contents pack-out", JobType.CONTENTS, Priority.HIGH)
    roster.create_job(org, "Oak St drywall rebuild", JobType.RECONSTRUCTION, Priority.MEDIUM)
    logger.info("Seeded %d members and 3 jobs", len(crew))


@asynccontextmanager
async def lifespan(application: FastAPI):
    if settings.SEED_DEFAULT_DATA:
        seed_defaults()
    logger.info("Service started: %s v%s", settings.SERVICE_NAME, settings.SERVICE_VERSION)
    yield
    logger.info("Shutting down")


def create_app() -> FastAPI:
    application = FastAPI(
        title="Scheduling Service",
        description="Crew scheduling, conflict detection and recurring job generation.",
        version=settings.SERVICE_VERSION,
        lifespan=lifespan,
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    application.add_middleware(MetricsMiddleware)
    application.add_middleware(RequestIDMiddleware)

    @application.exception_handler(StoreError)
    async def store_error_handler(request: Request, exc: StoreError):
        logger.error("Store write failed: %s", exc)
        return JSONResponse(
            status_code=503,
            content={"error": "store_unavailable", "detail": str(exc)},
        )

    @application.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled exception")
        return JSONResponse(
            status_code=500,
            content={"error": "internal_server_error", "detail": str(exc)},
        )

    application.include_router(system_router)
    application.include_router(roster_router)
    application.include_router(schedule_router)
    application.include_router(recurring_router)
    application.include_router(analytics_router)
    return application


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("scheduling.main:app", host="0.0.0.0", port=settings.SERVICE_PORT)
