# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
FastAPI dependency injection — wire repositories and services.
"""

from scheduling.repositories.history_repository import HistoryRepository
from scheduling.repositories.instance_repository import InstanceRepository
from scheduling.repositories.job_repository import JobRepository
from scheduling.repositories.member_repository import MemberRepository
from scheduling.repositories.schedule_repository import ScheduleRepository
from scheduling.repositories.template_repository import TemplateRepository
from scheduling.services.analytics import AnalyticsService
from scheduling.services.assignment_planner import AssignmentPlanner
from scheduling.services.recurring_job_generator import RecurringJobGenerator
from scheduling.services.roster_service import RosterService
from scheduling.services.schedule_service import ScheduleService
from scheduling.services.template_service import TemplateService

# ── Singleton repository instances (in-memory stores) ──
_member_repo = MemberRepository()
_job_repo = JobRepository()
_schedule_repo = ScheduleRepository()
_template_repo = TemplateRepository()
_instance_repo = InstanceRepository()
_history_repo = HistoryRepository()

# ── Service instances (with injected dependencies) ──
_roster_service = RosterService(
    member_repo=_member_repo,
    job_repo=_job_repo,
    history_repo=_history_repo,
)
_schedule_service = ScheduleService(
    schedule_repo=_schedule_repo,
    job_repo=_job_repo,
    history_repo=_history_repo,
)
_planner = AssignmentPlanner(
    roster=_roster_service,
    schedule=_schedule_service,
)
_template_service = TemplateService(
    template_repo=_template_repo,
    instance_repo=_instance_repo,
    roster=_roster_service,
    history_repo=_history_repo,
)
_generator = RecurringJobGenerator(
    template_repo=_template_repo,
    instance_repo=_instance_repo,
    roster=_roster_service,
    schedule=_schedule_service,
    history_repo=_history_repo,
)
_analytics_service = AnalyticsService(
    schedule_repo=_schedule_repo,
    member_repo=_member_repo,
    job_repo=_job_repo,
)


# ── FastAPI dependency functions ──
def get_roster_service() -> RosterService:
    return _roster_service


def get_schedule_service() -> ScheduleService:
    return _schedule_service


def get_planner() -> AssignmentPlanner:
    return _planner


def get_template_service() -> TemplateService:
    return _template_service


def get_generator() -> RecurringJobGenerator:
    return _generator


def get_analytics_service() -> AnalyticsService:
    return _analytics_service


def get_member_repo() -> MemberRepository:
    return _member_repo


def get_job_repo() -> JobRepository:
    return _job_repo


def get_schedule_repo() -> ScheduleRepository:
    return _schedule_repo


def get_template_repo() -> TemplateRepository:
    return _template_repo


def get_instance_repo() -> InstanceRepository:
    return _instance_repo


def get_history_repo() -> HistoryRepository:
    return _history_repo
