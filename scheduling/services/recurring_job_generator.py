# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Recurring job generation.

For every date a template fires on that has no recorded instance yet:
build the template's interval, check it against the assignee's existing
assignments, then either record a skipped instance or create the job,
its schedule day and assignment, and a generated instance.

Dates are processed independently. A failure on one date is logged and
reported, and the loop carries on; nothing is rolled back. Generation is
at-least-once per date: a date whose job was written but whose instance
was not will be generated again on the next run.
"""

from datetime import date
from typing import Any, Optional

from dateutil.relativedelta import relativedelta

from scheduling.core.config import settings
from scheduling.core.logging import get_logger
from scheduling.metrics.prometheus import CONFLICTS_DETECTED, RECURRING_INSTANCES
from scheduling.models.domain import (
    GenerationFailure,
    GenerationOutcome,
    GenerationResult,
    RecurringJobInstance,
    RecurringJobTemplate,
)
from scheduling.repositories.history_repository import HistoryRepository
from scheduling.repositories.instance_repository import InstanceRepository
from scheduling.repositories.template_repository import TemplateRepository
from scheduling.services.conflicts import describe_conflicts
from scheduling.services.recurrence import expand
from scheduling.services.roster_service import RosterService
from scheduling.services.schedule_service import ScheduleService

logger = get_logger(__name__)


class RecurringJobGenerator:
    """Expands templates into dated jobs, skipping dates that collide with existing work."""

    def __init__(
        self,
        template_repo: TemplateRepository,
        instance_repo: InstanceRepository,
        roster: RosterService,
        schedule: ScheduleService,
        history_repo: HistoryRepository,
    ) -> None:
        self._templates = template_repo
        self._instances = instance_repo
        self._roster = roster
        self._schedule = schedule
        self._history = history_repo

    # ── Commands ──

    def generate(
        self,
        template_id: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        acting_user_id: Optional[str] = None,
    ) -> GenerationResult:
        """Generate one template over a window. Raises KeyError / ValueError before any write."""
        template = self._templates.get(template_id)
        if template is None:
            raise KeyError(f"No recurring template found with id '{template_id}'")
        if not template.is_active:
            raise ValueError(f"Recurring template '{template.name}' is paused")

        if start_date is not None and end_date is not None and end_date < start_date:
            raise ValueError("end_date must be on or after start_date")
        # A template that already ended yields an empty default window, not an error.
        window_start, window_end = self.default_window(template, start_date, end_date)
        if template.assigned_to:
            self._roster.get_assignable_member(template.assigned_to)

        recorded = self._instances.dates_for_template(template.id)
        candidates = expand(
            template.recurrence_pattern,
            template.recurrence_day,
            window_start,
            window_end,
            template.start_date,
            template.end_date,
        )

        result = GenerationResult(template_id=template.id)
        for day in candidates:
            if day in recorded:
                continue
            try:
                outcome = self._generate_for_date(template, day, acting_user_id)
            except Exception as exc:
                logger.exception(
                    "Generation failed: template=%s, date=%s",
                    template.id,
                    day,
                    extra={"template_id": template.id, "schedule_date": day},
                )
                RECURRING_INSTANCES.labels(outcome="failed").inc()
                result.failures.append(GenerationFailure(date=day, error=str(exc)))
                continue
            RECURRING_INSTANCES.labels(
                outcome="skipped" if outcome.was_skipped else "generated"
            ).inc()
            result.results.append(outcome)

        self._history.record_event(
            "jobs_generated",
            template.id,
            {
                "start_date": window_start.isoformat(),
                "end_date": window_end.isoformat(),
                "generated": result.generated,
                "skipped": result.skipped,
                "failed": len(result.failures),
            },
        )
        logger.info(
            "Recurring jobs generated: template=%s, generated=%d, skipped=%d, failed=%d",
            template.id,
            result.generated,
            result.skipped,
            len(result.failures),
        )
        return result

    def generate_recurring_jobs(
        self, template_id: str, start_date: date, end_date: date
    ) -> list[GenerationOutcome]:
        """Per-date outcomes for every date persisted in this run."""
        return self.generate(template_id, start_date, end_date).results

    def generate_all_active(
        self,
        organization_id: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        acting_user_id: Optional[str] = None,
    ) -> list[dict[str, Any]]:
        """Run every active template; one summary per template."""
        summaries: list[dict[str, Any]] = []
        for template in self._templates.get_all(organization_id, active_only=True):
            summary: dict[str, Any] = {"template_id": template.id, "name": template.name}
            try:
                result = self.generate(template.id, start_date, end_date, acting_user_id)
            except (KeyError, ValueError) as exc:
                logger.warning("Template not generated: id=%s, reason=%s", template.id, exc)
                summary["error"] = str(exc)
            else:
                summary["generated"] = result.generated
                summary["skipped"] = result.skipped
                summary["failed"] = len(result.failures)
            summaries.append(summary)
        return summaries

    # ── Helpers ──

    @staticmethod
    def default_window(
        template: RecurringJobTemplate,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> tuple[date, date]:
        """Fill a missing window: from today until the template ends, or N months ahead."""
        window_start = start_date or date.today()
        if end_date is not None:
            return window_start, end_date
        if template.end_date is not None:
            return window_start, template.end_date
        return window_start, window_start + relativedelta(
            months=settings.DEFAULT_GENERATION_MONTHS
        )

    def _generate_for_date(
        self,
        template: RecurringJobTemplate,
        day: date,
        acting_user_id: Optional[str],
    ) -> GenerationOutcome:
        candidate = template.interval
        conflicts = []
        if template.assigned_to:
            conflicts = self._schedule.conflicts_for(template.assigned_to, day, candidate)
            if conflicts:
                CONFLICTS_DETECTED.labels(source="generator").inc(len(conflicts))

        if conflicts and template.auto_skip_conflicts:
            reason = describe_conflicts(conflicts)
            self._instances.save(
                RecurringJobInstance(
                    template_id=template.id,
                    scheduled_date=day,
                    was_skipped=True,
                    skip_reason=reason,
                )
            )
            return GenerationOutcome(generated_date=day, was_skipped=True, skip_reason=reason)

        job = self._roster.create_job(
            organization_id=template.organization_id,
            name=template.name,
            job_type=template.job_type,
            priority=template.priority,
            address=template.address,
            description=template.description,
            assigned_to=template.assigned_to,
            scheduled_date=day,
            created_by=acting_user_id or template.created_by,
        )
        if template.assigned_to:
            schedule, _ = self._schedule.ensure_schedule_day(
                template.organization_id, template.assigned_to, day
            )
            self._schedule.add_assignment(
                schedule,
                project_id=job.id,
                interval=candidate,
                notes=f"Generated from recurring template '{template.name}'",
                created_by=acting_user_id or template.created_by,
                source="generator",
            )
        self._instances.save(
            RecurringJobInstance(
                template_id=template.id,
                project_id=job.id,
                scheduled_date=day,
                was_skipped=False,
            )
        )
        return GenerationOutcome(generated_date=day, was_skipped=False)
