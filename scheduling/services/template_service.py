# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Recurring job templates (create, list, pause/activate, delete).
"""

from datetime import date, time
from typing import Any, Optional

from scheduling.core.logging import get_logger
from scheduling.metrics.prometheus import ACTIVE_TEMPLATES, TEMPLATES_CREATED
from scheduling.models.domain import (
    JobType,
    Priority,
    RecurrencePattern,
    RecurringJobInstance,
    RecurringJobTemplate,
)
from scheduling.repositories.history_repository import HistoryRepository
from scheduling.repositories.instance_repository import InstanceRepository
from scheduling.repositories.template_repository import TemplateRepository
from scheduling.services.recurrence import recurrence_label
from scheduling.services.roster_service import RosterService

logger = get_logger(__name__)


class TemplateService:
    """Business logic for recurring job templates."""

    def __init__(
        self,
        template_repo: TemplateRepository,
        instance_repo: InstanceRepository,
        roster: RosterService,
        history_repo: HistoryRepository,
    ) -> None:
        self._templates = template_repo
        self._instances = instance_repo
        self._roster = roster
        self._history = history_repo

    # ── Commands ──

    def create_template(
        self,
        organization_id: str,
        name: str,
        recurrence_pattern: RecurrencePattern,
        start_date: date,
        recurrence_day: Optional[int] = None,
        end_date: Optional[date] = None,
        start_time: time = time(9, 0),
        end_time: time = time(17, 0),
        job_type: JobType = JobType.MITIGATION,
        priority: Priority = Priority.MEDIUM,
        address: Optional[str] = None,
        description: Optional[str] = None,
        assigned_to: Optional[str] = None,
        auto_skip_conflicts: bool = True,
        created_by: Optional[str] = None,
    ) -> RecurringJobTemplate:
        """Validate and store a template. Raises ValueError / KeyError."""
        if assigned_to:
            self._roster.get_assignable_member(assigned_to)

        template = RecurringJobTemplate(
            organization_id=organization_id,
            name=name,
            description=description,
            address=address,
            job_type=job_type,
            priority=priority,
            recurrence_pattern=recurrence_pattern,
            recurrence_day=recurrence_day,
            start_date=start_date,
            end_date=end_date,
            start_time=start_time,
            end_time=end_time,
            assigned_to=assigned_to,
            auto_skip_conflicts=auto_skip_conflicts,
            created_by=created_by,
        )
        self._templates.save(template)

        TEMPLATES_CREATED.inc()
        ACTIVE_TEMPLATES.set(self._templates.count_active())
        self._history.record_event(
            "template_created",
            template.id,
            {
                "name": name,
                "recurrence": recurrence_label(recurrence_pattern, recurrence_day),
            },
        )
        logger.info(
            "Template created: id=%s, pattern=%s, day=%s",
            template.id,
            template.recurrence_pattern.value,
            recurrence_day,
        )
        return template

    def toggle_active(self, template_id: str) -> RecurringJobTemplate:
        template = self.get_template(template_id)
        template.is_active = not template.is_active
        self._templates.save(template)
        ACTIVE_TEMPLATES.set(self._templates.count_active())
        self._history.record_event(
            "template_toggled", template_id, {"is_active": template.is_active}
        )
        logger.info(
            "Template %s: id=%s", "activated" if template.is_active else "paused", template_id
        )
        return template

    def delete_template(self, template_id: str) -> dict[str, str]:
        """Delete a template. Jobs it already generated are kept."""
        if not self._templates.exists(template_id):
            raise KeyError(f"No recurring template found with id '{template_id}'")
        self._templates.delete(template_id)
        ACTIVE_TEMPLATES.set(self._templates.count_active())
        self._history.record_event("template_deleted", template_id, {})
        logger.info("Template deleted: id=%s", template_id)
        return {"status": "deleted", "template_id": template_id}

    # ── Queries ──

    def get_template(self, template_id: str) -> RecurringJobTemplate:
        template = self._templates.get(template_id)
        if template is None:
            raise KeyError(f"No recurring template found with id '{template_id}'")
        return template

    def list_templates(self, organization_id: Optional[str] = None) -> list[dict[str, Any]]:
        """Templates with their recurrence label and instance counts."""
        summaries: list[dict[str, Any]] = []
        for template in self._templates.get_all(organization_id):
            instances = self._instances.get_by_template(template.id)
            summary = template.model_dump(mode="json")
            summary["recurrence_label"] = recurrence_label(
                template.recurrence_pattern, template.recurrence_day
            )
            summary["generated_count"] = sum(1 for i in instances if not i.was_skipped)
            summary["skipped_count"] = sum(1 for i in instances if i.was_skipped)
            summaries.append(summary)
        return summaries

    def list_instances(self, template_id: str) -> list[RecurringJobInstance]:
        self.get_template(template_id)
        return self._instances.get_by_template(template_id)
