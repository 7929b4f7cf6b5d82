# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Repository: Recurring job template data access.
NO business rules here — pure CRUD.
"""

from typing import Optional

from scheduling.models.domain import RecurringJobTemplate


class TemplateRepository:
    """In-memory recurring template storage."""

    def __init__(self) -> None:
        self._store: dict[str, RecurringJobTemplate] = {}

    # ── Read ──

    def get_all(
        self,
        organization_id: Optional[str] = None,
        active_only: bool = False,
    ) -> list[RecurringJobTemplate]:
        templates = list(self._store.values())
        if organization_id:
            templates = [t for t in templates if t.organization_id == organization_id]
        if active_only:
            templates = [t for t in templates if t.is_active]
        return sorted(templates, key=lambda t: t.created_at, reverse=True)

    def get(self, template_id: str) -> Optional[RecurringJobTemplate]:
        return self._store.get(template_id)

    def exists(self, template_id: str) -> bool:
        return template_id in self._store

    def count(self) -> int:
        return len(self._store)

    def count_active(self) -> int:
        return sum(1 for t in self._store.values() if t.is_active)

    # ── Write ──

    def save(self, template: RecurringJobTemplate) -> RecurringJobTemplate:
        self._store[template.id] = template
        return template

    def delete(self, template_id: str) -> Optional[RecurringJobTemplate]:
        return self._store.pop(template_id, None)

    # ── Bulk / internal ──

    def clear(self) -> None:
        self._store.clear()
