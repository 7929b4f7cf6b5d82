# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Repository: Recurring job instance data access.
One row per (template, scheduled_date), enforced like a unique index.
"""

from datetime import date

from scheduling.models.domain import RecurringJobInstance
from scheduling.repositories.errors import DuplicateKeyError


class InstanceRepository:
    """In-memory recurring instance storage."""

    def __init__(self) -> None:
        self._store: dict[tuple[str, date], RecurringJobInstance] = {}

    # ── Read ──

    def get_by_template(self, template_id: str) -> list[RecurringJobInstance]:
        instances = [i for (tid, _), i in self._store.items() if tid == template_id]
        return sorted(instances, key=lambda i: i.scheduled_date)

    def dates_for_template(self, template_id: str) -> set[date]:
        return {d for (tid, d) in self._store if tid == template_id}

    def count(self) -> int:
        return len(self._store)

    # ── Write ──

    def save(self, instance: RecurringJobInstance) -> RecurringJobInstance:
        key = (instance.template_id, instance.scheduled_date)
        if key in self._store:
            raise DuplicateKeyError(
                f"Instance already recorded for template '{instance.template_id}' "
                f"on {instance.scheduled_date}"
            )
        self._store[key] = instance
        return instance

    # ── Bulk / internal ──

    def clear(self) -> None:
        self._store.clear()
