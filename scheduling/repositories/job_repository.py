# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Repository: Job (project) data access.
NO business rules here — pure CRUD.
"""

from typing import Optional

from scheduling.models.domain import Job


class JobRepository:
    """In-memory job storage."""

    def __init__(self) -> None:
        self._store: dict[str, Job] = {}

    # ── Read ──

    def get_all(self, organization_id: Optional[str] = None) -> list[Job]:
        jobs = list(self._store.values())
        if organization_id:
            jobs = [j for j in jobs if j.organization_id == organization_id]
        return sorted(jobs, key=lambda j: j.created_at, reverse=True)

    def get(self, job_id: str) -> Optional[Job]:
        return self._store.get(job_id)

    def names(self) -> dict[str, str]:
        """Return a dict of job id -> job name."""
        return {job_id: job.name for job_id, job in self._store.items()}

    def count(self) -> int:
        return len(self._store)

    # ── Write ──

    def save(self, job: Job) -> Job:
        self._store[job.id] = job
        return job

    # ── Bulk / internal ──

    def clear(self) -> None:
        self._store.clear()
