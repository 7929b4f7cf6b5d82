# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Conflict detection. Pure computation, no side effects.

Intervals are half-open: an assignment ending at 17:00 does not collide
with one starting at 17:00.
"""

from collections.abc import Iterable, Mapping
from itertools import combinations
from typing import Optional

from scheduling.models.domain import Assignment, Conflict, Interval

UNKNOWN_JOB = "Unknown Job"


def overlaps(a: Interval, b: Interval) -> bool:
    """True iff a.start < b.end and b.start < a.end."""
    return a.overlaps(b)


def find_conflicts(
    candidate: Interval,
    existing: Iterable[Assignment],
    job_names: Optional[Mapping[str, str]] = None,
) -> list[Conflict]:
    """
    Return every existing assignment that overlaps ``candidate``, labelled
    with the owning job's name and its time range. Empty when nothing overlaps.
    """
    names = job_names or {}
    conflicts: list[Conflict] = []
    for assignment in existing:
        interval = assignment.interval
        if overlaps(candidate, interval):
            conflicts.append(
                Conflict(
                    job=names.get(assignment.project_id, UNKNOWN_JOB),
                    time=interval.label,
                    assignment_id=assignment.id,
                )
            )
    return conflicts


def has_overlap(assignments: Iterable[Assignment]) -> bool:
    """True if any two of the given assignments overlap each other."""
    intervals = [a.interval for a in assignments]
    return any(overlaps(a, b) for a, b in combinations(intervals, 2))


def describe_conflicts(conflicts: Iterable[Conflict]) -> str:
    """Human-readable summary used as a skip reason."""
    return "Conflicts with " + ", ".join(f"{c.job} ({c.time})" for c in conflicts)
