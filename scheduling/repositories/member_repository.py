# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Repository: Team roster data access.
Membership itself is managed by the organization service; this store only
mirrors the rows the scheduler reads. NO business rules here — pure CRUD.
"""

from typing import Optional

from scheduling.models.domain import TeamMember


class MemberRepository:
    """In-memory team member storage."""

    def __init__(self) -> None:
        self._store: dict[str, TeamMember] = {}

    # ── Read ──

    def get_all(
        self,
        organization_id: Optional[str] = None,
        active_only: bool = False,
    ) -> list[TeamMember]:
        members = list(self._store.values())
        if organization_id:
            members = [m for m in members if m.organization_id == organization_id]
        if active_only:
            members = [m for m in members if m.is_active]
        return members

    def get(self, member_id: str) -> Optional[TeamMember]:
        return self._store.get(member_id)

    def count(self) -> int:
        return len(self._store)

    # ── Write ──

    def save(self, member: TeamMember) -> TeamMember:
        self._store[member.id] = member
        return member

    # ── Bulk / internal ──

    def clear(self) -> None:
        self._store.clear()
