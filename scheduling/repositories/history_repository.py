# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Repository: Audit history of scheduling events.

Append-only and bounded: once MAX_HISTORY_SIZE events are held the oldest
one is dropped on every append. Reads come back newest first.
"""

import uuid
from collections import Counter, deque
from datetime import datetime, timezone
from itertools import islice
from typing import Any, Optional

from scheduling.core.config import settings


class HistoryRepository:
    def __init__(self, max_size: int = settings.MAX_HISTORY_SIZE) -> None:
        self._events: deque[dict[str, Any]] = deque(maxlen=max_size)

    # ── Read ──

    def get_all(
        self,
        subject: Optional[str] = None,
        event_type: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> list[dict[str, Any]]:
        matching = (
            e
            for e in reversed(self._events)
            if (subject is None or e["subject"] == subject)
            and (event_type is None or e["event_type"] == event_type)
        )
        return list(islice(matching, limit or settings.DEFAULT_HISTORY_LIMIT))

    def count(self) -> int:
        return len(self._events)

    def count_by_type(self) -> dict[str, int]:
        return dict(Counter(e["event_type"] for e in self._events))

    # ── Write ──

    def record_event(
        self, event_type: str, subject: str, details: dict[str, Any]
    ) -> dict[str, Any]:
        event = {
            "event_id": str(uuid.uuid4()),
            "event_type": event_type,
            "subject": subject,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "details": details,
        }
        self._events.append(event)
        return event

    def clear(self) -> None:
        self._events.clear()
