# src/tasklane/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any


class Priority(StrEnum):
    """
    Task priority.

    Notes:
    - stored and exchanged as the lowercase value ("low" / "medium" / "high")
    - anything missing or unknown is read as MEDIUM
    """

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @classmethod
    def parse(cls, raw: Any) -> Priority:
        if isinstance(raw, Priority):
            return raw
        if not isinstance(raw, str) or not raw.strip():
            return cls.MEDIUM
        try:
            return cls(raw.strip().lower())
        except ValueError:
            return cls.MEDIUM

    def next(self) -> Priority:
        """low -> medium -> high -> low"""
        return _CYCLE[(_CYCLE.index(self) + 1) % len(_CYCLE)]


_CYCLE: tuple[Priority, ...] = (Priority.LOW, Priority.MEDIUM, Priority.HIGH)


@dataclass(slots=True)
class Task:
    id: str
    text: str
    completed: bool
    priority: Priority
    due_date: datetime | None
    created_at: float


# Fields a caller may change after creation.
MUTABLE_FIELDS = frozenset({"text", "completed", "priority", "due_date"})


def parse_due_date(raw: Any) -> datetime | None:
    """
    Normalize a due date coming from the store, the extraction service or the user.

    Accepts an ISO-8601 string (including a trailing "Z") or a datetime.
    Naive values are interpreted as local time. Anything else yields None.
    """
    if raw is None:
        return None
    if isinstance(raw, datetime):
        dt = raw
    elif isinstance(raw, str):
        s = raw.strip()
        if not s:
            return None
        try:
            dt = datetime.fromisoformat(s)
        except ValueError:
            return None
    else:
        return None

    # Reject values that cannot be placed on the UTC timeline (year 1 / 9999 edges).
    try:
        if dt.tzinfo is None:
            dt = dt.astimezone()
        dt.astimezone(UTC)
    except (ValueError, OverflowError):
        return None
    return dt


def format_iso(dt: datetime | None) -> str | None:
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.astimezone()
    return dt.isoformat()
