# src/tasklane/tasks/task_dates.py

"""Due-date helpers. Pure: the current instant is always passed in."""

from __future__ import annotations

from datetime import UTC, date, datetime, tzinfo

from .task_models import Task


def _aware(dt: datetime) -> datetime:
    # Naive datetimes are local time; at the year 1 / 9999 edges, UTC.
    if dt.tzinfo is not None:
        return dt
    try:
        return dt.astimezone()
    except (ValueError, OverflowError):
        return dt.replace(tzinfo=UTC)


def local_date(dt: datetime, tz: tzinfo | None = None) -> date | None:
    """
    Calendar date of dt in tz (system local time when tz is None).

    None when dt falls outside the representable range in tz, e.g. late on
    9999-12-31 seen from a timezone ahead of dt's own offset.
    """
    try:
        return _aware(dt).astimezone(tz).date()
    except (ValueError, OverflowError):
        return None


def is_overdue(due: datetime | None, now: datetime) -> bool:
    if due is None:
        return False
    return _aware(due) < _aware(now)


def is_due_today(due: datetime | None, now: datetime) -> bool:
    """Same calendar day as now, in now's timezone."""
    if due is None:
        return False
    now = _aware(now)
    day = local_date(due, now.tzinfo)
    return day is not None and day == now.date()


def task_is_overdue(task: Task, now: datetime) -> bool:
    return not task.completed and is_overdue(task.due_date, now)


def task_is_due_today(task: Task, now: datetime) -> bool:
    return not task.completed and is_due_today(task.due_date, now)


def due_status(task: Task, now: datetime) -> str | None:
    """
    "overdue" / "today" / "scheduled", or None for no badge.

    Overdue wins over today: a task due at 9:00 is overdue at 10:00 the same day.
    """
    if task.due_date is None:
        return None
    if task_is_overdue(task, now):
        return "overdue"
    if task_is_due_today(task, now):
        return "today"
    return "scheduled"


def format_due(due: datetime | None, tz: tzinfo | None = None) -> str:
    """Short display form, e.g. "Jan 5, 3:30 PM"."""
    if due is None:
        return ""
    dt = _aware(due)
    try:
        dt = dt.astimezone(tz)
    except (ValueError, OverflowError):
        pass
    hour = dt.hour % 12 or 12
    suffix = "AM" if dt.hour < 12 else "PM"
    return f"{dt.strftime('%b')} {dt.day}, {hour}:{dt.minute:02d} {suffix}"
