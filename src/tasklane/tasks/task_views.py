# src/tasklane/tasks/task_views.py

"""
View organizer.

Derives the display buckets from a task snapshot. Everything here is pure
(no store access, no clock), so it can be re-run on every snapshot the live
subscription delivers, including partially-updated ones mid-ingestion.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date, tzinfo
from enum import StrEnum

from .task_dates import local_date
from .task_models import Priority, Task


class ViewMode(StrEnum):
    ALL = "all"
    ACTIVE = "active"
    COMPLETED = "completed"
    CALENDAR = "calendar"

    @classmethod
    def parse(cls, raw: str | None) -> ViewMode:
        try:
            return cls((raw or "").strip().lower())
        except ValueError:
            return cls.ALL


@dataclass(frozen=True, slots=True)
class TaskBuckets:
    high: tuple[Task, ...] = ()
    medium: tuple[Task, ...] = ()
    low: tuple[Task, ...] = ()
    done: tuple[Task, ...] = ()

    def __len__(self) -> int:
        return len(self.high) + len(self.medium) + len(self.low) + len(self.done)


@dataclass(frozen=True, slots=True)
class TaskStats:
    total: int
    done: int
    progress: int  # percent, rounded


@dataclass(frozen=True, slots=True)
class DayMark:
    count: int
    has_high: bool


def filter_tasks(
    tasks: Iterable[Task],
    view: ViewMode,
    selected_date: date | None = None,
    tz: tzinfo | None = None,
) -> list[Task]:
    if view == ViewMode.ACTIVE:
        return [t for t in tasks if not t.completed]
    if view == ViewMode.COMPLETED:
        return [t for t in tasks if t.completed]
    if view == ViewMode.CALENDAR and selected_date is not None:
        return [
            t
            for t in tasks
            if t.due_date is not None and local_date(t.due_date, tz) == selected_date
        ]
    return list(tasks)


def organize_tasks(
    tasks: Sequence[Task],
    view: ViewMode = ViewMode.ALL,
    selected_date: date | None = None,
    tz: tzinfo | None = None,
) -> TaskBuckets:
    """
    Filter by view, then partition:
    - high / medium / low: open tasks of that priority
    - done: every completed task, whatever its priority

    Input order is preserved inside each bucket.
    """
    high: list[Task] = []
    medium: list[Task] = []
    low: list[Task] = []
    done: list[Task] = []

    for t in filter_tasks(tasks, view, selected_date, tz):
        if t.completed:
            done.append(t)
            continue
        # Priority.parse covers rows built outside the store with a raw/None priority.
        prio = Priority.parse(t.priority)
        if prio == Priority.HIGH:
            high.append(t)
        elif prio == Priority.LOW:
            low.append(t)
        else:
            medium.append(t)

    return TaskBuckets(high=tuple(high), medium=tuple(medium), low=tuple(low), done=tuple(done))


def task_stats(tasks: Sequence[Task]) -> TaskStats:
    total = len(tasks)
    done = sum(1 for t in tasks if t.completed)
    progress = 0 if total == 0 else round(done * 100 / total)
    return TaskStats(total=total, done=done, progress=progress)


def calendar_marks(
    tasks: Iterable[Task],
    year: int,
    month: int,
    tz: tzinfo | None = None,
) -> dict[int, DayMark]:
    """Per-day markers for a month: number of tasks due and whether any is high priority."""
    counts: dict[int, int] = {}
    high: set[int] = set()

    for t in tasks:
        if t.due_date is None:
            continue
        d = local_date(t.due_date, tz)
        if d is None or d.year != year or d.month != month:
            continue
        counts[d.day] = counts.get(d.day, 0) + 1
        if Priority.parse(t.priority) == Priority.HIGH:
            high.add(d.day)

    return {day: DayMark(count=n, has_high=day in high) for day, n in sorted(counts.items())}
