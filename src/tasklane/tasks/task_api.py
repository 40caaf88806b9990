# src/tasklane/tasks/task_api.py

from __future__ import annotations

import logging
from datetime import datetime

from .task_models import Priority, Task, parse_due_date
from .task_sync import TaskStoreAdapter

logger = logging.getLogger(__name__)


async def add_task(
    adapter: TaskStoreAdapter,
    text: str,
    priority: Priority | str = Priority.MEDIUM,
    due_date: datetime | str | None = None,
) -> str | None:
    """
    Quick-add a single task. Blank text is ignored.
    due_date may be an ISO-8601 string (as typed by the user) or a datetime.
    """
    text = (text or "").strip()
    if not text:
        return None
    return await adapter.create(
        text,
        priority=Priority.parse(priority),
        due_date=parse_due_date(due_date),
    )


async def toggle_completed(adapter: TaskStoreAdapter, task: Task) -> bool:
    return await adapter.update(task.id, {"completed": not task.completed})


async def cycle_priority(adapter: TaskStoreAdapter, task: Task) -> bool:
    nxt = Priority.parse(task.priority).next()
    return await adapter.update(task.id, {"priority": nxt})


async def edit_text(adapter: TaskStoreAdapter, task: Task, new_text: str) -> bool:
    """Saving blank text keeps the old text."""
    text = (new_text or "").strip()
    if not text or text == task.text:
        return False
    return await adapter.update(task.id, {"text": text})


async def set_due_date(
    adapter: TaskStoreAdapter, task: Task, due_date: datetime | str | None
) -> bool:
    return await adapter.update(task.id, {"due_date": parse_due_date(due_date)})


async def delete_task(adapter: TaskStoreAdapter, task_id: str) -> bool:
    ok = await adapter.delete(task_id)
    if ok:
        logger.debug("Task deleted id=%s", task_id)
    return ok
