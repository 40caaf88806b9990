# src/tasklane/ingest/breakdown.py

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from ..core.ports import ExtractionClient
from ..tasks.task_models import Task
from ..tasks.task_sync import TaskStoreAdapter
from .extraction import Extracted, Fallback, request_subtasks
from .pipeline import DisplayOrder, creation_sequence

logger = logging.getLogger(__name__)

# Visual nesting marker; subtasks are ordinary tasks.
SUBTASK_PREFIX = "↳ "


@dataclass(slots=True)
class BreakdownResult:
    outcome: Extracted[str] | Fallback
    created_ids: list[str] = field(default_factory=list)


async def breakdown_task(
    adapter: TaskStoreAdapter,
    client: ExtractionClient,
    task: Task,
    order: DisplayOrder = DisplayOrder.LISTED,
) -> BreakdownResult:
    """
    Split one task into subtasks that inherit its priority and due date.

    The source task is never touched. On any service problem nothing is created.
    """
    if task.completed:
        return BreakdownResult(outcome=Fallback("task is completed"))

    outcome = await request_subtasks(client, task.text)
    if isinstance(outcome, Fallback):
        logger.info("Breakdown skipped task_id=%s: %s", task.id, outcome.reason)
        return BreakdownResult(outcome=outcome)

    created: list[str] = []
    for sub in creation_sequence(outcome.items, order):
        task_id = await adapter.create(
            f"{SUBTASK_PREFIX}{sub}",
            priority=task.priority,
            due_date=task.due_date,
        )
        if task_id is not None:
            created.append(task_id)

    logger.info("Breakdown task_id=%s subtasks=%d created=%d", task.id, len(outcome.items), len(created))
    return BreakdownResult(outcome=outcome, created_ids=created)
