# src/tasklane/ingest/pipeline.py

"""
Multi-line ingestion ("brain dump").

Two entry points:
- ingest_naive: one task per non-empty line, no inference
- ingest_assisted: ask the extraction service for structured tasks, fall back
  to ingest_naive on the same text when the service gives nothing usable

Creation calls are issued one at a time, each awaited, so the store-assigned
creation order is exactly the order computed by creation_sequence().
"""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import TypeVar

from ..core.ports import ExtractionClient
from ..tasks.task_sync import TaskStoreAdapter
from .extraction import Extracted, ExtractedTask, ExtractionOutcome, Fallback, request_tasks

logger = logging.getLogger(__name__)

T = TypeVar("T")

_BULLET_RE = re.compile(r"^[-*•]\s*")


class DisplayOrder(StrEnum):
    """
    How a list should end up in the store, which shows newest first.

    CREATION: create in list order (the last item shows on top).
    LISTED: create in reverse, so the newest-first view reads in list order.
    """

    CREATION = "creation"
    LISTED = "listed"


def creation_sequence(items: Sequence[T], order: DisplayOrder) -> list[T]:
    if order == DisplayOrder.LISTED:
        return list(reversed(items))
    return list(items)


@dataclass(slots=True)
class IngestResult:
    outcome: Extracted[ExtractedTask] | Fallback
    created_ids: list[str] = field(default_factory=list)

    @property
    def used_fallback(self) -> bool:
        return isinstance(self.outcome, Fallback)


def split_lines(raw_text: str) -> list[str]:
    """Non-blank lines with one leading bullet ("-", "*" or "•") removed."""
    out: list[str] = []
    for line in (raw_text or "").splitlines():
        if not line.strip():
            continue
        text = _BULLET_RE.sub("", line.strip(), count=1).strip()
        if text:
            out.append(text)
    return out


async def _create_all(
    adapter: TaskStoreAdapter,
    items: Sequence[ExtractedTask],
    order: DisplayOrder,
) -> list[str]:
    created: list[str] = []
    for item in creation_sequence(items, order):
        task_id = await adapter.create(item.text, priority=item.priority, due_date=item.due_date)
        if task_id is not None:
            created.append(task_id)
    return created


async def ingest_naive(
    adapter: TaskStoreAdapter,
    raw_text: str,
    order: DisplayOrder = DisplayOrder.CREATION,
) -> list[str]:
    items = [ExtractedTask(text=line) for line in split_lines(raw_text)]
    created = await _create_all(adapter, items, order)
    logger.info("Naive ingestion: lines=%d created=%d", len(items), len(created))
    return created


async def ingest_assisted(
    adapter: TaskStoreAdapter,
    client: ExtractionClient,
    raw_text: str,
    now: datetime,
    order: DisplayOrder = DisplayOrder.LISTED,
    fallback_order: DisplayOrder = DisplayOrder.CREATION,
) -> IngestResult:
    if not (raw_text or "").strip():
        return IngestResult(outcome=Fallback("empty input"))

    outcome: ExtractionOutcome[ExtractedTask] = await request_tasks(client, raw_text, now)

    if isinstance(outcome, Extracted):
        created = await _create_all(adapter, outcome.items, order)
        logger.info("Assisted ingestion: extracted=%d created=%d", len(outcome.items), len(created))
        return IngestResult(outcome=outcome, created_ids=created)

    logger.info("Assisted ingestion falling back to line split: %s", outcome.reason)
    created = await ingest_naive(adapter, raw_text, order=fallback_order)
    return IngestResult(outcome=outcome, created_ids=created)
