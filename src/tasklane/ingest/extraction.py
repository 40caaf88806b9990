# src/tasklane/ingest/extraction.py

"""
Extraction-service requests and response validation.

Nothing in here raises: every service problem (transport error, bad status,
unparseable JSON, wrong shape, nothing usable) becomes Fallback(reason).

Validation policy for items inside a well-formed array:
- an item must be an object with non-empty "text" (subtasks: non-empty strings);
  other items are dropped
- unknown / missing priority -> medium
- missing or unparseable dueDate -> no due date
- an array left with no usable item is treated as a failure
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Generic, TypeVar

from ..core.ports import ExtractionClient
from ..tasks.task_models import Priority, parse_due_date

logger = logging.getLogger(__name__)

T = TypeVar("T")

MAX_SUBTASKS = 5

TASK_EXTRACTION_INSTRUCTION = (
    "Extract tasks. Identify priority (high/medium/low). "
    "Identify due dates/times and convert to ISO format string. "
    'Return JSON: [{ "text": string, "priority": string, "dueDate": string | null }]'
)

SUBTASK_INSTRUCTION = (
    "Break down the given task into 3-5 smaller, actionable subtasks. "
    'Return JSON: ["subtask 1", "subtask 2"]'
)

_FENCE_RE = re.compile(r"```(?:json)?\s*(.*?)```", re.DOTALL | re.IGNORECASE)


@dataclass(frozen=True, slots=True)
class ExtractedTask:
    text: str
    priority: Priority = Priority.MEDIUM
    due_date: datetime | None = None


@dataclass(frozen=True, slots=True)
class Extracted(Generic[T]):
    items: tuple[T, ...]


@dataclass(frozen=True, slots=True)
class Fallback:
    reason: str


ExtractionOutcome = Extracted[T] | Fallback


def extract_json(raw: str) -> Any:
    """
    Parse model output that should be JSON.

    Models sometimes wrap JSON in markdown fences or chatter; try the whole
    text first, then a fenced block, then the outermost [...] or {...} span.
    Raises ValueError if nothing parses.
    """
    text = (raw or "").strip()
    if not text:
        raise ValueError("empty response")

    candidates = [text]
    m = _FENCE_RE.search(text)
    if m:
        candidates.append(m.group(1).strip())

    # Outermost span; whichever bracket opens first is the top-level value.
    spans: list[tuple[int, str]] = []
    for open_ch, close_ch in (("[", "]"), ("{", "}")):
        first = text.find(open_ch)
        last = text.rfind(close_ch)
        if first != -1 and last > first:
            spans.append((first, text[first : last + 1]))
    candidates.extend(span for _, span in sorted(spans))

    for c in candidates:
        try:
            return json.loads(c)
        except ValueError:
            continue
    raise ValueError("response is not valid JSON")


def parse_task_items(payload: Any) -> ExtractionOutcome[ExtractedTask]:
    if not isinstance(payload, list):
        return Fallback(f"expected a JSON array, got {type(payload).__name__}")

    items: list[ExtractedTask] = []
    for raw in payload:
        if not isinstance(raw, dict):
            continue
        text = raw.get("text")
        if not isinstance(text, str) or not text.strip():
            continue
        items.append(
            ExtractedTask(
                text=text.strip(),
                priority=Priority.parse(raw.get("priority")),
                due_date=parse_due_date(raw.get("dueDate")),
            )
        )

    if not items:
        return Fallback("no usable tasks in response")
    return Extracted(tuple(items))


def parse_subtask_items(payload: Any) -> ExtractionOutcome[str]:
    if not isinstance(payload, list):
        return Fallback(f"expected a JSON array, got {type(payload).__name__}")

    items = [s.strip() for s in payload if isinstance(s, str) and s.strip()]
    if not items:
        return Fallback("no usable subtasks in response")
    return Extracted(tuple(items[:MAX_SUBTASKS]))


async def _ask(client: ExtractionClient, *, instruction: str, prompt: str, context: str | None) -> Any:
    raw = await client.complete(instruction=instruction, prompt=prompt, context=context)
    return extract_json(raw)


async def request_tasks(
    client: ExtractionClient, raw_text: str, now: datetime
) -> ExtractionOutcome[ExtractedTask]:
    context = f"Current Date/Time: {now.isoformat()}."
    prompt = f'Analyze and extract tasks from: \n"{raw_text}"'
    try:
        payload = await _ask(
            client, instruction=TASK_EXTRACTION_INSTRUCTION, prompt=prompt, context=context
        )
        outcome = parse_task_items(payload)
    except Exception as e:
        logger.info("Task extraction failed: %s: %s", e.__class__.__name__, e)
        return Fallback(f"service error: {e.__class__.__name__}")

    if isinstance(outcome, Fallback):
        logger.info("Task extraction unusable: %s", outcome.reason)
    return outcome


async def request_subtasks(client: ExtractionClient, task_text: str) -> ExtractionOutcome[str]:
    prompt = f'Break down this task: "{task_text}"'
    try:
        payload = await _ask(client, instruction=SUBTASK_INSTRUCTION, prompt=prompt, context=None)
        outcome = parse_subtask_items(payload)
    except Exception as e:
        logger.info("Subtask request failed: %s: %s", e.__class__.__name__, e)
        return Fallback(f"service error: {e.__class__.__name__}")

    if isinstance(outcome, Fallback):
        logger.info("Subtask response unusable: %s", outcome.reason)
    return outcome
