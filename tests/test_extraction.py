# tests/test_extraction.py

from __future__ import annotations

from datetime import UTC, datetime

import pytest

from tasklane.ingest.extraction import (
    Extracted,
    ExtractedTask,
    Fallback,
    extract_json,
    parse_subtask_items,
    parse_task_items,
    request_subtasks,
    request_tasks,
)
from tasklane.tasks.task_models import Priority

from .fakes import FakeExtractionClient

NOW = datetime(2025, 3, 10, 12, 0, tzinfo=UTC)


def test_extract_json_tolerates_fences_and_chatter() -> None:
    assert extract_json('[{"text":"A"}]') == [{"text": "A"}]
    assert extract_json('```json\n["a", "b"]\n```') == ["a", "b"]
    assert extract_json('Sure! Here you go: ["a"] Thanks.') == ["a"]
    assert extract_json('Result: {"tasks": []}') == {"tasks": []}

    with pytest.raises(ValueError):
        extract_json("THIS IS NOT JSON AT ALL")
    with pytest.raises(ValueError):
        extract_json("   ")


def test_parse_task_items_validates_and_defaults() -> None:
    outcome = parse_task_items(
        [
            {"text": " A ", "priority": "HIGH", "dueDate": None},
            {"text": "B", "priority": "urgent", "dueDate": "tomorrow-ish"},
            {"text": "C", "dueDate": "2025-01-01T00:00:00Z"},
            {"text": "   "},
            "not an object",
            {"priority": "low"},
        ]
    )
    assert isinstance(outcome, Extracted)
    assert outcome.items == (
        ExtractedTask("A", Priority.HIGH, None),
        ExtractedTask("B", Priority.MEDIUM, None),
        ExtractedTask("C", Priority.MEDIUM, datetime(2025, 1, 1, tzinfo=UTC)),
    )


@pytest.mark.parametrize("payload", [{}, {"tasks": []}, "text", 3, None, [], [{"x": 1}]])
def test_parse_task_items_rejects_unusable_payloads(payload) -> None:
    assert isinstance(parse_task_items(payload), Fallback)


def test_parse_subtask_items() -> None:
    outcome = parse_subtask_items(["a", " b ", "", 7, "c", "d", "e", "f"])
    assert isinstance(outcome, Extracted)
    # Capped at five.
    assert outcome.items == ("a", "b", "c", "d", "e")

    assert isinstance(parse_subtask_items({"subtasks": ["a"]}), Fallback)
    assert isinstance(parse_subtask_items([1, 2]), Fallback)


@pytest.mark.asyncio
async def test_request_tasks_sends_current_time_and_text() -> None:
    client = FakeExtractionClient('[{"text":"A","priority":"low","dueDate":null}]')
    outcome = await request_tasks(client, "do A", NOW)

    assert isinstance(outcome, Extracted)
    call = client.calls[0]
    assert NOW.isoformat() in (call.context or "")
    assert "do A" in call.prompt
    assert "priority" in call.instruction


@pytest.mark.asyncio
async def test_request_tasks_turns_errors_into_fallback() -> None:
    client = FakeExtractionClient(error=RuntimeError("All LLM models failed."))
    outcome = await request_tasks(client, "x", NOW)
    assert isinstance(outcome, Fallback)
    assert "RuntimeError" in outcome.reason


@pytest.mark.asyncio
async def test_request_subtasks_garbage_is_fallback() -> None:
    outcome = await request_subtasks(FakeExtractionClient("no idea"), "Plan trip")
    assert isinstance(outcome, Fallback)
