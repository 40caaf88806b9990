# tests/test_task_store.py

from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path

import pytest

from tasklane.tasks.task_models import Priority
from tasklane.tasks.task_store import TaskStore


def test_add_list_update_delete(store: TaskStore) -> None:
    first = store.add_task("u1", text="  Buy milk  ")
    second = store.add_task(
        "u1",
        text="Pay rent",
        priority=Priority.HIGH,
        due_date=datetime(2025, 1, 1, tzinfo=UTC),
    )

    tasks = store.list_tasks("u1")
    # Newest first.
    assert [t.id for t in tasks] == [second, first]
    assert tasks[1].text == "Buy milk"
    assert tasks[1].priority == Priority.MEDIUM
    assert tasks[1].completed is False
    assert tasks[1].due_date is None
    assert tasks[0].due_date == datetime(2025, 1, 1, tzinfo=UTC)

    store.update_task_fields("u1", first, {"completed": True, "priority": "low", "text": "Buy oat milk"})
    t = store.get_task("u1", first)
    assert t is not None
    assert (t.completed, t.priority, t.text) == (True, Priority.LOW, "Buy oat milk")

    store.update_task_fields("u1", second, {"due_date": None})
    t2 = store.get_task("u1", second)
    assert t2 is not None and t2.due_date is None

    store.delete_task("u1", first)
    assert [t.id for t in store.list_tasks("u1")] == [second]


def test_tasks_are_scoped_per_user(store: TaskStore) -> None:
    mine = store.add_task("u1", text="mine")
    store.add_task("u2", text="theirs")

    assert [t.text for t in store.list_tasks("u1")] == ["mine"]

    # Another user's id cannot touch my task.
    store.update_task_fields("u2", mine, {"text": "hijacked"})
    store.delete_task("u2", mine)
    t = store.get_task("u1", mine)
    assert t is not None and t.text == "mine"


def test_revision_changes_only_on_effective_writes(store: TaskStore) -> None:
    assert store.revision("u1") == 0
    tid = store.add_task("u1", text="a")
    r1 = store.revision("u1")
    assert r1 > 0

    store.update_task_fields("u1", "missing", {"completed": True})
    store.delete_task("u1", "missing")
    assert store.revision("u1") == r1

    store.update_task_fields("u1", tid, {"completed": True})
    assert store.revision("u1") > r1
    assert store.revision("u2") == 0


def test_validation_errors(store: TaskStore) -> None:
    with pytest.raises(ValueError):
        store.add_task("u1", text="   ")
    with pytest.raises(ValueError):
        store.add_task("", text="x")

    tid = store.add_task("u1", text="x")
    with pytest.raises(ValueError):
        store.update_task_fields("u1", tid, {"owner": "someone"})
    with pytest.raises(ValueError):
        store.update_task_fields("u1", tid, {"text": " "})


def test_second_store_instance_sees_same_data(tmp_path: Path) -> None:
    db = tmp_path / "shared.sqlite3"
    a = TaskStore(db)
    b = TaskStore(db)
    tid = a.add_task("u1", text="shared")
    assert [t.id for t in b.list_tasks("u1")] == [tid]
    assert b.revision("u1") == a.revision("u1")


@pytest.mark.asyncio
async def test_user_collection_handle(store: TaskStore) -> None:
    coll = store.for_user("u1")
    tid = await coll.create(text="async", priority=Priority.HIGH)
    await coll.update(tid, {"completed": True})
    snap = await coll.snapshot()
    assert [(t.id, t.completed, t.priority) for t in snap] == [(tid, True, Priority.HIGH)]
    assert await coll.revision() == store.revision("u1")

    await coll.delete(tid)
    assert await coll.snapshot() == []
