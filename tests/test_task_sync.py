# tests/test_task_sync.py

from __future__ import annotations

import asyncio
import logging

import pytest

from tasklane.tasks.task_models import Priority
from tasklane.tasks.task_store import TaskStore
from tasklane.tasks.task_sync import TaskStoreAdapter

from .fakes import FakeTaskCollection


async def _next(sub, timeout: float = 1.0):
    return await asyncio.wait_for(sub.__anext__(), timeout=timeout)


@pytest.mark.asyncio
async def test_mutators_are_noops_without_identity() -> None:
    adapter = TaskStoreAdapter(None, poll_interval=0.01)
    assert adapter.has_identity is False
    assert await adapter.create("x") is None
    assert await adapter.update("t1", {"completed": True}) is False
    assert await adapter.delete("t1") is False


@pytest.mark.asyncio
async def test_blank_text_is_not_created(adapter: TaskStoreAdapter, collection: FakeTaskCollection) -> None:
    assert await adapter.create("   ") is None
    assert collection.create_calls == []


@pytest.mark.asyncio
async def test_store_failures_are_logged_not_raised(
    adapter: TaskStoreAdapter, collection: FakeTaskCollection, caplog
) -> None:
    collection.fail_writes = True
    with caplog.at_level(logging.ERROR, logger="tasklane.tasks.task_sync"):
        assert await adapter.create("x") is None
        assert await adapter.update("t1", {"completed": True}) is False
        assert await adapter.delete("t1") is False
    assert "Task create failed" in caplog.text


@pytest.mark.asyncio
async def test_subscription_delivers_initial_and_updated_snapshots(
    adapter: TaskStoreAdapter,
) -> None:
    sub = adapter.subscribe()
    assert await _next(sub) == []

    first = await adapter.create("first")
    snap = await _next(sub)
    assert [t.text for t in snap] == ["first"]

    await adapter.create("second", priority=Priority.HIGH)
    snap = await _next(sub)
    assert [t.text for t in snap] == ["second", "first"]

    await adapter.update(first, {"completed": True})
    snap = await _next(sub)
    assert snap[1].completed is True

    await adapter.delete(first)
    snap = await _next(sub)
    assert [t.text for t in snap] == ["second"]

    sub.unsubscribe()
    with pytest.raises(StopAsyncIteration):
        await _next(sub)


@pytest.mark.asyncio
async def test_subscription_sees_external_changes(
    adapter: TaskStoreAdapter, collection: FakeTaskCollection
) -> None:
    sub = adapter.subscribe()
    assert await _next(sub) == []

    # Written behind the adapter's back, e.g. by another device.
    await collection.create(text="from elsewhere")
    snap = await _next(sub)
    assert [t.text for t in snap] == ["from elsewhere"]
    sub.unsubscribe()


@pytest.mark.asyncio
async def test_subscription_is_inert_until_bound() -> None:
    adapter = TaskStoreAdapter(None, poll_interval=0.01)
    sub = adapter.subscribe()
    with pytest.raises(asyncio.TimeoutError):
        await _next(sub, timeout=0.05)

    coll = FakeTaskCollection()
    await coll.create(text="already there")
    adapter.bind(coll)
    snap = await _next(sub)
    assert [t.text for t in snap] == ["already there"]
    sub.unsubscribe()


@pytest.mark.asyncio
async def test_on_change_callback_and_unsubscribe(adapter: TaskStoreAdapter) -> None:
    seen: list[list[str]] = []
    got_two = asyncio.Event()

    def on_snapshot(tasks) -> None:
        seen.append([t.text for t in tasks])
        if len(seen) >= 2:
            got_two.set()

    unsubscribe = adapter.on_change(on_snapshot)
    await asyncio.sleep(0.02)
    await adapter.create("hello")
    await asyncio.wait_for(got_two.wait(), timeout=1.0)
    unsubscribe()
    await asyncio.sleep(0)

    assert seen[0] == []
    assert seen[-1] == ["hello"]


@pytest.mark.asyncio
async def test_adapter_over_sqlite_collection(store: TaskStore) -> None:
    adapter = TaskStoreAdapter(store.for_user("u1"), poll_interval=0.01)
    sub = adapter.subscribe()
    assert await _next(sub) == []

    await adapter.create("one")
    await adapter.create("two")
    snap = await _next(sub)
    # Both writes may be coalesced into one snapshot; the latest one has both.
    while len(snap) < 2:
        snap = await _next(sub)
    assert [t.text for t in snap] == ["two", "one"]

    # A write through another handle is picked up by polling.
    store.add_task("u1", text="three")
    snap = await _next(sub)
    assert [t.text for t in snap] == ["three", "two", "one"]
    sub.unsubscribe()
