# src/tasklane/tasks/task_sync.py

"""
Task store adapter with a live subscription.

The adapter is the only writer the rest of the app talks to:
- before a user identity is bound, every mutator is a silent no-op
- store failures are logged and swallowed (no retries); the subscription
  reconciles state on the next successful change
- subscribe() returns a stream of full snapshots (newest first)
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Awaitable, Callable, Mapping
from datetime import datetime
from typing import Any

from ..core.ports import TaskCollection
from .task_models import Priority, Task

logger = logging.getLogger(__name__)

SnapshotCallback = Callable[[list[Task]], Awaitable[None] | None]


class TaskSubscription:
    """
    Async iterator of full task snapshots.

    The first item is the current list. After that, one snapshot is produced
    each time the collection revision changes. Local writes wake the
    subscription immediately; external writes are noticed by polling.
    """

    def __init__(self, adapter: TaskStoreAdapter, poll_interval: float) -> None:
        self._adapter = adapter
        self._poll_interval = poll_interval
        self._wake = asyncio.Event()
        self._closed = False
        self._last_rev: int | None = None

    def notify(self) -> None:
        self._wake.set()

    def unsubscribe(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._wake.set()
        self._adapter._detach(self)

    def __aiter__(self) -> TaskSubscription:
        return self

    async def __anext__(self) -> list[Task]:
        while not self._closed:
            collection = self._adapter.collection
            if collection is None:
                # Inert until a session binds a collection.
                await self._wait()
                continue

            try:
                rev = await collection.revision()
                if self._last_rev is None or rev != self._last_rev:
                    tasks = await collection.snapshot()
                    self._last_rev = rev
                    if not self._closed:
                        return tasks
            except Exception:
                logger.exception("Task subscription read failed; will retry on next poll")

            await self._wait()

        raise StopAsyncIteration

    async def _wait(self) -> None:
        with contextlib.suppress(asyncio.TimeoutError):
            await asyncio.wait_for(self._wake.wait(), timeout=self._poll_interval)
        self._wake.clear()

    def _reset(self) -> None:
        self._last_rev = None
        self._wake.set()


class TaskStoreAdapter:
    def __init__(self, collection: TaskCollection | None = None, *, poll_interval: float = 1.0) -> None:
        self._collection = collection
        self._poll_interval = max(0.01, float(poll_interval))
        self._subscriptions: set[TaskSubscription] = set()

    @property
    def collection(self) -> TaskCollection | None:
        return self._collection

    @property
    def has_identity(self) -> bool:
        return self._collection is not None

    def bind(self, collection: TaskCollection | None) -> None:
        """Attach (or detach) the user's collection; subscribers re-read from scratch."""
        self._collection = collection
        for sub in list(self._subscriptions):
            sub._reset()

    # ---- mutators ----

    async def create(
        self,
        text: str,
        *,
        priority: Priority = Priority.MEDIUM,
        due_date: datetime | None = None,
        completed: bool = False,
    ) -> str | None:
        collection = self._collection
        if collection is None:
            return None
        text = (text or "").strip()
        if not text:
            return None

        try:
            task_id = await collection.create(
                text=text,
                priority=Priority.parse(priority),
                due_date=due_date,
                completed=completed,
            )
        except Exception:
            logger.exception("Task create failed text=%r", text[:80])
            return None

        self._notify()
        return task_id

    async def update(self, task_id: str, changes: Mapping[str, Any]) -> bool:
        collection = self._collection
        if collection is None or not changes:
            return False
        try:
            await collection.update(task_id, changes)
        except Exception:
            logger.exception("Task update failed id=%s fields=%s", task_id, sorted(changes))
            return False

        self._notify()
        return True

    async def delete(self, task_id: str) -> bool:
        collection = self._collection
        if collection is None:
            return False
        try:
            await collection.delete(task_id)
        except Exception:
            logger.exception("Task delete failed id=%s", task_id)
            return False

        self._notify()
        return True

    # ---- subscription ----

    def subscribe(self) -> TaskSubscription:
        sub = TaskSubscription(self, self._poll_interval)
        self._subscriptions.add(sub)
        return sub

    def on_change(self, callback: SnapshotCallback) -> Callable[[], None]:
        """
        Callback-style subscription driven by a background asyncio task.

        Must be called from a running event loop. Returns an unsubscribe function.
        """
        sub = self.subscribe()

        async def _pump() -> None:
            async for tasks in sub:
                try:
                    res = callback(tasks)
                    if asyncio.iscoroutine(res):
                        await res
                except Exception:
                    logger.exception("Task snapshot callback failed")

        runner = asyncio.get_running_loop().create_task(_pump())

        def _unsubscribe() -> None:
            sub.unsubscribe()
            runner.cancel()

        return _unsubscribe

    def _notify(self) -> None:
        for sub in list(self._subscriptions):
            sub.notify()

    def _detach(self, sub: TaskSubscription) -> None:
        self._subscriptions.discard(sub)
