# src/tasklane/tasks/task_store.py

from __future__ import annotations

import asyncio
import contextlib
import logging
import sqlite3
import time
import uuid
from collections.abc import Mapping
from datetime import datetime
from pathlib import Path
from typing import Any

from .task_models import MUTABLE_FIELDS, Priority, Task, format_iso, parse_due_date

logger = logging.getLogger(__name__)


class TaskStore:
    """
    SQLite task store holding every user's tasks.

    The schema is intentionally simple and migration-safe:
    - create table if missing
    - use PRAGMA table_info to detect missing columns
    - add columns with ALTER TABLE only when needed

    Every write also bumps a per-user revision counter inside the same
    transaction. Readers compare revisions to notice changes made by other
    processes sharing the database file.

    Thread-safety:
    - each method opens its own SQLite connection
    """

    def __init__(self, db_path: str | Path = "tasks.sqlite3") -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()
        try:
            total = self.count_tasks()
        except Exception:
            total = -1
        logger.info("TaskStore ready db=%s total=%s", self._db_path, total)

    # ---- low-level helpers ----

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), timeout=30.0)
        conn.row_factory = sqlite3.Row
        with contextlib.suppress(Exception):
            conn.execute("PRAGMA journal_mode=WAL")
        return conn

    def _ensure_schema(self) -> None:
        conn = self._get_conn()
        try:
            cur = conn.cursor()

            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS tasks (
                    id TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL,
                    text TEXT NOT NULL,
                    completed INTEGER NOT NULL DEFAULT 0,
                    priority TEXT NOT NULL DEFAULT 'medium',
                    due_date TEXT,
                    created_at REAL NOT NULL
                )
                """
            )
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS task_revisions (
                    user_id TEXT PRIMARY KEY,
                    rev INTEGER NOT NULL DEFAULT 0
                )
                """
            )

            cur.execute("PRAGMA table_info(tasks)")
            cols = {row["name"] for row in cur.fetchall()}

            def add_col(name: str, decl: str) -> None:
                if name in cols:
                    return
                cur.execute(f"ALTER TABLE tasks ADD COLUMN {name} {decl}")
                logger.info("TaskStore migration: added column %s", name)

            add_col("completed", "INTEGER NOT NULL DEFAULT 0")
            add_col("priority", "TEXT NOT NULL DEFAULT 'medium'")
            add_col("due_date", "TEXT")
            add_col("created_at", "REAL NOT NULL DEFAULT 0")

            cur.execute(
                "CREATE INDEX IF NOT EXISTS idx_tasks_user_created ON tasks(user_id, created_at)"
            )
            conn.commit()
        finally:
            conn.close()

    @staticmethod
    def _bump_revision(cur: sqlite3.Cursor, user_id: str) -> None:
        cur.execute(
            """
            INSERT INTO task_revisions(user_id, rev) VALUES (?, 1)
            ON CONFLICT(user_id) DO UPDATE SET rev = rev + 1
            """,
            (user_id,),
        )

    @staticmethod
    def _row_to_task(row: sqlite3.Row) -> Task:
        return Task(
            id=str(row["id"]),
            text=str(row["text"] or ""),
            completed=bool(row["completed"]),
            priority=Priority.parse(row["priority"]),
            due_date=parse_due_date(row["due_date"]),
            created_at=float(row["created_at"] or 0.0),
        )

    @staticmethod
    def _require_user(user_id: str) -> str:
        if not user_id or not str(user_id).strip():
            raise ValueError("user_id is required")
        return str(user_id)

    # ---- public API ----

    def count_tasks(self, user_id: str | None = None) -> int:
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            if user_id is None:
                cur.execute("SELECT COUNT(*) FROM tasks")
            else:
                cur.execute("SELECT COUNT(*) FROM tasks WHERE user_id = ?", (user_id,))
            (n,) = cur.fetchone()
            return int(n)
        finally:
            conn.close()

    def add_task(
        self,
        user_id: str,
        *,
        text: str,
        priority: Priority | str = Priority.MEDIUM,
        due_date: datetime | None = None,
        completed: bool = False,
    ) -> str:
        user_id = self._require_user(user_id)
        if not text or not text.strip():
            raise ValueError("text is required")

        task_id = uuid.uuid4().hex
        now = time.time()

        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute(
                """
                INSERT INTO tasks(id, user_id, text, completed, priority, due_date, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    task_id,
                    user_id,
                    text.strip(),
                    int(bool(completed)),
                    Priority.parse(priority).value,
                    format_iso(due_date),
                    now,
                ),
            )
            self._bump_revision(cur, user_id)
            conn.commit()
            logger.debug("Task added id=%s user=%s due=%s", task_id, user_id, due_date)
            return task_id
        finally:
            conn.close()

    def update_task_fields(self, user_id: str, task_id: str, changes: Mapping[str, Any]) -> None:
        """
        Partial update. Keys must be among: text, completed, priority, due_date.
        due_date=None clears the due date. Updating a missing task is a no-op.
        """
        user_id = self._require_user(user_id)
        unknown = set(changes) - MUTABLE_FIELDS
        if unknown:
            raise ValueError(f"unknown task fields: {sorted(unknown)}")

        fields: list[str] = []
        params: list[Any] = []

        if "text" in changes:
            text = str(changes["text"] or "").strip()
            if not text:
                raise ValueError("text must not be blank")
            fields.append("text = ?")
            params.append(text)

        if "completed" in changes:
            fields.append("completed = ?")
            params.append(int(bool(changes["completed"])))

        if "priority" in changes:
            fields.append("priority = ?")
            params.append(Priority.parse(changes["priority"]).value)

        if "due_date" in changes:
            fields.append("due_date = ?")
            params.append(format_iso(parse_due_date(changes["due_date"])))

        if not fields:
            return

        params.extend([str(task_id), user_id])
        sql = f"UPDATE tasks SET {', '.join(fields)} WHERE id = ? AND user_id = ?"

        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute(sql, params)
            if cur.rowcount:
                self._bump_revision(cur, user_id)
            conn.commit()
        finally:
            conn.close()

    def delete_task(self, user_id: str, task_id: str) -> None:
        user_id = self._require_user(user_id)
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute("DELETE FROM tasks WHERE id = ? AND user_id = ?", (str(task_id), user_id))
            if cur.rowcount:
                self._bump_revision(cur, user_id)
            conn.commit()
        finally:
            conn.close()

    def get_task(self, user_id: str, task_id: str) -> Task | None:
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute(
                "SELECT * FROM tasks WHERE id = ? AND user_id = ?", (str(task_id), user_id)
            )
            row = cur.fetchone()
            return self._row_to_task(row) if row else None
        finally:
            conn.close()

    def list_tasks(self, user_id: str) -> list[Task]:
        """All tasks of one user, newest first (rowid breaks created_at ties)."""
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute(
                """
                SELECT *
                FROM tasks
                WHERE user_id = ?
                ORDER BY created_at DESC, rowid DESC
                """,
                (user_id,),
            )
            return [self._row_to_task(r) for r in cur.fetchall()]
        finally:
            conn.close()

    def revision(self, user_id: str) -> int:
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute("SELECT rev FROM task_revisions WHERE user_id = ?", (user_id,))
            row = cur.fetchone()
            return int(row["rev"]) if row else 0
        finally:
            conn.close()

    def for_user(self, user_id: str) -> UserTaskCollection:
        return UserTaskCollection(self, self._require_user(user_id))


class UserTaskCollection:
    """
    Async, already-scoped handle on one user's tasks.

    This is what the sync adapter talks to: it never sees user ids.
    Blocking SQLite calls run in a worker thread.
    """

    def __init__(self, store: TaskStore, user_id: str) -> None:
        self._store = store
        self._user_id = user_id

    @property
    def user_id(self) -> str:
        return self._user_id

    async def create(
        self,
        *,
        text: str,
        priority: Priority = Priority.MEDIUM,
        due_date: datetime | None = None,
        completed: bool = False,
    ) -> str:
        return await asyncio.to_thread(
            self._store.add_task,
            self._user_id,
            text=text,
            priority=priority,
            due_date=due_date,
            completed=completed,
        )

    async def update(self, task_id: str, changes: Mapping[str, Any]) -> None:
        await asyncio.to_thread(self._store.update_task_fields, self._user_id, task_id, dict(changes))

    async def delete(self, task_id: str) -> None:
        await asyncio.to_thread(self._store.delete_task, self._user_id, task_id)

    async def snapshot(self) -> list[Task]:
        return await asyncio.to_thread(self._store.list_tasks, self._user_id)

    async def revision(self) -> int:
        return await asyncio.to_thread(self._store.revision, self._user_id)
