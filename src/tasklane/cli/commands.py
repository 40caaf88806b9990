# src/tasklane/cli/commands.py

from __future__ import annotations

import inspect
import logging
from collections.abc import Awaitable, Callable
from datetime import date, datetime

from ..core.state import AppState
from ..ingest.breakdown import breakdown_task
from ..ingest.pipeline import ingest_assisted, ingest_naive
from ..tasks import task_api
from ..tasks.task_dates import due_status, format_due
from ..tasks.task_models import Priority, Task, parse_due_date
from ..tasks.task_views import ViewMode, calendar_marks, organize_tasks, task_stats

CommandEmitter = Callable[[str], None]
CommandHandler = Callable[
    [AppState, list[str], str | None, CommandEmitter | None], Awaitable[str] | str
]

logger = logging.getLogger(__name__)

_BADGES = {"overdue": "OVERDUE", "today": "TODAY"}


class CommandRegistry:
    """Slash-command registry used by the console (/help, /add, /list, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}
        self._needs_body: set[str] = set()

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
        needs_body: bool = False,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler
        if needs_body:
            self._needs_body.update([key, *(a.lower() for a in aliases)])

    def needs_body(self, line: str) -> bool:
        """True for a bare paste-mode command such as "/dump" (no inline text)."""
        if not line.startswith("/"):
            return False
        parts = line[1:].split()
        return len(parts) == 1 and parts[0].lower() in self._needs_body

    async def handle(
        self,
        state: AppState,
        line: str,
        body: str | None = None,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        if body is None and name in self._needs_body and args:
            body = line[1:].split(None, 1)[1]

        res = handler(state, args, body, emit)
        if inspect.isawaitable(res):
            res = await res
        return res

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


def _now() -> datetime:
    return datetime.now().astimezone()


def _pick(state: AppState, args: list[str]) -> Task | None:
    """Resolve "<n>" against the last /list output, then refresh from the live snapshot."""
    if not args:
        return None
    try:
        idx = int(args[0])
    except ValueError:
        return None
    if not 1 <= idx <= len(state.last_listing):
        return None
    listed = state.last_listing[idx - 1]
    for t in state.tasks:
        if t.id == listed.id:
            return t
    return listed


def _render_task(n: int, t: Task, now: datetime) -> str:
    mark = "[x]" if t.completed else "[ ]"
    line = f"{n:>3}. {mark} {t.text}"
    status = due_status(t, now)
    if status is not None:
        badge = _BADGES.get(status)
        line += f"  ({badge}: {format_due(t.due_date)})" if badge else f"  ({format_due(t.due_date)})"
    return line


def cmd_help(state: AppState, args: list[str], body: str | None, emit: CommandEmitter | None) -> str:
    return registry.build_help()


def cmd_list(state: AppState, args: list[str], body: str | None, emit: CommandEmitter | None) -> str:
    """
    /list                      -> current view
    /list active|completed|all
    /list calendar 2025-01-31  -> tasks due that day
    """
    if args:
        state.view = ViewMode.parse(args[0])
        state.selected_date = None
        if state.view == ViewMode.CALENDAR and len(args) > 1:
            try:
                state.selected_date = date.fromisoformat(args[1])
            except ValueError:
                return "Usage: /list calendar YYYY-MM-DD"

    buckets = organize_tasks(state.tasks, state.view, state.selected_date)
    now = _now()

    lines = [f"View: {state.view.value}" + (f" {state.selected_date}" if state.selected_date else "")]
    listing: list[Task] = []
    for title, group in (
        ("High priority", buckets.high),
        ("Medium priority", buckets.medium),
        ("Low priority", buckets.low),
        ("Completed", buckets.done),
    ):
        if not group:
            continue
        lines.append(f"{title}:")
        for t in group:
            listing.append(t)
            lines.append(_render_task(len(listing), t, now))

    state.last_listing = listing
    if not listing:
        lines.append("  (no tasks)")
    return "\n".join(lines)


async def cmd_add(state: AppState, args: list[str], body: str | None, emit: CommandEmitter | None) -> str:
    """/add Buy milk @2025-01-31T17:00"""
    due = None
    words = list(args)
    if words and words[-1].startswith("@"):
        due = parse_due_date(words.pop()[1:])
        if due is None:
            return "Could not read the due date. Use ISO format, e.g. @2025-01-31T17:00."
    task_id = await task_api.add_task(state.adapter, " ".join(words), due_date=due)
    return "Added." if task_id else "Nothing added."


async def cmd_done(state: AppState, args: list[str], body: str | None, emit: CommandEmitter | None) -> str:
    task = _pick(state, args)
    if task is None:
        return "Usage: /done <n> (numbers from the last /list)."
    await task_api.toggle_completed(state.adapter, task)
    return f"{'Reopened' if task.completed else 'Completed'}: {task.text}"


async def cmd_prio(state: AppState, args: list[str], body: str | None, emit: CommandEmitter | None) -> str:
    task = _pick(state, args)
    if task is None:
        return "Usage: /prio <n>"
    await task_api.cycle_priority(state.adapter, task)
    return f"Priority: {Priority.parse(task.priority).next().value}"


async def cmd_edit(state: AppState, args: list[str], body: str | None, emit: CommandEmitter | None) -> str:
    task = _pick(state, args)
    if task is None or len(args) < 2:
        return "Usage: /edit <n> <new text>"
    changed = await task_api.edit_text(state.adapter, task, " ".join(args[1:]))
    return "Updated." if changed else "No change."


async def cmd_due(state: AppState, args: list[str], body: str | None, emit: CommandEmitter | None) -> str:
    task = _pick(state, args)
    if task is None or len(args) < 2:
        return "Usage: /due <n> <ISO date-time | none>"
    raw = args[1]
    due = None if raw.lower() == "none" else parse_due_date(raw)
    if due is None and raw.lower() != "none":
        return "Could not read the due date. Use ISO format, e.g. 2025-01-31T17:00."
    await task_api.set_due_date(state.adapter, task, due)
    return "Due date cleared." if due is None else f"Due: {format_due(due)}"


async def cmd_rm(state: AppState, args: list[str], body: str | None, emit: CommandEmitter | None) -> str:
    task = _pick(state, args)
    if task is None:
        return "Usage: /rm <n>"
    await task_api.delete_task(state.adapter, task.id)
    return f"Deleted: {task.text}"


async def cmd_dump(state: AppState, args: list[str], body: str | None, emit: CommandEmitter | None) -> str:
    if not body or not body.strip():
        return "Nothing to add."
    created = await ingest_naive(state.adapter, body)
    return f"Added {len(created)} task(s)."


async def cmd_smart(state: AppState, args: list[str], body: str | None, emit: CommandEmitter | None) -> str:
    if not body or not body.strip():
        return "Nothing to add."
    if emit is not None:
        emit("Analyzing...")
    result = await ingest_assisted(state.adapter, state.llm, body, _now())
    if result.used_fallback:
        return f"Added {len(result.created_ids)} task(s) line by line."
    return f"Added {len(result.created_ids)} task(s) with detected priorities and dates."


async def cmd_split(state: AppState, args: list[str], body: str | None, emit: CommandEmitter | None) -> str:
    task = _pick(state, args)
    if task is None:
        return "Usage: /split <n>"
    if emit is not None:
        emit("Breaking down...")
    result = await breakdown_task(state.adapter, state.llm, task)
    if not result.created_ids:
        return "No subtasks added."
    return f"Added {len(result.created_ids)} subtask(s)."


def cmd_stats(state: AppState, args: list[str], body: str | None, emit: CommandEmitter | None) -> str:
    stats = task_stats(state.tasks)
    return f"{stats.done}/{stats.total} done ({stats.progress}%)"


def cmd_cal(state: AppState, args: list[str], body: str | None, emit: CommandEmitter | None) -> str:
    """/cal [YYYY-MM] -> days with tasks due; "!" marks a high-priority task."""
    today = _now().date()
    year, month = today.year, today.month
    if args:
        try:
            y, m = args[0].split("-", 1)
            year, month = int(y), int(m)
            date(year, month, 1)
        except ValueError:
            return "Usage: /cal [YYYY-MM]"

    marks = calendar_marks(state.tasks, year, month)
    if not marks:
        return f"{year}-{month:02d}: no tasks due."
    days = ", ".join(f"{day}{'!' if m.has_high else ''} ({m.count})" for day, m in marks.items())
    return f"{year}-{month:02d}: {days}"


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("list", cmd_list, help_text="List tasks: /list [all|active|completed|calendar YYYY-MM-DD].", aliases=["ls"])
registry.register("add", cmd_add, help_text="Add a task: /add <text> [@<ISO due date>].")
registry.register("done", cmd_done, help_text="Toggle completion: /done <n>.")
registry.register("prio", cmd_prio, help_text="Cycle priority low -> medium -> high: /prio <n>.")
registry.register("edit", cmd_edit, help_text="Edit text: /edit <n> <text>.")
registry.register("due", cmd_due, help_text="Set or clear due date: /due <n> <ISO|none>.")
registry.register("rm", cmd_rm, help_text="Delete a task: /rm <n>.", aliases=["del"])
registry.register("dump", cmd_dump, help_text="Paste a list, one task per line (end with '.').", needs_body=True)
registry.register(
    "smart", cmd_smart, help_text="Paste a list; detect priorities and due dates (end with '.').", needs_body=True
)
registry.register("split", cmd_split, help_text="Break a task into subtasks: /split <n>.")
registry.register("stats", cmd_stats, help_text="Show completion progress.")
registry.register("cal", cmd_cal, help_text="Days with tasks due: /cal [YYYY-MM].")
