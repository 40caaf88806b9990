# src/tasklane/core/state.py

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date

from ..tasks.task_models import Task
from ..tasks.task_sync import TaskStoreAdapter
from ..tasks.task_views import ViewMode
from .ports import ExtractionClient


@dataclass
class AppState:
    # Settings are kept on the state for easy access in other modules.
    settings: object

    adapter: TaskStoreAdapter
    llm: ExtractionClient
    user_id: str | None = None

    # Latest snapshot from the live subscription (newest first).
    tasks: list[Task] = field(default_factory=list)

    # Console view state; /done 2 etc. refer to last_listing.
    view: ViewMode = ViewMode.ALL
    selected_date: date | None = None
    last_listing: list[Task] = field(default_factory=list)
