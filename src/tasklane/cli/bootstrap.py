# src/tasklane/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- ensures local (gitignored) directories exist,
- establishes the session identity,
- wires concrete implementations into AppState (store adapter, extraction client).
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..core.ports import ExtractionClient
from ..core.session import resolve_user_id
from ..core.state import AppState
from ..llm.client import OpenAIExtractionClient
from ..llm.offline import OfflineExtractionClient
from ..tasks.task_store import TaskStore
from ..tasks.task_sync import TaskStoreAdapter

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.tasks_db_path.parent.mkdir(parents=True, exist_ok=True)


def create_initial_state(*, settings=None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    llm_client: ExtractionClient
    try:
        llm_client = OpenAIExtractionClient(settings)
    except RuntimeError as e:
        logger.info("Extraction service disabled (%s). Assisted modes will fall back.", e)
        llm_client = OfflineExtractionClient()

    adapter = TaskStoreAdapter(poll_interval=settings.sync_poll_seconds)

    user_id = resolve_user_id(explicit=settings.user_id, identity_path=settings.identity_path)
    if user_id is not None:
        store = TaskStore(settings.tasks_db_path)
        adapter.bind(store.for_user(user_id))
    else:
        logger.warning("No user identity; task operations are disabled for this session.")

    return AppState(settings=settings, adapter=adapter, llm=llm_client, user_id=user_id)
