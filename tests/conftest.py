# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from tasklane.core.state import AppState
from tasklane.tasks.task_store import TaskStore
from tasklane.tasks.task_sync import TaskStoreAdapter

from .fakes import FakeExtractionClient, FakeTaskCollection


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and the bootstrap.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="tasklane-test",
        log_level="INFO",
        console_enabled=False,
        data_dir=tmp_path,
        tasks_db_path=tmp_path / "tasks.sqlite3",
        identity_path=tmp_path / "identity.txt",
        user_id="u1",
        llm_api_key=None,
        llm_base_url="https://example.invalid/v1",
        llm_models=["test-model"],
        llm_timeout_seconds=5.0,
        extra_headers={},
        sync_poll_seconds=0.01,
    )


@pytest.fixture()
def store(settings: SimpleNamespace) -> TaskStore:
    return TaskStore(settings.tasks_db_path)


@pytest.fixture()
def collection() -> FakeTaskCollection:
    return FakeTaskCollection()


@pytest.fixture()
def adapter(collection: FakeTaskCollection) -> TaskStoreAdapter:
    return TaskStoreAdapter(collection, poll_interval=0.01)


@pytest.fixture()
def llm() -> FakeExtractionClient:
    return FakeExtractionClient()


@pytest.fixture()
def state(settings: SimpleNamespace, adapter: TaskStoreAdapter, llm: FakeExtractionClient) -> AppState:
    """AppState wired with the in-memory collection and the fake extraction client."""
    return AppState(settings=settings, adapter=adapter, llm=llm, user_id="u1")
