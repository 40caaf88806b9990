# tests/test_bootstrap.py

from __future__ import annotations

import pytest

from tasklane.cli.bootstrap import create_initial_state
from tasklane.core.session import resolve_user_id
from tasklane.llm.offline import OfflineExtractionClient


def test_explicit_user_id_wins(tmp_path) -> None:
    path = tmp_path / "identity.txt"
    assert resolve_user_id(explicit=" alice ", identity_path=path) == "alice"
    assert not path.exists()


def test_anonymous_identity_is_persisted(tmp_path) -> None:
    path = tmp_path / "nested" / "identity.txt"
    first = resolve_user_id(explicit=None, identity_path=path)
    assert first is not None and first.startswith("anon-")
    assert resolve_user_id(explicit="", identity_path=path) == first


def test_unwritable_identity_path_gives_no_identity(tmp_path) -> None:
    blocker = tmp_path / "file"
    blocker.write_text("x", "utf-8")
    assert resolve_user_id(explicit=None, identity_path=blocker / "identity.txt") is None


@pytest.mark.asyncio
async def test_initial_state_without_llm_key_is_offline(settings) -> None:
    state = create_initial_state(settings=settings)

    assert isinstance(state.llm, OfflineExtractionClient)
    assert state.user_id == "u1"
    assert state.adapter.has_identity

    task_id = await state.adapter.create("from bootstrap")
    assert task_id is not None
    snap = await state.adapter.collection.snapshot()
    assert [t.text for t in snap] == ["from bootstrap"]
