# src/tasklane/core/session.py

from __future__ import annotations

import contextlib
import logging
import os
import uuid
from pathlib import Path

logger = logging.getLogger(__name__)


def resolve_user_id(*, explicit: str | None, identity_path: Path) -> str | None:
    """
    Stable user identity for the local session.

    - an explicit id (TASKLANE_USER_ID) wins, like a delegated sign-in token
    - otherwise an anonymous id is read from identity_path, created on first run

    Returns None if no identity could be established; the app then stays inert.
    """
    if explicit and explicit.strip():
        return explicit.strip()

    try:
        if identity_path.exists():
            existing = identity_path.read_text("utf-8").strip()
            if existing:
                return existing

        identity_path.parent.mkdir(parents=True, exist_ok=True)
        new_id = f"anon-{uuid.uuid4().hex}"
        tmp = identity_path.with_suffix(".tmp")
        tmp.write_text(new_id, "utf-8")
        os.replace(tmp, identity_path)
        with contextlib.suppress(Exception):
            os.chmod(identity_path, 0o600)
        logger.info("Created anonymous identity at %s", identity_path)
        return new_id
    except OSError:
        logger.exception("Failed to establish identity at %s", identity_path)
        return None
