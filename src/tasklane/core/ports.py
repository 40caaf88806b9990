# src/tasklane/core/ports.py

"""
Ports (interfaces) used by the core.

The core depends on Protocols instead of concrete implementations.
This keeps the store and the extraction provider swappable and makes testing easier.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from typing import Any, Protocol

from ..tasks.task_models import Priority, Task


class TaskCollection(Protocol):
    """
    One user's task collection, already scoped by the session.

    snapshot() returns tasks newest first. revision() changes whenever the
    collection changes, whoever made the change.
    """

    async def create(
            self,
            *,
            text: str,
            priority: Priority = Priority.MEDIUM,
            due_date: datetime | None = None,
            completed: bool = False,
    ) -> str: ...

    async def update(self, task_id: str, changes: Mapping[str, Any]) -> None: ...
    async def delete(self, task_id: str) -> None: ...
    async def snapshot(self) -> list[Task]: ...
    async def revision(self) -> int: ...


class ExtractionClient(Protocol):
    """
    Natural-language extraction service.

    Returns the raw model output as TEXT; JSON parsing and shape validation
    happen in ingest.extraction. Raises on transport/service failure.
    """

    async def complete(
            self,
            *,
            instruction: str,
            prompt: str,
            context: str | None = None,
    ) -> str: ...

    async def aclose(self) -> None: ...