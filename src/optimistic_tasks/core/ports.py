# src/optimistic_tasks/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The engine depends on Protocols instead of concrete implementations.
This keeps the remote service swappable (simulator vs test fake).
"""

from collections.abc import Callable
from typing import Protocol

from ..tasks.task_models import Task, TaskDraft


class RemoteTaskService(Protocol):
    """
    The only wire-like boundary.

    One attempt per call, no batching, no retries. Each call either resolves
    after some delay or raises TransientRemoteFailure.
    """

    async def add(self, draft: TaskDraft) -> Task: ...
    async def toggle(self, task_id: str) -> None: ...
    async def delete(self, task_id: str) -> None: ...


ChangeListener = Callable[[], None]
# Called synchronously on the event loop after any engine-visible change.
