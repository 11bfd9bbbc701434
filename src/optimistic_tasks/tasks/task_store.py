# src/optimistic_tasks/tasks/task_store.py

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import replace

from .task_models import Task

logger = logging.getLogger(__name__)


class AuthoritativeStore:
    """
    In-memory store of server-confirmed tasks.

    Every mutation swaps in a new tuple, so a snapshot handed out earlier is never
    changed and callers can detect changes by identity (or by `version`).

    Only the reconciliation coordinator mutates it. Mutators return False when the
    target id is not present instead of raising.
    """

    def __init__(self, initial: Iterable[Task] = ()) -> None:
        self._tasks: tuple[Task, ...] = tuple(initial)
        self._version = 0
        logger.info("AuthoritativeStore ready total=%s", len(self._tasks))

    @property
    def version(self) -> int:
        return self._version

    def snapshot(self) -> tuple[Task, ...]:
        return self._tasks

    def get(self, task_id: str) -> Task | None:
        for t in self._tasks:
            if t.id == task_id:
                return t
        return None

    def __contains__(self, task_id: object) -> bool:
        return isinstance(task_id, str) and self.get(task_id) is not None

    def __len__(self) -> int:
        return len(self._tasks)

    def _swap(self, tasks: tuple[Task, ...]) -> None:
        self._tasks = tasks
        self._version += 1

    def append(self, task: Task) -> bool:
        if task.id in self:
            logger.warning("append ignored: duplicate task_id=%s", task.id)
            return False
        self._swap(self._tasks + (task,))
        return True

    def toggle(self, task_id: str) -> bool:
        if task_id not in self:
            return False
        self._swap(
            tuple(replace(t, completed=not t.completed) if t.id == task_id else t for t in self._tasks)
        )
        return True

    def remove(self, task_id: str) -> bool:
        if task_id not in self:
            return False
        self._swap(tuple(t for t in self._tasks if t.id != task_id))
        return True
