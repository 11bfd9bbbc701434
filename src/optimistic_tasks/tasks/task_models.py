# src/optimistic_tasks/tasks/task_models.py

from __future__ import annotations

import itertools
import time
import uuid
from dataclasses import dataclass
from enum import StrEnum

from ..errors import InvalidInputError

TEMP_ID_PREFIX = "temp-"


class Priority(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def rank(self) -> int:
        return _PRIORITY_RANK[self]

    @classmethod
    def parse(cls, raw: str | Priority) -> Priority:
        try:
            return cls(str(raw).strip().lower())
        except ValueError:
            raise InvalidInputError(f"Unknown priority: {raw!r} (use low, medium or high)") from None


_PRIORITY_RANK = {Priority.LOW: 1, Priority.MEDIUM: 2, Priority.HIGH: 3}


class TaskFilter(StrEnum):
    ALL = "all"
    PENDING = "pending"
    COMPLETED = "completed"

    @classmethod
    def parse(cls, raw: str | TaskFilter) -> TaskFilter:
        try:
            return cls(str(raw).strip().lower())
        except ValueError:
            raise InvalidInputError(f"Unknown filter: {raw!r} (use all, pending or completed)") from None


class TaskSort(StrEnum):
    CREATED = "created"
    PRIORITY = "priority"
    ALPHABETICAL = "alphabetical"

    @classmethod
    def parse(cls, raw: str | TaskSort) -> TaskSort:
        try:
            return cls(str(raw).strip().lower())
        except ValueError:
            raise InvalidInputError(
                f"Unknown sort: {raw!r} (use created, priority or alphabetical)"
            ) from None


@dataclass(slots=True, frozen=True)
class Task:
    id: str
    text: str
    completed: bool
    created_at: float
    priority: Priority

    @property
    def is_temporary(self) -> bool:
        return self.id.startswith(TEMP_ID_PREFIX)


@dataclass(slots=True, frozen=True)
class TaskDraft:
    """Content fields sent to the remote service; identity and created_at are the server's."""

    text: str
    completed: bool
    priority: Priority


class OpKind(StrEnum):
    ADD = "add"
    TOGGLE = "toggle"
    DELETE = "delete"


_op_seq = itertools.count(1)


@dataclass(slots=True, frozen=True)
class PendingOperation:
    """
    A speculative mutation awaiting remote confirmation.

    Tagged by `kind`:
    - add    -> `task` carries the optimistic Task (temporary id)
    - toggle -> `task_id`
    - delete -> `task_id`

    Never mutated: commit and rollback both just retire it.
    """

    op_id: int
    kind: OpKind
    task: Task | None = None
    task_id: str | None = None

    @classmethod
    def add(cls, task: Task) -> PendingOperation:
        return cls(op_id=next(_op_seq), kind=OpKind.ADD, task=task)

    @classmethod
    def toggle(cls, task_id: str) -> PendingOperation:
        return cls(op_id=next(_op_seq), kind=OpKind.TOGGLE, task_id=task_id)

    @classmethod
    def delete(cls, task_id: str) -> PendingOperation:
        return cls(op_id=next(_op_seq), kind=OpKind.DELETE, task_id=task_id)

    @property
    def target_id(self) -> str | None:
        if self.kind == OpKind.ADD:
            return self.task.id if self.task is not None else None
        return self.task_id


@dataclass(slots=True, frozen=True)
class TaskView:
    """A published, immutable result of the recompute pipeline."""

    tasks: tuple[Task, ...]
    filter: TaskFilter
    sort: TaskSort
    token: int


def new_temp_id() -> str:
    return f"{TEMP_ID_PREFIX}{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}"


def normalize_text(raw: str | None) -> str:
    text = (raw or "").strip()
    if not text:
        raise InvalidInputError("Task text must not be empty")
    return text
