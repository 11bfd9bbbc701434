# src/optimistic_tasks/tasks/overlay.py

from __future__ import annotations

"""
Optimistic overlay.

`project()` folds in-flight PendingOperations (in submission order) onto the
authoritative snapshot and returns the list the user currently sees.

Total by construction: unknown kinds and missing payloads are identity steps.
"""

from collections.abc import Iterable
from dataclasses import replace

from .task_models import OpKind, PendingOperation, Task


def apply_operation(tasks: tuple[Task, ...], op: PendingOperation) -> tuple[Task, ...]:
    if op.kind == OpKind.ADD:
        return tasks + (op.task,) if op.task is not None else tasks

    if op.kind == OpKind.TOGGLE:
        if op.task_id is None:
            return tasks
        return tuple(
            replace(t, completed=not t.completed) if t.id == op.task_id else t for t in tasks
        )

    if op.kind == OpKind.DELETE:
        if op.task_id is None:
            return tasks
        return tuple(t for t in tasks if t.id != op.task_id)

    return tasks


def project(base: Iterable[Task], pending: Iterable[PendingOperation]) -> tuple[Task, ...]:
    tasks = tuple(base)
    for op in pending:
        tasks = apply_operation(tasks, op)
    return tasks
