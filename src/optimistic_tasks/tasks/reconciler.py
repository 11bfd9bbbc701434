# src/optimistic_tasks/tasks/reconciler.py

from __future__ import annotations

"""
Reconciliation coordinator.

One user intent -> exactly one optimistic PendingOperation + exactly one remote call.
When the call settles:
- success: apply server truth to AuthoritativeStore, then retire the operation
  (same synchronous step, so the overlay never shows the task twice)
- failure: retire the operation without touching the store and set the error

Operations are never serialized per task. A commit against an id that is no
longer in the store (e.g. toggle settling after delete) is a silent no-op.
"""

import asyncio
import logging
import time
from collections.abc import Callable

from ..core.ports import ChangeListener, RemoteTaskService
from ..errors import InvalidInputError, TransientRemoteFailure
from .task_models import (
    OpKind,
    PendingOperation,
    Priority,
    Task,
    TaskDraft,
    new_temp_id,
    normalize_text,
)
from .task_store import AuthoritativeStore

logger = logging.getLogger(__name__)

DEFAULT_ERRORS = {
    OpKind.ADD: "Failed to add task",
    OpKind.TOGGLE: "Failed to update task",
    OpKind.DELETE: "Failed to delete task",
}


class ReconciliationCoordinator:
    def __init__(
        self,
        store: AuthoritativeStore,
        remote: RemoteTaskService,
        *,
        on_change: ChangeListener | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._store = store
        self._remote = remote
        self._on_change = on_change
        self._clock = clock

        self._pending: dict[int, PendingOperation] = {}
        self._pending_snapshot: tuple[PendingOperation, ...] = ()
        self._pending_version = 0
        self._inflight: set[asyncio.Task[None]] = set()
        self._error: str | None = None

    # ---- read side ----

    @property
    def pending(self) -> tuple[PendingOperation, ...]:
        """In-flight operations in submission order."""
        return self._pending_snapshot

    @property
    def pending_version(self) -> int:
        return self._pending_version

    @property
    def error(self) -> str | None:
        return self._error

    def is_pending(self, task_id: str) -> bool:
        return any(op.target_id == task_id for op in self._pending_snapshot)

    # ---- intents ----

    def submit_add(self, text: str, priority: Priority | str = Priority.MEDIUM) -> PendingOperation:
        clean = normalize_text(text)
        prio = Priority.parse(priority)
        loop = asyncio.get_running_loop()

        task = Task(
            id=new_temp_id(),
            text=clean,
            completed=False,
            created_at=self._clock(),
            priority=prio,
        )
        op = PendingOperation.add(task)
        self._dispatch(loop, op)
        return op

    def submit_toggle(self, task_id: str) -> PendingOperation:
        loop = asyncio.get_running_loop()
        op = PendingOperation.toggle(_require_id(task_id))
        self._dispatch(loop, op)
        return op

    def submit_delete(self, task_id: str) -> PendingOperation:
        loop = asyncio.get_running_loop()
        op = PendingOperation.delete(_require_id(task_id))
        self._dispatch(loop, op)
        return op

    def dismiss_error(self) -> None:
        if self._error is not None:
            self._error = None
            self._notify()

    async def wait_idle(self) -> None:
        while self._inflight:
            await asyncio.gather(*list(self._inflight), return_exceptions=True)

    # ---- internals ----

    def _dispatch(self, loop: asyncio.AbstractEventLoop, op: PendingOperation) -> None:
        self._error = None
        self._pending[op.op_id] = op
        self._refresh_snapshot()
        logger.debug("registered op_id=%s kind=%s target=%s", op.op_id, op.kind.value, op.target_id)

        runner = loop.create_task(self._reconcile(op), name=f"reconcile-{op.kind.value}-{op.op_id}")
        self._inflight.add(runner)
        runner.add_done_callback(self._inflight.discard)

        self._notify()

    async def _reconcile(self, op: PendingOperation) -> None:
        try:
            await self._call_and_commit(op)
        except TransientRemoteFailure as exc:
            logger.warning("op_id=%s kind=%s rolled back: %s", op.op_id, op.kind.value, exc)
            self._error = str(exc) or DEFAULT_ERRORS[op.kind]
        except Exception:
            logger.exception("op_id=%s kind=%s: unexpected remote error", op.op_id, op.kind.value)
            self._error = DEFAULT_ERRORS[op.kind]
        finally:
            self._retire(op)

    async def _call_and_commit(self, op: PendingOperation) -> None:
        if op.kind == OpKind.ADD:
            task = op.task
            if task is None:
                return
            draft = TaskDraft(text=task.text, completed=task.completed, priority=task.priority)
            server_task = await self._remote.add(draft)
            self._store.append(server_task)
            logger.info("add committed temp_id=%s -> id=%s", task.id, server_task.id)
            return

        if op.task_id is None:
            return
        if op.kind == OpKind.TOGGLE:
            await self._remote.toggle(op.task_id)
            applied = self._store.toggle(op.task_id)
        else:
            await self._remote.delete(op.task_id)
            applied = self._store.remove(op.task_id)

        if applied:
            logger.info("%s committed task_id=%s", op.kind.value, op.task_id)
        else:
            logger.debug("%s commit is a no-op: task_id=%s not in store", op.kind.value, op.task_id)

    def _retire(self, op: PendingOperation) -> None:
        if self._pending.pop(op.op_id, None) is None:
            return
        self._refresh_snapshot()
        self._notify()

    def _refresh_snapshot(self) -> None:
        self._pending_snapshot = tuple(self._pending.values())
        self._pending_version += 1

    def _notify(self) -> None:
        if self._on_change is None:
            return
        try:
            self._on_change()
        except Exception:
            logger.exception("on_change listener failed")


def _require_id(task_id: str | None) -> str:
    tid = (task_id or "").strip()
    if not tid:
        raise InvalidInputError("task_id must not be empty")
    return tid
