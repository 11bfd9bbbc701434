# src/optimistic_tasks/tasks/engine.py

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable, Iterable
from concurrent.futures import Executor
from dataclasses import dataclass
from typing import cast

from ..core.ports import ChangeListener, RemoteTaskService
from .overlay import project
from .recompute import RecomputePipeline
from .reconciler import ReconciliationCoordinator
from .task_models import PendingOperation, Priority, Task, TaskFilter, TaskSort, TaskView
from .task_store import AuthoritativeStore

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class FilterCounts:
    all: int
    pending: int
    completed: int


class TaskEngine:
    """
    Facade over the optimistic task core.

    Wires AuthoritativeStore + ReconciliationCoordinator + overlay projection +
    RecomputePipeline. Mutation and view intents are plain synchronous calls and
    must be made from inside the running event loop; the remote round trips and
    recomputations continue in the background.

    Read side:
    - overlay         what the user currently sees (store + in-flight ops)
    - view            last published filtered/sorted list (may lag the overlay)
    - is_recomputing  True while a newer view is being computed
    - error           most recent remote failure message, or None
    """

    def __init__(
        self,
        remote: RemoteTaskService,
        *,
        initial_tasks: Iterable[Task] = (),
        sort_cost_seconds: float = 0.0,
        default_priority: Priority | str = Priority.MEDIUM,
        task_filter: TaskFilter = TaskFilter.ALL,
        sort_key: TaskSort = TaskSort.CREATED,
        clock: Callable[[], float] = time.time,
        executor: Executor | None = None,
    ) -> None:
        self._store = AuthoritativeStore(initial_tasks)
        self._coordinator = ReconciliationCoordinator(
            self._store, remote, on_change=self._on_state_change, clock=clock
        )
        self._pipeline = RecomputePipeline(
            cost_seconds=sort_cost_seconds, on_publish=self._on_publish, executor=executor
        )
        self._default_priority = Priority.parse(default_priority)
        self._filter = task_filter
        self._sort = sort_key
        self._listeners: list[ChangeListener] = []

        self._overlay_key: tuple[int, int] | None = None
        self._requested_inputs: tuple[int, int] | None = None
        self._overlay: tuple[Task, ...] = ()

        # Built inside the loop: start the first view right away.
        if _loop_is_running():
            self.refresh()

    # ---- mutation intents ----

    def request_add(self, text: str, priority: Priority | str | None = None) -> Task:
        """Optimistically add a task; returns the speculative Task (temporary id)."""
        op = self._coordinator.submit_add(text, priority or self._default_priority)
        return cast(Task, op.task)

    def request_toggle(self, task_id: str) -> PendingOperation:
        return self._coordinator.submit_toggle(task_id)

    def request_delete(self, task_id: str) -> PendingOperation:
        return self._coordinator.submit_delete(task_id)

    def dismiss_error(self) -> None:
        self._coordinator.dismiss_error()

    # ---- view intents ----

    def set_filter(self, task_filter: TaskFilter | str) -> None:
        new = TaskFilter.parse(task_filter)
        if new == self._filter:
            return
        self._filter = new
        self.refresh()

    def set_sort(self, sort_key: TaskSort | str) -> None:
        new = TaskSort.parse(sort_key)
        if new == self._sort:
            return
        self._sort = new
        self.refresh()

    def refresh(self) -> int:
        """Request a recomputation from the current overlay/filter/sort."""
        self._requested_inputs = self._overlay_inputs()
        token = self._pipeline.request(self.overlay, self._filter, self._sort)
        self._notify()
        return token

    # ---- read side ----

    @property
    def overlay(self) -> tuple[Task, ...]:
        key = self._overlay_inputs()
        if key != self._overlay_key:
            self._overlay = project(self._store.snapshot(), self._coordinator.pending)
            self._overlay_key = key
        return self._overlay

    @property
    def confirmed_tasks(self) -> tuple[Task, ...]:
        return self._store.snapshot()

    @property
    def pending_operations(self) -> tuple[PendingOperation, ...]:
        return self._coordinator.pending

    @property
    def has_pending_operations(self) -> bool:
        return bool(self._coordinator.pending)

    def is_task_pending(self, task_id: str) -> bool:
        return self._coordinator.is_pending(task_id)

    @property
    def view(self) -> TaskView:
        return self._pipeline.view

    @property
    def display_tasks(self) -> tuple[Task, ...]:
        return self._pipeline.view.tasks

    @property
    def is_recomputing(self) -> bool:
        # True also while the current overlay was never handed to the pipeline.
        return self._view_is_stale() or self._pipeline.is_busy

    @property
    def error(self) -> str | None:
        return self._coordinator.error

    @property
    def filter(self) -> TaskFilter:
        return self._filter

    @property
    def sort(self) -> TaskSort:
        return self._sort

    @property
    def default_priority(self) -> Priority:
        return self._default_priority

    @property
    def counts(self) -> FilterCounts:
        tasks = self.overlay
        done = sum(1 for t in tasks if t.completed)
        return FilterCounts(all=len(tasks), pending=len(tasks) - done, completed=done)

    @property
    def empty_message(self) -> str:
        if self.view.filter == TaskFilter.ALL:
            return "No tasks yet. Add some above!"
        return f"No {self.view.filter.value} tasks found."

    # ---- listeners / lifecycle ----

    def add_listener(self, listener: ChangeListener) -> Callable[[], None]:
        """Register a change callback; returns an unsubscribe function."""
        self._listeners.append(listener)

        def _remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _remove

    async def wait_recomputed(self) -> None:
        """Wait for the latest requested view only; remote calls may still be in flight."""
        if self._view_is_stale():
            self.refresh()
        await self._pipeline.wait_idle()

    async def wait_idle(self) -> None:
        """Wait until no remote call is in flight and the latest view is published."""
        while True:
            await self._coordinator.wait_idle()
            await self.wait_recomputed()
            if not self._coordinator.pending and not self.is_recomputing:
                return

    async def aclose(self) -> None:
        if self._coordinator.pending:
            logger.info("Waiting for %d in-flight operations...", len(self._coordinator.pending))
        await self.wait_idle()
        self._pipeline.close()

    # ---- internals ----

    def _on_state_change(self) -> None:
        # Error-only changes do not touch the overlay; skip the recompute then.
        if self._overlay_inputs() != self._requested_inputs:
            self.refresh()
        else:
            self._notify()

    def _overlay_inputs(self) -> tuple[int, int]:
        return (self._store.version, self._coordinator.pending_version)

    def _view_is_stale(self) -> bool:
        return self._requested_inputs != self._overlay_inputs()

    def _on_publish(self, _view: TaskView) -> None:
        self._notify()

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener()
            except Exception:
                logger.exception("engine listener failed")


def _loop_is_running() -> bool:
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return False
    return True
