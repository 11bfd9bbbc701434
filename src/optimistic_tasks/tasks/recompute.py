# src/optimistic_tasks/tasks/recompute.py

from __future__ import annotations

"""
Recompute pipeline.

Derives the displayed list (filter + deliberately expensive sort) off the event
loop. Every request bumps a monotonically increasing token; a run publishes only
if its token is still the latest when it finishes. Stale runs are discarded
(before starting if possible), never merged. The last published view stays
visible until a newer one is ready.
"""

import asyncio
import locale
import logging
import time
import unicodedata
from collections.abc import Callable, Iterable
from concurrent.futures import Executor, ThreadPoolExecutor

from .task_models import Task, TaskFilter, TaskSort, TaskView

logger = logging.getLogger(__name__)

PublishListener = Callable[[TaskView], None]


def filter_tasks(tasks: Iterable[Task], task_filter: TaskFilter) -> tuple[Task, ...]:
    if task_filter == TaskFilter.PENDING:
        return tuple(t for t in tasks if not t.completed)
    if task_filter == TaskFilter.COMPLETED:
        return tuple(t for t in tasks if t.completed)
    return tuple(tasks)


def _collation_key(task: Task) -> tuple[str, str]:
    # Case and accents only break ties; works under the "C" locale too.
    decomposed = unicodedata.normalize("NFKD", task.text.casefold())
    base = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return (locale.strxfrm(base), task.text)


def sort_tasks(tasks: Iterable[Task], sort_key: TaskSort) -> tuple[Task, ...]:
    # sorted() is stable, also with reverse=True
    if sort_key == TaskSort.CREATED:
        return tuple(sorted(tasks, key=lambda t: t.created_at, reverse=True))
    if sort_key == TaskSort.PRIORITY:
        return tuple(sorted(tasks, key=lambda t: t.priority.rank, reverse=True))
    if sort_key == TaskSort.ALPHABETICAL:
        return tuple(sorted(tasks, key=_collation_key))
    return tuple(tasks)


def _burn_cpu(seconds: float) -> None:
    if seconds <= 0:
        return
    deadline = time.perf_counter() + seconds
    while time.perf_counter() < deadline:
        pass


def compute_view(
    tasks: Iterable[Task],
    task_filter: TaskFilter,
    sort_key: TaskSort,
    *,
    cost_seconds: float = 0.0,
) -> tuple[Task, ...]:
    _burn_cpu(cost_seconds)
    return sort_tasks(filter_tasks(tasks, task_filter), sort_key)


class RecomputePipeline:
    def __init__(
        self,
        *,
        cost_seconds: float = 0.0,
        on_publish: PublishListener | None = None,
        executor: Executor | None = None,
    ) -> None:
        self._cost_seconds = max(0.0, float(cost_seconds))
        self._on_publish = on_publish

        self._owns_executor = executor is None
        self._executor: Executor = executor or ThreadPoolExecutor(
            max_workers=1, thread_name_prefix="recompute"
        )

        self._token = 0
        self._settled_token = 0
        self._view = TaskView(tasks=(), filter=TaskFilter.ALL, sort=TaskSort.CREATED, token=0)
        self._runs: set[asyncio.Task[None]] = set()

    @property
    def view(self) -> TaskView:
        return self._view

    @property
    def is_busy(self) -> bool:
        return self._settled_token != self._token

    def request(self, tasks: Iterable[Task], task_filter: TaskFilter, sort_key: TaskSort) -> int:
        """Schedule a recomputation; supersedes any earlier one. Returns its token."""
        loop = asyncio.get_running_loop()
        self._token += 1
        token = self._token

        run = loop.create_task(
            self._run(token, tuple(tasks), task_filter, sort_key), name=f"recompute-{token}"
        )
        self._runs.add(run)
        run.add_done_callback(self._runs.discard)
        return token

    async def wait_idle(self) -> None:
        while self._runs:
            await asyncio.gather(*list(self._runs), return_exceptions=True)

    def close(self) -> None:
        if self._owns_executor:
            self._executor.shutdown(wait=False, cancel_futures=True)

    # ---- internals ----

    async def _run(
        self, token: int, tasks: tuple[Task, ...], task_filter: TaskFilter, sort_key: TaskSort
    ) -> None:
        # Let pending input callbacks run first; they may supersede this request.
        await asyncio.sleep(0)
        if token != self._token:
            logger.debug("recompute token=%s superseded before start", token)
            return

        loop = asyncio.get_running_loop()
        try:
            result = await loop.run_in_executor(
                self._executor, self._compute, token, tasks, task_filter, sort_key
            )
        except Exception:
            logger.exception("recompute token=%s failed; keeping previous view", token)
            if token == self._token:
                self._settled_token = token
            return

        if result is None or token != self._token:
            logger.debug("recompute token=%s superseded; result discarded", token)
            return

        self._view = TaskView(tasks=result, filter=task_filter, sort=sort_key, token=token)
        self._settled_token = token
        logger.debug("recompute token=%s published rows=%s", token, len(result))

        if self._on_publish is not None:
            try:
                self._on_publish(self._view)
            except Exception:
                logger.exception("on_publish listener failed")

    def _compute(
        self, token: int, tasks: tuple[Task, ...], task_filter: TaskFilter, sort_key: TaskSort
    ) -> tuple[Task, ...] | None:
        # Worker thread. Skip work that became stale while queued.
        if token != self._token:
            return None
        return compute_view(tasks, task_filter, sort_key, cost_seconds=self._cost_seconds)
