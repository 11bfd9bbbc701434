# tests/test_recompute.py

from __future__ import annotations

import asyncio
import contextlib

import pytest

from optimistic_tasks.tasks.recompute import RecomputePipeline, compute_view, filter_tasks, sort_tasks
from optimistic_tasks.tasks.task_models import Priority, Task, TaskFilter, TaskSort, TaskView


def _t(tid: str, text: str, prio: Priority, *, done: bool = False, created: float = 0.0) -> Task:
    return Task(id=tid, text=text, completed=done, created_at=created, priority=prio)


def test_filters(base_tasks) -> None:
    assert [t.id for t in filter_tasks(base_tasks, TaskFilter.ALL)] == ["a", "b", "c"]
    assert [t.id for t in filter_tasks(base_tasks, TaskFilter.PENDING)] == ["a", "c"]
    assert [t.id for t in filter_tasks(base_tasks, TaskFilter.COMPLETED)] == ["b"]


def test_sort_created_is_newest_first(base_tasks) -> None:
    assert [t.id for t in sort_tasks(base_tasks, TaskSort.CREATED)] == ["c", "b", "a"]


def test_sort_alphabetical_ascending() -> None:
    tasks = [
        _t("1", "walk dog", Priority.LOW),
        _t("2", "buy milk", Priority.LOW),
        _t("3", "pay rent", Priority.LOW),
    ]
    assert [t.text for t in sort_tasks(tasks, TaskSort.ALPHABETICAL)] == ["buy milk", "pay rent", "walk dog"]


def test_sort_alphabetical_ignores_case_and_accents() -> None:
    texts = ["banana", "Cherry", "apple", "Éclair", "date", "eclair"]
    tasks = [_t(str(i), text, Priority.LOW) for i, text in enumerate(texts)]

    out = [t.text for t in sort_tasks(tasks, TaskSort.ALPHABETICAL)]

    assert out[:4] == ["apple", "banana", "Cherry", "date"]
    assert sorted(out[4:]) == ["eclair", "Éclair"]


def test_pending_filter_with_priority_sort_is_stable() -> None:
    tasks = [
        _t("1", "low one", Priority.LOW),
        _t("2", "high one", Priority.HIGH),
        _t("3", "medium one", Priority.MEDIUM),
        _t("4", "done high", Priority.HIGH, done=True),
        _t("5", "high two", Priority.HIGH),
    ]
    out = compute_view(tasks, TaskFilter.PENDING, TaskSort.PRIORITY)

    assert [t.id for t in out] == ["2", "5", "3", "1"]
    assert all(not t.completed for t in out)


def test_compute_view_does_not_mutate_input(base_tasks) -> None:
    snapshot = list(base_tasks)
    compute_view(base_tasks, TaskFilter.ALL, TaskSort.ALPHABETICAL)
    assert base_tasks == snapshot


@pytest.mark.asyncio
async def test_request_publishes_and_clears_busy(base_tasks) -> None:
    published: list[TaskView] = []
    pipeline = RecomputePipeline(on_publish=published.append)
    try:
        assert pipeline.is_busy is False

        token = pipeline.request(base_tasks, TaskFilter.PENDING, TaskSort.CREATED)
        assert pipeline.is_busy is True
        assert pipeline.view.tasks == ()

        await pipeline.wait_idle()

        assert pipeline.is_busy is False
        assert pipeline.view.token == token
        assert [t.id for t in pipeline.view.tasks] == ["c", "a"]
        assert published == [pipeline.view]
    finally:
        pipeline.close()


@pytest.mark.asyncio
async def test_newer_request_supersedes_older_one(base_tasks) -> None:
    published: list[TaskView] = []
    pipeline = RecomputePipeline(on_publish=published.append)
    try:
        pipeline.request(base_tasks, TaskFilter.ALL, TaskSort.PRIORITY)
        pipeline.request(base_tasks, TaskFilter.ALL, TaskSort.ALPHABETICAL)
        await pipeline.wait_idle()

        assert [v.sort for v in published] == [TaskSort.ALPHABETICAL]
        assert pipeline.view.sort == TaskSort.ALPHABETICAL
    finally:
        pipeline.close()


@pytest.mark.asyncio
async def test_result_computed_after_supersession_is_discarded(base_tasks) -> None:
    published: list[TaskView] = []
    pipeline = RecomputePipeline(cost_seconds=0.05, on_publish=published.append)
    try:
        pipeline.request(base_tasks, TaskFilter.ALL, TaskSort.PRIORITY)
        await asyncio.sleep(0.01)  # first run is now busy in the worker thread
        pipeline.request(base_tasks, TaskFilter.COMPLETED, TaskSort.CREATED)
        await pipeline.wait_idle()

        assert len(published) == 1
        assert published[0].filter == TaskFilter.COMPLETED
        assert [t.id for t in pipeline.view.tasks] == ["b"]
    finally:
        pipeline.close()


@pytest.mark.asyncio
async def test_previous_view_stays_visible_while_recomputing(base_tasks) -> None:
    pipeline = RecomputePipeline()
    try:
        pipeline.request(base_tasks, TaskFilter.ALL, TaskSort.CREATED)
        await pipeline.wait_idle()
        first = pipeline.view

        pipeline.request(base_tasks[:1], TaskFilter.ALL, TaskSort.CREATED)
        assert pipeline.is_busy is True
        assert pipeline.view is first

        await pipeline.wait_idle()
        assert pipeline.view is not first
        assert [t.id for t in pipeline.view.tasks] == ["a"]
    finally:
        pipeline.close()


@pytest.mark.asyncio
async def test_event_loop_stays_responsive_during_expensive_sort(base_tasks) -> None:
    pipeline = RecomputePipeline(cost_seconds=0.1)
    ticks = 0

    async def ticker() -> None:
        nonlocal ticks
        while True:
            await asyncio.sleep(0.005)
            ticks += 1

    t = asyncio.create_task(ticker())
    try:
        pipeline.request(base_tasks, TaskFilter.ALL, TaskSort.CREATED)
        await pipeline.wait_idle()
    finally:
        t.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await t
        pipeline.close()

    assert ticks >= 2
