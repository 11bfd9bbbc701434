# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from optimistic_tasks.tasks.task_models import Priority, Task

from .fakes import FakeRemoteTaskService


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with bootstrap and the simulator.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="optimistic-tasks-test",
        log_level="DEBUG",
        data_dir=tmp_path / "data",
        seed_demo_tasks=True,
        default_priority="medium",
        sort_cost_ms=0,
        add_latency_min=0.0,
        add_latency_max=0.0,
        toggle_latency_min=0.0,
        toggle_latency_max=0.0,
        delete_latency_min=0.0,
        delete_latency_max=0.0,
        add_failure_rate=0.0,
        toggle_failure_rate=0.0,
        delete_failure_rate=0.0,
        random_seed=1234,
    )


@pytest.fixture()
def remote() -> FakeRemoteTaskService:
    return FakeRemoteTaskService()


@pytest.fixture()
def base_tasks() -> list[Task]:
    return [
        Task(id="a", text="alpha", completed=False, created_at=100.0, priority=Priority.LOW),
        Task(id="b", text="bravo", completed=True, created_at=200.0, priority=Priority.HIGH),
        Task(id="c", text="charlie", completed=False, created_at=300.0, priority=Priority.MEDIUM),
    ]
