# src/optimistic_tasks/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires the remote service and the task engine into AppState.
"""

from __future__ import annotations

import logging
import time

from ..config import get_settings
from ..core.ports import RemoteTaskService
from ..core.state import AppState
from ..tasks.engine import TaskEngine
from ..tasks.remote import SimulatedRemoteTaskService
from ..tasks.task_models import Priority, Task

logger = logging.getLogger(__name__)

_HOUR = 3600.0


def demo_seed_tasks(now_ts: float | None = None) -> list[Task]:
    """Three already-confirmed tasks so the list is not empty on first start."""
    now = time.time() if now_ts is None else now_ts
    return [
        Task(
            id="1",
            text="Learn useOptimistic hook",
            completed=False,
            created_at=now - 24 * _HOUR,
            priority=Priority.HIGH,
        ),
        Task(
            id="2",
            text="Master useTransition hook",
            completed=False,
            created_at=now - 12 * _HOUR,
            priority=Priority.HIGH,
        ),
        Task(
            id="3",
            text="Build awesome React apps",
            completed=True,
            created_at=now - 6 * _HOUR,
            priority=Priority.MEDIUM,
        ),
    ]


def create_initial_state(*, settings=None, remote: RemoteTaskService | None = None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings (and the remote service) injectable makes the app easier to test
    and avoids hidden global config reads. If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    settings.data_dir.mkdir(parents=True, exist_ok=True)

    if remote is None:
        remote = SimulatedRemoteTaskService.from_settings(settings)

    initial = demo_seed_tasks() if settings.seed_demo_tasks else []
    engine = TaskEngine(
        remote,
        initial_tasks=initial,
        sort_cost_seconds=settings.sort_cost_ms / 1000.0,
        default_priority=settings.default_priority,
    )
    logger.info("Engine ready (seeded=%d, sort_cost_ms=%s)", len(initial), settings.sort_cost_ms)

    return AppState(settings=settings, engine=engine, remote=remote)
