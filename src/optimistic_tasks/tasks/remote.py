# src/optimistic_tasks/tasks/remote.py

from __future__ import annotations

import asyncio
import logging
import random
import time
import uuid
from collections.abc import Callable
from dataclasses import dataclass

from ..errors import TransientRemoteFailure
from .task_models import Task, TaskDraft

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class CallProfile:
    """Latency range (seconds) and failure probability of one remote operation."""

    latency_min: float
    latency_max: float
    failure_rate: float

    @classmethod
    def normalized(cls, latency_min: float, latency_max: float, failure_rate: float) -> CallProfile:
        lo = max(0.0, float(latency_min))
        hi = max(lo, float(latency_max))
        rate = min(1.0, max(0.0, float(failure_rate)))
        return cls(latency_min=lo, latency_max=hi, failure_rate=rate)


class SimulatedRemoteTaskService:
    """
    Simulated remote store: randomized latency, fixed failure probability.

    Stateless between calls. It is the authority on identity and creation time:
    add() ignores any client id/created_at and returns a Task with a UUID id
    stamped with the service clock.
    """

    def __init__(
        self,
        *,
        add: CallProfile,
        toggle: CallProfile,
        delete: CallProfile,
        rng: random.Random | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._add = add
        self._toggle = toggle
        self._delete = delete
        self._rng = rng or random.Random()
        self._clock = clock

    @classmethod
    def from_settings(cls, settings, *, rng: random.Random | None = None) -> SimulatedRemoteTaskService:
        if rng is None:
            seed = getattr(settings, "random_seed", None)
            rng = random.Random(seed)
        return cls(
            add=CallProfile.normalized(
                settings.add_latency_min, settings.add_latency_max, settings.add_failure_rate
            ),
            toggle=CallProfile.normalized(
                settings.toggle_latency_min, settings.toggle_latency_max, settings.toggle_failure_rate
            ),
            delete=CallProfile.normalized(
                settings.delete_latency_min, settings.delete_latency_max, settings.delete_failure_rate
            ),
            rng=rng,
        )

    async def _simulate(self, profile: CallProfile, name: str, task_id: str | None) -> bool:
        delay = self._rng.uniform(profile.latency_min, profile.latency_max)
        logger.debug("remote %s task_id=%s delay=%.3fs", name, task_id, delay)
        await asyncio.sleep(delay)
        return self._rng.random() < profile.failure_rate

    async def add(self, draft: TaskDraft) -> Task:
        if await self._simulate(self._add, "add", None):
            raise TransientRemoteFailure("Failed to add task to server", operation="add")
        return Task(
            id=str(uuid.uuid4()),
            text=draft.text,
            completed=draft.completed,
            created_at=self._clock(),
            priority=draft.priority,
        )

    async def toggle(self, task_id: str) -> None:
        if await self._simulate(self._toggle, "toggle", task_id):
            raise TransientRemoteFailure(
                "Failed to update task on server", operation="toggle", task_id=task_id
            )

    async def delete(self, task_id: str) -> None:
        if await self._simulate(self._delete, "delete", task_id):
            raise TransientRemoteFailure(
                "Failed to delete task from server", operation="delete", task_id=task_id
            )
