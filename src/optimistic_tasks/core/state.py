# src/optimistic_tasks/core/state.py

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..tasks.engine import TaskEngine
from .ports import RemoteTaskService


@dataclass
class AppState:
    # Settings object (real Settings or a SimpleNamespace in tests).
    settings: Any

    engine: TaskEngine
    remote: RemoteTaskService
