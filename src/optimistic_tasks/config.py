# src/optimistic_tasks/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app.
- Malformed values fall back to defaults instead of crashing at import time.
- Composition code takes settings as a parameter so tests can inject their own.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "OPTASKS"

load_dotenv(override=False)


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int | None) -> int | None:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


def _rate(value: float) -> float:
    return min(1.0, max(0.0, value))


def _latency(lo: float, hi: float) -> tuple[float, float]:
    lo = max(0.0, lo)
    return lo, max(lo, hi)


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str
    data_dir: Path

    # ---- Engine ----
    seed_demo_tasks: bool
    default_priority: str
    sort_cost_ms: int

    # ---- Simulated remote service ----
    add_latency_min: float
    add_latency_max: float
    toggle_latency_min: float
    toggle_latency_max: float
    delete_latency_min: float
    delete_latency_max: float

    add_failure_rate: float
    toggle_failure_rate: float
    delete_failure_rate: float

    random_seed: int | None

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "optimistic-tasks").strip() or "optimistic-tasks"
        log_level = _env(_k("LOG_LEVEL"), "INFO")
        data_dir = _env_path(_k("DATA_DIR"), Path(".local/optimistic_tasks"))

        seed_demo_tasks = _env_bool(_k("SEED_DEMO_TASKS"), True)
        default_priority = _env(_k("DEFAULT_PRIORITY"), "medium").strip().lower()
        if default_priority not in ("low", "medium", "high"):
            default_priority = "medium"
        sort_cost_ms = max(0, _env_int(_k("SORT_COST_MS"), 50) or 0)

        add_lo, add_hi = _latency(
            _env_float(_k("ADD_LATENCY_MIN"), 1.0), _env_float(_k("ADD_LATENCY_MAX"), 2.0)
        )
        toggle_lo, toggle_hi = _latency(
            _env_float(_k("TOGGLE_LATENCY_MIN"), 0.5), _env_float(_k("TOGGLE_LATENCY_MAX"), 1.0)
        )
        delete_lo, delete_hi = _latency(
            _env_float(_k("DELETE_LATENCY_MIN"), 0.3), _env_float(_k("DELETE_LATENCY_MAX"), 0.6)
        )

        return Settings(
            app_name=app_name,
            log_level=log_level,
            data_dir=data_dir,
            seed_demo_tasks=seed_demo_tasks,
            default_priority=default_priority,
            sort_cost_ms=sort_cost_ms,
            add_latency_min=add_lo,
            add_latency_max=add_hi,
            toggle_latency_min=toggle_lo,
            toggle_latency_max=toggle_hi,
            delete_latency_min=delete_lo,
            delete_latency_max=delete_hi,
            add_failure_rate=_rate(_env_float(_k("ADD_FAILURE_RATE"), 0.10)),
            toggle_failure_rate=_rate(_env_float(_k("TOGGLE_FAILURE_RATE"), 0.05)),
            delete_failure_rate=_rate(_env_float(_k("DELETE_FAILURE_RATE"), 0.05)),
            random_seed=_env_int(_k("RANDOM_SEED"), None),
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS
