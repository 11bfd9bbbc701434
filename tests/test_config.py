# tests/test_config.py

from __future__ import annotations

from pathlib import Path

from optimistic_tasks.config import Settings


def test_defaults(monkeypatch) -> None:
    for name in (
        "OPTASKS_ADD_FAILURE_RATE",
        "OPTASKS_SORT_COST_MS",
        "OPTASKS_RANDOM_SEED",
        "OPTASKS_DATA_DIR",
        "OPTASKS_ADD_LATENCY_MIN",
        "OPTASKS_ADD_LATENCY_MAX",
        "OPTASKS_DEFAULT_PRIORITY",
        "OPTASKS_SEED_DEMO_TASKS",
    ):
        monkeypatch.delenv(name, raising=False)

    s = Settings.from_env()
    assert s.add_failure_rate == 0.10
    assert (s.add_latency_min, s.add_latency_max) == (1.0, 2.0)
    assert s.sort_cost_ms == 50
    assert s.random_seed is None
    assert s.default_priority == "medium"
    assert s.seed_demo_tasks is True
    assert s.data_dir == Path(".local/optimistic_tasks")


def test_malformed_values_are_clamped_or_ignored(monkeypatch) -> None:
    monkeypatch.setenv("OPTASKS_ADD_FAILURE_RATE", "7")
    monkeypatch.setenv("OPTASKS_TOGGLE_FAILURE_RATE", "abc")
    monkeypatch.setenv("OPTASKS_DELETE_LATENCY_MIN", "2")
    monkeypatch.setenv("OPTASKS_DELETE_LATENCY_MAX", "1")
    monkeypatch.setenv("OPTASKS_SORT_COST_MS", "-10")
    monkeypatch.setenv("OPTASKS_RANDOM_SEED", "42")
    monkeypatch.setenv("OPTASKS_DEFAULT_PRIORITY", "urgent")
    monkeypatch.setenv("OPTASKS_SEED_DEMO_TASKS", "no")

    s = Settings.from_env()
    assert s.add_failure_rate == 1.0
    assert s.toggle_failure_rate == 0.05
    assert (s.delete_latency_min, s.delete_latency_max) == (2.0, 2.0)
    assert s.sort_cost_ms == 0
    assert s.random_seed == 42
    assert s.default_priority == "medium"
    assert s.seed_demo_tasks is False
