# tests/test_logging_setup.py

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from optimistic_tasks.logging_setup import setup_logging


@pytest.fixture()
def root_logger():
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    yield root
    for h in list(root.handlers):
        h.close()
    root.handlers[:] = saved_handlers
    root.setLevel(saved_level)


def _record(name: str, level: int) -> logging.LogRecord:
    return logging.LogRecord(name, level, __file__, 1, "msg", None, None)


def test_console_filter_and_file_handler(root_logger, tmp_path: Path) -> None:
    log_file = setup_logging(log_dir=tmp_path / "logs", console_level=logging.DEBUG)

    assert log_file.parent.is_dir()
    console, file_handler = root_logger.handlers
    assert isinstance(file_handler, logging.FileHandler)

    def passes(name: str, level: int) -> bool:
        return all(f.filter(_record(name, level)) for f in console.filters)

    assert passes("optimistic_tasks.tasks.reconciler", logging.DEBUG)
    assert not passes("optimistic_tasks.tasks.remote", logging.DEBUG)
    assert passes("optimistic_tasks.tasks.remote", logging.WARNING)
    assert not passes("optimistic_tasks.tasks.recompute", logging.INFO)
    assert not passes("urllib3", logging.WARNING)
    assert passes("urllib3", logging.ERROR)

    logging.getLogger("optimistic_tasks.test").info("hello file")
    file_handler.flush()
    assert "hello file" in log_file.read_text("utf-8")


def test_repeated_setup_does_not_duplicate_handlers(root_logger, tmp_path: Path) -> None:
    setup_logging(log_dir=tmp_path)
    setup_logging(log_dir=tmp_path)
    assert len(root_logger.handlers) == 2
