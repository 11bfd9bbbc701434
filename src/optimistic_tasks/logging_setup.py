# src/optimistic_tasks/logging_setup.py

from __future__ import annotations

import logging
import sys
from pathlib import Path

LOG_FORMAT = "%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s"
DATE_FORMAT = "%H:%M:%S"

# Loggers that write one line per remote call or recompute; console shows WARNING+ only.
CHATTY_LOGGERS = ("optimistic_tasks.tasks.remote", "optimistic_tasks.tasks.recompute")


class _ConsoleFilter(logging.Filter):
    """Keep the prompt readable: own logs pass, chatty ones and third-party need WARNING/ERROR."""

    def filter(self, record: logging.LogRecord) -> bool:
        if record.name.startswith(CHATTY_LOGGERS):
            return record.levelno >= logging.WARNING
        if record.name.startswith("optimistic_tasks."):
            return True
        return record.levelno >= logging.ERROR


def setup_logging(*, log_dir: str | Path, console_level: int = logging.INFO) -> Path:
    """
    Console (filtered, stderr) + DEBUG file in log_dir. Returns the log file path.

    Replaces any handlers already on the root logger.
    """
    log_file = Path(log_dir) / "optimistic_tasks.log"
    log_file.parent.mkdir(parents=True, exist_ok=True)

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.addFilter(_ConsoleFilter())

    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)

    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(logging.DEBUG)
    for handler in (console, file_handler):
        handler.setFormatter(formatter)
        root.addHandler(handler)

    logging.getLogger("asyncio").setLevel(logging.WARNING)
    return log_file
