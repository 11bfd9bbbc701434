# src/optimistic_tasks/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, then runs the console connector inside
one asyncio event loop. On exit, waits for in-flight remote calls to settle.
"""

from __future__ import annotations

import asyncio
import contextlib
import locale
import logging

from ..cli.bootstrap import create_initial_state
from ..config import get_settings
from ..connectors.console_connector import run_console_loop
from ..logging_setup import setup_logging

logger = logging.getLogger(__name__)


async def _run(settings) -> None:
    state = create_initial_state(settings=settings)
    try:
        await run_console_loop(state)
    finally:
        await state.engine.aclose()


def main() -> None:
    settings = get_settings()

    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)
    setup_logging(log_dir=settings.data_dir, console_level=console_level)

    # Alphabetical sort collates with the user's locale.
    with contextlib.suppress(locale.Error):
        locale.setlocale(locale.LC_COLLATE, "")

    logger.info("Starting %s...", settings.app_name)

    try:
        asyncio.run(_run(settings))
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down...")

    logger.info("Bye.")


if __name__ == "__main__":
    main()
