# src/optimistic_tasks/connectors/console_connector.py

from __future__ import annotations

import asyncio
import logging
from datetime import datetime

from ..cli.commands import registry as command_registry
from ..core.state import AppState

logger = logging.getLogger(__name__)

PROMPT = ">>> "


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}", flush=True)


def _error_announcer(state: AppState):
    """Engine listener that prints each new error message once."""
    last: list[str | None] = [state.engine.error]

    def _on_change() -> None:
        err = state.engine.error
        if err != last[0]:
            last[0] = err
            if err:
                _print_ts(f"[ERROR] {err}")

    return _on_change


async def run_console_loop(state: AppState) -> None:
    """
    Interactive console running inside the event loop.

    input() blocks, so it runs in a worker thread: remote round trips and view
    recomputations keep progressing while the user is typing.
    """
    logger.info("Console connector started.")
    _print_ts("[CONSOLE] Type a task to add it. Use /help for commands. Use /exit to quit.\n")

    unsubscribe = state.engine.add_listener(_error_announcer(state))

    try:
        while True:
            try:
                user_input = (await asyncio.to_thread(input, PROMPT)).strip()
            except EOFError:
                logger.info("Console EOF received, exiting.")
                break

            if not user_input:
                continue

            if user_input.lower() in ("/exit", "/quit"):
                logger.info("Console exit command received.")
                break

            # Bare text is an add.
            if not user_input.startswith("/"):
                user_input = f"/add {user_input}"

            try:
                response = command_registry.handle(state, user_input, emit=_print_ts)
            except Exception:
                logger.exception("Command handler crashed.")
                response = "Internal error while handling a command."

            if response is not None:
                _print_ts(response)
    finally:
        unsubscribe()

    logger.info("Console connector finished.")
