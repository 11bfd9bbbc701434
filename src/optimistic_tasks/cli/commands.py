# src/optimistic_tasks/cli/commands.py

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime

from ..core.state import AppState
from ..errors import InvalidInputError
from ..tasks.engine import TaskEngine
from ..tasks.task_models import TEMP_ID_PREFIX, Priority, Task, TaskFilter, TaskSort

CommandEmitter = Callable[[str], None]
CommandHandler = Callable[[AppState, list[str], CommandEmitter | None], str]

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Simple slash-command registry used by the console connector (/help, /add, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(self, state: AppState, line: str, emit: CommandEmitter | None = None) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.

        InvalidInputError raised by a handler becomes the reply text.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            return handler(state, args, emit)
        except InvalidInputError as e:
            logger.debug("Rejected /%s: %s", name, e)
            return str(e)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- rendering ----


def _fmt_date(ts: float) -> str:
    return datetime.fromtimestamp(ts).astimezone().strftime("%Y-%m-%d")


def format_task_line(engine: TaskEngine, index: int, task: Task) -> str:
    mark = "[x]" if task.completed else "[ ]"
    flags = ""
    if task.is_temporary:
        flags = " (saving...)"
    elif engine.is_task_pending(task.id):
        flags = " (syncing...)"
    return f"#{index} {mark} {task.text} ({task.priority.value}) {_fmt_date(task.created_at)} id={task.id}{flags}"


def render_view(engine: TaskEngine) -> str:
    counts = engine.counts
    lines = [
        f"Filter: {engine.filter.value} | Sort: {engine.sort.value} | "
        f"All ({counts.all}) Pending ({counts.pending}) Completed ({counts.completed})"
    ]
    if engine.is_recomputing:
        lines.append("Processing...")
    if engine.error:
        lines.append(f"Error: {engine.error}")

    tasks = engine.display_tasks
    if not tasks:
        lines.append(engine.empty_message)
    for i, t in enumerate(tasks, start=1):
        lines.append(format_task_line(engine, i, t))
    return "\n".join(lines)


def resolve_task_ref(engine: TaskEngine, ref: str) -> str:
    """
    Map "#n" (n-th row of the displayed list) or a raw id to a task id.

    Tasks still waiting for their server id are rejected: a toggle/delete sent
    with a temporary id could never be committed.
    """
    ref = ref.strip()
    task_id = ref
    if ref.startswith("#"):
        try:
            idx = int(ref[1:])
        except ValueError:
            raise InvalidInputError(f"Bad row reference: {ref}") from None
        tasks = engine.display_tasks
        if idx < 1 or idx > len(tasks):
            raise InvalidInputError(f"No row {ref} in the current list.")
        task_id = tasks[idx - 1].id

    if task_id.startswith(TEMP_ID_PREFIX):
        raise InvalidInputError("Task is still being saved")
    return task_id


# ---- handlers ----


def cmd_help(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    return registry.build_help()


def cmd_status(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    engine = state.engine
    s = state.settings
    return (
        "Status:\n"
        f"  Confirmed tasks: {len(engine.confirmed_tasks)}\n"
        f"  In-flight operations: {len(engine.pending_operations)}\n"
        f"  Recomputing: {'yes' if engine.is_recomputing else 'no'}\n"
        f"  Default priority: {engine.default_priority.value}\n"
        f"  Failure rates (add/toggle/delete): "
        f"{s.add_failure_rate:.2f}/{s.toggle_failure_rate:.2f}/{s.delete_failure_rate:.2f}\n"
        f"  Sort cost: {s.sort_cost_ms} ms"
    )


def cmd_list(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    return render_view(state.engine)


def cmd_add(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    """
    /add buy milk          -> default priority
    /add high buy milk     -> explicit priority
    """
    if not args:
        return "Usage: /add [low|medium|high] <text>"

    priority: Priority | None = None
    if args[0].lower() in {p.value for p in Priority} and len(args) > 1:
        priority = Priority.parse(args[0])
        args = args[1:]

    task = state.engine.request_add(" ".join(args), priority)
    return f"Adding '{task.text}' ({task.priority.value})..."


def cmd_toggle(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    if not args:
        return "Usage: /toggle <id|#row>"
    task_id = resolve_task_ref(state.engine, args[0])
    state.engine.request_toggle(task_id)
    return f"Toggling {task_id}..."


def cmd_delete(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    if not args:
        return "Usage: /delete <id|#row>"
    task_id = resolve_task_ref(state.engine, args[0])
    state.engine.request_delete(task_id)
    return f"Deleting {task_id}..."


def cmd_filter(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    if not args:
        return f"Filter is '{state.engine.filter.value}'. Use /filter all|pending|completed."
    f = TaskFilter.parse(args[0])
    state.engine.set_filter(f)
    return f"Filter -> {f.value}"


def cmd_sort(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    if not args:
        return f"Sort is '{state.engine.sort.value}'. Use /sort created|priority|alphabetical."
    s = TaskSort.parse(args[0])
    state.engine.set_sort(s)
    return f"Sort -> {s.value}"


def cmd_dismiss(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    if state.engine.error is None:
        return "No error to dismiss."
    state.engine.dismiss_error()
    return "Error dismissed."


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("status", cmd_status, help_text="Show engine status and simulator settings.")
registry.register("list", cmd_list, help_text="Show the current task list.", aliases=["ls"])
registry.register("add", cmd_add, help_text="Add a task: /add [low|medium|high] <text>.")
registry.register(
    "toggle", cmd_toggle, help_text="Toggle completion: /toggle <id|#row>.", aliases=["done"]
)
registry.register("delete", cmd_delete, help_text="Delete a task: /delete <id|#row>.", aliases=["rm"])
registry.register("filter", cmd_filter, help_text="Filter: /filter all|pending|completed.")
registry.register("sort", cmd_sort, help_text="Sort: /sort created|priority|alphabetical.")
registry.register("dismiss", cmd_dismiss, help_text="Dismiss the current error message.")
