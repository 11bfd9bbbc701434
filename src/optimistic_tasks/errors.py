# src/optimistic_tasks/errors.py

from __future__ import annotations


class TaskEngineError(Exception):
    """Base class for task engine errors."""


class InvalidInputError(TaskEngineError, ValueError):
    """Rejected before any optimistic update or remote call is issued."""


class TransientRemoteFailure(TaskEngineError):
    """
    A remote add/toggle/delete call was rejected.

    Always recoverable: the coordinator reverts the speculative change and
    surfaces str(exc) to the user.
    """

    def __init__(self, message: str, *, operation: str, task_id: str | None = None) -> None:
        super().__init__(message)
        self.operation = operation
        self.task_id = task_id
