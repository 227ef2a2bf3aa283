"""
taskwatch Error Types.

Exceptions raised while configuring watchers and running tasks.
Requires Python 3.11+.
"""

from typing import Any


class TaskWatchError(Exception):
    """Base exception for all taskwatch errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.details = details or {}


class ConfigurationError(TaskWatchError):
    """Watcher configuration is missing a required value."""


class UnknownTaskError(ConfigurationError):
    """A task name is not registered with the runner."""

    def __init__(self, task: str, available: list[str] | None = None) -> None:
        super().__init__(
            f"Unknown task: {task}",
            details={"task": task, "available": available or []},
        )
        self.task = task


class TaskFailedError(TaskWatchError):
    """A task finished unsuccessfully."""

    def __init__(self, task: str, returncode: int) -> None:
        super().__init__(
            f"Task '{task}' exited with status {returncode}",
            details={"task": task, "returncode": returncode},
        )
        self.task = task
        self.returncode = returncode
