"""
taskwatch Task Runner.

Registry of named tasks run by watchers.
Requires Python 3.11+.
"""

import asyncio
import inspect
import time
from collections.abc import Callable
from typing import Any

from utils.errors import UnknownTaskError
from utils.logger import LoggerMixin

TaskFunc = Callable[[], Any]


async def _wait_for(awaitable: Any) -> Any:
    return await awaitable


class TaskRunner(LoggerMixin):
    """
    Runs registered tasks by name.

    A task is any zero-argument callable. Tasks returning an awaitable
    are driven to completion before ``run`` returns. Failures raise
    out of ``run`` unchanged.
    """

    def __init__(self, tasks: dict[str, TaskFunc] | None = None) -> None:
        """
        Initialize the runner.

        Args:
            tasks: Initial mapping of task names to callables
        """
        self._tasks: dict[str, TaskFunc] = {}
        for name, func in (tasks or {}).items():
            self.register(name, func)

    def register(self, name: str, func: TaskFunc) -> TaskFunc:
        """Register a task, replacing any task with the same name."""
        if not callable(func):
            raise TypeError(f"Task '{name}' is not callable")
        self._tasks[name] = func
        return func

    def task(self, name: str | None = None) -> Callable[[TaskFunc], TaskFunc]:
        """
        Decorator form of ``register``.

        Usage:
            @runner.task("build")
            def build():
                ...
        """

        def decorator(func: TaskFunc) -> TaskFunc:
            return self.register(name or func.__name__, func)

        return decorator

    def resolve(self, name: str) -> TaskFunc:
        """
        Look up a task by name.

        Raises:
            UnknownTaskError: If no task is registered under the name
        """
        try:
            return self._tasks[name]
        except KeyError:
            raise UnknownTaskError(name, available=self.names) from None

    def run(self, name: str) -> Any:
        """
        Run a task to completion.

        Returns:
            Whatever the task returned
        """
        func = self.resolve(name)

        self.log.debug("task_started", task=name)
        start_time = time.perf_counter()

        result = func()
        if inspect.isawaitable(result):
            result = asyncio.run(_wait_for(result))

        self.log.debug(
            "task_finished",
            task=name,
            time_seconds=round(time.perf_counter() - start_time, 3),
        )
        return result

    @property
    def names(self) -> list[str]:
        """Get registered task names."""
        return list(self._tasks)

    def __contains__(self, name: object) -> bool:
        return name in self._tasks
