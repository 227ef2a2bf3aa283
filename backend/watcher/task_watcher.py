"""
taskwatch Task Watcher.

Runs tasks when watched files change.
Requires Python 3.11+.
"""

import threading
from collections.abc import Callable, Iterable, Sequence
from functools import partial
from typing import Any

from utils.colors import highlight_path
from utils.config import get_settings
from utils.errors import ConfigurationError
from utils.logger import LoggerMixin
from watcher.debouncer import Debouncer
from watcher.events import ChangeEvent
from watcher.file_watcher import watch_files


class TaskWatcher(LoggerMixin):
    """
    Watches files and runs a task sequence after each batch of changes.

    Changes are collected by a Debouncer, logged one line per change,
    then the configured tasks run one after another through the task
    runner. The first failing task aborts the rest of the sequence.
    Watch and task errors are logged and never stop the watcher.
    """

    description = "Watch files and folders"
    defaults: dict[str, Any] = {}

    def __init__(
        self,
        files: Any,
        task: str | Sequence[str] | None,
        runner: Any,
        debounce_ms: int | None = None,
        events: Iterable[str] | None = None,
        options: dict[str, Any] | None = None,
        subscribe: Callable[..., Any] = watch_files,
        highlight: Callable[[str], str] = highlight_path,
    ) -> None:
        """
        Initialize the task watcher.

        Args:
            files: Path, glob pattern, or list of them
            task: Task name or ordered list of task names
            runner: Object whose ``run(name)`` executes a task, raising on failure
            debounce_ms: Quiet period before tasks run, 0 runs on every change
            events: Change kinds to listen for
            options: Keyword arguments passed verbatim to ``subscribe``
            subscribe: Factory returning an unstarted watch handle
            highlight: Formatter for paths in change log lines

        Raises:
            ConfigurationError: If files or task are missing, or a task
                name is unknown to a runner that can resolve names
        """
        if not files:
            raise ConfigurationError("No files specified")
        if not task:
            raise ConfigurationError("No task specified")

        settings = get_settings().watcher

        self._files = files
        self._tasks: tuple[str, ...] = (task,) if isinstance(task, str) else tuple(task)
        self._runner = runner
        self._events = tuple(settings.events if events is None else events)
        self._options = dict(options or {})
        self._subscribe = subscribe
        self._highlight = highlight

        resolve = getattr(runner, "resolve", None)
        if resolve is not None:
            for name in self._tasks:
                resolve(name)

        self._debouncer = Debouncer(
            delay_ms=settings.debounce_ms if debounce_ms is None else debounce_ms,
            callback=self._on_changes,
        )
        self._dispatch_lock = threading.Lock()
        self._handle: Any = None
        self._ready = False
        self._stopped = False

    def start(self) -> Any:
        """
        Subscribe to the watched files.

        Returns:
            The live watch handle
        """
        if self._handle is not None:
            return self._handle

        self._stopped = False
        handle = self._subscribe(self._files, **self._options)
        self._handle = handle
        handle.on("error", self._log_error)
        handle.on("ready", partial(self._on_ready, handle))
        handle.start()
        return handle

    def stop(self, flush: bool = False) -> None:
        """
        Stop watching.

        Args:
            flush: Run tasks for pending changes instead of dropping them
        """
        self._stopped = True

        handle = self._handle
        self._handle = None
        self._ready = False
        if handle is not None:
            handle.close()

        # Changes arriving after the handle closed are dropped by _on_change
        if flush:
            self._debouncer.flush()
        else:
            self._debouncer.clear()

        if handle is not None:
            self.log.debug("task_watcher_stopped")

    def _on_ready(self, handle: Any) -> None:
        # Listeners attach after the initial scan so it never triggers tasks
        if self._ready:
            return
        self._ready = True

        for kind in self._events:
            handle.on(kind, partial(self._on_change, kind))

        self.log.info("Watching for changes...")

    def _on_change(self, kind: str, path: str) -> None:
        if self._stopped:
            return
        self._debouncer.debounce(ChangeEvent(kind=kind, path=path))

    def _on_changes(self, changes: list[ChangeEvent]) -> None:
        with self._dispatch_lock:
            self._log_changes(changes)
            self._run_tasks()

    def _log_changes(self, changes: list[ChangeEvent]) -> None:
        for change in changes:
            label = change.label
            if label is None:
                self.log.debug("unlabelled_change", kind=change.kind, path=change.path)
                continue
            self.log.info(f"{label}: {self._highlight(change.path)}")

    def _run_tasks(self) -> None:
        for name in self._tasks:
            try:
                self._runner.run(name)
            except Exception as e:
                self._log_error(e)
                return

    def _log_error(self, error: BaseException) -> None:
        self.log.error(str(error) or type(error).__name__, error=error)

    @property
    def handle(self) -> Any:
        """Get the live watch handle, or None when not started."""
        return self._handle

    @property
    def tasks(self) -> tuple[str, ...]:
        """Get the task sequence run on each batch."""
        return self._tasks

    @property
    def events(self) -> tuple[str, ...]:
        """Get the change kinds listened for."""
        return self._events

    @property
    def pending_count(self) -> int:
        """Get number of changes waiting for the debounce delay."""
        return self._debouncer.pending_count

    def __enter__(self) -> "TaskWatcher":
        """Context manager entry."""
        self.start()
        return self

    def __exit__(self, *args: Any) -> None:
        """Context manager exit."""
        self.stop()


def watch_and_run(
    files: Any,
    task: str | Sequence[str],
    runner: Any,
    **kwargs: Any,
) -> TaskWatcher:
    """
    Create and start a task watcher.

    Args:
        files: Path, glob pattern, or list of them
        task: Task name or ordered list of task names
        runner: Task runner
        **kwargs: Passed through to TaskWatcher

    Returns:
        The started TaskWatcher
    """
    watcher = TaskWatcher(files, task, runner, **kwargs)
    watcher.start()
    return watcher
