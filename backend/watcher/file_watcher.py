"""
taskwatch File Watcher.

Cross-platform file system monitoring using watchdog.
Requires Python 3.11+.
"""

import errno
import fnmatch
import os
import threading
from collections.abc import Iterable
from dataclasses import dataclass
from os import PathLike
from pathlib import Path
from typing import Any

from watchdog.events import FileSystemEvent, FileSystemEventHandler, FileSystemMovedEvent
from watchdog.observers import Observer
from watchdog.observers.api import BaseObserver
from watchdog.observers.polling import PollingObserver

from utils.config import get_settings
from utils.logger import LoggerMixin
from watcher.emitter import EventEmitter
from watcher.events import ChangeKind

PathSpec = str | PathLike[str]

_GLOB_CHARS = frozenset("*?[")


def _nearest_directory(path: Path) -> Path:
    """Closest existing directory at or above a path."""
    candidate = path
    while not candidate.is_dir() and candidate.parent != candidate:
        candidate = candidate.parent
    return candidate


def _match_parts(parts: tuple[str, ...], pattern: tuple[str, ...]) -> bool:
    """Match path segments against glob segments; '**' spans any number of them."""
    if not pattern:
        return not parts

    head, rest = pattern[0], pattern[1:]
    if head == "**":
        return any(_match_parts(parts[index:], rest) for index in range(len(parts) + 1))
    return bool(parts) and fnmatch.fnmatch(parts[0], head) and _match_parts(parts[1:], rest)


@dataclass(frozen=True)
class WatchTarget:
    """
    A watched path, directory or glob pattern.

    ``root`` is the directory scheduled on the observer. It differs from
    ``path`` for files, globs, and paths that do not exist yet.
    """

    path: Path
    root: Path
    recursive: bool = True
    pattern: bool = False

    @classmethod
    def parse(cls, spec: PathSpec, recursive: bool = True) -> "WatchTarget":
        """
        Build a target from a path or glob pattern.

        Globs are watched from their longest literal prefix. An existing
        file is watched through its parent directory, and a missing path
        through its nearest existing ancestor so it is seen once created.
        """
        path = Path(os.path.abspath(os.path.expanduser(os.fspath(spec))))
        parts = path.parts

        for index, part in enumerate(parts):
            if _GLOB_CHARS.intersection(part):
                return cls(
                    path=path,
                    root=_nearest_directory(Path(*parts[:index])),
                    recursive="**" in parts[index:],
                    pattern=True,
                )

        if path.is_file():
            return cls(path=path, root=path.parent, recursive=False)
        return cls(path=path, root=_nearest_directory(path), recursive=recursive)

    @property
    def watch_recursive(self) -> bool:
        """Whether the root must be scheduled with subdirectories."""
        if self.root == self.path:
            return self.recursive
        return self.recursive or len(self.path.relative_to(self.root).parts) > 1

    def matches(self, path: str) -> bool:
        """Check if an event path belongs to this target."""
        if self.pattern:
            return _match_parts(Path(path).parts, self.path.parts)

        target = str(self.path)
        if path == target:
            return True
        if not self.recursive:
            return os.path.dirname(path) == target
        return path.startswith(target.rstrip(os.sep) + os.sep)


class ChangeEventHandler(FileSystemEventHandler, LoggerMixin):
    """
    Translates watchdog events into change events on a watch handle.

    Drops events outside the handle's targets and events matching
    the ignore patterns.
    """

    def __init__(
        self,
        handle: "WatchHandle",
        targets: list[WatchTarget],
        ignore_patterns: list[str] | None = None,
    ) -> None:
        """
        Initialize the event handler.

        Args:
            handle: Watch handle to emit changes on
            targets: Watched targets
            ignore_patterns: Glob patterns to ignore
        """
        super().__init__()
        self._handle = handle
        self._targets = targets
        self._ignore_patterns = ignore_patterns or []

    def _should_ignore(self, path: str) -> bool:
        """Check if a path should be ignored."""
        parts = Path(path).parts
        for pattern in self._ignore_patterns:
            if fnmatch.fnmatch(path, pattern):
                return True
            if any(fnmatch.fnmatch(part, pattern) for part in parts):
                return True
        return False

    def _is_watched(self, path: str) -> bool:
        return any(target.matches(path) for target in self._targets)

    def _dispatch_change(self, kind: ChangeKind, raw_path: bytes | str) -> None:
        path = os.fsdecode(raw_path)
        if self._should_ignore(path) or not self._is_watched(path):
            return

        self.log.debug("change_detected", kind=kind.value, path=path)
        try:
            self._handle.emit(kind.value, path)
        except Exception as e:
            self._handle.emit_error(e)

    def on_created(self, event: FileSystemEvent) -> None:
        """Handle file/directory creation."""
        kind = ChangeKind.DIR_ADDED if event.is_directory else ChangeKind.ADDED
        self._dispatch_change(kind, event.src_path)

    def on_modified(self, event: FileSystemEvent) -> None:
        """Handle file modification."""
        if event.is_directory:
            return
        self._dispatch_change(ChangeKind.MODIFIED, event.src_path)

    def on_deleted(self, event: FileSystemEvent) -> None:
        """Handle file/directory deletion."""
        kind = ChangeKind.DIR_REMOVED if event.is_directory else ChangeKind.REMOVED
        self._dispatch_change(kind, event.src_path)

    def on_moved(self, event: FileSystemMovedEvent) -> None:
        """Handle file/directory move/rename."""
        if event.is_directory:
            self._dispatch_change(ChangeKind.DIR_REMOVED, event.src_path)
            self._dispatch_change(ChangeKind.DIR_ADDED, event.dest_path)
        else:
            self._dispatch_change(ChangeKind.REMOVED, event.src_path)
            self._dispatch_change(ChangeKind.ADDED, event.dest_path)


class WatchHandle(EventEmitter, LoggerMixin):
    """
    Live subscription to filesystem changes.

    Emits ``error(exc)`` for watch failures, ``ready()`` once the
    observer is running, and ``<kind>(path)`` for every change, where
    kind is a ChangeKind value. Listeners run on the observer thread.
    """

    def __init__(
        self,
        paths: PathSpec | Iterable[PathSpec],
        recursive: bool | None = None,
        polling: bool | None = None,
        ignore_patterns: list[str] | None = None,
        timeout: float | None = None,
    ) -> None:
        """
        Initialize the watch handle.

        Args:
            paths: Paths, directories or glob patterns to watch
            recursive: Whether to watch subdirectories of directory paths
            polling: Use stat polling instead of native notifications
            ignore_patterns: Glob patterns to ignore
            timeout: Observer event queue timeout in seconds
        """
        super().__init__()
        settings = get_settings().watcher

        if isinstance(paths, (str, PathLike)):
            paths = [paths]

        self._recursive = settings.recursive if recursive is None else recursive
        self._polling = settings.polling if polling is None else polling
        self._ignore_patterns = (
            settings.ignore_patterns if ignore_patterns is None else list(ignore_patterns)
        )
        self._timeout = timeout
        self._targets = [WatchTarget.parse(p, self._recursive) for p in paths]

        self._handler = ChangeEventHandler(
            handle=self,
            targets=self._targets,
            ignore_patterns=self._ignore_patterns,
        )

        self._observer: BaseObserver | None = None
        self._running = False

    def _create_observer(self) -> BaseObserver:
        observer_cls = PollingObserver if self._polling else Observer
        if self._timeout is None:
            return observer_cls()
        return observer_cls(timeout=self._timeout)

    def _watch_roots(self) -> list[tuple[Path, bool]]:
        """Distinct directories to schedule, skipping ones already covered."""
        roots: dict[Path, bool] = {}
        for target in self._targets:
            roots[target.root] = roots.get(target.root, False) or target.watch_recursive

        return [
            (root, recursive)
            for root, recursive in roots.items()
            if not any(
                other != root and other_recursive and root.is_relative_to(other)
                for other, other_recursive in roots.items()
            )
        ]

    def emit_error(self, error: BaseException) -> None:
        """Report a watch failure to error listeners, or log it."""
        if not self.emit("error", error):
            self.log.error("watch_error", error=str(error))

    def start(self) -> None:
        """Start watching for file changes."""
        if self._running:
            return

        observer = self._create_observer()
        scheduled = []
        for root, recursive in self._watch_roots():
            if not root.is_dir():
                self.emit_error(
                    FileNotFoundError(errno.ENOENT, "Watch path does not exist", str(root))
                )
                continue
            observer.schedule(self._handler, str(root), recursive=recursive)
            scheduled.append(str(root))

        try:
            observer.start()
        except OSError as e:
            self.emit_error(e)
            return

        self._observer = observer
        self._running = True

        self.log.debug(
            "file_watcher_started",
            paths=scheduled,
            polling=self._polling,
            ignore_patterns=self._ignore_patterns,
        )
        self.emit("ready")

    def close(self) -> None:
        """Stop watching for file changes."""
        observer = self._observer
        if observer is None:
            return

        self._observer = None
        self._running = False
        observer.stop()
        if observer.is_alive() and observer is not threading.current_thread():
            observer.join(timeout=5.0)

        self.log.debug("file_watcher_stopped")

    @property
    def is_running(self) -> bool:
        """Check if the watcher is running."""
        return self._running

    @property
    def targets(self) -> list[WatchTarget]:
        """Get the parsed watch targets."""
        return list(self._targets)

    def __enter__(self) -> "WatchHandle":
        """Context manager entry."""
        self.start()
        return self

    def __exit__(self, *args: Any) -> None:
        """Context manager exit."""
        self.close()


def watch_files(paths: PathSpec | Iterable[PathSpec], **options: Any) -> WatchHandle:
    """
    Create a watch handle for paths or glob patterns.

    The handle is returned unstarted so listeners can be attached
    before ``start()`` emits ``ready``.

    Args:
        paths: Paths, directories or glob patterns to watch
        **options: Passed through to WatchHandle

    Returns:
        Configured WatchHandle instance
    """
    return WatchHandle(paths, **options)
