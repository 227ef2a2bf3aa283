"""
taskwatch Test Configuration.

Pytest fixtures and configuration.
Requires Python 3.11+.
"""

import threading
from collections.abc import Callable, Generator
from typing import Any

import pytest
from structlog.testing import capture_logs

from utils.config import get_settings
from watcher.emitter import EventEmitter
from watcher.task_watcher import TaskWatcher


class FakeWatchHandle(EventEmitter):
    """Watch handle driven by the test instead of the filesystem."""

    def __init__(self, paths: Any, **options: Any) -> None:
        super().__init__()
        self.paths = paths
        self.options = options
        self.started = False
        self.closed = False

    def start(self) -> None:
        self.started = True

    def close(self) -> None:
        self.closed = True


class RecordingRunner:
    """Task runner that records calls and fails the task named 'error'."""

    def __init__(self) -> None:
        self.calls: list[str] = []
        self.errors: list[Exception] = []
        self.ran = threading.Event()

    def run(self, name: str) -> None:
        self.calls.append(name)
        self.ran.set()
        if name == "error":
            error = RuntimeError("Task error")
            self.errors.append(error)
            raise error


@pytest.fixture(autouse=True)
def fresh_settings(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Isolate tests from cached settings and the caller's environment."""
    for name in (
        "WATCHER_DEBOUNCE_MS",
        "WATCHER_EVENTS",
        "WATCHER_RECURSIVE",
        "WATCHER_POLLING",
        "WATCHER_IGNORE_PATTERNS",
        "LOG_FORMAT",
        "LOG_COLORS",
    ):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def logs() -> Generator[list[dict[str, Any]], None, None]:
    """Capture structlog entries emitted during the test."""
    with capture_logs() as captured:
        yield captured


@pytest.fixture
def runner() -> RecordingRunner:
    """Create a recording task runner."""
    return RecordingRunner()


@pytest.fixture
def handles() -> list[FakeWatchHandle]:
    """Watch handles created by the fake subscribe function."""
    return []


@pytest.fixture
def subscribe(handles: list[FakeWatchHandle]) -> Callable[..., FakeWatchHandle]:
    """Fake watch primitive recording each subscription."""

    def _subscribe(paths: Any, **options: Any) -> FakeWatchHandle:
        handle = FakeWatchHandle(paths, **options)
        handles.append(handle)
        return handle

    return _subscribe


@pytest.fixture
def make_watcher(
    runner: RecordingRunner, subscribe: Callable[..., FakeWatchHandle]
) -> Callable[..., TaskWatcher]:
    """Factory for task watchers wired to the fakes."""

    def _make(**kwargs: Any) -> TaskWatcher:
        kwargs.setdefault("files", "/project/src/**/*")
        kwargs.setdefault("task", "build")
        kwargs.setdefault("runner", runner)
        kwargs.setdefault("subscribe", subscribe)
        kwargs.setdefault("highlight", lambda path: f"<path>{path}</path>")
        return TaskWatcher(**kwargs)

    return _make


def info_messages(entries: list[dict[str, Any]]) -> list[str]:
    """Events of captured info-level entries, in order."""
    return [entry["event"] for entry in entries if entry["log_level"] == "info"]


def error_entries(entries: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Captured error-level entries, in order."""
    return [entry for entry in entries if entry["log_level"] == "error"]
