"""
taskwatch File Watcher Package.

File system monitoring that runs tasks on change.
Requires Python 3.11+.
"""

from watcher.debouncer import Debouncer
from watcher.events import CHANGE_LABELS, ChangeEvent, ChangeKind
from watcher.file_watcher import WatchHandle, WatchTarget, watch_files
from watcher.task_watcher import TaskWatcher, watch_and_run

__all__ = [
    "Debouncer",
    "CHANGE_LABELS",
    "ChangeEvent",
    "ChangeKind",
    "WatchHandle",
    "WatchTarget",
    "watch_files",
    "TaskWatcher",
    "watch_and_run",
]
