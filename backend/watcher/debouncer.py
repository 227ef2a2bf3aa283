"""
taskwatch Debouncer.

Debounces rapid file system events.
Requires Python 3.11+.
"""

import threading
from collections.abc import Callable
from typing import Any

from utils.logger import LoggerMixin
from watcher.events import ChangeEvent


class Debouncer(LoggerMixin):
    """
    Debounces rapid file changes.

    Accumulates changes and triggers callback after a delay period
    with no new changes. Every change is delivered exactly once, in
    arrival order. With a delay of zero the callback fires on every
    change.
    """

    def __init__(
        self,
        delay_ms: int = 0,
        callback: Callable[[list[ChangeEvent]], Any] | None = None,
    ) -> None:
        """
        Initialize the debouncer.

        Args:
            delay_ms: Delay in milliseconds before processing
            callback: Function to call with accumulated changes
        """
        self._delay = max(delay_ms, 0) / 1000.0
        self._callback = callback
        self._pending: list[ChangeEvent] = []
        self._timer: threading.Timer | None = None
        self._lock = threading.Lock()

    def set_callback(self, callback: Callable[[list[ChangeEvent]], Any]) -> None:
        """Set or update the callback function."""
        self._callback = callback

    @property
    def delay_ms(self) -> int:
        """Get the debounce delay in milliseconds."""
        return round(self._delay * 1000)

    def debounce(self, change: ChangeEvent) -> None:
        """
        Add a file change to the pending batch.

        The callback will be triggered after delay_ms milliseconds
        of no new changes.

        Args:
            change: The change to accumulate
        """
        with self._lock:
            self._pending.append(change)

            if self._delay <= 0:
                changes = self._take_pending()
            else:
                # Restart the quiet period
                if self._timer is not None:
                    self._timer.cancel()
                self._timer = threading.Timer(self._delay, self._on_timer)
                self._timer.daemon = True
                self._timer.start()
                return

        self._deliver(changes)

    def _on_timer(self) -> None:
        """Process all pending changes once the quiet period ends."""
        with self._lock:
            # A newer change rescheduled the timer after this one fired
            if self._timer is not threading.current_thread():
                return
            changes = self._take_pending()

        self.log.debug("processing_debounced_changes", count=len(changes))
        self._deliver(changes)

    def _take_pending(self) -> list[ChangeEvent]:
        """Swap out the pending batch. Caller must hold the lock."""
        changes = self._pending
        self._pending = []
        self._timer = None
        return changes

    def _deliver(self, changes: list[ChangeEvent]) -> None:
        if not changes or self._callback is None:
            return
        try:
            self._callback(changes)
        except Exception as e:
            self.log.error("debounce_callback_failed", error=str(e))

    def flush(self) -> list[ChangeEvent]:
        """
        Immediately process all pending changes.

        Returns:
            List of changes that were pending
        """
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            changes = self._take_pending()

        self._deliver(changes)
        return changes

    def clear(self) -> None:
        """Clear all pending changes without processing."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._take_pending()

    @property
    def pending_count(self) -> int:
        """Get number of pending changes."""
        with self._lock:
            return len(self._pending)

    @property
    def pending_paths(self) -> list[str]:
        """Get list of paths with pending changes."""
        with self._lock:
            return [change.path for change in self._pending]
