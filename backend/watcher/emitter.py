"""
taskwatch Event Emitter.

Named-event listener registry shared by watch handles.
"""

import threading
from collections import defaultdict
from collections.abc import Callable
from typing import Any

Listener = Callable[..., Any]


class EventEmitter:
    """
    Dispatches named events to registered listeners.

    Listeners run synchronously on the emitting thread, in
    registration order.
    """

    def __init__(self) -> None:
        self._listeners: defaultdict[str, list[Listener]] = defaultdict(list)
        self._listeners_lock = threading.Lock()

    def on(self, event: str, listener: Listener) -> Listener:
        """Register a listener for an event."""
        with self._listeners_lock:
            self._listeners[event].append(listener)
        return listener

    def off(self, event: str, listener: Listener) -> None:
        """Remove a previously registered listener."""
        with self._listeners_lock:
            listeners = self._listeners.get(event, [])
            if listener in listeners:
                listeners.remove(listener)

    def listener_count(self, event: str) -> int:
        """Get number of listeners registered for an event."""
        with self._listeners_lock:
            return len(self._listeners.get(event, []))

    def emit(self, event: str, *args: Any) -> bool:
        """
        Call every listener registered for an event.

        Returns:
            True if at least one listener was called
        """
        with self._listeners_lock:
            listeners = list(self._listeners.get(event, []))

        for listener in listeners:
            listener(*args)
        return bool(listeners)
