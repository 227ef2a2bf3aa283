"""
taskwatch Change Events.

Change kinds reported by watch handles and their log labels.
Requires Python 3.11+.
"""

import time
from dataclasses import dataclass, field
from enum import Enum


class ChangeKind(str, Enum):
    """Kinds of filesystem change a watch handle can emit."""

    ADDED = "added"
    MODIFIED = "modified"
    REMOVED = "removed"
    DIR_ADDED = "dir_added"
    DIR_REMOVED = "dir_removed"


CHANGE_LABELS: dict[str, str] = {
    ChangeKind.ADDED.value: "File added",
    ChangeKind.MODIFIED.value: "File updated",
    ChangeKind.REMOVED.value: "File removed",
    ChangeKind.DIR_ADDED.value: "Directory added",
    ChangeKind.DIR_REMOVED.value: "Directory removed",
}

DEFAULT_EVENTS: tuple[str, ...] = (
    ChangeKind.ADDED.value,
    ChangeKind.MODIFIED.value,
    ChangeKind.REMOVED.value,
)


@dataclass(frozen=True)
class ChangeEvent:
    """A single change waiting to be flushed."""

    kind: str
    path: str
    timestamp: float = field(default_factory=time.time, compare=False)

    @property
    def label(self) -> str | None:
        """Human readable label, or None for kinds without one."""
        return CHANGE_LABELS.get(self.kind)
