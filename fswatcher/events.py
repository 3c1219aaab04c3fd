"""
Event model and normalization of raw watchdog notifications.

Every raw notification maps to exactly one MutationEvent. Nothing is
batched or coalesced here; repeated writes to the same file produce one
event per notification.
"""

import os
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from fswatcher import FSWatcherError


class NormalizationError(FSWatcherError):
    """Raised when a raw notification cannot be turned into an event."""


class MutationKind(str, Enum):
    """Types of filesystem changes reported by the watcher."""

    CREATED = "Created"
    MODIFIED = "Modified"
    DELETED = "Deleted"
    RENAMED = "Renamed"


@dataclass(frozen=True)
class MutationEvent:
    """A single change observed under the watched directory."""

    kind: MutationKind
    path: str
    previous_path: Optional[str] = None

    def __post_init__(self):
        if self.kind is MutationKind.RENAMED:
            if not self.previous_path:
                raise ValueError("Renamed events require a previous_path")
        elif self.previous_path is not None:
            raise ValueError(f"{self.kind.value} events cannot carry a previous_path")


# watchdog event_type -> kind. opened/closed notifications are not mutations.
_KIND_BY_EVENT_TYPE = {
    "created": MutationKind.CREATED,
    "modified": MutationKind.MODIFIED,
    "deleted": MutationKind.DELETED,
    "moved": MutationKind.RENAMED,
}


def _usable_path(value) -> Optional[str]:
    if value is None:
        return None
    try:
        path = os.fsdecode(value)
    except (TypeError, UnicodeDecodeError):
        return None
    return path or None


def normalize(raw) -> MutationEvent:
    """
    Convert a raw watchdog notification into a MutationEvent.

    Args:
        raw: A ``watchdog.events.FileSystemEvent`` or any object exposing
            ``event_type``, ``src_path`` and, for moves, ``dest_path``.

    Returns:
        MutationEvent: The canonical event.

    Raises:
        NormalizationError: If the event type is unknown or the notification
            carries no usable path.
    """
    event_type = getattr(raw, "event_type", None)
    kind = _KIND_BY_EVENT_TYPE.get(event_type)
    if kind is None:
        raise NormalizationError(f"Unsupported notification type: {event_type!r}")

    src_path = _usable_path(getattr(raw, "src_path", None))
    if src_path is None:
        raise NormalizationError(f"{kind.value} notification without a usable path")

    if kind is MutationKind.RENAMED:
        dest_path = _usable_path(getattr(raw, "dest_path", None))
        if dest_path is None:
            raise NormalizationError(f"Rename of {src_path} without a usable destination path")
        return MutationEvent(kind=kind, path=dest_path, previous_path=src_path)

    return MutationEvent(kind=kind, path=src_path)
