import pytest
from watchdog.events import (DirCreatedEvent, DirModifiedEvent, FileClosedEvent,
                             FileCreatedEvent, FileDeletedEvent, FileModifiedEvent,
                             FileMovedEvent)

from fswatcher.events import MutationEvent, MutationKind, NormalizationError, normalize


@pytest.mark.parametrize("raw, kind", [
    (FileCreatedEvent("/data/a.txt"), MutationKind.CREATED),
    (FileModifiedEvent("/data/a.txt"), MutationKind.MODIFIED),
    (FileDeletedEvent("/data/a.txt"), MutationKind.DELETED),
    (DirCreatedEvent("/data/a.txt"), MutationKind.CREATED),
    (DirModifiedEvent("/data/a.txt"), MutationKind.MODIFIED),
])
def test_single_path_notifications(raw, kind):
    event = normalize(raw)
    assert event == MutationEvent(kind, "/data/a.txt")
    assert event.previous_path is None


def test_move_becomes_rename_with_both_paths():
    event = normalize(FileMovedEvent("/data/old.txt", "/data/new.txt"))
    assert event.kind is MutationKind.RENAMED
    assert event.previous_path == "/data/old.txt"
    assert event.path == "/data/new.txt"


def test_bytes_paths_are_decoded():
    event = normalize(FileCreatedEvent(b"/data/a.txt"))
    assert event.path == "/data/a.txt"


def test_close_notification_is_rejected():
    with pytest.raises(NormalizationError, match="closed"):
        normalize(FileClosedEvent("/data/a.txt"))


def test_missing_path_is_rejected():
    with pytest.raises(NormalizationError):
        normalize(FileCreatedEvent(""))


def test_move_without_destination_is_rejected():
    with pytest.raises(NormalizationError, match="destination"):
        normalize(FileMovedEvent("/data/old.txt", ""))


def test_object_without_event_type_is_rejected():
    with pytest.raises(NormalizationError):
        normalize(object())


def test_rename_requires_previous_path():
    with pytest.raises(ValueError):
        MutationEvent(MutationKind.RENAMED, "/data/new.txt")


def test_only_rename_carries_previous_path():
    with pytest.raises(ValueError):
        MutationEvent(MutationKind.CREATED, "/data/new.txt", previous_path="/data/old.txt")


def test_events_are_immutable():
    event = MutationEvent(MutationKind.CREATED, "/data/a.txt")
    with pytest.raises(AttributeError):
        event.path = "/data/b.txt"
