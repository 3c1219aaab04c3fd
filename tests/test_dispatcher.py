import logging

import pytest

from fakes import BrokenSink, RecordingSink
from fswatcher.config import WatchConfig
from fswatcher.dispatcher import EventDispatcher, format_event
from fswatcher.events import MutationEvent, MutationKind
from fswatcher.logger import TRACE


def _event(kind, name):
    if kind is MutationKind.RENAMED:
        return MutationEvent(kind, f"/data/{name}", previous_path=f"/data/old_{name}")
    return MutationEvent(kind, f"/data/{name}")


@pytest.mark.parametrize("kind", list(MutationKind))
@pytest.mark.parametrize("name, show_ignored, level, marked", [
    ("a.txt", False, logging.INFO, False),
    ("a.txt", True, logging.INFO, False),
    ("a.tmp", False, TRACE, True),
    ("a.tmp", True, logging.INFO, True),
])
def test_severity_table(kind, name, show_ignored, level, marked):
    config = WatchConfig("/data", ignore_patterns=[r"\.tmp$"], show_ignored=show_ignored)
    got_level, message = EventDispatcher(config, RecordingSink()).dispatch(_event(kind, name))
    assert got_level == level
    assert message.startswith("IGNORED|") is marked


def test_scenario_hidden_ignored_files():
    config = WatchConfig("/data", recursive=True, ignore_patterns=[r"\.tmp$"], show_ignored=False)
    sink = RecordingSink()
    dispatcher = EventDispatcher(config, sink)

    dispatcher.handle(MutationEvent(MutationKind.CREATED, "/data/a.tmp"))
    dispatcher.handle(MutationEvent(MutationKind.CREATED, "/data/a.txt"))

    assert sink.records == [
        (TRACE, "IGNORED|Created| /data/a.tmp"),
        (logging.INFO, "Created| /data/a.txt"),
    ]


def test_scenario_shown_ignored_files():
    config = WatchConfig("/data", recursive=True, ignore_patterns=[r"\.tmp$"], show_ignored=True)
    sink = RecordingSink()
    EventDispatcher(config, sink).handle(MutationEvent(MutationKind.CREATED, "/data/a.tmp"))
    assert sink.records == [(logging.INFO, "IGNORED|Created| /data/a.tmp")]


def test_rename_message_lists_old_then_new():
    event = MutationEvent(MutationKind.RENAMED, "/tmp/keep.txt", previous_path="/tmp/ignore.log")
    assert format_event(event) == "Renamed| /tmp/ignore.log moved/renamed to /tmp/keep.txt"


def test_rename_into_watched_name_is_logged_at_info():
    config = WatchConfig("/tmp", ignore_patterns=[r"ignore\.log$"])
    event = MutationEvent(MutationKind.RENAMED, "/tmp/keep.txt", previous_path="/tmp/ignore.log")
    level, message = EventDispatcher(config, RecordingSink()).dispatch(event)
    assert level == logging.INFO
    assert not message.startswith("IGNORED|")


def test_sink_failure_is_logged_not_raised(caplog):
    config = WatchConfig("/data")
    dispatcher = EventDispatcher(config, BrokenSink())
    event = MutationEvent(MutationKind.DELETED, "/data/a.txt")

    with caplog.at_level(logging.ERROR, logger="fswatcher.dispatcher"):
        dispatcher.handle(event)

    assert "disk full" in caplog.text
    assert "/data/a.txt" in caplog.text


def test_dispatch_to_logger_sink(caplog):
    config = WatchConfig("/data")
    sink = logging.getLogger("fswatcher.test.sink")
    with caplog.at_level(logging.INFO, logger="fswatcher.test.sink"):
        EventDispatcher(config, sink).handle(MutationEvent(MutationKind.MODIFIED, "/data/a.txt"))
    assert caplog.records[-1].levelno == logging.INFO
    assert caplog.records[-1].getMessage() == "Modified| /data/a.txt"


def test_report_dropped(caplog):
    dispatcher = EventDispatcher(WatchConfig("/data"), RecordingSink())
    with caplog.at_level(logging.ERROR, logger="fswatcher.dispatcher"):
        dispatcher.report_dropped("raw-notification", ValueError("no path"))
    assert "Dropped notification" in caplog.text
    assert "no path" in caplog.text
