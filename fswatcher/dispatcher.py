"""
Event dispatcher.

Turns each normalized MutationEvent into a leveled log line. Ignored paths
are pushed down to TRACE unless the configuration asks to show them, in
which case they are logged at INFO with an ``IGNORED|`` marker.
"""

import logging
from typing import Tuple

from fswatcher.events import MutationEvent, MutationKind
from fswatcher.filters import is_event_ignored
from fswatcher.logger import TRACE

logger = logging.getLogger(__name__)

IGNORED_PREFIX = "IGNORED|"


def format_event(event: MutationEvent) -> str:
    """Render an event as ``Kind| path`` or ``Renamed| old moved/renamed to new``."""
    if event.kind is MutationKind.RENAMED:
        return f"{event.kind.value}| {event.previous_path} moved/renamed to {event.path}"
    return f"{event.kind.value}| {event.path}"


class EventDispatcher:
    """
    Classifies events against the ignore patterns and writes them to a sink.

    Attributes:
        config: The WatchConfig holding ignore patterns and show_ignored.
        sink: Any object with a ``log(level, msg)`` method, usually a
            ``logging.Logger``.
    """

    def __init__(self, config, sink):
        self.config = config
        self.sink = sink

    def dispatch(self, event: MutationEvent) -> Tuple[int, str]:
        """Return the (level, message) pair for ``event``."""
        message = format_event(event)
        if not is_event_ignored(event, self.config.compiled_patterns):
            return logging.INFO, message
        if self.config.show_ignored:
            return logging.INFO, IGNORED_PREFIX + message
        return TRACE, IGNORED_PREFIX + message

    def handle(self, event: MutationEvent) -> None:
        """
        Dispatch one event to the sink.

        Errors are logged with the event that caused them and never
        propagate into the watch source's delivery thread.
        """
        try:
            level, message = self.dispatch(event)
            self.sink.log(level, message)
        except Exception as e:
            logger.error("Error dispatching %r: %s", event, e, exc_info=True)

    def report_dropped(self, raw, error) -> None:
        """Log a notification that could not be normalized."""
        logger.error("Dropped notification %r: %s", raw, error)
