"""
Host-specific backends behind two small capability interfaces.

``WatchSource`` delivers raw filesystem notifications from a background
thread; ``ShutdownSignals`` reports host termination requests. The
lifecycle state machine only talks to these interfaces, so tests and other
platforms can plug in their own backends.
"""

import logging
import os
import signal
import threading
from abc import ABC, abstractmethod
from enum import Enum

from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer
from watchdog.observers.polling import PollingObserver

logger = logging.getLogger(__name__)


class SignalKind(str, Enum):
    """Host termination requests, independent of the signal mechanism."""

    INTERRUPT = "interrupt"
    BREAK = "break"
    CLOSE = "close"
    LOGOFF = "logoff"
    SHUTDOWN = "shutdown"


class WatchSource(ABC):
    """Starts and stops delivery of raw notifications for one directory."""

    @abstractmethod
    def start(self, path, recursive, deliver):
        """Begin calling ``deliver(raw)`` for every notification under ``path``."""

    @abstractmethod
    def stop(self):
        """Disable delivery; no ``deliver`` call may start after this returns."""


class ShutdownSignals(ABC):
    """Subscription point for host termination requests."""

    @abstractmethod
    def subscribe(self, handler):
        """
        Call ``handler(kind)`` for each termination request.

        Returns:
            callable: Removes the subscription when called.
        """


class _ForwardingHandler(FileSystemEventHandler):
    """
    Forwards name and last-write changes, skipping open/close notifications.

    Only entries below the watched root are reported; inotify also flags the
    root directory itself as modified whenever one of its children changes.
    """

    def __init__(self, root, deliver):
        super().__init__()
        self._root = os.path.normpath(root)
        self._deliver = deliver

    def _forward(self, event):
        if event.is_directory and os.path.normpath(os.fsdecode(event.src_path)) == self._root:
            return
        self._deliver(event)

    def on_created(self, event):
        self._forward(event)

    def on_modified(self, event):
        self._forward(event)

    def on_deleted(self, event):
        self._forward(event)

    def on_moved(self, event):
        self._forward(event)


class WatchdogSource(WatchSource):
    """
    Watch source backed by a watchdog observer.

    Args:
        use_polling (bool): Use a PollingObserver instead of native OS
            notifications, e.g. for network filesystems.
        poll_interval (float): Polling interval in seconds.
    """

    def __init__(self, use_polling=False, poll_interval=1.0):
        self.use_polling = use_polling
        self.poll_interval = poll_interval
        self.observer = None

    def start(self, path, recursive, deliver):
        if self.observer is not None:
            raise RuntimeError("WatchdogSource is already started")
        if self.use_polling:
            observer = PollingObserver(timeout=self.poll_interval)
            logger.debug("Using polling observer (interval: %ss)", self.poll_interval)
        else:
            observer = Observer()
            logger.debug("Using OS event observer")
        observer.schedule(_ForwardingHandler(path, deliver), path, recursive=recursive)
        observer.start()
        self.observer = observer

    def stop(self):
        observer, self.observer = self.observer, None
        if observer is None:
            return
        observer.unschedule_all()
        observer.stop()
        # The observer thread itself may be the caller when stopping from a callback.
        if threading.current_thread() is not observer:
            observer.join()


def _host_signals():
    """Map the signals available on this platform to their SignalKind."""
    candidates = [
        ("SIGINT", SignalKind.INTERRUPT),
        ("SIGTERM", SignalKind.SHUTDOWN),
        ("SIGHUP", SignalKind.CLOSE),
        ("SIGBREAK", SignalKind.BREAK),
        ("SIGQUIT", SignalKind.BREAK),
    ]
    return {getattr(signal, name): kind for name, kind in candidates if hasattr(signal, name)}


class ProcessSignals(ShutdownSignals):
    """
    Shutdown signals delivered through the ``signal`` module.

    Python runs signal handlers in the main thread, so subscribe must be
    called from the main thread. Previous handlers are restored on
    unsubscribe.
    """

    def __init__(self, signal_map=None):
        self.signal_map = dict(signal_map) if signal_map is not None else _host_signals()

    def subscribe(self, handler):
        previous = {}

        def _on_signal(signum, frame):
            handler(self.signal_map[signum])

        for signum in self.signal_map:
            try:
                previous[signum] = signal.signal(signum, _on_signal)
            except (OSError, ValueError) as e:
                logger.warning("Cannot install handler for signal %s: %s", signum, e)

        def unsubscribe():
            while previous:
                signum, old_handler = previous.popitem()
                signal.signal(signum, old_handler if old_handler is not None else signal.SIG_DFL)

        return unsubscribe
