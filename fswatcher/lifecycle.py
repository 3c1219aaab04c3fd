"""
Watch lifecycle state machine.

    IDLE --start--> WATCHING --signal/stop--> SHUTTING_DOWN --> STOPPED

The state is the only value shared between the watch source's delivery
thread and the signal handler. Every write holds both the delivery lock,
which a notification keeps for as long as it is being handled, and the
condition that waiters block on. Reads need only one of them: callbacks and
signal handlers read under the delivery lock, waiters under the condition.
Locks are always taken in the order delivery lock, then condition, so a
callback may read the state even while a signal handler interrupts a
thread blocked in wait_until_stopped().
"""

import logging
import threading
from enum import Enum

from fswatcher import FSWatcherError
from fswatcher.config import validate_watch_path
from fswatcher.events import NormalizationError, normalize
from fswatcher.sources import SignalKind

logger = logging.getLogger(__name__)


class LifecycleError(FSWatcherError):
    """Raised when the lifecycle is used out of order, e.g. started twice."""


class LifecycleState(str, Enum):
    IDLE = "idle"
    WATCHING = "watching"
    SHUTTING_DOWN = "shutting_down"
    STOPPED = "stopped"


class WatchLifecycle:
    """
    Owns the watch source and drives it through its states.

    Attributes:
        source: The WatchSource delivering raw notifications.
        signals: Optional ShutdownSignals; termination requests stop the watch.
    """

    def __init__(self, source, signals=None):
        self.source = source
        self.signals = signals
        # Both locks are re-entrant: signal handlers run on the main thread,
        # possibly while it holds them, and a callback may call stop().
        self._delivery_lock = threading.RLock()
        self._cond = threading.Condition(threading.RLock())
        self._state = LifecycleState.IDLE
        self._on_event = None
        self._on_error = None
        self._unsubscribe = None

    @property
    def state(self):
        with self._delivery_lock:
            return self._state

    def is_running(self):
        return self.state is LifecycleState.WATCHING

    def start(self, config, on_event, on_error=None):
        """
        Start watching ``config.path``.

        Args:
            config: WatchConfig with the path and recursion flag.
            on_event (callable): Called with each MutationEvent.
            on_error (callable): Called with ``(raw, error)`` for notifications
                that could not be normalized.

        Raises:
            LifecycleError: If the lifecycle is not idle.
            ConfigError: If the watch path is not an existing directory.
        """
        with self._delivery_lock, self._cond:
            if self._state is not LifecycleState.IDLE:
                raise LifecycleError(f"Cannot start a watch in state {self._state.value}")
            validate_watch_path(config.path)

            self._on_event = on_event
            self._on_error = on_error
            if self.signals is not None:
                self._unsubscribe = self.signals.subscribe(self.handle_signal)
            try:
                self.source.start(config.path, config.recursive, self._deliver)
            except Exception:
                self._drop_subscription()
                raise
            if self._state is not LifecycleState.IDLE:
                # A termination request arrived while the source was starting.
                self.source.stop()
                self._drop_subscription()
                return
            self._state = LifecycleState.WATCHING
        logger.debug("Watch started on %s (recursive=%s)", config.path, config.recursive)

    def handle_signal(self, kind):
        """React to a host termination request."""
        logger.debug("Received signal %s", kind.value)
        if kind is SignalKind.BREAK:
            logger.info("Break not implemented!")
            return
        if self.state is LifecycleState.WATCHING:
            logger.info("Received shutdown signal, disabling watcher.")
        self.stop()

    def stop(self):
        """
        Stop the watch. Safe to call more than once.

        Returns once the source is disabled and any in-flight callback has
        returned.
        """
        # Taking the delivery lock waits out a callback already in progress.
        with self._delivery_lock, self._cond:
            if self._state is LifecycleState.IDLE:
                self._state = LifecycleState.STOPPED
                self._cond.notify_all()
                return
            if self._state is not LifecycleState.WATCHING:
                return
            self._state = LifecycleState.SHUTTING_DOWN

        try:
            self.source.stop()
        finally:
            self._drop_subscription()
            with self._delivery_lock, self._cond:
                self._state = LifecycleState.STOPPED
                self._cond.notify_all()
            logger.debug("Watch stopped")

    def wait_until_stopped(self, timeout=None):
        """
        Block until the lifecycle reaches STOPPED.

        Returns:
            bool: True if stopped, False if ``timeout`` expired first.
        """
        with self._cond:
            return self._cond.wait_for(lambda: self._state is LifecycleState.STOPPED, timeout)

    def _drop_subscription(self):
        unsubscribe, self._unsubscribe = self._unsubscribe, None
        if unsubscribe is not None:
            unsubscribe()

    def _report_dropped(self, raw, error):
        if self._on_error is None:
            logger.error("Dropped notification %r: %s", raw, error)
            return
        try:
            self._on_error(raw, error)
        except Exception:
            # An exception here would end the observer thread.
            logger.exception("Error callback failed for %r", raw)

    def _deliver(self, raw):
        with self._delivery_lock:
            # Transitions out of WATCHING hold this lock, so the read is stable.
            if self._state is not LifecycleState.WATCHING:
                return
            try:
                event = normalize(raw)
            except NormalizationError as e:
                self._report_dropped(raw, e)
                return
            try:
                self._on_event(event)
            except Exception:
                # An exception here would end the observer thread.
                logger.exception("Event callback failed for %r", event)
