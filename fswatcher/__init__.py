"""
FSWatcher: a small directory mutation logger.

Watches a directory tree for created, modified, deleted and renamed
entries and writes one leveled log line per change, until the process
receives a shutdown signal.
"""

__version__ = "1.0.0"


class FSWatcherError(Exception):
    """Base class for errors raised by fswatcher."""


class ConfigError(FSWatcherError):
    """Raised when the watch configuration is missing or invalid."""
