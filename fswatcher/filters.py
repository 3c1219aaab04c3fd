"""
Path ignore filter.

Ignore patterns are regular expressions searched anywhere within an
absolute path, so ``\\.tmp$`` hides temporary files and ``/\\.git/`` hides
everything below a git directory.
"""

import re

from fswatcher import ConfigError
from fswatcher.events import MutationKind


def compile_patterns(patterns):
    """
    Compile ignore patterns once, preserving their order.

    Args:
        patterns (iterable): Regex strings or already compiled patterns.

    Returns:
        tuple: Compiled ``re.Pattern`` objects.

    Raises:
        ConfigError: If any pattern is not a valid regular expression.
    """
    compiled = []
    for pattern in patterns or ():
        if isinstance(pattern, re.Pattern):
            compiled.append(pattern)
            continue
        try:
            compiled.append(re.compile(pattern))
        except (re.error, TypeError) as e:
            raise ConfigError(f"Invalid ignore pattern {pattern!r}: {e}") from e
    return tuple(compiled)


def is_ignored(path, patterns):
    """Return True if any pattern matches somewhere within ``path``."""
    if not patterns:
        return False
    return any(re.search(pattern, path) for pattern in patterns)


def is_event_ignored(event, patterns):
    """
    Decide whether a mutation event is ignored.

    A rename is only ignored when both its old and its new path are
    ignored; moving a file into or out of an ignored name stays visible.
    """
    if event.kind is MutationKind.RENAMED:
        return is_ignored(event.previous_path, patterns) and is_ignored(event.path, patterns)
    return is_ignored(event.path, patterns)
