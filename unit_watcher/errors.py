"""Exception taxonomy for a single watcher run.

Only :class:`ConfigError` and :class:`ProbeError` abort a run; the other two
are absorbed and logged so a transient disk or network failure does not stop
later runs from detecting a real restart.
"""

from __future__ import annotations


class WatcherError(Exception):
    """Base class for all watcher failures."""


class ConfigError(WatcherError):
    """Required configuration is missing or unparsable."""


class ProbeError(WatcherError):
    """The supervisor could not be queried or returned unusable output."""


class PersistenceError(WatcherError):
    """The state file could not be written."""


class NotificationError(WatcherError):
    """The notification transport failed or answered with a non-200 status."""


__all__ = [
    "ConfigError",
    "NotificationError",
    "PersistenceError",
    "ProbeError",
    "WatcherError",
]
