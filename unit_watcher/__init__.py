"""Detect restarts of a systemd unit between scheduled runs and alert on them."""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("unit-watcher")
except PackageNotFoundError:
    __version__ = "dev"

__all__ = ["__version__"]
