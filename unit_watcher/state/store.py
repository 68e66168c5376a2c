"""Simple JSON-backed state store for the last observed uptime and alert."""
from __future__ import annotations

import json
import logging
import os
import tempfile
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any

from unit_watcher.errors import PersistenceError

logger = logging.getLogger(__name__)


def _non_negative_int(value: Any) -> int:
    if isinstance(value, bool):
        return 0
    try:
        number = int(value)
    except (TypeError, ValueError, OverflowError):
        return 0
    return max(0, number)


@dataclass(frozen=True)
class PersistedState:
    """Durable record carried between runs; zeros mean "never observed"."""

    last_uptime_ms: int = 0
    last_alert_ms: int = 0

    @classmethod
    def from_mapping(cls, data: Any) -> "PersistedState":
        if not isinstance(data, dict):
            return cls()
        return cls(
            last_uptime_ms=_non_negative_int(data.get("last_uptime_ms", 0)),
            last_alert_ms=_non_negative_int(data.get("last_alert_ms", 0)),
        )


class StateStore:
    """Load and atomically persist :class:`PersistedState` for one unit."""

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self.path = Path(path)

    # ------------------------------------------------------------------
    def load(self) -> PersistedState:
        """Return the stored state, or the zero state if it cannot be read."""
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            logger.debug("state.missing path=%s", self.path)
            return PersistedState()
        except (OSError, ValueError) as exc:
            logger.warning("state.unreadable path=%s error=%s", self.path, exc)
            return PersistedState()
        return PersistedState.from_mapping(data)

    def save(self, state: PersistedState) -> None:
        """Write ``state`` through a temp file in the same directory.

        Raises :class:`PersistenceError` if any step fails; the previous file
        is left untouched in that case.
        """
        directory = self.path.parent
        tmp_name: str | None = None
        try:
            directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self.path.name}.", suffix=".tmp", dir=directory
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(asdict(state), f, indent=2)
                f.write("\n")
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, self.path)
            tmp_name = None
        except OSError as exc:
            raise PersistenceError(f"save state {self.path}: {exc}") from exc
        finally:
            if tmp_name is not None:
                try:
                    os.unlink(tmp_name)
                except OSError:
                    logger.debug("state.tmp_cleanup_failed path=%s", tmp_name)
