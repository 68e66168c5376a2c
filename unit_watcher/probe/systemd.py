"""Query systemd for how long a unit has been in its current active state.

``systemctl show`` reports ``ActiveEnterTimestampMonotonic`` in microseconds
on the kernel's monotonic clock; ``/proc/uptime`` reports that same clock in
seconds, so their difference is the time since the unit last became active.
"""

from __future__ import annotations

import logging
import subprocess
from datetime import timedelta
from pathlib import Path

from unit_watcher.detection.restart import ACTIVE_STATE, ProbeReading
from unit_watcher.errors import ProbeError

logger = logging.getLogger(__name__)

ENTER_TIMESTAMP_KEY = "ActiveEnterTimestampMonotonic"
ACTIVE_STATE_KEY = "ActiveState"
PROC_UPTIME = Path("/proc/uptime")


def parse_show_output(output: str) -> tuple[int, str]:
    """Return ``(enter_us, active_state)`` from ``systemctl show`` output.

    Raises :class:`ProbeError` when either property is missing or the
    timestamp is not an integer.
    """

    enter_us: int | None = None
    active_state = ""
    for raw in output.splitlines():
        line = raw.strip()
        if not line:
            continue
        key, sep, value = line.partition("=")
        if not sep:
            continue
        if key == ENTER_TIMESTAMP_KEY:
            try:
                enter_us = int(value)
            except ValueError as exc:
                raise ProbeError(f"parse {ENTER_TIMESTAMP_KEY}={value!r}: {exc}") from exc
        elif key == ACTIVE_STATE_KEY:
            active_state = value

    if enter_us is None:
        raise ProbeError(f"missing {ENTER_TIMESTAMP_KEY} in systemctl output")
    if not active_state:
        raise ProbeError(f"missing {ACTIVE_STATE_KEY} in systemctl output")
    return enter_us, active_state


def read_boot_uptime_us(path: Path = PROC_UPTIME) -> int:
    """Return the kernel uptime from ``path`` in microseconds."""

    try:
        text = path.read_text(encoding="ascii")
    except OSError as exc:
        raise ProbeError(f"read {path}: {exc}") from exc
    fields = text.split()
    if not fields:
        raise ProbeError(f"unexpected {path} format: {text.strip()!r}")
    try:
        seconds = float(fields[0])
    except ValueError as exc:
        raise ProbeError(f"parse {path} seconds={fields[0]!r}: {exc}") from exc
    return int(seconds * 1_000_000)


class SystemdProbe:
    """Read a unit's uptime and ``ActiveState`` through ``systemctl``."""

    def __init__(
        self,
        timeout: timedelta,
        *,
        systemctl: str = "systemctl",
        proc_uptime: Path = PROC_UPTIME,
    ) -> None:
        self.timeout = timeout
        self.systemctl = systemctl
        self.proc_uptime = proc_uptime

    def _show(self, unit: str) -> str:
        cmd = [
            self.systemctl,
            "show",
            unit,
            "-p",
            ENTER_TIMESTAMP_KEY,
            "-p",
            ACTIVE_STATE_KEY,
        ]
        try:
            # subprocess.run kills the child when the timeout expires
            proc = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=self.timeout.total_seconds(),
            )
        except subprocess.TimeoutExpired as exc:
            raise ProbeError(
                f"systemctl show timed out after {self.timeout.total_seconds():g}s"
            ) from exc
        except OSError as exc:
            raise ProbeError(f"systemctl show failed: {exc}") from exc
        if proc.returncode != 0:
            raise ProbeError(
                f"systemctl show failed: exit status {proc.returncode}: {proc.stderr.strip()}"
            )
        return proc.stdout

    def read(self, unit: str) -> ProbeReading:
        """Return the current :class:`ProbeReading` for ``unit``."""

        enter_us, active_state = parse_show_output(self._show(unit))
        if active_state != ACTIVE_STATE or enter_us == 0:
            logger.debug("probe.inactive unit=%s state=%s", unit, active_state)
            return ProbeReading(uptime_ms=0, active_state=active_state)

        boot_us = read_boot_uptime_us(self.proc_uptime)
        uptime_us = max(0, boot_us - enter_us)
        reading = ProbeReading(uptime_ms=uptime_us // 1000, active_state=active_state)
        logger.debug(
            "probe.read unit=%s state=%s uptime_ms=%d", unit, active_state, reading.uptime_ms
        )
        return reading
