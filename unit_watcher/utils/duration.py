"""Duration parsing and human-readable formatting."""

from __future__ import annotations

import math
import re
from datetime import timedelta
from typing import Any

_MS_PER_SECOND = 1000
_MS_PER_MINUTE = 60 * _MS_PER_SECOND
_MS_PER_HOUR = 60 * _MS_PER_MINUTE

_UNIT_SECONDS: dict[str, float] = {
    "us": 1e-6,
    "µs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}
_TOKEN = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(us|µs|ms|s|m|h)")


def format_duration_ms(ms: int) -> str:
    """Render ``ms`` as seconds, minutes or hours for alert text.

    ``59000`` -> ``"59.0s"``, ``60000`` -> ``"1.0m"``, ``3600000`` -> ``"1.00h"``.
    """

    if ms < _MS_PER_MINUTE:
        return f"{ms / _MS_PER_SECOND:.1f}s"
    if ms < _MS_PER_HOUR:
        return f"{ms / _MS_PER_MINUTE:.1f}m"
    return f"{ms / _MS_PER_HOUR:.2f}h"


def parse_duration(value: Any) -> timedelta:
    """Return ``value`` as a :class:`timedelta`.

    Accepts timedeltas, plain numbers (seconds), numeric strings and
    Go-style strings such as ``"500ms"``, ``"30s"`` or ``"1h30m"``.
    """

    if isinstance(value, timedelta):
        return value
    if isinstance(value, bool):
        raise ValueError(f"invalid duration: {value!r}")
    if isinstance(value, (int, float)):
        value = str(value)

    text = str(value).strip().lower()
    if not text:
        raise ValueError("empty duration")
    try:
        seconds = float(text)
    except ValueError:
        pass
    else:
        if not math.isfinite(seconds):
            raise ValueError(f"invalid duration: {value!r}")
        return timedelta(seconds=seconds)

    sign = 1.0
    if text[0] in "+-":
        sign = -1.0 if text[0] == "-" else 1.0
        text = text[1:]
    pos = 0
    total = 0.0
    while pos < len(text):
        match = _TOKEN.match(text, pos)
        if match is None:
            raise ValueError(f"invalid duration: {value!r}")
        total += float(match.group(1)) * _UNIT_SECONDS[match.group(2)]
        pos = match.end()
    if pos == 0:
        raise ValueError(f"invalid duration: {value!r}")
    return timedelta(seconds=sign * total)


def to_millis(delta: timedelta) -> int:
    """Return ``delta`` as whole milliseconds."""

    return delta // timedelta(milliseconds=1)


__all__ = ["format_duration_ms", "parse_duration", "to_millis"]
