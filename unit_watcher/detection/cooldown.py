"""Alert throttling rule shared by every alert condition."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from unit_watcher.utils.duration import to_millis

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def epoch_ms(moment: datetime) -> int:
    """Return ``moment`` as epoch milliseconds (naive values are local time)."""

    if moment.tzinfo is None:
        moment = moment.astimezone()
    return to_millis(moment - _EPOCH)


def alert_allowed(last_alert_ms: int, now: datetime, cooldown: timedelta) -> bool:
    """Return ``True`` when a new alert may be sent.

    Alerts are always allowed before the first one (``last_alert_ms == 0``);
    afterwards at least ``cooldown`` must have elapsed since the last alert.
    """

    if last_alert_ms == 0:
        return True
    return epoch_ms(now) - last_alert_ms >= to_millis(cooldown)


__all__ = ["alert_allowed", "epoch_ms"]
