"""Restart detection for a supervised unit.

Each run compares the unit's current uptime against the uptime recorded by
the previous run. While a process keeps running its uptime only grows, so a
reading that is smaller than the previous one by more than the jitter
tolerance means the unit was restarted in between. A unit that is not
``active`` at all is an alert condition on its own and skips the comparison.

:class:`RestartDetector` is pure: the same prior state, reading and clock
always produce the same :class:`AlertDecision`. Persisting the new state and
delivering the message are left to the caller.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, replace
from datetime import datetime, timedelta

from unit_watcher.detection.cooldown import alert_allowed, epoch_ms
from unit_watcher.state.store import PersistedState
from unit_watcher.utils.duration import format_duration_ms

ACTIVE_STATE = "active"
DEFAULT_TOLERANCE_MS = 250


@dataclass(frozen=True)
class ProbeReading:
    """Uptime and status label reported by the supervisor for one unit."""

    uptime_ms: int
    active_state: str

    @property
    def is_active(self) -> bool:
        return self.active_state == ACTIVE_STATE


class Outcome(str, enum.Enum):
    STEADY = "steady"
    INACTIVE = "inactive"
    RESTART = "restart"


@dataclass(frozen=True)
class AlertDecision:
    """Result of one evaluation.

    Attributes
    ----------
    should_alert:
        ``True`` when a message must be delivered now.
    message:
        Alert text; empty for :attr:`Outcome.STEADY`.
    new_state:
        State to persist whether or not an alert fired.
    outcome:
        Which condition was observed.
    suppressed:
        An alert condition existed but the cooldown blocked delivery.
    """

    should_alert: bool
    message: str
    new_state: PersistedState
    outcome: Outcome
    suppressed: bool = False

    @property
    def restart_detected(self) -> bool:
        return self.outcome is Outcome.RESTART


class RestartDetector:
    """Turn a probe reading plus the previous run's state into a decision."""

    def __init__(
        self,
        unit: str,
        cooldown: timedelta,
        tolerance_ms: int = DEFAULT_TOLERANCE_MS,
    ) -> None:
        self.unit = unit
        self.cooldown = cooldown
        self.tolerance_ms = max(0, int(tolerance_ms))

    def is_restart(self, prior: PersistedState, reading: ProbeReading) -> bool:
        """Uptime dropped by more than the tolerance since a non-zero prior reading."""

        if prior.last_uptime_ms <= 0:
            return False
        return reading.uptime_ms + self.tolerance_ms < prior.last_uptime_ms

    def evaluate(
        self, prior: PersistedState, reading: ProbeReading, now: datetime
    ) -> AlertDecision:
        new_state = replace(prior, last_uptime_ms=reading.uptime_ms)

        if not reading.is_active:
            message = (
                f"⚠️ Service {self.unit} state={reading.active_state} "
                f"(uptime={format_duration_ms(reading.uptime_ms)})"
            )
            return self._decide(prior, new_state, now, message, Outcome.INACTIVE)

        if not self.is_restart(prior, reading):
            return AlertDecision(
                should_alert=False,
                message="",
                new_state=new_state,
                outcome=Outcome.STEADY,
            )

        message = (
            f"🚨 RESTART detected: {self.unit} uptime dropped "
            f"{format_duration_ms(prior.last_uptime_ms)} → "
            f"{format_duration_ms(reading.uptime_ms)} (state={reading.active_state})"
        )
        return self._decide(prior, new_state, now, message, Outcome.RESTART)

    def _decide(
        self,
        prior: PersistedState,
        new_state: PersistedState,
        now: datetime,
        message: str,
        outcome: Outcome,
    ) -> AlertDecision:
        # a suppressed alert never moves the cooldown window
        if alert_allowed(prior.last_alert_ms, now, self.cooldown):
            return AlertDecision(
                should_alert=True,
                message=message,
                new_state=replace(new_state, last_alert_ms=epoch_ms(now)),
                outcome=outcome,
            )
        return AlertDecision(
            should_alert=False,
            message=message,
            new_state=new_state,
            outcome=outcome,
            suppressed=True,
        )


__all__ = [
    "ACTIVE_STATE",
    "AlertDecision",
    "DEFAULT_TOLERANCE_MS",
    "Outcome",
    "ProbeReading",
    "RestartDetector",
]
