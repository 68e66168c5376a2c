"""One evaluation of a unit: load state, probe, decide, notify, persist."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable, Protocol

from unit_watcher.config import AppSettings
from unit_watcher.detection.restart import AlertDecision, ProbeReading, RestartDetector
from unit_watcher.errors import PersistenceError
from unit_watcher.notifications import Notifier, build_notifier
from unit_watcher.probe.systemd import SystemdProbe
from unit_watcher.state.store import StateStore
from unit_watcher.utils.logging_setup import log_event

logger = logging.getLogger(__name__)


class StatusProbe(Protocol):
    def read(self, unit: str) -> ProbeReading: ...


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class WatchRunner:
    """Wire the collaborators for a single run.

    A :class:`~unit_watcher.errors.ProbeError` from the probe propagates
    unchanged and nothing is persisted. Notification and save failures are
    logged and never change the outcome of the run.
    """

    def __init__(
        self,
        unit: str,
        store: StateStore,
        probe: StatusProbe,
        notifier: Notifier,
        detector: RestartDetector,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.unit = unit
        self.store = store
        self.probe = probe
        self.notifier = notifier
        self.detector = detector
        self._clock = clock

    @classmethod
    def from_settings(cls, cfg: AppSettings) -> "WatchRunner":
        unit = cfg.require_unit()
        return cls(
            unit=unit,
            store=StateStore(cfg.resolved_state_path),
            probe=SystemdProbe(cfg.timeout),
            notifier=build_notifier(cfg),
            detector=RestartDetector(unit, cfg.cooldown, cfg.tolerance_ms),
        )

    def run(self) -> AlertDecision:
        now = self._clock()
        prior = self.store.load()
        reading = self.probe.read(self.unit)
        decision = self.detector.evaluate(prior, reading, now)

        log_event(
            "watch.evaluated",
            "info",
            unit=self.unit,
            state=reading.active_state,
            uptime_ms=reading.uptime_ms,
            prior_uptime_ms=prior.last_uptime_ms,
            outcome=decision.outcome.value,
            alert=decision.should_alert,
        )

        if decision.should_alert:
            if not self.notifier.send(decision.message):
                logger.warning("notify.failed unit=%s", self.unit)
        elif decision.suppressed:
            logger.info(
                "%s detected but in cooldown; skipping alert unit=%s",
                decision.outcome.value,
                self.unit,
            )

        try:
            self.store.save(decision.new_state)
        except PersistenceError as exc:
            logger.warning("state.save_failed unit=%s error=%s", self.unit, exc)
        return decision

    def close(self) -> None:
        self.notifier.close()


__all__ = ["StatusProbe", "WatchRunner"]
