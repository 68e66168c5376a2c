from unit_watcher.detection.cooldown import alert_allowed
from unit_watcher.detection.restart import (
    AlertDecision,
    Outcome,
    ProbeReading,
    RestartDetector,
)

__all__ = [
    "AlertDecision",
    "Outcome",
    "ProbeReading",
    "RestartDetector",
    "alert_allowed",
]
