"""Local sink used for dry runs: alerts go to the log instead of the network."""

from __future__ import annotations

import logging

from unit_watcher.notifications.base import Notifier

logger = logging.getLogger(__name__)


class LogNotifier(Notifier):
    def send(self, text: str) -> bool:
        logger.warning("[DRY-RUN] %s", text)
        return True
