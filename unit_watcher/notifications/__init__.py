from __future__ import annotations

from unit_watcher.config import AppSettings
from unit_watcher.notifications.base import Notifier
from unit_watcher.notifications.log_sink import LogNotifier
from unit_watcher.notifications.telegram import TelegramNotifier


def build_notifier(cfg: AppSettings) -> Notifier:
    """Dry runs log locally; everything else goes through Telegram."""

    if cfg.dry_run:
        return LogNotifier()
    return TelegramNotifier(cfg.telegram)


__all__ = ["LogNotifier", "Notifier", "TelegramNotifier", "build_notifier"]
