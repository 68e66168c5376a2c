"""Telegram Bot API notifier."""

from __future__ import annotations

import logging

import requests

from unit_watcher.config import TelegramSettings
from unit_watcher.errors import NotificationError
from unit_watcher.notifications.base import Notifier

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT_S = 10.0


def post_message(
    session: requests.Session,
    endpoint: str,
    chat_id: str,
    text: str,
    *,
    timeout: float = REQUEST_TIMEOUT_S,
) -> None:
    """POST ``text`` to ``endpoint``; raise :class:`NotificationError` unless HTTP 200."""

    response = session.post(
        endpoint,
        json={"chat_id": chat_id, "text": text},
        headers={"Content-Type": "application/json"},
        timeout=timeout,
    )
    if response.status_code != 200:
        raise NotificationError(
            f"unexpected status code '{response.status_code}': {response.text}"
        )


class TelegramNotifier(Notifier):
    """Send alerts through ``{base_url}/{bot_token}/sendMessage``.

    Without both a bot token and a chat id the notifier only echoes the
    message to the log, which keeps unconfigured deployments harmless.
    """

    def __init__(
        self,
        cfg: TelegramSettings,
        session: requests.Session | None = None,
        timeout: float = REQUEST_TIMEOUT_S,
    ) -> None:
        self.cfg = cfg
        self.timeout = timeout
        self._session = session

    @property
    def endpoint(self) -> str:
        return f"{self.cfg.base_url}/{self.cfg.bot_token}/sendMessage"

    def _get_session(self) -> requests.Session:
        if self._session is None:
            self._session = requests.Session()
        return self._session

    def send(self, text: str) -> bool:
        logger.info("telegram.message text=%s", text)
        if not self.cfg.enabled:
            logger.debug("telegram.disabled reason=missing_credentials")
            return True
        try:
            post_message(
                self._get_session(),
                self.endpoint,
                self.cfg.chat_id,
                text,
                timeout=self.timeout,
            )
        except NotificationError as exc:
            logger.error("telegram.failed error=%s", exc)
            return False
        except requests.exceptions.RequestException as exc:
            logger.error("telegram.network_error error=%s", exc)
            return False
        logger.info("telegram.sent chat_id=%s", self.cfg.chat_id)
        return True

    def close(self) -> None:
        if self._session is not None:
            self._session.close()
            self._session = None
