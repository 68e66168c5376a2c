"""Global pytest fixtures and environment configuration."""

from __future__ import annotations

import pytest

_WATCHER_ENV = (
    "UNIT",
    "STATE",
    "STATE_PATH",
    "TIMEOUT",
    "PROBE_TIMEOUT",
    "COOLDOWN",
    "TOLERANCE_MS",
    "DRY_RUN",
    "LOG_LEVEL",
    "LOG_FORMAT",
    "TELEGRAM__BASE_URL",
    "TELEGRAM_BASE_URL",
    "TELEGRAM__BOT_TOKEN",
    "TELEGRAM_BOT_TOKEN",
    "BOT_TOKEN",
    "TELEGRAM__CHAT_ID",
    "TELEGRAM_CHAT_ID",
    "CHAT_ID",
)


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    # Keep a developer's shell or .env from leaking into settings under test.
    for key in _WATCHER_ENV:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
