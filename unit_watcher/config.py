"""Settings for a single watcher run.

- Nested Telegram model plus flat legacy env names (``TELEGRAM_BOT_TOKEN``).
- Durations accept plain seconds or Go-style strings (``30s``, ``10m``).
- CLI flags are merged on top of environment values by :func:`load_settings`.
"""

from __future__ import annotations

import logging
import os
import re
from datetime import timedelta
from pathlib import Path
from typing import Any, Literal

from dotenv import find_dotenv, load_dotenv
from pydantic import AliasChoices, BaseModel, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from unit_watcher.detection.restart import DEFAULT_TOLERANCE_MS
from unit_watcher.errors import ConfigError
from unit_watcher.utils.duration import parse_duration

DEFAULT_TELEGRAM_BASE_URL = "https://api.telegram.org"
DEFAULT_STATE_DIR = Path("/var/lib/unit-watcher")
_UNSAFE_FILENAME = re.compile(r"[^A-Za-z0-9@._-]")


def env_any(*names: str, default: str | None = None) -> str | None:
    """Return the first non-empty environment variable from ``names``."""
    for name in names:
        val = os.getenv(name)
        if val:
            return val
    return default


class TelegramSettings(BaseModel):
    base_url: str = DEFAULT_TELEGRAM_BASE_URL
    bot_token: str = ""
    chat_id: str = ""

    @classmethod
    def from_env(cls) -> "TelegramSettings":
        """Support nested and legacy flat env vars such as ``TELEGRAM_CHAT_ID``."""
        return cls(
            base_url=env_any(
                "TELEGRAM__BASE_URL",
                "TELEGRAM_BASE_URL",
                default=DEFAULT_TELEGRAM_BASE_URL,
            )
            or DEFAULT_TELEGRAM_BASE_URL,
            bot_token=env_any("TELEGRAM__BOT_TOKEN", "TELEGRAM_BOT_TOKEN", "BOT_TOKEN", default="")
            or "",
            chat_id=env_any("TELEGRAM__CHAT_ID", "TELEGRAM_CHAT_ID", "CHAT_ID", default="") or "",
        )

    @field_validator("base_url")
    @classmethod
    def _v_base_url(cls, v: str) -> str:
        v = (v or "").strip().rstrip("/")
        return v or DEFAULT_TELEGRAM_BASE_URL

    @field_validator("chat_id", mode="before")
    @classmethod
    def _v_chat_id(cls, v: Any) -> str:
        return "" if v is None else str(v).strip()

    @property
    def enabled(self) -> bool:
        """Telegram delivery only happens with both a token and a chat id."""
        return bool(self.bot_token and self.chat_id)


class AppSettings(BaseSettings):
    unit: str = Field("", validation_alias=AliasChoices("UNIT", "unit"))
    state_path: Path | None = Field(
        None,
        validation_alias=AliasChoices("STATE", "STATE_PATH", "state_path"),
        description="Path to the JSON state file; derived from the unit when unset.",
    )
    timeout: timedelta = Field(
        timedelta(seconds=5),
        validation_alias=AliasChoices("TIMEOUT", "PROBE_TIMEOUT", "timeout"),
        description="Deadline for the systemctl query.",
    )
    cooldown: timedelta = Field(
        timedelta(minutes=10),
        validation_alias=AliasChoices("COOLDOWN", "cooldown"),
        description="Minimum time between two alerts.",
    )
    tolerance_ms: int = Field(
        DEFAULT_TOLERANCE_MS,
        ge=0,
        validation_alias=AliasChoices("TOLERANCE_MS", "tolerance_ms"),
        description="Uptime jitter absorbed before a drop counts as a restart.",
    )
    dry_run: bool = Field(False, validation_alias=AliasChoices("DRY_RUN", "dry_run"))
    log_level: str = Field("INFO", validation_alias=AliasChoices("LOG_LEVEL", "log_level"))
    log_format: Literal["logfmt", "json"] = Field(
        "logfmt",
        validation_alias=AliasChoices("LOG_FORMAT", "log_format"),
        description="Output format for structured logs.",
    )
    telegram: TelegramSettings = Field(default_factory=TelegramSettings)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        env_nested_delimiter="__",  # e.g., TELEGRAM__BOT_TOKEN
        extra="ignore",
        populate_by_name=True,
    )

    @field_validator("unit", mode="before")
    @classmethod
    def _v_unit(cls, v: Any) -> str:
        return "" if v is None else str(v).strip()

    @field_validator("state_path", mode="before")
    @classmethod
    def _v_state_path(cls, v: Any) -> Any:
        if v is None or (isinstance(v, str) and not v.strip()):
            return None
        return v

    @field_validator("timeout", "cooldown", mode="before")
    @classmethod
    def _v_duration(cls, v: Any) -> timedelta:
        return parse_duration(v)

    @field_validator("timeout")
    @classmethod
    def _v_timeout_positive(cls, v: timedelta) -> timedelta:
        if v <= timedelta(0):
            raise ValueError("timeout must be positive")
        return v

    @field_validator("cooldown")
    @classmethod
    def _v_cooldown_non_negative(cls, v: timedelta) -> timedelta:
        if v < timedelta(0):
            raise ValueError("cooldown must not be negative")
        return v

    @field_validator("log_format", mode="before")
    @classmethod
    def _v_log_format(cls, v: Any) -> str:
        return str(v or "logfmt").strip().lower()

    # -------- derived values --------
    @property
    def resolved_state_path(self) -> Path:
        """Explicit state path, or one file per unit under the default directory."""
        if self.state_path is not None:
            return self.state_path
        name = _UNSAFE_FILENAME.sub("_", self.unit) or "unit"
        return DEFAULT_STATE_DIR / f"{name}.json"

    def require_unit(self) -> str:
        """Return the unit name or raise :class:`ConfigError` when it is blank."""
        if not self.unit:
            raise ConfigError("missing unit (provide --unit=... or UNIT env var)")
        return self.unit

    def snapshot(self) -> dict[str, Any]:
        """JSON-safe view of the resolved settings with secrets masked."""
        snap = self.model_dump(mode="json")
        snap["state_path"] = str(self.resolved_state_path)
        snap["timeout"] = self.timeout.total_seconds()
        snap["cooldown"] = self.cooldown.total_seconds()
        if snap.get("telegram", {}).get("bot_token"):
            snap["telegram"]["bot_token"] = "***"
        return snap


def load_settings(**overrides: Any) -> AppSettings:
    """Return settings from the environment, ``.env`` and CLI ``overrides``.

    ``None`` overrides are ignored so unset CLI flags fall through to the
    environment. Validation failures surface as :class:`ConfigError`.
    """
    load_dotenv(find_dotenv(usecwd=True), override=False)
    telegram_overrides = {
        key: overrides.pop(key)
        for key in ("bot_token", "chat_id", "base_url")
        if key in overrides
    }
    values = {key: value for key, value in overrides.items() if value is not None}
    try:
        telegram = TelegramSettings.from_env()
        tg_values = {k: v for k, v in telegram_overrides.items() if v is not None}
        if tg_values:
            telegram = TelegramSettings(**{**telegram.model_dump(), **tg_values})
        cfg = AppSettings(telegram=telegram, **values)  # type: ignore[call-arg]
    except ValidationError as exc:
        raise ConfigError(f"invalid configuration: {exc}") from exc
    logging.getLogger("config").debug("settings snapshot: %s", cfg.snapshot())
    return cfg


__all__ = [
    "AppSettings",
    "DEFAULT_TOLERANCE_MS",
    "TelegramSettings",
    "load_settings",
]
