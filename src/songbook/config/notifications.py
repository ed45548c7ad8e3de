"""Notification delivery configuration."""

from __future__ import annotations

from dataclasses import dataclass

from .env import optional_env_var
from .errors import ConfigurationError

DEFAULT_NOTIFY_TIMEOUT_SECONDS = 5.0


@dataclass(frozen=True, slots=True)
class NotificationConfig:
    webhook_url: str | None = None
    timeout_seconds: float = DEFAULT_NOTIFY_TIMEOUT_SECONDS


def get_notification_config() -> NotificationConfig:
    timeout_raw = optional_env_var("SONGBOOK_NOTIFY_TIMEOUT")
    timeout = DEFAULT_NOTIFY_TIMEOUT_SECONDS
    if timeout_raw is not None:
        try:
            timeout = float(timeout_raw)
        except ValueError as exc:
            raise ConfigurationError(f"Invalid SONGBOOK_NOTIFY_TIMEOUT: {timeout_raw}") from exc
        if timeout <= 0:
            raise ConfigurationError("SONGBOOK_NOTIFY_TIMEOUT must be positive")
    return NotificationConfig(
        webhook_url=optional_env_var("SONGBOOK_NOTIFY_WEBHOOK_URL"),
        timeout_seconds=timeout,
    )
