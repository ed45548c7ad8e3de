"""Notification delivery adapters.

Delivery is fire-and-forget: failures are logged and never reach the caller,
whose write has already been committed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

import httpx

from songbook.config import NotificationConfig, get_notification_config

if TYPE_CHECKING:
    from collections.abc import Callable

    from songbook.domain.ports.notifications import Notification, Notifier

log = getLogger(__name__)


def _default_client_factory(config: NotificationConfig) -> httpx.Client:
    return httpx.Client(timeout=config.timeout_seconds)


def _serialize(notification: Notification) -> dict[str, object]:
    return {
        "kind": notification.kind,
        "event_id": notification.event_id,
        "payload": notification.payload,
    }


class LogNotifier:
    """Record notifications in the log only."""

    def __call__(self, notification: Notification) -> None:
        log.info(
            "Notification %s for event %s: %s",
            notification.kind,
            notification.event_id,
            notification.payload,
        )


@dataclass(slots=True)
class WebhookNotifier:
    """POST each notification as JSON to the configured webhook."""

    config: NotificationConfig = field(default_factory=get_notification_config)
    client_factory: Callable[[NotificationConfig], httpx.Client] = field(
        default=_default_client_factory
    )

    def __call__(self, notification: Notification) -> None:
        if not self.config.webhook_url:
            log.debug("No webhook configured, dropping %s notification", notification.kind)
            return
        try:
            with self.client_factory(self.config) as client:
                response = client.post(self.config.webhook_url, json=_serialize(notification))
                response.raise_for_status()
        except httpx.HTTPError as exc:
            log.warning("Failed to deliver %s notification: %s", notification.kind, exc)
            return
        log.info("Delivered %s notification for event %s", notification.kind, notification.event_id)


def build_notifier(config: NotificationConfig | None = None) -> Notifier:
    """Return a webhook notifier when a URL is configured, else a log-only one."""

    effective = config or get_notification_config()
    if effective.webhook_url:
        return WebhookNotifier(config=effective)
    return LogNotifier()


if TYPE_CHECKING:
    _log_check: Notifier = LogNotifier()
    _webhook_check: Notifier = WebhookNotifier()
