from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING

import httpx
import pytest

from songbook.adapters.notifications import LogNotifier, WebhookNotifier, build_notifier
from songbook.config import NotificationConfig
from songbook.domain.ports.notifications import Notification

if TYPE_CHECKING:
    from collections.abc import Callable

WEBHOOK = "https://hooks.example/songbook"


def _notification() -> Notification:
    return Notification(
        kind="container_created",
        event_id="evt_calder_high_minimusiker_20251120_abcdef",
        payload={"container_id": "cls_calder_high_20251120_class1_abcdef"},
    )


def _client_factory(
    requests: list[httpx.Request], status_code: int = 204
) -> Callable[[NotificationConfig], httpx.Client]:
    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(status_code)

    def factory(config: NotificationConfig) -> httpx.Client:
        return httpx.Client(transport=httpx.MockTransport(handler), timeout=config.timeout_seconds)

    return factory


def test_webhook_posts_notification_as_json() -> None:
    requests: list[httpx.Request] = []
    notifier = WebhookNotifier(
        config=NotificationConfig(webhook_url=WEBHOOK),
        client_factory=_client_factory(requests),
    )

    notifier(_notification())

    assert len(requests) == 1
    assert str(requests[0].url) == WEBHOOK
    assert json.loads(requests[0].content) == {
        "kind": "container_created",
        "event_id": "evt_calder_high_minimusiker_20251120_abcdef",
        "payload": {"container_id": "cls_calder_high_20251120_class1_abcdef"},
    }


def test_webhook_failure_is_logged_not_raised(caplog: pytest.LogCaptureFixture) -> None:
    requests: list[httpx.Request] = []
    notifier = WebhookNotifier(
        config=NotificationConfig(webhook_url=WEBHOOK),
        client_factory=_client_factory(requests, status_code=500),
    )

    with caplog.at_level(logging.WARNING):
        notifier(_notification())

    assert len(requests) == 1
    assert "Failed to deliver container_created notification" in caplog.text


def test_webhook_without_url_sends_nothing() -> None:
    requests: list[httpx.Request] = []
    notifier = WebhookNotifier(
        config=NotificationConfig(webhook_url=None),
        client_factory=_client_factory(requests),
    )

    notifier(_notification())

    assert requests == []


def test_build_notifier_follows_configuration(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("SONGBOOK_NOTIFY_WEBHOOK_URL", raising=False)
    assert isinstance(build_notifier(), LogNotifier)
    assert isinstance(build_notifier(NotificationConfig(webhook_url=WEBHOOK)), WebhookNotifier)

    monkeypatch.setenv("SONGBOOK_NOTIFY_WEBHOOK_URL", WEBHOOK)
    notifier = build_notifier()
    assert isinstance(notifier, WebhookNotifier)
    assert notifier.config.webhook_url == WEBHOOK


def test_log_notifier_writes_info_record(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.INFO):
        LogNotifier()(_notification())

    assert "Notification container_created" in caplog.text
