from __future__ import annotations

import os

import pytest

from songbook.config import (
    ConfigurationError,
    SchemaMode,
    get_notification_config,
    get_schema_config,
    optional_env_var,
)


def test_optional_env_var_strips_and_treats_blank_as_unset(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("EXAMPLE_VAR", "  padded ")
    monkeypatch.setenv("BLANK_VAR", "  ")

    assert optional_env_var("EXAMPLE_VAR") == "padded"
    assert optional_env_var("BLANK_VAR") is None
    assert os.getenv("BLANK_VAR") == "  "


def test_schema_mode_defaults_to_legacy(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("SONGBOOK_SCHEMA_MODE", raising=False)
    monkeypatch.delenv("USE_NORMALIZED_TABLES", raising=False)

    config = get_schema_config()

    assert config.mode is SchemaMode.LEGACY
    assert not config.normalized


@pytest.mark.parametrize("raw", ["normalized", " NORMALIZED "])
def test_schema_mode_reads_env(monkeypatch: pytest.MonkeyPatch, raw: str) -> None:
    monkeypatch.setenv("SONGBOOK_SCHEMA_MODE", raw)

    assert get_schema_config().mode is SchemaMode.NORMALIZED


def test_schema_mode_accepts_boolean_flag(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("SONGBOOK_SCHEMA_MODE", raising=False)
    monkeypatch.setenv("USE_NORMALIZED_TABLES", "true")

    assert get_schema_config().normalized


def test_schema_mode_prefers_explicit_mode_over_flag(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SONGBOOK_SCHEMA_MODE", "legacy")
    monkeypatch.setenv("USE_NORMALIZED_TABLES", "true")

    assert get_schema_config().mode is SchemaMode.LEGACY


def test_schema_mode_rejects_unknown_value(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SONGBOOK_SCHEMA_MODE", "hybrid")

    with pytest.raises(ConfigurationError, match="hybrid"):
        get_schema_config()


def test_notification_config_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("SONGBOOK_NOTIFY_WEBHOOK_URL", raising=False)
    monkeypatch.delenv("SONGBOOK_NOTIFY_TIMEOUT", raising=False)

    config = get_notification_config()

    assert config.webhook_url is None
    assert config.timeout_seconds == 5.0


def test_notification_config_reads_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SONGBOOK_NOTIFY_WEBHOOK_URL", "https://hooks.example/songbook")
    monkeypatch.setenv("SONGBOOK_NOTIFY_TIMEOUT", "2.5")

    config = get_notification_config()

    assert config.webhook_url == "https://hooks.example/songbook"
    assert config.timeout_seconds == 2.5


@pytest.mark.parametrize("raw", ["soon", "0", "-1"])
def test_notification_config_rejects_bad_timeout(
    monkeypatch: pytest.MonkeyPatch, raw: str
) -> None:
    monkeypatch.setenv("SONGBOOK_NOTIFY_TIMEOUT", raw)

    with pytest.raises(ConfigurationError):
        get_notification_config()
