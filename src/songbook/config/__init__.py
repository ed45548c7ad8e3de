"""Application configuration helpers."""

from __future__ import annotations

from .env import optional_env_var
from .errors import ConfigurationError
from .logging import configure_logging
from .notifications import NotificationConfig, get_notification_config
from .schema import SchemaConfig, SchemaMode, get_schema_config
from .storage import (
    DatabaseConfig,
    StorageConfig,
    get_database_config,
    get_database_uri,
    get_storage_config,
)

__all__ = [
    "ConfigurationError",
    "DatabaseConfig",
    "NotificationConfig",
    "SchemaConfig",
    "SchemaMode",
    "StorageConfig",
    "configure_logging",
    "get_database_config",
    "get_database_uri",
    "get_notification_config",
    "get_schema_config",
    "get_storage_config",
    "optional_env_var",
]
