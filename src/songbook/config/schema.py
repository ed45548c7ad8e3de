"""Record schema mode selection.

The backing store is mid-migration from a flat schema (text foreign keys) to a
normalized one (typed links). The mode is read once when the persistence adapter
starts and stays fixed for the life of the process.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import StrEnum

from .errors import ConfigurationError


class SchemaMode(StrEnum):
    LEGACY = "legacy"
    NORMALIZED = "normalized"


@dataclass(frozen=True, slots=True)
class SchemaConfig:
    mode: SchemaMode = SchemaMode.LEGACY

    @property
    def normalized(self) -> bool:
        return self.mode is SchemaMode.NORMALIZED


def get_schema_config() -> SchemaConfig:
    raw = os.getenv("SONGBOOK_SCHEMA_MODE")
    if raw is None or not raw.strip():
        # older deployments only set the boolean flag
        flag = os.getenv("USE_NORMALIZED_TABLES", "").strip().lower()
        return SchemaConfig(SchemaMode.NORMALIZED if flag == "true" else SchemaMode.LEGACY)
    try:
        return SchemaConfig(SchemaMode(raw.strip().lower()))
    except ValueError as exc:
        raise ConfigurationError(
            f"Invalid SONGBOOK_SCHEMA_MODE {raw!r}; expected 'legacy' or 'normalized'"
        ) from exc
