"""SQLAlchemy adapter package for Songbook."""

from __future__ import annotations

from .bridge import LegacySchemaBridge, NormalizedSchemaBridge, build_schema_bridge
from .repositories import SqlAlchemyBookingDirectory, SqlAlchemyEventRepository
from .tables import metadata
from .unit_of_work import SqlAlchemyUnitOfWork, StartupError, shutdown, startup

__all__ = [
    "LegacySchemaBridge",
    "NormalizedSchemaBridge",
    "SqlAlchemyBookingDirectory",
    "SqlAlchemyEventRepository",
    "SqlAlchemyUnitOfWork",
    "StartupError",
    "build_schema_bridge",
    "metadata",
    "shutdown",
    "startup",
]
