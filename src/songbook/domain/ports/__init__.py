"""Domain port definitions for adapters."""

from __future__ import annotations

from .notifications import Notification, Notifier
from .persistence import BookingDirectory, EventRepository, RecordStore
from .unit_of_work import (
    RepositoryCollection,
    SongbookRepositories,
    SongbookUnitOfWork,
    UnitOfWork,
)

__all__ = [
    "BookingDirectory",
    "EventRepository",
    "Notification",
    "Notifier",
    "RecordStore",
    "RepositoryCollection",
    "SongbookRepositories",
    "SongbookUnitOfWork",
    "UnitOfWork",
]
