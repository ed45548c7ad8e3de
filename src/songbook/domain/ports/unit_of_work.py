"""Unit-of-work abstractions for coordinating repositories."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from types import TracebackType

    from songbook.domain.ports.persistence import BookingDirectory, EventRepository, RecordStore


@runtime_checkable
class RepositoryCollection(Protocol):
    """Marker protocol for groups of repositories managed together."""


@runtime_checkable
class UnitOfWork[TRepositories: RepositoryCollection](Protocol):
    """Generic unit-of-work boundary around a repository collection.

    ``commit`` makes the writes so far durable. The store offers no multi-step
    atomicity guarantees to callers, so services commit after every sub-step
    that must survive on its own.
    """

    @property
    def repositories(self) -> TRepositories: ...

    def __enter__(self) -> UnitOfWork[TRepositories]: ...

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> bool: ...

    def commit(self) -> None: ...

    def rollback(self) -> None: ...


@dataclass(slots=True)
class SongbookRepositories(RepositoryCollection):
    """Repositories required by the event and container services."""

    events: EventRepository
    bookings: BookingDirectory
    records: RecordStore


type SongbookUnitOfWork = UnitOfWork[SongbookRepositories]
