"""Application entry points for the UI/API layer.

Every function opens its own unit of work, resolves the event identifier it is
given and hands plain records back. Domain errors propagate unchanged.
"""

from __future__ import annotations

from collections.abc import Callable
from logging import getLogger
from typing import TYPE_CHECKING

from songbook.adapters.notifications import build_notifier
from songbook.adapters.sqlalchemy.unit_of_work import SqlAlchemyUnitOfWork, is_started, startup
from songbook.domain import album, containers, deletion, intake, songs
from songbook.domain.ports.unit_of_work import SongbookUnitOfWork
from songbook.domain.resolution import EventResolver, ResolvedEvent

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from songbook.domain.album import AlbumTrack, AlbumTrackUpdate
    from songbook.domain.containers import ContainerContents, ContainerSummary
    from songbook.domain.deletion import DeletionResult
    from songbook.domain.model import Booking, Container, ContainerKind, Event, Song
    from songbook.domain.ports.notifications import Notifier
    from songbook.domain.songs import SongWithAudio

UnitOfWorkFactory = Callable[[], SongbookUnitOfWork]


log = getLogger(__name__)


def _factory(unit_of_work_factory: UnitOfWorkFactory | None) -> UnitOfWorkFactory:
    if unit_of_work_factory is not None:
        return unit_of_work_factory
    if not is_started():
        startup()
    return SqlAlchemyUnitOfWork


def _resolve(
    uow: SongbookUnitOfWork, identifier: str, teacher_email: str | None = None
) -> ResolvedEvent:
    resolver = EventResolver(uow.repositories.events, uow.repositories.bookings)
    if teacher_email is not None:
        return resolver.resolve_for_teacher(identifier, teacher_email)
    return resolver.resolve(identifier)


def resolve_event(
    identifier: str,
    *,
    teacher_email: str | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> ResolvedEvent:
    """Resolve any known event identifier to the canonical event identity."""

    with _factory(unit_of_work_factory)() as uow:
        return _resolve(uow, identifier, teacher_email)


def create_event_for_booking(
    booking: Booking,
    *,
    event_type: str = intake.DEFAULT_EVENT_TYPE,
    access_code: int | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> Event:
    with _factory(unit_of_work_factory)() as uow:
        return intake.create_event_for_booking(
            uow, booking, event_type=event_type, access_code=access_code
        )


def update_booking_contact(
    booking_record_id: str,
    *,
    contact_name: str | None = None,
    contact_email: str | None = None,
    contact_phone: str | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> Booking:
    """Write changed contact details onto the booking record."""

    with _factory(unit_of_work_factory)() as uow:
        return intake.update_booking_contact(
            uow,
            booking_record_id,
            contact_name=contact_name,
            contact_email=contact_email,
            contact_phone=contact_phone,
        )


def list_containers(
    identifier: str,
    *,
    teacher_email: str | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> list[ContainerSummary]:
    with _factory(unit_of_work_factory)() as uow:
        resolved = _resolve(uow, identifier, teacher_email)
        return containers.list_containers_for_event(uow, resolved.event)


def list_collections(
    identifier: str,
    *,
    kind: ContainerKind | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> list[Container]:
    with _factory(unit_of_work_factory)() as uow:
        resolved = _resolve(uow, identifier)
        return containers.list_collections_for_event(uow, resolved.event, kind)


def create_class(
    identifier: str,
    *,
    name: str,
    num_children: int | None = None,
    teacher_email: str | None = None,
    notifier: Notifier | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> Container:
    with _factory(unit_of_work_factory)() as uow:
        resolved = _resolve(uow, identifier, teacher_email)
        return containers.create_class(
            uow,
            resolved.event,
            name=name,
            num_children=num_children,
            created_by=teacher_email,
            notifier=notifier or build_notifier(),
        )


def create_collection(
    identifier: str,
    *,
    name: str,
    kind: ContainerKind,
    teacher_email: str | None = None,
    notifier: Notifier | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> Container:
    with _factory(unit_of_work_factory)() as uow:
        resolved = _resolve(uow, identifier, teacher_email)
        return containers.create_collection(
            uow,
            resolved.event,
            name=name,
            kind=kind,
            created_by=teacher_email,
            notifier=notifier or build_notifier(),
        )


def create_group(
    identifier: str,
    *,
    name: str,
    member_ids: Iterable[str],
    teacher_email: str | None = None,
    notifier: Notifier | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> Container:
    with _factory(unit_of_work_factory)() as uow:
        resolved = _resolve(uow, identifier, teacher_email)
        return containers.create_group(
            uow,
            resolved.event,
            name=name,
            member_ids=member_ids,
            created_by=teacher_email,
            notifier=notifier or build_notifier(),
        )


def update_container(
    container_id: str,
    *,
    name: str | None = None,
    num_children: int | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> Container:
    with _factory(unit_of_work_factory)() as uow:
        return containers.update_container(
            uow, container_id, name=name, num_children=num_children
        )


def update_group(
    group_id: str,
    *,
    name: str | None = None,
    member_ids: Iterable[str] | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> Container:
    with _factory(unit_of_work_factory)() as uow:
        return containers.update_group(uow, group_id, name=name, member_ids=member_ids)


def get_container_contents(
    container_id: str,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> ContainerContents:
    with _factory(unit_of_work_factory)() as uow:
        return containers.get_songs_and_audio_for_container(uow, container_id)


def list_groups_for_container(
    container_id: str,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> list[Container]:
    with _factory(unit_of_work_factory)() as uow:
        return containers.list_groups_for_container(uow, container_id)


def delete_container(
    identifier: str,
    container_id: str,
    *,
    confirm_move: bool = False,
    notifier: Notifier | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> DeletionResult:
    with _factory(unit_of_work_factory)() as uow:
        resolved = _resolve(uow, identifier)
        return deletion.delete_container(
            uow,
            resolved.event,
            container_id,
            confirm_move=confirm_move,
            notifier=notifier or build_notifier(),
        )


def create_song(
    identifier: str,
    *,
    container_id: str,
    title: str,
    artist: str | None = None,
    notes: str | None = None,
    order: int | None = None,
    created_by: str | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> Song:
    with _factory(unit_of_work_factory)() as uow:
        resolved = _resolve(uow, identifier)
        return songs.create_song(
            uow,
            resolved.event,
            container_id=container_id,
            title=title,
            artist=artist,
            notes=notes,
            order=order,
            created_by=created_by,
        )


def update_song(
    song_id: str,
    *,
    title: str | None = None,
    artist: str | None = None,
    notes: str | None = None,
    order: int | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> Song:
    with _factory(unit_of_work_factory)() as uow:
        return songs.update_song(uow, song_id, title=title, artist=artist, notes=notes, order=order)


def delete_song(
    identifier: str,
    song_id: str,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> None:
    with _factory(unit_of_work_factory)() as uow:
        resolved = _resolve(uow, identifier)
        songs.delete_song(uow, resolved.event, song_id)


def get_songs_with_audio(
    identifier: str,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> list[SongWithAudio]:
    with _factory(unit_of_work_factory)() as uow:
        resolved = _resolve(uow, identifier)
        return songs.get_songs_with_audio(uow, resolved.event)


def get_album_tracks(
    identifier: str,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> list[AlbumTrack]:
    with _factory(unit_of_work_factory)() as uow:
        resolved = _resolve(uow, identifier)
        return album.get_album_tracks(uow, resolved.event)


def update_album_order(
    identifier: str,
    tracks: Sequence[AlbumTrackUpdate],
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> list[AlbumTrack]:
    with _factory(unit_of_work_factory)() as uow:
        resolved = _resolve(uow, identifier)
        log.info("Updating album order of %s (%d tracks)", resolved.event_id, len(tracks))
        return album.update_album_order(uow, resolved.event, tracks)
