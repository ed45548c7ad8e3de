"""Container deletion with migration of attached data to the default container.

A request ends in one of three states: deleted (nothing attached), blocked
(``DataAttachedError`` carrying the counts, nothing changed) or migrated and
deleted (``confirm_move=True``). Migration re-points one record at a time and
commits after every step. An interrupted run leaves a container with fewer
attachments which a retry finishes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

from songbook.domain.containers import (
    MIN_GROUP_MEMBERS,
    ensure_default_container,
    find_default_container,
    get_container,
)
from songbook.domain.errors import DataAttachedError, ForbiddenError, NotFoundError, ValidationError
from songbook.domain.ports.notifications import Notification

if TYPE_CHECKING:
    from songbook.domain.model import AudioFile, Container, Event, Registration, Song
    from songbook.domain.ports.notifications import Notifier
    from songbook.domain.ports.persistence import RecordStore
    from songbook.domain.ports.unit_of_work import SongbookUnitOfWork

log = logging.getLogger(__name__)


class DeletionOutcome(StrEnum):
    DELETED = "deleted"
    MIGRATED = "migrated"


@dataclass(slots=True)
class DeletionResult:
    container_id: str
    outcome: DeletionOutcome
    target_container_id: str | None = None
    songs_moved: int = 0
    registrations_moved: int = 0
    audio_files_moved: int = 0


@dataclass(slots=True)
class _Attachments:
    songs: list[Song]
    registrations: list[Registration]
    audio_files: list[AudioFile]
    # audio files only block deleting a group; class audio is moved along silently
    counts_audio: bool

    @property
    def blocking(self) -> bool:
        return bool(self.songs or self.registrations or (self.counts_audio and self.audio_files))

    def error(self) -> DataAttachedError:
        return DataAttachedError(
            song_count=len(self.songs),
            registration_count=len(self.registrations),
            audio_file_count=len(self.audio_files) if self.counts_audio else 0,
        )


def delete_container(
    uow: SongbookUnitOfWork,
    event: Event,
    container_id: str,
    *,
    confirm_move: bool = False,
    notifier: Notifier | None = None,
) -> DeletionResult:
    """Delete a container of ``event``.

    Raises ``ForbiddenError`` for the default container and ``DataAttachedError``
    when data is attached and ``confirm_move`` is not set.
    """

    container = get_container(uow, container_id)
    if container.event_id != event.event_id:
        raise NotFoundError(f"Container not found in event: {container_id}")
    default = find_default_container(uow, event)
    if default is not None and default.record_id == container.record_id:
        raise ForbiddenError("The default container cannot be deleted")

    records = uow.repositories.records
    _check_group_memberships(records, container)
    attachments = _collect_attachments(records, container)

    if attachments.blocking and not confirm_move:
        log.info("Deletion of %s blocked: %s", container_id, attachments.error().counts())
        raise attachments.error()

    result = DeletionResult(container_id=container_id, outcome=DeletionOutcome.DELETED)
    if attachments.blocking or attachments.audio_files:
        target = ensure_default_container(uow, event)
        _migrate(uow, attachments, target, result)

    _detach_from_groups(uow, container)
    records.delete_container(container)
    uow.commit()
    log.info("Deleted container %s (%s)", container_id, result.outcome)

    if notifier is not None:
        notifier(
            Notification(
                kind="container_deleted",
                event_id=event.event_id,
                payload={
                    "container_id": container_id,
                    "name": container.name,
                    "songs_moved": result.songs_moved,
                    "registrations_moved": result.registrations_moved,
                },
            )
        )
    return result


def _collect_attachments(records: RecordStore, container: Container) -> _Attachments:
    return _Attachments(
        songs=records.list_songs_for_container(container.container_id),
        registrations=records.list_registrations_for_container(container.container_id),
        audio_files=records.list_audio_files_for_container(container),
        counts_audio=container.is_group,
    )


def _migrate(
    uow: SongbookUnitOfWork,
    attachments: _Attachments,
    target: Container,
    result: DeletionResult,
) -> None:
    records = uow.repositories.records
    result.outcome = DeletionOutcome.MIGRATED
    result.target_container_id = target.container_id

    for song in attachments.songs:
        records.move_song(song, target)
        uow.commit()
        result.songs_moved += 1
    for registration in attachments.registrations:
        records.move_registration(registration, target)
        uow.commit()
        result.registrations_moved += 1
    for audio_file in attachments.audio_files:
        records.move_audio_file(audio_file, target)
        uow.commit()
        result.audio_files_moved += 1

    log.info(
        "Moved %d songs, %d registrations and %d audio files from %s to %s",
        result.songs_moved,
        result.registrations_moved,
        result.audio_files_moved,
        result.container_id,
        target.container_id,
    )


def _check_group_memberships(records: RecordStore, container: Container) -> None:
    if container.is_group:
        return
    for group in records.list_groups_containing(container):
        if len(group.member_ids) - 1 < MIN_GROUP_MEMBERS:
            raise ValidationError(
                f"Class {container.container_id} is needed by group {group.container_id}; "
                f"a group keeps at least {MIN_GROUP_MEMBERS} classes"
            )


def _detach_from_groups(uow: SongbookUnitOfWork, container: Container) -> None:
    if container.is_group:
        return
    records = uow.repositories.records
    for group in records.list_groups_containing(container):
        group.member_ids = [m for m in group.member_ids if m != container.container_id]
        records.update_container(group)
        uow.commit()
