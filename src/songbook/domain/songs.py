"""Song and audio-file metadata services."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from songbook.domain.album import renumber_album
from songbook.domain.containers import get_container
from songbook.domain.errors import NotFoundError, ValidationError
from songbook.domain.model import AudioFile, AudioFileType, Song

if TYPE_CHECKING:
    from songbook.domain.model import ApprovalStatus, AudioFileStatus, Event
    from songbook.domain.ports.unit_of_work import SongbookUnitOfWork

log = logging.getLogger(__name__)


@dataclass(slots=True)
class SongWithAudio:
    song: Song
    raw_audio_files: list[AudioFile] = field(default_factory=list[AudioFile])
    final_audio_files: list[AudioFile] = field(default_factory=list[AudioFile])


def get_song(uow: SongbookUnitOfWork, song_id: str) -> Song:
    song = uow.repositories.records.get_song(song_id)
    if song is None:
        raise NotFoundError(f"Song not found: {song_id}")
    return song


def create_song(
    uow: SongbookUnitOfWork,
    event: Event,
    *,
    container_id: str,
    title: str,
    artist: str | None = None,
    notes: str | None = None,
    order: int | None = None,
    created_by: str | None = None,
) -> Song:
    """Add a song to a container of the event.

    Without an explicit ``order`` the song goes after the container's existing
    songs. It is always appended at the end of the album.
    """

    container = get_container(uow, container_id)
    if container.event_id != event.event_id:
        raise ValidationError(f"Container {container_id} belongs to another event")
    clean_title = title.strip()
    if not clean_title:
        raise ValidationError("Song title must not be empty")

    records = uow.repositories.records
    if not order:
        order = len(records.list_songs_for_container(container_id)) + 1
    album_size = renumber_album(uow, event)

    song = Song(
        title=clean_title,
        artist=artist,
        notes=notes,
        container_id=container_id,
        event_id=event.event_id,
        order=order,
        album_order=album_size + 1,
        created_by=created_by,
    )
    records.add_song(song)
    uow.commit()
    log.info("Created song %s in %s", song.record_id, container_id)
    return song


def update_song(
    uow: SongbookUnitOfWork,
    song_id: str,
    *,
    title: str | None = None,
    artist: str | None = None,
    notes: str | None = None,
    order: int | None = None,
) -> Song:
    song = get_song(uow, song_id)
    if title is not None:
        if not title.strip():
            raise ValidationError("Song title must not be empty")
        song.title = title.strip()
    if artist is not None:
        song.artist = artist
    if notes is not None:
        song.notes = notes
    if order is not None:
        song.order = order
    uow.repositories.records.update_song(song)
    uow.commit()
    return song


def delete_song(uow: SongbookUnitOfWork, event: Event, song_id: str) -> None:
    """Delete a song and close the gap it leaves in the album order."""

    song = get_song(uow, song_id)
    if song.event_id != event.event_id:
        raise NotFoundError(f"Song not found in event: {song_id}")
    uow.repositories.records.delete_song(song)
    uow.commit()
    renumber_album(uow, event)
    uow.commit()
    log.info("Deleted song %s from %s", song_id, song.container_id)


def create_audio_file(
    uow: SongbookUnitOfWork,
    event: Event,
    *,
    container_id: str,
    type_: AudioFileType,
    storage_key: str,
    filename: str = "",
    uploaded_by: str = "",
    song_id: str | None = None,
    duration_seconds: float | None = None,
    file_size_bytes: int | None = None,
    status: AudioFileStatus | None = None,
) -> AudioFile:
    """Track metadata of an uploaded or transcoded recording."""

    container = get_container(uow, container_id)
    if container.event_id != event.event_id:
        raise ValidationError(f"Container {container_id} belongs to another event")
    if song_id is not None:
        get_song(uow, song_id)
    if not storage_key:
        raise ValidationError("Audio files need a storage key")

    audio_file = AudioFile(
        type=type_,
        container_id=container_id,
        event_id=event.event_id,
        song_id=song_id,
        storage_key=storage_key,
        filename=filename,
        uploaded_by=uploaded_by,
        duration_seconds=duration_seconds,
        file_size_bytes=file_size_bytes,
    )
    if status is not None:
        audio_file.status = status
    uow.repositories.records.add_audio_file(audio_file)
    uow.commit()
    return audio_file


def update_audio_file(
    uow: SongbookUnitOfWork,
    audio_file_id: str,
    *,
    status: AudioFileStatus | None = None,
    approval_status: ApprovalStatus | None = None,
    storage_key: str | None = None,
    filename: str | None = None,
    duration_seconds: float | None = None,
    file_size_bytes: int | None = None,
) -> AudioFile:
    records = uow.repositories.records
    audio_file = records.get_audio_file(audio_file_id)
    if audio_file is None:
        raise NotFoundError(f"Audio file not found: {audio_file_id}")
    if status is not None:
        audio_file.status = status
    if approval_status is not None:
        audio_file.approval_status = approval_status
    if storage_key is not None:
        audio_file.storage_key = storage_key
    if filename is not None:
        audio_file.filename = filename
    if duration_seconds is not None:
        audio_file.duration_seconds = duration_seconds
    if file_size_bytes is not None:
        audio_file.file_size_bytes = file_size_bytes
    records.update_audio_file(audio_file)
    uow.commit()
    return audio_file


def delete_audio_file(uow: SongbookUnitOfWork, audio_file_id: str) -> None:
    records = uow.repositories.records
    audio_file = records.get_audio_file(audio_file_id)
    if audio_file is None:
        raise NotFoundError(f"Audio file not found: {audio_file_id}")
    records.delete_audio_file(audio_file)
    uow.commit()


def list_audio_files_for_song(
    uow: SongbookUnitOfWork,
    song_id: str,
    type_: AudioFileType | None = None,
) -> list[AudioFile]:
    return uow.repositories.records.list_audio_files_for_song(song_id, type_)


def get_songs_with_audio(uow: SongbookUnitOfWork, event: Event) -> list[SongWithAudio]:
    """Return every song of the event with its raw and final recordings, newest first."""

    records = uow.repositories.records
    songs = records.list_songs_for_event(event.event_id)
    by_song: dict[str, SongWithAudio] = {song.record_id: SongWithAudio(song=song) for song in songs}
    for audio_file in records.list_audio_files_for_event(event):
        entry = by_song.get(audio_file.song_id or "")
        if entry is None:
            continue
        if audio_file.type is AudioFileType.RAW:
            entry.raw_audio_files.append(audio_file)
        elif audio_file.type is AudioFileType.FINAL:
            entry.final_audio_files.append(audio_file)
    return list(by_song.values())
