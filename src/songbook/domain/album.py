"""Event-wide album ordering.

Every song of an event gets a position in the printed/delivered album. Reads
renumber the stored ``album_order`` values to a dense ``1..N`` sequence; writes
persist such a sequence, so the stored values are dense as well.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import TYPE_CHECKING

from songbook.domain.errors import NotFoundError, ValidationError

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from songbook.domain.model import Container, ContainerKind, Event, Song
    from songbook.domain.ports.persistence import RecordStore
    from songbook.domain.ports.unit_of_work import SongbookUnitOfWork

log = logging.getLogger(__name__)


@dataclass(slots=True)
class AlbumTrack:
    song_id: str
    title: str
    artist: str | None
    container_id: str
    container_name: str
    container_kind: ContainerKind | None
    album_order: int


@dataclass(slots=True, kw_only=True)
class AlbumTrackUpdate:
    """Requested position for one song, optionally renaming it and its container."""

    song_id: str
    album_order: int
    title: str | None = None
    container_id: str | None = None
    container_name: str | None = None


def get_album_tracks(uow: SongbookUnitOfWork, event: Event) -> list[AlbumTrack]:
    """Return the event's songs in album order, numbered ``1..N``.

    Songs without a stored position follow the positioned ones, ordered by
    container print position, container name and per-container song order.
    The renumbering is not written back.
    """

    songs, containers = _collect(uow.repositories.records, event)
    return _tracks(album_sequence(songs, containers), containers)


def update_album_order(
    uow: SongbookUnitOfWork,
    event: Event,
    tracks: Sequence[AlbumTrackUpdate],
) -> list[AlbumTrack]:
    """Persist a new album order plus any renames sent along with it.

    Songs not mentioned keep their relative order and are placed after the
    submitted ones. Each write only sets target values, so re-running the same
    request is harmless.
    """

    records = uow.repositories.records
    songs, containers = _collect(records, event)
    songs_by_id = {song.record_id: song for song in songs}
    _validate_updates(tracks, songs_by_id, containers)

    submitted = sorted(enumerate(tracks), key=lambda item: (item[1].album_order, item[0]))
    submitted_ids = [track.song_id for _, track in submitted]
    skip = set(submitted_ids)
    untouched = album_sequence([song for song in songs if song.record_id not in skip], containers)
    sequence = [songs_by_id[song_id] for song_id in submitted_ids] + untouched

    titles = {
        track.song_id: track.title.strip()
        for track in tracks
        if track.title is not None and track.title.strip()
    }
    for position, song in enumerate(sequence, start=1):
        new_title = titles.get(song.record_id, song.title)
        if song.album_order == position and song.title == new_title:
            continue
        song.album_order = position
        song.title = new_title
        records.update_song(song)
    uow.commit()

    _rename_containers(records, tracks, containers)
    _store_display_orders(records, sequence, containers)
    uow.commit()

    log.info("Stored album order for event %s (%d tracks)", event.event_id, len(sequence))
    return _tracks(sequence, containers)


def renumber_album(uow: SongbookUnitOfWork, event: Event) -> int:
    """Write the current album sequence back as ``1..N`` and return ``N``."""

    records = uow.repositories.records
    songs, containers = _collect(records, event)
    for position, song in enumerate(album_sequence(songs, containers), start=1):
        if song.album_order != position:
            song.album_order = position
            records.update_song(song)
    return len(songs)


def album_sequence(songs: Iterable[Song], containers: dict[str, Container]) -> list[Song]:
    def container_key(song: Song) -> tuple[float, str, str]:
        container = containers.get(song.container_id)
        if container is None:
            return (math.inf, "", song.container_id)
        display_order = container.display_order if container.display_order is not None else math.inf
        return (display_order, container.name.lower(), container.container_id)

    ranked: list[Song] = []
    unranked: list[Song] = []
    for song in songs:
        (unranked if song.album_order is None else ranked).append(song)

    ranked.sort(
        key=lambda s: (s.album_order or 0, *container_key(s), s.order, s.created_at, s.record_id)
    )
    unranked.sort(key=lambda s: (*container_key(s), s.order, s.created_at, s.record_id))
    return ranked + unranked


def _collect(records: RecordStore, event: Event) -> tuple[list[Song], dict[str, Container]]:
    containers = {c.container_id: c for c in records.list_containers(event)}
    merged: dict[str, Song] = {}
    for song in records.list_songs_for_event(event.event_id):
        merged[song.record_id] = song
    # songs whose event key was never written still belong to the event's containers
    for container_id in containers:
        for song in records.list_songs_for_container(container_id):
            merged.setdefault(song.record_id, song)
    return list(merged.values()), containers


def _tracks(sequence: Sequence[Song], containers: dict[str, Container]) -> list[AlbumTrack]:
    tracks: list[AlbumTrack] = []
    for position, song in enumerate(sequence, start=1):
        container = containers.get(song.container_id)
        tracks.append(
            AlbumTrack(
                song_id=song.record_id,
                title=song.title,
                artist=song.artist,
                container_id=song.container_id,
                container_name=container.name if container else "",
                container_kind=container.kind if container else None,
                album_order=position,
            )
        )
    return tracks


def _validate_updates(
    tracks: Sequence[AlbumTrackUpdate],
    songs_by_id: dict[str, Song],
    containers: dict[str, Container],
) -> None:
    seen: set[str] = set()
    for track in tracks:
        if track.song_id in seen:
            raise ValidationError(f"Song {track.song_id} submitted twice")
        seen.add(track.song_id)
        if track.song_id not in songs_by_id:
            raise NotFoundError(f"Song not found in event: {track.song_id}")
        if track.container_id is not None and track.container_id not in containers:
            raise NotFoundError(f"Container not found in event: {track.container_id}")


def _rename_containers(
    records: RecordStore,
    tracks: Sequence[AlbumTrackUpdate],
    containers: dict[str, Container],
) -> None:
    names: dict[str, str] = {}
    for track in tracks:
        if track.container_id is None or track.container_name is None:
            continue
        if track.container_name.strip():
            names[track.container_id] = track.container_name.strip()

    for container_id, name in names.items():
        container = containers[container_id]
        if container.name == name:
            continue
        log.info("Renaming container %s to %r", container_id, name)
        container.name = name
        records.update_container(container)


def _store_display_orders(
    records: RecordStore,
    sequence: Sequence[Song],
    containers: dict[str, Container],
) -> None:
    first_positions: dict[str, int] = {}
    for position, song in enumerate(sequence, start=1):
        first_positions.setdefault(song.container_id, position)

    for container_id, position in first_positions.items():
        container = containers.get(container_id)
        # groups have no print position of their own
        if container is None or container.is_group:
            continue
        if container.display_order == position:
            continue
        container.display_order = position
        records.update_container(container)
