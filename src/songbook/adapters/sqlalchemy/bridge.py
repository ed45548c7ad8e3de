"""Schema bridge: one record API over the flat and the normalized schema.

In legacy mode containment lives only in text keys (``container_id``,
``event_id``, ``song_id``). In normalized mode every write also fills the
``*_link`` columns, and container, song and audio reads union the link-based
and the text-based query because older rows predate the links. The text key
stays authoritative: a link that cannot be resolved is skipped with a warning,
and a linked row whose text key names another target is left out.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, cast

from sqlalchemy import delete, func, insert, select, update

from songbook.adapters.sqlalchemy.tables import (
    audio_file_table,
    container_table,
    event_table,
    group_member_table,
    registration_table,
    song_table,
)
from songbook.config import SchemaMode
from songbook.domain.model import (
    ApprovalStatus,
    AudioFile,
    AudioFileStatus,
    AudioFileType,
    Container,
    ContainerKind,
    Registration,
    Song,
)

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from sqlalchemy import Table
    from sqlalchemy.orm import Session
    from sqlalchemy.sql import ColumnElement

    from songbook.domain.model import Event

log = logging.getLogger(__name__)

_SONG_LINKS: dict[str, tuple[Table, str]] = {
    "container_id": (container_table, "container_link"),
    "event_id": (event_table, "event_link"),
}


def _song_from_row(row: Mapping[str, Any]) -> Song:
    return Song(
        record_id=row["record_id"],
        title=row["title"],
        artist=row["artist"],
        notes=row["notes"],
        container_id=row["container_id"],
        event_id=row["event_id"],
        order=row["order"] or 1,
        album_order=row["album_order"],
        created_by=row["created_by"],
        created_at=row["created_at"],
    )


def _audio_file_from_row(row: Mapping[str, Any]) -> AudioFile:
    return AudioFile(
        record_id=row["record_id"],
        type=AudioFileType(row["type"]),
        container_id=row["container_id"],
        event_id=row["event_id"],
        song_id=row["song_id"] or None,
        storage_key=row["storage_key"],
        filename=row["filename"],
        uploaded_by=row["uploaded_by"],
        uploaded_at=row["uploaded_at"],
        duration_seconds=row["duration_seconds"],
        file_size_bytes=row["file_size_bytes"],
        status=AudioFileStatus(row["status"]),
        approval_status=ApprovalStatus(row["approval_status"]),
    )


def _registration_from_row(row: Mapping[str, Any]) -> Registration:
    return Registration(
        record_id=row["record_id"],
        container_id=row["container_id"],
        event_id=row["event_id"],
        child_name=row["child_name"],
        parent_email=row["parent_email"],
        registered_at=row["registered_at"],
    )


def _union_by_record_id[T: (Container, Song, AudioFile)](*batches: Iterable[T]) -> list[T]:
    merged: dict[str, T] = {}
    for batch in batches:
        for record in batch:
            merged.setdefault(record.record_id, record)
    return list(merged.values())


def _link_query(
    table: Table, link: str, record_id: str, key: str, value: str
) -> ColumnElement[bool]:
    # rows written before the text key existed carry an empty one
    text_key = table.c[key]
    return (table.c[link] == record_id) & ((text_key == value) | (text_key == ""))


class _SchemaBridgeBase:
    """Shared text-key implementation; subclasses decide how links are handled."""

    mode: SchemaMode

    def __init__(self, session: Session) -> None:
        self.session = session

    # link hooks ----------------------------------------------------------------

    def _container_link(self, container_id: str) -> dict[str, str]:
        _ = container_id
        return {}

    def _event_link(self, event_id: str) -> dict[str, str]:
        _ = event_id
        return {}

    def _song_link(self, song_id: str | None) -> dict[str, str]:
        _ = song_id
        return {}

    def _containment_queries(
        self, table: Table, container: Container
    ) -> tuple[ColumnElement[bool], ...]:
        return (table.c.container_id == container.container_id,)

    def _event_queries(self, table: Table, event: Event) -> tuple[ColumnElement[bool], ...]:
        return (table.c.event_id == event.event_id,)

    def _song_queries(self, key: str, value: str) -> tuple[ColumnElement[bool], ...]:
        return (song_table.c[key] == value,)

    # containers ----------------------------------------------------------------

    def get_container(self, container_id: str) -> Container | None:
        stmt = select(container_table).where(container_table.c.container_id == container_id)
        row = self.session.execute(stmt).mappings().first()
        return self._container_from_row(row) if row is not None else None

    def list_containers(self, event: Event) -> list[Container]:
        batches = [
            self._select_containers(clause)
            for clause in self._event_queries(container_table, event)
        ]
        containers = _union_by_record_id(*batches)
        containers.sort(key=lambda c: (c.created_at, c.container_id))
        return containers

    def find_default_container(self, event: Event) -> Container | None:
        for container in self.list_containers(event):
            if container.is_default:
                return container
        return None

    def add_container(self, container: Container, event: Event) -> None:
        self.session.execute(
            insert(container_table).values(
                record_id=container.record_id,
                container_id=container.container_id,
                name=container.name,
                kind=container.kind,
                event_id=event.event_id,
                num_children=container.num_children,
                is_default=container.is_default,
                display_order=container.display_order,
                created_by=container.created_by,
                created_at=container.created_at,
                **self._event_link(event.event_id),
            )
        )
        if container.is_group:
            self._write_members(container)

    def update_container(self, container: Container) -> None:
        self.session.execute(
            update(container_table)
            .where(container_table.c.record_id == container.record_id)
            .values(
                name=container.name,
                num_children=container.num_children,
                display_order=container.display_order,
            )
        )
        if container.is_group:
            self.session.execute(
                delete(group_member_table).where(
                    group_member_table.c.group_record_id == container.record_id
                )
            )
            self._write_members(container)

    def delete_container(self, container: Container) -> None:
        self.session.execute(
            delete(group_member_table).where(
                (group_member_table.c.group_record_id == container.record_id)
                | (group_member_table.c.member_record_id == container.record_id)
            )
        )
        self.session.execute(
            delete(container_table).where(container_table.c.record_id == container.record_id)
        )

    def list_groups_containing(self, container: Container) -> list[Container]:
        stmt = (
            select(container_table)
            .join(
                group_member_table,
                group_member_table.c.group_record_id == container_table.c.record_id,
            )
            .where(group_member_table.c.member_record_id == container.record_id)
            .order_by(container_table.c.created_at)
        )
        return [self._container_from_row(row) for row in self.session.execute(stmt).mappings()]

    def _select_containers(self, clause: ColumnElement[bool]) -> list[Container]:
        stmt = select(container_table).where(clause)
        return [self._container_from_row(row) for row in self.session.execute(stmt).mappings()]

    def _container_from_row(self, row: Mapping[str, Any]) -> Container:
        kind = ContainerKind(row["kind"])
        members: list[str] = []
        if kind is ContainerKind.GROUP:
            members = self._read_members(row["record_id"])
        return Container(
            record_id=row["record_id"],
            container_id=row["container_id"],
            name=row["name"],
            kind=kind,
            event_id=row["event_id"],
            num_children=row["num_children"],
            member_ids=members,
            is_default=bool(row["is_default"]),
            display_order=row["display_order"],
            created_by=row["created_by"],
            created_at=row["created_at"],
        )

    def _read_members(self, group_record_id: str) -> list[str]:
        stmt = (
            select(container_table.c.container_id)
            .join(
                group_member_table,
                group_member_table.c.member_record_id == container_table.c.record_id,
            )
            .where(group_member_table.c.group_record_id == group_record_id)
            .order_by(group_member_table.c.position)
        )
        return list(self.session.execute(stmt).scalars())

    def _write_members(self, group: Container) -> None:
        if not group.member_ids:
            return
        stmt = select(container_table.c.container_id, container_table.c.record_id).where(
            container_table.c.container_id.in_(group.member_ids)
        )
        record_ids = {row.container_id: row.record_id for row in self.session.execute(stmt)}
        rows = [
            {
                "group_record_id": group.record_id,
                "member_record_id": record_ids[member_id],
                "position": position,
            }
            for position, member_id in enumerate(group.member_ids)
            if member_id in record_ids
        ]
        if rows:
            self.session.execute(insert(group_member_table), rows)

    # songs ---------------------------------------------------------------------

    def get_song(self, song_id: str) -> Song | None:
        stmt = select(song_table).where(song_table.c.record_id == song_id)
        row = self.session.execute(stmt).mappings().first()
        return _song_from_row(row) if row is not None else None

    def list_songs_for_container(self, container_id: str) -> list[Song]:
        songs = self._select_songs(self._song_queries("container_id", container_id))
        songs.sort(key=lambda s: (s.order, s.created_at))
        return songs

    def list_songs_for_event(self, event_id: str) -> list[Song]:
        songs = self._select_songs(self._song_queries("event_id", event_id))
        songs.sort(key=lambda s: (s.container_id, s.order, s.created_at))
        return songs

    def add_song(self, song: Song) -> None:
        self.session.execute(
            insert(song_table).values(
                record_id=song.record_id,
                title=song.title,
                artist=song.artist,
                notes=song.notes,
                container_id=song.container_id,
                event_id=song.event_id,
                order=song.order,
                album_order=song.album_order,
                created_by=song.created_by,
                created_at=song.created_at,
                **self._container_link(song.container_id),
                **self._event_link(song.event_id),
            )
        )

    def update_song(self, song: Song) -> None:
        self.session.execute(
            update(song_table)
            .where(song_table.c.record_id == song.record_id)
            .values(
                title=song.title,
                artist=song.artist,
                notes=song.notes,
                order=song.order,
                album_order=song.album_order,
            )
        )

    def delete_song(self, song: Song) -> None:
        self.session.execute(delete(song_table).where(song_table.c.record_id == song.record_id))

    def move_song(self, song: Song, target: Container) -> None:
        self.session.execute(
            update(song_table)
            .where(song_table.c.record_id == song.record_id)
            .values(container_id=target.container_id, **self._container_link(target.container_id))
        )
        song.container_id = target.container_id

    def _select_songs(self, clauses: Iterable[ColumnElement[bool]]) -> list[Song]:
        batches: list[list[Song]] = []
        for clause in clauses:
            stmt = select(song_table).where(clause)
            batches.append([_song_from_row(row) for row in self.session.execute(stmt).mappings()])
        return _union_by_record_id(*batches)

    # audio files ---------------------------------------------------------------

    def get_audio_file(self, record_id: str) -> AudioFile | None:
        stmt = select(audio_file_table).where(audio_file_table.c.record_id == record_id)
        row = self.session.execute(stmt).mappings().first()
        return _audio_file_from_row(row) if row is not None else None

    def list_audio_files_for_container(self, container: Container) -> list[AudioFile]:
        return self._select_audio_union(self._containment_queries(audio_file_table, container))

    def list_audio_files_for_event(self, event: Event) -> list[AudioFile]:
        return self._select_audio_union(self._event_queries(audio_file_table, event))

    def list_audio_files_for_song(
        self, song_id: str, type_: AudioFileType | None = None
    ) -> list[AudioFile]:
        stmt = select(audio_file_table).where(audio_file_table.c.song_id == song_id)
        if type_ is not None:
            stmt = stmt.where(audio_file_table.c.type == type_)
        stmt = stmt.order_by(audio_file_table.c.uploaded_at.desc())
        return [_audio_file_from_row(row) for row in self.session.execute(stmt).mappings()]

    def add_audio_file(self, audio_file: AudioFile) -> None:
        self.session.execute(
            insert(audio_file_table).values(
                record_id=audio_file.record_id,
                type=audio_file.type,
                container_id=audio_file.container_id,
                event_id=audio_file.event_id,
                song_id=audio_file.song_id,
                storage_key=audio_file.storage_key,
                filename=audio_file.filename,
                uploaded_by=audio_file.uploaded_by,
                uploaded_at=audio_file.uploaded_at,
                duration_seconds=audio_file.duration_seconds,
                file_size_bytes=audio_file.file_size_bytes,
                status=audio_file.status,
                approval_status=audio_file.approval_status,
                **self._container_link(audio_file.container_id),
                **self._event_link(audio_file.event_id),
                **self._song_link(audio_file.song_id),
            )
        )

    def update_audio_file(self, audio_file: AudioFile) -> None:
        self.session.execute(
            update(audio_file_table)
            .where(audio_file_table.c.record_id == audio_file.record_id)
            .values(
                storage_key=audio_file.storage_key,
                filename=audio_file.filename,
                uploaded_by=audio_file.uploaded_by,
                uploaded_at=audio_file.uploaded_at,
                duration_seconds=audio_file.duration_seconds,
                file_size_bytes=audio_file.file_size_bytes,
                status=audio_file.status,
                approval_status=audio_file.approval_status,
            )
        )

    def delete_audio_file(self, audio_file: AudioFile) -> None:
        self.session.execute(
            delete(audio_file_table).where(audio_file_table.c.record_id == audio_file.record_id)
        )

    def move_audio_file(self, audio_file: AudioFile, target: Container) -> None:
        self.session.execute(
            update(audio_file_table)
            .where(audio_file_table.c.record_id == audio_file.record_id)
            .values(container_id=target.container_id, **self._container_link(target.container_id))
        )
        audio_file.container_id = target.container_id

    def _select_audio_union(self, clauses: Iterable[ColumnElement[bool]]) -> list[AudioFile]:
        batches: list[list[AudioFile]] = []
        for clause in clauses:
            stmt = select(audio_file_table).where(clause)
            batches.append(
                [_audio_file_from_row(row) for row in self.session.execute(stmt).mappings()]
            )
        files = _union_by_record_id(*batches)
        files.sort(key=lambda f: f.uploaded_at, reverse=True)
        return files

    # registrations -------------------------------------------------------------

    def add_registration(self, registration: Registration) -> None:
        self.session.execute(
            insert(registration_table).values(
                record_id=registration.record_id,
                container_id=registration.container_id,
                event_id=registration.event_id,
                child_name=registration.child_name,
                parent_email=registration.parent_email,
                registered_at=registration.registered_at,
                **self._container_link(registration.container_id),
            )
        )

    def list_registrations_for_container(self, container_id: str) -> list[Registration]:
        stmt = (
            select(registration_table)
            .where(registration_table.c.container_id == container_id)
            .order_by(registration_table.c.registered_at)
        )
        return [_registration_from_row(row) for row in self.session.execute(stmt).mappings()]

    def count_registrations(self, container_id: str) -> int:
        stmt = select(func.count()).where(registration_table.c.container_id == container_id)
        return int(self.session.execute(stmt).scalar_one())

    def move_registration(self, registration: Registration, target: Container) -> None:
        self.session.execute(
            update(registration_table)
            .where(registration_table.c.record_id == registration.record_id)
            .values(container_id=target.container_id, **self._container_link(target.container_id))
        )
        registration.container_id = target.container_id


class LegacySchemaBridge(_SchemaBridgeBase):
    """Text keys only; link columns are neither written nor read."""

    mode = SchemaMode.LEGACY


class NormalizedSchemaBridge(_SchemaBridgeBase):
    """Writes text keys and links; reads union both representations."""

    mode = SchemaMode.NORMALIZED

    def _container_link(self, container_id: str) -> dict[str, str]:
        record_id = self._lookup_record_id(container_table, "container_id", container_id)
        if record_id is None:
            log.warning(
                "Degraded consistency: container %s not found, writing text key only",
                container_id,
            )
            return {}
        return {"container_link": record_id}

    def _event_link(self, event_id: str) -> dict[str, str]:
        record_id = self._lookup_record_id(event_table, "event_id", event_id)
        if record_id is None:
            log.warning(
                "Degraded consistency: event %s not found, writing text key only", event_id
            )
            return {}
        return {"event_link": record_id}

    def _song_link(self, song_id: str | None) -> dict[str, str]:
        if not song_id:
            return {}
        record_id = self._lookup_record_id(song_table, "record_id", song_id)
        if record_id is None:
            log.warning("Degraded consistency: song %s not found, writing text key only", song_id)
            return {}
        return {"song_link": record_id}

    def _containment_queries(
        self, table: Table, container: Container
    ) -> tuple[ColumnElement[bool], ...]:
        return (
            _link_query(
                table, "container_link", container.record_id, "container_id", container.container_id
            ),
            table.c.container_id == container.container_id,
        )

    def _event_queries(self, table: Table, event: Event) -> tuple[ColumnElement[bool], ...]:
        return (
            _link_query(table, "event_link", event.record_id, "event_id", event.event_id),
            table.c.event_id == event.event_id,
        )

    def _song_queries(self, key: str, value: str) -> tuple[ColumnElement[bool], ...]:
        target, link = _SONG_LINKS[key]
        text_query = song_table.c[key] == value
        record_id = self._lookup_record_id(target, key, value)
        if record_id is None:
            return (text_query,)
        return (_link_query(song_table, link, record_id, key, value), text_query)

    def _lookup_record_id(self, table: Table, column: str, value: str) -> str | None:
        stmt = select(table.c.record_id).where(table.c[column] == value).limit(1)
        return cast("str | None", self.session.execute(stmt).scalar_one_or_none())


_BRIDGES: dict[SchemaMode, type[_SchemaBridgeBase]] = {
    SchemaMode.LEGACY: LegacySchemaBridge,
    SchemaMode.NORMALIZED: NormalizedSchemaBridge,
}


def build_schema_bridge(session: Session, mode: SchemaMode) -> _SchemaBridgeBase:
    """Return the record store implementation for the configured schema mode."""

    return _BRIDGES[mode](session)


if TYPE_CHECKING:
    from songbook.domain.ports.persistence import RecordStore

    _session_stub = cast("Session", object())
    _legacy_check: RecordStore = LegacySchemaBridge(_session_stub)
    _normalized_check: RecordStore = NormalizedSchemaBridge(_session_stub)
