from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine, insert, select
from sqlalchemy.orm import Session

from songbook.adapters.sqlalchemy import (
    LegacySchemaBridge,
    NormalizedSchemaBridge,
    SqlAlchemyEventRepository,
    build_schema_bridge,
)
from songbook.adapters.sqlalchemy.migrations import upgrade_head, upgrade_to
from songbook.adapters.sqlalchemy.tables import audio_file_table, container_table, song_table
from songbook.config import SchemaMode
from songbook.domain.identifiers import new_record_id
from songbook.domain.model import (
    ApprovalStatus,
    AudioFile,
    AudioFileStatus,
    AudioFileType,
    Container,
    ContainerKind,
    Event,
    Song,
)

if TYPE_CHECKING:
    from collections.abc import Iterator

    from sqlalchemy.engine import Engine


@pytest.fixture
def session(sqlite_engine: Engine) -> Iterator[Session]:
    with Session(sqlite_engine) as session:
        yield session


def _seed_event(session: Session) -> tuple[Event, Container]:
    event = Event(event_id="evt_calder_high_minimusiker_20251120_abcdef", school_name="Calder High")
    SqlAlchemyEventRepository(session).add(event)
    container = Container(
        container_id="cls_calder_high_20251120_class1_abcdef",
        name="Class 1",
        kind=ContainerKind.REGULAR,
        event_id=event.event_id,
    )
    NormalizedSchemaBridge(session).add_container(container, event)
    session.commit()
    return event, container


def _insert_audio_row(session: Session, **values: object) -> str:
    record_id = new_record_id()
    session.execute(
        insert(audio_file_table).values(
            record_id=record_id,
            type=AudioFileType.RAW,
            storage_key=f"raw/{record_id}.wav",
            uploaded_at=datetime.now(UTC),
            status=AudioFileStatus.PENDING,
            approval_status=ApprovalStatus.PENDING,
            **values,
        )
    )
    session.commit()
    return record_id


def test_build_schema_bridge_follows_mode(session: Session) -> None:
    assert isinstance(build_schema_bridge(session, SchemaMode.LEGACY), LegacySchemaBridge)
    assert isinstance(build_schema_bridge(session, SchemaMode.NORMALIZED), NormalizedSchemaBridge)


def test_normalized_event_audio_read_unions_and_deduplicates(session: Session) -> None:
    event, container = _seed_event(session)
    text_only = _insert_audio_row(
        session, container_id=container.container_id, event_id=event.event_id
    )
    link_only = _insert_audio_row(
        session, container_id="", event_id="", container_link=container.record_id, event_link=event.record_id
    )
    both = _insert_audio_row(
        session,
        container_id=container.container_id,
        event_id=event.event_id,
        container_link=container.record_id,
        event_link=event.record_id,
    )

    bridge = NormalizedSchemaBridge(session)
    by_event = [f.record_id for f in bridge.list_audio_files_for_event(event)]
    by_container = [f.record_id for f in bridge.list_audio_files_for_container(container)]

    assert sorted(by_event) == sorted([text_only, link_only, both])
    assert sorted(by_container) == sorted([text_only, link_only, both])


def _insert_song_row(session: Session, title: str, **values: object) -> str:
    record_id = new_record_id()
    session.execute(
        insert(song_table).values(
            record_id=record_id, title=title, created_at=datetime.now(UTC), **values
        )
    )
    session.commit()
    return record_id


def test_normalized_song_reads_follow_links(session: Session) -> None:
    event, container = _seed_event(session)
    link_only = _insert_song_row(
        session,
        "Linked",
        container_id="",
        event_id="",
        container_link=container.record_id,
        event_link=event.record_id,
    )
    both = _insert_song_row(
        session,
        "Both",
        container_id=container.container_id,
        event_id=event.event_id,
        container_link=container.record_id,
        event_link=event.record_id,
    )
    # moved elsewhere by a writer that only updates text keys
    _insert_song_row(
        session,
        "Moved away",
        container_id="cls_calder_high_20251120_class9_abcdef",
        event_id=event.event_id,
        container_link=container.record_id,
        event_link=event.record_id,
    )

    normalized = NormalizedSchemaBridge(session)
    legacy = LegacySchemaBridge(session)
    by_container = normalized.list_songs_for_container(container.container_id)
    by_event = normalized.list_songs_for_event(event.event_id)

    assert sorted(s.record_id for s in by_container) == sorted([link_only, both])
    assert len({s.title for s in by_event}) == len(by_event) == 3
    assert [s.record_id for s in legacy.list_songs_for_container(container.container_id)] == [both]


def test_legacy_bridge_reads_text_keys_only(session: Session) -> None:
    event, container = _seed_event(session)
    text_only = _insert_audio_row(
        session, container_id=container.container_id, event_id=event.event_id
    )
    _insert_audio_row(
        session, container_id="", event_id="", container_link=container.record_id, event_link=event.record_id
    )

    files = LegacySchemaBridge(session).list_audio_files_for_event(event)

    assert [f.record_id for f in files] == [text_only]


def test_normalized_writes_populate_links(session: Session) -> None:
    event, container = _seed_event(session)
    bridge = NormalizedSchemaBridge(session)
    song = Song(title="Hello", container_id=container.container_id, event_id=event.event_id)
    bridge.add_song(song)
    bridge.add_audio_file(
        AudioFile(
            type=AudioFileType.FINAL,
            container_id=container.container_id,
            event_id=event.event_id,
            song_id=song.record_id,
            storage_key="final/hello.mp3",
        )
    )
    session.commit()

    song_row = session.execute(select(song_table)).mappings().one()
    audio_row = session.execute(select(audio_file_table)).mappings().one()
    container_row = session.execute(select(container_table)).mappings().one()

    assert song_row["container_id"] == container.container_id
    assert song_row["container_link"] == container.record_id
    assert song_row["event_link"] == event.record_id
    assert audio_row["song_link"] == song.record_id
    assert audio_row["event_link"] == event.record_id
    assert container_row["event_link"] == event.record_id


def test_legacy_writes_leave_links_empty(session: Session) -> None:
    event, container = _seed_event(session)
    song = Song(title="Hello", container_id=container.container_id, event_id=event.event_id)
    LegacySchemaBridge(session).add_song(song)
    session.commit()

    song_row = session.execute(select(song_table)).mappings().one()

    assert song_row["container_id"] == container.container_id
    assert song_row["container_link"] is None
    assert song_row["event_link"] is None


def test_missing_link_target_degrades_to_text_key(
    session: Session, caplog: pytest.LogCaptureFixture
) -> None:
    event, _ = _seed_event(session)
    song = Song(title="Orphan", container_id="cls_not_there", event_id=event.event_id)

    with caplog.at_level(logging.WARNING):
        NormalizedSchemaBridge(session).add_song(song)
    session.commit()

    song_row = session.execute(select(song_table)).mappings().one()
    assert song_row["container_id"] == "cls_not_there"
    assert song_row["container_link"] is None
    assert song_row["event_link"] == event.record_id
    assert "Degraded consistency" in caplog.text


def test_move_song_rewrites_text_key_and_link(session: Session) -> None:
    event, source = _seed_event(session)
    target = Container(
        container_id="cls_calder_high_20251120_class2_abcdef",
        name="Class 2",
        kind=ContainerKind.REGULAR,
        event_id=event.event_id,
    )
    bridge = NormalizedSchemaBridge(session)
    bridge.add_container(target, event)
    song = Song(title="Hello", container_id=source.container_id, event_id=event.event_id)
    bridge.add_song(song)
    session.commit()

    bridge.move_song(song, target)
    bridge.move_song(song, target)
    session.commit()

    song_row = session.execute(select(song_table)).mappings().one()
    assert song.container_id == target.container_id
    assert song_row["container_id"] == target.container_id
    assert song_row["container_link"] == target.record_id


@pytest.mark.filterwarnings("error::sqlalchemy.exc.SADeprecationWarning")
def test_group_members_round_trip_in_order(session: Session) -> None:
    event, first = _seed_event(session)
    bridge = LegacySchemaBridge(session)
    second = Container(
        container_id="cls_calder_high_20251120_class2_abcdef",
        name="Class 2",
        kind=ContainerKind.REGULAR,
        event_id=event.event_id,
    )
    bridge.add_container(second, event)
    group = Container(
        container_id=f"group_{event.event_id}_0a1b2c3d",
        name="Together",
        kind=ContainerKind.GROUP,
        event_id=event.event_id,
        member_ids=[second.container_id, first.container_id],
    )
    bridge.add_container(group, event)
    session.commit()

    stored = bridge.get_container(group.container_id)

    assert stored is not None
    assert stored.member_ids == [second.container_id, first.container_id]
    assert [g.container_id for g in bridge.list_groups_containing(first)] == [group.container_id]


def test_legacy_database_upgrades_and_stays_readable() -> None:
    engine = create_engine("sqlite+pysqlite:///:memory:", future=True)
    try:
        upgrade_to("0001_legacy_schema", engine=engine)
        event = Event(
            event_id="evt_old_school_minimusiker_20240301_abcdef", school_name="Old School"
        )
        with Session(engine) as session:
            SqlAlchemyEventRepository(session).add(event)
            session.execute(
                insert(container_table).values(
                    record_id=new_record_id(),
                    container_id="cls_old_school_20240301_class1_abcdef",
                    name="Class 1",
                    kind=ContainerKind.REGULAR,
                    event_id=event.event_id,
                    is_default=False,
                    created_at=datetime.now(UTC),
                )
            )
            session.commit()

        upgrade_head(engine=engine)

        with Session(engine) as session:
            bridge = NormalizedSchemaBridge(session)
            containers = bridge.list_containers(event)
            bridge.add_song(
                Song(
                    title="Still works",
                    container_id=containers[0].container_id,
                    event_id=event.event_id,
                )
            )
            session.commit()
            song_row = session.execute(select(song_table)).mappings().one()
    finally:
        engine.dispose()

    assert [c.name for c in containers] == ["Class 1"]
    assert song_row["container_link"] == containers[0].record_id
