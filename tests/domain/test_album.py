from __future__ import annotations

import random
from typing import TYPE_CHECKING

import pytest

from songbook.domain.album import AlbumTrackUpdate, get_album_tracks, update_album_order
from songbook.domain.containers import create_class, create_group, get_container
from songbook.domain.errors import NotFoundError, ValidationError
from songbook.domain.intake import create_event_for_booking
from tests.helpers.events import add_songs, make_booking

if TYPE_CHECKING:
    from collections.abc import Callable

    from songbook.adapters.sqlalchemy.unit_of_work import SqlAlchemyUnitOfWork
    from songbook.domain.model import Container, Event, Song


def _seed(
    uow: SqlAlchemyUnitOfWork, event: Event
) -> tuple[Container, Container, Container, list[Song]]:
    class_a = create_class(uow, event, name="Class A")
    class_b = create_class(uow, event, name="Class B")
    group = create_group(
        uow, event, name="Everyone", member_ids=[class_a.container_id, class_b.container_id]
    )
    songs = [
        *add_songs(uow, class_a, ["A1", "A2"]),
        *add_songs(uow, class_b, ["B1"]),
        *add_songs(uow, group, ["G1", "G2"]),
    ]
    return class_a, class_b, group, songs


def _stored_album_orders(uow: SqlAlchemyUnitOfWork, event: Event) -> list[int | None]:
    return sorted(
        (s.album_order for s in uow.repositories.records.list_songs_for_event(event.event_id)),
        key=lambda value: value or 0,
    )


def test_album_tracks_fall_back_to_container_and_song_order(
    sqlite_unit_of_work: Callable[[], SqlAlchemyUnitOfWork], event: Event
) -> None:
    with sqlite_unit_of_work() as uow:
        _seed(uow, event)
        tracks = get_album_tracks(uow, event)
        stored = _stored_album_orders(uow, event)

    assert [t.title for t in tracks] == ["A1", "A2", "B1", "G1", "G2"]
    assert [t.album_order for t in tracks] == [1, 2, 3, 4, 5]
    assert tracks[3].container_name == "Everyone"
    # reading never writes the renumbering back
    assert stored == [None] * 5


def test_existing_album_order_wins_and_is_densified(
    sqlite_unit_of_work: Callable[[], SqlAlchemyUnitOfWork], event: Event
) -> None:
    with sqlite_unit_of_work() as uow:
        container = create_class(uow, event, name="Class C")
        add_songs(uow, container, ["X", "Y", "Z", "W"], album_orders=[10, 3, None, 3])
        tracks = get_album_tracks(uow, event)

    assert [t.title for t in tracks] == ["Y", "W", "X", "Z"]
    assert [t.album_order for t in tracks] == [1, 2, 3, 4]


def test_update_album_order_persists_dense_permutation(
    sqlite_unit_of_work: Callable[[], SqlAlchemyUnitOfWork], event: Event
) -> None:
    with sqlite_unit_of_work() as uow:
        _, _, _, songs = _seed(uow, event)
        shuffled = songs[:]
        random.Random(7).shuffle(shuffled)
        updates = [
            AlbumTrackUpdate(song_id=song.record_id, album_order=position * 10)
            for position, song in enumerate(shuffled, start=1)
        ]

        update_album_order(uow, event, updates)

    with sqlite_unit_of_work() as uow:
        tracks = get_album_tracks(uow, event)
        stored = _stored_album_orders(uow, event)

    assert [t.song_id for t in tracks] == [s.record_id for s in shuffled]
    assert sorted(t.album_order for t in tracks) == list(range(1, len(songs) + 1))
    assert stored == list(range(1, len(songs) + 1))


@pytest.mark.parametrize("seed", range(5))
def test_album_order_stays_dense_for_partial_updates(
    sqlite_unit_of_work: Callable[[], SqlAlchemyUnitOfWork], event: Event, seed: int
) -> None:
    rng = random.Random(seed)
    with sqlite_unit_of_work() as uow:
        _, _, _, songs = _seed(uow, event)
        picked = rng.sample(songs, k=rng.randint(1, len(songs)))
        updates = [
            AlbumTrackUpdate(song_id=song.record_id, album_order=rng.randint(1, 3))
            for song in picked
        ]
        update_album_order(uow, event, updates)
        tracks = get_album_tracks(uow, event)

    assert [t.album_order for t in tracks] == list(range(1, len(songs) + 1))
    assert {t.song_id for t in tracks} == {s.record_id for s in songs}


def test_untouched_songs_follow_submitted_ones(
    sqlite_unit_of_work: Callable[[], SqlAlchemyUnitOfWork], event: Event
) -> None:
    with sqlite_unit_of_work() as uow:
        _, _, _, songs = _seed(uow, event)
        g2 = songs[-1]
        tracks = update_album_order(uow, event, [AlbumTrackUpdate(song_id=g2.record_id, album_order=1)])

    assert [t.title for t in tracks] == ["G2", "A1", "A2", "B1", "G1"]


def test_renames_travel_with_the_order(
    sqlite_unit_of_work: Callable[[], SqlAlchemyUnitOfWork], event: Event
) -> None:
    with sqlite_unit_of_work() as uow:
        class_a, class_b, group, songs = _seed(uow, event)
        a1, a2, b1, g1, g2 = songs
        update_album_order(
            uow,
            event,
            [
                AlbumTrackUpdate(song_id=g1.record_id, album_order=1),
                AlbumTrackUpdate(
                    song_id=b1.record_id,
                    album_order=2,
                    title="  B1 (remix) ",
                    container_id=class_b.container_id,
                    container_name="Class B Bees",
                ),
                AlbumTrackUpdate(song_id=a1.record_id, album_order=3),
                AlbumTrackUpdate(song_id=g2.record_id, album_order=4),
                AlbumTrackUpdate(song_id=a2.record_id, album_order=5, title=""),
            ],
        )

    with sqlite_unit_of_work() as uow:
        tracks = get_album_tracks(uow, event)
        stored_a = get_container(uow, class_a.container_id)
        stored_b = get_container(uow, class_b.container_id)
        stored_group = get_container(uow, group.container_id)

    assert [t.title for t in tracks] == ["G1", "B1 (remix)", "A1", "G2", "A2"]
    assert tracks[1].container_name == "Class B Bees"
    assert stored_b.name == "Class B Bees"
    assert stored_b.display_order == 2
    assert stored_a.display_order == 3
    assert stored_group.display_order is None


def test_song_of_other_event_is_rejected_before_any_write(
    sqlite_unit_of_work: Callable[[], SqlAlchemyUnitOfWork], event: Event
) -> None:
    with sqlite_unit_of_work() as uow:
        _, _, _, songs = _seed(uow, event)
        other_event = create_event_for_booking(uow, make_booking("4712", school_name="Other School"))
        foreign_class = create_class(uow, other_event, name="Class A")
        (foreign,) = add_songs(uow, foreign_class, ["Foreign"])

        with pytest.raises(NotFoundError):
            update_album_order(
                uow,
                event,
                [
                    AlbumTrackUpdate(song_id=songs[0].record_id, album_order=1),
                    AlbumTrackUpdate(song_id=foreign.record_id, album_order=2),
                ],
            )
        with pytest.raises(ValidationError):
            update_album_order(
                uow,
                event,
                [
                    AlbumTrackUpdate(song_id=songs[0].record_id, album_order=1),
                    AlbumTrackUpdate(song_id=songs[0].record_id, album_order=2),
                ],
            )
        stored = _stored_album_orders(uow, event)

    assert stored == [None] * len(songs)
