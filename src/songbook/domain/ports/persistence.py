"""Ports for persisting domain records."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence

    from songbook.domain.model import (
        AudioFile,
        AudioFileType,
        Booking,
        Container,
        Event,
        Registration,
        Song,
    )


@runtime_checkable
class EventRepository(Protocol):
    """Persistence contract for events."""

    def add(self, event: Event) -> None: ...

    def update(self, event: Event) -> None: ...

    def get(self, record_id: str) -> Event | None: ...

    def get_by_event_id(self, event_id: str) -> Event | None: ...

    def get_by_legacy_booking_id(self, legacy_booking_id: str) -> Event | None: ...

    def get_by_access_code(self, access_code: int) -> Event | None: ...

    def get_by_booking(self, booking_record_id: str) -> Event | None: ...


@runtime_checkable
class BookingDirectory(Protocol):
    """Read access to school bookings, plus the contact cascade write."""

    def add(self, booking: Booking) -> None: ...

    def get(self, record_id: str) -> Booking | None: ...

    def get_by_simplybook_id(self, simplybook_id: str) -> Booking | None: ...

    def get_for_teacher_email(self, email: str) -> Sequence[Booking]: ...

    def update_contact(
        self,
        record_id: str,
        *,
        contact_name: str | None = None,
        contact_email: str | None = None,
        contact_phone: str | None = None,
    ) -> None: ...


@runtime_checkable
class RecordStore(Protocol):
    """One read/write API for containers, songs, audio files and registrations.

    Implementations hide whether containment is stored as a text key only or as a
    text key plus a typed link. Callers never branch on the schema mode.
    """

    # containers
    def get_container(self, container_id: str) -> Container | None: ...

    def list_containers(self, event: Event) -> list[Container]: ...

    def find_default_container(self, event: Event) -> Container | None: ...

    def add_container(self, container: Container, event: Event) -> None: ...

    def update_container(self, container: Container) -> None: ...

    def delete_container(self, container: Container) -> None: ...

    def list_groups_containing(self, container: Container) -> list[Container]: ...

    # songs
    def get_song(self, song_id: str) -> Song | None: ...

    def list_songs_for_container(self, container_id: str) -> list[Song]: ...

    def list_songs_for_event(self, event_id: str) -> list[Song]: ...

    def add_song(self, song: Song) -> None: ...

    def update_song(self, song: Song) -> None: ...

    def delete_song(self, song: Song) -> None: ...

    def move_song(self, song: Song, target: Container) -> None: ...

    # audio files
    def get_audio_file(self, record_id: str) -> AudioFile | None: ...

    def list_audio_files_for_container(self, container: Container) -> list[AudioFile]: ...

    def list_audio_files_for_event(self, event: Event) -> list[AudioFile]: ...

    def list_audio_files_for_song(
        self, song_id: str, type_: AudioFileType | None = None
    ) -> list[AudioFile]: ...

    def add_audio_file(self, audio_file: AudioFile) -> None: ...

    def update_audio_file(self, audio_file: AudioFile) -> None: ...

    def delete_audio_file(self, audio_file: AudioFile) -> None: ...

    def move_audio_file(self, audio_file: AudioFile, target: Container) -> None: ...

    # registrations
    def add_registration(self, registration: Registration) -> None: ...

    def list_registrations_for_container(self, container_id: str) -> list[Registration]: ...

    def count_registrations(self, container_id: str) -> int: ...

    def move_registration(self, registration: Registration, target: Container) -> None: ...
