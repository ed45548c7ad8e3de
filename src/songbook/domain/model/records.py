"""Plain data records exchanged between the domain services and the stores.

Records are mutable dataclasses; a store assigns nothing beyond what the record
already carries, so ``record_id`` is minted on construction.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, date, datetime

from songbook.domain.identifiers import new_record_id
from songbook.domain.model.enums import (
    ApprovalStatus,
    AudioFileStatus,
    AudioFileType,
    ContainerKind,
    EventStatus,
)


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(slots=True, kw_only=True)
class Booking:
    """School booking as delivered by the booking intake system."""

    simplybook_id: str
    school_name: str
    start_date: date | None = None
    contact_name: str | None = None
    contact_email: str | None = None
    contact_phone: str | None = None
    record_id: str = field(default_factory=new_record_id)


@dataclass(slots=True, kw_only=True)
class Event:
    event_id: str
    school_name: str
    event_date: date | None = None
    legacy_booking_id: str | None = None
    access_code: int | None = None
    booking_record_id: str | None = None
    status: EventStatus = EventStatus.CONFIRMED
    record_id: str = field(default_factory=new_record_id)
    created_at: datetime = field(default_factory=_utcnow)


@dataclass(slots=True, kw_only=True)
class Container:
    container_id: str
    name: str
    kind: ContainerKind
    event_id: str
    num_children: int | None = None
    member_ids: list[str] = field(default_factory=list[str])
    is_default: bool = False
    display_order: int | None = None
    created_by: str | None = None
    record_id: str = field(default_factory=new_record_id)
    created_at: datetime = field(default_factory=_utcnow)

    @property
    def is_group(self) -> bool:
        return self.kind is ContainerKind.GROUP


@dataclass(slots=True, kw_only=True)
class Song:
    title: str
    container_id: str
    event_id: str
    artist: str | None = None
    notes: str | None = None
    order: int = 1
    album_order: int | None = None
    created_by: str | None = None
    record_id: str = field(default_factory=new_record_id)
    created_at: datetime = field(default_factory=_utcnow)


@dataclass(slots=True, kw_only=True)
class AudioFile:
    type: AudioFileType
    container_id: str
    event_id: str
    storage_key: str
    song_id: str | None = None
    filename: str = ""
    uploaded_by: str = ""
    duration_seconds: float | None = None
    file_size_bytes: int | None = None
    status: AudioFileStatus = AudioFileStatus.PENDING
    approval_status: ApprovalStatus = ApprovalStatus.PENDING
    record_id: str = field(default_factory=new_record_id)
    uploaded_at: datetime = field(default_factory=_utcnow)


@dataclass(slots=True, kw_only=True)
class Registration:
    """A parent's enrolment of a child into a container."""

    container_id: str
    event_id: str
    child_name: str
    parent_email: str | None = None
    record_id: str = field(default_factory=new_record_id)
    registered_at: datetime = field(default_factory=_utcnow)


@dataclass(slots=True, frozen=True)
class AudioStatus:
    has_raw_audio: bool = False
    has_preview: bool = False
    has_final: bool = False

    @classmethod
    def from_files(cls, files: list[AudioFile]) -> AudioStatus:
        ready = {f.type for f in files if f.status is AudioFileStatus.READY}
        return cls(
            has_raw_audio=AudioFileType.RAW in ready,
            has_preview=AudioFileType.PREVIEW in ready,
            has_final=AudioFileType.FINAL in ready,
        )
