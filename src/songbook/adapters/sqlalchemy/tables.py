"""SQLAlchemy table metadata for the Songbook record store.

Containment is stored twice while the store migrates: as text keys
(``container_id``/``event_id``/``song_id``) from the flat schema and as link
columns (``*_link``) referencing ``record_id`` handles from the normalized schema.
"""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum
from typing import Final

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    Dialect,
    Enum,
    Float,
    ForeignKey,
    Integer,
    MetaData,
    String,
    Table,
    TypeDecorator,
)

from songbook.domain.model import (
    ApprovalStatus,
    AudioFileStatus,
    AudioFileType,
    ContainerKind,
    EventStatus,
)

RECORD_ID_LENGTH: Final[int] = 17


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


metadata = MetaData(
    naming_convention={
        "ix": "ix_%(column_0_label)s",
        "uq": "uq_%(table_name)s_%(column_0_label)s",
        "ck": "ck_%(table_name)s_%(constraint_name)s",
        "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
        "pk": "pk_%(table_name)s",
    }
)


def _enum(enum_cls: type[StrEnum]) -> Enum:
    return Enum(
        enum_cls,
        native_enum=False,
        values_callable=lambda members: [member.value for member in members],
    )


def _record_id() -> Column[str]:
    return Column("record_id", String(RECORD_ID_LENGTH), primary_key=True)


def _link(name: str, target: str) -> Column[str]:
    return Column(
        name,
        String(RECORD_ID_LENGTH),
        ForeignKey(f"{target}.record_id"),
        nullable=True,
        index=True,
    )


booking_table = Table(
    "bookings",
    metadata,
    _record_id(),
    Column("simplybook_id", String, nullable=False, unique=True),
    Column("school_name", String, nullable=False),
    Column("start_date", Date, nullable=True),
    Column("contact_name", String, nullable=True),
    Column("contact_email", String, nullable=True, index=True),
    Column("contact_phone", String, nullable=True),
)

event_table = Table(
    "events",
    metadata,
    _record_id(),
    Column("event_id", String, nullable=False, unique=True),
    Column("school_name", String, nullable=False),
    Column("event_date", Date, nullable=True),
    Column("legacy_booking_id", String, nullable=True, index=True),
    Column("access_code", Integer, nullable=True, unique=True),
    Column(
        "booking_record_id",
        String(RECORD_ID_LENGTH),
        ForeignKey("bookings.record_id"),
        nullable=True,
        index=True,
    ),
    Column("status", _enum(EventStatus), nullable=False),
    Column("created_at", UTCDateTime(), nullable=False),
)

container_table = Table(
    "containers",
    metadata,
    _record_id(),
    Column("container_id", String, nullable=False, unique=True),
    Column("name", String, nullable=False),
    Column("kind", _enum(ContainerKind), nullable=False),
    Column("event_id", String, nullable=False, index=True),
    Column("num_children", Integer, nullable=True),
    Column("is_default", Boolean, nullable=False, default=False),
    Column("display_order", Integer, nullable=True),
    Column("created_by", String, nullable=True),
    Column("created_at", UTCDateTime(), nullable=False),
    _link("event_link", "events"),
)

group_member_table = Table(
    "group_members",
    metadata,
    Column(
        "group_record_id",
        String(RECORD_ID_LENGTH),
        ForeignKey("containers.record_id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "member_record_id",
        String(RECORD_ID_LENGTH),
        ForeignKey("containers.record_id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column("position", Integer, nullable=False, default=0),
)

song_table = Table(
    "songs",
    metadata,
    _record_id(),
    Column("title", String, nullable=False),
    Column("artist", String, nullable=True),
    Column("notes", String, nullable=True),
    Column("container_id", String, nullable=False, index=True),
    Column("event_id", String, nullable=False, index=True),
    Column("order", Integer, nullable=False, default=1),
    Column("album_order", Integer, nullable=True),
    Column("created_by", String, nullable=True),
    Column("created_at", UTCDateTime(), nullable=False),
    _link("container_link", "containers"),
    _link("event_link", "events"),
)

audio_file_table = Table(
    "audio_files",
    metadata,
    _record_id(),
    Column("type", _enum(AudioFileType), nullable=False),
    Column("container_id", String, nullable=False, index=True),
    Column("event_id", String, nullable=False, index=True),
    Column("song_id", String, nullable=True, index=True),
    Column("storage_key", String, nullable=False),
    Column("filename", String, nullable=False, default=""),
    Column("uploaded_by", String, nullable=False, default=""),
    Column("uploaded_at", UTCDateTime(), nullable=False),
    Column("duration_seconds", Float, nullable=True),
    Column("file_size_bytes", Integer, nullable=True),
    Column("status", _enum(AudioFileStatus), nullable=False),
    Column("approval_status", _enum(ApprovalStatus), nullable=False),
    _link("container_link", "containers"),
    _link("event_link", "events"),
    _link("song_link", "songs"),
)

registration_table = Table(
    "registrations",
    metadata,
    _record_id(),
    Column("container_id", String, nullable=False, index=True),
    Column("event_id", String, nullable=False, index=True),
    Column("child_name", String, nullable=False),
    Column("parent_email", String, nullable=True),
    Column("registered_at", UTCDateTime(), nullable=False),
    _link("container_link", "containers"),
)
