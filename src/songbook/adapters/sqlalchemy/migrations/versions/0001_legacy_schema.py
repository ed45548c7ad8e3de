"""Flat record schema with text foreign keys.

Revision ID: 0001_legacy_schema
Revises:
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision = "0001_legacy_schema"
down_revision = None
branch_labels = None
depends_on = None

_RECORD_ID = 17


def _record_id() -> sa.Column[str]:
    return sa.Column("record_id", sa.String(_RECORD_ID), primary_key=True)


def upgrade() -> None:
    op.create_table(
        "bookings",
        _record_id(),
        sa.Column("simplybook_id", sa.String(), nullable=False),
        sa.Column("school_name", sa.String(), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=True),
        sa.Column("contact_name", sa.String(), nullable=True),
        sa.Column("contact_email", sa.String(), nullable=True),
        sa.Column("contact_phone", sa.String(), nullable=True),
        sa.UniqueConstraint("simplybook_id", name="uq_bookings_simplybook_id"),
    )
    op.create_index("ix_bookings_contact_email", "bookings", ["contact_email"])

    op.create_table(
        "events",
        _record_id(),
        sa.Column("event_id", sa.String(), nullable=False),
        sa.Column("school_name", sa.String(), nullable=False),
        sa.Column("event_date", sa.Date(), nullable=True),
        sa.Column("legacy_booking_id", sa.String(), nullable=True),
        sa.Column("access_code", sa.Integer(), nullable=True),
        sa.Column(
            "booking_record_id",
            sa.String(_RECORD_ID),
            sa.ForeignKey("bookings.record_id", name="fk_events_booking_record_id_bookings"),
            nullable=True,
        ),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("event_id", name="uq_events_event_id"),
        sa.UniqueConstraint("access_code", name="uq_events_access_code"),
    )
    op.create_index("ix_events_legacy_booking_id", "events", ["legacy_booking_id"])
    op.create_index("ix_events_booking_record_id", "events", ["booking_record_id"])

    op.create_table(
        "containers",
        _record_id(),
        sa.Column("container_id", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("kind", sa.String(20), nullable=False),
        sa.Column("event_id", sa.String(), nullable=False),
        sa.Column("num_children", sa.Integer(), nullable=True),
        sa.Column("is_default", sa.Boolean(), nullable=False),
        sa.Column("display_order", sa.Integer(), nullable=True),
        sa.Column("created_by", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("container_id", name="uq_containers_container_id"),
    )
    op.create_index("ix_containers_event_id", "containers", ["event_id"])

    op.create_table(
        "group_members",
        sa.Column(
            "group_record_id",
            sa.String(_RECORD_ID),
            sa.ForeignKey(
                "containers.record_id",
                name="fk_group_members_group_record_id_containers",
                ondelete="CASCADE",
            ),
            primary_key=True,
        ),
        sa.Column(
            "member_record_id",
            sa.String(_RECORD_ID),
            sa.ForeignKey(
                "containers.record_id",
                name="fk_group_members_member_record_id_containers",
                ondelete="CASCADE",
            ),
            primary_key=True,
        ),
        sa.Column("position", sa.Integer(), nullable=False),
    )

    op.create_table(
        "songs",
        _record_id(),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("artist", sa.String(), nullable=True),
        sa.Column("notes", sa.String(), nullable=True),
        sa.Column("container_id", sa.String(), nullable=False),
        sa.Column("event_id", sa.String(), nullable=False),
        sa.Column("order", sa.Integer(), nullable=False),
        sa.Column("album_order", sa.Integer(), nullable=True),
        sa.Column("created_by", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_songs_container_id", "songs", ["container_id"])
    op.create_index("ix_songs_event_id", "songs", ["event_id"])

    op.create_table(
        "audio_files",
        _record_id(),
        sa.Column("type", sa.String(20), nullable=False),
        sa.Column("container_id", sa.String(), nullable=False),
        sa.Column("event_id", sa.String(), nullable=False),
        sa.Column("song_id", sa.String(), nullable=True),
        sa.Column("storage_key", sa.String(), nullable=False),
        sa.Column("filename", sa.String(), nullable=False),
        sa.Column("uploaded_by", sa.String(), nullable=False),
        sa.Column("uploaded_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("duration_seconds", sa.Float(), nullable=True),
        sa.Column("file_size_bytes", sa.Integer(), nullable=True),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("approval_status", sa.String(20), nullable=False),
    )
    op.create_index("ix_audio_files_container_id", "audio_files", ["container_id"])
    op.create_index("ix_audio_files_event_id", "audio_files", ["event_id"])
    op.create_index("ix_audio_files_song_id", "audio_files", ["song_id"])

    op.create_table(
        "registrations",
        _record_id(),
        sa.Column("container_id", sa.String(), nullable=False),
        sa.Column("event_id", sa.String(), nullable=False),
        sa.Column("child_name", sa.String(), nullable=False),
        sa.Column("parent_email", sa.String(), nullable=True),
        sa.Column("registered_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_registrations_container_id", "registrations", ["container_id"])
    op.create_index("ix_registrations_event_id", "registrations", ["event_id"])


def downgrade() -> None:
    op.drop_table("registrations")
    op.drop_table("audio_files")
    op.drop_table("songs")
    op.drop_table("group_members")
    op.drop_table("containers")
    op.drop_table("events")
    op.drop_table("bookings")
