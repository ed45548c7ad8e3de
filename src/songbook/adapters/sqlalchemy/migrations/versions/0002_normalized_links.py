"""Add typed link columns for the normalized schema.

Text keys stay in place; legacy readers keep working while both are populated.

Revision ID: 0002_normalized_links
Revises: 0001_legacy_schema
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision = "0002_normalized_links"
down_revision = "0001_legacy_schema"
branch_labels = None
depends_on = None

_RECORD_ID = 17

# (table, link column, referenced table)
_LINKS: tuple[tuple[str, str, str], ...] = (
    ("containers", "event_link", "events"),
    ("songs", "container_link", "containers"),
    ("songs", "event_link", "events"),
    ("audio_files", "container_link", "containers"),
    ("audio_files", "event_link", "events"),
    ("audio_files", "song_link", "songs"),
    ("registrations", "container_link", "containers"),
)


def upgrade() -> None:
    for table, column, target in _LINKS:
        with op.batch_alter_table(table) as batch_op:
            batch_op.add_column(sa.Column(column, sa.String(_RECORD_ID), nullable=True))
            batch_op.create_foreign_key(
                f"fk_{table}_{column}_{target}", target, [column], ["record_id"]
            )
            batch_op.create_index(f"ix_{table}_{column}", [column])


def downgrade() -> None:
    for table, column, target in reversed(_LINKS):
        with op.batch_alter_table(table) as batch_op:
            batch_op.drop_index(f"ix_{table}_{column}")
            batch_op.drop_constraint(f"fk_{table}_{column}_{target}", type_="foreignkey")
            batch_op.drop_column(column)
