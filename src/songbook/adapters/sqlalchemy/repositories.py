"""Event and booking repositories backed by SQLAlchemy sessions."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, cast

from sqlalchemy import func, insert, select, update

from songbook.adapters.sqlalchemy.tables import booking_table, event_table
from songbook.domain.model import Booking, Event, EventStatus

if TYPE_CHECKING:
    from collections.abc import Mapping

    from sqlalchemy.orm import Session
    from sqlalchemy.sql import ColumnElement


def _event_from_row(row: Mapping[str, Any]) -> Event:
    return Event(
        record_id=row["record_id"],
        event_id=row["event_id"],
        school_name=row["school_name"],
        event_date=row["event_date"],
        legacy_booking_id=row["legacy_booking_id"],
        access_code=row["access_code"],
        booking_record_id=row["booking_record_id"],
        status=EventStatus(row["status"]),
        created_at=row["created_at"],
    )


def _booking_from_row(row: Mapping[str, Any]) -> Booking:
    return Booking(
        record_id=row["record_id"],
        simplybook_id=row["simplybook_id"],
        school_name=row["school_name"],
        start_date=row["start_date"],
        contact_name=row["contact_name"],
        contact_email=row["contact_email"],
        contact_phone=row["contact_phone"],
    )


class SqlAlchemyEventRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, event: Event) -> None:
        self.session.execute(
            insert(event_table).values(
                record_id=event.record_id,
                event_id=event.event_id,
                school_name=event.school_name,
                event_date=event.event_date,
                legacy_booking_id=event.legacy_booking_id,
                access_code=event.access_code,
                booking_record_id=event.booking_record_id,
                status=event.status,
                created_at=event.created_at,
            )
        )

    def update(self, event: Event) -> None:
        self.session.execute(
            update(event_table)
            .where(event_table.c.record_id == event.record_id)
            .values(
                school_name=event.school_name,
                event_date=event.event_date,
                legacy_booking_id=event.legacy_booking_id,
                access_code=event.access_code,
                booking_record_id=event.booking_record_id,
                status=event.status,
            )
        )

    def get(self, record_id: str) -> Event | None:
        return self._first(event_table.c.record_id == record_id)

    def get_by_event_id(self, event_id: str) -> Event | None:
        return self._first(event_table.c.event_id == event_id)

    def get_by_legacy_booking_id(self, legacy_booking_id: str) -> Event | None:
        return self._first(event_table.c.legacy_booking_id == legacy_booking_id)

    def get_by_access_code(self, access_code: int) -> Event | None:
        return self._first(event_table.c.access_code == access_code)

    def get_by_booking(self, booking_record_id: str) -> Event | None:
        return self._first(event_table.c.booking_record_id == booking_record_id)

    def _first(self, clause: ColumnElement[bool]) -> Event | None:
        stmt = select(event_table).where(clause).order_by(event_table.c.created_at).limit(1)
        row = self.session.execute(stmt).mappings().first()
        return _event_from_row(row) if row is not None else None


class SqlAlchemyBookingDirectory:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, booking: Booking) -> None:
        self.session.execute(
            insert(booking_table).values(
                record_id=booking.record_id,
                simplybook_id=booking.simplybook_id,
                school_name=booking.school_name,
                start_date=booking.start_date,
                contact_name=booking.contact_name,
                contact_email=booking.contact_email,
                contact_phone=booking.contact_phone,
            )
        )

    def get(self, record_id: str) -> Booking | None:
        stmt = select(booking_table).where(booking_table.c.record_id == record_id)
        row = self.session.execute(stmt).mappings().first()
        return _booking_from_row(row) if row is not None else None

    def get_by_simplybook_id(self, simplybook_id: str) -> Booking | None:
        stmt = select(booking_table).where(booking_table.c.simplybook_id == simplybook_id)
        row = self.session.execute(stmt).mappings().first()
        return _booking_from_row(row) if row is not None else None

    def get_for_teacher_email(self, email: str) -> list[Booking]:
        normalized = email.strip().lower()
        stmt = (
            select(booking_table)
            .where(func.lower(booking_table.c.contact_email) == normalized)
            .order_by(booking_table.c.start_date)
        )
        return [_booking_from_row(row) for row in self.session.execute(stmt).mappings()]

    def update_contact(
        self,
        record_id: str,
        *,
        contact_name: str | None = None,
        contact_email: str | None = None,
        contact_phone: str | None = None,
    ) -> None:
        values: dict[str, object] = {}
        if contact_name is not None:
            values["contact_name"] = contact_name
        if contact_email is not None:
            values["contact_email"] = contact_email
        if contact_phone is not None:
            values["contact_phone"] = contact_phone
        if not values:
            return
        self.session.execute(
            update(booking_table).where(booking_table.c.record_id == record_id).values(**values)
        )


if TYPE_CHECKING:
    from songbook.domain.ports.persistence import BookingDirectory, EventRepository

    _session_stub = cast("Session", object())
    _event_repo_check: EventRepository = SqlAlchemyEventRepository(_session_stub)
    _booking_repo_check: BookingDirectory = SqlAlchemyBookingDirectory(_session_stub)
