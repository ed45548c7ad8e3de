"""Event intake from school bookings."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Final

from songbook.domain.containers import ensure_default_container
from songbook.domain.errors import NotFoundError, ValidationError
from songbook.domain.identifiers import derive_event_id
from songbook.domain.model import Event

if TYPE_CHECKING:
    from songbook.domain.model import Booking
    from songbook.domain.ports.unit_of_work import SongbookUnitOfWork

log = logging.getLogger(__name__)

DEFAULT_EVENT_TYPE: Final[str] = "MiniMusiker"


def create_event_for_booking(
    uow: SongbookUnitOfWork,
    booking: Booking,
    *,
    event_type: str = DEFAULT_EVENT_TYPE,
    access_code: int | None = None,
) -> Event:
    """Create the event for a booking together with its default container.

    A booking that already has an event returns that event; its default
    container is created if it is still missing.
    """

    if not booking.school_name.strip():
        raise ValidationError("Booking has no school name")

    repositories = uow.repositories
    if repositories.bookings.get(booking.record_id) is None:
        repositories.bookings.add(booking)
        uow.commit()

    event = repositories.events.get_by_booking(booking.record_id)
    if event is None:
        event_id = derive_event_id(booking.school_name, event_type, booking.start_date)
        event = repositories.events.get_by_event_id(event_id)
        if event is not None:
            event.booking_record_id = booking.record_id
            repositories.events.update(event)
            log.info("Linked booking %s to existing event %s", booking.simplybook_id, event_id)
        else:
            event = Event(
                event_id=event_id,
                school_name=booking.school_name,
                event_date=booking.start_date,
                legacy_booking_id=f"booking_{booking.simplybook_id}",
                access_code=access_code,
                booking_record_id=booking.record_id,
            )
            repositories.events.add(event)
            log.info("Created event %s for booking %s", event_id, booking.simplybook_id)
        uow.commit()

    ensure_default_container(uow, event)
    return event


def update_booking_contact(
    uow: SongbookUnitOfWork,
    booking_record_id: str,
    *,
    contact_name: str | None = None,
    contact_email: str | None = None,
    contact_phone: str | None = None,
) -> Booking:
    bookings = uow.repositories.bookings
    if bookings.get(booking_record_id) is None:
        raise NotFoundError(f"Booking not found: {booking_record_id}")
    bookings.update_contact(
        booking_record_id,
        contact_name=contact_name,
        contact_email=contact_email.strip().lower() if contact_email else contact_email,
        contact_phone=contact_phone,
    )
    uow.commit()
    booking = bookings.get(booking_record_id)
    if booking is None:
        raise NotFoundError(f"Booking not found: {booking_record_id}")
    return booking
