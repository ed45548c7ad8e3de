from __future__ import annotations

import re
from typing import TYPE_CHECKING

import pytest

from songbook.domain.containers import DEFAULT_CONTAINER_NAME
from songbook.domain.errors import NotFoundError, ValidationError
from songbook.domain.intake import create_event_for_booking, update_booking_contact
from tests.helpers.events import make_booking

if TYPE_CHECKING:
    from collections.abc import Callable

    from songbook.adapters.sqlalchemy.unit_of_work import SqlAlchemyUnitOfWork
    from songbook.domain.model import Event


def test_event_intake_creates_event_and_default_container(
    sqlite_unit_of_work: Callable[[], SqlAlchemyUnitOfWork], event: Event
) -> None:
    with sqlite_unit_of_work() as uow:
        containers = uow.repositories.records.list_containers(event)
        booking = uow.repositories.bookings.get_by_simplybook_id("4711")

    assert re.fullmatch(r"evt_calder_high_minimusiker_20251120_[0-9a-f]{6}", event.event_id)
    assert event.legacy_booking_id == "booking_4711"
    assert event.access_code == 123456
    assert booking is not None
    assert event.booking_record_id == booking.record_id
    assert [(c.name, c.is_default) for c in containers] == [(DEFAULT_CONTAINER_NAME, True)]


def test_event_intake_is_idempotent(
    sqlite_unit_of_work: Callable[[], SqlAlchemyUnitOfWork], event: Event
) -> None:
    with sqlite_unit_of_work() as uow:
        booking = uow.repositories.bookings.get_by_simplybook_id("4711")
        assert booking is not None
        again = create_event_for_booking(uow, booking)
        containers = uow.repositories.records.list_containers(event)

    assert again.record_id == event.record_id
    assert len(containers) == 1


def test_event_intake_requires_school_name(
    sqlite_unit_of_work: Callable[[], SqlAlchemyUnitOfWork],
) -> None:
    with sqlite_unit_of_work() as uow, pytest.raises(ValidationError):
        create_event_for_booking(uow, make_booking("5000", school_name="  "))


def test_update_booking_contact_cascades_given_fields(
    sqlite_unit_of_work: Callable[[], SqlAlchemyUnitOfWork], event: Event
) -> None:
    assert event.booking_record_id is not None
    with sqlite_unit_of_work() as uow:
        updated = update_booking_contact(
            uow,
            event.booking_record_id,
            contact_email=" New.Teacher@Calder.example ",
            contact_phone="+44 1234",
        )
        with pytest.raises(NotFoundError):
            update_booking_contact(uow, "recMissingBooking0", contact_name="x")

    assert updated.contact_email == "new.teacher@calder.example"
    assert updated.contact_phone == "+44 1234"
    assert updated.contact_name == "Ms. Frizzle"
