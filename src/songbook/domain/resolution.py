"""Event identity resolution.

Two booking systems minted different identifiers for the same event and both
stay in use. Resolution walks an ordered list of strategies; each either returns
the event or falls through. New identifier schemes are added by extending
``DEFAULT_STRATEGIES``.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Final

from songbook.domain.errors import NotFoundError, OwnershipError

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from songbook.domain.model import Event
    from songbook.domain.ports.persistence import BookingDirectory, EventRepository

log = logging.getLogger(__name__)

RECORD_ID_PATTERN: Final = re.compile(r"^rec[a-zA-Z0-9]{14}$")
EVENT_ID_PATTERN: Final = re.compile(r"^evt_[a-z0-9_]+_[a-f0-9]{6}$")
LEGACY_BOOKING_PATTERN: Final = re.compile(r"^booking_")
NUMERIC_PATTERN: Final = re.compile(r"^\d+$")
# access codes are stored in an integer column
ACCESS_CODE_PATTERN: Final = re.compile(r"^[0-9]{1,9}$")


class ResolvedVia(StrEnum):
    RECORD_ID = "record_id"
    EVENT_ID = "event_id"
    LEGACY_BOOKING_ID = "legacy_booking_id"
    SIMPLYBOOK_ID = "simplybook_id"
    ACCESS_CODE = "access_code"


@dataclass(slots=True, frozen=True)
class ResolvedEvent:
    """Canonical identity plus the store handle, so callers never re-resolve."""

    event_id: str
    record_id: str
    resolved_via: ResolvedVia
    event: Event


type Lookup = Callable[[str, EventRepository, BookingDirectory], Event | None]


@dataclass(slots=True, frozen=True)
class ResolutionStrategy:
    name: ResolvedVia
    applies: Callable[[str], bool]
    lookup: Lookup


def _by_record_id(identifier: str, events: EventRepository, _: BookingDirectory) -> Event | None:
    return events.get(identifier)


def _by_event_id(identifier: str, events: EventRepository, _: BookingDirectory) -> Event | None:
    return events.get_by_event_id(identifier)


def _by_legacy_booking_id(
    identifier: str, events: EventRepository, _: BookingDirectory
) -> Event | None:
    return events.get_by_legacy_booking_id(identifier)


def _by_simplybook_id(
    identifier: str, events: EventRepository, bookings: BookingDirectory
) -> Event | None:
    booking = bookings.get_by_simplybook_id(identifier)
    if booking is None:
        return None
    return events.get_by_booking(booking.record_id)


def _by_access_code(identifier: str, events: EventRepository, _: BookingDirectory) -> Event | None:
    return events.get_by_access_code(int(identifier))


def _is_canonical_candidate(identifier: str) -> bool:
    # canonical ids minted before the evt_ scheme never matched a pattern
    return not NUMERIC_PATTERN.match(identifier)


DEFAULT_STRATEGIES: Final[tuple[ResolutionStrategy, ...]] = (
    ResolutionStrategy(ResolvedVia.RECORD_ID, lambda i: bool(RECORD_ID_PATTERN.match(i)), _by_record_id),
    ResolutionStrategy(ResolvedVia.EVENT_ID, _is_canonical_candidate, _by_event_id),
    ResolutionStrategy(
        ResolvedVia.LEGACY_BOOKING_ID,
        lambda i: bool(LEGACY_BOOKING_PATTERN.match(i)),
        _by_legacy_booking_id,
    ),
    ResolutionStrategy(ResolvedVia.SIMPLYBOOK_ID, lambda i: bool(NUMERIC_PATTERN.match(i)), _by_simplybook_id),
    ResolutionStrategy(
        ResolvedVia.ACCESS_CODE, lambda i: bool(ACCESS_CODE_PATTERN.match(i)), _by_access_code
    ),
)


def detect_identifier_type(identifier: str) -> ResolvedVia | None:
    """Classify an identifier without touching the store.

    Numeric identifiers report ``SIMPLYBOOK_ID`` even though they may turn out to
    be access codes.
    """

    if RECORD_ID_PATTERN.match(identifier):
        return ResolvedVia.RECORD_ID
    if EVENT_ID_PATTERN.match(identifier):
        return ResolvedVia.EVENT_ID
    if LEGACY_BOOKING_PATTERN.match(identifier):
        return ResolvedVia.LEGACY_BOOKING_ID
    if NUMERIC_PATTERN.match(identifier):
        return ResolvedVia.SIMPLYBOOK_ID
    return None


class EventResolver:
    def __init__(
        self,
        events: EventRepository,
        bookings: BookingDirectory,
        strategies: Sequence[ResolutionStrategy] = DEFAULT_STRATEGIES,
    ) -> None:
        self.events = events
        self.bookings = bookings
        self.strategies = tuple(strategies)

    def resolve(self, identifier: str) -> ResolvedEvent:
        """Return the canonical identity for ``identifier`` or raise ``NotFoundError``."""

        candidate = identifier.strip()
        if not candidate:
            raise NotFoundError("Event identifier is empty")

        for strategy in self.strategies:
            if not strategy.applies(candidate):
                continue
            event = strategy.lookup(candidate, self.events, self.bookings)
            if event is None:
                continue
            log.info(
                "Resolved %r via %s -> %s (%s)",
                candidate,
                strategy.name,
                event.event_id,
                event.record_id,
            )
            return ResolvedEvent(
                event_id=event.event_id,
                record_id=event.record_id,
                resolved_via=strategy.name,
                event=event,
            )

        log.warning("Could not resolve event identifier %r", candidate)
        raise NotFoundError(f"Event not found: {candidate}")

    def resolve_for_teacher(self, identifier: str, teacher_email: str) -> ResolvedEvent:
        """Resolve and require the teacher to own one of the event's bookings."""

        resolved = self.resolve(identifier)
        if not self.teacher_has_access(resolved.event, teacher_email):
            raise OwnershipError(f"No access to event {resolved.event_id}")
        return resolved

    def teacher_has_access(self, event: Event, teacher_email: str) -> bool:
        if not teacher_email.strip():
            return False
        for booking in self.bookings.get_for_teacher_email(teacher_email):
            if booking.record_id == event.booking_record_id:
                return True
            linked = self.events.get_by_booking(booking.record_id)
            if linked is not None and linked.record_id == event.record_id:
                return True
        return False
