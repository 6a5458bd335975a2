"""In-process implementation of the BookingStore.

Used for tests and for running the engine without a database. A single
re-entrant lock serializes `atomic` blocks, which gives the same
check-then-reserve guarantee as a locking database transaction.
"""

import threading
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from uuid import UUID

from bookings.domain import (
    BookingId,
    BookingRecord,
    EventTemplate,
    OfferingId,
    PrivateEvent,
    ProgramId,
    ReservationProgram,
    TargetKind,
    TemplateId,
)
from bookings.stores.interfaces import BookingStore


class InMemoryBookingStore(BookingStore):
    """Dictionary-backed store with snapshot rollback."""

    def __init__(
        self,
        templates: Iterable[EventTemplate] = (),
        private_events: Iterable[PrivateEvent] = (),
        programs: Iterable[ReservationProgram] = (),
        bookings: Iterable[BookingRecord] = (),
    ) -> None:
        self._lock = threading.RLock()
        self._templates = {template.id: template for template in templates}
        self._private_events = {event.id: event for event in private_events}
        self._programs = {program.id: program for program in programs}
        self._bookings = {booking.id: booking for booking in bookings}

    @contextmanager
    def atomic(self) -> Iterator[None]:
        with self._lock:
            programs = dict(self._programs)
            bookings = dict(self._bookings)
            try:
                yield
            except BaseException:
                self._programs = programs
                self._bookings = bookings
                raise

    def get_event_template(self, template_id: TemplateId) -> EventTemplate | None:
        return self._templates.get(template_id)

    def get_private_event(self, offering_id: OfferingId) -> PrivateEvent | None:
        return self._private_events.get(offering_id)

    def load_program(
        self, program_id: ProgramId, *, for_update: bool = False
    ) -> ReservationProgram | None:
        return self._programs.get(program_id)

    def save_program(self, program: ReservationProgram) -> None:
        with self._lock:
            self._programs[program.id] = program

    def participant_total(self, target_kind: TargetKind, target_id: UUID) -> int:
        return sum(
            booking.quantity
            for booking in self._bookings.values()
            if booking.target_kind is target_kind
            and booking.target_id == target_id
            and booking.cancelled_at is None
        )

    def save_booking(self, record: BookingRecord) -> None:
        with self._lock:
            self._bookings[record.id] = record

    def get_booking(
        self, booking_id: BookingId, *, for_update: bool = False
    ) -> BookingRecord | None:
        return self._bookings.get(booking_id)
