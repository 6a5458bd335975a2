"""Store interfaces (repository pattern).

Stores must be swappable and return domain models.
"""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
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


class BookingStore(ABC):
    """Interface for booking persistence operations."""

    @abstractmethod
    def atomic(self) -> AbstractContextManager[None]:
        """Run the enclosed reads and writes as one serializable unit.

        Programs loaded with `for_update=True` inside the block stay locked
        until it exits; an exception discards every write made in it.
        """
        ...

    @abstractmethod
    def get_event_template(self, template_id: TemplateId) -> EventTemplate | None:
        """Return an event template by ID, or None if not found."""
        ...

    @abstractmethod
    def get_private_event(self, offering_id: OfferingId) -> PrivateEvent | None:
        """Return a private event by ID, or None if not found."""
        ...

    @abstractmethod
    def load_program(
        self, program_id: ProgramId, *, for_update: bool = False
    ) -> ReservationProgram | None:
        """Return a reservation program with its daily availability, or None."""
        ...

    @abstractmethod
    def save_program(self, program: ReservationProgram) -> None:
        """Persist a program's definition and availability counters.

        Availability rows are only added or updated, never deleted.
        """
        ...

    @abstractmethod
    def participant_total(self, target_kind: TargetKind, target_id: UUID) -> int:
        """Return the summed quantity of all bookings for an offering."""
        ...

    @abstractmethod
    def save_booking(self, record: BookingRecord) -> None:
        """Insert or update a booking record."""
        ...

    @abstractmethod
    def get_booking(
        self, booking_id: BookingId, *, for_update: bool = False
    ) -> BookingRecord | None:
        """Return a booking by ID, or None if not found.

        With `for_update=True` the booking stays locked until the enclosing
        `atomic()` block exits.
        """
        ...
