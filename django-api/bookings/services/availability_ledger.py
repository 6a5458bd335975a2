"""Capacity bookkeeping for reservation programs.

Every mutation is a pure state transition: it takes a ReservationProgram and
returns a new one, leaving the input untouched. Callers apply transitions
inside a store transaction (see BookingStore.atomic) so the read of
`current_bookings` and its update happen under the same lock.

When a program has time slots enabled, the slot is the capacity that counts;
the day row only decides whether the date is offered and whether staff
closed it.
"""

from dataclasses import replace
from datetime import date

import structlog

from bookings.domain import Capacity, DayAvailability, ReservationProgram, TimeSlot, TimeSlotKey
from bookings.domain.errors import (
    CapacityExceededError,
    DateNotOfferedError,
    InvalidBookingError,
    InvalidQuantityError,
    SlotNotOfferedError,
)

logger = structlog.get_logger(__name__)


class AvailabilityLedger:
    """Checks and mutates per-day and per-slot capacity."""

    def check_capacity(
        self,
        program: ReservationProgram,
        day: date,
        participant_count: int,
        time_slot: TimeSlotKey | None = None,
    ) -> None:
        """Verify the date (or slot) can take `participant_count` more people.

        Raises:
            InvalidQuantityError: If participant_count is below 1.
            DateNotOfferedError: If the program has no row for the date.
            InvalidBookingError: If slots are enabled and no slot was given.
            SlotNotOfferedError: If the day has no matching slot.
            CapacityExceededError: If the row is closed or too full.
        """
        if participant_count < 1:
            raise InvalidQuantityError(participant_count)
        row, slot = self._locate(program, day, time_slot)
        remaining = self._remaining(row, slot)
        if participant_count > remaining:
            logger.info(
                "capacity_rejected",
                program_id=str(program.id),
                date=day.isoformat(),
                requested=participant_count,
                remaining=remaining,
            )
            raise CapacityExceededError(day, participant_count, remaining)

    def reserve(
        self,
        program: ReservationProgram,
        day: date,
        participant_count: int,
        time_slot: TimeSlotKey | None = None,
    ) -> ReservationProgram:
        """Return the program with `participant_count` more bookings on `day`.

        The row (or slot) closes once it reaches its maximum. Not idempotent:
        each booking must reserve exactly once.
        """
        self.check_capacity(program, day, participant_count, time_slot)
        row, slot = self._locate(program, day, time_slot)
        if slot is not None:
            booked = slot.current_bookings + participant_count
            row = row.with_slot(
                replace(
                    slot,
                    current_bookings=booked,
                    is_available=booked < slot.max_participants,
                )
            )
        else:
            booked = row.current_bookings + participant_count
            row = replace(
                row,
                current_bookings=booked,
                is_available=booked < row.max_participants,
            )
        logger.debug(
            "capacity_reserved",
            program_id=str(program.id),
            date=day.isoformat(),
            time_slot=str(time_slot) if time_slot else None,
            participants=participant_count,
        )
        return program.with_day(row)

    def release(
        self,
        program: ReservationProgram,
        day: date,
        participant_count: int,
        time_slot: TimeSlotKey | None = None,
    ) -> ReservationProgram:
        """Return the program with `participant_count` fewer bookings on `day`.

        Bookings never drop below zero. A row closed only because it was full
        reopens; a row staff disabled stays closed.
        """
        if participant_count < 1:
            raise InvalidQuantityError(participant_count)
        row, slot = self._locate(program, day, time_slot)
        counter: DayAvailability | TimeSlot = slot if slot is not None else row
        booked = counter.current_bookings - participant_count
        if booked < 0:
            logger.warning(
                "capacity_release_floored",
                program_id=str(program.id),
                date=day.isoformat(),
                released=participant_count,
                booked=counter.current_bookings,
            )
            booked = 0
        released = replace(
            counter,
            current_bookings=booked,
            is_available=not counter.disabled_by_staff and booked < counter.max_participants,
        )
        if slot is not None:
            row = row.with_slot(released)
        else:
            row = released
        logger.debug(
            "capacity_released",
            program_id=str(program.id),
            date=day.isoformat(),
            time_slot=str(time_slot) if time_slot else None,
            participants=participant_count,
        )
        return program.with_day(row)

    def disable(
        self,
        program: ReservationProgram,
        day: date,
        time_slot: TimeSlotKey | None = None,
    ) -> ReservationProgram:
        """Staff closes a day, or one slot of it."""
        return self._set_staff_closed(program, day, time_slot, closed=True)

    def enable(
        self,
        program: ReservationProgram,
        day: date,
        time_slot: TimeSlotKey | None = None,
    ) -> ReservationProgram:
        """Staff reopens a day or slot; it stays closed if already full."""
        return self._set_staff_closed(program, day, time_slot, closed=False)

    def remaining(
        self,
        program: ReservationProgram,
        day: date,
        time_slot: TimeSlotKey | None = None,
    ) -> Capacity:
        row, slot = self._locate(program, day, time_slot)
        return Capacity(self._remaining(row, slot))

    def _set_staff_closed(
        self,
        program: ReservationProgram,
        day: date,
        time_slot: TimeSlotKey | None,
        closed: bool,
    ) -> ReservationProgram:
        row = self._day(program, day)
        if time_slot is None:
            counter: DayAvailability | TimeSlot = row
        else:
            counter = self._slot(row, day, time_slot)
        updated = replace(
            counter,
            disabled_by_staff=closed,
            is_available=not closed and counter.current_bookings < counter.max_participants,
        )
        logger.info(
            "availability_staff_closed" if closed else "availability_staff_reopened",
            program_id=str(program.id),
            date=day.isoformat(),
            time_slot=str(time_slot) if time_slot else None,
        )
        if time_slot is None:
            return program.with_day(updated)
        return program.with_day(row.with_slot(updated))

    def _locate(
        self,
        program: ReservationProgram,
        day: date,
        time_slot: TimeSlotKey | None,
    ) -> tuple[DayAvailability, TimeSlot | None]:
        row = self._day(program, day)
        if not program.enable_time_slots:
            return row, None
        if time_slot is None:
            raise InvalidBookingError(f"A time slot is required for {day.isoformat()}")
        return row, self._slot(row, day, time_slot)

    @staticmethod
    def _day(program: ReservationProgram, day: date) -> DayAvailability:
        row = program.day(day)
        if row is None:
            raise DateNotOfferedError(day)
        return row

    @staticmethod
    def _slot(row: DayAvailability, day: date, time_slot: TimeSlotKey) -> TimeSlot:
        slot = row.find_slot(time_slot)
        if slot is None:
            raise SlotNotOfferedError(day, time_slot)
        return slot

    @staticmethod
    def _remaining(row: DayAvailability, slot: TimeSlot | None) -> int:
        if row.disabled_by_staff:
            return 0
        if slot is not None:
            return slot.remaining
        return row.remaining
