"""Builders for domain objects used across the test suite."""

from datetime import date, time
from decimal import Decimal
from uuid import uuid4

from bookings.domain import (
    BillingInfo,
    BookingRequest,
    DayAvailability,
    EventTemplate,
    Money,
    Participant,
    ProgramId,
    RecurrencePattern,
    ReservationProgram,
    SelectedDate,
    TargetKind,
    TemplateId,
    TimeSlot,
)

def make_template(**overrides) -> EventTemplate:
    fields = {
        "id": TemplateId(uuid4()),
        "name": "Morning Flow",
        "start_date": date(2025, 1, 6),
        "start_time": time(9, 0),
        "end_time": time(10, 0),
        "price": Money(Decimal("20.00")),
    }
    fields.update(overrides)
    return EventTemplate(**fields)


def make_weekly_template(**overrides) -> EventTemplate:
    fields = {
        "is_recurring": True,
        "recurring_pattern": RecurrencePattern.WEEKLY,
        "recurring_end_date": date(2025, 1, 27),
    }
    fields.update(overrides)
    return make_template(**fields)


def make_program(
    days: list[date] | None = None,
    max_participants: int = 10,
    **overrides,
) -> ReservationProgram:
    days = days or [date(2025, 3, 1), date(2025, 3, 2), date(2025, 3, 3)]
    fields = {
        "id": ProgramId(uuid4()),
        "name": "Spring Camp",
        "start_date": days[0],
        "end_date": days[-1],
        "price_per_day_per_participant": Money(Decimal("50.00")),
        "daily_availability": tuple(
            DayAvailability(date=day, max_participants=max_participants) for day in days
        ),
    }
    fields.update(overrides)
    return ReservationProgram(**fields)


def make_slotted_program(
    day: date = date(2025, 3, 1), max_per_slot: int = 4, **overrides
) -> ReservationProgram:
    slots = (
        TimeSlot(start_time=time(9, 0), end_time=time(10, 0), max_participants=max_per_slot),
        TimeSlot(start_time=time(10, 0), end_time=time(11, 0), max_participants=max_per_slot),
    )
    fields = {
        "daily_availability": (
            DayAvailability(date=day, max_participants=max_per_slot, time_slots=slots),
        ),
        "enable_time_slots": True,
        "slot_duration_minutes": 60,
    }
    fields.update(overrides)
    return make_program(days=[day], **fields)


def make_billing(**overrides) -> BillingInfo:
    fields = {
        "first_name": "Ada",
        "last_name": "Lovelace",
        "address_line1": "1 Main St",
        "city": "Springfield",
        "state_province": "IL",
        "postal_code": "62701",
        "country": "US",
        "email_address": "ada@example.com",
    }
    fields.update(overrides)
    return BillingInfo(**fields)


def make_reservation_request(
    program: ReservationProgram, selected: list[tuple[date, int]], **overrides
) -> BookingRequest:
    fields = {
        "target_kind": TargetKind.RESERVATION,
        "target_id": str(program.id),
        "quantity": sum(count for _, count in selected),
        "is_signing_up_for_self": True,
        "billing_info": make_billing(),
        "selected_dates": tuple(
            SelectedDate(date=day, number_of_participants=count) for day, count in selected
        ),
    }
    fields.update(overrides)
    return BookingRequest(**fields)


def make_event_request(template: EventTemplate, quantity: int = 1, **overrides) -> BookingRequest:
    fields = {
        "target_kind": TargetKind.EVENT,
        "target_id": str(template.id),
        "quantity": quantity,
        "is_signing_up_for_self": True,
        "billing_info": make_billing(),
    }
    fields.update(overrides)
    return BookingRequest(**fields)


def make_participant(number: int) -> Participant:
    return Participant(first_name=f"Guest{number}", last_name="Smith")
