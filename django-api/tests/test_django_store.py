"""Tests for the Django ORM store.

Run with: pytest tests/test_django_store.py -v
"""

from datetime import UTC, date, datetime, time
from decimal import Decimal
from uuid import uuid4

import pytest
from django.contrib import admin
from django.core.exceptions import ValidationError
from django.db import IntegrityError

from bookings import models
from bookings.domain import (
    DiscountType,
    Money,
    OfferingId,
    ProgramDiscount,
    ProgramId,
    RecurrencePattern,
    TargetKind,
    TemplateId,
    TimeSlotKey,
)
from bookings.services.availability_ledger import AvailabilityLedger
from bookings.services.booking_reconciler import BookingReconciler
from bookings.services.program_builder import SlotConfig, create_program
from bookings.stores.django_store import DjangoBookingStore
from factories import make_participant, make_reservation_request

DAY_1, DAY_2 = date(2025, 3, 1), date(2025, 3, 2)
NOW = datetime(2025, 2, 1, 12, 0, tzinfo=UTC)


@pytest.fixture
def store() -> DjangoBookingStore:
    return DjangoBookingStore()


def _saved_program(store, **kwargs):
    program = create_program(
        "Spring Camp", DAY_1, DAY_2, Money(Decimal("50.00")), kwargs.pop("max_per_day", 10), **kwargs
    )
    with store.atomic():
        store.save_program(program)
    return program


@pytest.mark.django_db
class TestEventTemplates:
    """Tests for loading templates and private events."""

    def test_template_round_trip(self, store):
        """A template row loads as a domain template."""
        row = models.EventTemplate.objects.create(
            name="Evening Yoga",
            price=Decimal("18.00"),
            start_date=date(2025, 1, 6),
            start_time=time(18, 0),
            end_time=time(19, 0),
            is_recurring=True,
            recurring_pattern="weekly",
            recurring_end_date=date(2025, 3, 31),
            exclude_dates=["2025-01-20"],
            discount_type="percentage",
            discount_value=Decimal("10"),
            discount_min_participants=5,
        )

        template = store.get_event_template(TemplateId(row.id))

        assert template.recurring_pattern is RecurrencePattern.WEEKLY
        assert template.exclude_dates == frozenset({date(2025, 1, 20)})
        assert template.price == Money(Decimal("18.00"))
        assert template.discount.is_complete

    def test_template_options_loaded(self, store):
        """Option categories load with their choice names."""
        row = models.EventTemplate.objects.create(
            name="Wheel Throwing",
            start_date=date(2025, 1, 6),
            start_time=time(18, 0),
            options=[
                {
                    "category_name": "Clay",
                    "category_description": "Body to throw with",
                    "choices": [{"name": "Stoneware"}, {"name": "Porcelain"}],
                }
            ],
        )

        template = store.get_event_template(TemplateId(row.id))

        assert template.option("Clay").choices == ("Stoneware", "Porcelain")
        assert template.option("Clay").description == "Body to throw with"

    def test_missing_template(self, store):
        """A missing template loads as None."""
        assert store.get_event_template(TemplateId(uuid4())) is None

    def test_private_event_without_discount(self, store):
        """A private event with no discount fields has no discount."""
        row = models.PrivateEvent.objects.create(name="Party", price=Decimal("150.00"))

        offering = store.get_private_event(OfferingId(row.id))

        assert offering.price == Money(Decimal("150.00"))
        assert offering.discount is None


@pytest.mark.django_db
class TestPrograms:
    """Tests for saving and loading programs."""

    def test_program_round_trip(self, store):
        """Programs come back with their rows, slots, tiers and discount."""
        program = _saved_program(
            store,
            max_per_day=None,
            slot_config=SlotConfig(60, 3, time(9, 0), time(11, 0)),
            discount=ProgramDiscount(
                type=DiscountType.FIXED, value=Decimal("5.00"), min_days=2, name="Two-day"
            ),
        )

        loaded = store.load_program(program.id)

        assert loaded.enable_time_slots
        assert [row.date for row in loaded.daily_availability] == [DAY_1, DAY_2]
        assert len(loaded.day(DAY_1).time_slots) == 2
        assert loaded.discount == program.discount

    def test_save_updates_counters(self, store):
        """Saving a reserved program updates the stored counters."""
        program = _saved_program(store)
        reserved = AvailabilityLedger().reserve(program, DAY_1, 4)

        with store.atomic():
            store.save_program(reserved)

        assert models.DayAvailability.objects.get(program_id=program.id.value, date=DAY_1).current_bookings == 4

    def test_slot_counters_saved(self, store):
        """Slot bookings are persisted on the slot row."""
        program = _saved_program(
            store, max_per_day=None, slot_config=SlotConfig(60, 3, time(9, 0), time(11, 0))
        )
        reserved = AvailabilityLedger().reserve(program, DAY_1, 3, TimeSlotKey(time(9, 0)))

        with store.atomic():
            store.save_program(reserved)

        slot = models.TimeSlot.objects.get(day__program_id=program.id.value, day__date=DAY_1, start_time=time(9, 0))
        assert slot.current_bookings == 3
        assert not slot.is_available

    def test_missing_program(self, store):
        """A missing program loads as None."""
        assert store.load_program(ProgramId(uuid4())) is None

    def test_database_rejects_overbooking(self, store):
        """The check constraint refuses counters above the maximum."""
        program = _saved_program(store)

        with pytest.raises(IntegrityError):
            models.DayAvailability.objects.filter(program_id=program.id.value, date=DAY_1).update(
                current_bookings=11
            )

    def test_clean_rejects_max_below_bookings(self, store):
        """Lowering a day's maximum below its bookings fails validation."""
        program = _saved_program(store)
        with store.atomic():
            store.save_program(AvailabilityLedger().reserve(program, DAY_1, 4))
        row = models.DayAvailability.objects.get(program_id=program.id.value, date=DAY_1)

        row.max_participants = 3

        with pytest.raises(ValidationError):
            row.full_clean()


@pytest.mark.django_db
class TestBookings:
    """Tests for booking records."""

    def test_booking_round_trip(self, store):
        """A reservation booking persists its dates, participants and billing info."""
        program = _saved_program(store)
        request = make_reservation_request(
            program,
            [(DAY_1, 2), (DAY_2, 1)],
            is_signing_up_for_self=False,
            participants=(make_participant(1), make_participant(2)),
        )

        record = BookingReconciler(store, clock=lambda: NOW).create_booking(request)
        loaded = store.get_booking(record.id)

        assert loaded == record
        assert store.load_program(program.id).day(DAY_1).current_bookings == 2

    def test_participant_total_skips_cancelled(self, store):
        """Cancelled bookings do not count toward the participant total."""
        program = _saved_program(store)
        reconciler = BookingReconciler(store, clock=lambda: NOW)
        kept = reconciler.create_booking(make_reservation_request(program, [(DAY_1, 2)]))
        dropped = reconciler.create_booking(make_reservation_request(program, [(DAY_1, 3)]))

        reconciler.cancel_booking(str(dropped.id))

        assert store.participant_total(TargetKind.RESERVATION, program.id.value) == kept.quantity

    def test_locked_read_inside_transaction(self, store):
        """A booking can be read under a row lock inside a transaction."""
        program = _saved_program(store)
        record = BookingReconciler(store, clock=lambda: NOW).create_booking(
            make_reservation_request(program, [(DAY_1, 1)])
        )

        with store.atomic():
            locked = store.get_booking(record.id, for_update=True)

        assert locked == record


class TestAdmin:
    """Tests for the staff admin."""

    def test_availability_flags_read_only(self):
        """Counters and availability flags are not editable in the admin."""
        readonly = admin.site._registry[models.DayAvailability].readonly_fields

        assert {"current_bookings", "is_available", "disabled_by_staff"} <= set(readonly)

    def test_inlines_read_only(self):
        """Day and slot inlines do not edit counters or flags either."""
        program_admin = admin.site._registry[models.ReservationProgram]
        day_admin = admin.site._registry[models.DayAvailability]

        for inline in (*program_admin.inlines, *day_admin.inlines):
            assert {"current_bookings", "is_available", "disabled_by_staff"} <= set(
                inline.readonly_fields
            )
