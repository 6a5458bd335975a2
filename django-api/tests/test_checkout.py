"""Tests for paid checkout ordering and compensation.

Run with: pytest tests/test_checkout.py -v
"""

from collections.abc import Callable
from dataclasses import replace
from datetime import date
from decimal import Decimal

import pytest

from bookings.domain import DiscountType, EventDiscount, Money, TargetKind
from bookings.domain.errors import (
    CapacityExceededError,
    PaymentFailedError,
    PriceChangedError,
    TemplateNotFoundError,
)
from bookings.payments import PaymentProcessor, PaymentResult, PayAtStudioProcessor
from bookings.services.booking_reconciler import BookingReconciler
from bookings.services.checkout import CheckoutService
from bookings.stores.memory_store import InMemoryBookingStore
from factories import make_event_request, make_program, make_reservation_request, make_template

DAY = date(2025, 3, 1)


class RecordingProcessor(PaymentProcessor):
    """Processor double that records charges and refunds."""

    def __init__(self, succeed: bool = True, on_charge: Callable[[], None] | None = None) -> None:
        self.succeed = succeed
        self.on_charge = on_charge
        self.charges: list[Money] = []
        self.refunds: list[tuple[str, Money]] = []

    def authorize_and_capture(self, amount: Money, payment_token: str) -> PaymentResult:
        self.charges.append(amount)
        if self.on_charge is not None:
            self.on_charge()
        if not self.succeed:
            return PaymentResult(success=False, error="Card declined")
        return PaymentResult(success=True, payment_id=f"pay-{len(self.charges)}")

    def refund(self, payment_id: str, amount: Money) -> PaymentResult:
        self.refunds.append((payment_id, amount))
        return PaymentResult(success=True, payment_id=payment_id)


class RacingReconciler(BookingReconciler):
    """Fills the day after the capacity pre-check, as a concurrent booking would."""

    def __init__(self, store, program_id) -> None:
        super().__init__(store)
        self._program_id = program_id

    def check_capacity(self, request):
        super().check_capacity(request)
        program = self._store.load_program(self._program_id)
        row = program.day(DAY)
        self._store.save_program(
            program.with_day(replace(row, current_bookings=row.max_participants, is_available=False))
        )


class TestCheckout:
    """Tests for CheckoutService.checkout."""

    def test_charges_resolved_total_then_books(self):
        """The processor is charged the server-side total and the booking keeps the payment ID."""
        program = make_program()
        store = InMemoryBookingStore(programs=[program])
        processor = RecordingProcessor()

        record = CheckoutService(BookingReconciler(store), processor).checkout(
            make_reservation_request(program, [(DAY, 2)]), "tok"
        )

        assert processor.charges == [Money(Decimal("100.00"))]
        assert record.payment_id == "pay-1"
        assert store.load_program(program.id).day(DAY).current_bookings == 2

    def test_declined_payment_books_nothing(self):
        """A declined charge leaves capacity and bookings untouched."""
        program = make_program()
        store = InMemoryBookingStore(programs=[program])

        with pytest.raises(PaymentFailedError):
            CheckoutService(BookingReconciler(store), RecordingProcessor(succeed=False)).checkout(
                make_reservation_request(program, [(DAY, 2)]), "tok"
            )

        assert store.load_program(program.id).day(DAY).current_bookings == 0

    def test_full_day_is_never_charged(self):
        """The capacity pre-check runs before any charge."""
        program = make_program(max_participants=1)
        processor = RecordingProcessor()

        with pytest.raises(CapacityExceededError):
            CheckoutService(
                BookingReconciler(InMemoryBookingStore(programs=[program])), processor
            ).checkout(make_reservation_request(program, [(DAY, 2)]), "tok")

        assert processor.charges == []

    def test_lost_race_refunds_charge(self):
        """If capacity disappears after the charge, the payment is refunded."""
        program = make_program()
        store = InMemoryBookingStore(programs=[program])
        reconciler = RacingReconciler(store, program.id)
        processor = RecordingProcessor()

        with pytest.raises(CapacityExceededError):
            CheckoutService(reconciler, processor).checkout(
                make_reservation_request(program, [(DAY, 2)]), "tok"
            )

        assert processor.refunds == [("pay-1", Money(Decimal("100.00")))]

    def test_price_change_after_charge_refunds(self):
        """A booking is refused and refunded when its price moved after the charge."""
        template = make_template(
            price=Money(Decimal("25.00")),
            discount=EventDiscount(
                type=DiscountType.PERCENTAGE, value=Decimal("20"), min_participants=10
            ),
        )
        store = InMemoryBookingStore(templates=[template])
        reconciler = BookingReconciler(store)
        reconciler.create_booking(make_event_request(template, quantity=5))

        def concurrent_booking():
            reconciler.create_booking(make_event_request(template, quantity=3))

        processor = RecordingProcessor(on_charge=concurrent_booking)

        with pytest.raises(PriceChangedError):
            CheckoutService(reconciler, processor).checkout(
                make_event_request(template, quantity=3), "tok"
            )

        assert processor.charges == [Money(Decimal("75.00"))]
        assert processor.refunds == [("pay-1", Money(Decimal("75.00")))]
        assert store.participant_total(TargetKind.EVENT, template.id.value) == 8

    def test_any_failure_after_charge_refunds(self):
        """The charge is refunded when booking fails for a reason other than capacity."""
        template = make_template()
        store = InMemoryBookingStore(templates=[template])
        processor = RecordingProcessor(on_charge=lambda: store._templates.pop(template.id))

        with pytest.raises(TemplateNotFoundError):
            CheckoutService(BookingReconciler(store), processor).checkout(
                make_event_request(template, quantity=2), "tok"
            )

        assert processor.refunds == [("pay-1", Money(Decimal("40.00")))]


class TestPayAtStudioProcessor:
    """Tests for the default processor."""

    def test_requires_token(self):
        """An empty token is declined."""
        result = PayAtStudioProcessor().authorize_and_capture(Money(10), "")

        assert not result.success

    def test_issues_payment_id(self):
        """A token yields a studio payment ID."""
        result = PayAtStudioProcessor().authorize_and_capture(Money(10), "front-desk")

        assert result.success
        assert result.payment_id.startswith("studio-")
