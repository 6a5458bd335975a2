"""Booking service - creates bookings and keeps them internally consistent.

Services:
- Depend only on interfaces (stores)
- Validate domain invariants
- Perform orchestration and error mapping
- Return domain models or domain errors

A booking's participants, quantity and total must agree with each other
and with the offering. `create_booking` runs a fixed pipeline:

1. validate the request shape
2. resolve the price (the client never supplies the total)
3. reserve capacity for every selected date of a reservation, all or nothing
4. reconcile the participant list to the quantity
5. persist the record

Steps 2-5 run inside one store transaction.
"""

from collections.abc import Callable, Sequence
from dataclasses import replace
from datetime import UTC, datetime
from decimal import Decimal
from uuid import UUID, uuid4

import structlog

from bookings.domain import (
    BookingId,
    BookingRecord,
    BookingRequest,
    EventTemplate,
    Money,
    OfferingId,
    Participant,
    PriceQuote,
    ProgramId,
    RefundStatus,
    ReservationProgram,
    SelectedDate,
    TargetKind,
    TemplateId,
)
from bookings.domain.errors import (
    BookingNotFoundError,
    CapacityError,
    ConsistencyError,
    InvalidBookingError,
    InvalidIdError,
    InvalidQuantityError,
    OfferingNotFoundError,
    PriceChangedError,
    ProgramNotFoundError,
    RefundError,
    TemplateNotFoundError,
)
from bookings.services import price_resolver
from bookings.services.availability_ledger import AvailabilityLedger
from bookings.stores.interfaces import BookingStore

logger = structlog.get_logger(__name__)

PLACEHOLDER_LAST_NAME = "Pending"


def reconcile_participants(
    participants: Sequence[Participant],
    quantity: int,
    is_signing_up_for_self: bool,
) -> tuple[Participant, ...]:
    """Return exactly the participant entries a booking of `quantity` needs.

    The purchaser fills one seat when signing up for themselves, so the list
    holds `quantity - 1` entries; otherwise it holds `quantity`. Extra
    entries are dropped from the end and missing ones are filled with
    numbered placeholders.

    Raises:
        ConsistencyError: If the expected length would be negative.
    """
    expected = quantity - 1 if is_signing_up_for_self else quantity
    if expected < 0:
        raise ConsistencyError(expected)

    kept = tuple(participants[:expected])
    label = "Additional Person" if is_signing_up_for_self else "Participant"
    placeholders = tuple(
        Participant(first_name=f"{label} {number}", last_name=PLACEHOLDER_LAST_NAME)
        for number in range(len(kept) + 1, expected + 1)
    )
    return kept + placeholders


def _check_options(template: EventTemplate, participants: Sequence[Participant]) -> None:
    for person in participants:
        for selected in person.selected_options:
            category = template.option(selected.category_name)
            if category is None:
                raise InvalidBookingError(f"Unknown option category: {selected.category_name}")
            if not category.offers(selected.choice_name):
                raise InvalidBookingError(
                    f"{selected.choice_name} is not a choice for {selected.category_name}"
                )


def _utcnow() -> datetime:
    return datetime.now(UTC)


class BookingReconciler:
    """Service for creating, cancelling and refunding bookings."""

    def __init__(
        self,
        store: BookingStore,
        ledger: AvailabilityLedger | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._store = store
        self._ledger = ledger or AvailabilityLedger()
        self._clock = clock

    def quote(self, request: BookingRequest) -> PriceQuote:
        """Validate a request and return its price without side effects."""
        target_id = self._validate(request)
        if request.target_kind is TargetKind.RESERVATION:
            program = self._load_program(target_id)
            return self._price_reservation(program, request.selected_dates)
        return self._price_event(request, target_id)

    def check_capacity(self, request: BookingRequest) -> None:
        """Check, without reserving, that every selected date has room.

        Raises:
            CapacityError: If any selected date cannot take its participants.
        """
        target_id = self._validate(request)
        if request.target_kind is not TargetKind.RESERVATION:
            return
        program = self._load_program(target_id)
        for entry in request.selected_dates:
            self._ledger.check_capacity(
                program, entry.date, entry.number_of_participants, entry.time_slot
            )

    def create_booking(
        self,
        request: BookingRequest,
        payment_id: str | None = None,
        expected_total: Money | None = None,
    ) -> BookingRecord:
        """Create a booking, reserving capacity for reservation programs.

        When `expected_total` is given (the amount already charged), the
        booking is refused unless the price resolved inside the transaction
        matches it.

        Raises:
            InvalidInputError: If the request has the wrong shape.
            InvalidQuantityError: If a quantity or participant count is below 1.
            NotFoundError: If the offering does not exist.
            CapacityError: If any selected date cannot take its participants;
                no capacity is held afterwards.
            PriceChangedError: If the resolved total differs from `expected_total`.
        """
        target_id = self._validate(request)

        with self._store.atomic():
            if request.target_kind is TargetKind.RESERVATION:
                program = self._load_program(target_id, for_update=True)
                quote = self._price_reservation(program, request.selected_dates)
                self._check_total(quote, expected_total)
                program = self._reserve_all(program, request.selected_dates)
                self._store.save_program(program)
            else:
                quote = self._price_event(request, target_id)
                self._check_total(quote, expected_total)

            record = BookingRecord(
                id=BookingId(uuid4()),
                target_kind=request.target_kind,
                target_id=target_id,
                quantity=request.quantity,
                is_signing_up_for_self=request.is_signing_up_for_self,
                participants=reconcile_participants(
                    request.participants, request.quantity, request.is_signing_up_for_self
                ),
                total=quote.total,
                billing_info=request.billing_info,
                created_at=self._clock(),
                selected_dates=request.selected_dates,
                payment_id=payment_id,
            )
            self._store.save_booking(record)

        logger.info(
            "booking_created",
            booking_id=str(record.id),
            target_kind=record.target_kind.value,
            target_id=str(record.target_id),
            quantity=record.quantity,
            total=str(record.total),
        )
        return record

    def cancel_booking(self, booking_id: str) -> BookingRecord:
        """Cancel a booking and give its reserved capacity back.

        Refunds never call this; releasing capacity is a separate decision.

        Raises:
            InvalidIdError: If booking_id is not a valid UUID.
            BookingNotFoundError: If the booking does not exist.
            InvalidBookingError: If the booking was already cancelled.
        """
        parsed = self._parse_booking_id(booking_id)
        with self._store.atomic():
            record = self._get_booking(parsed, booking_id, for_update=True)
            if record.cancelled_at is not None:
                raise InvalidBookingError("Booking is already cancelled")

            if record.target_kind is TargetKind.RESERVATION:
                program = self._load_program(record.target_id, for_update=True)
                for entry in record.selected_dates:
                    program = self._ledger.release(
                        program, entry.date, entry.number_of_participants, entry.time_slot
                    )
                self._store.save_program(program)

            record = replace(record, cancelled_at=self._clock())
            self._store.save_booking(record)

        logger.info("booking_cancelled", booking_id=booking_id)
        return record

    def record_refund(
        self, booking_id: str, amount: Decimal | None = None
    ) -> BookingRecord:
        """Add a refund to a booking's refund bookkeeping.

        Without an amount the remaining refundable balance is refunded.
        Capacity is left untouched.

        Raises:
            InvalidIdError: If booking_id is not a valid UUID.
            BookingNotFoundError: If the booking does not exist.
            RefundError: If the booking is fully refunded or the amount is
                not positive or exceeds the remaining balance.
        """
        parsed = self._parse_booking_id(booking_id)
        with self._store.atomic():
            record = self._get_booking(parsed, booking_id, for_update=True)
            if record.refund_status is RefundStatus.FULL:
                raise RefundError.already_refunded()

            balance = record.total.amount - record.refund_amount.amount
            refund = balance if amount is None else Decimal(amount)
            if refund <= 0:
                raise RefundError.invalid_amount("Refund amount must be positive")
            if refund > balance:
                raise RefundError.invalid_amount("Refund exceeds the refundable balance")

            refunded = record.refund_amount.amount + refund
            record = replace(
                record,
                refund_status=(
                    RefundStatus.FULL if refunded >= record.total.amount else RefundStatus.PARTIAL
                ),
                refund_amount=Money(refunded).rounded(),
                refunded_at=self._clock(),
            )
            self._store.save_booking(record)

        logger.info(
            "refund_recorded",
            booking_id=booking_id,
            amount=str(Money(refund).rounded()),
            refund_status=record.refund_status.value,
        )
        return record

    def _validate(self, request: BookingRequest) -> UUID:
        try:
            target_id = UUID(request.target_id)
        except (AttributeError, TypeError, ValueError) as exc:
            raise InvalidIdError(request.target_id) from exc

        if request.quantity < 1:
            raise InvalidQuantityError(request.quantity)
        if not request.billing_info.has_contact:
            raise InvalidBookingError(
                "Either email address or phone number is required for contact purposes"
            )
        if not request.is_signing_up_for_self and not request.participants:
            raise InvalidBookingError("Participants are required when not signing up yourself")

        if request.target_kind is TargetKind.RESERVATION:
            if not request.selected_dates:
                raise InvalidBookingError("At least one date must be selected")
            days = [entry.date for entry in request.selected_dates]
            if len(set(days)) != len(days):
                raise InvalidBookingError("Each date can only be selected once")
            for entry in request.selected_dates:
                if entry.number_of_participants < 1:
                    raise InvalidQuantityError(entry.number_of_participants)
            participant_days = sum(
                entry.number_of_participants for entry in request.selected_dates
            )
            if request.quantity != participant_days:
                raise InvalidBookingError(
                    f"Quantity must equal the participants across selected dates ({participant_days})"
                )
        elif request.selected_dates:
            raise InvalidBookingError("Selected dates only apply to reservations")
        return target_id

    def _price_event(self, request: BookingRequest, target_id: UUID) -> PriceQuote:
        kind = request.target_kind
        if kind is TargetKind.EVENT:
            template = self._store.get_event_template(TemplateId(target_id))
            if template is None:
                raise TemplateNotFoundError(str(target_id))
            _check_options(template, request.participants)
            unit_price, discount = template.price or Money.zero(), template.discount
        else:
            offering = self._store.get_private_event(OfferingId(target_id))
            if offering is None:
                raise OfferingNotFoundError(str(target_id))
            unit_price, discount = offering.price, offering.discount

        return price_resolver.resolve_flat(
            unit_price,
            request.quantity,
            discount,
            current_participant_total=self._store.participant_total(kind, target_id),
        )

    @staticmethod
    def _check_total(quote: PriceQuote, expected_total: Money | None) -> None:
        if expected_total is not None and quote.total != expected_total:
            raise PriceChangedError(expected_total, quote.total)

    @staticmethod
    def _price_reservation(
        program: ReservationProgram, selected_dates: Sequence[SelectedDate]
    ) -> PriceQuote:
        return price_resolver.resolve_tiered(
            program.price_per_day_per_participant,
            selected_dates,
            program.day_pricing_tiers,
            program.discount,
        )

    def _reserve_all(
        self, program: ReservationProgram, selected_dates: Sequence[SelectedDate]
    ) -> ReservationProgram:
        reserved: list[SelectedDate] = []
        for entry in selected_dates:
            try:
                program = self._ledger.reserve(
                    program, entry.date, entry.number_of_participants, entry.time_slot
                )
            except CapacityError:
                for done in reversed(reserved):
                    program = self._ledger.release(
                        program, done.date, done.number_of_participants, done.time_slot
                    )
                logger.warning(
                    "reservation_rolled_back",
                    program_id=str(program.id),
                    failed_date=entry.date.isoformat(),
                    released_dates=len(reserved),
                )
                raise
            reserved.append(entry)
        return program

    def _load_program(self, program_id: UUID, for_update: bool = False) -> ReservationProgram:
        program = self._store.load_program(ProgramId(program_id), for_update=for_update)
        if program is None:
            raise ProgramNotFoundError(str(program_id))
        return program

    def _get_booking(
        self, booking_id: BookingId, raw: str, for_update: bool = False
    ) -> BookingRecord:
        record = self._store.get_booking(booking_id, for_update=for_update)
        if record is None:
            raise BookingNotFoundError(raw)
        return record

    @staticmethod
    def _parse_booking_id(booking_id: str) -> BookingId:
        try:
            return BookingId.from_string(booking_id)
        except (AttributeError, TypeError, ValueError) as exc:
            raise InvalidIdError(booking_id) from exc
