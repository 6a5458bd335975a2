"""Checkout: charge first, then book.

Capacity is never held for an unpaid booking, and a failed payment never
leads to a reservation. Capacity is checked before charging so customers
are rarely charged for a full day; if a concurrent booking takes the last
spots between that check and the reservation, or anything else stops the
booking after the charge, the charge is refunded. The booking is refused
when its price no longer matches the amount charged.
"""

import structlog

from bookings.domain import BookingRecord, BookingRequest
from bookings.domain.errors import PaymentFailedError
from bookings.payments import PaymentProcessor
from bookings.services.booking_reconciler import BookingReconciler

logger = structlog.get_logger(__name__)


class CheckoutService:
    """Service for paid booking creation."""

    def __init__(self, reconciler: BookingReconciler, processor: PaymentProcessor) -> None:
        self._reconciler = reconciler
        self._processor = processor

    def checkout(self, request: BookingRequest, payment_token: str) -> BookingRecord:
        """Charge the resolved total and create the booking.

        Raises:
            InvalidInputError: If the request has the wrong shape.
            CapacityError: If a selected date is full; any charge is refunded.
            PriceChangedError: If the price moved after the charge; the charge
                is refunded.
            PaymentFailedError: If the processor declines; nothing is booked.
        """
        quote = self._reconciler.quote(request)
        self._reconciler.check_capacity(request)

        payment = self._processor.authorize_and_capture(quote.total, payment_token)
        if not payment.success:
            logger.warning(
                "payment_failed",
                target_id=request.target_id,
                amount=str(quote.total),
                error=payment.error,
            )
            raise PaymentFailedError(payment.error or "Payment was declined")

        try:
            record = self._reconciler.create_booking(
                request, payment_id=payment.payment_id, expected_total=quote.total
            )
        except Exception as exc:
            refund = self._processor.refund(payment.payment_id, quote.total)
            logger.warning(
                "payment_compensated",
                payment_id=payment.payment_id,
                amount=str(quote.total),
                refunded=refund.success,
                reason=type(exc).__name__,
            )
            raise
        return record
