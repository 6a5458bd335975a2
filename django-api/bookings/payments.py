"""Payment processor boundary.

The engine only needs two things from a payment provider: take money for a
resolved total, and give it back when a booking cannot be completed.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from uuid import uuid4

from django.conf import settings
from django.utils.module_loading import import_string

from bookings.domain import Money


@dataclass(frozen=True)
class PaymentResult:
    """Outcome of a payment provider call."""

    success: bool
    payment_id: str | None = None
    error: str | None = None


class PaymentProcessor(ABC):
    """Interface for payment providers."""

    @abstractmethod
    def authorize_and_capture(self, amount: Money, payment_token: str) -> PaymentResult:
        """Charge `amount` using a client-side payment token."""
        ...

    @abstractmethod
    def refund(self, payment_id: str, amount: Money) -> PaymentResult:
        """Return `amount` of a previous charge."""
        ...


class PayAtStudioProcessor(PaymentProcessor):
    """Records bookings that are paid in person at the studio.

    Nothing is charged online; the returned ID ties the booking to the
    front-desk payment.
    """

    def authorize_and_capture(self, amount: Money, payment_token: str) -> PaymentResult:
        if not payment_token:
            return PaymentResult(success=False, error="Missing payment token")
        return PaymentResult(success=True, payment_id=f"studio-{uuid4().hex}")

    def refund(self, payment_id: str, amount: Money) -> PaymentResult:
        return PaymentResult(success=True, payment_id=payment_id)


def get_payment_processor() -> PaymentProcessor:
    """Instantiate the processor class named in settings.BOOKINGS."""
    return import_string(settings.BOOKINGS["PAYMENT_PROCESSOR"])()
