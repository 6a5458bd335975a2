"""Domain error codes for the bookings module."""

from dataclasses import dataclass
from datetime import date
from enum import Enum


class ErrorCode(Enum):
    """Domain error codes."""

    INVALID_ID = "INVALID_ID"
    INVALID_TEMPLATE = "INVALID_TEMPLATE"
    INVALID_BOOKING = "INVALID_BOOKING"
    INVALID_WINDOW = "INVALID_WINDOW"
    TEMPLATE_NOT_FOUND = "TEMPLATE_NOT_FOUND"
    PROGRAM_NOT_FOUND = "PROGRAM_NOT_FOUND"
    OFFERING_NOT_FOUND = "OFFERING_NOT_FOUND"
    BOOKING_NOT_FOUND = "BOOKING_NOT_FOUND"
    DATE_NOT_OFFERED = "DATE_NOT_OFFERED"
    SLOT_NOT_OFFERED = "SLOT_NOT_OFFERED"
    CAPACITY_EXCEEDED = "CAPACITY_EXCEEDED"
    INVALID_QUANTITY = "INVALID_QUANTITY"
    PARTICIPANT_MISMATCH = "PARTICIPANT_MISMATCH"
    PAYMENT_FAILED = "PAYMENT_FAILED"
    PRICE_CHANGED = "PRICE_CHANGED"
    ALREADY_REFUNDED = "ALREADY_REFUNDED"
    INVALID_REFUND = "INVALID_REFUND"


@dataclass(frozen=True)
class DomainError(Exception):
    """Base domain error with code and user-safe message."""

    code: ErrorCode
    message: str

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class InvalidInputError(DomainError):
    """Malformed input, rejected before any side effect."""


class NotFoundError(DomainError):
    """A referenced aggregate does not exist."""


class CapacityError(DomainError):
    """A capacity check or mutation was refused; nothing was changed."""


class PricingError(DomainError):
    """A price could not be resolved."""


class InvalidIdError(InvalidInputError):
    """Raised when an identifier is not a valid UUID."""

    def __init__(self, value: str = "") -> None:
        super().__init__(
            code=ErrorCode.INVALID_ID,
            message="Invalid ID format",
        )
        self.value = value


class InvalidTemplateError(InvalidInputError):
    """Raised when an event template or program definition is malformed."""

    def __init__(self, reason: str) -> None:
        super().__init__(code=ErrorCode.INVALID_TEMPLATE, message=reason)


class InvalidBookingError(InvalidInputError):
    """Raised when a booking request has the wrong shape."""

    def __init__(self, reason: str) -> None:
        super().__init__(code=ErrorCode.INVALID_BOOKING, message=reason)


class InvalidWindowError(InvalidInputError):
    """Raised when an expansion window ends before it starts."""

    def __init__(self, window_start: date, window_end: date) -> None:
        super().__init__(
            code=ErrorCode.INVALID_WINDOW,
            message="Window end is before window start",
        )
        self.window_start = window_start
        self.window_end = window_end


class TemplateNotFoundError(NotFoundError):
    def __init__(self, template_id: str) -> None:
        super().__init__(
            code=ErrorCode.TEMPLATE_NOT_FOUND,
            message="Event not found",
        )
        self.template_id = template_id


class ProgramNotFoundError(NotFoundError):
    def __init__(self, program_id: str) -> None:
        super().__init__(
            code=ErrorCode.PROGRAM_NOT_FOUND,
            message="Reservation program not found",
        )
        self.program_id = program_id


class OfferingNotFoundError(NotFoundError):
    def __init__(self, offering_id: str) -> None:
        super().__init__(
            code=ErrorCode.OFFERING_NOT_FOUND,
            message="Private event not found",
        )
        self.offering_id = offering_id


class BookingNotFoundError(NotFoundError):
    def __init__(self, booking_id: str) -> None:
        super().__init__(
            code=ErrorCode.BOOKING_NOT_FOUND,
            message="Booking not found",
        )
        self.booking_id = booking_id


class DateNotOfferedError(CapacityError):
    """Raised when a program has no availability row for a date."""

    def __init__(self, day: date) -> None:
        super().__init__(
            code=ErrorCode.DATE_NOT_OFFERED,
            message=f"{day.isoformat()} is not offered",
        )
        self.date = day


class SlotNotOfferedError(CapacityError):
    """Raised when a day has no matching time slot."""

    def __init__(self, day: date, time_slot: object) -> None:
        super().__init__(
            code=ErrorCode.SLOT_NOT_OFFERED,
            message=f"Time slot {time_slot} is not offered on {day.isoformat()}",
        )
        self.date = day
        self.time_slot = time_slot


class CapacityExceededError(CapacityError):
    """Raised when a day or slot cannot take the requested participants."""

    def __init__(self, day: date, requested: int, remaining: int) -> None:
        super().__init__(
            code=ErrorCode.CAPACITY_EXCEEDED,
            message=(
                f"Not enough spots on {day.isoformat()}: "
                f"requested {requested}, remaining {remaining}"
            ),
        )
        self.date = day
        self.requested = requested
        self.remaining = remaining


class InvalidQuantityError(PricingError):
    """Raised for zero or negative quantities and participant counts."""

    def __init__(self, quantity: int) -> None:
        super().__init__(
            code=ErrorCode.INVALID_QUANTITY,
            message=f"Quantity must be at least 1, got {quantity}",
        )
        self.quantity = quantity


class ConsistencyError(DomainError):
    """Raised when the participant list cannot match the booking quantity."""

    def __init__(self, expected: int) -> None:
        super().__init__(
            code=ErrorCode.PARTICIPANT_MISMATCH,
            message=f"Participant list cannot have {expected} entries",
        )
        self.expected = expected


class PaymentFailedError(DomainError):
    """Raised when the payment processor declines or errors."""

    def __init__(self, reason: str) -> None:
        super().__init__(code=ErrorCode.PAYMENT_FAILED, message=reason)


class PriceChangedError(DomainError):
    """Raised when the price at booking time differs from the amount charged."""

    def __init__(self, charged: object, total: object) -> None:
        super().__init__(
            code=ErrorCode.PRICE_CHANGED,
            message=f"Price changed from {charged} to {total}; please try again",
        )
        self.charged = charged
        self.total = total


class RefundError(DomainError):
    """Raised when refund bookkeeping is refused."""

    @classmethod
    def already_refunded(cls) -> "RefundError":
        return cls(
            code=ErrorCode.ALREADY_REFUNDED,
            message="This payment has already been fully refunded",
        )

    @classmethod
    def invalid_amount(cls, reason: str) -> "RefundError":
        return cls(code=ErrorCode.INVALID_REFUND, message=reason)
