"""Domain primitives that enforce validity at creation time."""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Self
from uuid import UUID

CENT = Decimal("0.01")


@dataclass(frozen=True)
class TemplateId:
    """Unique identifier for an EventTemplate."""

    value: UUID

    @classmethod
    def from_string(cls, value: str) -> Self:
        return cls(value=UUID(value))

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class ProgramId:
    """Unique identifier for a ReservationProgram."""

    value: UUID

    @classmethod
    def from_string(cls, value: str) -> Self:
        return cls(value=UUID(value))

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class OfferingId:
    """Unique identifier for a PrivateEvent offering."""

    value: UUID

    @classmethod
    def from_string(cls, value: str) -> Self:
        return cls(value=UUID(value))

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class BookingId:
    """Unique identifier for a BookingRecord."""

    value: UUID

    @classmethod
    def from_string(cls, value: str) -> Self:
        return cls(value=UUID(value))

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class Money:
    """Price representation with validation."""

    amount: Decimal

    def __post_init__(self) -> None:
        if not isinstance(self.amount, Decimal):
            object.__setattr__(self, "amount", Decimal(str(self.amount)))
        if self.amount < 0:
            raise ValueError("Money amount cannot be negative")

    @classmethod
    def zero(cls) -> Self:
        return cls(amount=Decimal("0"))

    def rounded(self) -> Self:
        """Return the amount rounded half-up to whole cents."""
        return type(self)(amount=self.amount.quantize(CENT, rounding=ROUND_HALF_UP))

    def __str__(self) -> str:
        return f"{self.amount:.2f}"


@dataclass(frozen=True)
class Capacity:
    """Non-negative integer representing capacity."""

    value: int

    def __post_init__(self) -> None:
        if self.value < 0:
            raise ValueError("Capacity cannot be negative")


class RecurrencePattern(Enum):
    """How far apart recurring occurrences are.

    Months and years are fixed day counts, not calendar arithmetic.
    """

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"

    @property
    def step_days(self) -> int:
        return _STEP_DAYS[self]


_STEP_DAYS = {
    RecurrencePattern.DAILY: 1,
    RecurrencePattern.WEEKLY: 7,
    RecurrencePattern.MONTHLY: 30,
    RecurrencePattern.YEARLY: 365,
}


class DiscountType(Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


class TargetKind(Enum):
    """What a booking was made against."""

    EVENT = "event"
    PRIVATE_EVENT = "private_event"
    RESERVATION = "reservation"


class RefundStatus(Enum):
    NONE = "none"
    PARTIAL = "partial"
    FULL = "full"


SLOT_DURATIONS_MINUTES = (60, 120, 240)
