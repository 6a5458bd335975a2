"""Domain models representing persisted state.

These are pure domain objects with no API input rules.
Django ORM models are in bookings/models.py (persistence layer).
"""

from dataclasses import dataclass, field, replace
from datetime import date, datetime, time
from decimal import Decimal
from typing import Self
from uuid import UUID

from bookings.domain.errors import InvalidTemplateError
from bookings.domain.value_objects import (
    SLOT_DURATIONS_MINUTES,
    BookingId,
    DiscountType,
    Money,
    OfferingId,
    ProgramId,
    RecurrencePattern,
    RefundStatus,
    TargetKind,
    TemplateId,
)


@dataclass(frozen=True)
class EventDiscount:
    """Per-unit discount that activates once an offering has enough sign-ups.

    Any missing field makes the discount inert.
    """

    type: DiscountType | None
    value: Decimal | None
    min_participants: int | None
    name: str = ""

    @property
    def is_complete(self) -> bool:
        return (
            self.type is not None
            and self.value is not None
            and self.min_participants is not None
        )


@dataclass(frozen=True)
class ProgramDiscount:
    """Discount on a reservation program for booking at least `min_days` days."""

    type: DiscountType | None
    value: Decimal | None
    min_days: int | None
    name: str = ""

    @property
    def is_complete(self) -> bool:
        return self.type is not None and self.value is not None and self.min_days is not None


@dataclass(frozen=True)
class OptionCategory:
    """A choice each participant of an event makes, such as a size or a menu."""

    category_name: str
    choices: tuple[str, ...]
    description: str = ""

    def offers(self, choice_name: str) -> bool:
        return choice_name in self.choices


@dataclass(frozen=True)
class EventTemplate:
    """Domain representation of a (possibly recurring) class or event."""

    id: TemplateId
    name: str
    start_date: date
    start_time: time
    end_date: date | None = None
    end_time: time | None = None
    is_recurring: bool = False
    recurring_pattern: RecurrencePattern | None = None
    recurring_end_date: date | None = None
    exclude_dates: frozenset[date] = frozenset()
    price: Money | None = None
    discount: EventDiscount | None = None
    description: str = ""
    options: tuple[OptionCategory, ...] = ()

    def __post_init__(self) -> None:
        if self.is_recurring:
            if self.recurring_pattern is None:
                raise InvalidTemplateError("Recurring events need a recurring pattern")
            if self.recurring_end_date is None:
                raise InvalidTemplateError("Recurring events need a recurring end date")
            if self.recurring_end_date < self.start_date:
                raise InvalidTemplateError("Recurring end date is before the start date")
        if self.end_date is not None and self.end_date < self.start_date:
            raise InvalidTemplateError("End date is before the start date")
        names = [category.category_name for category in self.options]
        if len(set(names)) != len(names):
            raise InvalidTemplateError("Option category names must be unique")

    def option(self, category_name: str) -> OptionCategory | None:
        return next(
            (category for category in self.options if category.category_name == category_name),
            None,
        )

    @property
    def is_multi_day(self) -> bool:
        return (
            not self.is_recurring
            and self.end_date is not None
            and self.end_date > self.start_date
        )


@dataclass(frozen=True)
class Occurrence:
    """One concrete date of an EventTemplate. Derived, never persisted."""

    source_template_id: TemplateId
    date: date
    start_instant: datetime
    end_instant: datetime | None
    is_first_occurrence: bool


@dataclass(frozen=True)
class PrivateEvent:
    """Domain representation of a private-event offering."""

    id: OfferingId
    name: str
    price: Money
    discount: EventDiscount | None = None


@dataclass(frozen=True)
class TimeSlotKey:
    """Selects a time slot within a day by its start (and optionally end) time."""

    start_time: time
    end_time: time | None = None

    def matches(self, slot: "TimeSlot") -> bool:
        if slot.start_time != self.start_time:
            return False
        return self.end_time is None or slot.end_time == self.end_time

    def __str__(self) -> str:
        if self.end_time is None:
            return self.start_time.strftime("%H:%M")
        return f"{self.start_time:%H:%M}-{self.end_time:%H:%M}"


def _check_counters(max_participants: int, current_bookings: int) -> None:
    if max_participants < 1:
        raise ValueError("Max participants must be at least 1")
    if not 0 <= current_bookings <= max_participants:
        raise ValueError("Current bookings must be between 0 and max participants")


@dataclass(frozen=True)
class TimeSlot:
    """Bookable block within a day."""

    start_time: time
    end_time: time
    max_participants: int
    current_bookings: int = 0
    is_available: bool = True
    disabled_by_staff: bool = False

    def __post_init__(self) -> None:
        _check_counters(self.max_participants, self.current_bookings)

    @property
    def key(self) -> TimeSlotKey:
        return TimeSlotKey(self.start_time, self.end_time)

    @property
    def remaining(self) -> int:
        if not self.is_available:
            return 0
        return self.max_participants - self.current_bookings


@dataclass(frozen=True)
class DayAvailability:
    """Capacity counters for one calendar day of a reservation program."""

    date: date
    max_participants: int
    current_bookings: int = 0
    is_available: bool = True
    disabled_by_staff: bool = False
    start_time: time | None = None
    end_time: time | None = None
    time_slots: tuple[TimeSlot, ...] = ()

    def __post_init__(self) -> None:
        _check_counters(self.max_participants, self.current_bookings)

    @property
    def remaining(self) -> int:
        if not self.is_available:
            return 0
        return self.max_participants - self.current_bookings

    def find_slot(self, key: TimeSlotKey) -> TimeSlot | None:
        return next((slot for slot in self.time_slots if key.matches(slot)), None)

    def with_slot(self, updated: TimeSlot) -> Self:
        slots = tuple(
            updated if slot.key == updated.key else slot for slot in self.time_slots
        )
        return replace(self, time_slots=slots)


@dataclass(frozen=True)
class PricingTier:
    """Flat per-participant-day rate for bookings of at least `number_of_days` days."""

    number_of_days: int
    price: Money

    def __post_init__(self) -> None:
        if self.number_of_days < 1:
            raise ValueError("Pricing tier must cover at least one day")


@dataclass(frozen=True)
class ReservationProgram:
    """Multi-day bookable program with explicit per-day capacity.

    The aggregate is loaded and saved as a whole; capacity changes are
    applied by the availability ledger and produce a new instance.
    """

    id: ProgramId
    name: str
    start_date: date
    end_date: date
    price_per_day_per_participant: Money
    daily_availability: tuple[DayAvailability, ...] = ()
    exclude_dates: frozenset[date] = frozenset()
    enable_time_slots: bool = False
    slot_duration_minutes: int | None = None
    day_pricing_tiers: tuple[PricingTier, ...] = ()
    discount: ProgramDiscount | None = None
    description: str = ""

    def __post_init__(self) -> None:
        if self.end_date < self.start_date:
            raise InvalidTemplateError("End date is before the start date")
        if self.enable_time_slots and self.slot_duration_minutes not in SLOT_DURATIONS_MINUTES:
            raise InvalidTemplateError("Slot duration must be 60, 120 or 240 minutes")
        days = [day.date for day in self.daily_availability]
        if days != sorted(set(days)):
            raise InvalidTemplateError("Daily availability must have one row per date, in order")

    def day(self, day: date) -> DayAvailability | None:
        return next((row for row in self.daily_availability if row.date == day), None)

    def with_day(self, updated: DayAvailability) -> Self:
        rows = tuple(
            updated if row.date == updated.date else row for row in self.daily_availability
        )
        return replace(self, daily_availability=rows)


@dataclass(frozen=True)
class SelectedOption:
    category_name: str
    choice_name: str


@dataclass(frozen=True)
class Participant:
    first_name: str
    last_name: str
    selected_options: tuple[SelectedOption, ...] = ()


@dataclass(frozen=True)
class SelectedDate:
    """One day of a reservation booking."""

    date: date
    number_of_participants: int
    time_slot: TimeSlotKey | None = None


@dataclass(frozen=True)
class BillingInfo:
    first_name: str
    last_name: str
    address_line1: str
    city: str
    state_province: str
    postal_code: str
    country: str
    email_address: str | None = None
    phone_number: str | None = None
    address_line2: str | None = None

    @property
    def has_contact(self) -> bool:
        return bool(self.email_address or self.phone_number)


@dataclass(frozen=True)
class BookingRequest:
    """Customer checkout input. Never carries a total."""

    target_kind: TargetKind
    target_id: str
    quantity: int
    is_signing_up_for_self: bool
    billing_info: BillingInfo
    participants: tuple[Participant, ...] = ()
    selected_dates: tuple[SelectedDate, ...] = ()


@dataclass(frozen=True)
class PriceQuote:
    """Resolved amount owed for a booking."""

    total: Money
    unit_price: Money
    applied_tier: PricingTier | None = None
    discount_applied: bool = False


@dataclass(frozen=True)
class BookingRecord:
    """Domain representation of a completed purchase."""

    id: BookingId
    target_kind: TargetKind
    target_id: UUID
    quantity: int
    is_signing_up_for_self: bool
    participants: tuple[Participant, ...]
    total: Money
    billing_info: BillingInfo
    created_at: datetime
    selected_dates: tuple[SelectedDate, ...] = ()
    payment_id: str | None = None
    refund_status: RefundStatus = RefundStatus.NONE
    refund_amount: Money = field(default_factory=Money.zero)
    refunded_at: datetime | None = None
    cancelled_at: datetime | None = None
