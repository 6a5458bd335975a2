from bookings.domain.models import (
    BillingInfo,
    BookingRecord,
    BookingRequest,
    DayAvailability,
    EventDiscount,
    EventTemplate,
    Occurrence,
    OptionCategory,
    Participant,
    PriceQuote,
    PricingTier,
    PrivateEvent,
    ProgramDiscount,
    ReservationProgram,
    SelectedDate,
    SelectedOption,
    TimeSlot,
    TimeSlotKey,
)
from bookings.domain.value_objects import (
    BookingId,
    Capacity,
    DiscountType,
    Money,
    OfferingId,
    ProgramId,
    RecurrencePattern,
    RefundStatus,
    TargetKind,
    TemplateId,
)

__all__ = [
    "BillingInfo",
    "BookingRecord",
    "BookingRequest",
    "DayAvailability",
    "EventDiscount",
    "EventTemplate",
    "Occurrence",
    "OptionCategory",
    "Participant",
    "PriceQuote",
    "PricingTier",
    "PrivateEvent",
    "ProgramDiscount",
    "ReservationProgram",
    "SelectedDate",
    "SelectedOption",
    "TimeSlot",
    "TimeSlotKey",
    "BookingId",
    "OfferingId",
    "ProgramId",
    "TemplateId",
    "Money",
    "Capacity",
    "DiscountType",
    "RecurrencePattern",
    "RefundStatus",
    "TargetKind",
]
