from bookings.handlers.views import (
    BookingCancelView,
    BookingCreateView,
    BookingRefundView,
    DayAvailabilityView,
    OccurrenceListView,
    ProgramAvailabilityView,
    ProgramCreateView,
    QuoteView,
)

__all__ = [
    "BookingCancelView",
    "BookingCreateView",
    "BookingRefundView",
    "DayAvailabilityView",
    "OccurrenceListView",
    "ProgramAvailabilityView",
    "ProgramCreateView",
    "QuoteView",
]
