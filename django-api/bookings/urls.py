from django.urls import path

from bookings.handlers import (
    BookingCancelView,
    BookingCreateView,
    BookingRefundView,
    DayAvailabilityView,
    OccurrenceListView,
    ProgramAvailabilityView,
    ProgramCreateView,
    QuoteView,
)

urlpatterns = [
    path(
        "templates/<str:template_id>/occurrences",
        OccurrenceListView.as_view(),
        name="occurrence-list",
    ),
    path("programs", ProgramCreateView.as_view(), name="program-create"),
    path(
        "programs/<str:program_id>/availability",
        ProgramAvailabilityView.as_view(),
        name="program-availability",
    ),
    path(
        "programs/<str:program_id>/days/<str:day>",
        DayAvailabilityView.as_view(),
        name="day-availability",
    ),
    path("bookings", BookingCreateView.as_view(), name="booking-create"),
    path("bookings/quote", QuoteView.as_view(), name="booking-quote"),
    path("bookings/<str:booking_id>/cancel", BookingCancelView.as_view(), name="booking-cancel"),
    path("bookings/<str:booking_id>/refund", BookingRefundView.as_view(), name="booking-refund"),
]
