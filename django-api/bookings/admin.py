from django.contrib import admin

from bookings.models import (
    BookingRecord,
    DayAvailability,
    EventTemplate,
    PrivateEvent,
    ReservationProgram,
    TimeSlot,
)

# Availability flags change through the day-availability endpoint only.
LEDGER_FIELDS = ["current_bookings", "is_available", "disabled_by_staff"]


class DayAvailabilityInline(admin.TabularInline):
    model = DayAvailability
    extra = 0
    fields = ["date", "max_participants", "current_bookings", "is_available", "disabled_by_staff"]
    readonly_fields = LEDGER_FIELDS
    can_delete = False


class TimeSlotInline(admin.TabularInline):
    model = TimeSlot
    extra = 0
    readonly_fields = LEDGER_FIELDS
    can_delete = False


@admin.register(EventTemplate)
class EventTemplateAdmin(admin.ModelAdmin):
    list_display = ["name", "start_date", "start_time", "is_recurring", "recurring_pattern"]
    list_filter = ["is_recurring", "recurring_pattern"]
    search_fields = ["name"]


@admin.register(PrivateEvent)
class PrivateEventAdmin(admin.ModelAdmin):
    list_display = ["name", "price", "created_at"]
    search_fields = ["name"]


@admin.register(ReservationProgram)
class ReservationProgramAdmin(admin.ModelAdmin):
    list_display = ["name", "start_date", "end_date", "price_per_day_per_participant"]
    search_fields = ["name"]
    inlines = [DayAvailabilityInline]


@admin.register(DayAvailability)
class DayAvailabilityAdmin(admin.ModelAdmin):
    list_display = ["program", "date", "current_bookings", "max_participants", "is_available"]
    list_filter = ["program", "is_available", "disabled_by_staff"]
    readonly_fields = LEDGER_FIELDS
    inlines = [TimeSlotInline]


@admin.register(BookingRecord)
class BookingRecordAdmin(admin.ModelAdmin):
    list_display = ["id", "target_kind", "quantity", "total", "refund_status", "created_at"]
    list_filter = ["target_kind", "refund_status"]
    readonly_fields = ["total", "refund_amount", "refunded_at", "cancelled_at", "created_at"]
