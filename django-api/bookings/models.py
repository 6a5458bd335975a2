"""Django ORM models (persistence layer).

These models handle database concerns. Domain logic lives in domain/models.py.
"""

import uuid

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import F, Q


class DiscountType(models.TextChoices):
    PERCENTAGE = "percentage", "Percentage"
    FIXED = "fixed", "Fixed amount"


def _check_capacity(row: "DayAvailability | TimeSlot") -> None:
    if row.max_participants is not None and row.max_participants < row.current_bookings:
        raise ValidationError(
            {"max_participants": f"Below the {row.current_bookings} spots already booked."}
        )


class EventTemplate(models.Model):
    """Persistence model for classes and events, recurring or not."""

    class Pattern(models.TextChoices):
        DAILY = "daily", "Daily"
        WEEKLY = "weekly", "Weekly"
        MONTHLY = "monthly", "Monthly"
        YEARLY = "yearly", "Yearly"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    price = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    start_date = models.DateField()
    end_date = models.DateField(null=True, blank=True)
    start_time = models.TimeField()
    end_time = models.TimeField(null=True, blank=True)
    is_recurring = models.BooleanField(default=False)
    recurring_pattern = models.CharField(
        max_length=10, choices=Pattern.choices, null=True, blank=True
    )
    recurring_end_date = models.DateField(null=True, blank=True)
    exclude_dates = models.JSONField(default=list, blank=True)
    options = models.JSONField(default=list, blank=True)
    discount_type = models.CharField(
        max_length=10, choices=DiscountType.choices, null=True, blank=True
    )
    discount_value = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    discount_min_participants = models.PositiveIntegerField(null=True, blank=True)
    discount_name = models.CharField(max_length=100, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["start_date"]),
        ]

    def __str__(self) -> str:
        return self.name


class PrivateEvent(models.Model):
    """Persistence model for private-event offerings."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    price = models.DecimalField(max_digits=10, decimal_places=2)
    discount_type = models.CharField(
        max_length=10, choices=DiscountType.choices, null=True, blank=True
    )
    discount_value = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    discount_min_participants = models.PositiveIntegerField(null=True, blank=True)
    discount_name = models.CharField(max_length=100, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self) -> str:
        return self.name


class ReservationProgram(models.Model):
    """Persistence model for multi-day reservation programs."""

    class SlotDuration(models.IntegerChoices):
        ONE_HOUR = 60, "1 hour"
        TWO_HOURS = 120, "2 hours"
        FOUR_HOURS = 240, "4 hours"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    price_per_day_per_participant = models.DecimalField(max_digits=10, decimal_places=2)
    start_date = models.DateField()
    end_date = models.DateField()
    exclude_dates = models.JSONField(default=list, blank=True)
    enable_time_slots = models.BooleanField(default=False)
    slot_duration_minutes = models.PositiveSmallIntegerField(
        choices=SlotDuration.choices, null=True, blank=True
    )
    day_pricing_tiers = models.JSONField(default=list, blank=True)
    discount_type = models.CharField(
        max_length=10, choices=DiscountType.choices, null=True, blank=True
    )
    discount_value = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    discount_min_days = models.PositiveIntegerField(null=True, blank=True)
    discount_name = models.CharField(max_length=100, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["start_date"]),
        ]

    def __str__(self) -> str:
        return self.name


class DayAvailability(models.Model):
    """Capacity counters for one day of a program. Rows are never deleted."""

    program = models.ForeignKey(
        ReservationProgram, on_delete=models.PROTECT, related_name="daily_availability"
    )
    date = models.DateField()
    max_participants = models.PositiveIntegerField()
    current_bookings = models.PositiveIntegerField(default=0)
    is_available = models.BooleanField(default=True)
    disabled_by_staff = models.BooleanField(default=False)
    start_time = models.TimeField(null=True, blank=True)
    end_time = models.TimeField(null=True, blank=True)

    class Meta:
        ordering = ["date"]
        constraints = [
            models.UniqueConstraint(fields=["program", "date"], name="unique_program_day"),
            models.CheckConstraint(
                condition=Q(current_bookings__lte=F("max_participants")),
                name="day_within_capacity",
            ),
        ]
        indexes = [
            models.Index(fields=["date", "is_available"]),
        ]

    def __str__(self) -> str:
        return f"{self.program.name} - {self.date}"

    def clean(self) -> None:
        _check_capacity(self)


class TimeSlot(models.Model):
    """Capacity counters for one slot within a program day."""

    day = models.ForeignKey(DayAvailability, on_delete=models.PROTECT, related_name="time_slots")
    start_time = models.TimeField()
    end_time = models.TimeField()
    max_participants = models.PositiveIntegerField()
    current_bookings = models.PositiveIntegerField(default=0)
    is_available = models.BooleanField(default=True)
    disabled_by_staff = models.BooleanField(default=False)

    class Meta:
        ordering = ["start_time"]
        constraints = [
            models.UniqueConstraint(
                fields=["day", "start_time", "end_time"], name="unique_day_slot"
            ),
            models.CheckConstraint(
                condition=Q(current_bookings__lte=F("max_participants")),
                name="slot_within_capacity",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.day} {self.start_time:%H:%M}-{self.end_time:%H:%M}"

    def clean(self) -> None:
        _check_capacity(self)


class BookingRecord(models.Model):
    """Persistence model for completed purchases."""

    class TargetKind(models.TextChoices):
        EVENT = "event", "Event"
        PRIVATE_EVENT = "private_event", "Private event"
        RESERVATION = "reservation", "Reservation"

    class RefundStatus(models.TextChoices):
        NONE = "none", "None"
        PARTIAL = "partial", "Partial"
        FULL = "full", "Full"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    target_kind = models.CharField(max_length=20, choices=TargetKind.choices)
    target_id = models.UUIDField()
    selected_dates = models.JSONField(default=list, blank=True)
    quantity = models.PositiveIntegerField()
    is_signing_up_for_self = models.BooleanField(default=True)
    participants = models.JSONField(default=list, blank=True)
    total = models.DecimalField(max_digits=10, decimal_places=2)
    billing_info = models.JSONField()
    payment_id = models.CharField(max_length=255, null=True, blank=True)
    refund_status = models.CharField(
        max_length=10, choices=RefundStatus.choices, default=RefundStatus.NONE
    )
    refund_amount = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    refunded_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField()

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["target_kind", "target_id"]),
        ]

    def __str__(self) -> str:
        return f"{self.target_kind} booking x{self.quantity} - {self.total}"
