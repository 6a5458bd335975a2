"""Serializers for parsing requests and rendering domain models.

Input serializers check format only and build domain objects; the services
own every business rule. A `total` sent by a client is not a declared
field and is dropped.
"""

from decimal import Decimal

from rest_framework import serializers

from bookings.domain import (
    BillingInfo,
    BookingRequest,
    DiscountType,
    Money,
    Participant,
    PricingTier,
    ProgramDiscount,
    SelectedDate,
    SelectedOption,
    TargetKind,
    TimeSlotKey,
)
from bookings.domain.value_objects import SLOT_DURATIONS_MINUTES
from bookings.services.program_builder import SlotConfig


class TimeSlotKeySerializer(serializers.Serializer):
    start_time = serializers.TimeField()
    end_time = serializers.TimeField(required=False, allow_null=True, default=None)


class SelectedOptionSerializer(serializers.Serializer):
    category_name = serializers.CharField(max_length=100)
    choice_name = serializers.CharField(max_length=100)


class ParticipantSerializer(serializers.Serializer):
    first_name = serializers.CharField(max_length=100)
    last_name = serializers.CharField(max_length=100)
    selected_options = SelectedOptionSerializer(many=True, required=False, default=list)


class SelectedDateSerializer(serializers.Serializer):
    date = serializers.DateField()
    number_of_participants = serializers.IntegerField()
    time_slot = TimeSlotKeySerializer(required=False, allow_null=True, default=None)


class BillingInfoSerializer(serializers.Serializer):
    first_name = serializers.CharField(max_length=100)
    last_name = serializers.CharField(max_length=100)
    address_line1 = serializers.CharField(max_length=255)
    address_line2 = serializers.CharField(
        max_length=255, required=False, allow_blank=True, allow_null=True, default=None
    )
    city = serializers.CharField(max_length=100)
    state_province = serializers.CharField(max_length=100)
    postal_code = serializers.CharField(max_length=20)
    country = serializers.CharField(max_length=100)
    email_address = serializers.EmailField(
        required=False, allow_blank=True, allow_null=True, default=None
    )
    phone_number = serializers.CharField(
        max_length=30, required=False, allow_blank=True, allow_null=True, default=None
    )


class BookingRequestSerializer(serializers.Serializer):
    """Checkout payload."""

    target_kind = serializers.ChoiceField(choices=[kind.value for kind in TargetKind])
    target_id = serializers.CharField(max_length=64)
    quantity = serializers.IntegerField()
    is_signing_up_for_self = serializers.BooleanField(default=True)
    participants = ParticipantSerializer(many=True, required=False, default=list)
    selected_dates = SelectedDateSerializer(many=True, required=False, default=list)
    billing_info = BillingInfoSerializer()
    payment_token = serializers.CharField(required=False, allow_blank=True, default="")

    def to_domain(self) -> BookingRequest:
        data = self.validated_data
        return BookingRequest(
            target_kind=TargetKind(data["target_kind"]),
            target_id=data["target_id"],
            quantity=data["quantity"],
            is_signing_up_for_self=data["is_signing_up_for_self"],
            billing_info=BillingInfo(**data["billing_info"]),
            participants=tuple(
                Participant(
                    first_name=person["first_name"],
                    last_name=person["last_name"],
                    selected_options=tuple(
                        SelectedOption(**option) for option in person["selected_options"]
                    ),
                )
                for person in data["participants"]
            ),
            selected_dates=tuple(
                SelectedDate(
                    date=entry["date"],
                    number_of_participants=entry["number_of_participants"],
                    time_slot=(
                        TimeSlotKey(**entry["time_slot"]) if entry["time_slot"] else None
                    ),
                )
                for entry in data["selected_dates"]
            ),
        )


class RefundSerializer(serializers.Serializer):
    amount = serializers.DecimalField(
        max_digits=10, decimal_places=2, required=False, allow_null=True, default=None
    )


class OccurrenceQuerySerializer(serializers.Serializer):
    start = serializers.DateField(required=False)
    end = serializers.DateField(required=False)


class AvailabilityChangeSerializer(serializers.Serializer):
    enabled = serializers.BooleanField()
    time_slot = TimeSlotKeySerializer(required=False, allow_null=True, default=None)


class PricingTierInputSerializer(serializers.Serializer):
    number_of_days = serializers.IntegerField(min_value=1)
    price = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal("0"))


class ProgramDiscountInputSerializer(serializers.Serializer):
    type = serializers.ChoiceField(choices=[kind.value for kind in DiscountType])
    value = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal("0"))
    min_days = serializers.IntegerField(min_value=2)
    name = serializers.CharField(max_length=100)


class ProgramCreateSerializer(serializers.Serializer):
    """Staff payload for a new reservation program."""

    name = serializers.CharField(max_length=255)
    description = serializers.CharField(required=False, allow_blank=True, default="")
    start_date = serializers.DateField()
    end_date = serializers.DateField()
    exclude_dates = serializers.ListField(child=serializers.DateField(), required=False, default=list)
    price_per_day_per_participant = serializers.DecimalField(
        max_digits=10, decimal_places=2, min_value=Decimal("0")
    )
    max_participants_per_day = serializers.IntegerField(min_value=1, required=False, allow_null=True, default=None)
    slot_duration_minutes = serializers.ChoiceField(
        choices=SLOT_DURATIONS_MINUTES, required=False, allow_null=True, default=None
    )
    max_participants_per_slot = serializers.IntegerField(min_value=1, required=False, allow_null=True, default=None)
    operating_start = serializers.TimeField(required=False, allow_null=True, default=None)
    operating_end = serializers.TimeField(required=False, allow_null=True, default=None)
    day_pricing_tiers = PricingTierInputSerializer(many=True, required=False, default=list)
    discount = ProgramDiscountInputSerializer(required=False, allow_null=True, default=None)

    def validate(self, attrs: dict) -> dict:
        if attrs["end_date"] < attrs["start_date"]:
            raise serializers.ValidationError({"end_date": "End date is before the start date."})
        if attrs["slot_duration_minutes"] is not None:
            missing = [
                name
                for name in ("max_participants_per_slot", "operating_start", "operating_end")
                if attrs[name] is None
            ]
            if missing:
                raise serializers.ValidationError(
                    {name: "Required when time slots are enabled." for name in missing}
                )
        elif attrs["max_participants_per_day"] is None:
            raise serializers.ValidationError(
                {"max_participants_per_day": "Required without time slots."}
            )
        return attrs

    def slot_config(self) -> SlotConfig | None:
        data = self.validated_data
        if data["slot_duration_minutes"] is None:
            return None
        return SlotConfig(
            duration_minutes=data["slot_duration_minutes"],
            max_participants_per_slot=data["max_participants_per_slot"],
            operating_start=data["operating_start"],
            operating_end=data["operating_end"],
        )

    def pricing_tiers(self) -> tuple[PricingTier, ...]:
        return tuple(
            PricingTier(number_of_days=tier["number_of_days"], price=Money(tier["price"]))
            for tier in self.validated_data["day_pricing_tiers"]
        )

    def program_discount(self) -> ProgramDiscount | None:
        discount = self.validated_data["discount"]
        if discount is None:
            return None
        return ProgramDiscount(
            type=DiscountType(discount["type"]),
            value=discount["value"],
            min_days=discount["min_days"],
            name=discount["name"],
        )


class OccurrenceSerializer(serializers.Serializer):
    """Serializer for Occurrence domain model."""

    source_template_id = serializers.CharField(source="source_template_id.value")
    date = serializers.DateField()
    start_instant = serializers.DateTimeField()
    end_instant = serializers.DateTimeField(allow_null=True)
    is_first_occurrence = serializers.BooleanField()


class TimeSlotSerializer(serializers.Serializer):
    """Serializer for TimeSlot domain model."""

    start_time = serializers.TimeField(format="%H:%M")
    end_time = serializers.TimeField(format="%H:%M")
    max_participants = serializers.IntegerField()
    current_bookings = serializers.IntegerField()
    is_available = serializers.BooleanField()


class DayAvailabilitySerializer(serializers.Serializer):
    """Serializer for DayAvailability domain model."""

    date = serializers.DateField()
    max_participants = serializers.IntegerField()
    current_bookings = serializers.IntegerField()
    is_available = serializers.BooleanField()
    start_time = serializers.TimeField(format="%H:%M", allow_null=True)
    end_time = serializers.TimeField(format="%H:%M", allow_null=True)
    time_slots = TimeSlotSerializer(many=True)


class PricingTierSerializer(serializers.Serializer):
    number_of_days = serializers.IntegerField()
    price = serializers.DecimalField(source="price.amount", max_digits=10, decimal_places=2)


class ProgramSerializer(serializers.Serializer):
    """Serializer for ReservationProgram domain model."""

    id = serializers.CharField(source="id.value")
    name = serializers.CharField()
    start_date = serializers.DateField()
    end_date = serializers.DateField()
    price_per_day_per_participant = serializers.DecimalField(
        source="price_per_day_per_participant.amount", max_digits=10, decimal_places=2
    )
    enable_time_slots = serializers.BooleanField()
    slot_duration_minutes = serializers.IntegerField(allow_null=True)
    day_pricing_tiers = PricingTierSerializer(many=True)
    daily_availability = DayAvailabilitySerializer(many=True)


class PriceQuoteSerializer(serializers.Serializer):
    """Serializer for PriceQuote domain model."""

    total = serializers.DecimalField(source="total.amount", max_digits=10, decimal_places=2)
    unit_price = serializers.DecimalField(
        source="unit_price.amount", max_digits=10, decimal_places=2
    )
    applied_tier = PricingTierSerializer(allow_null=True)
    discount_applied = serializers.BooleanField()


class BookingRecordSerializer(serializers.Serializer):
    """Serializer for BookingRecord domain model."""

    id = serializers.CharField(source="id.value")
    target_kind = serializers.CharField(source="target_kind.value")
    target_id = serializers.CharField()
    quantity = serializers.IntegerField()
    is_signing_up_for_self = serializers.BooleanField()
    participants = ParticipantSerializer(many=True)
    selected_dates = SelectedDateSerializer(many=True)
    total = serializers.DecimalField(source="total.amount", max_digits=10, decimal_places=2)
    billing_info = BillingInfoSerializer()
    payment_id = serializers.CharField(allow_null=True)
    refund_status = serializers.CharField(source="refund_status.value")
    refund_amount = serializers.DecimalField(
        source="refund_amount.amount", max_digits=10, decimal_places=2
    )
    refunded_at = serializers.DateTimeField(allow_null=True)
    cancelled_at = serializers.DateTimeField(allow_null=True)
    created_at = serializers.DateTimeField()
