"""Django ORM implementation of the BookingStore.

Programs and bookings loaded with `for_update=True` lock their row with
SELECT ... FOR UPDATE, so concurrent bookings for the same program queue
up behind each other inside `atomic()` instead of overbooking a day, and a
booking cannot be cancelled or refunded twice at once.
"""

from dataclasses import asdict
from datetime import date, time
from decimal import Decimal
from typing import Any
from uuid import UUID

from django.db import transaction
from django.db.models import Sum

from bookings import models
from bookings.domain import (
    BillingInfo,
    BookingId,
    BookingRecord,
    DayAvailability,
    DiscountType,
    EventDiscount,
    EventTemplate,
    Money,
    OfferingId,
    OptionCategory,
    Participant,
    PricingTier,
    PrivateEvent,
    ProgramDiscount,
    ProgramId,
    RecurrencePattern,
    RefundStatus,
    ReservationProgram,
    SelectedDate,
    SelectedOption,
    TargetKind,
    TemplateId,
    TimeSlot,
    TimeSlotKey,
)
from bookings.stores.interfaces import BookingStore


class DjangoBookingStore(BookingStore):
    """Database-backed booking store using Django ORM."""

    def atomic(self) -> transaction.Atomic:
        return transaction.atomic()

    def get_event_template(self, template_id: TemplateId) -> EventTemplate | None:
        row = models.EventTemplate.objects.filter(pk=template_id.value).first()
        if row is None:
            return None
        return EventTemplate(
            id=TemplateId(row.id),
            name=row.name,
            description=row.description,
            start_date=row.start_date,
            end_date=row.end_date,
            start_time=row.start_time,
            end_time=row.end_time,
            is_recurring=row.is_recurring,
            recurring_pattern=(
                RecurrencePattern(row.recurring_pattern) if row.recurring_pattern else None
            ),
            recurring_end_date=row.recurring_end_date,
            exclude_dates=frozenset(_parse_dates(row.exclude_dates)),
            price=Money(row.price) if row.price is not None else None,
            discount=_event_discount(row),
            options=tuple(_option_from_json(item) for item in row.options),
        )

    def get_private_event(self, offering_id: OfferingId) -> PrivateEvent | None:
        row = models.PrivateEvent.objects.filter(pk=offering_id.value).first()
        if row is None:
            return None
        return PrivateEvent(
            id=OfferingId(row.id),
            name=row.name,
            price=Money(row.price),
            discount=_event_discount(row),
        )

    def load_program(
        self, program_id: ProgramId, *, for_update: bool = False
    ) -> ReservationProgram | None:
        queryset = models.ReservationProgram.objects.all()
        if for_update:
            queryset = queryset.select_for_update()
        row = queryset.filter(pk=program_id.value).first()
        if row is None:
            return None

        days = row.daily_availability.order_by("date").prefetch_related("time_slots")
        discount = None
        if row.discount_type or row.discount_value is not None or row.discount_min_days:
            discount = ProgramDiscount(
                type=DiscountType(row.discount_type) if row.discount_type else None,
                value=row.discount_value,
                min_days=row.discount_min_days,
                name=row.discount_name,
            )
        return ReservationProgram(
            id=ProgramId(row.id),
            name=row.name,
            description=row.description,
            start_date=row.start_date,
            end_date=row.end_date,
            price_per_day_per_participant=Money(row.price_per_day_per_participant),
            daily_availability=tuple(_day_from_row(day) for day in days),
            exclude_dates=frozenset(_parse_dates(row.exclude_dates)),
            enable_time_slots=row.enable_time_slots,
            slot_duration_minutes=row.slot_duration_minutes,
            day_pricing_tiers=tuple(
                PricingTier(number_of_days=tier["number_of_days"], price=Money(Decimal(tier["price"])))
                for tier in row.day_pricing_tiers
            ),
            discount=discount,
        )

    def save_program(self, program: ReservationProgram) -> None:
        discount = program.discount
        row, _ = models.ReservationProgram.objects.update_or_create(
            pk=program.id.value,
            defaults={
                "name": program.name,
                "description": program.description,
                "price_per_day_per_participant": program.price_per_day_per_participant.amount,
                "start_date": program.start_date,
                "end_date": program.end_date,
                "exclude_dates": sorted(day.isoformat() for day in program.exclude_dates),
                "enable_time_slots": program.enable_time_slots,
                "slot_duration_minutes": program.slot_duration_minutes,
                "day_pricing_tiers": [
                    {"number_of_days": tier.number_of_days, "price": str(tier.price.amount)}
                    for tier in program.day_pricing_tiers
                ],
                "discount_type": discount.type.value if discount and discount.type else None,
                "discount_value": discount.value if discount else None,
                "discount_min_days": discount.min_days if discount else None,
                "discount_name": discount.name if discount else "",
            },
        )
        for day in program.daily_availability:
            day_row, _ = models.DayAvailability.objects.update_or_create(
                program=row,
                date=day.date,
                defaults={
                    "max_participants": day.max_participants,
                    "current_bookings": day.current_bookings,
                    "is_available": day.is_available,
                    "disabled_by_staff": day.disabled_by_staff,
                    "start_time": day.start_time,
                    "end_time": day.end_time,
                },
            )
            for slot in day.time_slots:
                models.TimeSlot.objects.update_or_create(
                    day=day_row,
                    start_time=slot.start_time,
                    end_time=slot.end_time,
                    defaults={
                        "max_participants": slot.max_participants,
                        "current_bookings": slot.current_bookings,
                        "is_available": slot.is_available,
                        "disabled_by_staff": slot.disabled_by_staff,
                    },
                )

    def participant_total(self, target_kind: TargetKind, target_id: UUID) -> int:
        result = models.BookingRecord.objects.filter(
            target_kind=target_kind.value,
            target_id=target_id,
            cancelled_at__isnull=True,
        ).aggregate(total=Sum("quantity"))
        return result["total"] or 0

    def save_booking(self, record: BookingRecord) -> None:
        models.BookingRecord.objects.update_or_create(
            pk=record.id.value,
            defaults={
                "target_kind": record.target_kind.value,
                "target_id": record.target_id,
                "selected_dates": [_selected_date_to_json(entry) for entry in record.selected_dates],
                "quantity": record.quantity,
                "is_signing_up_for_self": record.is_signing_up_for_self,
                "participants": [_participant_to_json(person) for person in record.participants],
                "total": record.total.amount,
                "billing_info": asdict(record.billing_info),
                "payment_id": record.payment_id,
                "refund_status": record.refund_status.value,
                "refund_amount": record.refund_amount.amount,
                "refunded_at": record.refunded_at,
                "cancelled_at": record.cancelled_at,
                "created_at": record.created_at,
            },
        )

    def get_booking(
        self, booking_id: BookingId, *, for_update: bool = False
    ) -> BookingRecord | None:
        queryset = models.BookingRecord.objects.filter(pk=booking_id.value)
        if for_update:
            queryset = queryset.select_for_update()
        row = queryset.first()
        if row is None:
            return None
        return BookingRecord(
            id=BookingId(row.id),
            target_kind=TargetKind(row.target_kind),
            target_id=row.target_id,
            quantity=row.quantity,
            is_signing_up_for_self=row.is_signing_up_for_self,
            participants=tuple(_participant_from_json(item) for item in row.participants),
            total=Money(row.total),
            billing_info=BillingInfo(**row.billing_info),
            created_at=row.created_at,
            selected_dates=tuple(_selected_date_from_json(item) for item in row.selected_dates),
            payment_id=row.payment_id,
            refund_status=RefundStatus(row.refund_status),
            refund_amount=Money(row.refund_amount),
            refunded_at=row.refunded_at,
            cancelled_at=row.cancelled_at,
        )


def _parse_dates(values: list[str]) -> list[date]:
    return [date.fromisoformat(value) for value in values]


def _option_from_json(item: dict[str, Any]) -> OptionCategory:
    return OptionCategory(
        category_name=item["category_name"],
        choices=tuple(choice["name"] for choice in item.get("choices", [])),
        description=item.get("category_description", ""),
    )


def _event_discount(
    row: models.EventTemplate | models.PrivateEvent,
) -> EventDiscount | None:
    if not row.discount_type and row.discount_value is None and not row.discount_min_participants:
        return None
    return EventDiscount(
        type=DiscountType(row.discount_type) if row.discount_type else None,
        value=row.discount_value,
        min_participants=row.discount_min_participants,
        name=row.discount_name,
    )


def _day_from_row(row: models.DayAvailability) -> DayAvailability:
    return DayAvailability(
        date=row.date,
        max_participants=row.max_participants,
        current_bookings=row.current_bookings,
        is_available=row.is_available,
        disabled_by_staff=row.disabled_by_staff,
        start_time=row.start_time,
        end_time=row.end_time,
        time_slots=tuple(
            TimeSlot(
                start_time=slot.start_time,
                end_time=slot.end_time,
                max_participants=slot.max_participants,
                current_bookings=slot.current_bookings,
                is_available=slot.is_available,
                disabled_by_staff=slot.disabled_by_staff,
            )
            for slot in row.time_slots.all()
        ),
    )


def _selected_date_to_json(entry: SelectedDate) -> dict[str, Any]:
    time_slot = None
    if entry.time_slot is not None:
        time_slot = {
            "start_time": entry.time_slot.start_time.isoformat(),
            "end_time": entry.time_slot.end_time.isoformat() if entry.time_slot.end_time else None,
        }
    return {
        "date": entry.date.isoformat(),
        "number_of_participants": entry.number_of_participants,
        "time_slot": time_slot,
    }


def _selected_date_from_json(item: dict[str, Any]) -> SelectedDate:
    time_slot = None
    if item.get("time_slot"):
        end_time = item["time_slot"].get("end_time")
        time_slot = TimeSlotKey(
            start_time=time.fromisoformat(item["time_slot"]["start_time"]),
            end_time=time.fromisoformat(end_time) if end_time else None,
        )
    return SelectedDate(
        date=date.fromisoformat(item["date"]),
        number_of_participants=item["number_of_participants"],
        time_slot=time_slot,
    )


def _participant_to_json(person: Participant) -> dict[str, Any]:
    return {
        "first_name": person.first_name,
        "last_name": person.last_name,
        "selected_options": [
            {"category_name": option.category_name, "choice_name": option.choice_name}
            for option in person.selected_options
        ],
    }


def _participant_from_json(item: dict[str, Any]) -> Participant:
    return Participant(
        first_name=item["first_name"],
        last_name=item["last_name"],
        selected_options=tuple(
            SelectedOption(**option) for option in item.get("selected_options", [])
        ),
    )
