"""Builds reservation programs and their per-day capacity rows.

Staff define a program by date range, excluded dates and capacity; every
offered day gets its own DayAvailability row, optionally split into
fixed-length time slots between operating hours.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from uuid import uuid4

from bookings.domain import (
    DayAvailability,
    Money,
    PricingTier,
    ProgramDiscount,
    ProgramId,
    ReservationProgram,
    TimeSlot,
)
from bookings.domain.errors import InvalidTemplateError
from bookings.domain.value_objects import SLOT_DURATIONS_MINUTES

# Any fixed day works; slots never cross midnight.
_ANCHOR = date(2000, 1, 1)


@dataclass(frozen=True)
class SlotConfig:
    """How each day of a program is split into bookable slots."""

    duration_minutes: int
    max_participants_per_slot: int
    operating_start: time
    operating_end: time

    def __post_init__(self) -> None:
        if self.duration_minutes not in SLOT_DURATIONS_MINUTES:
            raise InvalidTemplateError("Slot duration must be 60, 120 or 240 minutes")
        if self.max_participants_per_slot < 1:
            raise InvalidTemplateError("Slots need room for at least one participant")


def generate_time_slots(config: SlotConfig) -> tuple[TimeSlot, ...]:
    """Split operating hours into back-to-back slots that fit entirely."""
    length = timedelta(minutes=config.duration_minutes)
    current = datetime.combine(_ANCHOR, config.operating_start)
    end = datetime.combine(_ANCHOR, config.operating_end)
    slots = []
    while current + length <= end:
        slots.append(
            TimeSlot(
                start_time=current.time(),
                end_time=(current + length).time(),
                max_participants=config.max_participants_per_slot,
            )
        )
        current += length
    return tuple(slots)


def build_daily_availability(
    start_date: date,
    end_date: date,
    exclude_dates: Iterable[date],
    max_participants_per_day: int,
    *,
    slot_config: SlotConfig | None = None,
    custom_times: Mapping[date, tuple[time, time]] | None = None,
) -> tuple[DayAvailability, ...]:
    """Return one empty availability row per offered day, in date order."""
    if end_date < start_date:
        raise InvalidTemplateError("End date is before the start date")
    if max_participants_per_day < 1:
        raise InvalidTemplateError("Days need room for at least one participant")

    excluded = set(exclude_dates)
    slots = generate_time_slots(slot_config) if slot_config is not None else ()
    custom_times = custom_times or {}

    rows = []
    current = start_date
    while current <= end_date:
        if current not in excluded:
            start_time, end_time = custom_times.get(current, (None, None))
            rows.append(
                DayAvailability(
                    date=current,
                    max_participants=max_participants_per_day,
                    start_time=start_time,
                    end_time=end_time,
                    time_slots=slots,
                )
            )
        current += timedelta(days=1)
    return tuple(rows)


def create_program(
    name: str,
    start_date: date,
    end_date: date,
    price_per_day_per_participant: Money,
    max_participants_per_day: int | None = None,
    *,
    exclude_dates: Iterable[date] = (),
    slot_config: SlotConfig | None = None,
    custom_times: Mapping[date, tuple[time, time]] | None = None,
    day_pricing_tiers: Iterable[PricingTier] = (),
    discount: ProgramDiscount | None = None,
    description: str = "",
    program_id: ProgramId | None = None,
) -> ReservationProgram:
    """Assemble a new program with empty capacity rows.

    With time slots and no explicit daily maximum, a day holds as many
    people as one slot.
    """
    if max_participants_per_day is None:
        if slot_config is None:
            raise InvalidTemplateError("Max participants per day is required")
        max_participants_per_day = slot_config.max_participants_per_slot

    excluded = frozenset(exclude_dates)
    return ReservationProgram(
        id=program_id or ProgramId(uuid4()),
        name=name,
        start_date=start_date,
        end_date=end_date,
        price_per_day_per_participant=price_per_day_per_participant,
        daily_availability=build_daily_availability(
            start_date,
            end_date,
            excluded,
            max_participants_per_day,
            slot_config=slot_config,
            custom_times=custom_times,
        ),
        exclude_dates=excluded,
        enable_time_slots=slot_config is not None,
        slot_duration_minutes=slot_config.duration_minutes if slot_config else None,
        day_pricing_tiers=tuple(day_pricing_tiers),
        discount=discount,
        description=description,
    )
