"""Tests for building reservation programs and their availability rows.

Run with: pytest tests/test_program_builder.py -v
"""

from datetime import date, time
from decimal import Decimal

import pytest

from bookings.domain import Money, PricingTier
from bookings.domain.errors import InvalidTemplateError
from bookings.services.program_builder import (
    SlotConfig,
    build_daily_availability,
    create_program,
    generate_time_slots,
)


class TestGenerateTimeSlots:
    """Tests for splitting operating hours into slots."""

    def test_back_to_back_slots(self):
        """Two-hour slots from 9 to 17 give four slots."""
        slots = generate_time_slots(SlotConfig(120, 6, time(9, 0), time(17, 0)))

        assert [(s.start_time, s.end_time) for s in slots] == [
            (time(9), time(11)),
            (time(11), time(13)),
            (time(13), time(15)),
            (time(15), time(17)),
        ]
        assert all(s.max_participants == 6 for s in slots)

    def test_partial_slot_dropped(self):
        """A trailing period shorter than a slot is not offered."""
        slots = generate_time_slots(SlotConfig(240, 6, time(9, 0), time(16, 0)))

        assert len(slots) == 1

    def test_unsupported_duration(self):
        """Only 60, 120 and 240 minute slots exist."""
        with pytest.raises(InvalidTemplateError):
            SlotConfig(45, 6, time(9, 0), time(17, 0))


class TestBuildDailyAvailability:
    """Tests for per-day rows."""

    def test_one_row_per_offered_day(self):
        """Every day in range except excluded ones gets an empty row."""
        rows = build_daily_availability(
            date(2025, 3, 1), date(2025, 3, 5), [date(2025, 3, 3)], 8
        )

        assert [row.date for row in rows] == [
            date(2025, 3, 1),
            date(2025, 3, 2),
            date(2025, 3, 4),
            date(2025, 3, 5),
        ]
        assert all(row.max_participants == 8 and row.current_bookings == 0 for row in rows)

    def test_custom_times(self):
        """A day can carry its own start and end times."""
        rows = build_daily_availability(
            date(2025, 3, 1),
            date(2025, 3, 2),
            [],
            8,
            custom_times={date(2025, 3, 2): (time(13, 0), time(18, 0))},
        )

        assert rows[0].start_time is None
        assert (rows[1].start_time, rows[1].end_time) == (time(13, 0), time(18, 0))

    def test_inverted_range(self):
        """The range cannot end before it starts."""
        with pytest.raises(InvalidTemplateError):
            build_daily_availability(date(2025, 3, 5), date(2025, 3, 1), [], 8)


class TestCreateProgram:
    """Tests for assembling a program."""

    def test_program_with_slots(self):
        """Slot programs take their daily capacity from the slot size."""
        program = create_program(
            "Clay Studio",
            date(2025, 3, 1),
            date(2025, 3, 2),
            Money(Decimal("45")),
            slot_config=SlotConfig(60, 4, time(10, 0), time(12, 0)),
            day_pricing_tiers=[PricingTier(2, Money(40))],
        )

        assert program.enable_time_slots
        assert program.slot_duration_minutes == 60
        assert len(program.daily_availability) == 2
        assert all(len(row.time_slots) == 2 for row in program.daily_availability)
        assert program.daily_availability[0].max_participants == 4

    def test_max_required_without_slots(self):
        """Without slots a daily maximum must be given."""
        with pytest.raises(InvalidTemplateError):
            create_program("Camp", date(2025, 3, 1), date(2025, 3, 2), Money(45))

    def test_excluded_dates_kept_on_program(self):
        """Excluded dates are recorded on the program and have no rows."""
        program = create_program(
            "Camp",
            date(2025, 3, 1),
            date(2025, 3, 3),
            Money(45),
            12,
            exclude_dates=[date(2025, 3, 2)],
        )

        assert program.exclude_dates == frozenset({date(2025, 3, 2)})
        assert program.day(date(2025, 3, 2)) is None
