"""Tests for occurrence expansion.

Run with: pytest tests/test_occurrence_expander.py -v
"""

from datetime import date, time
from zoneinfo import ZoneInfo

import pytest

from bookings.domain import RecurrencePattern
from bookings.domain.errors import InvalidWindowError
from bookings.services.occurrence_expander import (
    OccurrenceEndTimeWarning,
    candidate_dates,
    expand,
)
from factories import make_template, make_weekly_template


class TestRecurringExpansion:
    """Tests for recurring templates."""

    def test_weekly_series_within_month(self):
        """A weekly series yields every week up to its end date, first flagged once."""
        template = make_weekly_template(
            start_date=date(2024, 6, 3), recurring_end_date=date(2024, 6, 24)
        )

        occurrences = list(expand(template, date(2024, 6, 1), date(2024, 6, 30)))

        assert [o.date for o in occurrences] == [
            date(2024, 6, 3),
            date(2024, 6, 10),
            date(2024, 6, 17),
            date(2024, 6, 24),
        ]
        assert [o.is_first_occurrence for o in occurrences] == [True, False, False, False]

    def test_monthly_steps_thirty_days(self):
        """Monthly recurrence advances 30 days, not a calendar month."""
        template = make_template(
            start_date=date(2025, 1, 31),
            is_recurring=True,
            recurring_pattern=RecurrencePattern.MONTHLY,
            recurring_end_date=date(2025, 4, 30),
        )

        dates = [o.date for o in expand(template, date(2025, 1, 1), date(2025, 12, 31))]

        assert dates == [date(2025, 1, 31), date(2025, 3, 2), date(2025, 4, 1)]

    def test_first_flag_is_series_wide(self):
        """A window that skips the series start has no first occurrence."""
        template = make_weekly_template()

        occurrences = list(expand(template, date(2025, 1, 10), date(2025, 1, 31)))

        assert occurrences
        assert not any(o.is_first_occurrence for o in occurrences)

    def test_excluded_dates_are_skipped(self):
        """Excluded dates never appear and the next date becomes first."""
        template = make_weekly_template(exclude_dates=frozenset({date(2025, 1, 6)}))

        occurrences = list(expand(template, date(2025, 1, 1), date(2025, 1, 31)))

        assert date(2025, 1, 6) not in [o.date for o in occurrences]
        assert occurrences[0].date == date(2025, 1, 13)
        assert occurrences[0].is_first_occurrence

    def test_nothing_after_recurring_end(self):
        """No occurrence is dated after the recurring end date."""
        template = make_weekly_template(recurring_end_date=date(2025, 1, 20))

        dates = [o.date for o in expand(template, date(2025, 1, 1), date(2025, 6, 30))]

        assert max(dates) <= date(2025, 1, 20)

    def test_expansion_is_deterministic(self):
        """Expanding twice gives identical sequences."""
        template = make_weekly_template()
        window = (date(2025, 1, 1), date(2025, 1, 31))

        assert list(expand(template, *window)) == list(expand(template, *window))


class TestSingleAndMultiDay:
    """Tests for non-recurring templates."""

    def test_single_day_yields_one(self):
        """A one-off class yields exactly one occurrence."""
        template = make_template()

        occurrences = list(expand(template, date(2025, 1, 1), date(2025, 1, 31)))

        assert len(occurrences) == 1
        assert occurrences[0].is_first_occurrence

    def test_multi_day_yields_each_day(self):
        """A three-day workshop yields one occurrence per day."""
        template = make_template(start_date=date(2025, 2, 1), end_date=date(2025, 2, 3))

        dates = [o.date for o in expand(template, date(2025, 1, 1), date(2025, 2, 28))]

        assert dates == [date(2025, 2, 1), date(2025, 2, 2), date(2025, 2, 3)]

    def test_window_clips_multi_day(self):
        """Only the days inside the window are returned."""
        template = make_template(start_date=date(2025, 2, 1), end_date=date(2025, 2, 5))

        dates = [o.date for o in expand(template, date(2025, 2, 3), date(2025, 2, 4))]

        assert dates == [date(2025, 2, 3), date(2025, 2, 4)]

    def test_candidate_dates_ignore_exclusions(self):
        """candidate_dates lists every covered date before exclusions."""
        template = make_template(
            start_date=date(2025, 2, 1),
            end_date=date(2025, 2, 2),
            exclude_dates=frozenset({date(2025, 2, 1)}),
        )

        assert list(candidate_dates(template)) == [date(2025, 2, 1), date(2025, 2, 2)]


class TestInstants:
    """Tests for occurrence start and end instants."""

    def test_instants_use_time_zone(self):
        """Start and end combine the date, the template times and the zone."""
        zone = ZoneInfo("America/New_York")
        template = make_template()

        occurrence = next(iter(expand(template, date(2025, 1, 6), date(2025, 1, 6), tz=zone)))

        assert occurrence.start_instant.tzinfo is zone
        assert occurrence.start_instant.time() == time(9, 0)
        assert occurrence.end_instant.time() == time(10, 0)

    def test_end_before_start_drops_end(self):
        """An end time before the start time is dropped with a warning."""
        template = make_template(start_time=time(18, 0), end_time=time(17, 0))

        with pytest.warns(OccurrenceEndTimeWarning):
            occurrences = list(expand(template, date(2025, 1, 1), date(2025, 1, 31)))

        assert occurrences[0].end_instant is None

    def test_missing_end_time(self):
        """A template without an end time yields open-ended occurrences."""
        template = make_template(end_time=None)

        occurrence = next(iter(expand(template, date(2025, 1, 1), date(2025, 1, 31))))

        assert occurrence.end_instant is None


class TestWindow:
    """Tests for window handling."""

    def test_inverted_window_raises_immediately(self):
        """A window ending before it starts raises before iteration."""
        with pytest.raises(InvalidWindowError):
            expand(make_template(), date(2025, 2, 1), date(2025, 1, 1))

    def test_window_outside_series_is_empty(self):
        """A window with no covered dates yields nothing."""
        template = make_weekly_template()

        assert list(expand(template, date(2026, 1, 1), date(2026, 1, 31))) == []

    def test_limit_caps_results(self):
        """limit bounds how many occurrences are produced."""
        template = make_template(
            is_recurring=True,
            recurring_pattern=RecurrencePattern.DAILY,
            recurring_end_date=date(2030, 1, 1),
        )

        occurrences = list(expand(template, date(2025, 1, 1), date(2029, 12, 31), limit=5))

        assert len(occurrences) == 5
