"""Expands event templates into concrete, dated occurrences.

Expansion is a pure function of its inputs: calling `expand` again with
the same template and window yields the same sequence, so occurrences are
recomputed on demand and never stored.

- Single-day templates yield one occurrence.
- Multi-day, non-recurring templates yield one occurrence per calendar day,
  so sign-ups and capacity apply per day.
- Recurring templates step forward a fixed number of days per pattern
  (monthly is 30 days, yearly is 365) until the recurring end date.
"""

import warnings
from collections.abc import Iterator
from datetime import date, datetime, timedelta, tzinfo

import structlog

from bookings.domain import EventTemplate, Occurrence
from bookings.domain.errors import InvalidWindowError

logger = structlog.get_logger(__name__)

ONE_DAY = timedelta(days=1)


class OccurrenceEndTimeWarning(UserWarning):
    """An occurrence would end before it starts; its end time was dropped."""


def expand(
    template: EventTemplate,
    window_start: date,
    window_end: date,
    *,
    tz: tzinfo | None = None,
    limit: int | None = None,
) -> Iterator[Occurrence]:
    """Return the template's occurrences dated within [window_start, window_end].

    Occurrences come out in date order. `limit` caps how many are produced.

    Raises:
        InvalidWindowError: If window_end is before window_start.
    """
    if window_end < window_start:
        raise InvalidWindowError(window_start, window_end)
    return _generate(template, window_start, window_end, tz, limit)


def _generate(
    template: EventTemplate,
    window_start: date,
    window_end: date,
    tz: tzinfo | None,
    limit: int | None,
) -> Iterator[Occurrence]:
    produced = 0
    seen_first = False
    for day in candidate_dates(template):
        if day in template.exclude_dates:
            continue
        is_first = not seen_first
        seen_first = True
        if day > window_end:
            return
        if day < window_start:
            continue
        if limit is not None and produced >= limit:
            return
        yield _build(template, day, is_first, tz)
        produced += 1


def candidate_dates(template: EventTemplate) -> Iterator[date]:
    """Yield every date the template covers, before exclusions."""
    if template.is_recurring:
        step = timedelta(days=template.recurring_pattern.step_days)
        current = template.start_date
        while current <= template.recurring_end_date:
            yield current
            current += step
    elif template.is_multi_day:
        current = template.start_date
        while current <= template.end_date:
            yield current
            current += ONE_DAY
    else:
        yield template.start_date


def _build(
    template: EventTemplate, day: date, is_first: bool, tz: tzinfo | None
) -> Occurrence:
    start = datetime.combine(day, template.start_time, tzinfo=tz)
    end = None
    if template.end_time is not None:
        end = datetime.combine(day, template.end_time, tzinfo=tz)
        if end < start:
            warnings.warn(
                f"Occurrence of {template.id} on {day.isoformat()} ends before it "
                "starts; end time dropped",
                OccurrenceEndTimeWarning,
                stacklevel=3,
            )
            logger.warning(
                "occurrence_end_time_dropped",
                template_id=str(template.id),
                date=day.isoformat(),
            )
            end = None
    return Occurrence(
        source_template_id=template.id,
        date=day,
        start_instant=start,
        end_instant=end,
        is_first_occurrence=is_first,
    )
