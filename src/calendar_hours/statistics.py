"""
Statistics engine for Calendar Hours.

PURPOSE: Clip events to intervals, sum covered hours and build per-period series.
AI CONTEXT: Pure data processing - no caching, no visualization, no I/O.

METRIC CATEGORIES:
1. Range Metrics: Hours covered in one interval, events intersecting it
2. Series Metrics: Hours per month of a year, per ISO week, per trailing year

CLIPPING MODEL:
- An event overlaps [start, end) unless it ends at or before start, or
  starts at or after end
- Overlapping events contribute max(0, min(e.end, end) - max(e.start, start))
- The total is rounded once, after summing, so errors do not accumulate
- Adjacent periods tile: hours(a, b) + hours(b, c) == hours(a, c)

USAGE:
    engine = StatisticsEngine()
    hours = engine.hours_in_range(events, start, end)
    months = engine.monthly_series(events, 2024)
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from datetime import UTC, datetime, tzinfo

from .config import Config
from .models import Event, PeriodBucket, TimeRange
from .timeranges import MONTH_LABELS, iso_week_range, iso_weeks_in_year, month_range, round_hours, year_range

__all__ = ["StatisticsEngine"]

logger = logging.getLogger(__name__)


class StatisticsEngine:
    """
    Calculator for hour totals and period series.

    DESIGN:
    - Stateless: Each method operates on provided events
    - Pure: No side effects apart from logging malformed events
    - Configurable: Timezone and clock injectable for tests

    OPEN BOUNDS:
    ``None`` as start or end means unbounded on that side, which is how
    the Total range is represented.
    """

    def __init__(
        self,
        tz: tzinfo | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """
        Initialize statistics engine with period timezone and clock.

        Args:
            tz: Timezone whose wall clock defines month, week and year
                boundaries. Default: Config.get_timezone()
            clock: Callable returning the current instant, used to find the
                current year for yearly series. Default: datetime.now(UTC)

        Example:
            >>> engine = StatisticsEngine(tz=ZoneInfo('Europe/Berlin'))
            >>> engine.current_year()
            2026
        """
        self.tz = tz or Config.get_timezone()
        self._clock = clock or (lambda: datetime.now(UTC))

    def current_year(self) -> int:
        """Calendar year of the clock's current instant in the engine timezone."""
        return self._clock().astimezone(self.tz).year

    def hours_in_range(
        self,
        events: Iterable[Event],
        start: datetime | None,
        end: datetime | None,
    ) -> float:
        """
        Sum the hours of ``events`` that fall inside [start, end).

        Events partially inside the interval are clipped to it. Events with
        end before start are malformed: they are logged and contribute 0
        instead of a negative amount.

        Business context: This is the single primitive behind every number
        shown to the user - the range total and each bar of every series.

        Args:
            events: EventSet of one calendar.
            start: Inclusive interval start, or None for unbounded. Naive
                datetimes are read in the engine timezone.
            end: Exclusive interval end, or None for unbounded.

        Returns:
            Covered hours, rounded via round_hours() once after summing.

        Example:
            >>> engine = StatisticsEngine(tz=UTC)
            >>> event = Event.from_dict({'start': '2024-03-10T09:00:00Z',
            ...                          'end': '2024-03-10T11:30:00Z'})
            >>> march = month_range(2024, 3, UTC)
            >>> engine.hours_in_range([event], march.start, march.end)
            2.5
        """
        start = self._to_utc(start)
        end = self._to_utc(end)
        span = TimeRange(start, end)
        seconds = 0.0

        for event in events:
            event_start = self._to_utc(event.start)
            event_end = self._to_utc(event.end)
            if not span.overlaps(event_start, event_end):
                continue
            if event.is_malformed:
                logger.warning(
                    f"Ignoring malformed event {event.id or '<no id>'}: "
                    f"end {event.end.isoformat()} precedes start {event.start.isoformat()}"
                )
                continue

            clipped_start = event_start if start is None or event_start > start else start
            clipped_end = event_end if end is None or event_end < end else end
            if clipped_end > clipped_start:
                seconds += (clipped_end - clipped_start).total_seconds()

        return round_hours(seconds / 3600)

    def count_in_range(
        self,
        events: Iterable[Event],
        start: datetime | None,
        end: datetime | None,
    ) -> int:
        """
        Count events intersecting [start, end), each exactly once.

        Uses the same overlap test as hours_in_range(); an event counts no
        matter how little of it falls inside the interval.
        """
        span = TimeRange(self._to_utc(start), self._to_utc(end))
        return sum(1 for event in events if span.overlaps(self._to_utc(event.start), self._to_utc(event.end)))

    def _to_utc(self, instant: datetime | None) -> datetime | None:
        """
        Convert to UTC for arithmetic. Naive instants are read in ``self.tz``.

        Aware datetimes sharing a tzinfo subtract by wall clock, so sums and
        comparisons are done in UTC.
        """
        if instant is None:
            return None
        if instant.tzinfo is None:
            instant = instant.replace(tzinfo=self.tz)
        return instant.astimezone(UTC)

    def hours_in(self, events: Iterable[Event], time_range: TimeRange) -> float:
        """hours_in_range() over a TimeRange."""
        return self.hours_in_range(events, time_range.start, time_range.end)

    def count_in(self, events: Iterable[Event], time_range: TimeRange) -> int:
        """count_in_range() over a TimeRange."""
        return self.count_in_range(events, time_range.start, time_range.end)

    def monthly_series(self, events: Iterable[Event], year: int) -> list[PeriodBucket]:
        """
        Hours per calendar month of ``year``.

        Args:
            events: EventSet of one calendar. Iterated once per month.
            year: Calendar year.

        Returns:
            Exactly 12 buckets labeled 'Jan'..'Dec'. An event crossing a month
            boundary is split between the two months.

        Example:
            >>> [b.label for b in engine.monthly_series([], 2024)][:3]
            ['Jan', 'Feb', 'Mar']
        """
        events = tuple(events)
        return [
            PeriodBucket(label=MONTH_LABELS[month - 1], hours=self.hours_in(events, month_range(year, month, self.tz)))
            for month in range(1, Config.MONTHS_PER_YEAR + 1)
        ]

    def yearly_series(self, events: Iterable[Event], current_year: int | None = None) -> list[PeriodBucket]:
        """
        Hours per year for the trailing years ending at the current year.

        Args:
            events: EventSet of one calendar.
            current_year: Last year of the series. Default: current_year().

        Returns:
            Config.YEARLY_SERIES_LENGTH buckets in ascending order, labeled
            with the four-digit year.
        """
        events = tuple(events)
        last = current_year if current_year is not None else self.current_year()
        first = last - Config.YEARLY_SERIES_LENGTH + 1
        return [
            PeriodBucket(label=str(year), hours=self.hours_in(events, year_range(year, self.tz)))
            for year in range(first, last + 1)
        ]

    def weekly_series(self, events: Iterable[Event], year: int) -> list[PeriodBucket]:
        """
        Hours per ISO week of ``year``.

        Each bucket spans [Monday 00:00, next Monday 00:00). Week 1 may begin
        in December of the previous year and the last week may end in January
        of the next, as ISO 8601 defines.

        Args:
            events: EventSet of one calendar.
            year: ISO week-numbering year.

        Returns:
            iso_weeks_in_year(year) buckets (52 or 53) labeled 'W1', 'W2', ...
        """
        events = tuple(events)
        return [
            PeriodBucket(label=f"W{week}", hours=self.hours_in(events, iso_week_range(year, week, self.tz)))
            for week in range(1, iso_weeks_in_year(year) + 1)
        ]
