"""
Memoized multi-calendar projections for Calendar Hours.

PURPOSE: Build per-calendar period series for every loaded calendar and reuse them.
AI CONTEXT: Owns the only mutable aggregation state - one cache slot per granularity.

CACHE MODEL:
    (granularity) ──► slot(source mapping, year, result)

    A read hits when the EventsByCalendar mapping passed in IS the cached
    one (reference identity, not equality) and the year matches. A hit
    returns the cached result object itself, so callers can skip work by
    comparing results with ``is``.

PRECONDITION:
    Whoever owns EventsByCalendar must replace the mapping (not mutate it)
    whenever any calendar's events change. EventStore does this. Mutating a
    mapping in place leaves stale results in the cache.

ERROR ISOLATION:
    A calendar whose series cannot be computed is logged and left out of
    the result; the other calendars are still projected.
    An unsupported year is a caller error: it raises RangeError before any
    calendar is projected.

USAGE:
    projector = MultiCalendarProjector()
    monthly = projector.all_monthly(store.events_by_calendar, 2024)
    assert projector.all_monthly(store.events_by_calendar, 2024) is monthly
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from .models import Event, PeriodBucket
from .statistics import StatisticsEngine
from .timeranges import check_series_year

__all__ = ["AggregationCache", "MultiCalendarProjector", "EventsByCalendar", "SeriesByCalendar"]

logger = logging.getLogger(__name__)

EventsByCalendar = Mapping[str, Sequence[Event] | None]
SeriesByCalendar = dict[str, list[PeriodBucket]]

MONTHLY = "monthly"
YEARLY = "yearly"
WEEKLY = "weekly"


@dataclass
class _CacheSlot:
    source: Any
    year: int | None
    result: SeriesByCalendar


class AggregationCache:
    """
    One-slot-per-granularity memo keyed by (source identity, year).

    Only the last result per granularity is kept: switching years evicts
    the previous year. The source mapping is held by reference so its
    identity cannot be reused by a new object while the slot is alive.
    """

    def __init__(self) -> None:
        self._slots: dict[str, _CacheSlot] = {}

    def get(self, granularity: str, source: object, year: int | None) -> SeriesByCalendar | None:
        """Return the cached result when source identity and year match."""
        slot = self._slots.get(granularity)
        if slot is not None and slot.source is source and slot.year == year:
            return slot.result
        return None

    def put(self, granularity: str, source: object, year: int | None, result: SeriesByCalendar) -> None:
        """Replace the slot for ``granularity``."""
        self._slots[granularity] = _CacheSlot(source=source, year=year, result=result)

    def clear(self) -> None:
        """Drop all slots."""
        self._slots.clear()

    def __len__(self) -> int:
        return len(self._slots)


class MultiCalendarProjector:
    """
    Applies the series generators to every loaded calendar, memoized.

    ENTRY POINTS:
    - all_monthly(events_by_calendar, year): 12 buckets per calendar
    - all_yearly(events_by_calendar): trailing-years buckets per calendar
    - all_weekly(events_by_calendar, year): one bucket per ISO week

    Calendars whose entry is None (not loaded yet) get no key in the result.
    """

    def __init__(
        self,
        engine: StatisticsEngine | None = None,
        cache: AggregationCache | None = None,
    ) -> None:
        """
        Initialize the projector.

        Args:
            engine: StatisticsEngine producing single-calendar series.
                Default: StatisticsEngine()
            cache: AggregationCache to use. Pass one in to share or inspect
                it from tests. Default: a new empty cache.
        """
        self.engine = engine or StatisticsEngine()
        self.cache = cache if cache is not None else AggregationCache()

    def all_monthly(self, events_by_calendar: EventsByCalendar, year: int | None = None) -> SeriesByCalendar:
        """
        Monthly series for every loaded calendar. ``year`` defaults to the current year.

        Raises:
            RangeError: If year is outside the supported series years. Nothing
                is computed or cached.
        """
        target_year = check_series_year(year if year is not None else self.engine.current_year())
        return self._project(
            MONTHLY,
            events_by_calendar,
            target_year,
            lambda events: self.engine.monthly_series(events, target_year),
        )

    def all_yearly(self, events_by_calendar: EventsByCalendar) -> SeriesByCalendar:
        """
        Yearly series for every loaded calendar.

        Keyed on the current year as well as the source, so the series moves
        on at New Year even if no events changed.
        """
        current_year = self.engine.current_year()
        return self._project(
            YEARLY,
            events_by_calendar,
            current_year,
            lambda events: self.engine.yearly_series(events, current_year),
        )

    def all_weekly(self, events_by_calendar: EventsByCalendar, year: int | None = None) -> SeriesByCalendar:
        """ISO-week series for every loaded calendar. Raises RangeError like all_monthly()."""
        target_year = check_series_year(year if year is not None else self.engine.current_year())
        return self._project(
            WEEKLY,
            events_by_calendar,
            target_year,
            lambda events: self.engine.weekly_series(events, target_year),
        )

    def clear(self) -> None:
        """Forget all cached projections."""
        self.cache.clear()

    def _project(
        self,
        granularity: str,
        source: EventsByCalendar,
        year: int,
        build: Callable[[Sequence[Event]], list[PeriodBucket]],
    ) -> SeriesByCalendar:
        """
        Return the cached projection or recompute it for all calendars.

        ``source`` is read once: the identity compared against the cache is
        the same object that is iterated and stored.
        """
        cached = self.cache.get(granularity, source, year)
        if cached is not None:
            logger.debug(f"{granularity} projection cache hit for {year}")
            return cached

        result: SeriesByCalendar = {}
        for calendar_id, events in source.items():
            if events is None:
                continue
            try:
                result[calendar_id] = build(events)
            except Exception:
                logger.exception(f"Failed to build {granularity} series for calendar {calendar_id}")

        logger.debug(f"Recomputed {granularity} projection for {year}: {len(result)} calendar(s)")
        self.cache.put(granularity, source, year, result)
        return result
