"""
View state service - range selection and single-calendar aggregation.

PURPOSE: Own the user's range selection and answer "how many hours in this range".
AI CONTEXT: Shared service layer used by both the web API and the CLI.

ARCHITECTURE:
    Web routes ──┐                       ┌──► StatisticsEngine
                 ├──► ViewState ─────────┼──► MultiCalendarProjector
    CLI commands ┘        │              └──► EventStore (read)
                          ├──► config writer (persist changes)
                          └──► request_events(calendar_id) (fetch trigger)

MUTATORS (each persists the changed keys):
- select_calendar(calendar_id)
- select_range(kind)
- step_range('prev' | 'next')
- reset_range() / set_anchor(instant)
- set_week_start(week_start)
- set_custom_bounds(start, end) / set_custom_start(start) / set_custom_end(end)

READERS:
- current_range(): resolved TimeRange of the selection
- summary(): RangeSummary for the selected calendar (hours None while loading)
- monthly_series() / yearly_series(): series for the selected calendar
- all_monthly(year) / all_yearly() / all_weekly(year): memoized, all calendars

USAGE:
    state = ViewState.from_storage(
        store, storage, request_events=fetcher.request)
    state.select_range("week")
    print(state.summary().hours)
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import replace
from datetime import UTC, datetime, timedelta, tzinfo
from typing import Any, Protocol

from .config import Config
from .events import EventStore
from .models import (
    InvalidRangeKind,
    PeriodBucket,
    RangeError,
    RangeKind,
    RangeSelection,
    RangeSummary,
    TimeRange,
    WeekStart,
)
from .projector import MultiCalendarProjector, SeriesByCalendar
from .statistics import StatisticsEngine
from .timeranges import check_custom_bounds, local_date, resolve_range, start_of_day, step_anchor

__all__ = ["ConfigWriter", "ViewState", "view_state_from_storage"]

logger = logging.getLogger(__name__)


class ConfigWriter(Protocol):
    """Anything that can persist changed view settings. StorageManager fits."""

    def update_config(self, changes: dict[str, Any]) -> bool: ...


class ViewState:
    """
    Range selection owner and single-calendar aggregator.

    The selection is replaced, never mutated, by the mutator methods. A
    mutator that raises leaves the previous selection in place.

    Single-calendar figures are recomputed on every read; only the
    all-calendar series go through the projector's cache.
    """

    def __init__(
        self,
        store: EventStore,
        selection: RangeSelection | None = None,
        selected_calendar_id: str | None = None,
        *,
        config_writer: ConfigWriter | None = None,
        request_events: Callable[[str], None] | None = None,
        engine: StatisticsEngine | None = None,
        projector: MultiCalendarProjector | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """
        Initialize the view state.

        Args:
            store: EventStore holding calendars and EventsByCalendar.
            selection: Initial selection. Default: month of today.
            selected_calendar_id: Calendar for summary() and single series.
            config_writer: Receives changed settings. None disables persistence.
            request_events: Called with a calendar id whose events are needed
                but absent. None means events are supplied some other way.
            engine: StatisticsEngine. Default: one built with ``clock``.
            projector: MultiCalendarProjector. Default: one sharing ``engine``.
            clock: Returns the current instant. Default: datetime.now(UTC).
        """
        self._clock = clock or (lambda: datetime.now(UTC))
        self.engine = engine or StatisticsEngine(clock=self._clock)
        self.projector = projector or MultiCalendarProjector(self.engine)
        self.store = store
        self._config_writer = config_writer
        self._request_events = request_events
        self._selection = selection or self.default_selection()
        self._selected_calendar_id = selected_calendar_id

    @classmethod
    def from_storage(
        cls,
        store: EventStore,
        storage: Any,
        *,
        request_events: Callable[[str], None] | None = None,
        engine: StatisticsEngine | None = None,
        clock: Callable[[], datetime] | None = None,
        persist: bool = True,
    ) -> ViewState:
        """
        Restore the selection persisted by a previous session.

        Args:
            store: EventStore to read events from.
            storage: StorageManager (load_config + update_config).
            request_events: Fetch trigger, see __init__.
            engine: StatisticsEngine, see __init__.
            clock: Clock, see __init__.
            persist: Write later changes back to ``storage``. False gives a
                read-only view, as used by one-shot CLI queries.

        Returns:
            ViewState whose changes are written back to ``storage`` when persist is set.
        """
        state = cls(
            store,
            config_writer=storage if persist else None,
            request_events=request_events,
            engine=engine,
            clock=clock,
        )
        config = storage.load_config()
        state._selection = RangeSelection.from_dict(config, default_anchor=state.today(), tz=state.engine.tz)
        state._selected_calendar_id = config.get("selected_calendar_id")
        return state

    # =========================================================================
    # STATE ACCESS
    # =========================================================================

    @property
    def selection(self) -> RangeSelection:
        return self._selection

    @property
    def selected_calendar_id(self) -> str | None:
        return self._selected_calendar_id

    def today(self) -> datetime:
        """Local midnight of the current day."""
        return start_of_day(self._clock(), self.engine.tz)

    def default_selection(self) -> RangeSelection:
        """Month of today with the configured default week start."""
        return RangeSelection(kind=Config.DEFAULT_RANGE_KIND, anchor=self.today())

    def current_range(self) -> TimeRange:
        """
        Resolve the current selection.

        Raises:
            InvalidRangeKind: If the selection's kind is unknown.
            MissingCustomBounds: If a custom selection lacks a bound.
            RangeError: If a custom selection ends before it starts.
        """
        return resolve_range(self._selection, self.engine.tz)

    # =========================================================================
    # MUTATORS
    # =========================================================================

    def select_calendar(self, calendar_id: str) -> None:
        """
        Select the calendar shown by summary(), requesting its events if absent.
        """
        self._selected_calendar_id = calendar_id
        self._persist({"selected_calendar_id": calendar_id})
        if self.store.get_events(calendar_id) is None:
            self._request(calendar_id)

    def select_range(self, kind: str) -> None:
        """
        Switch the range kind.

        Switching to custom seeds the custom bounds from the range currently
        shown, with the end moved back one day because custom end days are
        inclusive. From the unbounded total range the seed is
        Config.TOTAL_RANGE_START / TOTAL_RANGE_END.

        Raises:
            InvalidRangeKind: If kind is unknown. The selection is unchanged.
        """
        if kind not in RangeKind.ALL:
            raise InvalidRangeKind(kind)

        changes: dict[str, Any] = {"selected_range_type": kind}
        selection = replace(self._selection, kind=kind)

        if kind == RangeKind.CUSTOM:
            shown = self.current_range()
            start = shown.start or Config.TOTAL_RANGE_START
            end = (shown.end or Config.TOTAL_RANGE_END) - timedelta(days=1)
            selection = replace(selection, custom_start=start, custom_end=end)
            changes.update(custom_start=start.isoformat(), custom_end=end.isoformat())

        self._selection = selection
        self._persist(changes)

    def step_range(self, direction: str) -> None:
        """
        Move the anchor one period back ('prev') or forward ('next').

        No-op for total and custom ranges.

        Raises:
            RangeError: If direction is not 'prev' or 'next'.
        """
        anchor = step_anchor(self._selection.kind, self._selection.anchor, direction, self.engine.tz)
        if anchor == self._selection.anchor:
            return
        self._selection = replace(self._selection, anchor=anchor)
        self._persist({"start": anchor.isoformat()})

    def reset_range(self) -> None:
        """Move the anchor back to today."""
        self.set_anchor(self.today())

    def set_anchor(self, instant: datetime) -> None:
        """Show the period containing ``instant``. Stored as its local midnight."""
        anchor = start_of_day(instant, self.engine.tz)
        self._selection = replace(self._selection, anchor=anchor)
        self._persist({"start": anchor.isoformat()})

    def set_week_start(self, week_start: str) -> None:
        """
        Choose Monday (ISO) or Sunday as the first day of week ranges.

        Raises:
            RangeError: If week_start is not in WeekStart.ALL.
        """
        if week_start not in WeekStart.ALL:
            raise RangeError(f"Invalid week start: {week_start!r}")
        self._selection = replace(self._selection, week_start=week_start)
        self._persist({"week_start": week_start})

    def set_custom_bounds(self, start: datetime, end: datetime) -> None:
        """
        Set both custom bounds. ``end`` is the inclusive last day.

        Raises:
            RangeError: If end is before start.
        """
        self._set_custom(replace(self._selection, custom_start=start, custom_end=end))
        self._persist({"custom_start": start.isoformat(), "custom_end": end.isoformat()})

    def set_custom_start(self, start: datetime) -> None:
        """
        Set the custom start alone, as a date picker would.

        Raises:
            RangeError: If the current custom end is before ``start``.
            MissingCustomBounds: If a custom range is shown and has no end.
        """
        self._set_custom(replace(self._selection, custom_start=start))
        self._persist({"custom_start": start.isoformat()})

    def set_custom_end(self, end: datetime) -> None:
        """
        Set the inclusive custom end day alone.

        Raises:
            RangeError: If ``end`` is before the current custom start.
            MissingCustomBounds: If a custom range is shown and has no start.
        """
        self._set_custom(replace(self._selection, custom_end=end))
        self._persist({"custom_end": end.isoformat()})

    def _set_custom(self, selection: RangeSelection) -> None:
        """Install new custom bounds only if the selection still resolves."""
        check_custom_bounds(selection.custom_start, selection.custom_end)
        if selection.kind == RangeKind.CUSTOM:
            resolve_range(selection, self.engine.tz)
        self._selection = selection

    # =========================================================================
    # AGGREGATION
    # =========================================================================

    def summary(self) -> RangeSummary:
        """
        Hours and event count of the selected calendar in the current range.

        Returns:
            RangeSummary with hours=None while the calendar's events are not
            loaded (or no calendar is selected). Absent events are requested.

        Raises:
            RangeError: If the current selection cannot be resolved.
        """
        calendar_id = self._selected_calendar_id
        if calendar_id is None:
            return RangeSummary(hours=None)

        events = self.store.get_events(calendar_id)
        if events is None:
            self._request(calendar_id)
            # A synchronous fetcher may already have delivered
            events = self.store.get_events(calendar_id)
            if events is None:
                return RangeSummary(hours=None)

        span = self.current_range()
        return RangeSummary(
            hours=self.engine.hours_in(events, span),
            event_count=self.engine.count_in(events, span),
        )

    def monthly_series(self) -> list[PeriodBucket] | None:
        """Monthly series of the selected calendar for the anchor's year, None if not loaded."""
        events = self._selected_events()
        if events is None:
            return None
        year = local_date(self._selection.anchor, self.engine.tz).year
        return self.engine.monthly_series(events, year)

    def yearly_series(self) -> list[PeriodBucket] | None:
        """Yearly series of the selected calendar, None if not loaded."""
        events = self._selected_events()
        if events is None:
            return None
        return self.engine.yearly_series(events)

    def all_monthly(self, year: int | None = None) -> SeriesByCalendar:
        return self.projector.all_monthly(self.store.events_by_calendar, year)

    def all_yearly(self) -> SeriesByCalendar:
        return self.projector.all_yearly(self.store.events_by_calendar)

    def all_weekly(self, year: int | None = None) -> SeriesByCalendar:
        return self.projector.all_weekly(self.store.events_by_calendar, year)

    # =========================================================================
    # SIDE EFFECTS
    # =========================================================================

    def request_all(self) -> None:
        """Request events of every known calendar that has none yet."""
        for calendar in self.store.calendars or ():
            if self.store.get_events(calendar.id) is None:
                self._request(calendar.id)

    def _selected_events(self) -> Any:
        if self._selected_calendar_id is None:
            return None
        return self.store.get_events(self._selected_calendar_id)

    def _request(self, calendar_id: str) -> None:
        """Trigger a fetch for ``calendar_id`` unless one is already pending."""
        if self.store.is_pending(calendar_id):
            return
        self.store.mark_pending(calendar_id)
        if self._request_events is not None:
            logger.info(f"Requesting events for calendar {calendar_id}")
            self._request_events(calendar_id)

    def _persist(self, changes: dict[str, Any]) -> None:
        """Write changed settings. Failures are logged, never raised."""
        if self._config_writer is None:
            return
        try:
            if not self._config_writer.update_config(changes):
                logger.error(f"Failed to persist settings: {sorted(changes)}")
        except Exception:
            logger.exception(f"Failed to persist settings: {sorted(changes)}")


def view_state_from_storage(
    storage: Any,
    *,
    tz: tzinfo | None = None,
    clock: Callable[[], datetime] | None = None,
    persist: bool = True,
) -> ViewState:
    """
    Build a ViewState backed by the snapshots kept in ``storage``.

    The stored calendar list seeds the EventStore and every calendar's
    snapshot is requested up front, as the web client does after fetching
    its calendar list. Calendars without a snapshot stay pending.

    Args:
        storage: StorageManager with calendars, events and config.
        tz: Local timezone. Default: Config.get_timezone().
        clock: Clock for today / current year. Default: datetime.now(UTC).
        persist: Write selection changes back to ``storage``.

    Returns:
        ViewState restored from the persisted config.
    """
    store = EventStore()
    store.set_calendars(storage.load_calendars())

    def load_snapshot(calendar_id: str) -> None:
        events = storage.load_events(calendar_id)
        if events is None:
            logger.warning(f"No event snapshot for calendar {calendar_id}")
            return
        store.set_events(calendar_id, events)

    engine = StatisticsEngine(tz=tz, clock=clock)
    state = ViewState.from_storage(
        store, storage, request_events=load_snapshot, engine=engine, clock=clock, persist=persist
    )
    state.request_all()
    return state
