"""
Calendar and event container for Calendar Hours.

PURPOSE: Hold the calendar list and the EventsByCalendar mapping fed by the fetcher.
AI CONTEXT: The fetch itself lives outside this package; this is where its results land.

COPY-ON-WRITE:
Every write replaces ``events_by_calendar`` with a new dict and stores the
events as a new tuple. The mapping's identity therefore changes exactly when
its contents change, which is what MultiCalendarProjector's cache relies on.
Never mutate the mapping returned by ``events_by_calendar``.

LOADING STATES:
- calendar id absent from mapping: never requested
- calendar id mapped to None: requested, still pending
- calendar id mapped to a tuple: loaded (possibly empty)

USAGE:
    store = EventStore()
    store.set_calendars([Calendar("work", "Work")])
    store.mark_pending("work")
    store.set_events("work", events)
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping

from .config import Config
from .models import Calendar, Event

__all__ = ["EventStore"]

logger = logging.getLogger(__name__)


class EventStore:
    """
    Calendar list plus per-calendar EventSets, replaced on every write.

    THREAD SAFETY:
    Not thread-safe. A concurrent fetcher must hand results to the thread
    that owns the store, and must drop results of superseded fetches before
    calling set_events().
    """

    def __init__(self) -> None:
        self._calendars: tuple[Calendar, ...] | None = None
        self._events: dict[str, tuple[Event, ...] | None] = {}

    @property
    def calendars(self) -> tuple[Calendar, ...] | None:
        """Calendar list, or None before it was fetched."""
        return self._calendars

    @property
    def events_by_calendar(self) -> Mapping[str, tuple[Event, ...] | None]:
        """Current EventsByCalendar mapping. Treat as read-only."""
        return self._events

    @property
    def is_loading(self) -> bool:
        """True while any requested calendar has not delivered its events."""
        return any(events is None for events in self._events.values())

    def set_calendars(self, calendars: Iterable[Calendar]) -> None:
        """Replace the calendar list."""
        self._calendars = tuple(calendars)
        logger.info(f"Loaded {len(self._calendars)} calendar(s)")

    def get_calendar(self, calendar_id: str) -> Calendar | None:
        """Find a calendar by id in the current list."""
        for calendar in self._calendars or ():
            if calendar.id == calendar_id:
                return calendar
        return None

    def calendar_color(self, calendar_id: str) -> str:
        """Colour of a calendar, falling back to Config.DEFAULT_CALENDAR_COLOR."""
        calendar = self.get_calendar(calendar_id)
        return calendar.color if calendar else Config.DEFAULT_CALENDAR_COLOR

    def get_events(self, calendar_id: str) -> tuple[Event, ...] | None:
        """EventSet for a calendar, or None if not loaded."""
        return self._events.get(calendar_id)

    def is_pending(self, calendar_id: str) -> bool:
        """True if events were requested but not delivered yet."""
        return calendar_id in self._events and self._events[calendar_id] is None

    def mark_pending(self, calendar_id: str) -> None:
        """
        Record that events for ``calendar_id`` were requested.

        Already loaded calendars keep their events until the new ones arrive.
        """
        if calendar_id in self._events:
            return
        self._events = {**self._events, calendar_id: None}

    def set_events(self, calendar_id: str, events: Iterable[Event]) -> None:
        """
        Store a freshly fetched EventSet, giving the mapping a new identity.

        Args:
            calendar_id: Calendar the events belong to.
            events: The fetched events. Copied into a new tuple.
        """
        event_set = tuple(events)
        self._events = {**self._events, calendar_id: event_set}
        logger.info(f"Loaded {len(event_set)} event(s) for calendar {calendar_id}")

    def clear_events(self, calendar_id: str | None = None) -> None:
        """Forget events of one calendar, or of all calendars."""
        if calendar_id is None:
            self._events = {}
        elif calendar_id in self._events:
            self._events = {k: v for k, v in self._events.items() if k != calendar_id}
