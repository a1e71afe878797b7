"""
Data models for Calendar Hours.

PURPOSE: Type-safe dataclasses representing core domain entities.
AI CONTEXT: These models define the data schema for events, calendars and ranges.

MODEL HIERARCHY:
- Calendar: One calendar from the external calendar list
- Event: A timed entry with a start and end instant, owned by one calendar
- RangeSelection: The user's logical range (kind + anchor + week start)
- TimeRange: A concrete half-open interval [start, end)
- PeriodBucket: One labeled hour total in a series
- RangeSummary: Hours and event count for the selected calendar and range

SERIALIZATION:
Event, Calendar and RangeSelection load from plain dicts via from_dict()
and write back via to_dict(). Instants are timezone-aware datetimes.

USAGE:
    event = Event.from_dict({"start": "2024-03-10T09:00:00Z", "end": "2024-03-10T11:30:00Z"})
    selection = RangeSelection(kind=RangeKind.MONTH, anchor=event.start)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, date, datetime, time, tzinfo
from typing import Any, ClassVar

from .config import Config

__all__ = [
    "RangeKind",
    "WeekStart",
    "RangeError",
    "InvalidRangeKind",
    "MissingCustomBounds",
    "MalformedEventError",
    "parse_instant",
    "Event",
    "Calendar",
    "TimeRange",
    "PeriodBucket",
    "RangeSelection",
    "RangeSummary",
]


class RangeKind:
    """
    Names of the selectable range kinds.

    DAY/WEEK/MONTH/YEAR are anchored and can be stepped. TOTAL covers all
    events. CUSTOM uses explicit bounds with an inclusive end day.
    """

    DAY: ClassVar[str] = "day"
    WEEK: ClassVar[str] = "week"
    MONTH: ClassVar[str] = "month"
    YEAR: ClassVar[str] = "year"
    TOTAL: ClassVar[str] = "total"
    CUSTOM: ClassVar[str] = "custom"

    ALL: ClassVar[frozenset[str]] = frozenset({"day", "week", "month", "year", "total", "custom"})
    STEPPABLE: ClassVar[frozenset[str]] = frozenset({"day", "week", "month", "year"})


class WeekStart:
    """Week-start preference. Monday follows ISO 8601."""

    SUNDAY: ClassVar[str] = "sunday"
    MONDAY: ClassVar[str] = "monday"

    ALL: ClassVar[frozenset[str]] = frozenset({"sunday", "monday"})


class RangeError(ValueError):
    """Base class for range selections that cannot be resolved."""


class InvalidRangeKind(RangeError):
    """Raised when a range kind (or step direction) is not recognised."""

    def __init__(self, kind: object) -> None:
        super().__init__(f"Invalid range kind: {kind!r}")
        self.kind = kind


class MissingCustomBounds(RangeError):
    """Raised when a custom range is resolved without both bounds."""


class MalformedEventError(ValueError):
    """Raised when an event's timestamps cannot be parsed."""


def parse_instant(value: Any, tz: tzinfo | None = None) -> datetime:
    """
    Convert an ISO 8601 string, date or datetime into an aware datetime.

    Handles the 'Z' suffix used by calendar APIs. Naive values and plain
    dates are interpreted in the configured timezone; a date becomes that
    day's local midnight.

    Args:
        value: ISO 8601 string, datetime, or date.
        tz: Timezone for naive values. Default: Config.get_timezone().

    Returns:
        Timezone-aware datetime.

    Raises:
        MalformedEventError: If the value is empty or not parseable.

    Example:
        >>> parse_instant('2024-03-10T09:00:00Z')
        datetime.datetime(2024, 3, 10, 9, 0, tzinfo=datetime.timezone.utc)
    """
    zone = tz or Config.get_timezone()

    if isinstance(value, datetime):
        instant = value
    elif isinstance(value, date):
        return datetime.combine(value, time(), tzinfo=zone)
    elif isinstance(value, str) and value:
        try:
            instant = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError as e:
            raise MalformedEventError(f"Invalid timestamp {value!r}: {e}") from e
        if len(value) == 10:
            # Bare YYYY-MM-DD: an all-day boundary
            return datetime.combine(instant.date(), time(), tzinfo=zone)
    else:
        raise MalformedEventError(f"Invalid timestamp {value!r}")

    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=zone)
    return instant


def _event_bound(raw: Any, tz: tzinfo | None) -> datetime:
    """Read an event bound in string, datetime or {dateTime|date} form."""
    if isinstance(raw, dict):
        raw = raw.get("dateTime") or raw.get("date")
    return parse_instant(raw, tz)


@dataclass(frozen=True)
class Event:
    """
    A calendar event with a start and end instant.

    Events are read-only inputs. ``start <= end`` is expected but not
    enforced; a malformed event (end before start) contributes zero hours.
    Fields other than id and summary are kept untouched in ``extra``.
    """

    start: datetime
    end: datetime
    id: str = ""
    summary: str = ""
    extra: dict[str, Any] = field(default_factory=dict, compare=False, hash=False)

    @property
    def duration_hours(self) -> float:
        """Raw duration in hours, negative for malformed events."""
        return (self.end.astimezone(UTC) - self.start.astimezone(UTC)).total_seconds() / 3600

    @property
    def is_malformed(self) -> bool:
        """True when end precedes start."""
        return self.end < self.start

    @classmethod
    def from_dict(cls, data: dict[str, Any], tz: tzinfo | None = None) -> Event:
        """
        Deserialize an event from a calendar API or snapshot dict.

        Accepts ``start``/``end`` as ISO 8601 strings, datetimes, or the
        calendar API shape ``{"dateTime": ...}`` / ``{"date": "YYYY-MM-DD"}``
        used for all-day events.

        Args:
            data: Event dict with at least 'start' and 'end'.
            tz: Timezone for naive and all-day values.

        Returns:
            Event instance.

        Raises:
            MalformedEventError: If start or end is missing or unparseable.

        Example:
            >>> Event.from_dict({'start': '2024-03-10T09:00:00Z',
            ...                  'end': '2024-03-10T11:30:00Z'}).duration_hours
            2.5
        """
        extra = {k: v for k, v in data.items() if k not in ("start", "end", "id", "summary")}
        return cls(
            start=_event_bound(data.get("start"), tz),
            end=_event_bound(data.get("end"), tz),
            id=str(data.get("id", "")),
            summary=data.get("summary", ""),
            extra=extra,
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible dict with ISO 8601 bounds."""
        return {
            **self.extra,
            "id": self.id,
            "summary": self.summary,
            "start": self.start.isoformat(),
            "end": self.end.isoformat(),
        }


@dataclass(frozen=True)
class Calendar:
    """One entry of the calendar list. ``id`` joins into EventsByCalendar."""

    id: str
    label: str
    color: str = Config.DEFAULT_CALENDAR_COLOR

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Calendar:
        """
        Deserialize from a stored entry or a calendar API list item.

        Supports both ``label``/``color`` and the API names
        ``summary``/``backgroundColor``. Missing colours fall back to
        Config.DEFAULT_CALENDAR_COLOR.

        Raises:
            KeyError: If 'id' is missing.
        """
        return cls(
            id=data["id"],
            label=data.get("label", data.get("summary", "")),
            color=data.get("color") or data.get("backgroundColor") or Config.DEFAULT_CALENDAR_COLOR,
        )

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "label": self.label, "color": self.color}


@dataclass(frozen=True)
class TimeRange:
    """
    Half-open interval [start, end).

    A ``None`` bound is open: the Total range is ``TimeRange(None, None)``.
    """

    start: datetime | None
    end: datetime | None

    @property
    def is_bounded(self) -> bool:
        return self.start is not None and self.end is not None

    def overlaps(self, start: datetime, end: datetime) -> bool:
        """
        Check whether [start, end) shares any instant with this range.

        An item that ends exactly at this range's start, or starts exactly
        at its end, does not overlap.
        """
        if self.start is not None and end <= self.start:
            return False
        return not (self.end is not None and start >= self.end)

    def to_dict(self) -> dict[str, Any]:
        return {
            "start": self.start.isoformat() if self.start else None,
            "end": self.end.isoformat() if self.end else None,
        }


@dataclass(frozen=True)
class PeriodBucket:
    """One point of a series: a period label and its rounded hour total."""

    label: str
    hours: float

    def to_dict(self) -> dict[str, Any]:
        return {"label": self.label, "hours": self.hours}


@dataclass(frozen=True)
class RangeSelection:
    """
    The user's logical range.

    FIELDS:
    - kind: One of RangeKind.ALL
    - anchor: Instant inside the period to show (stepped by prev/next)
    - week_start: WeekStart preference used by the WEEK kind
    - custom_start / custom_end: Bounds for the CUSTOM kind. The end day
      is inclusive from the user's point of view.
    """

    kind: str
    anchor: datetime
    week_start: str = Config.DEFAULT_WEEK_START
    custom_start: datetime | None = None
    custom_end: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        """Serialize using the persisted config key names."""
        return {
            "selected_range_type": self.kind,
            "start": self.anchor.isoformat(),
            "week_start": self.week_start,
            "custom_start": self.custom_start.isoformat() if self.custom_start else None,
            "custom_end": self.custom_end.isoformat() if self.custom_end else None,
        }

    @classmethod
    def from_dict(
        cls,
        data: dict[str, Any],
        default_anchor: datetime,
        tz: tzinfo | None = None,
    ) -> RangeSelection:
        """
        Restore a selection from persisted config, filling defaults.

        Unparseable stored values fall back to the defaults rather than
        failing, so a damaged config file never blocks startup.

        Args:
            data: Persisted config dict (see to_dict for keys).
            default_anchor: Anchor used when none is stored.
            tz: Timezone for naive stored values.

        Returns:
            RangeSelection with stored values where valid.
        """

        def _optional(key: str) -> datetime | None:
            raw = data.get(key)
            if not raw:
                return None
            try:
                return parse_instant(raw, tz)
            except MalformedEventError:
                return None

        kind = data.get("selected_range_type")
        week_start = data.get("week_start")
        return cls(
            kind=kind if kind in RangeKind.ALL else Config.DEFAULT_RANGE_KIND,
            anchor=_optional("start") or default_anchor,
            week_start=week_start if week_start in WeekStart.ALL else Config.DEFAULT_WEEK_START,
            custom_start=_optional("custom_start"),
            custom_end=_optional("custom_end"),
        )


@dataclass(frozen=True)
class RangeSummary:
    """
    Hours and event count for one calendar in the selected range.

    ``hours`` is None while the calendar's events have not loaded, which
    is distinct from 0.0 (loaded, nothing in range).
    """

    hours: float | None
    event_count: int = 0

    @property
    def is_loading(self) -> bool:
        return self.hours is None

    def to_dict(self) -> dict[str, Any]:
        return {"hours": self.hours, "event_count": self.event_count, "loading": self.is_loading}
