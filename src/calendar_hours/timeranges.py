"""
Time range arithmetic for Calendar Hours.

PURPOSE: Duration rounding, range resolution and calendar period boundaries.
AI CONTEXT: Pure functions - no state, no I/O. All boundaries are local midnights.

RANGE RESOLUTION:
    RangeSelection(kind, anchor, week_start, custom bounds)
        └──► resolve_range() ──► TimeRange [start, end)

BOUNDARY RULES:
- Periods are computed on the local calendar date of the anchor, then
  converted back to aware datetimes at local midnight. Adding a day is a
  wall-clock operation, so a DST day is 23 or 25 hours long.
- Week start: Monday follows ISO 8601, Sunday the US convention.
- Custom ranges add one day to the end so the chosen end day is included.
- Total is unbounded in both directions.

USAGE:
    span = resolve_range(RangeSelection(kind="week", anchor=now, week_start="monday"))
    weeks = iso_weeks_in_year(2020)  # 53
"""

from __future__ import annotations

import calendar
from datetime import date, datetime, time, timedelta, tzinfo

from .config import Config
from .models import InvalidRangeKind, MissingCustomBounds, RangeError, RangeKind, RangeSelection, TimeRange, WeekStart

__all__ = [
    "MONTH_LABELS",
    "round_hours",
    "local_date",
    "midnight",
    "start_of_day",
    "start_of_week",
    "add_months",
    "month_range",
    "year_range",
    "check_series_year",
    "check_custom_bounds",
    "iso_weeks_in_year",
    "iso_week_range",
    "resolve_range",
    "step_anchor",
]

MONTH_LABELS: tuple[str, ...] = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)  # fmt: skip

_STEP_DIRECTIONS: dict[str, int] = {"prev": -1, "next": 1}


def round_hours(hours: float) -> float:
    """
    Round an hour total to the presentable precision.

    Suppresses floating-point noise from millisecond-to-hour division
    (1.9999999999 becomes 2.0). Negative input is rounded, not rejected.

    Args:
        hours: Raw hour count.

    Returns:
        Hours rounded to Config.HOURS_PRECISION decimal places.

    Example:
        >>> round_hours(1.9999999999)
        2.0
        >>> round_hours(2.3333333)
        2.33
    """
    return round(hours, Config.HOURS_PRECISION)


def local_date(instant: datetime, tz: tzinfo | None = None) -> date:
    """Calendar date of an instant on the wall clock of ``tz``."""
    return instant.astimezone(tz or Config.get_timezone()).date()


def midnight(day: date, tz: tzinfo | None = None) -> datetime:
    """First instant of ``day`` in ``tz``."""
    return datetime.combine(day, time(), tzinfo=tz or Config.get_timezone())


def start_of_day(instant: datetime, tz: tzinfo | None = None) -> datetime:
    """Local midnight at or before ``instant``."""
    zone = tz or Config.get_timezone()
    return midnight(local_date(instant, zone), zone)


def start_of_week(instant: datetime, week_start: str, tz: tzinfo | None = None) -> datetime:
    """
    Local midnight of the first day of the week containing ``instant``.

    The week-start preference picks which weekday is position 0: Monday
    (ISO 8601) or Sunday. No locale data is involved.

    Args:
        instant: Any instant within the week.
        week_start: WeekStart.MONDAY or WeekStart.SUNDAY.
        tz: Timezone whose wall clock defines days.

    Returns:
        Aware datetime at the week's first local midnight.

    Raises:
        RangeError: If week_start is not a known preference.

    Example:
        >>> wed = datetime(2024, 3, 13, 15, tzinfo=UTC)
        >>> start_of_week(wed, 'monday', UTC).date()
        datetime.date(2024, 3, 11)
        >>> start_of_week(wed, 'sunday', UTC).date()
        datetime.date(2024, 3, 10)
    """
    zone = tz or Config.get_timezone()
    day = local_date(instant, zone)
    # date.weekday(): Monday == 0 ... Sunday == 6
    if week_start == WeekStart.MONDAY:
        offset = day.weekday()
    elif week_start == WeekStart.SUNDAY:
        offset = (day.weekday() + 1) % 7
    else:
        raise RangeError(f"Invalid week start: {week_start!r}")
    return midnight(day - timedelta(days=offset), zone)


def add_months(day: date, months: int) -> date:
    """
    Shift a date by whole months, clamping to the last day of short months.

    Example:
        >>> add_months(date(2024, 1, 31), 1)
        datetime.date(2024, 2, 29)
    """
    index = day.year * 12 + (day.month - 1) + months
    year, month = divmod(index, 12)
    last_day = calendar.monthrange(year, month + 1)[1]
    return date(year, month + 1, min(day.day, last_day))


def month_range(year: int, month: int, tz: tzinfo | None = None) -> TimeRange:
    """[first midnight of month, first midnight of next month)."""
    first = date(year, month, 1)
    return TimeRange(midnight(first, tz), midnight(add_months(first, 1), tz))


def year_range(year: int, tz: tzinfo | None = None) -> TimeRange:
    """[Jan 1 midnight, next Jan 1 midnight)."""
    return TimeRange(midnight(date(year, 1, 1), tz), midnight(date(year + 1, 1, 1), tz))


def check_series_year(year: int) -> int:
    """
    Validate a year for series generation.

    Returns:
        ``year`` unchanged.

    Raises:
        RangeError: If year is outside Config.MIN_SERIES_YEAR..MAX_SERIES_YEAR.
    """
    if not Config.MIN_SERIES_YEAR <= year <= Config.MAX_SERIES_YEAR:
        raise RangeError(
            f"Year {year} out of range {Config.MIN_SERIES_YEAR}..{Config.MAX_SERIES_YEAR}"
        )
    return year


def check_custom_bounds(start: datetime | None, end: datetime | None) -> None:
    """
    Reject custom bounds whose inclusive end day precedes the start.

    Either bound may be None (not chosen yet).

    Raises:
        RangeError: If both bounds are set and end < start.
    """
    if start is not None and end is not None and end < start:
        raise RangeError("Custom range end precedes start")


def iso_weeks_in_year(year: int) -> int:
    """
    Number of ISO weeks in ``year`` (52 or 53).

    December 28 always lies in the last ISO week of its year, so its week
    number is the week count.

    Example:
        >>> iso_weeks_in_year(2020), iso_weeks_in_year(2021)
        (53, 52)
    """
    month, day = Config.ISO_LAST_WEEK_DAY
    return date(year, month, day).isocalendar().week


def iso_week_range(year: int, week: int, tz: tzinfo | None = None) -> TimeRange:
    """
    [Monday 00:00, next Monday 00:00) of ISO week ``week`` in ``year``.

    Week 1 may start in the previous calendar year.

    Raises:
        ValueError: If week is outside 1..iso_weeks_in_year(year).
    """
    monday = date.fromisocalendar(year, week, 1)
    return TimeRange(midnight(monday, tz), midnight(monday + timedelta(days=7), tz))


def resolve_range(selection: RangeSelection, tz: tzinfo | None = None) -> TimeRange:
    """
    Resolve a logical range selection into a concrete half-open interval.

    PER-KIND RULES:
    - day: anchor's local midnight + 1 day
    - week: start_of_week(anchor, week_start) + 7 days
    - month: first of anchor's month to first of next month
    - year: Jan 1 of anchor's year to Jan 1 of next year
    - total: unbounded TimeRange(None, None)
    - custom: [custom_start, custom_end + 1 day) - the end day is inclusive

    Args:
        selection: The range selection to resolve.
        tz: Timezone whose wall clock defines days. Default: Config.get_timezone().

    Returns:
        TimeRange with exclusive end.

    Raises:
        InvalidRangeKind: If selection.kind is not in RangeKind.ALL.
        MissingCustomBounds: If kind is custom and a bound is missing.
        RangeError: If kind is custom and the end day precedes the start.

    Example:
        >>> sel = RangeSelection(kind='month', anchor=datetime(2024, 2, 14, tzinfo=UTC))
        >>> resolve_range(sel, UTC).end.date()
        datetime.date(2024, 3, 1)
    """
    zone = tz or Config.get_timezone()
    kind = selection.kind

    if kind == RangeKind.CUSTOM:
        if selection.custom_start is None or selection.custom_end is None:
            raise MissingCustomBounds("Custom range requires both start and end")
        check_custom_bounds(selection.custom_start, selection.custom_end)
        return TimeRange(selection.custom_start, selection.custom_end + timedelta(days=1))

    if kind == RangeKind.TOTAL:
        return TimeRange(None, None)

    day = local_date(selection.anchor, zone)

    if kind == RangeKind.DAY:
        return TimeRange(midnight(day, zone), midnight(day + timedelta(days=1), zone))
    if kind == RangeKind.WEEK:
        start = start_of_week(selection.anchor, selection.week_start, zone)
        return TimeRange(start, midnight(start.date() + timedelta(days=7), zone))
    if kind == RangeKind.MONTH:
        return month_range(day.year, day.month, zone)
    if kind == RangeKind.YEAR:
        return year_range(day.year, zone)

    raise InvalidRangeKind(kind)


def step_anchor(
    kind: str,
    anchor: datetime,
    direction: str,
    tz: tzinfo | None = None,
) -> datetime:
    """
    Move an anchor one unit of ``kind`` backwards or forwards.

    Day and week steps are wall-clock day shifts. Month and year steps keep
    the local time of day and clamp the day of month (Jan 31 + 1 month is
    Feb 28/29). Total and custom ranges have no unit, so the anchor is
    returned unchanged.

    Args:
        kind: RangeKind of the current selection.
        anchor: Current anchor instant.
        direction: 'prev' or 'next'.
        tz: Timezone whose wall clock defines days.

    Returns:
        The shifted anchor, in ``tz``.

    Raises:
        InvalidRangeKind: If kind is unknown.
        RangeError: If direction is not 'prev' or 'next'.
    """
    if direction not in _STEP_DIRECTIONS:
        raise RangeError(f"Invalid step direction: {direction!r}")
    if kind not in RangeKind.ALL:
        raise InvalidRangeKind(kind)
    if kind not in RangeKind.STEPPABLE:
        return anchor

    sign = _STEP_DIRECTIONS[direction]
    local = anchor.astimezone(tz or Config.get_timezone())

    if kind == RangeKind.DAY:
        return local + timedelta(days=sign)
    if kind == RangeKind.WEEK:
        return local + timedelta(days=7 * sign)

    months = sign if kind == RangeKind.MONTH else 12 * sign
    shifted = add_months(local.date(), months)
    return local.replace(year=shifted.year, month=shifted.month, day=shifted.day)
