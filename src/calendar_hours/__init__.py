"""
Calendar Hours.

PURPOSE: Turn raw calendar events into hour totals bucketed by period.
AI CONTEXT: Pure calculation layer - callers supply events, the package never fetches them.

PACKAGE STRUCTURE:
- timeranges.py: Duration rounding, range resolution, ISO week helpers
- statistics.py: Interval clipping, hour summation, per-period series
- projector.py: Memoized multi-calendar series
- events.py: Calendar list and EventsByCalendar container
- view_state.py: Range selection, mutators and single-calendar aggregation
- storage.py: JSON persistence of user config and event snapshots
- filesystem.py: File access abstraction used by storage
- presenters.py: Chart-ready view models
- web/: FastAPI JSON API
- cli.py: Command-line queries and the serve command
- config.py: Configuration constants

QUICK START:
    from calendar_hours import StatisticsEngine, resolve_range
    engine = StatisticsEngine()
    hours = engine.hours_in_range(events, start, end)
"""

from calendar_hours.__version__ import (
    __author__,
    __copyright__,
    __description__,
    __license__,
    __title__,
    __url__,
    __version__,
    __version_date__,
)
from calendar_hours.models import (
    Calendar,
    Event,
    InvalidRangeKind,
    MalformedEventError,
    MissingCustomBounds,
    PeriodBucket,
    RangeError,
    RangeKind,
    RangeSelection,
    RangeSummary,
    TimeRange,
    WeekStart,
)
from calendar_hours.projector import AggregationCache, MultiCalendarProjector
from calendar_hours.statistics import StatisticsEngine
from calendar_hours.timeranges import resolve_range, round_hours, start_of_week

__all__ = [
    "__version__",
    "__version_date__",
    "__title__",
    "__description__",
    "__url__",
    "__author__",
    "__license__",
    "__copyright__",
    "AggregationCache",
    "Calendar",
    "Event",
    "InvalidRangeKind",
    "MalformedEventError",
    "MissingCustomBounds",
    "MultiCalendarProjector",
    "PeriodBucket",
    "RangeError",
    "RangeKind",
    "RangeSelection",
    "RangeSummary",
    "StatisticsEngine",
    "TimeRange",
    "WeekStart",
    "resolve_range",
    "round_hours",
    "start_of_week",
]
