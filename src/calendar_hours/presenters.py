"""
Presenters for Calendar Hours.

PURPOSE: Turn aggregation results into chart-ready view models.
AI CONTEXT: Pure data transformation - no I/O, no rendering.

DESIGN PRINCIPLES:
1. Presenters read from ViewState, return view model dataclasses
2. No dependencies on a specific UI framework
3. Every view model has to_dict() for JSON responses

VIEW MODELS:
- RangeSummaryViewModel: Hours in the selected range for one calendar
- CalendarGraphViewModel: Monthly or yearly bars for the selected calendar
- MultiCalendarChartViewModel: Per-calendar series for the comparison chart

USAGE:
    presenter = DashboardPresenter(view_state)
    chart = presenter.get_chart("monthly", year=2024, chart_type="stacked")
    payload = chart.to_dict()
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from .config import Config

if TYPE_CHECKING:
    from .models import PeriodBucket
    from .view_state import ViewState

__all__ = [
    "GRANULARITIES",
    "CHART_TYPES",
    "GRAPH_VIEWS",
    "nice_max",
    "y_ticks",
    "format_hours",
    "RangeSummaryViewModel",
    "CalendarGraphViewModel",
    "CalendarSeriesViewModel",
    "MultiCalendarChartViewModel",
    "DashboardPresenter",
]

GRANULARITIES: tuple[str, ...] = ("weekly", "monthly", "yearly")
CHART_TYPES: tuple[str, ...] = ("stacked", "grouped", "line", "pie")
GRAPH_VIEWS: tuple[str, ...] = ("monthly", "yearly")


def nice_max(raw_max: float, ticks: int = Config.Y_TICKS) -> int:
    """
    Round an axis maximum up to a multiple of the tick count.

    Args:
        raw_max: Largest value to show.
        ticks: Number of tick intervals on the axis.

    Returns:
        Smallest multiple of ``ticks`` >= raw_max, or ``ticks`` for 0.

    Example:
        >>> nice_max(13.5)
        16
        >>> nice_max(0)
        4
    """
    if not raw_max or raw_max <= 0:
        return ticks
    return math.ceil(raw_max / ticks) * ticks


def y_ticks(y_max: int, ticks: int = Config.Y_TICKS) -> list[int]:
    """Evenly spaced integer tick values from 0 to y_max inclusive."""
    return [round(y_max / ticks * i) for i in range(ticks + 1)]


def format_hours(hours: float | None) -> str:
    """
    Format an hour total for display.

    Returns:
        "Loading" for None, otherwise e.g. "2.5h" or "12h".
    """
    if hours is None:
        return "Loading"
    return f"{hours:g}h"


@dataclass
class RangeSummaryViewModel:
    """Hours in the selected range for the selected calendar."""

    calendar_id: str | None
    range_kind: str
    start: str | None
    end: str | None
    hours: float | None
    event_count: int

    @property
    def hours_display(self) -> str:
        return format_hours(self.hours)

    @property
    def is_loading(self) -> bool:
        return self.hours is None

    def to_dict(self) -> dict[str, Any]:
        return {
            "calendar_id": self.calendar_id,
            "range_kind": self.range_kind,
            "start": self.start,
            "end": self.end,
            "hours": self.hours,
            "hours_display": self.hours_display,
            "event_count": self.event_count,
            "loading": self.is_loading,
        }


@dataclass
class CalendarGraphViewModel:
    """Monthly or yearly bars of the selected calendar."""

    view: str
    color: str
    buckets: list[PeriodBucket]
    y_max: int
    y_ticks: list[int]

    def to_dict(self) -> dict[str, Any]:
        return {
            "view": self.view,
            "color": self.color,
            "buckets": [b.to_dict() for b in self.buckets],
            "y_max": self.y_max,
            "y_ticks": self.y_ticks,
        }


@dataclass
class CalendarSeriesViewModel:
    """One calendar's line/bar series in the comparison chart."""

    calendar_id: str
    label: str
    color: str
    buckets: list[PeriodBucket]

    @property
    def total_hours(self) -> float:
        """Sum over all buckets, used for pie slices."""
        return round(sum(b.hours for b in self.buckets), Config.HOURS_PRECISION)

    def to_dict(self) -> dict[str, Any]:
        return {
            "calendar_id": self.calendar_id,
            "label": self.label,
            "color": self.color,
            "buckets": [b.to_dict() for b in self.buckets],
            "total_hours": self.total_hours,
        }


@dataclass
class MultiCalendarChartViewModel:
    """
    Comparison chart data across calendars.

    ``periods`` are the labels shared by all series. ``y_max`` is the nice
    maximum of the per-period sums for stacked charts and of single buckets
    otherwise.
    """

    granularity: str
    chart_type: str
    year: int | None
    periods: list[str] = field(default_factory=list)
    series: list[CalendarSeriesViewModel] = field(default_factory=list)
    y_max: int = Config.Y_TICKS
    y_ticks: list[int] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "granularity": self.granularity,
            "chart_type": self.chart_type,
            "year": self.year,
            "periods": self.periods,
            "series": [s.to_dict() for s in self.series],
            "y_max": self.y_max,
            "y_ticks": self.y_ticks,
        }


class DashboardPresenter:
    """
    Builds view models from a ViewState.

    The presenter holds no state of its own; repeated calls with unchanged
    events reuse the projector's cached series.
    """

    def __init__(self, view_state: ViewState) -> None:
        self.view_state = view_state

    def get_calendars(self) -> list[dict[str, Any]]:
        """
        Calendar list with loading flags.

        Returns:
            Dicts with id, label, color, loaded and selected keys. Empty list
            before the calendar list is available.
        """
        store = self.view_state.store
        selected = self.view_state.selected_calendar_id
        return [
            {
                **calendar.to_dict(),
                "loaded": store.get_events(calendar.id) is not None,
                "selected": calendar.id == selected,
            }
            for calendar in store.calendars or ()
        ]

    def get_summary(self) -> RangeSummaryViewModel:
        """
        Summary of the selected calendar in the selected range.

        Raises:
            RangeError: If the selection cannot be resolved.
        """
        state = self.view_state
        span = state.current_range()
        summary = state.summary()
        return RangeSummaryViewModel(
            calendar_id=state.selected_calendar_id,
            range_kind=state.selection.kind,
            start=span.start.isoformat() if span.start else None,
            end=span.end.isoformat() if span.end else None,
            hours=summary.hours,
            event_count=summary.event_count,
        )

    def get_calendar_graph(self, view: str = "monthly") -> CalendarGraphViewModel | None:
        """
        Bars for the selected calendar.

        Args:
            view: 'monthly' (months of the anchor's year) or 'yearly'.

        Returns:
            View model, or None while the calendar is not loaded.

        Raises:
            ValueError: If view is not in GRAPH_VIEWS.
        """
        if view not in GRAPH_VIEWS:
            raise ValueError(f"Invalid graph view: {view!r}")

        state = self.view_state
        buckets = state.monthly_series() if view == "monthly" else state.yearly_series()
        if buckets is None:
            return None

        y_max = nice_max(max([b.hours for b in buckets] + [1]))
        calendar_id = state.selected_calendar_id or ""
        return CalendarGraphViewModel(
            view=view,
            color=state.store.calendar_color(calendar_id),
            buckets=buckets,
            y_max=y_max,
            y_ticks=y_ticks(y_max),
        )

    def get_chart(
        self,
        granularity: str = "monthly",
        year: int | None = None,
        chart_type: str = "stacked",
        checked: Iterable[str] | None = None,
    ) -> MultiCalendarChartViewModel:
        """
        Comparison chart data for all checked, loaded calendars.

        Args:
            granularity: 'weekly', 'monthly' or 'yearly'.
            year: Year for weekly/monthly series. Default: current year.
            chart_type: 'stacked', 'grouped', 'line' or 'pie'.
            checked: Calendar ids to include. Default: all calendars.

        Returns:
            MultiCalendarChartViewModel. Calendars that are unchecked or not
            loaded yet are left out; periods come from the first remaining
            calendar.

        Raises:
            ValueError: If granularity or chart_type is unknown.
            RangeError: If year is outside the supported series years.
        """
        if granularity not in GRANULARITIES:
            raise ValueError(f"Invalid granularity: {granularity!r}")
        if chart_type not in CHART_TYPES:
            raise ValueError(f"Invalid chart type: {chart_type!r}")

        state = self.view_state
        if granularity == "weekly":
            data = state.all_weekly(year)
        elif granularity == "monthly":
            data = state.all_monthly(year)
        else:
            data = state.all_yearly()

        calendars = state.store.calendars or ()
        wanted = set(checked) if checked is not None else {c.id for c in calendars}
        series = [
            CalendarSeriesViewModel(calendar_id=c.id, label=c.label, color=c.color, buckets=data[c.id])
            for c in calendars
            if c.id in wanted and c.id in data
        ]
        periods = [b.label for b in series[0].buckets] if series else []

        if chart_type == "stacked":
            raw_max = max(
                (sum(s.buckets[i].hours for s in series if i < len(s.buckets)) for i in range(len(periods))),
                default=0,
            )
        else:
            raw_max = max((b.hours for s in series for b in s.buckets), default=0)
        y_max = nice_max(raw_max)

        return MultiCalendarChartViewModel(
            granularity=granularity,
            chart_type=chart_type,
            year=None if granularity == "yearly" else (year if year is not None else state.engine.current_year()),
            periods=periods,
            series=series,
            y_max=y_max,
            y_ticks=y_ticks(y_max),
        )
