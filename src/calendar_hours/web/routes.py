"""
FastAPI routes for the Calendar Hours API.

PURPOSE: Thin route handlers that delegate to ViewState and DashboardPresenter.
AI CONTEXT: Routes stay simple - range logic lives in timeranges/view_state.

ROUTE STRUCTURE:
- GET  /api/calendars          : Calendar list with loaded/selected flags
- GET  /api/summary            : Hours of the selected calendar in the selected range
- GET  /api/graph              : Monthly or yearly bars of the selected calendar
- GET  /api/chart              : Comparison chart data for all calendars
- POST /api/selected-calendar  : Select the summary calendar
- POST /api/range/kind         : Switch range kind
- POST /api/range/step         : Previous / next period
- POST /api/range/reset        : Anchor back to today
- POST /api/range/custom       : Set custom bounds
- POST /api/week-start         : Monday or Sunday

ERRORS:
- 400: invalid range kind, direction, week start, bounds or chart options
- 404: unknown calendar id
"""

from __future__ import annotations

from typing import Annotated, Any

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from pydantic import BaseModel

from ..models import MalformedEventError, RangeError, parse_instant
from ..presenters import DashboardPresenter
from ..view_state import ViewState

__all__ = [
    "router",
    "get_view_state",
    "get_presenter",
]

router = APIRouter(prefix="/api")


# =============================================================================
# Request Bodies
# =============================================================================


class CalendarSelection(BaseModel):
    calendar_id: str


class RangeKindChange(BaseModel):
    kind: str


class RangeStep(BaseModel):
    direction: str


class CustomBounds(BaseModel):
    """Custom range bounds. Either may be omitted to change only the other."""

    start: str | None = None
    end: str | None = None


class WeekStartChange(BaseModel):
    week_start: str


# =============================================================================
# Dependency Factory Functions
# =============================================================================


def get_view_state(request: Request) -> ViewState:
    """ViewState shared by all requests of the application."""
    return request.app.state.view_state


def get_presenter(
    view_state: Annotated[ViewState, Depends(get_view_state)],
) -> DashboardPresenter:
    return DashboardPresenter(view_state)


def _selection_payload(view_state: ViewState, presenter: DashboardPresenter) -> dict[str, Any]:
    """Selection plus the summary it produces, returned by every mutator."""
    try:
        summary = presenter.get_summary().to_dict()
    except RangeError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    return {"selection": view_state.selection.to_dict(), "summary": summary}


# =============================================================================
# Read Routes
# =============================================================================


@router.get("/calendars")
async def api_calendars(
    presenter: Annotated[DashboardPresenter, Depends(get_presenter)],
) -> dict[str, Any]:
    """
    Calendar list with loading flags.

    Example:
        >>> # GET /api/calendars
        >>> {"calendars": [{"id": "work", "label": "Work", "color": "#4285f4",
        ...                 "loaded": true, "selected": true}]}
    """
    return {"calendars": presenter.get_calendars()}


@router.get("/summary")
async def api_summary(
    view_state: Annotated[ViewState, Depends(get_view_state)],
    presenter: Annotated[DashboardPresenter, Depends(get_presenter)],
) -> dict[str, Any]:
    """
    Hours of the selected calendar in the selected range.

    ``summary.hours`` is null and ``summary.loading`` true while the
    calendar's events are not loaded.
    """
    return _selection_payload(view_state, presenter)


@router.get("/graph")
async def api_graph(
    presenter: Annotated[DashboardPresenter, Depends(get_presenter)],
    view: str = "monthly",
) -> dict[str, Any]:
    """Monthly bars for the anchor's year, or yearly bars for the last five years."""
    try:
        graph = presenter.get_calendar_graph(view)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    if graph is None:
        return {"view": view, "loading": True}
    return {**graph.to_dict(), "loading": False}


@router.get("/chart")
async def api_chart(
    presenter: Annotated[DashboardPresenter, Depends(get_presenter)],
    granularity: str = "monthly",
    year: int | None = None,
    chart_type: str = "stacked",
    calendars: Annotated[str | None, Query(description="Comma-separated calendar ids")] = None,
) -> dict[str, Any]:
    """
    Comparison chart data across calendars.

    Example:
        >>> # GET /api/chart?granularity=weekly&year=2020&calendars=work,gym
        >>> {"granularity": "weekly", "year": 2020, "periods": ["W1", ..., "W53"], ...}
    """
    checked = [c for c in calendars.split(",") if c] if calendars is not None else None
    try:
        chart = presenter.get_chart(granularity, year=year, chart_type=chart_type, checked=checked)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    return chart.to_dict()


# =============================================================================
# Mutation Routes
# =============================================================================


@router.post("/selected-calendar")
async def api_select_calendar(
    body: CalendarSelection,
    view_state: Annotated[ViewState, Depends(get_view_state)],
    presenter: Annotated[DashboardPresenter, Depends(get_presenter)],
) -> dict[str, Any]:
    if view_state.store.calendars is not None and view_state.store.get_calendar(body.calendar_id) is None:
        raise HTTPException(status_code=404, detail=f"Calendar not found: {body.calendar_id}")
    view_state.select_calendar(body.calendar_id)
    return _selection_payload(view_state, presenter)


@router.post("/range/kind")
async def api_range_kind(
    body: RangeKindChange,
    view_state: Annotated[ViewState, Depends(get_view_state)],
    presenter: Annotated[DashboardPresenter, Depends(get_presenter)],
) -> dict[str, Any]:
    try:
        view_state.select_range(body.kind)
    except RangeError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    return _selection_payload(view_state, presenter)


@router.post("/range/step")
async def api_range_step(
    body: RangeStep,
    view_state: Annotated[ViewState, Depends(get_view_state)],
    presenter: Annotated[DashboardPresenter, Depends(get_presenter)],
) -> dict[str, Any]:
    try:
        view_state.step_range(body.direction)
    except RangeError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    return _selection_payload(view_state, presenter)


@router.post("/range/reset")
async def api_range_reset(
    view_state: Annotated[ViewState, Depends(get_view_state)],
    presenter: Annotated[DashboardPresenter, Depends(get_presenter)],
) -> dict[str, Any]:
    view_state.reset_range()
    return _selection_payload(view_state, presenter)


@router.post("/range/custom")
async def api_range_custom(
    body: CustomBounds,
    view_state: Annotated[ViewState, Depends(get_view_state)],
    presenter: Annotated[DashboardPresenter, Depends(get_presenter)],
) -> dict[str, Any]:
    """
    Set custom bounds from ISO dates or datetimes. ``end`` is the inclusive last day.

    Does not switch the range kind; POST /api/range/kind with 'custom' for that.
    """
    tz = view_state.engine.tz
    try:
        start = parse_instant(body.start, tz) if body.start is not None else None
        end = parse_instant(body.end, tz) if body.end is not None else None
        if start is not None and end is not None:
            view_state.set_custom_bounds(start, end)
        elif start is not None:
            view_state.set_custom_start(start)
        elif end is not None:
            view_state.set_custom_end(end)
        else:
            raise RangeError("Provide start, end or both")
    except (RangeError, MalformedEventError) as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    return _selection_payload(view_state, presenter)


@router.post("/week-start")
async def api_week_start(
    body: WeekStartChange,
    view_state: Annotated[ViewState, Depends(get_view_state)],
    presenter: Annotated[DashboardPresenter, Depends(get_presenter)],
) -> dict[str, Any]:
    try:
        view_state.set_week_start(body.week_start)
    except RangeError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    return _selection_payload(view_state, presenter)
