"""
CLI entry point for Calendar Hours.

PURPOSE: Command-line queries over local calendar snapshots, plus the API server.
AI CONTEXT: Main entry points for package execution.

USAGE:
    # Via module
    python -m calendar_hours summary --range week

    # Or via CLI command (after install)
    calendar-hours calendars                       # List stored calendars
    calendar-hours summary --calendar work         # Hours in the saved range
    calendar-hours summary --range custom --start 2024-03-01 --end 2024-03-31
    calendar-hours series --granularity weekly --year 2020
    calendar-hours serve --port 8080               # Start the JSON API

Queries never change the selection saved for the web API; range options
apply to the single invocation only.
"""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Callable, Sequence
from datetime import datetime
from functools import lru_cache
from typing import TYPE_CHECKING

from .models import MalformedEventError, RangeError, RangeKind, WeekStart, parse_instant
from .presenters import GRANULARITIES, DashboardPresenter, format_hours

if TYPE_CHECKING:
    from .storage import StorageManager
    from .view_state import ViewState

# Constants
PROG_NAME = "calendar-hours"
DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8000


@lru_cache(maxsize=1)
def _get_logger() -> logging.Logger:
    """Get module logger (cached for thread safety)."""
    logging.basicConfig(level=logging.INFO)
    return logging.getLogger(__name__)


def _log(message: str, *, emoji: str = "") -> None:
    """Log message with optional emoji prefix for CLI output.

    Args:
        message: The message to log.
        emoji: Optional emoji prefix for visual CLI feedback.
    """
    prefix = f"{emoji} " if emoji else ""
    _get_logger().info(f"{prefix}{message}")


def _load_view_state(
    storage: StorageManager | None,
    clock: Callable[[], datetime] | None,
) -> ViewState:
    """Read-only ViewState over the stored snapshots."""
    from .storage import StorageManager as StorageMgr
    from .view_state import view_state_from_storage

    return view_state_from_storage(storage or StorageMgr(), clock=clock, persist=False)


def run_calendars(storage: StorageManager | None = None) -> int:
    """
    Print the stored calendar list, one calendar per line.

    Each line shows id, label and whether an event snapshot exists.

    Returns:
        Exit code: 0, or 1 if no calendars are stored.
    """
    state = _load_view_state(storage, None)
    calendars = DashboardPresenter(state).get_calendars()
    if not calendars:
        _log("No calendars stored", emoji="⚠️")
        return 1
    for calendar in calendars:
        marker = "*" if calendar["selected"] else " "
        status = "loaded" if calendar["loaded"] else "no snapshot"
        # Note: Using print() intentionally for stdout piping support
        print(f"{marker} {calendar['id']}\t{calendar['label']}\t({status})")
    return 0


def run_summary(
    calendar_id: str | None = None,
    range_kind: str | None = None,
    date: str | None = None,
    week_start: str | None = None,
    start: str | None = None,
    end: str | None = None,
    *,
    storage: StorageManager | None = None,
    clock: Callable[[], datetime] | None = None,
) -> int:
    """
    Print hours of one calendar in one range.

    Options left as None fall back to the selection saved by the web API.

    Args:
        calendar_id: Calendar to summarize.
        range_kind: One of RangeKind.ALL.
        date: Any date inside the period to show (ISO 8601).
        week_start: 'monday' or 'sunday'.
        start: Custom range first day (ISO 8601).
        end: Custom range last day, inclusive (ISO 8601).
        storage: Optional StorageManager for testability.
        clock: Optional clock for testability.

    Returns:
        Exit code: 0 on success, 1 on invalid options or missing data.

    Example:
        >>> # calendar-hours summary --calendar work --range month --date 2024-03-10
        work: 2.5h (1 events) 2024-03-01T00:00:00+00:00 .. 2024-04-01T00:00:00+00:00
    """
    state = _load_view_state(storage, clock)
    tz = state.engine.tz
    try:
        if calendar_id is not None:
            state.select_calendar(calendar_id)
        if week_start is not None:
            state.set_week_start(week_start)
        if date is not None:
            state.set_anchor(parse_instant(date, tz))
        if range_kind is not None:
            state.select_range(range_kind)
        if start is not None and end is not None:
            state.set_custom_bounds(parse_instant(start, tz), parse_instant(end, tz))
        elif start is not None:
            state.set_custom_start(parse_instant(start, tz))
        elif end is not None:
            state.set_custom_end(parse_instant(end, tz))
        summary = DashboardPresenter(state).get_summary()
    except (RangeError, MalformedEventError) as e:
        _log(f"Error: {e}", emoji="❌")
        return 1

    if summary.calendar_id is None:
        _log("No calendar selected; pass --calendar", emoji="❌")
        return 1
    if summary.is_loading:
        _log(f"No event snapshot for calendar {summary.calendar_id}", emoji="❌")
        return 1

    span = f"{summary.start or '-inf'} .. {summary.end or '+inf'}"
    print(f"{summary.calendar_id}: {summary.hours_display} ({summary.event_count} events) {span}")
    return 0


def run_series(
    granularity: str = "monthly",
    year: int | None = None,
    calendar_ids: Sequence[str] | None = None,
    *,
    storage: StorageManager | None = None,
    clock: Callable[[], datetime] | None = None,
) -> int:
    """
    Print a weekly, monthly or yearly series for every loaded calendar.

    Output is one block per calendar: a header line followed by one
    "label<TAB>hours" line per period.

    Args:
        granularity: 'weekly', 'monthly' or 'yearly'.
        year: Year for weekly/monthly series. Default: current year.
        calendar_ids: Calendars to include. Default: all.
        storage: Optional StorageManager for testability.
        clock: Optional clock for testability.

    Returns:
        Exit code: 0 on success, 1 on invalid options or no loaded calendar.
    """
    state = _load_view_state(storage, clock)
    try:
        chart = DashboardPresenter(state).get_chart(granularity, year=year, checked=calendar_ids)
    except ValueError as e:
        _log(f"Error: {e}", emoji="❌")
        return 1

    if not chart.series:
        _log("No loaded calendars to report", emoji="⚠️")
        return 1

    for series in chart.series:
        print(f"# {series.label} ({series.calendar_id}) total {format_hours(series.total_hours)}")
        for bucket in series.buckets:
            print(f"{bucket.label}\t{bucket.hours:g}")
    return 0


def run_serve(host: str = DEFAULT_HOST, port: int = DEFAULT_PORT) -> int:
    """
    Launch the JSON API server.

    Args:
        host: Network interface to bind to. Default '127.0.0.1'.
        port: TCP port for the HTTP server. Default 8000.

    Returns:
        Exit code 0 after the server stops (Ctrl+C).

    Raises:
        OSError: If port is already in use.
    """
    from .web import run_server as start_web

    _log(f"Starting Calendar Hours API at http://{host}:{port}", emoji="🚀")
    _log("Press Ctrl+C to stop")
    start_web(host=host, port=port)
    return 0


def _build_parser() -> argparse.ArgumentParser:
    from .__version__ import __version__

    parser = argparse.ArgumentParser(
        prog=PROG_NAME,
        description="Calendar Hours - hours spent in calendar events per period",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("calendars", help="List stored calendars")

    summary_parser = subparsers.add_parser("summary", help="Hours of one calendar in one range")
    summary_parser.add_argument("--calendar", dest="calendar_id", help="Calendar id")
    summary_parser.add_argument("--range", dest="range_kind", choices=sorted(RangeKind.ALL), help="Range kind")
    summary_parser.add_argument("--date", help="Date inside the period (YYYY-MM-DD)")
    summary_parser.add_argument("--week-start", choices=sorted(WeekStart.ALL), help="First day of week ranges")
    summary_parser.add_argument("--start", help="Custom range first day (YYYY-MM-DD)")
    summary_parser.add_argument("--end", help="Custom range last day, inclusive (YYYY-MM-DD)")

    series_parser = subparsers.add_parser("series", help="Per-period hours for all calendars")
    series_parser.add_argument("--granularity", choices=GRANULARITIES, default="monthly", help="Period size")
    series_parser.add_argument("--year", type=int, default=None, help="Year (default: current year)")
    series_parser.add_argument(
        "--calendar",
        dest="calendar_ids",
        action="append",
        default=None,
        help="Calendar id to include (repeatable, default: all)",
    )

    serve_parser = subparsers.add_parser("serve", help="Run the JSON API server")
    serve_parser.add_argument(
        "--host",
        default=DEFAULT_HOST,
        help=f"Bind address (default: {DEFAULT_HOST})",
    )
    serve_parser.add_argument(
        "--port",
        type=int,
        default=DEFAULT_PORT,
        help=f"Port number (default: {DEFAULT_PORT})",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """
    Main CLI entry point for Calendar Hours.

    Parses command-line arguments and dispatches to the subcommand
    handler. Without a subcommand, prints help and returns 1.

    Subcommands:
    - calendars: List stored calendars
    - summary [--calendar] [--range] [--date] [--week-start] [--start] [--end]
    - series [--granularity] [--year] [--calendar ...]
    - serve [--host HOST] [--port PORT]

    Returns:
        Exit code of the subcommand.

    Raises:
        SystemExit: On --help or argument parsing errors.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command == "calendars":
        return run_calendars()
    if args.command == "summary":
        return run_summary(
            calendar_id=args.calendar_id,
            range_kind=args.range_kind,
            date=args.date,
            week_start=args.week_start,
            start=args.start,
            end=args.end,
        )
    if args.command == "series":
        return run_series(args.granularity, args.year, args.calendar_ids)
    if args.command == "serve":
        return run_serve(host=args.host, port=args.port)

    parser.print_help()
    return 1


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
