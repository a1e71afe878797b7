"""
Web API module for Calendar Hours.

PURPOSE: FastAPI JSON API over the range selection and hour aggregations.
AI CONTEXT: Chart rendering is left to the client; this module only serves data.

FEATURES:
- Calendar list with loading flags
- Summary of the selected calendar in the selected range
- Monthly/yearly graph data for one calendar
- Weekly/monthly/yearly comparison chart data for all calendars
- Range selection mutators (kind, step, reset, custom bounds, week start)

USAGE:
    # Via CLI
    calendar-hours serve

    # Programmatically
    from calendar_hours.web import create_app
    app = create_app()
"""

from .app import create_app, run_server

__all__ = ["create_app", "run_server"]
