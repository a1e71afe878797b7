"""
Package entry point for python -m execution.

USAGE:
    python -m calendar_hours calendars   # List stored calendars
    python -m calendar_hours summary     # Hours in the selected range
    python -m calendar_hours series      # Per-period series for all calendars
    python -m calendar_hours serve       # Run the JSON API
"""

import sys

from calendar_hours.cli import main

if __name__ == "__main__":
    sys.exit(main())
