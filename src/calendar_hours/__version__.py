"""Version information for calendar-hours."""

__version__ = "1.2.0"
__version_date__ = "2026-10-17"

__title__ = "calendar_hours"
__description__ = "Aggregate calendar events into hour totals per day, week, month and year"
__url__ = "https://github.com/aronwoost/google-calendar-hours"

__author__ = "Aron Woost"

__license__ = "MIT"
__copyright__ = "Copyright 2026 Aron Woost"

__all__ = [
    "__version__",
    "__version_date__",
    "__title__",
    "__description__",
    "__url__",
    "__author__",
    "__license__",
    "__copyright__",
]
