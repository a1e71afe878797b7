"""
Configuration for Calendar Hours.

PURPOSE: Centralized configuration constants and runtime settings.
AI CONTEXT: All configurable values live here - modify this file to change behavior.

CONFIGURATION CATEGORIES:
- Storage: File paths and directory structure
- Aggregation: Rounding precision and period grid sizes
- Defaults: Initial range selection and calendar colour
- Chart: Axis tick count used by presenters

ENVIRONMENT VARIABLES:
- CALENDAR_HOURS_TZ: IANA timezone for local midnights (default: UTC)
- CALENDAR_HOURS_STORAGE_DIR: Storage directory (default: .calendar_hours)

USAGE:
    from calendar_hours.config import Config
    precision = Config.HOURS_PRECISION
    tz = Config.get_timezone()
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import ClassVar
from zoneinfo import ZoneInfo


@dataclass(frozen=True)
class Config:
    """
    Immutable configuration container for Calendar Hours.

    DESIGN: Frozen dataclass ensures configuration immutability at runtime.
    All values are class-level constants - no instance creation needed.

    STORAGE STRUCTURE:
        .calendar_hours/
        ├── config.json        # Persisted view settings {key: value}
        ├── calendars.json     # Calendar list [{id, label, color}]
        └── events/
            └── <calendar>.json  # Event snapshot per calendar [events]
    """

    # =========================================================================
    # STORAGE CONFIGURATION
    # =========================================================================
    STORAGE_DIR: ClassVar[str] = ".calendar_hours"
    CONFIG_FILE: ClassVar[str] = "config.json"
    CALENDARS_FILE: ClassVar[str] = "calendars.json"
    EVENTS_DIR: ClassVar[str] = "events"

    # =========================================================================
    # AGGREGATION PARAMETERS
    # =========================================================================
    HOURS_PRECISION: ClassVar[int] = 2
    """Decimal places kept after summing hours. Hides float noise like 1.9999999."""

    YEARLY_SERIES_LENGTH: ClassVar[int] = 5
    """Number of years in the yearly series, ending at the current year."""

    MONTHS_PER_YEAR: ClassVar[int] = 12

    ISO_LAST_WEEK_DAY: ClassVar[tuple[int, int]] = (12, 28)
    """(month, day) that always falls in the last ISO week of its year."""

    MIN_SERIES_YEAR: ClassVar[int] = 2
    MAX_SERIES_YEAR: ClassVar[int] = 9998
    """
    Years a series can be built for. Period ends reach into the next year
    and local midnights may convert to UTC in the previous one, so both
    neighbours must be representable by datetime.
    """

    # =========================================================================
    # RANGE DEFAULTS
    # =========================================================================
    DEFAULT_RANGE_KIND: ClassVar[str] = "month"
    DEFAULT_WEEK_START: ClassVar[str] = "monday"
    DEFAULT_CALENDAR_COLOR: ClassVar[str] = "#4285f4"

    TOTAL_RANGE_START: ClassVar[datetime] = datetime(2000, 1, 1, 10, tzinfo=UTC)
    TOTAL_RANGE_END: ClassVar[datetime] = datetime(2040, 1, 1, 10, tzinfo=UTC)
    """
    Concrete window for the Total range when one is needed (seeding a custom
    range). Aggregation itself treats Total as unbounded.
    """

    # =========================================================================
    # CHART PARAMETERS
    # =========================================================================
    Y_TICKS: ClassVar[int] = 4

    # =========================================================================
    # ENVIRONMENT-BASED SETTINGS (runtime configurable)
    # =========================================================================
    _timezone_override: ClassVar[str | None] = None
    _storage_dir_override: ClassVar[str | None] = None

    @classmethod
    def get_timezone(cls) -> ZoneInfo:
        """
        Get the timezone used for local midnights and period boundaries.

        Uses a priority system: test override first, then the
        CALENDAR_HOURS_TZ environment variable, then UTC.

        Business context: "Today", "this month" and week starts depend on
        where the user lives. Event instants are absolute, but the buckets
        they are summed into follow the user's wall clock.

        Returns:
            ZoneInfo for the configured IANA name.

        Raises:
            zoneinfo.ZoneInfoNotFoundError: If the configured name is unknown.

        Example:
            >>> # With env var: CALENDAR_HOURS_TZ=Europe/Berlin
            >>> Config.get_timezone()
            zoneinfo.ZoneInfo(key='Europe/Berlin')
        """
        if cls._timezone_override is not None:
            return ZoneInfo(cls._timezone_override)
        return ZoneInfo(os.environ.get("CALENDAR_HOURS_TZ", "") or "UTC")

    @classmethod
    def get_storage_dir(cls) -> str:
        """
        Get the directory holding persisted config and event snapshots.

        Returns:
            Test override, CALENDAR_HOURS_STORAGE_DIR, or STORAGE_DIR.
        """
        if cls._storage_dir_override is not None:
            return cls._storage_dir_override
        return os.environ.get("CALENDAR_HOURS_STORAGE_DIR", "") or cls.STORAGE_DIR

    @classmethod
    def set_test_overrides(
        cls,
        timezone: str | None = None,
        storage_dir: str | None = None,
    ) -> None:
        """
        Set test overrides for environment-based settings.

        Must call reset_test_overrides() in test teardown to avoid affecting
        other tests.

        Args:
            timezone: IANA timezone name override. None to clear.
            storage_dir: Storage directory override. None to clear.

        Example:
            >>> Config.set_test_overrides(timezone='America/New_York')
            >>> Config.get_timezone().key
            'America/New_York'
            >>> Config.reset_test_overrides()  # Clean up
        """
        cls._timezone_override = timezone
        cls._storage_dir_override = storage_dir

    @classmethod
    def reset_test_overrides(cls) -> None:
        """Reset all test overrides to use environment variables."""
        cls._timezone_override = None
        cls._storage_dir_override = None
