"""Tests for models module."""

from __future__ import annotations

import sys
from datetime import date, datetime
from pathlib import Path
from zoneinfo import ZoneInfo

import pytest

# Add tests directory to path for conftest imports
sys.path.insert(0, str(Path(__file__).parent))

from calendar_hours.config import Config
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
    parse_instant,
)
from conftest import utc

BERLIN = ZoneInfo("Europe/Berlin")


class TestConstants:
    """Tests for RangeKind and WeekStart."""

    def test_range_kinds(self) -> None:
        assert RangeKind.ALL == {"day", "week", "month", "year", "total", "custom"}

    def test_steppable_kinds_exclude_total_and_custom(self) -> None:
        assert RangeKind.STEPPABLE == RangeKind.ALL - {"total", "custom"}

    def test_week_starts(self) -> None:
        assert WeekStart.ALL == {"monday", "sunday"}


class TestErrors:
    """Tests for the error hierarchy.

    Business context: Callers catch RangeError (or ValueError) once to
    handle every invalid selection.
    """

    def test_range_errors_are_value_errors(self) -> None:
        assert issubclass(RangeError, ValueError)
        assert issubclass(InvalidRangeKind, RangeError)
        assert issubclass(MissingCustomBounds, RangeError)

    def test_invalid_range_kind_message(self) -> None:
        err = InvalidRangeKind("fortnight")
        assert err.kind == "fortnight"
        assert "fortnight" in str(err)

    def test_malformed_event_error_is_not_range_error(self) -> None:
        assert not issubclass(MalformedEventError, RangeError)


class TestParseInstant:
    """Tests for parse_instant.

    Categories:
    1. Strings (4 tests)
    2. date and datetime objects (3 tests)
    3. Invalid input (3 tests)
    """

    def test_z_suffix(self) -> None:
        assert parse_instant("2024-03-10T09:00:00Z") == utc(2024, 3, 10, 9)

    def test_explicit_offset_is_kept(self) -> None:
        result = parse_instant("2024-03-10T09:00:00+01:00", BERLIN)
        assert result == utc(2024, 3, 10, 8)

    def test_naive_string_uses_timezone(self) -> None:
        result = parse_instant("2024-03-10T09:00:00", BERLIN)
        assert result == datetime(2024, 3, 10, 9, tzinfo=BERLIN)

    def test_date_string_is_local_midnight(self) -> None:
        """Verifies an all-day 'YYYY-MM-DD' becomes local midnight."""
        assert parse_instant("2024-03-10", BERLIN) == datetime(2024, 3, 10, tzinfo=BERLIN)

    def test_date_object(self) -> None:
        assert parse_instant(date(2024, 3, 10), BERLIN) == datetime(2024, 3, 10, tzinfo=BERLIN)

    def test_aware_datetime_unchanged(self) -> None:
        instant = utc(2024, 3, 10, 9)
        assert parse_instant(instant, BERLIN) is instant

    def test_default_timezone_from_config(self) -> None:
        Config.set_test_overrides(timezone="Europe/Berlin")
        assert parse_instant("2024-03-10T09:00:00").tzinfo == BERLIN

    @pytest.mark.parametrize("value", ["", None, "not a date", 12345])
    def test_invalid_values_raise(self, value: object) -> None:
        with pytest.raises(MalformedEventError):
            parse_instant(value)


class TestEvent:
    """Tests for Event."""

    def test_duration_hours(self) -> None:
        event = Event(start=utc(2024, 3, 10, 9), end=utc(2024, 3, 10, 11, 30))
        assert event.duration_hours == 2.5
        assert not event.is_malformed

    def test_malformed_event(self) -> None:
        event = Event(start=utc(2024, 3, 10, 12), end=utc(2024, 3, 10, 9))
        assert event.is_malformed
        assert event.duration_hours == -3.0

    def test_zero_length_event_is_not_malformed(self) -> None:
        event = Event(start=utc(2024, 3, 10, 12), end=utc(2024, 3, 10, 12))
        assert not event.is_malformed

    def test_from_dict_iso_strings(self) -> None:
        event = Event.from_dict(
            {"id": "e1", "summary": "Standup", "start": "2024-03-10T09:00:00Z", "end": "2024-03-10T09:15:00Z"}
        )
        assert event.id == "e1"
        assert event.summary == "Standup"
        assert event.duration_hours == 0.25

    def test_from_dict_calendar_api_shapes(self) -> None:
        """Verifies {'dateTime'} and all-day {'date'} bounds are understood.

        Business context:
        Calendar APIs deliver timed events with dateTime and all-day
        events with date; both must count.
        """
        timed = Event.from_dict(
            {"start": {"dateTime": "2024-03-10T09:00:00+01:00"}, "end": {"dateTime": "2024-03-10T10:00:00+01:00"}},
            BERLIN,
        )
        all_day = Event.from_dict({"start": {"date": "2024-03-10"}, "end": {"date": "2024-03-11"}}, BERLIN)

        assert timed.duration_hours == 1.0
        assert all_day.start == datetime(2024, 3, 10, tzinfo=BERLIN)
        assert all_day.duration_hours == 24.0

    def test_from_dict_keeps_extra_fields(self) -> None:
        event = Event.from_dict(
            {"start": "2024-03-10T09:00:00Z", "end": "2024-03-10T10:00:00Z", "location": "Room 1"}
        )
        assert event.extra == {"location": "Room 1"}

    def test_from_dict_missing_bound_raises(self) -> None:
        with pytest.raises(MalformedEventError):
            Event.from_dict({"start": "2024-03-10T09:00:00Z"})

    def test_to_dict(self) -> None:
        event = Event(start=utc(2024, 3, 10, 9), end=utc(2024, 3, 10, 10), id="e1", extra={"location": "Room 1"})
        data = event.to_dict()
        assert data["id"] == "e1"
        assert data["location"] == "Room 1"
        assert data["start"] == "2024-03-10T09:00:00+00:00"
        assert Event.from_dict(data) == event

    def test_extra_not_part_of_equality(self) -> None:
        a = Event(start=utc(2024, 3, 10, 9), end=utc(2024, 3, 10, 10), extra={"x": 1})
        b = Event(start=utc(2024, 3, 10, 9), end=utc(2024, 3, 10, 10))
        assert a == b


class TestCalendar:
    """Tests for Calendar."""

    def test_from_stored_dict(self) -> None:
        calendar = Calendar.from_dict({"id": "work", "label": "Work", "color": "#ff0000"})
        assert calendar == Calendar("work", "Work", "#ff0000")

    def test_from_api_dict(self) -> None:
        calendar = Calendar.from_dict({"id": "a@b.c", "summary": "Team", "backgroundColor": "#00ff00"})
        assert calendar.label == "Team"
        assert calendar.color == "#00ff00"

    def test_default_color(self) -> None:
        assert Calendar.from_dict({"id": "x"}).color == Config.DEFAULT_CALENDAR_COLOR

    def test_missing_id_raises(self) -> None:
        with pytest.raises(KeyError):
            Calendar.from_dict({"label": "No id"})

    def test_to_dict(self) -> None:
        assert Calendar("work", "Work", "#ff0000").to_dict() == {"id": "work", "label": "Work", "color": "#ff0000"}


class TestTimeRange:
    """Tests for TimeRange.overlaps.

    Business context: The overlap test decides which events count toward a
    range; touching intervals must not count twice.
    """

    span = TimeRange(utc(2024, 3, 1), utc(2024, 4, 1))

    def test_inside(self) -> None:
        assert self.span.overlaps(utc(2024, 3, 10), utc(2024, 3, 11))

    def test_partial(self) -> None:
        assert self.span.overlaps(utc(2024, 2, 28), utc(2024, 3, 2))

    def test_ends_at_start(self) -> None:
        assert not self.span.overlaps(utc(2024, 2, 28), utc(2024, 3, 1))

    def test_starts_at_end(self) -> None:
        assert not self.span.overlaps(utc(2024, 4, 1), utc(2024, 4, 2))

    def test_open_bounds_overlap_everything(self) -> None:
        assert TimeRange(None, None).overlaps(utc(1970, 1, 1), utc(1970, 1, 2))

    def test_to_dict(self) -> None:
        assert TimeRange(None, utc(2024, 1, 1)).to_dict() == {"start": None, "end": "2024-01-01T00:00:00+00:00"}


class TestRangeSelection:
    """Tests for RangeSelection persistence."""

    def test_to_dict_uses_config_keys(self) -> None:
        selection = RangeSelection(kind="week", anchor=utc(2024, 3, 13), week_start="sunday")
        assert selection.to_dict() == {
            "selected_range_type": "week",
            "start": "2024-03-13T00:00:00+00:00",
            "week_start": "sunday",
            "custom_start": None,
            "custom_end": None,
        }

    def test_from_dict_roundtrip(self) -> None:
        selection = RangeSelection(
            kind="custom",
            anchor=utc(2024, 3, 13),
            custom_start=utc(2024, 3, 1),
            custom_end=utc(2024, 3, 31),
        )
        restored = RangeSelection.from_dict(selection.to_dict(), default_anchor=utc(2000, 1, 1))
        assert restored == selection

    def test_from_empty_dict_uses_defaults(self) -> None:
        """Verifies defaults: month of the given anchor, Monday week start."""
        restored = RangeSelection.from_dict({}, default_anchor=utc(2024, 3, 13))
        assert restored.kind == "month"
        assert restored.anchor == utc(2024, 3, 13)
        assert restored.week_start == "monday"
        assert restored.custom_start is None

    def test_from_dict_ignores_invalid_values(self) -> None:
        """Verifies a damaged config falls back to defaults instead of failing."""
        restored = RangeSelection.from_dict(
            {"selected_range_type": "fortnight", "week_start": "friday", "start": "garbage", "custom_end": "x"},
            default_anchor=utc(2024, 3, 13),
        )
        assert restored.kind == "month"
        assert restored.week_start == "monday"
        assert restored.anchor == utc(2024, 3, 13)
        assert restored.custom_end is None


class TestValueObjects:
    """Tests for PeriodBucket and RangeSummary."""

    def test_period_bucket_to_dict(self) -> None:
        assert PeriodBucket("Jan", 2.5).to_dict() == {"label": "Jan", "hours": 2.5}

    def test_summary_loading(self) -> None:
        summary = RangeSummary(hours=None)
        assert summary.is_loading
        assert summary.to_dict() == {"hours": None, "event_count": 0, "loading": True}

    def test_summary_zero_is_not_loading(self) -> None:
        """Verifies 0 hours (loaded, nothing in range) differs from loading."""
        assert not RangeSummary(hours=0.0).is_loading
