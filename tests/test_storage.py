"""Tests for storage module."""

from __future__ import annotations

import json
import sys
from datetime import UTC
from pathlib import Path

import pytest

# Add tests directory to path for conftest imports
sys.path.insert(0, str(Path(__file__).parent))

from calendar_hours.config import Config
from calendar_hours.models import Calendar, Event
from calendar_hours.storage import StorageManager
from conftest import MockFileSystem, utc


class TestStorageInitialization:
    """Tests for StorageManager setup.

    Business context: Storage must come up on a fresh machine without
    user action and must never clobber existing settings.
    """

    def test_creates_directories(self, storage: StorageManager, mock_fs: MockFileSystem) -> None:
        assert mock_fs.is_dir("/test")
        assert mock_fs.is_dir("/test/events")

    def test_creates_empty_config(self, storage: StorageManager, mock_fs: MockFileSystem) -> None:
        assert mock_fs.get_file("/test/config.json") == "{}"

    def test_keeps_existing_config(self, mock_fs: MockFileSystem) -> None:
        mock_fs.set_file("/test/config.json", '{"week_start": "sunday"}')
        storage = StorageManager(storage_dir="/test", filesystem=mock_fs)
        assert storage.load_config() == {"week_start": "sunday"}

    def test_default_dir_from_config(self, mock_fs: MockFileSystem) -> None:
        Config.set_test_overrides(timezone="UTC", storage_dir="/override")
        storage = StorageManager(filesystem=mock_fs)
        assert storage.storage_dir == "/override"
        assert storage.config_file == "/override/config.json"

    def test_initialization_survives_os_error(self, mock_fs: MockFileSystem) -> None:
        """Verifies a file where the directory should be does not raise."""
        mock_fs.set_file("/test", "")
        storage = StorageManager(storage_dir="/test", filesystem=mock_fs)
        assert storage.load_config() == {}


class TestConfigOperations:
    """Tests for persisted view settings.

    Categories:
    1. Load (3 tests)
    2. Update / clear (4 tests)
    """

    def test_load_empty(self, storage: StorageManager) -> None:
        assert storage.load_config() == {}

    def test_load_corrupt_json(self, storage: StorageManager, mock_fs: MockFileSystem) -> None:
        mock_fs.set_file("/test/config.json", "{not json")
        assert storage.load_config() == {}

    def test_load_non_object(self, storage: StorageManager, mock_fs: MockFileSystem) -> None:
        mock_fs.set_file("/test/config.json", "[1, 2]")
        assert storage.load_config() == {}

    def test_update_merges(self, storage: StorageManager) -> None:
        """Verifies update_config keeps keys it was not given."""
        assert storage.update_config({"week_start": "sunday"})
        assert storage.update_config({"selected_range_type": "week"})
        assert storage.load_config() == {"week_start": "sunday", "selected_range_type": "week"}

    def test_update_stores_none_as_null(self, storage: StorageManager, mock_fs: MockFileSystem) -> None:
        storage.update_config({"custom_end": None})
        assert json.loads(mock_fs.get_file("/test/config.json") or "") == {"custom_end": None}

    def test_update_failure_returns_false(self, storage: StorageManager, mock_fs: MockFileSystem) -> None:
        """Verifies write failures are reported, not raised."""
        mock_fs.set_read_only("/test/config.json")
        assert storage.update_config({"week_start": "sunday"}) is False

    def test_clear(self, storage: StorageManager) -> None:
        storage.update_config({"week_start": "sunday"})
        assert storage.clear_config()
        assert storage.load_config() == {}


class TestCalendarOperations:
    """Tests for the stored calendar list."""

    def test_missing_file_is_empty(self, storage: StorageManager) -> None:
        assert storage.load_calendars() == []

    def test_save_and_load(self, storage: StorageManager, calendars: list[Calendar]) -> None:
        assert storage.save_calendars(calendars)
        assert storage.load_calendars() == calendars

    def test_skips_entries_without_id(self, storage: StorageManager, mock_fs: MockFileSystem) -> None:
        mock_fs.set_file(
            "/test/calendars.json",
            json.dumps([{"label": "No id"}, {"id": "work", "summary": "Work"}, "junk"]),
        )
        assert storage.load_calendars() == [Calendar("work", "Work")]

    def test_non_list_is_empty(self, storage: StorageManager, mock_fs: MockFileSystem) -> None:
        mock_fs.set_file("/test/calendars.json", '{"id": "work"}')
        assert storage.load_calendars() == []


class TestEventSnapshots:
    """Tests for per-calendar event snapshots.

    Business context: A missing snapshot means "not loaded" (None), which the
    UI shows as Loading; an empty snapshot means zero hours.
    """

    def test_missing_snapshot_is_none(self, storage: StorageManager) -> None:
        assert storage.load_events("work") is None

    def test_save_and_load(self, storage: StorageManager, work_events: tuple[Event, ...]) -> None:
        assert storage.save_events("work", work_events)
        loaded = storage.load_events("work")
        assert loaded == work_events
        assert isinstance(loaded, tuple)

    def test_empty_snapshot(self, storage: StorageManager) -> None:
        storage.save_events("work", [])
        assert storage.load_events("work") == ()

    def test_file_name_is_sanitized(self, storage: StorageManager) -> None:
        """Verifies calendar ids with path characters stay one path component."""
        path = storage.events_file("team/../x y@group.calendar.google.com")
        assert path == "/test/events/team_.._x_y@group.calendar.google.com.json"

    def test_skips_unparseable_events(self, storage: StorageManager, mock_fs: MockFileSystem) -> None:
        mock_fs.set_file(
            "/test/events/work.json",
            json.dumps(
                [
                    {"id": "ok", "start": "2024-03-10T09:00:00Z", "end": "2024-03-10T10:00:00Z"},
                    {"id": "bad", "start": "yesterday", "end": "2024-03-10T10:00:00Z"},
                    "junk",
                ]
            ),
        )
        loaded = storage.load_events("work")
        assert loaded is not None
        assert [e.id for e in loaded] == ["ok"]

    def test_naive_timestamps_use_storage_timezone(self, mock_fs: MockFileSystem) -> None:
        storage = StorageManager(storage_dir="/test", filesystem=mock_fs, tz=UTC)
        mock_fs.set_file(
            "/test/events/work.json",
            json.dumps([{"start": "2024-03-10T09:00:00", "end": {"date": "2024-03-11"}}]),
        )
        loaded = storage.load_events("work")
        assert loaded is not None
        assert loaded[0].start == utc(2024, 3, 10, 9)
        assert loaded[0].end == utc(2024, 3, 11)

    def test_corrupt_snapshot_is_empty(self, storage: StorageManager, mock_fs: MockFileSystem) -> None:
        mock_fs.set_file("/test/events/work.json", "[{")
        assert storage.load_events("work") == ()

    @pytest.mark.parametrize("calendar_id", ["work", "a@b.c"])
    def test_save_failure_returns_false(
        self, storage: StorageManager, mock_fs: MockFileSystem, calendar_id: str
    ) -> None:
        mock_fs.set_read_only(storage.events_file(calendar_id))
        assert storage.save_events(calendar_id, []) is False
