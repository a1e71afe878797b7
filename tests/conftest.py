"""
Pytest configuration and shared fixtures for Calendar Hours tests.

This module contains:
- MockFileSystem: In-memory filesystem for testing without actual I/O
- Event helpers: utc() and make_event() for concise test data
- Shared fixtures available to all test modules
"""

from __future__ import annotations

from collections.abc import Iterator
from datetime import UTC, datetime

import pytest

from calendar_hours.config import Config
from calendar_hours.models import Calendar, Event
from calendar_hours.storage import StorageManager


class MockFileSystem:
    """
    In-memory file system for testing.

    Simulates a file system using dictionaries:
    - _files: dict mapping path -> content (str)
    - _dirs: set of directory paths
    - _read_only: paths whose writes raise PermissionError

    FEATURES:
    - No actual I/O operations
    - Easy to inspect state
    - Supports write failure simulation
    """

    def __init__(self) -> None:
        self._files: dict[str, str] = {}
        self._dirs: set[str] = set()
        self._read_only: set[str] = set()

    def exists(self, path: str) -> bool:
        """
        Check if path exists in mock filesystem.

        Example:
            >>> fs = MockFileSystem()
            >>> fs.set_file('/data/config.json', '{}')
            >>> fs.exists('/data/config.json')
            True
        """
        return path in self._files or path in self._dirs

    def is_file(self, path: str) -> bool:
        return path in self._files

    def is_dir(self, path: str) -> bool:
        return path in self._dirs

    def makedirs(self, path: str, exist_ok: bool = False) -> None:
        """
        Create mock directory and parent directories.

        Raises:
            OSError: If directory exists and exist_ok is False,
                or if path is an existing file.
        """
        if path in self._dirs:
            if not exist_ok:
                raise OSError(f"Directory exists: {path}")
            return

        if path in self._files:
            raise OSError(f"Path is a file, not directory: {path}")

        parts = path.rstrip("/").split("/")
        for i in range(1, len(parts) + 1):
            parent = "/".join(parts[:i])
            if parent:
                self._dirs.add(parent)

    def read_text(self, path: str, _encoding: str = "utf-8") -> str:
        """
        Read mock file contents.

        Raises:
            FileNotFoundError: If path not in _files.
        """
        if path not in self._files:
            raise FileNotFoundError(f"No such file: {path}")
        return self._files[path]

    def write_text(self, path: str, content: str, _encoding: str = "utf-8") -> None:
        """
        Write text to mock file, creating parent directories.

        Raises:
            PermissionError: If path was marked read-only.
        """
        if path in self._read_only:
            raise PermissionError(f"Permission denied: {path}")

        parent = "/".join(path.rstrip("/").split("/")[:-1])
        if parent and parent not in self._dirs:
            self.makedirs(parent, exist_ok=True)

        self._files[path] = content

    # Test helpers

    def get_file(self, path: str) -> str | None:
        """Get file content directly (test helper)."""
        return self._files.get(path)

    def set_file(self, path: str, content: str) -> None:
        """Set file content directly, bypassing read-only checks (test helper)."""
        self._files[path] = content

    def set_read_only(self, path: str) -> None:
        """Make later writes to path fail with PermissionError (test helper)."""
        self._read_only.add(path)

    def list_files(self) -> list[str]:
        return sorted(self._files)


def utc(*args: int) -> datetime:
    """datetime(*args) in UTC, e.g. utc(2024, 3, 10, 9)."""
    return datetime(*args, tzinfo=UTC)


def make_event(start: datetime, end: datetime, event_id: str = "") -> Event:
    """Event with the given bounds."""
    return Event(start=start, end=end, id=event_id)


@pytest.fixture(autouse=True)
def utc_timezone() -> Iterator[None]:
    """
    Pin the configured timezone to UTC for every test.

    Business context: Period boundaries follow the configured wall clock.
    Pinning it keeps test results independent of CALENDAR_HOURS_TZ on the
    machine running the suite. Tests needing another zone pass tz explicitly.
    """
    Config.set_test_overrides(timezone="UTC")
    yield
    Config.reset_test_overrides()


@pytest.fixture
def mock_fs() -> MockFileSystem:
    """Fresh in-memory filesystem for each test."""
    return MockFileSystem()


@pytest.fixture
def storage(mock_fs: MockFileSystem) -> StorageManager:
    """StorageManager rooted at /test on the mock filesystem."""
    return StorageManager(storage_dir="/test", filesystem=mock_fs, tz=UTC)


@pytest.fixture
def fixed_clock() -> datetime:
    """The instant returned by the frozen clock: Wednesday 2024-03-13 15:30 UTC."""
    return utc(2024, 3, 13, 15, 30)


@pytest.fixture
def calendars() -> list[Calendar]:
    """Two calendars as stored in calendars.json."""
    return [
        Calendar("work", "Work", "#ff0000"),
        Calendar("gym", "Gym", "#00ff00"),
    ]


@pytest.fixture
def work_events() -> tuple[Event, ...]:
    """
    Events of the 'work' calendar.

    - 2024-03-10 09:00-11:30 (2.5h, Sunday)
    - 2024-03-13 13:00-15:00 (2h, Wednesday)
    - 2023-06-01 08:00-12:00 (4h)
    """
    return (
        make_event(utc(2024, 3, 10, 9), utc(2024, 3, 10, 11, 30), "w1"),
        make_event(utc(2024, 3, 13, 13), utc(2024, 3, 13, 15), "w2"),
        make_event(utc(2023, 6, 1, 8), utc(2023, 6, 1, 12), "w3"),
    )


@pytest.fixture
def gym_events() -> tuple[Event, ...]:
    """Events of the 'gym' calendar: one hour on 2024-03-11 and 2024-04-02."""
    return (
        make_event(utc(2024, 3, 11, 18), utc(2024, 3, 11, 19), "g1"),
        make_event(utc(2024, 4, 2, 18), utc(2024, 4, 2, 19), "g2"),
    )
