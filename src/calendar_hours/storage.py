"""
Storage management for Calendar Hours.

PURPOSE: JSON persistence for user view settings and local event snapshots.
AI CONTEXT: All file I/O goes through this module. Aggregation never touches it.

STORAGE STRUCTURE:
    .calendar_hours/
    ├── config.json        # Dict: persisted view settings
    ├── calendars.json     # List: [{id, label, color}]
    └── events/
        └── <calendar>.json  # List: event dicts for one calendar

PERSISTED CONFIG KEYS:
- selected_calendar_id: Calendar shown in the single-calendar summary
- selected_range_type: RangeKind of the selection
- start: Range anchor (ISO 8601)
- custom_start / custom_end: Custom range bounds (ISO 8601)
- week_start: 'monday' or 'sunday'

ERROR HANDLING STRATEGY:
- File not found: Return empty structure (dict, list) or None for events
- JSON corruption: Log error, return empty structure
- Write failure: Log error, return False - config writes are fire-and-forget
- Unparseable event entries: Log and skip the entry, keep the rest

USAGE:
    storage = StorageManager()
    storage.update_config({"week_start": "sunday"})
    events = storage.load_events("work@example.com")
"""

from __future__ import annotations

import json
import logging
import os
import re
from collections.abc import Iterable
from datetime import tzinfo
from typing import TYPE_CHECKING, Any

from .config import Config
from .filesystem import RealFileSystem
from .models import Calendar, Event, MalformedEventError

if TYPE_CHECKING:
    from .filesystem import FileSystem

__all__ = ["StorageManager"]

logger = logging.getLogger(__name__)

_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9._@-]")


class StorageManager:
    """
    JSON file I/O manager with fail-safe error handling.

    DESIGN PRINCIPLES:
    1. Fail-safe: Never raise on I/O errors, log them
    2. Predictable: Always return valid data structures
    3. Idempotent: Safe to initialize multiple times
    4. Testable: FileSystem can be injected for mocking

    THREAD SAFETY:
    Not thread-safe. Single writer assumed.
    """

    def __init__(
        self,
        storage_dir: str | None = None,
        filesystem: FileSystem | None = None,
        tz: tzinfo | None = None,
    ) -> None:
        """
        Initialize storage with directory structure.

        Args:
            storage_dir: Custom storage path. Default: Config.get_storage_dir()
            filesystem: FileSystem implementation. Default: RealFileSystem
            tz: Timezone for naive timestamps in event snapshots.

        Creates:
            - Main storage directory
            - Events subdirectory
            - Empty config.json
        """
        self.storage_dir = storage_dir or Config.get_storage_dir()
        self._fs: FileSystem = filesystem or RealFileSystem()
        self._tz = tz
        self.config_file = os.path.join(self.storage_dir, Config.CONFIG_FILE)
        self.calendars_file = os.path.join(self.storage_dir, Config.CALENDARS_FILE)
        self.events_dir = os.path.join(self.storage_dir, Config.EVENTS_DIR)

        self._initialize_storage()

    def _initialize_storage(self) -> None:
        """
        Create directory structure and an empty config file.

        ERROR HANDLING:
        Logs errors but doesn't raise - allows degraded operation.
        """
        try:
            self._fs.makedirs(self.storage_dir, exist_ok=True)
            self._fs.makedirs(self.events_dir, exist_ok=True)

            if not self._fs.exists(self.config_file):
                self._write_json(self.config_file, {})

            logger.info(f"Storage initialized: {self.storage_dir}")
        except OSError as e:
            logger.error(f"Failed to initialize storage: {e}")

    def _read_json(self, file_path: str, default: Any) -> Any:
        """
        Read JSON file with error handling.

        Returns:
            Parsed JSON data, or ``default`` on any error.
        """
        try:
            content = self._fs.read_text(file_path)
            return json.loads(content)
        except FileNotFoundError:
            return default
        except json.JSONDecodeError as e:
            logger.error(f"Invalid JSON in {file_path}: {e}")
            return default
        except OSError as e:
            logger.error(f"Error reading {file_path}: {e}")
            return default

    def _write_json(self, file_path: str, data: Any) -> bool:
        """
        Write JSON file with error handling.

        Returns:
            True on success, False on failure.
        """
        try:
            content = json.dumps(data, indent=2, default=str)
            self._fs.write_text(file_path, content)
            return True
        except (OSError, PermissionError) as e:
            logger.error(f"Error writing {file_path}: {e}")
            return False

    # =========================================================================
    # CONFIG OPERATIONS
    # =========================================================================

    def load_config(self) -> dict[str, Any]:
        """
        Load persisted view settings.

        Returns:
            Dict of setting -> value. Empty dict if unavailable or not a dict.
        """
        result = self._read_json(self.config_file, {})
        if not isinstance(result, dict):
            logger.error(f"Ignoring non-object config in {self.config_file}")
            return {}
        return result

    def update_config(self, changes: dict[str, Any]) -> bool:
        """
        Merge ``changes`` into the persisted settings.

        Fire-and-forget from the caller's view: failures are logged and
        reported through the return value only.

        Args:
            changes: Setting -> new value. None values are stored as null.

        Returns:
            True on success.
        """
        config = self.load_config()
        config.update(changes)
        return self._write_json(self.config_file, config)

    def clear_config(self) -> bool:
        """Reset persisted settings to an empty dict."""
        return self._write_json(self.config_file, {})

    # =========================================================================
    # CALENDAR OPERATIONS
    # =========================================================================

    def load_calendars(self) -> list[Calendar]:
        """
        Load the stored calendar list.

        Returns:
            Calendars in stored order. Entries without an id are skipped.
        """
        raw = self._read_json(self.calendars_file, [])
        calendars: list[Calendar] = []
        for entry in raw if isinstance(raw, list) else []:
            try:
                calendars.append(Calendar.from_dict(entry))
            except (KeyError, TypeError, AttributeError) as e:
                logger.error(f"Skipping invalid calendar entry {entry!r}: {e}")
        return calendars

    def save_calendars(self, calendars: Iterable[Calendar]) -> bool:
        """Replace the stored calendar list."""
        return self._write_json(self.calendars_file, [c.to_dict() for c in calendars])

    # =========================================================================
    # EVENT SNAPSHOT OPERATIONS
    # =========================================================================

    def events_file(self, calendar_id: str) -> str:
        """
        Snapshot path for a calendar.

        Calendar ids are often e-mail addresses; anything outside
        [A-Za-z0-9._@-] is replaced with '_' to keep the name a single
        path component.
        """
        safe_name = _UNSAFE_FILENAME_CHARS.sub("_", calendar_id)
        return os.path.join(self.events_dir, f"{safe_name}.json")

    def load_events(self, calendar_id: str) -> tuple[Event, ...] | None:
        """
        Load the event snapshot of one calendar.

        Args:
            calendar_id: Calendar identifier.

        Returns:
            Tuple of events, or None if no snapshot exists (not loaded).
            Entries with unparseable timestamps are logged and skipped.
        """
        path = self.events_file(calendar_id)
        if not self._fs.exists(path):
            return None

        raw = self._read_json(path, [])
        events: list[Event] = []
        for entry in raw if isinstance(raw, list) else []:
            try:
                events.append(Event.from_dict(entry, self._tz))
            except (MalformedEventError, AttributeError) as e:
                logger.error(f"Skipping event in {path}: {e}")
        return tuple(events)

    def save_events(self, calendar_id: str, events: Iterable[Event]) -> bool:
        """Replace the event snapshot of one calendar."""
        return self._write_json(self.events_file(calendar_id), [e.to_dict() for e in events])
