"""
Storage management for Practice Tracker.

PURPOSE: Centralized JSON file I/O with error handling and data integrity.
AI CONTEXT: All persistence operations go through this module.

STORAGE STRUCTURE:
    .practice_tracker/
    ├── sessions.json      # List: {started_at, duration_seconds, source}
    ├── milestones.json    # List: milestone records
    └── timer.json         # Dict: {started_at} while a timer runs, else {}

ERROR HANDLING STRATEGY:
- File not found: Return empty structure (list or dict)
- JSON corruption: Log error, return empty structure
- Invalid session records: Log and skip the record
- Write failure: Log error, return False, never crash the dashboard

USAGE:
    # Production
    storage = StorageManager()

    # Testing with MockFileSystem (tests/conftest.py)
    storage = StorageManager(storage_dir="/test", filesystem=mock_fs)
"""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

from .config import Config
from .filesystem import RealFileSystem
from .models import Milestone, RawSession

if TYPE_CHECKING:
    from .filesystem import FileSystem

logger = logging.getLogger(__name__)


class StorageManager:
    """
    JSON file I/O manager with comprehensive error handling.

    DESIGN PRINCIPLES:
    1. Fail-safe: Never crash the dashboard on I/O errors
    2. Predictable: Always return valid data structures
    3. Idempotent: Safe to initialize multiple times
    4. Logged: All errors recorded for debugging
    5. Testable: FileSystem can be injected for mocking

    THREAD SAFETY:
    Not thread-safe. Single writer assumed (one dashboard or CLI process).
    """

    def __init__(
        self,
        storage_dir: str | None = None,
        filesystem: FileSystem | None = None,
    ) -> None:
        """
        Initialize storage with directory structure.

        Args:
            storage_dir: Custom storage path. Default: Config.get_storage_dir()
            filesystem: FileSystem implementation. Default: RealFileSystem

        Creates:
            - Storage directory
            - Empty JSON files (sessions, milestones, timer)
        """
        self.storage_dir = storage_dir or Config.get_storage_dir()
        self._fs: FileSystem = filesystem or RealFileSystem()
        self.sessions_file = os.path.join(self.storage_dir, Config.SESSIONS_FILE)
        self.milestones_file = os.path.join(self.storage_dir, Config.MILESTONES_FILE)
        self.timer_file = os.path.join(self.storage_dir, Config.TIMER_FILE)

        self._initialize_storage()

    def _initialize_storage(self) -> None:
        """
        Create directory structure and initialize empty files.

        ERROR HANDLING:
        Logs errors but doesn't raise - allows degraded operation.
        """
        try:
            self._fs.makedirs(self.storage_dir, exist_ok=True)

            if not self._fs.exists(self.sessions_file):
                self._write_json(self.sessions_file, [])
            if not self._fs.exists(self.milestones_file):
                self._write_json(self.milestones_file, [])
            if not self._fs.exists(self.timer_file):
                self._write_json(self.timer_file, {})

            logger.info(f"Storage initialized: {self.storage_dir}")
        except OSError as e:
            logger.error(f"Failed to initialize storage: {e}")

    def _read_json(self, file_path: str, default: Any) -> Any:
        """
        Read JSON file with error handling.

        Args:
            file_path: Path to JSON file
            default: Value to return on any error or type mismatch

        Returns:
            Parsed JSON data or default value.
        """
        try:
            content = self._fs.read_text(file_path)
            data = json.loads(content)
        except FileNotFoundError:
            return default
        except json.JSONDecodeError as e:
            logger.error(f"Invalid JSON in {file_path}: {e}")
            return default
        except OSError as e:
            logger.error(f"Error reading {file_path}: {e}")
            return default

        if not isinstance(data, type(default)):
            logger.error(f"Unexpected structure in {file_path}: {type(data).__name__}")
            return default
        return data

    def _write_json(self, file_path: str, data: Any) -> bool:
        """
        Write JSON file with error handling.

        Returns:
            True on success, False on failure.

        FORMATTING:
        - 2-space indent for readability
        - default=str for datetime/custom types
        """
        try:
            content = json.dumps(data, indent=2, default=str, ensure_ascii=False)
            self._fs.write_text(file_path, content)
            return True
        except (OSError, PermissionError) as e:
            logger.error(f"Error writing {file_path}: {e}")
            return False

    # =========================================================================
    # SESSION OPERATIONS
    # =========================================================================

    def load_sessions(self) -> list[RawSession]:
        """
        Load all practice sessions.

        Records that fail validation (bad timestamp, negative or missing
        duration) are logged and skipped, so one corrupted entry never
        takes down the analytics.

        Returns:
            List of RawSession in stored order. Empty list if unavailable.
        """
        records: list[Any] = self._read_json(self.sessions_file, [])
        sessions: list[RawSession] = []
        for index, record in enumerate(records):
            if not isinstance(record, dict):
                logger.warning(f"Skipping non-object session record #{index}")
                continue
            try:
                sessions.append(RawSession.from_dict(record))
            except ValueError as e:
                logger.warning(f"Skipping invalid session record #{index}: {e}")
        return sessions

    def save_sessions(self, sessions: Iterable[RawSession]) -> bool:
        """
        Save sessions to disk, replacing the stored list.

        Args:
            sessions: Sessions to persist

        Returns:
            True on success.
        """
        return self._write_json(self.sessions_file, [s.to_dict() for s in sessions])

    def add_sessions(self, sessions: Iterable[RawSession]) -> int:
        """
        Append sessions, skipping any whose start instant is already stored.

        Business context: Re-importing the same CSV export (or syncing the
        same calendar twice) must not double-count practice time.

        Args:
            sessions: Candidate sessions

        Returns:
            Number of sessions actually added (0 if the write failed).

        Example:
            >>> storage.add_sessions([session])
            1
            >>> storage.add_sessions([session])
            0
        """
        existing = self.load_sessions()
        seen = {s.started_at for s in existing}
        added: list[RawSession] = []
        for session in sessions:
            if session.started_at in seen:
                continue
            seen.add(session.started_at)
            added.append(session)

        if not added:
            return 0
        if not self.save_sessions(existing + added):
            return 0
        logger.info(f"Added {len(added)} sessions")
        return len(added)

    def clear_sessions(self) -> bool:
        """
        Delete every stored session.

        WARNING: Destroys all practice history.

        Returns:
            True on success.
        """
        success = self._write_json(self.sessions_file, [])
        if success:
            logger.info("All sessions cleared")
        return success

    # =========================================================================
    # MILESTONE OPERATIONS
    # =========================================================================

    def load_milestones(self) -> list[Milestone]:
        """
        Load recorded milestones.

        Returns:
            List of Milestone. Empty list if unavailable.
        """
        records: list[Any] = self._read_json(self.milestones_file, [])
        milestones: list[Milestone] = []
        for record in records:
            try:
                milestones.append(Milestone.from_dict(record))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Skipping invalid milestone record: {e}")
        return milestones

    def save_milestones(self, milestones: Iterable[Milestone]) -> bool:
        """Save milestones to disk, replacing the stored list."""
        return self._write_json(self.milestones_file, [m.to_dict() for m in milestones])

    def add_milestone(self, milestone: Milestone) -> bool:
        """
        Append single milestone.

        Args:
            milestone: Milestone to add

        Returns:
            True on success.
        """
        milestones = self.load_milestones()
        milestones.append(milestone)
        return self.save_milestones(milestones)

    # =========================================================================
    # TIMER OPERATIONS
    # =========================================================================

    def load_timer(self) -> dict[str, Any]:
        """
        Load the running timer state.

        Returns:
            {'started_at': ISO timestamp} while a timer runs, {} otherwise.
        """
        result: dict[str, Any] = self._read_json(self.timer_file, {})
        return result

    def save_timer(self, started_at: str) -> bool:
        """Persist a running timer's start instant."""
        return self._write_json(self.timer_file, {"started_at": started_at})

    def clear_timer(self) -> bool:
        """Forget the running timer."""
        return self._write_json(self.timer_file, {})
