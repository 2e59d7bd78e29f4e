"""
Pytest configuration and shared fixtures for Practice Tracker tests.

This module contains:
- MockFileSystem: In-memory filesystem for testing without actual I/O
- FrozenClock: Controllable "now" for the analytics engine
- Shared fixtures available to all test modules
"""

from __future__ import annotations

from collections.abc import Iterator
from datetime import UTC, datetime, timedelta

import pytest

from practice_tracker.analytics import AnalyticsEngine
from practice_tracker.config import Config
from practice_tracker.models import PracticeSession, RawSession
from practice_tracker.practice_service import PracticeService
from practice_tracker.storage import StorageManager

# Wednesday; used as "now" unless a test freezes a different instant.
DEFAULT_NOW = datetime(2025, 3, 12, 10, 30, tzinfo=UTC)


class MockFileSystem:
    """
    In-memory file system for testing.

    Simulates a file system using:
    - _files: dict mapping path -> content (str)
    - _dirs: set of directory paths
    - _read_only: paths whose writes raise PermissionError

    FEATURES:
    - No actual I/O operations
    - Easy to inspect state
    - Supports write-failure simulation
    """

    def __init__(self) -> None:
        self._files: dict[str, str] = {}
        self._dirs: set[str] = set()
        self._read_only: set[str] = set()

    def exists(self, path: str) -> bool:
        return path in self._files or path in self._dirs

    def is_file(self, path: str) -> bool:
        return path in self._files

    def is_dir(self, path: str) -> bool:
        return path in self._dirs

    def makedirs(self, path: str, exist_ok: bool = False) -> None:
        """
        Create mock directory and parent directories.

        Raises:
            FileExistsError: If directory exists and exist_ok is False.
        """
        if path in self._dirs and not exist_ok:
            raise FileExistsError(f"Directory exists: {path}")
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
        Write text to mock file, auto-creating parent directories.

        Raises:
            PermissionError: If path is marked read-only.
        """
        if path in self._read_only:
            raise PermissionError(f"Permission denied: {path}")

        parent = "/".join(path.rstrip("/").split("/")[:-1])
        if parent and parent not in self._dirs:
            self.makedirs(parent, exist_ok=True)

        self._files[path] = content

    # =========================================================================
    # TEST HELPERS
    # =========================================================================

    def get_file(self, path: str) -> str | None:
        """Get file content or None if it doesn't exist."""
        return self._files.get(path)

    def set_file(self, path: str, content: str) -> None:
        """Set file content directly (test setup)."""
        self.write_text(path, content)

    def set_read_only(self, path: str) -> None:
        """Make subsequent writes to path raise PermissionError."""
        self._read_only.add(path)

    def list_files(self) -> list[str]:
        """Sorted list of all file paths."""
        return sorted(self._files.keys())


class FrozenClock:
    """
    Callable clock returning a fixed instant until advanced.

    Example:
        >>> clock = FrozenClock(datetime(2025, 1, 1, 9, 0, tzinfo=UTC))
        >>> clock.advance(minutes=30)
        >>> clock().minute
        30
    """

    def __init__(self, now: datetime = DEFAULT_NOW) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        """Move the clock forward by a timedelta(**kwargs)."""
        self.now = self.now + timedelta(**kwargs)


def practice(started_at: str, hours: float) -> PracticeSession:
    """Build a PracticeSession from an ISO start and a duration in hours."""
    return PracticeSession(start_time=datetime.fromisoformat(started_at), duration_hours=hours)


def raw(started_at: str, minutes: float, source: str = "manual") -> RawSession:
    """Build a RawSession from an ISO start and a duration in minutes."""
    return RawSession(started_at=started_at, duration_seconds=round(minutes * 60), source=source)


@pytest.fixture(autouse=True)
def reset_config(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Keep environment-based settings from leaking between tests."""
    for name in ("PRACTICE_STORAGE_DIR", "PRACTICE_TIMEZONE", "PRACTICE_VISUAL_START_DATE"):
        monkeypatch.delenv(name, raising=False)
    Config.reset_test_overrides()
    yield
    Config.reset_test_overrides()


@pytest.fixture
def mock_fs() -> MockFileSystem:
    """
    Create a MockFileSystem for testing.

    Provides a fresh in-memory filesystem instance for each test,
    ensuring test isolation without actual disk I/O.
    """
    return MockFileSystem()


@pytest.fixture
def clock() -> FrozenClock:
    """Clock frozen at DEFAULT_NOW (2025-03-12 10:30 UTC)."""
    return FrozenClock()


@pytest.fixture
def engine(clock: FrozenClock) -> AnalyticsEngine:
    """
    AnalyticsEngine bucketing days in UTC with a frozen clock.

    No visual start date, so long ranges are only limited by the data.
    """
    return AnalyticsEngine(clock=clock, tz=UTC)


@pytest.fixture
def storage(mock_fs: MockFileSystem) -> StorageManager:
    """StorageManager backed by MockFileSystem under /test/storage."""
    return StorageManager(storage_dir="/test/storage", filesystem=mock_fs)


@pytest.fixture
def service(storage: StorageManager, engine: AnalyticsEngine) -> PracticeService:
    """PracticeService over mock storage and the frozen-clock engine."""
    return PracticeService(storage=storage, engine=engine)
