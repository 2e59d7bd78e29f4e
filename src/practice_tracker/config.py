"""
Configuration for Practice Tracker.

PURPOSE: Centralized configuration constants and runtime settings.
AI CONTEXT: All configurable values live here - modify this file to change behavior.

CONFIGURATION CATEGORIES:
- Storage: File paths and directory structure
- Analytics: Range tokens, downsampling budget, goal hours
- Display: Visual start date for long-range charts
- Time: Timezone used for calendar-day bucketing

ENVIRONMENT VARIABLES:
- PRACTICE_STORAGE_DIR: Storage directory (default: .practice_tracker)
- PRACTICE_TIMEZONE: IANA zone name for day boundaries (default: system local)
- PRACTICE_VISUAL_START_DATE: ISO date; long-range charts never start before
  it (default: unset, no clamp)

USAGE:
    from practice_tracker.config import Config
    target = Config.DOWNSAMPLE_TARGET
    cutoff = Config.get_visual_start_date()
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from datetime import date
from typing import ClassVar
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Config:
    """
    Immutable configuration container for Practice Tracker.

    DESIGN: Frozen dataclass ensures configuration immutability at runtime.
    All values are class-level constants - no instance creation needed.

    STORAGE STRUCTURE:
        .practice_tracker/
        ├── sessions.json      # List: raw practice sessions
        ├── milestones.json    # List: recorded milestones
        └── timer.json         # Dict: running live timer (or empty)
    """

    # =========================================================================
    # STORAGE CONFIGURATION
    # =========================================================================
    STORAGE_DIR: ClassVar[str] = ".practice_tracker"
    SESSIONS_FILE: ClassVar[str] = "sessions.json"
    MILESTONES_FILE: ClassVar[str] = "milestones.json"
    TIMER_FILE: ClassVar[str] = "timer.json"

    # =========================================================================
    # ANALYTICS PARAMETERS
    # =========================================================================
    RANGE_TOKENS: ClassVar[tuple[str, ...]] = ("1W", "1M", "6M", "1Y", "ALL")
    """Chart windows, shortest first."""

    RANGE_ALIASES: ClassVar[dict[str, str]] = {"MAX": "ALL"}

    LONG_RANGES: ClassVar[frozenset[str]] = frozenset({"6M", "1Y", "ALL"})
    """
    Ranges clamped to the visual start date and downsampled before display.
    The underlying analytics always use the full history.
    """

    DOWNSAMPLE_TARGET: ClassVar[int] = 100
    """Approximate number of plotted points for long ranges."""

    # =========================================================================
    # GOALS AND MILESTONES
    # =========================================================================
    GOAL_HOURS: ClassVar[int] = 10_000
    MILESTONE_STEPS: ClassVar[tuple[int, ...]] = (1000, 100)
    MILESTONE_TYPES: ClassVar[frozenset[str]] = frozenset({"interval", "custom"})

    SESSION_SOURCES: ClassVar[frozenset[str]] = frozenset(
        {
            "csv_import",
            "calendar_sync",
            "manual",
            "timer",
        }
    )

    # =========================================================================
    # ENVIRONMENT-BASED SETTINGS (runtime configurable)
    # =========================================================================
    _storage_dir_override: ClassVar[str | None] = None
    _timezone_override: ClassVar[str | None] = None
    _visual_start_override: ClassVar[date | None] = None
    _visual_start_overridden: ClassVar[bool] = False

    @classmethod
    def get_storage_dir(cls) -> str:
        """
        Get the directory holding the JSON data files.

        Priority: test override, then PRACTICE_STORAGE_DIR, then STORAGE_DIR.

        Returns:
            Storage directory path (relative paths resolve against cwd).

        Example:
            >>> Config.get_storage_dir()
            '.practice_tracker'
        """
        if cls._storage_dir_override is not None:
            return cls._storage_dir_override
        return os.environ.get("PRACTICE_STORAGE_DIR", cls.STORAGE_DIR)

    @classmethod
    def get_timezone(cls) -> ZoneInfo | None:
        """
        Get the timezone used to decide calendar-day boundaries.

        Sessions are bucketed by the local calendar day of their start
        instant. When no zone is configured the system local time is used,
        which is what a personal tracker running on the user's machine
        expects.

        Business context: A session logged at 00:30 must count towards the
        day it was played in the user's wall-clock time, not the UTC day.

        Returns:
            ZoneInfo for PRACTICE_TIMEZONE (or the test override), or None
            for system local time. Unknown zone names are logged and
            treated as unset.

        Example:
            >>> # With env var: PRACTICE_TIMEZONE=Europe/Berlin
            >>> Config.get_timezone()
            zoneinfo.ZoneInfo(key='Europe/Berlin')
        """
        name = cls._timezone_override or os.environ.get("PRACTICE_TIMEZONE", "")
        if not name:
            return None
        try:
            return ZoneInfo(name)
        except (ZoneInfoNotFoundError, ValueError):
            logger.warning(f"Unknown timezone '{name}', falling back to system local time")
            return None

    @classmethod
    def get_visual_start_date(cls) -> date | None:
        """
        Get the earliest day long-range charts are allowed to show.

        Early tracking history is usually volatile (the average swings
        wildly over the first weeks). Long-range charts (6M, 1Y, ALL) can
        hide it by starting no earlier than this date; the averages
        themselves are still computed from the true first session.

        Returns:
            The configured cutoff date, or None when no cutoff applies.
            Unparseable PRACTICE_VISUAL_START_DATE values are logged and
            ignored.

        Example:
            >>> # With env var: PRACTICE_VISUAL_START_DATE=2024-03-01
            >>> Config.get_visual_start_date()
            datetime.date(2024, 3, 1)
        """
        if cls._visual_start_overridden:
            return cls._visual_start_override
        raw = os.environ.get("PRACTICE_VISUAL_START_DATE", "").strip()
        if not raw:
            return None
        try:
            return date.fromisoformat(raw)
        except ValueError:
            logger.warning(f"Ignoring invalid PRACTICE_VISUAL_START_DATE '{raw}'")
            return None

    @classmethod
    def set_test_overrides(
        cls,
        storage_dir: str | None = None,
        timezone: str | None = None,
        visual_start_date: date | None = None,
        override_visual_start: bool = False,
    ) -> None:
        """
        Set test overrides for environment-based settings.

        Must call reset_test_overrides() in test teardown to avoid
        affecting other tests.

        Args:
            storage_dir: Override for the storage directory. None to clear.
            timezone: Override for the IANA zone name. None to clear.
            visual_start_date: Cutoff date to force (may be None).
            override_visual_start: When True, visual_start_date replaces the
                environment value even if it is None.
        """
        cls._storage_dir_override = storage_dir
        cls._timezone_override = timezone
        cls._visual_start_override = visual_start_date
        cls._visual_start_overridden = override_visual_start or visual_start_date is not None

    @classmethod
    def reset_test_overrides(cls) -> None:
        """Reset all test overrides so settings come from the environment again."""
        cls._storage_dir_override = None
        cls._timezone_override = None
        cls._visual_start_override = None
        cls._visual_start_overridden = False

    @classmethod
    def normalize_range(cls, token: str) -> str | None:
        """
        Normalize a user-supplied range token.

        Args:
            token: Range token in any case, e.g. '1m' or 'max'.

        Returns:
            Canonical token from RANGE_TOKENS, or None if unknown.

        Example:
            >>> Config.normalize_range('max')
            'ALL'
        """
        upper = token.strip().upper()
        upper = cls.RANGE_ALIASES.get(upper, upper)
        return upper if upper in cls.RANGE_TOKENS else None
