"""
Data models for Practice Tracker.

PURPOSE: Immutable dataclasses representing practice data and derived analytics.
AI CONTEXT: These models define the data schema shared by analytics, storage and UI.

MODEL HIERARCHY:
- RawSession: Persisted record {started_at, duration_seconds, source}
- PracticeSession: Parsed session (start instant + duration in hours)
- DailyDataPoint: One calendar day of the cumulative-average series
- AnalyticsResult: Whole daily series plus totals
- IntradayDataPoint / IntradayResult: Reconstructed average within one day
- Delta: Change of the average across a chart window
- Milestone / MilestoneForecast / Forecast: Goal tracking

SERIALIZATION:
Persisted models have to_dict() / from_dict(). Derived models only have
to_dict() for JSON API responses. Timestamps use ISO 8601.

IMMUTABILITY:
Derived models are frozen and hold tuples. Every analytics run produces new
objects; callers may share them freely but must not try to mutate them.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from datetime import date, datetime, timedelta
from typing import Any

from .config import Config


def parse_timestamp(value: str) -> datetime:
    """
    Parse an ISO 8601 timestamp, accepting a trailing 'Z' for UTC.

    Args:
        value: Timestamp such as '2025-01-05T09:00:00Z' or
            '2025-01-05T09:00:00+01:00'. Naive timestamps are returned naive
            and are interpreted as local wall-clock time by the analytics.

    Returns:
        Parsed datetime.

    Raises:
        ValueError: If the string is not a valid ISO 8601 timestamp.
        TypeError: If value is not a string.

    Example:
        >>> parse_timestamp('2025-01-05T09:00:00Z').isoformat()
        '2025-01-05T09:00:00+00:00'
    """
    return datetime.fromisoformat(value.strip().replace("Z", "+00:00"))


@dataclass(frozen=True)
class PracticeSession:
    """A single practice session: a start instant and a duration in hours."""

    start_time: datetime
    duration_hours: float

    @property
    def end_time(self) -> datetime:
        """Start instant plus duration."""
        return self.start_time + timedelta(hours=self.duration_hours)


@dataclass(frozen=True)
class RawSession:
    """
    Practice session as stored and exchanged with importers.

    FIELDS:
    - started_at: ISO 8601 start instant
    - duration_seconds: Non-negative whole seconds
    - source: Where the record came from (csv_import, timer, manual, ...)

    The analytics core trusts these records; validation happens here,
    when records enter the system.
    """

    started_at: str
    duration_seconds: int
    source: str = "manual"

    @property
    def start_time(self) -> datetime:
        """Parsed start instant."""
        return parse_timestamp(self.started_at)

    @property
    def duration_hours(self) -> float:
        """Duration converted to fractional hours."""
        return self.duration_seconds / 3600

    def to_practice_session(self) -> PracticeSession:
        """
        Convert to the analytics input type.

        Returns:
            PracticeSession with the parsed start and duration in hours.

        Raises:
            ValueError: If started_at is not a valid timestamp.

        Example:
            >>> RawSession('2025-01-05T09:00:00Z', 5400).to_practice_session().duration_hours
            1.5
        """
        return PracticeSession(start_time=self.start_time, duration_hours=self.duration_hours)

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON storage."""
        return {
            "started_at": self.started_at,
            "duration_seconds": self.duration_seconds,
            "source": self.source,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RawSession:
        """
        Deserialize and validate a stored or submitted session record.

        Args:
            data: Dict with 'started_at' (ISO string) and 'duration_seconds'
                (non-negative number). 'source' is optional.

        Returns:
            RawSession with duration rounded to whole seconds.

        Raises:
            ValueError: If started_at does not parse, or duration is missing,
                non-numeric, non-finite or negative, or source is not one of
                Config.SESSION_SOURCES.

        Example:
            >>> RawSession.from_dict({'started_at': '2025-01-05T09:00:00Z',
            ...                       'duration_seconds': 60}).duration_seconds
            60
        """
        started_at = data.get("started_at")
        if not isinstance(started_at, str):
            raise ValueError(f"started_at must be an ISO timestamp string, got {started_at!r}")
        parse_timestamp(started_at)

        raw_duration = data.get("duration_seconds")
        if isinstance(raw_duration, bool) or not isinstance(raw_duration, int | float):
            raise ValueError(f"duration_seconds must be a number, got {raw_duration!r}")
        if not math.isfinite(raw_duration):
            raise ValueError(f"duration_seconds must be finite, got {raw_duration}")
        if raw_duration < 0:
            raise ValueError(f"duration_seconds must be non-negative, got {raw_duration}")

        source = str(data.get("source") or "manual")
        if source not in Config.SESSION_SOURCES:
            raise ValueError(f"Unknown session source '{source}'")

        return cls(
            started_at=started_at,
            duration_seconds=int(round(raw_duration)),
            source=source,
        )


@dataclass(frozen=True)
class DailyDataPoint:
    """
    One calendar day of the lifetime average series.

    INVARIANTS:
    - day_number is 1-based and gap-free across a series
    - cumulative_hours never decreases along a series
    - cumulative_average == cumulative_hours / day_number
    """

    day: date
    day_number: int
    hours_played: float
    cumulative_hours: float
    cumulative_average: float

    @property
    def date_str(self) -> str:
        """Day as 'YYYY-MM-DD'."""
        return self.day.isoformat()

    def with_extra_hours(self, hours: float) -> DailyDataPoint:
        """
        Return a copy with additional hours credited to this day.

        Used for the live-timer view, where unsaved seconds are shown as if
        they had already been logged today.

        Args:
            hours: Extra hours to add (may be 0).

        Returns:
            New DailyDataPoint with hours_played, cumulative_hours and the
            recomputed cumulative_average.
        """
        cumulative = self.cumulative_hours + hours
        return replace(
            self,
            hours_played=self.hours_played + hours,
            cumulative_hours=cumulative,
            cumulative_average=cumulative / self.day_number,
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON responses."""
        return {
            "date": self.date_str,
            "day_number": self.day_number,
            "hours_played": self.hours_played,
            "cumulative_hours": self.cumulative_hours,
            "cumulative_average": self.cumulative_average,
        }


@dataclass(frozen=True)
class AnalyticsResult:
    """
    Full analytics run over every logged session.

    INVARIANT: total_days == (end_date - start_date).days + 1 and equals
    len(daily_data); totals equal the last point's cumulative values.
    """

    daily_data: tuple[DailyDataPoint, ...]
    total_hours: float
    total_days: int
    current_average: float
    start_date: date
    end_date: date

    @property
    def last_point(self) -> DailyDataPoint:
        """Most recent day of the series."""
        return self.daily_data[-1]

    def to_dict(self, include_daily: bool = True) -> dict[str, Any]:
        """
        Serialize for JSON responses.

        Args:
            include_daily: Include the full daily series. Disable for
                summary endpoints to keep payloads small.

        Returns:
            Dict with totals, ISO dates and optionally 'daily_data'.
        """
        result: dict[str, Any] = {
            "total_hours": self.total_hours,
            "total_days": self.total_days,
            "current_average": self.current_average,
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
        }
        if include_daily:
            result["daily_data"] = [p.to_dict() for p in self.daily_data]
        return result


@dataclass(frozen=True)
class IntradayDataPoint:
    """Reconstructed lifetime average at one instant of a day."""

    time: datetime
    cumulative_average: float
    hours_played_this_interval: float = 0.0
    cumulative_today_hours: float = 0.0
    is_current_hour: bool = False

    @property
    def time_str(self) -> str:
        """Wall-clock time as 'HH:MM'."""
        return self.time.strftime("%H:%M")

    @property
    def hour_of_day(self) -> int:
        """Hour component of time."""
        return self.time.hour

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON responses."""
        return {
            "time": self.time.isoformat(),
            "time_str": self.time_str,
            "hour_of_day": self.hour_of_day,
            "cumulative_average": self.cumulative_average,
            "hours_played_this_interval": self.hours_played_this_interval,
            "cumulative_today_hours": self.cumulative_today_hours,
            "is_current_hour": self.is_current_hour,
        }


@dataclass(frozen=True)
class IntradayResult:
    """
    Intraday reconstruction for one day.

    An empty points tuple with baseline_average 0.0 means there was no
    previous day to grow from (first day of tracking).
    """

    points: tuple[IntradayDataPoint, ...] = ()
    baseline_average: float = 0.0
    baseline_cumulative_hours: float = 0.0
    day_number: int = 0

    @property
    def has_baseline(self) -> bool:
        """True when a previous day was available."""
        return self.day_number > 0

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON responses."""
        return {
            "points": [p.to_dict() for p in self.points],
            "baseline_average": self.baseline_average,
            "baseline_cumulative_hours": self.baseline_cumulative_hours,
            "day_number": self.day_number,
        }


@dataclass(frozen=True)
class Delta:
    """Change of the cumulative average across a window."""

    value: float = 0.0
    percentage: float = 0.0

    def to_dict(self) -> dict[str, float]:
        """Serialize for JSON responses."""
        return {"value": self.value, "percentage": self.percentage}


@dataclass
class Milestone:
    """
    Recorded milestone on the way to the hours goal.

    TYPES:
    - "interval": Round-number milestone (every 100h / 1000h)
    - "custom": User-defined marker (e.g. an anniversary)
    """

    hours: int
    achieved_at: str | None = None
    average_at_milestone: float | None = None
    description: str | None = None
    milestone_type: str = "interval"

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON storage."""
        return {
            "hours": self.hours,
            "achieved_at": self.achieved_at,
            "average_at_milestone": self.average_at_milestone,
            "description": self.description,
            "milestone_type": self.milestone_type,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Milestone:
        """
        Deserialize milestone from dictionary.

        Args:
            data: Dict with at least 'hours'. Missing optional fields
                default to None / 'interval'.

        Returns:
            Milestone instance.

        Raises:
            KeyError: If 'hours' is missing.
            ValueError: If 'hours' is not numeric or milestone_type is not one
                of Config.MILESTONE_TYPES.
        """
        average = data.get("average_at_milestone")
        milestone_type = data.get("milestone_type") or "interval"
        if milestone_type not in Config.MILESTONE_TYPES:
            raise ValueError(f"Unknown milestone type '{milestone_type}'")
        return cls(
            hours=int(data["hours"]),
            achieved_at=data.get("achieved_at"),
            average_at_milestone=float(average) if average is not None else None,
            description=data.get("description"),
            milestone_type=milestone_type,
        )


@dataclass(frozen=True)
class MilestoneForecast:
    """Projection for reaching one hours target at the current average."""

    milestone: int
    hours_remaining: float
    days: int | None
    projected_date: date | None

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON responses."""
        return {
            "milestone": self.milestone,
            "hours_remaining": self.hours_remaining,
            "days": self.days,
            "projected_date": self.projected_date.isoformat() if self.projected_date else None,
        }


@dataclass(frozen=True)
class Forecast:
    """Projections for the overall goal and the next round-number milestones."""

    goal: MilestoneForecast
    next_milestones: tuple[MilestoneForecast, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON responses."""
        return {
            "goal": self.goal.to_dict(),
            "next_milestones": [m.to_dict() for m in self.next_milestones],
        }
