"""
Practice Service - shared business logic for practice tracking.

PURPOSE: Session logging, CSV import, live timer and analytics summaries.
AI CONTEXT: This is the shared service layer used by both the web routes
and cli.py.

ARCHITECTURE:
    CLI commands ──┐
                   ├──► PracticeService ◄── StorageManager
    Web routes ────┘           │
                               └──► AnalyticsEngine / ForecastCalculator

USAGE:
    from .practice_service import PracticeService
    service = PracticeService()
    result = service.log_session("2025-01-05T09:00:00+01:00", 3600)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from .analytics import AnalyticsEngine, NoDataError
from .csv_import import CsvImportError, parse_csv
from .milestones import ForecastCalculator, milestone_timeline
from .models import AnalyticsResult, Milestone, RawSession, parse_timestamp
from .storage import StorageManager

__all__ = [
    "PracticeService",
    "ServiceResult",
]

logger = logging.getLogger(__name__)


@dataclass
class ServiceResult:
    """
    Result from a service operation.

    Provides a consistent return type for all service methods with
    success/failure status and optional data or error message.

    Attributes:
        success: Whether the operation completed successfully.
        message: Human-readable result message.
        data: Optional dict with operation-specific data.
        error: Optional error message if success is False.
    """

    success: bool
    message: str
    data: dict[str, Any] | None = None
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """
        Convert this ServiceResult to a JSON-serializable dictionary.

        Fields with None/empty values (data, error) are omitted to keep
        payloads compact.

        Returns:
            Dict with keys 'success' and 'message', plus optional 'data'
            and 'error' when present.

        Example:
            >>> ServiceResult(success=True, message="Done", data={"added": 1}).to_dict()
            {'success': True, 'message': 'Done', 'data': {'added': 1}}
        """
        result: dict[str, Any] = {
            "success": self.success,
            "message": self.message,
        }
        if self.data:
            result["data"] = self.data
        if self.error:
            result["error"] = self.error
        return result


class PracticeService:
    """
    Core practice tracking service.

    Provides all practice operations as pure business logic, separated
    from HTTP handling and CLI argument parsing.

    OPERATIONS:
    - log_session: Record one finished practice session
    - import_csv: Bulk import from a time-tracker export
    - start_timer / stop_timer / cancel_timer: Live practice timer
    - get_analytics: Lifetime daily-average series
    - get_summary: Headline numbers including the running timer
    - get_milestones / add_milestone: Milestone timeline

    Example:
        >>> service = PracticeService()
        >>> service.start_timer().success
        True
        >>> service.stop_timer().data["duration_seconds"]
        1800
    """

    def __init__(
        self,
        storage: StorageManager | None = None,
        engine: AnalyticsEngine | None = None,
        forecaster: ForecastCalculator | None = None,
    ) -> None:
        """
        Initialize the practice service with storage and analytics dependencies.

        Both dependencies are optional to support easy testing (inject mocks
        or a frozen-clock engine) and simple bootstrapping (defaults read
        Config).

        Args:
            storage: StorageManager handling JSON persistence. Defaults to
                a new StorageManager() using Config paths.
            engine: AnalyticsEngine used for all calculations and as the
                source of "now". Defaults to AnalyticsEngine().
            forecaster: ForecastCalculator for goal projections.
        """
        self.storage = storage or StorageManager()
        self.engine = engine or AnalyticsEngine()
        self.forecaster = forecaster or ForecastCalculator()

    # =========================================================================
    # SESSION LOGGING
    # =========================================================================

    def log_session(
        self,
        started_at: str,
        duration_seconds: float,
        source: str = "manual",
    ) -> ServiceResult:
        """
        Record one finished practice session.

        Args:
            started_at: ISO 8601 start instant.
            duration_seconds: Non-negative duration in seconds.
            source: Origin tag (manual, timer, ...).

        Returns:
            ServiceResult with the stored session in data on success.
            Fails on invalid input or when a session with the same start
            instant already exists.

        Example:
            >>> service.log_session("2025-01-05T09:00:00Z", 3600).data["session"]
            {'started_at': '2025-01-05T09:00:00Z', 'duration_seconds': 3600, 'source': 'manual'}
        """
        try:
            session = RawSession.from_dict(
                {"started_at": started_at, "duration_seconds": duration_seconds, "source": source}
            )
        except ValueError as e:
            return ServiceResult(success=False, message="Invalid session", error=str(e))

        try:
            added = self.storage.add_sessions([session])
            if added == 0:
                return ServiceResult(
                    success=False,
                    message="Session not saved",
                    error=f"A session starting at {session.started_at} already exists",
                )

            logger.info(f"Logged {session.duration_seconds}s session at {session.started_at}")
            return ServiceResult(
                success=True,
                message="Session logged",
                data={"session": session.to_dict()},
            )

        except Exception as e:
            logger.error(f"Error logging session: {e}")
            return ServiceResult(success=False, message="Failed to log session", error=str(e))

    def import_csv(self, content: str) -> ServiceResult:
        """
        Import sessions from CSV export content.

        Business context: Users bring years of history from a previous
        tracker. Already-imported rows are skipped, so re-running an import
        is harmless.

        Args:
            content: CSV file content.

        Returns:
            ServiceResult with 'imported', 'duplicates' and 'errors' (row
            messages) in data. Fails when the file structure is unusable.
        """
        try:
            parsed = parse_csv(content)
        except CsvImportError as e:
            logger.warning(f"CSV import rejected: {e}")
            return ServiceResult(success=False, message="CSV import failed", error=str(e))

        try:
            imported = self.storage.add_sessions(parsed.sessions)
            duplicates = len(parsed.sessions) - imported
            logger.info(f"CSV import: {imported} new, {duplicates} duplicates, {len(parsed.errors)} errors")
            return ServiceResult(
                success=True,
                message=f"Imported {imported} session(s)",
                data={
                    "imported": imported,
                    "duplicates": duplicates,
                    "errors": parsed.errors,
                },
            )

        except Exception as e:
            logger.error(f"Error importing CSV: {e}")
            return ServiceResult(success=False, message="CSV import failed", error=str(e))

    def clear_sessions(self) -> ServiceResult:
        """Delete all stored sessions."""
        if self.storage.clear_sessions():
            return ServiceResult(success=True, message="All sessions deleted")
        return ServiceResult(
            success=False,
            message="Failed to delete sessions",
            error="Could not write session storage",
        )

    # =========================================================================
    # LIVE TIMER
    # =========================================================================

    def _timer_start(self) -> str | None:
        started_at = self.storage.load_timer().get("started_at")
        return started_at if isinstance(started_at, str) and started_at else None

    def timer_seconds(self) -> float:
        """
        Seconds elapsed on the running timer.

        Returns:
            Elapsed seconds, or 0.0 when no timer runs or the stored start
            instant is unreadable.
        """
        started_at = self._timer_start()
        if started_at is None:
            return 0.0
        try:
            started = self.engine.to_local(parse_timestamp(started_at))
        except ValueError:
            logger.warning(f"Ignoring unreadable timer start '{started_at}'")
            return 0.0
        return max(0.0, (self.engine.now() - started).total_seconds())

    def start_timer(self) -> ServiceResult:
        """
        Start the live practice timer.

        Returns:
            ServiceResult with 'started_at' in data. Fails if a timer is
            already running.
        """
        running = self._timer_start()
        if running is not None:
            return ServiceResult(
                success=False,
                message="Timer already running",
                error=f"Timer started at {running} is still running",
            )

        started_at = self.engine.now().isoformat()
        if not self.storage.save_timer(started_at):
            return ServiceResult(success=False, message="Failed to start timer", error="Could not write timer state")

        logger.info(f"Timer started at {started_at}")
        return ServiceResult(success=True, message="Timer started", data={"started_at": started_at})

    def stop_timer(self) -> ServiceResult:
        """
        Stop the live timer and log the elapsed time as a session.

        Only whole seconds are saved. A timer stopped before one full
        second elapsed is discarded. When the session cannot be logged
        (e.g. a session with the same start already exists) the timer keeps
        running.

        Returns:
            ServiceResult with 'started_at' and 'duration_seconds' in data.
            Fails if no timer runs or the session was not logged.
        """
        started_at = self._timer_start()
        if started_at is None:
            return ServiceResult(success=False, message="No timer running", error="Start a timer first")

        elapsed = int(self.timer_seconds())
        if elapsed < 1:
            self.storage.clear_timer()
            return ServiceResult(
                success=False,
                message="Timer discarded",
                error="Timer ran for less than a second",
            )

        logged = self.log_session(started_at, elapsed, source="timer")
        if not logged.success:
            logger.warning(f"Timer kept running, session not logged: {logged.error}")
            return logged

        self.storage.clear_timer()
        logger.info(f"Timer stopped after {elapsed}s")
        return ServiceResult(
            success=True,
            message="Timer stopped and session logged",
            data={"started_at": started_at, "duration_seconds": elapsed},
        )

    def cancel_timer(self) -> ServiceResult:
        """Discard the running timer without logging a session."""
        if self._timer_start() is None:
            return ServiceResult(success=False, message="No timer running", error="Start a timer first")
        self.storage.clear_timer()
        logger.info("Timer cancelled")
        return ServiceResult(success=True, message="Timer cancelled")

    # =========================================================================
    # ANALYTICS
    # =========================================================================

    def load_sessions(self) -> list[RawSession]:
        """All stored sessions."""
        return self.storage.load_sessions()

    def get_analytics(self, sessions: list[RawSession] | None = None) -> AnalyticsResult | None:
        """
        Lifetime analytics over all stored sessions.

        Args:
            sessions: Pre-loaded sessions, to avoid reading storage twice.

        Returns:
            AnalyticsResult, or None when nothing has been logged yet.
        """
        raw = sessions if sessions is not None else self.load_sessions()
        try:
            return self.engine.aggregate([s.to_practice_session() for s in raw])
        except NoDataError:
            return None

    def get_summary(self, timer_seconds: float | None = None) -> ServiceResult:
        """
        Headline numbers for the dashboard and the CLI report.

        The running timer is credited as if its time had already been
        logged today: the adjusted average spreads it over all tracked
        days and the progress value tracks the exact average through its
        displayed whole second.

        Args:
            timer_seconds: Unsaved timer seconds. Default: the stored
                running timer.

        Returns:
            ServiceResult whose data has 'has_data' and, when True,
            'total_hours', 'total_days', 'current_average',
            'adjusted_average', 'average_progress', 'today_hours',
            'start_date', 'timer_seconds' and 'forecast'.
        """
        try:
            seconds = self.timer_seconds() if timer_seconds is None else timer_seconds
            sessions = self.load_sessions()
            result = self.get_analytics(sessions)
            if result is None:
                return ServiceResult(
                    success=True,
                    message="No practice sessions logged yet",
                    data={"has_data": False, "timer_seconds": seconds},
                )

            forecast = self.forecaster.forecast(
                result.total_hours + seconds / 3600,
                self.engine.adjusted_average(result, seconds),
                self.engine.today(),
            )
            return ServiceResult(
                success=True,
                message="Summary generated",
                data={
                    "has_data": True,
                    "total_hours": result.total_hours,
                    "total_days": result.total_days,
                    "current_average": result.current_average,
                    "adjusted_average": self.engine.adjusted_average(result, seconds),
                    "average_progress": self.engine.average_progress(result, seconds),
                    "today_hours": self.engine.today_play_hours(sessions, seconds),
                    "start_date": result.start_date.isoformat(),
                    "timer_seconds": seconds,
                    "forecast": forecast.to_dict(),
                },
            )

        except Exception as e:
            logger.error(f"Error generating summary: {e}")
            return ServiceResult(success=False, message="Failed to generate summary", error=str(e))

    # =========================================================================
    # MILESTONES
    # =========================================================================

    def get_milestones(self, step: int = 100) -> list[Milestone]:
        """
        Crossed interval milestones plus stored custom milestones.

        Args:
            step: Interval milestone spacing in hours.

        Returns:
            Milestones sorted by hours (custom ones without hours first).
        """
        return milestone_timeline(self.get_analytics(), self.storage.load_milestones(), step)

    def add_milestone(self, hours: int, description: str) -> ServiceResult:
        """
        Record a custom milestone marker.

        Args:
            hours: Cumulative hours the marker sits at.
            description: Label shown on the timeline.

        Returns:
            ServiceResult with the stored milestone in data.
        """
        if hours < 0:
            return ServiceResult(success=False, message="Invalid milestone", error="hours must be non-negative")

        milestone = Milestone(
            hours=hours,
            achieved_at=self.engine.now().isoformat(),
            description=description,
            milestone_type="custom",
        )
        if not self.storage.add_milestone(milestone):
            return ServiceResult(success=False, message="Failed to save milestone", error="Could not write milestones")
        return ServiceResult(success=True, message="Milestone added", data={"milestone": milestone.to_dict()})
