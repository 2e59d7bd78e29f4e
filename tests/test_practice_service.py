"""Tests for practice_service module."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Add tests directory to path for conftest imports
sys.path.insert(0, str(Path(__file__).parent))

from conftest import FrozenClock, raw
from practice_tracker.practice_service import PracticeService, ServiceResult
from practice_tracker.storage import StorageManager

CSV_EXPORT = (
    "Start time;Duration in hours\n"
    "10. Mär 2025 at 18:00:00;1,5\n"
    "11. Mär 2025 at 07:00:00;0,5\n"
    "kaputt;1\n"
)


class TestServiceResult:
    """Tests for ServiceResult serialization."""

    def test_to_dict_omits_empty_fields(self) -> None:
        assert ServiceResult(success=True, message="Done").to_dict() == {"success": True, "message": "Done"}

    def test_to_dict_includes_data_and_error(self) -> None:
        result = ServiceResult(success=False, message="Nope", data={"a": 1}, error="bad")
        assert result.to_dict() == {"success": False, "message": "Nope", "data": {"a": 1}, "error": "bad"}


class TestLogSession:
    """Test suite for manual session logging.

    Categories:
    1. Success - stored and echoed back (1 test)
    2. Validation - bad timestamp, negative duration (1 test)
    3. Duplicates - same start instant rejected (1 test)
    """

    def test_logs_session(self, service: PracticeService, storage: StorageManager) -> None:
        """Verifies a valid session is stored and returned.

        Business context:
        Manual logging is the fallback when the timer was forgotten.

        Arrangement:
        Empty storage.

        Action:
        Log 45 minutes starting at 09:00 UTC.

        Assertion Strategy:
        Success, echoed session dict, one record in storage.
        """
        result = service.log_session("2025-03-12T09:00:00+00:00", 2700)

        assert result.success
        assert result.data == {
            "session": {
                "started_at": "2025-03-12T09:00:00+00:00",
                "duration_seconds": 2700,
                "source": "manual",
            }
        }
        assert len(storage.load_sessions()) == 1

    @pytest.mark.parametrize(
        ("started_at", "duration"),
        [("not a timestamp", 60), ("2025-03-12T09:00:00", -5), ("2025-03-12T09:00:00", float("inf"))],
    )
    def test_rejects_invalid_input(self, service: PracticeService, started_at: str, duration: float) -> None:
        result = service.log_session(started_at, duration)

        assert not result.success
        assert result.message == "Invalid session"
        assert result.error

    def test_rejects_duplicate_start(self, service: PracticeService) -> None:
        service.log_session("2025-03-12T09:00:00", 60)
        result = service.log_session("2025-03-12T09:00:00", 120)

        assert not result.success
        assert result.message == "Session not saved"
        assert "already exists" in (result.error or "")


class TestImportCsv:
    """Test suite for CSV import through the service.

    Categories:
    1. Success - counts and row errors (1 test)
    2. Idempotency - re-import adds nothing (1 test)
    3. Failure - unusable file (1 test)
    """

    def test_import_reports_counts(self, service: PracticeService, storage: StorageManager) -> None:
        """Verifies imported sessions and row errors are both reported.

        Arrangement:
        Export with two good rows and one unreadable date.

        Action:
        Import once.

        Assertion Strategy:
        Two imported, no duplicates, one error message, two stored.
        """
        result = service.import_csv(CSV_EXPORT)

        assert result.success
        assert result.data is not None
        assert result.data["imported"] == 2
        assert result.data["duplicates"] == 0
        assert result.data["errors"] == ['Row 4: Could not parse date "kaputt"']
        assert {s.source for s in storage.load_sessions()} == {"csv_import"}

    def test_reimport_counts_duplicates(self, service: PracticeService) -> None:
        service.import_csv(CSV_EXPORT)
        result = service.import_csv(CSV_EXPORT)

        assert result.data is not None
        assert result.data["imported"] == 0
        assert result.data["duplicates"] == 2

    def test_unusable_file_fails(self, service: PracticeService) -> None:
        result = service.import_csv("Datum;Dauer\n1;2\n")

        assert not result.success
        assert result.message == "CSV import failed"
        assert "Found headers" in (result.error or "")

    def test_clear_sessions(self, service: PracticeService, storage: StorageManager) -> None:
        service.import_csv(CSV_EXPORT)
        assert service.clear_sessions().success
        assert storage.load_sessions() == []


class TestTimer:
    """Test suite for the live practice timer.

    Categories:
    1. Lifecycle - start, elapsed, stop logs a session (1 test)
    2. Guards - double start, stop/cancel without timer (2 tests)
    3. Edge Cases - sub-second discard, failed log, cancel, unreadable state (4 tests)
    """

    def test_start_then_stop_logs_session(
        self, service: PracticeService, storage: StorageManager, clock: FrozenClock
    ) -> None:
        """Verifies the timer turns elapsed wall-clock time into a session.

        Business context:
        The timer is the main way sessions are recorded day to day.

        Arrangement:
        Start the timer at 10:30 and advance the clock by 30m 15.7s.

        Action:
        Stop the timer.

        Assertion Strategy:
        Whole seconds (1815) logged with source "timer" at the start
        instant; the timer state is cleared.
        """
        started = service.start_timer()
        assert started.success
        assert started.data == {"started_at": "2025-03-12T10:30:00+00:00"}

        clock.advance(minutes=30, seconds=15.7)
        assert service.timer_seconds() == pytest.approx(1815.7)

        result = service.stop_timer()

        assert result.success
        assert result.data == {"started_at": "2025-03-12T10:30:00+00:00", "duration_seconds": 1815}
        stored = storage.load_sessions()
        assert [(s.started_at, s.duration_seconds, s.source) for s in stored] == [
            ("2025-03-12T10:30:00+00:00", 1815, "timer")
        ]
        assert storage.load_timer() == {}
        assert service.timer_seconds() == 0.0

    def test_double_start_fails(self, service: PracticeService) -> None:
        service.start_timer()
        result = service.start_timer()

        assert not result.success
        assert result.message == "Timer already running"

    def test_stop_and_cancel_without_timer_fail(self, service: PracticeService) -> None:
        assert service.stop_timer().message == "No timer running"
        assert service.cancel_timer().message == "No timer running"

    def test_sub_second_timer_is_discarded(
        self, service: PracticeService, storage: StorageManager, clock: FrozenClock
    ) -> None:
        service.start_timer()
        clock.advance(seconds=0.5)

        result = service.stop_timer()

        assert not result.success
        assert result.message == "Timer discarded"
        assert storage.load_sessions() == []
        assert storage.load_timer() == {}

    def test_failed_log_keeps_timer_running(
        self, service: PracticeService, storage: StorageManager, clock: FrozenClock
    ) -> None:
        """Verifies elapsed time survives a stop that cannot be logged.

        Business context:
        Losing half an hour of practice because of a clashing record is
        worse than asking the user to stop again or cancel.

        Arrangement:
        A session already starts at 10:30; the timer starts at 10:30 too.

        Action:
        Advance 20 minutes and stop.

        Assertion Strategy:
        Stop fails as a duplicate, the timer still reports 1200 seconds and
        can then be cancelled.
        """
        storage.add_sessions([raw("2025-03-12T10:30:00+00:00", 15)])
        service.start_timer()
        clock.advance(minutes=20)

        result = service.stop_timer()

        assert not result.success
        assert result.message == "Session not saved"
        assert service.timer_seconds() == pytest.approx(1200.0)
        assert len(storage.load_sessions()) == 1
        assert service.cancel_timer().success

    def test_cancel_discards_time(
        self, service: PracticeService, storage: StorageManager, clock: FrozenClock
    ) -> None:
        service.start_timer()
        clock.advance(minutes=10)

        assert service.cancel_timer().success
        assert storage.load_sessions() == []
        assert service.timer_seconds() == 0.0

    def test_unreadable_timer_state_counts_as_zero(self, service: PracticeService, storage: StorageManager) -> None:
        storage.save_timer("whenever")
        assert service.timer_seconds() == 0.0


class TestSummary:
    """Test suite for headline numbers.

    Categories:
    1. Empty State (2 tests)
    2. Totals - averages, today, timer credit, forecast (1 test)
    3. Failure - storage exception wrapped (1 test)
    """

    def test_no_sessions(self, service: PracticeService) -> None:
        result = service.get_summary()

        assert result.success
        assert result.data == {"has_data": False, "timer_seconds": 0.0}
        assert service.get_analytics() is None

    def test_summary_with_timer(self, service: PracticeService, storage: StorageManager) -> None:
        """Verifies the running timer is credited to average, today and forecast.

        Arrangement:
        One hour yesterday and one hour this morning (2 days, 2h).

        Action:
        Summarize with 30 minutes on the timer.

        Assertion Strategy:
        Raw average 1.0h, adjusted 1.25h, today 1.5h, goal remaining
        9997.5h.
        """
        storage.add_sessions([raw("2025-03-11T09:00:00+00:00", 60), raw("2025-03-12T08:00:00+00:00", 60)])

        result = service.get_summary(timer_seconds=1800)

        assert result.success
        data = result.data or {}
        assert data["has_data"] is True
        assert data["total_days"] == 2
        assert data["current_average"] == pytest.approx(1.0)
        assert data["adjusted_average"] == pytest.approx(1.25)
        assert data["today_hours"] == pytest.approx(1.5)
        assert data["start_date"] == "2025-03-11"
        assert data["forecast"]["goal"]["hours_remaining"] == pytest.approx(9997.5)
        assert 0 <= data["average_progress"] < 100

    def test_summary_uses_stored_timer_by_default(
        self, service: PracticeService, storage: StorageManager, clock: FrozenClock
    ) -> None:
        storage.add_sessions([raw("2025-03-12T08:00:00+00:00", 60)])
        service.start_timer()
        clock.advance(minutes=15)

        data = service.get_summary().data or {}

        assert data["timer_seconds"] == pytest.approx(900.0)
        assert data["today_hours"] == pytest.approx(1.25)

    def test_summary_failure_is_reported(self, engine: object) -> None:
        from unittest.mock import MagicMock

        storage = MagicMock()
        storage.load_timer.return_value = {}
        storage.load_sessions.side_effect = RuntimeError("boom")
        service = PracticeService(storage=storage, engine=engine)  # type: ignore[arg-type]

        result = service.get_summary()

        assert not result.success
        assert result.error == "boom"


class TestMilestones:
    """Tests for milestone timeline assembly."""

    def test_interval_and_custom_milestones_sorted(self, service: PracticeService, storage: StorageManager) -> None:
        """Verifies crossed 100h marks and custom markers share one sorted list."""
        storage.add_sessions([raw("2025-03-10T09:00:00+00:00", 3600), raw("2025-03-11T09:00:00+00:00", 3600)])
        assert service.add_milestone(50, "First recital").success

        milestones = service.get_milestones()

        assert [(m.hours, m.milestone_type) for m in milestones] == [(50, "custom"), (100, "interval")]
        assert milestones[1].achieved_at == "2025-03-11"

    def test_negative_milestone_rejected(self, service: PracticeService) -> None:
        result = service.add_milestone(-1, "Oops")
        assert not result.success
        assert result.message == "Invalid milestone"
