"""Tests for presenters module."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Add tests directory to path for conftest imports
sys.path.insert(0, str(Path(__file__).parent))

from conftest import raw
from practice_tracker.analytics import AnalyticsEngine
from practice_tracker.models import Delta
from practice_tracker.presenters import (
    ChartPresenter,
    DashboardOverview,
    DashboardPresenter,
    IntradayViewModel,
    format_clock,
    format_delta,
    format_duration_seconds,
    format_hours_minutes,
)
from practice_tracker.storage import StorageManager

PNG_MAGIC = b"\x89PNG\r\n\x1a\n"


def _has_matplotlib() -> bool:
    """Check if matplotlib is available for chart tests.

    Returns:
        True if matplotlib can be imported, False otherwise.
    """
    try:
        import matplotlib  # noqa: F401

        return True
    except ImportError:
        return False


@pytest.fixture
def presenter(storage: StorageManager, engine: AnalyticsEngine) -> DashboardPresenter:
    """DashboardPresenter over mock storage and the frozen-clock engine."""
    return DashboardPresenter(storage, engine)


@pytest.fixture
def three_days(storage: StorageManager) -> StorageManager:
    """2h on Mar 10, rest on Mar 11, 1h this morning (Mar 12).

    Averages: 2.0, 1.0, 1.0 hours.
    """
    storage.add_sessions([raw("2025-03-10T09:00:00+00:00", 120), raw("2025-03-12T08:00:00+00:00", 60)])
    return storage


class TestFormatting:
    """Test suite for display formatting helpers.

    Categories:
    1. Hours and Minutes (1 test)
    2. Deltas - zero, seconds, minutes, mixed, negative (1 test)
    3. Durations and Clock (2 tests)
    """

    @pytest.mark.parametrize(
        ("hours", "expected"),
        [(0.0, "0h 0m"), (2.5, "2h 30m"), (1.999, "2h 0m"), (10_000.0, "10000h 0m")],
    )
    def test_format_hours_minutes(self, hours: float, expected: str) -> None:
        assert format_hours_minutes(hours) == expected

    @pytest.mark.parametrize(
        ("seconds", "expected"),
        [(0, "0s"), (0.4, "0s"), (45, "+45s"), (180, "+3m"), (192, "+3m 12s"), (-125, "-2m 5s")],
    )
    def test_format_delta(self, seconds: float, expected: str) -> None:
        assert format_delta(seconds / 3600) == expected

    @pytest.mark.parametrize(
        ("seconds", "expected"),
        [(0, "0s"), (59.6, "1m"), (3723, "1h 2m 3s"), (7200, "2h"), (3605, "1h 5s")],
    )
    def test_format_duration_seconds(self, seconds: float, expected: str) -> None:
        assert format_duration_seconds(seconds) == expected

    @pytest.mark.parametrize(
        ("seconds", "expected"),
        [(0, "0:00"), (65.9, "1:05"), (3599, "59:59"), (3725, "1:02:05")],
    )
    def test_format_clock(self, seconds: float, expected: str) -> None:
        assert format_clock(seconds) == expected


class TestViewModels:
    """Tests for view model display properties."""

    def test_overview_defaults(self) -> None:
        overview = DashboardOverview()

        assert overview.average_display == "0s"
        assert overview.delta_class == "delta-flat"
        assert overview.to_dict()["forecast"] is None

    @pytest.mark.parametrize(
        ("value", "expected"),
        [(0.01, "delta-up"), (-0.01, "delta-down"), (0.0001, "delta-flat")],
    )
    def test_delta_class(self, value: float, expected: str) -> None:
        assert DashboardOverview(delta=Delta(value, 0.0)).delta_class == expected

    def test_intraday_delta_without_baseline_is_zero(self) -> None:
        view = IntradayViewModel(has_baseline=False, current_average=3.0, baseline_average=1.0)
        assert view.delta_from_baseline == 0.0
        assert view.delta_display == "0s"


class TestDashboardOverview:
    """Test suite for the dashboard overview presenter.

    Categories:
    1. Empty State (1 test)
    2. Metrics - average, totals, delta, increase table (1 test)
    3. Live Timer - credited to average, chart and today (1 test)
    4. Range Handling - alias and unknown token (2 tests)
    5. Milestones - crossed and custom (1 test)
    """

    def test_empty_storage(self, presenter: DashboardPresenter) -> None:
        overview = presenter.get_overview("max")

        assert overview.has_data is False
        assert overview.range_token == "ALL"
        assert overview.points == []

    def test_metrics(self, presenter: DashboardPresenter, three_days: StorageManager) -> None:
        """Verifies the overview numbers for a small three-day history.

        Business context:
        The overview is what users look at every day; each number must
        match the lifetime average definition.

        Arrangement:
        2h, rest day, 1h (today). Averages 2.0, 1.0, 1.0.

        Action:
        Overview for the 1W window without a timer.

        Assertion Strategy:
        Headline, totals, delta and the first increase-table row.
        """
        overview = presenter.get_overview("1W")

        assert overview.has_data
        assert overview.current_average == pytest.approx(1.0)
        assert overview.average_display == "1h"
        assert overview.total_display == "3h 0m"
        assert overview.total_days == 3
        assert overview.today_hours == pytest.approx(1.0)
        assert len(overview.points) == 3
        assert overview.delta.value == pytest.approx(-1.0)
        assert overview.delta.percentage == pytest.approx(-50.0)
        assert overview.delta_display == "-60m"
        assert overview.delta_class == "delta-down"
        assert overview.increase_steps[0] == (1, 3)
        assert overview.forecast is not None
        assert overview.forecast.goal.hours_remaining == pytest.approx(9997.0)

    def test_timer_is_credited_to_today(self, presenter: DashboardPresenter, three_days: StorageManager) -> None:
        """Verifies 30 running minutes move the headline, chart and today total."""
        overview = presenter.get_overview("1W", timer_seconds=1800)

        assert overview.current_average == pytest.approx(1.0 + 0.5 / 3)
        assert overview.total_hours == pytest.approx(3.5)
        assert overview.today_hours == pytest.approx(1.5)
        assert overview.points[-1].hours_played == pytest.approx(1.5)
        assert overview.points[-1].cumulative_average == pytest.approx(3.5 / 3)

    def test_unknown_range_raises(self, presenter: DashboardPresenter) -> None:
        with pytest.raises(ValueError):
            presenter.get_overview("5Y")

    def test_long_range_is_downsampled(self, presenter: DashboardPresenter, storage: StorageManager) -> None:
        storage.add_sessions([raw("2023-01-01T09:00:00+00:00", 30)])
        overview = presenter.get_overview("ALL")

        assert len(overview.points) <= 101
        assert overview.points[-1].date_str == "2025-03-12"

    def test_milestones_merge_custom_markers(
        self, presenter: DashboardPresenter, storage: StorageManager
    ) -> None:
        from practice_tracker.models import Milestone

        storage.add_sessions([raw("2025-03-11T09:00:00+00:00", 6600)])
        storage.add_milestone(Milestone(hours=50, description="Recital", milestone_type="custom"))
        storage.add_milestone(Milestone(hours=999, milestone_type="interval"))

        overview = presenter.get_overview()

        assert [m.hours for m in overview.milestones] == [50, 100]


class TestIntraday:
    """Test suite for the 1D presenter.

    Categories:
    1. Reconstruction - baseline and current value (1 test)
    2. Live Timer - extra point, unfloored headline (2 tests)
    3. Empty States - no data, first day (2 tests)
    """

    @pytest.fixture
    def two_days(self, storage: StorageManager) -> StorageManager:
        storage.add_sessions([raw("2025-03-11T09:00:00+00:00", 120), raw("2025-03-12T09:00:00+00:00", 60)])
        return storage

    def test_reconstruction(self, presenter: DashboardPresenter, two_days: StorageManager) -> None:
        """Verifies today's curve starts from yesterday's total.

        Arrangement:
        2h yesterday (day 1), 09:00-10:00 today (day 2), clock 10:30.

        Action:
        Build the intraday view without a timer.

        Assertion Strategy:
        Eleven hourly points, current value (2 + 1) / 2, delta -30m.
        """
        view = presenter.get_intraday()

        assert view.has_baseline
        assert len(view.points) == 11
        assert view.baseline_average == pytest.approx(2.0)
        assert view.current_average == pytest.approx(1.5)
        assert view.delta_display == "-30m"
        assert view.today_display == "1h"

    def test_live_point_appended(self, presenter: DashboardPresenter, two_days: StorageManager) -> None:
        view = presenter.get_intraday(timer_seconds=600)

        assert len(view.points) == 12
        assert view.points[-1].cumulative_average == pytest.approx((3 + 10 / 60) / 2)
        assert view.current_average == pytest.approx(view.points[-1].cumulative_average)
        assert view.today_hours == pytest.approx(1 + 600 / 3600)

    def test_headline_counts_every_timer_second(
        self, presenter: DashboardPresenter, two_days: StorageManager
    ) -> None:
        """Verifies only the chart point is floored to whole minutes.

        Business context:
        The headline ticks every second while the timer runs; the 1D chart
        only moves once a minute.

        Arrangement:
        2h yesterday, 1h this morning (day 2), timer at 10m 30s.

        Assertion Strategy:
        Live point uses 10 minutes; current_average uses 10.5 minutes.
        """
        view = presenter.get_intraday(timer_seconds=630)

        assert view.points[-1].cumulative_average == pytest.approx((3 + 10 / 60) / 2)
        assert view.current_average == pytest.approx((3 + 10.5 / 60) / 2)

    def test_no_data(self, presenter: DashboardPresenter) -> None:
        view = presenter.get_intraday(timer_seconds=1800)

        assert not view.has_baseline
        assert view.points == []
        assert view.today_hours == pytest.approx(0.5)

    def test_first_day_has_no_baseline(self, presenter: DashboardPresenter, storage: StorageManager) -> None:
        storage.add_sessions([raw("2025-03-12T09:00:00+00:00", 60)])
        view = presenter.get_intraday()

        assert not view.has_baseline
        assert view.current_average == pytest.approx(1.0)
        assert view.to_dict()["points"] == []


class TestChartPresenter:
    """Test suite for PNG chart rendering.

    Categories:
    1. Range Chart - data and empty placeholder (2 tests)
    2. Intraday Chart - data with live timer, placeholder (2 tests)
    3. Errors - unknown range (1 test)
    """

    @pytest.fixture
    def charts(self, presenter: DashboardPresenter) -> ChartPresenter:
        return ChartPresenter(presenter)

    @pytest.mark.skipif(not _has_matplotlib(), reason="matplotlib not installed")
    def test_range_chart_png(self, charts: ChartPresenter, three_days: StorageManager) -> None:
        """Verifies the range chart renders a PNG image.

        Assertion Strategy:
        Validates bytes type and PNG magic header.
        """
        png = charts.render_range_chart("1M")
        assert isinstance(png, bytes)
        assert png[:8] == PNG_MAGIC

    @pytest.mark.skipif(not _has_matplotlib(), reason="matplotlib not installed")
    def test_range_chart_placeholder(self, charts: ChartPresenter) -> None:
        assert charts.render_range_chart("1Y")[:8] == PNG_MAGIC

    @pytest.mark.skipif(not _has_matplotlib(), reason="matplotlib not installed")
    def test_intraday_chart_png(self, charts: ChartPresenter, three_days: StorageManager) -> None:
        assert charts.render_intraday_chart(timer_seconds=900)[:8] == PNG_MAGIC

    @pytest.mark.skipif(not _has_matplotlib(), reason="matplotlib not installed")
    def test_intraday_chart_placeholder(self, charts: ChartPresenter) -> None:
        assert charts.render_intraday_chart()[:8] == PNG_MAGIC

    @pytest.mark.skipif(not _has_matplotlib(), reason="matplotlib not installed")
    def test_unknown_range_raises(self, charts: ChartPresenter) -> None:
        with pytest.raises(ValueError):
            charts.render_range_chart("nope")
