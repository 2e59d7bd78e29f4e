"""
Presenters for Practice Tracker dashboards.

PURPOSE: Testable business logic layer between analytics and UI.
AI CONTEXT: Pure data transformation - no HTTP, no HTML.

DESIGN PRINCIPLES:
1. Presenters receive data, return view models (dataclasses)
2. No dependencies on specific UI framework
3. Fully unit-testable with MockFileSystem storage and a frozen clock
4. Each presenter focuses on one dashboard view

FORMATTING RULES:
- Averages and totals: "Xh Ym" (minutes rounded half up)
- Deltas: "0s", "+45s", "+3m", "+3m 12s" (sign '-' when negative)
- Timer: "M:SS", or "H:MM:SS" from one hour on

USAGE:
    presenter = DashboardPresenter(storage, engine)
    overview = presenter.get_overview("1M", timer_seconds=0)
"""

from __future__ import annotations

import io
import math
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from .analytics import NoDataError, parse_range, seconds_to_increase_by
from .milestones import ForecastCalculator, milestone_timeline
from .models import DailyDataPoint, Delta, Forecast, IntradayDataPoint, Milestone

if TYPE_CHECKING:
    from .analytics import AnalyticsEngine
    from .models import AnalyticsResult, RawSession
    from .storage import StorageManager

__all__ = [
    "ChartPresenter",
    "DashboardOverview",
    "DashboardPresenter",
    "IntradayViewModel",
    "format_clock",
    "format_delta",
    "format_duration_seconds",
    "format_hours_minutes",
]

# Chart color palette for consistent styling
CHART_COLORS: dict[str, str] = {
    "line": "#3b82f6",
    "baseline": "#94a3b8",
    "live": "#f59e0b",
    "positive": "#22c55e",
    "negative": "#ef4444",
}

INCREASE_STEPS: tuple[int, ...] = (1, 3, 5, 10, 20)
"""Average increases (seconds) shown in the "play today to gain" table."""


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def format_hours_minutes(hours: float) -> str:
    """
    Format hours as "Xh Ym".

    Args:
        hours: Non-negative hours.

    Returns:
        String with minutes rounded half up, e.g. "2h 30m".

    Example:
        >>> format_hours_minutes(1.999)
        '2h 0m'
    """
    total_minutes = _round_half_up(hours * 60)
    return f"{total_minutes // 60}h {total_minutes % 60}m"


def format_delta(hours: float) -> str:
    """
    Format a change of the average with minute/second precision.

    Args:
        hours: Signed change in hours.

    Returns:
        "0s" when it rounds to zero seconds, otherwise "+Xs", "+Xm" or
        "+Xm Ys" with '-' for negative changes.

    Example:
        >>> format_delta(-125 / 3600)
        '-2m 5s'
    """
    total_seconds = _round_half_up(abs(hours) * 3600)
    minutes, seconds = divmod(total_seconds, 60)
    if total_seconds == 0:
        return "0s"

    sign = "+" if hours >= 0 else "-"
    if minutes == 0:
        return f"{sign}{seconds}s"
    if seconds == 0:
        return f"{sign}{minutes}m"
    return f"{sign}{minutes}m {seconds}s"


def format_duration_seconds(seconds: float) -> str:
    """
    Format seconds as "1h 2m 3s", omitting zero parts.

    Example:
        >>> format_duration_seconds(3723)
        '1h 2m 3s'
        >>> format_duration_seconds(0)
        '0s'
    """
    total = _round_half_up(seconds)
    hours, rest = divmod(total, 3600)
    minutes, secs = divmod(rest, 60)

    parts: list[str] = []
    if hours > 0:
        parts.append(f"{hours}h")
    if minutes > 0:
        parts.append(f"{minutes}m")
    if secs > 0 or not parts:
        parts.append(f"{secs}s")
    return " ".join(parts)


def format_clock(seconds: float) -> str:
    """
    Format elapsed timer seconds as a clock.

    Args:
        seconds: Elapsed seconds (fractions are dropped).

    Returns:
        "M:SS" below one hour, "H:MM:SS" from one hour on.

    Example:
        >>> format_clock(3725)
        '1:02:05'
    """
    total = int(seconds)
    hours, rest = divmod(total, 3600)
    minutes, secs = divmod(rest, 60)
    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


@dataclass
class DashboardOverview:
    """Complete view model for the dashboard overview page."""

    has_data: bool = False
    range_token: str = "1M"
    current_average: float = 0.0
    total_hours: float = 0.0
    total_days: int = 0
    today_hours: float = 0.0
    average_progress: float = 0.0
    delta: Delta = field(default_factory=Delta)
    points: list[DailyDataPoint] = field(default_factory=list)
    forecast: Forecast | None = None
    milestones: list[Milestone] = field(default_factory=list)
    increase_steps: list[tuple[int, int]] = field(default_factory=list)

    @property
    def average_display(self) -> str:
        """
        Headline daily average with second precision.

        Business context: The average is the number users watch every
        day; showing seconds makes even a short session visibly move it.

        Returns:
            String like "1h 52m 30s", or "0s" without data.
        """
        return format_duration_seconds(self.current_average * 3600)

    @property
    def delta_display(self) -> str:
        """Change of the average across the selected range."""
        return format_delta(self.delta.value)

    @property
    def delta_class(self) -> str:
        """CSS class for the delta badge: "delta-up", "delta-down" or "delta-flat"."""
        if format_delta(self.delta.value) == "0s":
            return "delta-flat"
        return "delta-up" if self.delta.value > 0 else "delta-down"

    @property
    def total_display(self) -> str:
        """Total hours logged as "Xh Ym"."""
        return format_hours_minutes(self.total_hours)

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON responses."""
        return {
            "has_data": self.has_data,
            "range": self.range_token,
            "current_average": self.current_average,
            "average_display": self.average_display,
            "total_hours": self.total_hours,
            "total_days": self.total_days,
            "today_hours": self.today_hours,
            "average_progress": self.average_progress,
            "delta": self.delta.to_dict(),
            "delta_display": self.delta_display,
            "points": [p.to_dict() for p in self.points],
            "forecast": self.forecast.to_dict() if self.forecast else None,
            "milestones": [m.to_dict() for m in self.milestones],
            "increase_steps": [
                {"delta_seconds": delta, "needed_seconds": needed}
                for delta, needed in self.increase_steps
            ],
        }


@dataclass
class IntradayViewModel:
    """View model for the 1D (today) chart."""

    has_baseline: bool = False
    points: list[IntradayDataPoint] = field(default_factory=list)
    baseline_average: float = 0.0
    current_average: float = 0.0
    today_hours: float = 0.0

    @property
    def delta_from_baseline(self) -> float:
        """How far today's practice has moved the average (hours)."""
        if not self.has_baseline:
            return 0.0
        return self.current_average - self.baseline_average

    @property
    def delta_display(self) -> str:
        return format_delta(self.delta_from_baseline)

    @property
    def today_display(self) -> str:
        return format_duration_seconds(self.today_hours * 3600)

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON responses."""
        return {
            "has_baseline": self.has_baseline,
            "points": [p.to_dict() for p in self.points],
            "baseline_average": self.baseline_average,
            "current_average": self.current_average,
            "delta_from_baseline": self.delta_from_baseline,
            "delta_display": self.delta_display,
            "today_hours": self.today_hours,
        }


class DashboardPresenter:
    """
    Presenter for the main dashboard view.

    Transforms stored sessions into view models ready for rendering.
    Reads storage, never writes it.
    """

    def __init__(
        self,
        storage: StorageManager,
        engine: AnalyticsEngine,
        forecaster: ForecastCalculator | None = None,
    ) -> None:
        """
        Initialize dashboard presenter with data dependencies.

        Business context: Dependency injection enables testing with mock
        storage and a frozen-clock engine, so every number on the dashboard
        can be verified without real files or the real date.

        Args:
            storage: StorageManager for loading sessions and milestones.
            engine: AnalyticsEngine for all calculations.
            forecaster: ForecastCalculator. Default: goal from Config.

        Example:
            >>> presenter = DashboardPresenter(StorageManager(), AnalyticsEngine())
            >>> overview = presenter.get_overview("1Y")
        """
        self.storage = storage
        self.engine = engine
        self.forecaster = forecaster or ForecastCalculator()

    def _load(self) -> tuple[list[RawSession], AnalyticsResult | None]:
        sessions = self.storage.load_sessions()
        try:
            return sessions, self.engine.aggregate([s.to_practice_session() for s in sessions])
        except NoDataError:
            return sessions, None

    def get_overview(self, range_token: str = "1M", timer_seconds: float = 0) -> DashboardOverview:
        """
        Get complete overview data for the dashboard.

        Running-timer seconds are credited to today everywhere (headline
        average, chart, forecast) so the dashboard moves while the user
        practices.

        Business context: The overview is the main dashboard entry point.
        It aggregates the metric, the chart window, its delta and the goal
        forecast in a single request.

        Args:
            range_token: Chart window ('1W', '1M', '6M', '1Y', 'ALL'/'MAX').
            timer_seconds: Unsaved running-timer seconds.

        Returns:
            DashboardOverview. has_data is False (and everything else
            zero/empty) when nothing has been logged yet.

        Raises:
            ValueError: If range_token is unknown.

        Example:
            >>> overview = presenter.get_overview("1W")
            >>> overview.delta_display
            '+2m 5s'
        """
        token = parse_range(range_token)
        sessions, result = self._load()
        if result is None:
            return DashboardOverview(range_token=token)

        points = self.engine.with_timer(
            self.engine.range_series(result.daily_data, token, result.end_date),
            timer_seconds,
        )
        total_hours = result.total_hours + timer_seconds / 3600
        average = self.engine.adjusted_average(result, timer_seconds)

        return DashboardOverview(
            has_data=True,
            range_token=token,
            current_average=average,
            total_hours=total_hours,
            total_days=result.total_days,
            today_hours=self.engine.today_play_hours(sessions, timer_seconds),
            average_progress=self.engine.average_progress(result, timer_seconds),
            delta=self.engine.compute_delta(points),
            points=list(points),
            forecast=self.forecaster.forecast(total_hours, average, self.engine.today()),
            milestones=self._build_milestones(result),
            increase_steps=[
                (step, seconds_to_increase_by(total_hours, result.total_days, step))
                for step in INCREASE_STEPS
            ],
        )

    def _build_milestones(self, result: AnalyticsResult) -> list[Milestone]:
        """Crossed 100h milestones merged with stored custom markers."""
        return milestone_timeline(result, self.storage.load_milestones(), 100)

    def get_intraday(self, timer_seconds: float = 0) -> IntradayViewModel:
        """
        Get today's intraday view.

        Appends a live "now" point when the running timer has at least one
        whole minute on it. The chart point counts whole timer minutes;
        current_average counts every timer second.

        Args:
            timer_seconds: Unsaved running-timer seconds.

        Returns:
            IntradayViewModel. has_baseline is False on the first day of
            tracking or without any sessions.
        """
        sessions, result = self._load()
        if result is None:
            return IntradayViewModel(today_hours=timer_seconds / 3600)

        intraday = self.engine.reconstruct_intraday(result.daily_data, sessions)
        points = list(intraday.points)
        live = self.engine.live_point(intraday, timer_seconds)
        if live is not None:
            points.append(live)

        base = intraday.points[-1].cumulative_average if intraday.points else result.current_average
        current = base + timer_seconds / 3600 / result.total_days
        return IntradayViewModel(
            has_baseline=intraday.has_baseline,
            points=points,
            baseline_average=intraday.baseline_average,
            current_average=current,
            today_hours=self.engine.today_play_hours(sessions, timer_seconds),
        )


class ChartPresenter:
    """
    Presenter for generating chart images.

    Uses matplotlib for server-side chart rendering.
    Returns PNG images as bytes.
    """

    def __init__(self, dashboard: DashboardPresenter) -> None:
        """
        Initialize chart presenter.

        Args:
            dashboard: DashboardPresenter providing the chart data, so the
                images always match the JSON endpoints.
        """
        self.dashboard = dashboard

    @staticmethod
    def _figure_to_png(fig: Any) -> bytes:
        import matplotlib.pyplot as plt

        buf = io.BytesIO()
        plt.tight_layout()
        plt.savefig(buf, format="png", dpi=100, bbox_inches="tight")
        plt.close(fig)
        buf.seek(0)
        return buf.read()

    @staticmethod
    def _render_empty(message: str) -> Any:
        """
        Render placeholder chart when there is nothing to plot.

        Returns:
            Matplotlib figure.
        """
        import matplotlib.pyplot as plt

        fig, ax = plt.subplots(figsize=(8, 3))
        ax.text(0.5, 0.5, message, ha="center", va="center", fontsize=14)
        ax.set_xlim(0, 1)
        ax.set_ylim(0, 1)
        ax.axis("off")
        return fig

    def render_range_chart(self, range_token: str = "1M", timer_seconds: float = 0) -> bytes:
        """
        Render the daily-average line for a chart window as PNG.

        The y axis shows the average in minutes per day; the title carries
        the window's delta.

        Business context: The long-range chart is the motivational view -
        it shows whether the lifetime average trends up or down.

        Args:
            range_token: Chart window token.
            timer_seconds: Unsaved running-timer seconds.

        Returns:
            PNG image as bytes (800x300 at 100 DPI). A placeholder image
            when nothing has been logged.

        Raises:
            ValueError: If range_token is unknown.
        """
        import matplotlib

        matplotlib.use("Agg")
        import matplotlib.pyplot as plt

        overview = self.dashboard.get_overview(range_token, timer_seconds)
        if not overview.points:
            return self._figure_to_png(self._render_empty("No practice sessions yet"))

        fig, ax = plt.subplots(figsize=(8, 3))
        days = [p.day for p in overview.points]
        minutes = [p.cumulative_average * 60 for p in overview.points]
        color = CHART_COLORS["negative"] if overview.delta.value < 0 else CHART_COLORS["line"]

        ax.plot(days, minutes, color=color, linewidth=2)
        ax.set_ylabel("Daily average (min)")
        ax.set_title(f"{overview.range_token}: {overview.delta_display} ({overview.delta.percentage:+.1f}%)")
        fig.autofmt_xdate()
        ax.spines["top"].set_visible(False)
        ax.spines["right"].set_visible(False)

        return self._figure_to_png(fig)

    def render_intraday_chart(self, timer_seconds: float = 0) -> bytes:
        """
        Render today's plateau-slope curve as PNG.

        X axis is the hour of day (0-24); a dashed line marks the baseline
        average, and the live timer point is highlighted.

        Args:
            timer_seconds: Unsaved running-timer seconds.

        Returns:
            PNG image as bytes. A placeholder image on the first day of
            tracking.
        """
        import matplotlib

        matplotlib.use("Agg")
        import matplotlib.pyplot as plt

        view = self.dashboard.get_intraday(timer_seconds)
        if not view.has_baseline or not view.points:
            return self._figure_to_png(self._render_empty("No previous day to compare with yet"))

        fig, ax = plt.subplots(figsize=(8, 3))
        hours = [p.time.hour + p.time.minute / 60 + p.time.second / 3600 for p in view.points]
        minutes = [p.cumulative_average * 60 for p in view.points]

        ax.plot(hours, minutes, color=CHART_COLORS["line"], linewidth=2)
        ax.axhline(view.baseline_average * 60, color=CHART_COLORS["baseline"], linestyle="--", linewidth=1)
        if timer_seconds > 0 and view.points[-1].is_current_hour:
            ax.scatter([hours[-1]], [minutes[-1]], color=CHART_COLORS["live"], zorder=3)

        ax.set_xlim(0, 24)
        ax.set_xticks(range(0, 25, 3))
        ax.set_xlabel("Hour of day")
        ax.set_ylabel("Daily average (min)")
        ax.set_title(f"Today: {view.delta_display} ({view.today_display} played)")
        ax.spines["top"].set_visible(False)
        ax.spines["right"].set_visible(False)

        return self._figure_to_png(fig)
