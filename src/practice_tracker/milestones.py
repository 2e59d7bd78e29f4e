"""
Goal forecasting and milestone detection for Practice Tracker.

PURPOSE: Project when the 10,000 hour goal and the next round-number
milestones will be reached, and find when past milestones were crossed.
AI CONTEXT: Pure calculations over AnalyticsResult - no I/O.

FORECAST MODEL:
    days = ceil(hours_remaining / daily_average)
    date = today + days
Both are None when the average is 0 (the goal is never reached).
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable
from datetime import date, timedelta

from .config import Config
from .models import AnalyticsResult, Forecast, Milestone, MilestoneForecast

__all__ = [
    "ForecastCalculator",
    "achieved_milestones",
    "cumulative_at",
    "milestone_timeline",
    "next_milestone",
]

logger = logging.getLogger(__name__)


def next_milestone(total_hours: float, step: int) -> int:
    """
    Round-number milestone at or above the current total.

    Args:
        total_hours: Hours logged so far.
        step: Milestone spacing (e.g. 100 or 1000).

    Returns:
        ceil(total_hours / step) * step

    Example:
        >>> next_milestone(1234.5, 100)
        1300
    """
    return math.ceil(total_hours / step) * step


def cumulative_at(result: AnalyticsResult, target_day: date) -> float:
    """
    Cumulative hours logged by the end of a day.

    Args:
        result: Analytics over all sessions.
        target_day: Day of interest.

    Returns:
        The day's cumulative hours on an exact match; 0.0 before the first
        day; the total after the last day; otherwise the cumulative hours of
        the last point on or before target_day.
    """
    if not result.daily_data or target_day < result.start_date:
        return 0.0
    if target_day > result.end_date:
        return result.total_hours

    found = 0.0
    for point in result.daily_data:
        if point.day == target_day:
            return point.cumulative_hours
        if point.day > target_day:
            break
        found = point.cumulative_hours
    return found


def achieved_milestones(result: AnalyticsResult, step: int = 100) -> list[Milestone]:
    """
    Find the day each multiple of `step` hours was first reached.

    Business context: The timeline view lists crossed milestones with the
    average the user had on that day, which makes long-term progress
    visible even when the average itself barely moves.

    Args:
        result: Analytics over all sessions.
        step: Milestone spacing in hours.

    Returns:
        Interval milestones in ascending order of hours.

    Raises:
        ValueError: If step is not positive.

    Example:
        >>> [m.hours for m in achieved_milestones(result, 100)]  # 250h logged
        [100, 200]
    """
    if step <= 0:
        raise ValueError(f"step must be positive, got {step}")

    milestones: list[Milestone] = []
    target = step
    for point in result.daily_data:
        while point.cumulative_hours >= target:
            milestones.append(
                Milestone(
                    hours=target,
                    achieved_at=point.date_str,
                    average_at_milestone=point.cumulative_average,
                    description=f"{target:,} hours",
                    milestone_type="interval",
                )
            )
            target += step
    return milestones


def milestone_timeline(
    result: AnalyticsResult | None,
    stored: Iterable[Milestone],
    step: int = 100,
) -> list[Milestone]:
    """
    Crossed interval milestones merged with stored custom markers.

    Interval milestones are derived from the series; stored interval
    records are ignored.

    Args:
        result: Analytics over all sessions, or None without sessions.
        stored: Milestones loaded from storage.
        step: Interval milestone spacing in hours.

    Returns:
        Milestones sorted by hours.
    """
    reached = achieved_milestones(result, step) if result is not None else []
    custom = [m for m in stored if m.milestone_type == "custom"]
    return sorted(reached + custom, key=lambda m: m.hours)


class ForecastCalculator:
    """
    Projects goal and milestone dates from the current daily average.

    The goal and milestone spacing default to Config.GOAL_HOURS and
    Config.MILESTONE_STEPS.
    """

    def __init__(
        self,
        goal_hours: int = Config.GOAL_HOURS,
        steps: tuple[int, ...] = Config.MILESTONE_STEPS,
    ) -> None:
        self.goal_hours = goal_hours
        self.steps = steps

    @staticmethod
    def project(
        target_hours: int, total_hours: float, daily_average: float, today: date
    ) -> MilestoneForecast:
        """
        Project when a single hours target is reached.

        Args:
            target_hours: Target to reach.
            total_hours: Hours logged so far.
            daily_average: Current lifetime daily average in hours.
            today: Day the projection counts from.

        Returns:
            MilestoneForecast; days and projected_date are None when the
            average is not positive.
        """
        remaining = max(0.0, target_hours - total_hours)
        if daily_average <= 0:
            return MilestoneForecast(target_hours, remaining, None, None)

        days = math.ceil(remaining / daily_average)
        return MilestoneForecast(target_hours, remaining, days, today + timedelta(days=days))

    def forecast(self, total_hours: float, daily_average: float, today: date) -> Forecast:
        """
        Forecast the goal and the next milestone for every configured step.

        Args:
            total_hours: Hours logged so far.
            daily_average: Current lifetime daily average in hours.
            today: Day the projection counts from.

        Returns:
            Forecast with the goal projection and one projection per step
            (largest step first).

        Example:
            >>> calc = ForecastCalculator()
            >>> calc.forecast(9000.0, 2.0, date(2025, 1, 1)).goal.days
            500
        """
        goal = self.project(self.goal_hours, total_hours, daily_average, today)
        upcoming = tuple(
            self.project(next_milestone(total_hours, step), total_hours, daily_average, today)
            for step in self.steps
        )
        logger.debug(f"Forecast for {total_hours:.2f}h at {daily_average:.3f}h/day: {goal.days} days to goal")
        return Forecast(goal=goal, next_milestones=upcoming)
