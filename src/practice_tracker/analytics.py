"""
Analytics engine for Practice Tracker.

PURPOSE: Turn practice sessions into the lifetime daily-average time series.
AI CONTEXT: Pure data processing - no visualization, no I/O.

PIPELINE:
1. Daily Aggregator: bucket sessions by local calendar day, zero-fill the
   timeline from the first practice day through today
2. Cumulative Average Engine: running total hours / running day count
3. Range Filter & Downsampler: chart windows (1W/1M/6M/1Y/ALL) and a point
   budget for long windows that keeps the final point exact
4. Delta Calculator: change of the average across a window
5. Intraday Reconstructor: plateau-slope model of today's evolving average

TIME HANDLING:
- Calendar days are datetime.date values (total order, no string keys)
- Instants are converted to the configured zone (or system local time)
  before bucketing; naive datetimes are taken as local wall-clock time
- "Now" comes from an injected clock so tests can freeze time

USAGE:
    engine = AnalyticsEngine()
    result = engine.aggregate(sessions)
    points = engine.range_series(result.daily_data, "1M", result.end_date)
    delta = engine.compute_delta(points)
    intraday = engine.reconstruct_intraday(result.daily_data, raw_sessions)
"""

from __future__ import annotations

import calendar
import logging
import math
from collections.abc import Callable, Iterable, Sequence
from datetime import date, datetime, time, timedelta, tzinfo

from .config import Config
from .models import (
    AnalyticsResult,
    DailyDataPoint,
    Delta,
    IntradayDataPoint,
    IntradayResult,
    PracticeSession,
    RawSession,
)

__all__ = [
    "AnalyticsEngine",
    "Clock",
    "NoDataError",
    "intraday_average",
    "parse_range",
    "seconds_to_increase_by",
]

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


class NoDataError(ValueError):
    """Raised when analytics are requested for an empty session list."""


def intraday_average(
    baseline_cumulative_hours: float,
    hours_so_far_today: float,
    today_day_number: int,
) -> float:
    """
    Lifetime average as it reads partway through a day.

    The plateau-slope model: today already counts as a full day, so the
    average only moves while practice time accrues.

    Args:
        baseline_cumulative_hours: Cumulative hours up to and including the
            baseline (previous) day.
        hours_so_far_today: Hours practiced today up to the instant of
            interest, including any partial session.
        today_day_number: 1-based day number of today (baseline + 1).

    Returns:
        (baseline_cumulative_hours + hours_so_far_today) / today_day_number

    Example:
        >>> round(intraday_average(100.0, 0.5, 51), 4)
        1.9706
    """
    return (baseline_cumulative_hours + hours_so_far_today) / today_day_number


def seconds_to_increase_by(total_hours: float, total_days: int, delta_seconds: float) -> int:
    """
    Practice seconds needed today to raise the lifetime average by delta_seconds.

    Args:
        total_hours: Hours logged so far (today included).
        total_days: Days tracked so far (today included).
        delta_seconds: Desired increase of the average, in seconds.

    Returns:
        Whole seconds, rounded up, never negative.

    Example:
        >>> seconds_to_increase_by(100.0, 50, 1)
        50
    """
    target_average = total_hours / total_days + delta_seconds / 3600
    additional_hours = target_average * total_days - total_hours
    return max(0, math.ceil(round(additional_hours * 3600, 6)))


def parse_range(token: str) -> str:
    """
    Validate and normalize a chart range token.

    Args:
        token: '1W', '1M', '6M', '1Y', 'ALL' (any case) or the alias 'MAX'.

    Returns:
        Canonical token.

    Raises:
        ValueError: If the token is unknown.

    Example:
        >>> parse_range('max')
        'ALL'
    """
    normalized = Config.normalize_range(token)
    if normalized is None:
        raise ValueError(
            f"Unknown range '{token}'. Expected one of: {', '.join(Config.RANGE_TOKENS)}"
        )
    return normalized


def _sub_months(day: date, months: int) -> date:
    """Step back whole calendar months, clamping to the target month's last day."""
    index = day.year * 12 + (day.month - 1) - months
    year, month_zero = divmod(index, 12)
    month = month_zero + 1
    return date(year, month, min(day.day, calendar.monthrange(year, month)[1]))


class AnalyticsEngine:
    """
    Calculator for the lifetime daily-average metric.

    DESIGN:
    - Stateless between calls: every method recomputes from its inputs
    - Pure: inputs are never mutated, results are new frozen objects
    - Configurable: clock, timezone, visual start date and point budget
      come from the constructor, defaulting to Config

    A caller polling once per second (live timer) simply calls the engine
    again; nothing is cached between invocations.
    """

    def __init__(
        self,
        clock: Clock | None = None,
        tz: tzinfo | None = None,
        visual_start_date: date | None = None,
        downsample_target: int | None = None,
    ) -> None:
        """
        Initialize the analytics engine.

        Args:
            clock: Zero-argument callable returning the current instant.
                Default: the real wall clock.
            tz: Zone whose calendar days bucket the sessions.
                Default: Config.get_timezone(), i.e. PRACTICE_TIMEZONE or
                system local time.
            visual_start_date: Earliest day shown by long-range charts.
                Default: Config.get_visual_start_date() (None = no clamp).
            downsample_target: Point budget for long ranges.
                Default: Config.DOWNSAMPLE_TARGET (100).

        Example:
            >>> from datetime import timezone
            >>> frozen = datetime(2025, 1, 10, 12, 0, tzinfo=timezone.utc)
            >>> engine = AnalyticsEngine(clock=lambda: frozen, tz=timezone.utc)
            >>> engine.today()
            datetime.date(2025, 1, 10)
        """
        self.tz = tz if tz is not None else Config.get_timezone()
        self._clock: Clock = clock or self._system_now
        self.visual_start_date = (
            visual_start_date if visual_start_date is not None else Config.get_visual_start_date()
        )
        self.downsample_target = downsample_target or Config.DOWNSAMPLE_TARGET

    # =========================================================================
    # TIME HELPERS
    # =========================================================================

    def _system_now(self) -> datetime:
        if self.tz is not None:
            return datetime.now(self.tz)
        return datetime.now().astimezone()

    def _localize(self, naive: datetime) -> datetime:
        """Attach the local zone to a wall-clock datetime."""
        if self.tz is not None:
            return naive.replace(tzinfo=self.tz)
        return naive.astimezone()

    def to_local(self, instant: datetime) -> datetime:
        """
        Express an instant in local wall-clock time.

        Args:
            instant: Aware datetime, or naive datetime already in local time.

        Returns:
            Aware datetime in the engine's zone.
        """
        if instant.tzinfo is None:
            return self._localize(instant)
        return instant.astimezone(self.tz)

    def local_day(self, instant: datetime) -> date:
        """Calendar day an instant falls on in local time."""
        return self.to_local(instant).date()

    def now(self) -> datetime:
        """Current instant from the injected clock, in local time."""
        return self.to_local(self._clock())

    def today(self) -> date:
        """Current local calendar day."""
        return self.now().date()

    def _as_day(self, value: date | datetime) -> date:
        if isinstance(value, datetime):
            return self.local_day(value)
        return value

    # =========================================================================
    # DAILY AGGREGATOR
    # =========================================================================

    def bucket_by_day(self, sessions: Iterable[PracticeSession]) -> dict[date, float]:
        """
        Sum session durations per local calendar day of their start.

        A session starting exactly at local midnight belongs to the day that
        midnight opens. Sessions are attributed wholly to their start day,
        even when they run past midnight.

        Args:
            sessions: Practice sessions in any order.

        Returns:
            Dict mapping each day with at least one session to its hours.

        Example:
            >>> engine.bucket_by_day([session_at('2025-01-01T09:00', hours=2)])
            {datetime.date(2025, 1, 1): 2.0}
        """
        buckets: dict[date, float] = {}
        for session in sessions:
            key = self.local_day(session.start_time)
            buckets[key] = buckets.get(key, 0.0) + session.duration_hours
        return buckets

    @staticmethod
    def zero_fill(
        buckets: dict[date, float], start: date, end: date
    ) -> list[tuple[date, float]]:
        """
        Expand day buckets into a continuous timeline.

        Args:
            buckets: Hours per day (days without sessions may be absent).
            start: First day of the timeline.
            end: Last day of the timeline (inclusive).

        Returns:
            One (day, hours) pair per calendar day from start to end, with
            0.0 for days missing from buckets.
        """
        span = (end - start).days + 1
        return [
            (day, buckets.get(day, 0.0))
            for day in (start + timedelta(days=offset) for offset in range(span))
        ]

    # =========================================================================
    # CUMULATIVE AVERAGE ENGINE
    # =========================================================================

    @staticmethod
    def accumulate(days: Sequence[tuple[date, float]]) -> tuple[DailyDataPoint, ...]:
        """
        Annotate a zero-filled timeline with running totals and averages.

        Single forward pass: cumulative hours add up day by day, the day
        number is the 1-based position, and the average divides the two.

        Args:
            days: Chronological, gap-free (day, hours_played) pairs.

        Returns:
            Tuple of DailyDataPoint, oldest first.

        Example:
            >>> points = AnalyticsEngine.accumulate([(d1, 2.0), (d2, 0.0), (d3, 4.0)])
            >>> [p.cumulative_average for p in points]
            [2.0, 1.0, 2.0]
        """
        points: list[DailyDataPoint] = []
        cumulative = 0.0
        for index, (day, hours) in enumerate(days):
            cumulative += hours
            day_number = index + 1
            points.append(
                DailyDataPoint(
                    day=day,
                    day_number=day_number,
                    hours_played=hours,
                    cumulative_hours=cumulative,
                    cumulative_average=cumulative / day_number,
                )
            )
        return tuple(points)

    def aggregate(self, sessions: Sequence[PracticeSession]) -> AnalyticsResult:
        """
        Compute the full lifetime analytics for a list of sessions.

        The timeline starts on the first practice day and always reaches
        today, even when nothing was logged today, so the intraday view and
        the headline average always refer to the current day. A session
        dated in the future (clock skew) extends the timeline to that day.

        Business context: The cumulative average (total hours / days since
        tracking began) is the headline number of the whole application.
        Rest days must count, which is why the timeline is zero-filled.

        Args:
            sessions: Practice sessions in any order. Must not be empty.

        Returns:
            AnalyticsResult with the daily series and its totals.

        Raises:
            NoDataError: If sessions is empty. Callers should show an
                onboarding / empty state instead of a zero chart.

        Example:
            >>> result = engine.aggregate(sessions)  # 2h, 0h, 4h over 3 days
            >>> result.total_hours, result.total_days, result.current_average
            (6.0, 3, 2.0)
        """
        if not sessions:
            raise NoDataError("No valid practice sessions found")

        buckets = self.bucket_by_day(sessions)
        start_date = min(buckets)
        end_date = max(max(buckets), self.today())

        daily = self.accumulate(self.zero_fill(buckets, start_date, end_date))
        last = daily[-1]

        logger.debug(
            f"Aggregated {len(sessions)} sessions into {len(daily)} days "
            f"({start_date} to {end_date})"
        )

        return AnalyticsResult(
            daily_data=daily,
            total_hours=last.cumulative_hours,
            total_days=last.day_number,
            current_average=last.cumulative_hours / last.day_number,
            start_date=start_date,
            end_date=end_date,
        )

    # =========================================================================
    # RANGE FILTER & DOWNSAMPLER
    # =========================================================================

    def range_start(
        self,
        range_token: str,
        end_date: date,
        visual_start_date: date | None = None,
    ) -> date:
        """
        First day shown for a chart window ending on end_date.

        Short windows (1W, 1M) are exact. Long windows (6M, 1Y, ALL) never
        start before the visual start date, which hides the volatile early
        history on long charts only. ALL starts at the visual start date, or
        at the beginning of time when none is configured.

        Args:
            range_token: Chart window token.
            end_date: Anchor (last) day of the window.
            visual_start_date: Cutoff overriding the engine's configured one.

        Returns:
            Inclusive start day of the window.

        Raises:
            ValueError: If range_token is unknown.
        """
        token = parse_range(range_token)
        cutoff = visual_start_date if visual_start_date is not None else self.visual_start_date

        if token == "1W":
            return end_date - timedelta(days=7)
        if token == "1M":
            return _sub_months(end_date, 1)

        if token == "6M":
            start = _sub_months(end_date, 6)
        elif token == "1Y":
            start = _sub_months(end_date, 12)
        else:
            start = date.min

        if cutoff is not None:
            start = max(start, cutoff)
        return start

    def filter_by_range(
        self,
        daily: Sequence[DailyDataPoint],
        range_token: str,
        end_date: date | datetime,
        visual_start_date: date | None = None,
    ) -> tuple[DailyDataPoint, ...]:
        """
        Slice the daily series to a chart window.

        Display-only: the points keep the averages computed from the full
        history; only which days are shown changes.

        Args:
            daily: Full daily series, oldest first.
            range_token: '1W' (7 days back), '1M' (1 calendar month back),
                '6M', '1Y' or 'ALL'. Both ends are inclusive.
            end_date: Anchor day (datetimes are converted to their local day).
            visual_start_date: Optional cutoff for long windows; defaults to
                the engine's configured visual start date.

        Returns:
            Contiguous sub-sequence of daily (possibly empty).

        Raises:
            ValueError: If range_token is unknown.

        Example:
            >>> week = engine.filter_by_range(result.daily_data, '1W', result.end_date)
            >>> len(week)
            8
        """
        anchor = self._as_day(end_date)
        start = self.range_start(range_token, anchor, visual_start_date)
        if not daily:
            return ()
        return tuple(point for point in daily if start <= point.day <= anchor)

    def downsample(
        self,
        points: Sequence[DailyDataPoint],
        target_count: int | None = None,
    ) -> tuple[DailyDataPoint, ...]:
        """
        Reduce a long series to roughly target_count points.

        The series is cut into contiguous chunks of ceil(n / target) points
        and the LAST point of each chunk is kept. Values are never averaged
        or interpolated, so every plotted point is a real day's exact
        cumulative average. The final input point is always the final
        output point.

        Args:
            points: Series to reduce, oldest first.
            target_count: Point budget. Default: engine's downsample_target.

        Returns:
            The input unchanged (as a tuple) when it already fits, otherwise
            at most target_count + 1 points ending with points[-1].

        Raises:
            ValueError: If target_count is less than 1.

        Example:
            >>> len(engine.downsample(four_hundred_points, 100))
            100
        """
        target = target_count if target_count is not None else self.downsample_target
        if target < 1:
            raise ValueError(f"target_count must be at least 1, got {target}")

        count = len(points)
        if count <= target:
            return tuple(points)

        step = math.ceil(count / target)
        sampled = [points[min(i + step - 1, count - 1)] for i in range(0, count, step)]
        if sampled[-1] is not points[-1]:
            sampled.append(points[-1])
        return tuple(sampled)

    def range_series(
        self,
        daily: Sequence[DailyDataPoint],
        range_token: str,
        end_date: date | datetime,
    ) -> tuple[DailyDataPoint, ...]:
        """
        Chart-ready series: filter to the window, downsample long windows.

        Args:
            daily: Full daily series.
            range_token: Chart window token.
            end_date: Anchor day of the window.

        Returns:
            Points to plot.

        Raises:
            ValueError: If range_token is unknown.
        """
        token = parse_range(range_token)
        points = self.filter_by_range(daily, token, end_date)
        if token in Config.LONG_RANGES:
            points = self.downsample(points)
        return points

    # =========================================================================
    # DELTA CALCULATOR
    # =========================================================================

    @staticmethod
    def compute_delta(points: Sequence[DailyDataPoint]) -> Delta:
        """
        Change of the cumulative average from first to last point.

        Args:
            points: Filtered series (any length).

        Returns:
            Delta(value, percentage). Both are 0 for fewer than two points;
            percentage is 0 when the first average is 0.

        Example:
            >>> AnalyticsEngine.compute_delta(points)  # 2.0 -> 2.5
            Delta(value=0.5, percentage=25.0)
        """
        if len(points) < 2:
            return Delta()

        first = points[0].cumulative_average
        last = points[-1].cumulative_average
        value = last - first
        percentage = value / first * 100 if first != 0 else 0.0
        return Delta(value=value, percentage=percentage)

    # =========================================================================
    # INTRADAY RECONSTRUCTOR
    # =========================================================================

    def sessions_on(
        self,
        raw_sessions: Iterable[RawSession],
        day: date | None = None,
    ) -> list[PracticeSession]:
        """
        Parse the raw sessions that start on a local calendar day.

        Args:
            raw_sessions: Stored session records.
            day: Day to select. Default: today.

        Returns:
            Matching sessions, in input order.
        """
        target = day or self.today()
        selected: list[PracticeSession] = []
        for raw in raw_sessions:
            session = raw.to_practice_session()
            if self.local_day(session.start_time) == target:
                selected.append(session)
        return selected

    def today_play_hours(
        self,
        raw_sessions: Iterable[RawSession],
        timer_seconds: float = 0,
    ) -> float:
        """
        Hours practiced today, including unsaved live-timer seconds.

        Args:
            raw_sessions: Stored session records (all days).
            timer_seconds: Seconds on a running, not yet saved timer.

        Returns:
            Sum of today's session hours plus timer hours.
        """
        logged = sum(s.duration_hours for s in self.sessions_on(raw_sessions))
        return logged + timer_seconds / 3600

    @staticmethod
    def _elapsed_hours(session: PracticeSession, start: datetime, end: datetime, at: datetime) -> float:
        if at >= end:
            return session.duration_hours
        if at <= start:
            return 0.0
        return session.duration_hours * ((at - start) / (end - start))

    def hours_so_far(self, sessions: Sequence[PracticeSession], at: datetime) -> float:
        """
        Practice hours accrued by an instant.

        Sessions that ended by `at` count in full; a session in progress
        counts the elapsed fraction of its duration (linear interpolation).
        Overlapping sessions are each counted independently.

        Args:
            sessions: Sessions of the day being reconstructed.
            at: Instant of interest.

        Returns:
            Hours accrued by `at`.

        Example:
            >>> engine.hours_so_far([nine_to_ten], at=half_past_nine)
            0.5
        """
        moment = self.to_local(at)
        total = 0.0
        for session in sessions:
            start = self.to_local(session.start_time)
            total += self._elapsed_hours(session, start, start + (session.end_time - session.start_time), moment)
        return total

    @staticmethod
    def find_baseline(
        daily: Sequence[DailyDataPoint], day: date
    ) -> DailyDataPoint | None:
        """
        Previous-day point an intraday reconstruction grows from.

        Yesterday's point when present, otherwise the most recent point
        strictly before `day`.

        Args:
            daily: Daily series, oldest first.
            day: Day being reconstructed.

        Returns:
            Baseline point, or None on the first day of tracking.
        """
        yesterday = day - timedelta(days=1)
        fallback: DailyDataPoint | None = None
        for point in reversed(daily):
            if point.day == yesterday:
                return point
            if point.day < day and fallback is None:
                fallback = point
        return fallback

    def reconstruct_intraday(
        self,
        daily: Sequence[DailyDataPoint],
        today_sessions: Iterable[RawSession],
        day: date | None = None,
    ) -> IntradayResult:
        """
        Reconstruct how the lifetime average evolves within one day.

        Plateau-slope model: today is day number baseline + 1 and the
        average is (baseline hours + hours so far today) / that day number.
        The curve is flat while idle and rises linearly while a session is
        running.

        Time points are every hour boundary from midnight up to the current
        hour (hour 23 for a past day) plus the start and end of every
        session of the day inside that span, de-duplicated and sorted. This
        yields exact kinks at session boundaries.

        Business context: The 1D chart shows the day's progress live instead
        of waiting for midnight to update the headline average.

        Args:
            daily: Full daily series (for the baseline lookup).
            today_sessions: Raw sessions; only those starting on `day` are
                used, so passing every stored session is fine.
            day: Day to reconstruct. Default: today (hours up to now).

        Returns:
            IntradayResult. Empty (baseline_average 0.0) when no earlier
            day exists to use as a baseline.

        Example:
            >>> # baseline 100h over 50 days, one 09:00-10:00 session today
            >>> result = engine.reconstruct_intraday(daily, sessions)
            >>> round(result.points[8].cumulative_average, 4)  # 08:00
            1.9608
        """
        now = self.now()
        target_day = day or now.date()

        baseline = self.find_baseline(daily, target_day)
        if baseline is None:
            logger.debug(f"No baseline before {target_day}; intraday reconstruction skipped")
            return IntradayResult()

        day_number = baseline.day_number + 1
        is_today = target_day == now.date()
        midnight = self._localize(datetime.combine(target_day, time()))
        if is_today:
            last_hour = now.hour
            window_end = now
        else:
            last_hour = 23
            window_end = self._localize(datetime.combine(target_day + timedelta(days=1), time()))

        sessions = self.sessions_on(today_sessions, target_day)
        spans = []
        for session in sessions:
            start = self.to_local(session.start_time)
            spans.append((session, start, start + (session.end_time - session.start_time)))

        instants = {
            self._localize(datetime.combine(target_day, time(hour))) for hour in range(last_hour + 1)
        }
        for _session, start, end in spans:
            for boundary in (start, end):
                if midnight <= boundary <= window_end:
                    instants.add(boundary)

        points: list[IntradayDataPoint] = []
        for instant in sorted(instants):
            so_far = self.hours_so_far(sessions, instant)
            active = sum(s.duration_hours for s, start, end in spans if start <= instant <= end)
            points.append(
                IntradayDataPoint(
                    time=instant,
                    cumulative_average=intraday_average(
                        baseline.cumulative_hours, so_far, day_number
                    ),
                    hours_played_this_interval=active,
                    cumulative_today_hours=so_far,
                    is_current_hour=is_today and instant.hour == now.hour,
                )
            )

        return IntradayResult(
            points=tuple(points),
            baseline_average=baseline.cumulative_average,
            baseline_cumulative_hours=baseline.cumulative_hours,
            day_number=day_number,
        )

    # =========================================================================
    # LIVE TIMER AUGMENTATION
    # =========================================================================

    def live_point(self, intraday: IntradayResult, timer_seconds: float) -> IntradayDataPoint | None:
        """
        Synthetic "now" point including a running timer's unsaved time.

        The timer contributes whole minutes only (floor), so the chart moves
        once a minute rather than every second. Uses the same
        intraday_average formula as the reconstruction.

        Args:
            intraday: Reconstruction for today.
            timer_seconds: Seconds on the running timer.

        Returns:
            Point at now, or None when the timer has less than a minute,
            there are no intraday points, or now is not after the last point.

        Example:
            >>> engine.live_point(intraday, timer_seconds=1830).cumulative_today_hours
            1.5  # 1h logged + 30 whole timer minutes
        """
        minutes = int(timer_seconds // 60)
        if minutes <= 0 or not intraday.points:
            return None

        now = self.now()
        last = intraday.points[-1]
        if now <= last.time:
            return None

        today_hours = last.cumulative_today_hours + minutes / 60
        return IntradayDataPoint(
            time=now,
            cumulative_average=intraday_average(
                intraday.baseline_cumulative_hours, today_hours, intraday.day_number
            ),
            hours_played_this_interval=0.0,
            cumulative_today_hours=today_hours,
            is_current_hour=True,
        )

    def with_timer(
        self,
        points: Sequence[DailyDataPoint],
        timer_seconds: float,
    ) -> tuple[DailyDataPoint, ...]:
        """
        Credit running-timer time to today's point of a chart series.

        Args:
            points: Chart series (usually from range_series).
            timer_seconds: Seconds on the running timer.

        Returns:
            Copy of points whose last element, if it is today, includes the
            timer hours. Unchanged copy otherwise.
        """
        adjusted = tuple(points)
        if timer_seconds <= 0 or not adjusted or adjusted[-1].day != self.today():
            return adjusted
        return adjusted[:-1] + (adjusted[-1].with_extra_hours(timer_seconds / 3600),)

    @staticmethod
    def adjusted_average(result: AnalyticsResult, timer_seconds: float = 0) -> float:
        """Current average with running-timer seconds spread over all days."""
        return result.current_average + (timer_seconds / 3600) / result.total_days

    @staticmethod
    def average_progress(result: AnalyticsResult, timer_seconds: float = 0) -> float:
        """
        Progress of the exact average through its displayed whole second.

        The average is displayed rounded to whole seconds (half up). This
        returns how far the exact value has travelled from the lower
        rounding threshold (displayed - 0.5s) to the upper one
        (displayed + 0.5s), which drives the "next second" progress bar.

        Args:
            result: Analytics for all logged sessions.
            timer_seconds: Unsaved running-timer seconds.

        Returns:
            Percentage in [0, 100).

        Example:
            >>> # exact average 5234.25 s -> displayed 5234 s
            >>> AnalyticsEngine.average_progress(result)
            75.0
        """
        exact_seconds = (result.total_hours * 3600 + timer_seconds) / result.total_days
        displayed = math.floor(exact_seconds + 0.5)
        return (exact_seconds - (displayed - 0.5)) * 100
