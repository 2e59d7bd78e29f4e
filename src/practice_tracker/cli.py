"""
CLI entry point for Practice Tracker.

PURPOSE: Command-line interface for the dashboard, reports, imports and timer.
AI CONTEXT: Main entry points for package execution.

USAGE:
    # Print the report (default)
    python -m practice_tracker

    # Or via CLI command (after install)
    practice-tracker

    # Subcommands
    practice-tracker dashboard                      # Launch web dashboard
    practice-tracker report --range 1Y              # Print text report
    practice-tracker import export.csv              # Import CSV export
    practice-tracker log 2025-01-05T09:00 45        # Log 45 minutes
    practice-tracker timer start|stop|cancel|status # Live timer
    practice-tracker clear --yes                    # Delete all sessions
"""

from __future__ import annotations

import argparse
import logging
import sys
from functools import lru_cache
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .analytics import AnalyticsEngine
    from .practice_service import PracticeService, ServiceResult
    from .storage import StorageManager

# Constants
DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8000
REPORT_WIDTH = 50
TIMER_ACTIONS = ("start", "stop", "cancel", "status")


@lru_cache(maxsize=1)
def _get_logger() -> logging.Logger:
    """Get module logger (cached for thread safety)."""
    logging.basicConfig(level=logging.INFO)
    return logging.getLogger(__name__)


def _log(message: str, *, emoji: str = "") -> None:
    """Log message with optional emoji prefix for CLI output.

    Args:
        message: The message to log.
        emoji: Optional emoji prefix for visual CLI feedback.
    """
    prefix = f"{emoji} " if emoji else ""
    _get_logger().info(f"{prefix}{message}")


def _report_result(result: ServiceResult) -> int:
    """Log a ServiceResult and convert it to an exit code."""
    if result.success:
        _log(result.message, emoji="✅")
        return 0
    _log(f"{result.message}: {result.error}", emoji="❌")
    return 1


def _default_service(service: PracticeService | None) -> PracticeService:
    from .practice_service import PracticeService as Service

    return service or Service()


def run_dashboard(host: str = DEFAULT_HOST, port: int = DEFAULT_PORT) -> None:
    """
    Launch the web dashboard.

    Args:
        host: Network interface to bind to. Default '127.0.0.1' for
            local-only access. Use '0.0.0.0' for network access.
        port: TCP port for the HTTP server. Default 8000.

    Returns:
        None. Blocks until server shutdown (Ctrl+C).

    Raises:
        OSError: If port is already in use.

    Example:
        >>> # From command line:
        >>> # practice-tracker dashboard --port 3000
        >>> run_dashboard(port=3000)
        🚀 Starting dashboard at http://127.0.0.1:3000
    """
    from .web import run_dashboard as start_web

    _log(f"Starting dashboard at http://{host}:{port}", emoji="🚀")
    _log("Press Ctrl+C to stop")
    start_web(host=host, port=port)


def build_report(
    range_token: str = "1M",
    storage: StorageManager | None = None,
    engine: AnalyticsEngine | None = None,
    timer_seconds: float = 0,
) -> str:
    """
    Build the plain-text analytics report.

    Business context: A quick terminal view of the daily average for
    users who don't want to open a browser; also handy in scripts.

    Args:
        range_token: Window used for the delta line.
        storage: Optional StorageManager for testability.
        engine: Optional AnalyticsEngine for testability.
        timer_seconds: Unsaved running-timer seconds.

    Returns:
        Multi-line report text.

    Raises:
        ValueError: If range_token is unknown.

    Example:
        >>> print(build_report("1W"))
        ==================================================
        PRACTICE TRACKER - DAILY AVERAGE REPORT
        ...
    """
    from .analytics import AnalyticsEngine as Engine
    from .presenters import DashboardPresenter, format_clock, format_hours_minutes
    from .storage import StorageManager as StorageMgr

    presenter = DashboardPresenter(storage or StorageMgr(), engine or Engine())
    overview = presenter.get_overview(range_token, timer_seconds)

    rule = "=" * REPORT_WIDTH
    lines = [rule, "PRACTICE TRACKER - DAILY AVERAGE REPORT", rule]
    if not overview.has_data:
        lines.append("No practice sessions logged yet.")
        lines.append("Import a CSV export or log a session to get started.")
        return "\n".join(lines)

    lines.extend(
        [
            f"Daily average:   {overview.average_display}",
            f"Total practice:  {overview.total_display}",
            f"Days tracked:    {overview.total_days}",
            f"Today:           {format_hours_minutes(overview.today_hours)}",
            f"Change ({overview.range_token}):     {overview.delta_display} "
            f"({overview.delta.percentage:+.1f}%)",
        ]
    )
    if timer_seconds > 0:
        lines.append(f"Timer running:   {format_clock(timer_seconds)}")

    if overview.forecast is not None:
        lines.append("-" * REPORT_WIDTH)
        lines.append("FORECAST")
        for item in (overview.forecast.goal, *overview.forecast.next_milestones):
            when = item.projected_date.isoformat() if item.projected_date else "never at this pace"
            lines.append(f"  {item.milestone:>6,}h  {format_hours_minutes(item.hours_remaining):>10}  {when}")

    if overview.milestones:
        latest = overview.milestones[-1]
        lines.append("-" * REPORT_WIDTH)
        lines.append(f"Latest milestone: {latest.hours:,}h ({latest.achieved_at})")

    lines.append(rule)
    return "\n".join(lines)


def run_report(
    range_token: str = "1M",
    service: PracticeService | None = None,
) -> int:
    """
    Print the text report to stdout.

    Args:
        range_token: Window used for the delta line.
        service: Optional PracticeService for testability.

    Returns:
        0 on success, 2 for an unknown range.
    """
    service = _default_service(service)
    try:
        report = build_report(range_token, service.storage, service.engine, service.timer_seconds())
    except ValueError as e:
        _log(str(e), emoji="❌")
        return 2
    # Note: Using print() intentionally for stdout piping support
    print(report)
    return 0


def run_import(path: str, service: PracticeService | None = None) -> int:
    """
    Import a CSV export file.

    Args:
        path: Path to the CSV file.
        service: Optional PracticeService for testability.

    Returns:
        0 on success, 1 if the file can't be read or imported.
    """
    service = _default_service(service)
    try:
        content = Path(path).read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as e:
        _log(f"Cannot read {path}: {e}", emoji="❌")
        return 1

    result = service.import_csv(content)
    if result.success and result.data:
        for error in result.data["errors"][:5]:
            _log(error, emoji="⚠️")
        if result.data["duplicates"]:
            _log(f"Skipped {result.data['duplicates']} already imported session(s)")
    return _report_result(result)


def run_log(started_at: str, minutes: float, service: PracticeService | None = None) -> int:
    """
    Log a finished session.

    Args:
        started_at: ISO 8601 start instant (naive = local time).
        minutes: Duration in minutes.
        service: Optional PracticeService for testability.

    Returns:
        0 on success, 1 on invalid input or duplicate.
    """
    service = _default_service(service)
    return _report_result(service.log_session(started_at, minutes * 60))


def run_timer(action: str, service: PracticeService | None = None) -> int:
    """
    Control the live practice timer.

    Args:
        action: 'start', 'stop', 'cancel' or 'status'.
        service: Optional PracticeService for testability.

    Returns:
        0 on success, 1 if the action isn't possible (e.g. no timer).
    """
    from .presenters import format_clock

    service = _default_service(service)
    if action == "start":
        return _report_result(service.start_timer())
    if action == "stop":
        return _report_result(service.stop_timer())
    if action == "cancel":
        return _report_result(service.cancel_timer())

    seconds = service.timer_seconds()
    if seconds > 0:
        _log(f"Timer running: {format_clock(seconds)}", emoji="⏱️")
    else:
        _log("No timer running")
    return 0


def run_clear(confirmed: bool, service: PracticeService | None = None) -> int:
    """
    Delete every stored session.

    Milestones and a running timer are kept.

    Args:
        confirmed: Must be True (--yes); otherwise nothing is deleted.
        service: Optional PracticeService for testability.

    Returns:
        0 on success, 1 if storage could not be written, 2 without --yes.
    """
    if not confirmed:
        _log("Refusing to delete all sessions without --yes", emoji="⚠️")
        return 2
    service = _default_service(service)
    return _report_result(service.clear_sessions())


def main() -> int:
    """
    Main CLI entry point for Practice Tracker.

    Parses command-line arguments and dispatches to the appropriate
    subcommand handler. Without a subcommand the report is printed.

    Subcommands:
    - dashboard [--host HOST] [--port PORT]: Launch web dashboard
    - report [--range RANGE]: Print text report
    - import FILE: Import a CSV export
    - log STARTED_AT MINUTES: Log a finished session
    - timer {start,stop,cancel,status}: Live timer
    - clear --yes: Delete all sessions

    Returns:
        Exit code: 0 for success, 1 for a failed action, 2 for invalid
        arguments.

    Raises:
        SystemExit: On --help, --version or argument parsing errors.

    Example:
        >>> # From command line:
        >>> # practice-tracker report --range 1Y
        >>> sys.exit(main())
    """
    from .__version__ import __version__

    parser = argparse.ArgumentParser(
        prog="practice-tracker",
        description="Practice Tracker - lifetime daily average of your practice time",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Dashboard command
    dashboard_parser = subparsers.add_parser(
        "dashboard",
        help="Launch web dashboard",
    )
    dashboard_parser.add_argument(
        "--host",
        default=DEFAULT_HOST,
        help=f"Bind address (default: {DEFAULT_HOST})",
    )
    dashboard_parser.add_argument(
        "--port",
        type=int,
        default=DEFAULT_PORT,
        help=f"Port number (default: {DEFAULT_PORT})",
    )

    # Report command
    report_parser = subparsers.add_parser(
        "report",
        help="Print daily average report to stdout",
    )
    report_parser.add_argument(
        "--range",
        dest="range_token",
        default="1M",
        help="Window for the change line: 1W, 1M, 6M, 1Y, ALL (default: 1M)",
    )

    # Import command
    import_parser = subparsers.add_parser(
        "import",
        help="Import sessions from a CSV export",
    )
    import_parser.add_argument("file", help="CSV file with start time and duration columns")

    # Log command
    log_parser = subparsers.add_parser(
        "log",
        help="Log a finished practice session",
    )
    log_parser.add_argument("started_at", help="Start time, ISO 8601 (e.g. 2025-01-05T09:00)")
    log_parser.add_argument("minutes", type=float, help="Duration in minutes")

    # Timer command
    timer_parser = subparsers.add_parser(
        "timer",
        help="Control the live practice timer",
    )
    timer_parser.add_argument("action", choices=TIMER_ACTIONS)

    # Clear command
    clear_parser = subparsers.add_parser(
        "clear",
        help="Delete all logged sessions",
    )
    clear_parser.add_argument("--yes", action="store_true", help="Confirm deleting every session")

    args = parser.parse_args()

    if args.command == "dashboard":
        run_dashboard(host=args.host, port=args.port)
        return 0
    if args.command == "import":
        return run_import(args.file)
    if args.command == "log":
        return run_log(args.started_at, args.minutes)
    if args.command == "timer":
        return run_timer(args.action)
    if args.command == "clear":
        return run_clear(args.yes)
    if args.command == "report":
        return run_report(args.range_token)
    # Default: print the report
    return run_report()


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
