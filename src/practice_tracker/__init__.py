"""
Practice Tracker.

PURPOSE: Turn logged practice sessions into a lifetime "daily average" metric.
AI CONTEXT: The analytics engine is pure; everything else is plumbing around it.

PACKAGE STRUCTURE:
- analytics.py: Daily aggregation, cumulative average, ranges, intraday model
- milestones.py: Goal forecasts and milestone lookups
- models.py: Data models (PracticeSession, DailyDataPoint, IntradayDataPoint)
- csv_import.py: CSV export importer producing raw session records
- storage.py: JSON file persistence
- practice_service.py: Shared business operations for CLI and web
- presenters.py: View models, formatting and matplotlib charts
- web/: FastAPI dashboard
- config.py: Configuration constants

QUICK START:
    # Import an export and print the report
    practice-tracker import sessions.csv
    practice-tracker report --range 1M

    # Launch dashboard
    practice-tracker dashboard
"""

from practice_tracker.__version__ import (
    __author__,
    __copyright__,
    __description__,
    __license__,
    __title__,
    __url__,
    __version__,
    __version_date__,
)

__all__ = [
    "__version__",
    "__version_date__",
    "__title__",
    "__description__",
    "__url__",
    "__author__",
    "__license__",
    "__copyright__",
]
