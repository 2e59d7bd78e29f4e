"""Version information for practice-tracker."""

__version__ = "1.2.0"
__version_date__ = "2026-10-16"

__title__ = "practice_tracker"
__description__ = "Lifetime daily-average practice tracker with intraday reconstruction"
__url__ = "https://github.com/practice-tracker/practice-tracker"

__author__ = "Practice Tracker Contributors"

__license__ = "MIT"
__copyright__ = "Copyright 2026 Practice Tracker Contributors"

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
