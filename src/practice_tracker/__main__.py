"""
Package entry point for python -m execution.

USAGE:
    python -m practice_tracker report            # Print text report
    python -m practice_tracker dashboard         # Launch web dashboard
    python -m practice_tracker import FILE.csv   # Import a CSV export
"""

import sys

from practice_tracker.cli import main

if __name__ == "__main__":
    sys.exit(main())
