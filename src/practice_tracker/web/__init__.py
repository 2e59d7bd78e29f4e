"""
Web dashboard module for Practice Tracker.

PURPOSE: FastAPI-based web UI with htmx for dynamic updates.
AI CONTEXT: Thin HTTP layer over presenters and PracticeService.

FEATURES:
- Lifetime daily-average dashboard with range selector (1W-ALL)
- Today's intraday curve with live timer
- Server-side chart rendering (matplotlib)
- JSON endpoints for scripts and other clients

USAGE:
    # Via CLI
    practice-tracker dashboard

    # Programmatically
    from practice_tracker.web import create_app
    app = create_app()
    # Run with uvicorn
"""

from .app import create_app, run_dashboard

__all__ = ["create_app", "run_dashboard"]
