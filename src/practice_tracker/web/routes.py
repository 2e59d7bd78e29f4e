"""
FastAPI routes for the Practice Tracker dashboard.

PURPOSE: Thin route handlers that delegate to presenters and the service.
AI CONTEXT: Routes should be simple - business logic in presenters.

ROUTE STRUCTURE:
- / : Main dashboard page (full HTML)
- /partials/* : htmx partial updates
- /charts/* : PNG chart images
- /api/* : JSON endpoints for programmatic access

TIMER SECONDS:
Endpoints that show the live average accept an optional timer_seconds
query parameter. When omitted, the elapsed time of the stored running
timer is used.
"""

from __future__ import annotations

import html
import logging
from typing import Annotated, Any

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import HTMLResponse, JSONResponse, Response
from pydantic import BaseModel

from ..analytics import AnalyticsEngine
from ..config import Config
from ..practice_service import PracticeService, ServiceResult
from ..presenters import (
    ChartPresenter,
    DashboardOverview,
    DashboardPresenter,
    IntradayViewModel,
    format_clock,
    format_duration_seconds,
    format_hours_minutes,
)
from ..storage import StorageManager

__all__ = [
    "router",
    "get_storage",
    "get_engine",
    "get_service",
    "get_dashboard_presenter",
    "get_chart_presenter",
]

logger = logging.getLogger(__name__)

router = APIRouter()

_DASHBOARD_CSS = """
:root {
    --bg: #0f172a;
    --surface: #1e293b;
    --border: #334155;
    --text: #f1f5f9;
    --text-muted: #94a3b8;
    --primary: #3b82f6;
    --success: #22c55e;
    --warning: #f59e0b;
    --danger: #ef4444;
}
* { box-sizing: border-box; margin: 0; padding: 0; }
body {
    font-family: system-ui, -apple-system, sans-serif;
    background: var(--bg);
    color: var(--text);
    line-height: 1.6;
    padding: 1rem;
}
.container { max-width: 1100px; margin: 0 auto; }
header {
    display: flex;
    justify-content: space-between;
    align-items: center;
    margin-bottom: 1.5rem;
    padding-bottom: 1rem;
    border-bottom: 1px solid var(--border);
}
h1 { font-size: 1.5rem; font-weight: 600; }
.grid {
    display: grid;
    grid-template-columns: repeat(auto-fit, minmax(280px, 1fr));
    gap: 1rem;
    margin-bottom: 1rem;
}
.panel {
    background: var(--surface);
    border: 1px solid var(--border);
    border-radius: 0.5rem;
    padding: 1rem;
    margin-bottom: 1rem;
}
.panel h2 {
    font-size: 1rem;
    font-weight: 500;
    color: var(--text-muted);
    margin-bottom: 0.75rem;
}
.metric { font-size: 2.25rem; font-weight: 700; }
.metric-label { font-size: 0.875rem; color: var(--text-muted); }
.delta-up { color: var(--success); }
.delta-down { color: var(--danger); }
.delta-flat { color: var(--text-muted); }
.progress {
    height: 0.4rem;
    background: var(--border);
    border-radius: 9999px;
    overflow: hidden;
    margin-top: 0.5rem;
}
.progress-fill { height: 100%; background: var(--primary); }
.ranges a {
    color: var(--text-muted);
    text-decoration: none;
    margin-right: 0.75rem;
    font-weight: 500;
}
.ranges a.active { color: var(--primary); }
.timer button {
    background: var(--primary);
    color: white;
    border: none;
    border-radius: 0.25rem;
    padding: 0.4rem 0.8rem;
    margin-right: 0.5rem;
    cursor: pointer;
}
.timer button.secondary { background: var(--border); }
table { width: 100%; border-collapse: collapse; }
th, td {
    text-align: left;
    padding: 0.5rem;
    border-bottom: 1px solid var(--border);
}
th { color: var(--text-muted); font-weight: 500; font-size: 0.875rem; }
.chart-container { display: flex; justify-content: center; padding: 0.5rem 0; }
.chart-container img { max-width: 100%; height: auto; border-radius: 0.25rem; }
footer {
    margin-top: 2rem;
    padding-top: 1rem;
    border-top: 1px solid var(--border);
    color: var(--text-muted);
    font-size: 0.875rem;
    text-align: center;
}
"""

# =============================================================================
# Dependency Factory Functions
# =============================================================================


def get_storage() -> StorageManager:
    """
    Create and return a StorageManager instance for data access.

    Creates a new StorageManager each time to ensure fresh file reads
    (the CLI may have logged sessions since the last request).

    Returns:
        StorageManager using Config.get_storage_dir().
    """
    return StorageManager()


def get_engine() -> AnalyticsEngine:
    """
    Create and return an AnalyticsEngine using the real clock.

    Returns:
        AnalyticsEngine configured from Config (timezone, visual start).
    """
    return AnalyticsEngine()


def get_service() -> PracticeService:
    """
    Create and return a PracticeService with default dependencies.

    Business context: Logging sessions, imports and the live timer all go
    through the same service the CLI uses, so both front ends behave
    identically.
    """
    return PracticeService(get_storage(), get_engine())


def get_dashboard_presenter() -> DashboardPresenter:
    """
    Create and return a DashboardPresenter with dependencies.

    Returns:
        DashboardPresenter with injected StorageManager and AnalyticsEngine.

    Example:
        >>> presenter = get_dashboard_presenter()
        >>> presenter.get_overview("1M").has_data
        True
    """
    return DashboardPresenter(get_storage(), get_engine())


def get_chart_presenter() -> ChartPresenter:
    """Create and return a ChartPresenter for server-side PNG rendering."""
    return ChartPresenter(get_dashboard_presenter())


def _resolve_timer(service: PracticeService, timer_seconds: float | None) -> float:
    return service.timer_seconds() if timer_seconds is None else timer_seconds


def _result_response(result: ServiceResult) -> JSONResponse:
    """Serialize a ServiceResult; failures map to HTTP 400."""
    return JSONResponse(content=result.to_dict(), status_code=200 if result.success else 400)


class SessionPayload(BaseModel):
    """Body of POST /api/sessions."""

    started_at: str
    duration_seconds: float


class MilestonePayload(BaseModel):
    """Body of POST /api/milestones."""

    hours: int
    description: str


# ============================================================================
# Full Page Routes
# ============================================================================


@router.get("/", response_class=HTMLResponse)
async def dashboard_page(
    presenter: Annotated[DashboardPresenter, Depends(get_dashboard_presenter)],
    service: Annotated[PracticeService, Depends(get_service)],
    range_token: Annotated[str, Query(alias="range")] = "1M",
) -> HTMLResponse:
    """
    Render the main dashboard page.

    Business context: The page a user opens every day - the headline
    average, how it moved over the chosen window, today's curve and the
    live practice timer.

    Args:
        presenter: DashboardPresenter injected via FastAPI Depends.
        service: PracticeService, for the running timer.
        range_token: Chart window from the ?range= query parameter.

    Returns:
        HTMLResponse with the complete dashboard page.

    Raises:
        HTTPException: 400 for an unknown range.
    """
    timer_seconds = service.timer_seconds()
    try:
        overview = presenter.get_overview(range_token, timer_seconds)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    intraday = presenter.get_intraday(timer_seconds)

    page = _render_dashboard_html(overview, intraday, timer_seconds)
    return HTMLResponse(content=page, media_type="text/html; charset=utf-8")


# ============================================================================
# Partial Routes (htmx)
# ============================================================================


@router.get("/partials/metric", response_class=HTMLResponse)
async def metric_partial(
    presenter: Annotated[DashboardPresenter, Depends(get_dashboard_presenter)],
    service: Annotated[PracticeService, Depends(get_service)],
    range_token: Annotated[str, Query(alias="range")] = "1M",
) -> HTMLResponse:
    """
    Render the headline metric panel for htmx polling.

    Polled while the timer runs so the average and the "next second"
    progress bar move without reloading the page.
    """
    try:
        overview = presenter.get_overview(range_token, service.timer_seconds())
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    return HTMLResponse(content=_render_metric_panel(overview), media_type="text/html; charset=utf-8")


# ============================================================================
# Chart Routes
# ============================================================================


@router.get("/charts/range/{token}.png")
async def range_chart(
    token: str,
    presenter: Annotated[ChartPresenter, Depends(get_chart_presenter)],
    service: Annotated[PracticeService, Depends(get_service)],
    timer_seconds: float | None = None,
) -> Response:
    """
    Serve the daily-average chart for a range as PNG.

    Raises:
        HTTPException: 400 for an unknown range.
    """
    try:
        png_bytes = presenter.render_range_chart(token, _resolve_timer(service, timer_seconds))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    return Response(content=png_bytes, media_type="image/png")


@router.get("/charts/intraday.png")
async def intraday_chart(
    presenter: Annotated[ChartPresenter, Depends(get_chart_presenter)],
    service: Annotated[PracticeService, Depends(get_service)],
    timer_seconds: float | None = None,
) -> Response:
    """Serve today's intraday average curve as PNG."""
    png_bytes = presenter.render_intraday_chart(_resolve_timer(service, timer_seconds))
    return Response(content=png_bytes, media_type="image/png")


# ============================================================================
# API Routes (JSON)
# ============================================================================


@router.get("/api/analytics")
async def api_analytics(
    service: Annotated[PracticeService, Depends(get_service)],
    include_daily: bool = False,
) -> dict[str, Any]:
    """
    Lifetime analytics as JSON.

    Args:
        service: PracticeService injected via FastAPI Depends.
        include_daily: Include the full zero-filled daily series.

    Returns:
        {'has_data': False} before the first session, otherwise totals,
        current average, start/end dates and optionally 'daily_data'.

    Example:
        >>> # GET /api/analytics
        >>> {"has_data": true, "total_hours": 6.0, "total_days": 3, ...}
    """
    result = service.get_analytics()
    if result is None:
        return {"has_data": False}
    return {"has_data": True, **result.to_dict(include_daily=include_daily)}


@router.get("/api/summary")
async def api_summary(
    service: Annotated[PracticeService, Depends(get_service)],
    timer_seconds: float | None = None,
) -> JSONResponse:
    """Headline numbers including the running timer."""
    return _result_response(service.get_summary(timer_seconds))


@router.get("/api/range/{token}")
async def api_range(
    token: str,
    presenter: Annotated[DashboardPresenter, Depends(get_dashboard_presenter)],
    service: Annotated[PracticeService, Depends(get_service)],
    timer_seconds: float | None = None,
) -> dict[str, Any]:
    """
    Chart series, delta and forecast for a range as JSON.

    Args:
        token: '1W', '1M', '6M', '1Y', 'ALL' or 'MAX' (any case).
        timer_seconds: Unsaved timer seconds; default the stored timer.

    Returns:
        DashboardOverview.to_dict().

    Raises:
        HTTPException: 400 for an unknown range.
    """
    try:
        overview = presenter.get_overview(token, _resolve_timer(service, timer_seconds))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    return overview.to_dict()


@router.get("/api/intraday")
async def api_intraday(
    presenter: Annotated[DashboardPresenter, Depends(get_dashboard_presenter)],
    service: Annotated[PracticeService, Depends(get_service)],
    timer_seconds: float | None = None,
) -> dict[str, Any]:
    """Today's reconstructed average curve as JSON."""
    return presenter.get_intraday(_resolve_timer(service, timer_seconds)).to_dict()


@router.get("/api/forecast")
async def api_forecast(
    presenter: Annotated[DashboardPresenter, Depends(get_dashboard_presenter)],
    service: Annotated[PracticeService, Depends(get_service)],
) -> dict[str, Any]:
    """Goal and next-milestone projections, or {'forecast': None} without data."""
    overview = presenter.get_overview("ALL", service.timer_seconds())
    return {"forecast": overview.forecast.to_dict() if overview.forecast else None}


@router.get("/api/milestones")
async def api_milestones(
    service: Annotated[PracticeService, Depends(get_service)],
    step: Annotated[int, Query(gt=0)] = 100,
) -> dict[str, Any]:
    """Crossed interval milestones plus custom markers."""
    return {"milestones": [m.to_dict() for m in service.get_milestones(step)]}


@router.post("/api/milestones")
async def api_add_milestone(
    payload: MilestonePayload,
    service: Annotated[PracticeService, Depends(get_service)],
) -> JSONResponse:
    """Record a custom milestone marker."""
    return _result_response(service.add_milestone(payload.hours, payload.description))


@router.post("/api/sessions")
async def api_log_session(
    payload: SessionPayload,
    service: Annotated[PracticeService, Depends(get_service)],
) -> JSONResponse:
    """
    Log a finished practice session.

    Returns:
        ServiceResult JSON; HTTP 400 on invalid input or a duplicate start.
    """
    return _result_response(service.log_session(payload.started_at, payload.duration_seconds))


@router.post("/api/import")
async def api_import_csv(
    request: Request,
    service: Annotated[PracticeService, Depends(get_service)],
) -> JSONResponse:
    """
    Import a CSV export sent as the raw request body.

    Example:
        >>> # curl --data-binary @export.csv http://127.0.0.1:8000/api/import
    """
    body = await request.body()
    try:
        content = body.decode("utf-8-sig")
    except UnicodeDecodeError:
        return _result_response(
            ServiceResult(success=False, message="CSV import failed", error="File must be UTF-8 encoded")
        )
    return _result_response(service.import_csv(content))


@router.post("/api/timer/start")
async def api_timer_start(service: Annotated[PracticeService, Depends(get_service)]) -> JSONResponse:
    """Start the live practice timer."""
    return _result_response(service.start_timer())


@router.post("/api/timer/stop")
async def api_timer_stop(service: Annotated[PracticeService, Depends(get_service)]) -> JSONResponse:
    """Stop the timer and log the elapsed time as a session."""
    return _result_response(service.stop_timer())


@router.post("/api/timer/cancel")
async def api_timer_cancel(service: Annotated[PracticeService, Depends(get_service)]) -> JSONResponse:
    """Discard the running timer."""
    return _result_response(service.cancel_timer())


# ============================================================================
# HTML Rendering
# ============================================================================


def _render_metric_panel(overview: DashboardOverview) -> str:
    """
    Render the headline average panel.

    Returns:
        HTML fragment with the average, the range delta and the
        "next second" progress bar; an onboarding hint without data.
    """
    if not overview.has_data:
        return """<h2>Daily Average</h2>
            <div class="metric">0s</div>
            <div class="metric-label">Log a session or import a CSV export to get started.</div>"""

    progress = max(0.0, min(100.0, overview.average_progress))
    return f"""<h2>Daily Average</h2>
            <div class="metric">{overview.average_display}</div>
            <div class="metric-label">
                <span class="{overview.delta_class}">{overview.delta_display}</span>
                over {overview.range_token} &bull; {overview.total_display} in {overview.total_days} days
            </div>
            <div class="progress"><div class="progress-fill" style="width: {progress:.1f}%"></div></div>"""


def _render_range_selector(active: str) -> str:
    links = "".join(
        f'<a href="/?range={token}" class="{"active" if token == active else ""}">{token}</a>'
        for token in Config.RANGE_TOKENS
    )
    return f'<div class="ranges">{links}</div>'


def _render_forecast_panel(overview: DashboardOverview) -> str:
    """Render goal and next-milestone projections as a table."""
    if overview.forecast is None:
        return "<h2>Forecast</h2><p class='metric-label'>No data yet.</p>"

    rows = []
    for item in (overview.forecast.goal, *overview.forecast.next_milestones):
        when = item.projected_date.isoformat() if item.projected_date else "never at this pace"
        days = f"{item.days:,} days" if item.days is not None else "-"
        rows.append(
            f"<tr><td>{item.milestone:,}h</td><td>{format_hours_minutes(item.hours_remaining)}</td>"
            f"<td>{days}</td><td>{when}</td></tr>"
        )
    return f"""<h2>Forecast</h2>
        <table>
            <thead><tr><th>Target</th><th>Remaining</th><th>Days</th><th>Date</th></tr></thead>
            <tbody>{"".join(rows)}</tbody>
        </table>"""


def _render_increase_panel(overview: DashboardOverview) -> str:
    """Render how long to play today to raise the average by a few seconds."""
    rows = "".join(
        f"<tr><td>+{delta}s</td><td>{format_duration_seconds(needed)}</td></tr>"
        for delta, needed in overview.increase_steps
    )
    return f"""<h2>Play Today To Gain</h2>
        <table><tbody>{rows}</tbody></table>"""


def _render_milestones_panel(overview: DashboardOverview) -> str:
    """Render the most recent milestones, newest first."""
    if not overview.milestones:
        return "<h2>Milestones</h2><p class='metric-label'>First milestone at 100h.</p>"
    rows = "".join(
        f"<tr><td>{m.hours:,}h</td><td>{html.escape(m.description or '')}</td>"
        f"<td>{html.escape((m.achieved_at or '')[:10])}</td></tr>"
        for m in reversed(overview.milestones[-10:])
    )
    return f"""<h2>Milestones</h2>
        <table><tbody>{rows}</tbody></table>"""


def _render_timer_panel(intraday: IntradayViewModel, timer_seconds: float) -> str:
    """Render today's totals and the timer controls."""
    if timer_seconds > 0:
        controls = """<button hx-post="/api/timer/stop" hx-swap="none" hx-on::after-request="location.reload()">Stop</button>
            <button class="secondary" hx-post="/api/timer/cancel" hx-swap="none" hx-on::after-request="location.reload()">Cancel</button>"""
        state = f"Running: {format_clock(timer_seconds)}"
    else:
        controls = """<button hx-post="/api/timer/start" hx-swap="none" hx-on::after-request="location.reload()">Start</button>"""
        state = "Timer stopped"
    return f"""<h2>Today</h2>
        <div class="metric">{intraday.today_display}</div>
        <div class="metric-label">{state} &bull; {intraday.delta_display} vs. yesterday</div>
        <div class="timer" style="margin-top: 0.75rem;">{controls}</div>"""


def _render_dashboard_html(
    overview: DashboardOverview,
    intraday: IntradayViewModel,
    timer_seconds: float,
) -> str:
    """
    Render the complete dashboard HTML page.

    Args:
        overview: Range view model (metric, chart window, forecast).
        intraday: Today's view model.
        timer_seconds: Elapsed running-timer seconds (0 when stopped).

    Returns:
        Complete HTML document with embedded CSS and htmx.
    """
    token = overview.range_token
    poll = ' hx-trigger="every 5s"' if timer_seconds > 0 else ' hx-trigger="every 60s"'

    return f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>Practice Tracker</title>
    <script src="https://unpkg.com/htmx.org@1.9.10"></script>
    <style>
        {_DASHBOARD_CSS}
    </style>
</head>
<body>
    <div class="container">
        <header>
            <h1>Practice Tracker</h1>
            {_render_range_selector(token)}
        </header>

        <div class="grid">
            <div class="panel" id="metric-panel"
                 hx-get="/partials/metric?range={token}"{poll}
                 hx-swap="innerHTML">
                {_render_metric_panel(overview)}
            </div>
            <div class="panel" id="today-panel">
                {_render_timer_panel(intraday, timer_seconds)}
            </div>
        </div>

        <div class="panel">
            <h2>Daily Average &bull; {token}</h2>
            <div class="chart-container">
                <img src="/charts/range/{token}.png" alt="Daily average chart">
            </div>
        </div>

        <div class="panel">
            <h2>Today</h2>
            <div class="chart-container">
                <img src="/charts/intraday.png" alt="Intraday chart">
            </div>
        </div>

        <div class="grid">
            <div class="panel">{_render_forecast_panel(overview)}</div>
            <div class="panel">{_render_increase_panel(overview)}</div>
            <div class="panel">{_render_milestones_panel(overview)}</div>
        </div>

        <footer>
            Practice Tracker &bull; Powered by FastAPI + htmx
        </footer>
    </div>
</body>
</html>"""
