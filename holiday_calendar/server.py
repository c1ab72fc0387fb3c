"""
FastAPI calendar server.

Endpoints:
    GET  /?m=3            — HTML month calendar (m = 1..12)
    GET  /api/month?m=3   — same month as JSON
    GET  /health          — health check
    POST /refresh         — re-download holidays in the background

Usage:
    python -m holiday_calendar.server --port 8080 --csv holidays_2026.csv
"""
import os
import sys
import argparse
import logging
from datetime import datetime
from typing import Optional

from fastapi import FastAPI, Request, BackgroundTasks
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from holiday_calendar.config import (
    API_HOST, API_PORT, HOLIDAY_CSV, TARGET_YEAR, LOG_FORMAT,
)
from holiday_calendar.exceptions import HolidayCalendarError
from holiday_calendar.grid import DAY_ABBR, build_month, resolve_month
from holiday_calendar.loader import HolidayStore
from holiday_calendar.pipeline import prepare_table, refresh_holidays, refresh_in_progress

log = logging.getLogger(__name__)

TEMPLATES_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "templates")
templates = Jinja2Templates(directory=TEMPLATES_DIR)


def _bg_refresh(store: HolidayStore, year: int):
    try:
        refresh_holidays(store, target_year=year)
    except HolidayCalendarError as e:
        log.error("Refresh failed, keeping previous table: %s", e.message)


def create_app(store: HolidayStore, year: int = TARGET_YEAR) -> FastAPI:
    """Build the app around an already loaded holiday store."""
    app = FastAPI(
        title="Holiday Calendar",
        description="Monthly calendar with Japanese public holidays",
        version="1.0.0",
    )
    app.state.store = store
    app.state.year = year

    def _grid(request: Request, m: Optional[str]):
        state = request.app.state
        month = resolve_month(m, state.year)
        return build_month(state.year, month, state.store.current(), state.store.source_path)

    # ── Calendar page ───────────────────────────────────────────────
    @app.get("/", response_class=HTMLResponse)
    def calendar_page(request: Request, m: Optional[str] = None):
        grid = _grid(request, m)
        return templates.TemplateResponse(
            request,
            "calendar.html",
            {
                "year": grid.year,
                "month": grid.month,
                "weeks": grid.weeks,
                "prev_month_link": grid.prev_month_link,
                "next_month_link": grid.next_month_link,
                "source_path": grid.source_path,
                "day_abbr": DAY_ABBR,
            },
        )

    # ── Month as JSON ───────────────────────────────────────────────
    @app.get("/api/month")
    def month_json(request: Request, m: Optional[str] = None):
        grid = _grid(request, m)
        return {
            "year": grid.year,
            "month": grid.month,
            "weeks": [
                [
                    None if c.is_padding else {
                        "date": c.date.isoformat(),
                        "day": c.day,
                        "weekday": c.weekday,
                        "holiday": c.holiday,
                    }
                    for c in week
                ]
                for week in grid.weeks
            ],
            "prev_month_link": grid.prev_month_link,
            "next_month_link": grid.next_month_link,
            "source_path": grid.source_path,
        }

    # ── Health ──────────────────────────────────────────────────────
    @app.get("/health")
    def health(request: Request):
        state = request.app.state
        return {
            "status": "ok",
            "year": state.year,
            "holidays": len(state.store.current()),
            "source_path": state.store.source_path,
            "refreshing": refresh_in_progress(),
            "timestamp": datetime.now().isoformat(),
        }

    # ── Refresh ─────────────────────────────────────────────────────
    @app.post("/refresh")
    def trigger_refresh(request: Request, background_tasks: BackgroundTasks):
        """Re-download the holiday table in the background."""
        if refresh_in_progress():
            return {"status": "already_running"}
        state = request.app.state
        background_tasks.add_task(_bg_refresh, state.store, state.year)
        return {"status": "started"}

    return app


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Holiday calendar server")
    parser.add_argument("--host", default=API_HOST, help="Listen host")
    parser.add_argument("--port", type=int, default=API_PORT, help="Listen port")
    parser.add_argument("--csv", default=HOLIDAY_CSV,
                        help="Holiday table path (UTF-8, one year)")
    parser.add_argument("--year", type=int, default=TARGET_YEAR,
                        help=f"Calendar year (default {TARGET_YEAR})")
    parser.add_argument("--force", action="store_true",
                        help="Re-download even if the table file exists")
    return parser


def load_store(args) -> HolidayStore:
    """Prepare the table for ``args`` or exit the process."""
    try:
        table = prepare_table(args.csv, args.year, force=args.force)
    except HolidayCalendarError as e:
        log.error("Failed to prepare holidays: %s", e.message)
        sys.exit(1)
    return HolidayStore(table, source_path=args.csv)


# ── Run server ──────────────────────────────────────────────────────
if __name__ == "__main__":
    import uvicorn

    args = build_parser().parse_args()
    logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)

    store = load_store(args)
    log.info("Server start at http://localhost:%d/ (CSV: %s)", args.port, args.csv)
    uvicorn.run(create_app(store, args.year), host=args.host, port=args.port)
