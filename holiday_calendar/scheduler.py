"""
Scheduler — keeps the holiday table fresh.

Two modes:
  1. python -m holiday_calendar.scheduler --once     (extract once, then exit)
  2. python -m holiday_calendar.scheduler --service  (server + daily refresh)
"""
import argparse
import logging
import threading
import time

import schedule

from holiday_calendar.config import (
    API_HOST, API_PORT, HOLIDAY_CSV, TARGET_YEAR, REFRESH_AT, LOG_FORMAT,
)
from holiday_calendar.exceptions import HolidayCalendarError
from holiday_calendar.loader import HolidayStore
from holiday_calendar.pipeline import prepare_table, refresh_holidays

log = logging.getLogger(__name__)


def _daily_refresh(store: HolidayStore, year: int):
    """Re-extract and swap; a failed run keeps the current table."""
    log.info("Scheduled holiday refresh")
    try:
        refresh_holidays(store, target_year=year)
    except HolidayCalendarError as e:
        log.error("Scheduled refresh failed: %s", e.message)


def schedule_refresh(store: HolidayStore, year: int, at: str = REFRESH_AT):
    return schedule.every().day.at(at).do(_daily_refresh, store, year)


def run_once(csv_path: str, year: int):
    """Download and extract once."""
    table = prepare_table(csv_path, year, force=True)
    log.info("Extracted %d holidays into %s", len(table), csv_path)


def run_service(csv_path: str, year: int, host: str, port: int, force: bool):
    """Load the table, start the refresh thread, then serve (blocking)."""
    import uvicorn
    from holiday_calendar.server import create_app

    table = prepare_table(csv_path, year, force=force)
    store = HolidayStore(table, source_path=csv_path)

    def _sched_thread():
        schedule_refresh(store, year)
        log.info("Background refresh: daily at %s", REFRESH_AT)
        while True:
            schedule.run_pending()
            time.sleep(60)

    t = threading.Thread(target=_sched_thread, daemon=True)
    t.start()

    log.info("Starting server on %s:%d", host, port)
    uvicorn.run(create_app(store, year), host=host, port=port)


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Holiday calendar scheduler")
    group = parser.add_mutually_exclusive_group(required=True)
    group.add_argument("--once", action="store_true",
                       help="Extract once, then exit")
    group.add_argument("--service", action="store_true",
                       help="Run server with a daily refresh")
    parser.add_argument("--csv", default=HOLIDAY_CSV)
    parser.add_argument("--year", type=int, default=TARGET_YEAR)
    parser.add_argument("--host", default=API_HOST)
    parser.add_argument("--port", type=int, default=API_PORT)
    parser.add_argument("--force", action="store_true",
                        help="Re-download on start (service mode)")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)
    try:
        if args.once:
            run_once(args.csv, args.year)
        else:
            run_service(args.csv, args.year, args.host, args.port, args.force)
    except HolidayCalendarError as e:
        log.error("Fatal: %s", e.message)
        raise SystemExit(1)
