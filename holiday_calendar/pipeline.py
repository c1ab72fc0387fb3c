"""
Startup and refresh orchestration.

    prepare_table   — download if needed (or forced), then load
    refresh_holidays — re-download, reload and swap the served table
"""
import os
import logging
import threading

from holiday_calendar.config import SOURCE_URL, HOLIDAY_CSV, TARGET_YEAR, FETCH_TIMEOUT
from holiday_calendar.extractor import download_and_extract
from holiday_calendar.loader import HolidayStore, HolidayTable, load_holidays

log = logging.getLogger(__name__)

# One refresh at a time
_refresh_lock = threading.Lock()


def prepare_table(
    csv_path: str = HOLIDAY_CSV,
    target_year: int = TARGET_YEAR,
    force: bool = False,
    url: str = SOURCE_URL,
    timeout: float = FETCH_TIMEOUT,
) -> HolidayTable:
    """Make sure the table file exists, then load it.

    FetchError and ArtifactIOError propagate; both are fatal at startup.
    """
    if force or not os.path.exists(csv_path):
        download_and_extract(url, csv_path, target_year, timeout=timeout)
    else:
        log.info("Using existing %s (use --force to re-download)", csv_path)
    return load_holidays(csv_path)


def refresh_in_progress() -> bool:
    return _refresh_lock.locked()


def refresh_holidays(
    store: HolidayStore,
    target_year: int = TARGET_YEAR,
    url: str = SOURCE_URL,
    timeout: float = FETCH_TIMEOUT,
) -> bool:
    """Re-extract into ``store.source_path`` and swap the new table in.

    Returns False if another refresh was already running. On failure the
    old table keeps being served and the error propagates.
    """
    if not _refresh_lock.acquire(blocking=False):
        log.info("Refresh already running — skipped")
        return False
    try:
        table = prepare_table(store.source_path, target_year, force=True,
                              url=url, timeout=timeout)
        store.replace(table)
        log.info("Holiday table refreshed (%d entries)", len(table))
        return True
    finally:
        _refresh_lock.release()
