"""
Extraction pass — downloads the Cabinet Office holiday CSV, keeps the rows
for one year and writes them as a UTF-8 ``YYYY-MM-DD,label`` table.

Usage:
    python -m holiday_calendar.extractor               # default year / path
    python -m holiday_calendar.extractor --year 2027 --csv holidays_2027.csv
"""
import os
import argparse
import logging
import tempfile
from dataclasses import dataclass, asdict
from typing import Iterable, List, NamedTuple, Optional

import requests
import pandas as pd

from holiday_calendar.config import (
    SOURCE_URL, SOURCE_ENCODING, FETCH_HEADERS, FETCH_TIMEOUT,
    TARGET_YEAR, HOLIDAY_CSV, LOG_FORMAT,
)
from holiday_calendar.exceptions import ArtifactIOError, DateParseError, FetchError
from holiday_calendar.normalize import (
    EXTRACT_LAYOUTS, DecodeStats, RawRecord,
    decode, iter_records, normalize_record, parse_date, to_iso,
)

log = logging.getLogger(__name__)


class HolidayEntry(NamedTuple):
    iso_date: str
    label: str


@dataclass
class ExtractStats:
    rows: int = 0
    kept: int = 0
    unparseable: int = 0
    out_of_range: int = 0
    undecodable: int = 0

    def summary(self) -> str:
        return " ".join(f"{k}={v}" for k, v in asdict(self).items())


# ── Core ────────────────────────────────────────────────────────────
def extract(
    raw_rows: Iterable[RawRecord],
    target_year: int,
    stats: Optional[ExtractStats] = None,
) -> List[HolidayEntry]:
    """Return the rows dated in ``target_year``, in source order.

    Unparseable dates (including the header row) are dropped and counted.
    Labels are copied verbatim; an empty label stays empty here.
    """
    if stats is None:
        stats = ExtractStats()
    entries = []
    for record in raw_rows:
        if not record:
            continue
        stats.rows += 1
        fields = normalize_record(record)
        try:
            dt = parse_date(fields[0], EXTRACT_LAYOUTS)
        except DateParseError as e:
            stats.unparseable += 1
            log.debug("Skipping row %d: %s", stats.rows, e.message)
            continue
        if dt.year != target_year:
            stats.out_of_range += 1
            continue
        label = fields[1] if len(fields) >= 2 else ""
        entries.append(HolidayEntry(to_iso(dt), label))
        stats.kept += 1
    return entries


# ── Collaborators ───────────────────────────────────────────────────
def fetch_source(url: str = SOURCE_URL, timeout: float = FETCH_TIMEOUT) -> bytes:
    """GET the raw upstream body. Any failure is a FetchError."""
    try:
        resp = requests.get(url, headers=FETCH_HEADERS, timeout=timeout)
    except requests.RequestException as e:
        raise FetchError(f"http get {url}: {e}", {"url": url}) from e
    if resp.status_code != 200:
        raise FetchError(
            f"bad status: {resp.status_code} {resp.reason}",
            {"url": url, "status": resp.status_code},
        )
    return resp.content


def write_table(entries: Iterable[HolidayEntry], path: str) -> None:
    """Write ``entries`` as a headerless two-column UTF-8 CSV.

    The file is written next to ``path`` first and renamed into place.
    """
    df = pd.DataFrame(list(entries), columns=list(HolidayEntry._fields))
    directory = os.path.dirname(os.path.abspath(path))
    try:
        fd, tmp_path = tempfile.mkstemp(
            prefix=".holidays-", suffix=".csv", dir=directory
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
                df.to_csv(f, header=False, index=False)
            os.replace(tmp_path, path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise
    except OSError as e:
        raise ArtifactIOError(f"write {path}: {e}", {"path": path}) from e


def download_and_extract(
    url: str = SOURCE_URL,
    out_path: str = HOLIDAY_CSV,
    target_year: int = TARGET_YEAR,
    timeout: float = FETCH_TIMEOUT,
    encoding: str = SOURCE_ENCODING,
) -> ExtractStats:
    """Fetch → decode → extract → write. Returns the pass counters."""
    log.info("Downloading and extracting %d holidays -> %s", target_year, out_path)
    body = fetch_source(url, timeout=timeout)

    dstats = DecodeStats()
    stats = ExtractStats()
    records = iter_records(decode(body, encoding, stats=dstats))
    entries = extract(records, target_year, stats=stats)
    stats.undecodable = dstats.undecodable

    write_table(entries, out_path)
    log.info("Extraction complete: %s", stats.summary())
    if stats.unparseable or stats.undecodable:
        log.warning(
            "Dropped %d unparseable and %d undecodable rows from %s",
            stats.unparseable, stats.undecodable, url,
        )
    return stats


# ── CLI ─────────────────────────────────────────────────────────────
if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Holiday CSV extractor")
    parser.add_argument("--url", default=SOURCE_URL, help="Upstream CSV URL")
    parser.add_argument("--csv", default=HOLIDAY_CSV, help="Output table path")
    parser.add_argument("--year", type=int, default=TARGET_YEAR,
                        help=f"Year to keep (default {TARGET_YEAR})")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)
    download_and_extract(args.url, args.csv, args.year)
