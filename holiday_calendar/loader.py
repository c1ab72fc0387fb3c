"""
Load pass — reads the canonical holiday table into an immutable lookup.

Runs on every start (and after every refresh); the result is shared
read-only by all request handlers.
"""
import logging
from collections.abc import Mapping
from typing import Dict, Iterable, Iterator, Optional

import pandas as pd

from holiday_calendar.config import PLACEHOLDER_LABEL
from holiday_calendar.exceptions import ArtifactIOError, DateParseError
from holiday_calendar.normalize import (
    LOADER_LAYOUTS, RawRecord, normalize_record, parse_date, to_iso,
)

log = logging.getLogger(__name__)


class HolidayTable(Mapping):
    """Read-only mapping of ``YYYY-MM-DD`` → holiday label."""

    def __init__(self, entries: Optional[Dict[str, str]] = None):
        self._data = dict(entries or {})

    def __getitem__(self, iso_date: str) -> str:
        return self._data[iso_date]

    def __iter__(self):
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"HolidayTable({len(self._data)} entries)"

    def lookup(self, iso_date: str) -> Optional[str]:
        return self._data.get(iso_date)


class HolidayStore:
    """Holds the current table; ``replace`` swaps in a fully built one."""

    def __init__(self, table: HolidayTable, source_path: str = ""):
        self._table = table
        self.source_path = source_path

    def current(self) -> HolidayTable:
        return self._table

    def replace(self, table: HolidayTable) -> None:
        # single reference assignment; readers see the old or the new table
        self._table = table


def load(table_rows: Iterable[RawRecord]) -> HolidayTable:
    """Build a HolidayTable from ``date,label`` rows.

    Rows with unparseable dates are skipped. Empty labels become the
    placeholder label. A date that appears twice keeps the later label.
    """
    result: Dict[str, str] = {}
    skipped = 0
    for record in table_rows:
        if not record:
            continue
        fields = normalize_record(record)
        try:
            dt = parse_date(fields[0], LOADER_LAYOUTS)
        except DateParseError as e:
            skipped += 1
            log.debug("Skipping row: %s", e.message)
            continue
        label = fields[1] if len(fields) >= 2 and fields[1] else PLACEHOLDER_LABEL
        result[to_iso(dt)] = label
    if skipped:
        log.warning("Skipped %d rows with unparseable dates", skipped)
    return HolidayTable(result)


def read_table(path: str) -> Iterator[RawRecord]:
    """Yield ``[date, label]`` rows from the table file at ``path``."""
    try:
        df = pd.read_csv(
            path,
            header=None,
            names=["date", "label"],
            dtype=str,
            keep_default_na=False,
            index_col=False,
            encoding="utf-8",
            engine="python",
            # ragged rows keep only date and label
            on_bad_lines=lambda fields: fields[:2],
        )
    except pd.errors.EmptyDataError:
        return iter(())
    except (OSError, UnicodeDecodeError, pd.errors.ParserError) as e:
        raise ArtifactIOError(f"read {path}: {e}", {"path": path}) from e
    df = df.fillna("")
    return ([d, label] for d, label in zip(df["date"], df["label"]))


def load_holidays(path: str) -> HolidayTable:
    table = load(read_table(path))
    log.info("Loaded %d holidays from %s", len(table), path)
    return table
