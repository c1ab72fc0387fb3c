"""
Encoding and date normalisation for loosely formatted holiday feeds.

The upstream file is Shift_JIS with dates written as ``2026/1/1``,
``2026/01/01`` or ``2026/1/1 0:00:00`` depending on the year it was
published, so every date goes through an ordered list of layouts and the
first one that parses wins.
"""
import codecs
import csv
import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Iterable, Iterator, List, Optional, Sequence, Union

from holiday_calendar.exceptions import DateParseError, EncodingError

log = logging.getLogger(__name__)

BOM = "\ufeff"

# Most specific first: slash before dash, date-only before the time fallback.
# strptime's %m / %d accept both zero-padded and bare numbers.
EXTRACT_LAYOUTS = ("%Y/%m/%d", "%Y-%m-%d", "%Y/%m/%d %H:%M:%S")
# Canonical form first, then the legacy slash form for hand-edited files.
LOADER_LAYOUTS = ("%Y-%m-%d", "%Y/%m/%d")

ISO_FORMAT = "%Y-%m-%d"

RawRecord = List[str]


@dataclass
class DecodeStats:
    lines: int = 0
    undecodable: int = 0


def _split_lines(byte_stream: Union[bytes, Iterable[bytes]]) -> Iterable[bytes]:
    if isinstance(byte_stream, (bytes, bytearray)):
        return bytes(byte_stream).splitlines(keepends=True)
    return byte_stream


def decode(
    byte_stream: Union[bytes, Iterable[bytes]],
    source_encoding: str,
    errors: str = "skip",
    stats: Optional[DecodeStats] = None,
) -> Iterator[str]:
    """Yield text lines decoded from ``byte_stream``.

    ``byte_stream`` is either a whole body or an iterable of byte lines.
    With ``errors="skip"`` a line that is invalid in ``source_encoding`` is
    logged and dropped; with ``errors="strict"`` it raises EncodingError.
    """
    try:
        codec = codecs.lookup(source_encoding)
    except LookupError as e:
        raise EncodingError(
            f"unknown encoding: {source_encoding}", {"encoding": source_encoding}
        ) from e

    if stats is None:
        stats = DecodeStats()
    for lineno, raw in enumerate(_split_lines(byte_stream), start=1):
        stats.lines += 1
        try:
            text = raw.decode(codec.name)
        except UnicodeDecodeError as e:
            err = EncodingError(
                f"line {lineno}: invalid {codec.name} byte sequence",
                {"line": lineno, "reason": e.reason},
            )
            if errors == "strict":
                raise err from e
            stats.undecodable += 1
            log.warning("Skipping undecodable line: %s", err.message)
            continue
        yield text


def iter_records(lines: Iterable[str]) -> Iterator[RawRecord]:
    """Split decoded CSV text into records. Rows may be ragged."""
    return iter(csv.reader(lines))


def strip_field_artifacts(field: str) -> str:
    """Trim whitespace and a leading byte-order mark. Idempotent."""
    field = field.strip()
    while field.startswith(BOM):
        field = field[len(BOM):].strip()
    return field


def normalize_record(record: Sequence[str]) -> RawRecord:
    return [strip_field_artifacts(f) for f in record]


def parse_date(text: str, layouts: Sequence[str]) -> date:
    """Return the date from the first layout in ``layouts`` that matches."""
    for layout in layouts:
        try:
            return datetime.strptime(text, layout).date()
        except ValueError:
            continue
    raise DateParseError(f"unparseable date: {text!r}", {"text": text})


def to_iso(d: date) -> str:
    return d.strftime(ISO_FORMAT)
