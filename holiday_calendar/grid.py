"""Pure calendar calculations — no web or I/O dependencies."""
from dataclasses import dataclass
import datetime
from typing import List, Mapping, Optional

from holiday_calendar.normalize import to_iso

DAY_ABBR = ["日", "月", "火", "水", "木", "金", "土"]  # Sunday first


@dataclass(frozen=True)
class DayCell:
    """One grid slot. ``date`` is None for padding."""

    date: Optional[datetime.date] = None
    holiday: Optional[str] = None

    @property
    def is_padding(self) -> bool:
        return self.date is None

    @property
    def day(self) -> Optional[int]:
        return None if self.date is None else self.date.day

    @property
    def weekday(self) -> Optional[int]:
        """0=Sunday .. 6=Saturday, derived from the date."""
        if self.date is None:
            return None
        return (self.date.weekday() + 1) % 7

    @property
    def css_class(self) -> str:
        if self.weekday == 0:
            return "sunday"
        if self.weekday == 6:
            return "saturday"
        return ""


PADDING = DayCell()

WeekRow = List[DayCell]


@dataclass(frozen=True)
class MonthGrid:
    year: int
    month: int
    weeks: List[WeekRow]
    prev_month_link: Optional[str] = None
    next_month_link: Optional[str] = None
    source_path: str = ""

    def date_cells(self) -> List[DayCell]:
        return [c for week in self.weeks for c in week if not c.is_padding]


def _first_of_next_month(year: int, month: int) -> datetime.date:
    if month == 12:
        return datetime.date(year + 1, 1, 1)
    return datetime.date(year, month + 1, 1)


def days_in_month(year: int, month: int) -> int:
    """Day before the first of next month."""
    return (_first_of_next_month(year, month) - datetime.timedelta(days=1)).day


def build_month(
    year: int,
    month: int,
    holidays: Mapping[str, str],
    source_path: str = "",
) -> MonthGrid:
    """Return the Sunday-first 7-column grid for ``year``/``month``.

    Leading padding aligns day 1 under its weekday; a partial last week is
    padded to 7 cells. Navigation links stay inside the same year.
    """
    if not 1 <= month <= 12:
        raise ValueError(f"month out of range: {month}")

    first = datetime.date(year, month, 1)
    start_w = (first.weekday() + 1) % 7

    weeks: List[WeekRow] = []
    week: WeekRow = [PADDING] * start_w
    for d in range(1, days_in_month(year, month) + 1):
        t = datetime.date(year, month, d)
        week.append(DayCell(date=t, holiday=holidays.get(to_iso(t))))
        if len(week) == 7:
            weeks.append(week)
            week = []
    if week:
        week.extend([PADDING] * (7 - len(week)))
        weeks.append(week)

    return MonthGrid(
        year=year,
        month=month,
        weeks=weeks,
        prev_month_link=f"/?m={month - 1}" if month > 1 else None,
        next_month_link=f"/?m={month + 1}" if month < 12 else None,
        source_path=source_path,
    )


def default_month(year: int, today: Optional[datetime.date] = None) -> int:
    """Current month when ``year`` is this year, January otherwise."""
    today = today or datetime.date.today()
    return today.month if today.year == year else 1


def resolve_month(raw: Optional[str], year: int, today: Optional[datetime.date] = None) -> int:
    """Parse the ``m`` query value, falling back to the default month."""
    # ASCII digits only, no surrounding whitespace
    if raw and raw.isascii() and raw == raw.strip():
        try:
            m = int(raw)
        except ValueError:
            m = 0
        if 1 <= m <= 12:
            return m
    return default_month(year, today)
