"""
Month keys and the month grid.

A month key is "YYYY-MM". The grid always holds complete weeks starting on
Sunday, so it includes a few days of the neighbouring months. Those filler
cells still get a real date and classification; they are only flagged
is_current_month=False.
"""

from __future__ import annotations

import calendar
import re
from datetime import date, timedelta
from typing import Any, List, Optional, Tuple

from termcal.classify import DaySources, classify, date_key
from termcal.model import CalendarCell

MONTH_NAMES = [
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
]

WEEKDAY_NAMES = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]

_MONTH_KEY_RE = re.compile(r"^(\d{4})-(\d{2})$")


# ---------------------------------------------------------------------------
# Month keys
# ---------------------------------------------------------------------------


def parse_month_key(month_key: Any) -> Optional[Tuple[int, int]]:
    """
    "2026-10" -> (2026, 10). Anything else -> None.

    Years 1 and 9999 are rejected: their grids would need filler days
    outside the date range.
    """
    if not isinstance(month_key, str):
        return None
    match = _MONTH_KEY_RE.match(month_key.strip())
    if not match:
        return None
    year, month = int(match.group(1)), int(match.group(2))
    if not 1 <= month <= 12 or not date.min.year < year < date.max.year:
        return None
    return year, month


def month_key(year: int, month: int) -> str:
    return f"{year:04d}-{month:02d}"


def month_key_for_date(value: Any) -> Optional[str]:
    key = date_key(value)
    if not key or len(key) < 7:
        return None
    candidate = key[:7]
    return candidate if parse_month_key(candidate) else None


def shift_month(key: str, delta: int) -> Optional[str]:
    """Move a month key forward (delta > 0) or back (delta < 0)."""
    parts = parse_month_key(key)
    if not parts:
        return None
    year, month = parts
    index = year * 12 + (month - 1) + delta
    shifted = month_key(index // 12, index % 12 + 1)
    return shifted if parse_month_key(shifted) else None


def month_bounds(key: str) -> Optional[Tuple[date, date]]:
    parts = parse_month_key(key)
    if not parts:
        return None
    year, month = parts
    last = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last)


def month_label(key: str) -> str:
    parts = parse_month_key(key)
    if not parts:
        return ""
    return f"{MONTH_NAMES[parts[1] - 1]} {parts[0]}"


def sunday_index(day: date) -> int:
    # Python counts Monday=0; the grid counts Sunday=0.
    return (day.weekday() + 1) % 7


def sundays_for_month(key: str) -> List[str]:
    """ISO dates of every Sunday inside the month, in order."""
    bounds = month_bounds(key)
    if not bounds:
        return []
    first, last = bounds
    cursor = first + timedelta(days=(6 - first.weekday()) % 7)
    out: List[str] = []
    while cursor <= last:
        out.append(cursor.isoformat())
        cursor += timedelta(days=7)
    return out


# ---------------------------------------------------------------------------
# Grid
# ---------------------------------------------------------------------------


def build_month_matrix(key: str, sources: Optional[DaySources] = None) -> List[CalendarCell]:
    """
    Build the display grid for a month.

    Length is the smallest multiple of 7 that fits the leading offset plus
    the days of the month. Without sources, only the month's Sundays are
    known.
    """
    bounds = month_bounds(key)
    if not bounds:
        return []
    first, last = bounds

    if sources is None:
        sources = DaySources.build(sundays=sundays_for_month(key))

    start_weekday = sunday_index(first)
    days_in_month = last.day
    total_cells = -(-(start_weekday + days_in_month) // 7) * 7

    grid_start = first - timedelta(days=start_weekday)
    cells: List[CalendarCell] = []
    for index in range(total_cells):
        cell_date = grid_start + timedelta(days=index)
        iso = cell_date.isoformat()
        cells.append(
            CalendarCell(
                index=index,
                iso_date=iso,
                day=cell_date.day,
                weekday=sunday_index(cell_date),
                is_current_month=first <= cell_date <= last,
                classification=classify(iso, sources),
            )
        )
    return cells


def weeks(cells: List[CalendarCell]) -> List[List[CalendarCell]]:
    """Split a grid into rows of seven."""
    return [cells[i:i + 7] for i in range(0, len(cells), 7)]
