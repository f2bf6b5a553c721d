# payroll_api/common/dates.py
from __future__ import annotations

from datetime import date, datetime
from typing import Optional

_DATE_FORMATS = ("%Y-%m-%d", "%d-%m-%Y", "%Y/%m/%d")


def parse_date(s) -> Optional[date]:
    """
    Lenient date parser for query strings and CSV cells.
    Accepts date/datetime objects, 'YYYY-MM-DD', 'DD-MM-YYYY', 'YYYY/MM/DD'
    and ISO datetimes ('2025-05-01T00:00:00.000Z' -> 2025-05-01).
    Returns None when nothing matches.
    """
    if s is None or s == "":
        return None
    if isinstance(s, datetime):
        return s.date()
    if isinstance(s, date):
        return s
    s = str(s).strip()
    if "T" in s:
        s = s.split("T", 1)[0]
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(s, fmt).date()
        except ValueError:
            pass
    return None


def day_count(start: date, end: date) -> int:
    """Calendar days from start to end, both endpoints included."""
    return (end - start).days + 1


def month_bounds(d: date) -> tuple[date, date]:
    first = d.replace(day=1)
    if first.month == 12:
        nxt = first.replace(year=first.year + 1, month=1)
    else:
        nxt = first.replace(month=first.month + 1)
    return first, date.fromordinal(nxt.toordinal() - 1)


def iso(v) -> Optional[str]:
    return v.isoformat() if v is not None else None
