from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Optional


def utcnow() -> datetime:
    """Server-side 'now' in UTC (naive, canonical)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def today() -> date:
    """Server-side calendar date in UTC."""
    return utcnow().date()


def parse_iso_date(value: Optional[str]) -> Optional[date]:
    """
    Parse a calendar date in "YYYY-MM-DD" form.

    - None / "" -> None
    - Anything else that is not a plain date raises ValueError
    """
    if value is None:
        return None
    s = value.strip()
    if not s:
        return None
    return date.fromisoformat(s)


def to_utc_z(dt: Optional[datetime]) -> Optional[str]:
    """
    Serializes datetime to ISO-8601 with trailing 'Z'.
    If dt is naive, it is treated as UTC.
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    dt_utc = dt.astimezone(timezone.utc).replace(microsecond=0)
    return dt_utc.isoformat().replace("+00:00", "Z")


def shift_month(year: int, month: int, delta: int) -> tuple[int, int]:
    """Move (year, month) by delta calendar months (delta may be negative)."""
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def trailing_months(as_of: date, count: int = 12) -> list[tuple[int, int]]:
    """
    The `count` calendar months ending with the month of `as_of`, oldest first.

    trailing_months(date(2024, 2, 10), 3) -> [(2023, 12), (2024, 1), (2024, 2)]
    """
    return [shift_month(as_of.year, as_of.month, offset) for offset in range(-(count - 1), 1)]


def month_window(as_of: date, count: int = 12) -> tuple[date, date]:
    """
    Inclusive date range covering the trailing `count` months up to `as_of`.

    Starts on the first day of the oldest month and ends on `as_of` itself.
    """
    first_year, first_month = shift_month(as_of.year, as_of.month, -(count - 1))
    return date(first_year, first_month, 1), as_of
