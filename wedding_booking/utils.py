"""Shared date utilities used across the availability and booking modules."""

import calendar
from datetime import date, datetime, timedelta
from typing import Callable, Iterator

Clock = Callable[[], datetime]

ISO_DATE_FORMAT = "%Y-%m-%d"


def local_now() -> datetime:
    """Default clock: the local wall-clock time."""
    return datetime.now()


def parse_iso_date(value: str) -> date:
    """Parse a ``YYYY-MM-DD`` string into a date.

    Examples:
        >>> parse_iso_date("2025-12-20")
        datetime.date(2025, 12, 20)
        >>> parse_iso_date(" 2025-01-05 ")
        datetime.date(2025, 1, 5)
    """
    return datetime.strptime(value.strip(), ISO_DATE_FORMAT).date()


def to_iso(day: date) -> str:
    return day.strftime(ISO_DATE_FORMAT)


def iter_dates(start: date, end: date) -> Iterator[date]:
    """Yield every date in the inclusive range ``[start, end]``."""
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def month_bounds(year: int, month: int) -> tuple[date, date]:
    """Return the first and last day of a month."""
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def shift_month(year: int, month: int, delta: int) -> tuple[int, int]:
    """Move ``delta`` months forward (or back) from ``(year, month)``.

    Examples:
        >>> shift_month(2025, 12, 1)
        (2026, 1)
        >>> shift_month(2025, 1, -1)
        (2024, 12)
    """
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1
