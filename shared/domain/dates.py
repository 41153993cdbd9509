"""
Calendar-day helpers

All reservation arithmetic happens on whole calendar days. Values are
``datetime.date`` objects (ordinal days), never timezone-aware instants,
so a reservation ending on the 12th can never drift into the 13th because
of a UTC offset.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Union

DateLike = Union[date, datetime, str]


def normalize_iso_date(value: DateLike) -> date:
    """
    Convert a date-like value to ``datetime.date``

    Accepts ``date``, ``datetime`` (the date part is kept as-is, no
    timezone conversion) and ISO-8601 strings such as ``2025-07-10`` or
    ``2025-07-10T09:30:00+09:00``.

    Raises:
        ValueError: If the value cannot be interpreted as a calendar day
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        if not text:
            raise ValueError("Date string is empty")
        try:
            return date.fromisoformat(text[:10])
        except ValueError:
            raise ValueError(f"Invalid date '{value}', expected YYYY-MM-DD") from None
    raise ValueError(f"Unsupported date value: {value!r}")


def add_days(value: date, days: int) -> date:
    """Shift a calendar day by ``days`` (may be negative)."""
    return value + timedelta(days=days)


def days_between(start: date, end: date) -> int:
    """Signed number of days from ``start`` to ``end``."""
    return (end - start).days


def inclusive_day_count(start: date, end: date) -> int:
    """Number of days in the inclusive range ``[start, end]``."""
    return days_between(start, end) + 1


def overlaps(start_a: date, end_a: date, start_b: date, end_b: date) -> bool:
    """Inclusive-inclusive overlap test for two day ranges."""
    return start_a <= end_b and end_a >= start_b
