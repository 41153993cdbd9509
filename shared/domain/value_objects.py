"""
Common Value Objects

Value objects used across multiple domains:
- DateRange: an inclusive range of calendar days (pickup day to return day)
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Iterator

from shared.domain.base import ValueObject
from shared.domain.dates import add_days, inclusive_day_count, normalize_iso_date, overlaps


@dataclass(frozen=True)
class DateRange(ValueObject):
    """
    Date range value object

    Represents a range from start_date to end_date, both inclusive.
    A one-day rental has start_date == end_date.
    """
    start_date: date
    end_date: date

    def __post_init__(self):
        if self.start_date > self.end_date:
            raise ValueError(
                f"Start date ({self.start_date}) must not be after end date ({self.end_date})"
            )

    @classmethod
    def from_values(cls, start, end) -> "DateRange":
        """Build a range from anything ``normalize_iso_date`` understands"""
        return cls(normalize_iso_date(start), normalize_iso_date(end))

    def overlaps_with(self, other: "DateRange") -> bool:
        """
        Check if this range shares at least one day with another

        Examples:
            - DateRange(10, 12) overlaps with DateRange(12, 14) -> True
            - DateRange(10, 12) overlaps with DateRange(13, 14) -> False
        """
        if not isinstance(other, DateRange):
            raise TypeError("Can only check overlap with another DateRange")
        return overlaps(self.start_date, self.end_date, other.start_date, other.end_date)

    def contains(self, check_date: date) -> bool:
        return self.start_date <= check_date <= self.end_date

    def buffered(self, days: int) -> "DateRange":
        """Range widened by ``days`` on both sides (turnaround window)"""
        return DateRange(add_days(self.start_date, -days), add_days(self.end_date, days))

    def iter_days(self) -> Iterator[date]:
        current = self.start_date
        while current <= self.end_date:
            yield current
            current = add_days(current, 1)

    @property
    def days(self) -> int:
        return inclusive_day_count(self.start_date, self.end_date)

    def __len__(self) -> int:
        return self.days

    def __str__(self):
        return f"{self.start_date.isoformat()} - {self.end_date.isoformat()}"

    def __repr__(self):
        return f"DateRange({self.start_date}, {self.end_date})"
