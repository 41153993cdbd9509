"""Tests for calendar-day helpers and the DateRange value object."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

import pytest

from shared.domain.dates import (
    add_days,
    days_between,
    inclusive_day_count,
    normalize_iso_date,
    overlaps,
)
from shared.domain.value_objects import DateRange


def test_normalize_accepts_dates_datetimes_and_strings():
    assert normalize_iso_date(date(2025, 7, 10)) == date(2025, 7, 10)
    assert normalize_iso_date(datetime(2025, 7, 10, 23, 59)) == date(2025, 7, 10)
    assert normalize_iso_date("2025-07-10") == date(2025, 7, 10)
    assert normalize_iso_date(" 2025-07-10T09:30:00+09:00 ") == date(2025, 7, 10)


def test_normalize_keeps_the_calendar_day_of_aware_datetimes():
    late_evening_tokyo = datetime(2025, 7, 12, 23, 30, tzinfo=timezone(timedelta(hours=9)))
    assert normalize_iso_date(late_evening_tokyo) == date(2025, 7, 12)


@pytest.mark.parametrize("value", ["", "2025-13-01", "yesterday", 20250710, None])
def test_normalize_rejects_garbage(value):
    with pytest.raises(ValueError):
        normalize_iso_date(value)


def test_day_arithmetic():
    assert add_days(date(2025, 2, 28), 1) == date(2025, 3, 1)
    assert add_days(date(2025, 3, 1), -1) == date(2025, 2, 28)
    assert days_between(date(2025, 7, 10), date(2025, 7, 12)) == 2
    assert days_between(date(2025, 7, 12), date(2025, 7, 10)) == -2
    assert inclusive_day_count(date(2025, 7, 10), date(2025, 7, 12)) == 3


def test_overlap_is_inclusive_on_both_ends():
    assert overlaps(date(2025, 7, 10), date(2025, 7, 12), date(2025, 7, 12), date(2025, 7, 14))
    assert not overlaps(date(2025, 7, 10), date(2025, 7, 12), date(2025, 7, 13), date(2025, 7, 14))
    assert overlaps(date(2025, 7, 11), date(2025, 7, 11), date(2025, 7, 10), date(2025, 7, 12))


def test_date_range_basics():
    rental = DateRange.from_values("2025-07-10", "2025-07-12")
    assert rental.days == 3
    assert len(rental) == 3
    assert rental.contains(date(2025, 7, 12))
    assert not rental.contains(date(2025, 7, 13))
    assert list(rental.iter_days()) == [date(2025, 7, 10), date(2025, 7, 11), date(2025, 7, 12)]
    assert str(rental) == "2025-07-10 - 2025-07-12"


def test_single_day_range_is_allowed():
    assert DateRange(date(2025, 7, 10), date(2025, 7, 10)).days == 1


def test_reversed_range_is_rejected():
    with pytest.raises(ValueError):
        DateRange(date(2025, 7, 12), date(2025, 7, 10))


def test_buffered_range_and_overlap():
    rental = DateRange(date(2025, 7, 10), date(2025, 7, 12))
    assert rental.buffered(1) == DateRange(date(2025, 7, 9), date(2025, 7, 13))
    assert rental.buffered(1).overlaps_with(DateRange(date(2025, 7, 13), date(2025, 7, 14)))
    assert not rental.buffered(1).overlaps_with(DateRange(date(2025, 7, 14), date(2025, 7, 15)))


def test_date_range_is_a_value():
    assert DateRange(date(2025, 7, 10), date(2025, 7, 12)) == DateRange.from_values("2025-07-10", "2025-07-12")
    with pytest.raises(TypeError):
        DateRange(date(2025, 7, 10), date(2025, 7, 12)).overlaps_with((date(2025, 7, 10), date(2025, 7, 12)))
