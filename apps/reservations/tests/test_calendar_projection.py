"""Tests for the fleet calendar projection."""

from __future__ import annotations

from datetime import date
from types import SimpleNamespace

import pytest

from apps.reservations.domain.calendar import BOOKED, BUFFER, FREE, build_calendar
from shared.domain.value_objects import DateRange


def _res(pk, vehicle_id, start, end, status="confirmed"):
    return SimpleNamespace(id=pk, vehicle_id=vehicle_id, start_date=start, end_date=end, status=status)


JULY_9_16 = DateRange(date(2025, 7, 9), date(2025, 7, 16))


def test_two_bookings_with_turnaround_between_them():
    reservations = [
        _res(1, 7, date(2025, 7, 10), date(2025, 7, 12)),
        _res(2, 7, date(2025, 7, 14), date(2025, 7, 15)),
    ]

    grid = build_calendar([7], reservations, JULY_9_16)

    assert grid.row_for(7).states() == (
        BUFFER,
        BOOKED, BOOKED, BOOKED,
        BUFFER,
        BOOKED, BOOKED,
        BUFFER,
    )
    assert grid.cell(7, date(2025, 7, 10)).is_start_day
    assert grid.cell(7, date(2025, 7, 12)).is_end_day
    assert grid.cell(7, date(2025, 7, 14)).reservation_id == 2


def test_booked_day_wins_over_buffer_whatever_the_input_order():
    # 13th is the first reservation's turnaround day and the second one's pickup
    first = _res(1, 7, date(2025, 7, 10), date(2025, 7, 12))
    second = _res(2, 7, date(2025, 7, 13), date(2025, 7, 14))

    forward = build_calendar([7], [first, second], JULY_9_16)
    backward = build_calendar([7], [second, first], JULY_9_16)

    assert forward == backward
    cell = forward.cell(7, date(2025, 7, 13))
    assert cell.state == BOOKED
    assert cell.reservation_id == 2


def test_overlapping_bodies_show_the_earliest_start():
    early = _res(5, 7, date(2025, 7, 10), date(2025, 7, 13))
    late = _res(3, 7, date(2025, 7, 12), date(2025, 7, 14))

    grid = build_calendar([7], [late, early], JULY_9_16)

    assert grid.cell(7, date(2025, 7, 12)).reservation_id == 5
    assert grid.cell(7, date(2025, 7, 14)).reservation_id == 3


def test_cancelled_reservations_are_not_projected():
    reservations = [_res(1, 7, date(2025, 7, 10), date(2025, 7, 12), status="cancelled")]

    grid = build_calendar([7], reservations, JULY_9_16)

    assert set(grid.row_for(7).states()) == {FREE}


def test_completed_reservations_stay_on_the_calendar():
    reservations = [_res(1, 7, date(2025, 7, 10), date(2025, 7, 10), status="completed")]

    grid = build_calendar([7], reservations, JULY_9_16)

    assert grid.cell(7, date(2025, 7, 10)).state == BOOKED


def test_reservation_outside_the_range_leaves_a_buffer_edge():
    reservations = [_res(1, 7, date(2025, 7, 5), date(2025, 7, 8))]

    grid = build_calendar([7], reservations, JULY_9_16)

    assert grid.cell(7, date(2025, 7, 9)).state == BUFFER
    assert grid.cell(7, date(2025, 7, 10)).state == FREE


def test_rows_follow_vehicle_order_and_keep_vehicles_apart():
    reservations = [_res(1, 8, date(2025, 7, 10), date(2025, 7, 11))]

    grid = build_calendar([SimpleNamespace(id=9), SimpleNamespace(id=8)], reservations, JULY_9_16)

    assert [row.vehicle_id for row in grid.rows] == [9, 8]
    assert set(grid.row_for(9).states()) == {FREE}
    assert grid.cell(8, date(2025, 7, 10)).state == BOOKED


def test_buffer_cells_are_not_clickable():
    reservations = [_res(1, 7, date(2025, 7, 10), date(2025, 7, 12))]

    grid = build_calendar([7], reservations, JULY_9_16)
    payload = grid.to_dict()

    cells = payload["rows"][0]["cells"]
    assert cells[0] == {
        "date": "2025-07-09",
        "state": BUFFER,
        "reservation_id": 1,
        "is_start_day": False,
        "is_end_day": False,
        "clickable": False,
    }
    assert cells[1]["clickable"] is True
    assert payload["dates"][0] == "2025-07-09"
    assert len(payload["dates"]) == 8


def test_projection_is_repeatable():
    reservations = [
        _res(1, 7, date(2025, 7, 10), date(2025, 7, 12)),
        _res(2, 7, date(2025, 7, 14), date(2025, 7, 15), status="pending"),
    ]

    assert build_calendar([7], reservations, JULY_9_16) == build_calendar([7], reservations, JULY_9_16)


def test_wider_buffer_setting():
    reservations = [_res(1, 7, date(2025, 7, 12), date(2025, 7, 12))]

    grid = build_calendar([7], reservations, JULY_9_16, buffer_days=2)

    assert grid.row_for(7).states() == (FREE, BUFFER, BUFFER, BOOKED, BUFFER, BUFFER, FREE, FREE)


def test_missing_vehicle_row_raises_key_error():
    grid = build_calendar([7], [], JULY_9_16)

    with pytest.raises(KeyError):
        grid.row_for(99)
