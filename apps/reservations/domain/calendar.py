"""
Fleet calendar projection

Turns vehicles and reservations into a grid of one cell per vehicle and
day. The function is pure: it never touches the database and never
mutates its inputs, so the same input always yields an equal grid.

Cell resolution per (vehicle, day):
- ``booked``: a reservation covers the day (pickup day to return day)
- ``buffer``: turnaround day right before pickup or right after return,
  not covered by any reservation
- ``free``: anything else

A booked day always wins over a buffer day, whatever order the
reservations arrive in. Two reservations covering the same day would be a
data problem; the one that starts first (then the lower id) is shown.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Dict, Iterable, Optional, Sequence, Tuple

from shared.domain.dates import add_days
from shared.domain.value_objects import DateRange

from .lifecycle import CALENDAR_STATUSES

BOOKED = "booked"
BUFFER = "buffer"
FREE = "free"


@dataclass(frozen=True)
class CalendarCell:
    date: date
    state: str = FREE
    reservation_id: Optional[int] = None
    is_start_day: bool = False
    is_end_day: bool = False

    @property
    def clickable(self) -> bool:
        # Buffer cells point at their reservation but do not open it
        return self.state == BOOKED

    def to_dict(self) -> dict:
        return {
            "date": self.date.isoformat(),
            "state": self.state,
            "reservation_id": self.reservation_id,
            "is_start_day": self.is_start_day,
            "is_end_day": self.is_end_day,
            "clickable": self.clickable,
        }


@dataclass(frozen=True)
class CalendarRow:
    vehicle_id: int
    cells: Tuple[CalendarCell, ...]

    def states(self) -> Tuple[str, ...]:
        return tuple(cell.state for cell in self.cells)

    def to_dict(self) -> dict:
        return {
            "vehicle_id": self.vehicle_id,
            "cells": [cell.to_dict() for cell in self.cells],
        }


@dataclass(frozen=True)
class CalendarGrid:
    date_range: DateRange
    dates: Tuple[date, ...]
    rows: Tuple[CalendarRow, ...]

    def row_for(self, vehicle_id) -> CalendarRow:
        for row in self.rows:
            if row.vehicle_id == vehicle_id:
                return row
        raise KeyError(vehicle_id)

    def cell(self, vehicle_id, day: date) -> CalendarCell:
        row = self.row_for(vehicle_id)
        return row.cells[(day - self.date_range.start_date).days]

    def to_dict(self) -> dict:
        return {
            "start_date": self.date_range.start_date.isoformat(),
            "end_date": self.date_range.end_date.isoformat(),
            "dates": [day.isoformat() for day in self.dates],
            "rows": [row.to_dict() for row in self.rows],
        }


def _status_value(reservation) -> str:
    status = reservation.status
    return getattr(status, "value", status)


def _vehicle_id(vehicle):
    return getattr(vehicle, "id", vehicle)


def _sort_key(reservation):
    return (reservation.start_date, reservation.id)


def _project_row(vehicle_id, reservations: Sequence, date_range: DateRange, buffer_days: int) -> CalendarRow:
    body: Dict[date, CalendarCell] = {}
    buffer: Dict[date, CalendarCell] = {}

    for reservation in reservations:
        start, end = reservation.start_date, reservation.end_date
        for day in DateRange(start, end).iter_days():
            if date_range.contains(day) and day not in body:
                body[day] = CalendarCell(
                    date=day,
                    state=BOOKED,
                    reservation_id=reservation.id,
                    is_start_day=day == start,
                    is_end_day=day == end,
                )
        for offset in range(1, buffer_days + 1):
            for day in (add_days(start, -offset), add_days(end, offset)):
                if date_range.contains(day) and day not in buffer:
                    buffer[day] = CalendarCell(date=day, state=BUFFER, reservation_id=reservation.id)

    cells = tuple(
        body.get(day) or buffer.get(day) or CalendarCell(date=day)
        for day in date_range.iter_days()
    )
    return CalendarRow(vehicle_id=vehicle_id, cells=cells)


def build_calendar(
    vehicles: Iterable,
    reservations: Iterable,
    date_range: DateRange,
    *,
    buffer_days: int = 1,
) -> CalendarGrid:
    """
    Project reservations onto a vehicle × day grid

    ``vehicles`` are model instances or plain ids; rows keep their order.
    ``reservations`` need ``id``, ``vehicle_id``, ``start_date``,
    ``end_date`` and ``status``. Cancelled reservations are ignored.
    """
    by_vehicle: Dict[object, list] = {}
    for reservation in reservations:
        if _status_value(reservation) not in CALENDAR_STATUSES:
            continue
        by_vehicle.setdefault(reservation.vehicle_id, []).append(reservation)

    rows = []
    for vehicle in vehicles:
        vehicle_id = _vehicle_id(vehicle)
        ordered = sorted(by_vehicle.get(vehicle_id, []), key=_sort_key)
        rows.append(_project_row(vehicle_id, ordered, date_range, buffer_days))

    return CalendarGrid(
        date_range=date_range,
        dates=tuple(date_range.iter_days()),
        rows=tuple(rows),
    )
