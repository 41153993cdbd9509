"""Domain services for vehicle availability."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import date
from typing import Dict, List, Optional

from django.conf import settings  # type: ignore
from django.db import DatabaseError, transaction  # type: ignore
from django.db.utils import NotSupportedError  # type: ignore

from apps.fleet.models import RentalVehicle
from shared.domain.dates import add_days, normalize_iso_date, overlaps

from .exceptions import ReservationValidationError, TransientStoreError
from .models import Reservation

logger = logging.getLogger(__name__)


def buffer_days() -> int:
    return int(getattr(settings, "RESERVATION_BUFFER_DAYS", 1))


@contextmanager
def translate_store_errors(operation: str):
    """Re-raise database failures as ``TransientStoreError``."""
    try:
        yield
    except DatabaseError as exc:
        logger.error(f"Database error during {operation}: {exc}", exc_info=True)
        raise TransientStoreError(
            "The reservation store is temporarily unavailable, please retry."
        ) from exc


def _lock_queryset_if_possible(queryset):
    """Apply select_for_update when inside transaction.atomic()."""

    if not transaction.get_connection().in_atomic_block:
        return queryset

    try:
        return queryset.select_for_update()
    except NotSupportedError:
        return queryset


def parse_date_range(start, end) -> tuple[date, date]:
    """Normalize a pair of date-like values and check their order."""
    try:
        start_date = normalize_iso_date(start)
        end_date = normalize_iso_date(end)
    except ValueError as exc:
        raise ReservationValidationError(str(exc)) from exc
    if start_date > end_date:
        raise ReservationValidationError(
            "Start date must not be after end date.",
            details={"start_date": str(start_date), "end_date": str(end_date)},
        )
    buffered_window(start_date, end_date)
    return start_date, end_date


def buffered_window(start_date: date, end_date: date) -> tuple[date, date]:
    """
    ``[start, end]`` widened by the turnaround buffer on both sides

    Raises ``ReservationValidationError`` when the widened range would run
    past the first or last representable day.
    """
    days = buffer_days()
    try:
        return add_days(start_date, -days), add_days(end_date, days)
    except OverflowError as exc:
        raise ReservationValidationError(
            f"Dates must leave {days} turnaround day(s) inside the calendar.",
            details={"start_date": str(start_date), "end_date": str(end_date)},
        ) from exc


def find_conflicts(
    vehicle_id,
    start,
    end,
    *,
    exclude_reservation_id=None,
    lock: bool = False,
) -> List[Reservation]:
    """
    Active reservations of the vehicle that clash with ``[start, end]``

    Two rentals of one vehicle need a free turnaround day between them, so
    the candidate range is widened by the buffer on both sides before the
    inclusive overlap test. A reservation ending on the 12th blocks a new
    one starting on the 13th; one starting on the 14th is fine.
    """
    start_date, end_date = parse_date_range(start, end)
    window_start, window_end = buffered_window(start_date, end_date)

    with translate_store_errors("conflict check"):
        queryset = (
            Reservation.objects.active()
            .filter(vehicle_id=vehicle_id)
            .intersecting(window_start, window_end)
            .order_by("start_date", "id")
        )
        if exclude_reservation_id is not None:
            queryset = queryset.exclude(pk=exclude_reservation_id)
        if lock:
            queryset = _lock_queryset_if_possible(queryset)
        conflicts = list(queryset)

    if conflicts:
        logger.info(
            f"Vehicle {vehicle_id} has {len(conflicts)} conflicting reservation(s) "
            f"for {start_date} - {end_date}"
        )
    return conflicts


def has_conflict(vehicle_id, start, end, exclude_reservation_id=None) -> bool:
    """True when the vehicle cannot be reserved for ``[start, end]``."""
    return bool(find_conflicts(vehicle_id, start, end, exclude_reservation_id=exclude_reservation_id))


def list_available_vehicles(start=None, end=None) -> List[RentalVehicle]:
    """
    Vehicles that can be reserved for the given days, cheapest first

    Without dates every vehicle marked available is returned (browse mode).
    Vehicles in maintenance are never returned. Passing only one of the two
    dates is an error.
    """
    if (start is None) != (end is None):
        raise ReservationValidationError(
            "Both start_date and end_date are required to check availability."
        )

    with translate_store_errors("availability lookup"):
        vehicles = list(
            RentalVehicle.objects.filter(status=RentalVehicle.Status.AVAILABLE)
            .order_by("daily_rate", "name", "id")
        )
        if start is None:
            return vehicles

        start_date, end_date = parse_date_range(start, end)
        window_start, window_end = buffered_window(start_date, end_date)

        # One query for the whole fleet, grouped by vehicle afterwards
        rows = (
            Reservation.objects.active()
            .filter(vehicle_id__in=[vehicle.id for vehicle in vehicles])
            .intersecting(window_start, window_end)
            .values_list("vehicle_id", "start_date", "end_date")
        )
        busy: Dict[int, list] = {}
        for vehicle_id, other_start, other_end in rows:
            busy.setdefault(vehicle_id, []).append((other_start, other_end))

    available = [
        vehicle
        for vehicle in vehicles
        if not any(
            overlaps(window_start, window_end, other_start, other_end)
            for other_start, other_end in busy.get(vehicle.id, [])
        )
    ]
    logger.debug(f"{len(available)} of {len(vehicles)} vehicles free for {start_date} - {end_date}")
    return available


def lock_vehicle(vehicle_id) -> Optional[RentalVehicle]:
    """Fetch the vehicle row with a row lock (inside a transaction)."""
    queryset = _lock_queryset_if_possible(RentalVehicle.objects.filter(pk=vehicle_id))
    return queryset.first()
