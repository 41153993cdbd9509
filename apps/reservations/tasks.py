"""Celery tasks for the reservation domain."""

from __future__ import annotations

import logging

from celery import shared_task  # type: ignore

from .models import Reservation
from .notifications import send_reservation_email as deliver_reservation_email

logger = logging.getLogger(__name__)


@shared_task(name="reservations.send_reservation_email")
def send_reservation_email(reservation_id: int, kind: str) -> bool:
    """Email the customer about a new reservation or a status change."""
    try:
        reservation = (
            Reservation.objects.select_related("customer", "vehicle")
            .prefetch_related("equipment_lines__equipment", "activity_lines__activity")
            .get(id=reservation_id)
        )
    except Reservation.DoesNotExist:
        logger.error(f"Reservation {reservation_id} not found for {kind} notification")
        return False

    sent = deliver_reservation_email(reservation, kind)
    if sent:
        logger.info(f"[NOTIFICATION] Reservation {kind} email sent: {reservation.reference}")
    return sent
