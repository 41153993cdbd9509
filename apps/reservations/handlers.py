"""
Reservation event handlers

Subscribers run after the unit of work has committed. They only enqueue
Celery tasks, so a broker or mail outage never touches stored data.
"""

from __future__ import annotations

import logging

from shared.application.message_bus import message_bus

from .domain.events import ReservationCreated, ReservationStatusChanged
from .notifications import CREATED, STATUS_CHANGED

logger = logging.getLogger(__name__)


def notify_reservation_created(event: ReservationCreated) -> None:
    from .tasks import send_reservation_email

    send_reservation_email.delay(event.reservation_id, CREATED)
    logger.debug(f"Queued confirmation email for reservation {event.reservation_id}")


def notify_reservation_status_changed(event: ReservationStatusChanged) -> None:
    from .tasks import send_reservation_email

    send_reservation_email.delay(event.reservation_id, STATUS_CHANGED)
    logger.debug(
        f"Queued status email for reservation {event.reservation_id} "
        f"({event.previous_status} -> {event.new_status})"
    )


def register_event_handlers() -> None:
    message_bus.register_event_handler(ReservationCreated, notify_reservation_created)
    message_bus.register_event_handler(ReservationStatusChanged, notify_reservation_status_changed)
