"""Plain-text customer emails about reservations."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from django.conf import settings  # type: ignore
from django.core.mail import send_mail  # type: ignore

if TYPE_CHECKING:  # pragma: no cover
    from .models import Reservation

logger = logging.getLogger(__name__)

CREATED = "created"
STATUS_CHANGED = "status_changed"


def _summary_lines(reservation: "Reservation") -> list[str]:
    lines = [
        f"Reference: {reservation.reference}",
        f"Vehicle: {reservation.vehicle.name}",
        f"Dates: {reservation.start_date.isoformat()} - {reservation.end_date.isoformat()} "
        f"({reservation.days} day(s))",
    ]
    for line in reservation.equipment_lines.all():
        lines.append(f"Equipment: {line.equipment.name} × {line.quantity} = {line.subtotal}")
    for line in reservation.activity_lines.all():
        lines.append(
            f"Activity: {line.activity.name} on {line.date.isoformat()}, "
            f"{line.participants} participant(s) = {line.subtotal}"
        )
    lines.extend([
        f"Subtotal: {reservation.subtotal} {reservation.currency}",
        f"Loyalty discount ({reservation.loyalty_tier or 'none'}): -{reservation.discount_amount}",
        f"Tax: {reservation.tax}",
        f"Total: {reservation.total} {reservation.currency}",
        f"Payment: {reservation.get_payment_method_display()} ({reservation.get_payment_status_display()})",
    ])
    return lines


def build_reservation_email(reservation: "Reservation", kind: str) -> tuple[str, str]:
    """Return ``(subject, body)`` for a reservation notification."""
    customer = reservation.customer
    greeting = f"Hello {customer.display_name},"
    status = reservation.get_status_display()

    if kind == CREATED:
        subject = f"Reservation {reservation.reference} received ({status})"
        intro = "Thank you for your reservation. Here is your summary:"
    else:
        subject = f"Reservation {reservation.reference} is now {status}"
        intro = f"The status of your reservation changed to {status}."
        if reservation.cancellation_reason:
            intro += f"\nReason: {reservation.cancellation_reason}"

    body = "\n".join([greeting, "", intro, "", *_summary_lines(reservation)])
    return subject, body


def send_reservation_email(reservation: "Reservation", kind: str) -> bool:
    """Send the notification; failures are logged and reported as ``False``."""
    recipient = reservation.customer.email
    subject, body = build_reservation_email(reservation, kind)
    try:
        send_mail(
            subject=subject,
            message=body,
            from_email=settings.DEFAULT_FROM_EMAIL,
            recipient_list=[recipient],
            fail_silently=False,
        )
    except Exception as e:
        logger.error(f"Failed to send email to {recipient}: {e}", exc_info=True)
        return False

    logger.info(f"Email sent successfully to {recipient}: {subject}")
    return True
