"""Status lifecycles for reservations and their payments."""

from __future__ import annotations

from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from shared.domain.base import StatusLifecycle


class ReservationStatus(models.TextChoices):
    PENDING = "pending", _("Pending")
    CONFIRMED = "confirmed", _("Confirmed")
    IN_PROGRESS = "in_progress", _("In progress")
    COMPLETED = "completed", _("Completed")
    CANCELLED = "cancelled", _("Cancelled")


class PaymentStatus(models.TextChoices):
    PENDING = "pending", _("Pending")
    COMPLETED = "completed", _("Completed")
    FAILED = "failed", _("Failed")
    REFUNDED = "refunded", _("Refunded")


class PaymentMethod(models.TextChoices):
    CREDIT_CARD = "credit_card", _("Credit card")
    ON_SITE = "on_site", _("Pay on site")


class ChecklistType(models.TextChoices):
    PRE_RENTAL = "pre_rental", _("Pre-rental inspection")
    HANDOVER = "handover", _("Handover")
    RETURN = "return", _("Return inspection")


# Reservations in these states hold the vehicle
ACTIVE_STATUSES = frozenset({
    ReservationStatus.PENDING.value,
    ReservationStatus.CONFIRMED.value,
    ReservationStatus.IN_PROGRESS.value,
})

# Shown on the staff calendar
CALENDAR_STATUSES = ACTIVE_STATUSES | {ReservationStatus.COMPLETED.value}

RESERVATION_LIFECYCLE = StatusLifecycle(
    "reservation",
    {
        ReservationStatus.PENDING: {ReservationStatus.CONFIRMED, ReservationStatus.CANCELLED},
        ReservationStatus.CONFIRMED: {ReservationStatus.IN_PROGRESS, ReservationStatus.CANCELLED},
        ReservationStatus.IN_PROGRESS: {ReservationStatus.COMPLETED},
        ReservationStatus.COMPLETED: set(),
        ReservationStatus.CANCELLED: set(),
    },
)

PAYMENT_LIFECYCLE = StatusLifecycle(
    "payment",
    {
        PaymentStatus.PENDING: {PaymentStatus.COMPLETED, PaymentStatus.FAILED},
        PaymentStatus.COMPLETED: {PaymentStatus.REFUNDED},
        PaymentStatus.FAILED: {PaymentStatus.PENDING},
        PaymentStatus.REFUNDED: set(),
    },
)


def initial_statuses(payment_method: str) -> tuple[str, str]:
    """``(reservation status, payment status)`` for a new reservation."""
    if payment_method == PaymentMethod.CREDIT_CARD:
        return ReservationStatus.CONFIRMED, PaymentStatus.COMPLETED
    return ReservationStatus.PENDING, PaymentStatus.PENDING


# Reservation status in which each checklist can be filled in
CHECKLIST_STAGES = {
    ChecklistType.PRE_RENTAL.value: ReservationStatus.CONFIRMED.value,
    ChecklistType.HANDOVER.value: ReservationStatus.CONFIRMED.value,
    ChecklistType.RETURN.value: ReservationStatus.IN_PROGRESS.value,
}

# Completing these checklists moves the reservation on
CHECKLIST_TRANSITIONS = {
    ChecklistType.HANDOVER.value: ReservationStatus.IN_PROGRESS.value,
    ChecklistType.RETURN.value: ReservationStatus.COMPLETED.value,
}
