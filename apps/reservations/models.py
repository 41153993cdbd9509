"""Reservation domain models."""

from __future__ import annotations

import secrets
from decimal import Decimal

from django.conf import settings  # type: ignore
from django.db import models  # type: ignore
from django.utils import timezone  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from shared.domain.value_objects import DateRange

from .domain.lifecycle import (
    ACTIVE_STATUSES,
    ChecklistType,
    PaymentMethod,
    PaymentStatus,
    ReservationStatus,
)


class ReservationQuerySet(models.QuerySet):
    def active(self):
        return self.filter(status__in=ACTIVE_STATUSES)

    def for_customer(self, user):
        return self.filter(customer=user)

    def intersecting(self, start_date, end_date):
        """Reservations sharing at least one day with ``[start_date, end_date]``."""
        return self.filter(start_date__lte=end_date, end_date__gte=start_date)


class Reservation(models.Model):
    """A customer's rental of one vehicle for an inclusive range of days."""

    Status = ReservationStatus
    PaymentStatus = PaymentStatus
    PaymentMethod = PaymentMethod

    reference = models.CharField(max_length=12, unique=True, editable=False)
    vehicle = models.ForeignKey(
        "fleet.RentalVehicle",
        on_delete=models.PROTECT,
        related_name="reservations",
    )
    customer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="reservations",
    )
    start_date = models.DateField(_("Pickup day"))
    end_date = models.DateField(_("Return day"))
    days = models.PositiveSmallIntegerField(default=1)
    status = models.CharField(
        max_length=20,
        choices=ReservationStatus.choices,
        default=ReservationStatus.PENDING,
    )
    daily_rate = models.DecimalField(
        max_digits=10,
        decimal_places=0,
        help_text=_("Vehicle daily rate at the time of booking."),
    )
    subtotal = models.DecimalField(
        max_digits=12,
        decimal_places=0,
        default=Decimal("0"),
        help_text=_("Vehicle, equipment and activities before discount and tax."),
    )
    discount_rate = models.DecimalField(max_digits=5, decimal_places=4, default=Decimal("0"))
    discount_amount = models.DecimalField(max_digits=12, decimal_places=0, default=Decimal("0"))
    tax = models.DecimalField(max_digits=12, decimal_places=0, default=Decimal("0"))
    total = models.DecimalField(max_digits=12, decimal_places=0, default=Decimal("0"))
    currency = models.CharField(max_length=3, default="JPY")
    loyalty_tier = models.CharField(max_length=50, blank=True)
    payment_method = models.CharField(
        max_length=20,
        choices=PaymentMethod.choices,
        default=PaymentMethod.ON_SITE,
    )
    payment_status = models.CharField(
        max_length=20,
        choices=PaymentStatus.choices,
        default=PaymentStatus.PENDING,
    )
    payment_reference = models.CharField(
        max_length=255,
        blank=True,
        help_text=_("Transaction id returned by the payment gateway."),
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)
    cancellation_reason = models.CharField(max_length=255, blank=True)

    objects = ReservationQuerySet.as_manager()

    class Meta:
        verbose_name = _("Reservation")
        verbose_name_plural = _("Reservations")
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(start_date__lte=models.F("end_date")),
                name="reservation_valid_dates",
            ),
            models.CheckConstraint(
                condition=models.Q(days__gte=1),
                name="reservation_days_positive",
            ),
        ]
        indexes = [
            models.Index(fields=["vehicle", "start_date", "end_date"], name="reservation_vehicle_dates_idx"),
            models.Index(fields=["status"], name="reservation_status_idx"),
        ]

    def __str__(self) -> str:
        return f"Reservation {self.reference} ({self.start_date} - {self.end_date})"

    def save(self, *args, **kwargs):  # type: ignore
        if self._state.adding and not self.reference:
            self.reference = self.generate_reference()
        super().save(*args, **kwargs)

    @staticmethod
    def generate_reference() -> str:
        return f"RV{secrets.token_hex(4).upper()}"

    @property
    def date_range(self) -> DateRange:
        return DateRange(self.start_date, self.end_date)

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_STATUSES

    @property
    def subtotal_after_discount(self) -> Decimal:
        return self.subtotal - self.discount_amount

    def mark_cancelled(self, reason: str = "") -> None:
        """Set cancellation fields; the caller validates the transition and saves."""
        self.status = ReservationStatus.CANCELLED
        self.cancellation_reason = reason
        self.cancelled_at = timezone.now()
        if self.payment_status == PaymentStatus.COMPLETED:
            self.payment_status = PaymentStatus.REFUNDED


class ReservationEquipment(models.Model):
    """Equipment line of a reservation with its price snapshot."""

    reservation = models.ForeignKey(
        Reservation,
        on_delete=models.CASCADE,
        related_name="equipment_lines",
    )
    equipment = models.ForeignKey(
        "fleet.Equipment",
        on_delete=models.PROTECT,
        related_name="reservation_lines",
    )
    quantity = models.PositiveIntegerField(default=1)
    days = models.PositiveSmallIntegerField(default=1)
    price_per_day = models.DecimalField(max_digits=10, decimal_places=0)
    pricing_type = models.CharField(max_length=20)
    subtotal = models.DecimalField(max_digits=12, decimal_places=0)

    class Meta:
        verbose_name = _("Reservation equipment")
        verbose_name_plural = _("Reservation equipment")
        constraints = [
            models.UniqueConstraint(
                fields=["reservation", "equipment"],
                name="reservation_equipment_unique",
            ),
            models.CheckConstraint(
                condition=models.Q(quantity__gte=1),
                name="reservation_equipment_quantity_positive",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.equipment_id} × {self.quantity} for {self.reservation_id}"


class ReservationActivity(models.Model):
    """Activity line of a reservation with its price snapshot."""

    reservation = models.ForeignKey(
        Reservation,
        on_delete=models.CASCADE,
        related_name="activity_lines",
    )
    activity = models.ForeignKey(
        "fleet.Activity",
        on_delete=models.PROTECT,
        related_name="reservation_lines",
    )
    date = models.DateField()
    participants = models.PositiveIntegerField(default=1)
    price = models.DecimalField(
        max_digits=10,
        decimal_places=0,
        help_text=_("Price per participant at the time of booking."),
    )
    subtotal = models.DecimalField(max_digits=12, decimal_places=0)

    class Meta:
        verbose_name = _("Reservation activity")
        verbose_name_plural = _("Reservation activities")
        ordering = ["date", "id"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(participants__gte=1),
                name="reservation_activity_participants_positive",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.activity_id} on {self.date} for {self.reservation_id}"


class RentalChecklist(models.Model):
    """
    Staff checklist filled in at checkout or return

    One row per reservation and checklist type. A checklist can be saved as
    a draft any number of times; once ``completed_at`` is set it is final.
    """

    Type = ChecklistType

    reservation = models.ForeignKey(
        Reservation,
        on_delete=models.CASCADE,
        related_name="checklists",
    )
    checklist_type = models.CharField(max_length=20, choices=ChecklistType.choices)
    items = models.JSONField(
        default=list,
        blank=True,
        help_text=_("Checked items as a list of {id, label, checked} objects."),
    )
    notes = models.TextField(blank=True)
    has_damage = models.BooleanField(default=False)
    damage_notes = models.TextField(blank=True)
    mileage = models.PositiveIntegerField(null=True, blank=True, help_text=_("Odometer reading in km."))
    completed_at = models.DateTimeField(null=True, blank=True)
    completed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="completed_checklists",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Rental checklist")
        verbose_name_plural = _("Rental checklists")
        ordering = ["created_at", "id"]
        constraints = [
            models.UniqueConstraint(
                fields=["reservation", "checklist_type"],
                name="rental_checklist_unique_type",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.get_checklist_type_display()} for {self.reservation_id}"

    @property
    def is_completed(self) -> bool:
        return self.completed_at is not None

    @property
    def checked_count(self) -> int:
        return sum(1 for item in self.items if item.get("checked"))
