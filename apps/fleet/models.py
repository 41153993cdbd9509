"""Fleet domain models."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from shared.domain.base import StatusLifecycle


class RentalVehicle(models.Model):
    """A campervan that customers reserve for whole days.

    ``status`` is a cached hint maintained by checkout and return. Whether
    the vehicle is free on given dates is always derived from its
    reservations.
    """

    class Status(models.TextChoices):
        AVAILABLE = "available", _("Available")
        RESERVED = "reserved", _("Reserved")
        MAINTENANCE = "maintenance", _("Maintenance")

    name = models.CharField(_("Name"), max_length=255)
    vehicle_type = models.CharField(_("Vehicle type"), max_length=100, blank=True)
    license_plate = models.CharField(_("License plate"), max_length=32, unique=True, null=True, blank=True)
    description = models.TextField(blank=True)
    daily_rate = models.DecimalField(
        _("Daily rate"),
        max_digits=10,
        decimal_places=0,
        help_text=_("Price per rental day in whole currency units."),
    )
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.AVAILABLE,
    )
    location = models.CharField(_("Pickup location"), max_length=255, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Rental vehicle")
        verbose_name_plural = _("Rental vehicles")
        ordering = ["daily_rate", "name"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(daily_rate__gte=0),
                name="rental_vehicle_daily_rate_non_negative",
            ),
        ]
        indexes = [
            models.Index(fields=["status"], name="fleet_vehicle_status_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.name} ({self.get_status_display()})"

    def set_status_hint(self, target: str) -> bool:
        """Move the cached status along the asset lifecycle.

        Returns ``False`` when the vehicle already has ``target``. Raises
        ``InvalidTransitionError`` for transitions outside the lifecycle.
        """
        if self.status == target:
            return False
        ASSET_LIFECYCLE.ensure(self.status, target)
        self.status = target
        self.save(update_fields=["status", "updated_at"])
        return True


ASSET_LIFECYCLE = StatusLifecycle(
    "vehicle",
    {
        RentalVehicle.Status.AVAILABLE: {
            RentalVehicle.Status.RESERVED,
            RentalVehicle.Status.MAINTENANCE,
        },
        RentalVehicle.Status.RESERVED: {
            RentalVehicle.Status.AVAILABLE,
            RentalVehicle.Status.MAINTENANCE,
        },
        RentalVehicle.Status.MAINTENANCE: {
            RentalVehicle.Status.AVAILABLE,
        },
    },
)


class Equipment(models.Model):
    """Rentable add-on such as a bike rack, camping chairs or a heater."""

    class PricingType(models.TextChoices):
        PER_DAY = "per_day", _("Per day")
        PER_UNIT = "per_unit", _("Per unit")

    name = models.CharField(_("Name"), max_length=255)
    category = models.CharField(_("Category"), max_length=100, blank=True)
    description = models.TextField(blank=True)
    price_per_day = models.DecimalField(
        _("Price"),
        max_digits=10,
        decimal_places=0,
        help_text=_("Per day for per-day items, once per unit otherwise."),
    )
    pricing_type = models.CharField(
        max_length=20,
        choices=PricingType.choices,
        default=PricingType.PER_DAY,
    )
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Equipment")
        verbose_name_plural = _("Equipment")
        ordering = ["category", "name"]

    def __str__(self) -> str:
        return self.name


class Activity(models.Model):
    """Guided activity bookable on a day within the rental window."""

    name = models.CharField(_("Name"), max_length=255)
    description = models.TextField(blank=True)
    price = models.DecimalField(
        _("Price per participant"),
        max_digits=10,
        decimal_places=0,
        default=Decimal("0"),
    )
    duration = models.CharField(max_length=100, blank=True)
    location = models.CharField(max_length=255, blank=True)
    start_date = models.DateField(null=True, blank=True, help_text=_("First day the activity is offered."))
    end_date = models.DateField(null=True, blank=True, help_text=_("Last day the activity is offered."))
    max_participants = models.PositiveIntegerField(null=True, blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Activity")
        verbose_name_plural = _("Activities")
        ordering = ["name"]

    def __str__(self) -> str:
        return self.name

    def is_offered_on(self, day: date) -> bool:
        if self.start_date and day < self.start_date:
            return False
        if self.end_date and day > self.end_date:
            return False
        return True


def is_upcoming(activity: Activity, today: date) -> bool:
    """Activity is active and still has offering days on or after ``today``.

    Computed at read time, never stored.
    """
    if not activity.is_active:
        return False
    return activity.end_date is None or activity.end_date >= today
