"""Admin registrations for reservations."""

from __future__ import annotations

from django.contrib import admin

from .models import RentalChecklist, Reservation, ReservationActivity, ReservationEquipment

MONEY_FIELDS = ("daily_rate", "subtotal", "discount_rate", "discount_amount", "tax", "total", "currency")


class ReservationEquipmentInline(admin.TabularInline):
    model = ReservationEquipment
    extra = 0
    readonly_fields = ("price_per_day", "pricing_type", "days", "subtotal")


class ReservationActivityInline(admin.TabularInline):
    model = ReservationActivity
    extra = 0
    readonly_fields = ("price", "subtotal")


class RentalChecklistInline(admin.StackedInline):
    model = RentalChecklist
    extra = 0
    fields = ("checklist_type", "items", "notes", "has_damage", "damage_notes", "mileage", "completed_at", "completed_by")
    readonly_fields = ("completed_at", "completed_by")


@admin.register(Reservation)
class ReservationAdmin(admin.ModelAdmin):
    list_display = (
        "reference",
        "vehicle",
        "customer",
        "start_date",
        "end_date",
        "status",
        "payment_method",
        "payment_status",
        "total",
    )
    list_filter = ("status", "payment_method", "payment_status", "vehicle")
    search_fields = ("reference", "customer__email", "vehicle__name", "payment_reference")
    date_hierarchy = "start_date"
    readonly_fields = ("reference", "days", "loyalty_tier", "created_at", "updated_at", "cancelled_at") + MONEY_FIELDS
    inlines = [ReservationEquipmentInline, ReservationActivityInline, RentalChecklistInline]
