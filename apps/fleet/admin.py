"""Admin registrations for the fleet catalogue."""

from __future__ import annotations

from django.contrib import admin

from .models import Activity, Equipment, RentalVehicle


@admin.register(RentalVehicle)
class RentalVehicleAdmin(admin.ModelAdmin):
    list_display = ("name", "vehicle_type", "license_plate", "daily_rate", "status", "location")
    list_filter = ("status", "vehicle_type", "location")
    search_fields = ("name", "license_plate")
    readonly_fields = ("created_at", "updated_at")


@admin.register(Equipment)
class EquipmentAdmin(admin.ModelAdmin):
    list_display = ("name", "category", "price_per_day", "pricing_type", "is_active")
    list_filter = ("category", "pricing_type", "is_active")
    search_fields = ("name",)


@admin.register(Activity)
class ActivityAdmin(admin.ModelAdmin):
    list_display = ("name", "price", "location", "start_date", "end_date", "max_participants", "is_active")
    list_filter = ("is_active", "location")
    search_fields = ("name", "location")
    date_hierarchy = "start_date"
