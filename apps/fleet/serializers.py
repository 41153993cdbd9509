"""Serializers for the fleet catalogue."""

from __future__ import annotations

from django.utils import timezone  # type: ignore
from rest_framework import serializers  # type: ignore

from .models import Activity, Equipment, RentalVehicle, is_upcoming


class RentalVehicleSerializer(serializers.ModelSerializer):
    class Meta:
        model = RentalVehicle
        fields = [
            "id",
            "name",
            "vehicle_type",
            "license_plate",
            "description",
            "daily_rate",
            "status",
            "location",
        ]
        read_only_fields = fields


class VehicleShortSerializer(serializers.ModelSerializer):
    """Vehicle summary embedded in reservations and the calendar."""

    class Meta:
        model = RentalVehicle
        fields = ["id", "name", "vehicle_type", "license_plate", "status"]


class EquipmentSerializer(serializers.ModelSerializer):
    class Meta:
        model = Equipment
        fields = ["id", "name", "category", "description", "price_per_day", "pricing_type"]
        read_only_fields = fields


class ActivitySerializer(serializers.ModelSerializer):
    is_upcoming = serializers.SerializerMethodField()

    class Meta:
        model = Activity
        fields = [
            "id",
            "name",
            "description",
            "price",
            "duration",
            "location",
            "start_date",
            "end_date",
            "max_participants",
            "is_upcoming",
        ]
        read_only_fields = fields

    def get_is_upcoming(self, obj: Activity) -> bool:
        return is_upcoming(obj, timezone.localdate())


class AvailabilityQuerySerializer(serializers.Serializer):
    start_date = serializers.DateField(required=False)
    end_date = serializers.DateField(required=False)
