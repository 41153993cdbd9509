"""Serializers for user-related API endpoints."""

from __future__ import annotations

from django.contrib.auth import get_user_model  # type: ignore
from rest_framework import serializers  # type: ignore

from apps.loyalty.services import resolve_discount_rate

User = get_user_model()


class UserSerializer(serializers.ModelSerializer):
    """Profile of the current user, including the loyalty discount."""

    discount_rate = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = [
            "id",
            "email",
            "username",
            "first_name",
            "last_name",
            "phone",
            "role",
            "loyalty_tier",
            "discount_rate",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_discount_rate(self, obj) -> str:  # type: ignore
        return str(resolve_discount_rate(obj.loyalty_tier))


class CustomerShortSerializer(serializers.ModelSerializer):
    """Customer details embedded in reservation and calendar payloads."""

    name = serializers.CharField(source="display_name", read_only=True)

    class Meta:
        model = User
        fields = ["id", "name", "email", "phone", "loyalty_tier"]
