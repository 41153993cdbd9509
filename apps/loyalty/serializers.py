"""Serializers for the loyalty tier catalogue."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .models import LoyaltyTier


class LoyaltyTierSerializer(serializers.ModelSerializer):
    discount_percent = serializers.DecimalField(max_digits=6, decimal_places=2, read_only=True)

    class Meta:
        model = LoyaltyTier
        fields = [
            "id",
            "name",
            "min_amount",
            "min_likes",
            "min_posts",
            "discount_rate",
            "discount_percent",
            "position",
        ]
        read_only_fields = fields
