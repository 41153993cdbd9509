"""Admin registrations for loyalty tiers."""

from __future__ import annotations

from django.contrib import admin

from .models import LoyaltyTier


@admin.register(LoyaltyTier)
class LoyaltyTierAdmin(admin.ModelAdmin):
    list_display = ("name", "position", "discount_rate", "min_amount", "min_likes", "min_posts")
    list_editable = ("position", "discount_rate")
    ordering = ("position", "name")
    search_fields = ("name",)
