"""Admin registrations for renters and rental staff."""

from __future__ import annotations

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.utils.translation import gettext_lazy as _

from apps.loyalty.services import resolve_discount_rate

from .models import CustomUser


@admin.register(CustomUser)
class CustomUserAdmin(BaseUserAdmin):
    list_display = ("email", "display_name", "role", "loyalty_tier", "tier_discount", "is_active")
    list_filter = ("role", "loyalty_tier", "is_active")
    search_fields = ("email", "username", "last_name", "phone")
    ordering = ("email",)
    readonly_fields = ("last_login", "date_joined", "created_at", "updated_at")
    actions = ("make_staff",)

    fieldsets = (
        (_("Login"), {"fields": ("email", "password")}),
        (_("Renter"), {"fields": ("username", "first_name", "last_name", "phone", "loyalty_tier")}),
        (_("Access"), {"fields": ("role", "is_active", "is_staff", "is_superuser", "groups")}),
        (_("History"), {"classes": ("collapse",), "fields": readonly_fields}),
    )
    add_fieldsets = (
        (None, {
            "classes": ("wide",),
            "fields": ("email", "password1", "password2", "role", "loyalty_tier"),
        }),
    )

    @admin.display(description=_("Discount"))
    def tier_discount(self, obj: CustomUser) -> str:
        return f"{resolve_discount_rate(obj.loyalty_tier) * 100:.0f}%"

    @admin.action(description=_("Give rental desk access"))
    def make_staff(self, request, queryset):
        updated = queryset.update(role=CustomUser.RoleChoices.STAFF, is_staff=True)
        self.message_user(request, _("%(count)d user(s) can now use the rental desk.") % {"count": updated})
