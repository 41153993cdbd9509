"""User domain models for the campervan rental platform.

Customers sign in with their email address. Staff members manage the
fleet calendar and move reservations through their lifecycle. Every
customer carries the name of their current loyalty tier, which the
reservation flow resolves to a discount rate.
"""

from __future__ import annotations

from typing import Any

from django.conf import settings  # type: ignore
from django.contrib.auth.models import AbstractUser, BaseUserManager  # type: ignore
from django.core.validators import RegexValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


PHONE_VALIDATOR = RegexValidator(
    regex=r"^\+?\d{7,15}$",
    message=_("Invalid phone number. Use the international format without spaces."),
)


def default_loyalty_tier() -> str:
    return getattr(settings, "DEFAULT_LOYALTY_TIER", "Bronze")


# Django flags implied by each role unless given explicitly
ROLE_FLAGS = {
    "customer": {"is_staff": False, "is_superuser": False},
    "staff": {"is_staff": True, "is_superuser": False},
    "admin": {"is_staff": True, "is_superuser": True},
}


class CustomUserManager(BaseUserManager):
    """Creates renters and desk staff; the email address is the login."""

    use_in_migrations = True

    def _create_with_role(self, role: str, email: str, password: str | None, **extra_fields: Any):
        if not email:
            raise ValueError("An email address is required.")
        extra_fields.setdefault("role", role)
        for flag, value in ROLE_FLAGS[role].items():
            extra_fields.setdefault(flag, value)
        if role == "admin" and not (extra_fields["is_staff"] and extra_fields["is_superuser"]):
            raise ValueError("An administrator needs is_staff=True and is_superuser=True.")
        if extra_fields.get("phone"):
            extra_fields["phone"] = self.normalize_phone(extra_fields["phone"])

        user = self.model(email=self.normalize_email(email), **extra_fields)
        if password:
            user.set_password(password)
        else:
            user.set_unusable_password()
        user.save(using=self._db)
        return user

    def create_user(self, email: str, password: str | None = None, **extra_fields: Any):
        return self._create_with_role("customer", email, password, **extra_fields)

    def create_staff(self, email: str, password: str | None = None, **extra_fields: Any):
        return self._create_with_role("staff", email, password, **extra_fields)

    def create_superuser(self, email: str, password: str | None = None, **extra_fields: Any):
        return self._create_with_role("admin", email, password, **extra_fields)

    @staticmethod
    def normalize_phone(phone: str) -> str:
        """``+81 90-1234-5678`` is stored as ``+819012345678``."""
        return "".join(ch for ch in phone if ch not in " -")


class CustomUser(AbstractUser):
    """Platform user: a renting customer or a member of staff."""

    class RoleChoices(models.TextChoices):
        CUSTOMER = "customer", _("Customer")
        STAFF = "staff", _("Staff")
        ADMIN = "admin", _("Administrator")

    username = models.CharField(
        _("Display name"),
        max_length=150,
        blank=True,
        help_text=_("Optional, shown in notifications and the staff calendar."),
    )
    email = models.EmailField(_("Email"), unique=True)
    phone = models.CharField(
        _("Phone"),
        max_length=20,
        unique=True,
        null=True,
        blank=True,
        validators=[PHONE_VALIDATOR],
    )
    role = models.CharField(
        _("Role"),
        max_length=20,
        choices=RoleChoices.choices,
        default=RoleChoices.CUSTOMER,
    )
    loyalty_tier = models.CharField(
        _("Loyalty tier"),
        max_length=50,
        default=default_loyalty_tier,
        help_text=_("Name of a configured loyalty tier, e.g. Bronze or Gold."),
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = CustomUserManager()

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = ["username"]

    class Meta:
        verbose_name = _("User")
        verbose_name_plural = _("Users")
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return f"{self.email} ({self.get_role_display()})"

    @property
    def display_name(self) -> str:
        full_name = self.get_full_name().strip()
        return full_name or self.username or self.email

    def is_staff_member(self) -> bool:
        return (
            self.is_staff
            or self.is_superuser
            or self.role in {self.RoleChoices.STAFF, self.RoleChoices.ADMIN}
        )


# Short alias used across modules and tests
User = CustomUser
