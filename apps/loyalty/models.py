"""Loyalty tier configuration."""

from __future__ import annotations

from decimal import Decimal

from django.core.validators import MaxValueValidator, MinValueValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class LoyaltyTier(models.Model):
    """A customer rank with its qualification thresholds and discount.

    ``discount_rate`` is a fraction: ``0.10`` means 10 % off the vehicle
    rental total. Tiers are ordered by ``position``, lowest first; the
    lowest tier is the fallback for customers with an unknown tier name.
    """

    name = models.CharField(_("Name"), max_length=50, unique=True)
    min_amount = models.DecimalField(
        _("Minimum spend"),
        max_digits=12,
        decimal_places=0,
        default=0,
        help_text=_("Total rental spend required to reach this tier."),
    )
    min_likes = models.PositiveIntegerField(_("Minimum likes"), default=0)
    min_posts = models.PositiveIntegerField(_("Minimum posts"), default=0)
    discount_rate = models.DecimalField(
        _("Discount rate"),
        max_digits=5,
        decimal_places=4,
        default=Decimal("0"),
        validators=[MinValueValidator(Decimal("0")), MaxValueValidator(Decimal("0.9999"))],
    )
    position = models.PositiveSmallIntegerField(_("Position"), default=0)

    class Meta:
        verbose_name = _("Loyalty tier")
        verbose_name_plural = _("Loyalty tiers")
        ordering = ["position", "name"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(discount_rate__gte=0) & models.Q(discount_rate__lt=1),
                name="loyalty_tier_discount_rate_range",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.name} ({self.discount_percent}%)"

    @property
    def discount_percent(self) -> Decimal:
        return (Decimal(self.discount_rate) * 100).quantize(Decimal("0.01"))
