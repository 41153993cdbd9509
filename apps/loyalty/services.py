"""Discount resolution for loyalty tiers."""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Optional, Tuple

from django.conf import settings  # type: ignore

from .models import LoyaltyTier

logger = logging.getLogger(__name__)

ZERO_RATE = Decimal("0")


def _lowest_tier() -> Optional[LoyaltyTier]:
    return LoyaltyTier.objects.order_by("position", "name").first()


def resolve_tier(tier_name: Optional[str]) -> Optional[LoyaltyTier]:
    """Return the configured tier for ``tier_name`` or the lowest tier.

    Returns ``None`` only when no tiers are configured at all.
    """
    if tier_name:
        tier = LoyaltyTier.objects.filter(name=tier_name).first()
        if tier is not None:
            return tier
        logger.warning(f"Unknown loyalty tier '{tier_name}', falling back to the lowest tier")
    return _lowest_tier()


def resolve_discount_rate(tier_name: Optional[str]) -> Decimal:
    """
    Discount rate for a tier name, as a fraction in ``[0, 1)``

    Unknown or missing names resolve to the lowest tier's rate. With no
    tiers configured the rate is zero.
    """
    tier = resolve_tier(tier_name)
    if tier is None:
        return ZERO_RATE
    rate = Decimal(tier.discount_rate)
    if rate < 0 or rate >= 1:
        # Guarded by a check constraint; rows written around the ORM are clamped
        logger.error(f"Loyalty tier {tier.name} has out-of-range discount rate {rate}")
        return ZERO_RATE
    return rate


def resolve_customer_discount(user) -> Tuple[str, Decimal]:
    """Return ``(tier_name, discount_rate)`` for a customer."""
    tier_name = getattr(user, "loyalty_tier", None) or settings.DEFAULT_LOYALTY_TIER
    tier = resolve_tier(tier_name)
    if tier is None:
        return tier_name, ZERO_RATE
    return tier.name, resolve_discount_rate(tier.name)
