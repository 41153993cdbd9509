"""Read-only API for loyalty tiers."""

from __future__ import annotations

from rest_framework import permissions, viewsets  # type: ignore

from .models import LoyaltyTier
from .serializers import LoyaltyTierSerializer


class LoyaltyTierViewSet(viewsets.ReadOnlyModelViewSet):
    """Configured tiers, lowest first. Tiers are edited in the admin."""

    queryset = LoyaltyTier.objects.all()
    serializer_class = LoyaltyTierSerializer
    permission_classes = [permissions.AllowAny]
    pagination_class = None
