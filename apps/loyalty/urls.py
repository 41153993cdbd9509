"""URL declarations for the loyalty app."""

from __future__ import annotations

from django.urls import path, include  # type: ignore
from rest_framework.routers import DefaultRouter  # type: ignore

from .views import LoyaltyTierViewSet

router = DefaultRouter()
router.register(r'tiers', LoyaltyTierViewSet, basename='loyalty-tier')

urlpatterns = [
    path('', include(router.urls)),
]
