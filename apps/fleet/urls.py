"""URL declarations for the fleet app."""

from __future__ import annotations

from django.urls import path, include  # type: ignore
from rest_framework.routers import DefaultRouter  # type: ignore

from .views import ActivityViewSet, EquipmentViewSet, RentalVehicleViewSet

router = DefaultRouter()
router.register(r'vehicles', RentalVehicleViewSet, basename='vehicle')
router.register(r'equipment', EquipmentViewSet, basename='equipment')
router.register(r'activities', ActivityViewSet, basename='activity')

urlpatterns = [
    path('', include(router.urls)),
]
