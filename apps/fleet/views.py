"""Read-only fleet catalogue API with availability search."""

from __future__ import annotations

from drf_spectacular.utils import OpenApiParameter, extend_schema  # type: ignore
from rest_framework import permissions, status, viewsets  # type: ignore
from rest_framework.response import Response  # type: ignore

from apps.reservations.exceptions import ReservationError
from apps.reservations.services import list_available_vehicles
from apps.reservations.views import error_response

from .models import Activity, Equipment, RentalVehicle
from .serializers import (
    ActivitySerializer,
    AvailabilityQuerySerializer,
    EquipmentSerializer,
    RentalVehicleSerializer,
)


class RentalVehicleViewSet(viewsets.ReadOnlyModelViewSet):
    """Vehicles. With ``start_date`` and ``end_date`` only free vehicles are listed."""

    queryset = RentalVehicle.objects.all()
    serializer_class = RentalVehicleSerializer
    permission_classes = [permissions.AllowAny]

    @extend_schema(
        parameters=[
            OpenApiParameter("start_date", str, description="Pickup day, YYYY-MM-DD"),
            OpenApiParameter("end_date", str, description="Return day, YYYY-MM-DD"),
        ]
    )
    def list(self, request, *args, **kwargs):  # type: ignore
        query = AvailabilityQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        try:
            vehicles = list_available_vehicles(
                query.validated_data.get("start_date"),
                query.validated_data.get("end_date"),
            )
        except ReservationError as exc:
            return error_response(exc)
        serializer = self.get_serializer(vehicles, many=True)
        return Response(serializer.data, status=status.HTTP_200_OK)


class EquipmentViewSet(viewsets.ReadOnlyModelViewSet):
    queryset = Equipment.objects.filter(is_active=True)
    serializer_class = EquipmentSerializer
    permission_classes = [permissions.AllowAny]


class ActivityViewSet(viewsets.ReadOnlyModelViewSet):
    queryset = Activity.objects.filter(is_active=True)
    serializer_class = ActivitySerializer
    permission_classes = [permissions.AllowAny]
