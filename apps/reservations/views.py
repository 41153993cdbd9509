"""API views for reservations and the staff fleet calendar."""

from __future__ import annotations

from datetime import date

import structlog  # type: ignore
from django.conf import settings  # type: ignore
from django_filters.rest_framework import DjangoFilterBackend  # type: ignore
from drf_spectacular.utils import extend_schema  # type: ignore
from rest_framework import mixins, permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from apps.fleet.models import RentalVehicle
from apps.fleet.serializers import VehicleShortSerializer
from apps.users.permissions import IsStaffMember, is_staff_user
from shared.domain.value_objects import DateRange

from .application.command_handlers import (
    CreateReservationHandler,
    QuoteReservationHandler,
    SaveChecklistHandler,
    SetReservationStatusCommand,
    SetReservationStatusHandler,
)
from .domain.calendar import build_calendar
from .domain.lifecycle import CALENDAR_STATUSES, ReservationStatus
from .exceptions import (
    ReservationConflictError,
    ReservationError,
    ReservationNotFoundError,
    ReservationValidationError,
    TransientStoreError,
)
from .filters import ReservationFilterSet
from .models import RentalChecklist, Reservation
from .serializers import (
    CalendarQuerySerializer,
    ChecklistSaveSerializer,
    RentalChecklistSerializer,
    QuoteResultSerializer,
    ReservationCancelSerializer,
    ReservationCreateSerializer,
    ReservationQuoteSerializer,
    ReservationSerializer,
    ReservationStatusSerializer,
)
from .services import buffer_days, buffered_window, translate_store_errors

logger = structlog.get_logger(__name__)

ERROR_STATUS = {
    ReservationValidationError: status.HTTP_400_BAD_REQUEST,
    ReservationNotFoundError: status.HTTP_404_NOT_FOUND,
    ReservationConflictError: status.HTTP_409_CONFLICT,
    TransientStoreError: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def error_response(exc: ReservationError) -> Response:
    """Translate a reservation error into a JSON response."""
    http_status = status.HTTP_400_BAD_REQUEST
    for error_class, mapped in ERROR_STATUS.items():
        if isinstance(exc, error_class):
            http_status = mapped
            break
    payload = exc.to_dict()
    if isinstance(exc, ReservationConflictError) and exc.conflicting_ids:
        payload["conflicting_reservations"] = exc.conflicting_ids
    logger.info("reservation.rejected", code=exc.code, status=http_status, detail=exc.message)
    return Response(payload, status=http_status)


class IsReservationStakeholder(permissions.BasePermission):
    """Customers see their own reservations, staff see all."""

    def has_object_permission(self, request, view, obj: Reservation):  # type: ignore
        user = request.user
        if not user.is_authenticated:
            return False
        if is_staff_user(user):
            return True
        return obj.customer_id == user.id


class ReservationViewSet(
    mixins.CreateModelMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    """Viewset for creating reservations and moving them through their lifecycle."""

    queryset = (
        Reservation.objects.select_related("vehicle", "customer")
        .prefetch_related("equipment_lines__equipment", "activity_lines__activity", "checklists__completed_by")
        .all()
    )
    serializer_class = ReservationSerializer
    permission_classes = [permissions.IsAuthenticated, IsReservationStakeholder]
    filter_backends = [DjangoFilterBackend]
    filterset_class = ReservationFilterSet

    def get_serializer_class(self):  # type: ignore
        if self.action == "create":
            return ReservationCreateSerializer
        if self.action == "quote":
            return ReservationQuoteSerializer
        if self.action == "cancel":
            return ReservationCancelSerializer
        if self.action == "set_status":
            return ReservationStatusSerializer
        if self.action == "checklists":
            return ChecklistSaveSerializer
        return ReservationSerializer

    def get_queryset(self):  # type: ignore
        qs = super().get_queryset()
        if is_staff_user(self.request.user):
            return qs
        return qs.for_customer(self.request.user)

    @extend_schema(request=ReservationCreateSerializer, responses={201: ReservationSerializer})
    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            reservation = CreateReservationHandler().handle(serializer.to_command(request.user.id))
        except ReservationError as exc:
            logger.warning("reservation.create_failed", user_id=request.user.id, code=exc.code)
            return error_response(exc)
        reservation = self.get_queryset().get(pk=reservation.pk)
        return Response(ReservationSerializer(reservation).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=ReservationQuoteSerializer)
    @action(detail=False, methods=["post"])
    def quote(self, request):
        """Price a reservation without storing it."""
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            draft = QuoteReservationHandler().handle(serializer.to_command(request.user.id))
        except ReservationError as exc:
            return error_response(exc)
        return Response(QuoteResultSerializer(draft).data)

    @extend_schema(request=ReservationCancelSerializer, responses={200: ReservationSerializer})
    @action(detail=True, methods=["post"])
    def cancel(self, request, pk=None):
        """Cancel a pending or confirmed reservation."""
        reservation = self.get_object()
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        command = SetReservationStatusCommand(
            reservation_id=reservation.pk,
            status=ReservationStatus.CANCELLED,
            reason=serializer.validated_data["reason"],
            actor_id=request.user.id,
        )
        return self._run_status_command(command)

    @extend_schema(request=ReservationStatusSerializer, responses={200: ReservationSerializer})
    @action(detail=True, methods=["post"], url_path="status", permission_classes=[IsStaffMember])
    def set_status(self, request, pk=None):
        """Staff transition: confirm, checkout, return or cancel."""
        reservation = self.get_object()
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        return self._run_status_command(serializer.to_command(reservation.pk, request.user.id))

    @extend_schema(request=ChecklistSaveSerializer, responses={200: RentalChecklistSerializer(many=True)})
    @action(detail=True, methods=["get", "post"], permission_classes=[IsStaffMember])
    def checklists(self, request, pk=None):
        """Checkout and return checklists; completing handover or return moves the reservation on."""
        reservation = self.get_object()
        if request.method == "POST":
            serializer = self.get_serializer(data=request.data)
            serializer.is_valid(raise_exception=True)
            try:
                SaveChecklistHandler().handle(serializer.to_command(reservation.pk, request.user.id))
            except ReservationError as exc:
                return error_response(exc)
        checklists = RentalChecklist.objects.filter(reservation_id=reservation.pk).select_related("completed_by")
        return Response(RentalChecklistSerializer(checklists, many=True).data)

    def _run_status_command(self, command: SetReservationStatusCommand) -> Response:
        try:
            reservation = SetReservationStatusHandler().handle(command)
        except ReservationError as exc:
            return error_response(exc)
        reservation = self.get_queryset().get(pk=reservation.pk)
        return Response(ReservationSerializer(reservation).data)

    @extend_schema(parameters=[CalendarQuerySerializer])
    @action(detail=False, methods=["get"], permission_classes=[IsStaffMember])
    def calendar(self, request):
        """Vehicle × day grid for the staff calendar."""
        query = CalendarQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        start_date: date = query.validated_data["start_date"]
        end_date: date = query.validated_data["end_date"]

        if start_date > end_date:
            return error_response(ReservationValidationError("Start date must not be after end date."))
        date_range = DateRange(start_date, end_date)
        if date_range.days > settings.CALENDAR_MAX_DAYS:
            return error_response(ReservationValidationError(
                f"Calendar range is limited to {settings.CALENDAR_MAX_DAYS} days."
            ))

        try:
            window_start, window_end = buffered_window(start_date, end_date)
            with translate_store_errors("calendar query"):
                vehicles = list(RentalVehicle.objects.order_by("name", "id"))
                # Reservations ending just before the range still put buffer days on it
                reservations = list(
                    self.queryset.filter(status__in=CALENDAR_STATUSES)
                    .intersecting(window_start, window_end)
                    .order_by("start_date", "id")
                )
        except ReservationError as exc:
            return error_response(exc)

        grid = build_calendar(vehicles, reservations, date_range, buffer_days=buffer_days())
        logger.debug("calendar.rendered", start=str(start_date), days=date_range.days, vehicles=len(vehicles))
        projection = grid.to_dict()
        return Response({
            "start_date": projection["start_date"],
            "end_date": projection["end_date"],
            "dates": projection["dates"],
            "vehicles": VehicleShortSerializer(vehicles, many=True).data,
            "reservations": ReservationSerializer(reservations, many=True).data,
            "rows": projection["rows"],
        })
