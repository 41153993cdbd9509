"""FilterSet definitions for reservation listing."""

from __future__ import annotations

import django_filters  # type: ignore

from .domain.lifecycle import ReservationStatus
from .models import Reservation


class ReservationFilterSet(django_filters.FilterSet):
    """Filter by status, vehicle and an inclusive date window."""

    status = django_filters.MultipleChoiceFilter(field_name="status", choices=ReservationStatus.choices)
    vehicle = django_filters.NumberFilter(field_name="vehicle_id", lookup_expr="exact")
    # Reservations touching [date_from, date_to]
    date_from = django_filters.DateFilter(field_name="end_date", lookup_expr="gte")
    date_to = django_filters.DateFilter(field_name="start_date", lookup_expr="lte")
    payment_status = django_filters.CharFilter(field_name="payment_status", lookup_expr="exact")

    class Meta:
        model = Reservation
        fields = ["status", "vehicle", "payment_status"]
