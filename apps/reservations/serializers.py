"""Serializers for the reservation domain."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from apps.fleet.serializers import VehicleShortSerializer
from apps.users.serializers import CustomerShortSerializer

from .application.command_handlers import (
    ActivityRequest,
    ChecklistInput,
    CreateReservationCommand,
    EquipmentRequest,
    QuoteReservationCommand,
    SaveChecklistCommand,
    SetReservationStatusCommand,
)
from .domain.lifecycle import ChecklistType, PaymentMethod, PaymentStatus, ReservationStatus
from .models import RentalChecklist, Reservation, ReservationActivity, ReservationEquipment


# ===== Input =====

class EquipmentRequestSerializer(serializers.Serializer):
    equipment_id = serializers.IntegerField()
    quantity = serializers.IntegerField(default=1)


class ActivityRequestSerializer(serializers.Serializer):
    activity_id = serializers.IntegerField()
    date = serializers.DateField()
    participants = serializers.IntegerField(default=1)


class ReservationQuoteSerializer(serializers.Serializer):
    """Request body shared by quote and create."""

    vehicle_id = serializers.IntegerField()
    start_date = serializers.DateField()
    end_date = serializers.DateField()
    days = serializers.IntegerField(required=False, allow_null=True)
    equipment = EquipmentRequestSerializer(many=True, required=False)
    activities = ActivityRequestSerializer(many=True, required=False)

    command_class = QuoteReservationCommand

    def _command_kwargs(self, customer_id) -> dict:
        data = self.validated_data
        return {
            "customer_id": customer_id,
            "vehicle_id": data["vehicle_id"],
            "start_date": data["start_date"],
            "end_date": data["end_date"],
            "days": data.get("days"),
            "equipment": [EquipmentRequest(**item) for item in data.get("equipment", [])],
            "activities": [ActivityRequest(**item) for item in data.get("activities", [])],
        }

    def to_command(self, customer_id):
        return self.command_class(**self._command_kwargs(customer_id))


class ReservationCreateSerializer(ReservationQuoteSerializer):
    payment_method = serializers.ChoiceField(choices=PaymentMethod.choices, default=PaymentMethod.ON_SITE)
    payment_succeeded = serializers.BooleanField(default=False)
    payment_reference = serializers.CharField(required=False, allow_blank=True, default="")

    command_class = CreateReservationCommand

    def _command_kwargs(self, customer_id) -> dict:
        kwargs = super()._command_kwargs(customer_id)
        kwargs.update({
            "payment_method": self.validated_data["payment_method"],
            "payment_succeeded": self.validated_data["payment_succeeded"],
            "payment_reference": self.validated_data["payment_reference"],
        })
        return kwargs


class ChecklistItemSerializer(serializers.Serializer):
    id = serializers.CharField(required=False, allow_blank=True, max_length=50)
    label = serializers.CharField(max_length=255)
    checked = serializers.BooleanField(default=False)


class ChecklistInputSerializer(serializers.Serializer):
    items = ChecklistItemSerializer(many=True, required=False)
    notes = serializers.CharField(required=False, allow_blank=True, default="")
    has_damage = serializers.BooleanField(default=False)
    damage_notes = serializers.CharField(required=False, allow_blank=True, default="")
    mileage = serializers.IntegerField(required=False, allow_null=True, min_value=0)


def _checklist_input(data) -> ChecklistInput:
    return ChecklistInput(
        items=[dict(item) for item in data.get("items", [])],
        notes=data.get("notes", ""),
        has_damage=data.get("has_damage", False),
        damage_notes=data.get("damage_notes", ""),
        mileage=data.get("mileage"),
    )


class ReservationStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=ReservationStatus.choices)
    payment_status = serializers.ChoiceField(choices=PaymentStatus.choices, required=False, allow_null=True)
    reason = serializers.CharField(required=False, allow_blank=True, default="", max_length=255)
    checklist = ChecklistInputSerializer(required=False, allow_null=True)

    def to_command(self, reservation_id, actor_id) -> SetReservationStatusCommand:
        checklist = self.validated_data.get("checklist")
        return SetReservationStatusCommand(
            reservation_id=reservation_id,
            status=self.validated_data["status"],
            payment_status=self.validated_data.get("payment_status"),
            reason=self.validated_data["reason"],
            actor_id=actor_id,
            checklist=_checklist_input(checklist) if checklist is not None else None,
        )


class ChecklistSaveSerializer(ChecklistInputSerializer):
    """Request body of the staff checklist endpoint."""

    checklist_type = serializers.ChoiceField(choices=ChecklistType.choices)
    complete = serializers.BooleanField(default=False)

    def to_command(self, reservation_id, actor_id) -> SaveChecklistCommand:
        return SaveChecklistCommand(
            reservation_id=reservation_id,
            checklist_type=self.validated_data["checklist_type"],
            checklist=_checklist_input(self.validated_data),
            complete=self.validated_data["complete"],
            actor_id=actor_id,
        )


class ReservationCancelSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, default="", max_length=255)


class CalendarQuerySerializer(serializers.Serializer):
    start_date = serializers.DateField()
    end_date = serializers.DateField()


# ===== Output =====

def _money(value) -> str:
    return str(value)


class QuoteResultSerializer(serializers.Serializer):
    """Renders a priced ``ReservationDraft``."""

    def to_representation(self, draft):  # type: ignore
        price = draft.price
        return {
            "vehicle": VehicleShortSerializer(draft.vehicle).data,
            "start_date": draft.dates.start_date.isoformat(),
            "end_date": draft.dates.end_date.isoformat(),
            "days": price.days,
            "daily_rate": _money(price.daily_rate),
            "vehicle_total": _money(price.vehicle_total),
            "equipment": [
                {
                    "equipment_id": item.id,
                    "name": item.name,
                    "quantity": line.quantity,
                    "price_per_day": _money(line.unit_price),
                    "pricing_type": item.pricing_type,
                    "subtotal": _money(line.subtotal),
                }
                for item, line in zip(draft.equipment, price.equipment_lines)
            ],
            "activities": [
                {
                    "activity_id": item.id,
                    "name": item.name,
                    "date": request.date.isoformat(),
                    "participants": line.quantity,
                    "price": _money(line.unit_price),
                    "subtotal": _money(line.subtotal),
                }
                for item, request, line in zip(draft.activities, draft.activity_requests, price.activity_lines)
            ],
            "equipment_total": _money(price.equipment_total),
            "activities_total": _money(price.activities_total),
            "subtotal": _money(price.subtotal),
            "loyalty_tier": draft.loyalty_tier,
            "discount_rate": _money(price.discount_rate),
            "discount_amount": _money(price.discount_amount),
            "subtotal_after_discount": _money(price.subtotal_after_discount),
            "tax_rate": _money(price.tax_rate),
            "tax": _money(price.tax),
            "total": _money(price.total),
        }


class ReservationEquipmentSerializer(serializers.ModelSerializer):
    name = serializers.ReadOnlyField(source="equipment.name")

    class Meta:
        model = ReservationEquipment
        fields = ["id", "equipment_id", "name", "quantity", "days", "price_per_day", "pricing_type", "subtotal"]
        read_only_fields = fields


class ReservationActivitySerializer(serializers.ModelSerializer):
    name = serializers.ReadOnlyField(source="activity.name")

    class Meta:
        model = ReservationActivity
        fields = ["id", "activity_id", "name", "date", "participants", "price", "subtotal"]
        read_only_fields = fields


class RentalChecklistSerializer(serializers.ModelSerializer):
    completed_by = serializers.ReadOnlyField(source="completed_by.email", default=None)

    class Meta:
        model = RentalChecklist
        fields = [
            "id",
            "checklist_type",
            "items",
            "notes",
            "has_damage",
            "damage_notes",
            "mileage",
            "is_completed",
            "completed_at",
            "completed_by",
            "updated_at",
        ]
        read_only_fields = fields


class ReservationSerializer(serializers.ModelSerializer):
    """Reservation with its vehicle, customer, line items and checklists."""

    vehicle = VehicleShortSerializer(read_only=True)
    customer = CustomerShortSerializer(read_only=True)
    equipment_lines = ReservationEquipmentSerializer(many=True, read_only=True)
    activity_lines = ReservationActivitySerializer(many=True, read_only=True)
    checklists = RentalChecklistSerializer(many=True, read_only=True)

    class Meta:
        model = Reservation
        fields = [
            "id",
            "reference",
            "vehicle",
            "customer",
            "start_date",
            "end_date",
            "days",
            "status",
            "daily_rate",
            "subtotal",
            "discount_rate",
            "discount_amount",
            "tax",
            "total",
            "currency",
            "loyalty_tier",
            "payment_method",
            "payment_status",
            "payment_reference",
            "equipment_lines",
            "activity_lines",
            "checklists",
            "cancelled_at",
            "cancellation_reason",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields
