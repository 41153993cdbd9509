"""Tests for quoting and creating reservations through the command handlers."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from unittest import mock

import pytest
from django.db import IntegrityError

from apps.fleet.models import RentalVehicle
from apps.reservations.application.command_handlers import (
    ActivityRequest,
    CreateReservationCommand,
    CreateReservationHandler,
    EquipmentRequest,
    QuoteReservationCommand,
    QuoteReservationHandler,
)
from apps.reservations.exceptions import (
    ReservationConflictError,
    ReservationNotFoundError,
    ReservationValidationError,
    TransientStoreError,
)
from apps.reservations.models import Reservation, ReservationActivity, ReservationEquipment
from apps.reservations.services import has_conflict, list_available_vehicles


def _command(customer, vehicle, start="2025-07-10", end="2025-07-12", **kwargs):
    return CreateReservationCommand(
        customer_id=customer.id,
        vehicle_id=vehicle.id,
        start_date=start,
        end_date=end,
        **kwargs,
    )


@pytest.mark.django_db
def test_on_site_reservation_starts_pending(vehicle, customer):
    reservation = CreateReservationHandler().handle(_command(customer, vehicle))

    assert reservation.status == Reservation.Status.PENDING
    assert reservation.payment_status == Reservation.PaymentStatus.PENDING
    assert reservation.days == 3
    assert reservation.loyalty_tier == "Bronze"
    assert reservation.subtotal == Decimal("30000")
    assert reservation.discount_amount == Decimal("0")
    assert reservation.tax == Decimal("3000")
    assert reservation.total == Decimal("33000")
    assert reservation.reference.startswith("RV")


@pytest.mark.django_db
def test_card_payment_confirms_and_prices_every_line(
    vehicle, gold_customer, bike_rack, gas_canister, kayak_tour
):
    command = _command(
        gold_customer,
        vehicle,
        days=3,
        equipment=[
            EquipmentRequest(equipment_id=bike_rack.id, quantity=2),
            EquipmentRequest(equipment_id=gas_canister.id, quantity=4),
        ],
        activities=[ActivityRequest(activity_id=kayak_tour.id, date="2025-07-11", participants=2)],
        payment_method=Reservation.PaymentMethod.CREDIT_CARD,
        payment_succeeded=True,
        payment_reference=" txn_123 ",
    )

    reservation = CreateReservationHandler().handle(command)

    assert reservation.status == Reservation.Status.CONFIRMED
    assert reservation.payment_status == Reservation.PaymentStatus.COMPLETED
    assert reservation.payment_reference == "txn_123"
    assert reservation.loyalty_tier == "Gold"
    assert reservation.subtotal == Decimal("42200")
    assert reservation.discount_amount == Decimal("3000")
    assert reservation.tax == Decimal("3920")
    assert reservation.total == Decimal("43120")

    lines = {line.equipment_id: line for line in reservation.equipment_lines.all()}
    assert lines[bike_rack.id].subtotal == Decimal("3000")
    assert lines[bike_rack.id].days == 3
    assert lines[gas_canister.id].subtotal == Decimal("1200")
    activity = reservation.activity_lines.get()
    assert activity.date == date(2025, 7, 11)
    assert activity.subtotal == Decimal("8000")


@pytest.mark.django_db
def test_quote_matches_create_and_stores_nothing(vehicle, gold_customer, bike_rack):
    equipment = [EquipmentRequest(equipment_id=bike_rack.id, quantity=1)]
    draft = QuoteReservationHandler().handle(QuoteReservationCommand(
        customer_id=gold_customer.id,
        vehicle_id=vehicle.id,
        start_date="2025-07-10",
        end_date="2025-07-12",
        equipment=equipment,
    ))

    assert Reservation.objects.count() == 0
    assert draft.price.total == Decimal("31350")

    reservation = CreateReservationHandler().handle(
        _command(gold_customer, vehicle, equipment=[EquipmentRequest(equipment_id=bike_rack.id, quantity=1)])
    )
    assert reservation.total == draft.price.total


@pytest.mark.django_db
@pytest.mark.parametrize(
    "kwargs",
    [
        {"start": "2025-07-12", "end": "2025-07-10"},
        {"start": "not-a-date"},
        {"days": 4},
        {"payment_method": "bitcoin"},
        {"payment_method": "credit_card", "payment_succeeded": False, "payment_reference": "txn"},
        {"payment_method": "credit_card", "payment_succeeded": True, "payment_reference": "  "},
        {"start": "9999-12-30", "end": "9999-12-31"},
        {"start": "0001-01-01", "end": "0001-01-02"},
        {"start": "2025-07-01", "end": "2025-12-31"},
    ],
)
def test_invalid_requests_are_rejected_without_writes(vehicle, customer, kwargs):
    with pytest.raises(ReservationValidationError):
        CreateReservationHandler().handle(_command(customer, vehicle, **kwargs))

    assert Reservation.objects.count() == 0


@pytest.mark.django_db
def test_rental_length_is_capped_by_setting(vehicle, customer, settings):
    settings.RESERVATION_MAX_DAYS = 3

    with pytest.raises(ReservationValidationError) as excinfo:
        CreateReservationHandler().handle(_command(customer, vehicle, "2025-07-10", "2025-07-13"))
    assert excinfo.value.details == {"days": 4}

    reservation = CreateReservationHandler().handle(_command(customer, vehicle, "2025-07-10", "2025-07-12"))
    assert reservation.days == 3


@pytest.mark.django_db
def test_equipment_quantity_and_duplicates_are_validated(vehicle, customer, bike_rack):
    with pytest.raises(ReservationValidationError):
        CreateReservationHandler().handle(
            _command(customer, vehicle, equipment=[EquipmentRequest(equipment_id=bike_rack.id, quantity=0)])
        )
    with pytest.raises(ReservationValidationError):
        CreateReservationHandler().handle(_command(customer, vehicle, equipment=[
            EquipmentRequest(equipment_id=bike_rack.id),
            EquipmentRequest(equipment_id=bike_rack.id),
        ]))


@pytest.mark.django_db
def test_activity_outside_rental_or_offering_window_is_rejected(vehicle, customer, kayak_tour):
    with pytest.raises(ReservationValidationError):
        CreateReservationHandler().handle(_command(
            customer, vehicle,
            activities=[ActivityRequest(activity_id=kayak_tour.id, date="2025-07-20")],
        ))
    with pytest.raises(ReservationValidationError):
        CreateReservationHandler().handle(_command(
            customer, vehicle, start="2025-09-01", end="2025-09-03",
            activities=[ActivityRequest(activity_id=kayak_tour.id, date="2025-09-02")],
        ))
    with pytest.raises(ReservationValidationError):
        CreateReservationHandler().handle(_command(
            customer, vehicle,
            activities=[ActivityRequest(activity_id=kayak_tour.id, date="2025-07-11", participants=7)],
        ))


@pytest.mark.django_db
def test_unknown_references_are_not_found(vehicle, customer, bike_rack):
    with pytest.raises(ReservationNotFoundError):
        CreateReservationHandler().handle(CreateReservationCommand(
            customer_id=customer.id, vehicle_id=999999, start_date="2025-07-10", end_date="2025-07-12",
        ))
    with pytest.raises(ReservationNotFoundError):
        CreateReservationHandler().handle(
            _command(customer, vehicle, equipment=[EquipmentRequest(equipment_id=999999)])
        )

    bike_rack.is_active = False
    bike_rack.save(update_fields=["is_active"])
    with pytest.raises(ReservationNotFoundError):
        CreateReservationHandler().handle(
            _command(customer, vehicle, equipment=[EquipmentRequest(equipment_id=bike_rack.id)])
        )


@pytest.mark.django_db
def test_vehicle_in_maintenance_cannot_be_reserved(vehicle, customer):
    vehicle.status = RentalVehicle.Status.MAINTENANCE
    vehicle.save(update_fields=["status"])

    with pytest.raises(ReservationConflictError):
        CreateReservationHandler().handle(_command(customer, vehicle))


@pytest.mark.django_db
def test_back_to_back_reservations_need_a_turnaround_day(vehicle, customer):
    handler = CreateReservationHandler()
    first = handler.handle(_command(customer, vehicle, "2025-07-10", "2025-07-12"))

    with pytest.raises(ReservationConflictError) as excinfo:
        handler.handle(_command(customer, vehicle, "2025-07-13", "2025-07-14"))
    assert excinfo.value.conflicting_ids == [first.id]

    second = handler.handle(_command(customer, vehicle, "2025-07-14", "2025-07-15"))
    assert second.start_date == date(2025, 7, 14)


@pytest.mark.django_db
def test_cancelled_reservation_frees_the_dates(vehicle, customer):
    handler = CreateReservationHandler()
    first = handler.handle(_command(customer, vehicle))
    Reservation.objects.filter(pk=first.pk).update(status=Reservation.Status.CANCELLED)

    again = handler.handle(_command(customer, vehicle))

    assert again.pk != first.pk


@pytest.mark.django_db
def test_failed_line_write_rolls_back_the_whole_reservation(vehicle, customer, bike_rack, kayak_tour):
    command = _command(
        customer,
        vehicle,
        equipment=[EquipmentRequest(equipment_id=bike_rack.id)],
        activities=[ActivityRequest(activity_id=kayak_tour.id, date="2025-07-11")],
    )

    with mock.patch.object(
        CreateReservationHandler, "_persist_activities", side_effect=IntegrityError("boom")
    ):
        with pytest.raises(TransientStoreError):
            CreateReservationHandler().handle(command)

    assert Reservation.objects.count() == 0
    assert ReservationEquipment.objects.count() == 0
    assert ReservationActivity.objects.count() == 0
    assert has_conflict(vehicle.id, "2025-07-10", "2025-07-12") is False
    assert vehicle in list_available_vehicles("2025-07-10", "2025-07-12")


@pytest.mark.django_db
def test_confirmation_email_is_sent_after_commit(
    vehicle, customer, django_capture_on_commit_callbacks, mailoutbox
):
    with django_capture_on_commit_callbacks(execute=True) as callbacks:
        reservation = CreateReservationHandler().handle(_command(customer, vehicle))

    assert len(callbacks) == 1
    assert len(mailoutbox) == 1
    message = mailoutbox[0]
    assert message.to == ["customer@example.com"]
    assert reservation.reference in message.subject
    assert "Total: 33000 JPY" in message.body


@pytest.mark.django_db
def test_no_email_when_creation_fails(vehicle, customer, django_capture_on_commit_callbacks, mailoutbox):
    vehicle.status = RentalVehicle.Status.MAINTENANCE
    vehicle.save(update_fields=["status"])

    with django_capture_on_commit_callbacks(execute=True) as callbacks:
        with pytest.raises(ReservationConflictError):
            CreateReservationHandler().handle(_command(customer, vehicle))

    assert callbacks == []
    assert mailoutbox == []
