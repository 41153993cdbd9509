"""Tests for checkout and return checklists."""

from __future__ import annotations

from datetime import date

import pytest

from apps.fleet.models import RentalVehicle
from apps.reservations.application.command_handlers import (
    ChecklistInput,
    SaveChecklistCommand,
    SaveChecklistHandler,
    SetReservationStatusCommand,
    SetReservationStatusHandler,
)
from apps.reservations.exceptions import ReservationNotFoundError, ReservationValidationError
from apps.reservations.models import RentalChecklist, Reservation

Status = Reservation.Status
PaymentStatus = Reservation.PaymentStatus
Type = RentalChecklist.Type

INSPECTION = [
    {"id": "exterior_clean", "label": "Exterior cleaned", "checked": True},
    {"id": "fuel_level", "label": "Fuel level", "checked": True},
    {"id": "tire_pressure", "label": "Tire pressure", "checked": False},
]


def _reserve(vehicle, customer, status=Status.CONFIRMED, payment_status=PaymentStatus.PENDING):
    return Reservation.objects.create(
        vehicle=vehicle,
        customer=customer,
        start_date=date(2025, 7, 10),
        end_date=date(2025, 7, 12),
        days=3,
        status=status,
        payment_status=payment_status,
        daily_rate=vehicle.daily_rate,
    )


def _save(reservation, checklist_type, actor=None, complete=False, **fields):
    return SaveChecklistHandler().handle(SaveChecklistCommand(
        reservation_id=reservation.pk,
        checklist_type=checklist_type,
        checklist=ChecklistInput(**fields),
        complete=complete,
        actor_id=actor.id if actor else None,
    ))


def _check_out(reservation, actor, mileage=12000):
    _save(reservation, Type.PRE_RENTAL, actor, complete=True, items=INSPECTION, mileage=mileage)
    _save(reservation, Type.HANDOVER, actor, complete=True)


@pytest.mark.django_db
def test_draft_can_be_saved_repeatedly(vehicle, customer, staff_user):
    reservation = _reserve(vehicle, customer)

    _save(reservation, Type.PRE_RENTAL, staff_user, items=INSPECTION[:1], notes="Started")
    draft = _save(reservation, Type.PRE_RENTAL, staff_user, items=INSPECTION, notes="Rear scratch noted")

    assert RentalChecklist.objects.filter(reservation=reservation).count() == 1
    assert draft.notes == "Rear scratch noted"
    assert draft.checked_count == 2
    assert not draft.is_completed
    reservation.refresh_from_db()
    assert reservation.status == Status.CONFIRMED


@pytest.mark.django_db
def test_completing_handover_checks_the_vehicle_out(vehicle, customer, staff_user):
    reservation = _reserve(vehicle, customer)

    _check_out(reservation, staff_user)

    reservation.refresh_from_db()
    vehicle.refresh_from_db()
    assert reservation.status == Status.IN_PROGRESS
    assert vehicle.status == RentalVehicle.Status.RESERVED
    handover = reservation.checklists.get(checklist_type=Type.HANDOVER)
    assert handover.is_completed
    assert handover.completed_by == staff_user


@pytest.mark.django_db
def test_handover_needs_a_completed_inspection(vehicle, customer, staff_user):
    reservation = _reserve(vehicle, customer)
    _save(reservation, Type.PRE_RENTAL, staff_user, items=INSPECTION)

    with pytest.raises(ReservationValidationError):
        _save(reservation, Type.HANDOVER, staff_user, complete=True)

    reservation.refresh_from_db()
    assert reservation.status == Status.CONFIRMED
    assert not reservation.checklists.filter(checklist_type=Type.HANDOVER).exists()


@pytest.mark.django_db
def test_completing_return_brings_the_vehicle_back(vehicle, customer, staff_user):
    reservation = _reserve(vehicle, customer)
    _check_out(reservation, staff_user, mileage=12000)

    returned = _save(
        reservation, Type.RETURN, staff_user, complete=True,
        mileage=12480, has_damage=True, damage_notes="Cracked tail light",
    )

    reservation.refresh_from_db()
    vehicle.refresh_from_db()
    assert reservation.status == Status.COMPLETED
    assert vehicle.status == RentalVehicle.Status.AVAILABLE
    assert returned.mileage == 12480
    assert returned.damage_notes == "Cracked tail light"


@pytest.mark.django_db
def test_return_mileage_cannot_go_backwards(vehicle, customer, staff_user):
    reservation = _reserve(vehicle, customer)
    _check_out(reservation, staff_user, mileage=12000)

    with pytest.raises(ReservationValidationError) as excinfo:
        _save(reservation, Type.RETURN, staff_user, complete=True, mileage=11900)

    assert excinfo.value.details == {"mileage": 11900}
    reservation.refresh_from_db()
    assert reservation.status == Status.IN_PROGRESS
    assert not reservation.checklists.filter(checklist_type=Type.RETURN).exists()


@pytest.mark.django_db
def test_completed_checklist_is_final(vehicle, customer, staff_user):
    reservation = _reserve(vehicle, customer)
    _save(reservation, Type.PRE_RENTAL, staff_user, complete=True, items=INSPECTION)

    with pytest.raises(ReservationValidationError):
        _save(reservation, Type.PRE_RENTAL, staff_user, notes="Edited later")

    assert reservation.checklists.get().notes == ""


@pytest.mark.django_db
@pytest.mark.parametrize(
    "current, checklist_type",
    [
        (Status.PENDING, Type.PRE_RENTAL),
        (Status.CONFIRMED, Type.RETURN),
        (Status.IN_PROGRESS, Type.HANDOVER),
        (Status.CANCELLED, Type.PRE_RENTAL),
    ],
)
def test_checklists_follow_the_reservation_stage(vehicle, customer, staff_user, current, checklist_type):
    reservation = _reserve(vehicle, customer, status=current)

    with pytest.raises(ReservationValidationError):
        _save(reservation, checklist_type, staff_user)

    assert not RentalChecklist.objects.exists()


@pytest.mark.django_db
@pytest.mark.parametrize(
    "checklist_type, fields",
    [
        ("fuel_log", {}),
        (Type.PRE_RENTAL, {"has_damage": True, "damage_notes": "  "}),
        (Type.PRE_RENTAL, {"items": [{"checked": True}]}),
        (Type.PRE_RENTAL, {"mileage": -5}),
    ],
)
def test_malformed_checklists_are_rejected(vehicle, customer, checklist_type, fields):
    reservation = _reserve(vehicle, customer)

    with pytest.raises(ReservationValidationError):
        _save(reservation, checklist_type, **fields)

    assert not RentalChecklist.objects.exists()


@pytest.mark.django_db
def test_unknown_reservation_is_not_found(db):
    with pytest.raises(ReservationNotFoundError):
        SaveChecklistHandler().handle(SaveChecklistCommand(reservation_id=424242, checklist_type=Type.PRE_RENTAL))


@pytest.mark.django_db
def test_status_change_can_carry_the_return_checklist(vehicle, customer, staff_user):
    reservation = _reserve(vehicle, customer, status=Status.IN_PROGRESS)

    SetReservationStatusHandler().handle(SetReservationStatusCommand(
        reservation_id=reservation.pk,
        status=Status.COMPLETED,
        actor_id=staff_user.id,
        checklist=ChecklistInput(items=INSPECTION, mileage=15300, notes="Returned clean"),
    ))

    reservation.refresh_from_db()
    assert reservation.status == Status.COMPLETED
    returned = reservation.checklists.get()
    assert returned.checklist_type == Type.RETURN
    assert returned.mileage == 15300
    assert returned.completed_by == staff_user


@pytest.mark.django_db
def test_checklist_is_rolled_back_with_a_rejected_status_change(vehicle, customer, staff_user):
    reservation = _reserve(vehicle, customer, status=Status.IN_PROGRESS, payment_status=PaymentStatus.COMPLETED)

    with pytest.raises(ReservationValidationError):
        SetReservationStatusHandler().handle(SetReservationStatusCommand(
            reservation_id=reservation.pk,
            status=Status.COMPLETED,
            payment_status=PaymentStatus.FAILED,
            actor_id=staff_user.id,
            checklist=ChecklistInput(mileage=15300),
        ))

    reservation.refresh_from_db()
    assert reservation.status == Status.IN_PROGRESS
    assert not RentalChecklist.objects.exists()


@pytest.mark.django_db
def test_checklist_cannot_accompany_a_cancellation(vehicle, customer):
    reservation = _reserve(vehicle, customer)

    with pytest.raises(ReservationValidationError):
        SetReservationStatusHandler().handle(SetReservationStatusCommand(
            reservation_id=reservation.pk,
            status=Status.CANCELLED,
            checklist=ChecklistInput(notes="Not needed"),
        ))

    reservation.refresh_from_db()
    assert reservation.status == Status.CONFIRMED


@pytest.mark.django_db
def test_only_checkout_completion_notifies_the_customer(
    vehicle, customer, staff_user, django_capture_on_commit_callbacks, mailoutbox
):
    reservation = _reserve(vehicle, customer)

    with django_capture_on_commit_callbacks(execute=True):
        _save(reservation, Type.PRE_RENTAL, staff_user, complete=True, items=INSPECTION)
    assert mailoutbox == []

    with django_capture_on_commit_callbacks(execute=True):
        _save(reservation, Type.HANDOVER, staff_user, complete=True)
    assert len(mailoutbox) == 1
    assert reservation.reference in mailoutbox[0].subject
