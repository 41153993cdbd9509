"""
Reservation Command Handlers

The use cases of the reservation domain. Each handler runs its writes in
one unit of work, so a reservation header and its line items are stored
together or not at all.

Commands:
- QuoteReservationCommand: Price a reservation without storing it
- CreateReservationCommand: Reserve a vehicle with optional add-ons
- SetReservationStatusCommand: Checkout, return, confirm or cancel
- SaveChecklistCommand: Fill in the checkout or return checklist
"""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence
import logging

from django.conf import settings
from django.contrib.auth import get_user_model
from django.utils import timezone

from shared.application.uow import DjangoUnitOfWork
from shared.domain.base import InvalidTransitionError
from shared.domain.dates import normalize_iso_date
from shared.domain.value_objects import DateRange
from apps.fleet.models import Activity, Equipment, RentalVehicle
from apps.loyalty.services import resolve_customer_discount
from apps.reservations.domain.events import ReservationCreated, ReservationStatusChanged
from apps.reservations.domain.lifecycle import (
    CHECKLIST_STAGES,
    CHECKLIST_TRANSITIONS,
    PAYMENT_LIFECYCLE,
    RESERVATION_LIFECYCLE,
    ChecklistType,
    PaymentMethod,
    ReservationStatus,
    initial_statuses,
)
from apps.reservations.domain.pricing import (
    ActivityLine,
    EquipmentLine,
    PriceBreakdown,
    calculate_price,
)
from apps.reservations.exceptions import (
    ReservationConflictError,
    ReservationNotFoundError,
    ReservationValidationError,
)
from apps.reservations.models import (
    RentalChecklist,
    Reservation,
    ReservationActivity,
    ReservationEquipment,
)
from apps.reservations.services import (
    _lock_queryset_if_possible,
    find_conflicts,
    lock_vehicle,
    parse_date_range,
    translate_store_errors,
)

logger = logging.getLogger(__name__)


# ===== Commands =====

@dataclass
class EquipmentRequest:
    equipment_id: int
    quantity: int = 1


@dataclass
class ActivityRequest:
    activity_id: int
    date: object
    participants: int = 1


@dataclass
class QuoteReservationCommand:
    """Price a reservation for a customer without writing anything"""
    customer_id: int
    vehicle_id: int
    start_date: object
    end_date: object
    days: Optional[int] = None
    equipment: List[EquipmentRequest] = field(default_factory=list)
    activities: List[ActivityRequest] = field(default_factory=list)


@dataclass
class CreateReservationCommand(QuoteReservationCommand):
    """
    Command to create a new reservation

    ``payment_succeeded`` and ``payment_reference`` come from the payment
    gateway and are only meaningful for credit card payments.
    """
    payment_method: str = PaymentMethod.ON_SITE
    payment_succeeded: bool = False
    payment_reference: str = ''


@dataclass
class ChecklistInput:
    """What the staff member recorded on a checklist"""
    items: List[dict] = field(default_factory=list)
    notes: str = ''
    has_damage: bool = False
    damage_notes: str = ''
    mileage: Optional[int] = None


@dataclass
class SetReservationStatusCommand:
    """
    Command to move a reservation (and optionally its payment) along the lifecycle

    A ``checklist`` may accompany checkout (stored as the handover
    checklist) or return (stored as the return checklist).
    """
    reservation_id: int
    status: str
    payment_status: Optional[str] = None
    reason: str = ''
    actor_id: Optional[int] = None
    checklist: Optional[ChecklistInput] = None


@dataclass
class SaveChecklistCommand:
    """Command to save a rental checklist as a draft or complete it"""
    reservation_id: int
    checklist_type: str
    checklist: ChecklistInput = field(default_factory=ChecklistInput)
    complete: bool = False
    actor_id: Optional[int] = None


# ===== Prepared reservation =====

@dataclass
class ReservationDraft:
    """Validated and priced reservation, ready to be stored"""
    customer: object
    vehicle: RentalVehicle
    dates: DateRange
    loyalty_tier: str
    price: PriceBreakdown
    equipment: List[Equipment]
    equipment_requests: List[EquipmentRequest]
    activities: List[Activity]
    activity_requests: List[ActivityRequest]


def _validate_request(command: QuoteReservationCommand) -> DateRange:
    """Checks that need no database access"""
    start_date, end_date = parse_date_range(command.start_date, command.end_date)
    dates = DateRange(start_date, end_date)

    if command.days is not None and command.days != dates.days:
        raise ReservationValidationError(
            f"Requested {command.days} day(s) but {dates} spans {dates.days} day(s).",
            details={"days": command.days},
        )
    if dates.days > settings.RESERVATION_MAX_DAYS:
        raise ReservationValidationError(
            f"A rental can last at most {settings.RESERVATION_MAX_DAYS} day(s), {dates} spans {dates.days}.",
            details={"days": dates.days},
        )

    seen = set()
    for item in command.equipment:
        if item.quantity is None or item.quantity < 1:
            raise ReservationValidationError(
                "Equipment quantity must be at least 1.",
                details={"equipment_id": item.equipment_id},
            )
        if item.equipment_id in seen:
            raise ReservationValidationError(
                f"Equipment {item.equipment_id} is listed more than once.",
                details={"equipment_id": item.equipment_id},
            )
        seen.add(item.equipment_id)

    for item in command.activities:
        if item.participants is None or item.participants < 1:
            raise ReservationValidationError(
                "An activity needs at least one participant.",
                details={"activity_id": item.activity_id},
            )
        try:
            item.date = normalize_iso_date(item.date)
        except ValueError as exc:
            raise ReservationValidationError(str(exc), details={"activity_id": item.activity_id}) from exc
        if not dates.contains(item.date):
            raise ReservationValidationError(
                f"Activity {item.activity_id} on {item.date} is outside the rental period {dates}.",
                details={"activity_id": item.activity_id},
            )

    if isinstance(command, CreateReservationCommand):
        if command.payment_method not in PaymentMethod.values:
            raise ReservationValidationError(f"Unknown payment method '{command.payment_method}'.")
        if command.payment_method == PaymentMethod.CREDIT_CARD:
            if not command.payment_succeeded:
                raise ReservationValidationError("Card payment was not completed.")
            if not (command.payment_reference or '').strip():
                raise ReservationValidationError("Card payment requires a transaction reference.")

    return dates


def _load_equipment(requests: Sequence[EquipmentRequest]) -> List[Equipment]:
    ids = [item.equipment_id for item in requests]
    found = {item.id: item for item in Equipment.objects.filter(pk__in=ids, is_active=True)}
    missing = [pk for pk in ids if pk not in found]
    if missing:
        raise ReservationNotFoundError(
            f"Equipment not found or not available: {missing}",
            details={"equipment_ids": missing},
        )
    return [found[pk] for pk in ids]


def _load_activities(requests: Sequence[ActivityRequest]) -> List[Activity]:
    ids = [item.activity_id for item in requests]
    found = {item.id: item for item in Activity.objects.filter(pk__in=ids, is_active=True)}
    missing = sorted({pk for pk in ids if pk not in found})
    if missing:
        raise ReservationNotFoundError(
            f"Activity not found or not available: {missing}",
            details={"activity_ids": missing},
        )
    activities = [found[item.activity_id] for item in requests]
    for activity, item in zip(activities, requests):
        if not activity.is_offered_on(item.date):
            raise ReservationValidationError(
                f"Activity '{activity.name}' is not offered on {item.date}.",
                details={"activity_id": activity.id},
            )
        if activity.max_participants and item.participants > activity.max_participants:
            raise ReservationValidationError(
                f"Activity '{activity.name}' takes at most {activity.max_participants} participants.",
                details={"activity_id": activity.id},
            )
    return activities


def _load_customer(customer_id):
    User = get_user_model()
    try:
        return User.objects.get(pk=customer_id, is_active=True)
    except User.DoesNotExist:
        raise ReservationNotFoundError(f"Customer {customer_id} not found")


def _price(vehicle, dates, rate, equipment, equipment_requests, activities, activity_requests) -> PriceBreakdown:
    return calculate_price(
        daily_rate=vehicle.daily_rate,
        days=dates.days,
        discount_rate=rate,
        tax_rate=settings.RESERVATION_TAX_RATE,
        quantum=settings.RESERVATION_CURRENCY_QUANTUM,
        equipment=[
            EquipmentLine(
                equipment_id=item.id,
                price=item.price_per_day,
                quantity=request.quantity,
                pricing_type=item.pricing_type,
            )
            for item, request in zip(equipment, equipment_requests)
        ],
        activities=[
            ActivityLine(activity_id=item.id, price=item.price, participants=request.participants)
            for item, request in zip(activities, activity_requests)
        ],
    )


def _prepare_draft(command: QuoteReservationCommand, dates: DateRange, vehicle: RentalVehicle) -> ReservationDraft:
    customer = _load_customer(command.customer_id)
    tier_name, rate = resolve_customer_discount(customer)
    equipment = _load_equipment(command.equipment)
    activities = _load_activities(command.activities)
    price = _price(vehicle, dates, rate, equipment, command.equipment, activities, command.activities)
    return ReservationDraft(
        customer=customer,
        vehicle=vehicle,
        dates=dates,
        loyalty_tier=tier_name,
        price=price,
        equipment=equipment,
        equipment_requests=list(command.equipment),
        activities=activities,
        activity_requests=list(command.activities),
    )


def _ensure_vehicle_bookable(vehicle: Optional[RentalVehicle], vehicle_id, dates: DateRange,
                             *, lock: bool) -> RentalVehicle:
    if vehicle is None:
        raise ReservationNotFoundError(f"Vehicle {vehicle_id} not found")
    if vehicle.status == RentalVehicle.Status.MAINTENANCE:
        raise ReservationConflictError(f"Vehicle {vehicle.name} is under maintenance")
    conflicts = find_conflicts(vehicle.id, dates.start_date, dates.end_date, lock=lock)
    if conflicts:
        raise ReservationConflictError(
            f"Vehicle {vehicle.name} is not available for {dates}",
            conflicting_ids=[item.id for item in conflicts],
        )
    return vehicle


# ===== Command Handlers =====

class QuoteReservationHandler:
    """
    Handler for QuoteReservation command

    Runs the same validation and pricing as creation, including the
    availability check, but takes no locks and stores nothing.
    """

    def handle(self, command: QuoteReservationCommand) -> ReservationDraft:
        dates = _validate_request(command)
        with translate_store_errors("quote"):
            vehicle = RentalVehicle.objects.filter(pk=command.vehicle_id).first()
            vehicle = _ensure_vehicle_bookable(vehicle, command.vehicle_id, dates, lock=False)
            return _prepare_draft(command, dates, vehicle)


class CreateReservationHandler:
    """
    Handler for CreateReservation command

    Strategy:
    1. Validate the request (dates, quantities, payment signal)
    2. Open a unit of work (transaction.atomic)
    3. Lock the vehicle row with SELECT FOR UPDATE, so concurrent
       creates for the same vehicle run one after another
    4. Re-check conflicts under the lock
    5. Resolve the loyalty discount and price the reservation
    6. Store the header and every line item
    7. Commit, then publish ReservationCreated

    Raises:
        ReservationValidationError: Malformed request
        ReservationNotFoundError: Unknown vehicle, equipment, activity or customer
        ReservationConflictError: Vehicle taken or under maintenance
        TransientStoreError: Lock timeout or database failure, nothing stored
    """

    def handle(self, command: CreateReservationCommand) -> Reservation:
        logger.info(
            f"Creating reservation for vehicle {command.vehicle_id}, "
            f"customer {command.customer_id}, dates {command.start_date} - {command.end_date}"
        )
        dates = _validate_request(command)

        with translate_store_errors("reservation create"):
            with DjangoUnitOfWork() as uow:
                vehicle = lock_vehicle(command.vehicle_id)
                vehicle = _ensure_vehicle_bookable(vehicle, command.vehicle_id, dates, lock=True)
                draft = _prepare_draft(command, dates, vehicle)
                reservation = self._persist(command, draft)

                uow.add_event(ReservationCreated(
                    aggregate_id=reservation.id,
                    reservation_id=reservation.id,
                    vehicle_id=vehicle.id,
                    customer_id=draft.customer.id,
                    dates=dates,
                    status=reservation.status,
                    total=str(reservation.total),
                ))

        logger.info(
            f"Reservation {reservation.reference} created: {dates.days} day(s), "
            f"total {reservation.total} {reservation.currency}"
        )
        return reservation

    def _persist(self, command: CreateReservationCommand, draft: ReservationDraft) -> Reservation:
        status, payment_status = initial_statuses(command.payment_method)
        price = draft.price
        reservation = Reservation.objects.create(
            vehicle=draft.vehicle,
            customer=draft.customer,
            start_date=draft.dates.start_date,
            end_date=draft.dates.end_date,
            days=draft.dates.days,
            status=status,
            daily_rate=draft.vehicle.daily_rate,
            subtotal=price.subtotal,
            discount_rate=price.discount_rate,
            discount_amount=price.discount_amount,
            tax=price.tax,
            total=price.total,
            currency=settings.RESERVATION_CURRENCY,
            loyalty_tier=draft.loyalty_tier,
            payment_method=command.payment_method,
            payment_status=payment_status,
            payment_reference=(command.payment_reference or '').strip(),
        )
        self._persist_equipment(reservation, draft)
        self._persist_activities(reservation, draft)
        return reservation

    def _persist_equipment(self, reservation: Reservation, draft: ReservationDraft) -> None:
        ReservationEquipment.objects.bulk_create([
            ReservationEquipment(
                reservation=reservation,
                equipment=item,
                quantity=request.quantity,
                days=draft.dates.days,
                price_per_day=item.price_per_day,
                pricing_type=item.pricing_type,
                subtotal=line.subtotal,
            )
            for item, request, line in zip(draft.equipment, draft.equipment_requests, draft.price.equipment_lines)
        ])

    def _persist_activities(self, reservation: Reservation, draft: ReservationDraft) -> None:
        ReservationActivity.objects.bulk_create([
            ReservationActivity(
                reservation=reservation,
                activity=item,
                date=request.date,
                participants=request.participants,
                price=item.price,
                subtotal=line.subtotal,
            )
            for item, request, line in zip(draft.activities, draft.activity_requests, draft.price.activity_lines)
        ])


# ===== Status changes =====

def _lock_reservation(reservation_id) -> Reservation:
    # Vehicle first, then the reservation: the same order as creation takes
    vehicle_id = (
        Reservation.objects.filter(pk=reservation_id)
        .values_list("vehicle_id", flat=True)
        .first()
    )
    if vehicle_id is None:
        raise ReservationNotFoundError(f"Reservation {reservation_id} not found")
    lock_vehicle(vehicle_id)
    reservation = (
        _lock_queryset_if_possible(Reservation.objects.filter(pk=reservation_id))
        .select_related("vehicle")
        .first()
    )
    if reservation is None:
        raise ReservationNotFoundError(f"Reservation {reservation_id} not found")
    return reservation


def _status_changed(reservation: Reservation, previous_status: str, reason: str = '') -> ReservationStatusChanged:
    return ReservationStatusChanged(
        aggregate_id=reservation.id,
        reservation_id=reservation.id,
        vehicle_id=reservation.vehicle_id,
        customer_id=reservation.customer_id,
        previous_status=previous_status,
        new_status=reservation.status,
        payment_status=reservation.payment_status,
        reason=reason,
    )


def _apply_status(reservation: Reservation, command: SetReservationStatusCommand) -> None:
    try:
        _transition(reservation, command)
    except InvalidTransitionError as exc:
        raise ReservationValidationError(str(exc)) from exc


def _transition(reservation: Reservation, command: SetReservationStatusCommand) -> None:
    target = command.status
    if target not in ReservationStatus.values:
        raise ReservationValidationError(f"Unknown reservation status '{target}'.")
    if command.payment_status is not None and command.payment_status not in Reservation.PaymentStatus.values:
        raise ReservationValidationError(f"Unknown payment status '{command.payment_status}'.")

    status_changes = target != reservation.status
    if status_changes:
        RESERVATION_LIFECYCLE.ensure(reservation.status, target)
    elif command.payment_status is None:
        raise ReservationValidationError(f"Reservation is already {reservation.get_status_display()}.")

    if command.payment_status is not None and command.payment_status != reservation.payment_status:
        PAYMENT_LIFECYCLE.ensure(reservation.payment_status, command.payment_status)
        reservation.payment_status = command.payment_status

    if status_changes:
        if target == ReservationStatus.CANCELLED:
            reservation.mark_cancelled(command.reason)
        else:
            reservation.status = target
            if target in (ReservationStatus.IN_PROGRESS, ReservationStatus.COMPLETED):
                _update_vehicle_hint(reservation, target)

    reservation.save()


def _update_vehicle_hint(reservation: Reservation, target: str) -> None:
    vehicle = reservation.vehicle
    if target == ReservationStatus.IN_PROGRESS:
        vehicle.set_status_hint(RentalVehicle.Status.RESERVED)
    else:
        vehicle.set_status_hint(RentalVehicle.Status.AVAILABLE)


# ===== Checklists =====

def _validate_checklist(checklist_type: str, checklist: ChecklistInput) -> None:
    """Checks that need no database access"""
    if checklist_type not in ChecklistType.values:
        raise ReservationValidationError(f"Unknown checklist type '{checklist_type}'.")
    if checklist.mileage is not None and checklist.mileage < 0:
        raise ReservationValidationError("Mileage cannot be negative.", details={"mileage": checklist.mileage})
    if checklist.has_damage and not (checklist.damage_notes or '').strip():
        raise ReservationValidationError("Describe the damage when the vehicle is marked as damaged.")
    for item in checklist.items:
        if not isinstance(item, dict) or not str(item.get("label") or '').strip():
            raise ReservationValidationError("Every checklist item needs a label.", details={"item": item})


def _checkout_mileage(reservation: Reservation) -> Optional[int]:
    readings = (
        RentalChecklist.objects.filter(
            reservation=reservation,
            checklist_type__in=[ChecklistType.PRE_RENTAL, ChecklistType.HANDOVER],
            mileage__isnull=False,
        )
        .values_list("mileage", flat=True)
    )
    return max(readings, default=None)


def _ensure_checklist_can_complete(reservation: Reservation, checklist_type: str,
                                   checklist: ChecklistInput) -> None:
    if checklist_type == ChecklistType.HANDOVER:
        inspected = RentalChecklist.objects.filter(
            reservation=reservation,
            checklist_type=ChecklistType.PRE_RENTAL,
            completed_at__isnull=False,
        ).exists()
        if not inspected:
            raise ReservationValidationError(
                "Complete the pre-rental inspection before handing the vehicle over."
            )
    elif checklist_type == ChecklistType.RETURN and checklist.mileage is not None:
        checkout_mileage = _checkout_mileage(reservation)
        if checkout_mileage is not None and checklist.mileage < checkout_mileage:
            raise ReservationValidationError(
                f"Return mileage {checklist.mileage} km is below the checkout reading of {checkout_mileage} km.",
                details={"mileage": checklist.mileage},
            )


def _save_checklist(reservation: Reservation, checklist_type: str, checklist: ChecklistInput,
                    *, complete: bool, actor_id=None) -> RentalChecklist:
    """Create or update the reservation's checklist of ``checklist_type``."""
    label = ChecklistType(checklist_type).label
    stage = CHECKLIST_STAGES[checklist_type]
    if reservation.status != stage:
        raise ReservationValidationError(
            f"The {label} checklist can only be filled in while the reservation is "
            f"{ReservationStatus(stage).label}, it is {reservation.get_status_display()}."
        )

    record = (
        _lock_queryset_if_possible(
            RentalChecklist.objects.filter(reservation=reservation, checklist_type=checklist_type)
        ).first()
        or RentalChecklist(reservation=reservation, checklist_type=checklist_type)
    )
    if record.is_completed:
        raise ReservationValidationError(f"The {label} checklist is already completed.")
    if complete:
        _ensure_checklist_can_complete(reservation, checklist_type, checklist)

    record.items = [dict(item) for item in checklist.items]
    record.notes = checklist.notes or ''
    record.has_damage = checklist.has_damage
    record.damage_notes = (checklist.damage_notes or '').strip() if checklist.has_damage else ''
    record.mileage = checklist.mileage
    if complete:
        record.completed_at = timezone.now()
        record.completed_by_id = actor_id
    record.save()
    return record


# ===== Status and checklist handlers =====

class SetReservationStatusHandler:
    """
    Handler for SetReservationStatus command

    Side effects per target status:
    - IN_PROGRESS (checkout): vehicle status hint becomes RESERVED, an
      accompanying checklist is stored as the completed handover checklist
    - COMPLETED (return): vehicle status hint becomes AVAILABLE, an
      accompanying checklist is stored as the completed return checklist
    - CANCELLED: cancellation time and reason are recorded, a completed
      payment becomes REFUNDED
    """

    def handle(self, command: SetReservationStatusCommand) -> Reservation:
        logger.info(
            f"Setting reservation {command.reservation_id} status to {command.status}"
            + (f" (payment {command.payment_status})" if command.payment_status else "")
        )
        checklist_type = None
        if command.checklist is not None:
            checklist_type = next(
                (kind for kind, target in CHECKLIST_TRANSITIONS.items() if target == command.status),
                None,
            )
            if checklist_type is None:
                raise ReservationValidationError("A checklist can only accompany checkout or return.")
            _validate_checklist(checklist_type, command.checklist)

        with translate_store_errors("status change"):
            with DjangoUnitOfWork() as uow:
                reservation = _lock_reservation(command.reservation_id)
                previous_status = reservation.status
                if checklist_type is not None:
                    _save_checklist(reservation, checklist_type, command.checklist,
                                    complete=True, actor_id=command.actor_id)
                _apply_status(reservation, command)
                uow.add_event(_status_changed(reservation, previous_status, command.reason))

        logger.info(f"Reservation {reservation.reference}: {previous_status} -> {reservation.status}")
        return reservation


class SaveChecklistHandler:
    """
    Handler for SaveChecklist command

    Drafts can be saved repeatedly while the reservation is in the
    checklist's stage. Completing the handover checklist checks the vehicle
    out and completing the return checklist brings it back, in the same
    transaction as the checklist itself.

    Raises:
        ReservationValidationError: Wrong stage, already completed, missing
            pre-rental inspection or a return mileage below checkout
        ReservationNotFoundError: Unknown reservation
        TransientStoreError: Lock timeout or database failure, nothing stored
    """

    def handle(self, command: SaveChecklistCommand) -> RentalChecklist:
        _validate_checklist(command.checklist_type, command.checklist)

        with translate_store_errors("checklist save"):
            with DjangoUnitOfWork() as uow:
                reservation = _lock_reservation(command.reservation_id)
                previous_status = reservation.status
                checklist = _save_checklist(
                    reservation,
                    command.checklist_type,
                    command.checklist,
                    complete=command.complete,
                    actor_id=command.actor_id,
                )
                target = CHECKLIST_TRANSITIONS.get(command.checklist_type) if command.complete else None
                if target is not None:
                    _apply_status(reservation, SetReservationStatusCommand(
                        reservation_id=reservation.id,
                        status=target,
                        actor_id=command.actor_id,
                    ))
                    uow.add_event(_status_changed(reservation, previous_status))

        logger.info(
            f"Reservation {reservation.reference}: {command.checklist_type} checklist "
            f"{'completed' if checklist.is_completed else 'saved'}"
        )
        return checklist
