"""
Reservation Domain Events

Events that represent things that have happened to a reservation.
They are queued on the unit of work and published after commit.
"""

from dataclasses import dataclass
from typing import Optional

from shared.domain.base import DomainEvent
from shared.domain.value_objects import DateRange


@dataclass
class ReservationCreated(DomainEvent):
    """
    Event: A reservation was committed

    Triggers:
    - Send confirmation email to the customer
    """
    reservation_id: Optional[int] = None
    vehicle_id: Optional[int] = None
    customer_id: Optional[int] = None
    dates: Optional[DateRange] = None
    status: str = ""
    total: str = "0"

    def to_dict(self) -> dict:
        data = super().to_dict()
        data.update({
            'reservation_id': self.reservation_id,
            'vehicle_id': self.vehicle_id,
            'customer_id': self.customer_id,
            'start_date': self.dates.start_date.isoformat() if self.dates else None,
            'end_date': self.dates.end_date.isoformat() if self.dates else None,
            'status': self.status,
            'total': self.total,
        })
        return data


@dataclass
class ReservationStatusChanged(DomainEvent):
    """
    Event: A reservation moved along its lifecycle

    Triggers:
    - Notify the customer about checkout, return or cancellation
    """
    reservation_id: Optional[int] = None
    vehicle_id: Optional[int] = None
    customer_id: Optional[int] = None
    previous_status: str = ""
    new_status: str = ""
    payment_status: str = ""
    reason: str = ""

    def to_dict(self) -> dict:
        data = super().to_dict()
        data.update({
            'reservation_id': self.reservation_id,
            'vehicle_id': self.vehicle_id,
            'customer_id': self.customer_id,
            'previous_status': self.previous_status,
            'new_status': self.new_status,
            'payment_status': self.payment_status,
            'reason': self.reason,
        })
        return data
