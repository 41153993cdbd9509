"""
Unit of Work

One ``transaction.atomic()`` block per use case. Rows written inside the
block are stored together or not at all, and the domain events queued on
the unit of work reach the message bus only once the outermost
transaction has committed.
"""

from typing import List, Optional
import logging

from django.conf import settings
from django.db import DEFAULT_DB_ALIAS, connections, transaction

from shared.domain.base import DomainEvent

logger = logging.getLogger(__name__)


def _setting_ms(explicit: Optional[int], name: str) -> Optional[int]:
    if explicit is not None:
        return explicit
    return getattr(settings, name, None)


class DjangoUnitOfWork:
    """
    Transaction boundary with after-commit event delivery

    On PostgreSQL the transaction also gets ``lock_timeout`` and
    ``statement_timeout`` (``RESERVATION_LOCK_TIMEOUT_MS`` and
    ``RESERVATION_STATEMENT_TIMEOUT_MS``), so waiting for a vehicle row lock
    ends in an ``OperationalError`` instead of a hung request.

    Usage:
        with DjangoUnitOfWork() as uow:
            vehicle = lock_vehicle(vehicle_id)
            reservation = Reservation.objects.create(...)
            uow.add_event(ReservationCreated(reservation_id=reservation.id))
        # committed; ReservationCreated is published through on_commit
    """

    def __init__(self, using: str = DEFAULT_DB_ALIAS,
                 lock_timeout_ms: Optional[int] = None,
                 statement_timeout_ms: Optional[int] = None):
        self.using = using
        self.lock_timeout_ms = _setting_ms(lock_timeout_ms, 'RESERVATION_LOCK_TIMEOUT_MS')
        self.statement_timeout_ms = _setting_ms(statement_timeout_ms, 'RESERVATION_STATEMENT_TIMEOUT_MS')
        self._events: List[DomainEvent] = []
        self._atomic = None

    def __enter__(self):
        self._atomic = transaction.atomic(using=self.using)
        self._atomic.__enter__()
        try:
            self._apply_timeouts()
        except BaseException as exc:
            self._atomic.__exit__(type(exc), exc, exc.__traceback__)
            raise
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        try:
            if exc_type is None:
                self.commit()
            else:
                self.rollback()
        finally:
            self._atomic.__exit__(exc_type, exc_val, exc_tb)

    def _apply_timeouts(self):
        connection = connections[self.using]
        if connection.vendor != 'postgresql':
            return
        statements = [
            ("lock_timeout", self.lock_timeout_ms),
            ("statement_timeout", self.statement_timeout_ms),
        ]
        with connection.cursor() as cursor:
            for name, value in statements:
                if value:
                    # SET LOCAL only lives until the end of this transaction
                    cursor.execute(f"SET LOCAL {name} = %s", [f"{int(value)}ms"])

    def add_event(self, event: DomainEvent):
        self._events.append(event)

    @property
    def pending_events(self) -> List[DomainEvent]:
        return list(self._events)

    def commit(self):
        """Schedule delivery of the queued events for after the commit."""
        events, self._events = self._events, []
        if events:
            logger.debug(f"{len(events)} event(s) waiting for commit")
            transaction.on_commit(lambda: self._publish(events), using=self.using)

    def rollback(self):
        if self._events:
            logger.warning(f"Transaction rolled back, dropping {len(self._events)} event(s)")
        self._events = []

    def _publish(self, events: List[DomainEvent]):
        from shared.application.message_bus import message_bus

        try:
            message_bus.publish_events(events)
        except Exception as e:
            # The rows are committed at this point, publishing cannot undo them
            logger.error(f"Publishing {len(events)} committed event(s) failed: {e}", exc_info=True)
