"""
Message Bus

Routes committed domain events to their subscribers. Each app registers
its subscribers in ``AppConfig.ready()``; the unit of work hands events
over only after the transaction has committed.
"""

from typing import Callable, Dict, List, Type
import logging

from shared.domain.base import DomainEvent

logger = logging.getLogger(__name__)

EventHandler = Callable[[DomainEvent], None]


def _name(handler: EventHandler) -> str:
    return getattr(handler, "__qualname__", None) or repr(handler)


class MessageBus:
    """
    In-process event dispatcher (one event, many subscribers)

    Subscribers run in registration order. A failing subscriber is logged
    and skipped: the write it reacts to is already committed and the
    remaining subscribers still get the event.
    """

    def __init__(self):
        self._subscribers: Dict[Type[DomainEvent], List[EventHandler]] = {}

    def register_event_handler(self, event_type: Type[DomainEvent], handler: EventHandler) -> None:
        """Subscribe ``handler``; subscribing the same callable again is a no-op (``ready()`` may run twice)."""
        subscribers = self._subscribers.setdefault(event_type, [])
        if handler not in subscribers:
            subscribers.append(handler)
            logger.debug(f"{_name(handler)} subscribed to {event_type.__name__}")

    def handlers_for(self, event_type: Type[DomainEvent]) -> List[EventHandler]:
        return list(self._subscribers.get(event_type, ()))

    def publish_events(self, events: List[DomainEvent]) -> int:
        """
        Deliver every event to its subscribers

        Returns the number of subscriber failures.
        """
        failures = 0
        for event in events:
            event_name = type(event).__name__
            subscribers = self.handlers_for(type(event))
            if not subscribers:
                logger.warning(f"{event_name} {event.event_id} has no subscribers")
                continue

            logger.info(f"Publishing {event_name} {event.event_id} to {len(subscribers)} subscriber(s)")
            for handler in subscribers:
                try:
                    handler(event)
                except Exception as e:
                    failures += 1
                    logger.error(f"{_name(handler)} failed on {event_name} {event.event_id}: {e}", exc_info=True)
        return failures


message_bus = MessageBus()
