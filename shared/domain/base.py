"""
Base Domain Classes

Foundational building blocks shared by the domain apps:
- ValueObject: Immutable objects compared by value
- DomainEvent: Events that represent something that happened
- StatusLifecycle: Closed finite state machine for status fields
"""

from abc import ABC
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, FrozenSet, Hashable, Iterable, Mapping
from uuid import UUID, uuid4


@dataclass(frozen=True)
class ValueObject(ABC):
    """
    Base class for value objects

    Value objects are immutable and have no identity.
    Two value objects are equal if all their attributes are equal.
    """
    pass


@dataclass
class DomainEvent:
    """
    Base class for domain events

    Domain events are collected by the unit of work and published
    to the message bus after the surrounding transaction commits.
    """
    event_id: UUID = field(default_factory=uuid4)
    occurred_at: datetime = field(default_factory=datetime.now)
    aggregate_id: object = None

    def to_dict(self) -> dict:
        """Convert event to dictionary for serialization"""
        return {
            'event_id': str(self.event_id),
            'event_type': self.__class__.__name__,
            'occurred_at': self.occurred_at.isoformat(),
            'aggregate_id': str(self.aggregate_id) if self.aggregate_id is not None else None,
        }


class InvalidTransitionError(ValueError):
    """Raised when a status change is not listed in its lifecycle."""

    def __init__(self, lifecycle: str, current, target):
        self.lifecycle = lifecycle
        self.current = current
        self.target = target
        super().__init__(f"{lifecycle}: transition {current} -> {target} is not allowed")


def _state_key(state):
    # Enum members (e.g. TextChoices) and their raw values are the same state
    return getattr(state, "value", state)


class StatusLifecycle:
    """
    Explicit transition table for one status field

    Every state must appear as a key, terminal states map to an empty set.
    Anything not listed is rejected.

    Usage:
        lifecycle = StatusLifecycle("reservation", {"a": {"b"}, "b": set()})
        lifecycle.ensure("a", "b")   # ok
        lifecycle.ensure("b", "a")   # InvalidTransitionError
    """

    def __init__(self, name: str, transitions: Mapping[Hashable, Iterable[Hashable]]):
        self.name = name
        self._transitions: Dict[Hashable, FrozenSet[Hashable]] = {
            _state_key(state): frozenset(_state_key(t) for t in targets)
            for state, targets in transitions.items()
        }
        unknown = {
            target
            for targets in self._transitions.values()
            for target in targets
            if target not in self._transitions
        }
        if unknown:
            raise ValueError(f"{name}: transitions reference undeclared states {sorted(map(str, unknown))}")

    @property
    def states(self) -> FrozenSet[Hashable]:
        return frozenset(self._transitions)

    def allowed_targets(self, current) -> FrozenSet[Hashable]:
        key = _state_key(current)
        if key not in self._transitions:
            raise InvalidTransitionError(self.name, current, None)
        return self._transitions[key]

    def can_transition(self, current, target) -> bool:
        current, target = _state_key(current), _state_key(target)
        return current in self._transitions and target in self._transitions[current]

    def ensure(self, current, target) -> None:
        if not self.can_transition(current, target):
            raise InvalidTransitionError(self.name, current, target)

    def is_terminal(self, state) -> bool:
        return not self.allowed_targets(state)
