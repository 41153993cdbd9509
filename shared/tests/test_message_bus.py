"""Tests for the message bus and the unit of work's after-commit publishing."""

from __future__ import annotations

from dataclasses import dataclass

import pytest

from shared.application.message_bus import MessageBus
from shared.application.uow import DjangoUnitOfWork
from shared.domain.base import DomainEvent


@dataclass
class SomethingHappened(DomainEvent):
    payload: str = ""


def test_publish_calls_every_handler_once():
    bus = MessageBus()
    seen = []

    def first(event):
        seen.append(("first", event.payload))

    def second(event):
        seen.append(("second", event.payload))

    bus.register_event_handler(SomethingHappened, first)
    bus.register_event_handler(SomethingHappened, second)
    bus.register_event_handler(SomethingHappened, first)

    bus.publish_events([SomethingHappened(payload="x")])

    assert seen == [("first", "x"), ("second", "x")]
    assert bus.handlers_for(SomethingHappened) == [first, second]


def test_failing_handler_does_not_stop_the_others():
    bus = MessageBus()
    seen = []

    def broken(event):
        raise RuntimeError("boom")

    def working(event):
        seen.append(event.payload)

    bus.register_event_handler(SomethingHappened, broken)
    bus.register_event_handler(SomethingHappened, working)

    bus.publish_events([SomethingHappened(payload="still delivered")])

    assert seen == ["still delivered"]


def test_event_to_dict():
    event = SomethingHappened(aggregate_id=7, payload="x")
    data = event.to_dict()
    assert data["event_type"] == "SomethingHappened"
    assert data["aggregate_id"] == "7"


@pytest.mark.django_db
def test_unit_of_work_publishes_only_after_commit(monkeypatch, django_capture_on_commit_callbacks):
    published = []
    monkeypatch.setattr(
        "shared.application.message_bus.message_bus.publish_events",
        lambda events: published.extend(events),
    )

    with django_capture_on_commit_callbacks(execute=True):
        with DjangoUnitOfWork() as uow:
            uow.add_event(SomethingHappened(payload="committed"))
            assert published == []

    assert [event.payload for event in published] == ["committed"]


@pytest.mark.django_db
def test_unit_of_work_drops_events_on_rollback(monkeypatch, django_capture_on_commit_callbacks):
    published = []
    monkeypatch.setattr(
        "shared.application.message_bus.message_bus.publish_events",
        lambda events: published.extend(events),
    )

    with django_capture_on_commit_callbacks(execute=True) as callbacks:
        with pytest.raises(RuntimeError):
            with DjangoUnitOfWork() as uow:
                uow.add_event(SomethingHappened(payload="lost"))
                raise RuntimeError("abort")

    assert published == []
    assert callbacks == []
