"""Tests for the StatusLifecycle transition tables."""

from __future__ import annotations

import pytest

from shared.domain.base import InvalidTransitionError, StatusLifecycle


@pytest.fixture
def lifecycle():
    return StatusLifecycle(
        "door",
        {
            "closed": {"open", "locked"},
            "open": {"closed"},
            "locked": {"closed"},
            "welded": set(),
        },
    )


def test_listed_transitions_are_allowed(lifecycle):
    lifecycle.ensure("closed", "open")
    lifecycle.ensure("locked", "closed")
    assert lifecycle.can_transition("open", "closed")


def test_unlisted_transitions_are_rejected(lifecycle):
    assert not lifecycle.can_transition("open", "locked")
    with pytest.raises(InvalidTransitionError) as excinfo:
        lifecycle.ensure("open", "locked")
    assert excinfo.value.current == "open"
    assert excinfo.value.target == "locked"
    assert "door" in str(excinfo.value)


def test_same_state_is_not_a_transition(lifecycle):
    assert not lifecycle.can_transition("open", "open")


def test_unknown_states_are_rejected(lifecycle):
    assert not lifecycle.can_transition("ajar", "closed")
    with pytest.raises(InvalidTransitionError):
        lifecycle.allowed_targets("ajar")


def test_terminal_states(lifecycle):
    assert lifecycle.is_terminal("welded")
    assert not lifecycle.is_terminal("closed")
    assert lifecycle.states == frozenset({"closed", "open", "locked", "welded"})


def test_targets_must_be_declared():
    with pytest.raises(ValueError):
        StatusLifecycle("broken", {"a": {"b"}})


def test_invalid_transition_is_a_value_error():
    assert issubclass(InvalidTransitionError, ValueError)
