from __future__ import annotations

from datetime import timedelta

import pytest

from custom_components.live_event.lifecycle import (
    Boundary,
    EventStatus,
    LifecycleMachine,
    LifecycleState,
    OnceLatch,
    determine_state,
)
from custom_components.live_event.schedule import ScheduleWindow

from conftest import T0

WINDOW = ScheduleWindow(
    start=T0 + timedelta(seconds=3600), end=T0 + timedelta(seconds=5400)
)


@pytest.mark.parametrize(
    ("offset", "expected"),
    [
        (0, LifecycleState.EARLY),
        (3599, LifecycleState.EARLY),
        (3600, LifecycleState.LIVE),
        (3700, LifecycleState.LIVE),
        (5400, LifecycleState.ENDED),
        (9000, LifecycleState.ENDED),
    ],
)
def test_determine_state_from_time(offset, expected):
    now = T0 + timedelta(seconds=offset)
    assert determine_state(EventStatus.ACTIVE, WINDOW, now) is expected


def test_no_window_means_ended():
    assert determine_state(EventStatus.ACTIVE, None, T0) is LifecycleState.ENDED


@pytest.mark.parametrize(
    ("status", "expected"),
    [
        (EventStatus.CANCELLED, LifecycleState.CANCELLED),
        (EventStatus.SUSPENDED, LifecycleState.SUSPENDED),
    ],
)
@pytest.mark.parametrize("offset", [0, 3700, 9000])
@pytest.mark.parametrize("window", [WINDOW, None])
def test_operator_status_overrides_schedule(status, expected, offset, window):
    now = T0 + timedelta(seconds=offset)
    assert determine_state(status, window, now) is expected


def test_machine_moves_forward_once():
    machine = LifecycleMachine(LifecycleState.EARLY)
    assert machine.transition(LifecycleState.LIVE)
    assert not machine.transition(LifecycleState.LIVE)
    assert not machine.transition(LifecycleState.EARLY)
    assert machine.transition(LifecycleState.ENDED)
    assert not machine.transition(LifecycleState.LIVE)
    assert machine.history == (
        LifecycleState.EARLY,
        LifecycleState.LIVE,
        LifecycleState.ENDED,
    )


def test_override_states_are_terminal():
    machine = LifecycleMachine(LifecycleState.LIVE)
    assert machine.transition(LifecycleState.SUSPENDED)
    assert machine.is_terminal
    for target in LifecycleState:
        assert not machine.transition(target)
    assert machine.state is LifecycleState.SUSPENDED


def test_ended_can_still_be_cancelled():
    machine = LifecycleMachine(LifecycleState.ENDED)
    assert not machine.transition(LifecycleState.LIVE)
    assert machine.transition(LifecycleState.CANCELLED)


def test_once_latch_crosses_each_boundary_once():
    latch = OnceLatch()
    assert latch.cross(Boundary.NEAR_END)
    assert not latch.cross(Boundary.NEAR_END)
    assert latch.crossed(Boundary.NEAR_END)
    assert not latch.crossed(Boundary.WINDOW_CLOSED)
    assert latch.cross(Boundary.WINDOW_CLOSED)
