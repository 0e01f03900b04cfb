"""Lifecycle states and the guarded transition machine."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum
import logging

from .schedule import ScheduleWindow

_LOGGER = logging.getLogger(__name__)


class EventStatus(StrEnum):
    """Operator-controlled status published by the backend."""

    ACTIVE = "active"
    CANCELLED = "cancelled"
    SUSPENDED = "suspended"


class LifecycleState(StrEnum):
    """What the event page should show right now."""

    EARLY = "early"
    LIVE = "live"
    ENDED = "ended"
    CANCELLED = "cancelled"
    SUSPENDED = "suspended"


OVERRIDE_STATES = frozenset({LifecycleState.CANCELLED, LifecycleState.SUSPENDED})

_STATUS_OVERRIDES = {
    EventStatus.CANCELLED: LifecycleState.CANCELLED,
    EventStatus.SUSPENDED: LifecycleState.SUSPENDED,
}

_ALLOWED: dict[LifecycleState, frozenset[LifecycleState]] = {
    LifecycleState.EARLY: frozenset(
        {LifecycleState.LIVE, LifecycleState.ENDED, *OVERRIDE_STATES}
    ),
    LifecycleState.LIVE: frozenset({LifecycleState.ENDED, *OVERRIDE_STATES}),
    LifecycleState.ENDED: OVERRIDE_STATES,
    LifecycleState.CANCELLED: frozenset(),
    LifecycleState.SUSPENDED: frozenset(),
}


def state_for_status(status: EventStatus) -> LifecycleState | None:
    """Return the override state for ``status`` or None when scheduling applies."""
    return _STATUS_OVERRIDES.get(status)


def determine_state(
    status: EventStatus,
    window: ScheduleWindow | None,
    now: datetime,
) -> LifecycleState:
    """Decide the starting state. First match wins."""
    override = state_for_status(status)
    if override is not None:
        return override
    if window is None:
        return LifecycleState.ENDED
    if now >= window.end:
        return LifecycleState.ENDED
    if now >= window.start:
        return LifecycleState.LIVE
    return LifecycleState.EARLY


class LifecycleMachine:
    """Single authority over lifecycle transitions.

    Time-derived states only move forward (early -> live -> ended). Cancelled
    and suspended can be entered from anywhere and are never left. Any attempt
    that is not an allowed move from the current state is rejected, which
    makes repeated requests for the same boundary harmless.
    """

    def __init__(self, initial: LifecycleState) -> None:
        self._state = initial
        self._history: list[LifecycleState] = [initial]

    @property
    def state(self) -> LifecycleState:
        return self._state

    @property
    def history(self) -> tuple[LifecycleState, ...]:
        return tuple(self._history)

    @property
    def is_terminal(self) -> bool:
        return not _ALLOWED[self._state]

    def can_transition(self, target: LifecycleState) -> bool:
        return target in _ALLOWED[self._state]

    def transition(self, target: LifecycleState) -> bool:
        if not self.can_transition(target):
            _LOGGER.debug(
                "Ignoring lifecycle transition %s -> %s", self._state, target
            )
            return False
        _LOGGER.info("Lifecycle %s -> %s", self._state, target)
        self._state = target
        self._history.append(target)
        return True


class Boundary(StrEnum):
    """One-shot crossings guarded by :class:`OnceLatch`."""

    COUNTDOWN_END = "countdown_end"
    NEAR_END = "near_end"
    WINDOW_CLOSED = "window_closed"


class OnceLatch:
    """Remembers which boundaries were crossed; each crosses exactly once."""

    def __init__(self) -> None:
        self._crossed: set[Boundary] = set()

    def cross(self, boundary: Boundary) -> bool:
        if boundary in self._crossed:
            return False
        self._crossed.add(boundary)
        return True

    def crossed(self, boundary: Boundary) -> bool:
        return boundary in self._crossed
