"""Timing and visibility primitives the lifecycle timers run on.

The countdown and the end watcher only depend on the small protocols below,
so they can be driven by fakes in tests and by the Home Assistant event loop
in production.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import timedelta
import logging
from typing import Protocol

from homeassistant.const import STATE_HOME, STATE_ON, STATE_OPEN, STATE_PLAYING
from homeassistant.core import (
    Event,
    HomeAssistant,
    State,
    callback,
)
from homeassistant.helpers.event import (
    EventStateChangedData,
    async_track_state_change_event,
    async_track_time_interval,
)

from .const import FRAME_INTERVAL

_LOGGER = logging.getLogger(__name__)

Cancel = Callable[[], None]

_VISIBLE_STATES = frozenset({STATE_ON, STATE_HOME, STATE_PLAYING, STATE_OPEN})


class FrameScheduler(Protocol):
    def request_frame(self, action: Callable[[], None]) -> Cancel:
        """Run ``action`` once on the next frame; return a canceller."""


class IntervalScheduler(Protocol):
    def every(self, interval: timedelta, action: Callable[[], None]) -> Cancel:
        """Run ``action`` every ``interval`` until cancelled."""


class VisibilityObserver(Protocol):
    def observe(self, listener: Callable[[bool], None]) -> Cancel:
        """Report visibility now and on every change until cancelled."""


class LoopFrameScheduler:
    """Frame ticks on the event loop at a fixed redraw cadence."""

    def __init__(self, hass: HomeAssistant, interval: timedelta = FRAME_INTERVAL) -> None:
        self._hass = hass
        self._delay = interval.total_seconds()

    def request_frame(self, action: Callable[[], None]) -> Cancel:
        handle = self._hass.loop.call_later(self._delay, action)
        return handle.cancel


class HassIntervalScheduler:
    """Fixed-interval polling through ``async_track_time_interval``."""

    def __init__(self, hass: HomeAssistant) -> None:
        self._hass = hass

    def every(self, interval: timedelta, action: Callable[[], None]) -> Cancel:
        @callback
        def _tick(_now) -> None:
            action()

        return async_track_time_interval(self._hass, _tick, interval)


class AlwaysVisible:
    """Visibility source used when no visibility entity is configured."""

    def observe(self, listener: Callable[[bool], None]) -> Cancel:
        listener(True)
        return lambda: None


def visibility_ratio(state: State | None) -> float:
    """Map an entity state to a 0..1 visible ratio."""
    if state is None:
        return 0.0
    value = str(state.state).strip().lower()
    if value in _VISIBLE_STATES:
        return 1.0
    try:
        percent = float(value)
    except ValueError:
        return 0.0
    return min(1.0, max(0.0, percent / 100.0))


def is_visible(ratio: float, threshold_percent: float) -> bool:
    """Threshold 0 means any visible part counts."""
    threshold = min(100.0, max(0.0, float(threshold_percent))) / 100.0
    if threshold <= 0:
        return ratio > 0
    return ratio >= threshold


class EntityVisibilityObserver:
    """Treats a Home Assistant entity as the countdown host's viewport.

    Binary-like entities count as fully visible when on; numeric entities are
    read as a visible percentage.
    """

    def __init__(
        self,
        hass: HomeAssistant,
        entity_id: str,
        threshold_percent: float = 0,
    ) -> None:
        self._hass = hass
        self._entity_id = entity_id
        self._threshold = threshold_percent

    def _visible(self, state: State | None) -> bool:
        return is_visible(visibility_ratio(state), self._threshold)

    def observe(self, listener: Callable[[bool], None]) -> Cancel:
        last = self._visible(self._hass.states.get(self._entity_id))

        @callback
        def _changed(event: Event[EventStateChangedData]) -> None:
            nonlocal last
            visible = self._visible(event.data["new_state"])
            if visible == last:
                return
            last = visible
            _LOGGER.debug("%s visibility -> %s", self._entity_id, visible)
            listener(visible)

        unsub = async_track_state_change_event(
            self._hass, [self._entity_id], _changed
        )
        listener(last)
        return unsub
