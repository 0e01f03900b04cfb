"""Presentation surface for the lifecycle: state, status text and panels."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
import logging
from typing import Any, Protocol

from .helpers import format_countdown, format_display_date
from .lifecycle import LifecycleState
from .schedule import ScheduleWindow

_LOGGER = logging.getLogger(__name__)

PRESENTATION_TARGETS: tuple[str, ...] = (
    "present_state",
    "show_countdown",
    "hide_countdown",
    "render_countdown",
    "show_playback",
    "hide_playback",
    "show_ended",
    "hide_ended",
)


@dataclass(frozen=True)
class PresentationDetail:
    window: ScheduleWindow | None = None
    remaining_seconds: int | None = None


class StatusPresenter(Protocol):
    def present_state(self, state: LifecycleState, detail: PresentationDetail) -> None: ...

    def show_countdown(self, target: datetime) -> None: ...

    def hide_countdown(self) -> None: ...

    def render_countdown(self, remaining: int) -> None: ...

    def show_playback(self) -> None: ...

    def hide_playback(self) -> None: ...

    def show_ended(self) -> None: ...

    def hide_ended(self) -> None: ...


def status_text(state: LifecycleState, detail: PresentationDetail) -> str:
    """Human-readable status line for ``state``."""
    window = detail.window
    if state is LifecycleState.CANCELLED:
        return "Event cancelled"
    if state is LifecycleState.SUSPENDED:
        return "Event suspended"
    if state is LifecycleState.ENDED:
        ended = format_display_date(window.end) if window else None
        return f"Event Ended {ended}" if ended else "Event Ended"
    if state is LifecycleState.LIVE:
        if detail.remaining_seconds:
            return f"Event ending in {detail.remaining_seconds} seconds"
        return "Event is live"
    starts = format_display_date(window.start) if window else None
    return f"Event starts {starts}" if starts else "Event starts soon"


class LifecyclePresenter:
    """Keeps the latest presentation snapshot and fans it out to entities."""

    def __init__(self) -> None:
        self._listeners: list[Callable[[dict[str, Any]], None]] = []
        self._state: LifecycleState | None = None
        self._detail = PresentationDetail()
        self._countdown_visible = False
        self._countdown_target: datetime | None = None
        self._countdown_remaining: int | None = None
        self._playback_visible = False
        self._ended_visible = False

    @property
    def state(self) -> LifecycleState | None:
        return self._state

    def snapshot(self) -> dict[str, Any]:
        window = self._detail.window
        remaining = self._countdown_remaining
        return {
            "state": self._state.value if self._state else None,
            "status_text": status_text(self._state, self._detail)
            if self._state
            else None,
            "remaining_seconds": self._detail.remaining_seconds,
            "window_start": window.start if window else None,
            "window_end": window.end if window else None,
            "countdown_visible": self._countdown_visible,
            "countdown_target": self._countdown_target,
            "countdown_remaining": remaining,
            "countdown_display": format_countdown(remaining)
            if self._countdown_visible and remaining is not None
            else None,
            "playback_visible": self._playback_visible,
            "ended_visible": self._ended_visible,
        }

    def add_listener(
        self, listener: Callable[[dict[str, Any]], None]
    ) -> Callable[[], None]:
        self._listeners.append(listener)

        def _remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _remove

    def present_state(self, state: LifecycleState, detail: PresentationDetail) -> None:
        self._state = state
        self._detail = detail
        self._notify()

    def show_countdown(self, target: datetime) -> None:
        self._countdown_visible = True
        self._countdown_target = target
        self._notify()

    def hide_countdown(self) -> None:
        if not self._countdown_visible and self._countdown_target is None:
            return
        self._countdown_visible = False
        self._countdown_target = None
        self._countdown_remaining = None
        self._notify()

    def render_countdown(self, remaining: int) -> None:
        self._countdown_remaining = remaining
        self._notify()

    def show_playback(self) -> None:
        self._set_playback(True)

    def hide_playback(self) -> None:
        self._set_playback(False)

    def show_ended(self) -> None:
        self._set_ended(True)

    def hide_ended(self) -> None:
        self._set_ended(False)

    def _set_playback(self, visible: bool) -> None:
        if self._playback_visible == visible:
            return
        self._playback_visible = visible
        self._notify()

    def _set_ended(self, visible: bool) -> None:
        if self._ended_visible == visible:
            return
        self._ended_visible = visible
        self._notify()

    def _notify(self) -> None:
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:  # noqa: BLE001
                _LOGGER.debug("Presentation listener raised", exc_info=True)
