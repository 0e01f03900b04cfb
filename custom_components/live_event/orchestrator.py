"""Drives one event through its lifecycle and the side effects of each state."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timedelta
import logging
from typing import Any

from homeassistant.exceptions import HomeAssistantError
from homeassistant.util import dt as dt_util

from .collaborators import ChatSession, Playback
from .const import DEFAULT_NEAR_END_SECONDS
from .countdown import CountdownTimer, ResetPolicy
from .end_watcher import EndWatcher
from .lifecycle import (
    EventStatus,
    LifecycleMachine,
    LifecycleState,
    determine_state,
    state_for_status,
)
from .models import EventRecord
from .presenter import PRESENTATION_TARGETS, PresentationDetail, StatusPresenter
from .schedule import ScheduleWindow, resolve_active_window
from .scheduling import FrameScheduler, IntervalScheduler, VisibilityObserver

_LOGGER = logging.getLogger(__name__)


class LifecycleConfigError(HomeAssistantError):
    """A collaborator the lifecycle needs was not provided."""


def _require(name: str, obj: Any, methods: tuple[str, ...]) -> None:
    if obj is None:
        raise LifecycleConfigError(f"Missing {name}")
    for method in methods:
        if not callable(getattr(obj, method, None)):
            raise LifecycleConfigError(f"Missing {name} target: {method}")


class LifecycleOrchestrator:
    """The only place lifecycle transitions happen.

    The countdown and the end watcher just report that a boundary was
    reached; the orchestrator decides whether that is a real transition and
    runs the side effects for it. Requests that do not move the lifecycle
    forward are dropped, so playback and chat start once per live entry.
    """

    def __init__(
        self,
        record: EventRecord,
        *,
        presenter: StatusPresenter,
        playback: Playback,
        chat: ChatSession,
        frame_scheduler: FrameScheduler,
        interval_scheduler: IntervalScheduler,
        visibility: VisibilityObserver | None = None,
        reset_policy: ResetPolicy = ResetPolicy.RESUME,
        near_end_threshold: timedelta = timedelta(seconds=DEFAULT_NEAR_END_SECONDS),
        now: Callable[[], datetime] = dt_util.utcnow,
    ) -> None:
        _require("presenter", presenter, PRESENTATION_TARGETS)
        _require("playback", playback, ("start", "stop"))
        _require("chat session", chat, ("start",))
        _require("frame scheduler", frame_scheduler, ("request_frame",))
        _require("interval scheduler", interval_scheduler, ("every",))
        self._record = record
        self._presenter = presenter
        self._playback = playback
        self._chat = chat
        self._frames = frame_scheduler
        self._intervals = interval_scheduler
        self._visibility = visibility
        self._reset_policy = reset_policy
        self._near_end_threshold = near_end_threshold
        self._now = now
        self._window: ScheduleWindow | None = None
        self._machine: LifecycleMachine | None = None
        self._countdown: CountdownTimer | None = None
        self._watcher: EndWatcher | None = None
        self._closed = False

    @property
    def record(self) -> EventRecord:
        return self._record

    @property
    def window(self) -> ScheduleWindow | None:
        return self._window

    @property
    def state(self) -> LifecycleState | None:
        return self._machine.state if self._machine else None

    @property
    def countdown(self) -> CountdownTimer | None:
        return self._countdown

    @property
    def watcher(self) -> EndWatcher | None:
        return self._watcher

    def start(self) -> LifecycleState:
        """Resolve the window and enter the initial state."""
        if self._machine is not None:
            return self._machine.state
        now = self._now()
        self._window = resolve_active_window(
            self._record.candidate_dates, self._record.duration_seconds, now
        )
        initial = determine_state(self._record.status, self._window, now)
        _LOGGER.info(
            "Event %s starts in state %s (window %s)",
            self._record.event_id,
            initial,
            self._window.as_dict() if self._window else None,
        )
        self._machine = LifecycleMachine(initial)
        self._enter(initial)
        return initial

    def request(self, target: LifecycleState) -> bool:
        """Ask for a transition; only the first request per boundary wins."""
        if self._closed or self._machine is None:
            return False
        if not self._machine.transition(target):
            return False
        self._enter(target)
        return True

    def apply_status(self, status: EventStatus) -> bool:
        """Apply an operator override received after start."""
        target = state_for_status(EventStatus(status))
        if target is None:
            return False
        was_live = self.state is LifecycleState.LIVE
        if not self.request(target):
            return False
        if was_live:
            self._playback.stop()
        return True

    def shutdown(self) -> None:
        """Stop all timers; nothing scheduled by this instance fires afterwards."""
        self._closed = True
        self._stop_countdown()
        self._stop_watcher()

    def snapshot(self) -> dict[str, Any]:
        return {
            "event_id": self._record.event_id,
            "status": self._record.status.value,
            "state": self.state.value if self.state else None,
            "history": [state.value for state in self._machine.history]
            if self._machine
            else [],
            "window": self._window.as_dict() if self._window else None,
            "countdown": self._countdown.snapshot() if self._countdown else None,
            "watcher": self._watcher.snapshot() if self._watcher else None,
            "closed": self._closed,
        }

    def _enter(self, state: LifecycleState) -> None:
        if state is LifecycleState.EARLY:
            self._enter_early()
        elif state is LifecycleState.LIVE:
            self._enter_live()
        elif state is LifecycleState.ENDED:
            self._enter_ended()
        else:
            self._enter_override(state)

    def _enter_early(self) -> None:
        window = self._window
        assert window is not None
        self._presenter.hide_playback()
        self._presenter.hide_ended()
        self._presenter.show_countdown(window.start)
        self._presenter.present_state(
            LifecycleState.EARLY, PresentationDetail(window=window)
        )
        self._stop_countdown()
        self._countdown = CountdownTimer(
            window.start,
            frame_scheduler=self._frames,
            visibility=self._visibility,
            reset_policy=self._reset_policy,
            on_render=self._presenter.render_countdown,
            on_end=self._handle_countdown_end,
            now=self._now,
        )
        self._countdown.start()

    def _enter_live(self) -> None:
        window = self._window
        assert window is not None
        self._stop_countdown()
        self._presenter.hide_countdown()
        self._presenter.hide_ended()
        self._presenter.show_playback()
        self._presenter.present_state(
            LifecycleState.LIVE, PresentationDetail(window=window)
        )
        self._playback.start(self._record.media_url)
        self._chat.start()
        self._stop_watcher()
        self._watcher = EndWatcher(
            window.end,
            interval_scheduler=self._intervals,
            on_near_end=self._handle_near_end,
            on_remaining=self._handle_remaining,
            on_closed=self._handle_window_closed,
            near_end_threshold=self._near_end_threshold,
            now=self._now,
        )
        self._watcher.start()

    def _enter_ended(self) -> None:
        self._stop_countdown()
        self._stop_watcher()
        self._presenter.hide_playback()
        self._presenter.hide_countdown()
        self._presenter.show_ended()
        self._presenter.present_state(
            LifecycleState.ENDED, PresentationDetail(window=self._window)
        )

    def _enter_override(self, state: LifecycleState) -> None:
        self._stop_countdown()
        self._stop_watcher()
        self._presenter.hide_playback()
        self._presenter.hide_countdown()
        self._presenter.hide_ended()
        self._presenter.present_state(state, PresentationDetail(window=self._window))

    def _handle_countdown_end(self) -> None:
        window = self._window
        if window is not None and self._now() >= window.end:
            # Host stayed hidden through the whole window
            self.request(LifecycleState.ENDED)
            return
        self.request(LifecycleState.LIVE)

    def _handle_near_end(self, remaining: int) -> None:
        _LOGGER.info("Event %s ends in %ss", self._record.event_id, remaining)

    def _handle_remaining(self, remaining: int) -> None:
        if self._closed or self.state is not LifecycleState.LIVE:
            return
        self._presenter.present_state(
            LifecycleState.LIVE,
            PresentationDetail(window=self._window, remaining_seconds=remaining),
        )

    def _handle_window_closed(self) -> None:
        self.request(LifecycleState.ENDED)

    def _stop_countdown(self) -> None:
        if self._countdown is not None:
            self._countdown.stop()

    def _stop_watcher(self) -> None:
        if self._watcher is not None:
            self._watcher.cancel()
