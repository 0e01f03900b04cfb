"""Frame-driven countdown to the start of a broadcast window."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from enum import StrEnum
import logging
import math
from typing import Any

from homeassistant.util import dt as dt_util

from .lifecycle import Boundary, OnceLatch
from .scheduling import AlwaysVisible, Cancel, FrameScheduler, VisibilityObserver

_LOGGER = logging.getLogger(__name__)


class ResetPolicy(StrEnum):
    RESUME = "resume"
    RESTART_ON_VISIBLE = "restart_on_visible"


class CountdownPhase(StrEnum):
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    FINISHED = "finished"
    STOPPED = "stopped"


def seconds_until(target: datetime, now: datetime) -> int:
    """Whole seconds left before ``target``, never negative."""
    return max(0, math.floor((target - now).total_seconds()))


class CountdownTimer:
    """Counts down to ``target`` while its host is visible.

    Remaining time is recomputed from the wall clock on every frame, so
    skipped frames and pauses never accumulate error. ``on_end`` runs exactly
    once, after which the timer releases its frame and visibility hooks.
    """

    def __init__(
        self,
        target: datetime,
        *,
        frame_scheduler: FrameScheduler,
        on_end: Callable[[], None],
        visibility: VisibilityObserver | None = None,
        reset_policy: ResetPolicy = ResetPolicy.RESUME,
        on_start: Callable[[], None] | None = None,
        on_render: Callable[[int], None] | None = None,
        now: Callable[[], datetime] = dt_util.utcnow,
    ) -> None:
        self._target = target
        self._frames = frame_scheduler
        self._visibility = visibility or AlwaysVisible()
        self._reset_policy = ResetPolicy(reset_policy)
        self._on_start = on_start
        self._on_end = on_end
        self._on_render = on_render
        self._now = now
        self._latch = OnceLatch()
        self._phase = CountdownPhase.IDLE
        self._cancel_frame: Cancel | None = None
        self._unobserve: Cancel | None = None
        self._remaining = seconds_until(target, now())
        self._rendered: int | None = None

    @property
    def target(self) -> datetime:
        return self._target

    @property
    def phase(self) -> CountdownPhase:
        return self._phase

    @property
    def remaining(self) -> int:
        return self._remaining

    @property
    def running(self) -> bool:
        return self._phase is CountdownPhase.RUNNING

    @property
    def finished(self) -> bool:
        return self._phase is CountdownPhase.FINISHED

    def start(self) -> None:
        if self._phase is not CountdownPhase.IDLE:
            return
        _LOGGER.debug(
            "Countdown to %s started (%ss remaining)",
            self._target.isoformat(timespec="seconds"),
            seconds_until(self._target, self._now()),
        )
        self._restart()
        if self._phase is not CountdownPhase.RUNNING:
            return
        self._unobserve = self._visibility.observe(self._handle_visibility)

    def stop(self) -> None:
        """Cancel pending frames and visibility tracking. Safe to call twice."""
        self._release()
        if self._phase is not CountdownPhase.FINISHED:
            self._phase = CountdownPhase.STOPPED

    def snapshot(self) -> dict[str, Any]:
        return {
            "phase": self._phase.value,
            "target": self._target.isoformat(timespec="seconds"),
            "remaining": self._remaining,
            "reset_policy": self._reset_policy.value,
        }

    def _handle_visibility(self, visible: bool) -> None:
        if self._phase in (CountdownPhase.FINISHED, CountdownPhase.STOPPED):
            return
        if visible:
            if self._phase is not CountdownPhase.PAUSED:
                return
            if self._reset_policy is ResetPolicy.RESTART_ON_VISIBLE:
                self._restart()
            else:
                self._resume()
            return
        if self._phase is CountdownPhase.RUNNING:
            self._pause()

    def _restart(self) -> None:
        self._cancel_pending_frame()
        self._rendered = None
        self._remaining = seconds_until(self._target, self._now())
        self._render()
        self._resume()

    def _resume(self) -> None:
        self._phase = CountdownPhase.RUNNING
        if self._on_start is not None:
            self._on_start()
        self._request_frame()

    def _pause(self) -> None:
        _LOGGER.debug("Countdown paused at %ss", self._remaining)
        self._cancel_pending_frame()
        self._phase = CountdownPhase.PAUSED

    def _request_frame(self) -> None:
        if self._cancel_frame is None:
            self._cancel_frame = self._frames.request_frame(self._tick)

    def _tick(self) -> None:
        self._cancel_frame = None
        if self._phase is not CountdownPhase.RUNNING:
            return
        self._remaining = seconds_until(self._target, self._now())
        self._render()
        if self._remaining > 0:
            self._request_frame()
            return
        self._finish()

    def _render(self) -> None:
        if self._remaining == self._rendered:
            return
        self._rendered = self._remaining
        if self._on_render is not None:
            self._on_render(self._remaining)

    def _finish(self) -> None:
        if not self._latch.cross(Boundary.COUNTDOWN_END):
            return
        self._phase = CountdownPhase.FINISHED
        self._release()
        _LOGGER.debug("Countdown to %s reached zero", self._target)
        self._on_end()

    def _cancel_pending_frame(self) -> None:
        if self._cancel_frame is not None:
            self._cancel_frame()
            self._cancel_frame = None

    def _release(self) -> None:
        self._cancel_pending_frame()
        if self._unobserve is not None:
            self._unobserve()
            self._unobserve = None
