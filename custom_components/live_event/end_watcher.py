"""Wall-clock watcher for the close of a live broadcast window."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timedelta
from enum import StrEnum
import logging
from typing import Any

from homeassistant.util import dt as dt_util

from .const import DEFAULT_NEAR_END_SECONDS, END_WATCH_INTERVAL
from .lifecycle import Boundary, OnceLatch
from .scheduling import Cancel, IntervalScheduler

_LOGGER = logging.getLogger(__name__)


class WatcherPhase(StrEnum):
    IDLE = "idle"
    WATCHING = "watching"
    ENDING = "ending"
    CLOSED = "closed"
    CANCELLED = "cancelled"


class EndWatcher:
    """Polls the clock once per interval until the window end is reached.

    ``on_near_end`` fires once when the remaining time first drops to the
    threshold, ``on_remaining`` on every poll inside that band, and
    ``on_closed`` once when the end instant passes. The poll is cancelled
    before ``on_closed`` runs.
    """

    def __init__(
        self,
        end: datetime,
        *,
        interval_scheduler: IntervalScheduler,
        on_closed: Callable[[], None],
        on_near_end: Callable[[int], None] | None = None,
        on_remaining: Callable[[int], None] | None = None,
        near_end_threshold: timedelta = timedelta(seconds=DEFAULT_NEAR_END_SECONDS),
        poll_interval: timedelta = END_WATCH_INTERVAL,
        now: Callable[[], datetime] = dt_util.utcnow,
    ) -> None:
        self._end = end
        self._scheduler = interval_scheduler
        self._on_closed = on_closed
        self._on_near_end = on_near_end
        self._on_remaining = on_remaining
        self._threshold = near_end_threshold.total_seconds()
        self._interval = poll_interval
        self._now = now
        self._latch = OnceLatch()
        self._phase = WatcherPhase.IDLE
        self._cancel_poll: Cancel | None = None
        self._remaining: int | None = None

    @property
    def end(self) -> datetime:
        return self._end

    @property
    def phase(self) -> WatcherPhase:
        return self._phase

    @property
    def active(self) -> bool:
        return self._phase in (WatcherPhase.WATCHING, WatcherPhase.ENDING)

    def start(self) -> None:
        if self._phase is not WatcherPhase.IDLE:
            return
        self._phase = WatcherPhase.WATCHING
        _LOGGER.debug(
            "Watching for window end at %s", self._end.isoformat(timespec="seconds")
        )
        self._cancel_poll = self._scheduler.every(self._interval, self.poll)
        self.poll()

    def cancel(self) -> None:
        self._stop_polling()
        if self._phase is not WatcherPhase.CLOSED:
            self._phase = WatcherPhase.CANCELLED

    def poll(self) -> None:
        if not self.active:
            return
        now = self._now()
        remaining = round((self._end - now).total_seconds())
        self._remaining = max(0, remaining)
        if now >= self._end:
            self._close()
            return
        if 0 < remaining <= self._threshold:
            if self._latch.cross(Boundary.NEAR_END):
                self._phase = WatcherPhase.ENDING
                _LOGGER.debug("Window ends in %ss", remaining)
                if self._on_near_end is not None:
                    self._on_near_end(remaining)
            if self._on_remaining is not None and self.active:
                self._on_remaining(remaining)

    def snapshot(self) -> dict[str, Any]:
        return {
            "phase": self._phase.value,
            "end": self._end.isoformat(timespec="seconds"),
            "remaining": self._remaining,
            "near_end_fired": self._latch.crossed(Boundary.NEAR_END),
        }

    def _close(self) -> None:
        if not self._latch.cross(Boundary.WINDOW_CLOSED):
            return
        self._stop_polling()
        self._phase = WatcherPhase.CLOSED
        _LOGGER.debug("Window closed at %s", self._end)
        self._on_closed()

    def _stop_polling(self) -> None:
        if self._cancel_poll is not None:
            self._cancel_poll()
            self._cancel_poll = None
