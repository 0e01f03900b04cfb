from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from pathlib import Path
import sys
from typing import Any

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from custom_components.live_event.lifecycle import LifecycleState  # noqa: E402
from custom_components.live_event.presenter import PresentationDetail  # noqa: E402

T0 = datetime(2025, 3, 18, 12, 0, 0, tzinfo=UTC)


class FakeClock:
    def __init__(self, start: datetime = T0) -> None:
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def set(self, value: datetime) -> None:
        self.current = value

    def advance(self, seconds: float) -> None:
        self.current = self.current + timedelta(seconds=seconds)


class FakeFrameScheduler:
    """Frames only run when the test calls ``run_frame``."""

    def __init__(self) -> None:
        self._pending: list[Callable[[], None]] = []
        self.requested = 0

    @property
    def pending(self) -> int:
        return len(self._pending)

    def request_frame(self, action: Callable[[], None]) -> Callable[[], None]:
        self._pending.append(action)
        self.requested += 1

        def _cancel() -> None:
            if action in self._pending:
                self._pending.remove(action)

        return _cancel

    def run_frame(self) -> None:
        due, self._pending = self._pending, []
        for action in due:
            action()


class FakeIntervalScheduler:
    def __init__(self) -> None:
        self._actions: list[Callable[[], None]] = []
        self.intervals: list[timedelta] = []

    @property
    def active(self) -> int:
        return len(self._actions)

    def every(self, interval: timedelta, action: Callable[[], None]) -> Callable[[], None]:
        self._actions.append(action)
        self.intervals.append(interval)

        def _cancel() -> None:
            if action in self._actions:
                self._actions.remove(action)

        return _cancel

    def tick(self) -> None:
        for action in list(self._actions):
            action()


class FakeVisibility:
    def __init__(self, visible: bool = True) -> None:
        self.visible = visible
        self._listener: Callable[[bool], None] | None = None

    @property
    def observed(self) -> bool:
        return self._listener is not None

    def observe(self, listener: Callable[[bool], None]) -> Callable[[], None]:
        self._listener = listener
        listener(self.visible)

        def _cancel() -> None:
            self._listener = None

        return _cancel

    def set(self, visible: bool) -> None:
        self.visible = visible
        if self._listener is not None:
            self._listener(visible)


class RecordingPresenter:
    def __init__(self) -> None:
        self.calls: list[tuple[str, Any]] = []
        self.states: list[tuple[LifecycleState, PresentationDetail]] = []
        self.rendered: list[int] = []
        self.playback_visible = False
        self.countdown_visible = False
        self.ended_visible = False

    def present_state(self, state: LifecycleState, detail: PresentationDetail) -> None:
        self.calls.append(("present_state", state))
        self.states.append((state, detail))

    def show_countdown(self, target: datetime) -> None:
        self.calls.append(("show_countdown", target))
        self.countdown_visible = True

    def hide_countdown(self) -> None:
        self.calls.append(("hide_countdown", None))
        self.countdown_visible = False

    def render_countdown(self, remaining: int) -> None:
        self.rendered.append(remaining)

    def show_playback(self) -> None:
        self.calls.append(("show_playback", None))
        self.playback_visible = True

    def hide_playback(self) -> None:
        self.calls.append(("hide_playback", None))
        self.playback_visible = False

    def show_ended(self) -> None:
        self.calls.append(("show_ended", None))
        self.ended_visible = True

    def hide_ended(self) -> None:
        self.calls.append(("hide_ended", None))
        self.ended_visible = False


class FakePlayback:
    def __init__(self) -> None:
        self.started: list[str | None] = []
        self.stopped = 0

    def start(self, media_url: str | None) -> None:
        self.started.append(media_url)

    def stop(self) -> None:
        self.stopped += 1


class FakeChat:
    def __init__(self) -> None:
        self.started = 0

    def start(self) -> None:
        self.started += 1


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def frames() -> FakeFrameScheduler:
    return FakeFrameScheduler()


@pytest.fixture
def intervals() -> FakeIntervalScheduler:
    return FakeIntervalScheduler()


@pytest.fixture
def visibility() -> FakeVisibility:
    return FakeVisibility()


@pytest.fixture
def presenter() -> RecordingPresenter:
    return RecordingPresenter()


@pytest.fixture
def playback() -> FakePlayback:
    return FakePlayback()


@pytest.fixture
def chat() -> FakeChat:
    return FakeChat()


def unix(value: datetime) -> int:
    return int(value.timestamp())


def stream_payload(
    *,
    dates: list[Any],
    duration: float | None = 1800,
    status: str = "active",
    media: str | None = "https://cdn.example.com/live/event.m3u8",
) -> dict[str, Any]:
    return {
        "event": {
            "id": 42,
            "event_name": "Launch keynote",
            "event_description": "Product launch",
            "event_date": str(dates[0]) if dates else "",
            "status": status,
            "event_code": "LAUNCH",
            "host": {"id": 7, "name": "Ada"},
            "asset": {
                "id": 3,
                "duration": duration,
                "hls_url": None,
                "presignedUrl": media,
                "asset_url": "https://cdn.example.com/raw/event.mp4",
            },
        },
        "selectedDates": [{"date": str(value)} for value in dates],
    }
