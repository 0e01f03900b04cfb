from __future__ import annotations

from datetime import timedelta

from custom_components.live_event.helpers import format_display_date
from custom_components.live_event.lifecycle import LifecycleState
from custom_components.live_event.presenter import (
    LifecyclePresenter,
    PresentationDetail,
    status_text,
)
from custom_components.live_event.schedule import ScheduleWindow

from conftest import T0

WINDOW = ScheduleWindow(start=T0, end=T0 + timedelta(minutes=30))


def test_status_text_per_state():
    detail = PresentationDetail(window=WINDOW)
    assert status_text(LifecycleState.EARLY, detail) == (
        f"Event starts {format_display_date(WINDOW.start)}"
    )
    assert status_text(LifecycleState.LIVE, detail) == "Event is live"
    assert status_text(LifecycleState.ENDED, detail) == (
        f"Event Ended {format_display_date(WINDOW.end)}"
    )
    assert status_text(LifecycleState.CANCELLED, detail) == "Event cancelled"
    assert status_text(LifecycleState.SUSPENDED, detail) == "Event suspended"


def test_status_text_without_window():
    detail = PresentationDetail()
    assert status_text(LifecycleState.EARLY, detail) == "Event starts soon"
    assert status_text(LifecycleState.ENDED, detail) == "Event Ended"


def test_live_text_counts_down_near_end():
    detail = PresentationDetail(window=WINDOW, remaining_seconds=12)
    assert status_text(LifecycleState.LIVE, detail) == "Event ending in 12 seconds"


def test_snapshot_tracks_panels_and_countdown():
    presenter = LifecyclePresenter()
    snapshots = []
    remove = presenter.add_listener(snapshots.append)

    presenter.present_state(LifecycleState.EARLY, PresentationDetail(window=WINDOW))
    presenter.show_countdown(WINDOW.start)
    presenter.render_countdown(3725)
    snap = presenter.snapshot()
    assert snap["state"] == "early"
    assert snap["countdown_visible"] is True
    assert snap["countdown_target"] == WINDOW.start
    assert snap["countdown_display"] == "01 h : 02 m : 05 s"
    assert snap["window_end"] == WINDOW.end
    assert len(snapshots) == 3

    presenter.hide_countdown()
    presenter.show_playback()
    presenter.show_playback()
    snap = presenter.snapshot()
    assert snap["countdown_visible"] is False
    assert snap["countdown_display"] is None
    assert snap["playback_visible"] is True
    assert len(snapshots) == 5

    remove()
    presenter.show_ended()
    assert len(snapshots) == 5


def test_failing_listener_does_not_block_others():
    presenter = LifecyclePresenter()
    seen = []

    def _broken(_snapshot):
        raise RuntimeError("boom")

    presenter.add_listener(_broken)
    presenter.add_listener(seen.append)
    presenter.present_state(LifecycleState.LIVE, PresentationDetail(window=WINDOW))
    assert seen[-1]["status_text"] == "Event is live"
