from __future__ import annotations

from datetime import UTC, datetime, timedelta

from custom_components.live_event.schedule import (
    ScheduleWindow,
    build_windows,
    parse_candidate_date,
    resolve_active_window,
)

from conftest import T0, unix

T = unix(T0)


def test_parse_candidate_date_accepts_numbers_and_numeric_strings():
    expected = datetime.fromtimestamp(T, tz=UTC)
    assert parse_candidate_date(T) == expected
    assert parse_candidate_date(float(T)) == expected
    assert parse_candidate_date(f" {T} ") == expected
    assert parse_candidate_date({"date": str(T)}) == expected


def test_parse_candidate_date_rejects_garbage():
    for raw in (None, True, "", "tomorrow", "nan", "inf", 1e30, [T], {"when": T}):
        assert parse_candidate_date(raw) is None


def test_build_windows_sorts_and_derives_end():
    windows = build_windows([T + 7200, T + 3600], 1800)
    assert [w.start for w in windows] == [
        T0 + timedelta(seconds=3600),
        T0 + timedelta(seconds=7200),
    ]
    assert all(w.end - w.start == timedelta(seconds=1800) for w in windows)


def test_build_windows_skips_malformed_entries():
    windows = build_windows(["bogus", T + 60, None, {"date": "x"}], 10)
    assert windows == [
        ScheduleWindow(
            start=T0 + timedelta(seconds=60), end=T0 + timedelta(seconds=70)
        )
    ]


def test_build_windows_is_stable_for_equal_starts():
    windows = build_windows([str(T), T, float(T)], 60)
    assert len(windows) == 3
    assert len({w.start for w in windows}) == 1


def test_resolve_scenario_a_before_first_window():
    window = resolve_active_window([T + 3600, T + 7200], 1800, T0)
    assert window == ScheduleWindow(
        start=T0 + timedelta(seconds=3600), end=T0 + timedelta(seconds=5400)
    )


def test_resolve_scenario_c_skips_elapsed_window():
    now = T0 + timedelta(seconds=6000)
    window = resolve_active_window([T + 7200, T + 3600], 1800, now)
    assert window is not None
    assert window.start == T0 + timedelta(seconds=7200)


def test_resolve_picks_smallest_start_among_open_windows():
    now = T0 + timedelta(seconds=100)
    dates = [T + 900, T - 50, T + 300, T - 5000]
    window = resolve_active_window(dates, 200, now)
    # T-50 ends at T+150 which is still open at T+100
    assert window is not None
    assert window.start == T0 - timedelta(seconds=50)


def test_resolve_window_end_is_exclusive():
    now = T0 + timedelta(seconds=5400)
    assert resolve_active_window([T + 3600], 1800, now) is None


def test_resolve_returns_none_when_everything_elapsed_or_empty():
    now = T0 + timedelta(days=1)
    assert resolve_active_window([T, T + 3600], 1800, now) is None
    assert resolve_active_window([], 1800, now) is None
    assert resolve_active_window(["junk"], 1800, now) is None
