"""Broadcast window resolution for scheduled events."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, timedelta
import logging
import math
from typing import Any

from homeassistant.util import dt as dt_util

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScheduleWindow:
    """One concrete broadcast slot: a candidate date plus the asset duration."""

    start: datetime
    end: datetime

    def contains(self, now: datetime) -> bool:
        return self.start <= now < self.end

    def as_dict(self) -> dict[str, str]:
        return {
            "start": self.start.isoformat(timespec="seconds"),
            "end": self.end.isoformat(timespec="seconds"),
        }


def parse_candidate_date(raw: Any) -> datetime | None:
    """Return the UTC instant for a raw Unix-seconds marker, or None if unusable."""
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, dict):
        # Backend rows look like {"date": "1735689600"}
        raw = raw.get("date")
        if raw is None or isinstance(raw, bool):
            return None
    try:
        seconds = float(str(raw).strip()) if isinstance(raw, str) else float(raw)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(seconds):
        return None
    try:
        return datetime.fromtimestamp(seconds, tz=dt_util.UTC)
    except (OverflowError, OSError, ValueError):
        return None


def build_windows(
    candidate_dates: Iterable[Any], duration_seconds: float
) -> list[ScheduleWindow]:
    """Map candidate dates to windows sorted by start.

    Malformed entries are skipped. ``sorted`` is stable, so windows sharing a
    start keep their input order.
    """
    duration = timedelta(seconds=max(0.0, float(duration_seconds or 0)))
    windows: list[ScheduleWindow] = []
    for raw in candidate_dates or ():
        start = parse_candidate_date(raw)
        if start is None:
            _LOGGER.debug("Skipping malformed candidate date: %r", raw)
            continue
        windows.append(ScheduleWindow(start=start, end=start + duration))
    return sorted(windows, key=lambda window: window.start)


def resolve_active_window(
    candidate_dates: Iterable[Any],
    duration_seconds: float,
    now: datetime,
) -> ScheduleWindow | None:
    """Return the earliest window that has not fully elapsed at ``now``."""
    for window in build_windows(candidate_dates, duration_seconds):
        if window.end > now:
            return window
    return None
