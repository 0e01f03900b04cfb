from __future__ import annotations

from datetime import datetime

from homeassistant.util import dt as dt_util

DISPLAY_DATE_FORMAT = "%d %b %Y %H:%M"


def _pad(value: int) -> str:
    return f"{value:02d}"


def format_countdown(remaining: int) -> str:
    """Render whole seconds as ``HH h : MM m : SS s``."""
    remaining = max(0, int(remaining))
    hours, rest = divmod(remaining, 3600)
    minutes, seconds = divmod(rest, 60)
    return f"{_pad(hours)} h : {_pad(minutes)} m : {_pad(seconds)} s"


def format_display_date(value: datetime | None) -> str | None:
    """Local wall-clock rendering used in status text, e.g. ``18 Mar 2025 13:28``."""
    if value is None:
        return None
    return dt_util.as_local(value).strftime(DISPLAY_DATE_FORMAT)
