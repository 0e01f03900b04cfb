"""Event record as delivered by the event stream endpoint."""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import Any

from .lifecycle import EventStatus

_LOGGER = logging.getLogger(__name__)


def _parse_status(raw: Any) -> EventStatus:
    value = str(raw or "").strip().lower()
    if not value:
        return EventStatus.ACTIVE
    try:
        return EventStatus(value)
    except ValueError:
        _LOGGER.warning("Unknown event status %r, treating as active", raw)
        return EventStatus.ACTIVE


def _parse_duration(raw: Any) -> float:
    if raw is None or isinstance(raw, bool):
        return 0.0
    try:
        value = float(raw)
    except (TypeError, ValueError):
        _LOGGER.warning("Invalid asset duration %r, treating as 0", raw)
        return 0.0
    return max(0.0, value)


def _media_url(asset: dict[str, Any]) -> str | None:
    for key in ("hls_url", "presignedUrl", "asset_url"):
        value = asset.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


def _candidate_dates(payload: dict[str, Any], event: dict[str, Any]) -> tuple[Any, ...]:
    selected = payload.get("selectedDates")
    if isinstance(selected, list) and selected:
        return tuple(
            item.get("date") if isinstance(item, dict) else item for item in selected
        )
    # Single-date events carry their only slot on the event itself
    if event.get("event_date") not in (None, ""):
        return (event.get("event_date"),)
    return ()


@dataclass(frozen=True)
class EventRecord:
    """Status, candidate dates and media for one scheduled event."""

    event_id: int | str | None
    name: str
    status: EventStatus
    candidate_dates: tuple[Any, ...]
    duration_seconds: float
    media_url: str | None = None
    description: str = ""
    calendar_url: str | None = None
    extra: dict[str, Any] = field(default_factory=dict, compare=False)

    @classmethod
    def from_stream_response(cls, payload: dict[str, Any]) -> EventRecord:
        """Build a record from ``{"event": {...}, "selectedDates": [...]}``."""
        if not isinstance(payload, dict):
            raise ValueError("Event stream response must be an object")
        event = payload.get("event")
        if not isinstance(event, dict):
            raise ValueError("Event stream response has no event")
        asset = event.get("asset") if isinstance(event.get("asset"), dict) else {}
        return cls(
            event_id=event.get("id"),
            name=str(event.get("event_name") or ""),
            status=_parse_status(event.get("status")),
            candidate_dates=_candidate_dates(payload, event),
            duration_seconds=_parse_duration(asset.get("duration")),
            media_url=_media_url(asset),
            description=str(event.get("event_description") or ""),
            calendar_url=event.get("calendar_url") or None,
            extra={
                "event_code": event.get("event_code"),
                "host": (event.get("host") or {}).get("name")
                if isinstance(event.get("host"), dict)
                else None,
            },
        )

    def schedule_key(self) -> tuple[Any, ...]:
        """Everything except status that decides the timeline."""
        return (self.candidate_dates, self.duration_seconds, self.media_url)
