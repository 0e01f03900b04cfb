"""Diagnostics for the Live Event integration.

Exposes the lifecycle snapshot so a stuck countdown or watcher can be
inspected without verbose logging.
"""

from __future__ import annotations

from typing import Any

from homeassistant.components.diagnostics import async_redact_data
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant

from .const import CONF_ACCESS_TOKEN, CONF_EMAIL, CONF_INVITE_TOKEN, DOMAIN

TO_REDACT: set[str] = {CONF_ACCESS_TOKEN, CONF_EMAIL, CONF_INVITE_TOKEN}


def _iso(value) -> str | None:
    if value is None:
        return None
    return value.isoformat(timespec="seconds")


async def async_get_config_entry_diagnostics(
    hass: HomeAssistant, entry: ConfigEntry
) -> dict[str, Any]:
    """Return diagnostics for a config entry."""
    reg = hass.data.get(DOMAIN, {}).get(entry.entry_id, {})

    coordinator = reg.get("coordinator")
    record = getattr(coordinator, "data", None)
    event: dict[str, Any] = {"present": record is not None}
    if record is not None:
        event.update(
            {
                "event_id": record.event_id,
                "status": record.status.value,
                "candidate_dates": [str(value) for value in record.candidate_dates],
                "duration_seconds": record.duration_seconds,
                "has_media": bool(record.media_url),
                "last_update_success": bool(
                    getattr(coordinator, "last_update_success", False)
                ),
            }
        )

    runtime = reg.get("runtime")
    lifecycle: dict[str, Any] = {}
    if runtime is not None:
        snapshot = runtime.snapshot()
        presentation = dict(snapshot.get("presentation") or {})
        for key in ("window_start", "window_end", "countdown_target"):
            presentation[key] = _iso(presentation.get(key))
        lifecycle = {
            "orchestrator": snapshot.get("orchestrator"),
            "presentation": presentation,
        }

    return {
        "config": async_redact_data({**entry.data, **entry.options}, TO_REDACT),
        "event": event,
        "lifecycle": lifecycle,
    }
