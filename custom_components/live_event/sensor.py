from typing import Any

from homeassistant.components.sensor import SensorDeviceClass, SensorEntity
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant

from .const import DEFAULT_NAME, DOMAIN
from .entity import LiveEventEntity
from .lifecycle import LifecycleState

_STATE_ICONS = {
    LifecycleState.EARLY.value: "mdi:calendar-clock",
    LifecycleState.LIVE.value: "mdi:broadcast",
    LifecycleState.ENDED.value: "mdi:calendar-check",
    LifecycleState.CANCELLED.value: "mdi:calendar-remove",
    LifecycleState.SUSPENDED.value: "mdi:pause-octagon",
}


def _iso(value) -> str | None:
    if value is None:
        return None
    return value.isoformat(timespec="seconds")


async def async_setup_entry(
    hass: HomeAssistant, entry: ConfigEntry, async_add_entities
):
    """Create sensors when integration is added."""
    data = hass.data[DOMAIN][entry.entry_id]
    presenter = data["presenter"]
    base = entry.data.get("name", DEFAULT_NAME)
    async_add_entities(
        [
            LiveEventStatusSensor(
                presenter,
                f"{base} status",
                f"{entry.entry_id}_status",
                entry.entry_id,
                base,
            ),
            LiveEventCountdownSensor(
                presenter,
                f"{base} countdown",
                f"{entry.entry_id}_countdown",
                entry.entry_id,
                base,
            ),
        ]
    )


class LiveEventStatusSensor(LiveEventEntity, SensorEntity):
    """Current lifecycle state with the status line as an attribute."""

    _attr_device_class = SensorDeviceClass.ENUM
    _attr_options = [state.value for state in LifecycleState]
    _tracked_keys = (
        "state",
        "status_text",
        "remaining_seconds",
        "window_start",
        "window_end",
        "playback_visible",
        "ended_visible",
    )

    @property
    def native_value(self) -> str | None:
        return self._snapshot.get("state")

    @property
    def icon(self) -> str:
        return _STATE_ICONS.get(self._snapshot.get("state"), "mdi:calendar")

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        snap = self._snapshot
        return {
            "status_text": snap.get("status_text"),
            "remaining_seconds": snap.get("remaining_seconds"),
            "window_start": _iso(snap.get("window_start")),
            "window_end": _iso(snap.get("window_end")),
            "playback_visible": snap.get("playback_visible"),
            "ended_visible": snap.get("ended_visible"),
        }


class LiveEventCountdownSensor(LiveEventEntity, SensorEntity):
    """Countdown text shown before the event starts."""

    _attr_icon = "mdi:timer-sand"
    _tracked_keys = ("countdown_visible", "countdown_display", "countdown_target")

    @property
    def available(self) -> bool:
        return bool(self._snapshot.get("countdown_visible"))

    @property
    def native_value(self) -> str | None:
        return self._snapshot.get("countdown_display")

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        snap = self._snapshot
        return {
            "remaining_seconds": snap.get("countdown_remaining"),
            "target": _iso(snap.get("countdown_target")),
        }
