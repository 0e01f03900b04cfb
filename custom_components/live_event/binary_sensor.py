from homeassistant.components.binary_sensor import BinarySensorEntity
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant

from .const import DEFAULT_NAME, DOMAIN
from .entity import LiveEventEntity


async def async_setup_entry(
    hass: HomeAssistant, entry: ConfigEntry, async_add_entities
):
    data = hass.data[DOMAIN][entry.entry_id]
    base = entry.data.get("name", DEFAULT_NAME)
    async_add_entities(
        [
            LiveEventPlaybackBinarySensor(
                data["presenter"],
                f"{base} playback",
                f"{entry.entry_id}_playback",
                entry.entry_id,
                base,
            )
        ]
    )


class LiveEventPlaybackBinarySensor(LiveEventEntity, BinarySensorEntity):
    """On while the playback panel is shown."""

    _attr_icon = "mdi:play-box"
    _tracked_keys = ("playback_visible",)

    @property
    def is_on(self) -> bool:
        return bool(self._snapshot.get("playback_visible"))
