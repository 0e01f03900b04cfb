from typing import Any

from homeassistant.core import callback
from homeassistant.helpers.entity import Entity

from .const import DOMAIN
from .presenter import LifecyclePresenter


class LiveEventEntity(Entity):
    """Base for entities that mirror the lifecycle presenter."""

    _attr_should_poll = False
    _tracked_keys: tuple[str, ...] = ()

    def __init__(
        self,
        presenter: LifecyclePresenter,
        name: str,
        unique_id: str,
        entry_id: str,
        device_name: str,
    ) -> None:
        super().__init__()
        self._presenter = presenter
        self._attr_name = name
        self._attr_unique_id = unique_id
        self._entry_id = entry_id
        self._device_name = device_name
        self._snapshot: dict[str, Any] = presenter.snapshot()

    @property
    def device_info(self):
        return {
            "identifiers": {(DOMAIN, self._entry_id)},
            "name": self._device_name,
            "manufacturer": "Live event",
            "model": "Scheduled live stream",
        }

    async def async_added_to_hass(self) -> None:
        await super().async_added_to_hass()
        self._snapshot = self._presenter.snapshot()
        self.async_on_remove(self._presenter.add_listener(self._handle_snapshot))

    @callback
    def _handle_snapshot(self, snapshot: dict[str, Any]) -> None:
        changed = any(
            snapshot.get(key) != self._snapshot.get(key) for key in self._tracked_keys
        )
        self._snapshot = snapshot
        if not changed:
            return
        if self.hass is not None:
            self.async_write_ha_state()
