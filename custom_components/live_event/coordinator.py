import logging
from datetime import timedelta

from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.helpers.update_coordinator import DataUpdateCoordinator, UpdateFailed

from .api import LiveEventApiClient, LiveEventApiError
from .models import EventRecord

_LOGGER = logging.getLogger(__name__)


class EventDataCoordinator(DataUpdateCoordinator[EventRecord]):
    """Keeps the event record fresh so status overrides reach the lifecycle."""

    def __init__(
        self,
        hass: HomeAssistant,
        client: LiveEventApiClient,
        event_code: str,
        *,
        email: str | None = None,
        token: str | None = None,
        is_host: bool = False,
        update_interval: timedelta = timedelta(minutes=15),
        config_entry: ConfigEntry | None = None,
    ) -> None:
        super().__init__(
            hass,
            _LOGGER,
            name=f"Live event {event_code}",
            update_interval=update_interval,
            config_entry=config_entry,
        )
        self._client = client
        self._event_code = event_code
        self._email = email
        self._token = token
        self._is_host = is_host

    async def _async_update_data(self) -> EventRecord:
        try:
            payload = await self._client.async_fetch_stream(
                self._event_code,
                email=self._email,
                token=self._token,
                is_host=self._is_host,
            )
            return EventRecord.from_stream_response(payload)
        except (LiveEventApiError, ValueError) as err:
            raise UpdateFailed(f"Error fetching event {self._event_code}: {err}") from err
