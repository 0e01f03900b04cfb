"""Playback and chat hooks invoked when an event goes live."""

from __future__ import annotations

import logging
from typing import Any, Protocol

from homeassistant.components.media_player import (
    ATTR_MEDIA_CONTENT_ID,
    ATTR_MEDIA_CONTENT_TYPE,
    DOMAIN as MEDIA_PLAYER_DOMAIN,
    MediaType,
)
from homeassistant.const import ATTR_ENTITY_ID, SERVICE_MEDIA_STOP
from homeassistant.core import HomeAssistant
from homeassistant.exceptions import HomeAssistantError

from .const import EVENT_CHAT_STARTED

_LOGGER = logging.getLogger(__name__)

SERVICE_PLAY_MEDIA = "play_media"


class Playback(Protocol):
    def start(self, media_url: str | None) -> None: ...

    def stop(self) -> None: ...


class ChatSession(Protocol):
    def start(self) -> None: ...


class MediaPlayerPlayback:
    """Starts the event stream on a Home Assistant media player."""

    def __init__(self, hass: HomeAssistant, entity_id: str) -> None:
        self._hass = hass
        self._entity_id = entity_id

    @property
    def entity_id(self) -> str:
        return self._entity_id

    def start(self, media_url: str | None) -> None:
        if not media_url:
            _LOGGER.warning(
                "Event has no playable media; %s left idle", self._entity_id
            )
            return
        _LOGGER.info("Starting playback on %s", self._entity_id)
        self._hass.async_create_task(
            self._async_call(
                SERVICE_PLAY_MEDIA,
                {
                    ATTR_MEDIA_CONTENT_ID: media_url,
                    ATTR_MEDIA_CONTENT_TYPE: MediaType.VIDEO,
                },
            )
        )

    def stop(self) -> None:
        _LOGGER.info("Stopping playback on %s", self._entity_id)
        self._hass.async_create_task(self._async_call(SERVICE_MEDIA_STOP, {}))

    async def _async_call(self, service: str, data: dict[str, Any]) -> None:
        try:
            await self._hass.services.async_call(
                MEDIA_PLAYER_DOMAIN,
                service,
                {ATTR_ENTITY_ID: self._entity_id, **data},
                blocking=True,
            )
        except HomeAssistantError as err:
            _LOGGER.warning(
                "media_player.%s on %s failed: %s", service, self._entity_id, err
            )


class EventBusChat:
    """Announces that the event chat should open for this event."""

    def __init__(self, hass: HomeAssistant, *, entry_id: str, event_id: Any) -> None:
        self._hass = hass
        self._entry_id = entry_id
        self._event_id = event_id

    def start(self) -> None:
        _LOGGER.debug("Opening chat for event %s", self._event_id)
        self._hass.bus.async_fire(
            EVENT_CHAT_STARTED,
            {"entry_id": self._entry_id, "event_id": self._event_id},
        )
