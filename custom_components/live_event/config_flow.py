import homeassistant.helpers.config_validation as cv
import voluptuous as vol
from homeassistant import config_entries
from homeassistant.helpers import selector

from .const import (
    CONF_ACCESS_TOKEN,
    CONF_API_BASE_URL,
    CONF_EMAIL,
    CONF_EVENT_CODE,
    CONF_INVITE_TOKEN,
    CONF_IS_HOST,
    CONF_MEDIA_PLAYER,
    CONF_NEAR_END_SECONDS,
    CONF_RESET_ON_VISIBLE,
    CONF_SCAN_INTERVAL_MINUTES,
    CONF_VISIBILITY_ENTITY,
    CONF_VISIBILITY_THRESHOLD,
    DEFAULT_API_BASE_URL,
    DEFAULT_NAME,
    DEFAULT_NEAR_END_SECONDS,
    DEFAULT_SCAN_INTERVAL_MINUTES,
    DEFAULT_VISIBILITY_THRESHOLD,
    DOMAIN,
)


def _schema(current: dict) -> vol.Schema:
    """Form schema, pre-filled from ``current``."""
    media_default = current.get(CONF_MEDIA_PLAYER)
    media_key = (
        vol.Required(CONF_MEDIA_PLAYER, default=media_default)
        if media_default
        else vol.Required(CONF_MEDIA_PLAYER)
    )
    visibility_default = current.get(CONF_VISIBILITY_ENTITY)
    visibility_key = (
        vol.Optional(CONF_VISIBILITY_ENTITY, default=visibility_default)
        if visibility_default
        else vol.Optional(CONF_VISIBILITY_ENTITY)
    )
    return vol.Schema(
        {
            vol.Required("name", default=current.get("name", DEFAULT_NAME)): cv.string,
            vol.Required(
                CONF_EVENT_CODE, default=current.get(CONF_EVENT_CODE, "")
            ): cv.string,
            vol.Required(
                CONF_API_BASE_URL,
                default=current.get(CONF_API_BASE_URL, DEFAULT_API_BASE_URL),
            ): cv.url,
            media_key: selector.EntitySelector(
                selector.EntitySelectorConfig(domain="media_player")
            ),
            vol.Optional(CONF_EMAIL, default=current.get(CONF_EMAIL, "")): cv.string,
            vol.Optional(
                CONF_INVITE_TOKEN, default=current.get(CONF_INVITE_TOKEN, "")
            ): cv.string,
            vol.Optional(
                CONF_ACCESS_TOKEN, default=current.get(CONF_ACCESS_TOKEN, "")
            ): cv.string,
            vol.Optional(CONF_IS_HOST, default=current.get(CONF_IS_HOST, False)): cv.boolean,
            visibility_key: selector.EntitySelector(),
            vol.Optional(
                CONF_VISIBILITY_THRESHOLD,
                default=current.get(
                    CONF_VISIBILITY_THRESHOLD, DEFAULT_VISIBILITY_THRESHOLD
                ),
            ): vol.All(vol.Coerce(int), vol.Range(min=0, max=100)),
            vol.Optional(
                CONF_RESET_ON_VISIBLE,
                default=current.get(CONF_RESET_ON_VISIBLE, False),
            ): cv.boolean,
            vol.Optional(
                CONF_SCAN_INTERVAL_MINUTES,
                default=current.get(
                    CONF_SCAN_INTERVAL_MINUTES, DEFAULT_SCAN_INTERVAL_MINUTES
                ),
            ): cv.positive_int,
            vol.Optional(
                CONF_NEAR_END_SECONDS,
                default=current.get(CONF_NEAR_END_SECONDS, DEFAULT_NEAR_END_SECONDS),
            ): cv.positive_int,
        }
    )


def _validate(user_input: dict) -> dict:
    errors = {}
    if not str(user_input.get(CONF_EVENT_CODE, "")).strip():
        errors[CONF_EVENT_CODE] = "event_code_required"
    if not user_input.get(CONF_MEDIA_PLAYER):
        errors[CONF_MEDIA_PLAYER] = "media_player_required"
    return errors


class LiveEventFlowHandler(config_entries.ConfigFlow, domain=DOMAIN):
    VERSION = 1

    async def async_step_user(self, user_input=None):
        errors = {}

        if user_input is not None:
            errors = _validate(user_input)
            if not errors:
                await self.async_set_unique_id(
                    f"{user_input[CONF_API_BASE_URL]}#{user_input[CONF_EVENT_CODE]}"
                )
                self._abort_if_unique_id_configured()
                return self.async_create_entry(
                    title=user_input["name"], data=user_input
                )

        return self.async_show_form(
            step_id="user", data_schema=_schema(user_input or {}), errors=errors
        )

    async def async_step_reconfigure(self, user_input=None):
        errors = {}
        entry = self._get_reconfigure_entry()

        if user_input is not None:
            errors = _validate(user_input)
            if not errors:
                return self.async_update_reload_and_abort(
                    entry,
                    data_updates=user_input,
                )

        return self.async_show_form(
            step_id="reconfigure",
            data_schema=_schema(user_input or dict(entry.data)),
            errors=errors,
        )
