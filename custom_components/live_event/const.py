from datetime import timedelta

from homeassistant.const import Platform

DOMAIN = "live_event"
PLATFORMS: list[Platform] = [Platform.SENSOR, Platform.BINARY_SENSOR]

DEFAULT_NAME = "Live event"
DEFAULT_API_BASE_URL = "https://api.3themind.com/v1"
STREAM_ENDPOINT = "/event/stream"

CONF_API_BASE_URL = "api_base_url"
CONF_EVENT_CODE = "event_code"
CONF_EMAIL = "email"
CONF_INVITE_TOKEN = "invite_token"
CONF_ACCESS_TOKEN = "access_token"
CONF_IS_HOST = "is_host"
CONF_MEDIA_PLAYER = "media_player"
CONF_VISIBILITY_ENTITY = "visibility_entity"
CONF_VISIBILITY_THRESHOLD = "visibility_threshold"
CONF_RESET_ON_VISIBLE = "reset_on_visible"
CONF_SCAN_INTERVAL_MINUTES = "scan_interval_minutes"
CONF_NEAR_END_SECONDS = "near_end_seconds"

DEFAULT_VISIBILITY_THRESHOLD = 0
DEFAULT_SCAN_INTERVAL_MINUTES = 15
DEFAULT_NEAR_END_SECONDS = 20

# Countdown redraw cadence while visible; the watcher polls once per second.
FRAME_INTERVAL = timedelta(milliseconds=250)
END_WATCH_INTERVAL = timedelta(seconds=1)

REQUEST_TIMEOUT = 10
REQUEST_RETRIES = 3

EVENT_CHAT_STARTED = f"{DOMAIN}_chat_started"
