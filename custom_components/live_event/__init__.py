import logging
from datetime import timedelta
from typing import Any, Callable, Optional

from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant, callback
from homeassistant.exceptions import ConfigEntryError
from homeassistant.helpers.aiohttp_client import async_get_clientsession

from .api import LiveEventApiClient
from .collaborators import EventBusChat, MediaPlayerPlayback
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
    DEFAULT_NEAR_END_SECONDS,
    DEFAULT_SCAN_INTERVAL_MINUTES,
    DEFAULT_VISIBILITY_THRESHOLD,
    DOMAIN,
    PLATFORMS,
)
from .coordinator import EventDataCoordinator
from .countdown import ResetPolicy
from .lifecycle import EventStatus, LifecycleState, state_for_status
from .models import EventRecord
from .orchestrator import LifecycleConfigError, LifecycleOrchestrator
from .presenter import LifecyclePresenter
from .scheduling import (
    AlwaysVisible,
    EntityVisibilityObserver,
    HassIntervalScheduler,
    LoopFrameScheduler,
)

_LOGGER = logging.getLogger(__name__)


class LiveEventRuntime:
    """Owns the orchestrator for one config entry and follows record updates.

    A status flip to cancelled or suspended is applied to the running
    orchestrator. Any other change to the timeline (dates, duration, media,
    or a status back to active) is a fresh load: the old orchestrator is shut
    down and a new one starts from the current wall clock.
    """

    def __init__(
        self,
        hass: HomeAssistant,
        entry: ConfigEntry,
        coordinator: EventDataCoordinator,
        presenter: LifecyclePresenter,
    ) -> None:
        self._hass = hass
        self._entry = entry
        self._coordinator = coordinator
        self._presenter = presenter
        self._config = {**entry.data, **entry.options}
        self._orchestrator: Optional[LifecycleOrchestrator] = None
        self._record: Optional[EventRecord] = None
        self._unsub_coordinator: Optional[Callable[[], None]] = None
        self._frames = LoopFrameScheduler(hass)
        self._intervals = HassIntervalScheduler(hass)

    @property
    def orchestrator(self) -> Optional[LifecycleOrchestrator]:
        return self._orchestrator

    @property
    def presenter(self) -> LifecyclePresenter:
        return self._presenter

    def _visibility(self):
        entity_id = self._config.get(CONF_VISIBILITY_ENTITY)
        if not entity_id:
            return AlwaysVisible()
        return EntityVisibilityObserver(
            self._hass,
            entity_id,
            float(
                self._config.get(
                    CONF_VISIBILITY_THRESHOLD, DEFAULT_VISIBILITY_THRESHOLD
                )
            ),
        )

    def _build(self, record: EventRecord) -> LifecycleOrchestrator:
        media_player = self._config.get(CONF_MEDIA_PLAYER)
        if not media_player:
            raise LifecycleConfigError("No media player configured for playback")
        reset_policy = (
            ResetPolicy.RESTART_ON_VISIBLE
            if self._config.get(CONF_RESET_ON_VISIBLE)
            else ResetPolicy.RESUME
        )
        return LifecycleOrchestrator(
            record,
            presenter=self._presenter,
            playback=MediaPlayerPlayback(self._hass, media_player),
            chat=EventBusChat(
                self._hass, entry_id=self._entry.entry_id, event_id=record.event_id
            ),
            frame_scheduler=self._frames,
            interval_scheduler=self._intervals,
            visibility=self._visibility(),
            reset_policy=reset_policy,
            near_end_threshold=timedelta(
                seconds=int(
                    self._config.get(CONF_NEAR_END_SECONDS, DEFAULT_NEAR_END_SECONDS)
                )
            ),
        )

    def _load(self, record: EventRecord) -> None:
        orchestrator = self._build(record)
        if self._orchestrator is not None:
            self._orchestrator.shutdown()
        self._orchestrator = orchestrator
        self._record = record
        orchestrator.start()

    @callback
    def async_start(self) -> None:
        record = self._coordinator.data
        if record is None:
            raise LifecycleConfigError("Event data unavailable")
        self._load(record)
        self._unsub_coordinator = self._coordinator.async_add_listener(
            self._handle_coordinator_update
        )

    @callback
    def _handle_coordinator_update(self) -> None:
        record = self._coordinator.data
        if record is None or record == self._record or self._orchestrator is None:
            return
        previous = self._record
        override = state_for_status(record.status)
        same_timeline = (
            previous is not None and previous.schedule_key() == record.schedule_key()
        )
        if same_timeline and override is not None:
            self._record = record
            self._orchestrator.apply_status(record.status)
            return
        if same_timeline and previous.status == record.status:
            self._record = record
            return
        if override is not None and self._orchestrator.state is LifecycleState.LIVE:
            self._orchestrator.apply_status(record.status)
        _LOGGER.info(
            "Event %s changed (status %s), reloading lifecycle",
            record.event_id,
            EventStatus(record.status),
        )
        try:
            self._load(record)
        except LifecycleConfigError as err:
            _LOGGER.error("Could not reload event lifecycle: %s", err)

    def snapshot(self) -> dict[str, Any]:
        return {
            "orchestrator": self._orchestrator.snapshot()
            if self._orchestrator
            else None,
            "presentation": self._presenter.snapshot(),
        }

    async def async_close(self, *_: Any) -> None:
        if self._unsub_coordinator is not None:
            self._unsub_coordinator()
            self._unsub_coordinator = None
        if self._orchestrator is not None:
            self._orchestrator.shutdown()
        await self._coordinator.async_shutdown()


async def async_setup_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Set up integration via config flow."""
    config = {**entry.data, **entry.options}
    client = LiveEventApiClient(
        async_get_clientsession(hass),
        config.get(CONF_API_BASE_URL) or DEFAULT_API_BASE_URL,
        access_token=config.get(CONF_ACCESS_TOKEN) or None,
    )
    coordinator = EventDataCoordinator(
        hass,
        client,
        str(config[CONF_EVENT_CODE]),
        email=config.get(CONF_EMAIL) or None,
        token=config.get(CONF_INVITE_TOKEN) or None,
        is_host=bool(config.get(CONF_IS_HOST, False)),
        update_interval=timedelta(
            minutes=int(
                config.get(CONF_SCAN_INTERVAL_MINUTES, DEFAULT_SCAN_INTERVAL_MINUTES)
            )
        ),
        config_entry=entry,
    )
    await coordinator.async_config_entry_first_refresh()

    presenter = LifecyclePresenter()
    runtime = LiveEventRuntime(hass, entry, coordinator, presenter)
    try:
        runtime.async_start()
    except LifecycleConfigError as err:
        await runtime.async_close()
        raise ConfigEntryError(str(err)) from err

    hass.data.setdefault(DOMAIN, {})[entry.entry_id] = {
        "coordinator": coordinator,
        "presenter": presenter,
        "runtime": runtime,
    }

    await hass.config_entries.async_forward_entry_setups(entry, PLATFORMS)
    return True


async def async_unload_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    unload_ok = await hass.config_entries.async_unload_platforms(entry, PLATFORMS)
    data = hass.data.get(DOMAIN, {}).pop(entry.entry_id, None)
    if isinstance(data, dict):
        runtime = data.get("runtime")
        if runtime is not None:
            try:
                await runtime.async_close()
            except Exception as err:  # noqa: BLE001
                _LOGGER.debug("Error during live event cleanup: %s", err)
    return unload_ok
