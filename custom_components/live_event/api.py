import asyncio
import logging
from typing import Any, Dict, Optional

import async_timeout
from aiohttp import ClientError, ClientResponse, ClientSession

from homeassistant.exceptions import HomeAssistantError

from .const import REQUEST_RETRIES, REQUEST_TIMEOUT, STREAM_ENDPOINT

_LOGGER = logging.getLogger(__name__)

_RETRY_BACKOFF = 1.0


class LiveEventApiError(HomeAssistantError):
    """The event backend rejected the request or could not be reached."""


async def _error_message(response: ClientResponse) -> str:
    try:
        payload = await response.json(content_type=None)
    except (ClientError, ValueError):
        return f"HTTP {response.status}"
    if isinstance(payload, dict):
        message = payload.get("error") or payload.get("message")
        if message:
            return str(message)
    return f"HTTP {response.status}"


class LiveEventApiClient:
    """Client for the event stream endpoint."""

    def __init__(
        self,
        session: ClientSession,
        base_url: str,
        *,
        access_token: Optional[str] = None,
    ) -> None:
        self._session = session
        self._base_url = base_url.rstrip("/")
        self._access_token = access_token

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self._access_token:
            headers["Authorization"] = f"Bearer {self._access_token}"
        return headers

    async def _request(self, url: str, body: Dict[str, Any]) -> Dict[str, Any]:
        """POST ``body`` with retries on rate limiting and transient errors."""
        delay = _RETRY_BACKOFF
        for attempt in range(REQUEST_RETRIES):
            last = attempt >= REQUEST_RETRIES - 1
            try:
                async with async_timeout.timeout(REQUEST_TIMEOUT):
                    response: ClientResponse = await self._session.post(
                        url, json=body, headers=self._headers()
                    )
                    if response.status == 429 and not last:
                        await asyncio.sleep(delay)
                        delay *= 2
                        continue
                    if response.status >= 400:
                        message = await _error_message(response)
                        if response.status >= 500 and not last:
                            _LOGGER.debug(
                                "Event API returned %s, retrying", response.status
                            )
                            await asyncio.sleep(delay)
                            delay *= 2
                            continue
                        raise LiveEventApiError(message)
                    data = await response.json(content_type=None)
            except (ClientError, TimeoutError) as err:
                if last:
                    _LOGGER.error("Event API request failed: %s", err)
                    raise LiveEventApiError(str(err) or "request failed") from err
                await asyncio.sleep(delay)
                delay *= 2
                continue
            if not isinstance(data, dict):
                raise LiveEventApiError("Unexpected event API response")
            return data
        raise LiveEventApiError("Event API request failed")

    async def async_fetch_stream(
        self,
        event_code: str,
        *,
        email: Optional[str] = None,
        token: Optional[str] = None,
        is_host: bool = False,
    ) -> Dict[str, Any]:
        """Return the raw stream response for ``event_code``."""
        try:
            event_id: Any = int(event_code)
        except (TypeError, ValueError):
            event_id = event_code
        body = {
            "event_id": event_id,
            "email": email,
            "token": token,
            "isHost": bool(is_host),
        }
        return await self._request(f"{self._base_url}{STREAM_ENDPOINT}", body)
