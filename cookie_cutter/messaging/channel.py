"""
Messaging boundary to the controlling process.

The core only ever calls :meth:`Channel.query_enabled` (once, at
startup) and :meth:`Channel.notify` (once, on acceptance).  Both are
best-effort: a failed status query means *enabled*, a failed
notification is dropped.
"""

from __future__ import annotations

from typing import Protocol

import aiohttp
import pydantic

from cookie_cutter.models import consent
from cookie_cutter.utils import errors, logger

log = logger.create_logger("Channel")


class Channel(Protocol):
    """Request/response and fire-and-forget messages to the controller."""

    async def notify(self, event: consent.ConsentMessage) -> None: ...

    async def query_enabled(self) -> bool: ...


class LocalChannel:
    """In-process controller used when no controller URL is configured.

    Holds the enable flag and records every event it receives.
    """

    def __init__(self, enabled: bool = True) -> None:
        self.enabled = enabled
        self.events: list[consent.ConsentMessage] = []

    async def notify(self, event: consent.ConsentMessage) -> None:
        self.events.append(event)
        log.debug("Event recorded", {"type": event.type})

    async def query_enabled(self) -> bool:
        return self.enabled


class HttpChannel:
    """Controller reached over HTTP.

    Messages are POSTed as JSON to ``{base_url}/messages``.  A
    ``GET_STATUS`` reply must look like ``{"enabled": bool}``.
    """

    def __init__(self, base_url: str, timeout_ms: int = 2000) -> None:
        self._url = base_url.rstrip("/") + "/messages"
        self._timeout = aiohttp.ClientTimeout(total=timeout_ms / 1000)

    async def _post(self, message: consent.ConsentMessage) -> tuple[int, bytes]:
        async with aiohttp.ClientSession(timeout=self._timeout) as http_session:
            async with http_session.post(self._url, json=message.model_dump()) as response:
                return response.status, await response.read()

    async def notify(self, event: consent.ConsentMessage) -> None:
        try:
            status, _ = await self._post(event)
            if status >= 400:
                log.debug("Controller rejected event", {"type": event.type, "status": status})
        except Exception as exc:
            log.debug("Event delivery failed", {"type": event.type, "error": errors.get_error_message(exc)})

    async def query_enabled(self) -> bool:
        try:
            status, body = await self._post(consent.GET_STATUS)
        except Exception as exc:
            log.debug("Status query failed, assuming enabled", {"error": errors.get_error_message(exc)})
            return True

        if status >= 400:
            log.debug("Status query rejected, assuming enabled", {"status": status})
            return True
        try:
            return consent.StatusResponse.model_validate_json(body).enabled
        except pydantic.ValidationError:
            log.debug("Malformed status reply, assuming enabled", {"body": body[:100].decode("utf-8", "replace")})
            return True


def create_channel(controller_url: str | None, timeout_ms: int = 2000) -> Channel:
    """Return an :class:`HttpChannel` when a URL is configured, else a :class:`LocalChannel`."""
    if controller_url:
        return HttpChannel(controller_url, timeout_ms)
    return LocalChannel()
