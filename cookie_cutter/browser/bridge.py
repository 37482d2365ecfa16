"""
Page → Python notification bridge.

One binding is exposed per Playwright page.  In-page observers and
event listeners call it with a key; the bridge looks the key up and
invokes the registered Python callback on the event loop.
"""

from __future__ import annotations

import itertools
from collections.abc import Callable
from typing import Any

from playwright import async_api

from cookie_cutter.utils import logger

log = logger.create_logger("Bridge")

BINDING_NAME = "__cookieCutterNotify"


class PageBridge:
    """Routes in-page notifications to Python callbacks by key."""

    def __init__(self, page: async_api.Page) -> None:
        self._page = page
        self._callbacks: dict[str, Callable[[], None]] = {}
        self._keys = itertools.count(1)
        self._installed = False

    async def install(self) -> None:
        """Expose the binding.  Bindings survive navigations."""
        if self._installed:
            return
        await self._page.expose_binding(BINDING_NAME, self._dispatch)
        self._installed = True

    def register(self, callback: Callable[[], None]) -> str:
        """Register *callback* and return the key the page must call with."""
        key = f"cc{next(self._keys)}"
        self._callbacks[key] = callback
        return key

    def unregister(self, key: str) -> None:
        self._callbacks.pop(key, None)

    def _dispatch(self, source: dict[str, Any], key: str) -> None:
        if source.get("frame") is not self._page.main_frame:
            return
        callback = self._callbacks.get(key)
        if callback is None:
            return
        try:
            callback()
        except Exception as exc:
            log.warn("Notification handler failed", {"key": key, "error": str(exc)})
