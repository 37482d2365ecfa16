"""
Per-page attachment of the consent orchestrator.

Mirrors a content script: every main-frame document gets a fresh
:class:`~cookie_cutter.consent.orchestrator.Orchestrator` with its
own session state, started on ``domcontentloaded``.  The previous
document's orchestrator is torn down when the next one starts.
"""

from __future__ import annotations

import asyncio
from collections.abc import Coroutine
from typing import Any

from playwright import async_api

from cookie_cutter import config
from cookie_cutter.browser import bridge, page_dom
from cookie_cutter.consent import orchestrator as orchestrator_mod
from cookie_cutter.messaging import channel as channel_mod
from cookie_cutter.utils import errors, logger

log = logger.create_logger("AutoAccept")


class ConsentAutoAccept:
    """Accept cookie banners on every document loaded into a page."""

    def __init__(
        self,
        channel: channel_mod.Channel,
        timings: config.Timings = config.DEFAULT_TIMINGS,
    ) -> None:
        self._channel = channel
        self._timings = timings
        self._page: async_api.Page | None = None
        self._bridge: bridge.PageBridge | None = None
        self._current: orchestrator_mod.Orchestrator | None = None
        self._run_task: asyncio.Task[None] | None = None
        self._tasks: set[asyncio.Task[Any]] = set()

    @property
    def current(self) -> orchestrator_mod.Orchestrator | None:
        """Orchestrator of the document currently loaded, if any."""
        return self._current

    async def attach(self, page: async_api.Page) -> None:
        """Install on *page*.  A document that is already loaded is handled immediately."""
        self._page = page
        self._bridge = bridge.PageBridge(page)
        await self._bridge.install()
        page.on("domcontentloaded", self._on_document)
        page.on("close", self._on_close)
        if page.url not in ("", "about:blank"):
            self._start_document()

    async def detach(self) -> None:
        """Stop listening and tear down the current orchestrator."""
        if self._page is not None:
            self._page.remove_listener("domcontentloaded", self._on_document)
            self._page.remove_listener("close", self._on_close)
        await self._close_current()
        for task in list(self._tasks):
            task.cancel()

    def _on_document(self, _page: async_api.Page) -> None:
        self._start_document()

    def _on_close(self, _page: async_api.Page) -> None:
        self._spawn(self._close_current())

    def _start_document(self) -> None:
        assert self._page is not None and self._bridge is not None
        self._spawn(self._close_current())

        orchestrator = orchestrator_mod.Orchestrator(
            page_dom.PageDom(self._page, self._bridge),
            self._channel,
            self._timings,
        )
        self._current = orchestrator
        log.debug("New document", {"url": self._page.url[:100]})
        self._run_task = self._spawn(self._run(orchestrator))

    async def _run(self, orchestrator: orchestrator_mod.Orchestrator) -> None:
        try:
            await orchestrator.run()
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            log.warn("Consent handling aborted", {"error": errors.get_error_message(exc)})

    def _close_current(self) -> Coroutine[Any, Any, None]:
        """Detach the current document synchronously; the returned coroutine finishes teardown."""
        current, self._current = self._current, None
        run_task, self._run_task = self._run_task, None
        if run_task is not None and not run_task.done():
            run_task.cancel()
        if current is not None:
            # Stale timers must not fire against the next document.
            current.session.cancel_all()

        async def close() -> None:
            if current is not None:
                await current.close()

        return close()

    def _spawn(self, coro: Any) -> asyncio.Task[Any]:
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task
