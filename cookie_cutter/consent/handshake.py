"""
Completion handshake for multi-step consent flows.

After the primary accept click some CMPs (e.g. Ketch) show a second
panel that needs a "Save"/"Confirm" click before the choice sticks.

State machine::

    CLICKED ──save visible──▶ SAVE_FOUND_IMMEDIATE ──▶ FINISHED
       │
       └──otherwise──▶ WATCHING ──save appears──▶ FINISHED
                          │
                          └──timeout──────────▶ FINISHED

Hitting the timeout without ever seeing a save control means the
flow was single-step and is already complete.
"""

from __future__ import annotations

import asyncio
from typing import Literal

from cookie_cutter import config
from cookie_cutter.browser import driver as driver_mod
from cookie_cutter.consent import collector, context, finish, text, visibility
from cookie_cutter.messaging import channel as channel_mod
from cookie_cutter.models import dom, session as session_mod
from cookie_cutter.utils import logger

log = logger.create_logger("Handshake")

HandshakeState = Literal["CLICKED", "SAVE_FOUND_IMMEDIATE", "WATCHING", "FINISHED"]


def find_save_button(doc: dom.DocumentSnapshot) -> dom.ElementNode | None:
    """First visible, in-context clickable whose label is a save/confirm phrase.

    Exclusion patterns are intentionally not applied here.
    """
    for el in doc.iter_elements():
        if not collector.is_clickable(el) or not visibility.is_visible(el):
            continue
        if text.is_save_label(el) and context.has_context(el, doc):
            return el
    return None


class CompletionHandshake:
    """One run of the accept → (save) → finish protocol."""

    def __init__(
        self,
        session: session_mod.SessionState,
        driver: driver_mod.DomDriver,
        channel: channel_mod.Channel,
        timings: config.Timings = config.DEFAULT_TIMINGS,
    ) -> None:
        self.state: HandshakeState = "CLICKED"
        self._session = session
        self._driver = driver
        self._channel = channel
        self._timings = timings
        self._subscription: driver_mod.MutationSubscription | None = None
        self._timer: asyncio.TimerHandle | None = None
        self._searching = False
        self._pending = False
        self._done = asyncio.Event()

    async def start(self) -> None:
        """Enter ``CLICKED``: search once, then watch if nothing was found.

        Returns once the handshake has either finished or is
        watching for mutations; :meth:`wait` blocks until ``FINISHED``.
        """
        self._session.handshake_active = True
        button = find_save_button(await self._driver.snapshot())
        if button is not None:
            self.state = "SAVE_FOUND_IMMEDIATE"
            log.info("Save button present right after accept")
            await self._driver.click(button.node_id)
            await self._complete()
            return

        self.state = "WATCHING"
        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(self._timings.handshake_timeout, self._on_timeout)
        self._session.handshake_timer = self._timer
        self._subscription = await self._driver.observe_mutations(self._on_mutation, attributes=True)
        self._session.handshake_subscription = self._subscription
        if self.state != "WATCHING" or self._session.closed:
            # Timed out or torn down while the observer was being installed.
            await self._subscription.disconnect()

    async def wait(self) -> None:
        """Block until the handshake reaches ``FINISHED``."""
        await self._done.wait()

    # ------------------------------------------------------------------
    # WATCHING
    # ------------------------------------------------------------------

    def _on_mutation(self) -> None:
        if self.state != "WATCHING" or self._session.closed:
            return
        if self._subscription is not None and not self._subscription.active:
            return
        if self._searching:
            self._pending = True
            return
        self._searching = True
        self._session.spawn(self._search())

    async def _search(self) -> None:
        try:
            while True:
                self._pending = False
                button = find_save_button(await self._driver.snapshot())
                if self.state != "WATCHING" or self._session.closed:
                    return
                if button is not None:
                    self.state = "FINISHED"
                    self._cancel_timer()
                    # Disconnect first so the click's own DOM churn is not observed.
                    await self._disconnect()
                    log.info("Save button appeared, confirming")
                    await self._driver.click(button.node_id)
                    await self._complete()
                    return
                if not self._pending:
                    return
        finally:
            self._searching = False

    def _on_timeout(self) -> None:
        self._timer = None
        self._session.handshake_timer = None
        if self.state != "WATCHING" or self._session.closed:
            return
        self.state = "FINISHED"
        log.debug("No save button within timeout, treating flow as single-step")
        self._session.spawn(self._timeout_complete())

    async def _timeout_complete(self) -> None:
        await self._disconnect()
        await self._complete()

    # ------------------------------------------------------------------
    # FINISHED
    # ------------------------------------------------------------------

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
            self._session.handshake_timer = None

    async def _disconnect(self) -> None:
        if self._subscription is not None:
            await self._subscription.disconnect()

    async def _complete(self) -> None:
        self.state = "FINISHED"
        try:
            await finish.finish(self._session, self._driver, self._channel)
        finally:
            self._session.handshake_active = False
            self._done.set()
