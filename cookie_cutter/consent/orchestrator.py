"""
Lifecycle orchestration for one page load.

Sequence:

1. Wait for ``DOMContentLoaded`` if the document is still loading.
2. Defer until the tab is visible.
3. Ask the controller whether the feature is enabled (fail-open).
4. Run one detection pass.
5. Start the retry scheduler (once ``body`` exists).

Independently, the page's ``load`` event triggers exactly one extra
pass, gated on the enablement decision.
"""

from __future__ import annotations

import asyncio

from cookie_cutter import config
from cookie_cutter.browser import driver as driver_mod
from cookie_cutter.consent import detection, retry
from cookie_cutter.messaging import channel as channel_mod
from cookie_cutter.models import session as session_mod
from cookie_cutter.utils import errors, logger

log = logger.create_logger("Orchestrator")


class Orchestrator:
    """Owns the :class:`SessionState` of one document."""

    def __init__(
        self,
        driver: driver_mod.DomDriver,
        channel: channel_mod.Channel,
        timings: config.Timings = config.DEFAULT_TIMINGS,
    ) -> None:
        self.session = session_mod.SessionState()
        self._driver = driver
        self._channel = channel
        self._timings = timings
        self.retry = retry.RetryScheduler(self.session, driver, channel, timings)
        self._gate: asyncio.Future[bool] | None = None

    async def run(self) -> None:
        """Run the startup sequence; returns once the retry loop is armed."""
        loop = asyncio.get_running_loop()
        self._gate = loop.create_future()
        # Armed before anything else so an early ``load`` is not missed.
        loaded = await self._driver.listen("load")
        task = self.session.spawn(self._load_pass(loaded))
        if task is None:
            loaded.cancel()
        else:
            task.add_done_callback(lambda _: loaded.cancel())
        log.start_timer("startup")
        try:
            await self._run()
            log.end_timer("startup", "Startup sequence finished")
        finally:
            if not self._gate.done():
                self._gate.set_result(False)

    async def _run(self) -> None:
        assert self._gate is not None
        doc = await self._driver.snapshot()
        if doc.ready_state == "loading":
            await self._driver.wait_for("DOMContentLoaded")
            doc = await self._driver.snapshot()

        if doc.visibility_state == "hidden":
            log.debug("Tab hidden, deferring until visible")
            await self._driver.wait_for("visible")

        enabled = await self._query_enabled()
        self.session.enabled = enabled
        self._gate.set_result(enabled)
        if not enabled:
            log.info("Disabled by controller")
            return

        await detection.run_detection_pass(self.session, self._driver, self._channel, self._timings)

        if doc.body is None:
            await self._driver.wait_for("DOMContentLoaded")
            await detection.run_detection_pass(self.session, self._driver, self._channel, self._timings)
        await self.retry.start()

    async def _query_enabled(self) -> bool:
        try:
            async with asyncio.timeout(self._timings.status_timeout):
                return await self._channel.query_enabled()
        except TimeoutError:
            log.debug("No status reply, assuming enabled")
        except Exception as exc:
            log.debug("Status query failed, assuming enabled", {"error": errors.get_error_message(exc)})
        return True

    async def _load_pass(self, loaded: asyncio.Future[None]) -> None:
        await loaded
        assert self._gate is not None
        if not await self._gate:
            return
        log.debug("Page load complete, re-checking")
        await detection.run_detection_pass(self.session, self._driver, self._channel, self._timings)

    async def close(self) -> None:
        """Tear down timers, tasks and every observer of this page load."""
        for subscription in self.session.cancel_all():
            await subscription.disconnect()
