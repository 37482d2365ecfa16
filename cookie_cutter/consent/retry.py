"""Mutation-driven re-detection for banners that render late.

Every mutation burst under ``body`` resets a short debounce timer;
when it fires, the detection pass runs again.  The loop stops for
good once consent is accepted or the deadline has passed.
"""

from __future__ import annotations

import asyncio

from cookie_cutter import config
from cookie_cutter.browser import driver as driver_mod
from cookie_cutter.consent import detection
from cookie_cutter.messaging import channel as channel_mod
from cookie_cutter.models import session as session_mod
from cookie_cutter.utils import logger

log = logger.create_logger("Retry")


class RetryScheduler:
    """Debounced, deadline-bounded re-run of the detection pass."""

    def __init__(
        self,
        session: session_mod.SessionState,
        driver: driver_mod.DomDriver,
        channel: channel_mod.Channel,
        timings: config.Timings = config.DEFAULT_TIMINGS,
    ) -> None:
        self._session = session
        self._driver = driver
        self._channel = channel
        self._timings = timings
        self._deadline = 0.0
        self.passes = 0
        self.stopped = False

    async def start(self) -> None:
        """Subscribe to ``childList`` mutations.  Idempotent per session."""
        if self._session.retry_subscription is not None or self._session.closed:
            return
        loop = asyncio.get_running_loop()
        self._deadline = loop.time() + self._timings.retry_deadline
        subscription = await self._driver.observe_mutations(self._on_mutation, attributes=False)
        self._session.retry_subscription = subscription
        if self._session.closed:
            # Torn down while the observer was being installed.
            await subscription.disconnect()
            return
        log.debug("Watching for late banners", {"deadlineS": self._timings.retry_deadline})

    def _on_mutation(self) -> None:
        if self.stopped or self._session.closed:
            return
        session = self._session
        loop = asyncio.get_running_loop()
        if session.accepted or loop.time() > self._deadline:
            self._stop("accepted" if session.accepted else "deadline")
            return
        if session.debounce_timer is not None:
            session.debounce_timer.cancel()
        session.debounce_timer = loop.call_later(self._timings.retry_debounce, self._on_quiet)

    def _on_quiet(self) -> None:
        self._session.debounce_timer = None
        if self.stopped or self._session.accepted or self._session.closed:
            return
        self.passes += 1
        self._session.spawn(detection.run_detection_pass(self._session, self._driver, self._channel, self._timings))

    def _stop(self, reason: str) -> None:
        self.stopped = True
        session = self._session
        if session.debounce_timer is not None:
            session.debounce_timer.cancel()
            session.debounce_timer = None
        subscription = session.retry_subscription
        if subscription is not None:
            session.spawn(subscription.disconnect())
        log.debug("Retry loop stopped", {"reason": reason, "passes": self.passes})
