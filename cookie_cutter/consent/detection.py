"""One detection pass: find, click and confirm an accept control."""

from __future__ import annotations

from typing import Literal

from cookie_cutter import config
from cookie_cutter.browser import driver as driver_mod
from cookie_cutter.consent import collector, fallbacks, finish, handshake, text
from cookie_cutter.messaging import channel as channel_mod
from cookie_cutter.models import session as session_mod
from cookie_cutter.utils import logger

log = logger.create_logger("Detection")

PassOutcome = Literal["skipped", "clicked", "hidden-clicked", "iframe-removed", "none"]


async def run_detection_pass(
    session: session_mod.SessionState,
    driver: driver_mod.DomDriver,
    channel: channel_mod.Channel,
    timings: config.Timings = config.DEFAULT_TIMINGS,
) -> PassOutcome:
    """Run the full pipeline once against the current document.

    Order of attempts:

    1. Best-ranked visible candidate → click → completion handshake.
    2. Hidden accept button → reveal, click → finish.
    3. Known cross-origin consent iframe → remove → finish.

    Passes are serialised per session; a pass that starts after
    acceptance, while disabled, or during a handshake does nothing.
    """
    async with session.pass_lock:
        if session.accepted or session.closed or not session.enabled or session.handshake_active:
            return "skipped"

        doc = await driver.snapshot()
        candidates = collector.collect(doc)
        if candidates:
            best = candidates[0]
            log.info(
                "Clicking accept candidate",
                {
                    "tag": best.element.tag,
                    "label": text.label_candidates(best.element)[:1],
                    "score": best.score,
                    "candidates": len(candidates),
                },
            )
            await driver.click(best.element.node_id)
            await handshake.CompletionHandshake(session, driver, channel, timings).start()
            return "clicked"

        if await fallbacks.try_hidden_buttons(driver, doc):
            await finish.finish(session, driver, channel)
            return "hidden-clicked"

        if fallbacks.has_consent_iframe(doc):
            log.info("Cross-origin consent iframe found, removing")
            await fallbacks.remove_consent_containers(driver, doc)
            await finish.finish(session, driver, channel)
            return "iframe-removed"

        return "none"
