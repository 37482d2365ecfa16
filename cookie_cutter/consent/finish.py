"""Completion: restore the page and report the acceptance once."""

from __future__ import annotations

from cookie_cutter.browser import driver as driver_mod
from cookie_cutter.consent import fallbacks, patterns
from cookie_cutter.messaging import channel as channel_mod
from cookie_cutter.models import consent, session as session_mod
from cookie_cutter.utils import errors, logger

log = logger.create_logger("Finish")


async def finish(
    session: session_mod.SessionState,
    driver: driver_mod.DomDriver,
    channel: channel_mod.Channel,
) -> bool:
    """Mark the session accepted and clean up after the banner.

    Idempotent: only the first call acts, whichever trigger source
    reaches it, and nothing happens once the session is closed.
    ``accepted`` is set before the first await so that concurrent
    callers see it.

    Returns:
        ``True`` if this call performed the completion.
    """
    if session.accepted or session.closed:
        return False
    session.accepted = True
    session.handshake_active = False
    log.success("Consent accepted")

    try:
        await driver.restore_scroll(patterns.SCROLL_LOCK_CLASSES)
    except Exception as exc:
        log.debug("Scroll restore failed", {"error": errors.get_error_message(exc)})

    # Residual overlay markup can linger even after a successful click.
    try:
        await fallbacks.remove_consent_containers(driver, await driver.snapshot())
    except Exception as exc:
        log.debug("Container removal failed", {"error": errors.get_error_message(exc)})

    try:
        await channel.notify(consent.COOKIE_ACCEPTED)
    except Exception as exc:
        log.debug("Acceptance notification failed", {"error": errors.get_error_message(exc)})
    return True
