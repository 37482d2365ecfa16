"""
Runtime configuration for the consent auto-accepter.

Centralises environment variable names and defaults for the
controller channel and browser launch.  Uses
``pydantic_settings.BaseSettings`` for environment binding and
type coercion.

Protocol timings are deliberately *not* environment driven: they
are part of the handshake contract and are only overridden by
tests.
"""

from __future__ import annotations

import dataclasses

import dotenv
import pydantic
import pydantic_settings

from cookie_cutter.utils import logger

log = logger.create_logger("Config")


@dataclasses.dataclass(frozen=True)
class Timings:
    """Timer durations (seconds) used by the completion protocol.

    Attributes:
        handshake_timeout: How long to watch for a follow-up
            save/confirm control after the primary click.
        retry_debounce: Quiet period after the last mutation
            before a detection pass is re-run.
        retry_deadline: Hard ceiling on the lifetime of the
            mutation-driven retry loop.
        status_timeout: How long to wait for the controller's
            reply to the enablement query before assuming enabled.
    """

    handshake_timeout: float = 3.0
    retry_debounce: float = 0.2
    retry_deadline: float = 15.0
    status_timeout: float = 5.0


DEFAULT_TIMINGS = Timings()


class Settings(pydantic_settings.BaseSettings):
    """Environment-driven settings.

    Attributes:
        controller_url: Base URL of the controlling process that
            answers status queries and receives acceptance events.
            When unset an in-process channel is used.
        controller_timeout_ms: Per-request timeout for the
            controller channel.
        headless: Launch the browser headless.
    """

    controller_url: str | None = pydantic.Field(
        default=None, validation_alias="COOKIE_CUTTER_CONTROLLER_URL"
    )
    controller_timeout_ms: int = pydantic.Field(
        default=2000, validation_alias="COOKIE_CUTTER_CONTROLLER_TIMEOUT_MS"
    )
    headless: bool = pydantic.Field(
        default=True, validation_alias="COOKIE_CUTTER_HEADLESS"
    )


def load_settings() -> Settings:
    """Load ``.env`` (if present) and build :class:`Settings`."""
    dotenv.load_dotenv()
    settings = Settings()
    log.debug(
        "Settings loaded",
        {
            "controllerUrl": settings.controller_url,
            "headless": settings.headless,
        },
    )
    return settings
