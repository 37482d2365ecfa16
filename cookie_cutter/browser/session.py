"""
Browser session management.

A :class:`BrowserSession` owns one Playwright browser, context and
page, with :class:`~cookie_cutter.browser.auto_accept.ConsentAutoAccept`
attached so every document loaded into the page has its cookie
banner handled.
"""

from __future__ import annotations

from typing import Literal

from playwright import async_api

from cookie_cutter import config
from cookie_cutter.browser import auto_accept
from cookie_cutter.messaging import channel as channel_mod
from cookie_cutter.models import browser
from cookie_cutter.utils import errors, logger, url as url_mod

log = logger.create_logger("BrowserSession")


class BrowserSession:
    """
    Manages an isolated browser session with consent auto-acceptance.
    """

    def __init__(
        self,
        settings: config.Settings | None = None,
        channel: channel_mod.Channel | None = None,
        timings: config.Timings = config.DEFAULT_TIMINGS,
    ) -> None:
        """Initialise a new browser session; nothing is launched yet."""
        self._settings = settings or config.load_settings()
        self._channel = channel or channel_mod.create_channel(
            self._settings.controller_url,
            self._settings.controller_timeout_ms,
        )
        self._auto_accept = auto_accept.ConsentAutoAccept(self._channel, timings)
        self._playwright: async_api.Playwright | None = None
        self._browser: async_api.Browser | None = None
        self._context: async_api.BrowserContext | None = None
        self._page: async_api.Page | None = None

    async def __aenter__(self) -> BrowserSession:
        await self.launch_browser()
        return self

    async def __aexit__(self, *_exc: object) -> None:
        await self.close()

    # ==========================================================================
    # State Getters
    # ==========================================================================

    def get_page(self) -> async_api.Page | None:
        """Return the active Playwright page, if any."""
        return self._page

    def get_channel(self) -> channel_mod.Channel:
        """Return the controller channel used by this session."""
        return self._channel

    # ==========================================================================
    # Browser Lifecycle
    # ==========================================================================

    async def launch_browser(self) -> None:
        """Launch Chromium and open a page with auto-acceptance attached."""
        await self.close()

        log.info("Launching browser", {"headless": self._settings.headless})
        pw = await async_api.async_playwright().start()
        self._playwright = pw
        self._browser = await pw.chromium.launch(headless=self._settings.headless)
        self._context = await self._browser.new_context(
            viewport={"width": 1280, "height": 800},
            locale="en-GB",
        )
        self._page = await self._context.new_page()
        await self._auto_accept.attach(self._page)

    # ==========================================================================
    # Navigation
    # ==========================================================================

    async def navigate_to(
        self,
        url: str,
        wait_until: Literal["commit", "domcontentloaded", "load", "networkidle"] = "load",
        timeout: int = 60000,
    ) -> browser.NavigationResult:
        """Navigate the page to *url*; consent handling starts on its own."""
        if not self._page:
            raise RuntimeError("No browser session active")

        logger.start_log_file(url_mod.extract_domain(url))
        log.debug("Navigating", {"url": url, "waitUntil": wait_until, "timeout": timeout})
        try:
            response = await self._page.goto(url, wait_until=wait_until, timeout=timeout)
        except Exception as error:
            log.warn("Navigation error", {"url": url, "error": errors.get_error_message(error)})
            return browser.NavigationResult(success=False, error_message=errors.get_error_message(error))

        status_code = response.status if response else None
        if status_code and status_code >= 400:
            return browser.NavigationResult(
                success=False,
                status_code=status_code,
                final_url=self._page.url,
                error_message=f"HTTP {status_code}",
            )
        return browser.NavigationResult(success=True, status_code=status_code, final_url=self._page.url)

    # ==========================================================================
    # Cleanup
    # ==========================================================================

    async def close(self) -> None:
        """Close the browser and clean up all resources.  Idempotent."""
        if self._page:
            await self._auto_accept.detach()
            self._page = None

        if self._context:
            try:
                await self._context.close()
            except Exception as exc:
                log.debug("Context close error (non-fatal)", {"error": errors.get_error_message(exc)})
            self._context = None

        if self._browser:
            try:
                await self._browser.close()
            except Exception as exc:
                log.debug("Browser close error (non-fatal)", {"error": errors.get_error_message(exc)})
            self._browser = None

        if self._playwright:
            try:
                await self._playwright.stop()
            except Exception as exc:
                log.debug("Playwright stop error (non-fatal)", {"error": errors.get_error_message(exc)})
            self._playwright = None

        logger.end_log_file()
