"""Automatic acceptance of cookie/privacy consent banners in Playwright pages."""

from cookie_cutter.browser.auto_accept import ConsentAutoAccept as ConsentAutoAccept
from cookie_cutter.browser.session import BrowserSession as BrowserSession
from cookie_cutter.config import Settings as Settings, Timings as Timings
from cookie_cutter.messaging.channel import (
    HttpChannel as HttpChannel,
    LocalChannel as LocalChannel,
)
