"""The narrow DOM-access surface the consent core depends on.

The core never talks to Playwright directly.  It reads the document
through :meth:`DomDriver.snapshot` and acts on it through node ids
taken from that snapshot.  :class:`~cookie_cutter.browser.page_dom.PageDom`
implements this against a live page; tests use an in-memory fake.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Sequence
from typing import Literal, Protocol

from cookie_cutter.models import dom
from cookie_cutter.utils import errors, logger

log = logger.create_logger("Driver")

PageEvent = Literal["DOMContentLoaded", "load", "visible"]
MutationCallback = Callable[[], None]


class MutationSubscription:
    """Cancellable handle for one in-page mutation observer.

    ``active`` flips to ``False`` synchronously in :meth:`disconnect`,
    before the page round-trip, so callers can check it to drop
    notifications that were already queued.
    """

    def __init__(self, stop: Callable[[], Awaitable[None]]) -> None:
        self.active = True
        self._stop = stop

    async def disconnect(self) -> None:
        """Stop the observer.  Safe to call more than once."""
        if not self.active:
            return
        self.active = False
        try:
            await self._stop()
        except Exception as exc:
            log.debug("Observer disconnect failed", {"error": errors.get_error_message(exc)})


class DomDriver(Protocol):
    """Operations on one document."""

    async def snapshot(self) -> dom.DocumentSnapshot:
        """Serialise the current document, open shadow roots included."""
        ...

    async def click(self, node_id: int) -> bool:
        """Dispatch a synthetic ``click()`` on a node from the last snapshot."""
        ...

    async def force_visible(self, node_id: int, ancestor_ids: Sequence[int]) -> None:
        """Override inline styles so the node and given ancestors render."""
        ...

    async def remove_nodes(self, node_ids: Sequence[int]) -> int:
        """Detach nodes from the document; returns how many were removed."""
        ...

    async def restore_scroll(self, lock_classes: Sequence[str]) -> None:
        """Clear scroll-lock inline styles and classes on ``html``/``body``."""
        ...

    async def observe_mutations(self, callback: MutationCallback, *, attributes: bool) -> MutationSubscription:
        """Observe ``childList`` (and optionally attribute) changes under ``body``."""
        ...

    async def listen(self, event: PageEvent) -> asyncio.Future[None]:
        """Install a one-shot listener for a document lifecycle event.

        Returns once the listener is in place; the future resolves when
        the event occurs.  Cancelling the future removes the listener.
        """
        ...

    async def wait_for(self, event: PageEvent) -> None:
        """Resolve on the next occurrence of a document lifecycle event."""
        ...
