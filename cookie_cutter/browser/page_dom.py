"""
Playwright implementation of :class:`~cookie_cutter.browser.driver.DomDriver`.

Each operation is one ``page.evaluate`` of a snippet kept under
``scripts/``.  The snapshot stores the live elements in a page-global
array so later actions can address them by ``node_id``; ids are only
valid until the next snapshot.
"""

from __future__ import annotations

import asyncio
import pathlib
from collections.abc import Sequence

import pydantic
from playwright import async_api

from cookie_cutter.browser import bridge as bridge_mod
from cookie_cutter.browser import driver
from cookie_cutter.consent import patterns
from cookie_cutter.models import dom
from cookie_cutter.utils import errors, logger

log = logger.create_logger("PageDom")

# Pre-load JavaScript snippets evaluated in the browser.
_SCRIPTS_DIR = pathlib.Path(__file__).parent / "scripts"
_SNAPSHOT_JS = (_SCRIPTS_DIR / "snapshot.js").read_text()
_CLICK_JS = (_SCRIPTS_DIR / "click.js").read_text()
_FORCE_VISIBLE_JS = (_SCRIPTS_DIR / "force_visible.js").read_text()
_REMOVE_NODES_JS = (_SCRIPTS_DIR / "remove_nodes.js").read_text()
_RESTORE_SCROLL_JS = (_SCRIPTS_DIR / "restore_scroll.js").read_text()
_OBSERVE_JS = (_SCRIPTS_DIR / "observe.js").read_text()
_DISCONNECT_JS = (_SCRIPTS_DIR / "disconnect.js").read_text()
_WAIT_EVENT_JS = (_SCRIPTS_DIR / "wait_event.js").read_text()

_NODE_STORE = "__cookieCutterNodes"


class PageDom:
    """DOM access for the document currently loaded in *page*."""

    def __init__(self, page: async_api.Page, bridge: bridge_mod.PageBridge) -> None:
        self._page = page
        self._bridge = bridge

    async def snapshot(self) -> dom.DocumentSnapshot:
        try:
            raw = await self._page.evaluate(_SNAPSHOT_JS, _NODE_STORE)
            return dom.DocumentSnapshot.model_validate(raw)
        except (async_api.Error, pydantic.ValidationError) as exc:
            log.debug("Snapshot failed", {"error": errors.get_error_message(exc)})
            return dom.DocumentSnapshot.empty()

    async def click(self, node_id: int) -> bool:
        try:
            clicked = bool(await self._page.evaluate(_CLICK_JS, [_NODE_STORE, node_id]))
        except async_api.Error as exc:
            log.debug("Click failed", {"nodeId": node_id, "error": errors.get_error_message(exc)})
            return False
        if not clicked:
            log.debug("Click target detached", {"nodeId": node_id})
        return clicked

    async def force_visible(self, node_id: int, ancestor_ids: Sequence[int]) -> None:
        try:
            await self._page.evaluate(
                _FORCE_VISIBLE_JS,
                [
                    _NODE_STORE,
                    node_id,
                    list(ancestor_ids),
                    patterns.FORCE_VISIBLE_STYLE,
                    patterns.FORCE_VISIBLE_ANCESTOR_STYLE,
                ],
            )
        except async_api.Error as exc:
            log.debug("Style override failed", {"nodeId": node_id, "error": errors.get_error_message(exc)})

    async def remove_nodes(self, node_ids: Sequence[int]) -> int:
        try:
            return int(await self._page.evaluate(_REMOVE_NODES_JS, [_NODE_STORE, list(node_ids)]))
        except async_api.Error as exc:
            log.debug("Node removal failed", {"error": errors.get_error_message(exc)})
            return 0

    async def restore_scroll(self, lock_classes: Sequence[str]) -> None:
        try:
            await self._page.evaluate(_RESTORE_SCROLL_JS, list(lock_classes))
        except async_api.Error as exc:
            log.debug("Scroll restore failed", {"error": errors.get_error_message(exc)})

    async def observe_mutations(
        self,
        callback: driver.MutationCallback,
        *,
        attributes: bool,
    ) -> driver.MutationSubscription:
        key = self._bridge.register(callback)

        async def stop() -> None:
            self._bridge.unregister(key)
            await self._page.evaluate(_DISCONNECT_JS, key)

        subscription = driver.MutationSubscription(stop)
        try:
            await self._page.evaluate(_OBSERVE_JS, [bridge_mod.BINDING_NAME, key, attributes])
        except async_api.Error as exc:
            log.debug("Observer install failed", {"error": errors.get_error_message(exc)})
            self._bridge.unregister(key)
            subscription.active = False
        return subscription

    async def listen(self, event: driver.PageEvent) -> asyncio.Future[None]:
        future: asyncio.Future[None] = asyncio.get_running_loop().create_future()

        def fire() -> None:
            if not future.done():
                future.set_result(None)

        key = self._bridge.register(fire)
        future.add_done_callback(lambda _: self._bridge.unregister(key))
        try:
            await self._page.evaluate(_WAIT_EVENT_JS, [bridge_mod.BINDING_NAME, key, event])
        except async_api.Error as exc:
            # The document is going away; the event will never arrive
            # and the owner cancels this wait on teardown.
            log.debug("Event listener install failed", {"event": event, "error": errors.get_error_message(exc)})
        except asyncio.CancelledError:
            future.cancel()
            raise
        return future

    async def wait_for(self, event: driver.PageEvent) -> None:
        await (await self.listen(event))
