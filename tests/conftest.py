"""Shared fixtures for the test suite."""

from __future__ import annotations

import asyncio
import itertools
from collections.abc import Callable, Sequence

import pytest

from cookie_cutter import config
from cookie_cutter.browser import driver as driver_mod
from cookie_cutter.messaging import channel as channel_mod
from cookie_cutter.models import dom

# Short timings so protocol tests finish in well under a second.
FAST_TIMINGS = config.Timings(
    handshake_timeout=0.15,
    retry_debounce=0.02,
    retry_deadline=0.6,
    status_timeout=0.1,
)

VIEWPORT = (1280.0, 800.0)
TRANSPARENT = "rgba(0, 0, 0, 0)"


# ── DOM Builder ─────────────────────────────────────────────────


class DomBuilder:
    """Builds snapshot trees with readable defaults.

    Elements are visible, 100×30, transparent, unless overridden.
    """

    def __init__(self) -> None:
        self._ids = itertools.count()

    def el(
        self,
        tag: str,
        *children: dom.ElementNode | str,
        attrs: dict[str, str] | None = None,
        size: tuple[float, float] = (100.0, 30.0),
        display: str = "block",
        visibility: str = "visible",
        opacity: str = "1",
        background: str = TRANSPARENT,
        no_style: bool = False,
        shadow: Sequence[dom.ElementNode | str] | None = None,
    ) -> dom.ElementNode:
        style = None if no_style else dom.ComputedStyle(
            display=display,
            visibility=visibility,
            opacity=opacity,
            background_color=background,
        )
        return dom.ElementNode(
            node_id=next(self._ids),
            tag=tag,
            attributes=attrs or {},
            style=style,
            rect=dom.Rect(width=size[0], height=size[1]),
            children=[self._child(c) for c in children],
            shadow_root=dom.ShadowRootNode(children=[self._child(c) for c in shadow]) if shadow is not None else None,
        )

    @staticmethod
    def _child(child: dom.ElementNode | str) -> dom.ElementNode | dom.TextNode:
        return dom.TextNode(text=child) if isinstance(child, str) else child

    def banner(self, *controls: dom.ElementNode, text: str = "This site uses cookies to improve your experience") -> dom.ElementNode:
        """A consent panel: explanatory paragraph plus controls."""
        return self.el("div", self.el("p", text, size=(560.0, 40.0)), *controls, size=(600.0, 200.0))

    def document(
        self,
        *body_children: dom.ElementNode | str,
        visibility_state: str = "visible",
        ready_state: str = "complete",
    ) -> dom.DocumentSnapshot:
        body = self.el("body", *body_children, size=VIEWPORT)
        html = self.el("html", body, size=VIEWPORT)
        return dom.DocumentSnapshot(
            viewport_width=VIEWPORT[0],
            viewport_height=VIEWPORT[1],
            visibility_state=visibility_state,
            ready_state=ready_state,
            root=html,
        )


@pytest.fixture()
def dom_builder() -> DomBuilder:
    """Fresh builder with its own node-id counter."""
    return DomBuilder()


# ── Fake Driver ─────────────────────────────────────────────────


class FakeDriver:
    """In-memory :class:`~cookie_cutter.browser.driver.DomDriver`.

    ``doc`` is returned by every snapshot; tests swap it and call
    :meth:`mutate` to simulate the page changing.
    """

    def __init__(self, doc: dom.DocumentSnapshot) -> None:
        self.doc = doc
        self.snapshots = 0
        self.clicks: list[int] = []
        self.forced: list[tuple[int, list[int]]] = []
        self.removed: list[int] = []
        self.scroll_restores: list[tuple[str, ...]] = []
        self.subscriptions: list[tuple[driver_mod.MutationSubscription, driver_mod.MutationCallback, bool]] = []
        self.on_click: dict[int, Callable[[], None]] = {}
        self._waiters: dict[str, list[asyncio.Future[None]]] = {}

    async def snapshot(self) -> dom.DocumentSnapshot:
        self.snapshots += 1
        return self.doc

    async def click(self, node_id: int) -> bool:
        self.clicks.append(node_id)
        hook = self.on_click.get(node_id)
        if hook is not None:
            hook()
        return True

    async def force_visible(self, node_id: int, ancestor_ids: Sequence[int]) -> None:
        self.forced.append((node_id, list(ancestor_ids)))

    async def remove_nodes(self, node_ids: Sequence[int]) -> int:
        self.removed.extend(node_ids)
        return len(node_ids)

    async def restore_scroll(self, lock_classes: Sequence[str]) -> None:
        self.scroll_restores.append(tuple(lock_classes))

    async def observe_mutations(
        self,
        callback: driver_mod.MutationCallback,
        *,
        attributes: bool,
    ) -> driver_mod.MutationSubscription:
        async def stop() -> None:
            return None

        subscription = driver_mod.MutationSubscription(stop)
        self.subscriptions.append((subscription, callback, attributes))
        return subscription

    async def listen(self, event: driver_mod.PageEvent) -> asyncio.Future[None]:
        future: asyncio.Future[None] = asyncio.get_running_loop().create_future()
        self._waiters.setdefault(event, []).append(future)
        return future

    async def wait_for(self, event: driver_mod.PageEvent) -> None:
        await (await self.listen(event))

    # ── test controls ──

    def mutate(self, doc: dom.DocumentSnapshot | None = None) -> None:
        """Optionally replace the document, then notify active observers."""
        if doc is not None:
            self.doc = doc
        for subscription, callback, _ in list(self.subscriptions):
            if subscription.active:
                callback()

    def fire(self, event: str) -> None:
        """Resolve everyone waiting for *event*."""
        for future in self._waiters.pop(event, []):
            if not future.done():
                future.set_result(None)

    def waiting_for(self, event: str) -> bool:
        return bool(self._waiters.get(event))

    @property
    def active_subscriptions(self) -> int:
        return sum(1 for s, _, _ in self.subscriptions if s.active)


@pytest.fixture()
def make_driver() -> Callable[[dom.DocumentSnapshot], FakeDriver]:
    """Factory for :class:`FakeDriver` instances."""
    return FakeDriver


@pytest.fixture()
def timings() -> config.Timings:
    return FAST_TIMINGS


# ── Channel Fixtures ────────────────────────────────────────────


class FailingChannel:
    """A controller that cannot be reached."""

    def __init__(self) -> None:
        self.notify_calls = 0

    async def notify(self, event: object) -> None:
        self.notify_calls += 1
        raise ConnectionError("controller unreachable")

    async def query_enabled(self) -> bool:
        raise ConnectionError("controller unreachable")


class SilentChannel(channel_mod.LocalChannel):
    """A controller that never answers the status query."""

    async def query_enabled(self) -> bool:
        await asyncio.sleep(3600)
        return False


@pytest.fixture()
def local_channel() -> channel_mod.LocalChannel:
    return channel_mod.LocalChannel()


@pytest.fixture()
def failing_channel() -> FailingChannel:
    return FailingChannel()


@pytest.fixture()
def silent_channel() -> SilentChannel:
    return SilentChannel()
