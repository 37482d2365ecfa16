"""Tests for cookie_cutter.browser.auto_accept: per-document orchestrators."""

from __future__ import annotations

import asyncio
from unittest import mock

from cookie_cutter.browser import auto_accept, bridge
from cookie_cutter.messaging import channel as channel_mod


def _make_page(url: str = "about:blank") -> mock.MagicMock:
    page = mock.MagicMock()
    page.url = url
    page.expose_binding = mock.AsyncMock()
    # Every in-page evaluation yields nothing: snapshots come back empty
    # and lifecycle waits never resolve.
    page.evaluate = mock.AsyncMock(return_value=None)
    page.main_frame = mock.sentinel.main_frame
    return page


async def _tick(n: int = 10) -> None:
    for _ in range(n):
        await asyncio.sleep(0)


class TestConsentAutoAccept:
    def test_attach_installs_listeners(self, timings) -> None:
        page = _make_page()
        auto = auto_accept.ConsentAutoAccept(channel_mod.LocalChannel(), timings)

        asyncio.run(auto.attach(page))

        page.expose_binding.assert_awaited_once()
        assert page.expose_binding.await_args.args[0] == bridge.BINDING_NAME
        events = [call.args[0] for call in page.on.call_args_list]
        assert events == ["domcontentloaded", "close"]
        assert auto.current is None

    def test_loaded_page_is_handled_immediately(self, timings) -> None:
        page = _make_page("https://example.com/")
        auto = auto_accept.ConsentAutoAccept(channel_mod.LocalChannel(), timings)

        async def scenario() -> bool:
            await auto.attach(page)
            await _tick()
            started = auto.current is not None
            await auto.detach()
            return started

        assert asyncio.run(scenario()) is True

    def test_new_document_replaces_orchestrator(self, timings) -> None:
        page = _make_page()
        auto = auto_accept.ConsentAutoAccept(channel_mod.LocalChannel(), timings)

        async def scenario() -> tuple[object, object, int]:
            await auto.attach(page)
            auto._on_document(page)
            await _tick()
            first = auto.current
            auto._on_document(page)
            await _tick()
            second = auto.current
            assert first is not None
            return first, second, len(first.session.tasks)

        first, second, first_tasks = asyncio.run(scenario())
        assert second is not None
        assert second is not first
        assert first_tasks == 0

    def test_page_close_tears_down(self, timings) -> None:
        page = _make_page()
        auto = auto_accept.ConsentAutoAccept(channel_mod.LocalChannel(), timings)

        async def scenario() -> object:
            await auto.attach(page)
            auto._on_document(page)
            await _tick()
            orch = auto.current
            auto._on_close(page)
            await _tick()
            return orch

        orch = asyncio.run(scenario())
        assert auto.current is None
        assert orch is not None
        assert orch.session.tasks == set()

    def test_detach_removes_listeners(self, timings) -> None:
        page = _make_page()
        auto = auto_accept.ConsentAutoAccept(channel_mod.LocalChannel(), timings)

        async def scenario() -> None:
            await auto.attach(page)
            auto._on_document(page)
            await _tick()
            await auto.detach()

        asyncio.run(scenario())
        removed = [call.args[0] for call in page.remove_listener.call_args_list]
        assert removed == ["domcontentloaded", "close"]
        assert auto.current is None

    def test_new_document_closes_previous_session_at_once(self, timings) -> None:
        page = _make_page()
        auto = auto_accept.ConsentAutoAccept(channel_mod.LocalChannel(), timings)

        async def scenario() -> bool:
            await auto.attach(page)
            auto._on_document(page)
            await _tick()
            first = auto.current
            assert first is not None
            auto._on_document(page)
            closed = first.session.closed
            await auto.detach()
            return closed

        assert asyncio.run(scenario()) is True
