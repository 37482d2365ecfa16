"""Tests for cookie_cutter.consent.text: label extraction and matching."""

from __future__ import annotations

from cookie_cutter.consent import text


class TestLabelCandidates:
    def test_direct_text_preferred(self, dom_builder) -> None:
        button = dom_builder.el("button", "  Accept ", dom_builder.el("span", "icon glyph"))
        assert text.label_candidates(button) == ["accept"]

    def test_falls_back_to_full_text(self, dom_builder) -> None:
        button = dom_builder.el("button", dom_builder.el("span", "Got it"))
        assert text.label_candidates(button) == ["got it"]

    def test_attributes_added(self, dom_builder) -> None:
        button = dom_builder.el("input", attrs={"type": "submit", "value": "OK", "title": "Close banner"})
        assert text.label_candidates(button) == ["ok", "close banner"]

    def test_duplicates_removed(self, dom_builder) -> None:
        button = dom_builder.el("button", "Accept all", attrs={"aria-label": "ACCEPT ALL"})
        assert text.label_candidates(button) == ["accept all"]

    def test_empty(self, dom_builder) -> None:
        assert text.label_candidates(dom_builder.el("button")) == []


class TestMatching:
    def test_accept_label(self, dom_builder) -> None:
        assert text.is_accept_label(dom_builder.el("button", "Accept all cookies"))

    def test_accept_from_attribute(self, dom_builder) -> None:
        button = dom_builder.el("button", "✓", attrs={"aria-label": "I agree"})
        assert text.is_accept_label(button)

    def test_accept_needs_whole_label(self, dom_builder) -> None:
        assert not text.is_accept_label(dom_builder.el("button", "Accept our terms of service"))

    def test_long_label_never_matches(self, dom_builder) -> None:
        # Would match "accept(\s+all)?" if it were not over the length cap.
        button = dom_builder.el("button", attrs={"aria-label": "accept" + " " * 50 + "all"})
        assert not text.is_accept_label(button)

    def test_exclusion_matches_substring(self, dom_builder) -> None:
        assert text.is_excluded_label(dom_builder.el("button", "Manage Settings"))
        assert text.is_excluded_label(dom_builder.el("button", "Reject all"))

    def test_exclusion_checks_every_label(self, dom_builder) -> None:
        button = dom_builder.el("button", "OK", attrs={"title": "Cookie settings"})
        assert text.is_accept_label(button)
        assert text.is_excluded_label(button)

    def test_save_label(self, dom_builder) -> None:
        assert text.is_save_label(dom_builder.el("button", "Save choices"))
        assert not text.is_save_label(dom_builder.el("button", "Accept"))
