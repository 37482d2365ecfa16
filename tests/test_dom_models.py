"""Tests for cookie_cutter.models.dom: parsing in-page snapshots."""

from __future__ import annotations

from typing import Any

from cookie_cutter.models import dom


def _element(node_id: int, tag: str, *children: dict[str, Any], **extra: Any) -> dict[str, Any]:
    return {
        "type": "element",
        "nodeId": node_id,
        "tag": tag,
        "attributes": extra.pop("attributes", {}),
        "style": extra.pop(
            "style",
            {"display": "block", "visibility": "visible", "opacity": "1", "backgroundColor": "rgba(0, 0, 0, 0)"},
        ),
        "rect": {"width": 100, "height": 20},
        "children": list(children),
        "shadowRoot": extra.pop("shadowRoot", None),
    }


def _text(text: str) -> dict[str, Any]:
    return {"type": "text", "text": text}


RAW = {
    "viewportWidth": 1280,
    "viewportHeight": 800,
    "visibilityState": "visible",
    "readyState": "interactive",
    "root": _element(
        0,
        "html",
        _element(
            1,
            "body",
            _element(
                2,
                "div",
                _text("We use cookies. "),
                _element(3, "button", _text("Accept"), _element(4, "span", _text("✓")), attributes={"aria-label": "Accept all"}),
                attributes={"id": "banner"},
            ),
            _element(
                5,
                "cmp-widget",
                shadowRoot={"children": [_element(6, "button", _text("OK"))]},
            ),
        ),
    ),
}


class TestDocumentSnapshotParsing:
    def test_camel_case_fields(self) -> None:
        doc = dom.DocumentSnapshot.model_validate(RAW)
        assert doc.viewport_width == 1280
        assert doc.viewport_height == 800
        assert doc.ready_state == "interactive"
        assert doc.root is not None
        assert doc.root.tag == "html"

    def test_style_fields(self) -> None:
        doc = dom.DocumentSnapshot.model_validate(RAW)
        button = next(el for el in doc.iter_elements() if el.tag == "button")
        assert button.style is not None
        assert button.style.background_color == "rgba(0, 0, 0, 0)"
        assert button.attr("aria-label") == "Accept all"
        assert button.attr("missing") == ""

    def test_null_style(self) -> None:
        raw = {"root": _element(0, "html", style=None)}
        doc = dom.DocumentSnapshot.model_validate(raw)
        assert doc.root is not None
        assert doc.root.style is None

    def test_body(self) -> None:
        doc = dom.DocumentSnapshot.model_validate(RAW)
        assert doc.body is not None
        assert doc.body.node_id == 1

    def test_no_body(self) -> None:
        doc = dom.DocumentSnapshot.model_validate({"root": _element(0, "html", _element(1, "head"))})
        assert doc.body is None

    def test_empty(self) -> None:
        doc = dom.DocumentSnapshot.empty()
        assert doc.root is None
        assert doc.body is None
        assert list(doc.iter_elements()) == []


class TestTreeNavigation:
    def test_document_order_skips_shadow(self) -> None:
        doc = dom.DocumentSnapshot.model_validate(RAW)
        assert [el.node_id for el in doc.iter_elements()] == [0, 1, 2, 3, 4, 5]

    def test_parent_links(self) -> None:
        doc = dom.DocumentSnapshot.model_validate(RAW)
        span = next(el for el in doc.iter_elements() if el.tag == "span")
        assert [a.node_id for a in span.ancestors()] == [3, 2, 1, 0]
        assert doc.root is not None
        assert doc.root.parent is None

    def test_shadow_tree(self) -> None:
        doc = dom.DocumentSnapshot.model_validate(RAW)
        host = next(el for el in doc.iter_elements() if el.tag == "cmp-widget")
        assert host.shadow_root is not None
        inner = list(host.shadow_root.iter_elements())
        assert [el.node_id for el in inner] == [6]
        # The shadow boundary ends the parent chain.
        assert inner[0].parent is None
        assert host.shadow_root.text_content == "OK"

    def test_text_content_and_direct_text(self) -> None:
        doc = dom.DocumentSnapshot.model_validate(RAW)
        button = next(el for el in doc.iter_elements() if el.tag == "button")
        assert button.text_content == "Accept✓"
        assert button.direct_text == "Accept"
        banner = button.parent
        assert banner is not None
        assert banner.text_content == "We use cookies. Accept✓"
        # Light-DOM text does not include shadow content.
        assert doc.body is not None
        assert "OK" not in doc.body.text_content
