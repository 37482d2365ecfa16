"""Ancestor walk confirming that a control sits in consent-related content."""

from __future__ import annotations

from cookie_cutter.consent import patterns
from cookie_cutter.models import dom

MAX_CONTEXT_DEPTH = 8

# An ancestor at least this large is a page-wide scrim or backdrop.
_OVERLAY_WIDTH_RATIO = 0.95
_OVERLAY_HEIGHT_RATIO = 0.9


def is_full_viewport(el: dom.ElementNode, doc: dom.DocumentSnapshot) -> bool:
    """Return ``True`` if *el* covers (nearly) the whole viewport."""
    return (
        el.rect.width > doc.viewport_width * _OVERLAY_WIDTH_RATIO
        and el.rect.height > doc.viewport_height * _OVERLAY_HEIGHT_RATIO
    )


def has_context(el: dom.ElementNode, doc: dom.DocumentSnapshot) -> bool:
    """Return ``True`` if a nearby ancestor mentions cookies/consent.

    Walks at most :data:`MAX_CONTEXT_DEPTH` ancestors starting at the
    parent.  Full-viewport ancestors are stepped over without reading
    their text, so a page-wide wrapper does not count as context.
    """
    for depth, ancestor in enumerate(el.ancestors()):
        if depth >= MAX_CONTEXT_DEPTH:
            break
        if is_full_viewport(ancestor, doc):
            continue
        if patterns.matches_keyword(ancestor.text_content.lower()):
            return True
    return False
