"""Visibility checks over snapshot elements."""

from __future__ import annotations

from cookie_cutter.models import dom


def _style_hidden(style: dom.ComputedStyle) -> bool:
    return style.display == "none" or style.visibility == "hidden" or style.opacity == "0"


def is_visible(el: dom.ElementNode | None) -> bool:
    """Return ``True`` if *el* is rendered and interactable.

    An element whose style could not be read counts as not visible.
    """
    if el is None or el.style is None:
        return False
    if _style_hidden(el.style):
        return False
    return el.rect.width > 0 and el.rect.height > 0


def is_hidden(el: dom.ElementNode) -> bool:
    """Return ``True`` if *el* is hidden by style, ignoring geometry.

    Distinguishes deliberately hidden controls from merely zero-sized
    ones.  Unknown style is not treated as hidden.
    """
    if el.style is None:
        return False
    return _style_hidden(el.style)
