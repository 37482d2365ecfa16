"""Classify and rank an element as an accept candidate."""

from __future__ import annotations

from cookie_cutter.consent import text
from cookie_cutter.models import consent, dom

BASE_SCORE = 50
BUTTON_BONUS = 10
LINK_PENALTY = -10
FILLED_BACKGROUND_BONUS = 5

# Shadow-tree candidates are pinned below every light-DOM candidate.
SHADOW_SCORE = 45

_UNFILLED_BACKGROUNDS = frozenset({"", "transparent", "rgba(0, 0, 0, 0)", "rgb(255, 255, 255)"})


def has_filled_background(el: dom.ElementNode) -> bool:
    """Return ``True`` if *el* has a coloured, non-white background."""
    if el.style is None:
        return False
    return el.style.background_color not in _UNFILLED_BACKGROUNDS


def score(el: dom.ElementNode) -> consent.Candidate | None:
    """Score *el*, or return ``None`` if it is not an accept control.

    A native ``<button>`` is a stronger accept signal than an
    accept-styled ``<a>``; a filled background marks the primary
    call to action.
    """
    if not text.is_accept_label(el):
        return None
    if text.is_excluded_label(el):
        return None

    value = BASE_SCORE
    if el.tag == "button":
        value += BUTTON_BONUS
    elif el.tag == "a":
        value += LINK_PENALTY

    if has_filled_background(el):
        value += FILLED_BACKGROUND_BONUS

    return consent.Candidate(element=el, score=value)
