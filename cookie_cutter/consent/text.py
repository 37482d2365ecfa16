"""Label extraction and pattern matching for candidate controls."""

from __future__ import annotations

import re
from collections.abc import Iterable

from cookie_cutter.consent import patterns
from cookie_cutter.models import dom

_LABEL_ATTRIBUTES = ("aria-label", "value", "title")


def label_candidates(el: dom.ElementNode) -> list[str]:
    """Return the distinct normalised labels of *el*.

    Immediate child text is preferred over the full text so that an
    icon's nested text cannot dilute a short caption.  ``aria-label``,
    ``value`` and ``title`` are added as separate entries; each label
    is matched on its own so one verbose attribute cannot mask a
    short matching caption.
    """
    visible = el.direct_text
    if not visible.strip():
        visible = el.text_content

    labels: dict[str, None] = {}
    text = visible.strip().lower()
    if text:
        labels[text] = None

    for name in _LABEL_ATTRIBUTES:
        value = el.attr(name).strip().lower()
        if value:
            labels[value] = None

    return list(labels)


def matches_any(
    el: dom.ElementNode,
    pattern_set: Iterable[re.Pattern[str]],
    *,
    search: bool = False,
) -> bool:
    """Does any label of *el* match any pattern in *pattern_set*?

    With ``search=False`` a pattern must cover the whole label;
    with ``search=True`` it may match anywhere inside it.  Labels
    longer than :data:`patterns.MAX_LABEL_LENGTH` never match.
    """
    compiled = tuple(pattern_set)
    for label in label_candidates(el):
        if len(label) > patterns.MAX_LABEL_LENGTH:
            continue
        for pattern in compiled:
            hit = pattern.search(label) if search else pattern.fullmatch(label)
            if hit:
                return True
    return False


def is_accept_label(el: dom.ElementNode) -> bool:
    return matches_any(el, patterns.ACCEPT_PATTERNS)


def is_excluded_label(el: dom.ElementNode) -> bool:
    return matches_any(el, patterns.EXCLUSION_PATTERNS, search=True)


def is_save_label(el: dom.ElementNode) -> bool:
    return matches_any(el, patterns.SAVE_PATTERNS)
