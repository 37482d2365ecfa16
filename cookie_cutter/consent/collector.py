"""Enumerate and rank accept candidates across the document.

Two passes feed one ranking: the light DOM, where every candidate
must sit inside consent-related content, and open shadow roots, whose
host or text is checked once per subtree instead.
"""

from __future__ import annotations

from cookie_cutter.consent import context, patterns, scoring, visibility
from cookie_cutter.models import consent, dom

MAX_SHADOW_DEPTH = 2

_CLICKABLE_INPUT_TYPES = frozenset({"button", "submit"})
_SCRIPT_HREFS = frozenset({"#", "javascript:"})


def is_clickable(el: dom.ElementNode) -> bool:
    """Match ``button, [role=button], input[type=button|submit], a[href="#"|"javascript:"]``."""
    if el.tag == "button" or el.attr("role") == "button":
        return True
    if el.tag == "input":
        return el.attr("type").lower() in _CLICKABLE_INPUT_TYPES
    if el.tag == "a":
        return "href" in el.attributes and el.attributes["href"] in _SCRIPT_HREFS
    return False


def is_button_like(el: dom.ElementNode) -> bool:
    """Match ``button, [role=button]``."""
    return el.tag == "button" or el.attr("role") == "button"


def collect_main_tree(doc: dom.DocumentSnapshot) -> list[consent.Candidate]:
    """Score visible, in-context clickables of the light DOM."""
    found: list[consent.Candidate] = []
    for el in doc.iter_elements():
        if not is_clickable(el):
            continue
        if not visibility.is_visible(el):
            continue
        if not context.has_context(el, doc):
            continue
        candidate = scoring.score(el)
        if candidate is not None:
            found.append(candidate)
    return found


def _shadow_is_relevant(host: dom.ElementNode, root: dom.ShadowRootNode) -> bool:
    # Shadow-only components have empty light-DOM text, so the host's
    # id/class (e.g. #wpconsent-container) and the subtree's own text
    # stand in for the ancestor walk.
    host_meta = f"{host.attr('id')} {host.attr('class')}".lower()
    if patterns.matches_keyword(host_meta):
        return True
    return patterns.matches_keyword(root.text_content.lower())


def collect_shadow(host: dom.ElementNode, root: dom.ShadowRootNode, depth: int = 0) -> list[consent.Candidate]:
    """Collect candidates from *root* and shadow roots nested inside it."""
    if depth > MAX_SHADOW_DEPTH:
        return []
    if not _shadow_is_relevant(host, root):
        return []

    found: list[consent.Candidate] = []
    elements = list(root.iter_elements())
    for el in elements:
        if not is_clickable(el) or not visibility.is_visible(el):
            continue
        candidate = scoring.score(el)
        if candidate is not None:
            found.append(consent.Candidate(element=el, score=scoring.SHADOW_SCORE))

    for el in elements:
        if el.shadow_root is not None:
            found.extend(collect_shadow(el, el.shadow_root, depth + 1))
    return found


def collect(doc: dom.DocumentSnapshot) -> list[consent.Candidate]:
    """Return all accept candidates, best first.

    Ties keep first-encountered order (light DOM before shadow trees).
    """
    found = collect_main_tree(doc)
    for host in doc.iter_elements():
        if host.shadow_root is not None:
            found.extend(collect_shadow(host, host.shadow_root))
    return sorted(found, key=lambda c: c.score, reverse=True)
