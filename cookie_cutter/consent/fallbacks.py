"""Fallbacks used when no visible accept control qualifies.

* Hidden buttons: some CMPs render the accept control with
  ``display:none`` until an animation or script reveals it.  The
  control and its hidden ancestors are forced visible and clicked.
* Sourcepoint containers: the message lives in a cross-origin iframe
  that cannot be inspected, so the iframe and its container are
  removed from the document instead.
"""

from __future__ import annotations

from cookie_cutter.browser import driver as driver_mod
from cookie_cutter.consent import collector, context, patterns, text, visibility
from cookie_cutter.models import dom
from cookie_cutter.utils import logger

log = logger.create_logger("Fallbacks")

MAX_FORCED_ANCESTORS = 5


# ====================================================================
# Hidden-button fallback
# ====================================================================


def _hidden_ancestors(el: dom.ElementNode) -> list[dom.ElementNode]:
    """Hidden (``display:none``/``visibility:hidden``) ancestors within reach."""
    hidden: list[dom.ElementNode] = []
    for depth, ancestor in enumerate(el.ancestors()):
        if depth >= MAX_FORCED_ANCESTORS:
            break
        style = ancestor.style
        if style is not None and (style.display == "none" or style.visibility == "hidden"):
            hidden.append(ancestor)
    return hidden


def find_hidden_accept(doc: dom.DocumentSnapshot) -> tuple[dom.ElementNode, list[dom.ElementNode]] | None:
    """Return the first style-hidden accept button and its hidden ancestors."""
    for el in doc.iter_elements():
        if not collector.is_button_like(el):
            continue
        if not visibility.is_hidden(el):
            continue
        if not text.is_accept_label(el) or text.is_excluded_label(el):
            continue
        if not context.has_context(el, doc):
            continue
        return el, _hidden_ancestors(el)
    return None


async def try_hidden_buttons(driver: driver_mod.DomDriver, doc: dom.DocumentSnapshot) -> bool:
    """Reveal and click a hidden accept button.  Returns whether it acted."""
    match = find_hidden_accept(doc)
    if match is None:
        return False

    button, ancestors = match
    log.info(
        "Revealing hidden accept button",
        {"label": text.label_candidates(button)[:1], "hiddenAncestors": len(ancestors)},
    )
    await driver.force_visible(button.node_id, [a.node_id for a in ancestors])
    await driver.click(button.node_id)
    return True


# ====================================================================
# Iframe-removal fallback
# ====================================================================


def _is_sourcepoint_iframe(el: dom.ElementNode) -> bool:
    return el.tag == "iframe" and el.attr("id").startswith(patterns.SOURCEPOINT_IFRAME_ID_PREFIX)


def _is_sourcepoint_container(el: dom.ElementNode) -> bool:
    marker = patterns.SOURCEPOINT_CONTAINER_MARKER
    return marker in el.attr("class") or marker in el.attr("id")


def has_consent_iframe(doc: dom.DocumentSnapshot) -> bool:
    """Return ``True`` if a known cross-origin consent iframe is present."""
    return any(_is_sourcepoint_iframe(el) for el in doc.iter_elements())


def find_consent_containers(doc: dom.DocumentSnapshot) -> list[dom.ElementNode]:
    """Known consent iframes and their containers, in document order."""
    return [el for el in doc.iter_elements() if _is_sourcepoint_iframe(el) or _is_sourcepoint_container(el)]


async def remove_consent_containers(driver: driver_mod.DomDriver, doc: dom.DocumentSnapshot) -> int:
    """Detach every known consent container found in *doc*."""
    nodes = find_consent_containers(doc)
    if not nodes:
        return 0
    removed = await driver.remove_nodes([n.node_id for n in nodes])
    log.info("Removed consent containers", {"count": removed})
    return removed
