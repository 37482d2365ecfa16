"""Pydantic models for the serialised document tree.

A :class:`DocumentSnapshot` is produced by one in-page evaluation and
consumed by the pure-Python heuristics.  Elements carry the small set
of attributes, the computed style and the rendered box that the
heuristics need; text nodes are kept in document order so that
``textContent`` can be reproduced without shipping it per element.
"""

from __future__ import annotations

import functools
from collections.abc import Iterator
from typing import Annotated, Literal

import pydantic
from pydantic import alias_generators

_CAMEL = pydantic.ConfigDict(alias_generator=alias_generators.to_camel, populate_by_name=True)


class Rect(pydantic.BaseModel):
    """Rendered box size of an element (``getBoundingClientRect``)."""

    width: float = 0.0
    height: float = 0.0


class ComputedStyle(pydantic.BaseModel):
    """The computed style properties the heuristics look at."""

    model_config = _CAMEL

    display: str = ""
    visibility: str = ""
    opacity: str = "1"
    background_color: str = ""


class TextNode(pydantic.BaseModel):
    """A DOM text node."""

    type: Literal["text"] = "text"
    text: str = ""


class ElementNode(pydantic.BaseModel):
    """A DOM element.

    ``style`` is ``None`` when the computed style could not be read.
    ``node_id`` addresses the live element for follow-up actions in
    the same document.
    """

    model_config = _CAMEL

    type: Literal["element"] = "element"
    node_id: int
    tag: str
    attributes: dict[str, str] = pydantic.Field(default_factory=dict)
    style: ComputedStyle | None = None
    rect: Rect = pydantic.Field(default_factory=Rect)
    children: list[DomChild] = pydantic.Field(default_factory=list)
    shadow_root: ShadowRootNode | None = None

    _parent: ElementNode | None = pydantic.PrivateAttr(default=None)

    def model_post_init(self, __context: object) -> None:
        for child in self.children:
            if isinstance(child, ElementNode):
                child._parent = self

    @property
    def parent(self) -> ElementNode | None:
        """Parent element within the same tree (``parentElement``)."""
        return self._parent

    def attr(self, name: str) -> str:
        """Return attribute *name*, or ``""`` when absent."""
        return self.attributes.get(name, "")

    @functools.cached_property
    def text_content(self) -> str:
        """Concatenated text of all descendant text nodes."""
        return "".join(c.text if isinstance(c, TextNode) else c.text_content for c in self.children)

    @property
    def direct_text(self) -> str:
        """Concatenated text of immediate child text nodes only."""
        return "".join(c.text for c in self.children if isinstance(c, TextNode))

    def ancestors(self) -> Iterator[ElementNode]:
        """Yield parent, grandparent, ... up to the tree root."""
        current = self._parent
        while current is not None:
            yield current
            current = current._parent

    def iter_elements(self) -> Iterator[ElementNode]:
        """Yield descendant elements in document order.

        Shadow trees are not entered, matching ``querySelectorAll``.
        """
        stack = [c for c in reversed(self.children) if isinstance(c, ElementNode)]
        while stack:
            el = stack.pop()
            yield el
            stack.extend(c for c in reversed(el.children) if isinstance(c, ElementNode))


class ShadowRootNode(pydantic.BaseModel):
    """An open shadow root attached to a host element."""

    children: list[DomChild] = pydantic.Field(default_factory=list)

    @functools.cached_property
    def text_content(self) -> str:
        return "".join(c.text if isinstance(c, TextNode) else c.text_content for c in self.children)

    def iter_elements(self) -> Iterator[ElementNode]:
        """Yield elements of this shadow tree in document order."""
        for child in self.children:
            if isinstance(child, ElementNode):
                yield child
                yield from child.iter_elements()


DomChild = Annotated[ElementNode | TextNode, pydantic.Field(discriminator="type")]


class DocumentSnapshot(pydantic.BaseModel):
    """One serialised view of the live document."""

    model_config = _CAMEL

    viewport_width: float = 0.0
    viewport_height: float = 0.0
    visibility_state: str = "visible"
    ready_state: str = "complete"
    root: ElementNode | None = None

    @property
    def body(self) -> ElementNode | None:
        if self.root is None:
            return None
        for child in self.root.children:
            if isinstance(child, ElementNode) and child.tag == "body":
                return child
        return None

    def iter_elements(self) -> Iterator[ElementNode]:
        """Yield every light-DOM element, root included, in document order."""
        if self.root is None:
            return
        yield self.root
        yield from self.root.iter_elements()

    @classmethod
    def empty(cls) -> DocumentSnapshot:
        """A snapshot with no tree, used when the page could not be read."""
        return cls()


ElementNode.model_rebuild()
ShadowRootNode.model_rebuild()
DocumentSnapshot.model_rebuild()
