"""CSS-selector-based HTML extraction over a lookup scope.

A *scope* is the list of elements matched by a container selector (or the
whole document). Lookups search every scope element in document order and
return the first hit, so a container selector matching several elements
behaves like their union.
"""

from __future__ import annotations

from collections.abc import Sequence

from bs4 import BeautifulSoup, Comment, NavigableString, Tag


def parse_html(html: str) -> BeautifulSoup:
    """Parse an HTML string into a BeautifulSoup tree (``lxml`` parser)."""
    return BeautifulSoup(html, "lxml")


def select_scope(root: BeautifulSoup | Tag, selector: str | None) -> list[Tag]:
    """Elements matching ``selector``; ``[root]`` when no selector is given."""
    if not selector:
        return [root]
    return root.select(selector)


def find_first(scope: Sequence[Tag], selector: str) -> Tag | None:
    """First element matching ``selector`` inside any scope element."""
    for element in scope:
        match = element.select_one(selector)
        if match is not None:
            return match
    return None


def element_text(element: Tag) -> str:
    """Text content with whitespace runs collapsed to single spaces."""
    return " ".join(element.get_text(" ").split())


def element_attr(element: Tag, attr: str) -> str:
    """Attribute value; multi-valued attributes are space-joined."""
    value = element.get(attr)
    if value is None:
        return ""
    if isinstance(value, list):
        return " ".join(value)
    return str(value)


def next_text_sibling(element: Tag) -> str:
    """Text of the node immediately following ``element`` if it is a text node."""
    node = element.next_sibling
    if isinstance(node, NavigableString) and not isinstance(node, Comment):
        return node.strip()
    return ""
