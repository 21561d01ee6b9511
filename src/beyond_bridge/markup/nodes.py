"""
Flattened view of a markup tree.

Walking "the paragraphs after this heading" over a live parse tree mixes
tree navigation with the stopping rule. Here the tree is first flattened
into a list of Node records in document order, each tagged with its depth;
``collect_until`` then walks siblings of a start node until a predicate
says stop. Node lists can be built by hand, so the walker is testable
without a parser.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterator

from bs4 import BeautifulSoup, Tag

HEADING_TAGS = ("h1", "h2", "h3", "h4", "h5", "h6")
BLOCK_TAGS = ("p", "ul", "ol", "blockquote", "table", "div", "dl", "pre")


@dataclass(frozen=True)
class Node:
    """One element of a flattened tree.

    Attributes:
        tag: Lowercase tag name.
        depth: Nesting depth below the flattened root (children of the root are 0).
        id: Element id attribute, if any.
        text: Whitespace-collapsed text content.
        html: Serialized element markup.
        strong_lead: True when the element's first content is bold/strong text.
    """
    tag: str
    depth: int = 0
    id: str | None = None
    text: str = ""
    html: str = ""
    strong_lead: bool = False

    @property
    def rank(self) -> int | None:
        """Heading rank (1 for h1 ... 6 for h6), None for other elements."""
        if self.tag in HEADING_TAGS:
            return int(self.tag[1])
        return None

    @property
    def is_heading(self) -> bool:
        return self.rank is not None

    @property
    def is_block(self) -> bool:
        return self.tag in BLOCK_TAGS


Predicate = Callable[[Node], bool]


def collapse(text: str) -> str:
    return " ".join(text.split())


def _leads_with_strong(element: Tag) -> bool:
    for child in element.children:
        if isinstance(child, Tag):
            return child.name in ("strong", "b")
        if str(child).strip():
            return False
    return False


def flatten(root: BeautifulSoup | Tag) -> list[Node]:
    """Flatten every element below ``root`` into document order."""
    nodes: list[Node] = []

    def walk(element: Tag, depth: int) -> None:
        for child in element.children:
            if not isinstance(child, Tag):
                continue
            element_id = child.get("id")
            nodes.append(Node(
                tag=child.name.lower(),
                depth=depth,
                id=element_id if isinstance(element_id, str) else None,
                text=collapse(child.get_text(" ")),
                html=str(child),
                strong_lead=_leads_with_strong(child),
            ))
            walk(child, depth + 1)

    walk(root, 0)
    return nodes


def iter_siblings(nodes: list[Node], start: int) -> Iterator[Node]:
    """Yield the following siblings of ``nodes[start]``, skipping their descendants."""
    depth = nodes[start].depth
    for node in nodes[start + 1:]:
        if node.depth < depth:
            return
        if node.depth == depth:
            yield node


def collect_until(nodes: list[Node], start: int, stop: Predicate) -> list[Node]:
    """Collect following siblings of ``nodes[start]`` until ``stop`` returns True.

    The node that triggers ``stop`` is not included.
    """
    collected: list[Node] = []
    for node in iter_siblings(nodes, start):
        if stop(node):
            break
        collected.append(node)
    return collected


def stop_at_heading(rank: int) -> Predicate:
    """Stop at the next heading of equal or higher rank (h3 stops at h1-h3)."""
    def predicate(node: Node) -> bool:
        return node.rank is not None and node.rank <= rank
    return predicate


def stop_at_sub_option(node: Node) -> bool:
    """Stop where a list of named sub-options starts: any heading or a bold-led paragraph."""
    return node.is_heading or (node.tag == "p" and node.strong_lead)


def owner_index(nodes: list[Node], index: int) -> int:
    """Climb from an inline element (e.g. a span carrying an id) to its heading or block ancestor."""
    current = index
    while not (nodes[current].is_heading or nodes[current].is_block) and nodes[current].depth > 0:
        parent_depth = nodes[current].depth - 1
        current = next(
            i for i in range(current - 1, -1, -1) if nodes[i].depth == parent_depth
        )
    return current


__all__ = [
    "BLOCK_TAGS",
    "HEADING_TAGS",
    "Node",
    "collapse",
    "collect_until",
    "flatten",
    "iter_siblings",
    "owner_index",
    "stop_at_heading",
    "stop_at_sub_option",
]
