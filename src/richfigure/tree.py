"""Node classification and splice-aware traversal over BeautifulSoup trees."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Tuple

from bs4.element import NavigableString, PageElement, PreformattedString, Tag


class NodeKind(enum.Enum):
    ELEMENT = "element"
    TEXT = "text"
    OTHER = "other"


def node_kind(node: Any) -> NodeKind:
    """Classify a bs4 node.

    ``Comment``, ``Doctype``, ``CData`` and the other ``PreformattedString``
    subclasses are ``OTHER``; every remaining ``NavigableString`` is ``TEXT``.
    """
    if isinstance(node, Tag):
        return NodeKind.ELEMENT
    if isinstance(node, PreformattedString):
        return NodeKind.OTHER
    if isinstance(node, NavigableString):
        return NodeKind.TEXT
    return NodeKind.OTHER


def is_element(node: Any) -> bool:
    return node_kind(node) is NodeKind.ELEMENT


def is_text(node: Any) -> bool:
    return node_kind(node) is NodeKind.TEXT


def element_children(element: Tag) -> List[Tag]:
    return [child for child in element.contents if is_element(child)]


def next_element_sibling(parent: Tag, index: int) -> Tuple[Optional[Tag], int]:
    """Return the first element after ``parent.contents[index]`` and its index.

    Text and other nodes are skipped. ``(None, len(contents))`` when the end
    of the sibling list is reached.
    """
    contents = parent.contents
    position = index + 1
    while position < len(contents):
        candidate = contents[position]
        if is_element(candidate):
            return candidate, position
        position += 1
    return None, position


def tag_predicate(name: str) -> Callable[[Any], bool]:
    def _test(node: Any) -> bool:
        return is_element(node) and node.name == name

    return _test


@dataclass(frozen=True)
class Splice:
    """Replace ``parent.contents[start:stop]`` with ``replacement``."""

    parent: Tag
    start: int
    stop: int
    replacement: PageElement


def apply_splice(splice: Splice) -> None:
    contents = splice.parent.contents
    if not (0 <= splice.start < splice.stop <= len(contents)):
        raise IndexError(
            f"Splice range {splice.start}:{splice.stop} outside of <{splice.parent.name}> "
            f"with {len(contents)} children"
        )
    for node in list(contents[splice.start : splice.stop]):
        node.extract()
    splice.parent.insert(splice.start, splice.replacement)


Visitor = Callable[[Tag, Optional[int], Optional[Tag]], Optional[Splice]]


def visit(root: Tag, test: Callable[[Any], bool], visitor: Visitor) -> int:
    """Walk ``root`` in document order and call ``visitor`` on matching nodes.

    The visitor receives ``(node, index, parent)``; ``index`` and ``parent``
    are ``None`` for the root itself. It may return a :class:`Splice` on the
    node's parent, which is committed before the walk continues. Scanning
    then resumes right after the spliced-in replacement, which is not
    descended into. Returns the number of committed splices.
    """
    applied = 0
    if test(root):
        splice = visitor(root, None, None)
        if splice is not None:
            raise ValueError("The root node cannot be replaced by a splice")

    stack: List[Tuple[Tag, int]] = [(root, 0)]
    while stack:
        parent, index = stack.pop()
        if index >= len(parent.contents):
            continue
        node = parent.contents[index]
        if test(node):
            splice = visitor(node, index, parent)
            if splice is not None:
                apply_splice(splice)
                applied += 1
                resume = splice.start + 1 if splice.parent is parent else index + 1
                stack.append((parent, resume))
                continue
        stack.append((parent, index + 1))
        if is_element(node):
            stack.append((node, 0))
    return applied
