"""Synthetic DOM nodes and their HTML serialization."""

from __future__ import annotations

import weakref
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from .errors import MalformedTree


class NodeKind(str, Enum):
    ELEMENT = "element"
    TEXT = "text"
    COMMENT = "comment"
    FRAGMENT = "fragment"


@dataclass(eq=False)
class SyntheticNode:
    """One emulated DOM node.

    Nodes compare by identity so that ``children.index`` finds the exact node
    a script holds, not a structurally equal sibling.
    """

    kind: NodeKind
    tag: str | None = None
    attributes: Dict[str, str | None] = field(default_factory=dict)
    text: str | None = None
    children: List["SyntheticNode"] = field(default_factory=list)
    _parent: Optional["weakref.ReferenceType[SyntheticNode]"] = field(
        default=None, init=False, repr=False
    )

    @property
    def parent(self) -> SyntheticNode | None:
        if self._parent is None:
            return None
        return self._parent()

    @parent.setter
    def parent(self, value: SyntheticNode | None) -> None:
        self._parent = weakref.ref(value) if value is not None else None

    @property
    def is_leaf(self) -> bool:
        return self.kind is NodeKind.COMMENT


def element(tag: str) -> SyntheticNode:
    return SyntheticNode(kind=NodeKind.ELEMENT, tag=tag)


def text_node(text: str) -> SyntheticNode:
    return SyntheticNode(kind=NodeKind.TEXT, text=text)


def comment_node(text: str) -> SyntheticNode:
    return SyntheticNode(kind=NodeKind.COMMENT, text=text)


def fragment() -> SyntheticNode:
    return SyntheticNode(kind=NodeKind.FRAGMENT)


def _detach(node: SyntheticNode) -> None:
    parent = node.parent
    if parent is None:
        return
    for index, child in enumerate(parent.children):
        if child is node:
            del parent.children[index]
            break
    node.parent = None


def _check_container(parent: SyntheticNode, child: SyntheticNode) -> None:
    if parent.is_leaf:
        raise ValueError(f"{parent.kind.value} nodes cannot have children")
    ancestor: SyntheticNode | None = parent
    while ancestor is not None:
        if ancestor is child:
            raise ValueError("a node cannot be inserted into itself or one of its descendants")
        ancestor = ancestor.parent


def append_child(parent: SyntheticNode, child: SyntheticNode) -> None:
    """Append ``child`` to ``parent``, moving it out of any previous parent."""
    _check_container(parent, child)
    _detach(child)
    parent.children.append(child)
    child.parent = parent


def insert_before(
    parent: SyntheticNode, node: SyntheticNode, reference: SyntheticNode | None
) -> None:
    """Insert ``node`` where ``reference`` currently sits in ``parent``.

    A missing reference (``None`` or not a child of ``parent``) appends.
    """
    _check_container(parent, node)
    if node is reference:
        return
    _detach(node)
    index = None
    if reference is not None:
        for position, child in enumerate(parent.children):
            if child is reference:
                index = position
                break
    if index is None:
        parent.children.append(node)
    else:
        parent.children.insert(index, node)
    node.parent = parent


def set_attribute(node: SyntheticNode, name: str, value: str | None) -> None:
    node.attributes[name] = value


def text_content(node: SyntheticNode) -> str:
    if node.kind is NodeKind.TEXT:
        return node.text or ""
    if node.kind is NodeKind.COMMENT:
        return ""
    return "".join(text_content(child) for child in node.children)


def _render_attrs(attrs: Dict[str, str | None]) -> str:
    parts = [f' {name}="{str(value)}"' for name, value in attrs.items() if value is not None]
    return "".join(parts)


def node_to_html(node: SyntheticNode) -> str:
    """Serialize a subtree to HTML.

    Text and attribute values are emitted verbatim. The bundle is trusted and
    nothing here is escaped.
    """
    if node.kind is NodeKind.COMMENT:
        return f"<!-- {node.text} -->"
    if node.kind is NodeKind.FRAGMENT:
        return "".join(node_to_html(child) for child in node.children)
    if node.kind is NodeKind.TEXT:
        return node.text or ""
    if node.kind is NodeKind.ELEMENT:
        attrs = _render_attrs(node.attributes)
        inner = "".join(node_to_html(child) for child in node.children)
        return f"<{node.tag}{attrs}>{inner}</{node.tag}>"
    raise MalformedTree(f"unknown node kind: {node.kind!r}")


__all__ = [
    "NodeKind",
    "SyntheticNode",
    "append_child",
    "comment_node",
    "element",
    "fragment",
    "insert_before",
    "node_to_html",
    "set_attribute",
    "text_content",
    "text_node",
]
