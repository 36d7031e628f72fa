"""Minimal document emulator that compiled component code renders into."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List

from .dom_model import (
    SyntheticNode,
    append_child,
    comment_node,
    element,
    fragment,
    insert_before,
    set_attribute,
    text_content,
    text_node,
)

logger = logging.getLogger(__name__)


@dataclass
class DocumentEmulator:
    """Node factory and mutation API addressed by integer handles.

    Scripts running in the interpreter only ever hold handles; the nodes
    themselves live here. One emulator serves exactly one render batch.
    """

    root: SyntheticNode = field(default_factory=lambda: element("div"))
    styles: Dict[str | None, str] = field(default_factory=dict)
    _nodes: List[SyntheticNode] = field(default_factory=list, init=False, repr=False)
    _handles: Dict[SyntheticNode, int] = field(default_factory=dict, init=False, repr=False)

    def __post_init__(self) -> None:
        self._register(self.root)

    def _register(self, node: SyntheticNode) -> int:
        self._nodes.append(node)
        handle = len(self._nodes) - 1
        self._handles[node] = handle
        return handle

    def node(self, handle: int) -> SyntheticNode:
        if not isinstance(handle, int) or handle < 0 or handle >= len(self._nodes):
            raise KeyError(f"unknown node handle: {handle!r}")
        return self._nodes[handle]

    def parent_of(self, handle: int) -> int | None:
        """Handle of the node's parent, or ``None`` while it is detached."""
        parent = self.node(handle).parent
        if parent is None:
            return None
        return self._handles[parent]

    def create_element(self, tag: str) -> int:
        return self._register(element(tag))

    def create_text_node(self, text: str) -> int:
        return self._register(text_node(text))

    def create_comment(self, text: str) -> int:
        return self._register(comment_node(text))

    def create_document_fragment(self) -> int:
        return self._register(fragment())

    def create_target(self) -> int:
        """Register an empty ``div`` container used as a component mount point."""
        return self._register(element("div"))

    def append_child(self, parent: int, child: int) -> None:
        append_child(self.node(parent), self.node(child))

    def insert_before(self, parent: int, node: int, reference: int | None) -> None:
        ref_node = self.node(reference) if reference is not None else None
        insert_before(self.node(parent), self.node(node), ref_node)

    def set_attribute(self, node: int, name: str, value: str | None) -> None:
        set_attribute(self.node(node), name, value)

    def query_selector(self, *_selectors: object) -> int:
        # Every query resolves to the batch root; selectors are not matched.
        return 0

    def head_append(self, key: str | None, node: int, text: str | None = None) -> None:
        """Route a style node appended to ``document.head`` into the style buffer."""
        if text is None:
            text = text_content(self.node(node))
        if key is None:
            logger.debug("style text emitted outside of any component: %d chars", len(text))
        self.styles[key] = self.styles.get(key, "") + text


__all__ = ["DocumentEmulator"]
