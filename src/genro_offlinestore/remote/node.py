# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""MemoryNode - one location of the in-memory remote tree."""

from __future__ import annotations

from typing import Any

from ..paths import PRIORITY_KEY, VALUE_KEY


class MemoryNode:
    """A node in a MemoryDatabase tree.

    Each node has:
    - label: The node's name within its parent ('' for the root)
    - value: A primitive for leaves, None for branches
    - priority: Optional sort priority
    - children: Child nodes by label
    - parent: The containing node, None for the root

    Example:
        >>> node = MemoryNode('alice', value=10, priority=1)
        >>> node.export()
        {'.priority': 1, '.value': 10}
    """

    __slots__ = ('label', 'value', 'priority', 'children', 'parent')

    def __init__(
        self,
        label: str,
        value: Any = None,
        priority: Any = None,
        parent: MemoryNode | None = None,
    ) -> None:
        self.label = label
        self.value = value
        self.priority = priority
        self.children: dict[str, MemoryNode] = {}
        self.parent = parent

    def __repr__(self) -> str:
        if self.is_branch:
            return f"MemoryNode({self.label!r}, children={list(self.children)})"
        return f"MemoryNode({self.label!r}, value={self.value!r})"

    @property
    def is_branch(self) -> bool:
        """True if this node has children."""
        return bool(self.children)

    @property
    def is_leaf(self) -> bool:
        """True if this node holds a primitive value."""
        return not self.children

    @property
    def is_empty(self) -> bool:
        """True if the node holds no data at all."""
        return self.value is None and not self.children

    def val(self) -> Any:
        """Plain value, without priorities. None for empty nodes."""
        if self.children:
            return {label: child.val() for label, child in self.children.items()}
        return self.value

    def export(self) -> Any:
        """Exported value, priorities included under '.priority'."""
        if self.children:
            result: dict[str, Any] = {}
            if self.priority is not None:
                result[PRIORITY_KEY] = self.priority
            for label, child in self.children.items():
                result[label] = child.export()
            return result
        if self.priority is not None and self.value is not None:
            return {PRIORITY_KEY: self.priority, VALUE_KEY: self.value}
        return self.value
