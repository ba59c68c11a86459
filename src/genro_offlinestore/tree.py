# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Helpers for exported tree values.

An exported tree value is either a primitive (str, int, float, bool) or a
dict whose reserved keys '.priority' and '.value' carry node metadata and
whose other keys are child names.

Example:
    >>> value = {'.priority': 5, 'a': 1, 'b': {'.priority': 2, 'c': 3}}
    >>> list(iter_children(value))
    [('a', 1), ('b', {'.priority': 2, 'c': 3})]
    >>> to_plain(value)
    {'a': 1, 'b': {'c': 3}}
"""

from __future__ import annotations

from typing import Any, Iterator

from .paths import PRIORITY_KEY, RESERVED_KEYS, VALUE_KEY, join_path

PRIMITIVE_TYPES = (str, int, float, bool)


def is_primitive(value: Any) -> bool:
    """True if value is a leaf primitive."""
    return isinstance(value, PRIMITIVE_TYPES)


def iter_children(node: dict[str, Any]) -> Iterator[tuple[str, Any]]:
    """Yield (name, value) for the real children of a node."""
    for name, child in node.items():
        if name not in RESERVED_KEYS:
            yield name, child


def has_children(node: dict[str, Any]) -> bool:
    return any(name not in RESERVED_KEYS for name in node)


def to_plain(value: Any) -> Any:
    """Strip priorities and unwrap '.value' nodes.

    Nodes left without value and children collapse to None and are
    dropped from their parent.
    """
    if not isinstance(value, dict):
        return value
    if VALUE_KEY in value and not has_children(value):
        return value[VALUE_KEY]
    result: dict[str, Any] = {}
    for name, child in iter_children(value):
        plain = to_plain(child)
        if plain is not None:
            result[name] = plain
    return result or None


def iter_priorities(value: Any, path: str) -> Iterator[tuple[str, Any]]:
    """Yield (path, priority) for every node carrying a priority.

    Parents are yielded before their children.
    """
    if not isinstance(value, dict):
        return
    if PRIORITY_KEY in value:
        yield path, value[PRIORITY_KEY]
    for name, child in iter_children(value):
        yield from iter_priorities(child, join_path(path, name))
