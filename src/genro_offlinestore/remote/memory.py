# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""MemoryDatabase - an in-process tree store with realtime subscriptions.

MemoryDatabase implements the remote store contract without a network: a
tree of MemoryNode instances addressed by '/'-separated paths, per-node
priorities, and synchronous 'value' event delivery. It serves as a
stand-in server for tests, demos and local development.

Semantics follow a realtime tree database:
    - set(value) replaces the whole location, priorities included
    - setting None or an empty dict removes the location
    - '.priority' and '.value' keys inside written dicts set metadata
    - set_priority() on a missing location fails through on_complete
    - a 'value' subscriber receives the current value on registration and
      again each time its location, an ancestor or a descendant changes

Example:
    >>> db = MemoryDatabase()
    >>> scores = db.ref('scores')
    >>> scores.on('value', lambda snap: print(snap.val()))
    None
    >>> scores.child('alice').set(10)
    {'alice': 10}
"""

from __future__ import annotations

import logging
from typing import Any, Callable

from ..exceptions import RemoteWriteError
from ..paths import (
    PRIORITY_KEY,
    SEPARATOR,
    VALUE_KEY,
    is_within,
    join_path,
    split_path,
)
from ..tree import is_primitive, iter_children, has_children, to_plain
from .base import VALUE_EVENT, CompletionCallback, SnapshotCallback
from .node import MemoryNode

logger = logging.getLogger(__name__)

EVENT_TYPES = (VALUE_EVENT,)


def normalize_path(path: str) -> str:
    """Canonical absolute form of a path: '/a/b', or '/' for the root."""
    return SEPARATOR + SEPARATOR.join(split_path(path))


def _check_event_type(event_type: str) -> None:
    if event_type not in EVENT_TYPES:
        raise ValueError(
            f"Unsupported event type '{event_type}', expected one of {EVENT_TYPES}"
        )


class _Subscription:
    __slots__ = ('event_type', 'callback', 'cancel_callback', 'context')

    def __init__(
        self,
        event_type: str,
        callback: SnapshotCallback,
        cancel_callback: Callable[[Exception], Any] | None,
        context: Any,
    ) -> None:
        self.event_type = event_type
        self.callback = callback
        self.cancel_callback = cancel_callback
        self.context = context


class MemorySnapshot:
    """Immutable view of a location, as delivered to subscribers.

    Attributes:
        ref: The MemoryRef the snapshot was taken at.
    """

    __slots__ = ('ref', '_exported')

    def __init__(self, ref: MemoryRef, exported: Any) -> None:
        self.ref = ref
        self._exported = exported

    def __repr__(self) -> str:
        return f"MemorySnapshot({self.path!r}, {self._exported!r})"

    @property
    def path(self) -> str:
        return self.ref.path

    @property
    def key(self) -> str | None:
        return self.ref.key

    def exists(self) -> bool:
        return self._exported is not None

    def val(self) -> Any:
        """Plain value without priorities."""
        return to_plain(self._exported)

    def export_val(self) -> Any:
        """Value with priorities under '.priority' keys."""
        return self._exported

    def get_priority(self) -> Any:
        if isinstance(self._exported, dict):
            return self._exported.get(PRIORITY_KEY)
        return None

    def child(self, path: str) -> MemorySnapshot:
        """Snapshot of a descendant location, taken from this one."""
        exported = self._exported
        for segment in split_path(path):
            exported = exported.get(segment) if isinstance(exported, dict) else None
        return MemorySnapshot(self.ref.child(path), exported)


class MemoryRef:
    """Handle to one location of a MemoryDatabase.

    Attributes:
        db: The owning database.
        path: Normalized absolute path ('/' for the root).
    """

    __slots__ = ('db', 'path')

    def __init__(self, db: MemoryDatabase, path: str = '') -> None:
        self.db = db
        self.path = normalize_path(path)

    def __repr__(self) -> str:
        return f"MemoryRef({self.path!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, MemoryRef):
            return self.db is other.db and self.path == other.path
        return NotImplemented

    def __hash__(self) -> int:
        return hash((id(self.db), self.path))

    # ==================== Navigation ====================

    @property
    def key(self) -> str | None:
        """Last path segment, None for the root."""
        segments = split_path(self.path)
        return segments[-1] if segments else None

    @property
    def root(self) -> MemoryRef:
        return MemoryRef(self.db)

    @property
    def parent(self) -> MemoryRef | None:
        segments = split_path(self.path)
        if not segments:
            return None
        return MemoryRef(self.db, SEPARATOR.join(segments[:-1]))

    def child(self, path: str) -> MemoryRef:
        return MemoryRef(self.db, join_path(self.path, path))

    # ==================== Reads ====================

    def get(self) -> MemorySnapshot:
        """Current snapshot of this location."""
        return MemorySnapshot(self, self.db.export(self.path))

    def on(
        self,
        event_type: str,
        callback: SnapshotCallback,
        cancel_callback: Callable[[Exception], Any] | None = None,
        context: Any = None,
    ) -> SnapshotCallback:
        return self.db.subscribe(self.path, event_type, callback, cancel_callback, context)

    def once(
        self,
        event_type: str,
        callback: SnapshotCallback,
        cancel_callback: Callable[[Exception], Any] | None = None,
        context: Any = None,
    ) -> SnapshotCallback:
        _check_event_type(event_type)
        callback(self.get())
        return callback

    def off(
        self, event_type: str | None = None, callback: SnapshotCallback | None = None
    ) -> None:
        self.db.unsubscribe(self.path, event_type, callback)

    # ==================== Writes ====================

    def set(self, value: Any, on_complete: CompletionCallback | None = None) -> None:
        self.db.write(self.path, value, on_complete)

    def set_priority(
        self, priority: Any, on_complete: CompletionCallback | None = None
    ) -> None:
        self.db.write_priority(self.path, priority, on_complete)

    def remove(self, on_complete: CompletionCallback | None = None) -> None:
        self.db.write(self.path, None, on_complete)


class MemoryDatabase:
    """In-memory remote store.

    Example:
        >>> db = MemoryDatabase({'config': {'.priority': 1, 'debug': True}})
        >>> db.ref('config/debug').get().val()
        True
    """

    def __init__(self, source: dict[str, Any] | None = None) -> None:
        """Initialize a MemoryDatabase.

        Args:
            source: Optional initial exported value for the root.
        """
        self._root = MemoryNode('')
        self._subscribers: dict[str, list[_Subscription]] = {}
        if source is not None:
            self._root = self._build('', source, None)

    def __repr__(self) -> str:
        return f"MemoryDatabase({list(self._root.children)})"

    def ref(self, path: str = '') -> MemoryRef:
        return MemoryRef(self, path)

    # ==================== Tree access ====================

    def _find(self, path: str) -> MemoryNode | None:
        node = self._root
        for segment in split_path(path):
            node = node.children.get(segment)
            if node is None:
                return None
        return node

    def _htraverse(self, path: str) -> tuple[MemoryNode | None, str]:
        """Create the ancestors of path as needed.

        Returns:
            Tuple of (parent_node, final_label); (None, '') for the root.
        """
        segments = split_path(path)
        if not segments:
            return None, ''
        current = self._root
        for segment in segments[:-1]:
            node = current.children.get(segment)
            if node is None:
                node = MemoryNode(segment, parent=current)
                current.children[segment] = node
            # A leaf gains children, so it stops being a leaf
            node.value = None
            current = node
        current.value = None
        return current, segments[-1]

    def _build(self, label: str, value: Any, parent: MemoryNode | None) -> MemoryNode:
        """Build a detached subtree from an exported or plain value.

        Raises:
            TypeError: If value contains something other than dicts and
                primitives.
        """
        node = MemoryNode(label, parent=parent)
        if isinstance(value, dict):
            node.priority = value.get(PRIORITY_KEY)
            if VALUE_KEY in value and not has_children(value):
                node.value = value[VALUE_KEY]
            for name, child in iter_children(value):
                if child is None:
                    continue
                child_node = self._build(name, child, node)
                if not child_node.is_empty:
                    node.children[name] = child_node
        elif is_primitive(value):
            node.value = value
        elif value is not None:
            raise TypeError(
                f"Cannot store {type(value).__name__} at '{label or SEPARATOR}'"
            )
        return node

    def _prune(self, node: MemoryNode | None) -> None:
        """Remove empty nodes walking up from node."""
        while node is not None and node.parent is not None and node.is_empty:
            parent = node.parent
            del parent.children[node.label]
            node = parent

    def export(self, path: str) -> Any:
        """Exported value at path, None if the location is empty."""
        node = self._find(path)
        if node is None or node.is_empty:
            return None
        return node.export()

    # ==================== Writes ====================

    def write(
        self, path: str, value: Any, on_complete: CompletionCallback | None = None
    ) -> None:
        """Replace the location at path with value (None removes it)."""
        path = normalize_path(path)
        segments = split_path(path)
        new_node = self._build(segments[-1] if segments else '', value, None)
        before = self._capture(path)

        if new_node.is_empty:
            existing = self._find(path)
            if existing is None:
                pass
            elif existing.parent is None:
                self._root = MemoryNode('')
            else:
                del existing.parent.children[existing.label]
                self._prune(existing.parent)
        else:
            parent, label = self._htraverse(path)
            if parent is None:
                self._root = new_node
            else:
                new_node.parent = parent
                parent.children[label] = new_node

        logger.debug('Wrote %s', path)
        _complete(on_complete, None)
        self._notify(before)

    def write_priority(
        self, path: str, priority: Any, on_complete: CompletionCallback | None = None
    ) -> None:
        """Set the priority of an existing location."""
        path = normalize_path(path)
        node = self._find(path)
        if node is None or node.is_empty:
            error = RemoteWriteError(f"Cannot set priority on missing location '{path}'")
            if on_complete is None:
                logger.warning('%s', error)
            _complete(on_complete, error)
            return
        before = self._capture(path)
        node.priority = priority
        _complete(on_complete, None)
        self._notify(before)

    # ==================== Subscriptions ====================

    def subscribe(
        self,
        path: str,
        event_type: str,
        callback: SnapshotCallback,
        cancel_callback: Callable[[Exception], Any] | None = None,
        context: Any = None,
    ) -> SnapshotCallback:
        """Register callback for path and deliver the current value to it."""
        _check_event_type(event_type)
        path = normalize_path(path)
        self._subscribers.setdefault(path, []).append(
            _Subscription(event_type, callback, cancel_callback, context)
        )
        callback(MemorySnapshot(MemoryRef(self, path), self.export(path)))
        return callback

    def unsubscribe(
        self,
        path: str,
        event_type: str | None = None,
        callback: SnapshotCallback | None = None,
    ) -> None:
        """Remove matching subscriptions at path; None matches everything."""
        path = normalize_path(path)
        remaining = [
            sub for sub in self._subscribers.get(path, [])
            if not (
                (event_type is None or sub.event_type == event_type)
                and (callback is None or sub.callback == callback)
            )
        ]
        if remaining:
            self._subscribers[path] = remaining
        else:
            self._subscribers.pop(path, None)

    def cancel(self, path: str, error: Exception) -> None:
        """Drop every subscription at path, notifying cancel callbacks."""
        for sub in self._subscribers.pop(normalize_path(path), []):
            if sub.cancel_callback is not None:
                sub.cancel_callback(error)

    def subscriptions(self, path: str) -> int:
        """Number of active subscriptions at path."""
        return len(self._subscribers.get(normalize_path(path), []))

    def _capture(self, path: str) -> dict[str, Any]:
        """Exported values of the subscribed paths a write at path can change."""
        return {
            sub_path: self.export(sub_path)
            for sub_path in self._subscribers
            if is_within(sub_path, path) or is_within(path, sub_path)
        }

    def _notify(self, before: dict[str, Any]) -> None:
        """Deliver snapshots for changed paths, deepest first."""
        changed = []
        for path, old in before.items():
            new = self.export(path)
            if new != old:
                changed.append((path, new))
        changed.sort(key=lambda item: -len(split_path(item[0])))
        for path, exported in changed:
            for sub in list(self._subscribers.get(path, [])):
                sub.callback(MemorySnapshot(MemoryRef(self, path), exported))


def _complete(on_complete: CompletionCallback | None, error: Exception | None) -> None:
    if on_complete is not None:
        on_complete(error)
