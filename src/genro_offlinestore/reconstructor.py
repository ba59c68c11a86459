# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Reconstructor - rebuild trees from stored fragments and re-seed a remote.

Restoration runs in three phases:

1. **Collect**: every root marked 'full' is rebuilt from its 'partial'
   fragments. Nothing is written yet: writes may fire cached subscriptions
   that mutate storage, which would corrupt a scan still in progress.
2. **Data pass**: each rebuilt tree is written, deepest root first.
3. **Priority pass**: priorities are set once every node exists, since the
   remote store refuses priorities on missing nodes.

Fragments are indexed once per collect: partial keys are sorted by path and
each root's fragments are found by bisection, so the key space is scanned a
single time for all roots.

Example:
    >>> reconstructor = Reconstructor(storage)
    >>> reconstructor.reconstitute('/x')
    {'.priority': 5, 'a': {'.value': 1}}
    >>> reconstructor.restore_all(db.ref())
"""

from __future__ import annotations

import json
import logging
from bisect import bisect_left
from typing import Any, Callable, Iterator, NamedTuple

from .exceptions import DecodeError
from .paths import (
    DEFAULT_NAMESPACE,
    FULL,
    PARTIAL,
    PRIORITY_KEY,
    VALUE_KEY,
    is_within,
    kind_prefix,
    path_depth,
    relative_segments,
    split_path,
)
from .storage import DurableStorage
from .tree import is_primitive, iter_priorities, to_plain

logger = logging.getLogger(__name__)

# (path, storage key) pairs sorted by path
PartialIndex = list[tuple[str, str]]


class RestoreItem(NamedTuple):
    """A rebuilt root: its path and reconstructed tree."""

    path: str
    value: dict[str, Any]


def _keep_alive(snapshot: Any) -> None:
    """Subscriber that only keeps a restored location in the remote cache."""


def ref_at(base_ref: Any, path: str) -> Any:
    """Return the ref at an absolute path, starting from any ref of the store."""
    relative = '/'.join(split_path(path))
    root = base_ref.root
    return root.child(relative) if relative else root


class Reconstructor:
    """Rebuilds trees from durable storage and writes them back."""

    def __init__(
        self, storage: DurableStorage, namespace: str = DEFAULT_NAMESPACE
    ) -> None:
        self.storage = storage
        self.namespace = namespace

    # ==================== Scanning ====================

    def roots(self) -> list[str]:
        """Return the sorted root paths marked as restorable."""
        prefix = kind_prefix(self.namespace, FULL)
        return sorted(key[len(prefix):] for key in self.storage.iter_prefixed(prefix))

    def _partial_index(self) -> PartialIndex:
        prefix = kind_prefix(self.namespace, PARTIAL)
        return sorted(
            (key[len(prefix):], key) for key in self.storage.iter_prefixed(prefix)
        )

    def _select(self, index: PartialIndex, root_path: str) -> Iterator[tuple[str, str]]:
        """Yield the index entries at or below root_path."""
        for position in range(bisect_left(index, (root_path,)), len(index)):
            path, key = index[position]
            if not path.startswith(root_path):
                break
            if is_within(path, root_path):
                yield path, key

    def _decode(self, key: str) -> Any:
        raw = self.storage.get(key)
        if raw is None:
            raise DecodeError(key, "entry vanished during reconstruction")
        try:
            fragment = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise DecodeError(key, str(exc)) from exc
        if fragment is not None and not (
            is_primitive(fragment) or isinstance(fragment, dict)
        ):
            raise DecodeError(key, f"unexpected {type(fragment).__name__} fragment")
        return fragment

    # ==================== Rebuilding ====================

    def _rebuild(
        self, root_path: str, entries: Iterator[tuple[str, str]]
    ) -> dict[str, Any]:
        tree: dict[str, Any] = {}
        for path, key in entries:
            node = tree
            for segment in relative_segments(path, root_path):
                node = node.setdefault(segment, {})
            fragment = self._decode(key)
            if isinstance(fragment, dict):
                if PRIORITY_KEY in fragment:
                    node[PRIORITY_KEY] = fragment[PRIORITY_KEY]
                if VALUE_KEY in fragment:
                    node[VALUE_KEY] = fragment[VALUE_KEY]
            else:
                node[VALUE_KEY] = fragment
        return tree

    def reconstitute(self, root_path: str) -> dict[str, Any]:
        """Rebuild the tree stored at or below root_path.

        Leaves come back wrapped as {'.value': v}; nodes that had a priority
        carry '.priority'. A node without '.priority' had none recorded.

        Returns:
            The reconstructed tree, {} if nothing is stored.

        Raises:
            DecodeError: If a fragment is not valid JSON.
        """
        return self._rebuild(root_path, self._select(self._partial_index(), root_path))

    def collect(self) -> list[RestoreItem]:
        """Rebuild every restorable root, deepest root first.

        Raises:
            DecodeError: If a fragment is not valid JSON.
        """
        index = self._partial_index()
        items = [
            RestoreItem(root, self._rebuild(root, self._select(index, root)))
            for root in self.roots()
        ]
        items.sort(key=lambda item: -path_depth(item.path))
        return items

    # ==================== Restoring ====================

    def restore_all(
        self,
        base_ref: Any,
        on_complete: Callable[[Exception | None], Any] | None = None,
        keep_alive: bool = True,
    ) -> list[RestoreItem]:
        """Write every stored tree back to the remote store.

        Args:
            base_ref: Any ref of the remote store; writes go to absolute
                paths from its root.
            on_complete: Forwarded to every set/set_priority call. Failures
                are reported there only, never retried.
            keep_alive: If True, subscribe to each restored root before
                writing so the remote store keeps it in its local cache.

        Returns:
            The restored items, in data-write order.
        """
        items = self.collect()

        restored: list[RestoreItem] = []
        for item in items:
            plain = to_plain(item.value)
            if plain is None:
                logger.warning('Skipping empty offline root %s', item.path)
                continue
            ref = ref_at(base_ref, item.path)
            if keep_alive:
                ref.on('value', _keep_alive)
            ref.set(plain, on_complete=on_complete)
            restored.append(item)

        priorities = 0
        for item in restored:
            for path, priority in iter_priorities(item.value, item.path):
                ref_at(base_ref, path).set_priority(priority, on_complete=on_complete)
                priorities += 1

        logger.debug(
            'Restored %d roots, %d priorities', len(restored), priorities
        )
        return restored
