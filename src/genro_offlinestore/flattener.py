# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Flattener - persist an exported tree as path-keyed fragments.

Each meaningful node of an exported value becomes one 'partial' entry keyed
by its full path:

    ========================================  ==============================
    node                                      fragment
    ========================================  ==============================
    primitive                                 the primitive
    {'.value': v}                             v
    {'.priority': p, '.value': v}             {'.priority': p, '.value': v}
    {'.priority': p, <children>}              {'.priority': p}, then children
    {'.priority': p}                          {'.priority': p}
    {<children>}                              nothing, then children
    ========================================  ==============================

A 'full' entry then marks the root path as restorable.

Example:
    >>> flattener = Flattener(MemoryStorage())
    >>> flattener.store('/x', {'.priority': 5, 'a': 1})
    >>> sorted(flattener.storage.keys())
    ['ofb_full_/x', 'ofb_partial_/x', 'ofb_partial_/x/a']
"""

from __future__ import annotations

import json
import logging
from typing import Any, Iterator

from .paths import (
    DEFAULT_NAMESPACE,
    FULL,
    PARTIAL,
    PRIORITY_KEY,
    VALUE_KEY,
    is_within,
    join_path,
    kind_prefix,
    storage_key,
)
from .storage import DurableStorage
from .tree import is_primitive, iter_children

logger = logging.getLogger(__name__)

FULL_SENTINEL = '1'


def _check_primitive(value: Any, path: str, field: str) -> None:
    if value is not None and not is_primitive(value):
        raise TypeError(
            f"{field} at '{path}' must be a primitive, not {type(value).__name__}"
        )


class Flattener:
    """Writes exported tree values into durable storage."""

    def __init__(
        self, storage: DurableStorage, namespace: str = DEFAULT_NAMESPACE
    ) -> None:
        self.storage = storage
        self.namespace = namespace

    def fragments(self, path: str, value: Any) -> Iterator[tuple[str, Any]]:
        """Yield (path, fragment) for every node needing its own entry.

        Args:
            path: Path of value.
            value: Exported tree value.

        Raises:
            TypeError: If value contains something other than dicts and
                primitives.
        """
        if is_primitive(value):
            yield path, value
            return
        if not isinstance(value, dict):
            raise TypeError(
                f"Tree value at '{path}' must be dict or primitive, "
                f"not {type(value).__name__}"
            )

        has_priority = PRIORITY_KEY in value
        has_value = VALUE_KEY in value
        if has_priority:
            _check_primitive(value[PRIORITY_KEY], path, PRIORITY_KEY)
        if has_value:
            _check_primitive(value[VALUE_KEY], path, VALUE_KEY)
        children = [(k, v) for k, v in iter_children(value) if v is not None]

        if not children:
            if has_priority and has_value:
                yield path, {
                    PRIORITY_KEY: value[PRIORITY_KEY],
                    VALUE_KEY: value[VALUE_KEY],
                }
            elif has_value:
                yield path, value[VALUE_KEY]
            elif has_priority:
                yield path, {PRIORITY_KEY: value[PRIORITY_KEY]}
            return

        # A value next to children is carried by the children alone.
        if has_priority:
            yield path, {PRIORITY_KEY: value[PRIORITY_KEY]}
        for name, child in children:
            yield from self.fragments(join_path(path, name), child)

    def invalidate(self, root_path: str) -> int:
        """Remove every partial entry at or below root_path.

        Returns:
            Number of removed entries.
        """
        prefix = kind_prefix(self.namespace, PARTIAL)
        removed = 0
        for key in self.storage.iter_prefixed(prefix + root_path):
            if is_within(key[len(prefix):], root_path):
                self.storage.remove(key)
                removed += 1
        return removed

    def store(self, root_path: str, value: Any) -> None:
        """Flatten value into storage under root_path.

        Stale fragments of a previous store at root_path (or an ancestor
        store covering it) are removed first, so children deleted on the
        server disappear from storage too. A None value is a no-op.

        Raises:
            TypeError: If value is not a valid tree; storage is untouched.
            StorageQuotaError: If storage fills up mid-way. Fragments already
                written stay, the root is not marked full.
        """
        if value is None:
            logger.debug('Nothing to store at %s', root_path)
            return

        entries = list(self.fragments(root_path, value))
        removed = self.invalidate(root_path)
        for path, fragment in entries:
            self.storage.set(
                storage_key(self.namespace, PARTIAL, path), json.dumps(fragment)
            )
        self.storage.set(storage_key(self.namespace, FULL, root_path), FULL_SENTINEL)
        logger.debug(
            'Stored %d fragments at %s (%d stale removed)',
            len(entries), root_path, removed,
        )

    def store_snapshot(self, snapshot: Any) -> None:
        """Store the exported value of a remote snapshot at its path."""
        self.store(snapshot.path, snapshot.export_val())
