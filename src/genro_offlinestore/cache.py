# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""OfflineCache - entry point bundling store, restore and clear.

Example:
    >>> cache = OfflineCache(JsonFileStorage('offline.json'))
    >>> cache.store('/scores', {'alice': 10, 'bob': {'.priority': 1, '.value': 7}})
    >>> cache.roots()
    ['/scores']
    >>> cache.restore_all(db.ref())   # on the next cold start
    >>> cache.clear_all()
    5
"""

from __future__ import annotations

import logging
from typing import Any, Callable

from .flattener import Flattener
from .paths import DEFAULT_NAMESPACE
from .reconstructor import Reconstructor, RestoreItem
from .storage import DurableStorage

logger = logging.getLogger(__name__)


class OfflineCache:
    """Offline cache over one durable storage and namespace.

    Attributes:
        storage: The durable storage holding the fragments.
        flattener: Writes snapshots into storage.
        reconstructor: Rebuilds and restores stored trees.
    """

    def __init__(
        self, storage: DurableStorage, namespace: str = DEFAULT_NAMESPACE
    ) -> None:
        """Initialize an OfflineCache.

        Args:
            storage: Durable storage backend.
            namespace: Prefix reserved for this cache's keys. Caches with
                different namespaces can share one storage.
        """
        if not namespace:
            raise ValueError("namespace must be a non-empty prefix")
        self.storage = storage
        self._namespace = namespace
        self.flattener = Flattener(storage, namespace)
        self.reconstructor = Reconstructor(storage, namespace)

    def __repr__(self) -> str:
        return f"OfflineCache({self.storage!r}, namespace={self._namespace!r})"

    @property
    def namespace(self) -> str:
        return self._namespace

    def store(self, root_path: str, value: Any) -> None:
        """Persist an exported tree value rooted at root_path."""
        self.flattener.store(root_path, value)

    def store_snapshot(self, snapshot: Any) -> None:
        """Persist a remote snapshot at its own path."""
        self.flattener.store_snapshot(snapshot)

    def reconstitute(self, root_path: str) -> dict[str, Any]:
        """Rebuild the tree stored at root_path."""
        return self.reconstructor.reconstitute(root_path)

    def roots(self) -> list[str]:
        """Return the restorable root paths."""
        return self.reconstructor.roots()

    def restore_all(
        self,
        base_ref: Any,
        on_complete: Callable[[Exception | None], Any] | None = None,
        keep_alive: bool = True,
    ) -> list[RestoreItem]:
        """Re-seed the remote store with every stored tree.

        See Reconstructor.restore_all.
        """
        return self.reconstructor.restore_all(base_ref, on_complete, keep_alive)

    def clear_all(self) -> int:
        """Remove every key of this namespace, whatever its kind.

        Values already loaded into the remote store's own cache stay there.

        Returns:
            Number of removed keys.
        """
        removed = 0
        for key in self.storage.iter_prefixed(self._namespace):
            self.storage.remove(key)
            removed += 1
        logger.debug('Cleared %d offline keys', removed)
        return removed
