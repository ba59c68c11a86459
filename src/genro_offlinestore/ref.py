# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""OfflineRef - caching decorator around a remote store ref.

OfflineRef wraps a ref rather than subclassing the client's ref class. It
adds a cache_offline flag to on() and once(): when set, every delivered
snapshot is flattened into the offline cache before the application
callback runs. Everything else is forwarded to the wrapped ref.

Example:
    >>> scores = OfflineRef(db.ref('scores'), cache)
    >>> scores.on('value', show_scores, cache_offline=True)
    >>> scores.child('alice').set(12)   # forwarded to the wrapped ref
"""

from __future__ import annotations

import logging
from typing import Any, Callable

from .cache import OfflineCache
from .reconstructor import RestoreItem

logger = logging.getLogger(__name__)

SnapshotCallback = Callable[[Any], Any]


class OfflineRef:
    """A remote ref whose subscriptions can feed the offline cache.

    Attributes:
        ref: The wrapped remote ref.
        cache: The OfflineCache snapshots are stored into.
    """

    __slots__ = ('ref', 'cache')

    def __init__(self, ref: Any, cache: OfflineCache) -> None:
        self.ref = ref
        self.cache = cache

    def __repr__(self) -> str:
        return f"OfflineRef({self.ref!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, OfflineRef):
            return self.ref == other.ref and self.cache is other.cache
        return NotImplemented

    def __hash__(self) -> int:
        return hash((self.ref, id(self.cache)))

    def __getattr__(self, name: str) -> Any:
        """Forward any other attribute to the wrapped ref."""
        if name.startswith('__') or name in OfflineRef.__slots__:
            raise AttributeError(
                f"'{type(self).__name__}' object has no attribute '{name}'"
            )
        return getattr(self.ref, name)

    def _wrap(self, callback: SnapshotCallback) -> SnapshotCallback:
        cache = self.cache

        def caching_callback(snapshot: Any, *args: Any) -> Any:
            cache.store_snapshot(snapshot)
            return callback(snapshot, *args)

        caching_callback.__wrapped__ = callback  # type: ignore[attr-defined]
        return caching_callback

    def on(
        self,
        event_type: str,
        callback: SnapshotCallback,
        cancel_callback: Callable[[Exception], Any] | None = None,
        context: Any = None,
        cache_offline: bool = False,
    ) -> SnapshotCallback:
        """Subscribe to event_type, optionally caching each snapshot offline.

        Args:
            event_type: Remote event name (e.g. 'value').
            callback: Called with each snapshot.
            cancel_callback: Forwarded unchanged.
            context: Forwarded unchanged.
            cache_offline: If True, store each snapshot before calling callback.

        Returns:
            The callback actually registered, to pass to off().
        """
        registered = self._wrap(callback) if cache_offline else callback
        self.ref.on(event_type, registered, cancel_callback, context)
        if cache_offline:
            logger.debug('Caching %s events at %s', event_type, self.ref.path)
        return registered

    def once(
        self,
        event_type: str,
        callback: SnapshotCallback,
        cancel_callback: Callable[[Exception], Any] | None = None,
        context: Any = None,
        cache_offline: bool = False,
    ) -> SnapshotCallback:
        """Like on(), for a single delivery."""
        registered = self._wrap(callback) if cache_offline else callback
        self.ref.once(event_type, registered, cancel_callback, context)
        return registered

    def child(self, path: str) -> OfflineRef:
        """Return an OfflineRef for a child location, sharing the cache."""
        return OfflineRef(self.ref.child(path), self.cache)

    @property
    def root(self) -> OfflineRef:
        return OfflineRef(self.ref.root, self.cache)

    @property
    def parent(self) -> OfflineRef | None:
        parent = self.ref.parent
        return None if parent is None else OfflineRef(parent, self.cache)

    def restore(
        self,
        on_complete: Callable[[Exception | None], Any] | None = None,
        keep_alive: bool = True,
    ) -> list[RestoreItem]:
        """Re-seed the remote store from the offline cache."""
        return self.cache.restore_all(self, on_complete, keep_alive)

    def clear(self) -> int:
        """Remove every offline entry of the cache."""
        return self.cache.clear_all()
