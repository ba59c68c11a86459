# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Genro-OfflineStore - Offline caching for realtime tree databases.

Snapshots delivered to cached subscriptions are flattened into durable
key-value storage, one entry per node path. On a cold start the stored
fragments are rebuilt into trees and written back to the remote store, so
the application has data before the connection is up.

Example:
    >>> cache = OfflineCache(JsonFileStorage('offline.json'))
    >>> scores = OfflineRef(db.ref('scores'), cache)
    >>> scores.restore()                                  # cold start
    >>> scores.on('value', show, cache_offline=True)      # keep cache fresh
"""

__version__ = "0.1.0"

from .cache import OfflineCache
from .exceptions import (
    DecodeError,
    OfflineStoreError,
    RemoteWriteError,
    StorageQuotaError,
)
from .flattener import Flattener
from .paths import DEFAULT_NAMESPACE
from .reconstructor import Reconstructor, RestoreItem
from .ref import OfflineRef
from .remote import MemoryDatabase, MemoryRef, MemorySnapshot
from .storage import DurableStorage, JsonFileStorage, MemoryStorage

__all__ = [
    # Core classes
    "OfflineCache",
    "OfflineRef",
    "Flattener",
    "Reconstructor",
    "RestoreItem",
    "DEFAULT_NAMESPACE",
    # Storage
    "DurableStorage",
    "MemoryStorage",
    "JsonFileStorage",
    # Remote store
    "MemoryDatabase",
    "MemoryRef",
    "MemorySnapshot",
    # Exceptions
    "OfflineStoreError",
    "DecodeError",
    "StorageQuotaError",
    "RemoteWriteError",
]
