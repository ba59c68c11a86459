# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Remote store package.

- base: RemoteRef and Snapshot protocols consumed by the offline cache
- node: MemoryNode, one location of the in-memory tree
- memory: MemoryDatabase, an in-process remote store
"""

from .base import VALUE_EVENT, RemoteRef, Snapshot
from .memory import MemoryDatabase, MemoryRef, MemorySnapshot
from .node import MemoryNode

__all__ = [
    "VALUE_EVENT",
    "RemoteRef",
    "Snapshot",
    "MemoryDatabase",
    "MemoryRef",
    "MemorySnapshot",
    "MemoryNode",
]
