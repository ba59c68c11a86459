# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Durable key-value storage backends.

The offline cache talks to storage only through the DurableStorage
interface: synchronous set/get/remove over string keys and values, plus
enumeration of all keys.

- base: DurableStorage abstract interface
- memory: dict-backed storage, one per test or process
- jsonfile: storage persisted to a single JSON file
"""

from .base import DurableStorage
from .jsonfile import JsonFileStorage
from .memory import MemoryStorage

__all__ = ["DurableStorage", "JsonFileStorage", "MemoryStorage"]
