# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""DurableStorage interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterator


class DurableStorage(ABC):
    """Synchronous string-keyed store.

    Implementations raise StorageQuotaError from set() when the write
    would exceed their capacity.
    """

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store value under key, replacing any previous value."""

    @abstractmethod
    def get(self, key: str, default: str | None = None) -> str | None:
        """Return the value under key, or default."""

    @abstractmethod
    def remove(self, key: str) -> None:
        """Delete key. Missing keys are ignored."""

    @abstractmethod
    def keys(self) -> list[str]:
        """Return a snapshot list of all keys."""

    def iter_prefixed(self, prefix: str) -> Iterator[str]:
        """Yield the keys starting with prefix.

        Iterates over a snapshot, so callers may remove keys while iterating.
        """
        for key in self.keys():
            if key.startswith(prefix):
                yield key

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None

    def __len__(self) -> int:
        return len(self.keys())
