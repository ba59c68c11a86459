# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""In-memory DurableStorage."""

from __future__ import annotations

from ..exceptions import StorageQuotaError
from .base import DurableStorage


def entry_size(key: str, value: str) -> int:
    """Size charged against a quota for one entry."""
    return len(key) + len(value)


class MemoryStorage(DurableStorage):
    """Dict-backed storage with an optional quota.

    Example:
        >>> storage = MemoryStorage(quota=64)
        >>> storage.set('ofb_full_/x', '1')
        >>> storage.get('ofb_full_/x')
        '1'
    """

    def __init__(
        self, data: dict[str, str] | None = None, quota: int | None = None
    ) -> None:
        """Initialize a MemoryStorage.

        Args:
            data: Optional initial entries.
            quota: Maximum total size (key plus value characters).
                None means unbounded.
        """
        self._data: dict[str, str] = dict(data or {})
        self.quota = quota

    def __repr__(self) -> str:
        return f"MemoryStorage({len(self._data)} keys)"

    @property
    def size(self) -> int:
        """Current total size of all entries."""
        return sum(entry_size(k, v) for k, v in self._data.items())

    def set(self, key: str, value: str) -> None:
        if self.quota is not None:
            old = self._data.get(key)
            size = self.size + entry_size(key, value)
            if old is not None:
                size -= entry_size(key, old)
            if size > self.quota:
                raise StorageQuotaError(key, size, self.quota)
        self._data[key] = value

    def get(self, key: str, default: str | None = None) -> str | None:
        return self._data.get(key, default)

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._data)

    def as_dict(self) -> dict[str, str]:
        """Return a copy of all entries."""
        return dict(self._data)
