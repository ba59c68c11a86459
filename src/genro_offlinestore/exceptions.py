# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Offline store exceptions."""

from __future__ import annotations


class OfflineStoreError(Exception):
    """Base exception for offline store errors."""

    pass


class DecodeError(OfflineStoreError, ValueError):
    """Raised when a durable-storage entry does not hold valid JSON."""

    def __init__(self, key: str, reason: str) -> None:
        self.key = key
        super().__init__(f"Cannot decode storage entry '{key}': {reason}")


class StorageQuotaError(OfflineStoreError):
    """Raised when a durable-storage write would exceed the storage quota."""

    def __init__(self, key: str, size: int, quota: int) -> None:
        self.key = key
        self.size = size
        self.quota = quota
        super().__init__(
            f"Writing '{key}' needs {size} bytes, quota is {quota}"
        )


class RemoteWriteError(OfflineStoreError):
    """Reported through on_complete when the remote store rejects a write."""

    pass
