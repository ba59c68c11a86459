# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""DurableStorage persisted to a single JSON file.

The whole key space is kept in memory and the file is rewritten after
every mutation, through a temporary file renamed over the target so a
crash never leaves a truncated file behind.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path

from ..exceptions import DecodeError, StorageQuotaError
from .base import DurableStorage
from .memory import entry_size

logger = logging.getLogger(__name__)


class JsonFileStorage(DurableStorage):
    """File-backed storage surviving process restarts.

    Example:
        >>> storage = JsonFileStorage('/tmp/offline.json')
        >>> storage.set('ofb_full_/x', '1')
        >>> JsonFileStorage('/tmp/offline.json').get('ofb_full_/x')
        '1'
    """

    def __init__(self, path: str | os.PathLike, quota: int | None = None) -> None:
        """Initialize a JsonFileStorage, loading the file if present.

        Args:
            path: Location of the JSON file. Parent directories are created.
            quota: Maximum total size (key plus value characters).
                None means unbounded.

        Raises:
            DecodeError: If the file exists but is not a JSON object of strings.
        """
        self.path = Path(path)
        self.quota = quota
        self._data: dict[str, str] = self._load()

    def __repr__(self) -> str:
        return f"JsonFileStorage({str(self.path)!r}, {len(self._data)} keys)"

    def _load(self) -> dict[str, str]:
        if not self.path.exists():
            logger.debug('Storage file %s does not exist yet', self.path)
            return {}
        text = self.path.read_text(encoding='utf-8')
        try:
            data = json.loads(text) if text.strip() else {}
        except json.JSONDecodeError as exc:
            raise DecodeError(str(self.path), str(exc)) from exc
        if not isinstance(data, dict) or not all(
            isinstance(v, str) for v in data.values()
        ):
            raise DecodeError(str(self.path), "expected an object of strings")
        logger.debug('Loaded %d keys from %s', len(data), self.path)
        return data

    def _flush(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=self.path.parent, prefix=self.path.name, suffix='.tmp'
        )
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                json.dump(self._data, f)
            os.replace(tmp_name, self.path)
        except BaseException:
            os.unlink(tmp_name)
            raise

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
        self._flush()

    def get(self, key: str, default: str | None = None) -> str | None:
        return self._data.get(key, default)

    def remove(self, key: str) -> None:
        if self._data.pop(key, None) is not None:
            self._flush()

    def keys(self) -> list[str]:
        return list(self._data)
