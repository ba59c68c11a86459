# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Remote store contract.

The offline cache never talks to a network client directly: it consumes
refs and snapshots shaped like the protocols below. MemoryDatabase
implements them in process; adapters for real clients only need the same
method names.
"""

from __future__ import annotations

from typing import Any, Callable, Protocol

SnapshotCallback = Callable[[Any], Any]
CompletionCallback = Callable[[Exception | None], Any]

VALUE_EVENT = 'value'


class Snapshot(Protocol):
    """Read-only view of a location at one point in time."""

    path: str
    key: str | None

    def val(self) -> Any: ...

    def export_val(self) -> Any: ...

    def get_priority(self) -> Any: ...


class RemoteRef(Protocol):
    """Handle to one location of the remote store."""

    path: str

    @property
    def root(self) -> RemoteRef: ...

    @property
    def parent(self) -> RemoteRef | None: ...

    def child(self, path: str) -> RemoteRef: ...

    def on(
        self,
        event_type: str,
        callback: SnapshotCallback,
        cancel_callback: Callable[[Exception], Any] | None = None,
        context: Any = None,
    ) -> SnapshotCallback: ...

    def once(
        self,
        event_type: str,
        callback: SnapshotCallback,
        cancel_callback: Callable[[Exception], Any] | None = None,
        context: Any = None,
    ) -> SnapshotCallback: ...

    def off(
        self, event_type: str | None = None, callback: SnapshotCallback | None = None
    ) -> None: ...

    def set(self, value: Any, on_complete: CompletionCallback | None = None) -> None: ...

    def set_priority(
        self, priority: Any, on_complete: CompletionCallback | None = None
    ) -> None: ...
