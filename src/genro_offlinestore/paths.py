# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Path and storage-key naming conventions.

Every durable-storage entry written by the library is keyed as::

    <namespace><kind>_<path>

where ``kind`` is ``partial`` (one flattened fragment) or ``full`` (the
marker of a completed, restorable root) and ``path`` is the ``/``-joined
location string produced by the remote store.

Example:
    >>> storage_key('ofb_', PARTIAL, '/x/b/c')
    'ofb_partial_/x/b/c'
    >>> parse_key('ofb_', 'ofb_full_/x')
    ('full', '/x')
"""

from __future__ import annotations

DEFAULT_NAMESPACE = 'ofb_'

PARTIAL = 'partial'
FULL = 'full'
KINDS = (PARTIAL, FULL)

PRIORITY_KEY = '.priority'
VALUE_KEY = '.value'
RESERVED_KEYS = frozenset((PRIORITY_KEY, VALUE_KEY))

SEPARATOR = '/'


def split_path(path: str) -> list[str]:
    """Return the non-empty segments of a path ('' and '/' give [])."""
    return [segment for segment in path.split(SEPARATOR) if segment]


def join_path(parent: str, child: str) -> str:
    """Append a child name (or relative path) to a parent path.

    Example:
        >>> join_path('/x', 'b')
        '/x/b'
        >>> join_path('/', 'b')
        '/b'
    """
    if not child:
        return parent
    return parent.rstrip(SEPARATOR) + SEPARATOR + child.lstrip(SEPARATOR)


def path_depth(path: str) -> int:
    """Number of segments of a path; the root path has depth 0."""
    return len(split_path(path))


def is_within(path: str, root: str) -> bool:
    """True if path is root itself or lies below it.

    Segment boundaries are respected: '/xy' is not within '/x'.
    """
    if path == root:
        return True
    return path.startswith(root.rstrip(SEPARATOR) + SEPARATOR)


def relative_segments(path: str, root: str) -> list[str]:
    """Segments of path below root. path must satisfy is_within(path, root)."""
    return split_path(path[len(root):])


def kind_prefix(namespace: str, kind: str) -> str:
    """Common prefix of every key of the given kind."""
    return f"{namespace}{kind}_"


def storage_key(namespace: str, kind: str, path: str) -> str:
    """Build the durable-storage key for a path.

    Raises:
        ValueError: If kind is not 'partial' or 'full'.
    """
    if kind not in KINDS:
        raise ValueError(f"Unknown entry kind '{kind}', expected one of {KINDS}")
    return kind_prefix(namespace, kind) + path


def parse_key(namespace: str, key: str) -> tuple[str, str] | None:
    """Split a storage key into (kind, path).

    Returns:
        The (kind, path) tuple, or None for keys outside the namespace
        or of an unknown kind.
    """
    for kind in KINDS:
        prefix = kind_prefix(namespace, kind)
        if key.startswith(prefix):
            return kind, key[len(prefix):]
    return None
