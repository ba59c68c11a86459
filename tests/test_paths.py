# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Tests for path naming and tree helpers."""

import pytest

from genro_offlinestore.paths import (
    FULL,
    PARTIAL,
    is_within,
    join_path,
    parse_key,
    path_depth,
    relative_segments,
    split_path,
    storage_key,
)
from genro_offlinestore.tree import iter_priorities, to_plain


class TestPaths:
    """Tests for path helpers."""

    def test_split_path(self):
        """Test empty segments are dropped."""
        assert split_path('/a/b') == ['a', 'b']
        assert split_path('a//b/') == ['a', 'b']
        assert split_path('/') == []
        assert split_path('') == []

    def test_join_path(self):
        """Test joining children and relative paths."""
        assert join_path('/x', 'b') == '/x/b'
        assert join_path('/x/', '/b/c') == '/x/b/c'
        assert join_path('/', 'a') == '/a'
        assert join_path('', 'a') == '/a'
        assert join_path('/x', '') == '/x'

    def test_path_depth(self):
        """Test depth counts segments, root is 0."""
        assert path_depth('/') == 0
        assert path_depth('/a') == 1
        assert path_depth('/a/b/c') == 3

    def test_is_within(self):
        """Test containment respects segment boundaries."""
        assert is_within('/x', '/x')
        assert is_within('/x/a', '/x')
        assert is_within('/x/a', '/')
        assert is_within('/x/a', '')
        assert not is_within('/xy', '/x')
        assert not is_within('/x', '/x/a')

    def test_relative_segments(self):
        """Test segments below a root."""
        assert relative_segments('/x/b/c', '/x') == ['b', 'c']
        assert relative_segments('/x', '/x') == []
        assert relative_segments('/a', '/') == ['a']


class TestStorageKeys:
    """Tests for key naming."""

    def test_storage_key(self):
        """Test the namespace/kind/path layout."""
        assert storage_key('ofb_', PARTIAL, '/x/b') == 'ofb_partial_/x/b'
        assert storage_key('ofb_', FULL, '/x') == 'ofb_full_/x'

    def test_unknown_kind(self):
        """Test unknown kinds are rejected."""
        with pytest.raises(ValueError, match="Unknown entry kind 'half'"):
            storage_key('ofb_', 'half', '/x')

    def test_parse_key(self):
        """Test keys split back into kind and path."""
        assert parse_key('ofb_', 'ofb_partial_/x/b') == ('partial', '/x/b')
        assert parse_key('ofb_', 'ofb_full_/x') == ('full', '/x')
        assert parse_key('ofb_', 'ofb_other_/x') is None
        assert parse_key('ofb_', 'session') is None


class TestTreeHelpers:
    """Tests for exported-value helpers."""

    def test_to_plain(self):
        """Test priorities are stripped and leaves unwrapped."""
        tree = {'.priority': 5, 'a': {'.value': 1}, 'b': {'.priority': 2, 'c': {'.value': 0}}}
        assert to_plain(tree) == {'a': 1, 'b': {'c': 0}}

    def test_to_plain_drops_empty_nodes(self):
        """Test nodes with only a priority vanish."""
        assert to_plain({'a': {'.priority': 1}, 'b': 2}) == {'b': 2}
        assert to_plain({'.priority': 1}) is None
        assert to_plain({}) is None

    def test_to_plain_primitive(self):
        """Test primitives pass through."""
        assert to_plain('x') == 'x'
        assert to_plain(False) is False

    def test_iter_priorities(self):
        """Test priorities are listed parent first, zero included."""
        tree = {'.priority': 5, 'a': {'.value': 1}, 'b': {'.priority': 0, 'c': {'.value': 3}}}
        assert list(iter_priorities(tree, '/x')) == [('/x', 5), ('/x/b', 0)]
