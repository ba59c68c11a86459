# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Tests for OfflineCache and OfflineRef."""

import pytest

from genro_offlinestore import (
    JsonFileStorage,
    MemoryDatabase,
    MemoryStorage,
    OfflineCache,
    OfflineRef,
)


class TestOfflineCache:
    """Tests for the OfflineCache facade."""

    def test_store_and_reconstitute(self):
        """Test the facade round-trips a tree."""
        cache = OfflineCache(MemoryStorage())
        cache.store('/x', {'.priority': 5, 'a': 1})
        assert cache.roots() == ['/x']
        assert cache.reconstitute('/x') == {'.priority': 5, 'a': {'.value': 1}}

    def test_clear_all(self):
        """Test clear_all removes namespace keys only."""
        storage = MemoryStorage({'session': 'abc', 'ofbX': 'other'})
        cache = OfflineCache(storage)
        cache.store('/x', {'a': 1, 'b': {'.priority': 2, 'c': 3}})
        cache.store('/y', 4)
        assert cache.clear_all() == 6
        assert not any(key.startswith('ofb_') for key in storage.keys())
        assert storage.as_dict() == {'session': 'abc', 'ofbX': 'other'}

    def test_clear_all_empty(self):
        """Test clearing an empty cache removes nothing."""
        assert OfflineCache(MemoryStorage()).clear_all() == 0

    def test_namespaces_are_isolated(self):
        """Test two caches can share one storage."""
        storage = MemoryStorage()
        first = OfflineCache(storage)
        second = OfflineCache(storage, namespace='alt_')
        first.store('/x', 1)
        second.store('/x', 2)
        second.clear_all()
        assert first.reconstitute('/x') == {'.value': 1}
        assert second.roots() == []

    def test_empty_namespace_rejected(self):
        """Test an empty namespace would claim every key."""
        with pytest.raises(ValueError, match="non-empty prefix"):
            OfflineCache(MemoryStorage(), namespace='')

    def test_namespace_is_read_only(self):
        """Test the namespace property cannot be reassigned."""
        cache = OfflineCache(MemoryStorage(), namespace='app_')
        assert cache.namespace == 'app_'
        with pytest.raises(AttributeError):
            cache.namespace = 'other_'


class TestOfflineRefSubscriptions:
    """Tests for the caching subscription wrapper."""

    def test_cached_subscription_stores_snapshots(self):
        """Test remote changes are flattened into storage."""
        db = MemoryDatabase()
        cache = OfflineCache(MemoryStorage())
        scores = OfflineRef(db.ref('scores'), cache)
        received = []
        scores.on('value', lambda snap: received.append(snap.val()), cache_offline=True)

        db.ref('scores/alice').set(10)
        db.ref('scores/bob').set({'.priority': 1, '.value': 7})

        assert received == [None, {'alice': 10}, {'alice': 10, 'bob': 7}]
        assert cache.reconstitute('/scores') == {
            'alice': {'.value': 10},
            'bob': {'.priority': 1, '.value': 7},
        }

    def test_store_happens_before_callback(self):
        """Test the snapshot is in storage when the callback runs."""
        db = MemoryDatabase({'x': 1})
        cache = OfflineCache(MemoryStorage())
        seen = []
        OfflineRef(db.ref('x'), cache).on(
            'value', lambda snap: seen.append(cache.roots()), cache_offline=True
        )
        assert seen == [['/x']]

    def test_uncached_subscription_stores_nothing(self):
        """Test cache_offline defaults to False."""
        db = MemoryDatabase({'x': 1})
        storage = MemoryStorage()
        OfflineRef(db.ref('x'), OfflineCache(storage)).on('value', lambda snap: None)
        assert len(storage) == 0

    def test_server_deletion_invalidates(self):
        """Test children removed remotely disappear from storage."""
        db = MemoryDatabase({'x': {'a': 1, 'b': 2}})
        cache = OfflineCache(MemoryStorage())
        OfflineRef(db.ref('x'), cache).on('value', lambda snap: None, cache_offline=True)
        db.ref('x/b').remove()
        assert cache.reconstitute('/x') == {'a': {'.value': 1}}

    def test_once_cached(self):
        """Test once() stores the single delivery."""
        db = MemoryDatabase({'x': {'a': 1}})
        cache = OfflineCache(MemoryStorage())
        OfflineRef(db.ref('x'), cache).once('value', lambda snap: None, cache_offline=True)
        assert cache.roots() == ['/x']
        assert db.subscriptions('/x') == 0

    def test_off_with_registered_callback(self):
        """Test the returned callback unsubscribes the wrapper."""
        db = MemoryDatabase()
        ref = OfflineRef(db.ref('x'), OfflineCache(MemoryStorage()))
        registered = ref.on('value', lambda snap: None, cache_offline=True)
        assert db.subscriptions('/x') == 1
        ref.off('value', registered)
        assert db.subscriptions('/x') == 0

    def test_cancel_callback_forwarded(self):
        """Test cancel_callback reaches the wrapped subscription."""
        db = MemoryDatabase()
        errors = []
        ref = OfflineRef(db.ref('x'), OfflineCache(MemoryStorage()))
        ref.on('value', lambda snap: None, errors.append, cache_offline=True)
        error = PermissionError('denied')
        db.cancel('/x', error)
        assert errors == [error]


class TestOfflineRefForwarding:
    """Tests for pass-through behaviour."""

    def test_attributes_forwarded(self):
        """Test unknown attributes come from the wrapped ref."""
        db = MemoryDatabase()
        ref = OfflineRef(db.ref('a/b'), OfflineCache(MemoryStorage()))
        assert ref.path == '/a/b'
        assert ref.key == 'b'
        ref.set(3)
        assert db.export('/a/b') == 3

    def test_missing_attribute_raises(self):
        """Test attributes missing on the wrapped ref raise AttributeError."""
        ref = OfflineRef(MemoryDatabase().ref(), OfflineCache(MemoryStorage()))
        with pytest.raises(AttributeError):
            ref.no_such_method

    def test_navigation_keeps_cache(self):
        """Test child, parent and root stay OfflineRefs on the same cache."""
        cache = OfflineCache(MemoryStorage())
        ref = OfflineRef(MemoryDatabase().ref('a'), cache)
        child = ref.child('b/c')
        assert isinstance(child, OfflineRef)
        assert child.cache is cache
        assert child.path == '/a/b/c'
        assert child.parent.path == '/a/b'
        assert ref.root.path == '/'
        assert ref.root.parent is None

    def test_equality(self):
        """Test OfflineRefs compare by wrapped ref and cache."""
        db = MemoryDatabase()
        cache = OfflineCache(MemoryStorage())
        assert OfflineRef(db.ref('a'), cache) == OfflineRef(db.ref('/a/'), cache)
        assert OfflineRef(db.ref('a'), cache) != OfflineRef(
            db.ref('a'), OfflineCache(MemoryStorage())
        )


class TestColdStart:
    """Tests for the full offline cycle across restarts."""

    def test_restore_from_file_after_restart(self, tmp_path):
        """Test data cached in one session seeds a fresh client."""
        storage_file = tmp_path / 'offline.json'

        server = MemoryDatabase(
            {'scores': {'.priority': 9, 'alice': {'.priority': 1, '.value': 10}, 'bob': 0}}
        )
        session = OfflineRef(server.ref('scores'), OfflineCache(JsonFileStorage(storage_file)))
        session.on('value', lambda snap: None, cache_offline=True)

        client = MemoryDatabase()
        cache = OfflineCache(JsonFileStorage(storage_file))
        restored = OfflineRef(client.ref(), cache).restore()

        assert [item.path for item in restored] == ['/scores']
        assert client.export('/scores') == server.export('/scores')
        received = []
        OfflineRef(client.ref('scores'), cache).on(
            'value', lambda snap: received.append(snap.val()), cache_offline=True
        )
        assert received == [{'alice': 10, 'bob': 0}]

    def test_clear_through_ref(self):
        """Test OfflineRef.clear() empties the cache."""
        db = MemoryDatabase({'x': 1})
        cache = OfflineCache(MemoryStorage())
        ref = OfflineRef(db.ref('x'), cache)
        ref.once('value', lambda snap: None, cache_offline=True)
        assert ref.clear() == 2
        assert cache.roots() == []
