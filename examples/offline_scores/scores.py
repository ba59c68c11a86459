# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Offline scores - didactic example of a cold start from the offline cache.

A first session watches a leaderboard with offline caching enabled. A
second session starts with an empty client, restores the cached
leaderboard from disk, and can show it before any server data arrives.

Run it twice and look at scores.json between runs:

    python examples/offline_scores/scores.py
"""

from __future__ import annotations

import logging
from pathlib import Path

from genro_offlinestore import JsonFileStorage, MemoryDatabase, OfflineCache, OfflineRef

STORAGE_FILE = Path(__file__).with_name('scores.json')


def show(snapshot):
    print(f"{snapshot.path}: {snapshot.val()}")


def online_session(cache: OfflineCache) -> None:
    """Watch the leaderboard on a live server, caching what arrives."""
    server = MemoryDatabase()
    scores = OfflineRef(server.ref('scores'), cache)
    scores.on('value', show, cache_offline=True)

    scores.child('alice').set({'.priority': 1, '.value': 120})
    scores.child('bob').set({'.priority': 2, '.value': 95})
    scores.child('carol').set(0)
    scores.child('carol').remove()


def offline_session(cache: OfflineCache) -> None:
    """Start with an empty client and restore the cached leaderboard."""
    client = MemoryDatabase()
    scores = OfflineRef(client.ref('scores'), cache)
    for item in scores.restore():
        print(f"restored {item.path}")
    scores.once('value', show)


if __name__ == '__main__':
    logging.basicConfig(level=logging.DEBUG)
    cache = OfflineCache(JsonFileStorage(STORAGE_FILE))
    if not cache.roots():
        online_session(cache)
    offline_session(cache)
