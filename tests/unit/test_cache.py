from __future__ import annotations

from randomkarma.sweep.cache import CacheEntry, ResultCache


def test_put_get_and_clear():
    cache = ResultCache()
    entry = CacheEntry.build([[2, 0], [1, 3]], 0.25, 60)

    cache.put(60, 2, 2, entry)

    assert cache.contains(60, 2, 2)
    assert not cache.contains(60, 2, 3)
    assert cache.get(60, 2, 2) == entry
    assert cache.get(61, 2, 2) is None
    assert len(cache) == 1

    cache.clear()
    assert len(cache) == 0


def test_entry_build_freezes_subsets():
    entry = CacheEntry.build([[2, 0], [1, 3]], 1, 60)

    assert entry.subsets == ((2, 0), (1, 3))
    assert isinstance(entry.similarity, float)


def test_count_cached_counts_slider_positions():
    cache = ResultCache()
    entry = CacheEntry.build([[0]], 0.0, 0)
    cache.put(0, 3, 2, entry)
    cache.put(990, 3, 2, entry)
    cache.put(505, 3, 2, entry)

    assert cache.count_cached(0, 990, 10, 3, 2) == 2
    assert cache.count_cached(0, 990, 10, 4, 2) == 0
