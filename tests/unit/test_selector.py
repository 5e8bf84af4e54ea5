from __future__ import annotations

import numpy as np
import pytest

from randomkarma.engine.models import ItemPool
from randomkarma.engine.selector import CandidateSelector, find_closest_index


def _selector(durations: list[int], seed: int = 0) -> tuple[ItemPool, CandidateSelector]:
    pool = ItemPool.from_durations(durations)
    return pool, CandidateSelector(pool, np.random.default_rng(seed))


def test_find_closest_index_exact_and_edges():
    pool = ItemPool.from_durations([10, 20, 30, 40])
    ordered = pool.sorted_indices()

    assert find_closest_index(pool, ordered, 30) == 2
    assert find_closest_index(pool, ordered, 5) == 0
    assert find_closest_index(pool, ordered, 100) == 3
    assert find_closest_index(pool, [1], 1000) == 1


def test_find_closest_index_prefers_lower_on_tie():
    pool = ItemPool.from_durations([10, 20, 30, 40])

    assert find_closest_index(pool, pool.sorted_indices(), 25) == 1


def test_find_closest_index_rejects_empty_candidates():
    pool = ItemPool.from_durations([10])

    with pytest.raises(ValueError):
        find_closest_index(pool, [], 10)


def test_pick_samples_only_inside_reachable_window():
    pool, selector = _selector([10, 20, 30, 40, 50])

    for _ in range(20):
        chosen = selector.pick(
            pool.sorted_indices(),
            previously_selected=(),
            selected=[],
            current_sum=0,
            target=100,
            remaining_needed=2,
            using_previous=False,
        )
        assert chosen == 4
    assert selector.backtracks == 0


def test_pick_falls_back_when_window_is_empty():
    pool, selector = _selector([10, 20])

    chosen = selector.pick(
        pool.sorted_indices(),
        previously_selected=(),
        selected=[],
        current_sum=0,
        target=1000,
        remaining_needed=2,
        using_previous=False,
    )

    assert chosen == 1
    assert selector.backtracks == 1


def test_pick_last_returns_exact_remainder():
    pool, selector = _selector([10, 20, 30])

    chosen = selector.pick_last(
        pool.sorted_indices(),
        previously_selected=(),
        selected=[],
        current_sum=50,
        target=80,
        tolerance_percent=0.5,
    )

    assert chosen == 2


def test_pick_last_uses_fallback_reuse_when_outside_tolerance():
    pool, selector = _selector([10, 20, 30, 140])

    chosen = selector.pick_last(
        [0, 1, 2],
        previously_selected={3},
        selected=[],
        current_sum=50,
        target=200,
        tolerance_percent=0.5,
    )

    assert chosen == 3


def test_fallback_prefers_strictly_closer_previous_index():
    pool, selector = _selector([10, 50, 100])
    kwargs = dict(selected=[], current_sum=0, target=200, remaining_needed=2)

    assert selector.fallback([0, 1], previously_selected={2}, using_previous=False, **kwargs) == (2, True)
    assert selector.fallback([0, 1], previously_selected={2}, using_previous=True, **kwargs) == (1, False)
    assert selector.fallback([0, 1], previously_selected=set(), using_previous=False, **kwargs) == (1, False)


def test_fallback_skips_previous_indices_already_in_subset():
    pool, selector = _selector([10, 50, 100])

    chosen = selector.fallback(
        [0, 1],
        previously_selected={2},
        selected=[2],
        current_sum=0,
        target=200,
        remaining_needed=2,
        using_previous=False,
    )

    assert chosen == (1, False)


def test_pick_favours_durations_near_ideal_average():
    pool, selector = _selector([10, 50, 51, 90, 100], seed=2024)
    counts = {index: 0 for index in range(5)}

    for _ in range(4000):
        chosen = selector.pick(
            pool.sorted_indices(),
            previously_selected=(),
            selected=[],
            current_sum=0,
            target=100,
            remaining_needed=2,
            using_previous=False,
        )
        counts[chosen] += 1

    # weights 1/41, 1, 1/2, 1/41 around the ideal average of 50
    assert counts[4] == 0
    assert counts[1] > counts[2]
    assert counts[2] > counts[0]
    assert counts[2] > counts[3]
    assert counts[1] > 2000
