from __future__ import annotations

import pytest

from randomkarma.engine.errors import (
    InsufficientCandidatesError,
    NotEnoughSuccessfulRunsError,
    OutsideToleranceError,
)
from randomkarma.engine.models import ItemPool
from randomkarma.engine.runner import TimeBudget, ensure_within_tolerance, perform_multiple_runs
from randomkarma.engine.similarity import compute_jaccard_similarity


class FakeClock:
    """Clock that advances a fixed number of seconds per reading."""

    def __init__(self, step: float) -> None:
        self.now = 0.0
        self.step = step

    def __call__(self) -> float:
        current = self.now
        self.now += self.step
        return current


def test_time_budget_has_floor_and_uses_clock():
    clock = FakeClock(step=0.04)
    budget = TimeBudget(10, clock=clock)

    assert budget.limit_ms == TimeBudget.MINIMUM_MS
    assert not budget.exceeded()
    assert not budget.exceeded()
    assert budget.exceeded()


def test_repeated_runs_reuse_previous_selection_when_pool_runs_dry():
    pool = ItemPool.from_durations(range(10, 101, 10))

    subsets = perform_multiple_runs(pool, 60, 3, 2, tolerance_percent=5.0, seed=1)

    assert len(subsets) == 2
    assert all(set(subset) == {0, 1, 2} for subset in subsets)
    assert compute_jaccard_similarity(subsets) == 1.0


def test_repeated_runs_consume_available_pool():
    pool = ItemPool.from_durations([10] * 12)

    subsets = perform_multiple_runs(pool, 30, 3, 4, tolerance_percent=1.0, seed=3)

    seen = [index for subset in subsets for index in subset]
    assert len(subsets) == 4
    assert sorted(seen) == list(range(12))
    assert compute_jaccard_similarity(subsets) == 0.0


def test_zero_player_count_returns_no_subsets():
    pool = ItemPool.from_durations([10, 20, 30])

    assert perform_multiple_runs(pool, 30, 2, 0, seed=0) == []


def test_negative_player_count_is_rejected():
    pool = ItemPool.from_durations([10, 20, 30])

    with pytest.raises(ValueError):
        perform_multiple_runs(pool, 30, 2, -1)


def test_timeout_before_first_subset_raises_shortfall():
    pool = ItemPool.from_durations(range(10, 101, 10))

    with pytest.raises(NotEnoughSuccessfulRunsError) as excinfo:
        perform_multiple_runs(pool, 60, 3, 2, timeout_ms=100, clock=FakeClock(step=1.0), seed=0)

    assert excinfo.value.required == 2
    assert excinfo.value.found == 0


def test_out_of_tolerance_results_retry_until_timeout():
    pool = ItemPool.from_durations([10, 20, 30])

    with pytest.raises(NotEnoughSuccessfulRunsError):
        perform_multiple_runs(pool, 60, 0, 1, timeout_ms=100, clock=FakeClock(step=0.01), seed=0)


def test_structural_search_failure_propagates():
    pool = ItemPool.from_durations([10, 20])

    with pytest.raises(InsufficientCandidatesError):
        perform_multiple_runs(pool, 30, 3, 1, seed=0)


def test_ensure_within_tolerance():
    pool = ItemPool.from_durations([10, 20])

    assert ensure_within_tolerance(pool, [0, 1], 30, 0.5) == 100.0
    with pytest.raises(OutsideToleranceError) as excinfo:
        ensure_within_tolerance(pool, [0], 100, 5.0)
    assert excinfo.value.accuracy == 10.0
