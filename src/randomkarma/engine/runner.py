"""Repeated subset search over a shrinking pool with a wall-clock budget."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Collection, Sequence

import numpy as np

from randomkarma.config.schema import DEFAULT_TIMEOUT_MS, DEFAULT_TOLERANCE_PERCENT

from .bounds import accuracy_percent, subset_sum, within_tolerance
from .errors import NotEnoughSuccessfulRunsError, OutsideToleranceError, SubsetError
from .models import ItemPool
from .search import find_approximate_subset

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


class TimeBudget:
    """Cooperative timeout polled by the orchestrator.

    ``clock`` returns seconds (``time.perf_counter`` by default) so tests can
    advance time deterministically.
    """

    MINIMUM_MS = 100.0

    def __init__(self, timeout_ms: float, *, clock: Clock | None = None) -> None:
        self.limit_ms = max(float(timeout_ms), self.MINIMUM_MS)
        self._clock = clock or time.perf_counter
        self._started = self._clock()

    def elapsed_ms(self) -> float:
        return (self._clock() - self._started) * 1000.0

    def exceeded(self) -> bool:
        return self.elapsed_ms() > self.limit_ms


def ensure_within_tolerance(
    pool: ItemPool,
    subset: Sequence[int],
    target: int,
    tolerance_percent: float,
) -> float:
    """Return the subset's accuracy or raise ``OutsideToleranceError``."""
    accuracy = accuracy_percent(subset_sum(pool, subset), target)
    if not within_tolerance(accuracy, tolerance_percent):
        raise OutsideToleranceError(accuracy, tolerance_percent)
    return accuracy


def perform_multiple_runs(
    pool: ItemPool,
    target: int,
    lap_count: int,
    player_count: int,
    timeout_ms: float = DEFAULT_TIMEOUT_MS,
    tolerance_percent: float = DEFAULT_TOLERANCE_PERCENT,
    *,
    rng: np.random.Generator | None = None,
    seed: int | None = None,
    clock: Clock | None = None,
) -> list[list[int]]:
    """Find ``player_count`` subsets of ``lap_count`` indices near ``target``.

    Every accepted subset is removed from the pool available to later runs and
    added to the reuse pool. A subset outside tolerance is searched again;
    any other failure, or running out of time, raises a ``SubsetError``.
    """
    if player_count < 0:
        raise ValueError("player_count must be >= 0.")

    generator = rng or np.random.default_rng(seed)
    budget = TimeBudget(timeout_ms, clock=clock)

    logger.info(
        "Performing %d runs of %d items summing to ~%d (pool size %d, budget %.0f ms)",
        player_count,
        lap_count,
        target,
        len(pool),
        budget.limit_ms,
    )

    available = pool.all_indices()
    previously_selected: set[int] = set()
    results: list[list[int]] = []

    for run in range(1, player_count + 1):
        logger.info("Run %d/%d, available pool size: %d", run, player_count, len(available))
        subset = _search_within_tolerance(
            pool,
            target,
            lap_count,
            tolerance_percent,
            available=available,
            previously_selected=previously_selected,
            budget=budget,
            rng=generator,
            run=run,
            player_count=player_count,
            found=len(results),
        )

        previously_selected.update(subset)
        taken = set(subset)
        available = [index for index in available if index not in taken]
        results.append(subset)

        total = subset_sum(pool, subset)
        logger.info(
            "Run %d/%d complete: sum = %d (%.3f%% of target)",
            run,
            player_count,
            total,
            accuracy_percent(total, target),
        )

    _log_summary(pool, results, target, lap_count, remaining=len(available))

    if len(results) < player_count:
        raise NotEnoughSuccessfulRunsError(required=player_count, found=len(results))
    return results


def _search_within_tolerance(
    pool: ItemPool,
    target: int,
    lap_count: int,
    tolerance_percent: float,
    *,
    available: Sequence[int],
    previously_selected: Collection[int],
    budget: TimeBudget,
    rng: np.random.Generator,
    run: int,
    player_count: int,
    found: int,
) -> list[int]:
    while True:
        if budget.exceeded():
            logger.warning("Timeout while searching, produced %d/%d subsets", found, player_count)
            raise NotEnoughSuccessfulRunsError(required=player_count, found=found)

        try:
            subset = find_approximate_subset(
                pool,
                target,
                lap_count,
                previously_selected,
                tolerance_percent,
                available=available,
                rng=rng,
            )
            ensure_within_tolerance(pool, subset, target, tolerance_percent)
        except OutsideToleranceError as exc:
            logger.warning("Run %d/%d: %s, retrying", run, player_count, exc)
            continue
        except SubsetError as exc:
            logger.warning("Run %d/%d: failed to find a valid subset: %s", run, player_count, exc)
            raise
        return subset


def _log_summary(
    pool: ItemPool,
    results: Sequence[Sequence[int]],
    target: int,
    lap_count: int,
    *,
    remaining: int,
) -> None:
    if not results:
        logger.warning("No successful runs completed")
        return

    sums = [subset_sum(pool, subset) for subset in results]
    total_sum = sum(sums)
    total_elements = sum(len(subset) for subset in results)
    logger.info("Completed %d runs", len(results))
    logger.info("Total items selected: %d/%d", total_elements, lap_count * len(results))
    logger.info("Total sum across all runs: %d/%d", total_sum, target * len(results))
    logger.info("Average accuracy: %.2f%%", accuracy_percent(total_sum, target * len(results)))
    logger.info("Remaining items in pool: %d", remaining)
