"""Feasibility bounds and tolerance helpers."""

from __future__ import annotations

from collections.abc import Sequence

from .models import ItemPool


def calculate_min_max_sums(pool: ItemPool, sorted_indices: Sequence[int], count: int) -> tuple[int, int]:
    """Return the sums of the ``count`` smallest and largest durations.

    ``sorted_indices`` must already be ordered by ascending duration. When
    ``count`` exceeds the number of indices every index is summed.
    """
    if not sorted_indices or count <= 0:
        return (0, 0)

    min_sum = sum(pool.duration(index) for index in sorted_indices[:count])
    max_sum = sum(pool.duration(index) for index in list(reversed(sorted_indices))[:count])
    return (min_sum, max_sum)


def feasible_range(pool: ItemPool, count: int, indices: Sequence[int] | None = None) -> tuple[int, int]:
    """Return the achievable ``(min_sum, max_sum)`` for ``count`` items of the pool."""
    if len(pool) == 0 or count <= 0:
        return (0, 0)
    return calculate_min_max_sums(pool, pool.sorted_indices(indices), count)


def subset_sum(pool: ItemPool, subset: Sequence[int]) -> int:
    return sum(pool.duration(index) for index in subset)


def accuracy_percent(total: int, target: int) -> float:
    """Return ``total / target`` as a percentage; 100.0 means an exact hit.

    A zero target is hit exactly by a zero total and missed by anything else.
    """
    if target == 0:
        return 100.0 if total == 0 else float("inf")
    return total / target * 100.0


def within_tolerance(value_pct: float, tolerance_percent: float) -> bool:
    return (100.0 - tolerance_percent) <= value_pct <= (100.0 + tolerance_percent)
