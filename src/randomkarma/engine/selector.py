"""Per-slot candidate choice: weighted pick, closest match and fallback."""

from __future__ import annotations

import logging
from collections.abc import Collection, Sequence

import numpy as np

from .bounds import accuracy_percent, calculate_min_max_sums, within_tolerance
from .models import ItemPool

logger = logging.getLogger(__name__)


def find_closest_index(pool: ItemPool, sorted_indices: Sequence[int], target_duration: int) -> int:
    """Binary-search the duration-sorted indices for the closest duration.

    The lower candidate wins ties. ``sorted_indices`` must not be empty.
    """
    if not sorted_indices:
        raise ValueError("Cannot find closest duration in an empty candidate list.")
    if len(sorted_indices) == 1:
        return sorted_indices[0]

    left = 0
    right = len(sorted_indices) - 1
    if target_duration <= pool.duration(sorted_indices[left]):
        return sorted_indices[left]
    if target_duration >= pool.duration(sorted_indices[right]):
        return sorted_indices[right]

    while left + 1 < right:
        mid = (left + right) // 2
        mid_duration = pool.duration(sorted_indices[mid])
        if mid_duration == target_duration:
            return sorted_indices[mid]
        if mid_duration < target_duration:
            left = mid
        else:
            right = mid

    left_diff = abs(pool.duration(sorted_indices[left]) - target_duration)
    right_diff = abs(pool.duration(sorted_indices[right]) - target_duration)
    return sorted_indices[left] if left_diff <= right_diff else sorted_indices[right]


class CandidateSelector:
    """Choose the next index of a subset under construction."""

    def __init__(self, pool: ItemPool, rng: np.random.Generator) -> None:
        self.pool = pool
        self.rng = rng
        self.backtracks = 0

    def pick(
        self,
        candidates: Sequence[int],
        *,
        previously_selected: Collection[int],
        selected: Sequence[int],
        current_sum: int,
        target: int,
        remaining_needed: int,
        using_previous: bool,
    ) -> int:
        """Sample a candidate inside the window that keeps the target reachable.

        Weights are ``1 / (|duration - ideal_average| + 1)``. When the window is
        empty the fallback strategy decides and the backtrack counter grows.
        """
        min_rest, max_rest = calculate_min_max_sums(self.pool, candidates, remaining_needed - 1)
        min_valid = max(target - (current_sum + max_rest), 0)
        max_valid = max(target - (current_sum + min_rest), 0)
        logger.debug("Valid range for next duration: [%d, %d]", min_valid, max_valid)

        filtered = [index for index in candidates if min_valid <= self.pool.duration(index) <= max_valid]
        if filtered:
            ideal_average = max(target - current_sum, 0) / remaining_needed
            durations = self.pool.durations[filtered].astype(np.float64)
            weights = 1.0 / (np.abs(durations - ideal_average) + 1.0)
            position = int(self.rng.choice(len(filtered), p=weights / weights.sum()))
            return filtered[position]

        logger.debug("No valid candidates in range, using fallback strategy")
        self.backtracks += 1
        chosen, _ = self.fallback(
            candidates,
            previously_selected=previously_selected,
            selected=selected,
            current_sum=current_sum,
            target=target,
            remaining_needed=remaining_needed,
            using_previous=using_previous,
        )
        return chosen

    def pick_last(
        self,
        candidates: Sequence[int],
        *,
        previously_selected: Collection[int],
        selected: Sequence[int],
        current_sum: int,
        target: int,
        tolerance_percent: float,
    ) -> int:
        """Fill the final slot with the closest match to the exact remainder.

        A closest match outside tolerance is replaced by the fallback answer,
        which is accepted as is; the caller re-checks the finished subset.
        """
        needed = max(target - current_sum, 0)
        best = find_closest_index(self.pool, candidates, needed)
        accuracy = accuracy_percent(current_sum + self.pool.duration(best), target)
        if within_tolerance(accuracy, tolerance_percent):
            logger.debug(
                "Last duration needed: %d. Using best available: %d (accuracy: %.2f%%)",
                needed,
                self.pool.duration(best),
                accuracy,
            )
            return best

        logger.debug("Last duration outside tolerance, calling fallback strategy")
        chosen, _ = self.fallback(
            candidates,
            previously_selected=previously_selected,
            selected=selected,
            current_sum=current_sum,
            target=target,
            remaining_needed=1,
            using_previous=False,
        )
        return chosen

    def fallback(
        self,
        candidates: Sequence[int],
        *,
        previously_selected: Collection[int],
        selected: Sequence[int],
        current_sum: int,
        target: int,
        remaining_needed: int,
        using_previous: bool,
    ) -> tuple[int, bool]:
        """Return ``(index, reused)`` for the entry closest to the ideal average.

        A previously selected index not yet in this subset replaces the
        primary choice only when it is strictly closer.
        """
        remaining_target = max(target - current_sum, 0)
        ideal_average = 0 if remaining_target == 0 else remaining_target // remaining_needed

        def distance(index: int) -> int:
            return abs(self.pool.duration(index) - ideal_average)

        best = sorted(candidates, key=distance)[0]

        if not using_previous and previously_selected:
            in_subset = set(selected)
            reusable = [index for index in sorted(previously_selected) if index not in in_subset]
            if reusable:
                best_previous = min(reusable, key=distance)
                if distance(best_previous) < distance(best):
                    logger.debug(
                        "Using previously selected duration %d instead of %d (closer to target avg: %d)",
                        self.pool.duration(best_previous),
                        self.pool.duration(best),
                        ideal_average,
                    )
                    return best_previous, True

        return best, False
