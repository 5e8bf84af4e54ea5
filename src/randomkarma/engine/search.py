"""Single-subset search driving the per-slot selector."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

import numpy as np

from randomkarma.config.schema import DEFAULT_TOLERANCE_PERCENT

from .bounds import accuracy_percent, calculate_min_max_sums, subset_sum
from .errors import (
    InsufficientCandidatesError,
    NoPreviouslySelectedAvailableError,
    NoValidSubsetError,
    PreviouslySelectedInsufficientError,
    TargetUnreachableError,
)
from .models import ItemPool
from .selector import CandidateSelector

logger = logging.getLogger(__name__)


class SubsetSearch:
    """Build one subset of ``lap_count`` indices whose durations sum near ``target``.

    The search walks slot by slot. Each slot snapshots the remaining pool,
    widens it with previously selected indices when it runs short or the target
    falls out of reach, then lets the selector choose. A finished subset is
    shuffled before it is returned.
    """

    def __init__(
        self,
        pool: ItemPool,
        target: int,
        lap_count: int,
        previously_selected: Iterable[int] = (),
        tolerance_percent: float = DEFAULT_TOLERANCE_PERCENT,
        *,
        available: Sequence[int] | None = None,
        rng: np.random.Generator | None = None,
    ) -> None:
        if target < 0:
            raise ValueError("target must be >= 0.")
        if lap_count < 0:
            raise ValueError("lap_count must be >= 0.")

        self.pool = pool
        self.target = int(target)
        self.lap_count = int(lap_count)
        self.previously_selected = frozenset(int(index) for index in previously_selected)
        self.tolerance_percent = float(tolerance_percent)
        self.rng = rng or np.random.default_rng()
        self.selector = CandidateSelector(pool, self.rng)

        self.remaining = pool.sorted_indices(available)
        self.selected: list[int] = []
        self.current_sum = 0

    @property
    def backtracks(self) -> int:
        return self.selector.backtracks

    def run(self) -> list[int]:
        while len(self.selected) < self.lap_count:
            remaining_needed = self.lap_count - len(self.selected)
            logger.debug(
                "Selection progress: %d/%d, current sum: %d",
                len(self.selected),
                self.lap_count,
                self.current_sum,
            )

            candidates, using_previous = self._candidate_pool(remaining_needed)
            candidates, using_previous = self._ensure_reachable(candidates, remaining_needed, using_previous)
            if not candidates:
                raise NoValidSubsetError()

            if remaining_needed == 1:
                chosen = self.selector.pick_last(
                    candidates,
                    previously_selected=self.previously_selected,
                    selected=self.selected,
                    current_sum=self.current_sum,
                    target=self.target,
                    tolerance_percent=self.tolerance_percent,
                )
            else:
                chosen = self.selector.pick(
                    candidates,
                    previously_selected=self.previously_selected,
                    selected=self.selected,
                    current_sum=self.current_sum,
                    target=self.target,
                    remaining_needed=remaining_needed,
                    using_previous=using_previous,
                )
            self._accept(chosen)

        total = subset_sum(self.pool, self.selected)
        logger.info(
            "Found subset with %d total backtracks, sum %d/%d (%.3f%% of target)",
            self.backtracks,
            total,
            self.target,
            accuracy_percent(total, self.target),
        )
        self.rng.shuffle(self.selected)
        return list(self.selected)

    def _accept(self, index: int) -> None:
        if index in self.selected:
            raise NoValidSubsetError()
        self.current_sum += self.pool.duration(index)
        self.selected.append(index)
        # Reused indices were never part of the remaining pool.
        if index in self.remaining:
            self.remaining.remove(index)
        logger.debug("Added: %d. New sum: %d/%d", self.pool.duration(index), self.current_sum, self.target)

    def _candidate_pool(self, remaining_needed: int) -> tuple[list[int], bool]:
        candidates = list(self.remaining)
        if remaining_needed <= len(candidates):
            return candidates, False

        logger.debug("Not enough durations left. Need %d, have %d", remaining_needed, len(candidates))
        if not self.previously_selected:
            raise InsufficientCandidatesError(remaining_needed, len(candidates))

        extended = self._extend_with_previous(candidates)
        if extended is None:
            raise NoPreviouslySelectedAvailableError()
        if len(extended) < remaining_needed:
            raise PreviouslySelectedInsufficientError(needed=remaining_needed, available=len(extended))

        logger.debug("Expanded candidate pool to %d entries", len(extended))
        return extended, True

    def _ensure_reachable(
        self,
        candidates: list[int],
        remaining_needed: int,
        using_previous: bool,
    ) -> tuple[list[int], bool]:
        min_possible, max_possible = calculate_min_max_sums(self.pool, candidates, remaining_needed)
        if self._reachable(min_possible, max_possible):
            return candidates, using_previous

        logger.debug(
            "Target %d no longer reachable. Current sum: %d, range: [%d, %d]",
            self.target,
            self.current_sum,
            self.current_sum + min_possible,
            self.current_sum + max_possible,
        )
        extended = None if using_previous else self._extend_with_previous(candidates)
        if extended is None:
            raise TargetUnreachableError(self.target, self.current_sum, min_possible, max_possible)

        new_min, new_max = calculate_min_max_sums(self.pool, extended, remaining_needed)
        if not self._reachable(new_min, new_max):
            raise TargetUnreachableError(self.target, self.current_sum, new_min, new_max)

        logger.debug("Target is reachable again with previously selected durations")
        return extended, True

    def _reachable(self, min_possible: int, max_possible: int) -> bool:
        return self.current_sum + min_possible <= self.target <= self.current_sum + max_possible

    def _extend_with_previous(self, candidates: list[int]) -> list[int] | None:
        present = set(candidates).union(self.selected)
        extra = [index for index in sorted(self.previously_selected) if index not in present]
        if not extra:
            return None
        return self.pool.sorted_indices([*candidates, *extra])


def find_approximate_subset(
    pool: ItemPool,
    target: int,
    lap_count: int,
    previously_selected: Iterable[int] = (),
    tolerance_percent: float = DEFAULT_TOLERANCE_PERCENT,
    *,
    available: Sequence[int] | None = None,
    rng: np.random.Generator | None = None,
    seed: int | None = None,
) -> list[int]:
    """Return ``lap_count`` distinct pool indices summing near ``target``.

    ``available`` restricts the never-used candidates (all indices by default);
    ``previously_selected`` is only drawn from as a reuse pool. Raises a
    ``SubsetError`` subclass instead of returning a partial subset.
    """
    generator = rng or np.random.default_rng(seed)
    search = SubsetSearch(
        pool,
        target,
        lap_count,
        previously_selected,
        tolerance_percent,
        available=available,
        rng=generator,
    )
    return search.run()
