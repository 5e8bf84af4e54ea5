"""Run calculations in isolated worker processes and feed the result cache."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator, Sequence
from concurrent.futures import ProcessPoolExecutor
from dataclasses import dataclass, field

from randomkarma.config.schema import DEFAULT_TIMEOUT_MS, DEFAULT_TOLERANCE_PERCENT, SubsetCalculationConfig
from randomkarma.engine.errors import SimilarityNotComputableError, SubsetError
from randomkarma.engine.models import ItemPool
from randomkarma.engine.runner import perform_multiple_runs
from randomkarma.engine.similarity import compute_jaccard_similarity

from .cache import CacheEntry, ResultCache
from .targets import SLIDER_MAX_INDEX, base_target_range, target_grid

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CalculationRequest:
    """Everything a worker needs to run one calculation on its own pool copy."""

    pool: ItemPool
    target: int
    lap_count: int
    player_count: int
    timeout_ms: float = DEFAULT_TIMEOUT_MS
    tolerance_percent: float = DEFAULT_TOLERANCE_PERCENT
    seed: int | None = None

    @classmethod
    def from_config(
        cls,
        pool: ItemPool,
        config: SubsetCalculationConfig,
        seed: int | None = None,
    ) -> CalculationRequest:
        return cls(
            pool=pool,
            target=config.target,
            lap_count=config.lap_count,
            player_count=config.player_count,
            timeout_ms=config.timeout_ms,
            tolerance_percent=config.tolerance_percent,
            seed=seed,
        )


@dataclass(frozen=True)
class CalculationOutcome:
    """Worker reply: subsets and similarity, or the failure as text."""

    target: int
    lap_count: int
    player_count: int
    subsets: list[list[int]] = field(default_factory=list)
    similarity: float = 0.0
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def resolved_target(self) -> int:
        return self.target

    def to_cache_entry(self) -> CacheEntry:
        return CacheEntry.build(self.subsets, self.similarity, self.resolved_target)


@dataclass(frozen=True)
class PrecacheReport:
    """Summary of a target sweep."""

    points: list[tuple[int, float]]
    failed_targets: list[int]
    skipped: int

    @property
    def completed(self) -> int:
        return len(self.points)


def run_calculation(request: CalculationRequest) -> CalculationOutcome:
    """Worker entry point; engine errors become the outcome's ``error`` text."""
    try:
        subsets = perform_multiple_runs(
            request.pool,
            request.target,
            request.lap_count,
            request.player_count,
            request.timeout_ms,
            request.tolerance_percent,
            seed=request.seed,
        )
    except SubsetError as exc:
        return CalculationOutcome(
            target=request.target,
            lap_count=request.lap_count,
            player_count=request.player_count,
            error=f"Calculation failed: {exc}",
        )

    try:
        similarity = compute_jaccard_similarity(subsets)
    except SimilarityNotComputableError:
        similarity = 0.0

    return CalculationOutcome(
        target=request.target,
        lap_count=request.lap_count,
        player_count=request.player_count,
        subsets=subsets,
        similarity=similarity,
    )


def iter_outcomes(requests: Sequence[CalculationRequest], *, workers: int = 1) -> Iterator[CalculationOutcome]:
    """Yield outcomes in request order, fanning out to processes when ``workers > 1``."""
    if workers <= 0:
        raise ValueError("workers must be > 0.")
    if workers == 1 or len(requests) <= 1:
        for request in requests:
            yield run_calculation(request)
        return

    with ProcessPoolExecutor(max_workers=workers) as executor:
        yield from executor.map(run_calculation, requests)


def precache_targets(
    pool: ItemPool,
    lap_count: int,
    player_count: int,
    *,
    cache: ResultCache,
    timeout_ms: float = DEFAULT_TIMEOUT_MS,
    tolerance_percent: float = DEFAULT_TOLERANCE_PERCENT,
    slider_max_index: int = SLIDER_MAX_INDEX,
    workers: int = 1,
    seed: int | None = None,
    on_outcome: Callable[[CalculationOutcome], None] | None = None,
) -> PrecacheReport:
    """Calculate every slider target not yet cached and store the successes."""
    minimum, maximum = base_target_range(pool, lap_count)
    targets = target_grid(minimum, maximum, slider_max_index)
    pending = [target for target in targets if not cache.contains(target, lap_count, player_count)]
    skipped = len(targets) - len(pending)
    logger.info(
        "Pre-caching %d targets in [%d, %d] (%d already cached, %d workers)",
        len(pending),
        minimum,
        maximum,
        skipped,
        workers,
    )

    requests = [
        CalculationRequest(
            pool=pool,
            target=target,
            lap_count=lap_count,
            player_count=player_count,
            timeout_ms=timeout_ms,
            tolerance_percent=tolerance_percent,
            seed=None if seed is None else seed + offset,
        )
        for offset, target in enumerate(pending)
    ]

    points: list[tuple[int, float]] = []
    failed: list[int] = []
    for outcome in iter_outcomes(requests, workers=workers):
        if outcome.ok:
            cache.put(outcome.resolved_target, outcome.lap_count, outcome.player_count, outcome.to_cache_entry())
            points.append((outcome.resolved_target, outcome.similarity))
        else:
            logger.warning("Target %d failed: %s", outcome.target, outcome.error)
            failed.append(outcome.target)
        if on_outcome is not None:
            on_outcome(outcome)

    return PrecacheReport(points=points, failed_targets=failed, skipped=skipped)
