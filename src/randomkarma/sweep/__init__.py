"""Calling layer around the engine: target grid, cache and dispatch."""

from .cache import CacheEntry, CacheKey, ResultCache
from .dispatch import (
    CalculationOutcome,
    CalculationRequest,
    PrecacheReport,
    iter_outcomes,
    precache_targets,
    run_calculation,
)
from .targets import (
    SLIDER_MAX_INDEX,
    base_target_range,
    base_target_step,
    calc_target_from_idx,
    spread_indices,
    target_grid,
)

__all__ = [
    "CacheEntry",
    "CacheKey",
    "CalculationOutcome",
    "CalculationRequest",
    "PrecacheReport",
    "ResultCache",
    "SLIDER_MAX_INDEX",
    "base_target_range",
    "base_target_step",
    "calc_target_from_idx",
    "iter_outcomes",
    "precache_targets",
    "run_calculation",
    "spread_indices",
    "target_grid",
]
