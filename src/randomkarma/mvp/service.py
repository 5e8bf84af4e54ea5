"""Calculation adapter for the API: cache lookup, engine dispatch, response shaping."""

from __future__ import annotations

from pathlib import Path

from randomkarma.config.schema import EngineConfig
from randomkarma.data.durations import format_ms
from randomkarma.data.loader import ItemPoolLoader
from randomkarma.engine.analysis import analyze_multiple_runs
from randomkarma.engine.bounds import accuracy_percent, subset_sum
from randomkarma.engine.models import ItemPool
from randomkarma.sweep.cache import CacheEntry, ResultCache
from randomkarma.sweep.dispatch import CalculationRequest, precache_targets, run_calculation
from randomkarma.sweep.targets import base_target_range, base_target_step, calc_target_from_idx


class CalculationFailedError(RuntimeError):
    """Raised when the engine could not produce every requested subset."""


class CalculationService:
    """Adapter that converts engine output into the API response shape."""

    def __init__(
        self,
        items_csv: str | Path | None = None,
        *,
        config: EngineConfig | None = None,
        pool: ItemPool | None = None,
        cache: ResultCache | None = None,
    ) -> None:
        self.config = config or EngineConfig()
        if pool is None:
            loader = ItemPoolLoader(
                id_column=self.config.id_column,
                time_column=self.config.time_column,
                start_line=self.config.start_line,
            )
            pool = loader.load_csv(items_csv if items_csv is not None else self.config.items_csv)
        self.pool = pool
        self.cache = cache if cache is not None else ResultCache()

    def target_range(self, lap_count: int) -> dict[str, object]:
        """Return reachable target bounds and slider step for ``lap_count``."""
        self._validate_lap_count(lap_count)
        minimum, maximum = base_target_range(self.pool, lap_count)
        step = base_target_step(minimum, maximum, self.config.slider_max_index)
        return {
            "lap_count": lap_count,
            "min": minimum,
            "max": maximum,
            "step": step,
            "min_label": format_ms(minimum),
            "max_label": format_ms(maximum),
            "slider_max_index": self.config.slider_max_index,
        }

    def resolve_target(self, lap_count: int, target_ms: int | None = None, slider_index: int | None = None) -> int:
        if slider_index is not None:
            if not 0 <= slider_index <= self.config.slider_max_index:
                raise ValueError(f"slider_index must be between 0 and {self.config.slider_max_index}.")
            minimum, maximum = base_target_range(self.pool, lap_count)
            return calc_target_from_idx(minimum, maximum, slider_index, self.config.slider_max_index)
        if target_ms is not None:
            return target_ms
        return self.config.default_target_ms

    def calculate(
        self,
        *,
        lap_count: int | None = None,
        player_count: int | None = None,
        target_ms: int | None = None,
        slider_index: int | None = None,
        timeout_sec: float | None = None,
        tolerance_pct: float | None = None,
        seed: int | None = None,
    ) -> dict[str, object]:
        """Return cached subsets for the parameters or compute and cache them."""
        laps = self.config.default_lap_count if lap_count is None else lap_count
        players = self.config.default_player_count if player_count is None else player_count
        self._validate_lap_count(laps)
        self._validate_player_count(players)

        target = self.resolve_target(laps, target_ms=target_ms, slider_index=slider_index)
        entry = self.cache.get(target, laps, players)
        cached = entry is not None
        if entry is None:
            calculation = self.config.calculation(
                target=target,
                lap_count=laps,
                player_count=players,
                timeout_sec=timeout_sec,
                tolerance_pct=tolerance_pct,
            )
            outcome = run_calculation(
                CalculationRequest.from_config(self.pool, calculation, seed=seed if seed is not None else self.config.seed)
            )
            if not outcome.ok:
                raise CalculationFailedError(outcome.error)
            entry = outcome.to_cache_entry()
            self.cache.put(target, laps, players, entry)

        return self._build_response(entry, lap_count=laps, player_count=players, cached=cached)

    def precache(
        self,
        *,
        lap_count: int,
        player_count: int,
        timeout_sec: float | None = None,
        tolerance_pct: float | None = None,
    ) -> dict[str, object]:
        """Sweep every slider target for the parameters into the cache."""
        self._validate_lap_count(lap_count)
        self._validate_player_count(player_count)
        calculation = self.config.calculation(
            lap_count=lap_count,
            player_count=player_count,
            timeout_sec=timeout_sec,
            tolerance_pct=tolerance_pct,
        )
        report = precache_targets(
            self.pool,
            lap_count,
            player_count,
            cache=self.cache,
            timeout_ms=calculation.timeout_ms,
            tolerance_percent=calculation.tolerance_percent,
            slider_max_index=self.config.slider_max_index,
            workers=self.config.workers,
            seed=self.config.seed,
        )
        return {
            "completed": report.completed,
            "skipped": report.skipped,
            "failed_targets": report.failed_targets,
            "points": [{"target": target, "similarity": similarity} for target, similarity in report.points],
        }

    def cache_status(self, lap_count: int | None = None, player_count: int | None = None) -> dict[str, object]:
        status: dict[str, object] = {"entries": len(self.cache)}
        if lap_count is not None and player_count is not None:
            minimum, maximum = base_target_range(self.pool, lap_count)
            step = base_target_step(minimum, maximum, self.config.slider_max_index)
            status["cached_targets"] = self.cache.count_cached(
                minimum, maximum, step, lap_count, player_count, self.config.slider_max_index
            )
        return status

    def clear_cache(self) -> int:
        cleared = len(self.cache)
        self.cache.clear()
        return cleared

    def _validate_lap_count(self, lap_count: int) -> None:
        if not 1 <= lap_count <= len(self.pool):
            raise ValueError(f"lap_count must be between 1 and {len(self.pool)}.")

    def _validate_player_count(self, player_count: int) -> None:
        if not 0 <= player_count <= self.config.max_player_count:
            raise ValueError(f"player_count must be between 0 and {self.config.max_player_count}.")

    def _build_response(
        self,
        entry: CacheEntry,
        *,
        lap_count: int,
        player_count: int,
        cached: bool,
    ) -> dict[str, object]:
        target = entry.resolved_target
        subsets = [list(subset) for subset in entry.subsets]
        results: list[dict[str, object]] = []
        for run, subset in enumerate(subsets, start=1):
            total = subset_sum(self.pool, subset)
            results.append(
                {
                    "run": run,
                    "items": [
                        {
                            "id": self.pool.item_id(index),
                            "duration_ms": self.pool.duration(index),
                            "duration": format_ms(self.pool.duration(index)),
                        }
                        for index in subset
                    ],
                    "sum_ms": total,
                    "sum": format_ms(total),
                    "accuracy": round(accuracy_percent(total, target), 4),
                }
            )

        analysis = analyze_multiple_runs(self.pool, subsets) if subsets else None
        return {
            "meta": {
                "target": target,
                "target_label": format_ms(target),
                "lap_count": lap_count,
                "player_count": player_count,
                "similarity": round(entry.similarity, 6),
                "similarity_pct": round(entry.similarity * 100.0, 2),
                "cached": cached,
            },
            "subsets": results,
            "analysis": analysis.as_dict() if analysis is not None else None,
        }
