#!/usr/bin/env python3
"""RandomKarma - pick distinct item subsets whose durations sum near a target."""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import datetime

from tqdm import tqdm

from randomkarma.config import EngineConfig, load_config
from randomkarma.data.durations import DurationParseError, format_ms, parse_time_to_ms
from randomkarma.data.inputs import InputValidationError, validate_lap_count, validate_player_count
from randomkarma.data.loader import ItemLoadError, ItemPoolLoader
from randomkarma.engine.analysis import SelectionAnalysis, analyze_multiple_runs
from randomkarma.engine.bounds import accuracy_percent, feasible_range, subset_sum
from randomkarma.engine.errors import SimilarityNotComputableError, SubsetError
from randomkarma.engine.models import ItemPool
from randomkarma.engine.runner import perform_multiple_runs
from randomkarma.engine.similarity import compute_jaccard_similarity
from randomkarma.sweep.cache import ResultCache
from randomkarma.sweep.chart import plot_similarity
from randomkarma.sweep.dispatch import precache_targets
from randomkarma.sweep.targets import target_grid


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Pick item subsets whose durations sum near a target.")
    parser.add_argument("--config", default=None, help="Optional YAML/JSON engine config.")
    parser.add_argument("--csv", default=None, help="Item CSV path (overrides config items_csv).")
    parser.add_argument("--lap-count", default=None, help="Items per subset.")
    parser.add_argument("--player-count", default=None, help="Number of subsets.")
    parser.add_argument("--target", default=None, help="Target total, e.g. 47:30.000, 2m30s or raw ms.")
    parser.add_argument("--timeout", type=float, default=None, help="Time budget in seconds.")
    parser.add_argument("--tolerance", type=float, default=None, help="Allowed deviation from target in percent.")
    parser.add_argument("--seed", type=int, default=None, help="Random seed.")
    parser.add_argument(
        "--sweep",
        action="store_true",
        help="Calculate every slider target between the min and max reachable totals.",
    )
    parser.add_argument("--workers", type=int, default=None, help="Worker processes for --sweep.")
    parser.add_argument("--plot", default=None, help="Write the sweep similarity chart to this PNG path.")
    parser.add_argument("--verbose", "-v", action="count", default=0, help="Increase log verbosity.")
    return parser.parse_args()


def print_subsets(pool: ItemPool, subsets: list[list[int]], target: int) -> None:
    for run, subset in enumerate(subsets, start=1):
        total = subset_sum(pool, subset)
        ids = ", ".join(pool.item_id(index) for index in subset)
        print(f"\n  Run {run}: [{ids}]")
        print(f"         sum: {format_ms(total)} | accuracy: {accuracy_percent(total, target):.3f}%")


def print_analysis(analysis: SelectionAnalysis) -> None:
    print(f"\nSelection analysis ({analysis.total_runs} runs, {analysis.total_selections} selections)")
    print("   Most selected items:")
    for entry in analysis.top_items:
        print(
            f"   {entry.item_id:>12} | {format_ms(entry.duration)} | "
            f"{entry.count:3d}x | {entry.run_share:5.1f}% of runs"
        )
    if analysis.fastest is not None and analysis.slowest is not None:
        print(f"   Fastest: {format_ms(analysis.fastest)} | Slowest: {format_ms(analysis.slowest)}")
    print("   Duration buckets:")
    for bucket in analysis.buckets:
        print(f"   {format_ms(bucket.start)} - {format_ms(bucket.end)} | {bucket.count:4d} | {bucket.share:5.1f}%")


def run_single(
    pool: ItemPool,
    config: EngineConfig,
    *,
    target: int,
    lap_count: int,
    player_count: int,
    timeout_sec: float | None,
    tolerance_pct: float | None,
    seed: int | None,
) -> int:
    calculation = config.calculation(
        target=target,
        lap_count=lap_count,
        player_count=player_count,
        timeout_sec=timeout_sec,
        tolerance_pct=tolerance_pct,
    )
    print(f"Target: {format_ms(calculation.target)} | tolerance: {calculation.tolerance_percent}%")

    try:
        subsets = perform_multiple_runs(
            pool,
            calculation.target,
            calculation.lap_count,
            calculation.player_count,
            calculation.timeout_ms,
            calculation.tolerance_percent,
            seed=seed,
        )
    except SubsetError as exc:
        print(f"Calculation failed: {exc}")
        return 1

    print("\n" + "=" * 60)
    print(f"{len(subsets)} subsets of {lap_count} items")
    print("=" * 60)
    print_subsets(pool, subsets, calculation.target)

    try:
        similarity = compute_jaccard_similarity(subsets)
        print(f"\nAverage Jaccard similarity: {similarity:.4f}")
    except SimilarityNotComputableError as exc:
        print(f"\nSimilarity: {exc}")

    if subsets:
        print_analysis(analyze_multiple_runs(pool, subsets))
    return 0


def run_sweep(
    pool: ItemPool,
    config: EngineConfig,
    *,
    lap_count: int,
    player_count: int,
    timeout_sec: float | None,
    tolerance_pct: float | None,
    seed: int | None,
    workers: int,
    plot_path: str | None,
) -> int:
    calculation = config.calculation(
        lap_count=lap_count,
        player_count=player_count,
        timeout_sec=timeout_sec,
        tolerance_pct=tolerance_pct,
    )
    minimum, maximum = feasible_range(pool, lap_count)
    total = len(target_grid(minimum, maximum, config.slider_max_index))
    print(f"Sweeping {total} targets in [{format_ms(minimum)}, {format_ms(maximum)}] with {workers} workers")

    with tqdm(total=total, desc="Sweep") as pbar:
        report = precache_targets(
            pool,
            lap_count,
            player_count,
            cache=ResultCache(),
            timeout_ms=calculation.timeout_ms,
            tolerance_percent=calculation.tolerance_percent,
            slider_max_index=config.slider_max_index,
            workers=workers,
            seed=seed,
            on_outcome=lambda _outcome: pbar.update(1),
        )

    print(f"\nCompleted: {report.completed} | Failed: {len(report.failed_targets)}")
    for target, similarity in sorted(report.points):
        print(f"   {format_ms(target)} | similarity {similarity:.4f}")

    if plot_path:
        written = plot_similarity(
            report.points,
            report.failed_targets,
            plot_path,
            lap_count=lap_count,
            player_count=player_count,
        )
        print(f"\nChart written to {written}")
    return 0 if report.points else 1


def main(args: argparse.Namespace) -> int:
    level = logging.WARNING - 10 * min(args.verbose, 2)
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    config = load_config(args.config) if args.config else EngineConfig()
    csv_path = args.csv or config.items_csv

    print("=" * 60)
    print("RandomKarma - subset calculator")
    print("=" * 60)
    print(f"{datetime.now().strftime('%Y-%m-%d %H:%M:%S')} | seed: {args.seed}")

    loader = ItemPoolLoader(
        id_column=config.id_column,
        time_column=config.time_column,
        start_line=config.start_line,
    )
    try:
        pool = loader.load_csv(csv_path)
    except (FileNotFoundError, ItemLoadError) as exc:
        print(f"Cannot load items: {exc}")
        return 1
    print(f"Items: {len(pool)} from {csv_path}")

    try:
        lap_count = (
            config.default_lap_count if args.lap_count is None else validate_lap_count(args.lap_count, len(pool))
        )
        player_count = (
            config.default_player_count
            if args.player_count is None
            else validate_player_count(args.player_count, config.max_player_count)
        )
        target = config.default_target_ms if args.target is None else parse_time_to_ms(args.target)
    except (InputValidationError, DurationParseError) as exc:
        print(f"Invalid input: {exc}")
        return 2

    seed = args.seed if args.seed is not None else config.seed
    if args.sweep:
        return run_sweep(
            pool,
            config,
            lap_count=lap_count,
            player_count=player_count,
            timeout_sec=args.timeout,
            tolerance_pct=args.tolerance,
            seed=seed,
            workers=args.workers or config.workers,
            plot_path=args.plot,
        )
    return run_single(
        pool,
        config,
        target=target,
        lap_count=lap_count,
        player_count=player_count,
        timeout_sec=args.timeout,
        tolerance_pct=args.tolerance,
        seed=seed,
    )


if __name__ == "__main__":
    sys.exit(main(parse_args()))
