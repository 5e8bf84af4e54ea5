"""Selection frequency analysis across completed runs."""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Sequence
from dataclasses import asdict, dataclass

from .models import ItemPool

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ItemFrequency:
    """How often one item was chosen."""

    item_id: str
    duration: int
    count: int
    run_share: float


@dataclass(frozen=True)
class DurationBucket:
    """Selections whose duration falls in ``[start, end)``."""

    start: int
    end: int
    count: int
    share: float


@dataclass(frozen=True)
class SelectionAnalysis:
    """Observational summary of a multi-run result."""

    total_runs: int
    total_selections: int
    top_items: list[ItemFrequency]
    fastest: int | None
    slowest: int | None
    buckets: list[DurationBucket]

    def as_dict(self) -> dict[str, object]:
        return asdict(self)


def analyze_multiple_runs(
    pool: ItemPool,
    subsets: Sequence[Sequence[int]],
    *,
    bucket_ms: int = 10_000,
    top_n: int = 10,
) -> SelectionAnalysis:
    """Count item and duration frequencies over all subsets."""
    if bucket_ms <= 0:
        raise ValueError("bucket_ms must be > 0.")
    if top_n <= 0:
        raise ValueError("top_n must be > 0.")

    item_counts: Counter[int] = Counter(index for subset in subsets for index in subset)
    duration_counts: Counter[int] = Counter()
    for index, count in item_counts.items():
        duration_counts[pool.duration(index)] += count

    total_runs = len(subsets)
    total_selections = sum(item_counts.values())

    ranked = sorted(item_counts.items(), key=lambda entry: (-entry[1], pool.item_id(entry[0])))
    top_items = [
        ItemFrequency(
            item_id=pool.item_id(index),
            duration=pool.duration(index),
            count=count,
            run_share=round(count / total_runs * 100.0, 2),
        )
        for index, count in ranked[:top_n]
    ]

    bucket_counts: Counter[int] = Counter()
    for duration, count in duration_counts.items():
        bucket_counts[duration // bucket_ms] += count
    buckets = [
        DurationBucket(
            start=key * bucket_ms,
            end=(key + 1) * bucket_ms,
            count=bucket_counts[key],
            share=round(bucket_counts[key] / total_selections * 100.0, 2),
        )
        for key in sorted(bucket_counts)
    ]

    analysis = SelectionAnalysis(
        total_runs=total_runs,
        total_selections=total_selections,
        top_items=top_items,
        fastest=min(duration_counts) if duration_counts else None,
        slowest=max(duration_counts) if duration_counts else None,
        buckets=buckets,
    )
    _log_analysis(analysis)
    return analysis


def _log_analysis(analysis: SelectionAnalysis) -> None:
    logger.info("Top %d most frequently selected items:", len(analysis.top_items))
    for rank, entry in enumerate(analysis.top_items, start=1):
        logger.info(
            "#%d: %s - duration %d ms - used in %d runs (%.0f%%)",
            rank,
            entry.item_id,
            entry.duration,
            entry.count,
            entry.run_share,
        )
    if analysis.fastest is not None:
        logger.info("Fastest duration selected: %d ms", analysis.fastest)
        logger.info("Slowest duration selected: %d ms", analysis.slowest)
    for bucket in analysis.buckets:
        logger.info(
            "Durations %d-%d ms: %d selections (%.0f%%)",
            bucket.start,
            bucket.end,
            bucket.count,
            bucket.share,
        )
