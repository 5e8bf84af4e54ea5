"""Similarity-versus-target chart."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

import matplotlib.pyplot as plt

from randomkarma.data.durations import format_ms


def plot_similarity(
    points: Sequence[tuple[int, float]],
    failed_targets: Sequence[int],
    path: str | Path,
    *,
    lap_count: int,
    player_count: int,
) -> Path:
    """Plot similarity (%) per target with a red cross for each failed target."""
    output = Path(path)
    output.parent.mkdir(parents=True, exist_ok=True)

    ordered = sorted(points)
    fig, ax = plt.subplots(figsize=(10, 6))
    if ordered:
        ax.plot(
            [target for target, _ in ordered],
            [similarity * 100.0 for _, similarity in ordered],
            marker="o",
            linestyle="-",
            color="blue",
            label="Similarity",
        )
    if failed_targets:
        ax.scatter(list(failed_targets), [0.0] * len(failed_targets), marker="x", color="red", label="Failed")

    ticks = ax.get_xticks()
    ax.set_xticks(ticks)
    ax.set_xticklabels([format_ms(int(tick)) if tick >= 0 else "" for tick in ticks], rotation=30)
    ax.set_xlabel("Target")
    ax.set_ylabel("Average pairwise Jaccard similarity (%)")
    ax.set_title(f"Similarity by target ({lap_count} laps, {player_count} players)")
    ax.set_ylim(bottom=0.0)
    ax.grid(True, alpha=0.3)
    if ordered or failed_targets:
        ax.legend()
    fig.tight_layout()
    fig.savefig(output, dpi=150)
    plt.close(fig)
    return output
