"""Pairwise Jaccard similarity across subsets."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from itertools import combinations

import numpy as np

from .errors import SimilarityNotComputableError

logger = logging.getLogger(__name__)


def jaccard_index(left: frozenset[int], right: frozenset[int]) -> float:
    """Return ``|A ∩ B| / |A ∪ B|``; two empty sets count as identical."""
    union = left | right
    if not union:
        return 1.0
    return len(left & right) / len(union)


def compute_jaccard_similarity(subsets: Sequence[Iterable[int]]) -> float:
    """Average the Jaccard index over every unordered pair of subsets."""
    sets = [frozenset(int(index) for index in subset) for subset in subsets]
    if len(sets) < 2:
        logger.info("Only one or no subsets found, skipping similarity measurement")
        raise SimilarityNotComputableError("At least two subsets are required to compute similarity.")

    scores = np.array([jaccard_index(left, right) for left, right in combinations(sets, 2)], dtype=np.float64)
    average = float(np.mean(scores))
    logger.info("Pairwise Jaccard similarity: %.4f (0.0 = no overlap, 1.0 = identical)", average)
    return average
