from __future__ import annotations

import pytest

from randomkarma.engine.errors import SimilarityNotComputableError
from randomkarma.engine.similarity import compute_jaccard_similarity, jaccard_index


def test_identical_subsets_have_full_similarity():
    assert compute_jaccard_similarity([[1, 2, 3], [3, 2, 1]]) == 1.0


def test_disjoint_subsets_have_zero_similarity():
    assert compute_jaccard_similarity([[1, 2], [3, 4], [5, 6]]) == 0.0


def test_similarity_averages_all_pairs():
    value = compute_jaccard_similarity([[1, 2], [2, 3], [1, 2]])

    # pairs: 1/3, 1.0, 1/3
    assert value == pytest.approx((1 / 3 + 1.0 + 1 / 3) / 3)


def test_two_empty_sets_are_identical():
    assert jaccard_index(frozenset(), frozenset()) == 1.0
    assert compute_jaccard_similarity([[], []]) == 1.0


@pytest.mark.parametrize("subsets", [[], [[1, 2, 3]]])
def test_fewer_than_two_subsets_raise(subsets):
    with pytest.raises(SimilarityNotComputableError):
        compute_jaccard_similarity(subsets)
