"""Subset search engine."""

from .analysis import SelectionAnalysis, analyze_multiple_runs
from .bounds import accuracy_percent, calculate_min_max_sums, feasible_range, subset_sum, within_tolerance
from .errors import (
    InsufficientCandidatesError,
    NoPreviouslySelectedAvailableError,
    NotEnoughSuccessfulRunsError,
    NoValidSubsetError,
    OutsideToleranceError,
    PreviouslySelectedInsufficientError,
    SimilarityNotComputableError,
    SubsetError,
    TargetUnreachableError,
)
from .models import Item, ItemPool
from .runner import TimeBudget, perform_multiple_runs
from .search import SubsetSearch, find_approximate_subset
from .selector import CandidateSelector, find_closest_index
from .similarity import compute_jaccard_similarity, jaccard_index

__all__ = [
    "CandidateSelector",
    "InsufficientCandidatesError",
    "Item",
    "ItemPool",
    "NoPreviouslySelectedAvailableError",
    "NotEnoughSuccessfulRunsError",
    "NoValidSubsetError",
    "OutsideToleranceError",
    "PreviouslySelectedInsufficientError",
    "SelectionAnalysis",
    "SimilarityNotComputableError",
    "SubsetError",
    "SubsetSearch",
    "TargetUnreachableError",
    "TimeBudget",
    "accuracy_percent",
    "analyze_multiple_runs",
    "calculate_min_max_sums",
    "compute_jaccard_similarity",
    "feasible_range",
    "find_approximate_subset",
    "find_closest_index",
    "jaccard_index",
    "perform_multiple_runs",
    "subset_sum",
    "within_tolerance",
]
