"""Typed failures raised by the subset search engine."""

from __future__ import annotations


class SubsetError(RuntimeError):
    """Base class for every subset search failure."""


class NoValidSubsetError(SubsetError):
    """Search could not proceed for a reason not covered by a specific variant."""

    def __init__(self) -> None:
        super().__init__("Failed to find a valid subset")


class OutsideToleranceError(SubsetError):
    """A completed subset's sum missed the tolerance band."""

    def __init__(self, accuracy: float, tolerance_percent: float) -> None:
        self.accuracy = accuracy
        self.tolerance_percent = tolerance_percent
        lower = 100.0 - tolerance_percent
        upper = 100.0 + tolerance_percent
        super().__init__(
            f"Found subset is outside tolerance: {accuracy:.4f}% of target "
            f"(acceptable range: {lower:g}-{upper:g}%)"
        )


class InsufficientCandidatesError(SubsetError):
    """Not enough candidates remain, even before reuse is considered."""

    def __init__(self, needed: int, available: int) -> None:
        self.needed = needed
        self.available = available
        super().__init__(f"Insufficient candidates: needed {needed}, but only {available} available")


class TargetUnreachableError(SubsetError):
    """Min/max bounds prove the target can no longer be reached."""

    def __init__(self, target: int, current_sum: int, min_possible: int, max_possible: int) -> None:
        self.target = target
        self.current_sum = current_sum
        self.min_possible = min_possible
        self.max_possible = max_possible
        super().__init__(
            f"Target {target} is unreachable. Current sum: {current_sum}. "
            f"Possible range: [{current_sum + min_possible} to {current_sum + max_possible}]"
        )


class NoPreviouslySelectedAvailableError(SubsetError):
    """Reuse was required but every previously selected index is already in use."""

    def __init__(self) -> None:
        super().__init__("No previously selected numbers available to use when needed")


class PreviouslySelectedInsufficientError(SubsetError):
    """Reuse was attempted but the candidate pool is still too small."""

    def __init__(self, needed: int, available: int) -> None:
        self.needed = needed
        self.available = available
        super().__init__(
            "Even with previously selected numbers, still insufficient: "
            f"needed {needed}, but only {available} available"
        )


class NotEnoughSuccessfulRunsError(SubsetError):
    """Fewer subsets than requested were produced (timeout or shortfall)."""

    def __init__(self, required: int, found: int) -> None:
        self.required = required
        self.found = found
        super().__init__(f"Only {found}/{required} satisfactory subsets found within tolerance")


class SimilarityNotComputableError(ValueError):
    """Similarity needs at least two subsets."""
