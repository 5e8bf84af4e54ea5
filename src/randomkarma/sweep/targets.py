"""Target grid helpers for slider-style target selection and sweeps."""

from __future__ import annotations

import math
from collections import deque

from randomkarma.engine.bounds import feasible_range
from randomkarma.engine.models import ItemPool

SLIDER_MAX_INDEX = 99


def spread_indices(n: int) -> list[int]:
    """Return ``0..n-1`` in a spread-out order: ends first, then midpoints breadth-first."""
    if n <= 0:
        return []

    order = [0]
    seen = [False] * n
    seen[0] = True
    if n > 1:
        order.append(n - 1)
        seen[n - 1] = True

    queue: deque[tuple[int, int]] = deque([(0, n - 1)])
    while len(order) < n:
        low, high = queue.popleft()
        if high - low <= 1:
            continue
        mid = (low + high) // 2
        if not seen[mid]:
            order.append(mid)
            seen[mid] = True
        queue.append((low, mid))
        queue.append((mid, high))
    return order


def base_target_range(pool: ItemPool, lap_count: int) -> tuple[int, int]:
    """Return the ``(min, max)`` total reachable with ``lap_count`` items."""
    return feasible_range(pool, lap_count)


def base_target_step(minimum: int, maximum: int, slider_max_index: int = SLIDER_MAX_INDEX) -> int:
    if maximum > minimum:
        return math.ceil((maximum - minimum) / slider_max_index)
    return 1


def calc_target_from_idx(minimum: int, maximum: int, idx: int, slider_max_index: int = SLIDER_MAX_INDEX) -> int:
    """Map a slider position onto a target clamped to ``[minimum, maximum]``."""
    step = base_target_step(minimum, maximum, slider_max_index)
    return min(minimum + step * idx, maximum)


def target_grid(minimum: int, maximum: int, slider_max_index: int = SLIDER_MAX_INDEX) -> list[int]:
    """Targets for every slider position, in spread order, without repeats."""
    targets: list[int] = []
    seen: set[int] = set()
    for idx in spread_indices(slider_max_index + 1):
        target = calc_target_from_idx(minimum, maximum, idx, slider_max_index)
        if target in seen:
            continue
        seen.add(target)
        targets.append(target)
    return targets
