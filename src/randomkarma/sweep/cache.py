"""In-memory result cache keyed by (target, lap_count, player_count)."""

from __future__ import annotations

from dataclasses import dataclass
from threading import Lock

CacheKey = tuple[int, int, int]


@dataclass(frozen=True)
class CacheEntry:
    """Cached outcome of one successful calculation."""

    subsets: tuple[tuple[int, ...], ...]
    similarity: float
    resolved_target: int

    @classmethod
    def build(cls, subsets: list[list[int]], similarity: float, resolved_target: int) -> CacheEntry:
        return cls(tuple(tuple(subset) for subset in subsets), float(similarity), int(resolved_target))


class ResultCache:
    """Thread-safe cache handed to whichever layer calls the engine."""

    def __init__(self) -> None:
        self._entries: dict[CacheKey, CacheEntry] = {}
        self._lock = Lock()

    @staticmethod
    def key(target: int, lap_count: int, player_count: int) -> CacheKey:
        return (int(target), int(lap_count), int(player_count))

    def get(self, target: int, lap_count: int, player_count: int) -> CacheEntry | None:
        with self._lock:
            return self._entries.get(self.key(target, lap_count, player_count))

    def put(self, target: int, lap_count: int, player_count: int, entry: CacheEntry) -> None:
        with self._lock:
            self._entries[self.key(target, lap_count, player_count)] = entry

    def contains(self, target: int, lap_count: int, player_count: int) -> bool:
        with self._lock:
            return self.key(target, lap_count, player_count) in self._entries

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def count_cached(
        self,
        minimum: int,
        maximum: int,
        step: int,
        lap_count: int,
        player_count: int,
        slider_max_index: int = 99,
    ) -> int:
        """Count slider positions whose target already has a cached entry."""
        with self._lock:
            return sum(
                1
                for idx in range(slider_max_index + 1)
                if self.key(min(minimum + step * idx, maximum), lap_count, player_count) in self._entries
            )
