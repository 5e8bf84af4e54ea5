"""Immutable item and item-pool types."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from functools import cached_property

import numpy as np
import pandas as pd


@dataclass(frozen=True, eq=True)
class Item:
    """Pool entry with a unique id and a duration in milliseconds.

    Equality and hashing use ``(id, duration)``; ordering uses the duration only.
    """

    id: str
    duration: int

    def __post_init__(self) -> None:
        if self.duration < 0:
            raise ValueError("duration must be >= 0.")

    def __lt__(self, other: Item) -> bool:
        if not isinstance(other, Item):
            return NotImplemented
        return self.duration < other.duration

    def __le__(self, other: Item) -> bool:
        if not isinstance(other, Item):
            return NotImplemented
        return self.duration <= other.duration

    def __gt__(self, other: Item) -> bool:
        if not isinstance(other, Item):
            return NotImplemented
        return self.duration > other.duration

    def __ge__(self, other: Item) -> bool:
        if not isinstance(other, Item):
            return NotImplemented
        return self.duration >= other.duration


@dataclass(frozen=True)
class ItemPool:
    """Ordered, read-only sequence of items addressed by position."""

    items: tuple[Item, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        object.__setattr__(self, "items", tuple(self.items))

    @classmethod
    def from_durations(cls, durations: Iterable[int], prefix: str = "item") -> ItemPool:
        """Build a pool with generated ids, mostly for tests and sweeps."""
        return cls(tuple(Item(f"{prefix}-{index}", int(value)) for index, value in enumerate(durations)))

    @classmethod
    def from_records(cls, records: Iterable[Mapping[str, object]]) -> ItemPool:
        """Build a pool from ``{"id": ..., "duration": ...}`` mappings."""
        return cls(tuple(Item(str(record["id"]), int(record["duration"])) for record in records))

    def __len__(self) -> int:
        return len(self.items)

    def __getitem__(self, index: int) -> Item:
        return self.items[index]

    def __iter__(self):
        return iter(self.items)

    @cached_property
    def durations(self) -> np.ndarray:
        """Durations as an int64 array aligned with item positions."""
        return np.array([item.duration for item in self.items], dtype=np.int64)

    def duration(self, index: int) -> int:
        return self.items[index].duration

    def item_id(self, index: int) -> str:
        return self.items[index].id

    def all_indices(self) -> list[int]:
        return list(range(len(self.items)))

    def sorted_indices(self, indices: Sequence[int] | None = None) -> list[int]:
        """Return indices ordered by ascending duration (stable on ties)."""
        source = self.all_indices() if indices is None else list(indices)
        return sorted(source, key=self.duration)

    def to_records(self) -> list[dict[str, object]]:
        return [{"id": item.id, "duration": item.duration} for item in self.items]

    def to_frame(self) -> pd.DataFrame:
        """Return the pool as a dataframe with ``id`` and ``duration`` columns."""
        return pd.DataFrame(self.to_records(), columns=["id", "duration"])
