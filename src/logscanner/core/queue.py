"""Bounded FIFO between datagram arrival and processing."""

from __future__ import annotations

from collections import deque
from typing import Generic, TypeVar

from logscanner.models.runtime import QueueStats

T = TypeVar("T")


class IngestionQueue(Generic[T]):
    """FIFO with a hard capacity. When full, the incoming item is dropped."""

    def __init__(self, capacity: int) -> None:
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        self._capacity = capacity
        self._items: deque[T] = deque()
        self._dropped = 0

    def __len__(self) -> int:
        return len(self._items)

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def dropped(self) -> int:
        return self._dropped

    def enqueue(self, item: T) -> bool:
        """Append ``item``. Returns False (and counts a drop) when at capacity."""
        if len(self._items) >= self._capacity:
            self._dropped += 1
            return False
        self._items.append(item)
        return True

    def pop_batch(self, max_items: int) -> list[T]:
        """Remove up to ``max_items`` from the head, oldest first."""
        count = min(max_items, len(self._items))
        return [self._items.popleft() for _ in range(count)]

    def stats(self) -> QueueStats:
        return QueueStats(
            length=len(self._items),
            capacity=self._capacity,
            dropped=self._dropped,
        )
