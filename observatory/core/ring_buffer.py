"""Fixed-capacity ring buffer.

Used for every bounded history in the observatory (performance snapshots,
metric series, explanations). Pushing past capacity overwrites the oldest
entry, so a long-running session keeps constant memory.
"""

from __future__ import annotations

from typing import Generic, Iterator, List, Optional, TypeVar

from .errors import ConfigurationError

T = TypeVar("T")


class RingBuffer(Generic[T]):
    """
    Circular array with a head index and a size counter.

    Iteration yields entries oldest to newest.
    """

    def __init__(self, capacity: int = 1000):
        if not isinstance(capacity, int) or capacity <= 0:
            raise ConfigurationError(
                f"RingBuffer capacity must be a positive integer, got {capacity!r}"
            )
        self.capacity = capacity
        self._items: List[Optional[T]] = [None] * capacity
        self._head = 0      # index of the oldest entry
        self._size = 0

    def push(self, item: T) -> Optional[T]:
        """
        Append an item at the newest end.

        Returns:
            The evicted oldest item when the buffer was full, else None.
        """
        evicted = None
        if self._size < self.capacity:
            tail = (self._head + self._size) % self.capacity
            self._items[tail] = item
            self._size += 1
        else:
            evicted = self._items[self._head]
            self._items[self._head] = item
            self._head = (self._head + 1) % self.capacity
        return evicted

    append = push

    def clear(self) -> None:
        self._items = [None] * self.capacity
        self._head = 0
        self._size = 0

    @property
    def is_full(self) -> bool:
        return self._size == self.capacity

    def oldest(self) -> T:
        if self._size == 0:
            raise IndexError("oldest() on empty RingBuffer")
        return self._items[self._head]

    def newest(self) -> T:
        if self._size == 0:
            raise IndexError("newest() on empty RingBuffer")
        return self._items[(self._head + self._size - 1) % self.capacity]

    def to_list(self) -> List[T]:
        return list(self)

    def __len__(self) -> int:
        return self._size

    def __bool__(self) -> bool:
        return self._size > 0

    def __iter__(self) -> Iterator[T]:
        for offset in range(self._size):
            yield self._items[(self._head + offset) % self.capacity]

    def __getitem__(self, index: int) -> T:
        if index < 0:
            index += self._size
        if not 0 <= index < self._size:
            raise IndexError("RingBuffer index out of range")
        return self._items[(self._head + index) % self.capacity]

    def __repr__(self) -> str:
        return f"RingBuffer(capacity={self.capacity}, size={self._size})"
