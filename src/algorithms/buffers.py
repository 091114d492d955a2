"""
Temporal primitives: fixed-capacity rolling windows and cooldown bookkeeping.

Both rolling buffers use a circular write index. Capacities are fixed at
construction; a buffer becomes "full" the first time the write index wraps
back to slot 0 and stays full until reset().
"""

from __future__ import annotations

from typing import Dict, List, Optional


class PersistenceBuffer:
    """
    Circular buffer of booleans used to debounce per-frame conditions.

    Example:
        buf = PersistenceBuffer(5)
        for inside in observations:
            buf.push(inside)
        if buf.count() >= 3:
            ...
    """

    def __init__(self, capacity: int):
        if capacity <= 0:
            raise ValueError(f"capacity must be positive, got {capacity}")
        self._capacity = capacity
        self._buffer: List[bool] = [False] * capacity
        self._index = 0
        self._full = False

    @property
    def capacity(self) -> int:
        return self._capacity

    def push(self, value: bool) -> None:
        """Write a value, overwriting the oldest slot once full."""
        self._buffer[self._index] = bool(value)
        self._index = (self._index + 1) % self._capacity
        if self._index == 0:
            self._full = True

    def count(self) -> int:
        """Number of True values among the valid slots."""
        return sum(1 for v in self._buffer[:self.size()] if v)

    def is_full(self) -> bool:
        return self._full

    def size(self) -> int:
        """Number of valid slots."""
        return self._capacity if self._full else self._index

    def get_ordered_contents(self) -> List[bool]:
        """Valid values in chronological order (oldest first)."""
        if self._full:
            return self._buffer[self._index:] + self._buffer[:self._index]
        return self._buffer[:self._index]

    def all_true(self) -> bool:
        """True when the window is full and every entry is True."""
        return self._full and self.count() == self._capacity

    def reset(self) -> None:
        self._buffer = [False] * self._capacity
        self._index = 0
        self._full = False

    def __len__(self) -> int:
        return self.size()


class ClassSmoothingBuffer:
    """
    Circular buffer of class labels with a majority vote.

    Ties are resolved in favour of the tied label that appears first in the
    tally, which walks the storage slots from 0. Until the buffer wraps this
    is insertion order.
    """

    def __init__(self, capacity: int):
        if capacity <= 0:
            raise ValueError(f"capacity must be positive, got {capacity}")
        self._capacity = capacity
        self._buffer: List[str] = [""] * capacity
        self._index = 0
        self._full = False

    @property
    def capacity(self) -> int:
        return self._capacity

    def push(self, label: str) -> None:
        self._buffer[self._index] = label
        self._index = (self._index + 1) % self._capacity
        if self._index == 0:
            self._full = True

    def is_full(self) -> bool:
        return self._full

    def majority_class(self) -> str:
        """
        Most frequent label among the valid slots.

        Returns:
            The winning label, or "" when the buffer holds no labels.
        """
        length = self._capacity if self._full else self._index
        # dicts keep insertion order, which decides ties
        counts: Dict[str, int] = {}
        for label in self._buffer[:length]:
            if label:
                counts[label] = counts.get(label, 0) + 1

        best_label = ""
        best_count = 0
        for label, n in counts.items():
            if n > best_count:
                best_label = label
                best_count = n
        return best_label

    def reset(self) -> None:
        self._buffer = [""] * self._capacity
        self._index = 0
        self._full = False


class CooldownTracker:
    """
    Expiry times for string keys, used to suppress repeated alerts.

    A key is on cooldown while `now < expiry`.
    """

    def __init__(self):
        self._expiry: Dict[str, float] = {}

    def is_on_cooldown(self, key: str, now: float) -> bool:
        expiry = self._expiry.get(key)
        if expiry is None:
            return False
        return now < expiry

    def set_cooldown(self, key: str, now: float, duration: float) -> None:
        self._expiry[key] = now + duration

    def remaining(self, key: str, now: float) -> float:
        """Seconds left on the cooldown; 0 if absent or expired."""
        expiry = self._expiry.get(key)
        if expiry is None:
            return 0.0
        return max(0.0, expiry - now)

    def expiry(self, key: str) -> Optional[float]:
        """Expiry timestamp for a key, or None."""
        return self._expiry.get(key)

    def clear_expired(self, now: float) -> int:
        """Drop every entry whose expiry is <= now. Returns the number removed."""
        expired = [key for key, expiry in self._expiry.items() if now >= expiry]
        for key in expired:
            del self._expiry[key]
        return len(expired)

    def reset(self) -> None:
        self._expiry.clear()

    def __len__(self) -> int:
        return len(self._expiry)

    def __contains__(self, key: str) -> bool:
        return key in self._expiry
