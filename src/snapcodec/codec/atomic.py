"""Atomically accessed value cell."""

from __future__ import annotations

import threading
from typing import Any, Generic, TypeVar

T = TypeVar("T")


class Atomic(Generic[T]):
    """A value cell whose loads and stores are serialized by a lock.

    Only a single ``load()`` or ``store()`` is atomic. Encoding an ``Atomic``
    snapshots its value at that moment; nothing stops other threads from
    changing it right after.

    Example:
        >>> counter = Atomic(0, u64)
        >>> counter.store(5)
        >>> counter.load()
        5
    """

    def __init__(self, value: T, value_type: Any = None) -> None:
        """Initialize the cell.

        Args:
            value: Initial value
            value_type: Wire type used when encoding the value (e.g. ``u64``)
        """
        self._value = value
        self._lock = threading.Lock()
        self.value_type = value_type

    def load(self) -> T:
        with self._lock:
            return self._value

    def store(self, value: T) -> None:
        with self._lock:
            self._value = value

    def __repr__(self) -> str:
        return f"Atomic({self.load()!r})"
