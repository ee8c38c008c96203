"""ArrayStore and ArrayRef: immutable array storage for the World.

Components never hold arrays directly. They hold ArrayRefs, small frozen
handles (key, shape, dtype, generation) that the store resolves into
read-only NumPy arrays. Every array is copied once on the way in and is
never written again, so signals, coefficients and reconstruction frames can
be shared freely between systems.

Key Features:
- Read-only views: stored arrays have ``writeable=False``
- Byte budget: puts beyond ``capacity_bytes`` fail fast
- Generation counter: detects stale refs after ``reset()``
- Row refs: address one row of a stacked batch without copying

Example:
    >>> store = ArrayStore(capacity_bytes=1 << 20)
    >>> ref = store.put(np.arange(8.0))
    >>> store.view(ref)[3]
    3.0
    >>> store.reset()
    >>> # store.view(ref)  # Would raise ValueError: stale ref
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import numpy as np


@dataclass(frozen=True)
class ArrayRef:
    """Handle pointing to an array held by an ArrayStore.

    Attributes:
        key: Store slot of the underlying array
        shape: Shape of the referenced data
        dtype: NumPy data type
        generation: Store generation the ref was issued in
        row: Row of the underlying array, or None for the whole array
    """

    key: int
    shape: tuple[int, ...]
    dtype: np.dtype[Any]
    generation: int
    row: int | None = None

    def __post_init__(self) -> None:
        if self.key < 0:
            raise ValueError(f"key must be non-negative, got {self.key}")
        if self.generation < 0:
            raise ValueError(f"generation must be non-negative, got {self.generation}")

    @property
    def ndim(self) -> int:
        return len(self.shape)

    @property
    def size(self) -> int:
        return int(np.prod(self.shape))

    @property
    def nbytes(self) -> int:
        return self.size * self.dtype.itemsize

    def row_ref(self, i: int) -> ArrayRef:
        """Ref to row ``i`` of a stacked array (for batches).

        Example:
            >>> batch = store.put(np.zeros((4, 16)))
            >>> second = batch.row_ref(1)  # shape (16,)
        """
        if self.row is not None:
            raise ValueError("Cannot take a row of a row ref")
        if self.ndim < 1:
            raise ValueError("Cannot take a row of a 0-d array")
        if i < 0:
            i += self.shape[0]
        if not 0 <= i < self.shape[0]:
            raise IndexError(f"Row {i} out of bounds for leading dimension {self.shape[0]}")
        return ArrayRef(
            key=self.key,
            shape=self.shape[1:],
            dtype=self.dtype,
            generation=self.generation,
            row=i,
        )


class ArrayStore:
    """Append-only store of read-only arrays with a byte budget.

    Attributes:
        size: Byte budget
        used: Bytes currently stored
        generation: Incremented on reset() to invalidate old refs
    """

    def __init__(self, capacity_bytes: int):
        """Create store with specified budget.

        Args:
            capacity_bytes: Maximum bytes held at once
        """
        if capacity_bytes <= 0:
            raise ValueError(f"capacity_bytes must be positive, got {capacity_bytes}")

        self._arrays: dict[int, np.ndarray] = {}
        self._size = capacity_bytes
        self._used = 0
        self._next_key = 0
        self._generation = 0

    @property
    def size(self) -> int:
        return self._size

    @property
    def used(self) -> int:
        return self._used

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def available(self) -> int:
        return self._size - self._used

    def __len__(self) -> int:
        return len(self._arrays)

    def reset(self) -> None:
        """Drop all arrays. Invalidates all existing ArrayRefs."""
        self._arrays.clear()
        self._used = 0
        self._next_key = 0
        self._generation += 1

    def put(self, arr: np.ndarray | list[Any]) -> ArrayRef:
        """Copy an array into the store.

        Args:
            arr: Array (or nested list) to store

        Returns:
            ArrayRef to the stored, read-only copy

        Raises:
            ValueError: If the copy would exceed the byte budget
        """
        data = np.array(arr, copy=True)
        if data.nbytes > self.available:
            raise ValueError(
                f"ArrayStore out of memory: need {data.nbytes} bytes, "
                f"but only {self.available} of {self._size} available"
            )
        data.flags.writeable = False

        key = self._next_key
        self._next_key += 1
        self._arrays[key] = data
        self._used += data.nbytes

        return ArrayRef(key=key, shape=data.shape, dtype=data.dtype, generation=self._generation)

    def view(self, ref: ArrayRef) -> np.ndarray:
        """Resolve a ref into a read-only array.

        Raises:
            ValueError: If the ref is stale or unknown
        """
        if ref.generation != self._generation:
            raise ValueError(
                f"Stale ArrayRef: store was reset (current generation {self._generation}, "
                f"ref is from generation {ref.generation})"
            )
        try:
            data = self._arrays[ref.key]
        except KeyError as e:
            raise ValueError(f"Unknown ArrayRef key {ref.key}") from e
        if ref.row is not None:
            data = data[ref.row]
        if data.shape != ref.shape or data.dtype != ref.dtype:
            raise ValueError(
                f"ArrayRef does not match stored data: ref {ref.shape}/{ref.dtype}, "
                f"stored {data.shape}/{data.dtype}"
            )
        return data

    def __repr__(self) -> str:
        return (
            f"ArrayStore(size={self._size}, used={self._used}, arrays={len(self._arrays)}, "
            f"generation={self._generation})"
        )
