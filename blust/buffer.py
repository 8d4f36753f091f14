"""Element storage for tensors, with shared ownership and copy-on-demand."""

from __future__ import annotations

import weakref
from collections.abc import Callable, Iterable
from enum import Enum

import numpy as np

from .base_types import NUMBER_DTYPE
from .shape import Shape
from .utils import DEFAULT_ALIGNMENT, get_bytesize, stats


class PointerType(Enum):
    """Where a buffer's memory lives."""

    HOST = 1
    DEVICE = 2


class TensorBuffer:
    """A flat block of numbers with an aligned byte size."""

    alignment = DEFAULT_ALIGNMENT

    def __init__(self, count: int, init: float = 0.0) -> None:
        if count < 0:
            raise ValueError(f"count must be non-negative, got {count}")
        self.array = np.full(count, init, dtype=NUMBER_DTYPE)
        self.owners: weakref.WeakSet = weakref.WeakSet()
        stats.inc_allocs(1)

    @classmethod
    def from_values(cls, values: Iterable[float]) -> TensorBuffer:
        """Create a buffer holding a copy of ``values``."""
        data = np.array(list(values), dtype=NUMBER_DTYPE).ravel()
        buffer = cls(data.size)
        buffer.array[:] = data
        return buffer

    def clone(self) -> TensorBuffer:
        """Return an independent buffer with the same contents."""
        return TensorBuffer.from_values(self.array)

    def fill(self, value: float) -> None:
        """Set every element to ``value``."""
        self.array.fill(value)

    def generate(self, gen: Callable[[], float]) -> None:
        """Set each element, in order, to the next result of ``gen()``."""
        self.array[:] = np.fromiter(
            (gen() for _ in range(self.array.size)),
            dtype=NUMBER_DTYPE,
            count=self.array.size,
        )

    def size(self) -> int:
        """Return the number of elements."""
        return int(self.array.size)

    def bytesize(self) -> int:
        """Return the aligned size of the storage in bytes."""
        return get_bytesize(self.size(), self.alignment, self.array.itemsize)


class DataHandler:
    """A handle on a buffer that may be shared with other handles."""

    def __init__(self, shape: Shape | Iterable[int] | None = None, init: float = 0.0) -> None:
        self.type = PointerType.HOST
        self._buffer: TensorBuffer | None = None
        if shape is not None:
            if not isinstance(shape, Shape):
                shape = Shape(shape)
            self._attach(TensorBuffer(shape.total(), init))

    def _attach(self, buffer: TensorBuffer | None) -> None:
        if self._buffer is not None:
            self._buffer.owners.discard(self)
        self._buffer = buffer
        if buffer is not None:
            buffer.owners.add(self)

    def copy(self) -> DataHandler:
        """Return a handle on a deep copy of this handle's buffer."""
        other = DataHandler()
        other.type = self.type
        if self._buffer is not None:
            other._attach(self._buffer.clone())
        return other

    def make_shared(self) -> DataHandler:
        """Return a new handle on the same buffer."""
        other = DataHandler()
        other.type = self.type
        other._attach(self._buffer)
        stats.inc_shared(1)
        return other

    def ensure_unique(self) -> None:
        """Make sure no other handle uses this handle's buffer, copying if needed."""
        if self._buffer is None or not self.is_shared():
            return
        self._attach(self._buffer.clone())

    def fill(self, value: float) -> None:
        """Set every element to ``value``."""
        if self._buffer is not None:
            self._buffer.fill(value)

    def generate(self, gen: Callable[[], float]) -> None:
        """Set each element, in order, to the next result of ``gen()``."""
        if self._buffer is not None:
            self._buffer.generate(gen)

    def empty(self) -> bool:
        """Return True when there is no buffer or it holds no elements."""
        return self._buffer is None or self._buffer.size() == 0

    def size(self) -> int:
        """Return the number of elements."""
        return 0 if self._buffer is None else self._buffer.size()

    def bytesize(self) -> int:
        """Return the aligned byte size of the buffer."""
        return 0 if self._buffer is None else self._buffer.bytesize()

    def is_shared(self) -> bool:
        """Return True when another handle uses the same buffer."""
        return self._buffer is not None and len(self._buffer.owners) > 1

    def data(self) -> np.ndarray:
        """Return the flat, writable array of elements."""
        if self._buffer is None:
            return np.empty(0, dtype=NUMBER_DTYPE)
        return self._buffer.array