"""Multi-dimensional tensors of single precision numbers."""

from __future__ import annotations

import math
from collections.abc import Callable, Iterable

import numpy as np

from .base_types import NUMBER_DTYPE
from .buffer import DataHandler, PointerType
from .shape import Shape


class Tensor:
    """A row-major tensor whose storage may be shared between tensors."""

    alignment = 32

    def __init__(self, dims: Shape | Iterable[int] | None = None, init: float = 0.0) -> None:
        self._shape = Shape(dims) if dims is not None else Shape()
        if self._shape.rank():
            self._handler = DataHandler(self._shape, init)
        else:
            self._handler = DataHandler()

    @classmethod
    def from_values(cls, rows) -> Tensor:
        """Build a tensor from nested sequences; the nesting gives the shape."""
        try:
            array = np.array(rows, dtype=NUMBER_DTYPE)
        except (ValueError, TypeError) as exc:
            raise ValueError(f"values do not form a regular tensor: {exc}") from exc
        if array.ndim == 0:
            raise ValueError("a tensor needs at least one dimension")
        tensor = cls(array.shape)
        tensor.data()[:] = array.ravel()
        return tensor

    def shape(self) -> Shape:
        """Return a copy of the tensor's shape."""
        return Shape(self._shape.dim())

    def dim(self) -> tuple[int, ...]:
        """Return the dimensions."""
        return self._shape.dim()

    def rank(self) -> int:
        """Return the number of dimensions."""
        return self._shape.rank()

    def size(self) -> int:
        """Return the number of elements."""
        return self._handler.size()

    def bytesize(self) -> int:
        """Return the aligned byte size of the storage."""
        return self._handler.bytesize()

    def empty(self) -> bool:
        """Return True when the tensor holds no elements."""
        return self._handler.empty()

    def data(self) -> np.ndarray:
        """Return the flat, writable, row-major array of elements."""
        return self._handler.data()

    def fill(self, value: float) -> None:
        """Set every element to ``value``."""
        self._handler.fill(value)

    def generate(self, gen: Callable[[], float]) -> None:
        """Set each element, in row-major order, to the next result of ``gen()``."""
        self._handler.generate(gen)

    def copy(self) -> Tensor:
        """Return a tensor with its own copy of the elements."""
        other = Tensor.__new__(Tensor)
        other._shape = self.shape()
        other._handler = self._handler.copy()
        return other

    def share(self) -> Tensor:
        """Return a tensor that uses the same storage as this one."""
        other = Tensor.__new__(Tensor)
        other._shape = self.shape()
        other._handler = self._handler.make_shared()
        return other

    def _format(self, lines: list[str], rank: int, index: int, offset: int) -> None:
        dims = self._shape.dim()
        end = dims[index]
        indent = " " * index
        closing = "]," if rank != len(dims) else "]"
        if rank == 1:
            values = self.data()[offset:offset + end]
            body = ", ".join(f"{float(v):.2f}" for v in values)
            lines.append(f"{indent}[{body}{closing}\n")
            return
        lines.append(f"{indent}[\n")
        stride = math.prod(dims[index + 1:])
        for i in range(end):
            self._format(lines, rank - 1, index + 1, offset + i * stride)
        lines.append(f"{indent}{closing}\n")

    def __str__(self) -> str:
        lines = [f"<tensor: dtype=float {self._shape}>\n"]
        if self._handler.type is PointerType.HOST and self.rank() >= 1:
            self._format(lines, self.rank(), 0, 0)
        return "".join(lines)

    def __repr__(self) -> str:
        return f"Tensor({list(self.dim())!r})"