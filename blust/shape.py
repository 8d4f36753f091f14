"""Dimensions of a tensor."""

from __future__ import annotations

import math
from collections.abc import Iterable


class Shape:
    """An ordered list of tensor dimensions."""

    __slots__ = ("_dims",)

    def __init__(self, dims: Iterable[int] = ()) -> None:
        dims = [int(d) for d in dims]
        if any(d < 0 for d in dims):
            raise ValueError(f"dimensions must be non-negative, got {dims}")
        self._dims = dims

    def dim(self) -> tuple[int, ...]:
        """Return the dimensions."""
        return tuple(self._dims)

    def rank(self) -> int:
        """Return the number of dimensions."""
        return len(self._dims)

    def total(self) -> int:
        """Return the number of elements; an empty shape holds none."""
        return math.prod(self._dims) if self._dims else 0

    def clear(self) -> None:
        """Remove all dimensions."""
        self._dims.clear()

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Shape):
            return self._dims == other._dims
        if isinstance(other, (tuple, list)):
            return self._dims == list(other)
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __iter__(self):
        return iter(self._dims)

    def __len__(self) -> int:
        return len(self._dims)

    def __getitem__(self, index: int) -> int:
        return self._dims[index]

    def __str__(self) -> str:
        if not self._dims:
            return "shape=none"
        return f"rank={self.rank()} dim=" + "x".join(str(d) for d in self._dims)

    def __repr__(self) -> str:
        return f"Shape({self._dims!r})"