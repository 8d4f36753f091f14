"""Helpers: formatting, random initialisation, byte order and sizes."""

from __future__ import annotations

import itertools
import math
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

import numpy as np

from .base_types import NUMBER_DTYPE

DEFAULT_ALIGNMENT = 32
DEFAULT_SEED = 0x27

_seed_offsets = itertools.count()


@dataclass
class AllocStats:
    """Counters of buffer allocations and shared views, with their peaks."""

    n_allocs: int = 0
    max_allocs: int = 0
    n_shared: int = 0
    max_shared: int = 0

    def inc_allocs(self, i: int) -> None:
        """Change the allocation count by ``i`` and track its peak."""
        self.n_allocs += i
        self.max_allocs = max(self.n_allocs, self.max_allocs)

    def inc_shared(self, i: int) -> None:
        """Change the shared-view count by ``i`` and track its peak."""
        self.n_shared += i
        self.max_shared = max(self.n_shared, self.max_shared)


stats = AllocStats()
"""Process-wide allocation counters."""


def _format_number(value) -> str:
    if isinstance(value, (int, np.integer)):
        return str(int(value))
    return f"{float(value):g}"


def format_vector(values: Iterable) -> str:
    """Render values as ``[a, b, c]``."""
    return "[" + ", ".join(_format_number(v) for v in values) + "]"


def randomize(count: int, input_size: int, seed: int = DEFAULT_SEED) -> np.ndarray:
    """Return ``count`` values drawn uniformly within +-1/sqrt(input_size).

    Each call advances an internal offset added to ``seed``, so successive
    calls with the same seed give different values.
    """
    if input_size <= 0:
        raise ValueError("input_size must be positive")
    if count < 0:
        raise ValueError("count must be non-negative")
    limit = 1.0 / math.sqrt(input_size)
    rng = np.random.Generator(np.random.MT19937(seed + next(_seed_offsets)))
    return rng.uniform(-limit, limit, count).astype(NUMBER_DTYPE)


def swap_32(val: int) -> int:
    """Reverse the byte order of a 32-bit integer, returning a signed result."""
    raw = (val & 0xFFFFFFFF).to_bytes(4, "big")
    return int.from_bytes(raw, "little", signed=True)


def get_bytesize(
    count: int, alignment: int = DEFAULT_ALIGNMENT, itemsize: int = 4
) -> int:
    """Return the byte size of ``count`` items rounded up to ``alignment``."""
    if alignment <= 0:
        raise ValueError("alignment must be positive")
    return ((count * itemsize + alignment - 1) // alignment) * alignment


def format_matrix(values: Sequence, m: int, n: int) -> str:
    """Render a row-major ``m`` x ``n`` matrix with two decimals."""
    flat = list(values)
    if len(flat) < m * n:
        raise ValueError(f"need {m * n} values for a {m}x{n} matrix, got {len(flat)}")
    lines = [f"<matrix: dtype=float dim={m}x{n}>"]
    for i in range(m):
        row = ", ".join(f"{float(v):.2f}" for v in flat[i * n:(i + 1) * n])
        closing = "]," if i != m - 1 else "]"
        lines.append(f"  [{row}{closing}")
    return "\n".join(lines) + "\n"