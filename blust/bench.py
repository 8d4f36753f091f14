"""Benchmarks of tensor addition and matrix multiplication."""

from __future__ import annotations

import itertools
import os
import random
import re
import sys
import time
from collections.abc import Sequence
from dataclasses import dataclass
from typing import TextIO

import numpy as np

from . import utils
from .base_types import NUMBER_DTYPE
from .cpu_ops import CpuOps, get_ops
from .settings import init
from .tensor import Tensor

DEFAULT_DIMS = (4096, 4096, 4096)
MAX_PRINT_DIM = 20
DEFAULT_TOLERANCE = 1e-2

_INT_PREFIX = re.compile(r"\s*([+-]?\d+)")


@dataclass
class BenchResult:
    """Timing of a benchmark and whether its result checked out."""

    seconds: float
    gflops: float
    naive_seconds: float
    passed: bool


def _matrix(t: Tensor, name: str) -> np.ndarray:
    if t.rank() != 2:
        raise ValueError(f"{name} must be a matrix, got rank {t.rank()}")
    return t.data().reshape(t.dim())


def naive_mat_mul(a: Tensor, b: Tensor) -> Tensor:
    """Multiply two matrices one row at a time, as a reference result."""
    lhs, rhs = _matrix(a, "a"), _matrix(b, "b")
    m, k = lhs.shape
    if rhs.shape[0] != k:
        raise ValueError(f"cannot multiply {m}x{k} by {rhs.shape[0]}x{rhs.shape[1]}")
    res = Tensor((m, rhs.shape[1]))
    out = res.data().reshape(m, rhs.shape[1])
    for row, lhs_row in zip(out, lhs):
        row[:] = (lhs_row[:, None] * rhs).sum(axis=0, dtype=NUMBER_DTYPE)
    return res


def check_sum(a: Tensor, b: Tensor, c: Tensor, tolerance: float = DEFAULT_TOLERANCE) -> int | None:
    """Return the first index where ``c`` differs from ``a + b``, or None."""
    if not (a.size() == b.size() == c.size()):
        raise ValueError("tensors must hold the same number of elements")
    diff = np.abs(c.data() - (a.data() + b.data())) > tolerance
    bad = np.flatnonzero(diff)
    return int(bad[0]) if bad.size else None


def check_mat_mul(
    a: Tensor, b: Tensor, c: Tensor, tolerance: float = DEFAULT_TOLERANCE
) -> tuple[int, int] | None:
    """Return the first (row, column) where ``c`` differs from ``a @ b``, or None."""
    expected = naive_mat_mul(a, b)
    if expected.dim() != c.dim():
        raise ValueError(f"result has dimensions {list(c.dim())}, expected {list(expected.dim())}")
    bad = np.flatnonzero(np.abs(expected.data() - c.data()) > tolerance)
    if not bad.size:
        return None
    cols = c.dim()[1]
    return int(bad[0]) // cols, int(bad[0]) % cols


def parse_dims(args: Sequence[str]) -> tuple[int, int, int]:
    """Parse three dimensions m, n, k from leading integers of the arguments."""
    if len(args) != 3:
        raise ValueError(f"expected 3 dimensions, got {len(args)}")
    dims = []
    for arg in args:
        match = _INT_PREFIX.match(arg)
        if match is None or int(match.group(1)) < 0:
            raise ValueError(f"{arg} is not a valid dim")
        dims.append(int(match.group(1)))
    return dims[0], dims[1], dims[2]


def _stats_line(seconds: float, gflops: float) -> str:
    s = utils.stats
    return (
        f"time={seconds:.3f}s gflops={gflops:.3f}"
        f" n_allocs={s.n_allocs} max_allocs={s.max_allocs}"
        f" n_shared={s.n_shared} max_shared={s.max_shared}"
    )


def _per_second(amount: float, seconds: float) -> float:
    return amount / seconds if seconds > 0 else float("inf")


def _fill_inputs(tensors: Sequence[Tensor], small: bool, out: TextIO) -> None:
    if small:
        counter = itertools.count(1)
        for t in tensors[:2]:
            t.generate(lambda: next(counter))
            out.write(f"{t}\n")
    else:
        rng = random.Random()
        for t in tensors:
            t.generate(rng.random)


def run_mat_mul_bench(
    m: int, n: int, k: int, iterations: int = 5, out: TextIO | None = None
) -> BenchResult:
    """Time ``(t1 + t2) @ (t3 + t4)`` and check it against a naive product."""
    out = sys.stdout if out is None else out
    if iterations < 1:
        raise ValueError("iterations must be at least 1")
    small = max(m, n, k) < MAX_PRINT_DIM
    t1, t2 = Tensor((m, n), 2.0), Tensor((m, n), 2.0)
    t3, t4 = Tensor((n, k), 2.0), Tensor((n, k), 2.0)
    bytes_size = t1.bytesize() + t2.bytesize()
    flops = 2 * n * m * k + n * m + m * k

    _fill_inputs((t1, t2, t3, t4), small, out)
    out.write(f"Size: {bytes_size / 1e6:.3f}MB\n")
    out.write("Starting...\n")

    ops = CpuOps(os.cpu_count() or 1)
    r = ops.mat_mul(ops.add(t1, t2), ops.add(t3, t4), 256, 128, 256)
    start = time.perf_counter()
    for _ in range(iterations):
        r = ops.mat_mul(ops.add(t1, t2), ops.add(t3, t4))
    seconds = (time.perf_counter() - start) / iterations
    gflops = _per_second(flops, seconds) / 1e9

    if small:
        out.write(f"{r}\n")
    out.write(_stats_line(seconds, gflops) + "\n")
    out.write("Testing result...\n")

    lhs, rhs = ops.add(t1, t2), ops.add(t3, t4)
    start = time.perf_counter()
    mismatch = check_mat_mul(lhs, rhs, r)
    naive_seconds = time.perf_counter() - start
    if small:
        out.write(f"{naive_mat_mul(lhs, rhs)}\n")
    if mismatch is None:
        out.write("test passed!\n")
    else:
        row, col = mismatch
        expected = naive_mat_mul(lhs, rhs).data()[row * r.dim()[1] + col]
        got = r.data()[row * r.dim()[1] + col]
        out.write(f"({row}, {col}) (test != result) {expected:.3f} != {got:.3f}\n")
    out.write(f"Naive time: {naive_seconds:.3f}s\n")
    out.write(f"Speedup: {_per_second(naive_seconds, seconds):.3f}x\n")
    return BenchResult(seconds, gflops, naive_seconds, mismatch is None)


def run_add_bench(m: int, iterations: int = 5, out: TextIO | None = None) -> BenchResult:
    """Time ``(t1 + t2) + (t3 + t4)`` on vectors of ``m * m`` elements."""
    out = sys.stdout if out is None else out
    if iterations < 1:
        raise ValueError("iterations must be at least 1")
    small = m < MAX_PRINT_DIM
    t1, t2, t3, t4 = (Tensor((m * m,)) for _ in range(4))
    bytes_size = t1.bytesize() + t2.bytesize()
    flops = 2 * m * m

    _fill_inputs((t1, t2, t3, t4), small, out)
    out.write(f"Size: {bytes_size / 1e6:.3f}MB\n")
    out.write("Starting...\n")

    ops = get_ops()
    r = Tensor()
    start = time.perf_counter()
    for _ in range(iterations):
        r = ops.add(ops.add(t1, t2), ops.add(t3, t4))
    seconds = (time.perf_counter() - start) / iterations
    gflops = _per_second(flops, seconds) / 1e9

    if small:
        out.write(f"{r}\n")
    out.write(_stats_line(seconds, gflops) + "\n")
    out.write("Testing result...\n")

    lhs, rhs = ops.add(t1, t2), ops.add(t3, t4)
    start = time.perf_counter()
    mismatch = check_sum(lhs, rhs, r)
    naive_seconds = time.perf_counter() - start
    if mismatch is None:
        out.write("Test passed!\n")
    else:
        i = mismatch
        out.write(
            f"{i}: {lhs.data()[i]:.3f} + {rhs.data()[i]:.3f} != {r.data()[i]:.3f}\n"
        )
        naive_seconds = -1.0
    out.write(f"Naive time: {naive_seconds:.3f}s\n")
    out.write(f"Speedup: {_per_second(naive_seconds, seconds):.3f}x\n")
    return BenchResult(seconds, gflops, naive_seconds, mismatch is None)


def main(argv: Sequence[str] | None = None) -> int:
    """Run the matrix multiplication benchmark; three arguments set m, n, k."""
    args = list(sys.argv[1:] if argv is None else argv)
    program = sys.argv[0] if sys.argv and sys.argv[0] else "blust"
    init([program, *args], "cpu")
    print("Tensor:")

    m, n, k = DEFAULT_DIMS
    if len(args) == 3:
        print("Custom args")
        try:
            m, n, k = parse_dims(args)
        except ValueError as exc:
            print(exc)
        else:
            print(f"Using m={m} n={n} k={k}")

    run_mat_mul_bench(m, n, k)
    return 0


if __name__ == "__main__":
    sys.exit(main())