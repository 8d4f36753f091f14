"""Element-wise and matrix operations on tensors, computed on the CPU."""

from __future__ import annotations

from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor

import numpy as np

from .base_types import NUMBER_DTYPE
from .tensor import Tensor

_VectorFunc = Callable[[np.ndarray, np.ndarray, np.ndarray, np.float32, np.float32], None]

DEFAULT_BLOCK_SIZES = (64, 128, 1024)


def _impl_add(a: np.ndarray, b: np.ndarray, out: np.ndarray, n, m) -> None:
    """Compute ``out = a * n + b * m``."""
    np.add(a * n, b * m, out=out)


def _impl_hadamard(a: np.ndarray, b: np.ndarray, out: np.ndarray, n, m) -> None:
    """Compute ``out = a * b``; the scale factors are ignored."""
    np.multiply(a, b, out=out)


class CpuOps:
    """Tensor operations that may split large element-wise work across threads."""

    thread_threshold = 1 << 22
    """Element count from which element-wise operations use several threads."""

    def __init__(self, nthreads: int = 1) -> None:
        self.ncores = max(1, int(nthreads))
        self.block_sizes = DEFAULT_BLOCK_SIZES

    # element-wise operations

    def _result_tensor(self, a: Tensor, b: Tensor, allocate: bool) -> Tensor:
        if a.dim() != b.dim():
            raise ValueError(
                f"tensor dimensions differ: {list(a.dim())} and {list(b.dim())}"
            )
        if allocate:
            return Tensor(a.dim()) if a.rank() else Tensor()
        return a.share()

    def _should_launch_threads(self, size: int) -> bool:
        return self.ncores > 1 and size >= self.thread_threshold

    def _perform_vector_like(
        self, a: Tensor, b: Tensor, n: float, m: float, func: _VectorFunc, allocate: bool
    ) -> Tensor:
        res = self._result_tensor(a, b, allocate)
        a_data, b_data, out = a.data(), b.data(), res.data()
        n, m = NUMBER_DTYPE(n), NUMBER_DTYPE(m)
        size = out.size

        if self._should_launch_threads(size):
            step = size // self.ncores
            starts = [i * step for i in range(self.ncores)]
            ends = starts[1:] + [size]
            slices = [slice(s, e) for s, e in zip(starts, ends)]
            with ThreadPoolExecutor(max_workers=self.ncores) as pool:
                list(pool.map(lambda s: func(a_data[s], b_data[s], out[s], n, m), slices))
        else:
            func(a_data, b_data, out, n, m)
        return res

    def add(self, a: Tensor, b: Tensor, allocate: bool = True) -> Tensor:
        """Return ``a + b``; with ``allocate=False`` the result is written into ``a``."""
        return self._perform_vector_like(a, b, 1.0, 1.0, _impl_add, allocate)

    def sub(self, a: Tensor, b: Tensor, allocate: bool = True) -> Tensor:
        """Return ``a - b``; with ``allocate=False`` the result is written into ``a``."""
        return self._perform_vector_like(a, b, 1.0, -1.0, _impl_add, allocate)

    def mul(self, a: Tensor, b: float, allocate: bool = True) -> Tensor:
        """Return every element of ``a`` multiplied by the scalar ``b``."""
        return self._perform_vector_like(a, a, b, 0.0, _impl_add, allocate)

    def div(self, a: Tensor, b: float, allocate: bool = True) -> Tensor:
        """Return every element of ``a`` divided by the scalar ``b``."""
        with np.errstate(divide="ignore"):
            factor = np.float32(1.0) / np.float32(b)
        with np.errstate(invalid="ignore", over="ignore"):
            return self._perform_vector_like(a, a, factor, 0.0, _impl_add, allocate)

    def hadamard(self, a: Tensor, b: Tensor, allocate: bool = True) -> Tensor:
        """Return the element-wise product of ``a`` and ``b``."""
        return self._perform_vector_like(a, b, 0.0, 0.0, _impl_hadamard, allocate)

    # matrix operations

    @staticmethod
    def _matrix_dims(t: Tensor, name: str) -> tuple[int, int]:
        if t.rank() != 2:
            raise ValueError(f"{name} must be a matrix, got rank {t.rank()}")
        rows, cols = t.dim()
        return rows, cols

    def mat_mul(
        self,
        a: Tensor,
        b: Tensor,
        mc: int | None = None,
        kc: int | None = None,
        nc: int | None = None,
    ) -> Tensor:
        """Return the matrix product of row-major ``a`` (m x k) and ``b`` (k x n).

        ``mc``, ``kc`` and ``nc`` set the block sizes used to accumulate the
        product; omitted ones keep the sizes of the previous call.
        """
        m, k = self._matrix_dims(a, "a")
        k_b, n = self._matrix_dims(b, "b")
        if k != k_b:
            raise ValueError(
                f"cannot multiply {m}x{k} by {k_b}x{n}: inner dimensions differ"
            )

        current = self.block_sizes
        sizes = tuple(
            old if new is None else int(new) for old, new in zip(current, (mc, kc, nc))
        )
        if any(s <= 0 for s in sizes):
            raise ValueError(f"block sizes must be positive, got {sizes}")
        self.block_sizes = sizes
        block_m, block_k, block_n = sizes

        lhs = a.data().reshape(m, k)
        rhs = b.data().reshape(k, n)
        res = Tensor((m, n))
        out = res.data().reshape(m, n)

        for n0 in range(0, n, block_n):
            for k0 in range(0, k, block_k):
                rhs_panel = rhs[k0:k0 + block_k, n0:n0 + block_n]
                for m0 in range(0, m, block_m):
                    out[m0:m0 + block_m, n0:n0 + block_n] += (
                        lhs[m0:m0 + block_m, k0:k0 + block_k] @ rhs_panel
                    )
        return res

    def transpose(self, a: Tensor) -> Tensor:
        """Return the transpose of the matrix ``a``."""
        rows, cols = self._matrix_dims(a, "a")
        res = Tensor((cols, rows))
        res.data().reshape(cols, rows)[:] = a.data().reshape(rows, cols).T
        return res


_ops: CpuOps | None = None


def get_ops() -> CpuOps:
    """Return the library-wide operation backend."""
    if _ops is None:
        raise RuntimeError("operation backend is not initialised; call init() first")
    return _ops


def set_ops(ops: CpuOps | None) -> None:
    """Install ``ops`` as the library-wide backend, or clear it with None."""
    global _ops
    _ops = ops