# blust

Row-major `float32` tensors whose storage can be shared, a CPU backend for
element-wise and matrix operations, learning-rate decay schedules, a
stochastic gradient descent optimizer, and a matrix-multiplication benchmark.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Tensors

```python
from blust.tensor import Tensor

t = Tensor([2, 3], 1.0)              # 2x3 tensor filled with 1.0
print(t.dim(), t.rank(), t.size())   # (2, 3) 2 6

m = Tensor.from_values([[1, 2], [3, 4]])
print(m)                             # <tensor: dtype=float rank=2 dim=2x2> ...

alias = m.share()   # uses the same storage as m
clone = m.copy()    # independent copy of the elements
flat = m.data()     # flat, writable numpy array in row-major order
```

`Tensor.fill(value)` sets every element and `Tensor.generate(gen)` sets each
element, in row-major order, to the next result of `gen()`. `bytesize()`
gives the storage size rounded up to a 32-byte boundary.

Shapes are `blust.shape.Shape` objects; `total()` is the product of the
dimensions, or `0` for a shape with no dimensions. The storage layer lives in
`blust.buffer` (`TensorBuffer`, `DataHandler`).

## Operations

```python
from blust.cpu_ops import CpuOps
from blust.tensor import Tensor

ops = CpuOps(4)
a = Tensor.from_values([[1, 2], [3, 4]])
b = Tensor.from_values([[5, 6], [7, 8]])

ops.add(a, b)          # a + b
ops.sub(a, b)          # a - b
ops.mul(a, 2.0)        # a * scalar
ops.div(a, 2.0)        # a / scalar
ops.hadamard(a, b)     # element-wise product
ops.mat_mul(a, b)      # matrix product
ops.transpose(a)       # matrix transpose
```

Element-wise operations raise `ValueError` when the dimensions differ; with
`allocate=False` the result is written into the storage of the first operand.
Large element-wise operations are split across threads. `mat_mul` accepts
block sizes `mc`, `kc`, `nc`; omitted ones keep the sizes of the previous call.

The library-wide backend is returned by `blust.cpu_ops.get_ops()` and set by
`set_ops()` or by `blust.settings.init()`.

## Decay and SGD

```python
from blust.cpu_ops import CpuOps, set_ops
from blust.decay import ExponentialDecay
from blust.optimizers import SGD
from blust.tensor import Tensor

decay = ExponentialDecay(0.1, 0.96, 1000)
decay.learning_rate(2000)   # 0.1 * 0.96 ** 2

set_ops(CpuOps())           # SGD computes through the library-wide backend

w, b = Tensor([2, 2], 1.0), Tensor([2], 1.0)
grad_w, grad_b = Tensor([2, 2], 0.5), Tensor([2], 0.5)

opt = SGD(learning_rate=0.01)
opt.build(w.shape(), b.shape())
opt.update_step(grad_w, w, 0.01, grad_b, b)   # w -= 0.01 * grad_w, b -= 0.01 * grad_b
```

`ConstantDecay` returns the same rate at every step. With `momentum > 0`, SGD
keeps velocities and applies momentum (or Nesterov momentum when
`nesterov=True`). `SGD` also accepts a `BaseDecay` in place of a learning
rate, and `copy()` returns an optimizer with the same settings.

## Initialisation

`blust.settings.init(argv, device)` records the program's directory and the
requested device name in a `Settings` object, and installs a `CpuOps`
backend. `get_settings()` returns those settings.

## Utilities

`blust.utils` provides `randomize` (uniform values within ±1/sqrt(input_size)),
`swap_32`, `get_bytesize`, `format_vector`, `format_matrix`, and the
`stats` allocation counters.

## Benchmark

```
blust-bench            # m = n = k = 4096
blust-bench 256 128 64 # custom m n k
```

The benchmark times `(t1 + t2) @ (t3 + t4)` and reports the time per
iteration, GFLOP/s and allocation counters. It then checks the result against
a naive row-by-row product and reports the speedup. If a dimension argument
is invalid, it prints the error and keeps the defaults. `blust.bench` also
contains `run_add_bench`, `check_sum`, `check_mat_mul` and `naive_mat_mul`.

## Limitations

- This package has no network layers and no models, so you cannot build or
  train a network with it.
- All computation runs on the CPU. The `device` passed to `init` is only
  recorded.
- `SGD` stores `clipnorm` and `clipvalue` but does not apply them.