"""Optimizers that update weights from their gradients."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable

from .cpu_ops import get_ops
from .decay import BaseDecay, ConstantDecay
from .shape import Shape
from .tensor import Tensor

_Updater = Callable[[Tensor, Tensor, Tensor, float, float], None]


class Optimizer(ABC):
    """Base class of all optimizers; holds the learning rate schedule."""

    def __init__(self, decay: BaseDecay | None = None) -> None:
        self.decay = decay

    @abstractmethod
    def build(self, w_dim: Shape | Iterable[int], b_dim: Shape | Iterable[int]) -> None:
        """Prepare per-parameter state for weights and biases of these shapes."""

    @abstractmethod
    def update_step(
        self,
        grad_w: Tensor,
        w: Tensor,
        learning_rate: float,
        grad_b: Tensor | None = None,
        b: Tensor | None = None,
    ) -> None:
        """Update ``w`` (and ``b`` when given) in place from the gradients."""

    @abstractmethod
    def copy(self) -> Optimizer:
        """Return a new optimizer with the same settings."""


def _update_plain(velocity: Tensor, grad: Tensor, w: Tensor, lr: float, momentum: float) -> None:
    ops = get_ops()
    ops.sub(w, ops.mul(grad, lr), allocate=False)


def _update_momentum(velocity: Tensor, grad: Tensor, w: Tensor, lr: float, momentum: float) -> None:
    ops = get_ops()
    new_velocity = ops.sub(ops.mul(velocity, momentum), ops.mul(grad, lr))
    velocity.data()[:] = new_velocity.data()
    ops.add(w, velocity, allocate=False)


def _update_nesterov(velocity: Tensor, grad: Tensor, w: Tensor, lr: float, momentum: float) -> None:
    ops = get_ops()
    new_velocity = ops.sub(ops.mul(velocity, momentum), ops.mul(grad, lr))
    velocity.data()[:] = new_velocity.data()
    ops.add(w, ops.sub(ops.mul(velocity, momentum), ops.mul(grad, lr)), allocate=False)


class SGD(Optimizer):
    """Stochastic gradient descent, optionally with (Nesterov) momentum."""

    def __init__(
        self,
        learning_rate: float | BaseDecay = 1e-2,
        momentum: float = 0.0,
        nesterov: bool = False,
        clipnorm: float = 0.0,
        clipvalue: float = 0.0,
    ) -> None:
        if isinstance(learning_rate, BaseDecay):
            decay = learning_rate
        else:
            decay = ConstantDecay(learning_rate)
        super().__init__(decay)
        self.momentum = float(momentum)
        self.nesterov = bool(nesterov)
        self.clipnorm = float(clipnorm)
        self.clipvalue = float(clipvalue)
        self.velocity_w = Tensor()
        self.velocity_b = Tensor()

    def _updater(self) -> _Updater:
        if self.momentum > 0:
            return _update_nesterov if self.nesterov else _update_momentum
        return _update_plain

    def build(self, w_dim: Shape | Iterable[int], b_dim: Shape | Iterable[int]) -> None:
        """Allocate zeroed velocities for weights and biases."""
        self.velocity_w = Tensor(w_dim)
        self.velocity_b = Tensor(b_dim)

    def update_step(
        self,
        grad_w: Tensor,
        w: Tensor,
        learning_rate: float,
        grad_b: Tensor | None = None,
        b: Tensor | None = None,
    ) -> None:
        """Update ``w`` and, when both are given, ``b`` in place."""
        if (grad_b is None) != (b is None):
            raise ValueError("grad_b and b must be given together")
        updater = self._updater()
        updater(self.velocity_w, grad_w, w, learning_rate, self.momentum)
        if grad_b is not None and b is not None:
            updater(self.velocity_b, grad_b, b, learning_rate, self.momentum)

    def copy(self) -> SGD:
        """Return an SGD with the same settings and schedule, without velocities."""
        return SGD(
            self.decay,
            momentum=self.momentum,
            nesterov=self.nesterov,
            clipnorm=self.clipnorm,
            clipvalue=self.clipvalue,
        )

    def __repr__(self) -> str:
        return (
            f"SGD(decay={self.decay!r}, momentum={self.momentum!r}, "
            f"nesterov={self.nesterov!r})"
        )