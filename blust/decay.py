"""Learning rate schedules."""

from __future__ import annotations

from abc import ABC, abstractmethod


class BaseDecay(ABC):
    """A schedule giving the learning rate for a training step."""

    @abstractmethod
    def learning_rate(self, step: int) -> float:
        """Return the learning rate to use at ``step``."""


def _check_step(step: int) -> int:
    step = int(step)
    if step < 0:
        raise ValueError(f"step must be non-negative, got {step}")
    return step


class ConstantDecay(BaseDecay):
    """The same learning rate at every step."""

    def __init__(self, rate: float = 0.1) -> None:
        self.rate = float(rate)

    def learning_rate(self, step: int) -> float:
        """Return the constant rate."""
        _check_step(step)
        return self.rate

    def __repr__(self) -> str:
        return f"ConstantDecay(rate={self.rate!r})"


class ExponentialDecay(BaseDecay):
    """A rate multiplied by ``decay`` once every ``decay_steps`` steps."""

    def __init__(
        self, rate: float = 0.1, decay: float = 0.96, decay_steps: int = 1000
    ) -> None:
        if decay_steps <= 0:
            raise ValueError(f"decay_steps must be positive, got {decay_steps}")
        self.rate = float(rate)
        self.decay = float(decay)
        self.decay_steps = int(decay_steps)

    def learning_rate(self, step: int) -> float:
        """Return ``rate * decay ** (step // decay_steps)``."""
        step = _check_step(step)
        return self.rate * self.decay ** (step // self.decay_steps)

    def __repr__(self) -> str:
        return (
            f"ExponentialDecay(rate={self.rate!r}, decay={self.decay!r}, "
            f"decay_steps={self.decay_steps!r})"
        )