"""Basic value types shared across the library."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

import numpy as np

NUMBER_DTYPE = np.float32
"""Element type used by every tensor."""


class Activation(Enum):
    """Activation functions a layer may apply.

    - ``NONE``: f(x) = x
    - ``RELU``: f(x) = x if x >= 0 else 0
    - ``SIGMOID``: f(x) = 1 / (1 + exp(-x))
    - ``SOFTMAX``: f(x)_i = exp(x_i) / sum_j exp(x_j)
    """

    NONE = 0
    RELU = 1
    SIGMOID = 2
    SOFTMAX = 3


class ErrorFunc(Enum):
    """Loss functions.

    - ``MEAN_SQUARED_ERROR``: 1 / n * sum_i (x_i - e_i) ** 2
    """

    MEAN_SQUARED_ERROR = 0


@dataclass
class Shape2D:
    """A two dimensional extent: ``x`` columns by ``y`` rows."""

    x: int = 0
    y: int = 0

    def __str__(self) -> str:
        return f"{self.x}x{self.y}"