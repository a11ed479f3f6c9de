"""Transfer function used by every non-input neuron."""

from __future__ import annotations

import numpy as np

from .types import Array


def tanh(x: float | Array) -> float | Array:
    """Return the hyperbolic tangent, output range (-1.0, 1.0)."""

    return np.tanh(x)


def tanh_deriv(output: float | Array) -> float | Array:
    """Derivative of tanh expressed through its output, ``1 - tanh(x)**2``."""

    return 1.0 - output * output
