"""Activation functions, their derivatives and initialisation bounds.

All functions accept Python scalars or numpy arrays.  Scalar input yields a
Python ``float``; array input is processed elementwise.
"""

from __future__ import annotations

import numpy as np

from . import linalg
from .types import Array, Matrix

EPS = 1e-12


def _out(value: Array):
    return float(value) if np.ndim(value) == 0 else value


def sigmoid(x):
    """Return ``1 / (1 + e^-x)`` without overflowing for large ``|x|``."""

    x = np.asarray(x, dtype=np.float64)
    z = np.exp(-np.abs(x))
    return _out(np.where(x >= 0, 1.0 / (1.0 + z), z / (1.0 + z)))


def sigmoid_derivative(x):
    s = np.asarray(sigmoid(x))
    return _out(s * (1.0 - s))


def relu(x):
    """Return the ReLU activation."""

    return _out(np.maximum(np.asarray(x, dtype=np.float64), 0.0))


def relu_derivative(x):
    return _out((np.asarray(x, dtype=np.float64) > 0.0).astype(np.float64))


def tanh(x):
    return _out(np.tanh(np.asarray(x, dtype=np.float64)))


def tanh_derivative(x):
    t = np.tanh(np.asarray(x, dtype=np.float64))
    return _out(1.0 - t * t)


def weights_gradient(delta, inputs) -> Matrix:
    """Outer product ``delta[i] * inputs[j]``: a weight gradient for one layer."""

    return linalg.outer(delta, inputs)


def xavier_limit(fan_in: float, fan_out: float) -> float:
    """Symmetric bound for uniform Xavier/Glorot initialisation."""

    return float(np.sqrt(6.0 / (float(fan_in) + float(fan_out))))


__all__ = [
    "EPS",
    "sigmoid",
    "sigmoid_derivative",
    "relu",
    "relu_derivative",
    "tanh",
    "tanh_derivative",
    "weights_gradient",
    "xavier_limit",
]
