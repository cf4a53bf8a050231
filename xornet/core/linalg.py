"""Shape-checked vector and matrix primitives.

Every function returns a new ``float64`` array and leaves its operands
untouched.  Elementwise operations write disjoint output positions, so numpy is
free to vectorise them in any order.  Reductions (:func:`dot` and therefore
:func:`mat_vec_mul`) are different: floating-point addition is not
associative, and the summation order picked by the underlying BLAS kernel may
change the last bits of the result between builds or thread counts.  That
drift is accepted and is not treated as a correctness bug.
"""

from __future__ import annotations

import numpy as np

from .errors import ShapeMismatchError
from .types import Matrix, Vector


def as_vector(values) -> Vector:
    """Return ``values`` as a 1-D ``float64`` array."""

    vec = np.asarray(values, dtype=np.float64)
    if vec.ndim != 1:
        raise ShapeMismatchError(f"Expected a vector, got array with shape {vec.shape}")
    return vec


def as_matrix(values) -> Matrix:
    """Return ``values`` as a rectangular 2-D ``float64`` array."""

    try:
        mtx = np.asarray(values, dtype=np.float64)
    except ValueError as exc:
        raise ShapeMismatchError("Matrix rows must all have the same length") from exc
    if mtx.ndim != 2:
        raise ShapeMismatchError(f"Expected a matrix, got array with shape {mtx.shape}")
    return mtx


def _check_same_length(v1: Vector, v2: Vector) -> None:
    if v1.shape[0] != v2.shape[0]:
        raise ShapeMismatchError(
            f"Vectors must have the same size ({v1.shape[0]} != {v2.shape[0]})"
        )


def _check_same_shape(m1: Matrix, m2: Matrix) -> None:
    if m1.shape[0] != m2.shape[0]:
        raise ShapeMismatchError(
            f"Matrices must have the same number of rows ({m1.shape[0]} != {m2.shape[0]})"
        )
    if m1.shape[1] != m2.shape[1]:
        raise ShapeMismatchError(
            f"Matrix rows must have the same size ({m1.shape[1]} != {m2.shape[1]})"
        )


def add(v1, v2) -> Vector:
    a, b = as_vector(v1), as_vector(v2)
    _check_same_length(a, b)
    return a + b


def sub(v1, v2) -> Vector:
    a, b = as_vector(v1), as_vector(v2)
    _check_same_length(a, b)
    return a - b


def scale(v, k: float) -> Vector:
    return as_vector(v) * float(k)


def mul(v1, v2) -> Vector:
    """Elementwise (Hadamard) product."""

    a, b = as_vector(v1), as_vector(v2)
    _check_same_length(a, b)
    return a * b


def dot(v1, v2) -> float:
    """Return the inner product of two equal-length vectors."""

    a, b = as_vector(v1), as_vector(v2)
    _check_same_length(a, b)
    return float(np.dot(a, b))


def mat_add(m1, m2) -> Matrix:
    a, b = as_matrix(m1), as_matrix(m2)
    _check_same_shape(a, b)
    return a + b


def mat_sub(m1, m2) -> Matrix:
    a, b = as_matrix(m1), as_matrix(m2)
    _check_same_shape(a, b)
    return a - b


def mat_scale(m, k: float) -> Matrix:
    return as_matrix(m) * float(k)


def mat_vec_mul(m, v) -> Vector:
    """Return ``result[r] = dot(m[r], v)`` for every row ``r``."""

    mtx, vec = as_matrix(m), as_vector(v)
    if mtx.shape[1] != vec.shape[0]:
        raise ShapeMismatchError(
            f"Matrix row and vector must have the same size ({mtx.shape[1]} != {vec.shape[0]})"
        )
    return mtx @ vec


def outer(a, b) -> Matrix:
    """Return ``result[i][j] = a[i] * b[j]``."""

    return np.outer(as_vector(a), as_vector(b))


__all__ = [
    "as_vector",
    "as_matrix",
    "add",
    "sub",
    "scale",
    "mul",
    "dot",
    "mat_add",
    "mat_sub",
    "mat_scale",
    "mat_vec_mul",
    "outer",
]
