"""
linalg.py — Small dense linear-algebra kernel for the normal equation.

    multiply(A, B)   matrix product, explicit inner-dimension check
    transpose(A)     transpose
    inverse(M)       Gauss-Jordan on [M | I] with partial pivoting

Matrices are 2-D float64 numpy arrays. The system solved here is always
10×10, so clarity wins over BLAS-level tricks, but ``inverse`` works for
any square size.

Singularity: when the best available pivot in a column has magnitude below
``epsilon`` the inversion raises ``SingularMatrixError``. It never skips the
row and returns a partially reduced matrix.
"""

from __future__ import annotations

import logging
from typing import Sequence, Union

import numpy as np

from backend.app.core.errors import ShapeMismatchError, SingularMatrixError

logger = logging.getLogger(__name__)

SINGULARITY_EPSILON = 1e-10

MatrixLike = Union[Sequence[Sequence[float]], np.ndarray]


def as_matrix(A: MatrixLike) -> np.ndarray:
    """Coerce to a 2-D float64 array."""
    arr = np.asarray(A, dtype=np.float64)
    if arr.ndim == 1:
        arr = arr.reshape(-1, 1)
    if arr.ndim != 2:
        raise ValueError(f"Expected a 2-D matrix, got {arr.ndim} dimensions")
    return arr


def multiply(A: MatrixLike, B: MatrixLike) -> np.ndarray:
    """
    Matrix product ``A · B``.

    Raises
    ------
    ShapeMismatchError
        If ``A`` has a different number of columns than ``B`` has rows.
    """
    a = as_matrix(A)
    b = as_matrix(B)
    if a.shape[1] != b.shape[0]:
        raise ShapeMismatchError("multiply", a.shape, b.shape)

    m, n = a.shape
    p = b.shape[1]
    out = np.zeros((m, p), dtype=np.float64)
    for i in range(m):
        for j in range(p):
            out[i, j] = float(np.dot(a[i, :], b[:, j]))
    return out


def transpose(A: MatrixLike) -> np.ndarray:
    return as_matrix(A).T.copy()


def inverse(M: MatrixLike, epsilon: float = SINGULARITY_EPSILON) -> np.ndarray:
    """
    Invert a square matrix by Gauss-Jordan elimination.

    For each column the row with the largest absolute entry at or below the
    diagonal is swapped into place, normalised, and eliminated from every
    other row. The right half of the reduced ``[M | I]`` is the inverse.

    Parameters
    ----------
    M : matrix-like
        Square matrix.
    epsilon : float
        Minimum acceptable pivot magnitude.

    Raises
    ------
    ShapeMismatchError
        If ``M`` is not square.
    SingularMatrixError
        If a pivot falls below ``epsilon``.
    """
    m = as_matrix(M)
    n, cols = m.shape
    if n != cols:
        raise ShapeMismatchError("invert", m.shape, m.shape)

    aug = np.hstack([m, np.eye(n)])

    for col in range(n):
        pivot_row = col + int(np.argmax(np.abs(aug[col:, col])))
        if pivot_row != col:
            aug[[col, pivot_row]] = aug[[pivot_row, col]]

        pivot = aug[col, col]
        if abs(pivot) < epsilon:
            logger.debug("Pivot %.3e below epsilon in column %d", pivot, col)
            raise SingularMatrixError(column=col, pivot=float(pivot), epsilon=epsilon)

        aug[col] = aug[col] / pivot

        for row in range(n):
            if row != col:
                factor = aug[row, col]
                if factor != 0.0:
                    aug[row] = aug[row] - factor * aug[col]

    return aug[:, n:].copy()
