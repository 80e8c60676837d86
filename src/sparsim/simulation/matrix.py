# src/sparsim/simulation/matrix.py
"""
Dense complex matrix helpers used by the solver and by S-to-Y conversions.

`invert_matrix` is the reference Gauss-Jordan routine. `lu_inverse` computes the
same inverse through scipy's LU factorization and applies the same singularity rule
to the diagonal of U.
"""
import logging
from typing import Optional

import numpy as np
from scipy.linalg import lu_factor, lu_solve

from ..constants import PIVOT_EPSILON
from .exceptions import SingularMatrixError

logger = logging.getLogger(__name__)


def create_matrix(rows: int, cols: int) -> np.ndarray:
    """Returns a zero-filled complex matrix of shape (rows, cols)."""
    if rows < 0 or cols < 0:
        raise ValueError(f"Matrix dimensions must be non-negative, got ({rows}, {cols}).")
    return np.zeros((rows, cols), dtype=np.complex128)


def _as_square(matrix) -> np.ndarray:
    m = np.asarray(matrix, dtype=np.complex128)
    if m.ndim != 2 or m.shape[0] != m.shape[1]:
        raise ValueError(f"Matrix must be square, got shape {m.shape}.")
    return m


def invert_matrix(matrix, frequency: Optional[float] = None) -> np.ndarray:
    """
    Inverts a square complex matrix by Gauss-Jordan elimination on [M | I] with
    partial pivoting (largest-magnitude entry of the current column).

    Args:
        matrix: Square array-like, converted to complex128. The input is not modified.
        frequency: Optional frequency in Hz, only used to enrich a singularity error.

    Returns:
        The inverse as a new complex128 array.

    Raises:
        SingularMatrixError: If the best available pivot magnitude is below PIVOT_EPSILON.
        ValueError: If the matrix is not square.
    """
    m = _as_square(matrix)
    n = m.shape[0]
    augmented = np.hstack([m, np.eye(n, dtype=np.complex128)])

    for col in range(n):
        pivot = col + int(np.argmax(np.abs(augmented[col:, col])))
        if pivot != col:
            augmented[[col, pivot]] = augmented[[pivot, col]]

        diag = augmented[col, col]
        if abs(diag) < PIVOT_EPSILON:
            raise SingularMatrixError(
                details=f"Pivot magnitude {abs(diag):.3e} in column {col} of a {n}x{n} matrix is below {PIVOT_EPSILON:.0e}.",
                frequency=frequency,
            )
        augmented[col] /= diag

        factors = augmented[:, col].copy()
        factors[col] = 0.0
        augmented -= np.outer(factors, augmented[col])

    return augmented[:, n:].copy()


def lu_inverse(matrix, frequency: Optional[float] = None) -> np.ndarray:
    """
    Inverts a square complex matrix using scipy's LU factorization.

    Raises:
        SingularMatrixError: If any diagonal entry of U is below PIVOT_EPSILON.
    """
    m = _as_square(matrix)
    n = m.shape[0]
    if n == 0:
        return create_matrix(0, 0)
    lu, piv = lu_factor(m, check_finite=True)
    pivots = np.abs(np.diag(lu))
    if np.any(pivots < PIVOT_EPSILON):
        col = int(np.argmin(pivots))
        raise SingularMatrixError(
            details=f"LU pivot magnitude {pivots[col]:.3e} in column {col} of a {n}x{n} matrix is below {PIVOT_EPSILON:.0e}.",
            frequency=frequency,
        )
    return lu_solve((lu, piv), np.eye(n, dtype=np.complex128))


INVERSION_METHODS = {
    "gauss_jordan": invert_matrix,
    "lu": lu_inverse,
}


def get_inverter(method: str):
    """Returns the inversion routine registered under `method`."""
    try:
        return INVERSION_METHODS[method]
    except KeyError:
        raise ValueError(
            f"Unknown inversion method '{method}'. Available: {sorted(INVERSION_METHODS)}."
        ) from None
