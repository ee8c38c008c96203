"""Forward and inverse Haar transforms.

Signals live in signal space, coefficients in Haar space. With the basis
vectors stored as columns of H:

    forward:  c = H.T @ x
    inverse:  x = H @ c

Images are transformed along the row axis only (one left multiplication,
each column independently). ``forward_separable`` / ``inverse_separable``
additionally transform the column axis with a second basis.

Every function accepts a HaarBasis or a raw matrix. A raw matrix is
re-validated on each call, an O(n^3) orthonormality check; in hot paths
pass the HaarBasis from ``get_basis`` instead, which is validated once.
"""

from __future__ import annotations

import numpy as np

from haarlab.basis import HaarBasis, as_basis
from haarlab.errors import DimensionMismatch


def _as_float(data: np.ndarray | list[float], ndim: int, name: str) -> np.ndarray:
    arr = np.asarray(data)
    if arr.ndim != ndim:
        raise DimensionMismatch(f"Expected {ndim}-D {name}, got shape {arr.shape}")
    if not (np.issubdtype(arr.dtype, np.floating) or np.issubdtype(arr.dtype, np.integer)):
        raise TypeError(f"Expected real numeric {name}, got dtype {arr.dtype}")
    return arr


def _check_length(basis: HaarBasis, length: int, name: str) -> None:
    if length != basis.n:
        raise DimensionMismatch(
            f"{name} has length {length} along the transformed axis, basis dimension is {basis.n}"
        )


def _result_dtype(basis: HaarBasis, arr: np.ndarray) -> np.dtype:
    data_dtype = arr.dtype if np.issubdtype(arr.dtype, np.floating) else basis.dtype
    return np.result_type(basis.dtype, data_dtype)


def forward(h: HaarBasis | np.ndarray, x: np.ndarray | list[float]) -> np.ndarray:
    """Project a 1-D signal onto the Haar basis: ``H.T @ x``.

    Args:
        h: Haar basis (HaarBasis or raw n x n matrix)
        x: Signal of length n

    Returns:
        Coefficient vector of length n, entry i the weight of basis vector i

    Raises:
        InvalidBasis: If h is not a valid basis
        DimensionMismatch: If x is not 1-D of length n
    """
    basis = as_basis(h)
    arr = _as_float(x, 1, "signal")
    _check_length(basis, arr.shape[0], "signal")
    return (basis.matrix.T @ arr).astype(_result_dtype(basis, arr), copy=False)


def inverse(h: HaarBasis | np.ndarray, c: np.ndarray | list[float]) -> np.ndarray:
    """Map a coefficient vector back to signal space: ``H @ c``."""
    basis = as_basis(h)
    arr = _as_float(c, 1, "coefficient vector")
    _check_length(basis, arr.shape[0], "coefficient vector")
    return (basis.matrix @ arr).astype(_result_dtype(basis, arr), copy=False)


def forward_image(h: HaarBasis | np.ndarray, m: np.ndarray) -> np.ndarray:
    """Transform every column of an (n, c) matrix: ``H.T @ M``.

    Only the row axis is transformed.
    """
    basis = as_basis(h)
    arr = _as_float(m, 2, "image")
    _check_length(basis, arr.shape[0], "image")
    return (basis.matrix.T @ arr).astype(_result_dtype(basis, arr), copy=False)


def inverse_image(h: HaarBasis | np.ndarray, c: np.ndarray) -> np.ndarray:
    """Inverse of ``forward_image``: ``H @ C``."""
    basis = as_basis(h)
    arr = _as_float(c, 2, "coefficient matrix")
    _check_length(basis, arr.shape[0], "coefficient matrix")
    return (basis.matrix @ arr).astype(_result_dtype(basis, arr), copy=False)


def forward_separable(
    h_rows: HaarBasis | np.ndarray,
    h_cols: HaarBasis | np.ndarray,
    m: np.ndarray,
) -> np.ndarray:
    """Full 2-D decomposition: ``H_rows.T @ M @ H_cols``.

    Args:
        h_rows: Basis sized to the row count r
        h_cols: Basis sized to the column count c
        m: (r, c) matrix

    Returns:
        (r, c) coefficient matrix
    """
    rows = as_basis(h_rows)
    cols = as_basis(h_cols)
    arr = _as_float(m, 2, "image")
    _check_length(rows, arr.shape[0], "image rows")
    _check_length(cols, arr.shape[1], "image columns")
    dtype = np.result_type(_result_dtype(rows, arr), cols.dtype)
    return (rows.matrix.T @ arr @ cols.matrix).astype(dtype, copy=False)


def inverse_separable(
    h_rows: HaarBasis | np.ndarray,
    h_cols: HaarBasis | np.ndarray,
    c: np.ndarray,
) -> np.ndarray:
    """Inverse of ``forward_separable``: ``H_rows @ C @ H_cols.T``."""
    rows = as_basis(h_rows)
    cols = as_basis(h_cols)
    arr = _as_float(c, 2, "coefficient matrix")
    _check_length(rows, arr.shape[0], "coefficient matrix rows")
    _check_length(cols, arr.shape[1], "coefficient matrix columns")
    dtype = np.result_type(_result_dtype(rows, arr), cols.dtype)
    return (rows.matrix @ arr @ cols.matrix.T).astype(dtype, copy=False)
