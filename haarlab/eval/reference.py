"""Cross-checks against PyWavelets and coefficient energy summaries."""

from __future__ import annotations

import numpy as np
import pywt

from haarlab.basis import validate_dimension
from haarlab.errors import DimensionMismatch


def pywt_coefficients(x: np.ndarray | list[float]) -> np.ndarray:
    """Full-depth PyWavelets Haar decomposition, flattened coarse to fine.

    ``pywt.wavedec`` returns ``[cA_L, cD_L, ..., cD_1]``; concatenated, this is
    the same ordering and sign convention as ``forward(get_basis(n), x)``.
    """
    arr = np.asarray(x, dtype=np.float64)
    if arr.ndim != 1:
        raise DimensionMismatch(f"Expected 1-D signal, got shape {arr.shape}")
    n = validate_dimension(arr.shape[0])
    level = n.bit_length() - 1
    coeffs = pywt.wavedec(arr, "haar", mode="periodization", level=level)
    return np.concatenate(coeffs)


def level_slices(n: int) -> list[slice]:
    """Index ranges of each level: scaling term, then detail levels coarse to fine."""
    n = validate_dimension(n)
    slices = [slice(0, 1)]
    start = 1
    while start < n:
        slices.append(slice(start, 2 * start))
        start *= 2
    return slices


def energy_by_level(c: np.ndarray | list[float]) -> np.ndarray:
    """Fraction of coefficient energy held by each decomposition level.

    Entry 0 is the scaling (mean) term, entry j >= 1 the j-th detail level
    from coarsest to finest. Sums to 1 for a nonzero signal; all zeros
    otherwise.
    """
    arr = np.asarray(c, dtype=np.float64)
    if arr.ndim not in (1, 2):
        raise DimensionMismatch(f"Expected 1-D or 2-D coefficients, got shape {arr.shape}")
    energy = np.array([np.sum(arr[s] ** 2) for s in level_slices(arr.shape[0])])
    total = energy.sum()
    if total == 0.0:
        return energy
    return energy / total
