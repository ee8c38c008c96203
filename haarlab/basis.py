"""Orthonormal Haar basis construction.

The n x n basis is synthesized by recursive doubling from the 2 x 2 base

    H_2 = [[1, 1], [1, -1]] / sqrt(2)

Going from size m to 2m, every existing column is stretched by repeating
each entry twice (kron with [1, 1]^T) and m new detail columns are
appended, each a +1/-1 step on one disjoint pair of rows (kron of I_m with
[1, -1]^T). Both halves are scaled by 1/sqrt(2), so the columns stay
orthonormal and ordered from coarsest to finest.

Columns are the basis vectors, so the forward transform is ``H.T @ x`` and
the inverse is ``H @ c``.
"""

from __future__ import annotations

import math
import threading
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any

import numpy as np

from haarlab.config import get_settings
from haarlab.errors import InvalidBasis, InvalidDimension
from haarlab.utils.logging import get_logger

logger = get_logger(__name__)

_STRETCH = np.array([[1.0], [1.0]])
_DETAIL = np.array([[1.0], [-1.0]])


def is_power_of_two(n: Any) -> bool:
    """True for integers 1, 2, 4, 8, ... (bools excluded)."""
    if isinstance(n, bool) or not isinstance(n, (int, np.integer)):
        return False
    n = int(n)
    return n > 0 and n & (n - 1) == 0


def validate_dimension(n: Any) -> int:
    """Return ``n`` as int, or raise InvalidDimension if it is not 2^k, k >= 1."""
    if not is_power_of_two(n) or int(n) < 2:
        raise InvalidDimension(f"Basis dimension must be a power of two >= 2, got {n!r}")
    return int(n)


def is_orthonormal(matrix: np.ndarray, atol: float | None = None) -> bool:
    """Check ``H @ H.T ~= I`` for a square matrix."""
    if atol is None:
        atol = get_settings().tolerance.atol
    if matrix.ndim != 2 or matrix.shape[0] != matrix.shape[1]:
        return False
    gram = matrix @ matrix.T
    return bool(np.allclose(gram, np.eye(matrix.shape[0]), rtol=0.0, atol=atol))


@dataclass(frozen=True, eq=False)
class HaarBasis:
    """Validated, read-only Haar basis matrix.

    Attributes:
        matrix: (n, n) array whose columns are the basis vectors, coarse to fine
    """

    matrix: np.ndarray

    def __post_init__(self) -> None:
        mat = self.matrix
        if not isinstance(mat, np.ndarray) or mat.ndim != 2 or mat.shape[0] != mat.shape[1]:
            shape = getattr(mat, "shape", None)
            raise InvalidBasis(f"Expected square 2-D basis matrix, got shape {shape}")
        if not np.issubdtype(mat.dtype, np.floating):
            raise InvalidBasis(f"Expected floating-point basis, got dtype {mat.dtype}")
        if not is_power_of_two(mat.shape[0]) or mat.shape[0] < 2:
            raise InvalidBasis(f"Basis size must be a power of two >= 2, got {mat.shape[0]}")
        # float32 bases cannot meet the float64 tolerance
        atol = get_settings().tolerance.atol
        if mat.dtype == np.float32:
            atol = max(atol, 1e-5)
        if not is_orthonormal(mat, atol=atol):
            raise InvalidBasis(f"Basis of size {mat.shape[0]} is not orthonormal")
        # views share memory with a possibly writable owner
        if mat.flags.writeable or mat.base is not None:
            frozen = mat.copy()
            frozen.flags.writeable = False
            object.__setattr__(self, "matrix", frozen)

    @property
    def n(self) -> int:
        """Dimension of the basis."""
        return int(self.matrix.shape[0])

    @property
    def levels(self) -> int:
        """Number of doubling levels, log2(n)."""
        return self.n.bit_length() - 1

    @property
    def dtype(self) -> np.dtype[Any]:
        return self.matrix.dtype

    def column(self, i: int) -> np.ndarray:
        """Return basis vector ``i`` (read-only view)."""
        return self.matrix[:, i]

    def __repr__(self) -> str:
        return f"HaarBasis(n={self.n}, dtype={self.dtype})"


def base_matrix(dtype: Any = np.float64) -> np.ndarray:
    """The 2 x 2 Haar matrix."""
    return np.array([[1.0, 1.0], [1.0, -1.0]], dtype=dtype) / math.sqrt(2.0)


def build_level(h_m: np.ndarray) -> np.ndarray:
    """One doubling step: H_m (m x m) -> H_2m (2m x 2m).

    Args:
        h_m: Orthonormal m x m Haar matrix

    Returns:
        Newly allocated 2m x 2m Haar matrix
    """
    m = h_m.shape[0]
    coarse = np.kron(h_m, _STRETCH)
    detail = np.kron(np.eye(m, dtype=h_m.dtype), _DETAIL)
    out = np.hstack([coarse, detail]) / math.sqrt(2.0)
    return out.astype(h_m.dtype, copy=False)


def build(n: int, dtype: Any = None) -> HaarBasis:
    """Build the n x n orthonormal Haar basis.

    Args:
        n: Dimension, a power of two >= 2
        dtype: Floating dtype (defaults to the configured basis dtype)

    Returns:
        HaarBasis with columns ordered coarsest to finest

    Raises:
        InvalidDimension: If n is not a power of two >= 2, or exceeds the
            configured ``max_dimension``
    """
    n = validate_dimension(n)
    settings = get_settings()
    if n > settings.basis.max_dimension:
        raise InvalidDimension(
            f"Basis dimension {n} exceeds configured max_dimension {settings.basis.max_dimension}"
        )
    dt = np.dtype(dtype if dtype is not None else settings.basis.dtype)

    h = base_matrix(dt)
    while h.shape[0] < n:
        h = build_level(h)
    return HaarBasis(h)


_cache: OrderedDict[tuple[int, str], HaarBasis] = OrderedDict()
_cache_lock = threading.Lock()


def get_basis(n: int, dtype: Any = None) -> HaarBasis:
    """Memoized ``build``; safe to share since bases are immutable.

    Keeps at most ``basis.cache_size`` bases, evicting the least recently used.
    """
    n = validate_dimension(n)
    settings = get_settings()
    key = (n, np.dtype(dtype if dtype is not None else settings.basis.dtype).name)
    with _cache_lock:
        basis = _cache.get(key)
        if basis is not None:
            _cache.move_to_end(key)
            return basis

    logger.debug("Building Haar basis n=%d dtype=%s", *key)
    basis = build(n, dtype=key[1])
    with _cache_lock:
        _cache[key] = basis
        while len(_cache) > settings.basis.cache_size:
            _cache.popitem(last=False)
    return basis


def cached_sizes() -> list[tuple[int, str]]:
    """Keys currently held by the basis cache, least recently used first."""
    with _cache_lock:
        return list(_cache.keys())


def clear_cache() -> None:
    with _cache_lock:
        _cache.clear()


def as_basis(h: HaarBasis | np.ndarray) -> HaarBasis:
    """Accept a HaarBasis unchanged or validate a raw matrix.

    Validating a raw matrix costs an O(n^3) orthonormality check on every
    call, so repeated transforms should reuse one HaarBasis.

    Raises:
        InvalidBasis: If ``h`` is not a square, dyadic, orthonormal matrix
    """
    if isinstance(h, HaarBasis):
        return h
    try:
        arr = np.asarray(h)
    except (TypeError, ValueError) as e:
        raise InvalidBasis(f"Cannot interpret {type(h).__name__} as a basis matrix") from e
    if arr.dtype == object:
        raise InvalidBasis(f"Cannot interpret {type(h).__name__} as a basis matrix")
    if np.issubdtype(arr.dtype, np.integer):
        arr = arr.astype(np.float64)
    return HaarBasis(arr)
