"""Progressive reconstruction from prefixes of Haar coefficients.

The approximation using the first k basis vectors is

    recon_k = H[:, :k] @ c[:k]

(for a coefficient matrix the first k rows are used). Because H is
orthonormal, ``||x - recon_k||`` never increases with k and vanishes at
k = n.

``reconstruct_all`` emits k = 2..n, i.e. n - 1 frames. The k = 1 frame is
just the signal mean and is left out of the sequence; ask for it with
``reconstruct_prefix(h, c, 1)`` if needed.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Iterator, Literal

import numpy as np

from haarlab.basis import HaarBasis, as_basis
from haarlab.config import get_settings
from haarlab.errors import DimensionMismatch
from haarlab.utils.logging import get_logger

logger = get_logger(__name__)

Strategy = Literal["incremental", "independent"]

FIRST_K = 2


@dataclass(frozen=True, eq=False)
class ReconstructionSequence:
    """Read-only sequence of progressive reconstructions.

    Attributes:
        frames: (n - 1, *coeff_shape) array, frame i uses the first i + 2 basis vectors
        first_k: Prefix length of frames[0]
    """

    frames: np.ndarray
    first_k: int = FIRST_K

    def __post_init__(self) -> None:
        # only an owned read-only array cannot change under us
        if self.frames.flags.writeable or self.frames.base is not None:
            frozen = self.frames.copy()
            frozen.flags.writeable = False
            object.__setattr__(self, "frames", frozen)

    @property
    def ks(self) -> list[int]:
        """Prefix length of every frame, in order."""
        return list(range(self.first_k, self.first_k + len(self)))

    def at(self, k: int) -> np.ndarray:
        """Frame reconstructed from the first ``k`` basis vectors."""
        idx = k - self.first_k
        if not 0 <= idx < len(self):
            raise KeyError(f"No frame for k={k}; available k in [{self.first_k}, {self.first_k + len(self) - 1}]")
        return self.frames[idx]

    def __len__(self) -> int:
        return int(self.frames.shape[0])

    def __iter__(self) -> Iterator[np.ndarray]:
        return iter(self.frames)

    def __getitem__(self, i: int) -> np.ndarray:
        return self.frames[i]

    def __repr__(self) -> str:
        return f"ReconstructionSequence(frames={len(self)}, k={self.first_k}..{self.first_k + len(self) - 1})"


def _coefficients(basis: HaarBasis, c: np.ndarray | list[float]) -> np.ndarray:
    arr = np.asarray(c)
    if arr.ndim not in (1, 2):
        raise DimensionMismatch(f"Expected 1-D or 2-D coefficients, got shape {arr.shape}")
    if not (np.issubdtype(arr.dtype, np.floating) or np.issubdtype(arr.dtype, np.integer)):
        raise TypeError(f"Expected real numeric coefficients, got dtype {arr.dtype}")
    if arr.shape[0] != basis.n:
        raise DimensionMismatch(
            f"Coefficients have leading dimension {arr.shape[0]}, basis dimension is {basis.n}"
        )
    return arr.astype(np.result_type(basis.dtype, arr.dtype), copy=False)


def reconstruct_prefix(h: HaarBasis | np.ndarray, c: np.ndarray | list[float], k: int) -> np.ndarray:
    """Approximate the signal with the first ``k`` basis vectors.

    Args:
        h: Haar basis of dimension n
        c: Coefficients, shape (n,) or (n, cols)
        k: Number of leading basis vectors, 1 <= k <= n

    Returns:
        Newly allocated array shaped like ``c``
    """
    basis = as_basis(h)
    arr = _coefficients(basis, c)
    if not 1 <= k <= basis.n:
        raise ValueError(f"k must be in [1, {basis.n}], got {k}")
    return basis.matrix[:, :k] @ arr[:k]


def _incremental(basis: HaarBasis, arr: np.ndarray) -> np.ndarray:
    n = basis.n
    frames = np.empty((n - FIRST_K + 1,) + arr.shape, dtype=arr.dtype)
    running = basis.matrix[:, :FIRST_K] @ arr[:FIRST_K]
    frames[0] = running
    for k in range(FIRST_K + 1, n + 1):
        # rank-1 update with basis vector k-1
        running = running + np.multiply.outer(basis.matrix[:, k - 1], arr[k - 1])
        frames[k - FIRST_K] = running
    return frames


def _independent(basis: HaarBasis, arr: np.ndarray, workers: int) -> np.ndarray:
    n = basis.n
    frames = np.empty((n - FIRST_K + 1,) + arr.shape, dtype=arr.dtype)

    def fill(k: int) -> None:
        frames[k - FIRST_K] = basis.matrix[:, :k] @ arr[:k]

    ks = range(FIRST_K, n + 1)
    if workers <= 1:
        for k in ks:
            fill(k)
    else:
        # each k writes a distinct frame, no locking needed
        with ThreadPoolExecutor(max_workers=workers) as executor:
            list(executor.map(fill, ks))
    return frames


def reconstruct_all(
    h: HaarBasis | np.ndarray,
    c: np.ndarray | list[float],
    strategy: Strategy | None = None,
    workers: int | None = None,
) -> ReconstructionSequence:
    """Compute reconstructions for every prefix length k = 2..n.

    Args:
        h: Haar basis of dimension n
        c: Coefficients, shape (n,) or (n, cols)
        strategy: "incremental" (running sum of rank-1 updates) or
            "independent" (one product per k); defaults to the configured value
        workers: Thread count for the independent strategy (configured default)

    Returns:
        ReconstructionSequence with n - 1 frames

    Raises:
        DimensionMismatch: If the leading dimension of c is not n
        ValueError: If strategy or workers is invalid
    """
    basis = as_basis(h)
    arr = _coefficients(basis, c)

    settings = get_settings().reconstruction
    strategy = strategy or settings.strategy
    workers = settings.workers if workers is None else workers
    if workers < 1:
        raise ValueError(f"workers must be >= 1, got {workers}")

    logger.debug("Reconstructing n=%d strategy=%s workers=%d", basis.n, strategy, workers)
    if strategy == "incremental":
        frames = _incremental(basis, arr)
    elif strategy == "independent":
        frames = _independent(basis, arr, workers)
    else:
        raise ValueError(f"Unknown reconstruction strategy: {strategy!r}")
    frames.flags.writeable = False
    return ReconstructionSequence(frames=frames)


def residual_norms(x: np.ndarray | list[float], sequence: ReconstructionSequence) -> np.ndarray:
    """Frobenius norm of ``x - frame`` for every frame in the sequence."""
    arr = np.asarray(x, dtype=np.float64)
    if sequence.frames.shape[1:] != arr.shape:
        raise DimensionMismatch(
            f"Signal shape {arr.shape} does not match frame shape {sequence.frames.shape[1:]}"
        )
    diff = (sequence.frames - arr).reshape(len(sequence), -1)
    return np.linalg.norm(diff, axis=1)
