"""Orthonormal Haar basis transforms with progressive reconstruction.

This package provides:
- Construction of n x n orthonormal Haar bases by recursive doubling
- Forward/inverse transforms of 1-D signals and 2-D images
- Progressive reconstruction from prefixes of the Haar coefficients
- An Entity-Component-System layer for batching these steps as pipelines

Quick Start:
    >>> import numpy as np
    >>> from haarlab import get_basis, forward, inverse, reconstruct_all
    >>>
    >>> H = get_basis(8)
    >>> x = np.arange(8.0)
    >>> c = forward(H, x)
    >>> np.allclose(inverse(H, c), x)
    True
    >>> frames = reconstruct_all(H, c)  # k = 2..8, 7 frames
    >>> np.allclose(frames.at(8), x)
    True

Pipeline API:
    >>> from haarlab.core.world import World
    >>> from haarlab.systems.haar import HaarTransform
    >>> from haarlab.systems.partial import PartialReconstruct
    >>> from haarlab.components.reconstruction import Reconstructions
    >>>
    >>> world = World()
    >>> eid = world.spawn_signal(x)
    >>> recon = (
    ...     world.pipe(eid)
    ...     .to(HaarTransform(mode="forward"))
    ...     .to(PartialReconstruct())
    ...     .out(Reconstructions)
    ... )
"""

__version__ = "0.1.0"

from haarlab.api import decompose, progressive, recompose
from haarlab.basis import HaarBasis, as_basis, build, build_level, get_basis, is_orthonormal
from haarlab.errors import DimensionMismatch, HaarError, InvalidBasis, InvalidDimension
from haarlab.reconstruct import (
    ReconstructionSequence,
    reconstruct_all,
    reconstruct_prefix,
    residual_norms,
)
from haarlab.transform import (
    forward,
    forward_image,
    forward_separable,
    inverse,
    inverse_image,
    inverse_separable,
)

__all__ = [
    "__version__",
    # High-level API
    "decompose",
    "recompose",
    "progressive",
    # Basis
    "HaarBasis",
    "as_basis",
    "build",
    "build_level",
    "get_basis",
    "is_orthonormal",
    # Transforms
    "forward",
    "inverse",
    "forward_image",
    "inverse_image",
    "forward_separable",
    "inverse_separable",
    # Reconstruction
    "ReconstructionSequence",
    "reconstruct_all",
    "reconstruct_prefix",
    "residual_norms",
    # Errors
    "HaarError",
    "InvalidDimension",
    "DimensionMismatch",
    "InvalidBasis",
]
