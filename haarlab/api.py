"""High-level API for Haar decomposition and progressive reconstruction.

Each call builds a World, runs a pipeline, copies the result out and clears
the world again.
"""

from __future__ import annotations

import numpy as np

from haarlab.components.coeffs import HaarCoeffs
from haarlab.components.reconstruction import Reconstructions
from haarlab.components.signal import ReconSignal
from haarlab.config import Settings, get_settings, load_settings
from haarlab.core.world import World, validate_signal
from haarlab.reconstruct import ReconstructionSequence, Strategy
from haarlab.systems.haar import HaarTransform
from haarlab.systems.partial import PartialReconstruct


def _settings_for(config_path: str | None) -> Settings:
    if config_path is None:
        return get_settings()
    return load_settings(config_path)


def _world_for(arr: np.ndarray, settings: Settings, frames: int = 1) -> World:
    # room for input, coefficients and frames; integers are stored as float64
    itemsize = max(np.result_type(arr.dtype, settings.basis.dtype).itemsize, 8)
    need = max(arr.size, 1) * itemsize * (frames + 4)
    return World(store_bytes=max(need, 1 << 20))


def decompose(
    x: np.ndarray | list[float],
    separable: bool = False,
    config_path: str | None = None,
) -> np.ndarray:
    """Haar coefficients of a 1-D signal or 2-D image.

    Args:
        x: Signal with power-of-two length(s)
        separable: For images, also transform the column axis
        config_path: Path to haarlab.toml supplying the basis dtype

    Returns:
        Coefficient array of the same shape as ``x``

    Example:
        >>> decompose([1.0, 2.0, 3.0, 4.0])
        array([ 5.        , -2.        , -0.70710678, -0.70710678])
    """
    settings = _settings_for(config_path)
    arr = np.asarray(x)
    world = _world_for(arr, settings)
    try:
        eid = world.spawn_signal(arr)
        coeffs: HaarCoeffs = (
            world.pipe(eid)
            .to(HaarTransform(mode="forward", separable=separable, dtype=settings.basis.dtype))
            .out(HaarCoeffs)
        )
        return world.view(coeffs.c).copy()
    finally:
        world.clear()


def recompose(
    c: np.ndarray | list[float],
    separable: bool = False,
    config_path: str | None = None,
) -> np.ndarray:
    """Signal from a full coefficient array (inverse of ``decompose``)."""
    settings = _settings_for(config_path)
    arr = validate_signal(c)
    world = _world_for(arr, settings)
    try:
        eid = world.new_entity()
        world.add_component(
            eid, HaarCoeffs(c=world.store.put(arr), n=arr.shape[0], separable=separable)
        )
        recon: ReconSignal = (
            world.pipe(eid)
            .to(HaarTransform(mode="inverse", dtype=settings.basis.dtype))
            .out(ReconSignal)
        )
        return world.view(recon.x).copy()
    finally:
        world.clear()


def progressive(
    x: np.ndarray | list[float],
    strategy: Strategy | None = None,
    workers: int | None = None,
    separable: bool = False,
    config_path: str | None = None,
) -> ReconstructionSequence:
    """Decompose ``x`` and reconstruct it from every coefficient prefix k = 2..n.

    Args:
        x: Signal with power-of-two length(s)
        strategy: 'incremental' or 'independent' (configured default if None)
        workers: Threads for the independent strategy
        separable: For images, also transform the column axis
        config_path: Path to haarlab.toml supplying dtype/strategy/workers defaults

    Returns:
        ReconstructionSequence with n - 1 frames, the last equal to ``x``
    """
    settings = _settings_for(config_path)
    strategy = strategy or settings.reconstruction.strategy
    workers = settings.reconstruction.workers if workers is None else workers
    dtype = settings.basis.dtype

    arr = validate_signal(x)
    world = _world_for(arr, settings, frames=arr.shape[0])
    try:
        eid = world.spawn_signal(arr)
        recon: Reconstructions = (
            world.pipe(eid)
            .to(HaarTransform(mode="forward", separable=separable, dtype=dtype))
            .to(PartialReconstruct(strategy=strategy, workers=workers, dtype=dtype))
            .out(Reconstructions)
        )
        # stored arrays are read-only and outlive clear()
        return ReconstructionSequence(frames=world.view(recon.frames), first_k=recon.first_k)
    finally:
        world.clear()
